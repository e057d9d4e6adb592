"""
Unit tests for member records and their canonical encoding.
"""

from datetime import datetime, timedelta, timezone

import pytest

from zkmember.exceptions import HashInputTooLongError
from zkmember.member import Member, encode_member, generate_members

JOINED = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestEncoding:
    """Canonical byte layout."""

    def test_layout_without_optionals(self):
        member = Member(id="1", email="1@usc.edu", join_date=JOINED)
        expected = (
            b"1"
            + b"1@usc.edu"
            + int(JOINED.timestamp()).to_bytes(8, "big", signed=True)
            + b"\x00"
            + b"\x00"
        )
        assert encode_member(member) == expected

    def test_layout_with_end_date_and_padding(self):
        end = JOINED + timedelta(days=365)
        member = Member(id="a", email="b", join_date=JOINED, end_date=end, padding=b"\xaa\xbb")
        encoded = member.to_bytes()

        assert encoded[:2] == b"ab"
        assert encoded[10] == 1
        assert encoded[11:19] == int(end.timestamp()).to_bytes(8, "big", signed=True)
        assert encoded[19:] == b"\x01\xaa\xbb"

    def test_deterministic(self):
        member = Member(id="x", email="y", join_date=JOINED)
        assert encode_member(member) == encode_member(member)

    def test_naive_dates_are_utc(self):
        naive = Member(id="x", email="y", join_date=datetime(2024, 1, 1))
        aware = Member(id="x", email="y", join_date=JOINED)
        assert naive.to_bytes() == aware.to_bytes()

    def test_pre_epoch_date(self):
        member = Member(id="x", email="y", join_date=datetime(1960, 1, 1, tzinfo=timezone.utc))
        seconds = int.from_bytes(member.to_bytes()[2:10], "big", signed=True)
        assert seconds < 0

    def test_with_padding(self):
        member = Member.with_padding("1", "1@usc.edu", pad=4, join_date=JOINED)
        assert member.padding == bytes(4)
        assert member.to_bytes().endswith(b"\x01" + bytes(4))


class TestDefaultMember:
    def test_sentinel_fields(self):
        sentinel = Member.default(join_date=JOINED)
        assert sentinel.id == ""
        assert sentinel.email == ""
        assert sentinel.end_date is None
        assert sentinel.padding is None

    def test_default_uses_current_time(self):
        before = datetime.now(timezone.utc).replace(microsecond=0)
        sentinel = Member.default()
        assert sentinel.join_date >= before


class TestHashing:
    def test_hash_is_field_element(self, params):
        member = Member(id="1", email="1@usc.edu", join_date=JOINED)
        value = member.hash(params.leaf)
        assert 0 <= value < params.modulus

    def test_oversized_record_rejected(self, params):
        member = Member.with_padding("1", "1@usc.edu", pad=200, join_date=JOINED)
        with pytest.raises(HashInputTooLongError):
            member.hash(params.leaf)

    def test_distinct_members_hash_differently(self, params):
        a = Member(id="1", email="1@usc.edu", join_date=JOINED)
        b = Member(id="9", email="1@usc.edu", join_date=JOINED)
        assert a.hash(params.leaf) != b.hash(params.leaf)


class TestDictRoundTrip:
    def test_round_trip(self):
        member = Member(
            id="7",
            email="7@usc.edu",
            join_date=JOINED,
            end_date=JOINED + timedelta(days=1),
            padding=b"\x00\x01",
        )
        assert Member.from_dict(member.to_dict()) == member

    def test_accepts_z_suffix(self):
        data = {"id": "1", "email": "e", "join_date": "2024-01-01T00:00:00Z"}
        assert Member.from_dict(data).join_date == JOINED

    def test_missing_field(self):
        with pytest.raises(ValueError, match="join_date"):
            Member.from_dict({"id": "1", "email": "e"})


def test_generate_members():
    members = generate_members(3, join_date=JOINED)
    assert [m.id for m in members] == ["1", "2", "3"]
    assert [m.email for m in members] == ["1@usc.edu", "2@usc.edu", "3@usc.edu"]
    assert all(m.padding is None for m in members)


def test_generate_members_with_padding():
    members = generate_members(2, padding=5, join_date=JOINED)
    assert all(m.padding == bytes(5) for m in members)


def test_member_is_immutable():
    member = Member(id="1", email="e", join_date=JOINED)
    with pytest.raises(AttributeError):
        member.id = "2"
