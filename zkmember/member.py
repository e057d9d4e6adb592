"""
Member records and their canonical byte encoding.

Encoding (no length prefixes, see below):

    id ∥ email ∥ join_date (8-byte big-endian Unix seconds)
       ∥ end flag ∥ [end_date (8 bytes)] ∥ padding flag ∥ [padding]

Variable-length fields are not delimited. The leaf hash has a fixed input
capacity and rejects longer input, so records must be kept within that bound
(see config.LEAF_NUM_WINDOWS).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

_PRESENT = b"\x01"
_ABSENT = b"\x00"


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _timestamp_bytes(value: datetime) -> bytes:
    seconds = math.floor(_utc(value).timestamp())
    return seconds.to_bytes(8, "big", signed=True)


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass(frozen=True)
class Member:
    """
    A registrant. Immutable once created.

    Attributes:
        id: Member identifier
        email: Contact address
        join_date: Registration time (UTC)
        end_date: Optional membership end (UTC)
        padding: Optional filler bytes appended to the encoding
    """

    id: str
    email: str
    join_date: datetime = field(default_factory=_now)
    end_date: Optional[datetime] = None
    padding: Optional[bytes] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not isinstance(self.email, str):
            raise TypeError("id and email must be str")
        object.__setattr__(self, "join_date", _utc(self.join_date))
        if self.end_date is not None:
            object.__setattr__(self, "end_date", _utc(self.end_date))
        if self.padding is not None:
            object.__setattr__(self, "padding", bytes(self.padding))

    @classmethod
    def default(cls, join_date: Optional[datetime] = None) -> "Member":
        """Sentinel record used as tree filler."""
        return cls(id="", email="", join_date=join_date or _now())

    @classmethod
    def with_padding(
        cls,
        id: str,
        email: str,
        end_date: Optional[datetime] = None,
        pad: int = 0,
        join_date: Optional[datetime] = None,
    ) -> "Member":
        return cls(
            id=id,
            email=email,
            join_date=join_date or _now(),
            end_date=end_date,
            padding=bytes(pad),
        )

    def to_bytes(self) -> bytes:
        out = bytearray()
        out.extend(self.id.encode("utf-8"))
        out.extend(self.email.encode("utf-8"))
        out.extend(_timestamp_bytes(self.join_date))

        if self.end_date is not None:
            out.extend(_PRESENT)
            out.extend(_timestamp_bytes(self.end_date))
        else:
            out.extend(_ABSENT)

        if self.padding is not None:
            out.extend(_PRESENT)
            out.extend(self.padding)
        else:
            out.extend(_ABSENT)

        return bytes(out)

    def hash(self, leaf_params) -> int:
        """Leaf hash of this record under `leaf_params`."""
        return leaf_params.evaluate(self.to_bytes())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "join_date": self.join_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "padding": self.padding.hex() if self.padding is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Member":
        """
        Rebuild a member from `to_dict` output.

        Raises:
            ValueError: If a field is missing or a date is not RFC 3339.
        """
        if not isinstance(data, dict):
            raise ValueError("member data must be a dict")
        for key in ("id", "email", "join_date"):
            if key not in data:
                raise ValueError(f"member data missing '{key}'")

        end_date = data.get("end_date")
        padding = data.get("padding")
        return cls(
            id=data["id"],
            email=data["email"],
            join_date=_parse_date(data["join_date"]),
            end_date=_parse_date(end_date) if end_date else None,
            padding=bytes.fromhex(padding) if padding is not None else None,
        )


def encode_member(member: Member) -> bytes:
    """Canonical byte encoding of `member`."""
    return member.to_bytes()


def _parse_date(value: str) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"date must be a string, got {type(value).__name__}")
    # fromisoformat only accepts "Z" from Python 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def generate_members(
    amount: int,
    padding: Optional[int] = None,
    join_date: Optional[datetime] = None,
) -> List[Member]:
    """Members "1".."amount" with "<i>@usc.edu" addresses."""
    joined = join_date or _now()
    members = [
        Member(
            id=str(i),
            email=f"{i}@usc.edu",
            join_date=joined,
            padding=bytes(padding) if padding is not None else None,
        )
        for i in range(1, amount + 1)
    ]
    logger.debug("Generated %d members (padding=%s)", len(members), padding)
    return members
