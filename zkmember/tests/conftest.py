"""Shared fixtures: small, seeded hash parameters over BN254."""

from datetime import datetime, timezone

import pytest

from zkmember.config import MembershipConfig
from zkmember.curves import BN254
from zkmember.hashes import setup_parameters
from zkmember.member import Member, generate_members
from zkmember.security import RandomnessSource

TEST_ROUNDS = 4
JOIN_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def test_config():
    return MembershipConfig(curve="bn254", seed=7, mimc_rounds=TEST_ROUNDS)


@pytest.fixture(scope="session")
def params(test_config):
    return setup_parameters(BN254, RandomnessSource(seed=test_config.seed), test_config)


@pytest.fixture(scope="session")
def other_params(test_config):
    return setup_parameters(BN254, RandomnessSource(seed=99), test_config)


@pytest.fixture(scope="session")
def padding_leaf(params):
    return Member.default(join_date=JOIN_DATE).hash(params.leaf)


@pytest.fixture
def members():
    return generate_members(8, join_date=JOIN_DATE)
