"""
⚠️ DRAFT — requires crypto review before production use

Unit tests for configuration module.
"""

import pytest

from zkmember import config
from zkmember.config import MembershipConfig, load_config, resolve_curve_name
from zkmember.exceptions import ConfigurationError


class TestConfigParameters:
    """Test configuration parameters are set correctly."""

    def test_default_curve(self):
        assert config.DEFAULT_CURVE == "bn254"
        assert config.DEFAULT_CURVE in config.SUPPORTED_CURVES

    def test_leaf_capacity(self):
        assert config.LEAF_WINDOW_SIZE * config.LEAF_NUM_WINDOWS // 8 == 96

    def test_mimc(self):
        assert config.MIMC_EXPONENT == 5
        assert config.MIMC_ROUNDS == 110

    def test_calibration(self):
        assert config.NON_ZERO_CALIBRATION == 5

    def test_validate_config(self):
        assert config.validate_config() is True


class TestCurveResolution:
    def test_default(self, monkeypatch):
        monkeypatch.delenv(config.CURVE_ENV_VAR, raising=False)
        assert resolve_curve_name() == "bn254"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv(config.CURVE_ENV_VAR, "BLS12-381")
        assert resolve_curve_name() == "bls12_381"

    def test_prefer_wins(self, monkeypatch):
        monkeypatch.setenv(config.CURVE_ENV_VAR, "bls12_381")
        assert resolve_curve_name("bn254") == "bn254"

    def test_invalid_env(self, monkeypatch):
        monkeypatch.setenv(config.CURVE_ENV_VAR, "secp256k1")
        with pytest.raises(ConfigurationError, match="ZKMEMBER_CURVE"):
            resolve_curve_name()

    def test_invalid_argument(self):
        with pytest.raises(ConfigurationError):
            resolve_curve_name("ed25519")


class TestMembershipConfig:
    def test_defaults(self):
        settings = MembershipConfig()
        assert settings.curve == "bn254"
        assert settings.seed is None
        assert settings.leaf_capacity_bytes == 96

    def test_normalizes_curve(self):
        assert MembershipConfig(curve="BLS12-381").curve == "bls12_381"

    @pytest.mark.parametrize("field", ["mimc_rounds", "leaf_window_size", "non_zero_factor"])
    def test_rejects_non_positive(self, field):
        with pytest.raises(ConfigurationError):
            MembershipConfig(**{field: 0})

    def test_rejects_unknown_keys(self):
        with pytest.raises(ConfigurationError, match="bogus"):
            MembershipConfig.from_dict({"bogus": 1})

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "zkmember.yaml"
        path.write_text("curve: bls12_381\nseed: 5\nmimc_rounds: 8\n", encoding="utf-8")
        settings = load_config(path)
        assert settings == MembershipConfig(curve="bls12_381", seed=5, mimc_rounds=8)

    def test_load_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == MembershipConfig()

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "missing.yaml")

    def test_load_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("curve: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path)
