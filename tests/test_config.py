"""Unit tests for core/config.py -- Settings validation.

Settings() is constructed directly (not via get_settings()) so each test sees
its own environment. _env_file=None keeps a developer's .env out of the run.
"""

import pytest

from auth.passwords import PasswordHasher
from auth.tokens import TokenService
from core.config import Settings

_KEY = "k" * 32


class TestSecretKey:
    def test_debug_generates_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SECRET_KEY", raising=False)
        monkeypatch.setenv("DEBUG", "true")
        settings = Settings(_env_file=None)
        assert len(settings.secret_key) >= 32

    def test_production_requires_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SECRET_KEY", raising=False)
        monkeypatch.setenv("DEBUG", "false")
        with pytest.raises(ValueError, match="SECRET_KEY is required"):
            Settings(_env_file=None)

    def test_short_key_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SECRET_KEY", "too-short")
        with pytest.raises(ValueError, match="at least 32"):
            Settings(_env_file=None)

    def test_key_read_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SECRET_KEY", _KEY)
        monkeypatch.setenv("DEBUG", "false")
        assert Settings(_env_file=None).secret_key == _KEY


class TestTuning:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("BCRYPT_ROUNDS", raising=False)
        monkeypatch.delenv("TOKEN_TTL_SECONDS", raising=False)
        settings = Settings(_env_file=None, secret_key=_KEY)
        assert settings.bcrypt_rounds == 10
        assert settings.token_ttl_seconds == 86400

    @pytest.mark.parametrize("rounds", ["3", "32"])
    def test_rounds_bounds(self, monkeypatch: pytest.MonkeyPatch, rounds: str) -> None:
        monkeypatch.setenv("BCRYPT_ROUNDS", rounds)
        with pytest.raises(ValueError):
            Settings(_env_file=None, secret_key=_KEY)

    def test_ttl_must_be_positive(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOKEN_TTL_SECONDS", "0")
        with pytest.raises(ValueError):
            Settings(_env_file=None, secret_key=_KEY)

    def test_components_built_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BCRYPT_ROUNDS", "5")
        monkeypatch.setenv("TOKEN_TTL_SECONDS", "600")
        settings = Settings(_env_file=None, secret_key=_KEY)
        assert PasswordHasher.from_settings(settings).rounds == 5
        assert TokenService.from_settings(settings).ttl.total_seconds() == 600
