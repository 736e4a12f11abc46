"""
tests/conftest.py -- Shared test fixtures for authcore.

This module provides:
  - FakeClock: a settable clock injected into TokenService for expiry tests
  - hasher: PasswordHasher at bcrypt's minimum cost, shared per module for speed
  - secret_key, clock, token_service: a TokenService with a fixed key and a FakeClock
  - make_token_service: factory for services pinned at another instant

The DEBUG and BCRYPT_ROUNDS env vars must be set before any core import so
get_settings() auto-generates SECRET_KEY in dev mode (rather than raising
ValueError) and the CLI tests do not pay full bcrypt cost.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

# CRITICAL: Set before any core/ import so get_settings() can auto-generate
# SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest

from auth.passwords import PasswordHasher
from auth.tokens import TokenService

_SECRET_KEY = "test-secret-key-0123456789abcdef0123456789abcdef"

# Whole seconds -- the wire format stores epoch seconds.
_FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Zero-argument callable returning a settable UTC datetime."""

    def __init__(self, now: datetime = _FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def hasher() -> PasswordHasher:
    """bcrypt cost 4 (the minimum) keeps the suite fast; cost is not under test here."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def secret_key() -> str:
    return _SECRET_KEY


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_service(secret_key: str, clock: FakeClock) -> TokenService:
    return TokenService(secret_key=secret_key, clock=clock)


@pytest.fixture
def make_token_service(secret_key: str) -> Callable[..., TokenService]:
    """Factory for a TokenService pinned at `now`, sharing the test key."""

    def _make(now: datetime = _FIXED_NOW, **kwargs) -> TokenService:
        return TokenService(secret_key=secret_key, clock=FakeClock(now), **kwargs)

    return _make
