"""
auth/passwords.py -- One-way password hashing with bcrypt.

Security design decisions:
  bcrypt directly, no passlib wrapper. passlib's wrap-bug probe builds a
  password longer than 72 bytes, which bcrypt 4.x+ rejects outright. Direct
  usage has no compatibility shim and is actively maintained.

  Cost factor: configurable log2 rounds (default 10, see core.config). Each
  +1 doubles the work. The cost is embedded in every stored hash, so old
  hashes keep verifying after the default is raised; needs_rehash() tells the
  caller when to upgrade one.

  Salt: bcrypt.gensalt() draws a fresh 128-bit salt per call, so hashing the
  same plaintext twice never yields the same StoredHash.

  Verification: bcrypt.checkpw() re-derives with the salt and cost embedded in
  the stored hash and compares in constant time. verify() never raises -- a
  corrupted hash is indistinguishable from a wrong password to the caller.

This module does not log. Hashing failures surface as CryptoError and the
caller decides what to record.
"""

from __future__ import annotations

import bcrypt

from auth.errors import CryptoError, EmptyPassword
from auth.models import StoredHash

DEFAULT_ROUNDS = 10

# bcrypt's accepted log2 cost range.
_MIN_ROUNDS = 4
_MAX_ROUNDS = 31

_DUMMY_PASSWORD = "authcore_timing_dummy"


class PasswordHasher:
    """Hash and verify passwords at a fixed bcrypt cost.

    Immutable after construction; one instance may be shared across threads.

    Usage:
        hasher = PasswordHasher(rounds=10)
        stored = hasher.hash("Secret123")
        hasher.verify("Secret123", stored)  # True
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        if not _MIN_ROUNDS <= rounds <= _MAX_ROUNDS:
            raise ValueError(f"bcrypt rounds must be between {_MIN_ROUNDS} and {_MAX_ROUNDS}, got {rounds}.")
        self._rounds = rounds
        # Timing equalization target for unknown-user logins. Computed once so
        # the first failed lookup is not measurably slower than later ones.
        self._dummy_hash = self.hash(_DUMMY_PASSWORD)

    @classmethod
    def from_settings(cls, settings) -> PasswordHasher:
        return cls(rounds=settings.bcrypt_rounds)

    @property
    def rounds(self) -> int:
        return self._rounds

    @property
    def dummy_hash(self) -> StoredHash:
        return self._dummy_hash

    def hash(self, plaintext: str) -> StoredHash:
        """Return a salted bcrypt hash of `plaintext`.

        Raises EmptyPassword for "" and CryptoError if bcrypt refuses the
        input (e.g. bcrypt 5.x rejects passwords longer than 72 bytes).
        """
        if not plaintext:
            raise EmptyPassword()
        try:
            digest = bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds))
        except (ValueError, TypeError) as exc:
            raise CryptoError() from exc
        return StoredHash(digest.decode("utf-8"))

    def verify(self, plaintext: str, stored_hash: str) -> bool:
        """Return True only if `plaintext` matches `stored_hash`."""
        if not plaintext or not stored_hash:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), stored_hash.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def needs_rehash(self, stored_hash: str) -> bool:
        """Return True if `stored_hash` was made at a different cost, or is unreadable."""
        parts = stored_hash.split("$")
        # ["", "2b", "10", "<salt+digest>"]
        if len(parts) != 4 or not parts[2].isdigit():
            return True
        return int(parts[2]) != self._rounds

    def __repr__(self) -> str:
        return f"PasswordHasher(rounds={self._rounds})"
