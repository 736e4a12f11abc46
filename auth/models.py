"""
auth/models.py -- Domain dataclasses for credential and token entities.

Pattern: Data class (pure data container, zero logic). Validation lives in
auth/validation.py, hashing in auth/passwords.py, signing in auth/tokens.py.

Plaintext boundary:
  Credential carries the plaintext password and exists only between input
  validation and hashing. HashedCredential has no plaintext field at all, so
  a persistence layer typed against HashedCredential cannot be handed a raw
  password by accident. auth.flows.register() is the only bridge between the
  two.

Layer rule: stdlib only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import NewType

# bcrypt modular-crypt string: $2b$<cost>$<22-char salt><31-char digest>
StoredHash = NewType("StoredHash", str)


@dataclass
class Credential:
    """A validated, normalized signup credential that still holds plaintext.

    Construct via auth.validation.new_credential(), never directly -- the
    constructor does not validate.
    """

    email: str
    display_name: str
    password: str = field(repr=False)
    created_at: datetime
    updated_at: datetime


@dataclass
class HashedCredential:
    """A credential safe to hand to the user store.

    id is None until the store allocates one.
    """

    email: str
    display_name: str
    password_hash: StoredHash = field(repr=False)
    created_at: datetime
    updated_at: datetime
    id: int | None = None


@dataclass(frozen=True)
class Claims:
    """Identity and timing payload carried inside a signed token.

    All timestamps are timezone-aware UTC with whole-second precision, because
    the wire format stores epoch seconds.
    """

    subject_id: int
    email: str
    issued_at: datetime
    not_before: datetime
    expires_at: datetime
