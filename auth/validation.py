"""
auth/validation.py -- Credential validation and normalization.

Checks run in a fixed order -- email, then name, then password -- and the
first violation wins. Every pattern is compiled once at import and shared
read-only, so these functions are safe to call from any thread.

Password policies:
  Two independent rule sets exist and are selected by the call site:
    SIGNUP_POLICY           >= 8 chars, upper + lower + digit
    CHANGE_PASSWORD_POLICY  >= 6 chars, letter + digit
  They are deliberately not reconciled. Signup callers get SIGNUP_POLICY by
  default; auth.flows.change_password() passes CHANGE_PASSWORD_POLICY.

Layer rule: no imports from core/ -- callers pass `now` if they need a fixed
clock.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TypeVar

from auth.errors import InvalidEmail, InvalidName, WeakPassword
from auth.models import Credential, HashedCredential

# ---------------------------------------------------------------------------
# Precompiled rules
# ---------------------------------------------------------------------------

_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

_UPPER_RE = re.compile(r"[A-Z]")
_LOWER_RE = re.compile(r"[a-z]")
_LETTER_RE = re.compile(r"[a-zA-Z]")
_DIGIT_RE = re.compile(r"[0-9]")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


@dataclass(frozen=True)
class PasswordPolicy:
    """A named password rule set.

    rules is a sequence of (pattern, requirement) pairs; each pattern must
    match somewhere in the password. requirement is the human-readable text
    used in the WeakPassword message.
    """

    name: str
    min_length: int
    rules: tuple[tuple[re.Pattern, str], ...]

    def check(self, password: str) -> None:
        """Raise WeakPassword for the first rule the password breaks."""
        if len(password) < self.min_length:
            raise WeakPassword(f"Password must be at least {self.min_length} characters.", policy=self.name)
        for pattern, requirement in self.rules:
            if not pattern.search(password):
                raise WeakPassword(f"Password must contain at least {requirement}.", policy=self.name)


SIGNUP_POLICY = PasswordPolicy(
    name="signup",
    min_length=8,
    rules=(
        (_UPPER_RE, "one uppercase letter"),
        (_LOWER_RE, "one lowercase letter"),
        (_DIGIT_RE, "one number"),
    ),
)

CHANGE_PASSWORD_POLICY = PasswordPolicy(
    name="change_password",
    min_length=6,
    rules=(
        (_LETTER_RE, "one letter"),
        (_DIGIT_RE, "one number"),
    ),
)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_name(name: str) -> str:
    return name.strip()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Single-field validators
# ---------------------------------------------------------------------------


def validate_email(email: str) -> None:
    """Raise InvalidEmail unless the trimmed address looks like local@domain.tld."""
    trimmed = email.strip()
    if not trimmed:
        raise InvalidEmail("Email cannot be empty.")
    if not _EMAIL_RE.fullmatch(trimmed):
        raise InvalidEmail()


def validate_name(name: str) -> None:
    """Raise InvalidName unless the trimmed name is 2-50 characters."""
    trimmed = name.strip()
    if not trimmed:
        raise InvalidName("Name cannot be empty.")
    if len(trimmed) < NAME_MIN_LENGTH:
        raise InvalidName(f"Name must be at least {NAME_MIN_LENGTH} characters.")
    if len(trimmed) > NAME_MAX_LENGTH:
        raise InvalidName(f"Name must be at most {NAME_MAX_LENGTH} characters.")


def validate_password(password: str, policy: PasswordPolicy = SIGNUP_POLICY) -> None:
    """Raise WeakPassword unless the password satisfies `policy`."""
    if not password:
        raise WeakPassword("Password cannot be empty.", policy=policy.name)
    policy.check(password)


# ---------------------------------------------------------------------------
# Credential lifecycle
# ---------------------------------------------------------------------------


def new_credential(email: str, name: str, password: str, now: datetime | None = None) -> Credential:
    """Validate and normalize signup input into a Credential.

    All-or-nothing: either every check passes and a Credential is returned,
    or the first failing check raises and nothing is built.
    """
    validate_email(email)
    validate_name(name)
    validate_password(password, SIGNUP_POLICY)

    stamp = now or _utcnow()
    return Credential(
        email=normalize_email(email),
        display_name=normalize_name(name),
        password=password,
        created_at=stamp,
        updated_at=stamp,
    )


_C = TypeVar("_C", Credential, HashedCredential)


def update_name(credential: _C, name: str, now: datetime | None = None) -> _C:
    """Replace the display name in place. Untouched if validation fails."""
    validate_name(name)
    credential.display_name = normalize_name(name)
    credential.updated_at = now or _utcnow()
    return credential


def update_email(credential: _C, email: str, now: datetime | None = None) -> _C:
    """Replace the email in place. Untouched if validation fails."""
    validate_email(email)
    credential.email = normalize_email(email)
    credential.updated_at = now or _utcnow()
    return credential
