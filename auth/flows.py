"""
auth/flows.py -- Signup, login and password-change orchestration.

The three components (validation, passwords, tokens) never log and never
touch storage. This module composes them into the flows a route handler
calls, and is the one place server-side logging happens for them:

  register()          validate -> hash -> HashedCredential for the store
  authenticate_user() store lookup -> constant-work verify
  login()             authenticate_user() -> issue token
  change_password()   verify current -> CHANGE_PASSWORD_POLICY -> rehash

The store is an external collaborator. Flows only need a `lookup` callable
that maps a normalized email to a HashedCredential (or None).

Never log plaintext passwords, hashes, tokens, or the secret key. Emails are
logged at DEBUG only.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Optional

from auth.errors import CryptoError, InvalidCredentials
from auth.models import HashedCredential
from auth.passwords import PasswordHasher
from auth.tokens import TokenService
from auth.validation import CHANGE_PASSWORD_POLICY, new_credential, normalize_email, validate_password

logger = logging.getLogger("authcore.auth")

CredentialLookup = Callable[[str], Optional[HashedCredential]]


# ---------------------------------------------------------------------------
# Signup
# ---------------------------------------------------------------------------


def register(
    email: str,
    name: str,
    password: str,
    hasher: PasswordHasher,
    now: datetime | None = None,
) -> HashedCredential:
    """Validate signup input and return a credential ready to persist.

    Raises the first ValidationError (email -> name -> password). A hashing
    failure is logged here and re-raised as an opaque CryptoError.
    """
    credential = new_credential(email, name, password, now=now)
    try:
        password_hash = hasher.hash(credential.password)
    except CryptoError:
        logger.error("Password hashing failed during signup.")
        raise
    return HashedCredential(
        email=credential.email,
        display_name=credential.display_name,
        password_hash=password_hash,
        created_at=credential.created_at,
        updated_at=credential.updated_at,
    )


# ---------------------------------------------------------------------------
# Login (constant-work)
# ---------------------------------------------------------------------------


def authenticate_user(
    lookup: CredentialLookup,
    email: str,
    password: str,
    hasher: PasswordHasher,
) -> HashedCredential | None:
    """Check an email/password pair with timing equalization.

    Always runs bcrypt whether or not the email exists, so response time does
    not reveal which emails are registered:
    - Unknown email: bcrypt runs against hasher.dummy_hash
    - Wrong password: bcrypt runs against the real hash

    Returns the HashedCredential on success, None on any failure.
    """
    credential = lookup(normalize_email(email))
    if credential is None:
        # Equalize timing -- do NOT return before running bcrypt
        hasher.verify(password, hasher.dummy_hash)
        logger.debug("Login failed: unknown email %s", normalize_email(email))
        return None
    if not hasher.verify(password, credential.password_hash):
        logger.debug("Login failed: bad password for %s", credential.email)
        return None
    return credential


def login(
    lookup: CredentialLookup,
    email: str,
    password: str,
    hasher: PasswordHasher,
    tokens: TokenService,
) -> str | None:
    """Authenticate and return a signed token, or None on bad credentials.

    The credential must carry a store-assigned id; one without is a store bug,
    not a login failure, and raises ValueError.
    """
    credential = authenticate_user(lookup, email, password, hasher)
    if credential is None:
        return None
    if credential.id is None:
        raise ValueError("Stored credential has no id; cannot issue a token.")
    if hasher.needs_rehash(credential.password_hash):
        logger.info("Stored hash for user %s uses an outdated cost factor.", credential.id)
    return tokens.issue(credential.id, credential.email)


# ---------------------------------------------------------------------------
# Password change
# ---------------------------------------------------------------------------


def change_password(
    credential: HashedCredential,
    current_password: str,
    new_password: str,
    hasher: PasswordHasher,
    now: datetime | None = None,
) -> HashedCredential:
    """Replace the stored hash after re-checking the current password.

    Uses CHANGE_PASSWORD_POLICY, not the signup policy. The credential is
    only mutated once every check has passed.
    """
    if not hasher.verify(current_password, credential.password_hash):
        raise InvalidCredentials("Current password is incorrect.")
    validate_password(new_password, CHANGE_PASSWORD_POLICY)
    try:
        password_hash = hasher.hash(new_password)
    except CryptoError:
        logger.error("Password hashing failed during password change for user %s.", credential.id)
        raise
    credential.password_hash = password_hash
    credential.updated_at = now or datetime.now(timezone.utc)
    return credential
