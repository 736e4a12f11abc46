"""
auth/errors.py -- Exception hierarchy for the credential subsystem.

Every failure is a distinct class with a stable machine-readable `code`, so
callers branch on the type (or the code) and never on message text. The
request adapter in auth/dependencies.py turns codes into HTTP details.

  AuthError
  +-- ValidationError      user-correctable, field-scoped, never retried
  |   +-- InvalidEmail
  |   +-- InvalidName
  |   +-- WeakPassword
  |   +-- EmptyPassword
  +-- CryptoError          internal, opaque -- message never carries input
  +-- TokenError
  |   +-- EmptyToken
  |   +-- UnsupportedAlgorithm
  |   +-- InvalidSignature
  |   +-- InvalidClaims
  |   +-- Expired
  |   +-- InvalidSubject   (issue-time)
  |   +-- EmptyEmail       (issue-time)
  +-- EmptyKey             construction-time, unrecoverable
  +-- InvalidCredentials   current password did not verify

Layer rule: stdlib only.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for all credential subsystem failures."""

    code = "auth_error"
    default_message = "Authentication error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationError(AuthError):
    """A credential field failed a structural or policy rule."""

    code = "validation_error"
    field = ""


class InvalidEmail(ValidationError):
    code = "invalid_email"
    field = "email"
    default_message = "Invalid email format."


class InvalidName(ValidationError):
    code = "invalid_name"
    field = "name"
    default_message = "Name must be 2-50 characters."


class WeakPassword(ValidationError):
    code = "weak_password"
    field = "password"
    default_message = "Password does not meet the password policy."

    def __init__(self, message: str | None = None, policy: str = "") -> None:
        super().__init__(message)
        self.policy = policy


class EmptyPassword(ValidationError):
    code = "empty_password"
    field = "password"
    default_message = "Password cannot be empty."


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------


class CryptoError(AuthError):
    code = "crypto_error"
    default_message = "Password hashing failed."


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class TokenError(AuthError):
    code = "token_error"
    default_message = "Invalid token."


class EmptyToken(TokenError):
    code = "empty_token"
    default_message = "Token is empty."


class UnsupportedAlgorithm(TokenError):
    code = "unsupported_algorithm"
    default_message = "Token signing algorithm is not supported."

    def __init__(self, algorithm: object = None) -> None:
        super().__init__(f"Unsupported signing algorithm: {algorithm!r}")
        self.algorithm = algorithm


class InvalidSignature(TokenError):
    code = "invalid_signature"
    default_message = "Token signature is invalid or the token is malformed."


class InvalidClaims(TokenError):
    code = "invalid_claims"
    default_message = "Token claims are missing or malformed."


class Expired(TokenError):
    code = "token_expired"
    default_message = "Token is expired or not yet valid."


class InvalidSubject(TokenError):
    code = "invalid_subject"
    default_message = "Subject ID must be a positive integer."


class EmptyEmail(TokenError):
    code = "empty_email"
    default_message = "Email cannot be empty."


# ---------------------------------------------------------------------------
# Construction / flows
# ---------------------------------------------------------------------------


class EmptyKey(AuthError):
    code = "empty_key"
    default_message = "Secret key cannot be empty."


class InvalidCredentials(AuthError):
    code = "bad_credentials"
    default_message = "Invalid email or password."
