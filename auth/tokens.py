"""
auth/tokens.py -- Signed, time-bounded identity tokens (JWT, HMAC family).

Security design decisions:
  JWT: python-jose with HS256. Tokens carry user_id, email, iat, nbf and exp
       as epoch seconds and are signed with the service's secret key. The key
       is held privately by TokenService and never appears in a token, repr
       or error message.

  Algorithm confusion [A1]: the service only ever holds a symmetric key, and
       the allow-list handed to the decoder is fixed to the HMAC family. The
       header's "alg" is inspected *only* to reject anything outside that
       family ("none", RS*/ES*/PS*, ...) with a distinct error -- it is never
       used to choose a key or a verification routine.

  Canonical signatures [A2]: base64url decoding ignores the unused low bits of
       the final character, so two different signature strings can decode to
       the same bytes. validate() re-encodes the decoded signature and insists
       on an exact match, so any single-character change to a signature is
       rejected.

  Time checks [A3]: exp/nbf are evaluated here against the injected clock, not
       by the JWT library, so tests can simulate time and the Expired error
       is raised only after the signature and claims are known to be good.

Validation precedence (first match wins):
  EmptyToken -> UnsupportedAlgorithm -> InvalidSignature -> InvalidClaims -> Expired

This module does not log and performs no I/O.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.constants import ALGORITHMS
from jose.exceptions import JWTClaimsError
from jose.utils import base64url_decode, base64url_encode

from auth.errors import (
    EmptyEmail,
    EmptyKey,
    EmptyToken,
    Expired,
    InvalidClaims,
    InvalidSignature,
    InvalidSubject,
    UnsupportedAlgorithm,
)
from auth.models import Claims

_ALGORITHM = ALGORITHMS.HS256

# The only algorithms validate() will accept [A1].
_ACCEPTED_ALGORITHMS = frozenset(ALGORITHMS.HMAC)

DEFAULT_TTL = timedelta(hours=24)

# exp/nbf/iat are checked against our own clock [A3].
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
}


def _system_clock() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Payload mapping
# ---------------------------------------------------------------------------


def _to_payload(claims: Claims) -> dict:
    return {
        "user_id": claims.subject_id,
        "email": claims.email,
        "iat": int(claims.issued_at.timestamp()),
        "nbf": int(claims.not_before.timestamp()),
        "exp": int(claims.expires_at.timestamp()),
    }


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _from_payload(payload: dict) -> Claims:
    """Map a verified payload dict to Claims, raising InvalidClaims on any gap."""
    subject_id = payload.get("user_id")
    email = payload.get("email")
    if not isinstance(subject_id, int) or isinstance(subject_id, bool) or subject_id <= 0:
        raise InvalidClaims("Token user_id claim is missing or not a positive integer.")
    if not isinstance(email, str) or not email:
        raise InvalidClaims("Token email claim is missing or empty.")

    stamps = {}
    for name in ("iat", "nbf", "exp"):
        value = payload.get(name)
        if not _is_number(value):
            raise InvalidClaims(f"Token {name} claim is missing or not numeric.")
        try:
            stamps[name] = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise InvalidClaims(f"Token {name} claim is out of range.") from None

    return Claims(
        subject_id=subject_id,
        email=email,
        issued_at=stamps["iat"],
        not_before=stamps["nbf"],
        expires_at=stamps["exp"],
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TokenService:
    """Issue and validate HS256 identity tokens.

    Immutable after construction; one instance may be shared across threads.

    Usage:
        tokens = TokenService(secret_key=settings.secret_key)
        token = tokens.issue(42, "a@b.com")
        claims = tokens.validate(token)
    """

    def __init__(
        self,
        secret_key: str,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not secret_key:
            raise EmptyKey()
        if ttl <= timedelta(0):
            raise ValueError("Token TTL must be positive.")
        self._secret_key = secret_key
        self._ttl = ttl
        self._clock = clock or _system_clock

    @classmethod
    def from_settings(cls, settings, clock: Callable[[], datetime] | None = None) -> TokenService:
        return cls(
            secret_key=settings.secret_key,
            ttl=timedelta(seconds=settings.token_ttl_seconds),
            clock=clock,
        )

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def __repr__(self) -> str:
        return f"TokenService(algorithm={_ALGORITHM!r}, ttl={self._ttl!r})"

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def issue(self, subject_id: int, email: str) -> str:
        """Return a signed token for `subject_id` valid for the configured TTL.

        iat and nbf are both "now" (truncated to whole seconds); exp is
        iat + TTL.
        """
        if not isinstance(subject_id, int) or isinstance(subject_id, bool) or subject_id <= 0:
            raise InvalidSubject()
        if not email:
            raise EmptyEmail()

        now = self._clock().replace(microsecond=0)
        claims = Claims(
            subject_id=subject_id,
            email=email,
            issued_at=now,
            not_before=now,
            expires_at=now + self._ttl,
        )
        return jwt.encode(_to_payload(claims), self._secret_key, algorithm=_ALGORITHM)

    # ------------------------------------------------------------------
    # Validate
    # ------------------------------------------------------------------

    def validate(self, token: str) -> Claims:
        """Verify `token` and return its Claims.

        Raises, in precedence order: EmptyToken, UnsupportedAlgorithm,
        InvalidSignature, InvalidClaims, Expired.
        """
        if not token:
            raise EmptyToken()

        segments = token.split(".")
        if len(segments) != 3:
            raise InvalidSignature("Token must have exactly three segments.")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise InvalidSignature("Token header could not be decoded.") from None

        algorithm = header.get("alg")
        if not isinstance(algorithm, str) or algorithm not in _ACCEPTED_ALGORITHMS:
            raise UnsupportedAlgorithm(algorithm)

        # [A2] reject non-canonical signature encodings
        signature_segment = segments[2].encode("utf-8")
        if base64url_encode(base64url_decode(signature_segment)) != signature_segment:
            raise InvalidSignature("Token signature encoding is not canonical.")

        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=sorted(_ACCEPTED_ALGORITHMS),
                options=_DECODE_OPTIONS,
            )
        except JWTClaimsError:
            # signature already verified; a registered claim is malformed
            raise InvalidClaims() from None
        except JWTError:
            raise InvalidSignature() from None

        claims = _from_payload(payload)

        now = self._clock()
        if now >= claims.expires_at:
            raise Expired("Token has expired.")
        if now < claims.not_before:
            raise Expired("Token is not valid yet.")
        return claims
