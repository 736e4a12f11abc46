"""
auth/dependencies.py -- FastAPI Depends() helpers for token authentication.

The application wires one TokenService into app.state.token_service at
startup. These helpers read the `Authorization: Bearer <token>` header,
validate it, and hand Claims to the route.

try_get_current_claims() is the soft variant (returns None on failure).
get_current_claims() wraps validation and raises HTTP 401, with a detail code
the client can act on without parsing text:

  unauthorized   no token presented          -> prompt for login
  token_expired  Expired                     -> "log in again"
  invalid_token  any other TokenError        -> malformed/forged request

hash_password_async() moves bcrypt work off the event loop onto Starlette's
threadpool, which is bounded by AnyIO's default thread limiter.

Layer rule: may import fastapi (for Request/HTTPException) because this module
is part of the FastAPI dependency injection system. No imports from core/.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from auth.errors import Expired, TokenError
from auth.models import Claims, StoredHash
from auth.passwords import PasswordHasher
from auth.tokens import TokenService

logger = logging.getLogger("authcore.auth")

_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip()
    return ""


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": code, "message": message},
        headers=_CHALLENGE,
    )


def try_get_current_claims(request: Request) -> Claims | None:
    """Return Claims for a valid Bearer token, None on any failure. Never raises."""
    token = _bearer_token(request)
    if not token:
        return None
    token_service: TokenService = request.app.state.token_service
    try:
        return token_service.validate(token)
    except TokenError:
        return None


def get_current_claims(request: Request) -> Claims:
    """Require a valid Bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(claims: Claims = Depends(get_current_claims)): ...
    """
    token = _bearer_token(request)
    if not token:
        raise _unauthorized("unauthorized", "Authentication required.")

    token_service: TokenService = request.app.state.token_service
    try:
        return token_service.validate(token)
    except Expired:
        raise _unauthorized("token_expired", "Session expired. Please log in again.") from None
    except TokenError as exc:
        logger.info("Rejected bearer token: %s", exc.code)
        raise _unauthorized("invalid_token", "Invalid authentication token.") from None


async def hash_password_async(hasher: PasswordHasher, plaintext: str) -> StoredHash:
    """Run hasher.hash() in the threadpool so bcrypt does not block the event loop."""
    return await run_in_threadpool(hasher.hash, plaintext)
