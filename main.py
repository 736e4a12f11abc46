#!/usr/bin/env python3
"""
authcore -- credential validation, password hashing and token tools.

Usage:
  python main.py check-email alice@example.com
  python main.py check-password --policy change
  python main.py hash
  python main.py verify '$2b$10$...'
  python main.py issue 42 alice@example.com
  python main.py inspect eyJhbGciOi...

Password arguments are prompted for (no echo) when omitted, so they do not
land in shell history.

Environment variables:
  SECRET_KEY      Token signing key, at least 32 characters. Required unless DEBUG=true.
  DEBUG           true to auto-generate a throwaway SECRET_KEY.
  BCRYPT_ROUNDS   bcrypt cost factor (default 10).
  TOKEN_TTL_SECONDS  Token lifetime (default 86400).
"""

import argparse
import getpass
import json
import sys
from typing import Optional

from auth.errors import AuthError
from auth.passwords import PasswordHasher
from auth.tokens import TokenService
from auth.validation import CHANGE_PASSWORD_POLICY, SIGNUP_POLICY, validate_email, validate_password
from core.config import get_settings

_POLICIES = {"signup": SIGNUP_POLICY, "change": CHANGE_PASSWORD_POLICY}


def _read_password(value: Optional[str]) -> str:
    if value is not None:
        return value
    return getpass.getpass("Password: ")


def _fail(exc: AuthError) -> int:
    print(f"  [!] {exc.code}: {exc}", file=sys.stderr)
    return 1


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_check_email(args: argparse.Namespace) -> int:
    try:
        validate_email(args.email)
    except AuthError as exc:
        return _fail(exc)
    print(args.email.strip().lower())
    return 0


def cmd_check_password(args: argparse.Namespace) -> int:
    policy = _POLICIES[args.policy]
    try:
        validate_password(_read_password(args.password), policy)
    except AuthError as exc:
        return _fail(exc)
    print(f"ok ({policy.name} policy)")
    return 0


def cmd_hash(args: argparse.Namespace) -> int:
    hasher = PasswordHasher.from_settings(get_settings())
    try:
        print(hasher.hash(_read_password(args.password)))
    except AuthError as exc:
        return _fail(exc)
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    hasher = PasswordHasher.from_settings(get_settings())
    if hasher.verify(_read_password(args.password), args.hash):
        print("match")
        return 0
    print("no match")
    return 1


def cmd_issue(args: argparse.Namespace) -> int:
    tokens = TokenService.from_settings(get_settings())
    try:
        print(tokens.issue(args.subject_id, args.email))
    except AuthError as exc:
        return _fail(exc)
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    tokens = TokenService.from_settings(get_settings())
    try:
        claims = tokens.validate(args.token)
    except AuthError as exc:
        return _fail(exc)
    print(
        json.dumps(
            {
                "subject_id": claims.subject_id,
                "email": claims.email,
                "issued_at": claims.issued_at.isoformat(),
                "not_before": claims.not_before.isoformat(),
                "expires_at": claims.expires_at.isoformat(),
            },
            indent=2,
        )
    )
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="authcore",
        description="Validate credentials, hash passwords, and issue or inspect tokens.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("check-email", help="Validate and normalize an email address")
    p.add_argument("email")
    p.set_defaults(func=cmd_check_email)

    p = sub.add_parser("check-password", help="Check a password against a policy")
    p.add_argument("password", nargs="?", help="Prompted for when omitted")
    p.add_argument("--policy", choices=sorted(_POLICIES), default="signup")
    p.set_defaults(func=cmd_check_password)

    p = sub.add_parser("hash", help="Print a bcrypt hash of a password")
    p.add_argument("password", nargs="?", help="Prompted for when omitted")
    p.set_defaults(func=cmd_hash)

    p = sub.add_parser("verify", help="Check a password against a stored hash")
    p.add_argument("hash")
    p.add_argument("password", nargs="?", help="Prompted for when omitted")
    p.set_defaults(func=cmd_verify)

    p = sub.add_parser("issue", help="Issue a signed token")
    p.add_argument("subject_id", type=int)
    p.add_argument("email")
    p.set_defaults(func=cmd_issue)

    p = sub.add_parser("inspect", help="Validate a token and print its claims")
    p.add_argument("token")
    p.set_defaults(func=cmd_inspect)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
