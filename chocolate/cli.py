#!/usr/bin/env python3
"""
Chocolate Command Line Interface

Helpers for the identity holder side of verification.

Usage:
    chocolate keygen [--output <file>]
    chocolate address (--pubkey <hex> | --secret <hex>)
    chocolate challenge --account <hex> --index <n>
    chocolate digest --message <hex>
    chocolate sign --secret <hex> --message <hex>
    chocolate status
"""

import argparse
import json
import sys

from . import config
from .config import LOG_FILE, LOG_JSON, LOG_LEVEL
from .hashing import account_from_public_key, challenge_digest
from .logging_config import configure_logging
from .records import AccountRef
from .signing import account_for_secret, generate_private_key, public_key_for, sign_challenge
from .verification import build_challenge


def _hex_arg(value: str) -> bytes:
    if value.startswith("0x"):
        value = value[2:]
    return bytes.fromhex(value)


def save_json(data: dict, path: str):
    """Save JSON to file."""
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)


def cmd_keygen(args):
    """Generate a secp256k1 key and its account id."""
    secret = generate_private_key()
    key = {
        "secret": secret.hex(),
        "public_key": public_key_for(secret).hex(),
        "account": account_for_secret(secret).hex(),
    }

    if args.output:
        save_json(key, args.output)
        print(f"Key saved to: {args.output}")
        print(f"Account: {key['account']}")
    else:
        print(json.dumps(key, indent=2))
    return 0


def cmd_address(args):
    """Derive the account id for a key."""
    if args.secret:
        account = account_for_secret(_hex_arg(args.secret))
    else:
        account = account_from_public_key(_hex_arg(args.pubkey))
    print(account.hex())
    return 0


def cmd_challenge(args):
    """Rebuild the challenge message issued to an account."""
    account = AccountRef(_hex_arg(args.account))
    print(build_challenge(account, args.index).hex())
    return 0


def cmd_digest(args):
    """Digest that must be signed for a challenge message."""
    print(challenge_digest(_hex_arg(args.message)).hex())
    return 0


def cmd_sign(args):
    """Sign a challenge message."""
    signature = sign_challenge(_hex_arg(args.secret), _hex_arg(args.message))
    print(signature.hex())
    return 0


def cmd_status(args):
    """Summarize the configured registry and configuration checks."""
    checks = config.validate_config()
    if not all(checks.values()):
        print(json.dumps({"checks": checks}, indent=2))
        return 1

    registry = config.build_registry()
    status = {
        "env": config.ENV,
        "storage": config.STORAGE_BACKEND,
        "admin": registry.admin.hex() if registry.admin else None,
        "projects": registry.projects.project_index,
        "authorizers": len(registry.authorizers),
        "verifications_issued": registry.verification.verifications_count,
        "verified_accounts": len(registry.verified_accounts()),
        "checks": checks,
    }
    registry.storage.close()
    print(json.dumps(status, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chocolate",
        description="Chocolate registry identity helpers"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    keygen = subparsers.add_parser("keygen", help="Generate a signing key")
    keygen.add_argument("--output", "-o", help="Write key JSON to file")
    keygen.set_defaults(func=cmd_keygen)

    address = subparsers.add_parser("address", help="Derive an account id")
    group = address.add_mutually_exclusive_group(required=True)
    group.add_argument("--pubkey", help="Public key (hex)")
    group.add_argument("--secret", help="Secret key (hex)")
    address.set_defaults(func=cmd_address)

    challenge = subparsers.add_parser("challenge", help="Build a challenge message")
    challenge.add_argument("--account", required=True, help="Account id (hex)")
    challenge.add_argument("--index", required=True, type=int, help="Verification index")
    challenge.set_defaults(func=cmd_challenge)

    digest = subparsers.add_parser("digest", help="Digest to sign for a message")
    digest.add_argument("--message", required=True, help="Challenge message (hex)")
    digest.set_defaults(func=cmd_digest)

    sign = subparsers.add_parser("sign", help="Sign a challenge message")
    sign.add_argument("--secret", required=True, help="Secret key (hex)")
    sign.add_argument("--message", required=True, help="Challenge message (hex)")
    sign.set_defaults(func=cmd_sign)

    status = subparsers.add_parser("status", help="Show configured registry state")
    status.set_defaults(func=cmd_status)

    return parser


def main(argv=None) -> int:
    level = "DEBUG" if config.is_debug() else LOG_LEVEL
    configure_logging(level, LOG_JSON, LOG_FILE or None)
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except (ValueError, TypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
