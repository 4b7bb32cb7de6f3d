#!/usr/bin/env python3
"""
Keystore command line: seal, open and inspect wallet keystore files and
manage the installation's master password.

Usage:
    python keystore_cli.py encrypt --address 9cc8fb... --private-key 0x01...
    python keystore_cli.py decrypt data/keystore/UTC--...--9cc8fb....json
    python keystore_cli.py list
    python keystore_cli.py master-key setup
    python keystore_cli.py master-key verify
    python keystore_cli.py master-key status

Passwords are prompted for unless ``--password`` is given (scripts/tests).

Environment variables (alternative to config file):
    KEYSTORE_DIR, KEYSTORE_SCRYPT_N, KEYSTORE_MASTER_KEY_PATH, KEYSTORE_LOG_LEVEL
"""

from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from keystore_core.config import load_config  # noqa: E402
from keystore_core.errors import InvalidPasswordError, KeystoreError  # noqa: E402
from keystore_core.keystore import LIGHT_POLICY, decrypt, encrypt  # noqa: E402
from keystore_core.logging_config import setup_logging  # noqa: E402
from keystore_core.master_key import MasterKeyStore  # noqa: E402
from keystore_core.password_policy import password_strength  # noqa: E402
from keystore_core.storage import KeystoreStore  # noqa: E402

logger = logging.getLogger("keystore_cli")


def _password(args: argparse.Namespace, prompt: str = "Password: ") -> str:
    if args.password is not None:
        return args.password
    return getpass.getpass(prompt)


# ===================================================================
#  Commands
# ===================================================================

def cmd_encrypt(args, cfg) -> int:
    private_key = args.private_key or os.environ.get("KEYSTORE_PRIVATE_KEY", "")
    password = _password(args)
    policy = LIGHT_POLICY if args.light else cfg.keystore.policy()
    doc = encrypt(password, args.address, private_key, policy=policy)
    path = KeystoreStore(cfg.keystore.directory).save(doc)
    print(path)
    return 0


def cmd_decrypt(args, cfg) -> int:
    store = KeystoreStore(cfg.keystore.directory)
    doc = store.load(args.path)
    try:
        creds = decrypt(_password(args), doc)
    except InvalidPasswordError:
        print("Invalid password", file=sys.stderr)
        return 2
    print(f"address:     {creds.address}")
    if args.show_key:
        print(f"private_key: {creds.private_key}")
    return 0


def cmd_list(args, cfg) -> int:
    for path in KeystoreStore(cfg.keystore.directory).list_files():
        print(path.name)
    return 0


def cmd_master_key(args, cfg) -> int:
    store = MasterKeyStore(cfg.master_key.path, cfg.master_key.iterations)

    if args.action == "status":
        print("configured" if store.has_master_key() else "not configured")
        return 0

    if args.action == "clear":
        store.clear()
        return 0

    if args.action == "setup":
        password = _password(args, "New master password: ")
        confirmation = args.password if args.password is not None else getpass.getpass("Confirm: ")
        store.setup(password, confirmation)
        print(f"Master key saved ({password_strength(password).value} password)")
        return 0

    # verify
    if store.verify(_password(args, "Master password: ")):
        print("OK")
        return 0
    print("Verification failed", file=sys.stderr)
    return 1


# ===================================================================
#  Entry point
# ===================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Wallet keystore tool")
    p.add_argument("--config", default=None, help="Path to keystore.toml config file")
    p.add_argument("--password", default=None,
                   help="Password (skips the prompt; avoid on shared machines)")
    sub = p.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encrypt", help="Seal a private key into a new keystore file")
    enc.add_argument("--address", required=True, help="Wallet address (hex)")
    enc.add_argument("--private-key", default=None,
                     help="Private key hex (default: $KEYSTORE_PRIVATE_KEY)")
    enc.add_argument("--light", action="store_true",
                     help="Single-lane scrypt (p=1) for slow devices")
    enc.set_defaults(func=cmd_encrypt)

    dec = sub.add_parser("decrypt", help="Open a keystore file")
    dec.add_argument("path")
    dec.add_argument("--show-key", action="store_true", help="Print the private key")
    dec.set_defaults(func=cmd_decrypt)

    ls = sub.add_parser("list", help="List keystore files")
    ls.set_defaults(func=cmd_list)

    mk = sub.add_parser("master-key", help="Manage the master password")
    mk.add_argument("action", choices=["setup", "verify", "status", "clear"])
    mk.set_defaults(func=cmd_master_key)

    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    cfg = load_config(args.config)
    setup_logging(cfg.logging.level, cfg.logging.format, cfg.logging.file)
    try:
        return args.func(args, cfg)
    except KeystoreError as exc:
        logger.error(str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
