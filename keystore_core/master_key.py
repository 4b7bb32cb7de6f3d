"""
Master password verifier: gates unlocking the application itself.

Unrelated to any wallet's keystore document.  One ``MasterKeyRecord`` exists
per installation::

    {"hash": "<base64>", "salt": "<base64, 16 bytes>", "iterations": 100000}

``verify`` is fail-closed: a missing record, a corrupt record and a wrong
password all come back as ``False``.  Callers that need to tell "nothing
configured yet" apart (first-run setup) ask ``MasterKeyStore.has_master_key``.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from keystore_core.errors import ParseError
from keystore_core.hexcodec import random_bytes
from keystore_core.password_policy import check_new_password

logger = logging.getLogger("keystore_core.master_key")

DEFAULT_ITERATIONS = 100_000
SALT_SIZE = 16
HASH_SIZE = 32  # 256 bits
MASTER_KEY_DIR = "MasterKeyDir"
MASTER_KEY_FILE = "passwordHash.json"


@dataclass(frozen=True)
class MasterKeyRecord:
    hash: str  # base64
    salt: str  # base64
    iterations: int

    def to_dict(self) -> dict:
        return {"hash": self.hash, "salt": self.salt, "iterations": self.iterations}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Any) -> MasterKeyRecord:
        if not isinstance(data, dict):
            raise ParseError("Master key record must be a JSON object")
        try:
            record = cls(
                hash=data["hash"],
                salt=data["salt"],
                iterations=data["iterations"],
            )
        except KeyError as exc:
            raise ParseError(f"Master key record missing field {exc.args[0]!r}") from exc
        if not isinstance(record.hash, str) or not isinstance(record.salt, str):
            raise ParseError("Master key hash and salt must be base64 strings")
        if isinstance(record.iterations, bool) or not isinstance(record.iterations, int):
            raise ParseError("Master key iterations must be an integer")
        return record

    @classmethod
    def from_json(cls, text: str | bytes) -> MasterKeyRecord:
        try:
            data = json.loads(text)
        except (TypeError, ValueError, RecursionError) as exc:
            raise ParseError(f"Master key record is not valid JSON: {exc}") from exc
        return cls.from_dict(data)


def _hash_password(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, iterations, dklen=HASH_SIZE,
    )


def generate(password: str, iterations: int = DEFAULT_ITERATIONS) -> MasterKeyRecord:
    """Hash *password* under a fresh 16-byte salt."""
    salt = random_bytes(SALT_SIZE)
    digest = _hash_password(password, salt, iterations)
    return MasterKeyRecord(
        hash=base64.b64encode(digest).decode("ascii"),
        salt=base64.b64encode(salt).decode("ascii"),
        iterations=iterations,
    )


def verify(password: str, record: MasterKeyRecord | None) -> bool:
    """True only when *password* reproduces ``record.hash``; never raises."""
    try:
        salt = base64.b64decode(record.salt, validate=True)
        stored = base64.b64decode(record.hash, validate=True)
        if record.iterations < 1:
            raise ValueError(f"iterations must be positive, got {record.iterations}")
        candidate = _hash_password(password, salt, record.iterations)
        return hmac.compare_digest(candidate, stored)
    except (AttributeError, TypeError, ValueError, binascii.Error, OverflowError) as exc:
        logger.warning(f"Master key verification failed on unreadable record: {exc}")
        return False


class MasterKeyStore:
    """The single on-disk master key record of an installation."""

    def __init__(self, path: str | Path, iterations: int = DEFAULT_ITERATIONS):
        self.path = Path(path)
        self.iterations = iterations

    @classmethod
    def in_data_dir(cls, data_dir: str | Path, iterations: int = DEFAULT_ITERATIONS) -> MasterKeyStore:
        return cls(Path(data_dir) / MASTER_KEY_DIR / MASTER_KEY_FILE, iterations)

    def has_master_key(self) -> bool:
        return self.path.is_file()

    def load(self) -> MasterKeyRecord | None:
        """Stored record, or None when absent.  Raises ParseError if corrupt."""
        if not self.path.is_file():
            return None
        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Master key record is not UTF-8: {exc}") from exc
        return MasterKeyRecord.from_json(text)

    def generate(self, password: str) -> MasterKeyRecord:
        """Create a record and replace whatever was stored before."""
        record = generate(password, self.iterations)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(record.to_json(), encoding="utf-8")
        if os.name == "posix":
            os.chmod(tmp, 0o600)
        os.replace(tmp, self.path)
        logger.info("Master key generated", extra={"path": str(self.path)})
        return record

    def setup(self, password: str, confirmation: str) -> MasterKeyRecord:
        """First-run path: enforce the password policy, then ``generate``."""
        check_new_password(password, confirmation)
        return self.generate(password)

    def verify(self, password: str) -> bool:
        try:
            record = self.load()
        except (OSError, ParseError) as exc:
            logger.warning(f"Master key record unreadable: {exc}")
            return False
        if record is None:
            logger.info("No master key configured")
            return False
        return verify(password, record)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
