"""
Keystore document model, validator and JSON wire format.

A document is an immutable value::

    {
      "address": "9cc8fb...",
      "crypto": {
        "cipher": "aes-128-ctr",
        "cipherparams": {"iv": "..."},
        "ciphertext": "...",
        "kdf": "scrypt",
        "kdfparams": {"dklen": 32, "n": 4096, "p": 6, "r": 8, "salt": "..."},
        "mac": "..."
      },
      "id": "3198bc9c-6672-5ab3-d995-4942343ae5b6",
      "version": 1
    }

Unknown fields are ignored on read; missing required fields raise
``ParseError``.  ``validate`` is tag-only and never touches the password.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from keystore_core.cipher import CIPHER_NAME
from keystore_core.errors import (
    ParseError,
    UnsupportedCipherError,
    UnsupportedKdfError,
    UnsupportedVersionError,
)
from keystore_core.hexcodec import strip_hex_prefix
from keystore_core.kdf import (
    SUPPORTED_KDFS,
    KdfParams,
    UnknownKdfParams,
    kdf_params_from_dict,
    kdf_params_to_dict,
)

KEYSTORE_VERSION = 1


@dataclass(frozen=True)
class CipherParams:
    iv: str


@dataclass(frozen=True)
class CryptoSection:
    cipher: str
    cipherparams: CipherParams
    ciphertext: str
    kdf: str
    kdfparams: KdfParams | UnknownKdfParams
    mac: str

    def to_dict(self) -> dict:
        return {
            "cipher": self.cipher,
            "cipherparams": {"iv": self.cipherparams.iv},
            "ciphertext": self.ciphertext,
            "kdf": self.kdf,
            "kdfparams": kdf_params_to_dict(self.kdfparams),
            "mac": self.mac,
        }

    @classmethod
    def from_dict(cls, data: Any) -> CryptoSection:
        if not isinstance(data, dict):
            raise ParseError("crypto must be a JSON object")
        kdf = _required(data, "kdf", str)
        cipherparams = _required(data, "cipherparams", dict)
        return cls(
            cipher=_required(data, "cipher", str),
            cipherparams=CipherParams(iv=_required(cipherparams, "iv", str)),
            ciphertext=_required(data, "ciphertext", str),
            kdf=kdf,
            kdfparams=kdf_params_from_dict(kdf, _required(data, "kdfparams", dict)),
            mac=_required(data, "mac", str),
        )


@dataclass(frozen=True)
class KeystoreDocument:
    version: int
    id: str
    address: str
    crypto: CryptoSection

    # ---- serialisation ----

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "crypto": self.crypto.to_dict(),
            "id": self.id,
            "version": self.version,
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Any) -> KeystoreDocument:
        if not isinstance(data, dict):
            raise ParseError("Keystore document must be a JSON object")
        crypto = data.get("crypto", data.get("Crypto"))
        if crypto is None:
            raise ParseError("Keystore document missing field 'crypto'")
        version = _required(data, "version", int)
        return cls(
            version=version,
            id=_required(data, "id", str),
            address=strip_hex_prefix(_required(data, "address", str)),
            crypto=CryptoSection.from_dict(crypto),
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> KeystoreDocument:
        try:
            data = json.loads(text)
        except (TypeError, ValueError, RecursionError) as exc:
            raise ParseError(f"Keystore document is not valid JSON: {exc}") from exc
        return cls.from_dict(data)

    def suggested_filename(self, now: datetime | None = None) -> str:
        return suggested_filename(self.address, now)

    def __repr__(self) -> str:
        return f"KeystoreDocument(address={self.address}, kdf={self.crypto.kdf})"


def _required(data: dict, key: str, kind: type) -> Any:
    if key not in data or data[key] is None:
        raise ParseError(f"Keystore document missing field {key!r}")
    value = data[key]
    if kind is int and isinstance(value, bool):
        raise ParseError(f"Field {key!r} must be an integer")
    if not isinstance(value, kind):
        raise ParseError(f"Field {key!r} must be of type {kind.__name__}")
    return value


def validate(doc: KeystoreDocument) -> None:
    """
    Structural check run before any key derivation.

    Raises ``UnsupportedVersionError``, ``UnsupportedCipherError`` or
    ``UnsupportedKdfError``, in that order of precedence.
    """
    if doc.version != KEYSTORE_VERSION:
        raise UnsupportedVersionError(doc.version)
    if doc.crypto.cipher != CIPHER_NAME:
        raise UnsupportedCipherError(doc.crypto.cipher)
    if doc.crypto.kdf not in SUPPORTED_KDFS or isinstance(doc.crypto.kdfparams, UnknownKdfParams):
        raise UnsupportedKdfError(doc.crypto.kdf)
    if doc.crypto.kdfparams.kdf != doc.crypto.kdf:
        raise UnsupportedKdfError(doc.crypto.kdf)


def suggested_filename(address: str, now: datetime | None = None) -> str:
    """``UTC--2024-01-31T09-15-02.123456000Z--<address>.json``"""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    nanos = now.microsecond * 1000
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S") + f".{nanos:09d}Z"
    return f"UTC--{stamp}--{strip_hex_prefix(address)}.json"
