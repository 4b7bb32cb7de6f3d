"""
Key derivation for keystore documents.

The parameters are a closed tagged union:

  - ``ScryptParams``  (``kdf = "scrypt"``): n, r, p, dklen, salt
  - ``Pbkdf2Params``  (``kdf = "pbkdf2"``): c, prf, dklen, salt

``derive`` is purely parametric: it never substitutes defaults, every cost
value comes from the params it is handed.  Generation defaults belong to the
orchestrator (see ``keystore_core.keystore.GenerationPolicy``).
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Union

from Crypto.Protocol.KDF import scrypt as _scrypt

from keystore_core.errors import EncodingError, ParseError, UnsupportedKdfError
from keystore_core.hexcodec import from_hex

logger = logging.getLogger("keystore_core.kdf")

KDF_SCRYPT = "scrypt"
KDF_PBKDF2 = "pbkdf2"
SUPPORTED_KDFS = frozenset({KDF_SCRYPT, KDF_PBKDF2})

# bytes [0:16) feed AES-128, bytes [16:32) feed the MAC
MIN_DKLEN = 32

# PBKDF2 "prf" tag -> hashlib digest name
PRF_DIGESTS = {
    "hmac-sha256": "sha256",
    "hmac-sha512": "sha512",
    "hmac-sha1": "sha1",
}


def _require_int(name: str, value: Any, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise EncodingError(f"Invalid KDF parameter {name}={value!r}")


def _require_hex(name: str, value: Any) -> None:
    if not isinstance(value, str):
        raise EncodingError(f"Invalid KDF parameter {name}={value!r}")


@dataclass(frozen=True)
class ScryptParams:
    n: int
    r: int
    p: int
    dklen: int
    salt: str  # hex, no prefix

    kdf: str = field(default=KDF_SCRYPT, init=False, repr=False)

    def __post_init__(self):
        _require_int("n", self.n, 2)
        if self.n & (self.n - 1):
            raise EncodingError(f"scrypt n must be a power of two, got {self.n}")
        _require_int("r", self.r, 1)
        _require_int("p", self.p, 1)
        _require_int("dklen", self.dklen, MIN_DKLEN)
        _require_hex("salt", self.salt)


@dataclass(frozen=True)
class Pbkdf2Params:
    c: int
    dklen: int
    prf: str
    salt: str  # hex, no prefix

    kdf: str = field(default=KDF_PBKDF2, init=False, repr=False)

    def __post_init__(self):
        _require_int("c", self.c, 1)
        _require_int("dklen", self.dklen, MIN_DKLEN)
        _require_hex("salt", self.salt)


@dataclass(frozen=True)
class UnknownKdfParams:
    """Params read for a KDF tag this package does not implement.

    Kept so that parsing stays forward compatible and validation, not the
    parser, reports ``UnsupportedKdfError``.
    """
    kdf: str
    raw: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # read-only snapshot; the caller keeps its own dict
        object.__setattr__(self, "raw", MappingProxyType(dict(self.raw)))


KdfParams = Union[ScryptParams, Pbkdf2Params]


def derive(password: bytes, params: KdfParams | UnknownKdfParams) -> bytes:
    """Stretch *password* into ``params.dklen`` bytes.

    ``UnknownKdfParams`` raises ``UnsupportedKdfError`` with its tag; anything
    outside the union is a programming error (``TypeError``).
    """
    match params:
        case ScryptParams(n=n, r=r, p=p, dklen=dklen, salt=salt):
            logger.debug(f"scrypt n={n} r={r} p={p} dklen={dklen}")
            try:
                return _scrypt(password, from_hex(salt), dklen, N=n, r=r, p=p)
            except ValueError as exc:
                raise EncodingError(f"scrypt rejected its parameters: {exc}") from exc
        case Pbkdf2Params(c=c, dklen=dklen, prf=prf, salt=salt):
            digest = PRF_DIGESTS.get(prf)
            if digest is None:
                raise UnsupportedKdfError(prf)
            logger.debug(f"pbkdf2 prf={prf} c={c} dklen={dklen}")
            return hashlib.pbkdf2_hmac(digest, password, from_hex(salt), c, dklen=dklen)
        case UnknownKdfParams(kdf=tag):
            raise UnsupportedKdfError(tag)
        case _:
            raise TypeError(f"Not a KDF params variant: {type(params).__name__}")


# ── wire conversion ────────────────────────────────────────────────

def kdf_params_from_dict(kdf: str, raw: Any) -> KdfParams | UnknownKdfParams:
    """Build the params variant selected by the *kdf* tag from a JSON object."""
    if not isinstance(raw, dict):
        raise ParseError("kdfparams must be a JSON object")
    try:
        match kdf:
            case "scrypt":
                return ScryptParams(
                    n=raw["n"], r=raw["r"], p=raw["p"],
                    dklen=raw["dklen"], salt=raw["salt"],
                )
            case "pbkdf2":
                return Pbkdf2Params(
                    c=raw["c"], dklen=raw["dklen"],
                    prf=raw["prf"], salt=raw["salt"],
                )
            case _:
                return UnknownKdfParams(kdf=str(kdf), raw=dict(raw))
    except KeyError as exc:
        raise ParseError(f"kdfparams missing field {exc.args[0]!r}") from exc
    except EncodingError as exc:
        raise ParseError(str(exc)) from exc


def kdf_params_to_dict(params: KdfParams | UnknownKdfParams) -> dict:
    match params:
        case ScryptParams():
            return {
                "dklen": params.dklen,
                "n": params.n,
                "p": params.p,
                "r": params.r,
                "salt": params.salt,
            }
        case Pbkdf2Params():
            return {
                "c": params.c,
                "dklen": params.dklen,
                "prf": params.prf,
                "salt": params.salt,
            }
        case UnknownKdfParams():
            return dict(params.raw)
        case _:
            raise TypeError(f"Not a KDF params variant: {type(params).__name__}")
