"""
TOML-based configuration for the keystore tools.

Loads settings from a TOML file and/or environment variables.
Environment variables take precedence over file values.

Usage:
    from keystore_core.config import load_config
    cfg = load_config("keystore.toml")
    doc = encrypt(password, address, key, policy=cfg.keystore.policy())
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from keystore_core.keystore import DEFAULT_POLICY, GenerationPolicy
from keystore_core.master_key import DEFAULT_ITERATIONS, MASTER_KEY_DIR, MASTER_KEY_FILE

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib  # type: ignore[import]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[import,no-redef]


@dataclass
class KeystoreConfig:
    """Where keystore files live and how new ones are sealed.

    The scrypt values only apply to *new* documents; decryption always uses
    the parameters stored in the document.
    """
    directory: str = "data/keystore"
    scrypt_n: int = DEFAULT_POLICY.n
    scrypt_r: int = DEFAULT_POLICY.r
    scrypt_p: int = DEFAULT_POLICY.p
    dklen: int = DEFAULT_POLICY.dklen
    salt_size: int = DEFAULT_POLICY.salt_size

    def policy(self) -> GenerationPolicy:
        return GenerationPolicy(
            n=self.scrypt_n,
            r=self.scrypt_r,
            p=self.scrypt_p,
            dklen=self.dklen,
            salt_size=self.salt_size,
        )


@dataclass
class MasterKeyConfig:
    """Install-scoped master password record."""
    path: str = str(Path("data") / MASTER_KEY_DIR / MASTER_KEY_FILE)
    iterations: int = DEFAULT_ITERATIONS


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "human"   # "human" or "json"
    file: str | None = None


@dataclass
class AppConfig:
    """Top-level configuration container."""
    keystore: KeystoreConfig = field(default_factory=KeystoreConfig)
    master_key: MasterKeyConfig = field(default_factory=MasterKeyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _merge(dc: Any, raw: dict[str, Any]) -> None:
    """Merge a raw dict into a dataclass instance (in-place)."""
    for key, value in raw.items():
        key_under = key.replace("-", "_")
        if hasattr(dc, key_under):
            setattr(dc, key_under, value)


def load_config(path: str | None = None) -> AppConfig:
    """
    Load configuration from a TOML file, then overlay environment variables.

    Env-var mapping:
        KEYSTORE_DIR               -> keystore.directory
        KEYSTORE_SCRYPT_N          -> keystore.scrypt_n
        KEYSTORE_SCRYPT_P          -> keystore.scrypt_p
        KEYSTORE_MASTER_KEY_PATH   -> master_key.path
        KEYSTORE_MASTER_ITERATIONS -> master_key.iterations
        KEYSTORE_LOG_LEVEL         -> logging.level
        KEYSTORE_LOG_FMT           -> logging.format
    """
    cfg = AppConfig()

    # ── TOML file ────────────────────────────────────────────────
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            for section_name, section_dc in [
                ("keystore", cfg.keystore),
                ("master_key", cfg.master_key),
                ("logging", cfg.logging),
            ]:
                if section_name in data:
                    _merge(section_dc, data[section_name])

    # ── Environment variable overrides ───────────────────────────
    if v := os.environ.get("KEYSTORE_DIR"):
        cfg.keystore.directory = v
    if v := os.environ.get("KEYSTORE_SCRYPT_N"):
        cfg.keystore.scrypt_n = int(v)
    if v := os.environ.get("KEYSTORE_SCRYPT_P"):
        cfg.keystore.scrypt_p = int(v)
    if v := os.environ.get("KEYSTORE_MASTER_KEY_PATH"):
        cfg.master_key.path = v
    if v := os.environ.get("KEYSTORE_MASTER_ITERATIONS"):
        cfg.master_key.iterations = int(v)
    if v := os.environ.get("KEYSTORE_LOG_LEVEL"):
        cfg.logging.level = v.upper()
    if v := os.environ.get("KEYSTORE_LOG_FMT"):
        cfg.logging.format = v

    return cfg
