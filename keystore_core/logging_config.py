"""
Logging configuration for the keystore tools.

Two output formats:
  - **human** – coloured, single-line, readable
  - **json**  – newline-delimited JSON; keystore context passed through
    ``extra=`` (address, keystore id, kdf) becomes top-level fields

Every handler installed by ``setup_logging`` carries a ``SecretRedactingFilter``:
hex runs of private-key length or longer and ``password=`` / ``private_key=``
style fields are replaced with ``<redacted>`` before any formatter sees them.
Addresses (40 hex chars) and KDF cost parameters pass through untouched.

Usage:
    from keystore_core.logging_config import setup_logging
    setup_logging(level="DEBUG", fmt="json", log_file="keystore.log")
    logger.info("Keystore saved", extra={"address": doc.address})
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

REDACTED = "<redacted>"

# 32 bytes of hex: private keys, derived keys, MACs, salts
_HEX_SECRET = re.compile(r"\b(?:0[xX])?[0-9a-fA-F]{64,}\b")
_SECRET_FIELD = re.compile(
    r"\b(password|passphrase|private_?key|derived_?key)(\s*[=:]\s*)([^\s,;]+)",
    re.IGNORECASE,
)

# ``extra=`` keys copied into JSON output
CONTEXT_FIELDS = ("address", "keystore_id", "kdf", "path")


def redact(text: str) -> str:
    """Mask secret-looking fields and key-sized hex runs in *text*."""
    text = _SECRET_FIELD.sub(lambda m: f"{m.group(1)}{m.group(2)}{REDACTED}", text)
    return _HEX_SECRET.sub(REDACTED, text)


class SecretRedactingFilter(logging.Filter):
    """Rewrite each record's message through ``redact``; never drops records."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


class _JSONFormatter(logging.Formatter):
    """One JSON object per record, keystore context fields included."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_obj[key] = value
        if record.exc_info and record.exc_info[1]:
            log_obj["exception"] = redact(self.formatException(record.exc_info))
        return json.dumps(log_obj, default=str)


class _HumanFormatter(logging.Formatter):
    """Coloured single line; the address, when known, trails the message."""

    COLOURS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        colour = self.COLOURS.get(record.levelname, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = (
            f"{colour}{ts} [{record.levelname:<7}]{self.RESET} "
            f"{record.name}: {record.getMessage()}"
        )
        address = getattr(record, "address", None)
        if address:
            line += f" [{address}]"
        return line


def setup_logging(
    level: str = "INFO",
    fmt: str = "human",
    log_file: Optional[str] = None,
) -> None:
    """
    Configure the root logger for the CLI.

    ``fmt`` is ``"human"`` or ``"json"``; a *log_file*, when given, always
    receives JSON lines (the file is created owner-only on POSIX).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    redactor = SecretRedactingFilter()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_JSONFormatter() if fmt == "json" else _HumanFormatter())
    console.addFilter(redactor)
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(mode=0o600, exist_ok=True)
        fh = logging.FileHandler(str(path))
        fh.setFormatter(_JSONFormatter())
        fh.addFilter(redactor)
        root.addHandler(fh)
