"""
Directory of keystore files, one JSON document per wallet.

Usage:
    store = KeystoreStore("data/keystore")
    path = store.save(doc)                 # UTC--<timestamp>--<address>.json
    doc = store.load(path)
    latest = store.find("9cc8fb...")
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from keystore_core.document import KeystoreDocument, suggested_filename
from keystore_core.errors import ParseError
from keystore_core.hexcodec import strip_hex_prefix

logger = logging.getLogger("keystore_core.storage")

SECURE_FILE_MODE = 0o600


class KeystoreStore:
    """Thin filesystem wrapper; the orchestrator never touches disk itself."""

    def __init__(self, directory: str | Path = "data/keystore"):
        self.directory = Path(directory)

    def save(self, doc: KeystoreDocument, now: datetime | None = None) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / suggested_filename(doc.address, now)
        path.write_text(doc.to_json(), encoding="utf-8")
        if os.name == "posix":
            os.chmod(path, SECURE_FILE_MODE)
        logger.info("Keystore saved", extra={"address": doc.address, "path": str(path)})
        return path

    def load(self, path: str | Path) -> KeystoreDocument:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(f"Cannot read keystore file {path}: {exc}") from exc
        return KeystoreDocument.from_json(text)

    def list_files(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(self.directory.glob("UTC--*.json"))

    def find(self, address: str) -> Path | None:
        """Most recent keystore for *address* (filenames sort by time)."""
        suffix = f"--{strip_hex_prefix(address).lower()}.json"
        matches = [p for p in self.list_files() if p.name.lower().endswith(suffix)]
        return matches[-1] if matches else None
