"""
Tests for keystore_core.document — model, validator and JSON wire format.

Covers:
  - to_dict / to_json field names
  - from_json: unknown fields ignored, "Crypto" alias, 0x address
  - Missing / mistyped fields -> ParseError
  - validate(): version, cipher and kdf tags (order of precedence)
  - suggested_filename format
"""

from __future__ import annotations

import copy
import json
from datetime import datetime, timezone

import pytest

from keystore_core.document import (
    KeystoreDocument,
    suggested_filename,
    validate,
)
from keystore_core.errors import (
    ParseError,
    UnsupportedCipherError,
    UnsupportedKdfError,
    UnsupportedVersionError,
)
from keystore_core.kdf import Pbkdf2Params, ScryptParams, UnknownKdfParams

RAW = {
    "address": "008aeeda4d805471df9b2a5b0f38a0c3bcba786b",
    "crypto": {
        "cipher": "aes-128-ctr",
        "cipherparams": {"iv": "6087dab2f9fdbbfaddc31a909735c1e6"},
        "ciphertext": "5318b4d5bcd28de64ee5559e671353e16f075ecae9f99c7a79a38af5f869aa46",
        "kdf": "pbkdf2",
        "kdfparams": {
            "c": 262144,
            "dklen": 32,
            "prf": "hmac-sha256",
            "salt": "ae3cd4e7013836a3df6bd7241b12db061dbe2c6785853cce422d148a624ce0bd",
        },
        "mac": "517ead924a9d0dc3124507e3393d175ce3ff7c1e96529c6c555ce9e51205e9b2",
    },
    "id": "3198bc9c-6672-5ab3-d995-4942343ae5b6",
    "version": 1,
}


def _raw(**crypto_overrides):
    data = copy.deepcopy(RAW)
    data["crypto"].update(crypto_overrides)
    return data


# ═══════════════════════════════════════════════════════════════════
#  Parsing
# ═══════════════════════════════════════════════════════════════════

class TestParse:
    def test_from_dict(self):
        doc = KeystoreDocument.from_dict(RAW)
        assert doc.version == 1
        assert doc.address == RAW["address"]
        assert doc.crypto.cipherparams.iv == "6087dab2f9fdbbfaddc31a909735c1e6"
        assert isinstance(doc.crypto.kdfparams, Pbkdf2Params)
        assert doc.crypto.kdfparams.c == 262144

    def test_round_trip_through_json(self):
        doc = KeystoreDocument.from_dict(RAW)
        again = KeystoreDocument.from_json(doc.to_json())
        assert again == doc
        assert json.loads(doc.to_json()) == RAW

    def test_unknown_fields_ignored(self):
        data = copy.deepcopy(RAW)
        data["meta"] = {"wallet": "main"}
        data["crypto"]["extra"] = True
        data["crypto"]["cipherparams"]["tag"] = "x"
        assert KeystoreDocument.from_dict(data) == KeystoreDocument.from_dict(RAW)

    def test_capitalised_crypto_alias(self):
        data = copy.deepcopy(RAW)
        data["Crypto"] = data.pop("crypto")
        assert KeystoreDocument.from_dict(data).crypto.kdf == "pbkdf2"

    def test_address_prefix_stripped(self):
        data = copy.deepcopy(RAW)
        data["address"] = "0x" + RAW["address"]
        assert KeystoreDocument.from_dict(data).address == RAW["address"]

    def test_scrypt_variant_selected_by_tag(self):
        data = _raw(kdf="scrypt", kdfparams={"n": 16, "r": 1, "p": 1, "dklen": 32, "salt": "ab"})
        assert isinstance(KeystoreDocument.from_dict(data).crypto.kdfparams, ScryptParams)

    def test_unknown_kdf_parses(self):
        data = _raw(kdf="argon2", kdfparams={"m": 65536})
        doc = KeystoreDocument.from_dict(data)
        assert isinstance(doc.crypto.kdfparams, UnknownKdfParams)
        assert doc.to_dict()["crypto"]["kdfparams"] == {"m": 65536}

    @pytest.mark.parametrize("field", ["address", "crypto", "id", "version"])
    def test_missing_top_level_field(self, field):
        data = copy.deepcopy(RAW)
        del data[field]
        with pytest.raises(ParseError):
            KeystoreDocument.from_dict(data)

    @pytest.mark.parametrize("field", ["cipher", "cipherparams", "ciphertext", "kdf", "kdfparams", "mac"])
    def test_missing_crypto_field(self, field):
        data = copy.deepcopy(RAW)
        del data["crypto"][field]
        with pytest.raises(ParseError):
            KeystoreDocument.from_dict(data)

    def test_missing_iv(self):
        with pytest.raises(ParseError):
            KeystoreDocument.from_dict(_raw(cipherparams={}))

    def test_wrong_types(self):
        data = copy.deepcopy(RAW)
        data["version"] = "1"
        with pytest.raises(ParseError):
            KeystoreDocument.from_dict(data)
        data["version"] = True
        with pytest.raises(ParseError):
            KeystoreDocument.from_dict(data)

    @pytest.mark.parametrize("text", [
        "", "not json", "[]", "42", "null", b"\xff\xfe\x00",
        pytest.param("[" * 200_000, id="deeply-nested"),
    ])
    def test_bad_json(self, text):
        with pytest.raises(ParseError):
            KeystoreDocument.from_json(text)

    def test_repr_is_short(self):
        r = repr(KeystoreDocument.from_dict(RAW))
        assert RAW["crypto"]["ciphertext"] not in r


# ═══════════════════════════════════════════════════════════════════
#  Validation
# ═══════════════════════════════════════════════════════════════════

class TestValidate:
    def test_valid(self):
        validate(KeystoreDocument.from_dict(RAW))

    def test_version(self):
        data = copy.deepcopy(RAW)
        data["version"] = 2
        with pytest.raises(UnsupportedVersionError):
            validate(KeystoreDocument.from_dict(data))

    def test_v3_label_rejected(self):
        data = copy.deepcopy(RAW)
        data["version"] = 3
        with pytest.raises(UnsupportedVersionError):
            validate(KeystoreDocument.from_dict(data))

    def test_cipher(self):
        with pytest.raises(UnsupportedCipherError):
            validate(KeystoreDocument.from_dict(_raw(cipher="aes-256-cbc")))

    def test_kdf(self):
        with pytest.raises(UnsupportedKdfError) as exc_info:
            validate(KeystoreDocument.from_dict(_raw(kdf="argon2", kdfparams={})))
        assert exc_info.value.tag == "argon2"

    def test_version_checked_before_cipher(self):
        data = _raw(cipher="aes-256-cbc", kdf="argon2", kdfparams={})
        data["version"] = 2
        with pytest.raises(UnsupportedVersionError):
            validate(KeystoreDocument.from_dict(data))

    def test_cipher_checked_before_kdf(self):
        data = _raw(cipher="aes-256-cbc", kdf="argon2", kdfparams={})
        with pytest.raises(UnsupportedCipherError):
            validate(KeystoreDocument.from_dict(data))


# ═══════════════════════════════════════════════════════════════════
#  Filenames
# ═══════════════════════════════════════════════════════════════════

class TestFilename:
    def test_format(self):
        now = datetime(2024, 1, 31, 9, 15, 2, 123456, tzinfo=timezone.utc)
        assert suggested_filename("abcd", now) == (
            "UTC--2024-01-31T09-15-02.123456000Z--abcd.json"
        )

    def test_prefix_stripped(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert suggested_filename("0xabcd", now).endswith("--abcd.json")

    def test_default_now(self):
        name = suggested_filename("abcd")
        assert name.startswith("UTC--")
        assert name.endswith("Z--abcd.json")

    def test_document_method(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        doc = KeystoreDocument.from_dict(RAW)
        assert doc.suggested_filename(now) == suggested_filename(RAW["address"], now)
