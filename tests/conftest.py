"""
Shared pytest fixtures for the keystore test suite.
"""

import os
import sys

import pytest

# keystore_cli lives at the project root, next to the package
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from keystore_core.keystore import GenerationPolicy, encrypt
from keystore_core.master_key import MasterKeyStore
from keystore_core.storage import KeystoreStore

# cheap scrypt settings so tests that loop over many decrypts stay fast
FAST_POLICY = GenerationPolicy(n=16, r=1, p=1)

ADDRESS = "9cc8fb6881cfee981d7869e6c18c74d0f1a2b8b"
PRIVATE_KEY = "00" * 31 + "01"
PASSWORD = "correcthorsebatterystaple"


@pytest.fixture
def fast_policy():
    return FAST_POLICY


@pytest.fixture
def fast_doc():
    """Document sealed with FAST_POLICY for the standard test wallet."""
    return encrypt(PASSWORD, ADDRESS, PRIVATE_KEY, policy=FAST_POLICY)


@pytest.fixture
def keystore_store(tmp_path):
    return KeystoreStore(tmp_path / "keystore")


@pytest.fixture
def master_store(tmp_path):
    """Master key store with a low iteration count."""
    return MasterKeyStore.in_data_dir(tmp_path, iterations=1_000)
