from __future__ import annotations

import os
import sys

import pytest


def pytest_configure():
    # Ensure `src/` is importable when the package is not installed
    root = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    src_path = os.path.join(root, "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


@pytest.fixture
def secret_key():
    from vss_client import SecretKey

    return SecretKey(bytes.fromhex("11" * 32))


@pytest.fixture
def other_key():
    from vss_client import SecretKey

    return SecretKey(bytes.fromhex("22" * 32))


@pytest.fixture
def server():
    from fakes import FakeVssServer

    return FakeVssServer()
