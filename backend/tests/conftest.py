"""Pytest config to ensure project root is on sys.path during test collection.

The API imports both `backend` and `dbc2bsm` from the repository root, which
is not on sys.path when pytest runs from another working directory.
"""
import os
import sys

_HERE = os.path.dirname(__file__)
_ROOT = os.path.abspath(os.path.join(_HERE, ".."))  # backend/
PROJECT_ROOT = os.path.abspath(os.path.join(_ROOT, ".."))  # repo root

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault("ENV", "test")

import pytest


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("DBC2BSM_CONFIG", "DBC2BSM_IP_ADDRESS", "DBC2BSM_PORT", "DBC2BSM_BAUDRATE",
                 "DBC2BSM_LIBRARY", "DBC2BSM_TIMESTAMPS", "DBC2BSM_OVERSIZE_POLICY"):
        monkeypatch.delenv(name, raising=False)
