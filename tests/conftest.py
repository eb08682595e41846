"""
conftest.py: keep process-wide state clean between tests.

The pipeline mutates os.environ and the working directory on purpose, so
every test gets both snapshotted before it runs and restored afterwards.
"""
import os
import sys

import pytest

# Ensure the package is importable without installation
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))


_ENV_KEYS_TO_PROTECT = [
    "TREESITTER_CATALA_VARIANT",
    "TREESITTER_CATALA_LANG",
    "OPAMYES",
]


@pytest.fixture(autouse=True)
def _clean_env_vars():
    """Snapshot and restore the scoped build variables after each test."""
    saved = {}
    for key in _ENV_KEYS_TO_PROTECT:
        if key in os.environ:
            saved[key] = os.environ[key]

    yield

    for key in _ENV_KEYS_TO_PROTECT:
        if key in saved:
            os.environ[key] = saved[key]
        else:
            os.environ.pop(key, None)


@pytest.fixture(autouse=True)
def _restore_cwd():
    cwd = os.getcwd()
    yield
    os.chdir(cwd)
