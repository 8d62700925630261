# backend/tests/conftest.py
"""
Pytest configuration for PetKeeper family backend tests.

- Ensures that the project root (backend/) is added to sys.path
  so that `import app.*` works correctly in tests.
- Forces the in-memory backend so that no test touches Firebase.
- Resets process-wide singletons between tests.
"""

import os
import sys
from pathlib import Path

import pytest


def _ensure_project_root_in_sys_path() -> None:
    # This file is located at: backend/tests/conftest.py
    # parents[1] -> backend/
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)

    if project_root_str not in sys.path:
        # Insert at the beginning so it has priority over site-packages, etc.
        sys.path.insert(0, project_root_str)


def _ensure_test_env_vars() -> None:
    """
    Set environment variables required for tests.

    FAMILY_BACKEND=memory keeps every default dependency in-process
    (InMemoryDocumentStore / LoggingPushTransport / StaticIdTokenVerifier).
    """
    os.environ["FAMILY_BACKEND"] = "memory"
    os.environ.pop("FIREBASE_CREDENTIALS_PATH", None)


_ensure_project_root_in_sys_path()
_ensure_test_env_vars()


@pytest.fixture(autouse=True)
def _reset_family_state():
    from app.family.state import reset_state

    reset_state()
    yield
    reset_state()
