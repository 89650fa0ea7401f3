"""
Repository-level pytest configuration (showcase-safe).

Why this exists:
  - Provide safe placeholder credentials for the in-memory login scenarios
  - Route engine logs through the same Loguru format the engine uses at runtime

Important:
  Values below are placeholders. Real runs should load credentials from a
  secure secret manager in CI/CD, never from this file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from autotest_auth.logging_setup import configure_logging


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """
    Set demo-safe environment defaults if not already provided by the user/CI.

    Names are deliberately outside the AUTH_* / TARGET_* namespace so they
    never act as configuration overrides.
    """
    defaults = {
        "DEMO_TARGET_URL": "http://localhost:3000",
        "DEMO_USERNAME": "demo_user",
        "DEMO_PASSWORD": "demo_password",
        "LOG_LEVEL": "DEBUG",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    configure_logging(level=os.environ["LOG_LEVEL"])
    yield
