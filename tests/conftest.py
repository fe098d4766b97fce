"""Pytest configuration.

The `testmail` package lives at the repository root. Depending on how pytest
is invoked the root may not be on `sys.path`, so add it explicitly during
collection.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from testmail.utils.config import Config  # noqa: E402


@pytest.fixture
def empty_config():
    """A Config with no properties file, no system properties and an empty environment."""
    return Config(properties_file=None, system_properties={}, environ={})
