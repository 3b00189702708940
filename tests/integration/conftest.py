"""Shared fixtures for integration tests.

These tests use real infrastructure components (config loader,
provider catalog, diskcache) with mocked HTTP via respx.
"""

from __future__ import annotations

import os

import pytest
import respx


@pytest.fixture(autouse=True)
def _clean_sourcarr_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host SOURCARR_* variables out of config precedence tests."""
    for key in list(os.environ):
        if key.startswith("SOURCARR_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router
