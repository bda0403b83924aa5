import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from market_evidence.config import (  # noqa: E402
    GOOGLE_CSE_API_KEY_ENV,
    GOOGLE_CSE_CX_ENV,
    SERPER_API_KEY_ENV,
)


@pytest.fixture(autouse=True)
def clean_search_env(monkeypatch):
    """Start every test with no provider credentials."""
    for name in (SERPER_API_KEY_ENV, GOOGLE_CSE_API_KEY_ENV, GOOGLE_CSE_CX_ENV):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def serper_env(monkeypatch):
    monkeypatch.setenv(SERPER_API_KEY_ENV, "serper-test-key")


@pytest.fixture
def google_cse_env(monkeypatch):
    monkeypatch.setenv(GOOGLE_CSE_API_KEY_ENV, "cse-test-key")
    monkeypatch.setenv(GOOGLE_CSE_CX_ENV, "cse-test-cx")
