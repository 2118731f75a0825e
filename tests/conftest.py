"""
Pytest configuration and shared fixtures for Anagnorisis tests.

The in-memory host (Document, MutationHub, ManualClock) stands in for the
live tree; nothing in the core is mocked.
"""

import pytest

from anagnorisis.config import RecognizerSettings
from anagnorisis.host import Document, ManualClock


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment variables out of the tests."""
    for name in ("ANAGNORISIS_DELAY_MS", "ANAGNORISIS_STRICT", "ANAGNORISIS_DEBUG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def document():
    return Document()


@pytest.fixture
def hub(document):
    return document.hub


@pytest.fixture
def anchor(document):
    """A <section id="root"> attached below the document root."""
    section = document.create_element("section", {"id": "root"})
    document.root.append_child(section)
    return section


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def settings():
    return RecognizerSettings()
