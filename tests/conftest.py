"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from dynadapter import AdapterFactory

# =============================================================================
# Fixtures: Fresh Factories
# =============================================================================


@pytest.fixture
def factory():
    """Create a fresh AdapterFactory with an empty cache for each test."""
    yield AdapterFactory(namespace="tests.generated")


# =============================================================================
# Fixtures: Sample Wrapped Classes
# =============================================================================


@pytest.fixture
def text_sink_class():
    """A wrapped class that records the text written to it."""

    class TextSink:
        def __init__(self):
            self.lines = []

        def write(self, text: str) -> None:
            self.lines.append(text)

        def __repr__(self):
            return f"TextSink(lines={self.lines!r})"

    return TextSink
