"""Pytest configuration for the Scribe editor tests."""

import os

import pytest

# Use offscreen platform for headless testing
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')


@pytest.fixture
def fold_flags():
    """A host-owned fold flag map."""
    return {}
