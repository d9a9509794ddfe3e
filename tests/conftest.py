"""Shared test fixtures."""

from pathlib import Path

import pytest


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> bytes:
    """Read a raw XML fixture document."""
    return (FIXTURES_DIR / name).read_bytes()


@pytest.fixture
def fixture_xml():
    """Loader for raw XML fixture documents."""
    return read_fixture
