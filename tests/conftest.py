"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from tests.helpers.fake_directory import FakeDirectory, FakeDirectoryClient


@pytest.fixture
def directory() -> FakeDirectory:
    """Return an empty in-memory code host."""
    return FakeDirectory()


@pytest.fixture
def client(directory: FakeDirectory) -> FakeDirectoryClient:
    """Return a directory client for ``directory`` with no token bound."""
    return FakeDirectoryClient(directory)
