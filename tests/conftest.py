"""
Test Configuration

Shared fixtures for the KYC tests.
"""

import pytest

from kycscan.infrastructure.db.repository import InMemoryDocumentRepository
from tests.fakes import FakeImageStore


@pytest.fixture
def image_store() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture
def repository() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()
