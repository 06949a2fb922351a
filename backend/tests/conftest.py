from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from whentomeet.main import create_app
from whentomeet.services.roster_store import RosterStore
from whentomeet.services.slot_store import SlotStore
from whentomeet.services.types import Profile
from whentomeet.storage.memory_store import MemoryBlobStore

WEEK = "2024-03-03"  # a Sunday
OTHER_WEEK = "2024-03-10"


@pytest.fixture
def blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def slots(blobs) -> SlotStore:
    return SlotStore(blobs)


@pytest.fixture
def roster(blobs, slots) -> RosterStore:
    return RosterStore(blobs, slots)


@pytest.fixture
def ann() -> Profile:
    return Profile(id="u1", name="Ann", color="#ef4444")


@pytest.fixture
def bob() -> Profile:
    return Profile(id="u2", name="Bob", color="#3b82f6")


@pytest.fixture
def app(blobs):
    return create_app(blobs)


@pytest.fixture
def http(app) -> TestClient:
    return TestClient(app)
