from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

# Ensure in-memory backends for tests to avoid network and filesystem dependencies
os.environ.setdefault("REMOTE_BACKEND", "memory")
os.environ.setdefault("LOCAL_CACHE_BACKEND", "memory")

from study_planner.main import app  # noqa: E402
from study_planner.repositories import Repositories, build_repositories, get_repositories  # noqa: E402
from study_planner.storage import MemoryStorage  # noqa: E402

from .fakes import FlakyRecordStore  # noqa: E402


@pytest.fixture()
def remote() -> FlakyRecordStore:
    return FlakyRecordStore()


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def repos(remote: FlakyRecordStore, storage: MemoryStorage) -> Repositories:
    return build_repositories(remote, storage)


@pytest.fixture()
def client(repos: Repositories):
    """
    TestClient wired to fresh repositories. Requests carry a fixed X-User-Id
    unless a test overrides the header.
    """
    app.dependency_overrides[get_repositories] = lambda: repos
    with TestClient(app, headers={"X-User-Id": "user-1"}) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def guest_client(repos: Repositories):
    """TestClient without any identity header; owners come from the guest cookie."""
    app.dependency_overrides[get_repositories] = lambda: repos
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
