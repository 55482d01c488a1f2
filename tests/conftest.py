"""Shared fixtures: record stores for both backends, repository, service and an HTTP client."""

import pytest
from fastapi.testclient import TestClient

from student_registry.app.core.config import Settings
from student_registry.app.core.db import MemoryRecordStore, SQLiteRecordStore
from student_registry.app.main import create_app
from student_registry.app.services.student_repository import StudentRepository
from student_registry.app.services.student_service import StudentService


# ---------------------------------------------------------------------------
# Stores: every store-backed test runs against both backends
# ---------------------------------------------------------------------------

BACKENDS = ["memory", "sqlite"]


def make_store(backend: str, tmp_path):
    if backend == "memory":
        store = MemoryRecordStore()
    else:
        store = SQLiteRecordStore(str(tmp_path / "registry.db"))
    store.init()
    return store


@pytest.fixture(params=BACKENDS)
def store(request, tmp_path):
    return make_store(request.param, tmp_path)


@pytest.fixture
def repository(store):
    return StudentRepository(store)


@pytest.fixture
def service(repository):
    return StudentService(repository)


@pytest.fixture
def alice():
    return {"id": "1004803", "name": "Alice", "gpa": 4.0}


@pytest.fixture
def bob():
    return {"id": "1004529", "name": "Bob", "gpa": 3.6}


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "api.db")


@pytest.fixture
def client(db_path):
    app = create_app(
        store=SQLiteRecordStore(db_path),
        app_settings=Settings(log_level="WARNING"),
    )
    with TestClient(app) as test_client:
        yield test_client
