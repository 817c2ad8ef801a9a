"""Pytest configuration and fixtures."""

import os
import tempfile

# Point the module-level app at a throwaway database before main is imported
_TMP = tempfile.mkdtemp(prefix="staffboard-tests-")
os.environ["DBPATH"] = os.path.join(_TMP, "import.db")
os.environ["IMAGE_ROOT"] = os.path.join(_TMP, "media")
os.environ["SEED_PATH"] = ""

import datetime as _dt  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from staffboard.models import Employee  # noqa: E402
from staffboard.store import RecordStore  # noqa: E402


def make_employee(idx, **overrides):
    """Build an Employee record without touching the store."""
    fields = {
        "id": f"emp-{idx}",
        "name": f"Employee {idx:02d}",
        "email": f"employee{idx}@example.com",
        "designation": "Engineer",
        "department_id": "dept-1",
        "salary": 50000 + idx,
        "joining_date": _dt.date(2020, 1, 1) + _dt.timedelta(days=idx),
        "status": "active",
        "created_at": "2024-01-01T00:00:00+00:00",
    }
    fields.update(overrides)
    return Employee(**fields)


@pytest.fixture
def store(tmp_path):
    """Create a record store backed by a temporary SQLite file."""
    store = RecordStore(str(tmp_path / "test.db"))
    store.init_schema()
    return store


@pytest.fixture
def department(store):
    return store.create_department({"name": "Engineering", "description": "Builds things"})


@pytest.fixture
def app(tmp_path):
    from main import create_app

    return create_app(
        db_path=str(tmp_path / "app.db"),
        seed_path=None,
        image_root=str(tmp_path / "media"),
        company="Acme",
        page_size=10,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def employee_payload():
    return {
        "name": "John Doe",
        "email": "john.doe@example.com",
        "phone": "(555) 123-4567",
        "designation": "Engineer",
        "salary": 50000,
        "joining_date": "2023-04-01",
        "status": "active",
    }
