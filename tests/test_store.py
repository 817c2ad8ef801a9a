"""Tests for the SQLite record store."""

import datetime as _dt
import json

import pytest

from staffboard.store import RecordStore, StoreError, seed_database_if_required


def employee_fields(**overrides):
    fields = {
        "name": "John Doe",
        "email": "john@example.com",
        "designation": "Engineer",
        "salary": 50000,
        "joining_date": _dt.date(2023, 4, 1),
        "status": "active",
    }
    fields.update(overrides)
    return fields


def test_create_employee_assigns_id_and_expands_department(store, department):
    employee = store.create_employee(employee_fields(department_id=department.id))

    assert employee.id
    assert employee.created_at
    assert employee.department is not None
    assert employee.department.name == "Engineering"
    assert store.fetch_employee(employee.id) == employee


def test_fetch_employees_newest_first(store):
    first = store.create_employee(employee_fields(name="First"))
    second = store.create_employee(employee_fields(name="Second"))

    assert [e.id for e in store.fetch_employees()] == [second.id, first.id]


def test_fetch_missing_employee_returns_none(store):
    assert store.fetch_employee("missing") is None


def test_update_employee_changes_only_given_fields(store):
    employee = store.create_employee(employee_fields())

    updated = store.update_employee(employee.id, {"salary": 65000, "status": "inactive"})

    assert updated.salary == 65000
    assert updated.status == "inactive"
    assert updated.name == employee.name


def test_update_missing_row_raises_store_error(store):
    with pytest.raises(StoreError):
        store.update_employee("missing", {"salary": 1})


def test_delete_employee(store):
    employee = store.create_employee(employee_fields())

    store.delete_employee(employee.id)

    assert store.fetch_employee(employee.id) is None


def test_unknown_department_reference_is_a_store_error(store):
    with pytest.raises(StoreError):
        store.create_employee(employee_fields(department_id="no-such-department"))


def test_deleting_department_clears_references(store, department):
    employee = store.create_employee(employee_fields(department_id=department.id))

    store.delete_department(department.id)

    refreshed = store.fetch_employee(employee.id)
    assert refreshed.department_id is None
    assert refreshed.department is None


def test_departments_ordered_by_name(store):
    store.create_department({"name": "Sales"})
    store.create_department({"name": "Engineering"})

    assert [d.name for d in store.fetch_departments()] == ["Engineering", "Sales"]


def test_project_crud(store, department):
    project = store.create_project(
        {"name": "Portal", "status": "planning", "start_date": _dt.date(2024, 1, 1), "department_id": department.id}
    )
    assert project.department.id == department.id

    updated = store.update_project(project.id, {"status": "active"})
    assert updated.status == "active"

    store.delete_project(project.id)
    assert store.fetch_projects() == []


def test_assignments_expand_employee_and_project(store):
    employee = store.create_employee(employee_fields())
    project = store.create_project({"name": "Portal", "status": "active", "start_date": _dt.date(2024, 1, 1)})

    assignment = store.assign_employee(employee.id, project.id, "Lead")
    team = store.fetch_project_employees(project.id)

    assert [a.id for a in team] == [assignment.id]
    assert team[0].employee.name == "John Doe"
    assert team[0].project.name == "Portal"
    assert team[0].role == "Lead"

    store.remove_assignment(assignment.id)
    assert store.fetch_project_employees(project.id) == []


def test_assigning_unknown_employee_is_a_store_error(store):
    project = store.create_project({"name": "Portal", "status": "active", "start_date": _dt.date(2024, 1, 1)})

    with pytest.raises(StoreError):
        store.assign_employee("ghost", project.id, "Team Member")


def test_deleting_employee_removes_assignments(store):
    employee = store.create_employee(employee_fields())
    project = store.create_project({"name": "Portal", "status": "active", "start_date": _dt.date(2024, 1, 1)})
    store.assign_employee(employee.id, project.id, "Team Member")

    store.delete_employee(employee.id)

    assert store.fetch_project_employees(project.id) == []


def test_todos_due_today_ordered_by_priority(store):
    today = _dt.date.today()
    store.create_todo({"title": "low", "due_date": today, "priority": "low"})
    store.create_todo({"title": "high", "due_date": today, "priority": "high"})
    store.create_todo({"title": "later", "due_date": today + _dt.timedelta(days=1), "priority": "high"})
    store.create_todo({"title": "medium", "due_date": today, "priority": "medium"})

    assert [t.title for t in store.fetch_todos_due(today)] == ["high", "medium", "low"]


def test_toggle_todo(store):
    todo = store.create_todo({"title": "Call", "due_date": _dt.date.today()})

    assert store.toggle_todo(todo.id, True).completed is True
    assert store.toggle_todo(todo.id, False).completed is False


def test_unreadable_database_raises_store_error(tmp_path):
    broken = RecordStore(str(tmp_path / "missing-dir" / "db.sqlite"))

    with pytest.raises(StoreError):
        broken.fetch_employees()


def test_seed_loads_empty_database_once(tmp_path):
    seed = tmp_path / "seed.json"
    seed.write_text(
        json.dumps(
            {
                "departments": [{"name": "Engineering"}],
                "employees": [
                    {
                        "name": "Ada",
                        "email": "ada@example.com",
                        "designation": "Engineer",
                        "department": "Engineering",
                        "salary": 1,
                        "joining_date": "2020-01-01",
                        "status": "active",
                    }
                ],
                "projects": [{"name": "Engine", "status": "planning", "start_date": "2024-01-01"}],
            }
        ),
        encoding="utf-8",
    )
    store = RecordStore(str(tmp_path / "seeded.db"))

    seed_database_if_required(store, str(seed))
    seed_database_if_required(store, str(seed))

    employees = store.fetch_employees()
    assert len(employees) == 1
    assert employees[0].department.name == "Engineering"
    assert len(store.fetch_projects()) == 1
    assert len(store.fetch_departments()) == 1


def test_seed_skips_when_departments_were_all_deleted(tmp_path):
    seed = tmp_path / "seed.json"
    seed.write_text(
        json.dumps(
            {
                "departments": [{"name": "Engineering"}],
                "employees": [
                    {
                        "name": "Ada",
                        "email": "ada@example.com",
                        "designation": "Engineer",
                        "department": "Engineering",
                        "salary": 1,
                        "joining_date": "2020-01-01",
                        "status": "active",
                    }
                ],
            }
        ),
        encoding="utf-8",
    )
    store = RecordStore(str(tmp_path / "seeded.db"))
    seed_database_if_required(store, str(seed))
    for dept in store.fetch_departments():
        store.delete_department(dept.id)

    seed_database_if_required(store, str(seed))

    assert store.fetch_departments() == []
    assert [e.name for e in store.fetch_employees()] == ["Ada"]
