"""
SQLite-backed record store.

Holds departments, employees, projects, project assignments and todos.
Each entity type supports fetch-all, fetch-by-id, create, update and delete.
Employees and projects come back with their department expanded, and
assignments with their employee and project expanded.

Every failure surfaces as a single opaque :class:`StoreError`.
"""
import datetime as _dt
import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from pydantic import ValidationError

from .models import Department, Employee, Project, ProjectAssignment, Todo

logger = logging.getLogger(__name__)

SEEDED_TABLES = ("departments", "employees", "projects")


class StoreError(Exception):
    """Raised when a record store operation fails."""


SCHEMA = """
CREATE TABLE IF NOT EXISTS departments (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS employees (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL,
    phone TEXT NOT NULL DEFAULT '',
    dob TEXT,
    designation TEXT NOT NULL,
    department_id TEXT REFERENCES departments(id) ON DELETE SET NULL,
    salary REAL NOT NULL DEFAULT 0,
    joining_date TEXT NOT NULL,
    experience TEXT NOT NULL DEFAULT '0',
    status TEXT NOT NULL DEFAULT 'active',
    profile_photo_url TEXT,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'planning',
    start_date TEXT NOT NULL,
    end_date TEXT,
    department_id TEXT REFERENCES departments(id) ON DELETE SET NULL,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS employee_projects (
    id TEXT PRIMARY KEY,
    employee_id TEXT NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
    project_id TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    role TEXT NOT NULL DEFAULT 'Team Member',
    assigned_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS todos (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    due_date TEXT NOT NULL,
    priority TEXT NOT NULL DEFAULT 'medium',
    completed INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_employees_department ON employees(department_id);
CREATE INDEX IF NOT EXISTS idx_projects_department ON projects(department_id);
CREATE INDEX IF NOT EXISTS idx_employee_projects_project ON employee_projects(project_id);
CREATE INDEX IF NOT EXISTS idx_todos_due_date ON todos(due_date);
"""

# high > medium > low
_PRIORITY_RANK = "CASE priority WHEN 'high' THEN 3 WHEN 'medium' THEN 2 ELSE 1 END"


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat()


def _to_db(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (_dt.date, _dt.datetime)):
        return value.isoformat()
    return value


def _validate(model, row: dict):
    try:
        return model.model_validate(row)
    except ValidationError as exc:
        raise StoreError(f"Malformed {model.__name__} record {row.get('id')!r}") from exc


class RecordStore:
    """Request/response access to the dashboard's tables."""

    def __init__(self, db_path: str):
        self.db_path = str(db_path)

    def get_connection(self) -> sqlite3.Connection:
        """Return a SQLite connection with row factory and foreign keys configured."""
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection, committing on success and closing afterwards."""
        try:
            conn = self.get_connection()
        except sqlite3.Error as exc:
            raise StoreError(f"Unable to open database: {exc}") from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.error("Record store error: %s", exc)
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def init_schema(self) -> None:
        with self.connection() as conn:
            conn.executescript(SCHEMA)

    # -----------------------------------------------------------------------
    # Generic helpers

    def _select(self, sql: str, params: tuple = ()) -> List[dict]:
        with self.connection() as conn:
            return [dict(row) for row in conn.execute(sql, params).fetchall()]

    def _select_one(self, sql: str, params: tuple = ()) -> Optional[dict]:
        rows = self._select(sql, params)
        return rows[0] if rows else None

    def _insert(self, table: str, fields: Dict[str, Any], stamp: str = "created_at") -> str:
        record = {k: _to_db(v) for k, v in fields.items()}
        record["id"] = _new_id()
        record[stamp] = _now()
        columns = ", ".join(record)
        placeholders = ", ".join(["?"] * len(record))
        with self.connection() as conn:
            conn.execute(
                f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                tuple(record.values()),
            )
        return record["id"]

    def _update(self, table: str, record_id: str, fields: Dict[str, Any]) -> None:
        with self.connection() as conn:
            if fields:
                assignments = ", ".join(f"{name} = ?" for name in fields)
                cur = conn.execute(
                    f"UPDATE {table} SET {assignments} WHERE id = ?",
                    tuple(_to_db(v) for v in fields.values()) + (record_id,),
                )
                found = cur.rowcount > 0
            else:
                cur = conn.execute(f"SELECT 1 FROM {table} WHERE id = ?", (record_id,))
                found = cur.fetchone() is not None
        if not found:
            raise StoreError(f"No {table} row with id {record_id!r}")

    def _delete(self, table: str, record_id: str) -> None:
        with self.connection() as conn:
            conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))

    def has_records(self, table: str) -> bool:
        return self._select_one(f"SELECT 1 AS present FROM {table} LIMIT 1") is not None

    def _departments_by_id(self) -> Dict[str, Department]:
        return {d.id: d for d in self.fetch_departments()}

    # -----------------------------------------------------------------------
    # Departments

    def fetch_departments(self) -> List[Department]:
        rows = self._select("SELECT * FROM departments ORDER BY name ASC")
        return [_validate(Department, row) for row in rows]

    def fetch_department(self, department_id: str) -> Optional[Department]:
        row = self._select_one("SELECT * FROM departments WHERE id = ?", (department_id,))
        return _validate(Department, row) if row else None

    def create_department(self, fields: Dict[str, Any]) -> Department:
        return self.fetch_department(self._insert("departments", fields))

    def update_department(self, department_id: str, fields: Dict[str, Any]) -> Department:
        self._update("departments", department_id, fields)
        return self.fetch_department(department_id)

    def delete_department(self, department_id: str) -> None:
        self._delete("departments", department_id)

    # -----------------------------------------------------------------------
    # Employees

    def _employee(self, row: dict, departments: Dict[str, Department]) -> Employee:
        row["department"] = departments.get(row.get("department_id"))
        return _validate(Employee, row)

    def fetch_employees(self) -> List[Employee]:
        departments = self._departments_by_id()
        rows = self._select("SELECT * FROM employees ORDER BY created_at DESC, rowid DESC")
        return [self._employee(row, departments) for row in rows]

    def fetch_employee(self, employee_id: str) -> Optional[Employee]:
        row = self._select_one("SELECT * FROM employees WHERE id = ?", (employee_id,))
        if not row:
            return None
        return self._employee(row, self._departments_by_id())

    def create_employee(self, fields: Dict[str, Any]) -> Employee:
        return self.fetch_employee(self._insert("employees", fields))

    def update_employee(self, employee_id: str, fields: Dict[str, Any]) -> Employee:
        self._update("employees", employee_id, fields)
        return self.fetch_employee(employee_id)

    def delete_employee(self, employee_id: str) -> None:
        self._delete("employees", employee_id)

    # -----------------------------------------------------------------------
    # Projects

    def _project(self, row: dict, departments: Dict[str, Department]) -> Project:
        row["department"] = departments.get(row.get("department_id"))
        return _validate(Project, row)

    def fetch_projects(self) -> List[Project]:
        departments = self._departments_by_id()
        rows = self._select("SELECT * FROM projects ORDER BY created_at DESC, rowid DESC")
        return [self._project(row, departments) for row in rows]

    def fetch_project(self, project_id: str) -> Optional[Project]:
        row = self._select_one("SELECT * FROM projects WHERE id = ?", (project_id,))
        if not row:
            return None
        return self._project(row, self._departments_by_id())

    def create_project(self, fields: Dict[str, Any]) -> Project:
        return self.fetch_project(self._insert("projects", fields))

    def update_project(self, project_id: str, fields: Dict[str, Any]) -> Project:
        self._update("projects", project_id, fields)
        return self.fetch_project(project_id)

    def delete_project(self, project_id: str) -> None:
        self._delete("projects", project_id)

    # -----------------------------------------------------------------------
    # Project assignments

    def fetch_assignment(self, assignment_id: str) -> Optional[ProjectAssignment]:
        row = self._select_one("SELECT * FROM employee_projects WHERE id = ?", (assignment_id,))
        if not row:
            return None
        row["employee"] = self.fetch_employee(row["employee_id"])
        row["project"] = self.fetch_project(row["project_id"])
        return _validate(ProjectAssignment, row)

    def fetch_project_employees(self, project_id: str) -> List[ProjectAssignment]:
        """Return the assignments of one project with employee and project expanded."""
        rows = self._select(
            "SELECT * FROM employee_projects WHERE project_id = ? ORDER BY assigned_at, rowid",
            (project_id,),
        )
        if not rows:
            return []
        employees = {e.id: e for e in self.fetch_employees()}
        project = self.fetch_project(project_id)
        assignments = []
        for row in rows:
            row["employee"] = employees.get(row["employee_id"])
            row["project"] = project
            assignments.append(_validate(ProjectAssignment, row))
        return assignments

    def assign_employee(self, employee_id: str, project_id: str, role: str) -> ProjectAssignment:
        assignment_id = self._insert(
            "employee_projects",
            {"employee_id": employee_id, "project_id": project_id, "role": role},
            stamp="assigned_at",
        )
        return self.fetch_assignment(assignment_id)

    def remove_assignment(self, assignment_id: str) -> None:
        self._delete("employee_projects", assignment_id)

    # -----------------------------------------------------------------------
    # Todos

    def fetch_todos(self) -> List[Todo]:
        rows = self._select(f"SELECT * FROM todos ORDER BY {_PRIORITY_RANK} DESC, due_date DESC")
        return [_validate(Todo, row) for row in rows]

    def fetch_todos_due(self, day: _dt.date) -> List[Todo]:
        rows = self._select(
            f"SELECT * FROM todos WHERE due_date = ? ORDER BY {_PRIORITY_RANK} DESC, created_at ASC",
            (day.isoformat(),),
        )
        return [_validate(Todo, row) for row in rows]

    def fetch_todo(self, todo_id: str) -> Optional[Todo]:
        row = self._select_one("SELECT * FROM todos WHERE id = ?", (todo_id,))
        return _validate(Todo, row) if row else None

    def create_todo(self, fields: Dict[str, Any]) -> Todo:
        return self.fetch_todo(self._insert("todos", fields))

    def update_todo(self, todo_id: str, fields: Dict[str, Any]) -> Todo:
        self._update("todos", todo_id, fields)
        return self.fetch_todo(todo_id)

    def toggle_todo(self, todo_id: str, completed: bool) -> Todo:
        return self.update_todo(todo_id, {"completed": completed})

    def delete_todo(self, todo_id: str) -> None:
        self._delete("todos", todo_id)


def seed_database_if_required(store: RecordStore, seed_path: Optional[str]) -> None:
    """Create the tables and load seed records into an empty database.

    The seed file is JSON with ``departments``, ``employees`` and ``projects``
    lists.  Employees and projects name their department with a
    ``department`` key which is resolved to the created department's id.
    Nothing is loaded once any seeded table holds rows, or when the file
    does not exist.
    """
    store.init_schema()
    if any(store.has_records(table) for table in SEEDED_TABLES):
        return
    if not seed_path or not Path(seed_path).exists():
        return
    data = json.loads(Path(seed_path).read_text(encoding="utf-8"))
    department_ids = {}
    for dept in data.get("departments", []):
        created = store.create_department(dept)
        department_ids[created.name] = created.id
    for kind, create in (("employees", store.create_employee), ("projects", store.create_project)):
        for record in data.get(kind, []):
            fields = dict(record)
            fields["department_id"] = department_ids.get(fields.pop("department", None))
            create(fields)
    logger.info("Seeded database %s from %s", store.db_path, seed_path)
