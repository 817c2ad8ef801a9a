"""
Record models.

Rows coming out of the record store are validated into these models before
anything else sees them, so downstream code can rely on typed values.
"""
import datetime as _dt
from typing import ClassVar, Literal, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

EmployeeStatus = Literal["active", "inactive"]
ProjectStatus = Literal["planning", "active", "completed"]
TodoPriority = Literal["low", "medium", "high"]


class Department(BaseModel):
    id: str
    name: str
    description: str = ""
    created_at: str


class Employee(BaseModel):
    id: str
    name: str
    email: str
    phone: str = ""
    dob: Optional[_dt.date] = None
    designation: str
    department_id: Optional[str] = None
    salary: float = Field(ge=0)
    joining_date: _dt.date
    experience: str = "0"
    status: EmployeeStatus
    profile_photo_url: Optional[str] = None
    created_at: str
    department: Optional[Department] = None


class Project(BaseModel):
    id: str
    name: str
    description: str = ""
    status: ProjectStatus
    start_date: _dt.date
    end_date: Optional[_dt.date] = None
    department_id: Optional[str] = None
    created_at: str
    department: Optional[Department] = None


class ProjectAssignment(BaseModel):
    id: str
    employee_id: str
    project_id: str
    role: str = "Team Member"
    assigned_at: str
    employee: Optional[Employee] = None
    project: Optional[Project] = None


class Todo(BaseModel):
    id: str
    title: str
    description: str = ""
    due_date: _dt.date
    priority: TodoPriority = "medium"
    completed: bool = False
    created_at: str


# ---------------------------------------------------------------------------
# Input payloads


class DepartmentForm(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""


class PartialUpdate(BaseModel):
    """Base for partial updates.

    Omitted fields are left alone.  An explicit null is only accepted for the
    columns listed in ``nullable``; the rest are NOT NULL in the store.
    """

    nullable: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data):
        if isinstance(data, dict):
            for key, value in data.items():
                if value is None and key in cls.model_fields and key not in cls.nullable:
                    raise ValueError(f"{key} cannot be null")
        return data


class DepartmentUpdate(PartialUpdate):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class EmployeeForm(BaseModel):
    """Fields accepted when creating an employee."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: str = ""
    dob: Optional[_dt.date] = None
    designation: str = Field(min_length=1)
    department_id: Optional[str] = None
    salary: float = Field(ge=0)
    joining_date: _dt.date
    experience: str = "0"
    status: EmployeeStatus = "active"
    profile_photo_url: Optional[str] = None


class EmployeeUpdate(PartialUpdate):
    nullable: ClassVar[Tuple[str, ...]] = ("dob", "department_id", "profile_photo_url")

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    dob: Optional[_dt.date] = None
    designation: Optional[str] = Field(default=None, min_length=1)
    department_id: Optional[str] = None
    salary: Optional[float] = Field(default=None, ge=0)
    joining_date: Optional[_dt.date] = None
    experience: Optional[str] = None
    status: Optional[EmployeeStatus] = None
    profile_photo_url: Optional[str] = None


class ProjectForm(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    status: ProjectStatus = "planning"
    start_date: _dt.date
    end_date: Optional[_dt.date] = None
    department_id: Optional[str] = None


class ProjectUpdate(PartialUpdate):
    nullable: ClassVar[Tuple[str, ...]] = ("end_date", "department_id")

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    start_date: Optional[_dt.date] = None
    end_date: Optional[_dt.date] = None
    department_id: Optional[str] = None


class AssignmentForm(BaseModel):
    employee_id: str = Field(min_length=1)
    role: str = "Team Member"


class TodoForm(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    due_date: _dt.date
    priority: TodoPriority = "medium"
    completed: bool = False


class TodoUpdate(PartialUpdate):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    due_date: Optional[_dt.date] = None
    priority: Optional[TodoPriority] = None
    completed: Optional[bool] = None
