"""
FastAPI application for the staff dashboard.

Employees, departments and projects are stored in a SQLite record store and
exposed through both an HTML user interface and a JSON API.  The HTML
employee list supports case-insensitive search, designation / department /
status filters, sortable columns and pagination, all computed in memory over
the snapshot held by the application state.  The dashboard summarises
headcounts, project statuses and today's todos.

To run the application locally use:

    uvicorn main:app --reload

When the application starts for the first time it creates the SQLite
database (``staffboard.db`` unless ``DBPATH`` is set) and seeds it from
``data/seed.json`` if that file exists.
"""
import datetime as _dt
import logging
from dataclasses import replace
from typing import List, Optional, Tuple
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, FastAPI, File, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from starlette.datastructures import UploadFile as StarletteUploadFile

from staffboard import settings
from staffboard.middleware import ClientIPLoggingMiddleware, ContextProcessorMiddleware
from staffboard.modal import assign_employee_modal, project_form_modal
from staffboard.models import (
    AssignmentForm,
    Department,
    DepartmentForm,
    DepartmentUpdate,
    Employee,
    EmployeeForm,
    EmployeeUpdate,
    Project,
    ProjectAssignment,
    ProjectForm,
    ProjectUpdate,
    Todo,
    TodoForm,
    TodoUpdate,
)
from staffboard.photos import PhotoStorage
from staffboard.query import (
    SORT_FIELDS,
    Criteria,
    clamp_page,
    designations,
    filter_and_sort,
    query,
    toggle_sort,
)
from staffboard.state import AppState
from staffboard.stats import (
    department_stats,
    employee_stats,
    monthly_hires,
    project_stats,
    project_status_breakdown,
    recent_employees,
    todo_stats,
)
from staffboard.store import RecordStore, StoreError, seed_database_if_required
from staffboard.validators import blank_to_none, is_valid_email, normalize_phone

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=settings.TEMPLATES_DIR)
templates.env.filters["money"] = lambda value: f"${float(value or 0):,.0f}"


# ---------------------------------------------------------------------------
# Dependencies

def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_state(request: Request) -> AppState:
    return request.app.state.data


def get_photos(request: Request) -> PhotoStorage:
    return request.app.state.photos


def redirect(path: str, **params) -> RedirectResponse:
    """Redirect after a form post, carrying an optional notice or error."""
    query_string = urlencode({k: v for k, v in params.items() if v})
    url = f"{path}?{query_string}" if query_string else path
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(part) for part in err.get("loc", ())) or "form"
    return f"Invalid value for {field}: {err.get('msg')}"


# ---------------------------------------------------------------------------
# Form parsing helpers

def employee_fields_from_form(data: dict) -> Tuple[Optional[dict], Optional[str]]:
    """Validate a submitted employee form.

    Returns ``(fields, None)`` on success or ``(None, message)`` when a value
    is rejected.  The phone number is normalised to (XXX) XXX-XXXX.
    """
    phone = normalize_phone(data.get("phone"))
    if phone is None:
        return None, "Phone must be a valid 10-digit number."
    email = (data.get("email") or "").strip()
    if not is_valid_email(email):
        return None, "Email must be a valid email address."
    try:
        form = EmployeeForm(
            name=(data.get("name") or "").strip(),
            email=email,
            phone=phone,
            dob=blank_to_none(data.get("dob")),
            designation=(data.get("designation") or "").strip(),
            department_id=blank_to_none(data.get("department_id")),
            salary=data.get("salary") or 0,
            joining_date=blank_to_none(data.get("joining_date")),
            experience=(data.get("experience") or "0").strip(),
            status=data.get("status") or "active",
        )
    except ValidationError as exc:
        return None, _first_error(exc)
    return form.model_dump(exclude={"profile_photo_url"}), None


def project_fields_from_form(data: dict) -> Tuple[Optional[dict], Optional[str]]:
    try:
        form = ProjectForm(
            name=(data.get("name") or "").strip(),
            description=(data.get("description") or "").strip(),
            status=data.get("status") or "planning",
            start_date=blank_to_none(data.get("start_date")),
            end_date=blank_to_none(data.get("end_date")),
            department_id=blank_to_none(data.get("department_id")),
        )
    except ValidationError as exc:
        return None, _first_error(exc)
    return form.model_dump(), None


async def read_upload(upload) -> Tuple[bytes, str]:
    """Return the bytes and filename of a form upload, or empty values."""
    if not isinstance(upload, StarletteUploadFile) or not upload.filename:
        return b"", ""
    data = await upload.read()
    await upload.close()
    return data, upload.filename


# ---------------------------------------------------------------------------
# API endpoints

api = APIRouter(prefix="/api")


@api.get("/employees", response_model=List[Employee])
def api_list_employees(state: AppState = Depends(get_state)):
    """Return the current employee snapshot, newest first."""
    return state.employees


@api.get("/employees/query")
def api_query_employees(
    request: Request,
    search: str = "",
    designation: str = "",
    department_id: str = "",
    status_: str = Query("", alias="status"),
    sort_field: str = "name",
    sort_order: str = "asc",
    page: int = 1,
    page_size: Optional[int] = None,
    state: AppState = Depends(get_state),
):
    """Run the employee list query over the snapshot.

    Pages past the end come back empty; clamping is the caller's job.
    """
    criteria = Criteria(
        search_text=search,
        designation=designation,
        department_id=department_id,
        status=status_,
        sort_field=sort_field,
        sort_order=sort_order,
        page=page,
        page_size=page_size or request.app.state.page_size,
    )
    result = query(state.employees, criteria)
    return {
        "page": [e.model_dump(mode="json") for e in result.page],
        "total_matched": result.total_matched,
        "total_pages": result.total_pages,
    }


@api.get("/employees/{employee_id}", response_model=Employee)
def api_get_employee(employee_id: str, store: RecordStore = Depends(get_store)):
    """Return details for a single employee or 404 if not found."""
    employee = store.fetch_employee(employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


@api.post("/employees", response_model=Employee, status_code=status.HTTP_201_CREATED)
def api_create_employee(
    payload: EmployeeForm,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    """Create a new employee; the store assigns ``id`` and ``created_at``."""
    employee = store.create_employee(payload.model_dump())
    state.refresh_employees()
    return employee


@api.put("/employees/{employee_id}", response_model=Employee)
def api_update_employee(
    employee_id: str,
    payload: EmployeeUpdate,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    """Update an existing employee with only the fields supplied."""
    if not store.fetch_employee(employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    employee = store.update_employee(employee_id, payload.model_dump(exclude_unset=True))
    state.refresh_employees()
    return employee


@api.delete("/employees/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_employee(
    employee_id: str,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
    photos: PhotoStorage = Depends(get_photos),
):
    """Delete an employee and their stored photo."""
    employee = store.fetch_employee(employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    store.delete_employee(employee_id)
    if employee.profile_photo_url:
        photos.delete_photo(employee.profile_photo_url)
    state.refresh_employees()
    return


@api.post("/employees/{employee_id}/photo", response_model=Employee)
async def api_upload_photo(
    employee_id: str,
    photo: UploadFile = File(...),
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
    photos: PhotoStorage = Depends(get_photos),
):
    """Replace an employee's profile photo with the uploaded image."""
    employee = store.fetch_employee(employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    data, filename = await read_upload(photo)
    url = photos.upload_photo(data, filename, employee_id)
    if not url:
        raise HTTPException(status_code=400, detail="Photo upload failed")
    updated = store.update_employee(employee_id, {"profile_photo_url": url})
    if employee.profile_photo_url:
        photos.delete_photo(employee.profile_photo_url)
    state.refresh_employees()
    return updated


@api.get("/departments", response_model=List[Department])
def api_list_departments(state: AppState = Depends(get_state)):
    return state.departments


@api.get("/departments/{department_id}", response_model=Department)
def api_get_department(department_id: str, store: RecordStore = Depends(get_store)):
    department = store.fetch_department(department_id)
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")
    return department


@api.post("/departments", response_model=Department, status_code=status.HTTP_201_CREATED)
def api_create_department(
    payload: DepartmentForm,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    department = store.create_department(payload.model_dump())
    state.refresh_departments()
    return department


@api.put("/departments/{department_id}", response_model=Department)
def api_update_department(
    department_id: str,
    payload: DepartmentUpdate,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    if not store.fetch_department(department_id):
        raise HTTPException(status_code=404, detail="Department not found")
    department = store.update_department(department_id, payload.model_dump(exclude_unset=True))
    state.refresh_all()
    return department


@api.delete("/departments/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_department(
    department_id: str,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    """Delete a department; its employees and projects lose the reference."""
    if not store.fetch_department(department_id):
        raise HTTPException(status_code=404, detail="Department not found")
    store.delete_department(department_id)
    state.refresh_all()
    return


@api.get("/projects", response_model=List[Project])
def api_list_projects(state: AppState = Depends(get_state)):
    return state.projects


@api.get("/projects/{project_id}", response_model=Project)
def api_get_project(project_id: str, store: RecordStore = Depends(get_store)):
    project = store.fetch_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@api.post("/projects", response_model=Project, status_code=status.HTTP_201_CREATED)
def api_create_project(
    payload: ProjectForm,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    project = store.create_project(payload.model_dump())
    state.refresh_projects()
    return project


@api.put("/projects/{project_id}", response_model=Project)
def api_update_project(
    project_id: str,
    payload: ProjectUpdate,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    if not store.fetch_project(project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    project = store.update_project(project_id, payload.model_dump(exclude_unset=True))
    state.refresh_projects()
    return project


@api.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_project(
    project_id: str,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    if not store.fetch_project(project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    store.delete_project(project_id)
    state.refresh_projects()
    return


@api.get("/projects/{project_id}/employees", response_model=List[ProjectAssignment])
def api_project_employees(project_id: str, store: RecordStore = Depends(get_store)):
    """List the employees assigned to a project."""
    if not store.fetch_project(project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return store.fetch_project_employees(project_id)


@api.post(
    "/projects/{project_id}/employees",
    response_model=ProjectAssignment,
    status_code=status.HTTP_201_CREATED,
)
def api_assign_employee(
    project_id: str,
    payload: AssignmentForm,
    store: RecordStore = Depends(get_store),
):
    """Assign an employee to a project with the given role."""
    if not store.fetch_project(project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    if not store.fetch_employee(payload.employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    return store.assign_employee(payload.employee_id, project_id, payload.role)


@api.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_remove_assignment(assignment_id: str, store: RecordStore = Depends(get_store)):
    if not store.fetch_assignment(assignment_id):
        raise HTTPException(status_code=404, detail="Assignment not found")
    store.remove_assignment(assignment_id)
    return


@api.get("/todos", response_model=List[Todo])
def api_list_todos(store: RecordStore = Depends(get_store)):
    return store.fetch_todos()


@api.get("/todos/today", response_model=List[Todo])
def api_todays_todos(store: RecordStore = Depends(get_store)):
    return store.fetch_todos_due(_dt.date.today())


@api.post("/todos", response_model=Todo, status_code=status.HTTP_201_CREATED)
def api_create_todo(payload: TodoForm, store: RecordStore = Depends(get_store)):
    return store.create_todo(payload.model_dump())


@api.put("/todos/{todo_id}", response_model=Todo)
def api_update_todo(todo_id: str, payload: TodoUpdate, store: RecordStore = Depends(get_store)):
    if not store.fetch_todo(todo_id):
        raise HTTPException(status_code=404, detail="Todo not found")
    return store.update_todo(todo_id, payload.model_dump(exclude_unset=True))


@api.post("/todos/{todo_id}/toggle", response_model=Todo)
def api_toggle_todo(todo_id: str, store: RecordStore = Depends(get_store)):
    """Flip a todo between pending and completed."""
    todo = store.fetch_todo(todo_id)
    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found")
    return store.toggle_todo(todo_id, not todo.completed)


@api.delete("/todos/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_todo(todo_id: str, store: RecordStore = Depends(get_store)):
    if not store.fetch_todo(todo_id):
        raise HTTPException(status_code=404, detail="Todo not found")
    store.delete_todo(todo_id)
    return


@api.get("/stats")
def api_stats(state: AppState = Depends(get_state), store: RecordStore = Depends(get_store)):
    """Counters and chart series for the dashboard."""
    return {
        "employees": employee_stats(state.employees),
        "projects": project_stats(state.projects),
        "departments": department_stats(state.departments, state.employees),
        "todos": todo_stats(store.fetch_todos_due(_dt.date.today())),
        "monthly_hires": monthly_hires(state.employees),
        "project_status": project_status_breakdown(state.projects),
    }


# ---------------------------------------------------------------------------
# HTML views

views = APIRouter()


@views.get("/", response_class=HTMLResponse)
def dashboard(request: Request, state: AppState = Depends(get_state), store: RecordStore = Depends(get_store)):
    """Render the dashboard: counters, charts and today's todos."""
    error = request.query_params.get("error")
    try:
        todos = store.fetch_todos_due(_dt.date.today())
    except StoreError:
        todos = []
        error = error or "Failed to load today's todos"
    emp_stats = employee_stats(state.employees)
    dept_stats = department_stats(state.departments, state.employees)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "employee_stats": emp_stats,
            "project_stats": project_stats(state.projects),
            "department_stats": dept_stats,
            "max_department_count": max([d["count"] for d in dept_stats["department_counts"]] or [0]),
            "todo_stats": todo_stats(todos),
            "todos": todos,
            "monthly_hires": monthly_hires(state.employees),
            "project_status": project_status_breakdown(state.projects),
            "recent_employees": recent_employees(state.employees),
            "loading": state.loading,
            "notice": request.query_params.get("notice"),
            "error": error,
        },
    )


def _criteria_from_request(request: Request, page_size: int) -> Criteria:
    params = request.query_params
    try:
        page = int(params.get("page", 1))
    except ValueError:
        page = 1
    return Criteria(
        search_text=params.get("search", ""),
        designation=params.get("designation", ""),
        department_id=params.get("department_id", ""),
        status=params.get("status", ""),
        sort_field=params.get("sort_field", "name"),
        sort_order=params.get("sort_order", "asc"),
        page=page,
        page_size=page_size,
    )


def _list_url(criteria: Criteria, path: str = "/employees", **changes) -> str:
    params = {
        "search": criteria.search_text,
        "designation": criteria.designation,
        "department_id": criteria.department_id,
        "status": criteria.status,
        "sort_field": criteria.sort_field,
        "sort_order": criteria.sort_order,
        "page": criteria.page,
    }
    params.update(changes)
    return f"{path}?" + urlencode({k: v for k, v in params.items() if v not in ("", None)})


@views.get("/employees", response_class=HTMLResponse)
def employee_list(request: Request, state: AppState = Depends(get_state)):
    """
    Render the employee list.  Supports case-insensitive search over name and
    email, designation / department / status filters, sortable columns and
    pagination.

    A page past the end (after a filter shrinks the result) is pulled back to
    the last page.
    """
    criteria = _criteria_from_request(request, request.app.state.page_size)
    result = query(state.employees, criteria)
    page = clamp_page(criteria.page, result.total_pages)
    if page != criteria.page:
        criteria = replace(criteria, page=page)
        result = query(state.employees, criteria)

    sort_urls = {}
    for field in SORT_FIELDS:
        next_field, next_order = toggle_sort(criteria.sort_field, criteria.sort_order, field)
        sort_urls[field] = _list_url(criteria, sort_field=next_field, sort_order=next_order, page=1)

    return templates.TemplateResponse(
        request,
        "employees.html",
        {
            "employees": result.page,
            "total_matched": result.total_matched,
            "total_pages": result.total_pages,
            "criteria": criteria,
            "designations": designations(state.employees),
            "departments": state.departments,
            "sort_urls": sort_urls,
            "prev_url": _list_url(criteria, page=page - 1) if page > 1 else None,
            "next_url": _list_url(criteria, page=page + 1) if page < result.total_pages else None,
            "print_url": _list_url(criteria, path="/employees/print", page=None),
            "notice": request.query_params.get("notice"),
            "error": request.query_params.get("error"),
        },
    )


@views.get("/employees/print", response_class=HTMLResponse)
def employee_print(request: Request, state: AppState = Depends(get_state)):
    """Printable table of every employee matching the current filters."""
    criteria = _criteria_from_request(request, request.app.state.page_size)
    return templates.TemplateResponse(
        request,
        "print.html",
        {"employees": filter_and_sort(state.employees, criteria)},
    )


def _render_employee_form(request, state, values, form_action, error=None, employee_id=None):
    return templates.TemplateResponse(
        request,
        "edit_employee.html",
        {
            "values": values,
            "departments": state.departments,
            "form_action": form_action,
            "employee_id": employee_id,
            "error": error,
        },
    )


@views.get("/employees/new", response_class=HTMLResponse)
def new_employee_form(request: Request, state: AppState = Depends(get_state)):
    """Render form for creating a new employee."""
    values = {"status": "active", "experience": "0", "joining_date": _dt.date.today().isoformat()}
    return _render_employee_form(request, state, values, "/employees/new")


@views.post("/employees/new", response_class=HTMLResponse)
async def create_employee(
    request: Request,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
    photos: PhotoStorage = Depends(get_photos),
):
    """Handle creation of a new employee via the form."""
    form = await request.form()
    # Extract file before casting to dict to preserve UploadFile instance
    upload = form.get("photo")
    data = {k: v for k, v in form.items() if isinstance(v, str)}
    fields, error = employee_fields_from_form(data)
    if error:
        return _render_employee_form(request, state, data, "/employees/new", error=error)
    photo_bytes, filename = await read_upload(upload)
    url = None
    try:
        employee = store.create_employee(fields)
        if photo_bytes:
            url = photos.upload_photo(photo_bytes, filename, employee.id)
            if url:
                store.update_employee(employee.id, {"profile_photo_url": url})
    except StoreError:
        if url:
            photos.delete_photo(url)
        return redirect("/employees", error="Failed to create employee")
    state.refresh_employees()
    return redirect("/employees", notice="Employee created successfully")


@views.get("/employees/{employee_id}/edit", response_class=HTMLResponse)
def edit_employee_form(
    employee_id: str,
    request: Request,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    """Render form for editing an existing employee."""
    employee = store.fetch_employee(employee_id)
    if not employee:
        return redirect("/employees", error="Employee not found")
    values = employee.model_dump(mode="json", exclude={"department"})
    return _render_employee_form(
        request, state, values, f"/employees/{employee_id}/edit", employee_id=employee_id
    )


@views.post("/employees/{employee_id}/edit", response_class=HTMLResponse)
async def update_employee(
    employee_id: str,
    request: Request,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
    photos: PhotoStorage = Depends(get_photos),
):
    """Handle updating an existing employee via the form."""
    current = store.fetch_employee(employee_id)
    if not current:
        return redirect("/employees", error="Employee not found")
    form = await request.form()
    upload = form.get("photo")  # potential UploadFile
    data = {k: v for k, v in form.items() if isinstance(v, str)}
    fields, error = employee_fields_from_form(data)
    if error:
        values = {**data, "profile_photo_url": current.profile_photo_url}
        return _render_employee_form(
            request, state, values, f"/employees/{employee_id}/edit",
            error=error, employee_id=employee_id,
        )
    # Uploaded image (if valid) replaces the current photo; otherwise keep it
    photo_bytes, filename = await read_upload(upload)
    if photo_bytes:
        url = photos.upload_photo(photo_bytes, filename, employee_id)
        if url:
            fields["profile_photo_url"] = url
    try:
        store.update_employee(employee_id, fields)
    except StoreError:
        if fields.get("profile_photo_url"):
            photos.delete_photo(fields["profile_photo_url"])
        return redirect("/employees", error="Failed to update employee")
    if fields.get("profile_photo_url") and current.profile_photo_url:
        photos.delete_photo(current.profile_photo_url)
    state.refresh_employees()
    return redirect("/employees", notice="Employee updated successfully")


@views.post("/employees/{employee_id}/delete")
def delete_employee(
    employee_id: str,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
    photos: PhotoStorage = Depends(get_photos),
):
    """Delete an employee from the list view."""
    employee = store.fetch_employee(employee_id)
    if employee:
        try:
            store.delete_employee(employee_id)
        except StoreError:
            return redirect("/employees", error="Failed to delete employee")
        if employee.profile_photo_url:
            photos.delete_photo(employee.profile_photo_url)
        state.refresh_employees()
    return redirect("/employees", notice="Employee deleted successfully")


@views.get("/projects", response_class=HTMLResponse)
def project_list(
    request: Request,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    """Render projects with their team members.

    ``?modal=new``, ``?modal=edit&project_id=...`` and
    ``?modal=assign&project_id=...`` open the matching dialog.
    """
    error = request.query_params.get("error")
    project_employees = {}
    try:
        # One fetch per project, as the team lists are small
        for project in state.projects:
            project_employees[project.id] = store.fetch_project_employees(project.id)
    except StoreError:
        error = error or "Failed to load project teams"

    form_modal = project_form_modal()
    assign_modal = assign_employee_modal()
    modal = request.query_params.get("modal")
    project_id = request.query_params.get("project_id")
    selected = next((p for p in state.projects if p.id == project_id), None)
    if modal == "new":
        form_modal.open(project=None, form_action="/projects/new")
    elif modal == "edit" and selected:
        form_modal.open(project=selected, form_action=f"/projects/{selected.id}/edit")
    elif modal == "assign" and selected:
        assign_modal.open(project=selected)

    return templates.TemplateResponse(
        request,
        "projects.html",
        {
            "projects": state.projects,
            "project_employees": project_employees,
            "project_status": project_status_breakdown(state.projects),
            "departments": state.departments,
            "active_employees": [e for e in state.employees if e.status == "active"],
            "form_modal": form_modal,
            "assign_modal": assign_modal,
            "notice": request.query_params.get("notice"),
            "error": error,
        },
    )


@views.post("/projects/new")
async def create_project(
    request: Request,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    form = await request.form()
    fields, error = project_fields_from_form(dict(form))
    if error:
        return redirect("/projects", error=error)
    try:
        store.create_project(fields)
    except StoreError:
        return redirect("/projects", error="Failed to create project")
    state.refresh_projects()
    return redirect("/projects", notice="Project created successfully!")


@views.post("/projects/{project_id}/edit")
async def update_project(
    project_id: str,
    request: Request,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    form = await request.form()
    fields, error = project_fields_from_form(dict(form))
    if error:
        return redirect("/projects", error=error)
    try:
        store.update_project(project_id, fields)
    except StoreError:
        return redirect("/projects", error="Failed to update project")
    state.refresh_projects()
    return redirect("/projects", notice="Project updated successfully!")


@views.post("/projects/{project_id}/delete")
def delete_project(
    project_id: str,
    store: RecordStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    try:
        store.delete_project(project_id)
    except StoreError:
        return redirect("/projects", error="Failed to delete project")
    state.refresh_projects()
    return redirect("/projects", notice="Project deleted successfully")


@views.post("/projects/{project_id}/assign")
async def assign_employee(project_id: str, request: Request, store: RecordStore = Depends(get_store)):
    """Assign the selected employee to the project."""
    form = await request.form()
    employee_id = (form.get("employee_id") or "").strip()
    role = (form.get("role") or "").strip() or "Team Member"
    if not employee_id:
        return redirect("/projects", error="Choose an employee")
    try:
        store.assign_employee(employee_id, project_id, role)
    except StoreError:
        return redirect("/projects", error="Failed to assign employee")
    return redirect("/projects", notice="Employee assigned successfully!")


@views.post("/assignments/{assignment_id}/delete")
def remove_assignment(assignment_id: str, store: RecordStore = Depends(get_store)):
    try:
        store.remove_assignment(assignment_id)
    except StoreError:
        return redirect("/projects", error="Failed to remove employee")
    return redirect("/projects", notice="Employee removed successfully")


@views.post("/todos/new")
async def create_todo(request: Request, store: RecordStore = Depends(get_store)):
    """Add a todo from the dashboard; the due date defaults to today."""
    form = await request.form()
    try:
        todo = TodoForm(
            title=(form.get("title") or "").strip(),
            description=(form.get("description") or "").strip(),
            due_date=blank_to_none(form.get("due_date")) or _dt.date.today(),
            priority=form.get("priority") or "medium",
        )
    except ValidationError as exc:
        return redirect("/", error=_first_error(exc))
    try:
        store.create_todo(todo.model_dump())
    except StoreError:
        return redirect("/", error="Failed to add todo")
    return redirect("/", notice="Todo added")


@views.post("/todos/{todo_id}/toggle")
def toggle_todo(todo_id: str, store: RecordStore = Depends(get_store)):
    todo = store.fetch_todo(todo_id)
    if not todo:
        return redirect("/", error="Todo not found")
    try:
        store.toggle_todo(todo_id, not todo.completed)
    except StoreError:
        return redirect("/", error="Failed to update todo")
    return redirect("/")


@views.post("/todos/{todo_id}/delete")
def delete_todo(todo_id: str, store: RecordStore = Depends(get_store)):
    try:
        store.delete_todo(todo_id)
    except StoreError:
        return redirect("/", error="Failed to delete todo")
    return redirect("/", notice="Todo deleted")


@views.get("/media/{filename:path}")
def media_file(filename: str, photos: PhotoStorage = Depends(get_photos)):
    """Serve stored photos from IMAGE_ROOT/IMAGE_SUBDIR."""
    fullpath = photos.path_for(filename)
    if fullpath is None or not fullpath.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    headers = {"Cache-Control": "public, max-age=30"}
    return FileResponse(fullpath, headers=headers)


# ---------------------------------------------------------------------------
# Application setup

def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Record store request failed on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": "Record store request failed"})


def create_app(
    db_path: Optional[str] = None,
    seed_path: Optional[str] = settings.SEED_PATH,
    image_root: Optional[str] = None,
    image_subdir: Optional[str] = None,
    company: Optional[str] = None,
    page_size: Optional[int] = None,
) -> FastAPI:
    """Build the application with its record store, state and routes.

    Arguments left as None fall back to :mod:`staffboard.settings`.
    """
    logging.basicConfig(level=settings.LOG_LEVEL)
    company = company or settings.COMPANY

    app = FastAPI(title=f"{company} Staff Dashboard")

    # Add middleware
    app.add_middleware(ClientIPLoggingMiddleware)
    app.add_middleware(ContextProcessorMiddleware, company=company)
    app.add_exception_handler(StoreError, store_error_handler)

    templates.env.globals["company"] = company

    store = RecordStore(db_path or settings.DB_PATH)
    seed_database_if_required(store, seed_path)
    state = AppState(store)
    state.refresh_all()

    app.state.store = store
    app.state.data = state
    app.state.photos = PhotoStorage(image_root or settings.IMAGE_ROOT, image_subdir or settings.IMAGE_SUBDIR)
    app.state.page_size = page_size or settings.ITEMS_PER_PAGE

    app.include_router(api)
    app.include_router(views)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", reload=True)
