"""Tests for the HTML views."""

import datetime as _dt

from staffboard.store import StoreError


def employee_form(**overrides):
    data = {
        "name": "Jane Roe",
        "email": "jane.roe@example.com",
        "phone": "555 987 6543",
        "dob": "",
        "designation": "Analyst",
        "department_id": "",
        "salary": "72000",
        "joining_date": "2022-09-12",
        "experience": "3",
        "status": "active",
    }
    data.update(overrides)
    return data


def seed_employees(client, payload, count, **overrides):
    for i in range(count):
        fields = {**payload, "name": f"Person {i:02d}", "email": f"p{i}@example.com", **overrides}
        assert client.post("/api/employees", json=fields).status_code == 201


def test_dashboard_renders_counters(client, employee_payload):
    seed_employees(client, employee_payload, 3)

    response = client.get("/")

    assert response.status_code == 200
    assert "Total Employees" in response.text
    assert "Acme" in response.text


def test_employee_list_paginates_and_clamps(client, employee_payload):
    seed_employees(client, employee_payload, 12)

    first = client.get("/employees")
    clamped = client.get("/employees", params={"page": 9})

    assert "Page 1 of 2" in first.text
    assert "12 employees found" in first.text
    assert "Page 2 of 2" in clamped.text
    assert "Person 11" in clamped.text


def test_employee_list_sort_links_toggle(client, employee_payload):
    seed_employees(client, employee_payload, 2)

    response = client.get("/employees", params={"sort_field": "name", "sort_order": "asc"})

    assert "sort_field=name&amp;sort_order=desc" in response.text
    assert "sort_field=salary&amp;sort_order=asc" in response.text


def test_employee_list_filters(client, employee_payload):
    seed_employees(client, employee_payload, 2)
    client.post("/api/employees", json={**employee_payload, "name": "Quiet Person", "status": "inactive"})

    response = client.get("/employees", params={"status": "inactive"})

    assert "Quiet Person" in response.text
    assert "Person 00" not in response.text
    assert "1 employee found" in response.text


def test_print_view_lists_every_match(client, employee_payload):
    seed_employees(client, employee_payload, 12)

    response = client.get("/employees/print")

    assert response.status_code == 200
    assert all(f"Person {i:02d}" in response.text for i in range(12))


def test_create_employee_from_form(client):
    response = client.post("/employees/new", data=employee_form(), follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"].startswith("/employees?notice=")
    employees = client.get("/api/employees").json()
    assert [e["phone"] for e in employees] == ["(555) 987-6543"]


def test_create_employee_with_photo(client):
    response = client.post(
        "/employees/new",
        data=employee_form(),
        files={"photo": ("me.jpg", b"jpeg bytes", "image/jpeg")},
        follow_redirects=False,
    )

    assert response.status_code == 302
    employee = client.get("/api/employees").json()[0]
    assert employee["profile_photo_url"].startswith("/media/profiles/")


def test_invalid_phone_rerenders_form(client):
    response = client.post("/employees/new", data=employee_form(phone="123"))

    assert response.status_code == 200
    assert "Phone must be a valid 10-digit number." in response.text
    assert client.get("/api/employees").json() == []


def test_edit_and_delete_employee(client):
    client.post("/employees/new", data=employee_form())
    employee = client.get("/api/employees").json()[0]

    form = client.get(f"/employees/{employee['id']}/edit")
    assert 'value="Jane Roe"' in form.text

    client.post(f"/employees/{employee['id']}/edit", data=employee_form(status="inactive"))
    assert client.get(f"/api/employees/{employee['id']}").json()["status"] == "inactive"

    response = client.post(f"/employees/{employee['id']}/delete", follow_redirects=False)
    assert response.status_code == 302
    assert client.get("/api/employees").json() == []


def test_projects_page_opens_assign_dialog(client, employee_payload):
    employee = client.post("/api/employees", json=employee_payload).json()
    client.post("/projects/new", data={"name": "Portal", "status": "active", "start_date": "2024-01-01"})
    project = client.get("/api/projects").json()[0]

    dialog = client.get("/projects", params={"modal": "assign", "project_id": project["id"]})
    assert "Assign Employee to Portal" in dialog.text
    assert 'value="Team Member"' in dialog.text

    response = client.post(
        f"/projects/{project['id']}/assign",
        data={"employee_id": employee["id"], "role": "Lead"},
        follow_redirects=False,
    )
    assert response.status_code == 302

    page = client.get("/projects")
    assert "John Doe" in page.text
    assert "Lead" in page.text
    assert "Assign Employee to" not in page.text


def test_failed_assignment_shows_error(client):
    client.post("/projects/new", data={"name": "Portal", "status": "active", "start_date": "2024-01-01"})
    project = client.get("/api/projects").json()[0]

    response = client.post(
        f"/projects/{project['id']}/assign",
        data={"employee_id": "ghost", "role": "Lead"},
        follow_redirects=False,
    )

    assert "error=Failed+to+assign+employee" in response.headers["location"]


def test_failed_update_discards_uploaded_photo(app, client, monkeypatch):
    client.post("/employees/new", data=employee_form())
    employee = client.get("/api/employees").json()[0]

    def fail(*args, **kwargs):
        raise StoreError("disk full")

    monkeypatch.setattr(app.state.store, "update_employee", fail)
    response = client.post(
        f"/employees/{employee['id']}/edit",
        data=employee_form(),
        files={"photo": ("me.jpg", b"jpeg bytes", "image/jpeg")},
        follow_redirects=False,
    )

    assert "error=Failed+to+update+employee" in response.headers["location"]
    profiles = app.state.photos.images_dir / "profiles"
    assert not profiles.exists() or list(profiles.iterdir()) == []


def test_dashboard_todo_add_toggle_delete(client):
    response = client.post("/todos/new", data={"title": "Review offers", "priority": "high"}, follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"].startswith("/?notice=")

    todo = client.get("/api/todos/today").json()[0]
    assert todo["due_date"] == _dt.date.today().isoformat()
    page = client.get("/")
    assert "Review offers" in page.text
    assert f'action="/todos/{todo["id"]}/toggle"' in page.text

    client.post(f"/todos/{todo['id']}/toggle")
    assert client.get("/api/todos").json()[0]["completed"] is True
    assert "<s>Review offers</s>" in client.get("/").text

    client.post(f"/todos/{todo['id']}/delete")
    assert client.get("/api/todos").json() == []


def test_dashboard_todo_requires_title(client):
    response = client.post("/todos/new", data={"title": "  "}, follow_redirects=False)

    assert "error=" in response.headers["location"]
    assert client.get("/api/todos").json() == []
