"""Dashboard counters over already-fetched collections."""
from typing import Dict, Iterable, List, Sequence

from .models import Department, Employee, Project, Todo


def employee_stats(employees: Sequence[Employee]) -> Dict[str, int]:
    # inactive is its own filter so a third status value cannot skew it
    return {
        "total_employees": len(employees),
        "active_employees": sum(1 for e in employees if e.status == "active"),
        "inactive_employees": sum(1 for e in employees if e.status == "inactive"),
    }


def project_stats(projects: Sequence[Project]) -> Dict[str, int]:
    return {
        "total_projects": len(projects),
        "planning_projects": sum(1 for p in projects if p.status == "planning"),
        "active_projects": sum(1 for p in projects if p.status == "active"),
        "completed_projects": sum(1 for p in projects if p.status == "completed"),
    }


def department_stats(departments: Sequence[Department], employees: Sequence[Employee]) -> dict:
    """Employee headcount per department, in department order."""
    counts = [
        {"name": dept.name, "count": sum(1 for e in employees if e.department_id == dept.id)}
        for dept in departments
    ]
    return {"total_departments": len(departments), "department_counts": counts}


def todo_stats(todos: Sequence[Todo]) -> Dict[str, int]:
    completed = sum(1 for t in todos if t.completed)
    return {
        "total_todos": len(todos),
        "completed_todos": completed,
        "pending_todos": len(todos) - completed,
    }


def monthly_hires(employees: Iterable[Employee]) -> List[Dict]:
    """Hires per joining month ("Jan", "Feb", ...) in first-seen order."""
    hires: Dict[str, int] = {}
    for emp in employees:
        month = emp.joining_date.strftime("%b")
        hires[month] = hires.get(month, 0) + 1
    return [{"month": month, "hires": count} for month, count in hires.items()]


def project_status_breakdown(projects: Iterable[Project]) -> List[Dict]:
    counts: Dict[str, int] = {}
    for project in projects:
        counts[project.status] = counts.get(project.status, 0) + 1
    return [{"status": status, "count": count} for status, count in counts.items()]


def recent_employees(employees: Sequence[Employee], limit: int = 5) -> List[Employee]:
    return list(employees[:limit])
