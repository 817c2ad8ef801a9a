"""
Employee list query engine.

Turns the in-memory employee snapshot plus the user's criteria into the
ordered, paginated view the employee list displays.  Everything here is a
pure function of its inputs; the snapshot is never mutated.
"""
import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from .models import Employee

PAGE_SIZE = 10

SORT_FIELDS = ("name", "joining_date", "salary")
ASC = "asc"
DESC = "desc"


@dataclass(frozen=True)
class Criteria:
    """Search text, facets, sort and page selected on the employee list.

    Empty strings mean "no constraint".
    """

    search_text: str = ""
    designation: str = ""
    department_id: str = ""
    status: str = ""
    sort_field: str = "name"
    sort_order: str = ASC
    page: int = 1
    page_size: int = PAGE_SIZE


@dataclass(frozen=True)
class QueryResult:
    page: List[Employee]
    total_matched: int
    total_pages: int


def matches(employee: Employee, criteria: Criteria) -> bool:
    """Return True if the employee satisfies every facet set in ``criteria``."""
    if criteria.search_text:
        term = criteria.search_text.lower()
        if term not in employee.name.lower() and term not in employee.email.lower():
            return False
    if criteria.designation and employee.designation != criteria.designation:
        return False
    if criteria.department_id and employee.department_id != criteria.department_id:
        return False
    if criteria.status and employee.status != criteria.status:
        return False
    return True


def sort_employees(employees: Iterable[Employee], field: str, order: str = ASC) -> List[Employee]:
    """Stable sort by ``field``; equal keys keep their input order in both directions."""
    employees = list(employees)
    if field not in SORT_FIELDS:
        return employees
    if field == "salary":
        key = lambda e: float(e.salary)  # noqa: E731
    else:
        key = lambda e: getattr(e, field)  # noqa: E731
    # sorted() with reverse=True still keeps equal elements in input order
    return sorted(employees, key=key, reverse=(order == DESC))


def total_pages_for(total: int, page_size: int) -> int:
    if page_size < 1:
        return 1
    return max(1, math.ceil(total / page_size))


def paginate(items: Sequence, page: int, page_size: int) -> List:
    """Return the 1-indexed ``page``; out-of-range pages are empty."""
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


def filter_and_sort(collection: Iterable[Employee], criteria: Criteria) -> List[Employee]:
    """Every matching employee in display order, without pagination."""
    filtered = [e for e in collection if matches(e, criteria)]
    return sort_employees(filtered, criteria.sort_field, criteria.sort_order)


def query(collection: Iterable[Employee], criteria: Criteria) -> QueryResult:
    ordered = filter_and_sort(collection, criteria)
    return QueryResult(
        page=paginate(ordered, criteria.page, criteria.page_size),
        total_matched=len(ordered),
        total_pages=total_pages_for(len(ordered), criteria.page_size),
    )


def toggle_sort(current_field: str, current_order: str, selected: str) -> Tuple[str, str]:
    """Next (field, order) after a column header is clicked.

    Clicking the active column flips the order; any other column starts
    ascending.
    """
    if selected == current_field:
        return selected, DESC if current_order == ASC else ASC
    return selected, ASC


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(page, 1), max(total_pages, 1))


def designations(collection: Iterable[Employee]) -> List[str]:
    """Unique designations in the order they first appear."""
    return list(dict.fromkeys(e.designation for e in collection))
