"""
Shared application state.

One ``AppState`` owns the employee, department and project snapshots that
the views read.  Views never fetch collections themselves; after a write they
call the matching ``refresh_*`` so every view sees the same snapshot.
"""
import logging
from typing import List

from .models import Department, Employee, Project
from .store import RecordStore, StoreError

logger = logging.getLogger(__name__)


class AppState:
    def __init__(self, store: RecordStore):
        self.store = store
        self.employees: List[Employee] = []
        self.departments: List[Department] = []
        self.projects: List[Project] = []
        self.loading = True

    def refresh_employees(self) -> bool:
        """Reload employees; on failure keep the previous snapshot and return False."""
        try:
            self.employees = self.store.fetch_employees()
        except StoreError as exc:
            logger.error("Error fetching employees: %s", exc)
            return False
        return True

    def refresh_departments(self) -> bool:
        try:
            self.departments = self.store.fetch_departments()
        except StoreError as exc:
            logger.error("Error fetching departments: %s", exc)
            return False
        return True

    def refresh_projects(self) -> bool:
        try:
            self.projects = self.store.fetch_projects()
        except StoreError as exc:
            logger.error("Error fetching projects: %s", exc)
            return False
        return True

    def refresh_all(self) -> bool:
        self.loading = True
        results = [
            self.refresh_employees(),
            self.refresh_departments(),
            self.refresh_projects(),
        ]
        self.loading = False
        return all(results)

    def department_name(self, department_id) -> str:
        for dept in self.departments:
            if dept.id == department_id:
                return dept.name
        return "N/A"
