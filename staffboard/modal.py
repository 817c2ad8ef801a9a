"""Open/closed state for dialogs rendered by the HTML views."""
from typing import Any, Callable, Dict, Optional

CLOSED = "closed"
OPEN = "open"


class Modal:
    """A two-state dialog with optional entry and exit actions.

    ``on_open`` receives the modal and may adjust ``context`` (for example to
    reset form defaults); ``on_close`` runs before the context is cleared.
    Opening an open modal or closing a closed one does nothing.
    """

    def __init__(
        self,
        name: str,
        on_open: Optional[Callable[["Modal"], None]] = None,
        on_close: Optional[Callable[["Modal"], None]] = None,
    ):
        self.name = name
        self.state = CLOSED
        self.context: Dict[str, Any] = {}
        self._on_open = on_open
        self._on_close = on_close

    @property
    def is_open(self) -> bool:
        return self.state == OPEN

    def open(self, **context: Any) -> None:
        if self.is_open:
            return
        self.state = OPEN
        self.context = dict(context)
        if self._on_open:
            self._on_open(self)

    def close(self) -> None:
        if not self.is_open:
            return
        if self._on_close:
            self._on_close(self)
        self.state = CLOSED
        self.context = {}


def reset_assign_form(modal: Modal) -> None:
    modal.context["selected_employee"] = ""
    modal.context["role"] = "Team Member"


def assign_employee_modal() -> Modal:
    return Modal("assign-employee", on_open=reset_assign_form)


def project_form_modal() -> Modal:
    return Modal("project-form")
