"""Directory view controller: the list/add/view/edit state machine.

The controller owns the in-memory employee collection shown in the table and
the state of the add/edit form. Every store failure is reduced to one generic
message per action; the controller never tells error kinds apart.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from employee_directory.core.errors import InvalidTransitionError
from employee_directory.models.directory import (
    DirectoryView,
    EmployeeCard,
    EmployeeRow,
    FormView,
    ViewState,
)
from employee_directory.models.employee import (
    EDITABLE_FIELDS,
    Employee,
    EmployeeCreate,
    EmployeeUpdate,
)
from employee_directory.services.employee_store import EmployeeStoreClient, employee_store
from employee_directory.services.profile_picture import (
    ProfilePictureEncoder,
    initials,
    profile_picture_encoder,
)

logger = logging.getLogger(__name__)

LOAD_FAILED = "Failed to load employees"
NOT_FOUND = "Employee not found"
ADD_FAILED = "Failed to add employee"
UPDATE_FAILED = "Failed to update employee"
DELETE_FAILED = "Failed to delete employee"
FORM_INCOMPLETE = "Please fill in all required fields"

_TRANSITIONS: dict[ViewState, set[ViewState]] = {
    ViewState.LIST: {ViewState.ADD, ViewState.VIEW, ViewState.EDIT},
    ViewState.ADD: {ViewState.LIST},
    ViewState.EDIT: {ViewState.LIST},
    ViewState.VIEW: {ViewState.EDIT, ViewState.LIST},
}

_TITLES = {
    ViewState.LIST: "Employee Directory",
    ViewState.ADD: "Add New Employee",
    ViewState.VIEW: "Employee Details",
    ViewState.EDIT: "Edit Employee",
}

# Form fields are addressable by their Python or wire name
_FIELD_NAMES: dict[str, str] = {**{to_camel(f): f for f in EDITABLE_FIELDS}, **{f: f for f in EDITABLE_FIELDS}}


def _blank_form() -> dict[str, str]:
    return {field: "" for field in EDITABLE_FIELDS}


class DirectoryController:
    def __init__(
        self,
        store: EmployeeStoreClient,
        encoder: ProfilePictureEncoder | None = None,
    ) -> None:
        self.store = store
        self.encoder = encoder or profile_picture_encoder
        self.employees: list[Employee] = []
        self.current_employee: Employee | None = None
        self.view = ViewState.LIST
        self.form_data = _blank_form()
        self.image_preview: str | None = None
        self.loading = False
        self.error: str | None = None

    def _go(self, target: ViewState) -> None:
        if target not in _TRANSITIONS[self.view]:
            raise InvalidTransitionError(self.view.value, target.value)
        logger.debug("Directory view %s -> %s", self.view.value, target.value)
        self.view = target

    def find_employee(self, employee_id: int) -> Employee | None:
        for employee in self.employees:
            if employee.id == employee_id:
                return employee
        return None

    async def load(self) -> None:
        self.loading = True
        try:
            self.employees = await self.store.get_employees()
        except Exception:
            logger.exception("Loading employees failed")
            self.error = LOAD_FAILED
        finally:
            self.loading = False

    def show_add_form(self) -> None:
        self._go(ViewState.ADD)
        self.form_data = _blank_form()
        self.image_preview = None
        self.error = None

    async def show_employee(self, employee_id: int) -> None:
        if ViewState.VIEW not in _TRANSITIONS[self.view]:
            raise InvalidTransitionError(self.view.value, ViewState.VIEW.value)

        self.loading = True
        try:
            employee = await self.store.get_employee(employee_id)
        except Exception:
            logger.exception("Fetching employee %s failed", employee_id)
            self.error = NOT_FOUND
            return
        finally:
            self.loading = False

        self.current_employee = employee
        self._go(ViewState.VIEW)

    def show_edit_form(self, employee: Employee) -> None:
        self._go(ViewState.EDIT)
        self.current_employee = employee
        self.form_data = {
            "full_name": employee.full_name,
            "job_title": employee.job_title,
            "department": employee.department,
            "date_of_joining": employee.date_of_joining,
            "profile_picture": employee.profile_picture or "",
        }
        self.image_preview = employee.profile_picture
        self.error = None

    def return_to_list(self) -> None:
        self._go(ViewState.LIST)
        self.error = None

    def update_field(self, name: str, value: str) -> None:
        field = _FIELD_NAMES.get(name)
        if field is None:
            raise ValueError(f"Unknown form field: {name}")
        self.form_data[field] = value
        if field == "profile_picture":
            self.image_preview = value or None

    def set_profile_picture(self, file_bytes: bytes, content_type: str | None) -> None:
        data_uri = self.encoder.to_data_uri(file_bytes, content_type)
        self.form_data["profile_picture"] = data_uri
        self.image_preview = data_uri

    async def submit(self) -> None:
        if self.view == ViewState.ADD:
            await self.submit_add()
        elif self.view == ViewState.EDIT:
            await self.submit_edit()
        else:
            raise InvalidTransitionError(self.view.value, ViewState.LIST.value)

    async def submit_add(self) -> None:
        try:
            record = EmployeeCreate(**self.form_data)
        except ValidationError:
            self.error = FORM_INCOMPLETE
            return

        self.loading = True
        try:
            created = await self.store.add_employee(record)
        except Exception:
            logger.exception("Adding employee failed")
            self.error = ADD_FAILED
            return
        finally:
            self.loading = False

        self.employees = [*self.employees, created]
        self.return_to_list()

    async def submit_edit(self) -> None:
        if self.current_employee is None:
            self.error = UPDATE_FAILED
            return
        try:
            changes = EmployeeUpdate(**self.form_data)
        except ValidationError:
            self.error = FORM_INCOMPLETE
            return

        self.loading = True
        try:
            updated = await self.store.update_employee(self.current_employee.id, changes)
        except Exception:
            logger.exception("Updating employee %d failed", self.current_employee.id)
            self.error = UPDATE_FAILED
            return
        finally:
            self.loading = False

        self.employees = [updated if e.id == updated.id else e for e in self.employees]
        self.return_to_list()

    async def delete(self, employee_id: int, confirmed: bool = True) -> None:
        """Delete from the list table; the other views offer no delete action."""
        if self.view != ViewState.LIST:
            raise InvalidTransitionError(self.view.value, "delete")
        if not confirmed:
            return

        self.loading = True
        try:
            await self.store.delete_employee(employee_id)
        except Exception:
            logger.exception("Deleting employee %d failed", employee_id)
            self.error = DELETE_FAILED
            return
        finally:
            self.loading = False

        self.employees = [e for e in self.employees if e.id != employee_id]

    def render(self) -> DirectoryView:
        rendered = DirectoryView(
            view=self.view,
            title=_TITLES[self.view],
            loading=self.loading,
            error=self.error,
            show_back=self.view != ViewState.LIST,
        )

        if self.view == ViewState.LIST:
            rendered.rows = [
                EmployeeRow(
                    id=e.id,
                    full_name=e.full_name,
                    job_title=e.job_title,
                    department=e.department,
                    profile_picture=e.profile_picture,
                    initials=initials(e.full_name),
                )
                for e in self.employees
            ]
            if not self.employees:
                rendered.empty_message = "No employees found"
        elif self.view == ViewState.VIEW and self.current_employee is not None:
            rendered.card = EmployeeCard(
                employee=self.current_employee,
                initials=initials(self.current_employee.full_name),
            )
        elif self.view in (ViewState.ADD, ViewState.EDIT):
            rendered.form = FormView(
                fields={to_camel(k): v for k, v in self.form_data.items()},
                image_preview=self.image_preview,
                submit_label="Add Employee" if self.view == ViewState.ADD else "Update Employee",
            )

        return rendered


directory_controller = DirectoryController(employee_store)
