"""View models rendered by the directory controller."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from employee_directory.models.employee import Employee


class ViewState(str, Enum):
    LIST = "list"
    ADD = "add"
    VIEW = "view"
    EDIT = "edit"


class EmployeeRow(BaseModel):
    """One row of the directory table."""

    id: int
    full_name: str
    job_title: str
    department: str
    profile_picture: str | None = None
    initials: str


class FormView(BaseModel):
    fields: dict[str, str]
    image_preview: str | None = None
    submit_label: str


class EmployeeCard(BaseModel):
    employee: Employee
    initials: str


class DirectoryView(BaseModel):
    view: ViewState
    title: str
    loading: bool = False
    error: str | None = None
    show_back: bool = False
    rows: list[EmployeeRow] = Field(default_factory=list)
    empty_message: str | None = None
    form: FormView | None = None
    card: EmployeeCard | None = None


class FormFieldUpdate(BaseModel):
    """Request body for changing a single form field."""

    name: str = Field(..., min_length=1)
    value: str
