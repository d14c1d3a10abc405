"""Errors raised by the employee store and the directory controller."""

from __future__ import annotations


class EmployeeStoreError(Exception):
    pass


class RemoteStoreError(EmployeeStoreError):
    """The employee API answered, but not with a usable 2xx payload."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class EmployeeStoreUnavailableError(EmployeeStoreError):
    """The API failed and the fallback policy forbids serving from the cache."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Employee API unavailable for '{operation}'")
        self.operation = operation


class EmployeeNotFoundError(EmployeeStoreError):
    def __init__(self, employee_id: int) -> None:
        super().__init__(f"Employee {employee_id} not found")
        self.employee_id = employee_id


class InvalidTransitionError(Exception):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot go from '{current}' to '{target}'")
        self.current = current
        self.target = target
