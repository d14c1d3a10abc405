from __future__ import annotations

from employee_directory.services.employee_store import EmployeeStoreClient, employee_store
from employee_directory.services.view_controller import DirectoryController, directory_controller


def get_store() -> EmployeeStoreClient:
    return employee_store


def get_controller() -> DirectoryController:
    return directory_controller
