from __future__ import annotations

import pytest
from starlette.testclient import TestClient

from employee_directory.core.cache import EmployeeCacheRepository, InMemoryStorage
from employee_directory.core.dependencies import get_controller, get_store
from employee_directory.main import app
from employee_directory.models.employee import CachedEmployee
from employee_directory.services.employee_store import EmployeeStoreClient
from employee_directory.services.view_controller import DirectoryController

API_BASE_URL = "http://employees.test"


def make_entry(employee_id: int, source: str = "remote", **overrides) -> CachedEmployee:
    fields = {
        "id": employee_id,
        "full_name": f"Employee {employee_id}",
        "job_title": "Engineer",
        "department": "IT",
        "date_of_joining": "2021-03-15",
        "source": source,
    }
    fields.update(overrides)
    return CachedEmployee(**fields)


def employee_payload(employee_id: int, **overrides) -> dict:
    payload = {
        "id": employee_id,
        "fullName": f"Employee {employee_id}",
        "jobTitle": "Engineer",
        "department": "IT",
        "dateOfJoining": "2021-03-15",
    }
    payload.update(overrides)
    return payload


@pytest.fixture(autouse=True)
def _store_settings(tmp_path):
    from employee_directory.core.config import settings

    original_file = settings.CACHE_FILE
    original_url = settings.EMPLOYEE_API_BASE_URL
    settings.CACHE_FILE = str(tmp_path / "employee_cache.json")
    settings.EMPLOYEE_API_BASE_URL = ""
    yield
    settings.CACHE_FILE = original_file
    settings.EMPLOYEE_API_BASE_URL = original_url


@pytest.fixture
def memory_cache() -> EmployeeCacheRepository:
    return EmployeeCacheRepository(InMemoryStorage())


@pytest.fixture
def offline_store(memory_cache) -> EmployeeStoreClient:
    return EmployeeStoreClient(cache=memory_cache)


@pytest.fixture
def online_store(memory_cache) -> EmployeeStoreClient:
    store = EmployeeStoreClient(cache=memory_cache)
    store.base_url = API_BASE_URL
    return store


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def store_client(offline_store):
    app.dependency_overrides[get_store] = lambda: offline_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def controller(offline_store) -> DirectoryController:
    return DirectoryController(offline_store)


@pytest.fixture
def directory_client(controller):
    app.dependency_overrides[get_controller] = lambda: controller
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
