"""Employee store client: remote employee API first, local cache as fallback."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import aiohttp
from pydantic import TypeAdapter

from employee_directory.core.cache import (
    EmployeeCacheRepository,
    InMemoryStorage,
    build_cache_repository,
)
from employee_directory.core.config import Settings
from employee_directory.core.errors import (
    EmployeeNotFoundError,
    EmployeeStoreUnavailableError,
    RemoteStoreError,
)
from employee_directory.models.employee import (
    CachedEmployee,
    Employee,
    EmployeeCreate,
    EmployeeUpdate,
)

logger = logging.getLogger(__name__)

_EMPLOYEES = TypeAdapter(list[Employee])

# ValueError covers undecodable JSON and payloads that fail model validation
_REMOTE_FAILURES = (aiohttp.ClientError, asyncio.TimeoutError, RemoteStoreError, ValueError)


@dataclass(frozen=True)
class FallbackPolicy:
    """Which operations answer from the cache when the API fails.

    An operation whose flag is off raises ``EmployeeStoreUnavailableError``
    instead. ``get`` raises ``EmployeeNotFoundError`` whenever the id is in
    neither tier, whatever its flag.
    """

    list: bool = True
    get: bool = True
    add: bool = True
    update: bool = True
    delete: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> FallbackPolicy:
        return cls(
            list=settings.DEGRADE_LIST,
            get=settings.DEGRADE_GET,
            add=settings.DEGRADE_ADD,
            update=settings.DEGRADE_UPDATE,
            delete=settings.DEGRADE_DELETE,
        )

    def degrades(self, operation: str) -> bool:
        return bool(getattr(self, operation))


class EmployeeStoreClient:
    def __init__(
        self,
        cache: EmployeeCacheRepository | None = None,
        policy: FallbackPolicy | None = None,
    ) -> None:
        self.cache = cache or EmployeeCacheRepository(InMemoryStorage())
        self.policy = policy or FallbackPolicy()
        self.base_url = ""
        self.timeout = 10.0
        self.initialized = False

    async def initialize(self, settings: Settings, cache: EmployeeCacheRepository | None = None) -> None:
        if self.initialized:
            return

        self.cache = cache or build_cache_repository(settings.CACHE_FILE, settings.CACHE_SLOT)
        self.policy = FallbackPolicy.from_settings(settings)
        self.timeout = settings.EMPLOYEE_API_TIMEOUT
        self.base_url = settings.EMPLOYEE_API_BASE_URL.rstrip("/")
        self.initialized = True

        if not self.base_url:
            logger.warning("EMPLOYEE_API_BASE_URL missing — store client running on local cache only")
        else:
            logger.info("EmployeeStoreClient initialized (api=%s, slot=%s)", self.base_url, settings.CACHE_SLOT)

    async def close(self) -> None:
        self.base_url = ""
        self.initialized = False

    @property
    def offline(self) -> bool:
        return not self.base_url

    async def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        if self.offline:
            raise RemoteStoreError("Employee API base URL not configured")

        url = f"{self.base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(method, url, json=payload) as response:
                if 200 <= response.status < 300:
                    if method == "DELETE":
                        return None
                    return await response.json()

                error_text = await response.text()
                raise RemoteStoreError(
                    f"{method} {path} failed: {response.status} - {error_text}",
                    status=response.status,
                )

    def _degrade(self, operation: str, error: Exception) -> None:
        if not self.policy.degrades(operation):
            logger.error("Employee API %s failed: %s", operation, error)
            raise EmployeeStoreUnavailableError(operation) from error
        logger.warning("Employee API %s failed (%s), falling back to local cache", operation, error)

    async def get_employees(self) -> list[Employee]:
        try:
            data = await self._request("GET", "/employees")
            return _EMPLOYEES.validate_python(data)
        except _REMOTE_FAILURES as e:
            self._degrade("list", e)
            return [entry.to_employee() for entry in self.cache.load()]

    async def get_employee(self, employee_id: int | str) -> Employee:
        employee_id = int(employee_id)
        try:
            data = await self._request("GET", f"/employees/{employee_id}")
            return Employee.model_validate(data)
        except _REMOTE_FAILURES as e:
            if not self.policy.get and isinstance(e, RemoteStoreError) and e.status == 404:
                raise EmployeeNotFoundError(employee_id) from e
            self._degrade("get", e)
            entry = self.cache.find(employee_id)
            if entry is None:
                raise EmployeeNotFoundError(employee_id) from e
            return entry.to_employee()

    async def add_employee(self, record: EmployeeCreate) -> Employee:
        try:
            data = await self._request("POST", "/employees", record.model_dump(by_alias=True, exclude_none=True))
            created = Employee.model_validate(data)
        except _REMOTE_FAILURES as e:
            self._degrade("add", e)
            created = Employee(id=self.cache.next_id(), **record.model_dump())
            entries = self.cache.load()
            entries.append(CachedEmployee.from_employee(created, "local"))
            self.cache.save(entries)
            logger.info("Stored employee %d locally", created.id)
            return created

        entries = self.cache.load()
        if any(entry.id == created.id for entry in entries):
            logger.warning("Server id %d replaces an existing cache entry", created.id)
            entries = [entry for entry in entries if entry.id != created.id]
        entries.append(CachedEmployee.from_employee(created, "remote"))
        self.cache.save(entries)
        return created

    async def update_employee(self, employee_id: int | str, changes: EmployeeUpdate) -> Employee:
        employee_id = int(employee_id)
        try:
            data = await self._request("PUT", f"/employees/{employee_id}", changes.changes())
            updated = Employee.model_validate(data)
        except _REMOTE_FAILURES as e:
            self._degrade("update", e)
            entries = self.cache.load()
            for index, entry in enumerate(entries):
                if entry.id == employee_id:
                    merged = CachedEmployee.model_validate(
                        {
                            **entry.model_dump(),
                            **changes.model_dump(exclude_unset=True),
                            "source": "local",
                            "cached_at": datetime.now(timezone.utc),
                        }
                    )
                    entries[index] = merged
                    self.cache.save(entries)
                    return merged.to_employee()
            raise EmployeeNotFoundError(employee_id) from e

        entries = [
            CachedEmployee.from_employee(updated, "remote") if entry.id == employee_id else entry
            for entry in self.cache.load()
        ]
        self.cache.save(entries)
        return updated

    async def delete_employee(self, employee_id: int | str) -> bool:
        employee_id = int(employee_id)
        try:
            await self._request("DELETE", f"/employees/{employee_id}")
        except _REMOTE_FAILURES as e:
            self._degrade("delete", e)

        self.cache.save([entry for entry in self.cache.load() if entry.id != employee_id])
        return True

    async def check_connection(self) -> bool:
        if self.offline:
            return False
        try:
            await self._request("GET", "/employees")
            return True
        except _REMOTE_FAILURES as e:
            logger.warning("Employee API connection check failed: %s", e)
            return False


employee_store = EmployeeStoreClient()
