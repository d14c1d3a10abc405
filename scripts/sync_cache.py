#!/usr/bin/env python3
"""Reconcile the local employee cache with the remote employee API.

Records created while the API was unreachable only exist in the cache
(``source="local"``). This script pushes them to the API and then rewrites the
cache from the remote collection. Each pushed record replaces its local
entry as soon as the API accepts it. Run from the project root:

    python3 scripts/sync_cache.py [--dry-run] [--verbose]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Any

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import aiohttp  # noqa: E402
from pydantic import TypeAdapter  # noqa: E402

from employee_directory.core.cache import EmployeeCacheRepository, build_cache_repository  # noqa: E402
from employee_directory.core.config import Settings  # noqa: E402
from employee_directory.models.employee import CachedEmployee, Employee  # noqa: E402

logger = logging.getLogger(__name__)

_EMPLOYEES = TypeAdapter(list[Employee])


def build_push_payload(entry: CachedEmployee) -> dict[str, Any]:
    """Wire payload for re-creating a local-only record; the server assigns the id."""
    return entry.to_employee().model_dump(by_alias=True, exclude={"id"}, exclude_none=True)


def split_by_source(entries: list[CachedEmployee]) -> tuple[list[CachedEmployee], list[CachedEmployee]]:
    remote = [e for e in entries if e.source == "remote"]
    local = [e for e in entries if e.source == "local"]
    return remote, local


def merge_after_sync(remote: list[Employee], unpushed: list[CachedEmployee]) -> list[CachedEmployee]:
    """Remote collection first, then whatever could not be pushed.

    Unpushed entries whose id collides with a remote record are renumbered
    after the highest id so the cache keeps ids unique.
    """
    merged = [CachedEmployee.from_employee(e, "remote") for e in remote]
    taken = {e.id for e in merged}
    for entry in unpushed:
        if entry.id in taken:
            new_id = max(taken) + 1
            logger.warning("Local employee %d renumbered to %d", entry.id, new_id)
            entry = entry.model_copy(update={"id": new_id})
        taken.add(entry.id)
        merged.append(entry)
    return merged


def record_pushed(cache: EmployeeCacheRepository, entry: CachedEmployee, created: Employee) -> tuple[int, int] | None:
    """Swap a pushed local entry for the server's record so a rerun cannot push it twice.

    A remote entry already holding the server's id is replaced. A local entry
    holding it is moved after the highest id, and ``(old_id, new_id)`` is returned.
    """
    entries = [e for e in cache.load() if not (e.source == "local" and e.id == entry.id)]
    top = max([created.id, *(e.id for e in entries)])
    moved = None
    kept: list[CachedEmployee] = []
    for e in entries:
        if e.id == created.id:
            if e.source == "remote":
                continue
            moved = (e.id, top + 1)
            logger.warning("Local employee %d renumbered to %d", e.id, top + 1)
            e = e.model_copy(update={"id": top + 1})
        kept.append(e)
    cache.save([*kept, CachedEmployee.from_employee(created, "remote")])
    return moved


async def push_entry(session: aiohttp.ClientSession, base_url: str, entry: CachedEmployee) -> Employee:
    async with session.post(f"{base_url}/employees", json=build_push_payload(entry)) as response:
        if 200 <= response.status < 300:
            return Employee.model_validate(await response.json())

        error = await response.text()
        raise RuntimeError(f"Push failed ({response.status}): {error}")


async def fetch_remote(session: aiohttp.ClientSession, base_url: str) -> list[Employee]:
    async with session.get(f"{base_url}/employees") as response:
        if 200 <= response.status < 300:
            return _EMPLOYEES.validate_python(await response.json())

        error = await response.text()
        raise RuntimeError(f"Fetch failed ({response.status}): {error}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Push locally created employees to the employee API and refresh the cache",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report local-only employees without pushing or rewriting the cache",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


async def sync(
    args: argparse.Namespace,
    settings: Settings | None = None,
    cache: EmployeeCacheRepository | None = None,
) -> tuple[int, int]:
    settings = settings or Settings()
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    base_url = settings.EMPLOYEE_API_BASE_URL.rstrip("/")
    if not base_url:
        raise SystemExit("EMPLOYEE_API_BASE_URL is not configured")

    cache = cache or build_cache_repository(settings.CACHE_FILE, settings.CACHE_SLOT)
    _, local = split_by_source(cache.load())
    logger.info("Found %d local-only employees", len(local))

    if args.dry_run:
        for entry in local:
            logger.info("[DRY RUN] would push %d %s", entry.id, entry.full_name)
        return 0, 0

    pushed = 0
    unpushed: list[CachedEmployee] = []

    timeout = aiohttp.ClientTimeout(total=settings.EMPLOYEE_API_TIMEOUT)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        pending = list(local)
        while pending:
            entry = pending.pop(0)
            try:
                created = await push_entry(session, base_url, entry)
            except (aiohttp.ClientError, asyncio.TimeoutError, RuntimeError, ValueError):
                logger.exception("Pushing local employee %d failed — keeping it local", entry.id)
                unpushed.append(entry)
                continue
            pushed += 1
            logger.info("Pushed local employee %d as %d", entry.id, created.id)

            moved = record_pushed(cache, entry, created)
            if moved:
                old_id, new_id = moved
                pending = [e.model_copy(update={"id": new_id}) if e.id == old_id else e for e in pending]

        remote = await fetch_remote(session, base_url)

    cache.save(merge_after_sync(remote, unpushed))

    logger.info("=" * 50)
    logger.info("Sync complete!")
    logger.info("Pushed: %d", pushed)
    logger.info("Failed: %d", len(unpushed))
    logger.info("Remote employees: %d", len(remote))
    return pushed, len(unpushed)


def main() -> None:
    args = parse_args()
    asyncio.run(sync(args))


if __name__ == "__main__":
    main()
