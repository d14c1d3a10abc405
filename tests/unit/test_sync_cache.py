"""Tests for the cache reconciliation script."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from employee_directory.core.config import Settings
from employee_directory.models.employee import Employee
from scripts.sync_cache import (
    build_push_payload,
    fetch_remote,
    merge_after_sync,
    parse_args,
    push_entry,
    record_pushed,
    split_by_source,
    sync,
)
from tests.conftest import API_BASE_URL, employee_payload, make_entry


def _response(status: int = 200, json_data=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=json_data)
    response.text = AsyncMock(return_value=text)
    return response


def _context(response: MagicMock) -> AsyncMock:
    context = AsyncMock()
    context.__aenter__.return_value = response
    context.__aexit__.return_value = None
    return context


def _mock_client_session(session: MagicMock) -> AsyncMock:
    mock_client_session = AsyncMock()
    mock_client_session.__aenter__.return_value = session
    mock_client_session.__aexit__.return_value = None
    return mock_client_session


def test_split_by_source():
    remote, local = split_by_source([make_entry(1), make_entry(2, source="local"), make_entry(3)])

    assert [e.id for e in remote] == [1, 3]
    assert [e.id for e in local] == [2]


def test_build_push_payload_drops_id_and_provenance():
    payload = build_push_payload(make_entry(9, source="local"))

    assert payload == {
        "fullName": "Employee 9",
        "jobTitle": "Engineer",
        "department": "IT",
        "dateOfJoining": "2021-03-15",
    }


def test_merge_after_sync_puts_remote_first():
    remote = [Employee.model_validate(employee_payload(1)), Employee.model_validate(employee_payload(2))]

    merged = merge_after_sync(remote, [make_entry(5, source="local")])

    assert [(e.id, e.source) for e in merged] == [(1, "remote"), (2, "remote"), (5, "local")]


def test_merge_after_sync_renumbers_colliding_local_entries():
    remote = [Employee.model_validate(employee_payload(1)), Employee.model_validate(employee_payload(2))]

    merged = merge_after_sync(remote, [make_entry(2, source="local"), make_entry(3, source="local")])

    assert [e.id for e in merged] == [1, 2, 3, 4]
    assert [e.full_name for e in merged[2:]] == ["Employee 2", "Employee 3"]


def test_parse_args_defaults():
    args = parse_args([])

    assert args.dry_run is False
    assert args.verbose is False


def test_parse_args_flags():
    args = parse_args(["--dry-run", "--verbose"])

    assert args.dry_run is True
    assert args.verbose is True


@pytest.mark.anyio
async def test_push_entry_posts_payload():
    session = MagicMock()
    session.post.return_value = _context(_response(status=201, json_data=employee_payload(10)))

    created = await push_entry(session, API_BASE_URL, make_entry(3, source="local"))

    assert created.id == 10
    assert session.post.call_args.args == (f"{API_BASE_URL}/employees",)
    assert "id" not in session.post.call_args.kwargs["json"]


@pytest.mark.anyio
async def test_push_entry_raises_on_error_status():
    session = MagicMock()
    session.post.return_value = _context(_response(status=400, text="bad request"))

    with pytest.raises(RuntimeError, match="400"):
        await push_entry(session, API_BASE_URL, make_entry(3, source="local"))


@pytest.mark.anyio
async def test_fetch_remote_raises_on_error_status():
    session = MagicMock()
    session.get.return_value = _context(_response(status=503, text="down"))

    with pytest.raises(RuntimeError, match="503"):
        await fetch_remote(session, API_BASE_URL)


@pytest.mark.anyio
async def test_sync_requires_base_url(memory_cache):
    with pytest.raises(SystemExit):
        await sync(parse_args([]), settings=Settings(), cache=memory_cache)


@pytest.mark.anyio
async def test_sync_dry_run_leaves_cache(memory_cache):
    entries = [make_entry(1), make_entry(2, source="local")]
    memory_cache.save(entries)

    result = await sync(
        parse_args(["--dry-run"]),
        settings=Settings(EMPLOYEE_API_BASE_URL=API_BASE_URL),
        cache=memory_cache,
    )

    assert result == (0, 0)
    assert memory_cache.load() == entries


@pytest.mark.anyio
async def test_sync_pushes_local_entries_and_refreshes_cache(memory_cache):
    memory_cache.save([make_entry(1), make_entry(2, source="local"), make_entry(3, source="local")])

    session = MagicMock()
    session.post.side_effect = [
        _context(_response(status=201, json_data=employee_payload(20))),
        _context(_response(status=500, text="boom")),
    ]
    session.get.return_value = _context(_response(json_data=[employee_payload(1), employee_payload(20)]))

    with patch("scripts.sync_cache.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        pushed, failed = await sync(
            parse_args([]),
            settings=Settings(EMPLOYEE_API_BASE_URL=API_BASE_URL),
            cache=memory_cache,
        )

    assert (pushed, failed) == (1, 1)
    cached = memory_cache.load()
    assert [(e.id, e.source) for e in cached] == [(1, "remote"), (20, "remote"), (3, "local")]


def test_record_pushed_replaces_local_entry(memory_cache):
    memory_cache.save([make_entry(1), make_entry(7, source="local")])

    moved = record_pushed(memory_cache, make_entry(7, source="local"), Employee.model_validate(employee_payload(42)))

    assert moved is None
    assert [(e.id, e.source) for e in memory_cache.load()] == [(1, "remote"), (42, "remote")]


def test_record_pushed_moves_local_entry_holding_the_new_id(memory_cache):
    memory_cache.save([make_entry(1, source="local"), make_entry(2, source="local")])

    moved = record_pushed(memory_cache, make_entry(1, source="local"), Employee.model_validate(employee_payload(2)))

    assert moved == (2, 3)
    assert [(e.id, e.source) for e in memory_cache.load()] == [(3, "local"), (2, "remote")]


@pytest.mark.anyio
async def test_sync_keeps_pushed_entries_when_refresh_fails(memory_cache):
    memory_cache.save([make_entry(7, source="local")])

    session = MagicMock()
    session.post.return_value = _context(_response(status=201, json_data=employee_payload(42)))
    session.get.side_effect = aiohttp.ClientConnectionError("connection refused")

    with patch("scripts.sync_cache.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        with pytest.raises(aiohttp.ClientConnectionError):
            await sync(
                parse_args([]),
                settings=Settings(EMPLOYEE_API_BASE_URL=API_BASE_URL),
                cache=memory_cache,
            )

    assert [(e.id, e.source) for e in memory_cache.load()] == [(42, "remote")]


@pytest.mark.anyio
async def test_sync_pushes_entry_moved_by_an_earlier_push(memory_cache):
    memory_cache.save([make_entry(1, source="local"), make_entry(2, source="local")])

    session = MagicMock()
    session.post.side_effect = [
        _context(_response(status=201, json_data=employee_payload(2))),
        _context(_response(status=201, json_data=employee_payload(5))),
    ]
    session.get.return_value = _context(_response(json_data=[employee_payload(2), employee_payload(5)]))

    with patch("scripts.sync_cache.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        pushed, failed = await sync(
            parse_args([]),
            settings=Settings(EMPLOYEE_API_BASE_URL=API_BASE_URL),
            cache=memory_cache,
        )

    assert (pushed, failed) == (2, 0)
    assert [(e.id, e.source) for e in memory_cache.load()] == [(2, "remote"), (5, "remote")]
