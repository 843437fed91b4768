# src/streakboard/backend/rest.py

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from ..core.errors import BackendError
from ..core.ports import Row

logger = logging.getLogger(__name__)


def _make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    # keep read >= connect as a sane baseline
    read_s = max(read_s, connect_s)
    return httpx.Timeout(10.0, connect=connect_s, read=read_s, pool=connect_s)


class RestBackend:
    """
    PostgREST (Supabase REST) implementation of PersistenceBackend.

    Query syntax follows PostgREST:
    - select=*&order=created_at.desc
    - id=eq.<id> for single-row PATCH/DELETE
    - expires_at=lt.<iso> for the expired-task sweep
    - POST + "Prefer: resolution=merge-duplicates" for the completion upsert
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        connect_timeout: float = 5.0,
        read_timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ValueError("base_url is required")
        if not api_key or not api_key.strip():
            raise ValueError("api_key is required")

        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            },
            timeout=_make_timeout(connect_timeout, read_timeout),
            transport=transport,
        )
        logger.info("RestBackend ready base_url=%s", base_url)

    @classmethod
    def from_settings(cls, settings: Any) -> RestBackend:
        backend_url = getattr(settings, "backend_url", None)
        api_key = getattr(settings, "backend_key", None)
        if not backend_url:
            raise RuntimeError("Datastore URL is not set. Set STREAKBOARD_BACKEND_URL in your .env.")
        if not api_key:
            raise RuntimeError("Datastore key is not set. Set STREAKBOARD_BACKEND_KEY in your .env.")
        return cls(
            f"{str(backend_url).rstrip('/')}/rest/v1",
            api_key,
            connect_timeout=float(getattr(settings, "connect_timeout_seconds", 5.0)),
            read_timeout=float(getattr(settings, "read_timeout_seconds", 15.0)),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- low-level helpers ----

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            resp = await self._client.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e.__class__.__name__)
            raise BackendError(f"{method} {path}: {e.__class__.__name__}") from e

        logger.debug("%s %s -> %s", method, path, resp.status_code)
        if resp.is_error:
            logger.warning("%s %s -> HTTP %s", method, path, resp.status_code)
            raise BackendError(f"HTTP error! status: {resp.status_code}", status_code=resp.status_code)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise BackendError(f"{method} {path}: response is not JSON") from e

    async def _list(self, table: str, params: dict[str, str]) -> list[Row]:
        rows = await self._request("GET", f"/{table}", params=params)
        if not isinstance(rows, list):
            raise BackendError(f"GET /{table}: expected a JSON array")
        return rows

    async def _create(self, table: str, row: Row) -> Row:
        rows = await self._request("POST", f"/{table}", json=row)
        if not isinstance(rows, list) or not rows or not isinstance(rows[0], dict):
            raise BackendError(f"POST /{table}: no row returned")
        return rows[0]

    async def _update(self, table: str, row_id: int, updates: Row) -> None:
        await self._request("PATCH", f"/{table}", params={"id": f"eq.{row_id}"}, json=updates)

    async def _delete(self, table: str, params: dict[str, str]) -> None:
        await self._request("DELETE", f"/{table}", params=params)

    # ---- tasks ----

    async def list_tasks(self) -> list[Row]:
        return await self._list("tasks", {"select": "*", "order": "created_at.desc"})

    async def create_task(self, row: Row) -> Row:
        return await self._create("tasks", row)

    async def update_task(self, task_id: int, updates: Row) -> None:
        await self._update("tasks", task_id, updates)

    async def delete_task(self, task_id: int) -> None:
        await self._delete("tasks", {"id": f"eq.{task_id}"})

    async def delete_expired_tasks(self, before: datetime) -> None:
        cutoff = before.astimezone(UTC).isoformat()
        await self._delete("tasks", {"expires_at": f"lt.{cutoff}"})

    # ---- habits ----

    async def list_habits(self) -> list[Row]:
        return await self._list("habits", {"select": "*", "order": "created_at.desc"})

    async def create_habit(self, row: Row) -> Row:
        return await self._create("habits", row)

    async def update_habit(self, habit_id: int, updates: Row) -> None:
        await self._update("habits", habit_id, updates)

    async def delete_habit(self, habit_id: int) -> None:
        await self._delete("habits", {"id": f"eq.{habit_id}"})

    # ---- reminders ----

    async def list_reminders(self) -> list[Row]:
        return await self._list("reminders", {"completed": "eq.false", "order": "time.asc"})

    async def create_reminder(self, row: Row) -> Row:
        return await self._create("reminders", row)

    async def delete_reminder(self, reminder_id: int) -> None:
        await self._delete("reminders", {"id": f"eq.{reminder_id}"})

    # ---- completions ----

    async def list_completions(self) -> list[Row]:
        return await self._list("completions", {"select": "*"})

    async def upsert_completion(self, date_key: str, completed: bool) -> None:
        await self._request(
            "POST",
            "/completions",
            params={"on_conflict": "date"},
            json={"date": date_key, "completed": bool(completed)},
            headers={"Prefer": "resolution=merge-duplicates"},
        )
