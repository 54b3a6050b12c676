"""Vectors data store clients.

Two implementations share one small surface (``insert``, ``update``,
``select``, ``delete``):

- ``SupabaseStore`` talks to the hosted Supabase database through its
  PostgREST endpoint (``/rest/v1/<table>``).
- ``MemoryStore`` keeps rows in memory. The CLI uses it for ``--dry-run`` and
  the test suite uses it to inspect what an import wrote.

Neither offers transactions or ordering guarantees across calls.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, cast

import requests

from trello2vectors.exceptions import StoreError

logger = logging.getLogger(__name__)

TABLES = ("boards", "tags", "tasks", "subtasks", "trello_imports")


def _encode_filters(filters: dict[str, Any] | None) -> dict[str, str]:
    """Turn {column: value} equality filters into PostgREST query params"""
    params = {}
    for column, value in (filters or {}).items():
        if value is None:
            params[column] = "is.null"
        elif isinstance(value, bool):
            params[column] = f"eq.{str(value).lower()}"
        else:
            params[column] = f"eq.{value}"
    return params


def _encode_order(order: str | None) -> str | None:
    """Accept "col" / "-col" and return PostgREST "col.asc" / "col.desc" """
    if not order:
        return None
    if order.startswith("-"):
        return f"{order[1:]}.desc"
    return f"{order}.asc"


class SupabaseStore:
    """Minimal PostgREST client for the Vectors Supabase project.

    Args:
        url: Project URL, e.g. https://xyzcompany.supabase.co
        api_key: The project's anon (or service) key
        access_token: Optional user JWT; row-level security evaluates requests
                      as this user. Defaults to the API key.
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: str | None = None,
        timeout: float = 30,
        verify_ssl: bool = True,
    ):
        if not url:
            raise ValueError("Supabase URL cannot be empty")
        if not api_key:
            raise ValueError("Supabase API key cannot be empty")

        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.session = requests.Session()
        self.session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {access_token or api_key}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

    def _call(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Any:
        headers = {"Prefer": prefer} if prefer else None
        logger.debug("%s %s %s", method, table, params or "")
        try:
            response = self.session.request(
                method,
                f"{self.base_url}/{table}",
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.RequestException as e:
            raise StoreError(f"Network error contacting data store: {e}", table=table) from e

        if not response.ok:
            message = response.text
            try:
                body = response.json()
                if isinstance(body, dict) and body.get("message"):
                    message = body["message"]
            except ValueError:
                pass
            raise StoreError(
                f"{method} {table} failed (HTTP {response.status_code}): {message}",
                table=table,
                status_code=response.status_code,
                response_text=response.text,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(
                f"{method} {table} returned invalid JSON (HTTP {response.status_code})",
                table=table,
                status_code=response.status_code,
                response_text=response.text,
            ) from e

    def insert(self, table: str, rows: dict | list[dict]) -> list[dict]:
        """Insert one or many rows and return them as stored"""
        payload = rows if isinstance(rows, list) else [rows]
        result = self._call("POST", table, json=payload, prefer="return=representation")
        return cast(list[dict], result or [])

    def update(self, table: str, patch: dict, filters: dict[str, Any]) -> None:
        if not filters:
            raise ValueError("update() requires at least one filter")
        self._call("PATCH", table, params=_encode_filters(filters), json=patch)

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        limit: int | None = None,
        columns: str = "*",
    ) -> list[dict]:
        params = _encode_filters(filters)
        params["select"] = columns
        encoded_order = _encode_order(order)
        if encoded_order:
            params["order"] = encoded_order
        if limit is not None:
            params["limit"] = str(limit)
        return cast(list[dict], self._call("GET", table, params=params) or [])

    def delete(self, table: str, filters: dict[str, Any]) -> None:
        if not filters:
            raise ValueError("delete() requires at least one filter")
        self._call("DELETE", table, params=_encode_filters(filters))


class MemoryStore:
    """In-memory store with the same surface as ``SupabaseStore``.

    ``fail_on`` is an optional predicate ``(operation, table, rows) -> str | None``;
    when it returns a message the operation raises ``StoreError`` with it
    instead of writing. Useful for simulating a rejected row or batch.
    """

    def __init__(
        self,
        fail_on: Callable[[str, str, list[dict]], str | None] | None = None,
    ):
        self.tables: dict[str, list[dict]] = {name: [] for name in TABLES}
        self.fail_on = fail_on
        self.calls: list[tuple[str, str, int]] = []

    def _check(self, operation: str, table: str, rows: list[dict]) -> None:
        self.calls.append((operation, table, len(rows)))
        if self.fail_on:
            message = self.fail_on(operation, table, rows)
            if message:
                raise StoreError(message, table=table)

    @staticmethod
    def _matches(row: dict, filters: dict[str, Any] | None) -> bool:
        return all(row.get(column) == value for column, value in (filters or {}).items())

    def insert(self, table: str, rows: dict | list[dict]) -> list[dict]:
        payload = rows if isinstance(rows, list) else [rows]
        self._check("insert", table, payload)

        stored = []
        for row in payload:
            record = {"id": str(uuid.uuid4()), **row}
            if table == "trello_imports":
                record.setdefault("imported_at", datetime.now(timezone.utc).isoformat())
            stored.append(record)
        self.tables.setdefault(table, []).extend(stored)
        return [dict(record) for record in stored]

    def update(self, table: str, patch: dict, filters: dict[str, Any]) -> None:
        if not filters:
            raise ValueError("update() requires at least one filter")
        matched = [row for row in self.tables.get(table, []) if self._matches(row, filters)]
        self._check("update", table, matched)
        for row in matched:
            row.update(patch)

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        limit: int | None = None,
        columns: str = "*",
    ) -> list[dict]:
        rows = [dict(row) for row in self.tables.get(table, []) if self._matches(row, filters)]
        self._check("select", table, rows)
        if order:
            key = order.lstrip("-")
            rows.sort(
                key=lambda row: (row.get(key) is None, row.get(key)),
                reverse=order.startswith("-"),
            )
        if limit is not None:
            rows = rows[:limit]
        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            rows = [{c: row.get(c) for c in wanted} for row in rows]
        return rows

    def delete(self, table: str, filters: dict[str, Any]) -> None:
        if not filters:
            raise ValueError("delete() requires at least one filter")
        kept = []
        removed = []
        for row in self.tables.get(table, []):
            (removed if self._matches(row, filters) else kept).append(row)
        self._check("delete", table, removed)
        self.tables[table] = kept
