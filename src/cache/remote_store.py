# src/cache/remote_store.py — v1
"""Remote sync tier backed by a Supabase (PostgREST) ``cache_entries`` table.

Best-effort by contract: TieredCache catches every error raised here.
Row shape: key, data (jsonb), timestamp, expires_at, type, user_id.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from agenticad.cache.base_cache_store import BaseCacheStore
from agenticad.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class SupabaseRemoteStore(BaseCacheStore):
    """Key-value PUT/GET over the Supabase REST API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "cache_entries",
        user_id: str | None = None,
        timeout_s: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._user_id = user_id or None
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def get(self, key: str) -> CacheEntry | None:
        params = {"key": f"eq.{key}", "select": "*"}
        resp = await self._client.get(
            self._endpoint, params=params, headers=self._headers
        )
        resp.raise_for_status()
        rows = resp.json()
        if not rows:
            return None
        return _row_to_entry(rows[0])

    async def put(self, entry: CacheEntry) -> None:
        headers = dict(self._headers)
        headers["Prefer"] = "resolution=merge-duplicates,return=minimal"
        resp = await self._client.post(
            self._endpoint,
            params={"on_conflict": "key"},
            json=_entry_to_row(entry, self._user_id),
            headers=headers,
        )
        resp.raise_for_status()

    async def delete(self, key: str) -> None:
        resp = await self._client.delete(
            self._endpoint, params={"key": f"eq.{key}"}, headers=self._headers
        )
        resp.raise_for_status()

    async def clear(self, kind: str | None = None) -> int:
        params = self._scope_params()
        if kind is not None:
            params["type"] = f"eq.{kind}"
        if not params:
            # PostgREST refuses unfiltered deletes.
            params["key"] = "not.is.null"
        headers = dict(self._headers)
        headers["Prefer"] = "return=representation"
        resp = await self._client.delete(
            self._endpoint, params=params, headers=headers
        )
        resp.raise_for_status()
        return len(resp.json() or [])

    async def list_entries(self) -> list[CacheEntry]:
        params = {"select": "*", **self._scope_params()}
        resp = await self._client.get(
            self._endpoint, params=params, headers=self._headers
        )
        resp.raise_for_status()
        entries: list[CacheEntry] = []
        for row in resp.json():
            try:
                entries.append(_row_to_entry(row))
            except (KeyError, ValueError):
                continue
        return entries

    async def count(self) -> int:
        headers = dict(self._headers)
        headers["Prefer"] = "count=exact"
        params = {"select": "key", **self._scope_params()}
        resp = await self._client.head(
            self._endpoint, params=params, headers=headers
        )
        resp.raise_for_status()
        content_range = resp.headers.get("content-range", "")
        total = content_range.rsplit("/", 1)[-1]
        return int(total) if total.isdigit() else 0

    async def close(self) -> None:
        await self._client.aclose()

    def _scope_params(self) -> dict[str, str]:
        if self._user_id:
            return {"user_id": f"eq.{self._user_id}"}
        return {}


def _ms_to_iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat()


def _iso_to_ms(value: str) -> int:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def _entry_to_row(entry: CacheEntry, user_id: str | None) -> dict[str, Any]:
    return {
        "key": entry.key,
        "data": entry.value,
        "timestamp": _ms_to_iso(entry.created_at_ms),
        "expires_at": _ms_to_iso(entry.expires_at_ms),
        "type": entry.kind,
        "user_id": user_id,
    }


def _row_to_entry(row: dict[str, Any]) -> CacheEntry:
    created = _iso_to_ms(row["timestamp"])
    expires = _iso_to_ms(row["expires_at"])
    return CacheEntry(
        key=row["key"],
        kind=row["type"],
        value=row["data"],
        created_at_ms=created,
        ttl_ms=max(expires - created, 1),
        sync_to_remote=True,
    )
