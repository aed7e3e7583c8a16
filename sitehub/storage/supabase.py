"""
Supabase page store: pages live in a PostgREST table (``filename`` unique, ``content``).
"""
from __future__ import annotations

import logging
import ssl

import httpx

from sitehub.errors import StoreError
from sitehub.storage.base import PageStore

logger = logging.getLogger(__name__)


class SupabasePageStore(PageStore):
    """Minimal async PostgREST client for the pages table."""

    name = "supabase"

    def __init__(
        self,
        url: str,
        key: str,
        table: str = "pages",
        ca_file: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base = url.rstrip("/")
        self.table = table
        self._headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
        }
        self._verify: ssl.SSLContext | bool = ssl.create_default_context(cafile=ca_file) if ca_file else True
        self._transport = transport

    def _rest_url(self) -> str:
        return f"{self.base}/rest/v1/{self.table}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=15, verify=self._verify, transport=self._transport)

    async def get(self, key: str) -> str | None:
        params = {"select": "content", "filename": f"eq.{key}", "limit": "1"}
        try:
            async with self._client() as client:
                headers = {**self._headers, "Accept": "application/json"}
                res = await client.get(self._rest_url(), headers=headers, params=params)
                res.raise_for_status()
                rows = res.json()
        except httpx.HTTPError as exc:
            raise StoreError(f"select failed for {key!r}") from exc
        return rows[0]["content"] if rows else None

    async def _upsert(self, key: str, content: str) -> None:
        headers = {
            **self._headers,
            "Content-Type": "application/json",
            "Prefer": "resolution=merge-duplicates,return=minimal",
        }
        try:
            async with self._client() as client:
                res = await client.post(
                    self._rest_url(),
                    headers=headers,
                    params={"on_conflict": "filename"},
                    json={"filename": key, "content": content},
                )
                res.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreError(f"upsert failed for {key!r}") from exc
        logger.info("Saved page %s to Supabase", key)

    async def clear(self) -> None:
        # PostgREST refuses an unfiltered DELETE
        try:
            async with self._client() as client:
                res = await client.delete(
                    self._rest_url(), headers=self._headers, params={"filename": "not.is.null"}
                )
                res.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreError("delete failed") from exc
        logger.info("Cleared Supabase pages table")
