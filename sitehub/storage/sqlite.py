"""
SQLite page store: one ``pages`` table, one short-lived connection per query.
"""
from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

from sitehub.errors import StoreError
from sitehub.storage.base import PageStore

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS pages (
    filename TEXT PRIMARY KEY,
    content  TEXT NOT NULL
)
"""


class SQLitePageStore(PageStore):
    name = "sqlite"

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    async def _connect(self) -> aiosqlite.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(self.db_path, timeout=5.0)
        try:
            await conn.execute(SCHEMA)
        except aiosqlite.Error:
            await conn.close()
            raise
        return conn

    async def get(self, key: str) -> str | None:
        try:
            conn = await self._connect()
            try:
                async with conn.execute(
                    "SELECT content FROM pages WHERE filename = ? LIMIT 1", (key,)
                ) as cursor:
                    row = await cursor.fetchone()
            finally:
                await conn.close()
        except aiosqlite.Error as exc:
            raise StoreError(f"select failed for {key!r}") from exc
        return row[0] if row else None

    async def _upsert(self, key: str, content: str) -> None:
        try:
            conn = await self._connect()
            try:
                await conn.execute(
                    "INSERT INTO pages (filename, content) VALUES (?, ?) "
                    "ON CONFLICT(filename) DO UPDATE SET content = excluded.content",
                    (key, content),
                )
                await conn.commit()
            finally:
                await conn.close()
        except aiosqlite.Error as exc:
            raise StoreError(f"upsert failed for {key!r}") from exc
        logger.info("Saved page %s (%d chars)", key, len(content))

    async def clear(self) -> None:
        try:
            conn = await self._connect()
            try:
                await conn.execute("DELETE FROM pages")
                await conn.commit()
            finally:
                await conn.close()
        except aiosqlite.Error as exc:
            raise StoreError("delete failed") from exc
        logger.info("Cleared all stored pages")
