import asyncio
import json

import httpx
import pytest

from sitehub.errors import PageValidationError, StoreError
from sitehub.storage.sqlite import SQLitePageStore
from sitehub.storage.supabase import SupabasePageStore


@pytest.fixture
def store(tmp_path):
    return SQLitePageStore(tmp_path / "db" / "pages.db")


def test_sqlite_roundtrip(store):
    async def run():
        assert await store.get("about.html") is None
        await store.upsert("about.html", "<h1>Hi</h1>")
        return await store.get("about.html")

    assert asyncio.run(run()) == "<h1>Hi</h1>"


def test_sqlite_upsert_last_write_wins(store):
    async def run():
        await store.upsert("index.html", "one")
        await store.upsert("index.html", "two")
        return await store.get("index.html")

    assert asyncio.run(run()) == "two"


def test_sqlite_clear(store):
    async def run():
        await store.upsert("a.html", "A")
        await store.upsert("b.html", "B")
        await store.clear()
        return await store.get("a.html"), await store.get("b.html")

    assert asyncio.run(run()) == (None, None)


@pytest.mark.parametrize("key,content", [("", "x"), ("a.html", "")])
def test_upsert_validation_happens_before_storage(tmp_path, key, content):
    store = SQLitePageStore(tmp_path / "never" / "pages.db")
    with pytest.raises(PageValidationError):
        asyncio.run(store.upsert(key, content))
    assert not (tmp_path / "never").exists()


def test_sqlite_driver_error_is_wrapped(tmp_path):
    # A directory where the database file should be
    (tmp_path / "pages.db").mkdir()
    store = SQLitePageStore(tmp_path / "pages.db")
    with pytest.raises(StoreError):
        asyncio.run(store.get("index.html"))


class FakePostgREST:
    """In-memory stand-in for the Supabase pages endpoint."""

    def __init__(self):
        self.rows: dict[str, str] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            key = request.url.params["filename"].removeprefix("eq.")
            rows = [{"content": self.rows[key]}] if key in self.rows else []
            return httpx.Response(200, json=rows)
        if request.method == "POST":
            row = json.loads(request.content)
            self.rows[row["filename"]] = row["content"]
            return httpx.Response(201)
        if request.method == "DELETE":
            self.rows.clear()
            return httpx.Response(204)
        return httpx.Response(405)


def test_supabase_store_roundtrip():
    backend = FakePostgREST()
    store = SupabasePageStore("https://db.example.co/", "secret", transport=httpx.MockTransport(backend))

    async def run():
        await store.upsert("about.html", "v1")
        await store.upsert("about.html", "v2")
        first = await store.get("about.html")
        await store.clear()
        return first, await store.get("about.html")

    assert asyncio.run(run()) == ("v2", None)

    post = backend.requests[0]
    assert post.url.path == "/rest/v1/pages"
    assert post.url.params["on_conflict"] == "filename"
    assert "resolution=merge-duplicates" in post.headers["Prefer"]
    assert post.headers["apikey"] == "secret"
    delete = backend.requests[-2]
    assert delete.method == "DELETE"
    assert delete.url.params["filename"] == "not.is.null"


def test_supabase_http_error_is_wrapped():
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    store = SupabasePageStore("https://db.example.co", "secret", transport=transport)
    with pytest.raises(StoreError):
        asyncio.run(store.get("index.html"))
