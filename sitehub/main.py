from __future__ import annotations

import logging
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, PlainTextResponse, Response
from fastapi.templating import Jinja2Templates

from sitehub.config import Settings, get_settings, settings
from sitehub.errors import ArchiveError, DispatchError, PageValidationError, PublishPayloadError, StoreError
from sitehub.models import MissingPage, PageUpdate, ResolvedPage, SiteBundle, StaticPage
from sitehub.services.mailer import Mailer
from sitehub.services.publisher import Publisher
from sitehub.services.resolver import resolve_page
from sitehub.storage.base import PageStore
from sitehub.storage.sqlite import SQLitePageStore
from sitehub.storage.supabase import SupabasePageStore
from sitehub.utils import normalize_page_key

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.add_middleware(CORSMiddleware, allow_origins=settings.cors_origins, allow_methods=["*"], allow_headers=["*"])
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def get_page_store(cfg: Settings = Depends(get_settings)) -> PageStore:
    if cfg.page_store == "supabase":
        if not cfg.supabase_url or not cfg.supabase_key:
            raise RuntimeError("PAGE_STORE=supabase needs SUPABASE_URL and SUPABASE_KEY")
        return SupabasePageStore(cfg.supabase_url, cfg.supabase_key, cfg.supabase_table, cfg.supabase_ca_file)
    return SQLitePageStore(cfg.database_path)


def get_publisher(cfg: Settings = Depends(get_settings)) -> Publisher:
    return Publisher(cfg)


def get_mailer(cfg: Settings = Depends(get_settings)) -> Mailer:
    return Mailer(cfg)


def _render_page(page: ResolvedPage) -> Response:
    if isinstance(page, StaticPage):
        return FileResponse(str(page.path), media_type="text/html")
    return HTMLResponse(page.content)


@app.get("/health")
async def health(cfg: Settings = Depends(get_settings)):
    return {"ok": True, "store": cfg.page_store}


@app.get("/")
async def homepage(cfg: Settings = Depends(get_settings)):
    path = Path(cfg.template_dir) / "homepage.html"
    if not path.is_file():
        raise HTTPException(status_code=404)
    return FileResponse(str(path), media_type="text/html")


@app.get("/template/{filename}", response_class=HTMLResponse)
async def template_preview(
    request: Request,
    filename: str,
    store: PageStore = Depends(get_page_store),
    cfg: Settings = Depends(get_settings),
):
    """Preview frame: always renders something, even for unknown pages."""
    key = normalize_page_key(filename)
    try:
        page = await resolve_page(key, store, cfg.template_dir)
    except StoreError:
        logger.exception("Store error in /template for %s", key)
        return templates.TemplateResponse(
            request, "error.html", {"message": "Database error"}, status_code=500
        )

    if isinstance(page, MissingPage):
        return templates.TemplateResponse(request, "not_found.html", {"key": key})
    return _render_page(page)


@app.post("/update")
async def update_page(body: PageUpdate, store: PageStore = Depends(get_page_store)):
    if not body.filename or not body.content:
        return JSONResponse({"success": False, "error": "Missing filename or content"}, status_code=400)

    key = normalize_page_key(body.filename)
    try:
        await store.upsert(key, body.content)
    except PageValidationError as exc:
        return JSONResponse({"success": False, "error": str(exc)}, status_code=400)
    except StoreError:
        logger.exception("Store error in /update for %s", key)
        return JSONResponse({"success": False, "error": "Error saving file"}, status_code=500)
    return {"success": True, "message": "✅ Saved successfully!"}


@app.get("/api/load/{page_id}")
async def load_page(page_id: str, store: PageStore = Depends(get_page_store)):
    key = normalize_page_key(page_id)
    try:
        content = await store.get(key)
    except StoreError:
        logger.exception("Store error in /api/load for %s", key)
        return JSONResponse({"success": False, "error": "Failed to load template"}, status_code=500)

    if content is None:
        return {"success": False, "error": "No saved template found"}
    return {"success": True, "template": content}


@app.post("/reset")
async def reset_pages(store: PageStore = Depends(get_page_store)):
    try:
        await store.clear()
    except StoreError:
        logger.exception("Store error in /reset")
        return JSONResponse({"success": False, "error": "Error resetting pages"}, status_code=500)
    return {"success": True}


@app.get("/publish")
async def publish_and_email(
    publisher: Publisher = Depends(get_publisher),
    mailer: Mailer = Depends(get_mailer),
):
    try:
        result = await publisher.publish_fixed()
    except ArchiveError:
        logger.exception("Publish failed while archiving")
        return PlainTextResponse("❌ Error creating archive", status_code=500)

    try:
        await mailer.send_archive(result.archive_path)
    except DispatchError:
        # The archive stays on disk; only delivery failed
        logger.exception("Publish %s: email dispatch failed", result.publish_id)
        return PlainTextResponse("❌ Error sending email", status_code=500)

    # Delivered; the archive has no other consumer
    await publisher.discard(result)
    return PlainTextResponse("✅ Website published and emailed!")


@app.post("/publish")
async def publish_bundle(bundle: SiteBundle, publisher: Publisher = Depends(get_publisher)):
    try:
        result = await publisher.publish_bundle(bundle)
    except PublishPayloadError as exc:
        logger.warning("Rejected publish payload: %s", exc)
        return JSONResponse({"message": f"❌ {exc}"}, status_code=400)
    except ArchiveError:
        logger.exception("POST /publish failed while archiving")
        return JSONResponse({"message": "❌ Error publishing project"}, status_code=500)

    return {
        "message": "✅ Project published and saved as zip!",
        "publish_id": result.publish_id,
        "download_url": result.download_url,
    }


@app.get("/publish/{publish_id}/download")
async def download_archive(publish_id: str, publisher: Publisher = Depends(get_publisher)):
    path = publisher.archive_path(publish_id)
    if path is None:
        raise HTTPException(status_code=404)
    return FileResponse(str(path), media_type="application/zip", filename="site.zip")


# Must stay last: catches any single-segment path not matched above
@app.get("/{page}")
async def serve_page(
    page: str,
    store: PageStore = Depends(get_page_store),
    cfg: Settings = Depends(get_settings),
):
    key = normalize_page_key(page)
    try:
        resolved = await resolve_page(key, store, cfg.template_dir)
    except StoreError:
        logger.exception("Store error in /{page} for %s", key)
        return PlainTextResponse("Database error", status_code=500)

    if isinstance(resolved, MissingPage):
        # Fall through to the app's regular not-found handling
        raise HTTPException(status_code=404)
    return _render_page(resolved)
