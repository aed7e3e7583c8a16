"""
Page resolution: stored override → static template file → missing.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from sitehub.models import MissingPage, ResolvedPage, StaticPage, StoredPage
from sitehub.storage.base import PageStore
from sitehub.utils import is_within

logger = logging.getLogger(__name__)


def find_static_page(key: str, template_dir: str | Path) -> Path | None:
    root = Path(template_dir)
    candidate = root / key
    # Keys are not sanitised; never serve anything outside the template dir
    if not is_within(candidate, root):
        logger.warning("Refusing page key outside template dir: %s", key)
        return None
    return candidate if candidate.is_file() else None


async def resolve_page(key: str, store: PageStore, template_dir: str | Path) -> ResolvedPage:
    """First hit wins. Store errors propagate as ``StoreError``."""
    content = await store.get(key)
    if content is not None:
        return StoredPage(key, content)

    path = await asyncio.to_thread(find_static_page, key, template_dir)
    if path is not None:
        return StaticPage(key, path)

    return MissingPage(key)
