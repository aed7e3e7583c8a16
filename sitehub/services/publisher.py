"""
Publisher — stages site files and packages them into a zip.

Two modes:
  1. fixed set   — copy ``settings.publish_files`` from the template folder
  2. site bundle — html/css/js (percent-encoded) + base64 images from the editor

Every run gets its own ``publish_id``; staging lives in ``publish_dir/<id>/``
and the archive in ``publish_dir/<id>.zip``, so concurrent runs never touch
each other's files. Only the newest ``settings.publish_keep`` archives are
kept; older ones are pruned before each new archive is written.
"""
from __future__ import annotations

import asyncio
import logging
import re
import shutil
import uuid
from pathlib import Path

from sitehub.config import Settings
from sitehub.errors import PublishPayloadError
from sitehub.models import PublishResult, SiteBundle
from sitehub.services.archiver import build_archive
from sitehub.utils import decode_base64, decode_component, is_plain_filename

logger = logging.getLogger(__name__)

BUNDLE_TEXT_FILES = {"html": "index.html", "css": "style.css", "js": "script.js"}

_PUBLISH_ID = re.compile(r"^[0-9a-f]{32}$")


def clear_directory(folder: Path) -> None:
    """Empty ``folder`` (creating it if needed) so no earlier file survives."""
    folder.mkdir(parents=True, exist_ok=True)
    for entry in folder.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


def decode_bundle(bundle: SiteBundle) -> list[tuple[str, bytes]]:
    """Decode the whole payload up front; raises ``PublishPayloadError``."""
    files: list[tuple[str, bytes]] = []
    for field_name, filename in BUNDLE_TEXT_FILES.items():
        text = decode_component(getattr(bundle, field_name), field_name)
        files.append((filename, text.encode("utf-8")))

    reserved = set(BUNDLE_TEXT_FILES.values())
    for img in bundle.images:
        if not is_plain_filename(img.name) or img.name in reserved:
            raise PublishPayloadError(f"Invalid image name: {img.name!r}")
        files.append((img.name, decode_base64(img.data, img.name)))
    return files


def _write_files(staging: Path, files: list[tuple[str, bytes]]) -> None:
    clear_directory(staging)
    for name, data in files:
        (staging / name).write_bytes(data)


def _copy_files(staging: Path, template_dir: Path, names: list[str]) -> list[str]:
    clear_directory(staging)
    copied = []
    for name in names:
        src = template_dir / name
        if not src.is_file():
            logger.debug("Publish: %s not in %s, skipped", name, template_dir)
            continue
        shutil.copyfile(src, staging / name)
        copied.append(name)
    return copied


def _prune_archives(publish_dir: Path, keep: int) -> None:
    """Delete all but the newest ``keep`` archives in ``publish_dir``."""
    if not publish_dir.is_dir():
        return
    archives = sorted(publish_dir.glob("*.zip"), key=lambda p: p.stat().st_mtime, reverse=True)
    for old in archives[keep:]:
        old.unlink(missing_ok=True)
        logger.info("Pruned old archive %s", old.name)


class Publisher:
    def __init__(self, settings: Settings):
        self.template_dir = Path(settings.template_dir)
        self.publish_dir = Path(settings.publish_dir)
        self.publish_files = list(settings.publish_files)
        self.keep_archives = max(settings.publish_keep, 1)

    def archive_path(self, publish_id: str) -> Path | None:
        if not _PUBLISH_ID.match(publish_id):
            return None
        path = self.publish_dir / f"{publish_id}.zip"
        return path if path.is_file() else None

    async def discard(self, result: PublishResult) -> None:
        """Remove an archive that has been delivered elsewhere (e.g. emailed)."""
        await asyncio.to_thread(result.archive_path.unlink, True)

    async def _package(self, publish_id: str, staging: Path, files: list[str]) -> PublishResult:
        await asyncio.to_thread(_prune_archives, self.publish_dir, self.keep_archives - 1)
        archive = await build_archive(staging, self.publish_dir / f"{publish_id}.zip")
        await asyncio.to_thread(shutil.rmtree, staging, True)
        return PublishResult(publish_id=publish_id, archive_path=archive, files=files)

    async def publish_fixed(self) -> PublishResult:
        publish_id = uuid.uuid4().hex
        staging = self.publish_dir / publish_id
        copied = await asyncio.to_thread(_copy_files, staging, self.template_dir, self.publish_files)
        logger.info("Publish %s: staged %d of %d listed files", publish_id, len(copied), len(self.publish_files))
        return await self._package(publish_id, staging, copied)

    async def publish_bundle(self, bundle: SiteBundle) -> PublishResult:
        files = decode_bundle(bundle)
        publish_id = uuid.uuid4().hex
        staging = self.publish_dir / publish_id
        await asyncio.to_thread(_write_files, staging, files)
        logger.info("Publish %s: staged %d files (%d images)", publish_id, len(files), len(bundle.images))
        return await self._package(publish_id, staging, [name for name, _ in files])
