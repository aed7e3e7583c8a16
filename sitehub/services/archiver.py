"""
Archiver — zips a staging folder into a single archive file.

``build_archive`` only returns once the zip file has been closed, so anything
awaiting it (email dispatch, the publish response) sees a complete file.
"""
from __future__ import annotations

import asyncio
import logging
import zipfile
from pathlib import Path

from sitehub.errors import ArchiveError

logger = logging.getLogger(__name__)

COMPRESSION_LEVEL = 9


def _write_zip(source_dir: Path, archive_path: Path) -> int:
    count = 0
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    # mode "w" truncates any archive left at this path
    with zipfile.ZipFile(
        archive_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=COMPRESSION_LEVEL
    ) as zf:
        for path in sorted(source_dir.rglob("*")):
            if path.is_file():
                zf.write(path, arcname=path.relative_to(source_dir).as_posix())
                count += 1
    return count


async def build_archive(source_dir: str | Path, archive_path: str | Path) -> Path:
    source_dir = Path(source_dir)
    archive_path = Path(archive_path)
    if not source_dir.is_dir():
        raise ArchiveError(f"Staging folder missing: {source_dir}")

    try:
        count = await asyncio.to_thread(_write_zip, source_dir, archive_path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise ArchiveError(f"Could not write {archive_path.name}: {exc}") from exc

    logger.info("Archive ready: %s (%d files, %d bytes)", archive_path, count, archive_path.stat().st_size)
    return archive_path
