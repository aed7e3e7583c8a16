from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, field_validator


# ── Page resolution ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class StoredPage:
    key: str
    content: str


@dataclass(frozen=True)
class StaticPage:
    key: str
    path: Path


@dataclass(frozen=True)
class MissingPage:
    key: str


ResolvedPage = StoredPage | StaticPage | MissingPage


# ── Request bodies ────────────────────────────────────────────────────────────

class PageUpdate(BaseModel):
    # Defaults let the route answer missing fields with its own 400
    filename: str = ""
    content: str = ""


class ImagePayload(BaseModel):
    name: str
    data: str     # base64


class SiteBundle(BaseModel):
    html: str = ""    # percent-encoded
    css: str = ""
    js: str = ""
    images: list[ImagePayload] = []

    # Editor clients send null for empty parts
    @field_validator("html", "css", "js", mode="before")
    @classmethod
    def _null_text(cls, value):
        return "" if value is None else value

    @field_validator("images", mode="before")
    @classmethod
    def _null_images(cls, value):
        return [] if value is None else value


# ── Publish ───────────────────────────────────────────────────────────────────

@dataclass
class PublishResult:
    publish_id: str
    archive_path: Path
    files: list[str] = field(default_factory=list)

    @property
    def download_url(self) -> str:
        return f"/publish/{self.publish_id}/download"
