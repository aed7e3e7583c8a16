from __future__ import annotations

from abc import ABC, abstractmethod

from sitehub.errors import PageValidationError


class PageStore(ABC):
    """Upsert-by-key persistence for page markup (``filename`` → ``content``)."""

    name: str

    @abstractmethod
    async def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def _upsert(self, key: str, content: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def clear(self) -> None:
        raise NotImplementedError

    async def upsert(self, key: str, content: str) -> None:
        if not key or not content:
            raise PageValidationError("Missing filename or content")
        await self._upsert(key, content)
