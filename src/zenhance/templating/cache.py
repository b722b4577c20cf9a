"""Compiled template cache keyed by absolute template path.

Independent from the handler cache: different keys, different
invalidation triggers. Both are driven by the same file watcher.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import anyio
from kida import Environment

from zenhance.errors import TemplateNotFound, TemplateRenderError

if TYPE_CHECKING:
    from kida import Template

logger = logging.getLogger("zenhance.templating")


class TemplateCache:
    """Absolute template path -> compiled kida ``Template``."""

    __slots__ = ("_entries", "encoding", "env")

    def __init__(self, env: Environment, *, encoding: str = "utf-8") -> None:
        self.env = env
        self.encoding = encoding
        self._entries: dict[Path, Template] = {}

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and Path(path).resolve() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, path: str | Path) -> Template:
        """Compiled template for *path*, reading the file on first use.

        Raises ``TemplateNotFound`` if the file is missing and
        ``TemplateRenderError`` if it does not compile.
        """
        key = Path(path).resolve()
        cached = self._entries.get(key)
        if cached is not None:
            return cached
        file = anyio.Path(key)
        if not await file.is_file():
            raise TemplateNotFound(f"Template {key} does not exist.")
        source = await file.read_text(encoding=self.encoding)
        return self._store(key, source)

    def get_sync(self, path: str | Path) -> Template:
        """Blocking variant of ``get()`` for use inside a running render."""
        key = Path(path).resolve()
        cached = self._entries.get(key)
        if cached is not None:
            return cached
        if not key.is_file():
            raise TemplateNotFound(f"Template {key} does not exist.")
        return self._store(key, key.read_text(encoding=self.encoding))

    def _store(self, key: Path, source: str) -> Template:
        try:
            template = self.env.from_string(source)
        except Exception as exc:
            raise TemplateRenderError(f"Template {key} failed to compile: {exc}") from exc
        self._entries[key] = template
        logger.debug("Compiled %s", key)
        return template

    def invalidate(self, path: str | Path) -> bool:
        """Drop the compiled template for *path*. Returns True if one existed."""
        return self._entries.pop(Path(path).resolve(), None) is not None

    def invalidate_under(self, directory: str | Path) -> int:
        root = Path(directory).resolve()
        stale = [p for p in self._entries if p.is_relative_to(root)]
        for path in stale:
            del self._entries[path]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
