"""Handler module cache with explicit invalidation.

Controllers and models live as ``.py`` files under the application
directory. The first request for a file reads and executes it in a fresh
module namespace, extracts the exported definition, and caches it under
the file's absolute path. Later requests get the cached definition with
no I/O at all.

The cache never checks timestamps. Entries disappear only when someone
calls ``invalidate()``. In practice that is the file watcher, on change events
for the file or for directories it depends on. Applications can also
``register()`` definitions up front and ``reload()`` them explicitly.

Concurrent loads of the same uncached path share one read: a per-path
lock makes every caller wait for the single in-flight load and receive
the fully constructed definition.
"""

import importlib.machinery
import importlib.util
import logging
import types
from collections.abc import Callable
from pathlib import Path
from typing import Any

import anyio
import anyio.to_thread

from zenhance.errors import NotFound

logger = logging.getLogger("zenhance.loader")

# Pulls the exported definition out of an executed module
type Extractor = Callable[[types.ModuleType, str], Any]


def export_named(module: types.ModuleType, logical_name: str) -> Any:
    """Return the module attribute named after the file.

    ``IndexController.py`` should define ``IndexController``. A module may
    instead set ``export`` to the definition it wants registered. Returns
    ``None`` when neither exists.
    """
    definition = getattr(module, logical_name, None)
    if definition is None:
        definition = getattr(module, "export", None)
    return definition


def export_module(module: types.ModuleType, logical_name: str) -> Any:  # noqa: ARG001
    """Return the executed module itself (used for models and libraries)."""
    return module


class _SourceLoader(importlib.machinery.SourceFileLoader):
    """Source loader that never writes bytecode.

    Cached ``.pyc`` files are validated by whole-second mtime and size, so
    an edit right after a load could otherwise execute stale code.
    """

    def set_data(self, path: str, data: bytes, *, _mode: int = 0o666) -> None:
        return None


class HandlerCache:
    """Absolute source path -> loaded definition.

    Usage::

        cache = HandlerCache()
        cls = await cache.load(config.controllers_path, "IndexController")
        cache.invalidate(config.controllers_path / "IndexController.py")
    """

    __slots__ = ("_entries", "_extract", "_locks", "not_found", "suffix")

    def __init__(
        self,
        *,
        extract: Extractor = export_named,
        not_found: type[NotFound] = NotFound,
        suffix: str = ".py",
    ) -> None:
        self._entries: dict[Path, Any] = {}
        # Only paths with a load in flight; pruned when the last waiter leaves
        self._locks: dict[Path, anyio.Lock] = {}
        self._extract = extract
        self.not_found = not_found
        self.suffix = suffix

    # -- Lookup --

    def path_for(self, directory: str | Path, logical_name: str) -> Path:
        """Absolute source path for *logical_name* under *directory*.

        Raises the configured ``not_found`` error if the name resolves to
        a file outside *directory*.
        """
        root = Path(directory).resolve()
        parts = [p for p in logical_name.replace("\\", "/").split("/") if p]
        if not parts:
            raise self.not_found(f"Empty handler name under {root}.")
        *parents, name = parts
        path = root.joinpath(*parents, name + self.suffix).resolve()
        if not path.is_relative_to(root):
            raise self.not_found(f"{logical_name} resolves outside {root}.")
        return path

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and Path(path).resolve() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: str | Path) -> Any:
        """The cached definition for *path*, or ``None``."""
        return self._entries.get(Path(path).resolve())

    async def load(self, directory: str | Path, logical_name: str) -> Any:
        """Return the definition exported by ``<directory>/<logical_name>.py``.

        Raises the configured ``not_found`` error when the file is missing.
        """
        path = self.path_for(directory, logical_name)
        cached = self._entries.get(path)
        if cached is not None:
            return cached

        lock = self._locks.get(path)
        if lock is None:
            lock = self._locks[path] = anyio.Lock()
        try:
            async with lock:
                # Another task may have finished the load while we waited
                cached = self._entries.get(path)
                if cached is not None:
                    return cached
                definition = await self._read_and_execute(path, logical_name)
                self._entries[path] = definition
        finally:
            stats = lock.statistics()
            if not stats.locked and not stats.tasks_waiting and self._locks.get(path) is lock:
                del self._locks[path]
        return definition

    async def _read_and_execute(self, path: Path, logical_name: str) -> Any:
        if not await anyio.Path(path).is_file():
            msg = f"{logical_name} ({path}) not found."
            raise self.not_found(msg)

        name = f"_zenhance_{logical_name}"
        spec = importlib.util.spec_from_file_location(
            name, path, loader=_SourceLoader(name, str(path))
        )
        if spec is None or spec.loader is None:
            msg = f"{logical_name} ({path}) cannot be loaded."
            raise self.not_found(msg)
        module = importlib.util.module_from_spec(spec)
        await anyio.to_thread.run_sync(spec.loader.exec_module, module)
        definition = self._extract(module, logical_name)
        if definition is None:
            msg = f"{logical_name} ({path}) does not export {logical_name!r}."
            raise self.not_found(msg)
        logger.debug("Loaded %s", path)
        return definition

    # -- Registration and invalidation --

    def register(self, path: str | Path, definition: Any) -> None:
        """Register *definition* for *path* without touching the filesystem."""
        self._entries[Path(path).resolve()] = definition

    def invalidate(self, path: str | Path) -> bool:
        """Drop the entry for *path*. Returns True if one existed."""
        removed = self._entries.pop(Path(path).resolve(), None) is not None
        if removed:
            logger.debug("Invalidated %s", path)
        return removed

    def invalidate_under(self, directory: str | Path) -> int:
        """Drop every entry whose path lies inside *directory*."""
        root = Path(directory).resolve()
        stale = [p for p in self._entries if p.is_relative_to(root)]
        for path in stale:
            del self._entries[path]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    async def reload(self, directory: str | Path, logical_name: str) -> Any:
        """Invalidate and load again. An explicit re-registration."""
        self.invalidate(self.path_for(directory, logical_name))
        return await self.load(directory, logical_name)
