"""Polling file-change feed.

Snapshots modification times under a set of files and directories and
yields the paths that changed, appeared, or disappeared since the last
poll::

    async for changed in watch_changes([config.application_path], interval=1.0):
        for path in changed:
            await app.handle_change(path)

Polling keeps the feed portable and dependency-free at the OS level. All
filesystem access goes through ``anyio.Path``.
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from pathlib import Path

import anyio

logger = logging.getLogger("zenhance.watcher")

type Snapshot = dict[Path, float]


async def snapshot(paths: Iterable[str | Path]) -> Snapshot:
    """Map every file under *paths* to its modification time."""
    result: Snapshot = {}
    for root in paths:
        root_path = anyio.Path(root)
        if not await root_path.exists():
            continue
        if await root_path.is_file():
            result[Path(root).resolve()] = (await root_path.stat()).st_mtime
            continue
        async for entry in root_path.rglob("*"):
            try:
                if await entry.is_file():
                    result[Path(entry).resolve()] = (await entry.stat()).st_mtime
            except FileNotFoundError:
                # Removed between listing and stat
                continue
    return result


def diff(before: Snapshot, after: Snapshot) -> set[Path]:
    """Paths added, removed, or modified between two snapshots."""
    changed = {path for path in before.keys() ^ after.keys()}
    changed.update(path for path, mtime in after.items() if before.get(path, mtime) != mtime)
    return changed


async def watch_changes(
    paths: Iterable[str | Path],
    *,
    interval: float = 1.0,
) -> AsyncIterator[set[Path]]:
    """Yield sets of changed paths, polling every *interval* seconds."""
    roots = tuple(paths)
    previous = await snapshot(roots)
    while True:
        await anyio.sleep(interval)
        current = await snapshot(roots)
        changed = diff(previous, current)
        previous = current
        if changed:
            yield changed


class FileWatcher:
    """Drives a change callback from ``watch_changes``.

    The callback gets one path at a time. Errors raised by it are logged
    and the watcher keeps running.
    """

    __slots__ = ("callback", "interval", "paths")

    def __init__(
        self,
        paths: Iterable[str | Path],
        callback: Callable[[Path], Awaitable[None]],
        *,
        interval: float = 1.0,
    ) -> None:
        self.paths = tuple(paths)
        self.callback = callback
        self.interval = interval

    async def run(self) -> None:
        logger.info("Watching %s", ", ".join(str(p) for p in self.paths))
        async for changed in watch_changes(self.paths, interval=self.interval):
            for path in sorted(changed):
                logger.info("Changed: %s", path)
                try:
                    await self.callback(path)
                except Exception:
                    logger.exception("Change handler failed for %s", path)
