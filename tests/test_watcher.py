"""Tests for zenhance.watcher — polling change feed."""

import os

import anyio

from zenhance.watcher import FileWatcher, diff, snapshot, watch_changes


class TestSnapshot:
    async def test_files_under_directories(self, tmp_path) -> None:
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "one.py").write_text("1")
        (tmp_path / "two.html").write_text("2")
        result = await snapshot([tmp_path, tmp_path / "missing"])
        assert set(result) == {
            (tmp_path / "a" / "one.py").resolve(),
            (tmp_path / "two.html").resolve(),
        }

    async def test_single_file(self, tmp_path) -> None:
        file = tmp_path / "routes.json"
        file.write_text("[]")
        assert list(await snapshot([file])) == [file.resolve()]

    def test_diff(self, tmp_path) -> None:
        a, b, c = tmp_path / "a", tmp_path / "b", tmp_path / "c"
        before = {a: 1.0, b: 1.0}
        after = {b: 2.0, c: 1.0}
        assert diff(before, after) == {a, b, c}
        assert diff(after, after) == set()


class TestWatchChanges:
    async def test_yields_modified_file(self, tmp_path) -> None:
        file = tmp_path / "IndexController.py"
        file.write_text("v1")

        async def touch() -> None:
            await anyio.sleep(0.05)
            stat = file.stat()
            os.utime(file, (stat.st_atime, stat.st_mtime + 10))

        feed = watch_changes([tmp_path], interval=0.01)
        with anyio.fail_after(5):
            async with anyio.create_task_group() as tg:
                tg.start_soon(touch)
                changed = await feed.__anext__()
            await feed.aclose()
        assert changed == {file.resolve()}


class TestFileWatcher:
    async def test_callback_errors_do_not_stop_watching(self, tmp_path) -> None:
        seen: list = []
        done = anyio.Event()

        async def callback(path) -> None:
            seen.append(path)
            if len(seen) == 1:
                raise RuntimeError("handler failed")
            done.set()

        watcher = FileWatcher([tmp_path], callback, interval=0.01)
        with anyio.fail_after(5):
            async with anyio.create_task_group() as tg:
                tg.start_soon(watcher.run)
                await anyio.sleep(0.05)
                (tmp_path / "first.py").write_text("1")
                while not seen:
                    await anyio.sleep(0.01)
                (tmp_path / "second.py").write_text("2")
                await done.wait()
                tg.cancel_scope.cancel()
        assert [p.name for p in seen] == ["first.py", "second.py"]
