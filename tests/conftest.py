"""Shared fixtures: an application tree on disk."""

import textwrap
from pathlib import Path

import pytest

from zenhance.config import AppConfig


class Site:
    """Writes application files under a temporary root."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.config = AppConfig(root=root, watch=False)

    def write(self, relative: str, content: str) -> Path:
        path = self.config.application_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    def controller(self, name: str, source: str, *, module: str | None = None) -> Path:
        prefix = f"modules/{module}/controllers" if module else "controllers"
        return self.write(f"{prefix}/{name}.py", source)

    def view(self, logical_path: str, source: str, *, module: str | None = None) -> Path:
        prefix = f"modules/{module}/views/scripts" if module else "views/scripts"
        return self.write(f"{prefix}/{logical_path}.html", source)

    def layout(self, name: str, source: str) -> Path:
        return self.write(f"views/layouts/{name}.html", source)


@pytest.fixture
def site(tmp_path: Path) -> Site:
    return Site(tmp_path)
