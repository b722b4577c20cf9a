"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. Directory fields are relative to ``root`` (or to
the application directory) unless given as absolute paths.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(root="/srv/site", port=8080, default_layout="main")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False

    # Layout on disk
    root: str | Path = "."
    application_dir: str | Path = "application"
    controllers_dir: str | Path = "controllers"
    models_dir: str | Path = "models"
    library_dir: str | Path = "library"
    modules_dir: str | Path = "modules"
    views_dir: str | Path = "views"
    scripts_dir: str | Path = "views/scripts"
    layouts_dir: str | Path = "views/layouts"
    config_file: str | Path = "configs/application.json"
    routes_file: str | Path = "configs/routes.json"
    bootstrap_file: str | Path = "Bootstrap.py"
    encoding: str = "utf-8"

    # Paths under these prefixes are never dispatched
    static_prefixes: tuple[str, ...] = ("/public",)

    # Templates
    template_extension: str = ".html"
    default_layout: str | None = None
    autoescape: bool = True

    # Errors
    error_reporting: bool = True

    # Change watching
    watch: bool = True
    watch_interval: float = 1.0

    # -- Resolved paths --

    @property
    def root_path(self) -> Path:
        return Path(self.root).resolve()

    @property
    def application_path(self) -> Path:
        return self._under(self.root_path, self.application_dir)

    @property
    def controllers_path(self) -> Path:
        return self._under(self.application_path, self.controllers_dir)

    @property
    def models_path(self) -> Path:
        return self._under(self.application_path, self.models_dir)

    @property
    def library_path(self) -> Path:
        return self._under(self.application_path, self.library_dir)

    @property
    def modules_path(self) -> Path:
        return self._under(self.application_path, self.modules_dir)

    @property
    def views_path(self) -> Path:
        return self._under(self.application_path, self.views_dir)

    @property
    def scripts_path(self) -> Path:
        return self._under(self.application_path, self.scripts_dir)

    @property
    def layouts_path(self) -> Path:
        return self._under(self.application_path, self.layouts_dir)

    @property
    def config_path(self) -> Path:
        return self._under(self.application_path, self.config_file)

    @property
    def routes_path(self) -> Path:
        return self._under(self.application_path, self.routes_file)

    @property
    def bootstrap_path(self) -> Path:
        return self._under(self.application_path, self.bootstrap_file)

    def module_controllers_path(self, module: str | None) -> Path:
        """Controller directory for *module*, or the application default."""
        if module is None:
            return self.controllers_path
        return self.modules_path / module / "controllers"

    @staticmethod
    def _under(base: Path, value: str | Path) -> Path:
        path = Path(value)
        if path.is_absolute():
            return path
        return (base / path).resolve()

    # -- Construction from parsed JSON --

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], **overrides: Any) -> "AppConfig":
        """Build a config from a parsed ``application.json`` mapping.

        Accepts the nested layout written by earlier releases::

            {
                "path": {"root": "...", "controllers": "..."},
                "server": {"port": 3000, "static": ["public"]},
                "error": {"reporting": true},
                "layout": {"default": "main"},
                "encoding": "UTF-8"
            }

        as well as flat field names (``{"port": 8080}``). Unknown keys are
        ignored. Keyword *overrides* win over anything in *data*.
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {k: v for k, v in data.items() if k in known}

        paths = data.get("path") or {}
        for key, field_name in _PATH_KEYS.items():
            if paths.get(key):
                values[field_name] = paths[key]

        server = data.get("server") or {}
        if "port" in server:
            values["port"] = int(server["port"])
        if "host" in server:
            values["host"] = server["host"]
        if "static" in server:
            values["static_prefixes"] = tuple(
                "/" + str(prefix).strip("/") for prefix in server["static"]
            )

        error = data.get("error") or {}
        if "reporting" in error:
            values["error_reporting"] = bool(error["reporting"])

        layout = data.get("layout") or {}
        if "default" in layout:
            values["default_layout"] = layout["default"]

        if "static_prefixes" in values:
            values["static_prefixes"] = tuple(values["static_prefixes"])

        values.update(overrides)
        return cls(**values)


_PATH_KEYS: dict[str, str] = {
    "root": "root",
    "application": "application_dir",
    "controllers": "controllers_dir",
    "models": "models_dir",
    "library": "library_dir",
    "modules": "modules_dir",
    "views": "views_dir",
    "scripts": "scripts_dir",
    "layouts": "layouts_dir",
}


def load_config(path: str | Path, **overrides: Any) -> AppConfig:
    """Read an ``application.json`` file into an ``AppConfig``."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return AppConfig.from_mapping(data, **overrides)


def load_routes(path: str | Path, encoding: str = "utf-8") -> list[dict[str, Any]]:
    """Read a route table file.

    Returns an empty list when the file does not exist. The file holds a
    JSON list of ``{"route": ..., "verb": ..., "module": ..., "action": ...}``
    records, or an object with a ``"routes"`` list.
    """
    file = Path(path)
    if not file.is_file():
        return []
    data = json.loads(file.read_text(encoding=encoding))
    if isinstance(data, Mapping):
        data = data.get("routes", [])
    return list(data)
