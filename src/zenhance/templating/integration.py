"""Kida environment setup.

Creates a kida Environment from zenhance's AppConfig. The environment
is created once per application initialization and shared by every
render in that generation.
"""

from collections.abc import Callable
from typing import Any

from kida import ChoiceLoader, Environment, FileSystemLoader

from zenhance.config import AppConfig


def create_environment(
    config: AppConfig,
    globals_: dict[str, Any] | None = None,
    filters: dict[str, Callable[..., Any]] | None = None,
) -> Environment:
    """Create a kida Environment from application configuration.

    Views, layouts and partials are compiled from their absolute paths by
    the template cache. The loader only serves ``{% include %}`` and
    ``{% extends %}`` lookups, relative to the scripts and layouts
    directories that exist on disk.
    """
    loaders = [
        FileSystemLoader(str(path))
        for path in (config.scripts_path, config.layouts_path)
        if path.is_dir()
    ]
    options: dict[str, Any] = {"autoescape": config.autoescape, "auto_reload": config.debug}
    if loaders:
        options["loader"] = ChoiceLoader(loaders)
    env = Environment(**options)

    if filters:
        env.update_filters(filters)

    for name, value in (globals_ or {}).items():
        env.add_global(name, value)

    return env
