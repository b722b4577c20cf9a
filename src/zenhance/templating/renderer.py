"""Two-stage rendering: the view, then (optionally) its layout.

The view template for a request lives by convention at
``<scripts>/<controller_path>/<action_path><ext>``. Its output is handed
to the layout template as ``content``, wrapped in ``Markup`` so it is
emitted verbatim. Without a layout the view output is the response body.

A ``partial`` global is registered on the environment once::

    {{ partial("nav/menu", active="home") }}

renders ``<scripts>/partials/nav/menu<ext>`` with the keyword arguments
as its context. A failing partial is replaced inline by its error value
and never aborts the outer render.
"""

import logging
from pathlib import Path
from typing import Any

from kida import Environment
from kida.utils.html import Markup

from zenhance.config import AppConfig
from zenhance.errors import HTTPError, PartialRenderError, TemplateRenderError
from zenhance.routing.convention import Routing
from zenhance.templating.cache import TemplateCache
from zenhance.templating.integration import create_environment

logger = logging.getLogger("zenhance.templating")

# Layout variable that receives the rendered view
CONTENT_KEY = "content"


class Renderer:
    """Renders views and layouts through a shared compiled-template cache."""

    __slots__ = ("cache", "config", "env")

    def __init__(self, config: AppConfig, env: Environment | None = None) -> None:
        self.config = config
        self.env = env if env is not None else create_environment(config)
        self.cache = TemplateCache(self.env, encoding=config.encoding)
        self.env.add_global("partial", self.partial)

    # -- Paths --

    def _file(self, directory: Path, logical_path: str) -> Path:
        parts = [p for p in logical_path.split("/") if p]
        *parents, name = parts
        return directory.joinpath(*parents, name + self.config.template_extension)

    def scripts_path(self, module: str | None = None) -> Path:
        if module is None:
            return self.config.scripts_path
        return self.config.modules_path / module / "views" / "scripts"

    def view_path(self, routing: Routing) -> Path:
        return self._file(self.scripts_path(routing.module), routing.view_name)

    def layout_path(self, layout: str) -> Path:
        return self._file(self.config.layouts_path, layout)

    def partial_path(self, logical_path: str) -> Path:
        return self._file(self.config.scripts_path / "partials", logical_path)

    # -- Rendering --

    async def render(
        self,
        routing: Routing,
        view_model: dict[str, Any],
        layout: str | None = None,
    ) -> str:
        """Render the view for *routing*, wrapped in *layout* when given."""
        content = await self.render_view(routing, view_model)
        if not layout:
            return content
        return await self.render_layout(layout, content, view_model)

    async def render_view(self, routing: Routing, view_model: dict[str, Any]) -> str:
        template = await self.cache.get(self.view_path(routing))
        return _run(template, view_model, routing.view_name)

    async def render_layout(self, layout: str, content: str, view_model: dict[str, Any]) -> str:
        template = await self.cache.get(self.layout_path(layout))
        context = {**view_model, CONTENT_KEY: Markup(content)}
        return _run(template, context, layout)

    def partial(self, path: str, **kwargs: Any) -> Markup | PartialRenderError:
        """Render a partial template as trusted markup, or return the error."""
        try:
            template = self.cache.get_sync(self.partial_path(path))
            return Markup(template.render(kwargs))
        except Exception as exc:
            error = PartialRenderError(f"Partial {path!r} failed: {exc}")
            logger.warning("%s", error)
            return error


def _run(template: Any, context: dict[str, Any], name: str) -> str:
    try:
        return template.render(context)
    except (HTTPError, TemplateRenderError):
        raise
    except Exception as exc:
        raise TemplateRenderError(f"Template {name!r} failed to render: {exc}") from exc
