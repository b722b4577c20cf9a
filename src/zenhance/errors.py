"""Zenhance exception hierarchy.

Shared across the route table, dispatcher, loader, and renderer so every
module raises and catches the same types.
"""

import html
from dataclasses import dataclass


class ZenhanceError(Exception):
    """Base for all zenhance-specific errors."""


class ConfigurationError(ZenhanceError):
    """Raised when application configuration is invalid."""


class RouteConfigError(ConfigurationError):
    """Raised when a route table record cannot be registered.

    Fatal to that single record only. The table logs it and keeps
    registering the remaining records.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(ZenhanceError):
    """An error that maps directly to an HTTP status code.

    Raised during dispatch. The dispatcher catches these and converts
    them into an error response.
    """

    status: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — nothing handles the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class ControllerNotFound(NotFound):  # noqa: N818
    """The controller source file for the resolved name does not exist."""


class ActionNotFound(NotFound):  # noqa: N818
    """The controller exists but has no member for the resolved action."""


class TemplateNotFound(NotFound):  # noqa: N818
    """A view, layout, or partial template file does not exist."""


class TemplateRenderError(ZenhanceError):
    """A template failed to compile or render."""


class PartialRenderError(ZenhanceError):
    """A partial failed to render.

    Never raised out of a render. The ``partial`` helper returns the
    instance in place of markup so the outer template still renders.
    """

    def __html__(self) -> str:
        return f'<span class="zenhance-partial-error">{html.escape(str(self))}</span>'
