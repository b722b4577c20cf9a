"""Controller contract and the per-request injected context.

A controller is any class whose instances expose ``<name>Action``
methods. Subclassing ``Controller`` is optional; it only declares the
attributes the dispatcher injects::

    from zenhance import Controller

    class UserController(Controller):
        def indexAction(self):
            self.view["users"] = self.registry.get("db").users()
            self.head_link.append("/css/users.css")

        def exportAction(self):
            self.disable_renderer = True
            self.response = self.response.with_content_type("text/csv").with_body("...")

Instances are created for one request and discarded afterwards.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from zenhance.http.request import Request
from zenhance.http.response import Response
from zenhance.registry import HelperSet, Registry
from zenhance.routing.convention import Routing


@dataclass(slots=True)
class ControllerContext:
    """Everything injected into one controller instance."""

    request: Request
    routing: Routing
    helpers: HelperSet
    registry: Registry
    params: dict[str, str]
    layout: str | None = None
    view: dict[str, Any] = field(default_factory=dict)
    response: Response = field(default_factory=Response)

    def set_layout(self, name: str | None) -> None:
        """Select the layout for this cycle only. ``None`` renders the bare view."""
        self.layout = name

    def inject(self, instance: Any) -> None:
        """Copy the context, then every helper, onto *instance*."""
        instance.view = self.view
        instance.request = self.request
        instance.response = self.response
        instance.params = self.params
        instance.routing = self.routing
        instance.registry = self.registry
        instance.helpers = self.helpers
        instance.set_layout = self.set_layout
        instance.disable_renderer = False
        for name, helper in self.helpers.items():
            setattr(instance, name, helper)

    def collect(self, instance: Any) -> None:
        """Read back what the action may have replaced on *instance*."""
        view = getattr(instance, "view", self.view)
        self.view = view if isinstance(view, dict) else dict(view)
        self.response = getattr(instance, "response", self.response)


class Controller:
    """Optional base class declaring the injected attributes."""

    view: dict[str, Any]
    request: Request
    response: Response
    params: dict[str, str]
    routing: Routing
    registry: Registry
    helpers: HelperSet
    set_layout: Callable[[str | None], None]
    disable_renderer: bool = False

    def param(self, name: str, default: str | None = None) -> str | None:
        """A request parameter (route, path pair, or query string)."""
        return self.params.get(name, default)

    def redirect(self, url: str, status: int = 302) -> Response:
        """Replace the response with a redirect and skip rendering."""
        self.disable_renderer = True
        self.response = Response.redirect(url, status)
        return self.response
