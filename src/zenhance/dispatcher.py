"""Request dispatcher: explicit routes first, naming convention second.

Pipeline for one request::

    static prefix?   -> 404 (static files are served elsewhere)
    route table      -> rewrite to /<controller>/<action>, maybe a module
    convention       -> FooController.barAction
    parameter map    -> route params < path pairs < query string
    handler cache    -> controller class (loaded once, reused until invalidated)
    forward          -> instance + injected context, call the action
    renderer         -> view, then layout

Every failure on that path becomes an error response. Nothing raised by
application code escapes to the ASGI layer.
"""

import copy
import logging
from typing import Any

from zenhance._internal.invoke import invoke
from zenhance.config import AppConfig
from zenhance.controller import ControllerContext
from zenhance.errors import ActionNotFound, ControllerNotFound
from zenhance.http.request import Request
from zenhance.http.response import Response
from zenhance.loader import HandlerCache
from zenhance.registry import HELPERS_KEY, Registry
from zenhance.routing.convention import Routing, resolve_routing
from zenhance.routing.params import ensure_parameters
from zenhance.routing.table import RouteTable
from zenhance.server.errors import publish_error
from zenhance.templating.renderer import Renderer

logger = logging.getLogger("zenhance.server")


class Dispatcher:
    """Resolves requests to controller actions and renders the result.

    One dispatcher exists per application generation. A configuration
    reload builds a new one with a fresh route table and registry.
    """

    __slots__ = ("config", "handlers", "registry", "renderer", "routes")

    def __init__(
        self,
        config: AppConfig,
        *,
        routes: RouteTable | None = None,
        handlers: HandlerCache | None = None,
        renderer: Renderer | None = None,
        registry: Registry | None = None,
    ) -> None:
        self.config = config
        if handlers is None:
            handlers = HandlerCache(not_found=ControllerNotFound)
        self.routes = routes if routes is not None else RouteTable()
        self.handlers = handlers
        self.renderer = renderer if renderer is not None else Renderer(config)
        self.registry = registry if registry is not None else Registry()

    # -- Resolution --

    def is_static(self, path: str) -> bool:
        """True if *path* falls under a configured static-asset prefix."""
        for prefix in self.config.static_prefixes:
            root = "/" + prefix.strip("/")
            if path == root or path.startswith(root + "/"):
                return True
        return False

    def apply_routes(self, request: Request) -> Request:
        """Rewrite *request* through the first matching explicit route."""
        match = self.routes.match(request.method, request.path)
        if match is None:
            return request
        logger.debug("%s %s matched route %r", request.method, request.path, match.entry.pattern)
        return request.rewritten(
            match.logical_path,
            module=match.entry.module,
            route_params=match.params,
        )

    def resolve(self, request: Request) -> tuple[Request, Routing, dict[str, str]]:
        """Route table first, convention second; build the parameter map."""
        request = self.apply_routes(request)
        routing = resolve_routing(request.path, request.module)
        params = ensure_parameters(request, routing.remainder)
        return request, routing, params

    # -- Dispatch --

    async def dispatch(self, request: Request) -> Response:
        """Handle one request. Always returns a response."""
        if self.is_static(request.path):
            logger.debug("Refusing static path %s", request.path)
            return Response(body="Not Found", status=404)
        try:
            request, routing, params = self.resolve(request)
            directory = self.config.module_controllers_path(routing.module)
            definition = await self.handlers.load(directory, routing.controller_name)
        except Exception as exc:
            return publish_error(exc, request, error_reporting=self.config.error_reporting)
        return await self.forward(request, definition, routing, params)

    async def forward(
        self,
        request: Request,
        definition: Any,
        routing: Routing,
        params: dict[str, str] | None = None,
    ) -> Response:
        """Instantiate the controller, run the action, and render."""
        try:
            if params is None:
                params = ensure_parameters(request, routing.remainder)
            helpers = self.registry.new_cycle()
            context = ControllerContext(
                request=request,
                routing=routing,
                helpers=helpers,
                registry=self.registry,
                params=params,
                layout=self.config.default_layout,
            )

            controller = definition() if isinstance(definition, type) else copy.copy(definition)
            context.inject(controller)

            action = getattr(controller, routing.action_name, None)
            if action is None or not callable(action):
                msg = (
                    f"{routing.action_name} not found in controller {routing.controller_name} "
                    f"({self.config.module_controllers_path(routing.module)})"
                )
                raise ActionNotFound(msg)

            result = await invoke(action)
            context.collect(controller)

            if isinstance(result, Response):
                return result
            if getattr(controller, "disable_renderer", False):
                return context.response

            context.view[HELPERS_KEY] = helpers.snapshot()
            body = await self.renderer.render(routing, context.view, context.layout)
            return context.response.with_body(body)
        except Exception as exc:
            return publish_error(exc, request, error_reporting=self.config.error_reporting)
