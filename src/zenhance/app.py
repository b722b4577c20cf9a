"""Zenhance application class.

Holds the configuration plus everything registered before startup
(bootstrap callbacks, programmatic routes, controller plugins). The
runtime state (route table, registry, caches, renderer, dispatcher) is
built by ``initialize()`` and rebuilt wholesale by ``reload()``.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import anyio

from zenhance._internal.asgi import Receive, Scope, Send
from zenhance._internal.invoke import invoke
from zenhance.config import AppConfig, load_config, load_routes
from zenhance.dispatcher import Dispatcher
from zenhance.errors import ConfigurationError, ControllerNotFound
from zenhance.loader import HandlerCache, export_module
from zenhance.registry import Registry
from zenhance.routing.route import RouteEntry
from zenhance.routing.table import RouteTable, entry_from_record
from zenhance.server.handler import handle_request
from zenhance.templating.renderer import Renderer
from zenhance.watcher import FileWatcher

logger = logging.getLogger("zenhance.app")

type Bootstrap = Callable[[App], Any]

# Attribute of the bootstrap file holding its ordered callbacks
BOOTSTRAP_ATTRIBUTE = "bootstrap"


@dataclass(frozen=True, slots=True)
class _Plugin:
    """A controller registered in code rather than discovered on disk."""

    name: str
    definition: Any
    module: str | None = None


class App:
    """The zenhance application.

    Usage::

        app = App.from_directory("/srv/site")

        @app.bootstrap
        def database(app):
            app.registry.set("db", connect())

        app.add_route("/users/{id:int}", "users", "show")

    Bootstrap callbacks run in registration order on every
    ``initialize()``, after the callbacks listed by the application's
    bootstrap file.
    """

    __slots__ = (
        "_bootstraps",
        "_init_lock",
        "_initialized",
        "_overrides",
        "_plugins",
        "_routes",
        "config",
        "dispatcher",
        "handlers",
        "models",
        "registry",
        "renderer",
        "routes",
    )

    def __init__(self, config: AppConfig | None = None, **overrides: Any) -> None:
        if config is None:
            config = AppConfig(**overrides)
        elif overrides:
            config = replace(config, **overrides)
        self.config: AppConfig = config
        self._overrides = overrides
        self._bootstraps: list[Bootstrap] = []
        self._routes: list[RouteEntry] = []
        self._plugins: list[_Plugin] = []
        self._initialized = False
        self._init_lock = anyio.Lock()

        self.routes = RouteTable()
        self.registry = Registry()
        self.handlers = HandlerCache(not_found=ControllerNotFound)
        self.models = HandlerCache(extract=export_module)
        self.renderer: Renderer | None = None
        self.dispatcher: Dispatcher | None = None

    @classmethod
    def from_directory(cls, root: str | Path, **overrides: Any) -> "App":
        """Build an app rooted at *root*, reading its config file if present."""
        config = AppConfig(root=root, **overrides)
        if config.config_path.is_file():
            config = load_config(config.config_path, root=root, **overrides)
        app = cls(config)
        app._overrides = {"root": root, **overrides}
        return app

    # -- Setup --

    def bootstrap(self, func: Bootstrap) -> Bootstrap:
        """Register a bootstrap callback via decorator. Runs with the app."""
        self._bootstraps.append(func)
        return func

    def add_route(
        self,
        pattern: str,
        controller: str | None = None,
        action: str = "index",
        *,
        verb: str = "all",
        module: str | None = None,
    ) -> RouteEntry:
        """Add an explicit route after the ones from the routes file."""
        record: dict[str, Any] = {"route": pattern, "verb": verb, "action": action}
        if controller is not None:
            record["controller"] = controller
        if module is not None:
            record["module"] = module
        entry = entry_from_record(record)
        self._routes.append(entry)
        if self._initialized:
            self.routes = self.routes.extended([entry])
            self._dispatcher().routes = self.routes
        return entry

    def register_controller(self, name: str, definition: Any, *, module: str | None = None) -> None:
        """Register a controller definition without a file on disk.

        *name* is the controller's logical name (``"IndexController"``).
        The registration survives cache invalidation and reloads.
        """
        plugin = _Plugin(name, definition, module)
        self._plugins.append(plugin)
        if self._initialized:
            self._register_plugin(plugin)

    def _register_plugin(self, plugin: _Plugin) -> None:
        directory = self.config.module_controllers_path(plugin.module)
        self.handlers.register(self.handlers.path_for(directory, plugin.name), plugin.definition)

    # -- Initialization --

    async def initialize(self) -> None:
        """Build the runtime state and run bootstrap callbacks in order."""
        async with self._init_lock:
            await self._build()

    async def ensure_initialized(self) -> None:
        if self._initialized:
            return
        async with self._init_lock:
            if not self._initialized:
                await self._build()

    async def reload(self) -> None:
        """Re-read configuration and routes, then initialize from scratch."""
        logger.info("Reloading application")
        if self.config.config_path.is_file():
            overrides = {"root": self.config.root, **self._overrides}
            self.config = load_config(self.config.config_path, **overrides)
        self._initialized = False
        await self.initialize()

    async def _build(self) -> None:
        config = self.config
        records = load_routes(config.routes_path, config.encoding)
        self.routes = RouteTable.from_records(records).extended(self._routes)
        self.registry = Registry()
        self.handlers = HandlerCache(not_found=ControllerNotFound)
        self.models = HandlerCache(extract=export_module)
        self.renderer = Renderer(config)
        self.dispatcher = Dispatcher(
            config,
            routes=self.routes,
            handlers=self.handlers,
            renderer=self.renderer,
            registry=self.registry,
        )
        for plugin in self._plugins:
            self._register_plugin(plugin)

        for callback in [*await self._file_bootstraps(), *self._bootstraps]:
            logger.debug("Bootstrap: %s", getattr(callback, "__name__", callback))
            await invoke(callback, self)

        self._initialized = True
        logger.info(
            "Initialized %s (%d routes, %d plugins)",
            config.application_path,
            len(self.routes),
            len(self._plugins),
        )

    async def _file_bootstraps(self) -> list[Bootstrap]:
        path = self.config.bootstrap_path
        if not path.is_file():
            return []
        module = await self.models.load(path.parent, path.stem)
        # Executed once per initialization; keep it out of the model cache
        self.models.invalidate(path)
        callbacks = getattr(module, BOOTSTRAP_ATTRIBUTE, ())
        if callable(callbacks):
            callbacks = (callbacks,)
        for callback in callbacks:
            if not callable(callback):
                msg = f"{path}: {BOOTSTRAP_ATTRIBUTE} entries must be callables, got {callback!r}"
                raise ConfigurationError(msg)
        return list(callbacks)

    def _dispatcher(self) -> Dispatcher:
        if self.dispatcher is None:
            msg = "App is not initialized. Call initialize() first."
            raise ConfigurationError(msg)
        return self.dispatcher

    # -- Models --

    async def model(self, name: str) -> Any:
        """Load ``<models>/<name>.py`` and return its module namespace."""
        return await self.models.load(self.config.models_path, name)

    # -- Change handling --

    def watch_paths(self) -> tuple[Path, ...]:
        return (self.config.application_path,)

    async def handle_change(self, path: str | Path) -> None:
        """Invalidate whatever depends on *path*."""
        path = Path(path).resolve()
        config = self.config

        if path in {config.config_path, config.routes_path, config.bootstrap_path}:
            await self.reload()
            return
        if not self._initialized:
            return

        renderer = self._dispatcher().renderer
        if path.suffix == config.template_extension and (
            path.is_relative_to(config.views_path) or path.is_relative_to(config.modules_path)
        ):
            renderer.cache.invalidate(path)
        elif path.is_relative_to(config.controllers_path) or path.is_relative_to(
            config.modules_path
        ):
            self.handlers.invalidate(path)
        elif path.is_relative_to(config.models_path) or path.is_relative_to(config.library_path):
            # Controllers may hold references to the old model objects
            self.models.invalidate(path)
            self.handlers.clear()
            for plugin in self._plugins:
                self._register_plugin(plugin)

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the development server (requires the ``server`` extra)."""
        from zenhance.server.dev import run_dev_server

        run_dev_server(self, host or self.config.host, port or self.config.port)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await self.ensure_initialized()
        await handle_request(scope, receive, send, dispatcher=self._dispatcher())

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Startup initializes the app and starts the file watcher; shutdown
        cancels the watcher.
        """
        async with anyio.create_task_group() as tg:
            while True:
                message = await receive()
                msg_type = message["type"]

                if msg_type == "lifespan.startup":
                    try:
                        await self.ensure_initialized()
                    except Exception as exc:
                        logger.exception("Startup failed")
                        await send({"type": "lifespan.startup.failed", "message": str(exc)})
                        tg.cancel_scope.cancel()
                        return
                    if self.config.watch:
                        watcher = FileWatcher(
                            self.watch_paths(),
                            self.handle_change,
                            interval=self.config.watch_interval,
                        )
                        tg.start_soon(watcher.run)
                    await send({"type": "lifespan.startup.complete"})

                elif msg_type == "lifespan.shutdown":
                    tg.cancel_scope.cancel()
                    await send({"type": "lifespan.shutdown.complete"})
                    return
