"""Development server.

Starts a pounce ASGI server with the live zenhance App object. Code
reloading is the App's own job (its file watcher invalidates caches),
so pounce runs single-worker without its process reloader.
"""


def run_dev_server(app: object, host: str, port: int) -> None:
    """Start a pounce server for *app*.

    Pounce's ``run()`` takes an import string, but zenhance has a live
    ``App`` object, so ``pounce.Server`` is used directly with the ASGI
    callable. Requires the ``server`` extra.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(host=host, port=port, workers=1, reload=False)
    server = Server(config, app)
    server.run()
