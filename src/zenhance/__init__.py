"""Zenhance — convention-based MVC dispatch for Python web apps.

Requests map to controllers and actions by URL convention::

    GET /user-profile/show-all  ->  UserProfileController.showAllAction
                                    views/scripts/user-profile/show-all.html

Basic usage::

    from zenhance import App

    app = App.from_directory("/srv/site")
    app.run()
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ActionNotFound",
    "App",
    "AppConfig",
    "ConfigurationError",
    "Controller",
    "ControllerNotFound",
    "HTTPError",
    "NotFound",
    "Registry",
    "Request",
    "Response",
    "TemplateNotFound",
    "ZenhanceError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import zenhance`` fast while providing a clean top-level API.
    """
    if name == "App":
        from zenhance.app import App

        return App

    if name == "AppConfig":
        from zenhance.config import AppConfig

        return AppConfig

    if name == "Controller":
        from zenhance.controller import Controller

        return Controller

    if name == "Registry":
        from zenhance.registry import Registry

        return Registry

    if name == "Request":
        from zenhance.http.request import Request

        return Request

    if name == "Response":
        from zenhance.http.response import Response

        return Response

    if name in (
        "ActionNotFound",
        "ConfigurationError",
        "ControllerNotFound",
        "HTTPError",
        "NotFound",
        "TemplateNotFound",
        "ZenhanceError",
    ):
        from zenhance import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
