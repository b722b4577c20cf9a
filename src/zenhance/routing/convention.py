"""Convention dispatch — URL segments to controller and action names.

Pure string transforms, no I/O::

    "/user-profile/show-all"  -> UserProfileController.showAllAction
    "/"                       -> IndexController.indexAction
"""

from dataclasses import dataclass

from zenhance.errors import ActionNotFound, ControllerNotFound


def pascal_case(value: str) -> str:
    """Lower-case *value*, then capitalise each hyphen-separated piece.

    ``"user-profile"`` -> ``"UserProfile"``
    """
    value = value.lower()
    if not value:
        return value
    return "".join(part[:1].upper() + part[1:] for part in value.split("-"))


def camel_case(value: str) -> str:
    """Capitalise every hyphen-separated piece except the first.

    ``"show-all"`` -> ``"showAll"``. The first piece keeps its case.
    """
    if not value:
        return value
    first, *rest = value.split("-")
    return first + "".join(part[:1].upper() + part[1:] for part in rest)


def controller_name(segment: str) -> str:
    """Controller class (and file) name for a URL segment."""
    return pascal_case((segment or "index") + "-controller")


def action_name(segment: str) -> str:
    """Action method name for a URL segment."""
    return camel_case((segment or "index") + "-action")


def split_path(path: str) -> list[str]:
    """Tokenize *path* into non-empty segments.

    The ASGI server has already percent-decoded the path. Decoding again
    would turn an encoded ``%2F`` into a separator inside a segment.
    """
    return [part for part in path.split("/") if part]


def is_safe_segment(segment: str) -> bool:
    """False for segments that could step outside a lookup directory."""
    return segment not in {".", ".."} and "/" not in segment and "\\" not in segment


@dataclass(frozen=True, slots=True)
class Routing:
    """Controller and action resolved for one request. Never persisted."""

    controller_path: str
    controller_name: str
    action_path: str
    action_name: str
    module: str | None = None
    remainder: tuple[str, ...] = ()

    @property
    def view_name(self) -> str:
        """Logical view path, ``<controller_path>/<action_path>``."""
        return f"{self.controller_path}/{self.action_path}"


def resolve_routing(path: str, module: str | None = None) -> Routing:
    """Resolve a request path by naming convention.

    The first segment (lower-cased) selects the controller, the second
    the action; both default to ``"index"``. Remaining segments are
    returned as ``remainder`` for parameter extraction.

    Raises ``ControllerNotFound`` or ``ActionNotFound`` when the segment
    that names a file or template is not a plain name (``..``, a
    backslash, an embedded slash).
    """
    parts = split_path(path)
    controller_path = parts[0].lower() if parts else "index"
    action_path = parts[1] if len(parts) > 1 else "index"
    if not is_safe_segment(controller_path):
        raise ControllerNotFound(f"Invalid controller segment {controller_path!r}.")
    if not is_safe_segment(action_path):
        raise ActionNotFound(f"Invalid action segment {action_path!r}.")
    return Routing(
        controller_path=controller_path,
        controller_name=controller_name(controller_path),
        action_path=action_path,
        action_name=action_name(action_path),
        module=module,
        remainder=tuple(parts[2:]),
    )
