"""Route table entries and pattern compilation."""

import re
from dataclasses import dataclass, field

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}

# HTTP verbs a route entry may name; "all" matches any method
VERBS: frozenset[str] = frozenset(
    {"all", "get", "post", "put", "delete", "patch", "head", "options"}
)

_PARAM_RE = re.compile(r"^\{(\w+)(?::(\w+))?\}$")
_LEGACY_PARAM_RE = re.compile(r"^:(\w+)$")


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Static:  ``users``      (is_param=False)
    Param:   ``{id}``       (is_param=True, param_name="id")
    Typed:   ``{id:int}``   (is_param=True, param_type="int")
    Legacy:  ``:id``        (same as ``{id}``)
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


def parse_pattern(pattern: str) -> list[PathSegment]:
    """Parse a route pattern into segments.

    Raises ``KeyError`` for an unknown converter name.
    """
    segments: list[PathSegment] = []
    for part in pattern.strip("/").split("/"):
        if not part:
            continue
        match = _PARAM_RE.match(part) or _LEGACY_PARAM_RE.match(part)
        if match is None:
            segments.append(PathSegment(part))
            continue
        name = match.group(1)
        param_type = (match.group(2) if match.re is _PARAM_RE else None) or "str"
        if param_type not in CONVERTERS:
            raise KeyError(param_type)
        segments.append(PathSegment(part, is_param=True, param_name=name, param_type=param_type))
    return segments


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a route pattern into an anchored regex with named groups."""
    parts: list[str] = []
    for seg in parse_pattern(pattern):
        if seg.is_param:
            regex, _ = CONVERTERS[seg.param_type]
            parts.append(f"(?P<{seg.param_name}>{regex})")
        else:
            parts.append(re.escape(seg.value))
    return re.compile("^/" + "/".join(parts) + "/?$")


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """An explicit route. Immutable once loaded.

    ``controller_name`` and ``action_name`` are URL segments (``"user"``,
    ``"show-all"``), resolved to class and method names by convention.
    """

    pattern: str
    controller_name: str
    action_name: str = "index"
    verb: str = "all"
    module: str | None = None
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", compile_pattern(self.pattern))

    @property
    def logical_path(self) -> str:
        """The convention path the entry dispatches to."""
        return f"/{self.controller_name}/{self.action_name}"

    def accepts(self, method: str) -> bool:
        return self.verb == "all" or self.verb == method.lower()


@dataclass(frozen=True, slots=True)
class RouteTableMatch:
    """Result of matching a request against the route table."""

    entry: RouteEntry
    params: dict[str, str]

    @property
    def logical_path(self) -> str:
        return self.entry.logical_path
