"""Process-wide registry and per-request helper sets.

The ``Registry`` is a named key/value store shared by the whole
application (database handles, site settings, anything a bootstrap
callback wants controllers to reach). It also owns the factories for
the render-cycle helpers: accumulators such as ``head_script`` and
``head_link`` that collect tags while a controller runs and emit them
while the layout renders.

Helper *state* is never shared: ``new_cycle()`` builds a fresh
``HelperSet`` for each dispatch, so two requests interleaving at await
points cannot see each other's accumulated tags.

Usage::

    registry = Registry()
    registry.set("site_name", "Example")

    helpers = registry.new_cycle()
    helpers.head_script.append("/js/app.js")
    helpers.head_script.render()
    # Markup('<script type="text/javascript" src="/js/app.js"></script>')
"""

import html
from collections.abc import Callable, Iterator, Mapping
from typing import Any, Protocol

from kida.utils.html import Markup

from zenhance.errors import ConfigurationError

# View-model key that carries the helper snapshot into templates
HELPERS_KEY = "helpers"


class CycleHelper(Protocol):
    """A stateful helper reset at the start of every dispatch cycle."""

    def init(self) -> None: ...

    def render(self) -> Markup: ...


def _attribute_name(name: str) -> str:
    # class_ -> class, data_id -> data-id
    return name.rstrip("_").replace("_", "-")


class TagAccumulator:
    """Collects tags keyed by resource URL and renders them in order.

    Appending the same URL twice keeps one tag: its position is where
    the URL was first seen, its attributes are the last ones written.
    """

    tag: str = ""
    url_attribute: str = ""
    defaults: Mapping[str, str] = {}
    void: bool = False

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, str]] = {}

    def init(self) -> None:
        """Clear this cycle's accumulated tags."""
        self._entries = {}

    def append(self, url: str, attrs: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        """Add (or replace) the tag for *url*.

        Attributes are merged over the tag defaults; ``attrs`` allows names
        that are not valid Python identifiers.
        """
        merged = dict(self.defaults)
        merged.update({k: str(v) for k, v in (attrs or {}).items()})
        merged.update({_attribute_name(k): str(v) for k, v in kwargs.items()})
        merged[self.url_attribute] = url
        self._entries[url] = merged

    set = append

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def render(self) -> Markup:
        """Concatenated markup for every accumulated tag."""
        return Markup("\n".join(self._build(attrs) for attrs in self._entries.values()))

    def _build(self, attrs: Mapping[str, str]) -> str:
        rendered = "".join(
            f' {name}="{html.escape(value, quote=True)}"' for name, value in attrs.items()
        )
        if self.void:
            return f"<{self.tag}{rendered}>"
        return f"<{self.tag}{rendered}></{self.tag}>"


class HeadScript(TagAccumulator):
    """``<script>`` tags for the document head."""

    tag = "script"
    url_attribute = "src"
    defaults = {"type": "text/javascript"}


class HeadLink(TagAccumulator):
    """``<link>`` tags (stylesheets by default) for the document head."""

    tag = "link"
    url_attribute = "href"
    defaults = {"rel": "stylesheet", "type": "text/css"}
    void = True


BUILTIN_HELPERS: dict[str, Callable[[], CycleHelper]] = {
    "head_script": HeadScript,
    "head_link": HeadLink,
}


class HelperSet(Mapping[str, Any]):
    """The helpers of one dispatch cycle. Attribute and item access both work."""

    __slots__ = ("_helpers",)

    def __init__(self, helpers: Mapping[str, Any]) -> None:
        object.__setattr__(self, "_helpers", dict(helpers))

    def __getitem__(self, name: str) -> Any:
        return self._helpers[name]

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._helpers[name]
        except KeyError:
            raise AttributeError(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._helpers)

    def __len__(self) -> int:
        return len(self._helpers)

    def init(self) -> None:
        """Reset every helper's per-cycle state."""
        for helper in self._helpers.values():
            helper.init()

    def snapshot(self) -> dict[str, Callable[[], Markup]]:
        """Render-producing form of each helper, for templates.

        Templates call ``{{ helpers.head_script() }}``; the call renders
        whatever has accumulated by then, so a layout sees tags added
        while its view rendered.
        """
        return {name: helper.render for name, helper in self._helpers.items()}


class Registry:
    """Process-wide named values plus the per-cycle helper factories."""

    __slots__ = ("_factories", "_values")

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._factories: dict[str, Callable[[], CycleHelper]] = dict(BUILTIN_HELPERS)

    @property
    def reserved(self) -> frozenset[str]:
        """Names ``set()`` refuses: every helper plus the view-model key."""
        return frozenset({*self._factories, HELPERS_KEY})

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*.

        Raises ``ConfigurationError`` if *key* is a reserved helper name.
        """
        if key in self.reserved:
            msg = f"Registry key {key!r} is reserved for a built-in helper."
            raise ConfigurationError(msg)
        self._values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def register_helper(self, name: str, factory: Callable[[], CycleHelper]) -> None:
        """Add a custom per-cycle helper. *factory* builds one instance per dispatch."""
        if name in self.reserved or name in self._values:
            msg = f"Helper name {name!r} is already in use."
            raise ConfigurationError(msg)
        self._factories[name] = factory

    def new_cycle(self) -> HelperSet:
        """Fresh, initialized helpers for one dispatch."""
        helpers = HelperSet({name: factory() for name, factory in self._factories.items()})
        helpers.init()
        return helpers
