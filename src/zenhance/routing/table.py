"""Explicit route table, matched before convention dispatch.

Entries are kept in table order and matched linearly: the first entry
whose pattern matches and whose verb accepts the request method wins.
The table is immutable; a configuration reload builds a new one.
"""

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from zenhance.errors import RouteConfigError
from zenhance.routing.convention import split_path
from zenhance.routing.route import VERBS, RouteEntry, RouteTableMatch

logger = logging.getLogger("zenhance.routing")


def entry_from_record(record: Mapping[str, Any]) -> RouteEntry:
    """Build a RouteEntry from a ``{route, verb?, module?, action?}`` record.

    ``action`` may name ``"controller/action"``; a bare action takes its
    controller from ``controller`` or, failing that, from the first static
    segment of the pattern.

    Raises ``RouteConfigError`` when the record cannot be registered.
    """
    pattern = record.get("route")
    if not pattern or not isinstance(pattern, str):
        raise RouteConfigError(f"Route record {dict(record)!r} has no 'route' pattern.")

    verb = str(record.get("verb") or "all").lower()
    if verb not in VERBS:
        msg = f"Unsupported verb {record.get('verb')!r} for route {pattern!r}."
        raise RouteConfigError(msg)

    controller = record.get("controller")
    action = record.get("action") or "index"
    if not isinstance(action, str):
        raise RouteConfigError(f"Route {pattern!r}: 'action' must be a string, got {action!r}.")
    if controller is not None and not isinstance(controller, str):
        msg = f"Route {pattern!r}: 'controller' must be a string, got {controller!r}."
        raise RouteConfigError(msg)
    if "/" in action:
        controller, _, action = action.strip("/").partition("/")
        action = action or "index"
    if not controller:
        static = [s for s in split_path(pattern) if not s.startswith((":", "{"))]
        controller = static[0] if static else "index"

    try:
        return RouteEntry(
            pattern=pattern,
            controller_name=controller.lower(),
            action_name=action,
            verb=verb,
            module=record.get("module") or None,
        )
    except KeyError as exc:
        msg = f"Unknown parameter converter {exc.args[0]!r} in route {pattern!r}."
        raise RouteConfigError(msg) from exc
    except re.error as exc:
        # Repeated or non-identifier parameter names
        raise RouteConfigError(f"Invalid route pattern {pattern!r}: {exc}.") from exc


class RouteTable:
    """Ordered, immutable set of explicit routes.

    Usage::

        table = RouteTable.from_records([
            {"route": "/login", "action": "auth/login"},
            {"route": "/admin/{page}", "module": "admin", "action": "dashboard"},
        ])
        match = table.match("GET", "/admin/users")
    """

    __slots__ = ("_entries", "errors")

    def __init__(
        self,
        entries: Iterable[RouteEntry] = (),
        errors: Iterable[RouteConfigError] = (),
    ) -> None:
        self._entries: tuple[RouteEntry, ...] = tuple(entries)
        self.errors: tuple[RouteConfigError, ...] = tuple(errors)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "RouteTable":
        """Register every valid record; log and skip the invalid ones."""
        entries: list[RouteEntry] = []
        errors: list[RouteConfigError] = []
        for record in records:
            try:
                entries.append(entry_from_record(record))
            except RouteConfigError as exc:
                logger.error("Skipping route: %s", exc)
                errors.append(exc)
        return cls(entries, errors)

    def extended(self, entries: Iterable[RouteEntry]) -> "RouteTable":
        """Return a new table with *entries* appended."""
        return RouteTable((*self._entries, *entries), self.errors)

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def match(self, method: str, path: str) -> RouteTableMatch | None:
        """Return the first entry matching *method* and *path*, if any."""
        for entry in self._entries:
            if not entry.accepts(method):
                continue
            found = entry.regex.match(path)
            if found is not None:
                return RouteTableMatch(entry=entry, params=dict(found.groupdict()))
        return None
