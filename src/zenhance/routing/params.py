"""Request parameter map.

Two legacy syntaxes feed the same map: path-segment pairs after the
controller/action prefix (``/user/edit/id/7/tab/info``) and the query
string (``?id=7&tab=info``). Explicit route parameters come first.

Precedence, lowest to highest::

    route parameters < path-segment pairs < query string

Later writes replace earlier ones; the key keeps its first position.
"""

from collections.abc import Iterable, Mapping

from zenhance.http.request import Request


def pair_segments(segments: Iterable[str]) -> dict[str, str]:
    """Read ``key/value/key/value`` segments into a mapping.

    A trailing key without a value maps to ``""``.
    """
    items = list(segments)
    pairs: dict[str, str] = {}
    for index in range(0, len(items), 2):
        key = items[index]
        pairs[key] = items[index + 1] if index + 1 < len(items) else ""
    return pairs


def build_parameters(
    route_params: Mapping[str, str],
    remainder: Iterable[str],
    query_pairs: Iterable[tuple[str, str]],
) -> dict[str, str]:
    """Merge the three parameter sources in increasing precedence."""
    parameters: dict[str, str] = dict(route_params)
    parameters.update(pair_segments(remainder))
    for key, value in query_pairs:
        parameters[key] = value
    return parameters


def ensure_parameters(request: Request, remainder: Iterable[str]) -> dict[str, str]:
    """Return the request's parameter map, building it on first call only."""
    existing = request.parameters
    if existing is not None:
        return existing
    return request.attach_parameters(
        build_parameters(request.route_params, remainder, request.query.pairs)
    )
