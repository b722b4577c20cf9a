"""Error responses for failed dispatches.

Every error is logged. When error reporting is enabled the client gets
a small HTML page with the message and traceback; otherwise only the
status text. Built with plain f-strings so a broken template setup
cannot prevent error reporting.
"""

import html
import logging
import traceback
from http import HTTPStatus

from zenhance.errors import HTTPError
from zenhance.http.request import Request
from zenhance.http.response import Response

logger = logging.getLogger("zenhance.server")


def status_for(exc: BaseException) -> int:
    if isinstance(exc, HTTPError):
        return exc.status
    return 500


def error_page(exc: BaseException) -> str:
    """HTML body describing *exc*."""
    message = exc.detail if isinstance(exc, HTTPError) and exc.detail else str(exc)
    detail = "".join(traceback.format_exception(exc))
    return (
        "<h1>Zenhance Error</h1>"
        f"<p><strong>{html.escape(message)}</strong></p>"
        f"<code><pre>{html.escape(detail)}</pre></code>"
    )


def publish_error(
    exc: BaseException,
    request: Request | None = None,
    *,
    error_reporting: bool = True,
) -> Response:
    """Log *exc* and convert it into a best-effort error response."""
    status = status_for(exc)
    where = f"{request.method} {request.url}" if request is not None else "dispatch"

    if isinstance(exc, HTTPError):
        logger.error("%d %s: %s: %s", status, where, type(exc).__name__, exc.detail)
    else:
        logger.exception("%d %s", status, where, exc_info=exc)

    if error_reporting:
        body = error_page(exc)
    else:
        try:
            body = HTTPStatus(status).phrase
        except ValueError:
            body = str(status)
    return Response(body=body, status=status)
