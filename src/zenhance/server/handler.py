"""ASGI handler — translates ASGI scope/messages to zenhance types.

The only component that touches raw ASGI for HTTP. Converts the scope to
a typed Request, hands it to the dispatcher, and sends the Response back
through ASGI send().
"""

from zenhance._internal.asgi import Receive, Scope, Send
from zenhance.dispatcher import Dispatcher
from zenhance.http.request import Request
from zenhance.server.errors import publish_error
from zenhance.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatcher: Dispatcher,
) -> None:
    """Process a single HTTP request through the dispatcher."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    try:
        response = await dispatcher.dispatch(request)
    except Exception as exc:
        response = publish_error(
            exc, request, error_reporting=dispatcher.config.error_reporting
        )
    await send_response(response, send, head=request.method == "HEAD")
