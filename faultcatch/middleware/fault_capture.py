"""
ASGI middleware that routes request faults through the fault dispatcher.

Binds each HTTP request for caller address resolution and turns
exceptions escaping the application into dispatched faults.
"""

from html import escape

from starlette.requests import Request
from starlette.responses import HTMLResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from faultcatch.exceptions import FaultCatchError, FaultHalt
from faultcatch.services.caller_address import bind_request, reset_request
from faultcatch.services.dispatcher import FaultDispatcher
from faultcatch.utils.logging import get_logger, log_error_with_context

logger = get_logger(__name__)

HALT_STATUS_CODE = 500


def halt_response(halt: FaultHalt) -> Response:
    """Build the response that ends a halted request."""
    if halt.body is None:
        return Response(status_code=HALT_STATUS_CODE)
    return HTMLResponse(f"<pre>{escape(halt.body)}</pre>", status_code=HALT_STATUS_CODE)


class FaultCaptureMiddleware:
    """
    Middleware dispatching faults raised while serving HTTP requests.

    Exceptions raised after the response has started cannot be turned
    into a response and are re-raised untouched.
    """

    def __init__(self, app: ASGIApp, dispatcher: FaultDispatcher):
        self.app = app
        self.dispatcher = dispatcher

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        token = bind_request(request)
        try:
            try:
                await self.app(scope, receive, send_wrapper)
                return
            except FaultHalt as halt:
                if response_started:
                    raise
                response = halt_response(halt)
            except FaultCatchError:
                raise
            except Exception as exc:
                if response_started:
                    raise
                try:
                    self.dispatcher.handle_exception(exc)
                except FaultHalt as halt:
                    response = halt_response(halt)
                except FaultCatchError as error:
                    log_error_with_context(
                        logger,
                        "Fault handling failed",
                        error,
                        request_path=request.url.path,
                    )
                    raise
                else:
                    raise
        finally:
            reset_request(token)

        await response(scope, receive, send)
