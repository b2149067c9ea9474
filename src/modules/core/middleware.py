import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_HEADER = "X-Request-ID"

logger = structlog.get_logger()


class CorrelationIdMiddleware:
    """Tag every log line of a request with a correlation ID.

    The ID comes from the ``X-Request-ID`` header (QR-code scanners on the
    shop floor send one per appointment) or is generated as a UUID4.  It is
    bound into structlog's contextvars and echoed back in the response.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.META.get("HTTP_X_REQUEST_ID") or str(uuid.uuid4())
        correlation_id_var.set(cid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        path = request.get_full_path()
        logger.info("request_started", method=request.method, path=path)
        response = self.get_response(request)
        logger.info(
            "request_finished",
            method=request.method,
            path=path,
            status_code=response.status_code,
        )

        response[CORRELATION_HEADER] = cid
        return response
