"""Request ID middleware with per-request access logging."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from examhub.core.logging import get_logger, request_id_var, request_path_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Request-ID (or mint one), echo it back, log timing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}
        id_token = request_id_var.set(request_id)
        path_token = request_path_var.set(request.url.path)

        start = time.perf_counter()
        logger.info("Request started", extra={**context, "query_params": str(request.query_params)})

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={**context, "status_code": 500, "latency_ms": _elapsed_ms(start), "error": str(e)},
                exc_info=True,
            )
            raise
        else:
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "Request completed",
                extra={**context, "status_code": response.status_code, "latency_ms": _elapsed_ms(start)},
            )
            return response
        finally:
            request_id_var.reset(id_token)
            request_path_var.reset(path_token)
