from __future__ import annotations

import time
from typing import Any, Callable

import grpc

from nakama_client.core.logging_config import get_logger


logger = get_logger(__name__)


class LoggingInterceptor(grpc.aio.UnaryUnaryClientInterceptor):
    """Logs method, status and latency of every unary call.

    Metadata is never logged; it carries the credentials.
    """

    async def intercept_unary_unary(
        self,
        continuation: Callable[[grpc.aio.ClientCallDetails, Any], Any],
        client_call_details: grpc.aio.ClientCallDetails,
        request: Any,
    ) -> Any:
        method = client_call_details.method
        if isinstance(method, bytes):
            method = method.decode("utf-8")

        start = time.perf_counter()
        code = grpc.StatusCode.OK
        try:
            call = await continuation(client_call_details, request)
            return await call
        except grpc.aio.AioRpcError as exc:
            code = exc.code()
            logger.warning("grpc_call_failed", method=method, code=code.name, details=exc.details())
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.debug("grpc_call", method=method, code=code.name, elapsed_ms=round(elapsed_ms, 2))
