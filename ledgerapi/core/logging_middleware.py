import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger("ledgerapi")


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class LoggingMiddleware(BaseHTTPMiddleware):
    """요청/응답 로깅 - action 쿼리 파라미터와 처리 시간을 함께 기록"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.perf_counter()
        action = request.query_params.get("action", "-")
        client = request.client.host if request.client else "-"
        target = f"{request.method} {request.url.path} action={action} from {client}"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"[Unhandled Error] {target}")
            raise

        duration_ms = round((time.perf_counter() - start) * 1000, 1)
        logger.log(
            _level_for(response.status_code),
            f"[Response] {target} -> {response.status_code} in {duration_ms}ms",
            extra={
                "action": action,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
