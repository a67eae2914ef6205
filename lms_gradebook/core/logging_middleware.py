import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """One access line per request, tagged with the course when the route has one."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        # path params are filled in by the router during call_next
        course_id = request.scope.get("path_params", {}).get("course_id")
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s -> %s (%.1fms) courseId=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            course_id or "-",
        )
        return response
