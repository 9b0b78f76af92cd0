import logging
import time
from uuid import uuid4

from fastapi import Request
from fastapi.responses import JSONResponse

from rangecore.config import settings

logger = logging.getLogger("rangecore.api")


async def request_context(request: Request, call_next):
    """Tag each request with an id and, when enabled, log method/path/status/latency."""
    rid = request.headers.get("x-request-id") or uuid4().hex
    request.state.request_id = rid
    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        response.headers["x-request-id"] = rid
        return response
    finally:
        if settings.logging.log_requests:
            logger.info(
                "request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": getattr(response, "status_code", "error"),
                    "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                    "request_id": rid,
                    "org_role": request.headers.get("x-org-role"),
                },
            )


async def limit_body_size(request: Request, call_next):
    # Drill payloads are a handful of numbers; anything large is a client bug
    limit_kb = settings.security.max_body_kb
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit_kb * 1024:
        return JSONResponse(
            status_code=413,
            content={"error": "request_too_large", "detail": f"Max request size is {limit_kb}KB"},
        )
    return await call_next(request)
