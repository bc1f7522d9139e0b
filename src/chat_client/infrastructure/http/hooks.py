"""httpx event hooks: request id propagation and response timing."""
from __future__ import annotations

import logging
import time
import uuid

import httpx

logger = logging.getLogger(__name__)

HEADER = "X-Request-ID"


async def add_request_id(request: httpx.Request) -> None:
    request.headers.setdefault(HEADER, uuid.uuid4().hex)
    request.extensions["started_at"] = time.perf_counter()


async def log_response(response: httpx.Response) -> None:
    request = response.request
    started = request.extensions.get("started_at")
    elapsed_ms = (time.perf_counter() - started) * 1000 if started is not None else 0.0
    logger.info(
        "%s %s %s %.1fms rid=%s",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request.headers.get(HEADER, ""),
    )
