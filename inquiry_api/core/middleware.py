import logging
import time
from fastapi import Request
from inquiry_api.core.logger import get_logger

logger = get_logger("request_logger")


async def log_requests(request: Request, call_next):
    """Log each request with the caller's address; failed requests at WARNING."""
    client_host = request.client.host if request.client else "unknown"
    start_time = time.perf_counter()
    logger.info(f"Started request {request.method} {request.url.path} from {client_host}")

    response = await call_next(request)

    duration_ms = (time.perf_counter() - start_time) * 1000
    level = logging.WARNING if response.status_code >= 400 else logging.INFO
    logger.log(
        level,
        f"{request.method} {request.url.path} from {client_host} "
        f"-> {response.status_code} ({duration_ms:.1f} ms)",
    )
    return response
