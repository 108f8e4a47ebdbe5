import logging
from urllib.parse import urlparse

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from foodtrigger.api import correlations
from foodtrigger.config import configure_logging

logger = logging.getLogger(__name__)

configure_logging()

app = FastAPI(title="Food Trigger Correlations", version="0.1.0")


# =============================================================================
# CSRF Origin Validation Middleware
# =============================================================================


class CSRFOriginMiddleware(BaseHTTPMiddleware):
    """
    Validate Origin/Referer headers on state-changing requests to prevent CSRF.

    - POST, PUT, PATCH, DELETE must include a matching Origin or Referer header
    - GET, HEAD, OPTIONS are always allowed (safe methods)
    """

    SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}

    async def dispatch(self, request: Request, call_next):
        if request.method in self.SAFE_METHODS:
            return await call_next(request)

        expected_host = request.headers.get("host", "")
        source = request.headers.get("origin") or request.headers.get("referer")

        if not source:
            logger.warning(
                "CSRF missing origin/referer: method=%s, path=%s",
                request.method,
                request.url.path,
            )
            return JSONResponse(
                status_code=403, content={"detail": "Origin validation failed"}
            )

        if urlparse(source).netloc != expected_host:
            logger.warning(
                "CSRF origin mismatch: source=%s, expected=%s, path=%s",
                source,
                expected_host,
                request.url.path,
            )
            return JSONResponse(
                status_code=403, content={"detail": "Origin validation failed"}
            )

        return await call_next(request)


app.add_middleware(CSRFOriginMiddleware)

# Include routers
app.include_router(correlations.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
