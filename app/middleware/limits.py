import logging
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from app.core import config

log = logging.getLogger("limits")

class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject oversized uploads from the Content-Length header before reading the body."""

    async def dispatch(self, request: Request, call_next):
        cl = request.headers.get("content-length")
        if cl is not None:
            try:
                size = int(cl)
            except ValueError:
                return JSONResponse({"detail": "Bad Content-Length"}, status_code=400)
            if size > config.MAX_UPLOAD_BYTES:
                log.warning("Rejected %s %s: %d bytes", request.method, request.url.path, size)
                return JSONResponse({"detail": "Upload too large"}, status_code=413)
        return await call_next(request)
