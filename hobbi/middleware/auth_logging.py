from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        auth_header = request.headers.get("Authorization")

        # Header present but not a bearer credential: it will be ignored
        if auth_header and not auth_header.startswith("Bearer "):
            logger.warning(f"Non-bearer Authorization header on {path}")

        response = await call_next(request)

        if response.status_code in [401, 403]:
            logger.warning(f"Auth error: {response.status_code} on {path}")

        return response
