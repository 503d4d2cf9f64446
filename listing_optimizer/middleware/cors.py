"""
CORS Middleware - Cross-Origin Resource Sharing configuration.

The browser client posts JSON to /api/optimizer and /api/email from its own
origin, so those origins must be listed in settings.ALLOWED_ORIGINS.

Usage:
    from listing_optimizer.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        allowed_origins=["http://localhost:3000"],
    )
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from listing_optimizer.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class CORSMiddleware(BaseHTTPMiddleware):
    """
    CORS (Cross-Origin Resource Sharing) middleware.

    Handles preflight OPTIONS requests and adds CORS headers to responses.
    """

    def __init__(
        self,
        app,
        allowed_origins: list[str] | None = None,
        allow_methods: list[str] | None = None,
        allow_headers: list[str] | None = None,
        max_age: int = 600,
    ):
        """
        Initialize CORS middleware.

        Args:
            app: FastAPI application
            allowed_origins: List of allowed origins (e.g., ["http://localhost:3000"])
            allow_methods: Allowed HTTP methods
            allow_headers: Allowed request headers
            max_age: How long (seconds) to cache preflight responses
        """
        super().__init__(app)
        self.allowed_origins = allowed_origins or []
        self.allow_methods = allow_methods or ["GET", "POST", "OPTIONS"]
        self.allow_headers = allow_headers or [
            "Accept",
            "Content-Type",
            "X-Request-ID",
            "X-Requested-With",
        ]
        self.max_age = max_age

        logger.info("CORS middleware initialized", allowed_origins=self.allowed_origins)

    async def dispatch(self, request, call_next):
        """
        Process request and add CORS headers.

        Handles:
        1. Preflight OPTIONS requests (return immediately)
        2. Regular requests (add CORS headers to response)
        """
        origin = request.headers.get("origin")
        is_allowed_origin = origin in self.allowed_origins if origin else False

        if request.method == "OPTIONS" and request.headers.get("access-control-request-method"):
            if is_allowed_origin:
                return self._preflight_response(origin)

            logger.warning(
                "CORS preflight rejected - origin not allowed",
                origin=origin,
                allowed_origins=self.allowed_origins,
            )
            return Response(status_code=403, content="Origin not allowed")

        response = await call_next(request)

        if is_allowed_origin:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
        elif origin:
            logger.warning(
                "CORS request from disallowed origin",
                origin=origin,
                path=request.url.path,
            )

        return response

    def _preflight_response(self, origin: str) -> Response:
        """Build the response for an allowed preflight request."""
        headers = {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
            "Access-Control-Max-Age": str(self.max_age),
            "Vary": "Origin",
        }

        logger.debug("CORS preflight request handled", origin=origin)

        return Response(status_code=204, headers=headers)
