"""
Middleware components for request processing.

This package contains middleware for:
- Request context (request ID bound into logs)
- CORS for the browser client
"""

from listing_optimizer.middleware.cors import CORSMiddleware
from listing_optimizer.middleware.request_context import RequestContextMiddleware

__all__ = [
    "RequestContextMiddleware",
    "CORSMiddleware",
]
