"""Server middleware."""

from marketmind_ai.server.middleware.request_id import RequestIdMiddleware

__all__ = ["RequestIdMiddleware"]
