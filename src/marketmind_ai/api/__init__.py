"""HTTP API package."""

from marketmind_ai.api.routes import api_router

__all__ = ["api_router"]
