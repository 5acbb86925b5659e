"""Services package."""

from marketmind_ai.services.generation_service import GenerationService

__all__ = ["GenerationService"]
