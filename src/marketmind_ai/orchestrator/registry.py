"""Model registry: upstream model identifiers grouped by role."""

from enum import Enum
from typing import Dict, Iterator, List

from pydantic import BaseModel, ConfigDict, Field

from marketmind_ai.config.settings import Settings


class ModelRole(str, Enum):
    """Named slots used to express fallback order independent of model names."""

    PRIMARY = "primary"
    ALTERNATIVE = "alternative"
    CREATIVE = "creative"
    INSTRUCTION = "instruction"
    FALLBACK = "fallback"


class ModelDescriptor(BaseModel):
    """One role mapped to one concrete upstream model identifier."""

    role: ModelRole = Field(..., description="Model role")
    identifier: str = Field(..., min_length=1, description="Upstream model identifier")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.identifier


class ModelRegistry:
    """Immutable role -> model table, loaded once at process start."""

    def __init__(self, models: Dict[ModelRole, str]):
        missing = [role.value for role in ModelRole if role not in models]
        if missing:
            raise ValueError(f"Model registry is missing roles: {', '.join(missing)}")
        self._descriptors = tuple(
            ModelDescriptor(role=role, identifier=models[role]) for role in ModelRole
        )
        self._by_role = {d.role: d for d in self._descriptors}

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelRegistry":
        return cls({ModelRole(role): model for role, model in settings.model_roles.items()})

    def get(self, role: ModelRole) -> ModelDescriptor:
        return self._by_role[role]

    @property
    def primary(self) -> ModelDescriptor:
        return self._by_role[ModelRole.PRIMARY]

    def chain(self, *roles: ModelRole) -> List[ModelDescriptor]:
        """Descriptors for ``roles`` in the given order."""
        return [self._by_role[role] for role in roles]

    def __iter__(self) -> Iterator[ModelDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)
