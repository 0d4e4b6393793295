"""Pydantic models describing custom fact definitions."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CustomFact(BaseModel):
    """One resolution of a custom fact.

    Several resolutions may share a name; the one with the highest weight whose
    confines all match and that yields a value wins.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(description="Fact name, addressable by queries")
    value: Any = Field(default=None, description="Static value of the fact")
    resolver: Optional[Callable[[], Any]] = Field(
        default=None, description="Callable computing the value on demand"
    )
    weight: int = Field(default=0, ge=0, description="Higher weights are tried first")
    confine: Dict[str, Any] = Field(
        default_factory=dict,
        description="Fact queries mapped to the value(s) they must match",
    )
    source: str = Field(default="", description="Where the definition was loaded from")

    @model_validator(mode="after")
    def validate_definition(self) -> "CustomFact":
        if not self.name or not self.name.strip():
            raise ValueError("custom fact name must be non-empty")
        if self.value is not None and self.resolver is not None:
            raise ValueError(
                f"custom fact '{self.name}' cannot have both a value and a resolver"
            )
        self.name = self.name.strip().lower()
        return self

    def compute(self) -> Any:
        if self.resolver is not None:
            return self.resolver()
        return self.value
