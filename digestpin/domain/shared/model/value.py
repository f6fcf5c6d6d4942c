"""Base classes for immutable domain values."""

from pydantic import BaseModel, ConfigDict


class ValueObject(BaseModel):
    """Frozen pydantic model; equal by value and hashable."""

    model_config = ConfigDict(frozen=True)
