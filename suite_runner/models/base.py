"""Base model configuration for suite and configuration data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model shared by suite definitions and configuration."""

    model_config = ConfigDict(frozen=True)
