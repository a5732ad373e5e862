"""Configuration for scripted oracle."""

from collections.abc import Mapping, Sequence
from typing import Literal

from pydantic import BaseModel, Field


class ScriptedConfig(BaseModel):
    """Configuration for scripted oracle.

    Verdicts are looked up by case id, falling back to ``default_status``.
    Cases listed in ``unavailable_cases`` raise as if the oracle were down.
    """

    verdicts: Mapping[str, Literal["PASSED", "FAILED"]] = Field(default_factory=dict)
    default_status: Literal["PASSED", "FAILED"] = "PASSED"
    unavailable_cases: Sequence[str] = Field(default_factory=list)
    delay: float = Field(default=0.0, ge=0.0)
