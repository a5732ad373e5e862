"""Pydantic models for Gemini generateContent responses."""

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, Field


class Part(BaseModel):
    """Content part; only text parts are requested."""

    text: str | None = None


class Content(BaseModel):
    """Content of a candidate answer."""

    parts: Sequence[Part] = Field(default_factory=list)


class Candidate(BaseModel):
    """Candidate answer from the model."""

    content: Content | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")


class GenerateContentResponse(BaseModel):
    """Response from the generateContent API."""

    candidates: Sequence[Candidate] = Field(default_factory=list)

    @property
    def text(self) -> str | None:
        """Concatenated text of the first candidate, if any."""
        if not self.candidates or self.candidates[0].content is None:
            return None
        texts = [p.text for p in self.candidates[0].content.parts if p.text]
        return "".join(texts) or None


class ExecutionStep(BaseModel):
    """One simulated step reported by the model."""

    step_number: int = Field(alias="stepNumber")
    action_summary: str | None = Field(default=None, alias="actionSummary")
    outcome: Literal["PASSED", "FAILED"]
    log_entry: str = Field(alias="logEntry")
    duration_ms: int | None = Field(default=None, alias="durationMs")


class SimulationReport(BaseModel):
    """Structured simulation result requested from the model."""

    overall_status: Literal["PASSED", "FAILED"] = Field(alias="overallStatus")
    execution_steps: Sequence[ExecutionStep] = Field(alias="executionSteps")
    final_analysis: str = Field(alias="finalAnalysis")
