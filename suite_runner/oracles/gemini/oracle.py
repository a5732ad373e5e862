"""Gemini oracle implementation."""

import json
import logging
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import aiohttp
from pydantic import ValidationError

from suite_runner.models.suite import RunEnvironmentContext, TestCase
from suite_runner.oracles.base import ExecutionOracle, OracleResponseError, OracleVerdict
from suite_runner.oracles.gemini.config import GeminiConfig
from suite_runner.oracles.gemini.models import GenerateContentResponse, SimulationReport

log = logging.getLogger(__name__)

SEPARATOR = "-" * 50

SIMULATION_SCHEMA: Mapping[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "overallStatus": {"type": "STRING", "enum": ["PASSED", "FAILED"]},
        "executionSteps": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "stepNumber": {"type": "INTEGER"},
                    "actionSummary": {"type": "STRING"},
                    "outcome": {"type": "STRING", "enum": ["PASSED", "FAILED"]},
                    "logEntry": {
                        "type": "STRING",
                        "description": "Technical observation for the step",
                    },
                    "durationMs": {"type": "INTEGER"},
                },
                "required": ["stepNumber", "outcome", "logEntry"],
            },
        },
        "finalAnalysis": {
            "type": "STRING",
            "description": "Summary of the outcome and cause analysis on failure",
        },
    },
    "required": ["overallStatus", "executionSteps", "finalAnalysis"],
}


def build_prompt(case: TestCase, context: RunEnvironmentContext) -> str:
    """Build the simulation prompt for a case."""
    steps_text = "\n".join(
        f"{i}. {step.action} -> Expect: {step.expected_result}"
        for i, step in enumerate(case.steps, start=1)
    )
    return (
        "You are an autonomous test agent. Simulate the following test case step "
        "by step as if it were executed against the real system.\n\n"
        f"Environment:\n{context.describe()}\n"
        f'Test case: "{case.title}"\n'
        f"Priority: {case.priority}\n"
        f"Preconditions: {case.preconditions or 'None'}\n"
        f"Test data: {case.test_data or 'None'}\n\n"
        f"Steps:\n{steps_text}\n\n"
        "Instructions:\n"
        "1. Produce a detailed log entry for every step.\n"
        "2. Fail the case when preconditions are not met or the data is invalid.\n"
        "3. The final analysis states whether the case passed and, if not, "
        "where the problem occurred."
    )


def format_log(
    case: TestCase, context: RunEnvironmentContext, report: SimulationReport
) -> str:
    """Render a simulation report as a human-readable execution log."""
    lines = [
        f"[INFO] Simulation started: {case.title}",
        f"[INFO] Target environment: {context.describe().splitlines()[0]}",
        SEPARATOR,
    ]
    for step in report.execution_steps:
        timestamp = datetime.now().strftime("%H:%M:%S")
        lines.append(
            f"[{timestamp}] Step {step.step_number}: "
            f"{step.action_summary or 'Execute'} ... {step.outcome}"
        )
        lines.append(f"    > Log: {step.log_entry}")
        if step.duration_ms is not None:
            lines.append(f"    > Duration: {step.duration_ms}ms")
        lines.append("")
    lines.append(SEPARATOR)
    lines.append(f"[RESULT] {report.overall_status}")
    lines.append(f"[ANALYSIS] {report.final_analysis}")
    return "\n".join(lines)


@dataclass(frozen=True, kw_only=True)
class GeminiOracle(ExecutionOracle):
    """Oracle asking a Gemini model to simulate test execution."""

    config: GeminiConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: GeminiConfig
    ) -> AsyncGenerator["GeminiOracle", None]:
        """Create oracle with managed session lifecycle."""
        headers = {
            "x-goog-api-key": config.api_key.get_secret_value(),
            "Content-Type": "application/json",
        }
        async with aiohttp.ClientSession(
            base_url=config.api_base_url,
            headers=headers,
        ) as session:
            yield cls(config=config, session=session)

    async def simulate(
        self, case: TestCase, context: RunEnvironmentContext
    ) -> OracleVerdict:
        """Ask the model for a structured simulation of the case."""
        url = f"/v1beta/models/{self.config.model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": build_prompt(case, context)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": SIMULATION_SCHEMA,
                "thinkingConfig": {"thinkingBudget": self.config.thinking_budget},
            },
        }

        log.info(
            "Requesting simulation: model=%s, case_id=%s, steps=%d",
            self.config.model,
            case.id,
            len(case.steps),
        )

        async with self.session.post(url, json=payload) as response:
            if response.status != 200:
                text = await response.text()
                raise OracleResponseError(
                    f"Simulation request failed: {response.status} {text}"
                )
            data = await response.json()

        text = GenerateContentResponse.model_validate(data).text
        if text is None:
            raise OracleResponseError("No content in simulation response")

        try:
            report = SimulationReport.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as e:
            raise OracleResponseError(f"Malformed simulation report: {e}") from e

        return OracleVerdict(
            status=report.overall_status,
            log=format_log(case, context, report),
        )
