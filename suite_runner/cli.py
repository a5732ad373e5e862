"""CLI entry point for running a test suite."""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Any, TypeAlias

from suite_runner.controller import RunController, RunState
from suite_runner.errors import InvalidStateError, RunContractError
from suite_runner.export import export_results_csv, results_filename
from suite_runner.models.config import EngineConfig, SessionContext
from suite_runner.models.notification import Notification
from suite_runner.models.result import ResultStatus, TestRun
from suite_runner.models.suite import ExecutionMode, TestSuite
from suite_runner.notifications import (
    LoggingNotificationSink,
    NotificationFanOut,
    membership_from_suites,
)
from suite_runner.oracles.loading import available_oracles, load_oracle_manifest
from suite_runner.orchestrator import RunOrchestrator, RunOutcome
from suite_runner.suite_loader import load_suite
from suite_runner.summary import RunSummary, format_percentage

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 2

STATUS_SYMBOLS = {
    ResultStatus.PASSED: "✅",
    ResultStatus.FAILED: "❌",
    ResultStatus.SKIPPED: "⏭️",
}

VERDICT_COMMANDS = {
    "p": ResultStatus.PASSED,
    "pass": ResultStatus.PASSED,
    "f": ResultStatus.FAILED,
    "fail": ResultStatus.FAILED,
    "s": ResultStatus.SKIPPED,
    "skip": ResultStatus.SKIPPED,
}

MANUAL_HELP = (
    "Commands: p(ass) | f(ail) | s(kip) [notes], n(ext), b(ack), "
    "g(oto) <number>, finish, cancel"
)

Prompt: TypeAlias = Callable[[str], Awaitable[str]]


def log_results_summary(
    log: logging.Logger, suite: TestSuite, run: TestRun, summary: RunSummary
) -> None:
    """Log a formatted summary of case results."""
    log.info("=" * 80)
    log.info("Run Results Summary: %s", run.suite_name)
    log.info("=" * 80)

    for case in suite.cases:
        result = run.results[case.id]
        symbol = STATUS_SYMBOLS.get(result.status, "?")
        log.info("%s %s: %s", symbol, case.title, result.status)
        if result.notes:
            log.info("  Notes: %s", result.notes.splitlines()[0])

    log.info(
        "%s: %d/%d passed (%s)",
        summary.verdict,
        summary.passed,
        summary.total,
        format_percentage(summary.pass_rate),
    )


def format_output(outcome: RunOutcome) -> dict[str, Any]:
    """Format a run outcome for JSON output."""
    run, summary = outcome.run, outcome.summary
    return {
        "run_id": run.id,
        "suite_id": run.suite_id,
        "suite_name": run.suite_name,
        "start_time": run.start_time.isoformat(),
        "end_time": run.end_time.isoformat() if run.end_time else None,
        "verdict": summary.verdict,
        "total": summary.total,
        "passed": summary.passed,
        "failed": summary.failed,
        "skipped": summary.skipped,
        "pass_rate": summary.pass_rate,
        "results": [
            {"case_id": r.case_id, "status": r.status.value, "notes": r.notes}
            for r in run.results.values()
        ],
        "notifications": [format_notification(n) for n in outcome.notifications],
    }


def format_notification(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "recipient_id": notification.recipient_id,
        "type": notification.type.value,
        "message": notification.message,
    }


def apply_command(controller: RunController, line: str) -> TestRun | None:
    """Apply one manual command to the controller.

    Returns:
        The finalized run once the command finished it, None otherwise

    """
    command, _, argument = line.strip().partition(" ")
    command = command.lower()

    if command in VERDICT_COMMANDS:
        controller.submit_verdict(VERDICT_COMMANDS[command], argument or None)
    elif command in ("n", "next"):
        controller.next_case()
    elif command in ("b", "back"):
        controller.previous_case()
    elif command in ("g", "goto"):
        try:
            number = int(argument)
        except ValueError:
            raise ValueError(f"Not a case number: {argument!r}") from None
        controller.jump_to(number - 1)
    elif command == "finish":
        return controller.finish()
    elif command == "cancel":
        controller.cancel()
    else:
        raise ValueError(f"Unknown command {command!r}. {MANUAL_HELP}")
    return None


async def drive_manual(controller: RunController, prompt: Prompt) -> TestRun | None:
    """Prompt for manual verdicts until the run is finished or cancelled."""
    log = logging.getLogger("suite_runner")

    if (run := controller.start()) is not None:
        return run

    print(MANUAL_HELP, file=sys.stderr)
    while not controller.state.is_terminal:
        case = controller.current_case
        index = controller.current_index
        if case is None or index is None:
            raise InvalidStateError(f"No active case in state {controller.state}")
        status = controller.results[case.id].status
        marker = "waiting" if controller.state is RunState.AWAITING_INPUT else status
        try:
            line = await prompt(
                f"[{index + 1}/{len(controller.suite.cases)}] {case.title} ({marker})> "
            )
        except EOFError:
            controller.cancel()
            break

        try:
            if (run := apply_command(controller, line)) is not None:
                return run
        except (RunContractError, ValueError) as e:
            log.warning("%s", e)

    return None


async def _input_prompt(text: str) -> str:
    return await asyncio.to_thread(input, text)


async def run(
    suite_path: Path,
    session_json: str,
    oracle_key: str = "scripted",
    oracle_config_json: str = "{}",
    engine_config_json: str = "{}",
    export_dir: Path | None = None,
    prompt: Prompt = _input_prompt,
) -> int:
    """Run a suite and return exit code."""
    log = logging.getLogger("suite_runner")

    suite = await load_suite(suite_path)
    session = SessionContext.model_validate_json(session_json)
    engine_config = EngineConfig.model_validate_json(engine_config_json)

    orchestrator = RunOrchestrator(
        session=session,
        membership=membership_from_suites([suite]),
        fan_out=NotificationFanOut(
            sink=LoggingNotificationSink(), policy=engine_config.fan_out
        ),
        config=engine_config,
    )

    if suite.execution_mode is ExecutionMode.AUTOMATED:
        log.info("Loading oracle: %s", oracle_key)
        manifest = load_oracle_manifest(oracle_key)
        config = manifest.config_cls(**json.loads(oracle_config_json))

        async with manifest.oracle_factory(config) as oracle:
            outcome = await dataclasses.replace(
                orchestrator, oracle=oracle
            ).run_automated(suite)
    else:
        finished = await drive_manual(orchestrator.controller_for(suite), prompt)
        outcome = orchestrator.complete(finished) if finished is not None else None

    if outcome is None:
        log.info("Run cancelled")
        return EXIT_CANCELLED

    log_results_summary(log, suite, outcome.run, outcome.summary)

    if export_dir is not None:
        export_path = export_dir / results_filename(suite)
        export_path.write_text(
            export_results_csv(suite, outcome.run), encoding="utf-8"
        )
        log.info("Results exported to %s", export_path)

    print(json.dumps(format_output(outcome), indent=2))

    return EXIT_SUCCESS if outcome.summary.is_success else EXIT_FAILURE


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run a test suite")
    parser.add_argument(
        "--suite",
        type=Path,
        required=True,
        help="Path to the suite file (YAML or JSON)",
    )
    parser.add_argument(
        "--session",
        required=True,
        help='JSON session context, e.g. {"acting_user_id": "u1", "admin_id": "a1"}',
    )
    parser.add_argument(
        "--oracle",
        default="scripted",
        help=f"Oracle key for automated suites ({', '.join(available_oracles())})",
    )
    parser.add_argument(
        "--oracle-config",
        default="{}",
        help="JSON configuration for the oracle",
    )
    parser.add_argument(
        "--engine-config",
        default="{}",
        help="JSON engine configuration (oracle timeout, fan-out policy)",
    )
    parser.add_argument(
        "--export",
        type=Path,
        default=None,
        help="Directory to write the CSV results export to",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        exit_code = asyncio.run(
            run(
                suite_path=args.suite,
                session_json=args.session,
                oracle_key=args.oracle,
                oracle_config_json=args.oracle_config,
                engine_config_json=args.engine_config,
                export_dir=args.export,
            )
        )
    except KeyboardInterrupt:
        exit_code = EXIT_CANCELLED
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
