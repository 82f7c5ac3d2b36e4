"""Batch runner for the e-SAJ process robot.

Workflow:

- Open a persistent Chromium profile with the Presto extension loaded.
- Log in to the Presto console, then to e-SAJ with the digital certificate.
- For each process number, open the case page and read either the movement
  history or the case header.
- Item-level failures (bad number, page that never loads) are recorded and
  the batch moves on; session or login failures end the run.
- The browser is always closed before returning.

This is what a scheduler or API handler calls per job via run().
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from . import config
from .auth import AuthenticationFlow, AuthState
from .config_validation import validate_runtime_config
from .error_codes import ErrorCode
from .errors import AuthenticationError, RobotError, SessionError
from .extraction import ExtractionPipeline
from .logging_utils import _robot_event
from .process_number import parse
from .session import SessionManager
from .telemetry import RunTelemetry
from .utils import ensure_dirs, log_line, setup_run_logger, short_error_message
from .worklist import RateLimitedWorklist, WorkItem

KINDS: Tuple[str, ...] = ("movements", "metadata")


@dataclass
class RunResult:
    kind: str
    results: Dict[str, Any] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    fatal_error: Optional[str] = None
    auth_state: str = AuthState.LOGGED_OUT.name

    @property
    def ok(self) -> bool:
        return self.fatal_error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "ok": self.ok,
            "results": self.results,
            "failures": self.failures,
            "fatal_error": self.fatal_error,
            "auth_state": self.auth_state,
        }


def _process_item(item: WorkItem, kind: str, pipeline: ExtractionPipeline) -> Any:
    identifier = parse(item.raw)
    if kind == "movements":
        return [record.to_dict() for record in pipeline.extract_movements(identifier)]
    return pipeline.extract_metadata(identifier).to_dict()


def run(
    identifiers: Sequence[str],
    kind: str,
    *,
    credentials: Optional[config.Credentials] = None,
    session: Optional[SessionManager] = None,
    extension_path: Optional[Path] = None,
    profile_dir: Optional[Path] = None,
    certificate_name: Optional[str] = None,
    delay_seconds: Optional[float] = None,
    telemetry: Optional[RunTelemetry] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    """Authenticate once, then extract ``kind`` records for every identifier.

    Session and login failures are fatal: ``fatal_error`` is set and no item
    is processed. Per-item failures land in ``failures`` and the batch keeps
    going. The session is closed exactly once in every case.
    """

    if kind not in KINDS:
        raise ValueError(f"kind must be one of {', '.join(KINDS)}; got {kind!r}")
    if credentials is None:
        credentials = config.load_credentials()

    session = session if session is not None else SessionManager()
    auth = AuthenticationFlow(session, certificate_name=certificate_name)
    pipeline = ExtractionPipeline(session, auth)
    worklist = RateLimitedWorklist(
        identifiers,
        delay_seconds=config.INTER_ITEM_DELAY_SECONDS if delay_seconds is None else delay_seconds,
        sleep=sleep,
    )
    result = RunResult(kind=kind)
    _robot_event("plan", kind=kind, planned_items=len(worklist))

    try:
        session.init()
        session.open(extension_path or config.EXTENSION_PATH, profile_dir or config.PROFILE_DIR)
        auth.login_broker(credentials.broker_login, credentials.broker_password)
        auth.login_target(credentials.pin)

        for item in worklist:
            # Same key parse() reads, so " X" and "X" count as one number.
            key = item.raw.strip()
            if key in result.results or key in result.failures:
                log_line(f"[RUN] Skipping duplicate process number {key}")
                continue
            try:
                result.results[key] = _process_item(item, kind, pipeline)
            except RobotError as exc:
                result.failures[key] = exc.reason()
            except Exception as exc:  # noqa: BLE001
                result.failures[key] = f"{ErrorCode.INTERNAL}: {short_error_message(exc)}"

            if key in result.failures:
                log_line(f"[RUN] Failed {key}: {result.failures[key]}")
                if telemetry is not None:
                    telemetry.add("failed", result.failures[key], {"identifier": key})
            else:
                log_line(f"[RUN] Extracted {kind} for {key}")
                if telemetry is not None:
                    telemetry.add("extracted", "", {"identifier": key})
    except (SessionError, AuthenticationError) as exc:
        result.fatal_error = exc.reason()
        _robot_event("error", phase="run", fatal=True, reason=result.fatal_error)
    finally:
        result.auth_state = auth.state.name
        session.close()
        session.restore_handlers()

    _robot_event(
        "summary",
        kind=kind,
        extracted=len(result.results),
        failed=len(result.failures),
        fatal_error=result.fatal_error,
    )
    if telemetry is not None:
        try:
            path = telemetry.finalize(result.to_dict())
            log_line(f"[TELEMETRY] Run written to {path}")
        except OSError as exc:
            log_line(f"[TELEMETRY] Unable to write run telemetry: {exc}")
    return result


def load_run_parameters(path: Path) -> Tuple[Optional[str], List[str]]:
    """Read ``{"kind": ..., "processes": [...]}`` from a robot parameters file."""

    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"{path}: expected a JSON object")
    processes = payload.get("processes") or []
    if not isinstance(processes, list) or not all(isinstance(p, str) for p in processes):
        raise ValueError(f"{path}: 'processes' must be a list of strings")
    kind = payload.get("kind")
    return (str(kind) if kind else None), list(processes)


def _cli_entrypoint(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Extract e-SAJ process data for a batch of process numbers")
    parser.add_argument("processes", nargs="*", help="Process numbers (NNNNNNN-DD.YYYY.J.TR.OOOO)")
    parser.add_argument("--kind", choices=KINDS, default=None)
    parser.add_argument("--params-file", type=Path, default=None, help="JSON file with kind and processes")
    parser.add_argument("--delay", type=float, default=None, help="Seconds between process numbers")
    parser.add_argument("--backend", choices=config.SUPPORTED_BACKENDS, default=None)
    parser.add_argument(
        "--execution-type",
        choices=config.EXECUTION_TYPES,
        default="manual",
    )
    parser.add_argument("--output", type=Path, default=None, help="Write the JSON result here")
    args = parser.parse_args(argv)

    kind = args.kind
    processes = list(args.processes)
    if args.params_file is not None:
        file_kind, file_processes = load_run_parameters(args.params_file)
        kind = kind or file_kind
        processes = processes or file_processes
    if kind not in KINDS:
        parser.error("--kind is required (movements or metadata)")
    if not processes:
        parser.error("no process numbers given")

    ensure_dirs()
    setup_run_logger()
    validate_runtime_config("cli")

    result = run(
        processes,
        kind,
        session=SessionManager(backend=args.backend),
        delay_seconds=args.delay,
        telemetry=RunTelemetry(kind, execution_type=args.execution_type),
    )

    rendered = json.dumps(result.to_dict(), ensure_ascii=False, indent=2)
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(rendered, encoding="utf-8")
    else:
        sys.stdout.write(rendered + "\n")
    return 0 if result.ok else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(_cli_entrypoint())

__all__ = ["RunResult", "run", "load_run_parameters", "_cli_entrypoint", "KINDS"]
