"""Per-run telemetry written alongside the run result."""

from __future__ import annotations

import json
import os
import time
import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional

from . import config


def _ts() -> str:
    return time.strftime("%Y%m%d_%H%M%S")


class RunTelemetry:
    """Collect per-item outcomes for one run and persist them as JSON."""

    def __init__(self, kind: str, *, execution_type: str = "manual", runs_dir: Optional[str] = None) -> None:
        if execution_type not in config.EXECUTION_TYPES:
            raise ValueError(
                f"execution_type must be one of {', '.join(config.EXECUTION_TYPES)}; got {execution_type!r}"
            )
        self.run_id = f"{_ts()}_{uuid.uuid4().hex[:8]}"
        self.kind = kind
        self.execution_type = execution_type
        self.runs_dir = runs_dir or str(config.RUNS_DIR)
        self.started_at = time.time()
        self.entries: List[Dict[str, Any]] = []
        self.summary: Dict[str, Any] = defaultdict(int)

    def add(self, status: str, reason: str, meta: Dict[str, Any]) -> None:
        self.entries.append(
            {
                "status": status,
                "reason": reason,
                **meta,
            }
        )
        self.summary[f"count_{status}"] += 1

    def finalize(self, extra: Optional[Dict[str, Any]] = None) -> str:
        payload = {
            "run_id": self.run_id,
            "kind": self.kind,
            "execution_type": self.execution_type,
            "started_at": self.started_at,
            "ended_at": time.time(),
            "summary": dict(self.summary),
            "entries": self.entries,
            **(extra or {}),
        }
        os.makedirs(self.runs_dir, exist_ok=True)
        path = os.path.join(self.runs_dir, f"run_{self.run_id}.json")
        with open(path, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
        return path


__all__ = ["RunTelemetry"]
