from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Sequence

from .logging_utils import _robot_event


@dataclass(frozen=True)
class WorkItem:
    """One process number queued for a run, with its position in the input."""

    index: int
    raw: str


class RateLimitedWorklist:
    """Lazy, restartable sequence of work items with a fixed gap between them.

    The delay is applied when the next item is requested, so nothing sleeps
    before the first item or after the last one. Iterating again starts over;
    ``items(start=n)`` resumes from position ``n``.
    """

    def __init__(
        self,
        identifiers: Sequence[str],
        *,
        delay_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._identifiers: List[str] = list(identifiers)
        self.delay_seconds = max(0.0, float(delay_seconds))
        self._sleep = sleep

    def __len__(self) -> int:
        return len(self._identifiers)

    def __iter__(self) -> Iterator[WorkItem]:
        return self.items()

    def items(self, start: int = 0) -> Iterator[WorkItem]:
        first = True
        for index in range(max(0, start), len(self._identifiers)):
            if not first and self.delay_seconds:
                _robot_event("state", phase="worklist", kind="delay", seconds=self.delay_seconds, next_index=index)
                self._sleep(self.delay_seconds)
            first = False
            yield WorkItem(index=index, raw=self._identifiers[index])


__all__ = ["WorkItem", "RateLimitedWorklist"]
