#!/usr/bin/env python3
"""
Run result models.

This module contains the RunResult produced for every (test, target) pair
and the SuiteReport that collects them.
"""

import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..browser.targets import EngineTarget


class Outcome(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class FailureInfo:
    """Structured description of why a run did not pass."""

    kind: str
    message: str
    traceback: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: BaseException, kind: Optional[str] = None) -> "FailureInfo":
        return cls(
            kind=kind or type(exc).__name__,
            message=str(exc) or repr(exc),
            traceback="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "traceback": self.traceback}


@dataclass(frozen=True)
class RunResult:
    """Outcome of one test against one target."""

    test_id: str
    target: Optional[EngineTarget]
    outcome: Outcome
    duration_ms: float = 0.0
    error: Optional[FailureInfo] = None
    notes: Tuple[str, ...] = ()

    @property
    def target_name(self) -> str:
        return self.target.name if self.target is not None else "-"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test_id": self.test_id,
            "target": self.target.to_dict() if self.target is not None else None,
            "outcome": self.outcome.value,
            "duration_ms": round(self.duration_ms, 1),
            "error": self.error.to_dict() if self.error else None,
            "notes": list(self.notes),
        }


@dataclass
class SuiteReport:
    """
    Ordered collection of run results.

    Results are stored in schedule order no matter when each run finished.
    """

    results: List[Optional[RunResult]] = field(default_factory=list)
    cancelled: bool = False
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    def reserve(self) -> int:
        """Reserve a slot for a scheduled run and return its index."""
        self.results.append(None)
        return len(self.results) - 1

    def record(self, index: int, result: RunResult) -> None:
        if self.finished_at is not None:
            raise RuntimeError("Cannot record results on a finalized report")
        if self.results[index] is not None:
            raise RuntimeError(f"Result {index} has already been recorded")
        self.results[index] = result

    def append(self, result: RunResult) -> None:
        self.record(self.reserve(), result)

    def finalize(self, cancelled: bool = False) -> "SuiteReport":
        missing = [i for i, result in enumerate(self.results) if result is None]
        if missing:
            raise RuntimeError(f"{len(missing)} scheduled run(s) have no result")
        self.cancelled = self.cancelled or cancelled
        self.finished_at = time.time()
        return self

    @property
    def is_final(self) -> bool:
        return self.finished_at is not None

    def count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r is not None and r.outcome == outcome)

    @property
    def passed(self) -> int:
        return self.count(Outcome.PASSED)

    @property
    def failed(self) -> int:
        return self.count(Outcome.FAILED)

    @property
    def skipped(self) -> int:
        return self.count(Outcome.SKIPPED)

    @property
    def timed_out(self) -> int:
        return self.count(Outcome.TIMED_OUT)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.timed_out == 0 and not self.cancelled

    def summary(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "timed_out": self.timed_out,
        }

    def for_test(self, test_id: str) -> List[RunResult]:
        return [r for r in self.results if r is not None and r.test_id == test_id]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary(),
            "cancelled": self.cancelled,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "results": [r.to_dict() for r in self.results if r is not None],
        }
