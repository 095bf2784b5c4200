"""
Core module containing test scheduling and result aggregation.

This package contains the EngineMatrix that fans tests out across targets,
the Suite/RunContext registration API, the TestRunner and the result models.
"""

from .matrix import EngineMatrix
from .results import FailureInfo, Outcome, RunResult, SuiteReport
from .runner import RunPhase, TestRunner
from .suite import RunContext, SetupHook, Suite, TestCase

__all__ = [
    "EngineMatrix",
    "FailureInfo",
    "Outcome",
    "RunContext",
    "RunPhase",
    "RunResult",
    "SetupHook",
    "Suite",
    "SuiteReport",
    "TestCase",
    "TestRunner",
]
