"""
Browser harness package.

This package provides a small orchestration layer for browser end-to-end
tests: pooled, isolated browser contexts, reusable authenticated session
state and fan-out of each test across browser engines and devices.
"""

__version__ = "1.0.0"

from .browser.pool import BrowserContextPool
from .browser.targets import EngineKind, EngineTarget
from .core.matrix import EngineMatrix
from .core.results import Outcome, RunResult, SuiteReport
from .core.runner import TestRunner
from .core.suite import RunContext, Suite
from .session.state import SessionState
from .session.store import SessionStateStore

__all__ = [
    "BrowserContextPool",
    "EngineKind",
    "EngineMatrix",
    "EngineTarget",
    "Outcome",
    "RunContext",
    "RunResult",
    "SessionState",
    "SessionStateStore",
    "Suite",
    "SuiteReport",
    "TestRunner",
]
