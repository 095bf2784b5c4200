"""
Browser module for launching engines and leasing isolated contexts.

This package contains the engine target definitions, the Playwright launcher,
the context pool and the event subscription helpers used by page objects.
"""

from .engine import PlaywrightLauncher
from .events import EventSubscription, subscribe, wait_for_event_after
from .pool import BrowserContextPool, ContextLease, EngineInstance
from .targets import BUILTIN_TARGETS, EngineKind, EngineTarget

__all__ = [
    "BrowserContextPool",   # Leases isolated contexts from pooled engines
    "ContextLease",         # A context checked out for one run
    "EngineInstance",       # A launched engine process
    "PlaywrightLauncher",   # Starts engines through Playwright
    "EngineKind",
    "EngineTarget",
    "BUILTIN_TARGETS",
    "EventSubscription",
    "subscribe",
    "wait_for_event_after",
]
