#!/usr/bin/env python3
"""
Test registration module.

Tests are registered on an explicit Suite object and receive a RunContext
argument with everything they may touch: the leased browser context, the
target it runs on and the session state store.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple

from ..errors import RunFailure


class RunContext:
    """Everything a test body gets for one run."""

    def __init__(self, test_id, target, lease, store=None):
        """
        Initialize the run context.

        Args:
            test_id: Identifier of the logical test
            target: EngineTarget the run executes on
            lease: ContextLease owned by this run
            store: Optional SessionStateStore for save_state()
        """
        self.test_id = test_id
        self.target = target
        self.lease = lease
        self.store = store
        self.notes = []

    @property
    def context(self):
        """The Playwright BrowserContext of this run."""
        return self.lease.context

    @property
    def browser_name(self):
        return self.target.kind.value

    async def new_page(self):
        return await self.lease.new_page()

    def note(self, message):
        """Record a message on the run result and echo it to the console."""
        self.notes.append(message)
        print(f"[{self.target.name}] {self.test_id}: {message}")

    async def save_state(self, state_id):
        """
        Capture the session state of this run and persist it.

        Args:
            state_id: Identifier to store the state under

        Returns:
            SessionState: The captured state
        """
        if self.store is None:
            raise RuntimeError("No session state store configured for this run")
        state = await self.store.capture(self.lease)
        self.store.persist(state_id, state)
        return state

    def fail(self, message):
        raise RunFailure(message)


TestBody = Callable[[RunContext], Awaitable[Any]]


@dataclass(frozen=True)
class TestCase:
    """A registered logical test."""

    __test__ = False

    name: str
    body: TestBody
    targets: Optional[Tuple[Any, ...]] = None
    state_id: Optional[str] = None
    timeout: Optional[float] = None


@dataclass(frozen=True)
class SetupHook:
    """Routine that produces the session state stored under state_id."""

    state_id: str
    body: TestBody
    target: Optional[str] = None
    timeout: Optional[float] = None


class Suite:
    """
    Ordered collection of tests and session setup hooks.

    Example:
        suite = Suite("smoke")

        @suite.setup("standard_user")
        async def login(run):
            ...

        @suite.test(state="standard_user", targets=["chromium", "webkit"])
        async def products_are_listed(run):
            ...
    """

    __test__ = False

    def __init__(self, name="suite"):
        self.name = name
        self.tests = []
        self.setups = {}

    def add(self, case):
        if any(existing.name == case.name for existing in self.tests):
            raise ValueError(f"Duplicate test name: {case.name}")
        self.tests.append(case)
        return case

    def test(self, name=None, targets=None, state=None, timeout=None):
        """
        Decorator registering an async test body.

        Args:
            name: Test identifier (defaults to the function name)
            targets: Target names or EngineTargets (None for the runner default)
            state: Session state identifier to seed the context with
            timeout: Per-run timeout in seconds (None for the runner default)
        """
        def decorator(func):
            self.add(TestCase(
                name=name or func.__name__,
                body=func,
                targets=tuple(targets) if targets is not None else None,
                state_id=state,
                timeout=timeout,
            ))
            return func
        return decorator

    def setup(self, state_id, target=None, timeout=None):
        """
        Decorator registering the routine that logs in for state_id.

        The runner calls it in a fresh context when the stored state is
        missing or stale, then captures and persists the context's state.
        """
        def decorator(func):
            self.setups[state_id] = SetupHook(state_id, func, target, timeout)
            return func
        return decorator

    def state_ids(self):
        """Session identifiers referenced by tests, in first-use order."""
        ids = []
        for case in self.tests:
            if case.state_id and case.state_id not in ids:
                ids.append(case.state_id)
        return ids

    def __iter__(self):
        return iter(self.tests)

    def __len__(self):
        return len(self.tests)
