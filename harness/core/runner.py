#!/usr/bin/env python3
"""
Test runner module.

This module contains the TestRunner class that fans every test of a suite
out across its engine targets, executes the concrete runs on a bounded set of
workers and aggregates their outcomes into a SuiteReport.

Every run goes through pending -> acquiring -> running -> terminal outcome ->
released. A failing, hanging or crashing run only affects its own result.
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..browser.targets import EngineTarget
from ..errors import LaunchError, RunFailure, RunTimeout, SeedError, SessionNotFound
from .matrix import EngineMatrix
from .results import FailureInfo, Outcome, RunResult, SuiteReport
from .suite import RunContext, TestCase


class RunPhase(str, Enum):
    PENDING = "pending"
    ACQUIRING = "acquiring"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    SKIPPED = "skipped"
    RELEASED = "released"


_TERMINAL_PHASES = {
    Outcome.PASSED: RunPhase.PASSED,
    Outcome.FAILED: RunPhase.FAILED,
    Outcome.TIMED_OUT: RunPhase.TIMED_OUT,
    Outcome.SKIPPED: RunPhase.SKIPPED,
}


@dataclass
class ScheduledRun:
    """Bookkeeping for one concrete (test, target) run."""

    index: int
    case: TestCase
    target: EngineTarget
    seed: Any = None
    phase: RunPhase = RunPhase.PENDING
    lease: Any = None
    release_count: int = 0
    context: Optional[RunContext] = None


class TestRunner:
    """
    Executes suites across engine targets with bounded concurrency.

    Runs are independent units of work pulled from a shared queue by up to
    `concurrency` workers. Each run acquires its own context, is bounded by
    its timeout and always releases the context before its result is
    recorded.
    """

    __test__ = False

    def __init__(self, pool, store=None, matrix=None, default_targets=None,
                 concurrency=4, timeout=30.0, max_state_age_ms=None):
        """
        Initialize the runner.

        Args:
            pool: BrowserContextPool to lease contexts from
            store: Optional SessionStateStore used to seed authenticated runs
            matrix: EngineMatrix resolving target names (built-in targets by default)
            default_targets: Targets for tests that do not name their own
            concurrency: Maximum number of runs executing at the same time
            timeout: Default per-run timeout in seconds (None for no limit)
            max_state_age_ms: Age after which stored session state is refreshed
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        self.pool = pool
        self.store = store
        self.matrix = matrix or EngineMatrix()
        self.default_targets = (
            list(default_targets) if default_targets is not None
            else self.matrix.select(["chromium"])
        )
        self.concurrency = concurrency
        self.timeout = timeout
        self.max_state_age_ms = max_state_age_ms

        self.report = None
        self.runs = []
        self._workers = []
        self._cancelled = False
        self._setup_failures = {}

    async def run(self, suite):
        """
        Run every test of a suite on every one of its targets.

        Args:
            suite: Suite to execute

        Returns:
            SuiteReport: One result per expanded (test, target) pair, plus one
            skipped result for each test without targets

        Raises:
            CorruptState: If a stored session state cannot be read
            OSError: If the session state store cannot be accessed
            asyncio.CancelledError: If the calling task is cancelled; the
                finalized partial report is left in self.report
        """
        self.report = SuiteReport()
        self.runs = []
        self._workers = []
        self._cancelled = False
        self._setup_failures = {}

        try:
            seeds = await self._prepare_sessions(suite)
            self.runs = self._schedule(suite, seeds)

            print(f"Running {len(self.runs)} run(s) from {len(suite)} test(s) "
                  f"with {self.concurrency} worker(s)")

            queue = asyncio.Queue()
            for run in self.runs:
                queue.put_nowait(run)

            if not self._cancelled:
                self._workers = [
                    asyncio.create_task(self._worker(queue))
                    for _ in range(min(self.concurrency, len(self.runs)))
                ]

            outcomes = await asyncio.gather(*self._workers, return_exceptions=True)
        except asyncio.CancelledError:
            self._cancelled = True
            if not self.report.is_final:
                self._finish()
            raise

        for outcome in outcomes:
            if isinstance(outcome, Exception):
                raise outcome

        return self._finish()

    def cancel(self):
        """
        Cancel the suite.

        Queued runs are not started; in-flight runs are interrupted and
        release their contexts before exiting.
        """
        self._cancelled = True
        for worker in self._workers:
            worker.cancel()

    @property
    def cancelled(self):
        return self._cancelled

    async def _prepare_sessions(self, suite):
        """
        Load (or produce through setup hooks) the seed for every state id.

        A failing setup hook does not stop the suite: the runs seeded by its
        state id are reported as failed with the setup error.
        """
        seeds = {}
        state_ids = suite.state_ids()
        if not state_ids:
            return seeds

        if self.store is None:
            print("Warning: tests use session state but no state store is configured; "
                  "runs start unauthenticated")
            return {state_id: None for state_id in state_ids}

        for state_id in state_ids:
            try:
                state = self.store.load(state_id)
            except SessionNotFound:
                state = None

            if state is not None and self.store.is_stale(state, self.max_state_age_ms):
                if state_id in suite.setups:
                    print(f"Session state for '{state_id}' is stale, capturing it again")
                    state = None
                else:
                    print(f"Warning: session state for '{state_id}' is stale and has no setup hook")

            if state is None and state_id in suite.setups:
                try:
                    state = await self._run_setup(suite.setups[state_id])
                except Exception as e:
                    print(f"Session setup for '{state_id}' failed: {e}")
                    info = self._describe_failure(e)
                    self._setup_failures[state_id] = FailureInfo(
                        info.kind, f"Session setup for '{state_id}' failed: {info.message}", info.traceback
                    )
                    continue
                self.store.persist(state_id, state)
                print(f"Session state for '{state_id}' saved ({len(state.cookies)} cookie(s))")

            if state is None:
                print(f"No session state for '{state_id}', runs start unauthenticated")
            seeds[state_id] = state

        return seeds

    async def _run_setup(self, hook):
        """Run a setup hook in a fresh context and capture the state it leaves behind."""
        target = self.matrix.select([hook.target])[0] if hook.target else self.default_targets[0]
        print(f"Capturing session state for '{hook.state_id}' on {target.name}...")

        lease = await self.pool.acquire(target)
        try:
            context = RunContext(f"setup:{hook.state_id}", target, lease, self.store)
            await asyncio.wait_for(hook.body(context), hook.timeout or self.timeout)
            return await self.store.capture(lease)
        finally:
            await self.pool.release(lease)

    def _resolve_targets(self, case):
        if case.targets is None:
            return list(self.default_targets)
        return [
            target if isinstance(target, EngineTarget) else self.matrix.select([target])[0]
            for target in case.targets
        ]

    def _schedule(self, suite, seeds):
        runs = []
        for case in suite:
            pairs = self.matrix.expand(self._resolve_targets(case), case.name)
            if not pairs:
                self.report.append(RunResult(
                    test_id=case.name,
                    target=None,
                    outcome=Outcome.SKIPPED,
                    notes=("no engine targets",),
                ))
                continue
            setup_failure = self._setup_failures.get(case.state_id)
            for test_id, target in pairs:
                if setup_failure is not None:
                    self.report.append(RunResult(
                        test_id=test_id,
                        target=target,
                        outcome=Outcome.FAILED,
                        error=setup_failure,
                    ))
                    continue
                runs.append(ScheduledRun(
                    index=self.report.reserve(),
                    case=case,
                    target=target,
                    seed=seeds.get(case.state_id),
                ))
        return runs

    async def _worker(self, queue):
        while not self._cancelled:
            try:
                run = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            await self._execute(run)

    async def _attempt(self, run):
        """Acquire a context and run the test body, returning the failure if any."""
        try:
            run.phase = RunPhase.ACQUIRING
            run.lease = await self.pool.acquire(run.target, run.seed)

            run.phase = RunPhase.RUNNING
            run.context = RunContext(run.case.name, run.target, run.lease, self.store)
            await run.case.body(run.context)
            return None
        except Exception as e:
            return e

    async def _execute(self, run):
        started = time.monotonic()
        outcome, error = Outcome.FAILED, None
        timeout = run.case.timeout or self.timeout

        try:
            try:
                failure = await asyncio.wait_for(self._attempt(run), timeout)
            except asyncio.TimeoutError:
                outcome = Outcome.TIMED_OUT
                error = FailureInfo.from_exception(RunTimeout(run.case.name, run.target.name, timeout))
            else:
                if failure is None:
                    outcome = Outcome.PASSED
                else:
                    outcome, error = Outcome.FAILED, self._describe_failure(failure)
        except asyncio.CancelledError:
            outcome = Outcome.FAILED
            error = FailureInfo("Cancelled", "Run was cancelled before it completed")
            raise
        finally:
            run.phase = _TERMINAL_PHASES[outcome]
            await self._release(run)

            result = RunResult(
                test_id=run.case.name,
                target=run.target,
                outcome=outcome,
                duration_ms=(time.monotonic() - started) * 1000,
                error=error,
                notes=tuple(run.context.notes) if run.context else (),
            )
            self.report.record(run.index, result)
            self._print_result(result)

    async def _release(self, run):
        if run.lease is not None:
            run.release_count += 1
            try:
                await self.pool.release(run.lease)
            except Exception as e:
                print(f"Error releasing context for {run.case.name} [{run.target.name}]: {e}")
        run.phase = RunPhase.RELEASED

    @staticmethod
    def _describe_failure(exc):
        if isinstance(exc, (LaunchError, SeedError)):
            return FailureInfo.from_exception(exc)
        info = FailureInfo.from_exception(exc, kind=RunFailure.__name__)
        if isinstance(exc, RunFailure):
            return info
        detail = str(exc)
        message = f"{type(exc).__name__}: {detail}" if detail else type(exc).__name__
        return FailureInfo(info.kind, message, info.traceback)

    def _finish(self):
        for run in self.runs:
            if self.report.results[run.index] is None:
                run.phase = RunPhase.SKIPPED
                self.report.record(run.index, RunResult(
                    test_id=run.case.name,
                    target=run.target,
                    outcome=Outcome.SKIPPED,
                    error=FailureInfo("Cancelled", "Suite was cancelled before the run started"),
                ))
        return self.report.finalize(cancelled=self._cancelled)

    @staticmethod
    def _print_result(result):
        line = f"{result.outcome.value.upper():>9}  {result.test_id} [{result.target_name}] ({result.duration_ms:.0f}ms)"
        if result.error:
            line += f" - {result.error.kind}: {result.error.message}"
        print(line)
