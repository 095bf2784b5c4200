#!/usr/bin/env python3
"""
Browser context pool module.

This module contains the BrowserContextPool class that manages engine
processes and hands out isolated browser contexts to test runs. An engine
process serves one lease at a time and may be reused by later acquisitions.
"""

import asyncio
import itertools
import time

from playwright.async_api import Error as PlaywrightError

from ..errors import LaunchError, SeedError
from .engine import PlaywrightLauncher

IDLE_POLICIES = ("keep", "close")


class EngineInstance:
    """
    Represents a launched engine process in the pool.

    This class tracks the state of the process (idle, busy or crashed) and
    how many leases it has served.
    """

    def __init__(self, engine_id, kind, browser, clock=time.monotonic):
        """
        Initialize an engine instance.

        Args:
            engine_id: Unique ID for this engine
            kind: EngineKind of the process
            browser: Connected Playwright browser
            clock: Monotonic clock used for idle tracking
        """
        self.engine_id = engine_id
        self.kind = kind
        self.browser = browser
        self.status = "busy"
        self.clock = clock
        self.last_activity = clock()
        self.leases_served = 0

    def is_healthy(self):
        """
        Check if the engine process is still usable.

        Returns:
            bool: True if the browser is still connected
        """
        if self.status == "crashed":
            return False
        if not self.browser.is_connected():
            self.status = "crashed"
            return False
        return True

    def idle_time(self):
        return self.clock() - self.last_activity


class ContextLease:
    """An isolated browser context checked out of the pool for one run."""

    def __init__(self, lease_id, target, engine, context):
        self.lease_id = lease_id
        self.target = target
        self.engine = engine
        self.context = context
        self.released = False
        self.acquired_at = time.time()

    async def new_page(self):
        """Open a new page (tab) in the leased context."""
        return await self.context.new_page()

    def __repr__(self):
        state = "released" if self.released else "active"
        return f"<ContextLease {self.lease_id} {self.target.name} engine={self.engine.engine_id} {state}>"


class BrowserContextPool:
    """
    Manages engine processes and the contexts leased from them.

    Contexts are never shared: every acquire() creates a new context on an
    engine that is not serving any other lease. Engines are kept warm for
    reuse or shut down on release depending on the idle policy.
    """

    def __init__(self, launcher=None, idle_policy="keep", max_idle_time=300, close_timeout=10.0,
                 clock=time.monotonic):
        """
        Initialize the pool.

        Args:
            launcher: Object with async launch(kind) and stop() methods
                      (defaults to a headless PlaywrightLauncher)
            idle_policy: "keep" to reuse released engines, "close" to shut them down
            max_idle_time: Seconds an idle engine is kept before it is shut down
            close_timeout: Seconds to wait for a context or engine to close before
                           the engine is treated as crashed
            clock: Monotonic clock used for idle tracking
        """
        if idle_policy not in IDLE_POLICIES:
            raise ValueError(f"idle_policy must be one of {IDLE_POLICIES}, got {idle_policy!r}")

        self.launcher = launcher or PlaywrightLauncher()
        self.idle_policy = idle_policy
        self.max_idle_time = max_idle_time
        self.close_timeout = close_timeout
        self.clock = clock

        self.engines = []
        self.active_leases = {}
        self._engine_ids = itertools.count()
        self._lease_ids = itertools.count()
        self.closed = False

        # Statistics
        self.engines_launched = 0
        self.launch_failures = 0
        self.contexts_created = 0

    async def acquire(self, target, seed=None):
        """
        Create an isolated context for a target.

        Args:
            target: EngineTarget describing the engine and device profile
            seed: Optional SessionState installed before any navigation

        Returns:
            ContextLease: The leased context

        Raises:
            LaunchError: If the engine process could not be started
            SeedError: If the seed is malformed or rejected by the engine
        """
        if self.closed:
            raise RuntimeError("Browser context pool is closed")

        storage_state = None
        if seed is not None:
            try:
                storage_state = seed.to_storage_state()
            except (AttributeError, TypeError, ValueError) as e:
                raise SeedError(f"Malformed session state: {e}") from e

        engine, launched = await self._checkout(target.kind)

        options = target.context_options()
        if storage_state is not None:
            options["storage_state"] = storage_state

        try:
            try:
                context = await engine.browser.new_context(**options)
            except PlaywrightError as e:
                if storage_state is not None and engine.is_healthy():
                    raise SeedError(f"Engine rejected session state: {e}") from e
                raise LaunchError(target.kind.value, e) from e
        except BaseException:
            # Never keep a process that was started for a failed acquisition
            await self._return_engine(engine, discard=launched)
            raise

        engine.leases_served += 1
        self.contexts_created += 1
        lease = ContextLease(next(self._lease_ids), target, engine, context)
        self.active_leases[lease.lease_id] = lease
        return lease

    async def release(self, lease):
        """
        Close a leased context and return its engine to the pool.

        Calling release more than once for the same lease is a no-op.

        Args:
            lease: ContextLease returned by acquire()

        Returns:
            bool: True if the context was released by this call
        """
        if lease is None or lease.released:
            return False

        lease.released = True
        self.active_leases.pop(lease.lease_id, None)

        try:
            await asyncio.wait_for(lease.context.close(), self.close_timeout)
        except PlaywrightError as e:
            print(f"Error closing context on engine {lease.engine.engine_id}: {e}")
            lease.engine.status = "crashed"
        except asyncio.TimeoutError:
            print(f"Timed out closing context on engine {lease.engine.engine_id} after {self.close_timeout:g}s")
            lease.engine.status = "crashed"
        finally:
            await self._return_engine(lease.engine)

        return True

    async def _checkout(self, kind):
        """
        Take an idle engine of a kind, launching one if none is available.

        Returns:
            tuple: (EngineInstance, bool) where the flag is True for a new launch
        """
        for engine in list(self.engines):
            if engine.kind != kind or engine.status != "idle":
                continue
            if engine.is_healthy():
                engine.status = "busy"
                engine.last_activity = self.clock()
                return engine, False
            print(f"Replacing unhealthy {kind.value} engine {engine.engine_id}")
            await self._shutdown(engine)

        try:
            browser = await self.launcher.launch(kind)
        except LaunchError:
            self.launch_failures += 1
            raise

        engine = EngineInstance(next(self._engine_ids), kind, browser, clock=self.clock)
        self.engines.append(engine)
        self.engines_launched += 1
        print(f"Launched {kind.value} engine {engine.engine_id}, pool size: {len(self.engines)}")
        return engine, True

    async def _return_engine(self, engine, discard=False):
        engine.last_activity = self.clock()

        if discard or self.idle_policy == "close" or not engine.is_healthy():
            await self._shutdown(engine)
        else:
            engine.status = "idle"

        await self.reap_idle()

    async def _shutdown(self, engine):
        if engine in self.engines:
            self.engines.remove(engine)
        engine.status = "crashed"
        try:
            await asyncio.wait_for(engine.browser.close(), self.close_timeout)
        except PlaywrightError as e:
            print(f"Error closing {engine.kind.value} engine {engine.engine_id}: {e}")
        except asyncio.TimeoutError:
            print(f"Timed out closing {engine.kind.value} engine {engine.engine_id}")

    async def reap_idle(self):
        """
        Shut down engines that have been idle longer than max_idle_time.

        Returns:
            int: Number of engines shut down
        """
        if self.max_idle_time is None:
            return 0

        expired = [
            engine for engine in self.engines
            if engine.status == "idle" and engine.idle_time() > self.max_idle_time
        ]
        for engine in expired:
            print(f"Recycled idle {engine.kind.value} engine {engine.engine_id}, idle for {engine.idle_time():.1f}s")
            await self._shutdown(engine)
        return len(expired)

    def open_context_count(self):
        return len(self.active_leases)

    def get_statistics(self):
        """
        Get statistics about the pool.

        Returns:
            dict: Pool statistics
        """
        return {
            "engines": len(self.engines),
            "idle_engines": sum(1 for e in self.engines if e.status == "idle"),
            "busy_engines": sum(1 for e in self.engines if e.status == "busy"),
            "open_contexts": self.open_context_count(),
            "engines_launched": self.engines_launched,
            "launch_failures": self.launch_failures,
            "contexts_created": self.contexts_created,
        }

    async def close(self):
        """Release all leases, shut down every engine and stop the launcher."""
        if self.closed:
            return
        self.closed = True

        for lease in list(self.active_leases.values()):
            await self.release(lease)
        for engine in list(self.engines):
            await self._shutdown(engine)

        await self.launcher.stop()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
