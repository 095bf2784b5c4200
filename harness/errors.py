#!/usr/bin/env python3
"""
Exception types raised by the harness.

Errors raised while acquiring, seeding or running a single test are turned
into RunResults by the runner. Errors from the session state store are
configuration problems and reach the caller unchanged.
"""


class HarnessError(Exception):
    """Base class for all harness errors."""


class LaunchError(HarnessError):
    """A browser engine process could not be started."""

    def __init__(self, kind, message):
        super().__init__(f"Failed to launch {kind} engine: {message}")
        self.kind = kind


class SeedError(HarnessError):
    """Session state could not be applied to a new context."""


class CaptureError(HarnessError):
    """Session state capture was attempted on a closed context."""


class StateStoreError(HarnessError):
    """Base class for session state persistence errors."""


class SessionNotFound(StateStoreError):
    """No session state has been persisted for the identifier."""

    def __init__(self, state_id):
        super().__init__(f"No session state stored for '{state_id}'")
        self.state_id = state_id


class CorruptState(StateStoreError):
    """Stored session state is malformed or has an unknown format version."""


class RunTimeout(HarnessError):
    """A run exceeded its time bound."""

    def __init__(self, test_id, target_name, timeout):
        super().__init__(f"{test_id} [{target_name}] exceeded {timeout:g}s")
        self.test_id = test_id
        self.target_name = target_name
        self.timeout = timeout


class RunFailure(HarnessError):
    """A test body reported a failure explicitly."""
