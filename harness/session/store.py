#!/usr/bin/env python3
"""
Session state persistence module.

This module contains the SessionStateStore class that captures the
authenticated state of a live browser context and keeps one JSON file per
identifier (typically a user role) so later runs can start already logged in.
"""

import json
import os
import tempfile
import time

from playwright.async_api import Error as PlaywrightError

from ..errors import CaptureError, CorruptState, SessionNotFound
from .state import SessionState


class SessionStateStore:
    """
    Captures, saves and restores session state.

    Every identifier maps to ``<state_dir>/<identifier>.json``. Writes go to a
    temporary file in the same directory that is then moved over the target,
    so a reader sees either the previous state or the new one.
    """

    SUFFIX = ".json"

    def __init__(self, state_dir, clock=time.time):
        """
        Initialize the store.

        Args:
            state_dir: Directory holding the state files
            clock: Callable returning the current time in epoch seconds
        """
        self.state_dir = os.fspath(state_dir)
        self.clock = clock

    def path_for(self, state_id):
        """
        Get the file path used for an identifier.

        Raises:
            ValueError: If the identifier is empty or contains a path separator
        """
        if not state_id or state_id in (".", "..") or "/" in state_id or "\\" in state_id:
            raise ValueError(f"Invalid session state identifier: {state_id!r}")
        return os.path.join(self.state_dir, state_id + self.SUFFIX)

    async def capture(self, lease):
        """
        Read cookies and local storage from a live context.

        Args:
            lease: ContextLease (or bare Playwright BrowserContext) to read from

        Returns:
            SessionState: The captured state, stamped with the current time

        Raises:
            CaptureError: If the context has already been closed
        """
        if getattr(lease, "released", False):
            raise CaptureError("Cannot capture state from a released context")

        context = getattr(lease, "context", lease)
        try:
            raw = await context.storage_state()
        except PlaywrightError as e:
            raise CaptureError(f"Cannot capture state: {e}") from e

        return SessionState.from_storage_state(raw, captured_at=self.clock())

    def persist(self, state_id, state):
        """
        Write state for an identifier, replacing any previous value.

        OS errors (disk full, permission denied) are not handled here; they
        propagate to the caller.

        Args:
            state_id: Identifier to store the state under
            state: SessionState to write
        """
        path = self.path_for(state_id)
        os.makedirs(self.state_dir, exist_ok=True)

        fd, tmp_file = tempfile.mkstemp(prefix=f".{state_id}.", suffix=".tmp", dir=self.state_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state.to_record(), f, indent=2)

                # Ensure data is written to disk
                f.flush()
                os.fsync(f.fileno())

            os.replace(tmp_file, path)
        except BaseException:
            if os.path.exists(tmp_file):
                os.unlink(tmp_file)
            raise

    def load(self, state_id):
        """
        Read previously persisted state.

        Args:
            state_id: Identifier the state was stored under

        Returns:
            SessionState: The stored state

        Raises:
            SessionNotFound: If nothing was stored for the identifier
            CorruptState: If the file is not a valid state record
        """
        path = self.path_for(state_id)
        try:
            with open(path, "r", encoding="utf-8") as f:
                record = json.load(f)
        except FileNotFoundError:
            raise SessionNotFound(state_id) from None
        except json.JSONDecodeError as e:
            raise CorruptState(f"Invalid JSON in {path}: {e.msg}") from e
        except UnicodeDecodeError as e:
            raise CorruptState(f"Invalid UTF-8 in {path}: {e.reason}") from e

        try:
            return SessionState.from_record(record)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise CorruptState(f"Invalid session state in {path}: {e}") from e

    def is_stale(self, state, max_age_ms):
        """
        Check whether a state is older than the allowed age.

        Args:
            state: SessionState to check
            max_age_ms: Maximum age in milliseconds, None for no limit

        Returns:
            bool: True if the state should be captured again
        """
        if max_age_ms is None:
            return False
        age_ms = (self.clock() - state.captured_at) * 1000
        return age_ms > max_age_ms

    def exists(self, state_id):
        return os.path.exists(self.path_for(state_id))

    def delete(self, state_id):
        """Remove the state for an identifier. Returns False if there was none."""
        try:
            os.remove(self.path_for(state_id))
            return True
        except FileNotFoundError:
            return False

    def list_ids(self):
        """List the identifiers that have persisted state, sorted by name."""
        if not os.path.isdir(self.state_dir):
            return []
        return sorted(
            name[: -len(self.SUFFIX)]
            for name in os.listdir(self.state_dir)
            if name.endswith(self.SUFFIX) and not name.startswith(".")
        )
