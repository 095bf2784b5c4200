"""
Session state module for saving and restoring authenticated browser state.

This package contains the SessionState data model and the SessionStateStore
that persists it between test runs.
"""

from .state import Cookie, OriginStorage, SessionState
from .store import SessionStateStore

__all__ = ["Cookie", "OriginStorage", "SessionState", "SessionStateStore"]
