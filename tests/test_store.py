import json
import os

import pytest

from harness.browser.targets import BUILTIN_TARGETS
from harness.errors import CaptureError, CorruptState, SessionNotFound
from harness.session.state import Cookie, OriginStorage, SessionState
from harness.session.store import SessionStateStore

CHROMIUM = BUILTIN_TARGETS[0]


@pytest.fixture
def state() -> SessionState:
    return SessionState(
        cookies=[Cookie("session-username", "standard_user", "www.saucedemo.com")],
        origins=[OriginStorage("https://www.saucedemo.com", {"cart-contents": "[]"})],
        captured_at=1000.0,
    )


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_persist_then_load(store: SessionStateStore, state: SessionState):
    store.persist("standard_user", state)

    assert store.load("standard_user") == state


def test_persist_overwrites_previous_state(store: SessionStateStore, state: SessionState):
    newer = SessionState(cookies=[Cookie("session-username", "problem_user", "www.saucedemo.com")],
                         captured_at=2000.0)

    store.persist("user", state)
    store.persist("user", newer)
    store.persist("user", newer)

    assert store.load("user") == newer
    assert os.listdir(store.state_dir) == ["user.json"]


def test_load_missing_state(store: SessionStateStore):
    with pytest.raises(SessionNotFound) as exc_info:
        store.load("nobody")

    assert exc_info.value.state_id == "nobody"


def test_load_invalid_json(store: SessionStateStore):
    os.makedirs(store.state_dir)
    with open(store.path_for("broken"), "w") as f:
        f.write("{not json")

    with pytest.raises(CorruptState):
        store.load("broken")


def test_load_invalid_utf8(store: SessionStateStore):
    os.makedirs(store.state_dir)
    with open(store.path_for("garbled"), "wb") as f:
        f.write(b'{"format_version": 1, "x": "\xff\xfe"}')

    with pytest.raises(CorruptState, match="UTF-8"):
        store.load("garbled")


def test_load_unknown_format_version(store: SessionStateStore, state: SessionState):
    record = state.to_record()
    record["format_version"] = 99
    os.makedirs(store.state_dir)
    with open(store.path_for("future"), "w") as f:
        json.dump(record, f)

    with pytest.raises(CorruptState, match="format version"):
        store.load("future")


def test_load_duplicate_cookies(store: SessionStateStore, state: SessionState):
    record = state.to_record()
    record["cookies"].append(dict(record["cookies"][0]))
    os.makedirs(store.state_dir)
    with open(store.path_for("dupes"), "w") as f:
        json.dump(record, f)

    with pytest.raises(CorruptState, match="Duplicate cookie"):
        store.load("dupes")


def test_failed_write_keeps_previous_state(store: SessionStateStore, state: SessionState, monkeypatch):
    store.persist("user", state)

    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail_replace)
    with pytest.raises(OSError, match="disk full"):
        store.persist("user", SessionState(captured_at=5.0))
    monkeypatch.undo()

    assert store.load("user") == state
    assert os.listdir(store.state_dir) == ["user.json"]


@pytest.mark.parametrize("state_id", ["", ".", "..", "a/b", "a\\b"])
def test_invalid_identifiers(store: SessionStateStore, state_id):
    with pytest.raises(ValueError):
        store.path_for(state_id)


def test_is_stale(tmp_path, state: SessionState):
    clock = FakeClock(state.captured_at + 60)
    store = SessionStateStore(tmp_path, clock=clock)

    assert not store.is_stale(state, None)
    assert not store.is_stale(state, 60_000)
    assert store.is_stale(state, 59_999)


async def test_capture_reads_live_context(tmp_path, pool):
    store = SessionStateStore(tmp_path, clock=FakeClock(42.0))
    lease = await pool.acquire(CHROMIUM)
    lease.context.state = {
        "cookies": [{"name": "session-username", "value": "standard_user", "domain": "www.saucedemo.com"}],
        "origins": [],
    }

    captured = await store.capture(lease)

    assert captured.cookie("session-username").value == "standard_user"
    assert captured.captured_at == 42.0
    await pool.release(lease)


async def test_capture_after_release(store: SessionStateStore, pool):
    lease = await pool.acquire(CHROMIUM)
    await pool.release(lease)

    with pytest.raises(CaptureError):
        await store.capture(lease)


async def test_capture_from_closed_context(store: SessionStateStore, pool):
    lease = await pool.acquire(CHROMIUM)
    await lease.context.close()

    with pytest.raises(CaptureError):
        await store.capture(lease.context)
    await pool.release(lease)


def test_list_and_delete(store: SessionStateStore, state: SessionState):
    assert store.list_ids() == []

    store.persist("b_user", state)
    store.persist("a_user", state)

    assert store.list_ids() == ["a_user", "b_user"]
    assert store.exists("a_user")
    assert store.delete("a_user") is True
    assert store.delete("a_user") is False
    assert store.list_ids() == ["b_user"]
