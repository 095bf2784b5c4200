import asyncio
import json
import os

import pytest

from harness.browser.pool import BrowserContextPool
from harness.browser.targets import EngineKind
from harness.core.results import Outcome
from harness.core.runner import RunPhase, TestRunner
from harness.core.suite import Suite
from harness.errors import CorruptState
from harness.session.state import Cookie, SessionState
from harness.session.store import SessionStateStore

from .fakes import FakeContext, FakeLauncher

LOGGED_IN = {
    "cookies": [{"name": "session-username", "value": "standard_user", "domain": "www.saucedemo.com"}],
    "origins": [],
}


@pytest.fixture
def suite() -> Suite:
    return Suite("unit")


@pytest.fixture
def runner(pool: BrowserContextPool, store: SessionStateStore) -> TestRunner:
    return TestRunner(pool, store=store, concurrency=2, timeout=5)


async def test_failures_are_isolated(suite: Suite, runner: TestRunner, pool: BrowserContextPool):
    @suite.test()
    async def passes(run):
        await run.new_page()

    @suite.test()
    async def raises(run):
        raise AssertionError("boom")

    @suite.test()
    async def reports_failure(run):
        run.fail("cart badge missing")

    report = await runner.run(suite)

    assert [r.outcome for r in report.results] == [Outcome.PASSED, Outcome.FAILED, Outcome.FAILED]
    assert report.results[1].error.kind == "RunFailure"
    assert report.results[1].error.message == "AssertionError: boom"
    assert report.results[2].error.message == "cart badge missing"
    assert report.is_final
    assert not report.ok
    assert pool.open_context_count() == 0


async def test_fan_out_across_targets(suite: Suite, runner: TestRunner):
    seen = []

    @suite.test(targets=["chromium", "firefox", "webkit"])
    async def everywhere(run):
        seen.append(run.browser_name)

    report = await runner.run(suite)

    assert report.total == 3
    assert report.passed == 3
    assert [r.target_name for r in report.results] == ["chromium", "firefox", "webkit"]
    assert sorted(seen) == ["chromium", "firefox", "webkit"]


async def test_results_follow_schedule_order(suite: Suite, pool: BrowserContextPool):
    runner = TestRunner(pool, concurrency=3)

    for name, delay in (("slow", 0.05), ("medium", 0.02), ("fast", 0)):

        async def body(run, delay=delay):
            await asyncio.sleep(delay)

        suite.test(name=name)(body)

    report = await runner.run(suite)

    assert [r.test_id for r in report.results] == ["slow", "medium", "fast"]


async def test_timeout_marks_run_timed_out(suite: Suite, runner: TestRunner, pool: BrowserContextPool):
    @suite.test(timeout=0.05)
    async def hangs(run):
        await asyncio.sleep(10)

    report = await runner.run(suite)
    result = report.results[0]

    assert result.outcome == Outcome.TIMED_OUT
    assert result.error.kind == "RunTimeout"
    assert runner.runs[0].release_count == 1
    assert runner.runs[0].phase == RunPhase.RELEASED
    assert pool.open_context_count() == 0


async def test_timeout_raised_by_body_is_a_failure(suite: Suite, runner: TestRunner):
    @suite.test()
    async def waits_for_selector(run):
        raise asyncio.TimeoutError("selector .title not found")

    report = await runner.run(suite)

    assert report.results[0].outcome == Outcome.FAILED
    assert report.results[0].error.message.endswith("selector .title not found")


async def test_launch_failure_only_affects_its_target(suite: Suite, store: SessionStateStore):
    pool = BrowserContextPool(FakeLauncher(fail_kinds={EngineKind.WEBKIT}))
    runner = TestRunner(pool, store=store)

    @suite.test(targets=["chromium", "webkit"])
    async def cross_browser(run):
        pass

    report = await runner.run(suite)

    assert report.results[0].outcome == Outcome.PASSED
    assert report.results[1].outcome == Outcome.FAILED
    assert report.results[1].error.kind == "LaunchError"
    assert runner.runs[1].release_count == 0
    assert pool.open_context_count() == 0


async def test_test_without_targets_is_skipped(suite: Suite, runner: TestRunner):
    @suite.test(targets=[])
    async def nowhere(run):
        pass

    report = await runner.run(suite)

    assert report.total == 1
    assert report.results[0].outcome == Outcome.SKIPPED
    assert report.results[0].target is None
    assert report.results[0].notes == ("no engine targets",)
    assert report.ok


async def test_missing_state_runs_unauthenticated(suite: Suite, runner: TestRunner):
    @suite.test(state="standard_user")
    async def products(run):
        assert "storage_state" not in run.context.options

    report = await runner.run(suite)

    assert report.passed == 1


async def test_stored_state_seeds_context(suite: Suite, runner: TestRunner, store: SessionStateStore):
    store.persist("standard_user", SessionState.from_storage_state(LOGGED_IN))

    @suite.test(state="standard_user", targets=["chromium", "firefox"])
    async def products(run):
        cookies = run.context.options["storage_state"]["cookies"]
        assert cookies[0]["value"] == "standard_user"

    report = await runner.run(suite)

    assert report.passed == 2


async def test_setup_hook_captures_missing_state(suite: Suite, runner: TestRunner,
                                                 store: SessionStateStore, pool: BrowserContextPool):
    calls = []

    @suite.setup("standard_user")
    async def login(run):
        calls.append(run.test_id)
        run.context.state = LOGGED_IN

    @suite.test(state="standard_user")
    async def first(run):
        assert run.context.options["storage_state"]["cookies"]

    @suite.test(state="standard_user")
    async def second(run):
        assert run.context.options["storage_state"]["cookies"]

    report = await runner.run(suite)

    assert calls == ["setup:standard_user"]
    assert report.passed == 2
    assert store.load("standard_user").cookie("session-username").value == "standard_user"
    assert pool.open_context_count() == 0


async def test_stale_state_is_captured_again(suite: Suite, pool: BrowserContextPool, store: SessionStateStore):
    store.persist("standard_user", SessionState(captured_at=0.0))
    runner = TestRunner(pool, store=store, max_state_age_ms=60_000)
    calls = []

    @suite.setup("standard_user")
    async def login(run):
        calls.append(run.test_id)
        run.context.state = LOGGED_IN

    @suite.test(state="standard_user")
    async def products(run):
        pass

    await runner.run(suite)

    assert len(calls) == 1
    assert store.load("standard_user").captured_at > 0


async def test_stale_state_without_setup_is_still_used(suite: Suite, pool: BrowserContextPool,
                                                       store: SessionStateStore):
    stale = SessionState(cookies=[Cookie("session-username", "old_user", "www.saucedemo.com")], captured_at=0.0)
    store.persist("standard_user", stale)
    runner = TestRunner(pool, store=store, max_state_age_ms=60_000)

    @suite.test(state="standard_user")
    async def products(run):
        assert run.context.options["storage_state"]["cookies"][0]["value"] == "old_user"

    report = await runner.run(suite)

    assert report.passed == 1


async def test_corrupt_state_stops_the_run(suite: Suite, runner: TestRunner, store: SessionStateStore):
    os.makedirs(store.state_dir)
    with open(store.path_for("standard_user"), "w") as f:
        json.dump({"format_version": 0}, f)

    @suite.test(state="standard_user")
    async def products(run):
        pass

    with pytest.raises(CorruptState):
        await runner.run(suite)


async def test_body_can_save_state(suite: Suite, runner: TestRunner, store: SessionStateStore):
    @suite.test()
    async def login(run):
        run.context.state = LOGGED_IN
        await run.save_state("admin")
        run.note("saved")

    report = await runner.run(suite)

    assert report.results[0].notes == ("saved",)
    assert store.exists("admin")


async def test_concurrency_is_bounded(suite: Suite, pool: BrowserContextPool):
    runner = TestRunner(pool, concurrency=2)
    in_flight = 0
    peak = 0

    async def body(run):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1

    for i in range(6):
        suite.test(name=f"t{i}")(body)

    report = await runner.run(suite)

    assert report.passed == 6
    assert peak == 2


async def test_cancel_releases_in_flight_and_skips_queued(suite: Suite, pool: BrowserContextPool):
    runner = TestRunner(pool, concurrency=1)
    started = asyncio.Event()

    @suite.test()
    async def hangs(run):
        started.set()
        await asyncio.sleep(10)

    @suite.test()
    async def queued(run):
        pass

    task = asyncio.create_task(runner.run(suite))
    await started.wait()
    runner.cancel()
    report = await task

    assert report.cancelled
    assert not report.ok
    assert report.results[0].outcome == Outcome.FAILED
    assert report.results[0].error.kind == "Cancelled"
    assert report.results[1].outcome == Outcome.SKIPPED
    assert report.results[1].error.kind == "Cancelled"
    assert runner.runs[0].release_count == 1
    assert pool.open_context_count() == 0


def test_concurrency_must_be_positive(pool: BrowserContextPool):
    with pytest.raises(ValueError):
        TestRunner(pool, concurrency=0)


def test_duplicate_test_names(suite: Suite):
    async def body(run):
        pass

    suite.test(name="same")(body)
    with pytest.raises(ValueError):
        suite.test(name="same")(body)


async def test_failed_setup_only_fails_the_runs_it_seeds(suite: Suite, store: SessionStateStore):
    pool = BrowserContextPool(FakeLauncher(fail_kinds={EngineKind.CHROMIUM}))
    runner = TestRunner(pool, store=store)

    @suite.setup("standard_user", target="chromium")
    async def login(run):
        run.context.state = LOGGED_IN

    @suite.test(state="standard_user", targets=["chromium", "webkit"])
    async def products(run):
        pass

    @suite.test(targets=["webkit"])
    async def unrelated(run):
        pass

    report = await runner.run(suite)

    assert [(r.test_id, r.target_name, r.outcome) for r in report.results] == [
        ("products", "chromium", Outcome.FAILED),
        ("products", "webkit", Outcome.FAILED),
        ("unrelated", "webkit", Outcome.PASSED),
    ]
    assert report.results[1].error.kind == "LaunchError"
    assert report.results[1].error.message.startswith("Session setup for 'standard_user' failed")
    assert report.is_final
    assert not store.exists("standard_user")


async def test_setup_body_failure_is_reported(suite: Suite, runner: TestRunner, pool: BrowserContextPool):
    @suite.setup("standard_user")
    async def login(run):
        raise AssertionError("login button missing")

    @suite.test(state="standard_user")
    async def products(run):
        pass

    report = await runner.run(suite)

    assert report.results[0].outcome == Outcome.FAILED
    assert report.results[0].error.kind == "RunFailure"
    assert "AssertionError: login button missing" in report.results[0].error.message
    assert pool.open_context_count() == 0


async def test_cancelling_the_caller_keeps_completed_results(suite: Suite, pool: BrowserContextPool):
    runner = TestRunner(pool, concurrency=2)
    started = asyncio.Event()

    @suite.test()
    async def quick(run):
        pass

    @suite.test()
    async def hangs(run):
        while runner.report.results[0] is None:
            await asyncio.sleep(0)
        started.set()
        await asyncio.sleep(10)

    task = asyncio.create_task(runner.run(suite))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    report = runner.report
    assert report.is_final
    assert report.cancelled
    assert [r.outcome for r in report.results] == [Outcome.PASSED, Outcome.FAILED]
    assert report.results[1].error.kind == "Cancelled"
    assert pool.open_context_count() == 0


async def test_hung_release_does_not_stall_the_worker(suite: Suite, launcher: FakeLauncher, monkeypatch):
    async def hang(self):
        await asyncio.sleep(10)

    monkeypatch.setattr(FakeContext, "close", hang)
    pool = BrowserContextPool(launcher, close_timeout=0.05)
    runner = TestRunner(pool, concurrency=1)

    async def body(run):
        pass

    suite.test(name="first")(body)
    suite.test(name="second")(body)

    report = await asyncio.wait_for(runner.run(suite), 2)

    assert report.passed == 2
    assert [run.release_count for run in runner.runs] == [1, 1]
    assert pool.open_context_count() == 0
