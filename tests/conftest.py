from unittest.mock import AsyncMock, MagicMock

import pytest

from harness.browser.pool import BrowserContextPool
from harness.session.store import SessionStateStore

from .fakes import FakeLauncher


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def pool(launcher: FakeLauncher) -> BrowserContextPool:
    return BrowserContextPool(launcher)


@pytest.fixture
def store(tmp_path) -> SessionStateStore:
    return SessionStateStore(tmp_path / "auth")


@pytest.fixture
def page_mock() -> MagicMock:
    """Playwright page mock with awaitable interaction methods."""
    page = MagicMock(name="page")
    for name in (
        "goto", "click", "fill", "text_content", "wait_for_selector", "is_visible",
        "title", "evaluate", "set_input_files", "select_option", "wait_for_url",
        "wait_for_load_state", "close",
    ):
        setattr(page, name, AsyncMock(name=name))
    page.keyboard.press = AsyncMock(name="press")
    page.url = "https://example.com/"
    return page
