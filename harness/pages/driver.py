#!/usr/bin/env python3
"""
Page driver module.

This module contains the PageDriver class: the small set of page
interactions that page objects are composed from. Page objects hold a
PageDriver rather than inheriting from a base page.
"""

from urllib.parse import urljoin

from ..browser.events import wait_for_event_after


class PageDriver:
    """Selector-based interactions on a single Playwright page."""

    def __init__(self, page, base_url=None, default_timeout=5000):
        """
        Initialize the driver.

        Args:
            page: Playwright Page to drive
            base_url: Base URL that relative paths are resolved against
            default_timeout: Default wait timeout in milliseconds
        """
        self.page = page
        self.base_url = base_url
        self.default_timeout = default_timeout

    def resolve_url(self, url):
        if self.base_url and "://" not in url:
            return urljoin(self.base_url, url)
        return url

    async def goto(self, url):
        return await self.page.goto(self.resolve_url(url))

    async def click(self, selector):
        await self.page.click(selector)

    async def fill(self, selector, text):
        await self.page.fill(selector, text)

    async def get_text(self, selector):
        return await self.page.text_content(selector)

    async def wait_for(self, selector, timeout=None, state="visible"):
        """
        Wait for an element to reach a state.

        Args:
            selector: Element selector
            timeout: Timeout in milliseconds (driver default if None)
            state: "attached", "detached", "visible" or "hidden"
        """
        return await self.page.wait_for_selector(
            selector, timeout=timeout or self.default_timeout, state=state
        )

    async def is_visible(self, selector):
        return await self.page.is_visible(selector)

    async def press_key(self, key):
        await self.page.keyboard.press(key)

    @property
    def current_url(self):
        return self.page.url

    async def title(self):
        return await self.page.title()

    async def evaluate(self, script, arg=None):
        return await self.page.evaluate(script, arg)

    async def upload_file(self, selector, path):
        await self.page.set_input_files(selector, path)

    async def select_option(self, selector, value):
        return await self.page.select_option(selector, value)

    async def frame_text(self, *frame_selectors, selector="body"):
        """
        Read text from inside (possibly nested) frames.

        Args:
            *frame_selectors: Selectors of the frames to descend into, outermost first
            selector: Element to read inside the innermost frame

        Returns:
            str: Text content of the element
        """
        if not frame_selectors:
            raise ValueError("At least one frame selector is required")

        scope = self.page
        for frame_selector in frame_selectors:
            scope = scope.frame_locator(frame_selector)
        return await scope.locator(selector).text_content()

    async def expect_new_page(self, action, timeout=30.0):
        """
        Run an action that opens a new tab or window and return the new page.

        The listener for the context's "page" event is attached before the
        action runs.

        Args:
            action: Async callable triggering the new page
            timeout: Seconds to wait for the page after the action

        Returns:
            Page: The newly opened page
        """
        new_page = await wait_for_event_after(self.page.context, "page", action, timeout=timeout)
        await new_page.wait_for_load_state()
        return new_page

    async def save_storage_state(self, store, state_id):
        """Capture this page's context state and persist it under state_id."""
        state = await store.capture(self.page.context)
        store.persist(state_id, state)
        return state
