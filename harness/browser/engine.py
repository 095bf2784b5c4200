#!/usr/bin/env python3
"""
Playwright engine launcher module.

This module contains the PlaywrightLauncher class that starts the Playwright
driver once and launches Chromium, Firefox or WebKit engine processes on
demand for the context pool.
"""

import asyncio

from playwright.async_api import async_playwright

from ..errors import LaunchError
from .targets import EngineKind

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-notifications",
    "--disable-background-networking",
]


class PlaywrightLauncher:
    """
    Launches browser engine processes through Playwright.

    The Playwright driver is started lazily on the first launch and stopped
    by stop().
    """

    def __init__(self, headless=True, launch_retries=3, retry_delay=2.0, channel=None, slow_mo=None):
        """
        Initialize the launcher.

        Args:
            headless: Whether to run engines in headless mode
            launch_retries: Number of attempts before a launch is given up
            retry_delay: Seconds to wait between attempts
            channel: Optional Chromium channel ("chrome", "msedge")
            slow_mo: Optional delay in milliseconds applied to every operation
        """
        self.headless = headless
        self.launch_retries = max(1, launch_retries)
        self.retry_delay = retry_delay
        self.channel = channel
        self.slow_mo = slow_mo

        self._manager = None
        self._playwright = None
        self._start_lock = asyncio.Lock()

    async def _ensure_started(self):
        async with self._start_lock:
            if self._playwright is None:
                self._manager = async_playwright()
                self._playwright = await self._manager.start()
        return self._playwright

    def _launch_options(self, kind):
        options = {"headless": self.headless}
        if self.slow_mo:
            options["slow_mo"] = self.slow_mo
        if kind == EngineKind.CHROMIUM:
            options["args"] = list(CHROMIUM_ARGS)
            if not self.headless:
                options["args"].append("--start-maximized")
            if self.channel:
                options["channel"] = self.channel
        return options

    async def launch(self, kind):
        """
        Launch a new engine process.

        Args:
            kind: EngineKind to launch

        Returns:
            Browser: The connected Playwright browser

        Raises:
            LaunchError: If every attempt failed
        """
        kind = EngineKind(kind)
        last_error = None

        for attempt in range(self.launch_retries):
            try:
                playwright = await self._ensure_started()
                browser_type = getattr(playwright, kind.value)
                return await browser_type.launch(**self._launch_options(kind))
            except Exception as e:
                last_error = e
                print(f"Launching {kind.value} failed (attempt {attempt + 1}/{self.launch_retries}): {e}")
                if attempt < self.launch_retries - 1:
                    await asyncio.sleep(self.retry_delay)

        raise LaunchError(kind.value, last_error)

    async def stop(self):
        """Stop the Playwright driver."""
        if self._playwright is not None:
            playwright, self._playwright = self._playwright, None
            self._manager = None
            await playwright.stop()
