#!/usr/bin/env python3
"""
Page object for The Internet demo site (the-internet.herokuapp.com).

Used by the multi-window and frame scenarios.
"""

INTERNET_URL = "https://the-internet.herokuapp.com/"

# Frame selectors from the page root down to each nested frame
NESTED_FRAMES = {
    "left": ('frame[name="frame-top"]', 'frame[name="frame-left"]'),
    "middle": ('frame[name="frame-top"]', 'frame[name="frame-middle"]'),
    "right": ('frame[name="frame-top"]', 'frame[name="frame-right"]'),
    "bottom": ('frame[name="frame-bottom"]',),
}


class InternetPage:
    """Navigation, nested frames and new-window links of The Internet."""

    new_window_link = 'a[target="_blank"]'

    def __init__(self, driver):
        self.driver = driver

    @property
    def page(self):
        return self.driver.page

    async def navigate_to_internet(self):
        await self.driver.goto(INTERNET_URL)

    async def _follow(self, link_text):
        await self.page.locator("a", has_text=link_text).click()

    async def navigate_to_nested_frames(self):
        await self.navigate_to_internet()
        await self._follow("Nested Frames")

    async def navigate_to_multiple_windows(self):
        await self.navigate_to_internet()
        await self._follow("Multiple Windows")

    async def get_frame_text(self, position):
        """
        Read the body text of one of the nested frames.

        Args:
            position: "left", "middle", "right" or "bottom"
        """
        if position not in NESTED_FRAMES:
            raise ValueError(f"Unknown frame {position!r}, expected one of {sorted(NESTED_FRAMES)}")
        return await self.driver.frame_text(*NESTED_FRAMES[position])

    async def get_left_frame_text(self):
        return await self.get_frame_text("left")

    async def get_right_frame_text(self):
        return await self.get_frame_text("right")

    async def get_middle_frame_text(self):
        return await self.get_frame_text("middle")

    async def click_new_window_link(self):
        """
        Click the first link opening a new window.

        Returns:
            Page: The page opened by the click
        """
        link = self.page.locator(self.new_window_link).first
        return await self.driver.expect_new_page(link.click)

    async def get_new_window_title(self, new_page):
        return await new_page.title()

    async def close_page(self, page):
        await page.close()
