"""
Frame handling scenarios on The Internet demo site.
"""

import asyncio

from harness import Suite
from harness.pages import InternetPage, PageDriver

suite = Suite("iframes")


@suite.test()
async def reads_text_from_nested_frames(run):
    internet = InternetPage(PageDriver(await run.new_page()))
    await internet.navigate_to_nested_frames()

    assert "LEFT" in await internet.get_left_frame_text()
    assert "RIGHT" in await internet.get_right_frame_text()
    assert "MIDDLE" in await internet.get_middle_frame_text()


@suite.test()
async def reads_frames_concurrently(run):
    internet = InternetPage(PageDriver(await run.new_page()))
    await internet.navigate_to_nested_frames()

    texts = await asyncio.gather(
        internet.get_left_frame_text(),
        internet.get_right_frame_text(),
        internet.get_frame_text("bottom"),
    )
    assert all(text.strip() for text in texts)


@suite.test()
async def waits_for_editor_frame(run):
    page = await run.new_page()
    driver = PageDriver(page)
    await driver.goto("https://the-internet.herokuapp.com/iframe")
    await driver.wait_for("iframe#mce_0_ifr", timeout=10000)

    body = page.frame_locator("iframe#mce_0_ifr").locator("#tinymce")
    assert await body.is_visible()
    assert await body.text_content() is not None
