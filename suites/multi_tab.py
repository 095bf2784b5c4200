"""
Multi-tab and multi-window scenarios on The Internet demo site.
"""

import re

from harness import Suite
from harness.pages import InternetPage, PageDriver

suite = Suite("multi-tab")


@suite.test()
async def opens_new_window_and_reads_its_title(run):
    page = await run.new_page()
    internet = InternetPage(PageDriver(page))
    await internet.navigate_to_multiple_windows()

    new_page = await internet.click_new_window_link()
    try:
        assert "New Window" in await internet.get_new_window_title(new_page)
        assert "Opening a new window" in await new_page.content()
    finally:
        await internet.close_page(new_page)

    assert "windows" in page.url


@suite.test()
async def pages_in_one_context_share_the_site(run):
    first = await run.new_page()
    second = await run.new_page()
    try:
        await first.goto("https://www.saucedemo.com/")
        await second.goto("https://www.saucedemo.com/")
        assert first.url == second.url
    finally:
        if not second.is_closed():
            await second.close()


@suite.test()
async def waits_for_navigation_after_click(run):
    page = await run.new_page()
    internet = InternetPage(PageDriver(page))
    await internet.navigate_to_multiple_windows()
    await page.wait_for_url(re.compile(r".*windows"))
    assert "windows" in page.url
