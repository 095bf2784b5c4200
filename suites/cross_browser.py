"""
Cross-browser and device scenarios on the Sauce Demo shop.

Run with several targets, e.g. --browsers chromium,firefox,webkit,mobile-safari
"""

import time

from harness import Suite
from harness.pages import LoginPage, PageDriver, ProductsPage

suite = Suite("cross-browser")


@suite.test()
async def login_page_loads(run):
    driver = PageDriver(await run.new_page())
    await LoginPage(driver).navigate()
    assert "saucedemo" in driver.current_url
    run.note(f"running on {run.browser_name}")


@suite.test()
async def measures_login_time(run):
    driver = PageDriver(await run.new_page())
    login = LoginPage(driver)

    started = time.monotonic()
    await login.navigate()
    run.note(f"page load {(time.monotonic() - started) * 1000:.0f}ms")

    started = time.monotonic()
    await login.login("standard_user", "secret_sauce")
    run.note(f"login {(time.monotonic() - started) * 1000:.0f}ms")


@suite.test()
async def viewport_matches_device(run):
    driver = PageDriver(await run.new_page())
    await LoginPage(driver).navigate()

    width = driver.page.viewport_size["width"]
    user_agent = await driver.evaluate("() => navigator.userAgent")
    if width < 768:
        assert "Mobile" in user_agent
    run.note(f"viewport {width}px")


@suite.test()
async def completes_shopping_flow(run):
    driver = PageDriver(await run.new_page())
    login = LoginPage(driver)
    products = ProductsPage(driver)

    await login.navigate()
    await login.login("standard_user", "secret_sauce")
    await products.wait_for_products_to_load()

    names = await products.get_product_names()
    assert names
    await products.add_product_to_cart(names[0])
    assert await products.get_cart_item_count() == 1
