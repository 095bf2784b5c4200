"""
Session state reuse on the Sauce Demo shop.

The setup hook logs in once; every test seeded with "standard_user" starts
on an authenticated context without going through the login form.
"""

from harness import Suite
from harness.pages import LoginPage, PageDriver, ProductsPage
from harness.pages.login import SAUCE_DEMO_URL

suite = Suite("auth-state")


@suite.setup("standard_user")
async def log_in_standard_user(run):
    login = LoginPage(PageDriver(await run.new_page()))
    await login.navigate()
    await login.login("standard_user", "secret_sauce")


@suite.test(state="standard_user")
async def inventory_opens_without_login(run):
    products = ProductsPage(PageDriver(await run.new_page(), base_url=SAUCE_DEMO_URL))
    await products.driver.goto("inventory.html")
    await products.wait_for_products_to_load()

    names = await products.get_product_names()
    assert names
    run.note(f"{len(names)} products listed without logging in")


@suite.test(state="standard_user")
async def session_cookie_is_present(run):
    cookies = await run.context.cookies()
    assert any(cookie["name"] == "session-username" for cookie in cookies)


@suite.test()
async def locked_out_user_sees_error(run):
    login = LoginPage(PageDriver(await run.new_page()))
    await login.navigate()
    await login.submit("locked_out_user", "secret_sauce")

    assert await login.is_error_displayed()
    assert "locked out" in (await login.get_error_message()).lower()
