#!/usr/bin/env python3
"""
Page object for the Sauce Demo login screen.
"""

SAUCE_DEMO_URL = "https://www.saucedemo.com/"


class LoginPage:
    """Login form of the Sauce Demo shop."""

    username_input = '[data-test="username"]'
    password_input = '[data-test="password"]'
    login_button = '[data-test="login-button"]'
    error_message = '[data-test="error"]'
    # Shown on the products page once logged in
    products_title = ".title"

    def __init__(self, driver):
        self.driver = driver

    async def navigate(self):
        await self.driver.goto(SAUCE_DEMO_URL)

    async def login(self, username, password):
        """
        Log in and wait for the products page.

        Args:
            username: Account name
            password: Account password
        """
        await self.driver.fill(self.username_input, username)
        await self.driver.fill(self.password_input, password)
        await self.driver.click(self.login_button)
        await self.driver.wait_for(self.products_title, timeout=10000)

    async def login_and_save_state(self, username, password, store, state_id):
        """Log in, then persist the resulting session state under state_id."""
        await self.login(username, password)
        return await self.driver.save_storage_state(store, state_id)

    async def submit(self, username, password):
        """Fill and submit the form without waiting for success."""
        await self.driver.fill(self.username_input, username)
        await self.driver.fill(self.password_input, password)
        await self.driver.click(self.login_button)

    async def is_error_displayed(self):
        return await self.driver.is_visible(self.error_message)

    async def get_error_message(self):
        return await self.driver.get_text(self.error_message)
