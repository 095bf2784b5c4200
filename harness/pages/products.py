#!/usr/bin/env python3
"""
Page object for the Sauce Demo product catalog.

Product lookups by name use locator filtering, so a product is addressed by
its visible name rather than by its position in the list.
"""

import asyncio
import re

SORT_OPTIONS = ("az", "za", "lohi", "hilo")


class ProductsPage:
    """Inventory listing, cart badge and menu of the Sauce Demo shop."""

    products_container = ".inventory_container"
    product_item = ".inventory_item"
    product_name = ".inventory_item_name"
    product_price = ".inventory_item_price"
    add_to_cart_button = '[data-test*="add-to-cart"]'
    cart_icon = ".shopping_cart_link"
    cart_badge = ".shopping_cart_badge"
    sort_dropdown = '[data-test="product-sort-container"]'
    menu_button = ".bm-burger-button"
    logout_button = "#logout_sidebar_link"

    def __init__(self, driver):
        self.driver = driver

    @property
    def page(self):
        return self.driver.page

    async def wait_for_products_to_load(self):
        await self.driver.wait_for(self.products_container, timeout=10000)

    async def get_product_names(self):
        locators = await self.page.locator(self.product_name).all()
        return list(await asyncio.gather(*(locator.text_content() for locator in locators)))

    def _product(self, product_name):
        return self.page.locator(self.product_item).filter(has_text=product_name)

    async def get_product_price(self, product_name):
        return await self._product(product_name).locator(self.product_price).text_content()

    async def add_product_to_cart(self, product_name):
        await self._product(product_name).locator(self.add_to_cart_button).click()

    async def get_cart_item_count(self):
        """
        Get the number shown on the cart badge.

        Returns:
            int: Items in the cart (0 when the badge is not shown)
        """
        if not await self.driver.is_visible(self.cart_badge):
            return 0
        return int((await self.driver.get_text(self.cart_badge)).strip())

    async def go_to_cart(self):
        await self.driver.click(self.cart_icon)
        await self.page.wait_for_url(re.compile(r".*cart.*"))

    async def sort_by(self, option):
        """
        Sort the listing.

        Args:
            option: One of "az", "za", "lohi", "hilo"
        """
        if option not in SORT_OPTIONS:
            raise ValueError(f"Unknown sort option {option!r}, expected one of {SORT_OPTIONS}")
        await self.driver.select_option(self.sort_dropdown, option)

    async def logout(self):
        await self.driver.click(self.menu_button)
        await self.driver.wait_for(self.logout_button)
        await self.driver.click(self.logout_button)
