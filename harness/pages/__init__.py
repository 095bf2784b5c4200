"""
Page objects module.

This package contains the PageDriver capability and the page objects
composed from it for the demo sites used by the bundled suites.
"""

from .driver import PageDriver
from .internet import InternetPage
from .login import LoginPage
from .products import ProductsPage

__all__ = ["PageDriver", "LoginPage", "ProductsPage", "InternetPage"]
