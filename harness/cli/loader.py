#!/usr/bin/env python3
"""
Suite loading module.

Resolves a "package.module:attribute" path to a Suite object.
"""

import importlib
import os
import sys

from ..core.suite import Suite


def load_suite(path):
    """
    Import a suite from a dotted path.

    Args:
        path: "package.module:attribute"; the attribute defaults to "suite" and
              may also be a callable returning a Suite

    Returns:
        Suite: The loaded suite

    Raises:
        ImportError: If the module cannot be imported
        AttributeError: If the module has no such attribute
        TypeError: If the attribute does not resolve to a Suite
    """
    # Suites live in the project being tested, not in an installed package
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    module_name, _, attribute = path.partition(":")
    module = importlib.import_module(module_name)
    obj = getattr(module, attribute or "suite")

    if not isinstance(obj, Suite) and callable(obj):
        obj = obj()
    if not isinstance(obj, Suite):
        raise TypeError(f"{path} is a {type(obj).__name__}, not a Suite")
    return obj
