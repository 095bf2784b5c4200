"""
Command-line interface module for the test runner.
"""

from .argument_parser import create_parser, parse_args
from .config import Configuration, load_config, load_config_from_args, save_config
from .loader import load_suite
from .report import print_report, save_report

__all__ = [
    "Configuration",
    "create_parser",
    "load_config",
    "load_config_from_args",
    "load_suite",
    "parse_args",
    "print_report",
    "save_config",
    "save_report",
]
