#!/usr/bin/env python3
"""
Command-line argument parsing module.

This module provides functions for setting up and parsing command-line
arguments for the test runner.
"""

import argparse

from ..browser.pool import IDLE_POLICIES


def create_parser():
    """
    Create the command-line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description='Run browser end-to-end suites across engines with pooled contexts and reusable sessions'
    )

    parser.add_argument('suite', type=str, nargs='?', default=None,
                        help='Suite to run, as "package.module:attribute" (attribute defaults to "suite")')

    # Target and scheduling options
    run_group = parser.add_argument_group('Run Options')
    run_group.add_argument('--browsers', '-b', type=str, default='chromium',
                        help='Comma-separated target names (default: chromium)')
    run_group.add_argument('--workers', '-j', type=int, default=4,
                        help='Maximum number of runs executing at once (default: 4)')
    run_group.add_argument('--timeout', type=float, default=30.0,
                        help='Timeout per run in seconds, 0 to disable (default: 30)')
    run_group.add_argument('--list-targets', action='store_true',
                        help='List the known targets and exit')

    # Browser options
    browser_group = parser.add_argument_group('Browser Options')
    browser_group.add_argument('--headed', action='store_true',
                        help='Run browsers with a visible window (default: headless)')
    browser_group.add_argument('--channel', type=str, default=None,
                        help='Chromium channel to launch, e.g. "chrome" or "msedge"')
    browser_group.add_argument('--launch-retries', type=int, default=3,
                        help='Attempts to launch an engine before giving up (default: 3)')
    browser_group.add_argument('--idle-policy', type=str, choices=IDLE_POLICIES, default='keep',
                        help='Keep released engines warm or close them (default: keep)')
    browser_group.add_argument('--max-idle-time', type=float, default=300.0,
                        help='Seconds an idle engine is kept before shutdown (default: 300)')

    # Session state options
    state_group = parser.add_argument_group('Session State Options')
    state_group.add_argument('--state-dir', type=str, default='auth',
                        help='Directory holding saved session state (default: auth)')
    state_group.add_argument('--max-state-age', type=float, default=None,
                        help='Capture session state again when older than this many minutes')
    state_group.add_argument('--reset-state', action='store_true',
                        help='Discard saved session state before running')

    # Output options
    output_group = parser.add_argument_group('Output Options')
    output_group.add_argument('--report', type=str, default=None,
                        help='Write a JSON report to this file')

    # Configuration file options
    config_group = parser.add_argument_group('Configuration Options')
    config_group.add_argument('--config', type=str, default=None,
                        help='Path to configuration file (JSON)')
    config_group.add_argument('--save-config', type=str, default=None,
                        help='Save current settings to configuration file')

    return parser


def parse_args(args=None):
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments to parse (uses sys.argv if None)

    Returns:
        argparse.Namespace: Parsed arguments

    Raises:
        SystemExit: If required arguments are missing or invalid
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.suite and not parsed_args.config and not parsed_args.list_targets:
        parser.error("No suite given. Pass a suite such as suites.smoke:suite or use --config.")

    # Process browsers into a list
    parsed_args.browsers = [b.strip() for b in parsed_args.browsers.split(',') if b.strip()]
    if not parsed_args.browsers:
        parser.error("No browsers given. Use --browsers chromium,firefox,webkit")

    if parsed_args.timeout is not None and parsed_args.timeout <= 0:
        parsed_args.timeout = None

    if parsed_args.workers < 1:
        print(f"Warning: workers ({parsed_args.workers}) must be at least 1. Setting workers to 1.")
        parsed_args.workers = 1

    return parsed_args
