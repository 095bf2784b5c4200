#!/usr/bin/env python3
"""
Main entry point for the test runner.

This module provides the main entry point for running a suite from the
command line.
"""

import asyncio
import sys
import traceback

from .browser.engine import PlaywrightLauncher
from .browser.pool import BrowserContextPool
from .cli.argument_parser import parse_args
from .cli.config import Configuration, load_config_from_args, save_config
from .cli.loader import load_suite
from .cli.report import print_report, save_report
from .core.runner import TestRunner
from .session.store import SessionStateStore


def list_targets(config):
    """Print the targets known to a configuration."""
    matrix = config.build_matrix()
    print("Known targets:")
    for name in matrix.names():
        target = matrix.targets[name]
        width, height = target.viewport
        mobile = " mobile" if target.is_mobile else ""
        print(f"- {name}: {target.kind.value} {width}x{height}{mobile}")


async def run_suite(config):
    """
    Run the configured suite.

    Args:
        config: Configuration instance

    Returns:
        SuiteReport: The finalized report (marked cancelled if the run was
        interrupted)
    """
    suite = load_suite(config.suite)
    matrix = config.build_matrix()
    targets = matrix.select(config.browsers)

    store = SessionStateStore(config.state_dir)
    if config.reset_state:
        for state_id in store.list_ids():
            store.delete(state_id)
            print(f"Discarded session state '{state_id}'")

    launcher = PlaywrightLauncher(
        headless=config.headless,
        launch_retries=config.launch_retries,
        channel=config.channel,
    )

    async with BrowserContextPool(
        launcher,
        idle_policy=config.idle_policy,
        max_idle_time=config.max_idle_time,
    ) as pool:
        runner = TestRunner(
            pool,
            store=store,
            matrix=matrix,
            default_targets=targets,
            concurrency=config.workers,
            timeout=config.timeout,
            max_state_age_ms=config.max_state_age_ms,
        )
        try:
            report = await runner.run(suite)
        except asyncio.CancelledError:
            if runner.report is None or not runner.report.is_final:
                raise
            # Keep the results of the runs that completed before the interrupt
            asyncio.current_task().uncancel()
            report = runner.report
            print("Suite cancelled, reporting the runs completed so far")
        print(f"Engine pool: {pool.get_statistics()}")

    return report


def main(argv=None):
    """Main entry point for the test runner."""
    try:
        args = parse_args(argv)

        if args.list_targets and not (args.suite or args.config):
            list_targets(Configuration(suite="-"))
            return 0

        config = load_config_from_args(args)

        if args.save_config:
            save_config(config, args.save_config)

        if args.list_targets:
            list_targets(config)
            return 0

        config.print_summary()

        report = asyncio.run(run_suite(config))

        print_report(report)
        if config.report_file:
            save_report(report, config.report_file)

        if report.cancelled:
            print("\nTest run interrupted by user.")
            return 130
        return 0 if report.ok else 1

    except KeyboardInterrupt:
        print("\nTest run interrupted by user.")
        return 130

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
