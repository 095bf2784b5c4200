#!/usr/bin/env python3
"""
Report output module.

Prints a suite report to the console and writes it as JSON.
"""

import json
import os


def print_report(report):
    """
    Print per-run results and the summary counts.

    Args:
        report: Finalized SuiteReport
    """
    print("\nResults:")
    for result in report.results:
        status = result.outcome.value.upper()
        print(f"- {status:<9} {result.test_id} [{result.target_name}] {result.duration_ms:.0f}ms")
        if result.error:
            print(f"    {result.error.kind}: {result.error.message}")

    summary = report.summary()
    print(f"\n{summary['total']} run(s): {summary['passed']} passed, {summary['failed']} failed, "
          f"{summary['timed_out']} timed out, {summary['skipped']} skipped")
    if report.cancelled:
        print("Suite was cancelled before all runs completed")


def save_report(report, report_file, include_tracebacks=True):
    """
    Write a report to a JSON file.

    Args:
        report: Finalized SuiteReport
        report_file: Path of the JSON file
        include_tracebacks: Whether to keep failure tracebacks in the output
    """
    data = report.to_dict()
    if not include_tracebacks:
        for result in data["results"]:
            if result["error"]:
                result["error"]["traceback"] = None

    directory = os.path.dirname(os.path.abspath(report_file))
    os.makedirs(directory, exist_ok=True)

    with open(report_file, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Report saved to {report_file}")
