#!/usr/bin/env python3
"""
Configuration management module.

This module provides functionality for loading and saving configuration
files, and for managing runner configuration.
"""

import json
import os
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from ..browser.pool import IDLE_POLICIES
from ..browser.targets import BUILTIN_TARGETS, EngineTarget
from ..core.matrix import EngineMatrix


@dataclass
class Configuration:
    """
    Configuration class for the test runner.

    This dataclass holds all configuration parameters for a run,
    allowing for easy serialization and deserialization.
    """
    # Suite to run, as "package.module:attribute"
    suite: str

    # Targets
    browsers: List[str] = field(default_factory=lambda: ["chromium"])
    targets: List[Dict[str, Any]] = field(default_factory=list)

    # Scheduling
    workers: int = 4
    timeout: float = 30.0  # seconds per run

    # Browser configuration
    headless: bool = True
    channel: Optional[str] = None
    launch_retries: int = 3
    idle_policy: str = "keep"
    max_idle_time: float = 300.0  # seconds

    # Session state
    state_dir: str = "auth"
    max_state_age: Optional[float] = None  # minutes
    reset_state: bool = False

    # Output
    report_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.suite:
            raise ValueError("A suite is required (e.g. suites.smoke:suite)")

        if not self.browsers:
            raise ValueError("At least one browser target is required")

        if self.idle_policy not in IDLE_POLICIES:
            raise ValueError(f"idle_policy must be one of {IDLE_POLICIES}, got {self.idle_policy!r}")

        if self.workers < 1:
            print(f"Warning: workers ({self.workers}) must be at least 1. Setting workers to 1.")
            self.workers = 1

        if self.timeout is not None and self.timeout <= 0:
            print(f"Warning: timeout ({self.timeout}) must be positive. Disabling the run timeout.")
            self.timeout = None

        if self.launch_retries < 1:
            print(f"Warning: launch_retries ({self.launch_retries}) must be at least 1. Setting it to 1.")
            self.launch_retries = 1

        # Normalize browser names
        self.browsers = [b.strip() for b in self.browsers if b and b.strip()]

    @property
    def max_state_age_ms(self):
        if self.max_state_age is None:
            return None
        return self.max_state_age * 60 * 1000

    def build_matrix(self):
        """
        Build the engine matrix with the built-in and configured targets.

        Returns:
            EngineMatrix: Matrix knowing every target name of this configuration
        """
        custom = [EngineTarget.from_dict(t) for t in self.targets]
        return EngineMatrix(list(BUILTIN_TARGETS) + custom)

    @classmethod
    def from_args(cls, args):
        """
        Create a Configuration instance from parsed command-line arguments.

        Args:
            args: Parsed command-line arguments

        Returns:
            Configuration: Configuration instance
        """
        return cls(
            suite=args.suite,
            browsers=args.browsers,
            workers=args.workers,
            timeout=args.timeout,
            headless=not args.headed,
            channel=args.channel,
            launch_retries=args.launch_retries,
            idle_policy=args.idle_policy,
            max_idle_time=args.max_idle_time,
            state_dir=args.state_dir,
            max_state_age=args.max_state_age,
            reset_state=args.reset_state,
            report_file=args.report,
        )

    def to_dict(self):
        """
        Convert configuration to a dictionary.

        Returns:
            dict: Dictionary representation of the configuration
        """
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict):
        """
        Create a Configuration instance from a dictionary.

        Args:
            config_dict: Dictionary containing configuration parameters

        Returns:
            Configuration: Configuration instance
        """
        config = dict(config_dict)
        if isinstance(config.get("browsers"), str):
            config["browsers"] = config["browsers"].split(",")
        return cls(**config)

    def print_summary(self):
        """Print a summary of the configuration."""
        print("\nTest run configuration:")
        print(f"- Suite: {self.suite}")
        print(f"- Targets: {', '.join(self.browsers)}")
        print(f"- Workers: {self.workers}")
        print(f"- Timeout per run: {'None' if self.timeout is None else f'{self.timeout:g}s'}")
        print(f"- Browser mode: {'Headless' if self.headless else 'Headed'}")
        if self.channel:
            print(f"- Chromium channel: {self.channel}")
        print(f"- Engine reuse: {self.idle_policy} (idle limit {self.max_idle_time:g}s)")
        print(f"- Session state directory: {self.state_dir}")
        if self.max_state_age is not None:
            print(f"  - Refresh after: {self.max_state_age:g} minutes")
        if self.reset_state:
            print("  - Stored session state is discarded before the run")
        if self.report_file:
            print(f"- Report file: {self.report_file}")
        print()


def load_config(config_file: str) -> Configuration:
    """
    Load configuration from a JSON file.

    Args:
        config_file: Path to the configuration file

    Returns:
        Configuration: Configuration instance

    Raises:
        FileNotFoundError: If the configuration file does not exist
        json.JSONDecodeError: If the configuration file is not valid JSON
        KeyError: If the configuration file is missing required fields
    """
    if not os.path.exists(config_file):
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    with open(config_file, "r") as f:
        config_dict = json.load(f)

    # Check for required fields
    required_fields = ["suite"]
    for required in required_fields:
        if required not in config_dict:
            raise KeyError(f"Missing required field in configuration: {required}")

    return Configuration.from_dict(config_dict)


def save_config(config: Configuration, config_file: str) -> None:
    """
    Save configuration to a JSON file.

    Args:
        config: Configuration instance
        config_file: Path to the configuration file
    """
    config_dict = config.to_dict()

    # Create directory if it doesn't exist
    directory = os.path.dirname(os.path.abspath(config_file))
    os.makedirs(directory, exist_ok=True)

    with open(config_file, "w") as f:
        json.dump(config_dict, f, indent=2)

    print(f"Configuration saved to {config_file}")


def load_config_from_args(args):
    """
    Load configuration from command-line arguments or a config file.

    Arguments given explicitly on the command line override the values
    loaded from the file.

    Args:
        args: Parsed command-line arguments

    Returns:
        Configuration: Configuration instance
    """
    if args.config:
        config = load_config(args.config)
        print(f"Loaded configuration from {args.config}")
        return _override_config_from_args(config, args)

    return Configuration.from_args(args)


# Argument names that map to a differently named configuration field
_ARG_FIELDS = {
    "report": "report_file",
}


def _override_config_from_args(config, args):
    """
    Override configuration with explicitly specified command-line arguments.

    Args:
        config: Existing configuration
        args: Parsed command-line arguments

    Returns:
        Configuration: Updated configuration
    """
    # Get default argument values
    parser = create_parser()
    defaults = vars(parser.parse_args([config.suite]))
    defaults["browsers"] = _split(defaults["browsers"])

    for key, value in vars(args).items():
        if key == "suite":
            if value:
                config.suite = value
            continue
        # Skip if the value is the same as the default
        if value == defaults.get(key):
            continue
        if key == "headed":
            config.headless = not value
        else:
            name = _ARG_FIELDS.get(key, key)
            if hasattr(config, name):
                setattr(config, name, value)

    return config


def _split(value):
    return [item.strip() for item in value.split(",") if item.strip()]


# Import here to avoid circular imports
from .argument_parser import create_parser  # noqa: E402
