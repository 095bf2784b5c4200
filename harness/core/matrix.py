#!/usr/bin/env python3
"""
Engine matrix module.

This module contains the EngineMatrix class that knows the named targets of
a run and expands a logical test into one concrete run per target.
"""

from ..browser.targets import BUILTIN_TARGETS


class EngineMatrix:
    """Registry of named engine targets and test fan-out."""

    def __init__(self, targets=BUILTIN_TARGETS):
        """
        Initialize the matrix.

        Args:
            targets: EngineTargets known to the run; later names replace earlier ones
        """
        self.targets = {}
        for target in targets:
            self.register(target)

    def register(self, target):
        self.targets[target.name] = target

    def names(self):
        return list(self.targets)

    def select(self, names):
        """
        Resolve target names.

        Args:
            names: Iterable of target names

        Returns:
            list: The matching EngineTargets in the order given

        Raises:
            ValueError: If a name is not registered
        """
        selected = []
        for name in names:
            if name not in self.targets:
                known = ", ".join(self.targets)
                raise ValueError(f"Unknown target '{name}' (known targets: {known})")
            selected.append(self.targets[name])
        return selected

    @staticmethod
    def expand(targets, test_id):
        """
        Expand one test into concrete runs.

        The result follows the declaration order of targets; repeated targets
        are kept only at their first position. An empty input gives an empty
        list.

        Args:
            targets: Iterable of EngineTargets
            test_id: Identifier of the logical test

        Returns:
            list: (test_id, EngineTarget) pairs
        """
        runs = []
        seen = set()
        for target in targets:
            if target in seen:
                continue
            seen.add(target)
            runs.append((test_id, target))
        return runs
