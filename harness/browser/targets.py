#!/usr/bin/env python3
"""
Engine target definitions.

An EngineTarget names one combination of browser engine and device profile
that a test runs against. This module also holds the built-in profiles that
match the desktop browsers and mobile devices of a typical cross-browser run.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class EngineKind(str, Enum):
    """Browser engines that can be launched."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


DEFAULT_VIEWPORT = (1280, 720)


@dataclass(frozen=True)
class EngineTarget:
    """An immutable (engine, viewport, user agent) combination."""

    name: str
    kind: EngineKind
    viewport: Tuple[int, int] = DEFAULT_VIEWPORT
    user_agent: Optional[str] = None
    is_mobile: bool = False
    device_scale_factor: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "kind", EngineKind(self.kind))
        object.__setattr__(self, "viewport", tuple(self.viewport))
        width, height = self.viewport
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid viewport for target {self.name}: {self.viewport}")

    def context_options(self) -> Dict[str, Any]:
        """
        Get the keyword arguments for creating a context for this target.

        Returns:
            dict: Options for Browser.new_context()
        """
        width, height = self.viewport
        options = {"viewport": {"width": width, "height": height}}
        if self.user_agent:
            options["user_agent"] = self.user_agent
        if self.device_scale_factor:
            options["device_scale_factor"] = self.device_scale_factor
        # Firefox rejects is_mobile, so it is only sent when set
        if self.is_mobile:
            options["is_mobile"] = True
            options["has_touch"] = True
        return options

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "viewport": list(self.viewport),
            "user_agent": self.user_agent,
            "is_mobile": self.is_mobile,
            "device_scale_factor": self.device_scale_factor,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineTarget":
        return cls(
            name=data["name"],
            kind=data["kind"],
            viewport=tuple(data.get("viewport", DEFAULT_VIEWPORT)),
            user_agent=data.get("user_agent"),
            is_mobile=bool(data.get("is_mobile", False)),
            device_scale_factor=data.get("device_scale_factor"),
        )


BUILTIN_TARGETS = (
    EngineTarget("chromium", EngineKind.CHROMIUM),
    EngineTarget("firefox", EngineKind.FIREFOX),
    EngineTarget("webkit", EngineKind.WEBKIT),
    EngineTarget(
        "mobile-chrome",
        EngineKind.CHROMIUM,
        viewport=(393, 727),
        user_agent=(
            "Mozilla/5.0 (Linux; Android 11; Pixel 5) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36"
        ),
        is_mobile=True,
        device_scale_factor=2.75,
    ),
    EngineTarget(
        "mobile-safari",
        EngineKind.WEBKIT,
        viewport=(390, 664),
        user_agent=(
            "Mozilla/5.0 (iPhone; CPU iPhone OS 14_4 like Mac OS X) AppleWebKit/605.1.15 "
            "(KHTML, like Gecko) Version/14.0.3 Mobile/15E148 Safari/604.1"
        ),
        is_mobile=True,
        device_scale_factor=3,
    ),
)
