#!/usr/bin/env python3
"""
Session state data model.

This module contains the SessionState dataclass that holds the cookies and
per-origin local storage of an authenticated browser context, together with
conversions to and from the record layout used on disk and the storage state
format understood by Playwright.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

FORMAT_VERSION = 1

SAME_SITE_VALUES = ("Strict", "Lax", "None")


@dataclass(frozen=True)
class Cookie:
    """A single browser cookie."""

    name: str
    value: str
    domain: str
    path: str = "/"
    expires: float = -1
    secure: bool = False
    http_only: bool = False
    same_site: str = "Lax"

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.name, self.domain, self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "path": self.path,
            "expires": self.expires,
            "secure": self.secure,
            "httpOnly": self.http_only,
            "sameSite": self.same_site,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cookie":
        """
        Build a cookie from its dictionary form.

        Args:
            data: Cookie dictionary as produced by Playwright or to_dict()

        Returns:
            Cookie: The parsed cookie

        Raises:
            ValueError: If a required field is missing or has the wrong type
        """
        for required in ("name", "value", "domain"):
            if not isinstance(data.get(required), str):
                raise ValueError(f"Cookie is missing '{required}'")

        same_site = data.get("sameSite", "Lax")
        if same_site not in SAME_SITE_VALUES:
            raise ValueError(f"Invalid sameSite value: {same_site!r}")

        return cls(
            name=data["name"],
            value=data["value"],
            domain=data["domain"],
            path=data.get("path", "/"),
            expires=float(data.get("expires", -1)),
            secure=bool(data.get("secure", False)),
            http_only=bool(data.get("httpOnly", False)),
            same_site=same_site,
        )


@dataclass(frozen=True)
class OriginStorage:
    """
    Local storage entries of a single origin.

    Entries may be given as a mapping; they are kept as (name, value) pairs
    in insertion order.
    """

    origin: str
    local_storage: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        entries = self.local_storage
        if isinstance(entries, dict):
            entries = entries.items()
        object.__setattr__(self, "local_storage", tuple((name, value) for name, value in entries))

    def get(self, name: str) -> Optional[str]:
        for key, value in self.local_storage:
            if key == name:
                return value
        return None


@dataclass(frozen=True)
class SessionState:
    """
    Cookies and per-origin storage captured from a browser context.

    Instances are never modified; capturing again produces a new state that
    replaces the old one in the store.
    """

    cookies: Tuple[Cookie, ...] = ()
    origins: Tuple[OriginStorage, ...] = ()
    captured_at: float = field(default_factory=time.time)

    def __post_init__(self):
        object.__setattr__(self, "cookies", tuple(self.cookies))
        object.__setattr__(self, "origins", tuple(self.origins))

        seen = set()
        for cookie in self.cookies:
            if cookie.key in seen:
                raise ValueError(f"Duplicate cookie {cookie.key}")
            seen.add(cookie.key)

    @property
    def is_empty(self) -> bool:
        return not self.cookies and not self.origins

    def cookie(self, name: str, domain: Optional[str] = None) -> Optional[Cookie]:
        """Return the first cookie called name, optionally on domain."""
        for cookie in self.cookies:
            if cookie.name == name and (domain is None or cookie.domain == domain):
                return cookie
        return None

    def to_record(self) -> Dict[str, Any]:
        """Convert the state to the versioned record written to disk."""
        return {
            "format_version": FORMAT_VERSION,
            "captured_at": self.captured_at,
            "cookies": [cookie.to_dict() for cookie in self.cookies],
            "origins": [
                {"origin": entry.origin, "localStorage": dict(entry.local_storage)}
                for entry in self.origins
            ],
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "SessionState":
        """
        Parse a versioned record written by to_record().

        Raises:
            ValueError: If the record is malformed or has an unknown version
        """
        if not isinstance(record, dict):
            raise ValueError("Session record must be an object")

        version = record.get("format_version")
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported format version: {version!r}")

        for required in ("captured_at", "cookies", "origins"):
            if required not in record:
                raise ValueError(f"Session record is missing '{required}'")

        origins = []
        for entry in record["origins"]:
            storage = entry.get("localStorage")
            if not isinstance(entry.get("origin"), str) or not isinstance(storage, dict):
                raise ValueError("Malformed origin storage entry")
            origins.append(OriginStorage(entry["origin"], dict(storage)))

        return cls(
            cookies=[Cookie.from_dict(c) for c in record["cookies"]],
            origins=origins,
            captured_at=float(record["captured_at"]),
        )

    def to_storage_state(self) -> Dict[str, List[Dict[str, Any]]]:
        """Convert to the storage_state dictionary accepted by Playwright contexts."""
        return {
            "cookies": [cookie.to_dict() for cookie in self.cookies],
            "origins": [
                {
                    "origin": entry.origin,
                    "localStorage": [
                        {"name": name, "value": value}
                        for name, value in entry.local_storage
                    ],
                }
                for entry in self.origins
            ],
        }

    @classmethod
    def from_storage_state(cls, data: Dict[str, Any], captured_at: Optional[float] = None) -> "SessionState":
        """
        Build a state from a Playwright storage_state() result.

        Cookies reported more than once for the same (name, domain, path)
        collapse to the last occurrence.
        """
        cookies = {}
        for raw in data.get("cookies", []):
            cookie = Cookie.from_dict(raw)
            cookies.pop(cookie.key, None)
            cookies[cookie.key] = cookie

        origins = [
            OriginStorage(
                entry["origin"],
                {item["name"]: item["value"] for item in entry.get("localStorage", [])},
            )
            for entry in data.get("origins", [])
        ]

        return cls(
            cookies=list(cookies.values()),
            origins=origins,
            captured_at=time.time() if captured_at is None else captured_at,
        )
