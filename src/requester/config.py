# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Environment-backed defaults for Client and the httpx transport."""

import os
from collections.abc import Callable
from dataclasses import dataclass, fields
from typing import TypeVar

from .version import __version__

T = TypeVar("T")

ENV_PREFIX = "REQUESTER_"
DEFAULT_USER_AGENT = f"requester/{__version__}"
DEFAULT_MAX_BODY_BYTES = 16 * 1024 * 1024

BACKOFF_POLICY_NAMES = ("linear", "exponential")
TRUTHY = frozenset({"1", "true", "yes", "on"})


def _parsed_env(name: str, default: T, parse: Callable[[str], T]) -> T:
    """Parse ``$name`` with ``parse``; unset or unparsable values yield ``default``."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        return default


def _flag(raw: str) -> bool:
    return raw.lower() in TRUTHY


def _policy_name(raw: str) -> str:
    name = raw.lower()
    if name not in BACKOFF_POLICY_NAMES:
        raise ValueError(f"unknown backoff policy {raw!r}")
    return name


@dataclass
class HttpSettings:
    """Client defaults applied to every request built by a Client."""

    base_url: str = ""
    timeout: float = 30.0
    retries: int = 0
    backoff_delay: float = 1.0
    backoff_policy: str = "linear"
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES

    def __post_init__(self):
        if self.max_body_bytes <= 0:
            self.max_body_bytes = DEFAULT_MAX_BODY_BYTES
        if self.backoff_delay < 0:
            self.backoff_delay = 1.0

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Read ``REQUESTER_*`` variables at call time, keeping defaults for bad values."""
        defaults = {f.name: f.default for f in fields(cls)}
        return cls(
            base_url=os.getenv(f"{ENV_PREFIX}BASE_URL", defaults["base_url"]),
            timeout=_parsed_env(f"{ENV_PREFIX}HTTP_TIMEOUT", defaults["timeout"], float),
            retries=_parsed_env(f"{ENV_PREFIX}HTTP_RETRIES", defaults["retries"], int),
            backoff_delay=_parsed_env(f"{ENV_PREFIX}HTTP_BACKOFF_DELAY", defaults["backoff_delay"], float),
            backoff_policy=_parsed_env(f"{ENV_PREFIX}HTTP_BACKOFF_POLICY", defaults["backoff_policy"], _policy_name),
            user_agent=os.getenv(f"{ENV_PREFIX}USER_AGENT", defaults["user_agent"]),
            allow_redirects=_parsed_env(f"{ENV_PREFIX}HTTP_REDIRECTS", defaults["allow_redirects"], _flag),
            verify_ssl=_parsed_env(f"{ENV_PREFIX}HTTP_VERIFY_SSL", defaults["verify_ssl"], _flag),
            max_body_bytes=_parsed_env(f"{ENV_PREFIX}HTTP_MAX_BODY_BYTES", defaults["max_body_bytes"], int),
        )


def load_http_settings() -> HttpSettings:
    return HttpSettings.from_env()


__all__ = ["BACKOFF_POLICY_NAMES", "DEFAULT_USER_AGENT", "HttpSettings", "load_http_settings"]
