# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for requester.

The library only emits records through module loggers under the ``requester``
namespace; nothing is printed unless the embedding application configures
logging, for example through :func:`setup_logging`.
"""

from __future__ import annotations

import logging
import os

LOGGER_NAME = "requester"
DEFAULT_LOG_LEVEL = os.getenv("REQUESTER_LOG_LEVEL", "WARNING").upper()
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def resolve_level(level: str | int | None) -> int:
    """Map a level name (or number) to a logging level, defaulting to WARNING."""
    if isinstance(level, int):
        return level
    name = (level or DEFAULT_LOG_LEVEL).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(level: str | int | None = None, *, fmt: str = DEFAULT_LOG_FORMAT) -> None:
    """Configure root logging and the requester logger level."""
    effective = resolve_level(level)
    logging.basicConfig(level=effective, format=fmt)
    logging.getLogger(LOGGER_NAME).setLevel(effective)


__all__ = ["LOGGER_NAME", "resolve_level", "setup_logging"]
