"""Event recorders for tracking occurrences in the sync layer.

The repository only depends on the ``Analytics`` protocol; the concrete
sinks here cover local development (console), production logging and
tests or silent runs (null).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Analytics(Protocol):
    """Fire-and-forget recorder of named events."""

    def track_event(self, name: str, properties: Mapping[str, Any]) -> None: ...


def format_event(name: str, properties: Mapping[str, Any]) -> str:
    """Render an event as ``Event: name | Properties: k=v, ...``."""
    if not properties:
        return f"Event: {name}"
    props = ", ".join(f"{k}={v}" for k, v in properties.items())
    return f"Event: {name} | Properties: {props}"


class ConsoleAnalytics:
    """Print each event to stdout."""

    def track_event(self, name: str, properties: Mapping[str, Any]) -> None:
        print(f"[Analytics] {format_event(name, properties)}")


class LoggingAnalytics:
    """Write each event to a logger at INFO."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def track_event(self, name: str, properties: Mapping[str, Any]) -> None:
        self._log.info("[Analytics] %s", format_event(name, properties))


class NullAnalytics:
    def track_event(self, name: str, properties: Mapping[str, Any]) -> None:
        pass


def create_analytics(kind: str) -> Analytics:
    """Build the event recorder named by *kind* (console, log or none).

    Raises:
        ValueError: If *kind* is unknown.
    """
    if kind == "console":
        return ConsoleAnalytics()
    if kind == "log":
        return LoggingAnalytics()
    if kind == "none":
        return NullAnalytics()
    raise ValueError(
        f"Unknown analytics sink '{kind}': must be one of console, log, none"
    )
