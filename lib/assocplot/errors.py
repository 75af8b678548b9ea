"""
Exception types raised by the assocplot engine.

Errors are confined to configuration validation and channel resolution; every
other stage is a total function. Each exception carries enough context
(channel, value, field) to fix the offending configuration.
"""

from __future__ import annotations

from typing import Any


class AssocPlotError(Exception):
    """Base class for all assocplot errors."""


class ConfigurationError(AssocPlotError):
    """
    A plot was declared in a way that can never resolve.

    Raised eagerly, at construction or finalize time: a required input field is
    absent, scale breaks are not a subset of the domain, a model is missing from
    the declared model order, and similar.
    """


class UnmappedDomainValue(AssocPlotError):
    """A record's value for a scaled channel has no entry in that scale's range."""

    def __init__(self, channel: Any, value: Any) -> None:
        self.channel = channel
        self.value = value
        channel_name = getattr(channel, "value", channel)
        super().__init__(
            f"value {value!r} is not mapped by the {channel_name!s} scale",
        )


class EmptyDatasetError(AssocPlotError):
    """The base table has no records (only raised when rendering strictly)."""
