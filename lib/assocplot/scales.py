"""
Discrete scales and the per-channel scale registry.

A Scale is an explicit enumeration: domain, breaks, labels and range are all
declared (or derived explicitly by the caller). Values that the range does not
map are a hard error at resolution time; nothing is coerced or auto-levelled.

The breaks of a scale are the single source of truth for both legend-row order
and dodge precedence.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from .aesthetics import Channel, coerce_channel
from .errors import ConfigurationError, UnmappedDomainValue
from .table import Table

_CHROM_PREFIX = re.compile(r"^chr", re.IGNORECASE)


def natural_sort_key(item: Any) -> tuple[int, float, str]:
    """
    Sort key putting numeric-looking values first (numerically), then text.

    ``"chr2"`` sorts before ``"10"``, which sorts before ``"X"``. Only finite
    numbers count as numeric; ``"nan"`` and ``"inf"`` sort as text.
    """
    if isinstance(item, (bool, int, float)) and math.isfinite(item):
        return (0, float(item), "")
    text = str(item)
    try:
        number = float(_CHROM_PREFIX.sub("", text))
    except ValueError:
        return (1, 0.0, text)
    if not math.isfinite(number):
        return (1, 0.0, text)
    return (0, number, "")


def discrete_domain(table: Table, field_name: str) -> tuple[Any, ...]:
    """Distinct non-null values of a field, in natural sort order."""
    distinct = {item for item in table.column(field_name) if item is not None}
    return tuple(sorted(distinct, key=natural_sort_key))


@dataclass(frozen=True)
class LegendRow:
    """One row of a guide: the break, its label, and the visual value it maps to."""

    key: Any
    label: str
    visual: Any


@dataclass(frozen=True)
class Scale:
    """
    Discrete domain -> visual mapping for one channel.

    Args:
        channel: Channel the scale applies to
        values: The range, as a mapping from domain value to visual value
        domain: Ordered domain; defaults to the keys of ``values``
        breaks: Ordered subset of the domain shown in the legend; defaults to
                the whole domain
        labels: Legend labels parallel to ``breaks``; default ``str(break)``
        name: Guide title

    Raises:
        ConfigurationError: If breaks are not a subset of the domain, or labels
                            and breaks differ in length
    """

    channel: Channel
    values: Mapping[Any, Any]
    domain: tuple[Any, ...] | None = None
    breaks: tuple[Any, ...] | None = None
    labels: tuple[str, ...] | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "channel", coerce_channel(self.channel))
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

        domain = tuple(self.values) if self.domain is None else tuple(self.domain)
        object.__setattr__(self, "domain", domain)

        breaks = domain if self.breaks is None else tuple(self.breaks)
        outside = [brk for brk in breaks if brk not in domain]
        if outside:
            msg = (
                f"{self.channel.value} scale breaks {outside!r} are not in its domain "
                f"{list(domain)!r}"
            )
            raise ConfigurationError(msg)
        object.__setattr__(self, "breaks", breaks)

        if self.labels is None:
            labels = tuple(str(brk) for brk in breaks)
        else:
            labels = tuple(str(label) for label in self.labels)
            if len(labels) != len(breaks):
                msg = (
                    f"{self.channel.value} scale has {len(labels)} labels for "
                    f"{len(breaks)} breaks"
                )
                raise ConfigurationError(msg)
        object.__setattr__(self, "labels", labels)

    @classmethod
    def manual(
        cls,
        channel: Channel | str,
        values: Mapping[Any, Any],
        *,
        domain: Sequence[Any] | None = None,
        breaks: Sequence[Any] | None = None,
        labels: Sequence[str] | None = None,
        name: str | None = None,
    ) -> Scale:
        return cls(
            channel=coerce_channel(channel),
            values=values,
            domain=None if domain is None else tuple(domain),
            breaks=None if breaks is None else tuple(breaks),
            labels=None if labels is None else tuple(labels),
            name=name,
        )

    @classmethod
    def positional(
        cls,
        channel: Channel | str,
        domain: Sequence[Any],
        *,
        name: str | None = None,
    ) -> Scale:
        """Discrete position scale: ``domain[i]`` is drawn at ``i + 1``."""
        return cls.manual(
            channel,
            {item: float(index + 1) for index, item in enumerate(domain)},
            name=name,
        )

    @classmethod
    def alternating(
        cls,
        channel: Channel | str,
        domain: Sequence[Any],
        cycle: Sequence[Any],
        *,
        name: str | None = None,
    ) -> Scale:
        """Assign ``cycle`` values to the domain in turn (e.g. black/blue chromosomes)."""
        if not cycle:
            msg = "alternating scale needs at least one value to cycle through"
            raise ConfigurationError(msg)
        return cls.manual(
            channel,
            {item: cycle[index % len(cycle)] for index, item in enumerate(domain)},
            name=name,
        )

    def resolve(self, item: Any) -> Any:
        try:
            return self.values[item]
        except (KeyError, TypeError):
            raise UnmappedDomainValue(self.channel, item) from None

    def legend_rows(self) -> tuple[LegendRow, ...]:
        return tuple(
            LegendRow(key=brk, label=label, visual=self.resolve(brk))
            for brk, label in zip(self.breaks or (), self.labels or ())
        )

    def order_of(self, items: Iterable[Any]) -> dict[Any, int]:
        """
        Precedence of values for dodging: breaks first, then the rest of the domain.

        Values outside the domain are not included.
        """
        ranked: dict[Any, int] = {}
        for item in (*(self.breaks or ()), *(self.domain or ())):
            ranked.setdefault(item, len(ranked))
        wanted = set(items)
        return {item: rank for item, rank in ranked.items() if item in wanted}

    def with_guide(
        self,
        *,
        breaks: Sequence[Any] | None = None,
        labels: Sequence[str] | None = None,
        name: str | None = None,
    ) -> Scale:
        """
        Return a copy with different legend breaks, labels or title.

        New breaks without new labels fall back to the default string labels.
        """
        if labels is not None:
            new_labels: tuple[str, ...] | None = tuple(labels)
        elif breaks is not None:
            new_labels = None
        else:
            new_labels = self.labels
        return replace(
            self,
            breaks=self.breaks if breaks is None else tuple(breaks),
            labels=new_labels,
            name=self.name if name is None else name,
        )


@dataclass(frozen=True)
class ScaleRegistry:
    """Immutable channel -> Scale mapping."""

    scales: Mapping[Channel, Scale] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "scales", MappingProxyType(dict(self.scales)))

    def __contains__(self, channel: object) -> bool:
        return channel in self.scales

    def __len__(self) -> int:
        return len(self.scales)

    def with_scale(self, scale: Scale) -> ScaleRegistry:
        """Return a new registry where ``scale`` replaces any scale for its channel."""
        updated = dict(self.scales)
        updated[scale.channel] = scale
        return ScaleRegistry(updated)

    def get(self, channel: Channel | str) -> Scale | None:
        return self.scales.get(coerce_channel(channel))

    def require(self, channel: Channel | str) -> Scale:
        scale = self.get(channel)
        if scale is None:
            resolved = coerce_channel(channel)
            msg = f"no scale registered for the {resolved.value} channel"
            raise ConfigurationError(msg)
        return scale

    def resolve(self, channel: Channel | str, item: Any) -> Any:
        return self.require(channel).resolve(item)

    def legend_rows(self, channel: Channel | str) -> tuple[LegendRow, ...]:
        scale = self.get(channel)
        return () if scale is None else scale.legend_rows()
