"""
Legend composition.

Guides are built from the scales of channels that some layer binds to a field.
Literal bindings never produce a guide. Channels whose guides would read
identically (same title, breaks and labels) are merged into one block, and
per-guide ``override_aes`` may replace the swatch shown for each row without
changing what the geometry draws.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from loguru import logger

from .aesthetics import Channel, coerce_channel
from .errors import ConfigurationError
from .layers import Layer
from .primitives import GuideRow, LegendGuide
from .scales import ScaleRegistry


def _is_sequence(item: Any) -> bool:
    return isinstance(item, Sequence) and not isinstance(item, str)


@dataclass(frozen=True)
class GuideSpec:
    """
    Overrides for the guide of one channel.

    ``override_aes`` maps a channel name to either one value used for every
    row or a sequence holding one value per legend row.
    """

    override_aes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized: dict[str, Any] = {}
        for key, override in self.override_aes.items():
            channel = coerce_channel(key)
            normalized[channel.value] = tuple(override) if _is_sequence(override) else override
        object.__setattr__(self, "override_aes", MappingProxyType(normalized))

    def apply(self, swatch: dict[str, Any], row_index: int, row_count: int) -> None:
        for key, override in self.override_aes.items():
            if _is_sequence(override):
                if len(override) != row_count:
                    msg = (
                        f"override for {key!r} has {len(override)} values but the guide "
                        f"has {row_count} rows"
                    )
                    raise ConfigurationError(msg)
                swatch[key] = override[row_index]
            else:
                swatch[key] = override


def legend_channels(layers: Iterable[Layer]) -> dict[Channel, str]:
    """
    Field-bound scaled channels in the order they first appear.

    Layers are visited in z-order and each layer's bindings in declaration
    order. The value is the field bound at first appearance.
    """
    seen: dict[Channel, str] = {}
    for layer in layers:
        for channel, field_name in layer.field_bindings().items():
            if channel.is_scaled and channel not in seen:
                seen[channel] = field_name
    return seen


def compose_legend(
    layers: Sequence[Layer],
    scales: ScaleRegistry,
    guides: Mapping[Channel, GuideSpec] | None = None,
    *,
    merge: bool = True,
    visible: bool = True,
) -> tuple[LegendGuide, ...]:
    """
    Build the ordered, deduplicated legend blocks for a plot.

    Args:
        layers: The layer stack, in z-order
        scales: Registered scales
        guides: Per-channel guide overrides
        merge: Merge channels whose guides read identically
        visible: When false, no guides are produced

    Returns:
        Legend blocks in order of first appearance

    Raises:
        ConfigurationError: If a sequence override does not match the row count
    """
    if not visible:
        return ()
    guides = guides or {}

    blocks: list[tuple[str, list[Channel], tuple[Any, ...], tuple[str, ...]]] = []
    for channel, field_name in legend_channels(layers).items():
        scale = scales.get(channel)
        if scale is None or not scale.breaks:
            continue
        title = scale.name or field_name
        breaks = tuple(scale.breaks)
        labels = tuple(scale.labels or ())
        match = None
        if merge:
            match = next(
                (
                    block
                    for block in blocks
                    if block[0] == title and block[2] == breaks and block[3] == labels
                ),
                None,
            )
        if match is not None:
            match[1].append(channel)
        else:
            blocks.append((title, [channel], breaks, labels))

    composed = []
    for title, channels, breaks, labels in blocks:
        rows = []
        for index, (brk, label) in enumerate(zip(breaks, labels)):
            swatch = {channel.value: scales.resolve(channel, brk) for channel in channels}
            for channel in channels:
                if channel in guides:
                    guides[channel].apply(swatch, index, len(breaks))
            rows.append(GuideRow(key=brk, label=label, swatch=swatch))
        composed.append(LegendGuide(title=title, channels=tuple(channels), rows=tuple(rows)))

    logger.debug(f"Composed {len(composed)} legend guide(s)")
    return tuple(composed)
