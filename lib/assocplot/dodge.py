"""
Centered dodge layout for overlapping categorical series.

Members sharing one primary-axis position are spread symmetrically around it:

    offset = (rank - (n - 1) / 2) * width

The rank of a member comes from the secondary channel's scale (breaks first,
then the rest of the domain), never from input order, so the dodge order always
matches the legend order. Members tied on the secondary value keep their input
order.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from .aesthetics import Channel, coerce_channel
from .errors import ConfigurationError
from .scales import Scale


@dataclass(frozen=True)
class Dodge:
    """
    Dodge settings attached to a layer.

    Args:
        width: Distance between neighbouring members (``0`` means full overlap)
        by: Channel whose scale orders the members within a group
    """

    width: float = 0.5
    by: Channel = Channel.COLOR

    def __post_init__(self) -> None:
        if self.width < 0:
            msg = f"dodge width must be >= 0, got {self.width}"
            raise ConfigurationError(msg)
        object.__setattr__(self, "by", coerce_channel(self.by))


def dodge_offsets(
    members: Sequence[Any],
    order: Mapping[Any, int],
    width: float,
) -> list[float]:
    """
    Offsets for the members of one dodge group, parallel to ``members``.

    Args:
        members: Secondary values of the group members, in input order
        order: Precedence of each secondary value (lower draws first)
        width: Dodge width

    Returns:
        One offset per member; the offsets sum to zero

    Raises:
        ConfigurationError: If a member's value has no declared precedence
    """
    if width < 0:
        msg = f"dodge width must be >= 0, got {width}"
        raise ConfigurationError(msg)
    undeclared = [member for member in members if member not in order]
    if undeclared:
        msg = f"dodge group contains undeclared value(s) {undeclared!r}"
        raise ConfigurationError(msg)

    # sorted() is stable, so tied members keep their input order
    ranked = sorted(range(len(members)), key=lambda index: order[members[index]])
    center = (len(members) - 1) / 2
    offsets = [0.0] * len(members)
    for rank, index in enumerate(ranked):
        offsets[index] = (rank - center) * width
    return offsets


def layout_offsets(
    positions: Sequence[float | None],
    secondary: Sequence[Any],
    scale: Scale,
    width: float,
) -> list[float]:
    """
    Dodge offsets for every row of a layer.

    Rows are grouped by their resolved primary position; rows without a
    position get a zero offset.

    Raises:
        ConfigurationError: If a secondary value is outside the scale's domain
    """
    outside = sorted(
        {str(item) for item in secondary if item not in (scale.domain or ())},
    )
    if outside:
        msg = (
            f"dodge values {outside!r} are not in the domain of the "
            f"{scale.channel.value} scale"
        )
        raise ConfigurationError(msg)

    order = scale.order_of(secondary)
    groups: dict[float, list[int]] = {}
    for index, position in enumerate(positions):
        if position is not None:
            groups.setdefault(position, []).append(index)

    offsets = [0.0] * len(positions)
    for indices in groups.values():
        group_offsets = dodge_offsets([secondary[index] for index in indices], order, width)
        for index, offset in zip(indices, group_offsets):
            offsets[index] = offset
    logger.debug(f"Dodged {len(groups)} group(s) by the {scale.channel.value} scale")
    return offsets
