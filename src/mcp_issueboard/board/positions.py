"""Position allocation for ordered board columns and sprint backlogs.

Positions are real numbers. Appending places an item one step past the
largest position in the destination list, so no existing row is ever
renumbered and there is always room left to drop an item between two
neighbours later.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from ..exceptions import PositionOrderError
from ..models.constants import UNPLACED_POSITION

logger = logging.getLogger("mcp-issueboard.board.positions")

PositionField = Literal["sprint_position", "board_position"]

POSITION_STEP = 1.0
# Positions start above this floor, so sentinel (-1) values never count.
POSITION_FLOOR = 0.0
BASELINE_POSITION = POSITION_FLOOR + POSITION_STEP

_CAMEL_FIELDS = {
    "sprint_position": "sprintPosition",
    "board_position": "boardPosition",
}


def _read_position(item: Any, field: PositionField) -> float | None:
    if isinstance(item, (int, float)) and not isinstance(item, bool):
        value: Any = item
    elif isinstance(item, Mapping):
        value = item.get(field, item.get(_CAMEL_FIELDS[field], item.get("position")))
    else:
        value = getattr(item, field, getattr(item, "position", None))
    try:
        position = float(value)
    except (TypeError, ValueError):
        return None
    return position if math.isfinite(position) else None


def compute_insert_position(
    items: Iterable[Any], field: PositionField = "sprint_position"
) -> float:
    """
    Compute the position that lands a new item at the bottom of a list.

    The list is treated as an unordered set: the result is one step past
    the largest position present, or BASELINE_POSITION when the list holds
    no real position (empty, or only sentinel values).

    Args:
        items: Current members of the destination list. Issues, mappings
            carrying the position field, or bare numbers.
        field: Which ordering to read from each item

    Returns:
        A position strictly greater than every position in the list
    """
    highest = POSITION_FLOOR
    for item in items:
        position = _read_position(item, field)
        if position is not None and position > highest:
            highest = position
    return highest + POSITION_STEP


def compute_between_position(
    before: float | None = None, after: float | None = None
) -> float:
    """
    Compute a position between two neighbours of an ordered list.

    Args:
        before: Position of the item that should precede the moved item
        after: Position of the item that should follow the moved item

    Returns:
        The midpoint of the neighbours; one step past ``before`` when there
        is no following item, the midpoint between the floor and ``after``
        when there is no preceding item, and the baseline for an empty list.

    Raises:
        PositionOrderError: If ``before`` does not sort strictly before
            ``after``, or the gap between them is too small to split.
    """
    if before is not None and before <= UNPLACED_POSITION:
        before = None
    if after is not None and after <= UNPLACED_POSITION:
        after = None

    if before is None and after is None:
        return BASELINE_POSITION
    if after is None:
        return before + POSITION_STEP
    if before is None:
        # Moving to the top splits the gap above the first item.
        before = POSITION_FLOOR

    if before >= after:
        raise PositionOrderError(
            f"Neighbour positions are out of order: {before} >= {after}"
        )
    middle = before + (after - before) / 2
    if not before < middle < after:
        logger.warning(
            f"No room left between positions {before} and {after}; "
            "the list needs renumbering"
        )
        raise PositionOrderError(f"No room left between {before} and {after}")
    return middle
