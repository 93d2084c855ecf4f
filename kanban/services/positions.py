"""Position allocator for ordered siblings.

Columns within a board and cards within a column are ordered by a sparse
integer `position`. Appends take the next multiple of POSITION_GAP after
the current maximum. Index-based inserts and explicit reorders always
rebalance the whole sibling group to 1000, 2000, 3000, ... so positions
never collide and never grow without bound.

The helpers work on any objects with `id` and `position` attributes and
only mutate them; callers own the session and the transaction.
"""

import logging

from kanban.services.errors import InvalidInput

logger = logging.getLogger(__name__)

POSITION_GAP = 1000


def next_position(max_position):
    """Position for an item appended after `max_position` (None when empty)."""
    if max_position is None:
        return POSITION_GAP
    return max_position + POSITION_GAP


def canonical_position(index):
    return (index + 1) * POSITION_GAP


def rebalance(rows):
    """Rewrite positions to consecutive multiples of the gap, keeping order.

    Returns the rows so calls can be chained.
    """
    for index, row in enumerate(rows):
        position = canonical_position(index)
        if row.position != position:
            row.position = position
    return rows


def insert_at_index(siblings, item, index, code="INVALID_CARD_INDEX"):
    """Place `item` at `index` among `siblings` and rebalance the group.

    `siblings` is the current ordered group; `item` is dropped from it first
    so a move within the same group lands exactly at `index`. An index past
    the end appends.

    Returns the new position of `item`.
    """
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise InvalidInput(
            "Position index must be a non-negative integer", code=code
        )

    ordered = [row for row in siblings if row.id != item.id]
    index = min(index, len(ordered))
    ordered.insert(index, item)
    rebalance(ordered)
    return item.position


def order_by_ids(rows, ordered_ids, code, noun="item"):
    """Return `rows` arranged in the order of `ordered_ids`.

    `ordered_ids` must be a permutation of the rows' ids: same length, no
    repeats, nothing missing or foreign. Anything else raises InvalidInput
    with `code` before a single row is touched.
    """
    if not isinstance(ordered_ids, (list, tuple)) or not ordered_ids:
        raise InvalidInput(f"No {noun}s provided", code=code)

    by_id = {row.id: row for row in rows}
    if len(ordered_ids) != len(by_id):
        raise InvalidInput(f"{noun.capitalize()} order mismatch", code=code)

    if len(set(ordered_ids)) != len(ordered_ids) or set(ordered_ids) != set(by_id):
        raise InvalidInput(f"Invalid {noun} identifiers", code=code)

    return [by_id[row_id] for row_id in ordered_ids]


def reorder_by_ids(rows, ordered_ids, code, noun="item"):
    """Validate an explicit client ordering and rebalance to it."""
    ordered = order_by_ids(rows, ordered_ids, code, noun=noun)
    rebalance(ordered)
    logger.info(f"Rebalanced {len(ordered)} {noun}s to explicit order")
    return ordered
