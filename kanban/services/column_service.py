"""Column service: list, rename, collapse and reorder the lanes of a board.

Columns are only ever created with their board (board creation or
duplication) and only removed with it. Standalone create/delete requests
are answered with a fixed 405.

Functions flush but do NOT commit; the caller commits.
"""

import logging

from sqlalchemy import func

from kanban.extensions import db
from kanban.models.kanban import BoardColumn, Card
from kanban.services import positions
from kanban.services.board_access import require_board_role
from kanban.services.errors import InvalidInput, NotFound, OperationDisabled
from kanban.services.permissions import can_edit_columns, can_view_board

logger = logging.getLogger(__name__)

MAX_COLUMN_NAME_LENGTH = 100


def column_summary(column, card_count=0):
    """Serialize a BoardColumn to a JSON-safe dict with its live card count."""
    return {
        "id": column.id,
        "board_id": column.board_id,
        "name": column.name,
        "position": column.position,
        "is_collapsed": bool(column.is_collapsed),
        "created_at": column.created_at.isoformat() if column.created_at else None,
        "updated_at": column.updated_at.isoformat() if column.updated_at else None,
        "card_count": card_count,
    }


def get_column(column_id):
    """Load a column or raise COLUMN_NOT_FOUND."""
    column = db.session.get(BoardColumn, column_id)
    if column is None:
        raise NotFound("Column not found", code="COLUMN_NOT_FOUND")
    return column


def count_cards(column_id):
    return (
        db.session.query(func.count(Card.id))
        .filter(Card.column_id == column_id)
        .scalar()
        or 0
    )


def _ordered_columns(board_id):
    return (
        BoardColumn.query
        .filter_by(board_id=board_id)
        .order_by(BoardColumn.position.asc())
        .all()
    )


def _columns_with_counts(board_id):
    card_count = (
        db.session.query(func.count(Card.id))
        .filter(Card.column_id == BoardColumn.id)
        .correlate(BoardColumn)
        .scalar_subquery()
    )
    rows = (
        db.session.query(BoardColumn, card_count)
        .filter(BoardColumn.board_id == board_id)
        .order_by(BoardColumn.position.asc())
        .all()
    )
    return [column_summary(column, int(count or 0)) for column, count in rows]


def list_board_columns(board_id, user_id):
    """List a board's columns in position order, each with its card count.

    Raises:
        NotFound: BOARD_NOT_FOUND for unknown boards and non-members.
        Forbidden: BOARD_FORBIDDEN without view access.
    """
    require_board_role(board_id, user_id, can_view_board, "Forbidden", "BOARD_FORBIDDEN")
    return _columns_with_counts(board_id)


def rename_column(column_id, user_id, name):
    """Rename a column. The name is trimmed and must be 1-100 characters.

    Raises:
        NotFound: COLUMN_NOT_FOUND, or BOARD_NOT_FOUND for non-members.
        InvalidInput: INVALID_COLUMN_NAME.
        Forbidden: COLUMN_FORBIDDEN without edit access.
    """
    column = get_column(column_id)

    trimmed = name.strip() if isinstance(name, str) else ""
    if not trimmed or len(trimmed) > MAX_COLUMN_NAME_LENGTH:
        raise InvalidInput("Invalid column name", code="INVALID_COLUMN_NAME")

    require_board_role(
        column.board_id, user_id, can_edit_columns,
        "Insufficient permissions", "COLUMN_FORBIDDEN",
    )

    column.name = trimmed
    db.session.flush()

    return column_summary(column, count_cards(column.id))


def toggle_column_collapse(column_id, user_id, is_collapsed):
    """Set a column's collapsed flag. Positions are untouched."""
    column = get_column(column_id)

    require_board_role(
        column.board_id, user_id, can_edit_columns,
        "Insufficient permissions", "COLUMN_FORBIDDEN",
    )

    column.is_collapsed = bool(is_collapsed)
    db.session.flush()

    return column_summary(column, count_cards(column.id))


def reorder_columns(board_id, user_id, ordered_column_ids):
    """Apply an explicit column order and rebalance positions.

    `ordered_column_ids` must list exactly the board's current columns.

    Returns:
        The board's columns in their new order, with card counts.

    Raises:
        InvalidInput: INVALID_COLUMN_ORDER when the ids are not a
            permutation of the board's columns.
        Forbidden: COLUMN_REORDER_FORBIDDEN without edit access.
    """
    if not isinstance(ordered_column_ids, (list, tuple)) or not ordered_column_ids:
        raise InvalidInput("No columns provided", code="INVALID_COLUMN_ORDER")

    require_board_role(
        board_id, user_id, can_edit_columns,
        "Insufficient permissions", "COLUMN_REORDER_FORBIDDEN",
    )

    existing = _ordered_columns(board_id)
    positions.reorder_by_ids(
        existing, list(ordered_column_ids), "INVALID_COLUMN_ORDER", noun="column"
    )
    db.session.flush()

    logger.info(f"Reordered {len(existing)} columns on board {board_id}")
    return _columns_with_counts(board_id)


def create_column(board_id, user_id, name=None):
    """Columns only come from board creation or duplication."""
    raise OperationDisabled(
        "Column creation is not available", code="COLUMN_CREATE_DISABLED"
    )


def delete_column(column_id, user_id):
    """Columns only disappear with their board."""
    raise OperationDisabled(
        "Column deletion is not available", code="COLUMN_DELETE_DISABLED"
    )
