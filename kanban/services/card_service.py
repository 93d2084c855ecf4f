"""Card service: CRUD, moves and reorders for the cards of a column.

Card positions are scoped to their column. Creation appends after the
current last card; moves and explicit reorders rebalance the affected
column through kanban.services.positions. Cards may move between columns
of the same board only.

Functions flush but do NOT commit; the caller commits.
"""

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from kanban.extensions import db
from kanban.models.kanban import BoardColumn, Card
from kanban.services import positions
from kanban.services.board_access import require_board_role
from kanban.services.column_service import get_column
from kanban.services.errors import InternalError, InvalidInput, NotFound
from kanban.services.permissions import can_edit_columns, can_view_board

logger = logging.getLogger(__name__)

MAX_CARD_TITLE_LENGTH = 500
MAX_CARD_DESCRIPTION_LENGTH = 10_000


def card_summary(card):
    """Serialize a Card to a JSON-safe dict."""
    return {
        "id": card.id,
        "column_id": card.column_id,
        "title": card.title,
        "description": card.description,
        "position": card.position,
        "created_by": card.created_by,
        "created_at": card.created_at.isoformat() if card.created_at else None,
        "updated_at": card.updated_at.isoformat() if card.updated_at else None,
    }


def _clean_title(title):
    trimmed = title.strip() if isinstance(title, str) else ""
    if not trimmed or len(trimmed) > MAX_CARD_TITLE_LENGTH:
        raise InvalidInput("Invalid card title", code="INVALID_CARD_TITLE")
    return trimmed


def _clean_description(description):
    """Trim a description; empty becomes None."""
    if description is None:
        return None
    if not isinstance(description, str):
        raise InvalidInput("Invalid card description", code="INVALID_CARD_DESCRIPTION")

    trimmed = description.strip()
    if len(trimmed) > MAX_CARD_DESCRIPTION_LENGTH:
        raise InvalidInput("Description too long", code="INVALID_CARD_DESCRIPTION")
    return trimmed or None


def get_card(card_id):
    """Load a card or raise CARD_NOT_FOUND."""
    card = db.session.get(Card, card_id)
    if card is None:
        raise NotFound("Card not found", code="CARD_NOT_FOUND")
    return card


def _ordered_cards(column_id):
    return (
        Card.query
        .filter_by(column_id=column_id)
        .order_by(Card.position.asc())
        .all()
    )


def _require_column_role(column, user_id, predicate):
    return require_board_role(
        column.board_id, user_id, predicate,
        "Insufficient permissions", "CARD_FORBIDDEN",
    )


def list_cards(column_id, user_id=None):
    """List a column's cards in position order.

    No filtering happens here; search is left to the caller. When
    `user_id` is given the caller must be able to view the board.
    """
    if user_id is not None:
        _require_column_role(get_column(column_id), user_id, can_view_board)
    return [card_summary(card) for card in _ordered_cards(column_id)]


def create_card(column_id, user_id, data):
    """Append a new card to a column.

    Args:
        column_id: Target column UUID string.
        user_id: Creator's user UUID string.
        data: dict with "title" and optional "description".

    Returns:
        The created card as a dict.

    Raises:
        NotFound: COLUMN_NOT_FOUND.
        InvalidInput: INVALID_CARD_TITLE, INVALID_CARD_DESCRIPTION.
        Forbidden: CARD_FORBIDDEN without edit access.
        InternalError: CARD_CREATE_FAILED if the row cannot be written.
    """
    column = get_column(column_id)

    title = _clean_title(data.get("title"))
    description = _clean_description(data.get("description"))

    _require_column_role(column, user_id, can_edit_columns)

    last_position = (
        db.session.query(func.max(Card.position))
        .filter(Card.column_id == column_id)
        .scalar()
    )

    card = Card(
        column_id=column_id,
        title=title,
        description=description,
        position=positions.next_position(last_position),
        created_by=user_id,
    )
    db.session.add(card)
    try:
        db.session.flush()
    except IntegrityError as e:
        db.session.rollback()
        logger.error(f"Failed to create card in column {column_id}: {e}")
        raise InternalError("Failed to create card", code="CARD_CREATE_FAILED") from e

    return card_summary(card)


def get_card_detail(card_id, user_id=None):
    card = get_card(card_id)
    if user_id is not None:
        _require_column_role(get_column(card.column_id), user_id, can_view_board)
    return card_summary(card)


def update_card(card_id, user_id, data):
    """Partially update a card's title and/or description.

    Only keys present in `data` are validated and written. An empty
    update returns the card as-is without a write.
    """
    card = get_card(card_id)
    _require_column_role(get_column(card.column_id), user_id, can_edit_columns)

    updates = {}
    if "title" in data:
        updates["title"] = _clean_title(data["title"])
    if "description" in data:
        updates["description"] = _clean_description(data["description"])

    if not updates:
        return card_summary(card)

    for key, value in updates.items():
        setattr(card, key, value)
    db.session.flush()

    return card_summary(card)


def delete_card(card_id, user_id):
    card = get_card(card_id)
    _require_column_role(get_column(card.column_id), user_id, can_edit_columns)

    db.session.delete(card)
    db.session.flush()


def move_card(card_id, user_id, target_column_id, index):
    """Move a card to `index` within `target_column_id`.

    The target column's cards (without the moving card) are rebalanced
    with the card inserted at `index`; columnId and position change in the
    same transaction. The source column keeps its gaps, which still order
    its remaining cards correctly.

    Raises:
        NotFound: CARD_NOT_FOUND, COLUMN_NOT_FOUND, or BOARD_NOT_FOUND when
            the caller is not a member of the card's board.
        InvalidInput: CARD_CROSS_BOARD_MOVE, INVALID_CARD_INDEX.
        Forbidden: CARD_FORBIDDEN without edit access.
    """
    card = get_card(card_id)
    source_column = get_column(card.column_id)
    _require_column_role(source_column, user_id, can_edit_columns)

    target_column = get_column(target_column_id)
    if source_column.board_id != target_column.board_id:
        raise InvalidInput(
            "Cannot move card across boards", code="CARD_CROSS_BOARD_MOVE"
        )

    siblings = _ordered_cards(target_column.id)
    positions.insert_at_index(siblings, card, index)
    card.column_id = target_column.id
    db.session.flush()

    logger.info(
        f"Moved card {card.id} from column {source_column.id} "
        f"to column {target_column.id} at index {index}"
    )
    return card_summary(card)


def reorder_cards(column_id, user_id, ordered_card_ids):
    """Apply an explicit card order within one column.

    Raises:
        InvalidInput: INVALID_CARD_ORDER unless `ordered_card_ids` is a
            permutation of the column's cards.
    """
    if not isinstance(ordered_card_ids, (list, tuple)) or not ordered_card_ids:
        raise InvalidInput("No cards provided", code="INVALID_CARD_ORDER")

    column = get_column(column_id)
    _require_column_role(column, user_id, can_edit_columns)

    existing = _ordered_cards(column_id)
    positions.reorder_by_ids(
        existing, list(ordered_card_ids), "INVALID_CARD_ORDER", noun="card"
    )
    db.session.flush()

    return [card_summary(card) for card in _ordered_cards(column_id)]


def duplicate_cards(source_board_id, target_board_id):
    """Copy every card of one board into the matching columns of another.

    Columns are matched by position value, which board duplication copies
    verbatim. Cards keep their title, description, position, creator and
    timestamps.

    Returns:
        Number of cards copied.
    """
    if source_board_id == target_board_id:
        return 0

    source_columns = BoardColumn.query.filter_by(board_id=source_board_id).all()
    if not source_columns:
        return 0

    target_by_position = {
        column.position: column.id
        for column in BoardColumn.query.filter_by(board_id=target_board_id).all()
    }

    copied = 0
    for source_column in source_columns:
        target_column_id = target_by_position.get(source_column.position)
        if target_column_id is None:
            continue

        for card in _ordered_cards(source_column.id):
            db.session.add(Card(
                column_id=target_column_id,
                title=card.title,
                description=card.description,
                position=card.position,
                created_by=card.created_by,
                created_at=card.created_at,
                updated_at=card.updated_at,
            ))
            copied += 1

    db.session.flush()
    return copied
