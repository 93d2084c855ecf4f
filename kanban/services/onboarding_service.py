"""Onboarding: seeds a demo board for a newly registered user.

Demo content is a convenience. Any failure while creating it is logged and
swallowed so that account creation never fails because of it. The work
runs inside a savepoint, so a failure leaves no half-built board behind.
"""

import logging

from flask import current_app

from kanban.extensions import db
from kanban.models.board import Board, BoardMember
from kanban.models.kanban import BoardColumn, Card
from kanban.services.positions import canonical_position

logger = logging.getLogger(__name__)

DEMO_BOARD_TITLE = "Welcome to your Kanban board"
DEMO_BOARD_DESCRIPTION = (
    "A demo board to explore with. Drag cards between columns, rename "
    "columns, and delete this board whenever you are ready."
)

DEMO_COLUMNS = [
    ("Getting Started", [
        ("Welcome!", "Click a card to edit it. Drag it to move it."),
        ("Create your first board", "Use the New Board button. Every board starts with To Do, In Progress and Done."),
        ("Invite your team", "Share a board with others as admin, member or viewer."),
    ]),
    ("In Progress", [
        ("Reorder these cards", "Drop a card above or below its neighbours to change the order."),
        ("Collapse a column", "Collapsed columns stay out of the way but keep their cards."),
    ]),
    ("Done", [
        ("Sign up", "You are here. Nice work."),
    ]),
]


def create_demo_board(user_id):
    """Create the demo board owned by `user_id`. Returns the board id."""
    board = Board(
        title=DEMO_BOARD_TITLE,
        description=DEMO_BOARD_DESCRIPTION,
        owner_user_id=user_id,
    )
    db.session.add(board)
    db.session.flush()

    db.session.add(BoardMember(board_id=board.id, user_id=user_id, role="owner"))

    for column_index, (name, cards) in enumerate(DEMO_COLUMNS):
        column = BoardColumn(
            board_id=board.id,
            name=name,
            position=canonical_position(column_index),
        )
        db.session.add(column)
        db.session.flush()

        db.session.add_all([
            Card(
                column_id=column.id,
                title=title,
                description=description,
                position=canonical_position(card_index),
                created_by=user_id,
            )
            for card_index, (title, description) in enumerate(cards)
        ])

    db.session.flush()
    return board.id


def onboard_new_user(user_id):
    """Seed demo content for a new user. Never raises.

    Returns:
        The demo board id, or None when onboarding is disabled or failed.
    """
    if not current_app.config.get("ONBOARDING_DEMO_BOARD", True):
        return None

    try:
        with db.session.begin_nested():
            board_id = create_demo_board(user_id)
    except Exception as e:
        logger.error(f"Failed to onboard user {user_id}: {e}", exc_info=True)
        return None

    logger.info(f"User {user_id} onboarded with demo board {board_id}")
    return board_id
