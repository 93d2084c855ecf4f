"""Board access gate: resolves a user's membership and checks capabilities.

Access is evaluated fresh on every call so role changes take effect on the
next request. A missing membership is reported exactly like a missing
board, so non-members cannot probe which board ids exist.
"""

import logging
from collections import namedtuple

from kanban.extensions import db
from kanban.models.board import Board, BoardMember
from kanban.services.errors import Forbidden, NotFound

logger = logging.getLogger(__name__)

BoardAccess = namedtuple("BoardAccess", ["board", "membership"])


def get_board_access(board_id, user_id):
    """Load a board together with the user's membership on it.

    Raises:
        NotFound: BOARD_NOT_FOUND if the board does not exist or the user
            is not a member of it.
    """
    row = (
        db.session.query(Board, BoardMember)
        .join(BoardMember, BoardMember.board_id == Board.id)
        .filter(Board.id == board_id, BoardMember.user_id == user_id)
        .first()
    )
    if row is None:
        raise NotFound("Board not found", code="BOARD_NOT_FOUND")

    board, membership = row
    return BoardAccess(board=board, membership=membership)


def assert_role(role, predicate, message, code):
    """Raise Forbidden with `code` unless `predicate(role)` holds."""
    if not predicate(role):
        logger.warning(f"Denied {code} for role {role!r}")
        raise Forbidden(message, code=code)


def require_board_role(board_id, user_id, predicate, message, code):
    """get_board_access() followed by assert_role() on the membership."""
    access = get_board_access(board_id, user_id)
    assert_role(access.membership.role, predicate, message, code)
    return access
