"""Board service: board lifecycle, detail views and membership.

Composes the access gate, the column service and the card service:

- list/create/get/update/archive/delete/duplicate boards
- list/add/update-role/remove board members

Every board is created with three default columns and an owner
membership. A board always keeps at least one owner: owners can never be
removed, and the last owner can never be demoted.

Functions flush but do NOT commit; the caller commits, so creation and
duplication (columns and cards together) land in one transaction.
"""

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from kanban.extensions import db
from kanban.models.board import BOARD_ROLES, Board, BoardMember
from kanban.models.kanban import BoardColumn
from kanban.models.user import User
from kanban.services.board_access import assert_role, require_board_role
from kanban.services.card_service import duplicate_cards, list_cards
from kanban.services.column_service import column_summary, list_board_columns
from kanban.services.errors import Conflict, Forbidden, InternalError, InvalidInput, NotFound
from kanban.services.permissions import (
    can_delete_board,
    can_manage_board,
    can_manage_members,
    can_view_board,
    is_owner,
)
from kanban.services.user_service import get_user_by_id

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = (
    ("To Do", 1000),
    ("In Progress", 2000),
    ("Done", 3000),
)

MAX_BOARD_TITLE_LENGTH = 255
MAX_BOARD_DESCRIPTION_LENGTH = 2000


# ─── Serialization ───────────────────────────────────────────────

def board_summary(board, role, member_count, column_count):
    return {
        "id": board.id,
        "title": board.title,
        "description": board.description,
        "is_archived": bool(board.is_archived),
        "created_at": board.created_at.isoformat() if board.created_at else None,
        "updated_at": board.updated_at.isoformat() if board.updated_at else None,
        "role": role,
        "member_count": member_count,
        "column_count": column_count,
    }


def member_info(member, user):
    """Membership joined with the member's display fields."""
    return {
        "id": member.id,
        "board_id": member.board_id,
        "user_id": member.user_id,
        "role": member.role,
        "name": user.name,
        "email": user.email,
        "image": user.image,
        "joined_at": member.joined_at.isoformat() if member.joined_at else None,
    }


def _member_count(board_id):
    return (
        db.session.query(func.count(BoardMember.id))
        .filter(BoardMember.board_id == board_id)
        .scalar()
        or 0
    )


def _column_count(board_id):
    return (
        db.session.query(func.count(BoardColumn.id))
        .filter(BoardColumn.board_id == board_id)
        .scalar()
        or 0
    )


def _summary_for(board, role):
    return board_summary(board, role, _member_count(board.id), _column_count(board.id))


# ─── Validation ──────────────────────────────────────────────────

def _clean_title(title):
    trimmed = title.strip() if isinstance(title, str) else ""
    if not trimmed or len(trimmed) > MAX_BOARD_TITLE_LENGTH:
        raise InvalidInput("Invalid board title", code="INVALID_BOARD_TITLE")
    return trimmed


def _clean_description(description):
    if description is None:
        return None
    if not isinstance(description, str) or len(description.strip()) > MAX_BOARD_DESCRIPTION_LENGTH:
        raise InvalidInput("Invalid board description", code="INVALID_BOARD_DESCRIPTION")
    return description.strip() or None


def _check_role(role):
    if role not in BOARD_ROLES:
        raise InvalidInput("Invalid role", code="INVALID_ROLE")


# ─── Boards ──────────────────────────────────────────────────────

def list_boards_for_user(user_id):
    """Every board the user is a member of, with role and counts, by title."""
    member_count = (
        db.session.query(func.count(BoardMember.id))
        .filter(BoardMember.board_id == Board.id)
        .correlate(Board)
        .scalar_subquery()
    )
    column_count = (
        db.session.query(func.count(BoardColumn.id))
        .filter(BoardColumn.board_id == Board.id)
        .correlate(Board)
        .scalar_subquery()
    )
    rows = (
        db.session.query(Board, BoardMember.role, member_count, column_count)
        .join(BoardMember, BoardMember.board_id == Board.id)
        .filter(BoardMember.user_id == user_id)
        .order_by(Board.title.asc())
        .all()
    )
    return [
        board_summary(board, role, int(members or 0), int(columns or 0))
        for board, role, members, columns in rows
    ]


def create_board(title, owner_id, description=None):
    """Create a board with its owner membership and default columns.

    Returns:
        Board detail dict: {"board": summary, "columns": [... with empty cards]}.

    Raises:
        InvalidInput: INVALID_BOARD_TITLE, INVALID_BOARD_DESCRIPTION.
        InternalError: BOARD_CREATE_FAILED if the rows cannot be written.
    """
    title = _clean_title(title)
    description = _clean_description(description)

    board = Board(title=title, description=description, owner_user_id=owner_id)
    db.session.add(board)
    try:
        db.session.flush()

        db.session.add(BoardMember(board_id=board.id, user_id=owner_id, role="owner"))
        columns = [
            BoardColumn(board_id=board.id, name=name, position=position)
            for name, position in DEFAULT_COLUMNS
        ]
        db.session.add_all(columns)
        db.session.flush()
    except IntegrityError as e:
        db.session.rollback()
        logger.error(f"Failed to create board for user {owner_id}: {e}")
        raise InternalError("Failed to create board", code="BOARD_CREATE_FAILED") from e

    logger.info(f"Board {board.id} created by user {owner_id}")

    return {
        "board": board_summary(board, "owner", 1, len(columns)),
        "columns": [
            dict(column_summary(column, 0), cards=[]) for column in columns
        ],
    }


def get_board_detail(board_id, user_id):
    """Board summary plus every column with its ordered cards.

    Raises:
        NotFound: BOARD_NOT_FOUND for unknown boards and non-members.
        Forbidden: BOARD_FORBIDDEN without view access.
    """
    access = require_board_role(
        board_id, user_id, can_view_board, "Forbidden", "BOARD_FORBIDDEN"
    )

    columns = list_board_columns(board_id, user_id)
    columns_with_cards = [
        dict(column, cards=list_cards(column["id"])) for column in columns
    ]

    summary = board_summary(
        access.board, access.membership.role, _member_count(board_id), len(columns)
    )
    return {"board": summary, "columns": columns_with_cards}


def update_board(board_id, user_id, data):
    """Partially update title and/or description.

    Raises:
        Forbidden: BOARD_UPDATE_FORBIDDEN for members and viewers.
    """
    access = require_board_role(
        board_id, user_id, can_manage_board,
        "Insufficient permissions", "BOARD_UPDATE_FORBIDDEN",
    )
    board = access.board

    if "title" in data:
        board.title = _clean_title(data["title"])
    if "description" in data:
        board.description = _clean_description(data["description"])
    db.session.flush()

    return _summary_for(board, access.membership.role)


def set_board_archive(board_id, user_id, is_archived):
    """Archive or restore a board. Archiving is soft and reversible."""
    access = require_board_role(
        board_id, user_id, can_manage_board,
        "Insufficient permissions", "BOARD_ARCHIVE_FORBIDDEN",
    )
    access.board.is_archived = bool(is_archived)
    db.session.flush()

    logger.info(
        f"Board {board_id} {'archived' if is_archived else 'restored'} by user {user_id}"
    )
    return _summary_for(access.board, access.membership.role)


def delete_board(board_id, user_id):
    """Hard-delete a board. Columns, cards and memberships cascade.

    Raises:
        Forbidden: BOARD_DELETE_FORBIDDEN for anyone but an owner.
    """
    access = require_board_role(
        board_id, user_id, can_delete_board,
        "Only owners can delete boards", "BOARD_DELETE_FORBIDDEN",
    )
    db.session.delete(access.board)
    db.session.flush()

    logger.info(f"Board {board_id} deleted by user {user_id}")


def duplicate_board(board_id, user_id, title=None):
    """Deep-copy a board's columns and cards into a new board.

    The duplicating user becomes the sole owner of the copy; other
    memberships are not carried over. Columns keep their name, position
    and collapsed state, and cards are matched to them by position.

    Raises:
        Forbidden: BOARD_DUPLICATE_FORBIDDEN for members and viewers.
        InternalError: BOARD_DUPLICATE_FAILED if the rows cannot be written.
    """
    access = require_board_role(
        board_id, user_id, can_manage_board,
        "Insufficient permissions", "BOARD_DUPLICATE_FORBIDDEN",
    )
    source = access.board
    new_title = _clean_title(title) if title is not None else f"{source.title} (Copy)"

    source_columns = (
        BoardColumn.query
        .filter_by(board_id=board_id)
        .order_by(BoardColumn.position.asc())
        .all()
    )

    copy = Board(
        title=new_title[:MAX_BOARD_TITLE_LENGTH],
        description=source.description,
        owner_user_id=user_id,
    )
    db.session.add(copy)
    try:
        db.session.flush()

        db.session.add(BoardMember(board_id=copy.id, user_id=user_id, role="owner"))
        db.session.add_all([
            BoardColumn(
                board_id=copy.id,
                name=column.name,
                position=column.position,
                is_collapsed=column.is_collapsed,
            )
            for column in source_columns
        ])
        db.session.flush()

        copied = duplicate_cards(board_id, copy.id)
    except IntegrityError as e:
        db.session.rollback()
        logger.error(f"Failed to duplicate board {board_id}: {e}")
        raise InternalError("Failed to duplicate board", code="BOARD_DUPLICATE_FAILED") from e

    logger.info(
        f"Board {board_id} duplicated as {copy.id} by user {user_id} "
        f"({len(source_columns)} columns, {copied} cards)"
    )
    return get_board_detail(copy.id, user_id)


# ─── Members ─────────────────────────────────────────────────────

def _get_member(board_id, member_user_id):
    return BoardMember.query.filter_by(board_id=board_id, user_id=member_user_id).first()


def _owner_count(board_id):
    return BoardMember.query.filter_by(board_id=board_id, role="owner").count()


def list_board_members(board_id, user_id):
    """Members of a board joined with user display fields, by name."""
    require_board_role(
        board_id, user_id, can_view_board, "Forbidden", "BOARD_MEMBERS_FORBIDDEN"
    )
    rows = (
        db.session.query(BoardMember, User)
        .join(User, User.id == BoardMember.user_id)
        .filter(BoardMember.board_id == board_id)
        .order_by(User.name.asc(), User.email.asc())
        .all()
    )
    return [member_info(member, user) for member, user in rows]


def add_board_member(board_id, member_user_id, actor_id, role):
    """Add a user to a board with `role`.

    Raises:
        Forbidden: BOARD_MEMBER_FORBIDDEN without member management rights,
            BOARD_OWNER_MODIFY_FORBIDDEN when a non-owner grants "owner".
        InvalidInput: INVALID_ROLE, BOARD_MEMBER_SELF.
        NotFound: USER_NOT_FOUND.
        Conflict: BOARD_MEMBER_EXISTS.
    """
    access = require_board_role(
        board_id, actor_id, can_manage_members,
        "Insufficient permissions", "BOARD_MEMBER_FORBIDDEN",
    )
    _check_role(role)

    if member_user_id == actor_id:
        raise InvalidInput("Cannot change your own membership", code="BOARD_MEMBER_SELF")

    if is_owner(role):
        assert_role(
            access.membership.role, is_owner,
            "Only owners can grant ownership", "BOARD_OWNER_MODIFY_FORBIDDEN",
        )

    user = get_user_by_id(member_user_id)
    if user is None:
        raise NotFound("User not found", code="USER_NOT_FOUND")

    if _get_member(board_id, member_user_id) is not None:
        raise Conflict("User is already a member", code="BOARD_MEMBER_EXISTS")

    member = BoardMember(board_id=board_id, user_id=member_user_id, role=role)
    db.session.add(member)
    try:
        db.session.flush()
    except IntegrityError as e:
        db.session.rollback()
        logger.error(f"Failed to add user {member_user_id} to board {board_id}: {e}")
        raise InternalError("Failed to add member", code="BOARD_MEMBER_CREATE_FAILED") from e

    logger.info(f"User {member_user_id} added to board {board_id} as {role} by {actor_id}")
    return member_info(member, user)


def update_board_member_role(board_id, member_user_id, actor_id, role):
    """Change a member's role.

    Only an owner may change an owner's role or grant ownership, and the
    last owner of a board can never be demoted, whoever asks.
    """
    _check_role(role)

    access = require_board_role(
        board_id, actor_id, can_manage_members,
        "Insufficient permissions", "BOARD_MEMBER_FORBIDDEN",
    )

    target = _get_member(board_id, member_user_id)
    if target is None:
        raise NotFound("Member not found", code="BOARD_MEMBER_NOT_FOUND")

    if is_owner(target.role) or is_owner(role):
        assert_role(
            access.membership.role, is_owner,
            "Cannot modify the owner", "BOARD_OWNER_MODIFY_FORBIDDEN",
        )

    if is_owner(target.role) and not is_owner(role) and _owner_count(board_id) <= 1:
        logger.warning(f"Refused to demote the last owner of board {board_id}")
        raise Forbidden("Cannot demote the only owner", code="BOARD_OWNER_MODIFY_FORBIDDEN")

    user = get_user_by_id(member_user_id)
    if user is None:
        raise NotFound("User not found", code="USER_NOT_FOUND")

    old_role = target.role
    target.role = role
    db.session.flush()

    logger.info(
        f"User {member_user_id} on board {board_id}: {old_role} -> {role} by {actor_id}"
    )
    return member_info(target, user)


def remove_board_member(board_id, member_user_id, actor_id):
    """Remove a member. Owners cannot be removed by anyone."""
    require_board_role(
        board_id, actor_id, can_manage_members,
        "Insufficient permissions", "BOARD_MEMBER_FORBIDDEN",
    )

    target = _get_member(board_id, member_user_id)
    if target is None:
        raise NotFound("Member not found", code="BOARD_MEMBER_NOT_FOUND")

    if is_owner(target.role):
        raise Forbidden("Cannot remove the board owner", code="BOARD_OWNER_REMOVE_FORBIDDEN")

    db.session.delete(target)
    db.session.flush()

    logger.info(f"User {member_user_id} removed from board {board_id} by {actor_id}")
