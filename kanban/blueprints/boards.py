"""Boards blueprint: /api/boards/*

Board lifecycle, board columns and board membership. Every route needs a
logged-in user; authorization per board happens in the services.

Route Map:
  GET    /api/boards                              Boards the user belongs to
  POST   /api/boards                              Create board (+ default columns)
  GET    /api/boards/<id>                         Board detail with columns and cards
  PATCH  /api/boards/<id>                         Update title/description
  DELETE /api/boards/<id>                         Delete board (owner only)
  POST   /api/boards/<id>/archive                 Archive / restore
  POST   /api/boards/<id>/duplicate               Deep copy
  GET    /api/boards/<id>/columns                 Columns with card counts
  POST   /api/boards/<id>/columns                 Disabled (405)
  GET    /api/boards/<id>/members                 Members
  POST   /api/boards/<id>/members                 Add member
  PATCH  /api/boards/<id>/members/<user_id>       Change role
  DELETE /api/boards/<id>/members/<user_id>       Remove member
"""

from flask import Blueprint
from flask_login import current_user, login_required

from kanban.extensions import db
from kanban.responses import (
    json_body,
    json_list,
    json_success,
    pick,
    require_bool,
    require_string,
)
from kanban.services import board_service, column_service

boards_bp = Blueprint("boards", __name__, url_prefix="/api/boards")


# ─── Boards ──────────────────────────────────────────────────────

@boards_bp.route("", methods=["GET"])
@login_required
def list_boards():
    boards = board_service.list_boards_for_user(current_user.id)
    # No pagination yet: page 1 holds every board.
    return json_list(boards, len(boards), 1)


@boards_bp.route("", methods=["POST"])
@login_required
def create_board():
    data = json_body()
    result = board_service.create_board(
        title=require_string(data, "title"),
        description=require_string(data, "description", optional=True, nullable=True),
        owner_id=current_user.id,
    )
    db.session.commit()
    return json_success(result, 201)


@boards_bp.route("/<board_id>", methods=["GET"])
@login_required
def get_board(board_id):
    return json_success(board_service.get_board_detail(board_id, current_user.id))


@boards_bp.route("/<board_id>", methods=["PATCH"])
@login_required
def update_board(board_id):
    updates = pick(json_body(), "title", "description")
    board = board_service.update_board(board_id, current_user.id, updates)
    db.session.commit()
    return json_success({"board": board})


@boards_bp.route("/<board_id>", methods=["DELETE"])
@login_required
def delete_board(board_id):
    board_service.delete_board(board_id, current_user.id)
    db.session.commit()
    return json_success({"deleted": True})


@boards_bp.route("/<board_id>/archive", methods=["POST"])
@login_required
def archive_board(board_id):
    is_archived = require_bool(json_body(), "is_archived")
    board = board_service.set_board_archive(board_id, current_user.id, is_archived)
    db.session.commit()
    return json_success({"board": board})


@boards_bp.route("/<board_id>/duplicate", methods=["POST"])
@login_required
def duplicate_board(board_id):
    title = require_string(json_body(), "title", optional=True)
    result = board_service.duplicate_board(board_id, current_user.id, title=title)
    db.session.commit()
    return json_success(result, 201)


# ─── Columns ─────────────────────────────────────────────────────

@boards_bp.route("/<board_id>/columns", methods=["GET"])
@login_required
def list_columns(board_id):
    columns = column_service.list_board_columns(board_id, current_user.id)
    return json_success({"columns": columns})


@boards_bp.route("/<board_id>/columns", methods=["POST"])
@login_required
def create_column(board_id):
    column_service.create_column(board_id, current_user.id)


# ─── Members ─────────────────────────────────────────────────────

@boards_bp.route("/<board_id>/members", methods=["GET"])
@login_required
def list_members(board_id):
    members = board_service.list_board_members(board_id, current_user.id)
    return json_success({"members": members})


@boards_bp.route("/<board_id>/members", methods=["POST"])
@login_required
def add_member(board_id):
    data = json_body()
    member = board_service.add_board_member(
        board_id,
        require_string(data, "user_id"),
        current_user.id,
        require_string(data, "role"),
    )
    db.session.commit()
    return json_success({"member": member}, 201)


@boards_bp.route("/<board_id>/members/<user_id>", methods=["PATCH"])
@login_required
def update_member(board_id, user_id):
    role = require_string(json_body(), "role")
    member = board_service.update_board_member_role(board_id, user_id, current_user.id, role)
    db.session.commit()
    return json_success({"member": member})


@boards_bp.route("/<board_id>/members/<user_id>", methods=["DELETE"])
@login_required
def remove_member(board_id, user_id):
    board_service.remove_board_member(board_id, user_id, current_user.id)
    db.session.commit()
    return json_success({"removed": True})
