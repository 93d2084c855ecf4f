"""Columns blueprint: /api/columns/*

Route Map:
  PATCH  /api/columns/<id>            Rename
  DELETE /api/columns/<id>            Disabled (405)
  POST   /api/columns/<id>/collapse   Collapse / expand
  POST   /api/columns/reorder         Explicit order for a board's columns
"""

from flask import Blueprint
from flask_login import current_user, login_required

from kanban.extensions import db
from kanban.responses import (
    json_body,
    json_success,
    require_bool,
    require_string,
    require_string_list,
)
from kanban.services import column_service

columns_bp = Blueprint("columns", __name__, url_prefix="/api/columns")


@columns_bp.route("/reorder", methods=["POST"])
@login_required
def reorder_columns():
    data = json_body()
    columns = column_service.reorder_columns(
        require_string(data, "board_id"),
        current_user.id,
        require_string_list(data, "column_ids"),
    )
    db.session.commit()
    return json_success({"columns": columns})


@columns_bp.route("/<column_id>", methods=["PATCH"])
@login_required
def rename_column(column_id):
    name = require_string(json_body(), "name")
    column = column_service.rename_column(column_id, current_user.id, name)
    db.session.commit()
    return json_success({"column": column})


@columns_bp.route("/<column_id>", methods=["DELETE"])
@login_required
def delete_column(column_id):
    column_service.delete_column(column_id, current_user.id)


@columns_bp.route("/<column_id>/collapse", methods=["POST"])
@login_required
def collapse_column(column_id):
    is_collapsed = require_bool(json_body(), "is_collapsed")
    column = column_service.toggle_column_collapse(column_id, current_user.id, is_collapsed)
    db.session.commit()
    return json_success({"column": column})
