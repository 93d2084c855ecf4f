"""Cards blueprints: /api/columns/<id>/cards and /api/cards/*

Route Map:
  GET    /api/columns/<id>/cards   Cards of a column, by position
  POST   /api/columns/<id>/cards   Create card (appended)
  GET    /api/cards/<id>           Card detail
  PATCH  /api/cards/<id>           Update title/description
  DELETE /api/cards/<id>           Delete card
  POST   /api/cards/<id>/move      Move to column + index
  POST   /api/cards/reorder        Explicit order within one column
"""

from flask import Blueprint
from flask_login import current_user, login_required

from kanban.extensions import db
from kanban.responses import (
    json_body,
    json_success,
    pick,
    require_string,
    require_string_list,
)
from kanban.services import card_service

column_cards_bp = Blueprint("column_cards", __name__, url_prefix="/api/columns")
cards_bp = Blueprint("cards", __name__, url_prefix="/api/cards")


# ─── Column cards ────────────────────────────────────────────────

@column_cards_bp.route("/<column_id>/cards", methods=["GET"])
@login_required
def list_cards(column_id):
    cards = card_service.list_cards(column_id, current_user.id)
    return json_success({"cards": cards})


@column_cards_bp.route("/<column_id>/cards", methods=["POST"])
@login_required
def create_card(column_id):
    data = json_body()
    require_string(data, "title")
    require_string(data, "description", optional=True, nullable=True)
    card = card_service.create_card(
        column_id, current_user.id, pick(data, "title", "description")
    )
    db.session.commit()
    return json_success({"card": card}, 201)


# ─── Cards ───────────────────────────────────────────────────────

@cards_bp.route("/reorder", methods=["POST"])
@login_required
def reorder_cards():
    data = json_body()
    cards = card_service.reorder_cards(
        require_string(data, "column_id"),
        current_user.id,
        require_string_list(data, "card_ids"),
    )
    db.session.commit()
    return json_success({"cards": cards})


@cards_bp.route("/<card_id>", methods=["GET"])
@login_required
def get_card(card_id):
    return json_success({"card": card_service.get_card_detail(card_id, current_user.id)})


@cards_bp.route("/<card_id>", methods=["PATCH"])
@login_required
def update_card(card_id):
    updates = pick(json_body(), "title", "description")
    card = card_service.update_card(card_id, current_user.id, updates)
    db.session.commit()
    return json_success({"card": card})


@cards_bp.route("/<card_id>", methods=["DELETE"])
@login_required
def delete_card(card_id):
    card_service.delete_card(card_id, current_user.id)
    db.session.commit()
    return json_success({"deleted": True})


@cards_bp.route("/<card_id>/move", methods=["POST"])
@login_required
def move_card(card_id):
    data = json_body()
    card = card_service.move_card(
        card_id, current_user.id, require_string(data, "to_column_id"), data.get("index")
    )
    db.session.commit()
    return json_success({"card": card})
