"""User blueprint: /api/user/*

  GET   /api/user/me   Current user's profile
  PATCH /api/user/me   Update name / image
"""

from flask import Blueprint
from flask_login import current_user, login_required

from kanban.extensions import db
from kanban.responses import json_body, json_error, json_success, pick
from kanban.services import user_service

user_bp = Blueprint("user", __name__, url_prefix="/api/user")


@user_bp.route("/me", methods=["GET"])
@login_required
def me():
    return json_success({"user": user_service.user_summary(current_user)})


@user_bp.route("/me", methods=["PATCH"])
@login_required
def update_me():
    updates = pick(json_body(), "name", "image")
    user = user_service.update_user_profile(current_user.id, updates)
    if user is None:
        return json_error("User not found", 404, "USER_NOT_FOUND")

    db.session.commit()
    return json_success({"user": user_service.user_summary(user)})
