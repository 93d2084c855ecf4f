"""Auth blueprint: /api/auth/*

Local email + password sessions through Flask-Login. New accounts are
onboarded with a demo board; onboarding failures never block sign-up.

Route Map:
  GET  /api/auth/csrf       CSRF token for the X-CSRFToken header
  POST /api/auth/register   Create account, onboard, log in
  POST /api/auth/login      Log in
  POST /api/auth/logout     Log out
"""

from flask import Blueprint
from flask_login import login_user, logout_user
from flask_wtf.csrf import generate_csrf

from kanban.extensions import db, limiter
from kanban.responses import json_body, json_error, json_success, require_string
from kanban.services import onboarding_service, user_service

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.route("/csrf", methods=["GET"])
def csrf_token():
    return json_success({"csrf_token": generate_csrf()})


@auth_bp.route("/register", methods=["POST"])
@limiter.limit("10 per minute")
def register():
    data = json_body()
    user = user_service.register_user(
        email=require_string(data, "email"),
        password=require_string(data, "password"),
        name=require_string(data, "name", optional=True, nullable=True),
    )
    demo_board_id = onboarding_service.onboard_new_user(user.id)
    db.session.commit()

    login_user(user)
    return json_success({
        "user": user_service.user_summary(user),
        "demo_board_id": demo_board_id,
    }, 201)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("15 per minute")
def login():
    data = json_body()
    user = user_service.authenticate(
        require_string(data, "email"),
        require_string(data, "password"),
    )
    if user is None:
        return json_error("Invalid email or password.", 401, "INVALID_CREDENTIALS")

    login_user(user, remember=bool(data.get("remember")))
    return json_success({"user": user_service.user_summary(user)})


@auth_bp.route("/logout", methods=["POST"])
def logout():
    logout_user()
    return json_success({"logged_out": True})
