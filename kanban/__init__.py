import os
import logging
from datetime import datetime, timezone

import click
from flask import Flask, current_app
from flask_limiter.errors import RateLimitExceeded
from flask_wtf.csrf import CSRFError
from werkzeug.exceptions import HTTPException

from kanban.config import config_by_name
from kanban.extensions import db, migrate, login_manager, csrf, limiter
from kanban.responses import json_error, json_success
from kanban.services.errors import ServiceError


def api_rate_limit():
    """Per-blueprint API limit, read at request time so config can change it."""
    return current_app.config.get("API_RATE_LIMIT", "120 per minute")


def create_app(config_name=None):
    """Application factory."""

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_by_name[config_name].validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # --- Import models so Alembic can discover them ---
    with app.app_context():
        from kanban import models  # noqa: F401

    # --- Register blueprints ---
    from kanban.blueprints.auth import auth_bp
    from kanban.blueprints.user import user_bp
    from kanban.blueprints.boards import boards_bp
    from kanban.blueprints.columns import columns_bp
    from kanban.blueprints.cards import cards_bp, column_cards_bp

    # Everything except auth is throttled per user (or IP) with one shared limit.
    for bp in (user_bp, boards_bp, columns_bp, cards_bp, column_cards_bp):
        limiter.limit(api_rate_limit)(bp)

    app.register_blueprint(auth_bp)
    app.register_blueprint(user_bp)
    app.register_blueprint(boards_bp)
    app.register_blueprint(columns_bp)
    app.register_blueprint(cards_bp)
    app.register_blueprint(column_cards_bp)

    # --- Health ---
    @app.route("/api/health")
    def health():
        return json_success({
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    # --- Error handlers ---
    @app.errorhandler(ServiceError)
    def service_error(e):
        # Nothing from a failed operation may be committed.
        db.session.rollback()
        return json_error(e.message, e.status, e.code)

    @app.errorhandler(CSRFError)
    def csrf_error(e):
        return json_error(e.description or "CSRF validation failed", 400, "CSRF_FAILED")

    @app.errorhandler(RateLimitExceeded)
    def rate_limited(e):
        return json_error("Too Many Requests", 429, "RATE_LIMITED")

    @app.errorhandler(HTTPException)
    def http_error(e):
        return json_error(e.name, e.code)

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        app.logger.error(f"Unhandled error: {getattr(e, 'original_exception', e)}")
        return json_error("Internal Server Error", 500)

    # --- CLI commands ---
    register_cli(app)

    # --- Security headers ---
    @app.after_request
    def add_security_headers(response):
        """Add security headers to every response."""
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Control referrer information
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # The API never serves documents or scripts
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none';"
        )
        # Board data is per-user; never cache it in shared caches
        if response.mimetype == "application/json":
            response.headers.setdefault("Cache-Control", "no-store")
        # Strict Transport Security (only in production)
        if not app.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    return app


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("create-user")
    @click.option("--email", required=True, help="Login email")
    @click.option("--password", required=True, help="Password (8+ characters)")
    @click.option("--name", default=None, help="Display name")
    @click.option("--no-demo", is_flag=True, help="Skip the demo board.")
    def create_user(email, password, name, no_demo):
        """Create a local account, optionally with a demo board.

        Usage:
            flask create-user --email jane@example.com --password s3cretpass
        """
        from kanban.services import onboarding_service, user_service

        try:
            user = user_service.register_user(email, password, name)
        except ServiceError as e:
            db.session.rollback()
            raise click.ClickException(e.message)

        board_id = None if no_demo else onboarding_service.onboard_new_user(user.id)
        db.session.commit()

        click.echo(f"Created user: {user.email} (id: {user.id})")
        if board_id:
            click.echo(f"  Demo board: {board_id}")

    @app.cli.command("seed-demo")
    @click.option("--email", required=True, help="Existing user's email")
    def seed_demo(email):
        """Add a demo board to an existing user's account.

        Usage:
            flask seed-demo --email jane@example.com
        """
        from kanban.services import onboarding_service, user_service

        user = user_service.get_user_by_email(email)
        if user is None:
            raise click.ClickException(f"No user with email {email}")

        board_id = onboarding_service.create_demo_board(user.id)
        db.session.commit()
        click.echo(f"Demo board {board_id} created for {user.email}")
