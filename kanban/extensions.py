"""
Deferred extension instances.

Created here, bound to the app in create_app() via init_app().
"""

import sqlite3

from flask import jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager, current_user
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from sqlalchemy import event
from sqlalchemy.engine import Engine


def rate_limit_key():
    """Throttle per logged-in user, else per client IP."""
    if current_user and current_user.is_authenticated:
        return f"user:{current_user.id}"

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return f"ip:{real_ip}"

    return f"ip:{get_remote_address() or 'anonymous'}"


db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=[],  # No global limit; applied per API blueprint
)


@login_manager.user_loader
def load_user(user_id):
    """Load user by ID from session. Imports lazily to avoid circular deps."""
    from kanban.models.user import User

    return db.session.get(User, user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({
        "error": "Unauthorized",
        "code": "UNAUTHORIZED",
        "success": False,
    }), 401


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()
