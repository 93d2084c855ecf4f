"""Shared test fixtures for the Kanban API test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, CSRF off)
- client: Flask test client
- db_session: clean database per test (tables created/dropped)
- seed_data: one board with an owner, admin, member and viewer, plus an outsider
"""

import pytest
from werkzeug.security import generate_password_hash

from kanban import create_app
from kanban.extensions import db as _db
from kanban.models.board import BoardMember
from kanban.models.user import User
from kanban.services import board_service

PASSWORD = "password123"


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


def make_user(session, email, name=None):
    user = User(
        email=email,
        password_hash=generate_password_hash(PASSWORD),
        name=name,
    )
    session.add(user)
    session.flush()
    return user


@pytest.fixture
def seed_data(app, db_session):
    """Seed one board with a member for every role and one outsider.

    Returns a dict of plain ids so tests can use them after the session
    has been committed or rolled back.
    """
    owner = make_user(db_session, "owner@kanban.local", "Olive Owner")
    admin = make_user(db_session, "admin@kanban.local", "Adam Admin")
    member = make_user(db_session, "member@kanban.local", "Mia Member")
    viewer = make_user(db_session, "viewer@kanban.local", "Vic Viewer")
    outsider = make_user(db_session, "outsider@kanban.local", "Otto Outsider")

    detail = board_service.create_board("Roadmap", owner.id, "Quarterly plan")
    board_id = detail["board"]["id"]

    db_session.add_all([
        BoardMember(board_id=board_id, user_id=admin.id, role="admin"),
        BoardMember(board_id=board_id, user_id=member.id, role="member"),
        BoardMember(board_id=board_id, user_id=viewer.id, role="viewer"),
    ])
    db_session.commit()

    column_ids = [column["id"] for column in detail["columns"]]

    return {
        "owner_id": owner.id,
        "admin_id": admin.id,
        "member_id": member.id,
        "viewer_id": viewer.id,
        "outsider_id": outsider.id,
        "board_id": board_id,
        "column_ids": column_ids,
        "todo_id": column_ids[0],
        "doing_id": column_ids[1],
        "done_id": column_ids[2],
    }
