"""User model.

Stores authentication credentials and profile info.
Flask-Login integration via UserMixin.
"""

import uuid

from flask_login import UserMixin

from kanban.extensions import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120))
    image = db.Column(db.String(2048))
    email_verified = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    board_memberships = db.relationship(
        "BoardMember",
        back_populates="user",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    owned_boards = db.relationship(
        "Board", back_populates="owner", lazy="dynamic"
    )

    def __repr__(self):
        return f"<User {self.email}>"
