"""Kanban models.

Columns (lanes) belong to a board and cards belong to a column. Both use
a sparse integer `position` (multiples of 1000) to order siblings; the
ordering is maintained by kanban.services.positions, not by a constraint.
"""

import uuid

from kanban.extensions import db


class BoardColumn(db.Model):
    __tablename__ = "board_columns"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(100), nullable=False)
    position = db.Column(db.Integer, nullable=False, index=True)
    is_collapsed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    board = db.relationship("Board", back_populates="columns")
    cards = db.relationship(
        "Card",
        back_populates="column",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Card.position",
    )

    def __repr__(self):
        return f"<BoardColumn {self.name}>"


class Card(db.Model):
    __tablename__ = "cards"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    column_id = db.Column(
        db.String(36),
        db.ForeignKey("board_columns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text, nullable=True)
    position = db.Column(db.Integer, nullable=False)
    created_by = db.Column(
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    column = db.relationship("BoardColumn", back_populates="cards")
    creator = db.relationship("User", foreign_keys=[created_by])

    def __repr__(self):
        return f"<Card {self.title[:40]}>"
