"""Board models.

- Board: the top-level tenant container; owns columns (and through them cards).
- BoardMember: join table binding a user to a board with a role.
"""

import uuid

from kanban.extensions import db


# Ordered by privilege, highest first.
BOARD_ROLES = ("owner", "admin", "member", "viewer")


class Board(db.Model):
    __tablename__ = "boards"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    owner_user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_archived = db.Column(db.Boolean, nullable=False, default=False, index=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    owner = db.relationship("User", back_populates="owned_boards")
    members = db.relationship(
        "BoardMember",
        back_populates="board",
        lazy="dynamic",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    columns = db.relationship(
        "BoardColumn",
        back_populates="board",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BoardColumn.position",
    )

    def __repr__(self):
        return f"<Board {self.title}>"


class BoardMember(db.Model):
    __tablename__ = "board_members"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role = db.Column(db.String(20), nullable=False)  # owner | admin | member | viewer
    joined_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    __table_args__ = (
        db.UniqueConstraint("board_id", "user_id", name="uq_board_member"),
    )

    # --- Relationships ---
    board = db.relationship("Board", back_populates="members")
    user = db.relationship("User", back_populates="board_memberships")

    def __repr__(self):
        return f"<BoardMember user={self.user_id} board={self.board_id} role={self.role}>"
