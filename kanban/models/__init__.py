# Models package: import all models here so Alembic can discover them.

from kanban.models.user import User  # noqa: F401
from kanban.models.board import Board, BoardMember  # noqa: F401
from kanban.models.kanban import BoardColumn, Card  # noqa: F401
