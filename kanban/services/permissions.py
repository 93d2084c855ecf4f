"""Board capability predicates.

Each predicate is a pure function of a membership role (or None when the
user has no membership) and answers whether an operation is allowed.
"""


def can_view_board(role):
    return role in ("owner", "admin", "member", "viewer")


def can_manage_board(role):
    """Update, archive and duplicate."""
    return role in ("owner", "admin")


def can_manage_members(role):
    return role in ("owner", "admin")


def can_edit_columns(role):
    """Rename, collapse and reorder columns; create, edit, move cards."""
    return role in ("owner", "admin", "member")


def can_delete_board(role):
    return role == "owner"


def is_owner(role):
    return role == "owner"
