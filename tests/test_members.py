"""Tests for board membership: list, add, change role, remove.

The board must always keep an owner, so owners can never be removed and
the last owner can never be demoted, whoever asks.
"""

import pytest
from werkzeug.security import generate_password_hash

from kanban.extensions import db
from kanban.models.board import BoardMember
from kanban.models.user import User
from kanban.services import board_service
from kanban.services.errors import Conflict, Forbidden, InvalidInput, NotFound


def _login(client, email):
    return client.post("/api/auth/login", json={"email": email, "password": "password123"})


def _role(board_id, user_id):
    member = BoardMember.query.filter_by(board_id=board_id, user_id=user_id).first()
    return member.role if member else None


@pytest.fixture
def newcomer_id(seed_data, db_session):
    user = User(
        email="newcomer@kanban.local",
        password_hash=generate_password_hash("password123"),
        name="Nina Newcomer",
    )
    db_session.add(user)
    db_session.commit()
    return user.id


class TestListMembers:

    def test_members_joined_with_user_fields(self, seed_data):
        members = board_service.list_board_members(seed_data["board_id"], seed_data["viewer_id"])

        assert [m["name"] for m in members] == ["Adam Admin", "Mia Member", "Olive Owner", "Vic Viewer"]
        owner = next(m for m in members if m["role"] == "owner")
        assert owner["email"] == "owner@kanban.local"
        assert owner["user_id"] == seed_data["owner_id"]

    def test_outsider_gets_not_found(self, seed_data):
        with pytest.raises(NotFound):
            board_service.list_board_members(seed_data["board_id"], seed_data["outsider_id"])


class TestAddMember:

    def test_admin_adds_member(self, seed_data):
        member = board_service.add_board_member(
            seed_data["board_id"], seed_data["outsider_id"], seed_data["admin_id"], "member"
        )
        db.session.commit()

        assert member["role"] == "member"
        assert member["name"] == "Otto Outsider"
        assert _role(seed_data["board_id"], seed_data["outsider_id"]) == "member"

    def test_member_cannot_add(self, seed_data):
        with pytest.raises(Forbidden) as exc:
            board_service.add_board_member(
                seed_data["board_id"], seed_data["outsider_id"], seed_data["member_id"], "viewer"
            )
        assert exc.value.code == "BOARD_MEMBER_FORBIDDEN"

    def test_invalid_role(self, seed_data):
        with pytest.raises(InvalidInput) as exc:
            board_service.add_board_member(
                seed_data["board_id"], seed_data["outsider_id"], seed_data["owner_id"], "superuser"
            )
        assert exc.value.code == "INVALID_ROLE"

    def test_cannot_add_self(self, seed_data):
        with pytest.raises(InvalidInput) as exc:
            board_service.add_board_member(
                seed_data["board_id"], seed_data["admin_id"], seed_data["admin_id"], "viewer"
            )
        assert exc.value.code == "BOARD_MEMBER_SELF"

    def test_existing_member_conflicts(self, seed_data):
        with pytest.raises(Conflict) as exc:
            board_service.add_board_member(
                seed_data["board_id"], seed_data["viewer_id"], seed_data["owner_id"], "member"
            )
        assert exc.value.code == "BOARD_MEMBER_EXISTS"
        assert exc.value.status == 409

    def test_unknown_user(self, seed_data):
        with pytest.raises(NotFound) as exc:
            board_service.add_board_member(
                seed_data["board_id"], "no-such-user", seed_data["owner_id"], "member"
            )
        assert exc.value.code == "USER_NOT_FOUND"

    def test_only_owner_grants_ownership(self, seed_data, newcomer_id):
        with pytest.raises(Forbidden) as exc:
            board_service.add_board_member(
                seed_data["board_id"], newcomer_id, seed_data["admin_id"], "owner"
            )
        assert exc.value.code == "BOARD_OWNER_MODIFY_FORBIDDEN"

        member = board_service.add_board_member(
            seed_data["board_id"], newcomer_id, seed_data["owner_id"], "owner"
        )
        assert member["role"] == "owner"


class TestUpdateMemberRole:

    def test_admin_promotes_viewer(self, seed_data):
        member = board_service.update_board_member_role(
            seed_data["board_id"], seed_data["viewer_id"], seed_data["admin_id"], "member"
        )
        db.session.commit()

        assert member["role"] == "member"
        assert _role(seed_data["board_id"], seed_data["viewer_id"]) == "member"

    @pytest.mark.parametrize("actor", ["owner_id", "admin_id"])
    def test_sole_owner_cannot_be_demoted(self, seed_data, actor):
        with pytest.raises(Forbidden) as exc:
            board_service.update_board_member_role(
                seed_data["board_id"], seed_data["owner_id"], seed_data[actor], "admin"
            )
        db.session.rollback()

        assert exc.value.code == "BOARD_OWNER_MODIFY_FORBIDDEN"
        assert _role(seed_data["board_id"], seed_data["owner_id"]) == "owner"

    def test_owner_demotes_co_owner(self, seed_data, newcomer_id):
        board_service.add_board_member(
            seed_data["board_id"], newcomer_id, seed_data["owner_id"], "owner"
        )
        db.session.commit()

        member = board_service.update_board_member_role(
            seed_data["board_id"], newcomer_id, seed_data["owner_id"], "viewer"
        )
        assert member["role"] == "viewer"

    def test_admin_cannot_grant_owner(self, seed_data):
        with pytest.raises(Forbidden) as exc:
            board_service.update_board_member_role(
                seed_data["board_id"], seed_data["member_id"], seed_data["admin_id"], "owner"
            )
        assert exc.value.code == "BOARD_OWNER_MODIFY_FORBIDDEN"

    def test_viewer_cannot_change_roles(self, seed_data):
        with pytest.raises(Forbidden) as exc:
            board_service.update_board_member_role(
                seed_data["board_id"], seed_data["member_id"], seed_data["viewer_id"], "viewer"
            )
        assert exc.value.code == "BOARD_MEMBER_FORBIDDEN"

    def test_unknown_member(self, seed_data):
        with pytest.raises(NotFound) as exc:
            board_service.update_board_member_role(
                seed_data["board_id"], seed_data["outsider_id"], seed_data["owner_id"], "viewer"
            )
        assert exc.value.code == "BOARD_MEMBER_NOT_FOUND"

    def test_invalid_role(self, seed_data):
        with pytest.raises(InvalidInput) as exc:
            board_service.update_board_member_role(
                seed_data["board_id"], seed_data["member_id"], seed_data["owner_id"], "root"
            )
        assert exc.value.code == "INVALID_ROLE"


class TestRemoveMember:

    def test_admin_removes_member(self, seed_data):
        board_service.remove_board_member(
            seed_data["board_id"], seed_data["member_id"], seed_data["admin_id"]
        )
        db.session.commit()

        assert _role(seed_data["board_id"], seed_data["member_id"]) is None

    @pytest.mark.parametrize("actor", ["owner_id", "admin_id"])
    def test_owner_cannot_be_removed(self, seed_data, actor):
        with pytest.raises(Forbidden) as exc:
            board_service.remove_board_member(
                seed_data["board_id"], seed_data["owner_id"], seed_data[actor]
            )
        db.session.rollback()

        assert exc.value.code == "BOARD_OWNER_REMOVE_FORBIDDEN"
        assert _role(seed_data["board_id"], seed_data["owner_id"]) == "owner"

    def test_member_cannot_remove(self, seed_data):
        with pytest.raises(Forbidden) as exc:
            board_service.remove_board_member(
                seed_data["board_id"], seed_data["viewer_id"], seed_data["member_id"]
            )
        assert exc.value.code == "BOARD_MEMBER_FORBIDDEN"

    def test_removed_member_loses_access(self, seed_data):
        board_service.remove_board_member(
            seed_data["board_id"], seed_data["viewer_id"], seed_data["owner_id"]
        )
        db.session.commit()

        with pytest.raises(NotFound):
            board_service.get_board_detail(seed_data["board_id"], seed_data["viewer_id"])


class TestMemberRoutes:

    def test_add_change_remove(self, client, seed_data):
        _login(client, "owner@kanban.local")
        url = f"/api/boards/{seed_data['board_id']}/members"

        resp = client.post(url, json={"user_id": seed_data["outsider_id"], "role": "viewer"})
        assert resp.status_code == 201
        assert resp.get_json()["data"]["member"]["role"] == "viewer"

        resp = client.patch(f"{url}/{seed_data['outsider_id']}", json={"role": "admin"})
        assert resp.status_code == 200
        assert resp.get_json()["data"]["member"]["role"] == "admin"

        resp = client.delete(f"{url}/{seed_data['outsider_id']}")
        assert resp.status_code == 200

        resp = client.get(url)
        user_ids = [m["user_id"] for m in resp.get_json()["data"]["members"]]
        assert seed_data["outsider_id"] not in user_ids

    def test_remove_owner_is_403(self, client, seed_data):
        _login(client, "admin@kanban.local")
        resp = client.delete(f"/api/boards/{seed_data['board_id']}/members/{seed_data['owner_id']}")

        assert resp.status_code == 403
        assert resp.get_json()["code"] == "BOARD_OWNER_REMOVE_FORBIDDEN"

    def test_duplicate_member_is_409(self, client, seed_data):
        _login(client, "owner@kanban.local")
        resp = client.post(f"/api/boards/{seed_data['board_id']}/members", json={
            "user_id": seed_data["member_id"], "role": "viewer",
        })

        assert resp.status_code == 409
        assert resp.get_json()["code"] == "BOARD_MEMBER_EXISTS"
