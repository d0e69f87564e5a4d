from __future__ import annotations

import pytest

from blog import moderation
from blog.errors import Forbidden, InvalidInput
from blog.models import ActionType, AdminAction, Block

pytestmark = pytest.mark.django_db


def test_block_and_unblock_are_inverse(alice, bob) -> None:
    assert moderation.block_user(alice, bob) is True
    assert list(alice.blocked_users) == [bob]
    assert list(bob.blocked_by_users) == [alice]
    assert not bob.blocked_users.exists()

    assert moderation.block_user(alice, bob) is False
    assert Block.objects.count() == 1

    assert moderation.unblock_user(alice, bob) is True
    assert not alice.blocked_users.exists()
    assert not bob.blocked_by_users.exists()


def test_self_block_rejected(alice) -> None:
    with pytest.raises(InvalidInput):
        moderation.block_user(alice, alice)


def test_admin_cannot_be_blocked(alice, admin, make_user) -> None:
    other_admin = make_user("root2", is_admin=True)
    with pytest.raises(Forbidden):
        moderation.block_user(alice, admin)
    with pytest.raises(Forbidden):
        moderation.admin_block_user(other_admin, admin, reason="no")
    assert not AdminAction.objects.exists()


def test_block_api_hides_content_both_ways(api, alice, bob, make_post) -> None:
    alices = make_post(alice, "from alice")
    bobs = make_post(bob, "from bob")

    resp = api.post(f"/api/users/block/{bob.pk}", user=alice)
    assert resp.status_code == 200

    assert [p["id"] for p in api.get("/api/posts", user=alice).json()] == [alices.pk]
    assert [p["id"] for p in api.get("/api/posts", user=bob).json()] == [bobs.pk]

    assert api.get(f"/api/posts/{bobs.pk}", user=alice).status_code == 404
    assert api.get(f"/api/posts/{alices.pk}", user=bob).status_code == 404
    assert api.get("/api/users/bob", user=alice).status_code == 404
    assert api.get("/api/users/alice", user=bob).status_code == 404
    assert api.post(f"/api/comments/{alices.pk}", {"content": "hey"}, user=bob).status_code == 404

    found = api.get("/api/search", user=alice, q="from").json()
    assert [p["id"] for p in found["posts"]] == [alices.pk]
    assert api.get("/api/search", user=alice, q="bob").json()["users"] == []

    blocked = api.get("/api/users/blocked", user=alice).json()
    assert [u["username"] for u in blocked] == ["bob"]

    api.post(f"/api/users/unblock/{bob.pk}", user=alice)
    assert api.get(f"/api/posts/{bobs.pk}", user=alice).status_code == 200


def test_block_api_validation(api, alice, admin) -> None:
    assert api.post(f"/api/users/block/{alice.pk}", user=alice).status_code == 400
    assert api.post(f"/api/users/block/{admin.pk}", user=alice).status_code == 403
    assert api.post("/api/users/block/999999", user=alice).status_code == 404
    assert api.post("/api/users/block/nope", user=alice).status_code == 400


def test_admin_block_writes_audit_row(api, admin, bob) -> None:
    resp = api.post(f"/api/admin/block/{bob.pk}", {"reason": "harassment"}, user=admin)
    assert resp.status_code == 200
    assert bob in admin.blocked_users

    (row,) = AdminAction.objects.all()
    assert row.action_type == ActionType.BLOCK_USER
    assert row.target_user_id == bob.pk
    assert row.reason == "harassment"


def test_admin_block_requires_reason(api, admin, bob) -> None:
    resp = api.post(f"/api/admin/block/{bob.pk}", {"reason": "  "}, user=admin)
    assert resp.status_code == 400
    assert not Block.objects.exists()
