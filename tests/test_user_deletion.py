from __future__ import annotations

import pytest

from blog import moderation
from blog.errors import Forbidden, InvalidInput, NotFound
from blog.models import ActionType, AdminAction, Block, Category, Comment, Post, Report, User

pytestmark = pytest.mark.django_db


def test_delete_user_cascade(api, admin, alice, bob, make_user, make_post, tech) -> None:
    carol = make_user("carol")
    own = [make_post(bob, f"bob {i}") for i in range(3)]
    others = make_post(alice, "alice post")

    for post in own[:2]:
        Comment.objects.create(post=post, author=bob, content="self")
    for _ in range(3):
        Comment.objects.create(post=others, author=bob, content="elsewhere")
    Comment.objects.create(post=others, author=alice, content="kept")
    Report.objects.create(post=others, reported_by=bob, reason="Spam")

    others.likes.add(bob)
    others.saved_by.add(bob)
    others.shares.add(bob)
    moderation.block_user(alice, bob)
    moderation.block_user(bob, carol)
    pending = moderation.suggest_category(bob, "Pottery")
    approved = moderation.suggest_category(bob, "Chess")
    moderation.approve_category(admin, approved)

    resp = api.delete(f"/api/admin/users/{bob.pk}", {"reason": "spam account"}, user=admin)
    assert resp.status_code == 200

    assert not User.objects.filter(pk=bob.pk).exists()
    assert not Post.objects.filter(pk__in=[p.pk for p in own]).exists()
    assert not Comment.objects.filter(author_id=bob.pk).exists()
    assert list(Comment.objects.values_list("content", flat=True)) == ["kept"]
    assert not Report.objects.filter(reported_by_id=bob.pk).exists()
    assert not Block.objects.exists()
    assert not alice.blocked_users.exists()
    assert not carol.blocked_by_users.exists()
    assert not others.likes.exists()
    assert not others.saved_by.exists()
    assert not others.shares.exists()

    assert not Category.objects.filter(pk=pending.pk).exists()
    approved.refresh_from_db()
    assert approved.suggested_by is None

    row = AdminAction.objects.get(action_type=ActionType.DELETE_USER)
    assert row.target_user_id == bob.pk
    assert row.reason == "spam account"


def test_audit_rows_survive_target_deletion(admin, bob, make_post) -> None:
    post = make_post(bob)
    moderation.soft_delete_post(admin, post, "spam")
    moderation.delete_user(admin, bob, "spam account")

    rows = list(AdminAction.objects.all())
    assert [r.target_post_id for r in rows] == [post.pk, None]
    assert rows[1].target_user_id == bob.pk


def test_delete_user_rules(api, admin, alice) -> None:
    with pytest.raises(Forbidden):
        moderation.delete_user(admin, admin, "oops")
    resp = api.delete(f"/api/admin/users/{admin.pk}", {"reason": "oops"}, user=admin)
    assert resp.status_code == 403
    assert User.objects.filter(pk=admin.pk).exists()
    with pytest.raises(Forbidden):
        moderation.delete_user(alice, admin, "nope")


def test_bulk_delete_rejects_whole_set(api, admin, alice, bob, make_user) -> None:
    other_admin = make_user("root2", is_admin=True)

    resp = api.delete(
        "/api/admin/users",
        {"userIds": [alice.pk, other_admin.pk], "reason": "cleanup"},
        user=admin,
    )
    assert resp.status_code == 403
    assert User.objects.filter(pk=alice.pk).exists()

    with pytest.raises(NotFound):
        moderation.bulk_delete_users(admin, user_ids=[alice.pk, 999999], reason="cleanup")
    with pytest.raises(InvalidInput):
        moderation.bulk_delete_users(admin, user_ids=[alice.pk, "x"], reason="cleanup")
    with pytest.raises(Forbidden):
        moderation.bulk_delete_users(admin, user_ids=[alice.pk, admin.pk], reason="cleanup")
    assert User.objects.filter(pk=alice.pk).exists()
    with pytest.raises(InvalidInput):
        moderation.bulk_delete_users(admin, user_ids=[alice.pk], reason="")
    assert User.objects.filter(pk__in=[alice.pk, bob.pk]).count() == 2
    assert not AdminAction.objects.exists()

    resp = api.delete("/api/admin/users", {"userIds": [alice.pk, bob.pk], "reason": "cleanup"}, user=admin)
    assert resp.json()["deleted"] == 2
    assert AdminAction.objects.filter(action_type=ActionType.DELETE_USER).count() == 2


def test_bulk_delete_all_spares_admins(admin, alice, bob, make_user) -> None:
    other_admin = make_user("root2", is_admin=True)
    assert moderation.bulk_delete_users(admin, delete_all=True, reason="reset") == 2
    assert set(User.objects.values_list("pk", flat=True)) == {admin.pk, other_admin.pk}


def test_admin_user_listing(api, admin, alice) -> None:
    users = api.get("/api/admin/users", user=admin).json()
    assert {u["username"] for u in users} == {"root", "alice"}
    assert all("email" in u for u in users)
