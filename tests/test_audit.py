from __future__ import annotations

import pytest

from blog import audit, moderation
from blog.errors import AuditLogImmutable, InvalidInput
from blog.models import ActionType, AdminAction

pytestmark = pytest.mark.django_db


def test_record_requires_reason(admin) -> None:
    with pytest.raises(InvalidInput):
        audit.record(admin, ActionType.DELETE_POST, reason="   ")
    with pytest.raises(ValueError):
        audit.record(admin, "launch_missiles", reason="because")
    assert not AdminAction.objects.exists()


def test_rows_are_immutable(admin, bob) -> None:
    row = audit.record(admin, ActionType.BLOCK_USER, target_user=bob, reason="abuse")

    row.reason = "edited"
    with pytest.raises(AuditLogImmutable):
        row.save()
    with pytest.raises(AuditLogImmutable):
        row.delete()
    with pytest.raises(AuditLogImmutable):
        AdminAction.objects.filter(pk=row.pk).update(reason="edited")
    with pytest.raises(AuditLogImmutable):
        AdminAction.objects.all().delete()

    assert AdminAction.objects.get(pk=row.pk).reason == "abuse"


def test_failed_audit_write_rolls_back_the_action(monkeypatch, admin, alice, make_post) -> None:
    post = make_post(alice)

    def broken(*args, **kwargs):
        raise RuntimeError("audit store unavailable")

    monkeypatch.setattr(audit, "record", broken)
    with pytest.raises(RuntimeError):
        moderation.soft_delete_post(admin, post, "spam")

    post.refresh_from_db()
    assert not post.is_deleted
    assert not post.comments.filter(is_deleted=True).exists()


def test_each_mutation_writes_one_matching_row(admin, alice, bob, make_post) -> None:
    post = make_post(alice)
    steps = [
        (lambda: moderation.soft_delete_post(admin, post, "r1"), ActionType.DELETE_POST, "r1"),
        (lambda: moderation.admin_block_user(admin, bob, "r2"), ActionType.BLOCK_USER, "r2"),
        (lambda: moderation.suspend_user(admin, bob, "r3", 2), ActionType.SUSPEND_USER, "r3"),
        (lambda: moderation.unsuspend_user(admin, bob, "r4"), ActionType.UNSUSPEND_USER, "r4"),
    ]
    for run, action_type, reason in steps:
        before = AdminAction.objects.count()
        run()
        assert AdminAction.objects.count() == before + 1
        latest = AdminAction.objects.order_by("-id").first()
        assert (latest.action_type, latest.reason) == (action_type, reason)


def test_history_filters_and_api(api, admin, alice, bob, make_post) -> None:
    post = make_post(alice)
    moderation.admin_block_user(admin, bob, "abuse")
    moderation.soft_delete_post(admin, post, "spam")
    moderation.suspend_user(admin, bob, "cool off", 1)

    for_bob = list(audit.history(target_user=bob))
    assert [r.action_type for r in for_bob] == [ActionType.BLOCK_USER, ActionType.SUSPEND_USER]
    assert [r.action_type for r in audit.history(target_post=post.pk)] == [ActionType.DELETE_POST]

    listed = api.get("/api/admin/actions", user=admin).json()
    assert [r["actionType"] for r in listed] == ["block_user", "delete_post", "suspend_user"]
    by_type = api.get("/api/admin/actions", user=admin, type="suspend_user").json()
    assert [r["targetUser"] for r in by_type] == [bob.pk]
    assert api.get("/api/admin/actions", user=alice).status_code == 403
