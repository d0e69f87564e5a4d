from __future__ import annotations

from datetime import timedelta

import pytest
from django.utils import timezone

from blog import moderation
from blog.errors import Conflict, Forbidden, InvalidInput, NotFound
from blog.models import ActionType, AdminAction, Report
from blog.permissions import can_publish, is_actively_suspended
from tests.conftest import doc

pytestmark = pytest.mark.django_db


def _report(api, user, post, reason="Spam"):
    resp = api.post(f"/api/posts/{post.pk}/report", {"reason": reason, "message": "buy now"}, user=user)
    assert resp.status_code == 201
    return Report.objects.get(pk=resp.json()["report"])


def test_report_requires_known_reason(api, alice, bob, make_post) -> None:
    post = make_post(alice)
    assert api.post(f"/api/posts/{post.pk}/report", {"reason": "Boring"}, user=bob).status_code == 400
    assert api.post(f"/api/posts/{post.pk}/report", {}, user=bob).status_code == 400


def test_resolve_report_deletes_post_and_writes_two_rows(api, alice, bob, admin, make_post) -> None:
    post = make_post(alice)
    report = _report(api, bob, post)

    resp = api.post(f"/api/admin/reports/{report.pk}/resolve", {"reason": "confirmed spam"}, user=admin)
    assert resp.status_code == 200
    assert resp.json()["report"]["status"] == "resolved"

    post.refresh_from_db()
    report.refresh_from_db()
    assert post.is_deleted
    assert report.admin_notes == "confirmed spam"
    assert report.resolved_at is not None

    types = list(AdminAction.objects.values_list("action_type", flat=True))
    assert types == [ActionType.DELETE_POST, ActionType.RESOLVE_REPORT]


def test_resolve_report_on_already_deleted_post(api, alice, bob, admin, make_post) -> None:
    post = make_post(alice)
    report = _report(api, bob, post)
    moderation.soft_delete_post(admin, post, reason="removed earlier")
    before = AdminAction.objects.filter(action_type=ActionType.DELETE_POST).count()

    resolved = moderation.resolve_report(admin, report, "late report")

    assert resolved.status == "resolved"
    assert AdminAction.objects.filter(action_type=ActionType.DELETE_POST).count() == before
    assert AdminAction.objects.filter(action_type=ActionType.RESOLVE_REPORT).count() == 1


def test_report_transitions_are_terminal(api, alice, bob, admin, make_post) -> None:
    post = make_post(alice)
    report = _report(api, bob, post)

    dismissed = api.post(f"/api/admin/reports/{report.pk}/dismiss", {"reason": "not spam"}, user=admin)
    assert dismissed.status_code == 200
    post.refresh_from_db()
    assert not post.is_deleted

    again = api.post(f"/api/admin/reports/{report.pk}/resolve", {"reason": "changed mind"}, user=admin)
    assert again.status_code == 409
    assert list(AdminAction.objects.values_list("action_type", flat=True)) == [ActionType.DISMISS_REPORT]


def test_report_transition_requires_reason(alice, bob, admin, make_post) -> None:
    post = make_post(alice)
    report = Report.objects.create(post=post, reported_by=bob, reason="Spam")
    with pytest.raises(InvalidInput):
        moderation.dismiss_report(admin, report, "")
    with pytest.raises(Forbidden):
        moderation.resolve_report(bob, report, "I am not an admin")
    report.refresh_from_db()
    assert report.status == "pending"


def test_reports_listing_filters_by_status(api, alice, bob, admin, make_post) -> None:
    first = _report(api, bob, make_post(alice, "one"))
    second = _report(api, bob, make_post(alice, "two"))
    moderation.dismiss_report(admin, first, "fine")

    pending = api.get("/api/admin/reports", user=admin).json()
    assert [r["id"] for r in pending] == [second.pk]
    dismissed = api.get("/api/admin/reports", user=admin, status="dismissed").json()
    assert [r["id"] for r in dismissed] == [first.pk]
    assert len(api.get("/api/admin/reports", user=admin, status="all").json()) == 2
    assert api.get("/api/admin/reports", user=admin, status="bogus").status_code == 400


def test_suspend_sets_window(api, admin, bob) -> None:
    start = timezone.now()
    resp = api.post(f"/api/admin/suspend/{bob.pk}", {"reason": "cool off", "durationDays": 3}, user=admin)
    assert resp.status_code == 200

    bob.refresh_from_db()
    assert bob.is_suspended
    expected = start + timedelta(days=3)
    assert abs((bob.suspended_until - expected).total_seconds()) < 5

    (row,) = AdminAction.objects.all()
    assert row.action_type == ActionType.SUSPEND_USER
    assert row.reason == "cool off"
    assert row.details.startswith("Suspended until ")


@pytest.mark.parametrize("days", [0, -2, 1.5, "three", None, True])
def test_suspend_rejects_bad_duration(admin, bob, days) -> None:
    with pytest.raises(InvalidInput):
        moderation.suspend_user(admin, bob, "reason", days)
    bob.refresh_from_db()
    assert not bob.is_suspended


def test_admins_cannot_be_suspended_or_deleted(admin, make_user) -> None:
    other = make_user("root2", is_admin=True)
    with pytest.raises(Forbidden):
        moderation.suspend_user(other, admin, "reason", 1)
    with pytest.raises(Forbidden):
        moderation.delete_user(other, admin, "reason")
    assert not AdminAction.objects.exists()


def test_unsuspend(api, admin, bob) -> None:
    moderation.suspend_user(admin, bob, "cool off", 2)
    resp = api.post(f"/api/admin/unsuspend/{bob.pk}", {"reason": "appeal accepted"}, user=admin)
    assert resp.status_code == 200
    bob.refresh_from_db()
    assert not bob.is_suspended and bob.suspended_until is None

    with pytest.raises(Conflict):
        moderation.unsuspend_user(admin, bob, "again")


def test_suspended_user_cannot_publish(api, admin, alice, bob, make_post, tech) -> None:
    post = make_post(alice)
    moderation.suspend_user(admin, bob, "cool off", 1)

    assert api.post("/api/posts", {"content": doc(), "categoryIds": [tech.pk]}, user=bob).status_code == 403
    assert api.post(f"/api/comments/{post.pk}", {"content": "hi"}, user=bob).status_code == 403
    assert api.post(f"/api/posts/{post.pk}/report", {"reason": "Spam"}, user=bob).status_code == 403
    # Still authenticated for reads.
    assert api.get("/api/auth/me", user=bob).status_code == 200


def test_suspended_profile_is_403(api, admin, alice, bob) -> None:
    moderation.suspend_user(admin, bob, "cool off", 1)
    resp = api.get("/api/users/bob", user=alice)
    assert resp.status_code == 403
    assert resp.json()["message"] == "User is suspended"
    assert api.get("/api/users/nobody", user=alice).status_code == 404


def test_suspension_expiry_policy(settings, api, admin, alice, bob) -> None:
    moderation.suspend_user(admin, bob, "cool off", 1)
    bob.refresh_from_db()
    bob.suspended_until = timezone.now() - timedelta(minutes=1)
    bob.save(update_fields=["suspended_until"])
    bob.refresh_from_db()
    assert bob.is_suspended

    settings.SUSPENSION_AUTO_EXPIRE = False
    assert is_actively_suspended(bob)
    assert not can_publish(bob)
    assert api.get("/api/users/bob", user=alice).status_code == 403
    assert api.get("/api/search", user=alice, q="bob").json()["users"] == []

    settings.SUSPENSION_AUTO_EXPIRE = True
    assert not is_actively_suspended(bob)
    assert can_publish(bob)
    assert api.get("/api/users/bob", user=alice).status_code == 200
    found = api.get("/api/search", user=alice, q="bob").json()["users"]
    assert [u["username"] for u in found] == ["bob"]


def test_suspended_profile_hidden_by_block_is_404(api, admin, alice, bob) -> None:
    moderation.block_user(alice, bob)
    moderation.suspend_user(admin, bob, "cool off", 1)
    assert api.get("/api/users/bob", user=alice).status_code == 404


def test_admin_deletes_archived_post_with_reason(api, admin, alice, make_post) -> None:
    post = make_post(alice)
    moderation.toggle_archive(alice, post)

    assert api.delete(f"/api/admin/posts/{post.pk}", user=admin).status_code == 400
    resp = api.delete(f"/api/admin/posts/{post.pk}", {"reason": "illegal"}, user=admin)
    assert resp.status_code == 200

    post.refresh_from_db()
    assert post.is_deleted
    (row,) = AdminAction.objects.all()
    assert (row.action_type, row.target_post_id, row.reason) == (ActionType.DELETE_POST, post.pk, "illegal")


def test_bulk_post_delete_validates_first(admin, alice, make_post) -> None:
    first = make_post(alice, "one")
    second = make_post(alice, "two")

    with pytest.raises(NotFound):
        moderation.bulk_delete_posts(admin, [first.pk, 999999], "cleanup")
    first.refresh_from_db()
    assert not first.is_deleted

    assert moderation.bulk_delete_posts(admin, [first.pk, second.pk], "cleanup") == 2
    assert AdminAction.objects.filter(action_type=ActionType.DELETE_POST).count() == 2


def test_owner_delete_is_audited(alice, make_post) -> None:
    post = make_post(alice)
    moderation.soft_delete_post(alice, post)
    (row,) = AdminAction.objects.all()
    assert row.admin_id == alice.pk
    assert row.reason == "User deleted own post"


def test_malformed_report_reason_is_400(api, alice, bob, make_post) -> None:
    post = make_post(alice)
    for reason in (["Spam"], {"kind": "Spam"}, 5, "Boring"):
        resp = api.post(f"/api/posts/{post.pk}/report", {"reason": reason}, user=bob)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid report reason"
    assert not Report.objects.exists()
