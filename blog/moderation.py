"""
================================================================================
INKWELL BLOG - MODERATION WORKFLOW
================================================================================

@file        moderation.py
@description State transitions for posts, reports, users and categories

MODULE PURPOSE
================================================================================
Every mutation that touches more than one row, or that must leave an audit
row behind, lives here. Each public function:

    1. checks the actor's capability (blog.permissions)
    2. validates its input completely
    3. opens transaction.atomic(), re-reads what it mutates under a row lock
    4. applies the change and writes the audit row in the same transaction

An exception at any step leaves the database untouched.

STATE MACHINES
================================================================================
Post:      active <-> archived ; active|archived -> deleted (terminal)
Report:    pending -> resolved | dismissed (both terminal)
User:      active <-> suspended ; any non-admin -> removed (cascade)
Block:     one directed edge per (blocker, blocked)
Category:  suggested -> approved | removed ; approved -> removed

================================================================================
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from . import audit
from .errors import Conflict, Forbidden, InvalidInput, NotFound
from .models import (
    REPORT_DISMISSED, REPORT_PENDING, REPORT_RESOLVED,
    ActionType, Block, Category, Comment, Post, Report, User,
)
from .permissions import (
    can_archive_post, can_be_moderated, can_delete_post, can_moderate, can_restrict_comments, is_owner,
)
from .utils import parse_id_list, parse_positive_int

logger = logging.getLogger(__name__)

OWN_POST_DELETE_REASON = "User deleted own post"


def _require_moderator(actor):
    if not can_moderate(actor):
        raise Forbidden("Admin access required")


def _require_reason(reason):
    reason = (reason or '').strip()
    if not reason:
        raise InvalidInput("Reason is required")
    return reason


# ============================================================================
# POSTS
# ============================================================================

def _mark_post_deleted(post):
    post.is_deleted = True
    post.save(update_fields=['is_deleted', 'updated_at'])
    return Comment.objects.filter(post=post, is_deleted=False).update(is_deleted=True)


def soft_delete_post(actor, post, reason=None):
    """
    Soft-delete a post and every comment under it.

    The owner may delete without a reason; an admin deleting someone
    else's post must give one. Archived posts can be deleted too.
    """
    if post.is_deleted:
        raise NotFound("Post not found")
    if not can_delete_post(actor, post):
        raise Forbidden("Unauthorized to delete this post")

    if is_owner(actor, post):
        reason = (reason or '').strip() or OWN_POST_DELETE_REASON
    else:
        reason = _require_reason(reason)

    with transaction.atomic():
        locked = Post.objects.select_for_update().get(pk=post.pk)
        if locked.is_deleted:
            raise NotFound("Post not found")
        comments = _mark_post_deleted(locked)
        audit.record(actor, ActionType.DELETE_POST, target_post=locked, reason=reason)

    post.is_deleted = True
    logger.info(f"Post {post.pk} deleted by user {actor.pk} ({comments} comments cascaded)")
    return post


def bulk_delete_posts(admin, post_ids, reason):
    _require_moderator(admin)
    reason = _require_reason(reason)
    ids = parse_id_list(post_ids, 'post ID')
    if not ids:
        raise InvalidInput("Post IDs array is required")

    posts = list(Post.objects.filter(pk__in=ids, is_deleted=False))
    if len(posts) != len(ids):
        raise NotFound("One or more posts not found")

    with transaction.atomic():
        for post in posts:
            locked = Post.objects.select_for_update().get(pk=post.pk)
            if locked.is_deleted:
                raise NotFound("One or more posts not found")
            _mark_post_deleted(locked)
            audit.record(admin, ActionType.DELETE_POST, target_post=locked, reason=reason)

    logger.info(f"Admin {admin.pk} bulk-deleted posts {ids}")
    return len(posts)


def toggle_archive(actor, post):
    if post.is_deleted:
        raise NotFound("Post not found")
    if not can_archive_post(actor, post):
        raise Forbidden("Unauthorized to archive this post")
    post.is_archived = not post.is_archived
    post.save(update_fields=['is_archived', 'updated_at'])
    return post


def toggle_restrict_comments(actor, post):
    if post.is_deleted or post.is_archived:
        raise NotFound("Post not found")
    if not can_restrict_comments(actor, post):
        raise Forbidden("Unauthorized to restrict comments on this post")
    post.restrict_comments = not post.restrict_comments
    post.save(update_fields=['restrict_comments', 'updated_at'])
    return post


# ============================================================================
# REPORTS
# ============================================================================

def _lock_pending_report(report):
    locked = Report.objects.select_for_update().select_related('post').get(pk=report.pk)
    if locked.status != REPORT_PENDING:
        raise Conflict(f"Report already {locked.status}")
    return locked


def resolve_report(admin, report, reason):
    """
    Resolve a report by taking its post down.

    Writes delete_post + resolve_report audit rows, or only resolve_report
    when the post was already deleted or archived.
    """
    _require_moderator(admin)
    reason = _require_reason(reason)

    with transaction.atomic():
        locked = _lock_pending_report(report)
        post = Post.objects.select_for_update().get(pk=locked.post_id)

        if not post.is_deleted and not post.is_archived:
            _mark_post_deleted(post)
            audit.record(
                admin, ActionType.DELETE_POST, target_post=post,
                reason=f"Post deleted due to resolved report: {reason}",
            )

        locked.status = REPORT_RESOLVED
        locked.admin_notes = reason
        locked.resolved_at = timezone.now()
        locked.save(update_fields=['status', 'admin_notes', 'resolved_at', 'updated_at'])
        audit.record(admin, ActionType.RESOLVE_REPORT, target_report=locked,
                     target_post=post, reason=reason)

    logger.info(f"Report {locked.pk} resolved by admin {admin.pk}")
    return locked


def dismiss_report(admin, report, reason):
    _require_moderator(admin)
    reason = _require_reason(reason)

    with transaction.atomic():
        locked = _lock_pending_report(report)
        locked.status = REPORT_DISMISSED
        locked.admin_notes = reason
        locked.resolved_at = timezone.now()
        locked.save(update_fields=['status', 'admin_notes', 'resolved_at', 'updated_at'])
        audit.record(admin, ActionType.DISMISS_REPORT, target_report=locked, reason=reason)

    logger.info(f"Report {locked.pk} dismissed by admin {admin.pk}")
    return locked


# ============================================================================
# USERS: SUSPENSION & BLOCKING
# ============================================================================

def suspend_user(admin, target, reason, duration_days):
    _require_moderator(admin)
    if not can_be_moderated(target):
        raise Forbidden("Cannot suspend an admin")
    reason = _require_reason(reason)
    days = parse_positive_int(duration_days, "Duration must be a positive whole number of days")

    with transaction.atomic():
        locked = User.objects.select_for_update().get(pk=target.pk)
        locked.is_suspended = True
        locked.suspended_until = timezone.now() + timedelta(days=days)
        locked.save(update_fields=['is_suspended', 'suspended_until', 'updated_at'])
        audit.record(
            admin, ActionType.SUSPEND_USER, target_user=locked, reason=reason,
            details=f"Suspended until {locked.suspended_until.isoformat()}",
        )

    logger.info(f"User {locked.pk} suspended for {days} days by admin {admin.pk}")
    return locked


def unsuspend_user(admin, target, reason):
    _require_moderator(admin)
    reason = _require_reason(reason)

    with transaction.atomic():
        locked = User.objects.select_for_update().get(pk=target.pk)
        if not locked.is_suspended:
            raise Conflict("User is not suspended")
        locked.is_suspended = False
        locked.suspended_until = None
        locked.save(update_fields=['is_suspended', 'suspended_until', 'updated_at'])
        audit.record(admin, ActionType.UNSUSPEND_USER, target_user=locked, reason=reason)

    logger.info(f"User {locked.pk} unsuspended by admin {admin.pk}")
    return locked


def block_user(actor, target):
    """Create the actor -> target edge. Returns False if it already existed."""
    if actor.pk == target.pk:
        raise InvalidInput("Cannot block yourself")
    if not can_be_moderated(target):
        raise Forbidden("Cannot block an admin")
    _, created = Block.objects.get_or_create(blocker=actor, blocked=target)
    return created


def unblock_user(actor, target):
    if actor.pk == target.pk:
        raise InvalidInput("Cannot unblock yourself")
    deleted, _ = Block.objects.filter(blocker=actor, blocked=target).delete()
    return deleted > 0


def admin_block_user(admin, target, reason):
    _require_moderator(admin)
    if not can_be_moderated(target):
        raise Forbidden("Cannot block an admin")
    reason = _require_reason(reason)

    with transaction.atomic():
        block_user(admin, target)
        audit.record(admin, ActionType.BLOCK_USER, target_user=target, reason=reason)

    logger.info(f"User {target.pk} blocked by admin {admin.pk}")


# ============================================================================
# CATEGORIES
# ============================================================================

def _clean_category_name(name):
    name = (name or '').strip() if isinstance(name, str) else ''
    if not name:
        raise InvalidInput("Category name is required")
    if len(name) > Category._meta.get_field('name').max_length:
        raise InvalidInput("Category name is too long")
    return name


def _is_general(category):
    return category.name.lower() == settings.GENERAL_CATEGORY_NAME.lower()


def ensure_general_category():
    """Return the always-approved fallback category, creating it if needed."""
    name = settings.GENERAL_CATEGORY_NAME
    category = Category.objects.filter(name__iexact=name).first()
    if category is None:
        return Category.objects.create(name=name, is_approved=True, suggested_by=None)
    if not category.is_approved or category.suggested_by_id is not None:
        category.is_approved = True
        category.suggested_by = None
        category.save(update_fields=['is_approved', 'suggested_by', 'updated_at'])
    return category


def _create_category(name, *, is_approved, suggested_by, duplicate_message):
    if Category.objects.filter(name__iexact=name).exists():
        raise InvalidInput(duplicate_message)
    try:
        with transaction.atomic():
            return Category.objects.create(
                name=name, is_approved=is_approved, suggested_by=suggested_by
            )
    except IntegrityError:
        raise InvalidInput(duplicate_message)


def suggest_category(actor, name):
    name = _clean_category_name(name)
    category = _create_category(
        name, is_approved=False, suggested_by=actor,
        duplicate_message="Category already exists or has been suggested",
    )
    logger.info(f"Category '{name}' suggested by user {actor.pk}")
    return category


def create_category(admin, name):
    _require_moderator(admin)
    name = _clean_category_name(name)
    with transaction.atomic():
        category = _create_category(
            name, is_approved=True, suggested_by=None,
            duplicate_message="Category already exists",
        )
        audit.record(
            admin, ActionType.APPROVE_CATEGORY, reason="Category created by admin",
            details=f"Created category: {category.name}",
        )
    return category


def _posts_referencing(category, *relations):
    ids = set()
    for relation in relations:
        ids.update(
            relation.through.objects.filter(category_id=category.pk)
            .values_list('post_id', flat=True)
        )
    return ids


def _add_category(post_ids, category):
    through = Post.categories.through
    through.objects.bulk_create(
        [through(post_id=pid, category_id=category.pk) for pid in post_ids],
        ignore_conflicts=True,
    )


def approve_category(admin, category, reason=None):
    """Approve a suggestion; posts suggesting it now carry it for real."""
    _require_moderator(admin)
    reason = (reason or '').strip() or "Category approved"

    with transaction.atomic():
        locked = Category.objects.select_for_update().get(pk=category.pk)
        if locked.is_approved:
            raise Conflict("Category already approved")
        locked.is_approved = True
        locked.save(update_fields=['is_approved', 'updated_at'])

        post_ids = _posts_referencing(locked, Post.suggested_categories)
        _add_category(post_ids, locked)
        Post.suggested_categories.through.objects.filter(category_id=locked.pk).delete()

        audit.record(
            admin, ActionType.APPROVE_CATEGORY, target_user=locked.suggested_by_id,
            reason=reason, details=f"Approved category: {locked.name}",
        )

    logger.info(f"Category {locked.pk} approved; {len(post_ids)} posts updated")
    return locked, len(post_ids)


def reject_category(admin, category, reason=None):
    """Reject a suggestion; posts that suggested it fall back to General."""
    _require_moderator(admin)
    reason = (reason or '').strip() or "Category rejected"

    with transaction.atomic():
        locked = Category.objects.select_for_update().get(pk=category.pk)
        if locked.is_approved:
            raise Conflict("Category already approved")
        general = ensure_general_category()

        post_ids = _posts_referencing(locked, Post.suggested_categories)
        _add_category(post_ids, general)
        name, suggested_by_id = locked.name, locked.suggested_by_id
        locked.delete()

        audit.record(
            admin, ActionType.REJECT_CATEGORY, target_user=suggested_by_id,
            reason=reason, details=f"Rejected category: {name}",
        )

    logger.info(f"Category '{name}' rejected; {len(post_ids)} posts moved to General")
    return len(post_ids)


def delete_category(admin, category, reason):
    """Remove a category; every post that referenced it gains General."""
    _require_moderator(admin)
    reason = _require_reason(reason)
    if _is_general(category):
        raise InvalidInput("The General category cannot be deleted")

    with transaction.atomic():
        locked = Category.objects.select_for_update().get(pk=category.pk)
        general = ensure_general_category()

        post_ids = _posts_referencing(locked, Post.categories, Post.suggested_categories)
        _add_category(post_ids, general)
        name, suggested_by_id = locked.name, locked.suggested_by_id
        locked.delete()

        audit.record(
            admin, ActionType.DELETE_CATEGORY, target_user=suggested_by_id, reason=reason,
            details=f"Deleted category: {name}, reassigned {len(post_ids)} posts to General",
        )

    logger.info(f"Category '{name}' deleted by admin {admin.pk}")
    return len(post_ids)


# ============================================================================
# USER DELETION (CASCADE)
# ============================================================================

def _check_deletable(target):
    if not can_be_moderated(target):
        raise Forbidden("Cannot delete an admin")


def _purge_user(admin, target, reason, details):
    target_id = target.pk
    with transaction.atomic():
        post_ids = list(Post.objects.filter(author_id=target_id).values_list('pk', flat=True))

        Comment.objects.filter(Q(post_id__in=post_ids) | Q(author_id=target_id)).delete()
        Report.objects.filter(Q(post_id__in=post_ids) | Q(reported_by_id=target_id)).delete()
        Post.objects.filter(pk__in=post_ids).delete()

        Category.objects.filter(suggested_by_id=target_id, is_approved=False).delete()
        Category.objects.filter(suggested_by_id=target_id).update(suggested_by=None)

        Block.objects.filter(Q(blocker_id=target_id) | Q(blocked_id=target_id)).delete()
        for relation in (Post.likes, Post.saved_by, Post.shares):
            relation.through.objects.filter(user_id=target_id).delete()

        User.objects.filter(pk=target_id).delete()
        audit.record(admin, ActionType.DELETE_USER, target_user=target_id,
                     reason=reason, details=details)

    logger.info(f"User {target_id} and {len(post_ids)} posts deleted by admin {admin.pk}")


def delete_user(admin, target, reason=None, details=''):
    _require_moderator(admin)
    _check_deletable(target)
    reason = (reason or '').strip() or "User deletion by admin"
    _purge_user(admin, target, reason, details)


def bulk_delete_users(admin, *, user_ids=None, delete_all=False, reason=None, details=''):
    """
    Delete many users in one transaction.

    The whole target set is validated before the first write; if any id
    is malformed, unknown or an admin (the caller included), nothing is deleted.
    """
    _require_moderator(admin)
    reason = _require_reason(reason)

    if delete_all:
        targets = list(User.objects.exclude(pk=admin.pk).filter(is_admin=False))
    else:
        if not user_ids:
            raise InvalidInput("User IDs array is required unless deleteAll is true")
        ids = parse_id_list(user_ids, 'user ID')
        targets = list(User.objects.filter(pk__in=ids))
        if len(targets) != len(ids):
            raise NotFound("One or more users not found")
        for target in targets:
            _check_deletable(target)

    with transaction.atomic():
        for target in targets:
            _purge_user(admin, target, reason, details)

    return len(targets)
