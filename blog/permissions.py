"""
Capability predicates.

Every ownership or role decision the views and the moderation workflow
make goes through one of these functions, so the rules live in one place.
They answer True/False and never touch the database except for block
lookups.
"""

from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from .models import Block


def can_moderate(actor):
    return bool(actor and actor.is_authenticated and actor.is_admin)


def can_be_moderated(target):
    """Admins can never be suspended, blocked or deleted."""
    return not target.is_admin


def is_actively_suspended(user, now=None):
    if not user.is_suspended:
        return False
    if not settings.SUSPENSION_AUTO_EXPIRE or user.suspended_until is None:
        return True
    return user.suspended_until > (now or timezone.now())


def not_suspended_q(now=None):
    """Queryset filter matching users who are not actively suspended."""
    active = Q(is_suspended=False)
    if settings.SUSPENSION_AUTO_EXPIRE:
        active |= Q(suspended_until__lte=now or timezone.now())
    return active


def is_owner(actor, obj, field='author_id'):
    return bool(actor and actor.is_authenticated and getattr(obj, field) == actor.pk)


def can_delete_post(actor, post):
    return is_owner(actor, post) or can_moderate(actor)


def can_archive_post(actor, post):
    return is_owner(actor, post)


def can_restrict_comments(actor, post):
    return is_owner(actor, post)


def can_publish(actor):
    return actor.is_authenticated and not is_actively_suspended(actor)


def can_comment(actor, post):
    if not can_publish(actor):
        return False
    return not post.restrict_comments or is_owner(actor, post)


def can_delete_comment(actor, comment):
    return is_owner(actor, comment) or can_moderate(actor)


def hidden_user_ids(actor):
    """Ids of users on either side of a block with the actor."""
    if actor is None or not actor.is_authenticated:
        return set()
    edges = Block.objects.filter(Q(blocker=actor) | Q(blocked=actor)).values_list(
        'blocker_id', 'blocked_id'
    )
    ids = set()
    for blocker_id, blocked_id in edges:
        ids.add(blocked_id if blocker_id == actor.pk else blocker_id)
    return ids


def can_interact(actor, other):
    if actor is None or not actor.is_authenticated or actor.pk == other.pk:
        return True
    return not Block.objects.filter(
        Q(blocker=actor, blocked=other) | Q(blocker=other, blocked=actor)
    ).exists()


def can_view_post(actor, post):
    if post.is_deleted:
        return False
    if post.is_archived and not is_owner(actor, post):
        return False
    return can_interact(actor, post.author)


def can_view_profile(actor, target):
    return can_interact(actor, target)
