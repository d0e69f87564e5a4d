"""
Append-only audit log of privileged actions.

record() must be called inside the same transaction.atomic() block as the
change it describes. It raises on any failure, which rolls the change back
with it: nothing counts as done without its audit row.
"""

import logging

from .errors import InvalidInput
from .models import ActionType, AdminAction

logger = logging.getLogger(__name__)


def _pk(target):
    # Accepts an instance or a bare id; deleted instances have lost their pk.
    return getattr(target, 'pk', target)


def record(admin, action_type, *, reason, target_user=None, target_post=None,
           target_report=None, details=''):
    reason = (reason or '').strip()
    if not reason:
        raise InvalidInput("Reason is required")
    if action_type not in ActionType.values:
        raise ValueError(f"Unknown audit action type: {action_type}")

    action = AdminAction.objects.create(
        admin=admin,
        action_type=action_type,
        target_user_id=_pk(target_user),
        target_post_id=_pk(target_post),
        target_report_id=_pk(target_report),
        reason=reason,
        details=details or '',
    )
    logger.info(
        f"audit: admin={admin.pk} action={action_type} user={action.target_user_id} "
        f"post={action.target_post_id} report={action.target_report_id}"
    )
    return action


def history(*, target_user=None, target_post=None, target_report=None, action_type=None):
    """Audit rows in chronological order, optionally narrowed to one target."""
    qs = AdminAction.objects.all()
    if target_user is not None:
        qs = qs.filter(target_user_id=_pk(target_user))
    if target_post is not None:
        qs = qs.filter(target_post_id=_pk(target_post))
    if target_report is not None:
        qs = qs.filter(target_report_id=_pk(target_report))
    if action_type is not None:
        qs = qs.filter(action_type=action_type)
    return qs.order_by('created_at', 'id')
