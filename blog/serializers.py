"""
JSON payloads.

Keys are camelCase because the single-page client consumes them directly.
Post payloads expect a Post fetched through Post.objects.with_engagement()
so the counters and viewer flags are already annotated.
"""


def _ts(value):
    return value.isoformat() if value else None


def author_payload(user):
    return {
        "id": user.pk,
        "name": user.name,
        "username": user.username,
        "avatar": user.avatar,
    }


def user_payload(user, private=False):
    data = {
        **author_payload(user),
        "bio": user.bio,
        "isAdmin": user.is_admin,
        "isSuspended": user.is_suspended,
        "suspendedUntil": _ts(user.suspended_until),
        "createdAt": _ts(user.date_joined),
    }
    if private:
        data["email"] = user.email
    return data


def category_payload(category):
    return {
        "id": category.pk,
        "name": category.name,
        "isApproved": category.is_approved,
        "suggestedBy": category.suggested_by_id,
        "createdAt": _ts(category.created_at),
    }


def _category_ref(category):
    return {"id": category.pk, "name": category.name}


def post_payload(post):
    return {
        "id": post.pk,
        "author": author_payload(post.author),
        "content": post.content,
        "image": post.image,
        "tags": post.tags,
        "categories": [_category_ref(c) for c in post.categories.all()],
        "suggestedCategories": [_category_ref(c) for c in post.suggested_categories.all()],
        "isArchived": post.is_archived,
        "restrictComments": post.restrict_comments,
        "createdAt": _ts(post.created_at),
        "updatedAt": _ts(post.updated_at),
        "isLiked": bool(post.is_liked),
        "isSaved": bool(post.is_saved),
        "likes": post.like_count,
        "comments": post.comment_count,
        "shares": post.share_count,
    }


def comment_payload(comment):
    return {
        "id": comment.pk,
        "post": comment.post_id,
        "author": author_payload(comment.author),
        "content": comment.content,
        "createdAt": _ts(comment.created_at),
    }


def report_payload(report):
    return {
        "id": report.pk,
        "post": report.post_id,
        "reportedBy": author_payload(report.reported_by),
        "reason": report.reason,
        "message": report.message,
        "status": report.status,
        "adminNotes": report.admin_notes,
        "createdAt": _ts(report.created_at),
        "resolvedAt": _ts(report.resolved_at),
    }


def admin_action_payload(action):
    return {
        "id": action.pk,
        "admin": action.admin_id,
        "actionType": action.action_type,
        "targetUser": action.target_user_id,
        "targetPost": action.target_post_id,
        "targetReport": action.target_report_id,
        "reason": action.reason,
        "details": action.details,
        "createdAt": _ts(action.created_at),
    }
