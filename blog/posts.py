"""
Posts, engagement, comments and reports.

Everything a regular member does to content. Admin-only transitions live
in blog.moderation.
"""

import logging

from django.db import transaction
from django.db.models import Q

from . import storage
from .content import extract_text, parse_document
from .errors import AuthenticationRequired, Forbidden, InvalidInput, NotFound
from .models import REPORT_REASON_CHOICES, Category, Comment, Post, Report, User
from .permissions import (
    can_comment, can_delete_comment, can_publish, can_view_post, hidden_user_ids, not_suspended_q,
)
from .utils import parse_bool, parse_id, parse_id_list, parse_json_field

logger = logging.getLogger(__name__)

REPORT_REASONS = {value for value, _ in REPORT_REASON_CHOICES}


def _require_publisher(actor):
    if not can_publish(actor):
        raise Forbidden("User is suspended")


def _require_viewer(viewer):
    if viewer is None or not viewer.is_authenticated:
        raise AuthenticationRequired()


def engaged(viewer, post_ids):
    """Annotated posts for the given ids, newest first."""
    return Post.objects.filter(pk__in=post_ids).with_engagement(viewer).order_by('-created_at', '-id')


def fetch(viewer, post):
    return engaged(viewer, [post.pk]).get()


def visible_post(viewer, post_id, active=False):
    """
    Load a post the viewer is allowed to see, or raise NotFound.

    With active=True archived posts are treated as missing even for their
    owner; likes, comments and reports only apply to live posts.
    """
    pk = parse_id(post_id, 'post ID')
    post = Post.objects.select_related('author').filter(pk=pk).first()
    if post is None or not can_view_post(viewer, post):
        raise NotFound("Post not found")
    if active and post.is_archived:
        raise NotFound("Post not found")
    return post


# ============================================================================
# CREATE
# ============================================================================

def _parse_tags(raw):
    tags = parse_json_field(raw, "Invalid tags format") if raw not in (None, '') else []
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise InvalidInput("Tags must be a list of strings")
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def _parse_categories(raw):
    if raw in (None, '', []):
        raise InvalidInput("At least one approved category is required")
    ids = parse_json_field(raw, "Invalid categoryIds format")
    if not isinstance(ids, list) or not ids:
        raise InvalidInput("At least one approved category is required")
    ids = parse_id_list(ids, 'category ID')
    found = Category.objects.filter(pk__in=ids, is_approved=True).count()
    if found != len(ids):
        raise InvalidInput("One or more approved categories are invalid or unapproved")
    return ids


def _parse_suggested(raw):
    if raw in (None, '', []):
        return []
    ids = parse_json_field(raw, "Invalid suggestedCategoryIds format")
    if not isinstance(ids, list):
        raise InvalidInput("Invalid suggestedCategoryIds format")
    ids = parse_id_list(ids, 'category ID')
    if Category.objects.filter(pk__in=ids).count() != len(ids):
        raise InvalidInput("One or more suggested categories are invalid")
    return ids


def create_post(author, data, image=None):
    """
    Publish a post from a JSON body or multipart form.

    All fields are validated before the image is stored or any row is
    written.
    """
    _require_publisher(author)

    doc = parse_document(data.get('content'))
    tags = _parse_tags(data.get('tags'))
    category_ids = _parse_categories(data.get('categoryIds'))
    suggested_ids = _parse_suggested(data.get('suggestedCategoryIds'))

    image_url = storage.save_post_image(image) if image is not None else None

    with transaction.atomic():
        post = Post.objects.create(
            author=author,
            content=doc,
            image=image_url,
            tags=tags,
            search_text=' '.join([extract_text(doc)] + tags),
        )
        post.categories.set(category_ids)
        post.suggested_categories.set(suggested_ids)

    logger.info(f"Post {post.pk} created by user {author.pk}")
    return fetch(author, post)


# ============================================================================
# ENGAGEMENT
# ============================================================================

def _set_membership(relation_name, user, post, wanted):
    with transaction.atomic():
        locked = Post.objects.select_for_update().get(pk=post.pk)
        relation = getattr(locked, relation_name)
        present = relation.filter(pk=user.pk).exists()
        if wanted is None:
            wanted = not present
        if wanted and not present:
            relation.add(user)
        elif not wanted and present:
            relation.remove(user)
    return fetch(user, post)


def set_like(user, post, like=None):
    """Like or unlike. like=None toggles; an explicit value is idempotent."""
    return _set_membership('likes', user, post, parse_bool(like))


def set_save(user, post, save=None):
    return _set_membership('saved_by', user, post, parse_bool(save))


def share(user, post):
    return _set_membership('shares', user, post, True)


# ============================================================================
# FEED & SEARCH
# ============================================================================

def _posts_tagged(base, wanted):
    wanted = set(wanted)
    return [pk for pk, tags in base.values_list('pk', 'tags') if wanted & set(tags or [])]


def _approved_category(raw):
    pk = parse_id(raw, 'category ID')
    if not Category.objects.filter(pk=pk, is_approved=True).exists():
        raise NotFound("Category not found or not approved")
    return pk


def feed(viewer, params):
    """
    Posts matching the listing filters.

    Supported parameters: author (username or "me"), liked, saved,
    archived, category, categories (comma list), tags (comma list), tag,
    exclude. Categories and tags combine with OR; everything else with
    AND. Deleted posts and posts by block-related users never appear.
    """
    base = Post.objects.filter(is_deleted=False).exclude(author_id__in=hidden_user_ids(viewer))

    author = params.get('author')
    if author == 'me':
        _require_viewer(viewer)
        base = base.filter(author=viewer)
    elif author:
        target = User.objects.filter(username=author).first()
        if target is None or target.pk in hidden_user_ids(viewer):
            raise NotFound("User not found")
        base = base.filter(author=target)

    if parse_bool(params.get('archived')):
        _require_viewer(viewer)
        base = base.filter(author=viewer, is_archived=True)
    else:
        base = base.filter(is_archived=False)

    if parse_bool(params.get('liked')):
        _require_viewer(viewer)
        base = base.filter(likes=viewer)
    if parse_bool(params.get('saved')):
        _require_viewer(viewer)
        base = base.filter(saved_by=viewer)

    if params.get('category'):
        base = base.filter(categories=_approved_category(params['category']))

    any_of = Q()
    if params.get('categories'):
        ids = parse_id_list([c for c in params['categories'].split(',') if c.strip()], 'category ID')
        if not ids:
            raise InvalidInput("Invalid category IDs")
        if Category.objects.filter(pk__in=ids, is_approved=True).count() != len(ids):
            raise InvalidInput("One or more categories are invalid or unapproved")
        any_of |= Q(categories__in=ids)
    wanted_tags = [t.strip() for t in params.get('tags', '').split(',') if t.strip()]
    if params.get('tag'):
        wanted_tags.append(params['tag'].strip())
    if wanted_tags:
        any_of |= Q(pk__in=_posts_tagged(base, wanted_tags))
    if any_of:
        base = base.filter(any_of)

    if params.get('exclude'):
        base = base.exclude(pk=parse_id(params['exclude'], 'post ID'))

    return engaged(viewer, base.values('pk'))


def search(viewer, query):
    query = (query or '').strip()
    if not query:
        raise InvalidInput("Query is required")
    hidden = hidden_user_ids(viewer)

    users = User.objects.filter(
        Q(username__icontains=query) | Q(name__icontains=query),
        not_suspended_q(),
    ).exclude(pk__in=hidden).order_by('username')

    matches = Post.objects.published().exclude(author_id__in=hidden).filter(
        Q(search_text__icontains=query)
        | Q(categories__name__icontains=query, categories__is_approved=True)
    )
    return users, engaged(viewer, matches.values('pk'))


# ============================================================================
# COMMENTS
# ============================================================================

def add_comment(actor, post, content):
    _require_publisher(actor)
    if not can_comment(actor, post):
        raise Forbidden("Comments are restricted on this post")
    content = (content or '').strip() if isinstance(content, str) else ''
    if not content:
        raise InvalidInput("Content is required")

    comment = Comment.objects.create(post=post, author=actor, content=content)
    logger.info(f"Comment {comment.pk} added to post {post.pk} by user {actor.pk}")
    return comment


def list_comments(viewer, post):
    return (
        Comment.objects.filter(post=post, is_deleted=False)
        .exclude(author_id__in=hidden_user_ids(viewer))
        .select_related('author')
        .order_by('-created_at', '-id')
    )


def comments_by(user):
    return (
        Comment.objects.filter(author=user, is_deleted=False, post__is_deleted=False)
        .select_related('author')
        .order_by('-created_at', '-id')
    )


def delete_comment(actor, comment_id):
    pk = parse_id(comment_id, 'comment ID')
    comment = Comment.objects.filter(pk=pk, is_deleted=False).first()
    if comment is None:
        raise NotFound("Comment not found")
    if not can_delete_comment(actor, comment):
        raise Forbidden("Unauthorized to delete comment")
    comment.is_deleted = True
    comment.save(update_fields=['is_deleted', 'updated_at'])
    return comment


# ============================================================================
# REPORTS
# ============================================================================

def file_report(actor, post, reason, message=''):
    _require_publisher(actor)
    if not isinstance(reason, str) or reason not in REPORT_REASONS:
        raise InvalidInput("Reason is required" if not reason else "Invalid report reason")
    report = Report.objects.create(
        post=post,
        reported_by=actor,
        reason=reason,
        message=(message or '').strip() if isinstance(message, str) else '',
    )
    logger.info(f"Report {report.pk} filed on post {post.pk} by user {actor.pk}")
    return report
