"""
================================================================================
INKWELL BLOG - API VIEWS
================================================================================

@file        views.py
@description JSON endpoints for the Inkwell single-page client
@version     1.0.0

MODULE PURPOSE
================================================================================
Thin request handlers. Each view:

    1. parses the request (blog.utils)
    2. loads the resources it needs, 404 when absent or hidden
    3. delegates to blog.accounts / blog.posts / blog.moderation
    4. serializes the committed result (blog.serializers)

Domain errors are raised, never returned; ApiErrorMiddleware turns them
into {"message": ...} responses.

SECTIONS
================================================================================
1. Authentication (register, login, me)
2. Posts & Engagement
3. Comments
4. Users, Profiles & Blocking
5. Categories
6. Search
7. Administration

================================================================================
"""

import logging

from django.db.models import Q
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from . import accounts, audit, moderation, posts, storage
from .auth import admin_required, create_access_token, token_required
from .errors import Forbidden, InvalidInput, NotFound
from .models import REPORT_PENDING, REPORT_STATUS_CHOICES, Category, Post, Report, User
from .permissions import can_view_profile, is_actively_suspended
from .serializers import (
    admin_action_payload, category_payload, comment_payload,
    post_payload, report_payload, user_payload,
)
from .utils import parse_bool, parse_id, read_json

logger = logging.getLogger(__name__)

REPORT_STATUSES = {value for value, _ in REPORT_STATUS_CHOICES}


def _posts(queryset):
    return [post_payload(p) for p in queryset]


def _session(user, status=200):
    return JsonResponse(
        {"token": create_access_token(user), "user": user_payload(user, private=True)},
        status=status,
    )


# ============================================================================
# SECTION 1: AUTHENTICATION
# ============================================================================

@csrf_exempt
@require_POST
def register(request):
    user = accounts.register(read_json(request))
    return _session(user, status=201)


@csrf_exempt
@require_POST
def login_view(request):
    user = accounts.login(read_json(request))
    return _session(user)


@require_GET
@token_required
def me(request):
    return JsonResponse(user_payload(request.user, private=True))


# ============================================================================
# SECTION 2: POSTS & ENGAGEMENT
# ============================================================================

@csrf_exempt
@require_http_methods(["GET", "POST"])
def post_collection(request):
    """GET lists the feed; POST publishes a post (JSON or multipart)."""
    if request.method == "GET":
        return JsonResponse(_posts(posts.feed(request.user, request.GET)), safe=False)
    return _create_post(request)


@token_required
def _create_post(request):
    post = posts.create_post(request.user, read_json(request), request.FILES.get('image'))
    return JsonResponse(post_payload(post), status=201)


@csrf_exempt
@require_POST
@token_required
def upload_image(request):
    upload = request.FILES.get('image')
    if upload is None:
        raise InvalidInput("No image uploaded")
    return JsonResponse({"imageUrl": storage.save_post_image(upload)})


@csrf_exempt
@require_http_methods(["GET", "DELETE"])
def post_detail(request, post_id):
    if request.method == "GET":
        post = posts.visible_post(request.user, post_id)
        return JsonResponse(post_payload(posts.fetch(request.user, post)))
    return _delete_post(request, post_id)


@token_required
def _delete_post(request, post_id):
    post = posts.visible_post(request.user, post_id)
    moderation.soft_delete_post(request.user, post, read_json(request).get('reason'))
    return JsonResponse({"message": "Post and associated comments deleted successfully"})


@csrf_exempt
@require_POST
@token_required
def like_post(request, post_id):
    post = posts.visible_post(request.user, post_id, active=True)
    post = posts.set_like(request.user, post, read_json(request).get('like'))
    return JsonResponse(post_payload(post))


@csrf_exempt
@require_POST
@token_required
def save_post(request, post_id):
    post = posts.visible_post(request.user, post_id, active=True)
    post = posts.set_save(request.user, post, read_json(request).get('save'))
    return JsonResponse(post_payload(post))


@csrf_exempt
@require_POST
@token_required
def share_post(request, post_id):
    post = posts.visible_post(request.user, post_id, active=True)
    return JsonResponse(post_payload(posts.share(request.user, post)))


@csrf_exempt
@require_POST
@token_required
def report_post(request, post_id):
    post = posts.visible_post(request.user, post_id, active=True)
    data = read_json(request)
    report = posts.file_report(request.user, post, data.get('reason'), data.get('message'))
    return JsonResponse(
        {"message": "Post reported successfully", "report": report.pk}, status=201
    )


@csrf_exempt
@require_POST
@token_required
def archive_post(request, post_id):
    post = posts.visible_post(request.user, post_id)
    moderation.toggle_archive(request.user, post)
    return JsonResponse(post_payload(posts.fetch(request.user, post)))


@csrf_exempt
@require_POST
@token_required
def restrict_comments(request, post_id):
    post = posts.visible_post(request.user, post_id, active=True)
    moderation.toggle_restrict_comments(request.user, post)
    return JsonResponse(post_payload(posts.fetch(request.user, post)))


# ============================================================================
# SECTION 3: COMMENTS
# ============================================================================

@require_GET
@token_required
def my_comments(request):
    if request.GET.get('author') != 'me':
        raise InvalidInput("Invalid query")
    return JsonResponse([comment_payload(c) for c in posts.comments_by(request.user)], safe=False)


@csrf_exempt
@require_http_methods(["GET", "POST", "DELETE"])
def comment_resource(request, resource_id):
    """
    GET/POST take a post id (list / add comments on that post);
    DELETE takes a comment id.
    """
    if request.method == "GET":
        post = posts.visible_post(request.user, resource_id, active=True)
        comments = posts.list_comments(request.user, post)
        return JsonResponse([comment_payload(c) for c in comments], safe=False)
    if request.method == "POST":
        return _add_comment(request, resource_id)
    return _delete_comment(request, resource_id)


@token_required
def _add_comment(request, post_id):
    post = posts.visible_post(request.user, post_id, active=True)
    comment = posts.add_comment(request.user, post, read_json(request).get('content'))
    return JsonResponse(comment_payload(comment), status=201)


@token_required
def _delete_comment(request, comment_id):
    posts.delete_comment(request.user, comment_id)
    return JsonResponse({"message": "Comment deleted successfully"})


# ============================================================================
# SECTION 4: USERS, PROFILES & BLOCKING
# ============================================================================

@csrf_exempt
@require_http_methods(["PUT", "POST"])
@token_required
def update_profile(request):
    """JSON via PUT, or multipart via POST when an avatar is attached."""
    user = accounts.update_profile(request.user, read_json(request), request.FILES.get('avatar'))
    return JsonResponse(user_payload(user, private=True))


@require_GET
def profile(request, username):
    target = User.objects.filter(username=username).first()
    if target is None:
        raise NotFound("User not found")
    if not can_view_profile(request.user, target):
        raise NotFound("User not found")
    if is_actively_suspended(target):
        raise Forbidden("User is suspended")

    feed = posts.engaged(request.user, Post.objects.published().filter(author=target).values('pk'))
    return JsonResponse({"user": user_payload(target), "posts": _posts(feed)})


@require_GET
@token_required
def blocked_users(request):
    users = request.user.blocked_users.order_by('username')
    return JsonResponse([user_payload(u) for u in users], safe=False)


@csrf_exempt
@require_POST
@token_required
def block(request, user_id):
    target = accounts.get_user(user_id)
    created = moderation.block_user(request.user, target)
    message = "User blocked successfully" if created else "User already blocked"
    return JsonResponse({"message": message})


@csrf_exempt
@require_POST
@token_required
def unblock(request, user_id):
    target = accounts.get_user(user_id)
    removed = moderation.unblock_user(request.user, target)
    message = "User unblocked successfully" if removed else "User was not blocked"
    return JsonResponse({"message": message})


# ============================================================================
# SECTION 5: CATEGORIES
# ============================================================================

def _category(category_id):
    category = Category.objects.filter(pk=parse_id(category_id, 'category ID')).first()
    if category is None:
        raise NotFound("Category not found")
    return category


@csrf_exempt
@require_http_methods(["GET", "POST"])
def category_collection(request):
    """GET lists approved categories; POST creates one (admin)."""
    if request.method == "GET":
        categories = Category.objects.filter(is_approved=True).order_by('name')
        return JsonResponse([category_payload(c) for c in categories], safe=False)
    return _create_category(request)


@admin_required
def _create_category(request):
    category = moderation.create_category(request.user, read_json(request).get('name'))
    return JsonResponse(
        {"message": "Category created successfully", "category": category_payload(category)},
        status=201,
    )


@require_GET
@admin_required
def category_posts(request):
    if not request.GET.get('category'):
        raise InvalidInput("Category ID is required")
    category = _category(request.GET['category'])
    referencing = Post.objects.alive().filter(
        Q(categories=category) | Q(suggested_categories=category)
    ).values('pk')
    return JsonResponse(_posts(posts.engaged(request.user, referencing)), safe=False)


@csrf_exempt
@require_POST
@token_required
def suggest_category(request):
    category = moderation.suggest_category(request.user, read_json(request).get('name'))
    return JsonResponse(
        {"message": "Category suggestion submitted successfully",
         "category": category_payload(category)},
        status=201,
    )


@require_GET
@admin_required
def suggested_categories(request):
    categories = Category.objects.filter(is_approved=False).order_by('-created_at')
    return JsonResponse([category_payload(c) for c in categories], safe=False)


@csrf_exempt
@require_POST
@admin_required
def approve_category(request, category_id):
    category = _category(category_id)
    category, affected = moderation.approve_category(
        request.user, category, read_json(request).get('reason')
    )
    return JsonResponse({
        "message": "Category approved successfully",
        "category": category_payload(category),
        "affectedPosts": affected,
    })


@csrf_exempt
@require_POST
@admin_required
def reject_category(request, category_id):
    category = _category(category_id)
    affected = moderation.reject_category(request.user, category, read_json(request).get('reason'))
    return JsonResponse({"message": "Category rejected successfully", "affectedPosts": affected})


@csrf_exempt
@require_http_methods(["DELETE"])
@admin_required
def delete_category(request, category_id):
    category = _category(category_id)
    affected = moderation.delete_category(request.user, category, read_json(request).get('reason'))
    return JsonResponse({"message": "Category deleted successfully", "affectedPosts": affected})


# ============================================================================
# SECTION 6: SEARCH
# ============================================================================

@require_GET
@token_required
def search(request):
    users, found = posts.search(request.user, request.GET.get('q'))
    return JsonResponse({"users": [user_payload(u) for u in users], "posts": _posts(found)})


# ============================================================================
# SECTION 7: ADMINISTRATION
# ============================================================================

def _report(report_id):
    report = Report.objects.filter(pk=parse_id(report_id, 'report ID')).first()
    if report is None:
        raise NotFound("Report not found")
    return report


@csrf_exempt
@require_http_methods(["GET", "DELETE"])
@admin_required
def admin_users(request):
    """GET lists every account; DELETE removes many (userIds or deleteAll)."""
    if request.method == "DELETE":
        return _bulk_delete_users(request)
    users = User.objects.order_by('username')
    return JsonResponse([user_payload(u, private=True) for u in users], safe=False)


@require_GET
@admin_required
def admin_stats(request):
    return JsonResponse({
        "users": User.objects.count(),
        "posts": Post.objects.alive().count(),
        "pendingReports": Report.objects.filter(status=REPORT_PENDING).count(),
        "suggestedCategories": Category.objects.filter(is_approved=False).count(),
    })


@require_GET
@admin_required
def admin_actions(request):
    params = request.GET
    rows = audit.history(
        target_user=parse_id(params['user'], 'user ID') if params.get('user') else None,
        target_post=parse_id(params['post'], 'post ID') if params.get('post') else None,
        target_report=parse_id(params['report'], 'report ID') if params.get('report') else None,
        action_type=params.get('type') or None,
    )
    return JsonResponse([admin_action_payload(a) for a in rows], safe=False)


@csrf_exempt
@require_http_methods(["DELETE"])
@admin_required
def admin_delete_post(request, post_id):
    post = Post.objects.filter(pk=parse_id(post_id, 'post ID'), is_deleted=False).first()
    if post is None:
        raise NotFound("Post not found")
    moderation.soft_delete_post(request.user, post, read_json(request).get('reason'))
    return JsonResponse({"message": "Post and associated comments deleted successfully"})


@csrf_exempt
@require_POST
@admin_required
def admin_bulk_delete_posts(request):
    data = read_json(request)
    count = moderation.bulk_delete_posts(request.user, data.get('postIds'), data.get('reason'))
    return JsonResponse({"message": f"{count} posts deleted successfully", "deleted": count})


@csrf_exempt
@require_POST
@admin_required
def admin_block(request, user_id):
    target = accounts.get_user(user_id)
    moderation.admin_block_user(request.user, target, read_json(request).get('reason'))
    return JsonResponse({"message": "User blocked successfully"})


@csrf_exempt
@require_POST
@admin_required
def admin_suspend(request, user_id):
    target = accounts.get_user(user_id)
    data = read_json(request)
    user = moderation.suspend_user(request.user, target, data.get('reason'), data.get('durationDays'))
    return JsonResponse({"message": "User suspended successfully", "user": user_payload(user)})


@csrf_exempt
@require_POST
@admin_required
def admin_unsuspend(request, user_id):
    target = accounts.get_user(user_id)
    user = moderation.unsuspend_user(request.user, target, read_json(request).get('reason'))
    return JsonResponse({"message": "User unsuspended successfully", "user": user_payload(user)})


@csrf_exempt
@require_http_methods(["DELETE"])
@admin_required
def admin_delete_user(request, user_id):
    target = accounts.get_user(user_id)
    data = read_json(request)
    moderation.delete_user(request.user, target, data.get('reason'), data.get('details') or '')
    return JsonResponse({"message": "User and associated data deleted successfully"})


def _bulk_delete_users(request):
    data = read_json(request)
    count = moderation.bulk_delete_users(
        request.user,
        user_ids=data.get('userIds'),
        delete_all=bool(parse_bool(data.get('deleteAll'))),
        reason=data.get('reason'),
        details=data.get('details') or '',
    )
    return JsonResponse({"message": f"{count} users deleted successfully", "deleted": count})


@require_GET
@admin_required
def admin_reports(request):
    status = request.GET.get('status', REPORT_PENDING)
    reports = Report.objects.select_related('reported_by').order_by('-created_at')
    if status != 'all':
        if status not in REPORT_STATUSES:
            raise InvalidInput("Invalid report status")
        reports = reports.filter(status=status)
    return JsonResponse([report_payload(r) for r in reports], safe=False)


@csrf_exempt
@require_POST
@admin_required
def resolve_report(request, report_id):
    report = moderation.resolve_report(
        request.user, _report(report_id), read_json(request).get('reason')
    )
    return JsonResponse({"message": "Report resolved successfully", "report": report_payload(report)})


@csrf_exempt
@require_POST
@admin_required
def dismiss_report(request, report_id):
    report = moderation.dismiss_report(
        request.user, _report(report_id), read_json(request).get('reason')
    )
    return JsonResponse({"message": "Report dismissed successfully", "report": report_payload(report)})
