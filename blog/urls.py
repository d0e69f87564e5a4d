"""
================================================================================
INKWELL BLOG - API URL CONFIGURATION
================================================================================

@file        urls.py
@description URL routing for the Inkwell JSON API (mounted under /api/)

URL STRUCTURE OVERVIEW
================================================================================
1. Authentication   /api/auth/...
2. Posts            /api/posts/...
3. Comments         /api/comments/...
4. Users            /api/users/...
5. Categories       /api/categories/...
6. Search           /api/search
7. Administration   /api/admin/...

URL PARAMETER TYPES
================================================================================
Identifiers are captured as <str:...> and parsed by the views, so a
malformed id answers 400 "Invalid ... ID" instead of an HTML 404.
Fixed segments (posts/upload-image, users/profile, categories/suggest ...)
are listed before the parameterised routes they would otherwise shadow.

================================================================================
"""

from django.urls import path

from . import views

urlpatterns = [

    # ========================================================================
    # SECTION 1: AUTHENTICATION
    # ========================================================================
    path("auth/register", views.register, name="register"),
    path("auth/login", views.login_view, name="login"),
    path("auth/me", views.me, name="me"),

    # ========================================================================
    # SECTION 2: POSTS & ENGAGEMENT
    # ========================================================================
    path("posts", views.post_collection, name="posts"),
    path("posts/upload-image", views.upload_image, name="upload_image"),
    path("posts/<str:post_id>", views.post_detail, name="post_detail"),
    path("posts/<str:post_id>/like", views.like_post, name="like_post"),
    path("posts/<str:post_id>/save", views.save_post, name="save_post"),
    path("posts/<str:post_id>/share", views.share_post, name="share_post"),
    path("posts/<str:post_id>/report", views.report_post, name="report_post"),
    path("posts/<str:post_id>/archive", views.archive_post, name="archive_post"),
    path("posts/<str:post_id>/restrict-comments", views.restrict_comments, name="restrict_comments"),

    # ========================================================================
    # SECTION 3: COMMENTS
    # ========================================================================
    path("comments", views.my_comments, name="my_comments"),
    path("comments/<str:resource_id>", views.comment_resource, name="comments"),

    # ========================================================================
    # SECTION 4: USERS, PROFILES & BLOCKING
    # ========================================================================
    path("users/profile", views.update_profile, name="update_profile"),
    path("users/blocked", views.blocked_users, name="blocked_users"),
    path("users/block/<str:user_id>", views.block, name="block_user"),
    path("users/unblock/<str:user_id>", views.unblock, name="unblock_user"),
    path("users/<str:username>", views.profile, name="profile"),

    # ========================================================================
    # SECTION 5: CATEGORIES
    # ========================================================================
    path("categories", views.category_collection, name="categories"),
    path("categories/posts", views.category_posts, name="category_posts"),
    path("categories/suggest", views.suggest_category, name="suggest_category"),
    path("categories/suggested", views.suggested_categories, name="suggested_categories"),
    path("categories/approve/<str:category_id>", views.approve_category, name="approve_category"),
    path("categories/reject/<str:category_id>", views.reject_category, name="reject_category"),
    path("categories/<str:category_id>", views.delete_category, name="delete_category"),

    # ========================================================================
    # SECTION 6: SEARCH
    # ========================================================================
    path("search", views.search, name="search"),

    # ========================================================================
    # SECTION 7: ADMINISTRATION
    # ========================================================================
    path("admin/users", views.admin_users, name="admin_users"),
    path("admin/users/<str:user_id>", views.admin_delete_user, name="admin_delete_user"),
    path("admin/stats", views.admin_stats, name="admin_stats"),
    path("admin/actions", views.admin_actions, name="admin_actions"),
    path("admin/posts/bulk-delete", views.admin_bulk_delete_posts, name="admin_bulk_delete_posts"),
    path("admin/posts/<str:post_id>", views.admin_delete_post, name="admin_delete_post"),
    path("admin/block/<str:user_id>", views.admin_block, name="admin_block"),
    path("admin/suspend/<str:user_id>", views.admin_suspend, name="admin_suspend"),
    path("admin/unsuspend/<str:user_id>", views.admin_unsuspend, name="admin_unsuspend"),
    path("admin/reports", views.admin_reports, name="admin_reports"),
    path("admin/reports/<str:report_id>/resolve", views.resolve_report, name="resolve_report"),
    path("admin/reports/<str:report_id>/dismiss", views.dismiss_report, name="dismiss_report"),
]
