from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import Group
from django.urls import reverse
from django.utils.html import format_html

from .content import extract_text
from .models import AdminAction, Block, Category, Comment, Post, Report, User

# ==================== ADMIN CLASSES ====================

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'email', 'name', 'is_admin', 'is_suspended', 'suspended_until', 'date_joined')
    list_filter = ('is_admin', 'is_suspended', 'is_active')
    search_fields = ('username', 'email', 'name')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profile', {'fields': ('name', 'avatar', 'bio')}),
        ('Moderation', {'fields': ('is_admin', 'is_suspended', 'suspended_until')}),
    )
    readonly_fields = ('is_suspended', 'suspended_until')

@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ('id', 'author_link', 'created_at', 'content_short', 'is_archived', 'is_deleted')
    list_filter = ('is_archived', 'is_deleted', 'restrict_comments')
    search_fields = ('search_text', 'author__username')
    filter_horizontal = ('categories', 'suggested_categories')
    readonly_fields = ('likes', 'saved_by', 'shares', 'is_deleted')

    def author_link(self, obj):
        url = reverse("admin:blog_user_change", args=[obj.author.id])
        return format_html('<a href="{}">{}</a>', url, obj.author.username)
    author_link.short_description = 'Author'
    author_link.admin_order_field = 'author__username'

    def content_short(self, obj):
        text = extract_text(obj.content)
        if text:
            return text[:80] + '...' if len(text) > 80 else text
        return "(no text)"
    content_short.short_description = 'Content'

@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ('id', 'author', 'post', 'created_at', 'content_short', 'is_deleted')
    list_filter = ('is_deleted',)
    search_fields = ('content', 'author__username', 'post__id')

    def content_short(self, obj):
        return obj.content[:50] + '...' if len(obj.content) > 50 else obj.content
    content_short.short_description = 'Content'

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'is_approved', 'suggested_by', 'created_at')
    list_filter = ('is_approved',)
    search_fields = ('name', 'suggested_by__username')

@admin.register(Block)
class BlockAdmin(admin.ModelAdmin):
    list_display = ('id', 'blocker', 'blocked', 'created_at')
    search_fields = ('blocker__username', 'blocked__username')

@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ('id', 'post', 'reported_by', 'reason', 'status', 'created_at', 'resolved_at')
    list_filter = ('status', 'reason')
    search_fields = ('message', 'reported_by__username', 'post__id')
    readonly_fields = ('status', 'admin_notes', 'resolved_at')

@admin.register(AdminAction)
class AdminActionAdmin(admin.ModelAdmin):
    list_display = ('id', 'admin_id', 'action_type', 'target_user_id', 'target_post_id', 'target_report_id', 'reason', 'created_at')
    list_filter = ('action_type', 'created_at')
    search_fields = ('reason', 'details')

    # Audit rows are append-only; the site only reads them.
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

# Unregister Django's default Group
admin.site.unregister(Group)

# Basic admin site configuration
admin.site.site_header = "Inkwell Admin"
admin.site.site_title = "Inkwell Admin Portal"
admin.site.index_title = "Moderation back office"
