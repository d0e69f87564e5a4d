"""
================================================================================
INKWELL BLOG - DATABASE MODELS
================================================================================

@file        models.py
@description Django ORM models defining the blogging and moderation schema
@version     1.0.0

MODULE PURPOSE
================================================================================
This module defines every persisted collection of the Inkwell platform:
- User model (extended from AbstractUser)
- Posts (rich-text documents) and Comments
- Categories (approved, suggested, and the "General" sentinel)
- Social relationships (Block edges)
- Moderation records (Reports, AdminAction audit rows)

DATABASE STRUCTURE
================================================================================
1. User & Authentication
   - User (AbstractUser extension with admin and suspension flags)

2. Content Models
   - Category (curated taxonomy)
   - Post (user-generated rich-text content)
   - Comment (flat comments on posts)

3. Social Relationships
   - Block (one row per blocker -> blocked edge)

4. Moderation
   - Report (user complaint against a post)
   - AdminAction (append-only audit trail)

MODEL RELATIONSHIPS
================================================================================
User (1) ──────> (N) Post
User (1) ──────> (N) Comment
User (1) ──────> (N) Report
User (N) <─────> (N) Post        (likes, saved_by, shares)
User (N) <─────> (N) User        (Block edges)

Post (1) ──────> (N) Comment
Post (1) ──────> (N) Report
Post (N) <─────> (N) Category    (categories, suggested_categories)

CONSISTENCY RULES
================================================================================
- "blocked users" and "blocked by" are two readings of the same Block row,
  so they can never disagree.
- Engagement counters are COUNT() over the relation, never stored.
- A Category that is not approved always has a suggester (check constraint).
- Soft-deleted posts and comments stay in the table with is_deleted=True.
- AdminAction rows are written once and never updated or deleted. Their
  references carry no database constraint so the row outlives its targets.

================================================================================
"""

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Count, Exists, F, OuterRef, Q, Value
from django.db.models.functions import Lower

from .errors import AuditLogImmutable

# ============================================================================
# CONSTANTS & CHOICES
# ============================================================================

DEFAULT_AVATAR_URL = 'https://via.placeholder.com/40'

"""
Reasons a reader may give when reporting a post.
"""
REPORT_REASON_CHOICES = [
    ('Spam', 'Spam'),
    ('Hate Speech', 'Hate Speech'),
    ('Harassment', 'Harassment'),
    ('Nudity or pornography', 'Nudity or pornography'),
    ('Violence', 'Violence'),
    ('Misinformation', 'Misinformation'),
    ('Self-harm', 'Self-harm'),
    ('Intellectual property violation', 'Intellectual property violation'),
    ('Other', 'Other'),
]

REPORT_PENDING = 'pending'
REPORT_REVIEWED = 'reviewed'
REPORT_RESOLVED = 'resolved'
REPORT_DISMISSED = 'dismissed'

REPORT_STATUS_CHOICES = [
    (REPORT_PENDING, 'Pending'),
    (REPORT_REVIEWED, 'Reviewed'),
    (REPORT_RESOLVED, 'Resolved'),
    (REPORT_DISMISSED, 'Dismissed'),
]


class ActionType(models.TextChoices):
    DELETE_POST = 'delete_post', 'Delete post'
    BLOCK_USER = 'block_user', 'Block user'
    SUSPEND_USER = 'suspend_user', 'Suspend user'
    UNSUSPEND_USER = 'unsuspend_user', 'Unsuspend user'
    RESOLVE_REPORT = 'resolve_report', 'Resolve report'
    DISMISS_REPORT = 'dismiss_report', 'Dismiss report'
    APPROVE_CATEGORY = 'approve_category', 'Approve category'
    REJECT_CATEGORY = 'reject_category', 'Reject category'
    DELETE_CATEGORY = 'delete_category', 'Delete category'
    DELETE_USER = 'delete_user', 'Delete user'


# ============================================================================
# SECTION 1: USER & AUTHENTICATION MODELS
# ============================================================================

class User(AbstractUser):
    """
    Extended User model with blogging and moderation features.

    Attributes:
        name (CharField): Display name
        email (EmailField): Unique login email
        avatar (CharField): Stable URL of the avatar image
        bio (TextField): Profile biography (max 500 chars)
        is_admin (BooleanField): Moderation privileges
        is_suspended (BooleanField): Suspension flag set by an admin
        suspended_until (DateTimeField): End of the suspension window

    Related Names:
        posts: Post objects authored by the user
        comments: Comment objects authored by the user
        liked_posts / saved_posts / shared_posts: engagement relations
        blocks: Block rows where the user is the blocker
        blocked_by: Block rows where the user is the blocked party
        reports_filed: Report objects submitted by the user

    Note:
        Whether a suspension is currently in force is a policy question
        (see blog.permissions.is_actively_suspended), not a property here.
    """

    name = models.CharField(
        max_length=150,
        help_text="Display name"
    )
    email = models.EmailField(
        unique=True,
        help_text="Login email address"
    )
    avatar = models.CharField(
        max_length=500,
        default=DEFAULT_AVATAR_URL,
        help_text="URL of the user's avatar image"
    )
    bio = models.TextField(
        max_length=500,
        blank=True,
        help_text="Profile biography or description"
    )

    # --- Roles & Moderation State ---
    is_admin = models.BooleanField(
        default=False,
        help_text="May moderate content and users"
    )
    is_suspended = models.BooleanField(
        default=False,
        help_text="Suspended by an administrator"
    )
    suspended_until = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the current suspension ends"
    )

    updated_at = models.DateTimeField(auto_now=True)

    @property
    def blocked_users(self):
        """Users this user has blocked."""
        return User.objects.filter(blocked_by__blocker=self)

    @property
    def blocked_by_users(self):
        """Users who have blocked this user."""
        return User.objects.filter(blocks__blocked=self)

    def __str__(self):
        return self.username


# ============================================================================
# SECTION 2: CONTENT MODELS (Categories, Posts & Comments)
# ============================================================================

class Category(models.Model):
    """
    Post category.

    Categories start life either as a user suggestion (is_approved=False,
    suggested_by set) or pre-approved when an admin creates or seeds them
    (suggested_by=None). Names are unique regardless of case.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text="Category name"
    )
    is_approved = models.BooleanField(
        default=False,
        help_text="Usable as a post category"
    )
    suggested_by = models.ForeignKey(
        User,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='suggested_categories',
        help_text="User who suggested this category (null for admin-created)"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'Categories'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(Lower('name'), name='category_name_ci_unique'),
            models.CheckConstraint(
                condition=Q(is_approved=True) | Q(suggested_by__isnull=False),
                name='category_unapproved_has_suggester',
            ),
        ]

    def __str__(self):
        return self.name


class PostQuerySet(models.QuerySet):

    def alive(self):
        return self.filter(is_deleted=False)

    def published(self):
        return self.filter(is_deleted=False, is_archived=False)

    def with_engagement(self, viewer=None):
        """
        Annotate counters and viewer-relative flags.

        Adds like_count, comment_count (non-deleted only), share_count,
        is_liked and is_saved. Anonymous viewers get False for both flags.
        """
        qs = self.select_related('author').prefetch_related(
            'categories', 'suggested_categories'
        ).annotate(
            like_count=Count('likes', distinct=True),
            share_count=Count('shares', distinct=True),
            comment_count=Count(
                'comments', filter=Q(comments__is_deleted=False), distinct=True
            ),
        )
        if viewer is None or not viewer.is_authenticated:
            return qs.annotate(is_liked=Value(False), is_saved=Value(False))
        return qs.annotate(
            is_liked=Exists(Post.likes.through.objects.filter(
                post_id=OuterRef('pk'), user_id=viewer.pk
            )),
            is_saved=Exists(Post.saved_by.through.objects.filter(
                post_id=OuterRef('pk'), user_id=viewer.pk
            )),
        )


class Post(models.Model):
    """
    User-generated blog post.

    Attributes:
        author (ForeignKey): Post author
        content (JSONField): Rich-text document (Tiptap/ProseMirror JSON)
        image (CharField): Optional cover image URL
        tags (JSONField): Ordered list of tag strings
        categories (ManyToManyField): Approved categories (never empty)
        suggested_categories (ManyToManyField): Categories awaiting approval
        likes / saved_by / shares (ManyToManyField): Engagement sets
        is_archived (BooleanField): Hidden by its owner, reversible
        is_deleted (BooleanField): Soft-deleted, terminal
        restrict_comments (BooleanField): Only the author may comment

    Related Names:
        comments: Comment objects
        reports: Report objects

    Meta:
        ordering: Newest first
    """

    author = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='posts',
        help_text="Author of this post"
    )
    content = models.JSONField(
        help_text="Rich-text document"
    )
    image = models.CharField(
        max_length=500,
        null=True,
        blank=True,
        help_text="Cover image URL"
    )
    tags = models.JSONField(
        default=list,
        blank=True,
        help_text="Ordered list of tags"
    )
    search_text = models.TextField(
        blank=True,
        default='',
        editable=False,
        help_text="Plain text and tags, kept for search"
    )
    categories = models.ManyToManyField(
        Category,
        related_name='posts',
        help_text="Approved categories"
    )
    suggested_categories = models.ManyToManyField(
        Category,
        blank=True,
        related_name='suggested_posts',
        help_text="Categories suggested for this post, not yet approved"
    )
    likes = models.ManyToManyField(
        User,
        blank=True,
        related_name='liked_posts',
        help_text="Users who liked this post"
    )
    saved_by = models.ManyToManyField(
        User,
        blank=True,
        related_name='saved_posts',
        help_text="Users who saved this post"
    )
    shares = models.ManyToManyField(
        User,
        blank=True,
        related_name='shared_posts',
        help_text="Users who shared this post"
    )
    is_archived = models.BooleanField(default=False)
    is_deleted = models.BooleanField(default=False)
    restrict_comments = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PostQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Post #{self.pk} by {self.author}"


class Comment(models.Model):
    """
    Comment on a post.

    Soft-deleted by its author, by an admin, or in cascade when the
    parent post is soft-deleted.
    """

    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='comments',
        help_text="Post being commented on"
    )
    author = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='comments',
        help_text="Comment author"
    )
    content = models.TextField(
        help_text="Comment text content"
    )
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.author} on post #{self.post_id}: {self.content[:30]}"


# ============================================================================
# SECTION 3: SOCIAL RELATIONSHIP MODELS
# ============================================================================

class Block(models.Model):
    """
    User blocking relationship.

    One row is one directed edge. Both "blocked users" of the blocker and
    "blocked by" of the blocked party are read from it, so the two sides
    are always inverses of each other.

    Attributes:
        blocker (ForeignKey): User who initiated the block
        blocked (ForeignKey): User who is blocked
        created_at (DateTimeField): When block was created

    Example:
        Block.objects.create(blocker=user_a, blocked=user_b)
        assert user_b in user_a.blocked_users
        assert user_a in user_b.blocked_by_users
    """

    blocker = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='blocks',
        help_text="User who initiated the block"
    )
    blocked = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='blocked_by',
        help_text="User who is blocked"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Block creation timestamp"
    )

    class Meta:
        unique_together = ('blocker', 'blocked')
        constraints = [
            models.CheckConstraint(
                condition=~Q(blocker=F('blocked')),
                name='block_not_self',
            ),
        ]

    def __str__(self):
        return f"{self.blocker} blocks {self.blocked}"


# ============================================================================
# SECTION 4: MODERATION MODELS
# ============================================================================

class Report(models.Model):
    """
    Reader complaint against a post.

    Lifecycle: pending -> resolved (post soft-deleted) or dismissed.
    Both outcomes are terminal.
    """

    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='reports',
        help_text="Reported post"
    )
    reported_by = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='reports_filed',
        help_text="User who filed the report"
    )
    reason = models.CharField(
        max_length=40,
        choices=REPORT_REASON_CHOICES,
    )
    message = models.TextField(blank=True)
    status = models.CharField(
        max_length=10,
        choices=REPORT_STATUS_CHOICES,
        default=REPORT_PENDING,
        db_index=True,
    )
    admin_notes = models.TextField(blank=True, default='')
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Report #{self.pk} on post #{self.post_id} ({self.status})"


class AdminActionQuerySet(models.QuerySet):

    def update(self, **kwargs):
        raise AuditLogImmutable("Audit rows cannot be updated")

    def delete(self):
        raise AuditLogImmutable("Audit rows cannot be deleted")


class AdminAction(models.Model):
    """
    Immutable audit row for a privileged action.

    Targets are stored without database constraints or cascades, so the
    row keeps pointing at the original ids after a user or post is
    hard-deleted. Read target ids through the *_id attributes.
    """

    admin = models.ForeignKey(
        User,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='admin_actions',
        help_text="Actor who performed the action"
    )
    action_type = models.CharField(
        max_length=20,
        choices=ActionType.choices,
        db_index=True,
    )
    target_user = models.ForeignKey(
        User,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name='+',
    )
    target_post = models.ForeignKey(
        Post,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name='+',
    )
    target_report = models.ForeignKey(
        Report,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name='+',
    )
    reason = models.TextField()
    details = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AdminActionQuerySet.as_manager()

    class Meta:
        ordering = ['created_at', 'id']
        constraints = [
            models.CheckConstraint(
                condition=~Q(reason=''),
                name='admin_action_reason_not_empty',
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AuditLogImmutable("Audit rows cannot be updated")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AuditLogImmutable("Audit rows cannot be deleted")

    def __str__(self):
        return f"{self.admin_id} {self.action_type} ({self.created_at:%Y-%m-%d %H:%M})"


"""
================================================================================
END OF MODELS DEFINITION
================================================================================

DATABASE MIGRATION NOTES
================================================================================
After modifying models, run:
1. python manage.py makemigrations blog
2. python manage.py migrate

SEEDING
================================================================================
python manage.py seed_categories      # default approved categories
python manage.py grant_admin <user>   # promote an account to admin

================================================================================
"""
