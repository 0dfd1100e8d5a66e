"""
Comment, deletion grant, rate limit and reaction models for django-blog-platform.
"""
import uuid
from datetime import timedelta

from django.db import models
from django.utils import timezone

from ..conf import blog_settings


class CommentQuerySet(models.QuerySet):

    def visible(self):
        return self.filter(deleted_at__isnull=True)

    def soft_delete(self, pk, now=None, redact=False):
        """
        Stamp ``deleted_at`` on a single visible comment.

        The update is conditional on ``deleted_at IS NULL``, so when two
        requests race for the same comment exactly one of them gets True.
        """
        values = {"deleted_at": now or timezone.now()}
        if redact:
            values["content"] = blog_settings.DELETED_COMMENT_PLACEHOLDER
        return self.filter(pk=pk, deleted_at__isnull=True).update(**values) == 1


class Comment(models.Model):
    """
    Anonymous comment on a post.

    Replies are one level deep via ``parent``. Comments are only ever
    soft-deleted; ``ip_address`` holds an HMAC hash, never the raw address.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    post = models.ForeignKey(
        "blog_platform.Post",
        on_delete=models.CASCADE,
        related_name="comments",
    )
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="replies",
    )
    author_name = models.CharField(max_length=blog_settings.AUTHOR_NAME_MAX_LENGTH)
    content = models.TextField(max_length=blog_settings.COMMENT_MAX_LENGTH)
    ip_address = models.CharField(max_length=64, blank=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CommentQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["post", "parent", "created_at"]),
        ]

    def __str__(self):
        return f"Comment by {self.author_name} on {self.post}"

    @property
    def preview(self):
        """Return truncated content for admin display."""
        if len(self.content) > 100:
            return self.content[:100] + "..."
        return self.content

    @property
    def is_reply(self):
        return self.parent_id is not None

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    def to_dict(self):
        return {
            "id": str(self.pk),
            "post_id": self.post_id,
            "parent_id": str(self.parent_id) if self.parent_id else None,
            "author_name": self.author_name,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
        }


class CommentDeletionGrantQuerySet(models.QuerySet):

    def for_pair(self, session_id, comment_id):
        return self.filter(session_id=str(session_id), comment_id=comment_id)

    def active(self, now=None):
        return self.filter(expires_at__gt=now or timezone.now())

    def expired(self, now=None):
        return self.filter(expires_at__lt=now or timezone.now())


class CommentDeletionGrant(models.Model):
    """
    Time-boxed right of a browser session to delete one comment.

    Issued when the session posts the comment and valid while
    ``now < expires_at``. Expired rows are ignored on read and removed by
    ``sweep_comment_grants``.
    """

    session_id = models.CharField(max_length=64, db_index=True)
    comment = models.ForeignKey(
        Comment,
        on_delete=models.CASCADE,
        related_name="deletion_grants",
    )
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = CommentDeletionGrantQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["session_id", "comment"],
                name="unique_deletion_grant_per_session",
            ),
        ]
        verbose_name = "Comment Deletion Grant"

    def __str__(self):
        return f"Deletion grant for {self.comment_id} until {self.expires_at}"

    def is_active(self, now=None):
        return (now or timezone.now()) < self.expires_at


class CommentRateLimit(models.Model):
    """Rolling per-IP comment counter."""

    ip_address = models.CharField(max_length=64, unique=True)
    comment_count = models.PositiveIntegerField(default=0)
    last_comment_at = models.DateTimeField()
    reset_at = models.DateTimeField()

    class Meta:
        verbose_name = "Comment Rate Limit"

    def __str__(self):
        return f"{self.comment_count} comments until {self.reset_at}"

    @classmethod
    def hit(cls, ip_address, now=None):
        """
        Count one comment attempt for ``ip_address``.

        Returns False once COMMENT_RATE_LIMIT comments have been counted in
        the current window; the window restarts on the first attempt after
        ``reset_at``. Must run inside a transaction.
        """
        now = now or timezone.now()
        window = timedelta(seconds=blog_settings.COMMENT_RATE_WINDOW)

        record, created = cls.objects.select_for_update().get_or_create(
            ip_address=ip_address,
            defaults={
                "comment_count": 1,
                "last_comment_at": now,
                "reset_at": now + window,
            },
        )
        if created:
            return True

        if now > record.reset_at:
            record.comment_count = 1
            record.last_comment_at = now
            record.reset_at = now + window
            record.save(update_fields=["comment_count", "last_comment_at", "reset_at"])
            return True

        if record.comment_count >= blog_settings.COMMENT_RATE_LIMIT:
            return False

        record.comment_count = models.F("comment_count") + 1
        record.last_comment_at = now
        record.save(update_fields=["comment_count", "last_comment_at"])
        return True


class CommentReaction(models.Model):
    """Like or dislike on a comment, one per hashed IP address."""

    LIKE = "like"
    DISLIKE = "dislike"
    REACTION_CHOICES = [
        (LIKE, "Like"),
        (DISLIKE, "Dislike"),
    ]

    comment = models.ForeignKey(
        Comment,
        on_delete=models.CASCADE,
        related_name="reactions",
    )
    ip_address = models.CharField(max_length=64)
    reaction_type = models.CharField(max_length=10, choices=REACTION_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["comment", "ip_address"],
                name="unique_reaction_per_ip",
            ),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.reaction_type} on {self.comment_id}"

    @classmethod
    def toggle(cls, comment, ip_address, reaction_type):
        """
        Toggle a reaction on a comment.

        Same reaction removes it, a different one replaces it, none adds it.

        Returns (reaction_or_none, action) where action is one of
        "added", "updated" or "removed".
        """
        existing = cls.objects.filter(comment=comment, ip_address=ip_address).first()

        if existing:
            if existing.reaction_type == reaction_type:
                existing.delete()
                return None, "removed"
            existing.reaction_type = reaction_type
            existing.save(update_fields=["reaction_type"])
            return existing, "updated"

        reaction = cls.objects.create(
            comment=comment,
            ip_address=ip_address,
            reaction_type=reaction_type,
        )
        return reaction, "added"

    @classmethod
    def counts_for(cls, comment):
        """Return {"like": n, "dislike": n} for a comment."""
        counts = {cls.LIKE: 0, cls.DISLIKE: 0}
        rows = (
            cls.objects.filter(comment=comment)
            .values("reaction_type")
            .annotate(total=models.Count("id"))
        )
        for row in rows:
            counts[row["reaction_type"]] = row["total"]
        return counts
