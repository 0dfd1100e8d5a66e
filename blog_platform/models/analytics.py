"""
View analytics models for django-blog-platform.
"""
from django.db import IntegrityError, models, transaction
from django.utils import timezone


def local_date(value):
    """Calendar date of ``value``, in the current time zone when aware."""
    if timezone.is_aware(value):
        return timezone.localdate(value)
    return value.date()


def _today():
    return local_date(timezone.now())


class PostView(models.Model):
    """
    One view of a post per hashed IP address per day.

    The unique constraint does the deduplication; ``record`` treats the
    resulting IntegrityError as "already counted".
    """

    post = models.ForeignKey(
        "blog_platform.Post",
        on_delete=models.CASCADE,
        related_name="views",
    )
    ip_address = models.CharField(max_length=64)
    user_agent = models.TextField(blank=True)
    session_id = models.CharField(max_length=64, blank=True)
    viewed_on = models.DateField(default=_today)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["post", "ip_address", "viewed_on"],
                name="unique_post_view_per_day",
            ),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"View of {self.post_id} on {self.viewed_on}"

    @classmethod
    def record(cls, post, ip_address, user_agent="", session_id="", now=None):
        """
        Record a view and bump the post's counter.

        Returns True if this is the first view for the identity today.
        """
        now = now or timezone.now()
        try:
            with transaction.atomic():
                cls.objects.create(
                    post=post,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    session_id=session_id or "",
                    viewed_on=local_date(now),
                    created_at=now,
                )
        except IntegrityError:
            return False
        post.increment_view_count()
        return True
