"""
Deletion-rights ledger.

A session that posts a comment may delete it for COMMENT_DELETION_WINDOW
seconds. Rights are rows in CommentDeletionGrant keyed on
(session_id, comment); expiry is evaluated on read, so an unswept expired
row grants nothing.

Usage:

    from blog_platform import ledger

    ledger.grant(session_id, comment.pk)
    if ledger.check(session_id, comment.pk):
        ...
"""
import logging
from datetime import timedelta

from django.db import DatabaseError
from django.utils import timezone

from .conf import blog_settings
from .models import CommentDeletionGrant

logger = logging.getLogger(__name__)


def grant(session_id, comment_id, now=None):
    """
    Give ``session_id`` the right to delete ``comment_id``.

    A second grant for the same pair extends the existing row instead of
    adding another one.
    """
    now = now or timezone.now()
    expires_at = now + timedelta(seconds=blog_settings.COMMENT_DELETION_WINDOW)
    obj, _ = CommentDeletionGrant.objects.update_or_create(
        session_id=str(session_id),
        comment_id=comment_id,
        defaults={"expires_at": expires_at},
    )
    return obj


def check(session_id, comment_id, now=None):
    """
    Return True iff the session holds an unexpired grant for the comment.

    Lookup errors deny.
    """
    if session_id is None:
        return False
    now = now or timezone.now()
    try:
        obj = CommentDeletionGrant.objects.for_pair(session_id, comment_id).first()
    except DatabaseError:
        logger.warning(
            "Deletion grant lookup failed for comment %s", comment_id, exc_info=True
        )
        return False
    return obj is not None and obj.is_active(now)


def revoke(session_id, comment_id):
    """Delete the pair's grant. Returns the number of rows removed."""
    deleted, _ = CommentDeletionGrant.objects.for_pair(session_id, comment_id).delete()
    return deleted


def sweep_expired(now=None):
    """Delete grants that expired before ``now``. Returns the row count."""
    deleted, _ = CommentDeletionGrant.objects.expired(now).delete()
    if deleted:
        logger.info("Swept %d expired comment deletion grants", deleted)
    return deleted


def list_deletable(session_id, post_id, now=None):
    """
    Return the ids of visible comments under ``post_id`` the session may
    still delete.
    """
    if session_id is None:
        return set()
    try:
        return set(
            CommentDeletionGrant.objects.filter(
                session_id=str(session_id),
                comment__post_id=post_id,
                comment__deleted_at__isnull=True,
            )
            .active(now)
            .values_list("comment_id", flat=True)
        )
    except DatabaseError:
        logger.warning("Deletable comment lookup failed for post %s", post_id, exc_info=True)
        return set()
