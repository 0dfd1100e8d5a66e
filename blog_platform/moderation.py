"""
Comment deletion.

``delete_comment`` is shared by the public DELETE endpoint and the admin
moderation API. Admins may delete any visible comment; everyone else needs
an active deletion grant for their session.

A comment that is missing and one that is already deleted both raise
NotFound. When two requests race to delete the same comment, the
conditional update lets exactly one through and the other also gets
NotFound.
"""
import logging
import uuid

from django.db import DatabaseError
from django.utils import timezone

from . import ledger
from .auth import is_admin
from .exceptions import Forbidden, InternalError, InvalidRequest, NotFound
from .models import Comment

logger = logging.getLogger(__name__)


def parse_comment_id(raw):
    """Return the comment UUID or raise InvalidRequest."""
    if raw is None or not str(raw).strip():
        raise InvalidRequest("Comment ID is required")
    try:
        return uuid.UUID(str(raw).strip())
    except ValueError:
        raise InvalidRequest("Comment ID is malformed")


def delete_comment(comment_id, session_id=None, user=None, redact=False, now=None):
    """
    Soft delete a comment on behalf of ``user`` / ``session_id``.

    Args:
        comment_id: raw comment id from the request
        session_id: SessionId of the caller, or None
        user: authenticated user, or None
        redact: replace the content with DELETED_COMMENT_PLACEHOLDER
        now: deletion time, defaults to timezone.now()

    Returns:
        Confirmation payload dict.

    Raises:
        InvalidRequest, NotFound, Forbidden, InternalError
    """
    pk = parse_comment_id(comment_id)
    now = now or timezone.now()

    try:
        exists = Comment.objects.visible().filter(pk=pk).exists()
    except DatabaseError:
        logger.exception("Failed to load comment %s", pk)
        raise InternalError("Failed to delete comment")
    if not exists:
        raise NotFound("Comment not found")

    as_admin = is_admin(user)
    if not as_admin and not ledger.check(session_id, pk, now=now):
        raise Forbidden("You do not have permission to delete this comment")

    try:
        deleted = Comment.objects.soft_delete(pk, now=now, redact=redact)
    except DatabaseError:
        logger.exception("Failed to soft delete comment %s", pk)
        raise InternalError("Failed to delete comment")
    if not deleted:
        # Lost the race against a concurrent delete
        raise NotFound("Comment not found")

    if as_admin:
        logger.info("Comment %s deleted by admin %s", pk, user.pk)
    else:
        try:
            ledger.revoke(session_id, pk)
        except DatabaseError:
            logger.exception("Failed to revoke deletion grant for comment %s", pk)
        logger.info("Comment %s deleted by its session", pk)

    return {"success": True, "message": "Comment deleted successfully"}
