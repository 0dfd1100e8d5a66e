"""
Comment API views: listing, posting, self-service deletion, reactions,
session ids and the math captcha.
"""
import logging
import uuid

from django.db import DatabaseError, transaction
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import ensure_csrf_cookie

from .. import captcha, ledger
from ..auth import get_current_user
from ..conf import blog_settings
from ..exceptions import InternalError, InvalidRequest, NotFound, RateLimited
from ..models import Comment, CommentRateLimit, CommentReaction, Post
from ..moderation import delete_comment, parse_comment_id
from ..network import get_client_ip, hash_ip_address
from ..session import get_or_create_session_id, get_session_id
from .base import (
    JSONErrorMixin,
    pagination_payload,
    parse_int,
    parse_json_body,
    parse_pagination,
)

logger = logging.getLogger(__name__)


@method_decorator(ensure_csrf_cookie, name="dispatch")
class CommentSessionView(JSONErrorMixin, View):
    """
    Return the caller's comment session id, issuing one if needed.

    Also sets the CSRF cookie; write requests echo it in ``X-CSRFToken``.
    """

    def get(self, request):
        session_id = get_or_create_session_id(request)
        return JsonResponse({"success": True, "sessionId": str(session_id)})

    def post(self, request):
        return self.get(request)


class CommentListView(JSONErrorMixin, View):
    """List comments of a post, or post a new one."""

    def get(self, request):
        post_id = request.GET.get("postId")
        if not post_id:
            raise InvalidRequest("Post ID is required")
        post_id = parse_int(post_id, "postId")
        page, limit = parse_pagination(request, blog_settings.COMMENTS_PER_PAGE)

        top_level = Comment.objects.visible().filter(
            post_id=post_id,
            parent__isnull=True,
        ).order_by("-created_at")
        total = top_level.count()
        offset = (page - 1) * limit
        parents = list(top_level[offset:offset + limit])

        replies_by_parent = {}
        if parents:
            replies = Comment.objects.visible().filter(
                post_id=post_id,
                parent_id__in=[c.pk for c in parents],
            ).order_by("created_at")
            for reply in replies:
                replies_by_parent.setdefault(reply.parent_id, []).append(reply.to_dict())

        comments = []
        for parent in parents:
            data = parent.to_dict()
            data["replies"] = replies_by_parent.get(parent.pk, [])
            comments.append(data)

        session_id = get_or_create_session_id(request)
        deletable = ledger.list_deletable(session_id, post_id)

        try:
            ledger.sweep_expired()
        except DatabaseError:
            logger.warning("Expired deletion grant sweep failed", exc_info=True)

        return JsonResponse({
            "comments": comments,
            "userDeletableComments": sorted(str(pk) for pk in deletable),
            "pagination": pagination_payload(page, limit, total),
        })

    def post(self, request):
        data = parse_json_body(request)
        post_id = data.get("postId")
        content = data.get("content")
        author_name = data.get("authorName")
        captcha_id = data.get("captchaSessionId")
        captcha_answer = data.get("captchaAnswer")
        parent_id = data.get("parentId")

        if not post_id or not content or not author_name or not captcha_id or captcha_answer is None:
            raise InvalidRequest("All fields are required")

        captcha.consume(request, captcha_id, captcha_answer)

        ip_hash = hash_ip_address(get_client_ip(request))
        with transaction.atomic():
            allowed = CommentRateLimit.hit(ip_hash)
        if not allowed:
            raise RateLimited("Rate limit exceeded. Please wait before posting again.")

        content = str(content).strip()
        author_name = str(author_name).strip()
        if not blog_settings.COMMENT_MIN_LENGTH <= len(content) <= blog_settings.COMMENT_MAX_LENGTH:
            raise InvalidRequest(
                f"Comment must be between {blog_settings.COMMENT_MIN_LENGTH} "
                f"and {blog_settings.COMMENT_MAX_LENGTH} characters"
            )
        if not (
            blog_settings.AUTHOR_NAME_MIN_LENGTH
            <= len(author_name)
            <= blog_settings.AUTHOR_NAME_MAX_LENGTH
        ):
            raise InvalidRequest(
                f"Author name must be between {blog_settings.AUTHOR_NAME_MIN_LENGTH} "
                f"and {blog_settings.AUTHOR_NAME_MAX_LENGTH} characters"
            )

        post = Post.objects.published().filter(pk=parse_int(post_id, "postId")).first()
        if post is None:
            raise NotFound("Post not found")

        parent = None
        if parent_id:
            try:
                parent_pk = uuid.UUID(str(parent_id))
            except ValueError:
                raise InvalidRequest("Parent comment not found")
            parent = Comment.objects.visible().filter(pk=parent_pk, post=post).first()
            if parent is None:
                raise InvalidRequest("Parent comment not found")

        try:
            comment = Comment.objects.create(
                post=post,
                parent=parent,
                author_name=author_name,
                content=content,
                ip_address=ip_hash,
            )
        except DatabaseError:
            logger.exception("Failed to create comment on post %s", post.pk)
            raise InternalError("Failed to create comment")

        # Losing the grant only costs the author the delete button
        session_id = get_or_create_session_id(request)
        try:
            ledger.grant(session_id, comment.pk)
        except DatabaseError:
            logger.exception("Failed to grant deletion rights for comment %s", comment.pk)

        response = JsonResponse({"success": True, "comment": comment.to_dict()})
        captcha.discard(response, captcha_id)
        return response


class CommentDetailView(JSONErrorMixin, View):
    """Self-service or admin deletion of a single comment."""

    def delete(self, request, comment_id):
        result = delete_comment(
            comment_id,
            session_id=get_session_id(request),
            user=get_current_user(request),
        )
        return JsonResponse(result)


class CommentReactionView(JSONErrorMixin, View):
    """Like/dislike counts and toggling for a comment."""

    def get_comment(self, comment_id):
        comment = Comment.objects.visible().filter(pk=parse_comment_id(comment_id)).first()
        if comment is None:
            raise NotFound("Comment not found")
        return comment

    def get(self, request, comment_id):
        comment = self.get_comment(comment_id)
        return JsonResponse({
            "commentId": str(comment.pk),
            "reactions": CommentReaction.counts_for(comment),
        })

    def post(self, request, comment_id):
        comment = self.get_comment(comment_id)
        reaction_type = parse_json_body(request).get("reactionType")
        if reaction_type not in (CommentReaction.LIKE, CommentReaction.DISLIKE):
            raise InvalidRequest("Invalid reaction type")

        ip_hash = hash_ip_address(get_client_ip(request))
        _, action = CommentReaction.toggle(comment, ip_hash, reaction_type)
        messages = {
            "added": "Reaction added",
            "updated": "Reaction updated",
            "removed": "Reaction removed",
        }
        return JsonResponse({"success": True, "message": messages[action], "action": action})

    def delete(self, request, comment_id):
        comment = self.get_comment(comment_id)
        ip_hash = hash_ip_address(get_client_ip(request))
        CommentReaction.objects.filter(comment=comment, ip_address=ip_hash).delete()
        return JsonResponse({"success": True, "message": "Reaction removed"})


class MathCaptchaView(JSONErrorMixin, View):
    """Issue and verify math captcha challenges."""

    @method_decorator(ensure_csrf_cookie)
    def get(self, request):
        challenge_id, question, state = captcha.new_challenge()
        response = JsonResponse({"sessionId": challenge_id, "question": question})
        captcha.store(response, challenge_id, state)
        return response

    def post(self, request):
        data = parse_json_body(request)
        challenge_id = data.get("sessionId")
        user_answer = data.get("userAnswer")
        if not challenge_id or user_answer is None:
            raise InvalidRequest("Session ID and answer are required")

        response = JsonResponse({"success": True})
        captcha.verify(request, response, challenge_id, user_answer)
        return response
