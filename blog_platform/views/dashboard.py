"""
Admin dashboard API: comment moderation and analytics.
"""
from datetime import timedelta

from django.db.models import Count, Q
from django.http import JsonResponse
from django.utils import timezone
from django.views import View

from ..conf import blog_settings
from ..models import Category, Comment, CommentReaction, Post, PostView
from ..moderation import delete_comment
from .base import (
    AdminRequiredMixin,
    JSONErrorMixin,
    pagination_payload,
    parse_json_body,
    parse_pagination,
)

SORT_ORDERS = {
    "newest": ["-created_at"],
    "oldest": ["created_at"],
    "post": ["post_id", "-created_at"],
}


class AdminCommentListView(JSONErrorMixin, AdminRequiredMixin, View):
    """Moderation queue of all visible comments."""

    def get(self, request):
        page, limit = parse_pagination(request, blog_settings.ADMIN_COMMENTS_PER_PAGE)
        sort = request.GET.get("sort", "newest")
        order = SORT_ORDERS.get(sort, SORT_ORDERS["newest"])

        queryset = (
            Comment.objects.visible()
            .select_related("post", "parent")
            .annotate(
                like_count=Count(
                    "reactions", filter=Q(reactions__reaction_type=CommentReaction.LIKE)
                ),
                dislike_count=Count(
                    "reactions", filter=Q(reactions__reaction_type=CommentReaction.DISLIKE)
                ),
                reaction_total=Count("reactions"),
            )
            .order_by(*order)
        )
        total = Comment.objects.visible().count()
        offset = (page - 1) * limit

        comments = []
        for comment in queryset[offset:offset + limit]:
            data = comment.to_dict()
            data["post"] = {
                "id": comment.post.pk,
                "title": comment.post.title,
                "slug": comment.post.slug,
            }
            data["parent_comment"] = (
                {
                    "id": str(comment.parent.pk),
                    "content": comment.parent.content,
                    "author_name": comment.parent.author_name,
                }
                if comment.parent else None
            )
            data["reactionCounts"] = {
                "like": comment.like_count,
                "dislike": comment.dislike_count,
                "total": comment.reaction_total,
            }
            comments.append(data)

        return JsonResponse({
            "comments": comments,
            "pagination": pagination_payload(page, limit, total),
        })

    def delete(self, request):
        comment_id = parse_json_body(request).get("commentId")
        result = delete_comment(comment_id, user=request.user, redact=True)
        return JsonResponse(result)


class AdminAnalyticsView(JSONErrorMixin, AdminRequiredMixin, View):
    """Overview counts, popular posts, daily views and category stats."""

    def get(self, request):
        live_posts = Post.objects.filter(deleted_at__isnull=True)

        overview = {
            "totalPosts": live_posts.count(),
            "publishedPosts": Post.objects.published().count(),
            "totalViews": PostView.objects.count(),
            "totalComments": Comment.objects.visible().count(),
        }

        popular_posts = [
            {
                "id": post.pk,
                "title": post.title,
                "slug": post.slug,
                "created_at": post.created_at.isoformat(),
                "viewCount": post.view_count,
            }
            for post in live_posts.filter(view_count__gt=0).order_by("-view_count", "-created_at")[:5]
        ]

        since = timezone.now() - timedelta(days=7)
        chart_data = [
            {"date": row["viewed_on"].isoformat(), "views": row["views"]}
            for row in PostView.objects.filter(created_at__gte=since)
            .values("viewed_on")
            .annotate(views=Count("id"))
            .order_by("viewed_on")
        ]

        category_stats = [
            {"id": c.pk, "name": c.name, "slug": c.slug, "postCount": c.published_posts}
            for c in Category.objects.filter(deleted_at__isnull=True)
            .annotate(
                published_posts=Count(
                    "posts",
                    filter=Q(
                        posts__status=Post.STATUS_PUBLISHED,
                        posts__deleted_at__isnull=True,
                    ),
                )
            )
            .filter(published_posts__gt=0)
            .order_by("-published_posts", "name")
        ]

        return JsonResponse({
            "overview": overview,
            "popularPosts": popular_posts,
            "chartData": chart_data,
            "categoryStats": category_stats,
        })
