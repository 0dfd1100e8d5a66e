"""
Views for django-blog-platform.
"""
from .comments import (
    CommentDetailView,
    CommentListView,
    CommentReactionView,
    CommentSessionView,
    MathCaptchaView,
)
from .dashboard import AdminAnalyticsView, AdminCommentListView
from .posts import (
    CategoryListView,
    CategoryPostListView,
    PostDetailView,
    PostListView,
    PostViewsView,
    TagPostListView,
)

__all__ = [
    "AdminAnalyticsView",
    "AdminCommentListView",
    "CategoryListView",
    "CategoryPostListView",
    "CommentDetailView",
    "CommentListView",
    "CommentReactionView",
    "CommentSessionView",
    "MathCaptchaView",
    "PostDetailView",
    "PostListView",
    "PostViewsView",
    "TagPostListView",
]
