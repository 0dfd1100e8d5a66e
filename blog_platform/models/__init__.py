"""
Models for django-blog-platform.

All models are importable from blog_platform.models:

    from blog_platform.models import Post, Comment, CommentDeletionGrant
"""
from .posts import Category, Tag, Post
from .comments import Comment, CommentDeletionGrant, CommentRateLimit, CommentReaction
from .analytics import PostView
from .admins import AdminUser

__all__ = [
    # Posts
    "Category",
    "Tag",
    "Post",
    # Comments
    "Comment",
    "CommentDeletionGrant",
    "CommentRateLimit",
    "CommentReaction",
    # Analytics
    "PostView",
    # Admin registry
    "AdminUser",
]
