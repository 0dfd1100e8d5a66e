"""
URL configuration for django-blog-platform.

Include in your project urls.py:

    path('', include('blog_platform.urls')),
"""
from django.urls import path

from . import views
from .feeds import LatestPostsFeed

app_name = "blog_platform"

urlpatterns = [
    # Public browsing and search (?q=)
    path("posts/", views.PostListView.as_view(), name="post_list"),
    path("posts/<slug:slug>/", views.PostDetailView.as_view(), name="post_detail"),
    path("categories/", views.CategoryListView.as_view(), name="category_list"),
    path("categories/<slug:slug>/", views.CategoryPostListView.as_view(), name="category_posts"),
    path("tags/<slug:slug>/", views.TagPostListView.as_view(), name="tag_posts"),
    path("rss/", LatestPostsFeed(), name="feed"),

    # Comments
    path("api/comments/", views.CommentListView.as_view(), name="comment_list"),
    path("api/comments/session/", views.CommentSessionView.as_view(), name="comment_session"),
    path("api/comments/<str:comment_id>/", views.CommentDetailView.as_view(), name="comment_detail"),
    path(
        "api/comments/<str:comment_id>/reactions/",
        views.CommentReactionView.as_view(),
        name="comment_reactions",
    ),
    path("api/captcha/math/", views.MathCaptchaView.as_view(), name="math_captcha"),

    # Analytics
    path("api/posts/<int:post_id>/views/", views.PostViewsView.as_view(), name="post_views"),

    # Admin dashboard
    path("api/admin/comments/", views.AdminCommentListView.as_view(), name="admin_comments"),
    path("api/admin/analytics/", views.AdminAnalyticsView.as_view(), name="admin_analytics"),
]
