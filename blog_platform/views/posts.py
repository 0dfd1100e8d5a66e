"""
Public post browsing, search and view recording.
"""
from django.db.models import Count, Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views import View
from django.views.generic import DetailView, ListView

from ..conf import blog_settings
from ..exceptions import NotFound
from ..models import Category, Post, PostView, Tag
from ..network import get_client_ip, hash_ip_address
from ..session import get_session_id
from .base import JSONErrorMixin


def serialize_post(post, full=False):
    data = {
        "id": post.pk,
        "title": post.title,
        "slug": post.slug,
        "excerpt": post.preview,
        "published_at": post.published_at.isoformat() if post.published_at else None,
        "view_count": post.view_count,
        "category": (
            {"name": post.category.name, "slug": post.category.slug}
            if post.category else None
        ),
        "tags": [{"name": t.name, "slug": t.slug} for t in post.tags.all()],
    }
    if full:
        data["content"] = post.content
        data["updated_at"] = post.updated_at.isoformat()
    return data


class PostListView(JSONErrorMixin, ListView):
    """List published posts with pagination and optional ``q`` search."""

    model = Post

    def get_paginate_by(self, queryset):
        return blog_settings.POSTS_PER_PAGE

    def get_queryset(self):
        return (
            Post.objects.published()
            .search(self.request.GET.get("q"))
            .select_related("category")
            .prefetch_related("tags")
        )

    def get_extra_payload(self):
        return {}

    def render_to_response(self, context, **response_kwargs):
        page = context["page_obj"]
        paginator = context["paginator"]
        payload = {
            "posts": [serialize_post(p) for p in context["object_list"]],
            "query": self.request.GET.get("q", ""),
            "pagination": {
                "page": page.number,
                "limit": paginator.per_page,
                "total": paginator.count,
                "totalPages": paginator.num_pages,
                "hasNext": page.has_next(),
                "hasPrev": page.has_previous(),
            },
        }
        payload.update(self.get_extra_payload())
        return JsonResponse(payload)


class CategoryPostListView(PostListView):
    """List posts in a specific category."""

    def get_queryset(self):
        self.category = get_object_or_404(
            Category, slug=self.kwargs["slug"], deleted_at__isnull=True
        )
        return super().get_queryset().filter(category=self.category)

    def get_extra_payload(self):
        return {"category": {"name": self.category.name, "slug": self.category.slug}}


class TagPostListView(PostListView):
    """List posts with a specific tag."""

    def get_queryset(self):
        self.tag = get_object_or_404(Tag, slug=self.kwargs["slug"], deleted_at__isnull=True)
        return super().get_queryset().filter(tags=self.tag)

    def get_extra_payload(self):
        return {"tag": {"name": self.tag.name, "slug": self.tag.slug}}


class PostDetailView(JSONErrorMixin, DetailView):
    """Display a single published post."""

    model = Post

    def get_queryset(self):
        return Post.objects.published().select_related("category").prefetch_related("tags")

    def render_to_response(self, context, **response_kwargs):
        return JsonResponse({"post": serialize_post(self.object, full=True)})


class CategoryListView(JSONErrorMixin, ListView):
    """List categories with their published post counts."""

    model = Category

    def get_queryset(self):
        return Category.objects.filter(deleted_at__isnull=True).annotate(
            published_posts=Count(
                "posts",
                filter=Q(
                    posts__status=Post.STATUS_PUBLISHED,
                    posts__deleted_at__isnull=True,
                ),
            )
        )

    def render_to_response(self, context, **response_kwargs):
        return JsonResponse({
            "categories": [
                {
                    "name": c.name,
                    "slug": c.slug,
                    "description": c.description,
                    "postCount": c.published_posts,
                }
                for c in context["object_list"]
            ],
        })


class PostViewsView(JSONErrorMixin, View):
    """Record a daily unique view, or report the view count."""

    def get_post(self, post_id):
        post = Post.objects.published().filter(pk=post_id).first()
        if post is None:
            raise NotFound("Post not found")
        return post

    def get(self, request, post_id):
        post = self.get_post(post_id)
        return JsonResponse({"viewCount": post.view_count})

    def post(self, request, post_id):
        post = self.get_post(post_id)
        session_id = get_session_id(request)

        recorded = PostView.record(
            post,
            ip_address=hash_ip_address(get_client_ip(request)),
            user_agent=request.headers.get("User-Agent", ""),
            session_id=str(session_id) if session_id else "",
        )
        if recorded:
            return JsonResponse({"success": True, "message": "View recorded"})
        return JsonResponse({"success": True, "message": "View already recorded today"})
