"""
Django admin configuration for blog_platform.
"""
from django.contrib import admin
from django.utils import timezone

from .models import (
    AdminUser,
    Category,
    Comment,
    CommentDeletionGrant,
    Post,
    PostView,
    Tag,
)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "post_count", "deleted_at"]
    search_fields = ["name", "slug", "description"]
    prepopulated_fields = {"slug": ("name",)}


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "post_count", "created_at"]
    search_fields = ["name", "slug"]
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ["created_at"]


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = [
        "title",
        "status",
        "category",
        "view_count",
        "published_at",
        "deleted_at",
    ]
    list_filter = ["status", "category", "created_at"]
    search_fields = ["title", "content", "excerpt"]
    raw_id_fields = ["category"]
    filter_horizontal = ["tags"]
    date_hierarchy = "created_at"
    readonly_fields = [
        "view_count",
        "created_at",
        "updated_at",
        "published_at",
    ]
    prepopulated_fields = {"slug": ("title",)}

    fieldsets = (
        (None, {
            "fields": ("title", "slug", "content", "excerpt")
        }),
        ("Taxonomy", {
            "fields": ("category", "tags")
        }),
        ("Status", {
            "fields": ("status", "published_at", "deleted_at")
        }),
        ("Metadata", {
            "fields": ("view_count", "created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    actions = ["publish_posts", "archive_posts", "soft_delete_posts"]

    @admin.action(description="Publish selected posts")
    def publish_posts(self, request, queryset):
        for post in queryset:
            post.publish()
        self.message_user(request, f"{queryset.count()} posts published.")

    @admin.action(description="Archive selected posts")
    def archive_posts(self, request, queryset):
        for post in queryset:
            post.archive()
        self.message_user(request, f"{queryset.count()} posts archived.")

    @admin.action(description="Delete selected posts (soft)")
    def soft_delete_posts(self, request, queryset):
        count = queryset.filter(deleted_at__isnull=True).update(deleted_at=timezone.now())
        self.message_user(request, f"{count} posts deleted.")


class DeletedListFilter(admin.SimpleListFilter):
    title = "deleted"
    parameter_name = "deleted"

    def lookups(self, request, model_admin):
        return [("yes", "Deleted"), ("no", "Visible")]

    def queryset(self, request, queryset):
        if self.value() == "yes":
            return queryset.filter(deleted_at__isnull=False)
        if self.value() == "no":
            return queryset.filter(deleted_at__isnull=True)
        return queryset


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ["preview", "author_name", "post", "created_at", "deleted_at"]
    list_filter = [DeletedListFilter, "created_at"]
    search_fields = ["content", "author_name", "post__title"]
    raw_id_fields = ["post", "parent"]
    readonly_fields = ["ip_address", "created_at", "updated_at"]
    actions = ["soft_delete_comments", "restore_comments"]

    @admin.action(description="Delete selected comments (soft)")
    def soft_delete_comments(self, request, queryset):
        count = queryset.filter(deleted_at__isnull=True).update(deleted_at=timezone.now())
        self.message_user(request, f"{count} comments deleted.")

    @admin.action(description="Restore selected comments")
    def restore_comments(self, request, queryset):
        count = queryset.filter(deleted_at__isnull=False).update(deleted_at=None)
        self.message_user(request, f"{count} comments restored.")


@admin.register(CommentDeletionGrant)
class CommentDeletionGrantAdmin(admin.ModelAdmin):
    list_display = ["comment", "session_id", "expires_at", "created_at"]
    search_fields = ["session_id"]
    raw_id_fields = ["comment"]
    readonly_fields = ["created_at"]


@admin.register(PostView)
class PostViewAdmin(admin.ModelAdmin):
    list_display = ["post", "viewed_on", "session_id", "created_at"]
    list_filter = ["viewed_on"]
    raw_id_fields = ["post"]


@admin.register(AdminUser)
class AdminUserAdmin(admin.ModelAdmin):
    list_display = ["user", "created_at"]
    raw_id_fields = ["user"]
