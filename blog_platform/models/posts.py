"""
Post, Category, and Tag models for django-blog-platform.
"""
from django.db import models
from django.db.models import Q
from django.urls import reverse
from django.utils import timezone
from django.utils.text import slugify

from ..conf import blog_settings


class Category(models.Model):
    """Category for organizing posts."""

    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Categories"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)[:blog_settings.SLUG_MAX_LENGTH]
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("blog_platform:category_posts", kwargs={"slug": self.slug})

    @property
    def post_count(self):
        """Return count of published posts in this category."""
        return self.posts.published().count()


class Tag(models.Model):
    """Flat tag for posts."""

    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=100, unique=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)[:blog_settings.SLUG_MAX_LENGTH]
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("blog_platform:tag_posts", kwargs={"slug": self.slug})

    @property
    def post_count(self):
        """Return count of published posts with this tag."""
        return self.posts.published().count()


class PostQuerySet(models.QuerySet):

    def published(self):
        return self.filter(status=Post.STATUS_PUBLISHED, deleted_at__isnull=True)

    def search(self, query):
        """Case-insensitive match on title, excerpt and content."""
        query = (query or "").strip()
        if not query:
            return self
        return self.filter(
            Q(title__icontains=query)
            | Q(excerpt__icontains=query)
            | Q(content__icontains=query)
        )


class Post(models.Model):
    """
    Blog post / article.

    Posts move from draft to published (and optionally archived) and are
    never hard-deleted from the admin flow; ``soft_delete`` stamps
    ``deleted_at`` instead.
    """

    STATUS_DRAFT = "draft"
    STATUS_PUBLISHED = "published"
    STATUS_ARCHIVED = "archived"
    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_PUBLISHED, "Published"),
        (STATUS_ARCHIVED, "Archived"),
    ]

    # Content
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    content = models.TextField()
    excerpt = models.TextField(
        blank=True,
        help_text="Optional manual excerpt. Auto-generated if blank.",
    )

    # Status
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_DRAFT,
        db_index=True,
    )
    published_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="When post was first published",
    )
    deleted_at = models.DateTimeField(null=True, blank=True)

    # Taxonomy
    category = models.ForeignKey(
        Category,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="posts",
    )
    tags = models.ManyToManyField(Tag, related_name="posts", blank=True)

    # Unique daily views, see PostView
    view_count = models.PositiveIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PostQuerySet.as_manager()

    class Meta:
        ordering = ["-published_at", "-created_at"]
        indexes = [
            models.Index(fields=["status", "-published_at"]),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        # Auto-generate a unique slug from title
        if not self.slug and self.title:
            base_slug = slugify(self.title)[:blog_settings.SLUG_MAX_LENGTH]
            slug = base_slug
            counter = 1
            while Post.objects.filter(slug=slug).exclude(pk=self.pk).exists():
                slug = f"{base_slug}-{counter}"
                counter += 1
            self.slug = slug

        if not self.created_at:
            self.created_at = timezone.now()

        if self.status == self.STATUS_PUBLISHED and not self.published_at:
            self.published_at = timezone.now()

        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("blog_platform:post_detail", kwargs={"slug": self.slug})

    @property
    def preview(self):
        """Return excerpt or truncated content for listings."""
        if self.excerpt:
            return self.excerpt
        if len(self.content) > 280:
            return self.content[:280] + "..."
        return self.content

    @property
    def is_published(self):
        return self.status == self.STATUS_PUBLISHED and self.deleted_at is None

    def publish(self):
        """Publish the post immediately."""
        self.status = self.STATUS_PUBLISHED
        if not self.published_at:
            self.published_at = timezone.now()
        self.save(update_fields=["status", "published_at", "updated_at"])

    def archive(self):
        self.status = self.STATUS_ARCHIVED
        self.save(update_fields=["status", "updated_at"])

    def soft_delete(self):
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at", "updated_at"])

    def increment_view_count(self):
        """Increment view count atomically."""
        Post.objects.filter(pk=self.pk).update(view_count=models.F("view_count") + 1)
