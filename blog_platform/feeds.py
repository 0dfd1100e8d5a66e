"""RSS feed of the latest published posts."""
from django.contrib.syndication.views import Feed
from django.urls import reverse

from .conf import blog_settings
from .models import Post


class LatestPostsFeed(Feed):

    def title(self):
        return blog_settings.FEED_TITLE

    def link(self):
        return reverse("blog_platform:post_list")

    def description(self):
        return blog_settings.FEED_TITLE

    def items(self):
        return Post.objects.published().order_by("-published_at")[:blog_settings.FEED_ITEMS]

    def item_title(self, item):
        return item.title

    def item_description(self, item):
        return item.preview

    def item_pubdate(self, item):
        return item.published_at

    def item_categories(self, item):
        return [tag.name for tag in item.tags.all()]
