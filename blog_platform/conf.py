"""
Configuration settings for django-blog-platform.

Override these in your Django settings.py:

    BLOG_PLATFORM = {
        'IP_HASH_SECRET': 'a-long-random-string',
        'COMMENT_DELETION_WINDOW': 30 * 60,
        'COMMENT_RATE_LIMIT': 5,
        ...
    }

IP_HASH_SECRET has no usable default; commenting, reactions and view
recording refuse to run without it.
"""
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

DEFAULTS = {
    # Anonymous comment session cookie
    "COMMENT_SESSION_COOKIE_NAME": "comment_session",
    "COMMENT_SESSION_MAX_AGE": 60 * 60 * 24,
    # None means "secure unless DEBUG"
    "COMMENT_SESSION_COOKIE_SECURE": None,

    # Seconds a commenter may delete their own comment
    "COMMENT_DELETION_WINDOW": 30 * 60,

    # Comments
    "COMMENT_MIN_LENGTH": 5,
    "COMMENT_MAX_LENGTH": 500,
    "AUTHOR_NAME_MIN_LENGTH": 2,
    "AUTHOR_NAME_MAX_LENGTH": 30,
    "COMMENTS_PER_PAGE": 10,
    "ADMIN_COMMENTS_PER_PAGE": 20,
    "DELETED_COMMENT_PLACEHOLDER": "[This comment has been deleted]",

    # Rate limiting: COMMENT_RATE_LIMIT comments per COMMENT_RATE_WINDOW seconds
    "COMMENT_RATE_LIMIT": 5,
    "COMMENT_RATE_WINDOW": 60 * 60,

    # Math captcha lifetime in seconds
    "CAPTCHA_MAX_AGE": 10 * 60,

    # HMAC key for hashing client IP addresses
    "IP_HASH_SECRET": "",

    # Posts
    "POSTS_PER_PAGE": 10,
    "SLUG_MAX_LENGTH": 100,

    # Feed
    "FEED_TITLE": "Latest posts",
    "FEED_ITEMS": 20,
}


class BlogPlatformSettings:
    """
    Lazy settings object that reads from Django settings.

    Access via: from blog_platform.conf import blog_settings
    """

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid blog_platform setting: {name}")

        user_settings = getattr(settings, "BLOG_PLATFORM", {})
        return user_settings.get(name, DEFAULTS[name])

    @property
    def COMMENT_SESSION_COOKIE_SECURE(self):
        """Return whether the session cookie carries the Secure flag."""
        user_settings = getattr(settings, "BLOG_PLATFORM", {})
        secure = user_settings.get("COMMENT_SESSION_COOKIE_SECURE")
        if secure is None:
            return not settings.DEBUG
        return secure

    @property
    def IP_HASH_SECRET(self):
        """Return the IP hashing key, refusing to run without one."""
        user_settings = getattr(settings, "BLOG_PLATFORM", {})
        secret = user_settings.get("IP_HASH_SECRET", DEFAULTS["IP_HASH_SECRET"])
        if not secret:
            raise ImproperlyConfigured(
                "BLOG_PLATFORM['IP_HASH_SECRET'] must be set to a strong random string."
            )
        return secret


blog_settings = BlogPlatformSettings()
