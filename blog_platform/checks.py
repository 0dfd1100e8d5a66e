"""
System checks for django-blog-platform.
"""
from django.conf import settings
from django.core.checks import Error, Tags, register

SESSION_MIDDLEWARE = "blog_platform.session.CommentSessionMiddleware"


@register(Tags.compatibility)
def check_comment_session_middleware(app_configs, **kwargs):
    """Error when CommentSessionMiddleware is missing from MIDDLEWARE."""
    if SESSION_MIDDLEWARE in settings.MIDDLEWARE:
        return []
    return [
        Error(
            "CommentSessionMiddleware is not installed.",
            hint=f"Add '{SESSION_MIDDLEWARE}' to MIDDLEWARE.",
            id="blog_platform.E001",
        )
    ]
