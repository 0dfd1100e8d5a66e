"""
django-blog-platform - A Django blog with anonymous, self-moderated comments.

Features:
- Published post browsing, search, categories, tags and RSS
- Anonymous comments behind a math captcha and per-IP rate limit
- Time-boxed self-service comment deletion tied to a browser session
- Admin comment moderation and view analytics
- One view per visitor per day
"""

__version__ = "0.1.0"
