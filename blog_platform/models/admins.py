"""
Admin registry for django-blog-platform.
"""
from django.conf import settings
from django.db import models


class AdminUser(models.Model):
    """
    Registry entry granting a user blog administrator rights.

    Being authenticated is not enough to moderate; the user must also be
    listed here.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_admin",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Blog Admin"
        verbose_name_plural = "Blog Admins"

    def __str__(self):
        return str(self.user)
