"""Identity and admin-registry checks."""
import logging

from django.db import DatabaseError

from .models import AdminUser

logger = logging.getLogger(__name__)


def get_current_user(request):
    """Return the authenticated user or None."""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    return user


def is_admin(user):
    """
    Check the admin registry for ``user``.

    Anonymous users, unregistered users and registry lookup failures are
    all treated as non-admins.
    """
    if user is None or not user.is_authenticated:
        return False
    try:
        return AdminUser.objects.filter(user_id=user.pk).exists()
    except DatabaseError:
        logger.warning("Admin registry lookup failed for user %s", user.pk, exc_info=True)
        return False
