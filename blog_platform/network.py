"""Client address helpers."""
import hashlib
import hmac

from .conf import blog_settings


def get_client_ip(request):
    """Return the client IP, preferring proxy headers."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return (
        request.headers.get("X-Real-IP")
        or request.META.get("REMOTE_ADDR")
        or "127.0.0.1"
    )


def hash_ip_address(ip_address):
    """
    HMAC-SHA256 an IP address with IP_HASH_SECRET.

    The hash stays stable for rate limiting and dedup while the raw address
    is never stored.
    """
    secret = blog_settings.IP_HASH_SECRET
    return hmac.new(secret.encode(), ip_address.encode(), hashlib.sha256).hexdigest()
