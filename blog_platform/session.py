"""
Anonymous comment session identity.

Every browser gets an opaque UUID in the ``comment_session`` cookie. The id
is what deletion grants are keyed on; it is never stored on its own.

Add the middleware so newly issued ids reach the browser:

    MIDDLEWARE = [
        ...
        'blog_platform.session.CommentSessionMiddleware',
    ]
"""
import uuid
from dataclasses import dataclass

from .conf import blog_settings

_REQUEST_ATTR = "_comment_session_id"
_ISSUED_ATTR = "_comment_session_issued"


@dataclass(frozen=True)
class SessionId:
    """Opaque per-browser session identifier."""

    value: str

    def __str__(self):
        return self.value

    @classmethod
    def generate(cls):
        return cls(str(uuid.uuid4()))

    @classmethod
    def parse(cls, raw):
        """Return a SessionId for a well-formed cookie value, else None."""
        if not raw:
            return None
        try:
            return cls(str(uuid.UUID(raw)))
        except (TypeError, ValueError):
            return None


def get_session_id(request):
    """Return the request's existing session id without issuing one."""
    cached = getattr(request, _REQUEST_ATTR, None)
    if cached is not None:
        return cached
    return SessionId.parse(request.COOKIES.get(blog_settings.COMMENT_SESSION_COOKIE_NAME))


def get_or_create_session_id(request):
    """
    Return the caller's session id, issuing a new one if the cookie is
    missing or malformed.

    Repeated calls during one request return the same id. A newly issued id
    is written to the response by ``CommentSessionMiddleware``.
    """
    session_id = get_session_id(request)
    if session_id is None:
        session_id = SessionId.generate()
        setattr(request, _ISSUED_ATTR, True)
    setattr(request, _REQUEST_ATTR, session_id)
    return session_id


def set_session_cookie(response, session_id):
    response.set_cookie(
        blog_settings.COMMENT_SESSION_COOKIE_NAME,
        str(session_id),
        max_age=blog_settings.COMMENT_SESSION_MAX_AGE,
        httponly=True,
        secure=blog_settings.COMMENT_SESSION_COOKIE_SECURE,
        samesite="Lax",
    )


class CommentSessionMiddleware:
    """Persist session ids issued during the request as a cookie."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        if getattr(request, _ISSUED_ATTR, False):
            set_session_cookie(response, getattr(request, _REQUEST_ATTR))
        return response
