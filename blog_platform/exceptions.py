"""
Error taxonomy for django-blog-platform.

Views raise these and ``JSONErrorMixin`` turns them into
``{"error": message}`` responses with the matching status code.
"""


class BlogPlatformError(Exception):
    """Base class for errors reported to API clients."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(BlogPlatformError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(BlogPlatformError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(BlogPlatformError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFound(BlogPlatformError):
    status_code = 404
    default_message = "Not found"


class RateLimited(BlogPlatformError):
    status_code = 429
    default_message = "Rate limit exceeded. Please wait before trying again."


class InternalError(BlogPlatformError):
    pass
