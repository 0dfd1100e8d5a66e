"""
Shared plumbing for the JSON views.
"""
import json
import logging

from django.db import DatabaseError
from django.http import Http404, JsonResponse

from ..auth import get_current_user, is_admin
from ..exceptions import BlogPlatformError, InvalidRequest, Unauthorized

logger = logging.getLogger(__name__)


class JSONErrorMixin:
    """Render BlogPlatformError, Http404 and storage errors as JSON."""

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except BlogPlatformError as exc:
            return JsonResponse({"error": exc.message}, status=exc.status_code)
        except Http404:
            return JsonResponse({"error": "Not found"}, status=404)
        except DatabaseError:
            logger.exception("Storage error in %s %s", request.method, request.path)
            return JsonResponse({"error": "Internal server error"}, status=500)


class AdminRequiredMixin:
    """Allow only users listed in the admin registry."""

    def dispatch(self, request, *args, **kwargs):
        if not is_admin(get_current_user(request)):
            raise Unauthorized()
        return super().dispatch(request, *args, **kwargs)


def parse_json_body(request):
    """Return the request body as a dict; an empty body is {}."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except ValueError:
        raise InvalidRequest("Invalid JSON body")
    if not isinstance(data, dict):
        raise InvalidRequest("Invalid JSON body")
    return data


def parse_int(value, name):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidRequest(f"{name} must be an integer")


def parse_pagination(request, default_limit, max_limit=100):
    """Return (page, limit) from the query string."""
    page = parse_int(request.GET.get("page", 1), "page")
    limit = parse_int(request.GET.get("limit", default_limit), "limit")
    if page < 1 or limit < 1:
        raise InvalidRequest("page and limit must be positive")
    return page, min(limit, max_limit)


def pagination_payload(page, limit, total):
    total_pages = (total + limit - 1) // limit
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }
