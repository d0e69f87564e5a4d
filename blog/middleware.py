"""
================================================================================
INKWELL BLOG - CUSTOM MIDDLEWARE
================================================================================

@file        middleware.py
@description Bearer-token identity resolution and JSON error rendering
@version     1.0.0

MODULE PURPOSE
================================================================================
This module provides custom middleware classes for the Inkwell API:

1. BearerTokenMiddleware
   - Resolves "Authorization: Bearer <jwt>" to a User
   - Leaves anonymous callers anonymous
   - Rejects API requests whose credential does not resolve (403)

2. ApiErrorMiddleware
   - Renders blog.errors.ApiError subclasses as {"message": ...}
   - Renders everything else as a logged 500 {"message", "error"}

ORDERING
================================================================================
Both classes must sit after django.contrib.auth's AuthenticationMiddleware:

MIDDLEWARE = [
    ...
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'blog.middleware.BearerTokenMiddleware',
    'blog.middleware.ApiErrorMiddleware',
    ...
]

IDENTITY OUTCOMES
================================================================================
    No Authorization header      -> anonymous (public reads only)
    Valid token, active user     -> request.user = that user
    Header present, unresolvable -> 403 on every /api/ route, public
                                    reads included

ERROR MAPPING
================================================================================
    InvalidInput            400
    AuthenticationRequired  401
    Forbidden               403
    NotFound / Http404      404
    Conflict                409
    anything else           500 (logged with traceback)

================================================================================
"""

import logging

from django.contrib.auth.models import AnonymousUser
from django.http import Http404, JsonResponse

from .auth import resolve_bearer
from .errors import ApiError

logger = logging.getLogger(__name__)

API_PREFIX = '/api/'


# ============================================================================
# BEARER TOKEN MIDDLEWARE
# ============================================================================

class BearerTokenMiddleware:
    """
    Resolve the acting identity from a bearer credential.

    Flow:
        1. No Authorization header: keep whatever user Django resolved
           (anonymous for API clients)
        2. Header present: decode the JWT and load the user
        3. Decoding or lookup fails: 403 for /api/ paths; elsewhere an
           anonymous user plus request.auth_error

    Whether an anonymous caller may proceed is decided per view by
    blog.auth.token_required / admin_required.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.auth_error = None
        header = request.headers.get('Authorization', '')

        if header:
            user, error = resolve_bearer(header)
            if user is not None:
                request.user = user
            else:
                request.user = AnonymousUser()
                request.auth_error = error
                if request.path.startswith(API_PREFIX):
                    return JsonResponse({"message": error}, status=403)

        return self.get_response(request)


# ============================================================================
# API ERROR MIDDLEWARE
# ============================================================================

class ApiErrorMiddleware:
    """
    Convert exceptions raised by API views into JSON responses.

    Only paths under /api/ are handled; the Django admin keeps its own
    error pages. Because views run their writes inside
    transaction.atomic(), an exception reaching this point means nothing
    was committed.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if not request.path.startswith(API_PREFIX):
            return None

        if isinstance(exception, ApiError):
            if exception.status >= 500:
                logger.error(f"{request.method} {request.path}: {exception.message}")
            return JsonResponse({"message": exception.message}, status=exception.status)

        if isinstance(exception, Http404):
            return JsonResponse({"message": "Not found"}, status=404)

        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return JsonResponse(
            {"message": "Something went wrong", "error": str(exception)},
            status=500,
        )
