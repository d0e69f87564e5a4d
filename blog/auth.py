"""
Bearer-token authentication.

Tokens are HS256 JWTs whose subject is the user's primary key. The
middleware in blog.middleware resolves them; the decorators here gate the
views on the outcome.
"""

import logging
from datetime import datetime, timedelta, timezone as dt_timezone
from functools import wraps

import jwt
from django.conf import settings

from .errors import AuthenticationRequired, Forbidden
from .models import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIAL = "Invalid or expired token"


def create_access_token(user):
    now = datetime.now(dt_timezone.utc)
    payload = {
        "iss": settings.JWT_ISSUER,
        "sub": str(user.pk),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.JWT_EXP_MINUTES)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_token(token):
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=["HS256"],
        issuer=settings.JWT_ISSUER,
    )


def resolve_bearer(header):
    """
    Resolve an Authorization header value.

    Returns (user, None) on success and (None, reason) when a credential
    was presented but does not resolve to an account.
    """
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None, INVALID_CREDENTIAL
    try:
        payload = decode_token(token.strip())
    except jwt.PyJWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        return None, INVALID_CREDENTIAL
    try:
        user = User.objects.get(pk=int(payload.get("sub")))
    except (TypeError, ValueError, User.DoesNotExist):
        return None, INVALID_CREDENTIAL
    if not user.is_active:
        return None, INVALID_CREDENTIAL
    return user, None


def token_required(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        auth_error = getattr(request, "auth_error", None)
        if auth_error:
            raise Forbidden(auth_error)
        if not request.user.is_authenticated:
            raise AuthenticationRequired()
        return view(request, *args, **kwargs)
    return wrapper


def admin_required(view):
    @token_required
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not getattr(request.user, "is_admin", False):
            raise Forbidden("Admin access required")
        return view(request, *args, **kwargs)
    return wrapper
