"""
Registration, login and profile edits.
"""

import logging

from django.contrib.auth import authenticate
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction

from . import storage
from .errors import InvalidInput, NotFound
from .models import User
from .utils import parse_id

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def _clean(value):
    return value.strip() if isinstance(value, str) else ''


def _check_username(username):
    if not username:
        raise InvalidInput("Username is required")
    if len(username) < 3:
        raise InvalidInput("Username must be at least 3 characters")
    if len(username) > 30:
        raise InvalidInput("Username cannot exceed 30 characters")
    if not username.replace('_', '').isalnum():
        raise InvalidInput("Username can only contain letters, numbers, and underscores")


def register(data):
    name = _clean(data.get('name'))
    username = _clean(data.get('username'))
    email = _clean(data.get('email')).lower()
    password = data.get('password') or ''

    if not name:
        raise InvalidInput("Name is required")
    _check_username(username)
    try:
        validate_email(email)
    except ValidationError:
        raise InvalidInput("Please enter a valid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if User.objects.filter(username__iexact=username).exists():
        raise InvalidInput("Username already taken")
    if User.objects.filter(email__iexact=email).exists():
        raise InvalidInput("Email already registered")

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=username, email=email, password=password, name=name
            )
    except IntegrityError as e:
        logger.warning(f"IntegrityError during registration: {e}")
        raise InvalidInput("Username or email already taken")

    logger.info(f"Registered user {user.pk} ({username})")
    return user


def login(data):
    """Check credentials given as username or email; returns the user."""
    identifier = _clean(data.get('identifier') or data.get('email') or data.get('username'))
    password = data.get('password') or ''
    if not identifier or not password:
        raise InvalidInput("Email or username and password are required")

    account = (
        User.objects.filter(username=identifier).first()
        or User.objects.filter(email__iexact=identifier).first()
    )
    user = authenticate(username=account.username, password=password) if account else None
    if user is None:
        logger.warning(f"Failed login for {identifier}")
        raise InvalidInput("Invalid credentials")
    return user


def update_profile(user, data, avatar=None):
    name = _clean(data.get('name'))
    username = _clean(data.get('username'))
    bio = data.get('bio') or ''
    if not isinstance(bio, str):
        raise InvalidInput("Bio must be text")

    if not name or not username:
        raise InvalidInput("Name and username are required")
    _check_username(username)
    if len(bio) > User._meta.get_field('bio').max_length:
        raise InvalidInput("Bio cannot exceed 500 characters")
    if User.objects.filter(username__iexact=username).exclude(pk=user.pk).exists():
        raise InvalidInput("Username already taken")

    user.name = name
    user.username = username
    user.bio = bio
    if avatar is not None:
        user.avatar = storage.save_avatar(avatar)
    user.save(update_fields=['name', 'username', 'bio', 'avatar', 'updated_at'])
    return user


def get_user(user_id):
    user = User.objects.filter(pk=parse_id(user_id, 'user ID')).first()
    if user is None:
        raise NotFound("User not found")
    return user
