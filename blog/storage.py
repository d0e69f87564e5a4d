"""
Image uploads.

Files go through Django's default storage, which is the local MEDIA_ROOT
in development and Cloudinary when CLOUDINARY_CLOUD_NAME is configured
(see STORAGES in inkwell/settings.py). Callers get back a URL they can
persist on the entity.
"""

import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError

from .errors import InvalidInput

logger = logging.getLogger(__name__)

POST_IMAGE_TYPES = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
    'image/gif': '.gif',
}
AVATAR_TYPES = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
}


def _verify_image(upload):
    try:
        with Image.open(upload) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise InvalidInput("Uploaded file is not a valid image")
    finally:
        upload.seek(0)


def save_image(upload, folder, allowed_types, max_bytes):
    """Validate an uploaded image and store it; returns its public URL."""
    content_type = (upload.content_type or '').lower()
    if content_type not in allowed_types:
        allowed = ', '.join(sorted(allowed_types))
        raise InvalidInput(f"Only image files are allowed ({allowed})")
    if upload.size > max_bytes:
        raise InvalidInput(f"Image exceeds the {max_bytes // (1024 * 1024)} MB limit")

    _verify_image(upload)

    name = os.path.join(folder, f"{uuid.uuid4().hex}{allowed_types[content_type]}")
    stored = default_storage.save(name, upload)
    url = default_storage.url(stored)
    logger.info(f"Stored upload {stored} ({upload.size} bytes)")
    return url


def save_post_image(upload):
    return save_image(upload, 'posts', POST_IMAGE_TYPES, settings.POST_IMAGE_MAX_BYTES)


def save_avatar(upload):
    return save_image(upload, 'avatars', AVATAR_TYPES, settings.AVATAR_MAX_BYTES)
