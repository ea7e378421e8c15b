"""Rules for which image URLs may be sent to image-mode summarization."""

from __future__ import annotations

from urllib.parse import urlsplit

from linkvault.constants import (
    INSTAGRAM_FULL_SIZE,
    INSTAGRAM_THUMBNAIL_SIZE,
    PROFILE_PICTURE_MARKERS,
    VISION_BLOCKED_HOSTS,
    VISION_IMAGE_EXTENSIONS,
)


def upsize_instagram_thumbnail(image_url: str) -> str:
    """Swap the 150px Instagram thumbnail size token for the 1080px one."""
    return image_url.replace(INSTAGRAM_THUMBNAIL_SIZE, INSTAGRAM_FULL_SIZE)


def display_image_url(image_url: str | None, source: str) -> str | None:
    """Image URL as stored on the item."""
    if not image_url:
        return None
    if "instagram" in source.lower():
        return upsize_instagram_thumbnail(image_url)
    return image_url


def is_vision_eligible(image_url: str | None) -> bool:
    """False for profile pictures, CDNs that refuse scanners and unsupported formats."""
    if not image_url:
        return False
    lowered = image_url.lower()
    if any(marker in lowered for marker in PROFILE_PICTURE_MARKERS):
        return False
    try:
        parts = urlsplit(lowered)
    except ValueError:
        return False
    host = parts.hostname or ""
    if any(host == blocked or host.endswith(f".{blocked}") for blocked in VISION_BLOCKED_HOSTS):
        return False
    return parts.path.endswith(VISION_IMAGE_EXTENSIONS)
