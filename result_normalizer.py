"""Recovery of image URLs from completed task payloads.

The image API does not always fill ``image_url`` on a completed task;
sometimes the URL only appears inside the free-form ``text`` field.
"""

import re
from typing import Any, Optional

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp", "gif")

# Scheme, then anything up to whitespace/quote/paren, ending in an image extension
IMAGE_URL_PATTERN = re.compile(
    r"https?://[^\s\")]+\.(?:%s)" % "|".join(IMAGE_EXTENSIONS),
    re.IGNORECASE,
)


def extract_image_url(text: Any) -> Optional[str]:
    """Return the first image URL embedded in text, if any"""
    if not isinstance(text, str):
        return None
    match = IMAGE_URL_PATTERN.search(text)
    return match.group(0) if match else None


def normalize_result(payload: Any) -> Any:
    """Backfill ``image_url`` from ``text`` in place and return the payload.

    Non-dict payloads come back unchanged, as do payloads that already carry
    an ``image_url``. A missing match is not an error.
    """
    if not isinstance(payload, dict):
        return payload
    if payload.get("image_url"):
        return payload

    extracted = extract_image_url(payload.get("text"))
    if extracted:
        payload["image_url"] = extracted
    return payload
