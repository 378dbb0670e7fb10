"""Shared helper functions for tool implementations"""

import base64
import binascii
import logging
import re
import webbrowser
from typing import Optional

logger = logging.getLogger("MCP_Server")

WEBSITE_URL = "https://4o-image.app/"
DATA_URI_PREFIX = re.compile(r"^data:image/\w+;base64,")


def decode_image_base64(image_base64: str) -> bytes:
    """Decode a base64 image, accepting an optional data URI prefix.

    Raises:
        ValueError: if the payload is not valid base64
    """
    base64_data = DATA_URI_PREFIX.sub("", image_base64.strip())
    try:
        return base64.b64decode(base64_data)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"invalid base64 image data: {e}") from e


def open_in_browser(url: str) -> bool:
    """Open url in the default browser; returns whether it worked"""
    try:
        return bool(webbrowser.open(url))
    except webbrowser.Error as e:
        logger.warning(f"Failed to open image in browser: {e}")
        return False


def build_success_text(prompt: str, image_url: str, opened_in_browser: bool = False) -> str:
    lines = ["Image generated successfully!"]
    if opened_in_browser:
        lines.append("The image has been opened in your default browser.")
    lines.extend([
        "",
        "Generation details:",
        f'- Prompt: "{prompt}"',
        f"- Image URL: {image_url}",
        "",
        f"Visit our website: {WEBSITE_URL}",
        "",
        "You can also click the URL above to view the image again.",
    ])
    return "\n".join(lines)


def build_failure_text(error: Optional[str]) -> str:
    return f"Image generation failed: {error or 'Unknown error'}"
