from __future__ import annotations

import base64
import logging

logger = logging.getLogger(__name__)

MAX_PICTURE_SIZE = 5 * 1024 * 1024  # 5 MB

SUPPORTED_IMAGE_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}


class ProfilePictureError(Exception):
    pass


class ProfilePictureEncoder:
    def to_data_uri(self, file_bytes: bytes, content_type: str | None) -> str:
        if content_type not in SUPPORTED_IMAGE_TYPES:
            raise ProfilePictureError(f"Unsupported image type: {content_type}")

        if len(file_bytes) > MAX_PICTURE_SIZE:
            raise ProfilePictureError(f"Image too large: {len(file_bytes)} bytes (max {MAX_PICTURE_SIZE})")

        if not file_bytes:
            raise ProfilePictureError("Empty image")

        encoded = base64.b64encode(file_bytes).decode("ascii")
        logger.debug("Encoded %d byte %s image", len(file_bytes), SUPPORTED_IMAGE_TYPES[content_type])
        return f"data:{content_type};base64,{encoded}"


def initials(full_name: str) -> str:
    """First letter of each name part, used when there is no picture."""
    return "".join(part[0] for part in full_name.split())


profile_picture_encoder = ProfilePictureEncoder()
