"""Validation for check-in and check-out photo payloads."""

import base64
import binascii

from attendance_tracker.domain.errors import CaptureFailure

_DATA_URL_PREFIX = "data:"
_BASE64_MARKER = ";base64,"


def validate_photo(data_url: str, max_bytes: int) -> str:
    """Return the data URL unchanged if it holds a usable image.

    The photo is stored opaquely, so only the envelope is checked: a base64
    data URL whose bytes start with a JPEG, PNG or WebP signature and fit
    within ``max_bytes``.
    """
    if not data_url.startswith(_DATA_URL_PREFIX) or _BASE64_MARKER not in data_url:
        raise CaptureFailure("Photo must be a base64 image data URL.")
    header, encoded = data_url.split(_BASE64_MARKER, 1)
    if not header[len(_DATA_URL_PREFIX) :].startswith("image/"):
        raise CaptureFailure("Photo data URL is not an image.")
    try:
        image_bytes = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CaptureFailure("Photo payload is not valid base64.") from exc
    if not image_bytes:
        raise CaptureFailure("Photo payload is empty.")
    if len(image_bytes) > max_bytes:
        raise CaptureFailure(f"Photo exceeds {max_bytes} bytes.")
    if detect_mime_type(image_bytes) is None:
        raise CaptureFailure("Photo is not a JPEG, PNG or WebP image.")
    return data_url


def detect_mime_type(image_bytes: bytes) -> str | None:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return None

