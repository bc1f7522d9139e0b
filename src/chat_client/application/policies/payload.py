from __future__ import annotations

from chat_client.application.exceptions import PayloadTooLargeError

_MB = 1024 * 1024


def estimate_image_bytes(image: str | bytes) -> int:
    """Decoded size of an image blob.

    Strings are treated as base64, optionally wrapped in a data URL
    (``data:image/png;base64,...``).
    """
    if isinstance(image, (bytes, bytearray)):
        return len(image)
    _, sep, encoded = image.partition(",")
    if not sep:
        encoded = image
    encoded = encoded.strip()
    padding = len(encoded) - len(encoded.rstrip("="))
    return max(len(encoded) * 3 // 4 - padding, 0)


def format_limit(limit: int) -> str:
    if limit >= _MB:
        return f"{limit // _MB}MB"
    if limit >= 1024:
        return f"{limit // 1024}KB"
    return f"{limit}B"


def assert_image_size(image: str | bytes, limit: int) -> None:
    """Raise if the image exceeds the size ceiling."""
    if estimate_image_bytes(image) > limit:
        raise PayloadTooLargeError(f"Image exceeds {format_limit(limit)} limit")
