"""Utility functions for image files and payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fv_studio.models import ImagePayload, UploadedAsset

if TYPE_CHECKING:
    from pathlib import Path

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def load_uploaded_asset(image_path: Path) -> UploadedAsset:
    """Load an image file as an UploadedAsset.

    Args:
        image_path: Path to the image file.

    Returns:
        A new asset with a fresh id, the file bytes and a MIME type
        derived from the suffix (PNG when unknown).

    Raises:
        FileNotFoundError: If the image file doesn't exist.

    """
    if not image_path.exists():
        msg = f"Image file not found: {image_path}"
        raise FileNotFoundError(msg)

    mime_type = MIME_TYPES.get(image_path.suffix.lower(), "image/png")
    payload = ImagePayload(mime_type=mime_type, data=image_path.read_bytes())
    return UploadedAsset(payload=payload, name=image_path.name)


def get_file_extension(mime_type: str) -> str:
    """Get file extension for a given MIME type.

    Args:
        mime_type: MIME type string (e.g., "image/png").

    Returns:
        File extension including the dot (e.g., ".png").

    """
    extensions = {
        "image/png": ".png",
        "image/jpeg": ".jpg",
        "image/gif": ".gif",
        "image/webp": ".webp",
    }
    return extensions.get(mime_type, ".png")
