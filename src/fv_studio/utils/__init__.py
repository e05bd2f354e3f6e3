"""Utility modules for logging and image file handling."""

from fv_studio.utils.images import get_file_extension, load_uploaded_asset
from fv_studio.utils.logging import setup_logging

__all__ = [
    "get_file_extension",
    "load_uploaded_asset",
    "setup_logging",
]
