"""
Shared helpers for caption tests.
"""

from .caption_fixtures import (
    OFFLINE_STYLESHEET,
    SYSTEM_FONTS,
    find_system_font,
    make_image
)

__all__ = [
    'OFFLINE_STYLESHEET',
    'SYSTEM_FONTS',
    'find_system_font',
    'make_image'
]
