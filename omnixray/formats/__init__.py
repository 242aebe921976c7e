"""Format handlers for OmniXRay.

Each site-specific format lives in its own directory and implements the
Format protocol from omnixray/formats/base.py.
"""

from omnixray.formats.base import Format, error_result, unknown_result
from omnixray.formats.youtube import YouTubeFormat

__all__ = [
    "Format",
    "error_result",
    "unknown_result",
    "YouTubeFormat",
]
