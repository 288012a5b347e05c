"""
MIME type lookup for files sent from disk.
"""

from __future__ import annotations

import mimetypes
import os
from typing import Dict, Union

DEFAULT_TYPE = "application/octet-stream"

# ─── Custom MIME types beyond stdlib ──────────────────────────────────────────
_EXTRA_MIME_TYPES: Dict[str, str] = {
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".woff2": "font/woff2",
    ".woff": "font/woff",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".webm": "video/webm",
    ".mp4": "video/mp4",
    ".wasm": "application/wasm",
    ".map": "application/json",
    ".jsonld": "application/ld+json",
    ".manifest": "text/cache-manifest",
    ".ico": "image/x-icon",
}


def lookup(path: Union[str, os.PathLike], default: str = DEFAULT_TYPE) -> str:
    """Content type for ``path`` judged by its extension."""
    ext = os.path.splitext(os.fspath(path))[1].lower()
    if ext in _EXTRA_MIME_TYPES:
        return _EXTRA_MIME_TYPES[ext]
    content_type, _ = mimetypes.guess_type(os.fspath(path), strict=False)
    return content_type or default
