"""
Utility helpers shared across routers/services.
"""

from urllib.parse import urlparse
from typing import Optional

from .config import get_settings


def absolute_url(path: str, base: Optional[str] = None) -> str:
    """
    Turn a relative path into an absolute URL using PUBLIC_BASE_URL.
    """
    base_url = (base or get_settings().public_base_url).rstrip("/")
    if not path:
        return base_url + "/"
    if urlparse(path).scheme in ("http", "https"):
        return path
    if not path.startswith("/"):
        path = "/" + path
    return base_url + path
