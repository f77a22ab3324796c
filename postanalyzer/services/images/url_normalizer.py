"""Image URL normalization so resized renditions compare equal."""

import re
from urllib.parse import urlsplit

RESIZE_SUFFIX_PATTERN = re.compile(r"(?:-\d+x\d+)+(\.[^./]+)$")


def normalize_image_url(url: str) -> str:
    """Reduce an image URL to ``scheme://host/path`` without resize suffix.

    ``https://site/uploads/photo-300x200.jpg?ver=2`` becomes
    ``https://site/uploads/photo.jpg``. Port and credentials are dropped.
    Malformed input never raises: missing scheme or host render as empty
    strings.
    """
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname or ""
    except ValueError:
        return RESIZE_SUFFIX_PATTERN.sub(r"\1", url.strip())

    path = RESIZE_SUFFIX_PATTERN.sub(r"\1", parts.path)
    if not parts.scheme and not parts.netloc:
        # Already degenerate (relative path or an earlier normalized form).
        return path
    if ":" in host:
        host = f"[{host}]"
    return f"{parts.scheme}://{host}{path}"


def urls_match(first: str, second: str) -> bool:
    """Whether two URLs point at the same source image."""
    return normalize_image_url(first) == normalize_image_url(second)
