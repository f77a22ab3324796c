"""Permalink suggestions derived from the post's titles."""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import urlsplit

SUGGESTION_SUFFIXES: tuple[str, ...] = ("", "-1", "-optimized")


def sanitize_title(value: str) -> str:
    """Lowercase, accent-folded, dash-separated slug; empty when nothing survives."""
    folded = unicodedata.normalize("NFKD", value or "")
    slug = folded.encode("ascii", "ignore").decode("ascii").lower().strip()
    slug = re.sub(r"&[a-z0-9#]+;", "", slug)
    slug = re.sub(r"[^a-z0-9\s_-]", "", slug)
    slug = re.sub(r"[\s_]+", "-", slug)
    return re.sub(r"-+", "-", slug).strip("-")


def suggest_urls(seo_title: str | None, title: str | None, url: str | None) -> list[str]:
    """Three candidate permalinks on the post's host.

    The slug comes from the SEO title, else the post title, else the URL.
    """
    base = seo_title or title or url or ""
    slug = sanitize_title(base)
    if not slug:
        return []

    parsed = urlsplit(url or "")
    scheme = parsed.scheme or "https"
    host = parsed.hostname or ""
    return [f"{scheme}://{host}/{slug}{suffix}" for suffix in SUGGESTION_SUFFIXES]
