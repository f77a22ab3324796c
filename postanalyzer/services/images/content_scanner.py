"""Find ``<img>`` tags in raw post HTML."""

from __future__ import annotations

import html
import re
from collections.abc import Iterator
from dataclasses import dataclass

IMG_TAG_PATTERN = re.compile(r"<img[^>]+>", re.IGNORECASE)
SRC_ATTR_PATTERN = re.compile(r"(?<![\w-])src\s*=\s*([\"'])(.*?)\1", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True, slots=True)
class RawImageRef:
    """An image source URL as written in the content."""

    src: str


def extract_src(tag_html: str) -> str:
    """Return the decoded ``src`` attribute of a tag, or an empty string."""
    match = SRC_ATTR_PATTERN.search(tag_html)
    if not match:
        return ""
    return html.unescape(match.group(2)).strip()


class ContentImageScan:
    """Image references of one HTML document, in document order.

    Iteration is lazy and can be repeated; duplicates are kept.
    """

    def __init__(self, content: str) -> None:
        self.content = content or ""

    def __iter__(self) -> Iterator[RawImageRef]:
        for tag in IMG_TAG_PATTERN.finditer(self.content):
            src = extract_src(tag.group(0))
            if not src:
                continue
            yield RawImageRef(src=src)


def scan_content_images(content: str) -> ContentImageScan:
    """Scan post HTML for embedded images."""
    return ContentImageScan(content)
