"""Deterministic SEO field checks for a post report."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup

SEO_TITLE_MIN_CHARS = 30
SEO_TITLE_MAX_CHARS = 70
META_DESCRIPTION_MIN_CHARS = 120
META_DESCRIPTION_MAX_CHARS = 320

SHORTCODE_PATTERN = re.compile(r"\[(\[?)/?[A-Za-z][\w-]*(?:[^\[\]]*)\](\]?)")
COMMENT_PATTERN = re.compile(r"<!--.*?-->", re.DOTALL)
WORD_PATTERN = re.compile(r"[^\W\d_]+(?:['’-][^\W\d_]+)*")


@dataclass(slots=True)
class RobotsDirectives:
    """Parsed robots meta value."""

    directives: list[str] = field(default_factory=list)

    @property
    def is_noindex(self) -> bool:
        return "noindex" in self.directives

    @property
    def is_nofollow(self) -> bool:
        return "nofollow" in self.directives


def check_seo_fields(title: str | None, description: str | None) -> list[str]:
    """Return human-readable issues for the SEO title and meta description."""
    issues: list[str] = []

    title = title or ""
    if not title:
        issues.append("Missing SEO title")
    else:
        if len(title) < SEO_TITLE_MIN_CHARS:
            issues.append(f"SEO title is short (<{SEO_TITLE_MIN_CHARS} chars)")
        if len(title) > SEO_TITLE_MAX_CHARS:
            issues.append(f"SEO title is long (>{SEO_TITLE_MAX_CHARS} chars)")

    description = description or ""
    if not description:
        issues.append("Missing meta description")
    else:
        if len(description) < META_DESCRIPTION_MIN_CHARS:
            issues.append(f"Meta description is short (<{META_DESCRIPTION_MIN_CHARS} chars)")
        if len(description) > META_DESCRIPTION_MAX_CHARS:
            issues.append(f"Meta description is long (>{META_DESCRIPTION_MAX_CHARS} chars)")

    return issues


def parse_robots(value: Any) -> RobotsDirectives:
    """Accept a comma-separated string or a list of directives."""
    if isinstance(value, str):
        raw = value.split(",")
    elif isinstance(value, list | tuple):
        raw = value
    else:
        raw = []
    return RobotsDirectives(
        directives=[str(item).strip() for item in raw if str(item).strip()],
    )


def split_keywords(value: Any) -> list[str]:
    if not isinstance(value, str) or not value.strip():
        return []
    return [keyword.strip() for keyword in value.split(",") if keyword.strip()]


def strip_shortcodes(content: str) -> str:
    return SHORTCODE_PATTERN.sub("", content)


def count_words(content: str) -> int:
    """Count words of post content after removing shortcodes and markup."""
    if not content:
        return 0
    stripped = COMMENT_PATTERN.sub(" ", strip_shortcodes(content))
    text = BeautifulSoup(stripped, "lxml").get_text(" ")
    return len(WORD_PATTERN.findall(text))
