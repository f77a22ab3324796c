"""Parser for block-editor post content.

Block-editor posts are plain HTML annotated with comment delimiters::

    <!-- wp:gallery {"ids":[1,2]} -->
    <figure class="wp-block-gallery">
        <!-- wp:image {"id":3} /-->
    </figure>
    <!-- /wp:gallery -->

``parse_blocks`` turns that into a tree of ``Block`` nodes. HTML found outside
any block becomes a freeform block whose ``name`` is ``None``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

BLOCK_MARKER = "<!-- wp:"
DEFAULT_NAMESPACE = "core/"

BLOCK_TOKEN_PATTERN = re.compile(
    r"<!--\s+(?P<closer>/)?wp:(?P<namespace>[a-z][a-z0-9_-]*/)?(?P<name>[a-z][a-z0-9_-]*)\s+"
    r"(?P<attrs>\{(?:(?!-->).)*?\}\s+)?(?P<void>/)?-->",
    re.DOTALL,
)


@dataclass(slots=True)
class Block:
    """One node of a block tree."""

    name: str | None
    attrs: dict[str, Any] = field(default_factory=dict)
    inner_html: str = ""
    inner_blocks: list[Block] = field(default_factory=list)


def has_blocks(content: str | None) -> bool:
    """Whether the content carries block-editor delimiters."""
    return bool(content) and BLOCK_MARKER in content


def parse_blocks(content: str | None) -> list[Block]:
    """Parse post content into a block tree.

    Content without block delimiters yields an empty list. Malformed markup
    never raises: unclosed blocks are closed at the end of the document and
    stray closers are kept as freeform HTML.
    """
    if not content or not has_blocks(content):
        return []

    output: list[Block] = []
    stack: list[Block] = []

    def add_html(text: str) -> None:
        if not text:
            return
        if stack:
            stack[-1].inner_html += text
        else:
            output.append(Block(name=None, inner_html=text))

    def attach(block: Block) -> None:
        if stack:
            stack[-1].inner_blocks.append(block)
        else:
            output.append(block)

    offset = 0
    for match in BLOCK_TOKEN_PATTERN.finditer(content):
        leading = content[offset:match.start()]
        offset = match.end()

        if match.group("closer"):
            if not stack:
                logger.debug("Stray block closer", extra={"block": _block_name(match)})
                add_html(leading + match.group(0))
                continue
            add_html(leading)
            attach(stack.pop())
            continue

        add_html(leading)
        block = Block(name=_block_name(match), attrs=_parse_attrs(match.group("attrs")))
        if match.group("void"):
            attach(block)
        else:
            stack.append(block)

    add_html(content[offset:])
    while stack:
        attach(stack.pop())

    return output


def _block_name(match: re.Match[str]) -> str:
    namespace = match.group("namespace") or DEFAULT_NAMESPACE
    return f"{namespace}{match.group('name')}"


def _parse_attrs(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug("Invalid block attributes", extra={"attrs": raw.strip()[:200]})
        return {}
    return parsed if isinstance(parsed, dict) else {}
