"""Content and media store contracts consumed by the image pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(slots=True)
class AttachmentMetadata:
    """Stored data for one media-library attachment."""

    id: int
    url: str
    alt: str = ""
    title: str = ""
    caption: str = ""
    description: str = ""
    mime_type: str = ""
    file_path: str = ""
    file_size: int | None = None
    created_at: str | None = None
    width: int | None = None
    height: int | None = None
    renditions: dict[str, dict[str, Any]] = field(default_factory=dict)
    image_meta: dict[str, Any] | None = None
    rendition_urls: list[str] = field(default_factory=list)


class ContentStore(Protocol):
    """Read access to posts."""

    async def get_post_content(self, post_id: int) -> str: ...

    async def get_featured_image_id(self, post_id: int) -> int | None: ...

    async def get_attachment_children(self, post_id: int) -> list[int]: ...


class MediaStore(Protocol):
    """Read access to the media library."""

    async def get_attachment_metadata(self, attachment_id: int) -> AttachmentMetadata | None: ...

    async def resolve_url_to_attachment_id(self, url: str) -> int | None: ...
