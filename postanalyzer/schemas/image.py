"""Image inventory schemas."""

from posixpath import basename
from typing import Any, Literal
from urllib.parse import urlsplit

from pydantic import (
    BaseModel,
    Field,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
    model_validator,
)

ImageType = Literal["media-library", "external"]

MEDIA_LIBRARY_ONLY_FIELDS = ("mime_type", "file_size", "upload_date", "image_meta", "sizes")


class ImageRecord(BaseModel):
    """One image discovered for a post.

    Records with an ``id`` come from the media library; records without one
    exist only as bare URLs in the post content.
    """

    id: int | None = None
    src: str = Field(min_length=1)
    alt: str = ""
    title: str = ""
    caption: str = ""
    description: str = ""
    filename: str = ""
    width: int | None = None
    height: int | None = None
    type: ImageType = "external"

    # Media library only
    mime_type: str | None = None
    file_size: int | None = None
    upload_date: str | None = None
    image_meta: dict[str, Any] | None = None
    sizes: list[str] = Field(default_factory=list)

    @field_validator("width", "height", mode="before")
    @classmethod
    def _positive_dimension(cls, value: object) -> object:
        if value in (None, ""):
            return None
        try:
            number = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        return number if number > 0 else None

    @model_validator(mode="after")
    def _type_matches_id(self) -> "ImageRecord":
        expected = "media-library" if self.id is not None else "external"
        if self.type != expected:
            raise ValueError(f"image with id={self.id!r} must have type {expected!r}")
        return self

    @model_serializer(mode="wrap")
    def _drop_library_fields_for_external(
        self,
        handler: SerializerFunctionWrapHandler,
    ) -> dict[str, Any]:
        data = handler(self)
        if self.type == "external":
            for key in MEDIA_LIBRARY_ONLY_FIELDS:
                data.pop(key, None)
        return data

    @classmethod
    def external(cls, src: str) -> "ImageRecord":
        """Build a minimal record for an image that is not in the media library."""
        return cls(
            id=None,
            src=src,
            filename=basename(urlsplit(src).path),
            type="external",
        )
