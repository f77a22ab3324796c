"""Post and user listing schemas."""

from pydantic import BaseModel


class PostSummary(BaseModel):
    """Schema for one row of the post picker."""

    id: int
    title: str
    date: str | None
    slug: str
    link: str
    status: str


class UserSummary(BaseModel):
    """Schema for one row of the author picker."""

    id: int
    name: str
    email: str
