"""Post analysis schemas."""

from typing import Literal

from pydantic import BaseModel, Field

from postanalyzer.schemas.image import ImageRecord

YesNo = Literal["yes", "no"]


class AnalyzePostRequest(BaseModel):
    """Schema for an analysis request."""

    post_id: int = Field(gt=0)


class SEOReport(BaseModel):
    """SEO plugin fields of a post and the issues found in them."""

    title: str = ""
    description: str = ""
    keywords: list[str] = Field(default_factory=list)
    robots: list[str] = Field(default_factory=list)
    is_noindex: YesNo = "no"
    is_nofollow: YesNo = "no"
    issues: list[str] = Field(default_factory=list)


class PostAnalysisReport(BaseModel):
    """Schema for the analysis report of one post."""

    url: str
    title: str
    author: str | None = None
    published_date: str | None = None
    updated_date: str | None = None
    categories: str = ""
    tags: str = ""
    word_count: int = 0
    seo: SEOReport = Field(default_factory=SEOReport)
    featured_image: ImageRecord | None = None
    attached_images: dict[str, ImageRecord] = Field(default_factory=dict)
    url_suggestions: list[str] = Field(default_factory=list)
