"""Post picker endpoint."""

from fastapi import APIRouter, HTTPException, Query, status

from postanalyzer.core.exceptions import ExternalAPIError
from postanalyzer.dependencies import WordPress
from postanalyzer.schemas.content import PostSummary
from postanalyzer.services.post_analyzer import decode_entities

router = APIRouter()


@router.get("/posts", response_model=list[PostSummary])
async def list_posts(
    wp_client: WordPress,
    per_page: int = Query(50, ge=0),
) -> list[PostSummary]:
    """Latest posts first; ``per_page=0`` lists every post."""
    try:
        posts = await wp_client.list_posts(per_page=per_page)
    except ExternalAPIError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        ) from e

    return [
        PostSummary(
            id=post.id,
            title=decode_entities(post.title) or f"Post #{post.id}",
            date=post.date,
            slug=post.slug,
            link=post.link,
            status=post.status.capitalize(),
        )
        for post in posts
    ]
