"""Author picker endpoint."""

from fastapi import APIRouter, HTTPException, Query, status

from postanalyzer.core.exceptions import ExternalAPIError
from postanalyzer.dependencies import WordPress
from postanalyzer.schemas.content import UserSummary

router = APIRouter()


@router.get("/users", response_model=list[UserSummary])
async def list_users(
    wp_client: WordPress,
    per_page: int = Query(100, ge=0),
    role: str = Query(""),
) -> list[UserSummary]:
    """Users ordered by display name, filtered by role when given."""
    try:
        users = await wp_client.list_users(per_page=per_page, role=role)
    except ExternalAPIError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        ) from e

    return [UserSummary(id=user.id, name=user.name, email=user.email) for user in users]
