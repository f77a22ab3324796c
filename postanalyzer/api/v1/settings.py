"""Plugin settings endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from postanalyzer.core.exceptions import (
    AuthorNotFoundError,
    ExternalAPIError,
    SettingsDecodeError,
    SettingsError,
    SettingsSaveError,
)
from postanalyzer.dependencies import SettingsService
from postanalyzer.schemas.settings import SaveSettingsRequest, SaveSettingsResponse

router = APIRouter()


@router.post("/save-settings", response_model=SaveSettingsResponse)
async def save_settings(
    request: SaveSettingsRequest,
    settings_service: SettingsService,
) -> dict[str, Any]:
    """Validate the selected platform's API key and store the settings."""
    try:
        return await settings_service.save(
            ai_platform=request.ai_platform,
            api_keys=request.api_keys,
            author_id=request.author_id,
        )
    except (SettingsError, AuthorNotFoundError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        ) from e
    except SettingsSaveError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        ) from e
    except ExternalAPIError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        ) from e


@router.get("/get-settings")
async def get_plugin_settings(settings_service: SettingsService) -> dict[str, Any]:
    """Current settings with masked API keys."""
    try:
        return await settings_service.get()
    except SettingsDecodeError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        ) from e
    except ExternalAPIError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        ) from e
