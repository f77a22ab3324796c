"""Plugin settings schemas."""

from typing import Any

from pydantic import BaseModel, Field

from postanalyzer.integrations.ai_platforms import Platform


class SaveSettingsRequest(BaseModel):
    """Schema for saving plugin settings."""

    ai_platform: Platform
    api_keys: dict[str, str] = Field(default_factory=dict)
    author_id: int = Field(gt=0)


class SavedSettings(BaseModel):
    ai_platform: Platform
    author_id: int
    author_name: str
    api_key_valid: bool
    api_key_info: dict[str, Any] = Field(default_factory=dict)


class SaveSettingsResponse(BaseModel):
    """Schema for the save-settings response."""

    success: bool
    message: str
    data: SavedSettings
