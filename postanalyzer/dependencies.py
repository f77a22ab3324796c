"""FastAPI dependencies shared by the v1 routes."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from postanalyzer.config import settings
from postanalyzer.integrations.ai_platforms import APIKeyValidator
from postanalyzer.integrations.option_store import (
    InMemoryOptionStore,
    JsonFileOptionStore,
    OptionStore,
)
from postanalyzer.integrations.wordpress import WordPressClient
from postanalyzer.services.plugin_settings import PluginSettings, PluginSettingsService


async def get_wordpress_client() -> AsyncGenerator[WordPressClient, None]:
    """One WordPress client per request."""
    async with WordPressClient() as client:
        yield client


@lru_cache(maxsize=1)
def get_option_store() -> OptionStore:
    if settings.option_store_path:
        return JsonFileOptionStore(settings.option_store_path)
    return InMemoryOptionStore()


def get_api_key_validator() -> APIKeyValidator:
    return APIKeyValidator()


WordPress = Annotated[WordPressClient, Depends(get_wordpress_client)]
Options = Annotated[OptionStore, Depends(get_option_store)]
KeyValidator = Annotated[APIKeyValidator, Depends(get_api_key_validator)]


def get_settings_service(
    wp_client: WordPress,
    option_store: Options,
    validator: KeyValidator,
) -> PluginSettingsService:
    return PluginSettingsService(option_store, wp_client, validator)


SettingsService = Annotated[PluginSettingsService, Depends(get_settings_service)]


def get_active_settings(settings_service: SettingsService) -> PluginSettings:
    """Settings in effect for the current request."""
    return settings_service.load_active_settings()


ActiveSettings = Annotated[PluginSettings, Depends(get_active_settings)]
