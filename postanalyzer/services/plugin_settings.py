"""Plugin settings: active AI platform, its API keys and the default author."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from postanalyzer.config import settings as app_settings
from postanalyzer.core.exceptions import (
    AuthorNotFoundError,
    EmptyAPIKeyError,
    InvalidAPIKeyError,
    InvalidPlatformError,
    SettingsDecodeError,
    SettingsSaveError,
)
from postanalyzer.core.field_encryption import decrypt_api_keys, encrypt_api_keys, mask_api_key
from postanalyzer.integrations.ai_platforms import (
    ALLOWED_PLATFORMS,
    DEFAULT_PLATFORM,
    APIKeyValidator,
    Platform,
)
from postanalyzer.integrations.option_store import OptionStore
from postanalyzer.integrations.wordpress import WordPressUser

logger = logging.getLogger(__name__)


class UserDirectory(Protocol):
    async def get_user(self, user_id: int) -> WordPressUser | None: ...


@dataclass(frozen=True, slots=True)
class PluginSettings:
    """Settings in effect for one request."""

    platform: Platform = DEFAULT_PLATFORM
    api_key: str = ""
    author_id: int = 0


class PluginSettingsService:
    """Reads and writes the plugin settings option.

    API keys are stored encrypted and only ever returned masked.
    """

    def __init__(
        self,
        option_store: OptionStore,
        users: UserDirectory,
        validator: APIKeyValidator | None = None,
        option_name: str | None = None,
    ) -> None:
        self.option_store = option_store
        self.users = users
        self.validator = validator or APIKeyValidator()
        self.option_name = option_name or app_settings.settings_option_name

    def _read_stored(self) -> dict[str, Any] | None:
        raw = self.option_store.get_option(self.option_name, "")
        if not raw:
            return None
        try:
            stored = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SettingsDecodeError() from e
        if not isinstance(stored, dict):
            raise SettingsDecodeError()
        return stored

    def _stored_keys(self, stored: dict[str, Any] | None) -> dict[str, str]:
        return decrypt_api_keys((stored or {}).get("api_keys"))

    async def save(
        self,
        ai_platform: str,
        api_keys: dict[str, str],
        author_id: int,
    ) -> dict[str, Any]:
        """Validate and store new settings.

        The selected platform's key is checked with a live request. A key
        submitted in its masked form keeps the stored key.
        """
        if ai_platform not in ALLOWED_PLATFORMS:
            raise InvalidPlatformError(ai_platform)

        try:
            current_keys = self._stored_keys(self._read_stored())
        except SettingsDecodeError:
            logger.warning("Overwriting undecodable settings")
            current_keys = {}

        resolved_keys: dict[str, str] = {}
        for platform in ALLOWED_PLATFORMS:
            submitted = str(api_keys.get(platform) or "").strip()
            stored = current_keys.get(platform)
            if stored and submitted == mask_api_key(stored):
                submitted = stored
            if submitted:
                resolved_keys[platform] = submitted

        active_key = resolved_keys.get(ai_platform)
        if not active_key:
            raise EmptyAPIKeyError(ai_platform)

        user = await self.users.get_user(author_id)
        if user is None:
            raise AuthorNotFoundError(author_id)

        validation = await self.validator.validate(ai_platform, active_key)
        if not validation.valid:
            logger.info(
                "API key rejected",
                extra={"platform": ai_platform, "reason": validation.message},
            )
            raise InvalidAPIKeyError(ai_platform, validation.message)

        stored_settings = {
            "ai_platform": ai_platform,
            "api_keys": encrypt_api_keys(resolved_keys),
            "author_id": author_id,
            "updated_at": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
        }
        encoded = json.dumps(stored_settings)

        saved = self.option_store.update_option(self.option_name, encoded)
        if not saved and self.option_store.get_option(self.option_name, "") != encoded:
            raise SettingsSaveError()

        logger.info(
            "Settings saved",
            extra={"platform": ai_platform, "author_id": author_id, "keys": sorted(resolved_keys)},
        )
        return {
            "success": True,
            "message": (
                f"Settings saved successfully! {ai_platform.capitalize()} "
                "API key is valid and ready to use."
            ),
            "data": {
                "ai_platform": ai_platform,
                "author_id": author_id,
                "author_name": user.name,
                "api_key_valid": True,
                "api_key_info": validation.info,
            },
        }

    async def get(self) -> dict[str, Any]:
        """Current settings with masked keys and the author's display name."""
        stored = self._read_stored()
        if stored is None:
            return {"ai_platform": "", "author_id": 0}

        masked = {
            platform: mask_api_key(key)
            for platform, key in self._stored_keys(stored).items()
        }
        result = {k: v for k, v in stored.items() if k != "api_keys"}
        result["api_keys_masked"] = masked

        author_id = result.get("author_id")
        if isinstance(author_id, int) and author_id > 0:
            user = await self.users.get_user(author_id)
            if user is not None:
                result["author_name"] = user.name
        return result

    def load_active_settings(self) -> PluginSettings:
        """The settings value to thread through a request; defaults when unset."""
        try:
            stored = self._read_stored()
        except SettingsDecodeError:
            logger.warning("Stored settings are unreadable; using defaults")
            return PluginSettings()
        if stored is None:
            return PluginSettings()

        platform = stored.get("ai_platform")
        if platform not in ALLOWED_PLATFORMS:
            platform = DEFAULT_PLATFORM
        author_id = stored.get("author_id")

        return PluginSettings(
            platform=platform,
            api_key=self._stored_keys(stored).get(platform, ""),
            author_id=author_id if isinstance(author_id, int) and author_id > 0 else 0,
        )
