"""Custom exception classes for the application."""

from typing import Any


class PostAnalyzerError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Content Errors
class PostNotFoundError(PostAnalyzerError):
    """Post not found on the WordPress site."""

    def __init__(self, post_id: int) -> None:
        super().__init__(f"Post not found: {post_id}", {"post_id": post_id})


class AuthorNotFoundError(PostAnalyzerError):
    """Selected author does not exist."""

    def __init__(self, author_id: int) -> None:
        super().__init__("Selected author does not exist", {"author_id": author_id})


# Settings Errors
class SettingsError(PostAnalyzerError):
    """Base class for plugin settings errors."""

    pass


class InvalidPlatformError(SettingsError):
    """AI platform is not one of the supported platforms."""

    def __init__(self, platform: str) -> None:
        super().__init__(f"Unsupported AI platform: {platform}", {"platform": platform})


class EmptyAPIKeyError(SettingsError):
    """No API key supplied for the selected platform."""

    def __init__(self, platform: str) -> None:
        super().__init__(
            f"API key for {platform.capitalize()} cannot be empty",
            {"platform": platform},
        )


class InvalidAPIKeyError(SettingsError):
    """API key failed validation against its platform."""

    def __init__(self, platform: str, message: str) -> None:
        super().__init__(message, {"platform": platform})


class SettingsDecodeError(SettingsError):
    """Stored settings could not be decoded."""

    def __init__(self) -> None:
        super().__init__("Failed to decode settings")


class APIKeyDecryptionError(SettingsError):
    """A stored API key token does not decrypt under the current key."""

    def __init__(self, platform: str) -> None:
        super().__init__(
            f"Stored API key for {platform.capitalize()} cannot be decrypted",
            {"platform": platform},
        )


class SettingsSaveError(PostAnalyzerError):
    """Settings could not be written to the option store."""

    def __init__(self) -> None:
        super().__init__("Failed to save settings")


# External API Errors
class ExternalAPIError(PostAnalyzerError):
    """Error calling external API."""

    def __init__(self, api_name: str, message: str) -> None:
        super().__init__(f"{api_name} API error: {message}")


class AuthenticationError(ExternalAPIError):
    """External API rejected our credentials."""

    def __init__(self, api_name: str) -> None:
        super().__init__(api_name, "Authentication failed")
