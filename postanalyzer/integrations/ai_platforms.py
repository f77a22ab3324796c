"""API-key checks against the supported AI platforms.

Each check is a single ``GET`` on the platform's model listing with a fixed
timeout. There is no retry: a failure is reported back to the user as-is.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

from postanalyzer.config import settings

logger = logging.getLogger(__name__)

Platform = Literal["chatgpt", "gemini", "groq"]

ALLOWED_PLATFORMS: tuple[Platform, ...] = ("chatgpt", "gemini", "groq")
DEFAULT_PLATFORM: Platform = "groq"


@dataclass(slots=True)
class KeyValidationResult:
    """Outcome of one API-key check."""

    valid: bool
    message: str
    info: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class _PlatformEndpoint:
    label: str
    url: str
    invalid_statuses: frozenset[int]
    models_field: str
    model_keywords: dict[str, str]
    uses_bearer: bool = True


PLATFORM_ENDPOINTS: dict[str, _PlatformEndpoint] = {
    "chatgpt": _PlatformEndpoint(
        label="OpenAI",
        url="https://api.openai.com/v1/models",
        invalid_statuses=frozenset({401}),
        models_field="data",
        model_keywords={"includes_gpt4": "gpt-4"},
    ),
    "gemini": _PlatformEndpoint(
        label="Gemini",
        url="https://generativelanguage.googleapis.com/v1beta/models",
        invalid_statuses=frozenset({400, 403}),
        models_field="models",
        model_keywords={},
        uses_bearer=False,
    ),
    "groq": _PlatformEndpoint(
        label="Groq",
        url="https://api.groq.com/openai/v1/models",
        invalid_statuses=frozenset({401}),
        models_field="data",
        model_keywords={"includes_mixtral": "mixtral", "includes_llama": "llama"},
    ),
}


def has_model(models: list[Any], keyword: str) -> bool:
    """Whether any listed model id contains ``keyword`` (case-insensitive)."""
    needle = keyword.lower()
    for model in models:
        if not isinstance(model, dict):
            continue
        model_id = model.get("id") or model.get("name")
        if isinstance(model_id, str) and needle in model_id.lower():
            return True
    return False


class APIKeyValidator:
    """Validates AI platform API keys with a live request."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout or settings.api_key_validation_timeout

    async def validate(self, platform: str, api_key: str) -> KeyValidationResult:
        """Check ``api_key`` against ``platform``; never raises."""
        endpoint = PLATFORM_ENDPOINTS.get(platform)
        if endpoint is None:
            return KeyValidationResult(valid=False, message="Unknown platform")

        headers = {"Content-Type": "application/json"}
        params: dict[str, str] = {}
        if endpoint.uses_bearer:
            headers["Authorization"] = f"Bearer {api_key}"
        else:
            params["key"] = api_key

        logger.info("Validating API key", extra={"platform": platform})
        try:
            async with httpx.AsyncClient(timeout=self.timeout, verify=True) as client:
                response = await client.get(endpoint.url, headers=headers, params=params)
        except httpx.ConnectError:
            logger.warning("API key validation could not connect", extra={"platform": platform})
            return KeyValidationResult(
                valid=False,
                message=f"Failed to connect to {endpoint.label} API. Please check your internet connection.",
            )
        except httpx.HTTPError as e:
            logger.warning(
                "API key validation failed",
                extra={"platform": platform, "error": str(e)},
            )
            return KeyValidationResult(
                valid=False,
                message=f"Error validating {endpoint.label} API key: {e}",
            )

        if response.status_code in endpoint.invalid_statuses:
            return KeyValidationResult(
                valid=False,
                message=f"Invalid {endpoint.label} API key. Please check your key and try again.",
            )

        try:
            data = response.json()
        except ValueError:
            data = None

        models = data.get(endpoint.models_field) if isinstance(data, dict) else None
        if response.status_code == 200 and isinstance(models, list):
            info: dict[str, Any] = {"models_available": len(models)}
            for info_key, keyword in endpoint.model_keywords.items():
                info[info_key] = has_model(models, keyword)
            return KeyValidationResult(
                valid=True,
                message=f"{endpoint.label} API key is valid",
                info=info,
            )

        return KeyValidationResult(
            valid=False,
            message=f"Unexpected response from {endpoint.label} API: {response.status_code}",
        )
