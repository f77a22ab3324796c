"""Encryption of AI-platform API keys held in the settings option.

The option stores one Fernet token per platform under ``api_keys``. Plain
keys exist only while a request validates or uses them; anything shown to a
client goes through ``mask_api_key``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

from postanalyzer.config import settings
from postanalyzer.core.exceptions import APIKeyDecryptionError

logger = logging.getLogger(__name__)

MASK_VISIBLE_CHARS = 4


@lru_cache(maxsize=1)
def _settings_cipher() -> Fernet:
    return Fernet(settings.get_settings_encryption_key())


def reset_settings_cipher() -> None:
    """Forget the cached cipher so a changed encryption key takes effect."""
    _settings_cipher.cache_clear()


def encrypt_api_keys(keys: Mapping[str, str]) -> dict[str, str]:
    """Tokens for the ``api_keys`` entry of the option; empty keys are left out."""
    cipher = _settings_cipher()
    return {
        platform: cipher.encrypt(key.encode("utf-8")).decode("utf-8")
        for platform, key in keys.items()
        if key
    }


def decrypt_api_key(platform: str, token: str) -> str:
    try:
        return _settings_cipher().decrypt(token.encode("utf-8")).decode("utf-8")
    except InvalidToken as e:
        raise APIKeyDecryptionError(platform) from e


def decrypt_api_keys(tokens: Any) -> dict[str, str]:
    """Plain keys per platform from a stored ``api_keys`` entry.

    Tokens written under another encryption key are dropped with a warning;
    the platform then reads as having no key until it is saved again.
    """
    if not isinstance(tokens, Mapping):
        return {}

    keys: dict[str, str] = {}
    for platform, token in tokens.items():
        if not isinstance(token, str) or not token:
            continue
        try:
            keys[platform] = decrypt_api_key(platform, token)
        except APIKeyDecryptionError as e:
            logger.warning(e.message, extra=e.details)
    return keys


def mask_api_key(value: str) -> str:
    """``gsk_********``: the platform prefix stays recognizable, the rest is hidden."""
    if len(value) <= MASK_VISIBLE_CHARS:
        return "*" * len(value)
    return f"{value[:MASK_VISIBLE_CHARS]}{'*' * (len(value) - MASK_VISIBLE_CHARS)}"
