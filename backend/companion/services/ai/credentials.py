"""Credential sources for the remote model client."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from companion.core.config import get_settings

logger = logging.getLogger(__name__)


class CredentialSource:
    """Base interface: hand out the current API key and optionally refresh it."""

    def current(self) -> Optional[str]:
        raise NotImplementedError

    @property
    def refresher(self) -> Optional[Callable[[], None]]:
        """Callable that rotates the credential, or None when rotation is unsupported."""
        return None


class StaticCredentialSource(CredentialSource):
    def __init__(self, api_key: Optional[str]) -> None:
        self._api_key = api_key

    def current(self) -> Optional[str]:
        return self._api_key


class EnvironmentCredentialSource(CredentialSource):
    """Reads the key from settings; refreshing drops the settings cache and re-reads the environment."""

    def __init__(self, *, refresh_enabled: bool = True) -> None:
        self.refresh_enabled = refresh_enabled

    def current(self) -> Optional[str]:
        return get_settings().openai_api_key

    @property
    def refresher(self) -> Optional[Callable[[], None]]:
        if not self.refresh_enabled:
            return None
        return self.refresh

    def refresh(self) -> None:
        previous = self.current()
        get_settings.cache_clear()
        updated = self.current()
        if updated and updated != previous:
            logger.info("Loaded a new API key from the environment.")
        else:
            logger.warning("Credential refresh did not produce a new API key.")
