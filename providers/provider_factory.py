"""
Provider factory for the Daily Problem Scraper

Maps provider identifiers to adapter classes. Identifiers are the
ProviderType values and are matched case-insensitively.

Example:
    >>> ProviderFactory.is_supported("leetcode")
    True
    >>> provider = ProviderFactory.create("GFG")
"""

import logging
from typing import Dict, List, Optional, Type, Union

from browser.lifecycle import BrowserSession
from models.problem import ProviderType
from utils.error_handler import UnsupportedProvider
from utils.settings import ScraperSettings
from .base_provider import BaseProvider
from .gfg_provider import GFGProvider
from .leetcode_provider import LeetCodeProvider

logger = logging.getLogger(__name__)

PROVIDER_REGISTRY: Dict[ProviderType, Type[BaseProvider]] = {
    ProviderType.LEETCODE: LeetCodeProvider,
    ProviderType.GFG: GFGProvider,
}


class ProviderFactory:
    """Stateless lookup from provider identifier to a fresh adapter."""

    @staticmethod
    def _lookup(provider_id: Union[str, ProviderType]) -> Optional[ProviderType]:
        if isinstance(provider_id, ProviderType):
            return provider_id
        if not isinstance(provider_id, str):
            return None
        try:
            return ProviderType(provider_id.strip().upper())
        except ValueError:
            return None

    @classmethod
    def is_supported(cls, provider_id: Union[str, ProviderType]) -> bool:
        provider = cls._lookup(provider_id)
        return provider is not None and provider in PROVIDER_REGISTRY

    @classmethod
    def list_supported(cls) -> List[str]:
        return [provider.value for provider in PROVIDER_REGISTRY]

    @classmethod
    def create(cls, provider_id: Union[str, ProviderType],
               settings: Optional[ScraperSettings] = None,
               session: Optional[BrowserSession] = None) -> BaseProvider:
        """
        Create a new adapter for ``provider_id``.

        Args:
            provider_id: Provider identifier such as "LEETCODE" or "gfg"
            settings: Runtime settings passed to the adapter
            session: Browser session to drive, created by the adapter when omitted

        Raises:
            UnsupportedProvider: If no adapter is registered for the identifier
        """
        provider = cls._lookup(provider_id)
        if provider is None or provider not in PROVIDER_REGISTRY:
            logger.error(f"Unsupported provider requested: {provider_id}")
            raise UnsupportedProvider(str(provider_id), cls.list_supported())

        logger.debug(f"Creating {provider.value} provider")
        return PROVIDER_REGISTRY[provider](settings=settings, session=session)
