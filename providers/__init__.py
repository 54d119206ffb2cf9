"""
Providers package for the Daily Problem Scraper
Contains the provider adapters and the factory that creates them
"""

from .base_provider import BaseProvider
from .leetcode_provider import LeetCodeProvider
from .gfg_provider import GFGProvider
from .provider_factory import ProviderFactory, PROVIDER_REGISTRY

__all__ = [
    'BaseProvider',
    'LeetCodeProvider',
    'GFGProvider',
    'ProviderFactory',
    'PROVIDER_REGISTRY'
]
