"""
Utils package for the Daily Problem Scraper
Contains error handling, configuration, retry and parsing helpers
"""

from .url_parser import URLParser, resolve_url
from .settings import ScraperSettings
from .retry import retry_operation

__all__ = ['URLParser', 'resolve_url', 'ScraperSettings', 'retry_operation']
