"""
Browser package for the Daily Problem Scraper
Contains executable resolution, lifecycle, navigation and extraction helpers
"""

from .environment import ResolvedBrowser, PortableChromeProvider, resolve_browser_executable
from .lifecycle import BrowserSession
from .navigation import Navigator, WaitUntil
from .extraction import Extractor, element_text

__all__ = [
    'ResolvedBrowser',
    'PortableChromeProvider',
    'resolve_browser_executable',
    'BrowserSession',
    'Navigator',
    'WaitUntil',
    'Extractor',
    'element_text'
]
