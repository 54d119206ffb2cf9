"""
DOM extraction helpers.

Thin wrappers over the live page that turn missing or empty elements into the
engine's structural errors.
"""

import logging
from typing import Callable, List, Optional, TypeVar

from selenium.webdriver.common.by import By

from browser.lifecycle import BrowserSession
from browser.navigation import Navigator
from utils.error_handler import ElementNotFound, InsufficientElements, RequiredTextMissing

logger = logging.getLogger(__name__)

T = TypeVar("T")


def element_text(element) -> str:
    """Trimmed text of ``element``, falling back to ``textContent`` for hidden nodes."""
    text = element.text or element.get_attribute("textContent") or ""
    return text.strip()


class Extractor:
    """Reads text, elements and markup from the current page."""

    def __init__(self, session: BrowserSession, navigator: Navigator):
        self.session = session
        self.navigator = navigator

    def extract_text(self, selector: str, required: bool = False,
                     timeout: Optional[float] = None) -> str:
        """
        Text of the first element matching ``selector``.

        Returns ``""`` when the element is absent and not required.

        Raises:
            RequiredTextMissing: If required and the element is absent or empty
        """
        try:
            element = self.navigator.wait_for_element(selector, timeout, retries=1)
        except ElementNotFound as e:
            if required:
                raise RequiredTextMissing(selector, "element not found") from e
            logger.debug(f"Optional element {selector} not found")
            return ""

        text = element_text(element)
        if required and not text:
            raise RequiredTextMissing(selector, "element has no text")
        return text

    def extract_elements(self, selector: str, mapper: Callable[..., T],
                         min_count: int = 0, timeout: Optional[float] = None) -> List[T]:
        """
        Map every element matching ``selector`` through ``mapper``.

        Waits for the first match only when ``min_count`` is positive.

        Raises:
            InsufficientElements: If fewer than ``min_count`` elements match
        """
        if min_count > 0:
            try:
                self.navigator.wait_for_element(selector, timeout, retries=1)
            except ElementNotFound:
                logger.debug(f"No element matched {selector} in time")

        elements = self.session.require_page().find_elements(By.CSS_SELECTOR, selector)
        if len(elements) < min_count:
            raise InsufficientElements(selector, min_count, len(elements))
        return [mapper(element) for element in elements]

    def inner_html(self, selector: str) -> str:
        """Markup inside the first match of ``selector``, ``""`` when absent."""
        elements = self.session.require_page().find_elements(By.CSS_SELECTOR, selector)
        if not elements:
            return ""
        return elements[0].get_attribute("innerHTML") or ""

    def has_element(self, selector: str) -> bool:
        return bool(self.session.require_page().find_elements(By.CSS_SELECTOR, selector))
