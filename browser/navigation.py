"""
Navigation with bounded retries.

Every page action goes through the BrowserSession's live page. Transient
failures (slow pages, elements that have not rendered yet, challenge pages) are
retried with exponential backoff; structural failures surface at once.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from browser.lifecycle import BrowserSession
from utils.error_handler import (
    CaptchaDetectedError, ElementNotFound, ErrorDetector, NavigationFailed, RetryExhaustedError
)
from utils.retry import retry_operation
from utils.url_parser import resolve_url

logger = logging.getLogger(__name__)

BLANK_URLS = ("", "about:blank", "data:,")

READY_STATE_SCRIPT = "return document.readyState"
RESOURCE_COUNT_SCRIPT = "return window.performance.getEntriesByType('resource').length"


class WaitUntil(Enum):
    """Page readiness conditions"""
    LOAD = "load"
    DOM_CONTENT_LOADED = "domcontentloaded"
    NETWORK_IDLE = "networkidle"


def ready_condition(wait_until: WaitUntil) -> Callable:
    """
    Build a WebDriverWait predicate for ``wait_until``.

    NETWORK_IDLE is stateful: it holds once the document is complete and the
    number of loaded resources did not change since the previous poll.
    """
    if wait_until == WaitUntil.DOM_CONTENT_LOADED:
        return lambda driver: driver.execute_script(READY_STATE_SCRIPT) in ("interactive", "complete")

    if wait_until == WaitUntil.LOAD:
        return lambda driver: driver.execute_script(READY_STATE_SCRIPT) == "complete"

    last_count = []

    def network_idle(driver) -> bool:
        if driver.execute_script(READY_STATE_SCRIPT) != "complete":
            return False
        count = driver.execute_script(RESOURCE_COUNT_SCRIPT)
        settled = bool(last_count) and last_count[-1] == count
        last_count.append(count)
        return settled

    return network_idle


class Navigator:
    """
    Page navigation and element waits on a BrowserSession.

    Args:
        session (BrowserSession): Session owning the page
        sleep (Callable[[float], None]): Sleep function, injectable for tests
    """

    def __init__(self, session: BrowserSession, sleep: Callable[[float], None] = time.sleep):
        self.session = session
        self.sleep = sleep
        self.last_navigation_time = 0.0

    @property
    def settings(self):
        return self.session.settings

    def _wait(self, driver, timeout: float) -> WebDriverWait:
        return WebDriverWait(driver, timeout, poll_frequency=self.settings.poll_interval)

    def _enforce_rate_limit(self) -> None:
        """Keep at least ``rate_limit`` seconds between two navigations."""
        elapsed = time.time() - self.last_navigation_time
        if elapsed < self.settings.rate_limit:
            sleep_time = self.settings.rate_limit - elapsed
            logger.debug(f"Rate limiting: sleeping for {sleep_time:.2f} seconds")
            self.sleep(sleep_time)
        self.last_navigation_time = time.time()

    def safe_goto(self, url: str, base_url: Optional[str] = None,
                  wait_until: WaitUntil = WaitUntil.LOAD,
                  timeout: Optional[float] = None, retries: Optional[int] = None) -> str:
        """
        Navigate the page to ``url`` with bounded retries.

        Args:
            url (str): Absolute URL, or a URL relative to ``base_url``
            base_url (Optional[str]): Base for relative URLs
            wait_until (WaitUntil): Readiness condition to wait for
            timeout (Optional[float]): Per-attempt timeout, page timeout by default
            retries (Optional[int]): Attempts, settings default when omitted

        Returns:
            str: The resolved URL

        Raises:
            URLValidationError: If the URL cannot be resolved
            NavigationFailed: If every attempt failed
            SessionNotReady: If no page is open
        """
        target = resolve_url(url, base_url)
        timeout = self.settings.page_timeout if timeout is None else timeout
        retries = self.settings.retries if retries is None else retries
        self._enforce_rate_limit()

        def attempt() -> None:
            driver = self.session.require_page()
            try:
                driver.get(target)
                self._wait(driver, timeout).until(ready_condition(wait_until))
            except TimeoutException as e:
                raise NavigationFailed(f"Navigation to {target} timed out after {timeout} seconds",
                                       target, e) from e
            except WebDriverException as e:
                raise NavigationFailed(f"Navigation to {target} failed: {e.msg}", target, e) from e

            if ErrorDetector.is_challenge_title(driver.title):
                raise CaptchaDetectedError(f"Challenge page served for {target}: {driver.title}", target)

        logger.info(f"Navigating to {target}")
        try:
            retry_operation(attempt, retries, self.settings.retry_delay,
                            f"Navigation to {target}", sleep=self.sleep)
        except RetryExhaustedError as e:
            raise NavigationFailed(str(e), target, e) from e
        return target

    def wait_for_element(self, selector: str, timeout: Optional[float] = None,
                         retries: Optional[int] = None):
        """
        Wait until ``selector`` is present in the DOM (visibility not required).

        Raises:
            ElementNotFound: Carries the selector and attempt count once every
                attempt has timed out
        """
        timeout = self.settings.element_timeout if timeout is None else timeout
        retries = self.settings.retries if retries is None else retries

        def attempt():
            driver = self.session.require_page()
            return self._wait(driver, timeout).until(
                EC.presence_of_element_located((By.CSS_SELECTOR, selector))
            )

        try:
            return retry_operation(attempt, retries, self.settings.retry_delay,
                                   f"Waiting for {selector}", sleep=self.sleep)
        except RetryExhaustedError as e:
            url = self._safe_current_url()
            raise ElementNotFound(selector, e.attempts,
                                  f"Timed out after {timeout} seconds per attempt", url) from e

    def wait_for_navigation(self, timeout: Optional[float] = None,
                            wait_until: WaitUntil = WaitUntil.LOAD,
                            from_url: Optional[str] = None,
                            ready_selector: Optional[str] = None) -> str:
        """
        Wait for a navigation triggered by a page action (e.g. a form submit).

        The navigation is complete once the URL differs from ``from_url`` and
        the document satisfies ``wait_until``. When the timer runs out,
        ``ready_selector`` decides if given; otherwise a non-blank URL is
        accepted as a likely complete navigation.

        Returns:
            str: The URL the page ended on

        Raises:
            NavigationFailed: If the navigation cannot be confirmed
        """
        timeout = self.settings.page_timeout if timeout is None else timeout
        driver = self.session.require_page()
        condition = ready_condition(wait_until)

        def navigated(d) -> bool:
            if from_url is not None and d.current_url == from_url:
                return False
            return condition(d)

        try:
            self._wait(driver, timeout).until(navigated)
            return driver.current_url
        except TimeoutException as e:
            current = self._safe_current_url() or ""
            if ready_selector:
                if driver.find_elements(By.CSS_SELECTOR, ready_selector):
                    logger.info(f"Navigation wait timed out but {ready_selector} is present")
                    return current
                raise NavigationFailed(
                    f"Navigation did not complete within {timeout} seconds: "
                    f"{ready_selector} not present on {current}", current, e
                ) from e
            if current not in BLANK_URLS:
                logger.warning(f"Navigation wait timed out at {current}, assuming the page is usable")
                return current
            raise NavigationFailed(f"Navigation did not complete within {timeout} seconds",
                                   current, e) from e

    def click(self, selector: str, timeout: Optional[float] = None) -> None:
        self.wait_for_element(selector, timeout, retries=1).click()

    def type_text(self, selector: str, text: str, delay: Optional[float] = None) -> None:
        """Type ``text`` into ``selector`` one key at a time."""
        delay = self.settings.typing_delay if delay is None else delay
        element = self.wait_for_element(selector, retries=1)
        for character in text:
            element.send_keys(character)
            if delay:
                self.sleep(delay)

    def pause(self, seconds: float) -> None:
        self.sleep(seconds)

    def current_url(self) -> str:
        return self.session.require_page().current_url

    def page_source(self) -> str:
        return self.session.require_page().page_source

    def _safe_current_url(self) -> Optional[str]:
        try:
            return self.session.require_page().current_url
        except Exception:
            return None
