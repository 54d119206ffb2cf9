"""
Base provider for the Daily Problem Scraper

This module defines the capability interface every provider adapter implements
and the plumbing they share: a BrowserSession, a Navigator and an Extractor,
a form login flow and construction of the normalized Problem record.

Any failure inside login() or scrape_daily_question() closes the browser
before the error leaves the adapter.

Example:
    >>> class MyProvider(BaseProvider):
    ...     PROVIDER = ProviderType.LEETCODE
    ...     BASE_URL = "https://example.com"
    ...     def login(self, credentials): ...
    ...     def scrape_daily_question(self): ...
"""

import logging
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, Optional, Sequence, Type

from browser.extraction import Extractor
from browser.lifecycle import BrowserSession
from browser.navigation import Navigator
from models.problem import (
    Credentials, Problem, ProblemConstraint, ProblemExample, ProviderType,
    normalize_topics, problem_date_for
)
from utils.error_handler import ErrorDetector, LoginError, ScrapeError, ScraperError
from utils.settings import ScraperSettings
from utils.text_parsers import normalize_difficulty
from utils.url_parser import URLParser

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """
    Capability interface of a problem provider.

    Subclasses set the class attributes below and implement login() and
    scrape_daily_question(). Adapters that log in through a plain HTML form
    can delegate to _login_with_form().

    Attributes:
        PROVIDER (ProviderType): Provider handled by the adapter
        BASE_URL (str): Site root used to resolve relative URLs
        LOGIN_PATH (str): Login route, relative to BASE_URL
        LOGIN_FORM_SELECTOR (str): Element signalling the form has rendered
        USERNAME_SELECTOR (str): Username/email field
        PASSWORD_SELECTOR (str): Password field
        SUBMIT_SELECTOR (str): Submit button
        LOGGED_IN_SELECTORS (Sequence[str]): Any of these present means logged in
    """

    PROVIDER: ProviderType
    BASE_URL: str = ""
    LOGIN_PATH: str = ""
    LOGIN_FORM_SELECTOR: str = ""
    USERNAME_SELECTOR: str = ""
    PASSWORD_SELECTOR: str = ""
    SUBMIT_SELECTOR: str = ""
    LOGGED_IN_SELECTORS: Sequence[str] = ()

    def __init__(self, settings: Optional[ScraperSettings] = None,
                 session: Optional[BrowserSession] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            settings (Optional[ScraperSettings]): Runtime settings, read from
                the environment when omitted
            session (Optional[BrowserSession]): Browser session to drive, a new
                one is created when omitted
            sleep (Callable[[float], None]): Sleep function for waits and pauses
        """
        self.settings = settings or (session.settings if session else ScraperSettings.from_environment())
        self.session = session or BrowserSession(self.settings)
        self.navigator = Navigator(self.session, sleep=sleep)
        self.extractor = Extractor(self.session, self.navigator)
        self.url_parser = URLParser()

    @property
    def name(self) -> str:
        return self.PROVIDER.value

    @property
    def is_authenticated(self) -> bool:
        return self.session.authenticated

    @abstractmethod
    def login(self, credentials: Credentials) -> bool:
        """
        Log in to the provider.

        Returns:
            bool: True once logged in; False (browser closed) when the outcome
            could not be confirmed
        """

    @abstractmethod
    def scrape_daily_question(self) -> Problem:
        """Scrape today's featured problem into a normalized Problem."""

    def close_browser(self) -> None:
        """Release the browser. Never raises and may be called at any time."""
        self.session.close()

    @contextmanager
    def _guard(self, action: str, wrapper: Type[ScraperError]) -> Iterator[None]:
        """
        Close the browser on any failure inside the block.

        Engine errors propagate unchanged; anything else is wrapped in
        ``wrapper`` with the original chained.
        """
        try:
            yield
        except ScraperError as e:
            logger.error(f"{self.name} {action} failed: {e}")
            self.close_browser()
            raise
        except Exception as e:
            kind = "browser" if ErrorDetector.is_selenium_error(e) else "unexpected"
            logger.error(f"{self.name} {action} failed with {kind} error: {e}")
            self.close_browser()
            raise wrapper(f"Failed to {action} on {self.name} ({kind} error): {e}", self.name, e) from e

    def _login_with_form(self, credentials: Credentials) -> bool:
        with self._guard("log in", LoginError):
            self.session.new_page()
            self.navigator.safe_goto(self.LOGIN_PATH, self.BASE_URL)
            self.navigator.wait_for_element(self.LOGIN_FORM_SELECTOR)
            login_url = self.navigator.current_url()

            self.navigator.type_text(self.USERNAME_SELECTOR, credentials.identifier)
            self.navigator.type_text(self.PASSWORD_SELECTOR, credentials.secret)
            self.navigator.click(self.SUBMIT_SELECTOR)
            self.navigator.wait_for_navigation(from_url=login_url)

            if any(self.extractor.has_element(selector) for selector in self.LOGGED_IN_SELECTORS):
                self.session.authenticated = True
                logger.info(f"Logged in to {self.name} as {credentials.identifier}")
                return True

        logger.warning(f"Could not confirm {self.name} login for {credentials.identifier}")
        self.close_browser()
        return False

    def _build_problem(self, problem_url: str, title: str, difficulty: str,
                       topics: Iterable[str], description: Optional[str],
                       examples: Sequence[ProblemExample],
                       constraints: Sequence[ProblemConstraint],
                       is_premium: bool) -> Problem:
        """Assemble the Problem record; id and slug come from the URL."""
        problem_id, slug = self.url_parser.extract_id_and_slug(self.PROVIDER, problem_url)
        problem = Problem(
            id=problem_id,
            slug=slug,
            problem_url=problem_url,
            title=(title or "").strip() or slug,
            difficulty=normalize_difficulty(difficulty),
            topics=normalize_topics(topics),
            provider=self.PROVIDER,
            problem_date=problem_date_for(),
            description=description or None,
            examples=tuple(examples) or None,
            constraints=tuple(constraints) or None,
            is_premium=is_premium,
        )
        logger.info(f"Scraped {self.name} daily problem: {problem.title} ({problem.difficulty})")
        return problem
