"""
LeetCode provider for the Daily Problem Scraper

Finds the daily challenge on the problem set page and scrapes the problem page
it links to.

Supported URL formats:
- https://leetcode.com/problems/{slug}/
- https://leetcode.com/problems/{slug}/description/?envType=daily-question

Example:
    >>> provider = LeetCodeProvider()
    >>> problem = provider.scrape_daily_question()
    >>> problem.slug
    'two-sum'
"""

import logging
from typing import Optional, Tuple

from selenium.webdriver.common.by import By

from browser.extraction import element_text
from models.problem import Credentials, Problem, ProviderType
from utils.error_handler import ElementNotFound, ScrapeError
from utils.text_parsers import (
    extract_clean_description, parse_constraints, parse_examples, strip_problem_number
)
from utils.url_parser import resolve_url, strip_query
from .base_provider import BaseProvider

logger = logging.getLogger(__name__)


class LeetCodeProvider(BaseProvider):
    """
    Adapter for leetcode.com.

    The daily challenge is the first problem link inside the highlighted row
    at the top of /problemset/. If that container is missing, the first link
    tagged ``envType=daily-question`` is used instead.
    """

    PROVIDER = ProviderType.LEETCODE
    BASE_URL = "https://leetcode.com"

    LOGIN_PATH = "/accounts/login/"
    LOGIN_FORM_SELECTOR = "#id_login"
    USERNAME_SELECTOR = "#id_login"
    PASSWORD_SELECTOR = "#id_password"
    SUBMIT_SELECTOR = 'button[type="submit"]'
    LOGGED_IN_SELECTORS = ('a[href="/accounts/logout/"]', 'a[href*="/profile/"]')

    PROBLEMSET_PATH = "/problemset/"
    DAILY_CONTAINER_SELECTOR = 'div[class*="w-full"][class*="pb-[80px]"]'
    PROBLEM_LINK_SELECTOR = 'a[href*="/problems/"]'
    DAILY_LINK_FALLBACK_SELECTOR = 'a[href*="envType=daily-question"]'
    TITLE_SELECTOR = ".text-body.text-sd-foreground .ellipsis.line-clamp-1"
    DIFFICULTY_SELECTOR = "p.mx-0"
    TOPIC_SELECTOR = 'div.mt-2.flex.flex-wrap.gap-1.pl-7 a[href*="/tag/"]'
    DESCRIPTION_SELECTOR = 'div[data-track-load="description_content"]'
    PREMIUM_SELECTOR = 'svg[data-icon="lock-keyhole"]'

    # The problem list renders client side after the document load event
    PROBLEMSET_SETTLE_SECONDS = 2.0

    def login(self, credentials: Credentials) -> bool:
        return self._login_with_form(credentials)

    def scrape_daily_question(self) -> Problem:
        with self._guard("scrape daily question", ScrapeError):
            self.session.new_page()
            self.navigator.safe_goto(self.PROBLEMSET_PATH, self.BASE_URL)
            self.navigator.pause(self.PROBLEMSET_SETTLE_SECONDS)

            href, title, difficulty = self._find_daily_link()
            problem_url = strip_query(resolve_url(href, self.BASE_URL))
            logger.info(f"LeetCode daily problem: {problem_url}")

            self.navigator.safe_goto(problem_url)
            topics = self.extractor.extract_elements(self.TOPIC_SELECTOR, element_text)
            text = self.extractor.extract_text(self.DESCRIPTION_SELECTOR)
            is_premium = self.extractor.has_element(self.PREMIUM_SELECTOR)

            return self._build_problem(
                problem_url=problem_url,
                title=title,
                difficulty=difficulty,
                topics=topics,
                description=extract_clean_description(text),
                examples=parse_examples(text),
                constraints=parse_constraints(text),
                is_premium=is_premium,
            )

    def _find_daily_link(self) -> Tuple[str, str, str]:
        """Return ``(href, title, difficulty)`` of the daily challenge link."""
        link = None
        try:
            container = self.navigator.wait_for_element(self.DAILY_CONTAINER_SELECTOR, retries=1)
            links = container.find_elements(By.CSS_SELECTOR, self.PROBLEM_LINK_SELECTOR)
            link = links[0] if links else None
        except ElementNotFound:
            logger.warning("Daily challenge row not found on the problem set page")

        if link is None:
            logger.warning(f"Falling back to {self.DAILY_LINK_FALLBACK_SELECTOR}")
            link = self.navigator.wait_for_element(self.DAILY_LINK_FALLBACK_SELECTOR, retries=1)

        href = link.get_attribute("href") or ""
        title = strip_problem_number(self._child_text(link, self.TITLE_SELECTOR) or "")
        difficulty = self._child_text(link, self.DIFFICULTY_SELECTOR) or ""
        return href, title, difficulty

    @staticmethod
    def _child_text(element, selector: str) -> Optional[str]:
        children = element.find_elements(By.CSS_SELECTOR, selector)
        return element_text(children[0]) if children else None
