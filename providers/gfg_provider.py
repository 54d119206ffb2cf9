"""
GeeksforGeeks provider for the Daily Problem Scraper

Finds the Problem of the Day link and scrapes the problem page. GFG keeps its
examples in ``<pre>`` blocks labelled with ``<strong>`` tags and its constraints
in a ``<br>`` separated paragraph, so the problem body is parsed from markup
with BeautifulSoup rather than from plain text.

Supported URL formats:
- https://www.geeksforgeeks.org/problems/{slug}/{id}
- https://www.geeksforgeeks.org/problem-of-day/{slug}
"""

import logging
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag
from selenium.webdriver.common.by import By

from browser.extraction import element_text
from models.problem import Credentials, Problem, ProblemConstraint, ProblemExample, ProviderType
from utils.error_handler import ElementNotFound, InvalidProblemUrl, ScrapeError
from utils.text_parsers import (
    CONSTRAINTS_HEADER, build_example, extract_clean_description, parse_constraints,
    split_labelled_fields
)
from utils.url_parser import resolve_url, strip_query
from .base_provider import BaseProvider

logger = logging.getLogger(__name__)


class GFGProvider(BaseProvider):
    """
    Adapter for geeksforgeeks.org.

    The POTD link is ``a#potd_solve_prob``; when it is missing, a problem link
    wrapping a "Solve Problem" button is used, then the first problem link in
    the POTD container, ``main`` or the body.
    """

    PROVIDER = ProviderType.GFG
    BASE_URL = "https://www.geeksforgeeks.org"

    LOGIN_PATH = "/user/login/"
    LOGIN_FORM_SELECTOR = 'input[name="email"], input[type="email"]'
    USERNAME_SELECTOR = 'input[name="email"], input[type="email"]'
    PASSWORD_SELECTOR = 'input[name="password"], input[type="password"]'
    SUBMIT_SELECTOR = 'button[type="submit"], input[type="submit"]'
    LOGGED_IN_SELECTORS = ('a[href*="/user/logout"]', 'a[href*="/profile/"]', '[class*="user-menu"]')

    POTD_PATH = "/problem-of-the-day"
    POTD_LINK_SELECTOR = "a#potd_solve_prob"
    PROBLEM_LINK_SELECTOR = 'a[href*="/problems/"]'
    POTD_CONTAINERS = ('div[class*="problemOfTheDay"]', "main", "body")
    SOLVE_BUTTON_TEXT = "Solve Problem"
    TITLE_SELECTOR = 'div[class*="problems_header_content"] h3, div[class*="header_content"] h3'
    DIFFICULTY_SPAN_SELECTOR = ('div[class*="problems_header_description"] span, '
                                'div[class*="header_description"] span')
    CONTENT_SELECTOR = 'div[class*="problems_problem_content"], div[class*="problem_content"]'
    TOPIC_SELECTOR = 'a[href*="/tag/"], .tag, [class*="tag"]'
    PREMIUM_SELECTOR = '[class*="premium"], [class*="locked"]'

    PROBLEM_PAGE_SETTLE_SECONDS = 1.0

    BLOCK_TAGS = ["p", "div", "li", "ul", "ol", "section", "blockquote", "table", "tr",
                  "h1", "h2", "h3", "h4", "h5", "h6"]

    def login(self, credentials: Credentials) -> bool:
        return self._login_with_form(credentials)

    def scrape_daily_question(self) -> Problem:
        with self._guard("scrape daily question", ScrapeError):
            self.session.new_page()
            self.navigator.safe_goto(self.POTD_PATH, self.BASE_URL)

            href = self._find_potd_link()
            if "/problems/" not in href:
                logger.error(f"Problem of the Day link is not a problem URL: {href}")
                raise InvalidProblemUrl(href, self.name)
            problem_url = strip_query(resolve_url(href, self.BASE_URL))
            # Fail before loading the problem page when the URL carries no id
            self.url_parser.extract_id_and_slug(self.PROVIDER, problem_url)
            logger.info(f"GFG problem of the day: {problem_url}")

            self.navigator.safe_goto(problem_url)
            self.navigator.pause(self.PROBLEM_PAGE_SETTLE_SECONDS)

            title = self.extractor.extract_text(self.TITLE_SELECTOR, required=True)
            difficulty = self._extract_difficulty()
            examples, constraints, description = self.parse_problem_content(
                self.extractor.inner_html(self.CONTENT_SELECTOR)
            )
            topics = self.extractor.extract_elements(self.TOPIC_SELECTOR, element_text)
            is_premium = self.extractor.has_element(self.PREMIUM_SELECTOR)

            return self._build_problem(
                problem_url=problem_url,
                title=title,
                difficulty=difficulty,
                topics=topics,
                description=description,
                examples=examples,
                constraints=constraints,
                is_premium=is_premium,
            )

    def _find_potd_link(self) -> str:
        try:
            link = self.navigator.wait_for_element(self.POTD_LINK_SELECTOR, retries=1)
            href = link.get_attribute("href")
            if href:
                return href
        except ElementNotFound:
            logger.warning(f"{self.POTD_LINK_SELECTOR} not found, searching for a problem link")

        driver = self.session.require_page()
        for link in driver.find_elements(By.CSS_SELECTOR, self.PROBLEM_LINK_SELECTOR):
            buttons = link.find_elements(By.CSS_SELECTOR, "button")
            if any(self.SOLVE_BUTTON_TEXT in element_text(button) for button in buttons):
                return link.get_attribute("href") or ""

        for container in self.POTD_CONTAINERS:
            links = driver.find_elements(By.CSS_SELECTOR, f"{container} {self.PROBLEM_LINK_SELECTOR}")
            if links:
                return links[0].get_attribute("href") or ""

        raise ElementNotFound(self.POTD_LINK_SELECTOR, 1,
                              "Daily problem link not found on the Problem of the Day page",
                              driver.current_url)

    def _extract_difficulty(self) -> str:
        """Read ``<span>Difficulty: <strong>Medium</strong></span>`` from the header."""
        driver = self.session.require_page()
        for span in driver.find_elements(By.CSS_SELECTOR, self.DIFFICULTY_SPAN_SELECTOR):
            if "Difficulty" not in (span.get_attribute("textContent") or ""):
                continue
            strong = span.find_elements(By.CSS_SELECTOR, "strong")
            if strong:
                return element_text(strong[0])
        logger.debug("Difficulty not found on GFG problem page")
        return ""

    @classmethod
    def parse_problem_content(cls, content_html: str
                              ) -> Tuple[List[ProblemExample], List[ProblemConstraint], Optional[str]]:
        """
        Split the problem body markup into examples, constraints and prose.

        Args:
            content_html (str): Inner HTML of the problem content container

        Returns:
            Tuple of examples, constraints and the cleaned description
            (None when there is no prose)
        """
        if not content_html:
            return [], [], None

        soup = BeautifulSoup(content_html, "lxml")
        examples = cls._parse_examples(soup)
        constraints = cls._parse_constraints(soup)

        for pre in soup.find_all("pre"):
            pre.decompose()
        description = extract_clean_description(cls._block_text(soup))
        return examples, constraints, description or None

    @staticmethod
    def _parse_examples(soup: BeautifulSoup) -> List[ProblemExample]:
        """One example per ``<pre>`` block, numbered by block position."""
        examples = []
        for index, pre in enumerate(soup.find_all("pre"), start=1):
            image = pre.find("img")
            image_url = image.get("src") if isinstance(image, Tag) else None
            example = build_example(index, split_labelled_fields(pre.get_text()), image_url)
            if example is None:
                logger.debug(f"Skipping <pre> block {index}: no input/output pair")
                continue
            examples.append(example)
        return examples

    @staticmethod
    def _parse_constraints(soup: BeautifulSoup) -> List[ProblemConstraint]:
        """
        Constraints live in a ``<p>`` labelled ``<strong>Constraints</strong>``
        or headed ``Constraints:``, one per ``<br>`` line. The first such
        paragraph that yields any constraint wins.
        """
        for paragraph in soup.find_all("p"):
            label = next((strong for strong in paragraph.find_all("strong")
                          if strong.get_text().strip().rstrip(":").strip() == "Constraints"), None)
            if label is None and not CONSTRAINTS_HEADER.search(paragraph.get_text()):
                continue
            if label is not None:
                label.replace_with("Constraints:")
            for br in paragraph.find_all("br"):
                br.replace_with("\n")
            constraints = parse_constraints(paragraph.get_text())
            if constraints:
                return constraints
            logger.debug("Constraints paragraph without any constraint lines, trying the next one")
        return []

    @classmethod
    def _block_text(cls, soup: BeautifulSoup) -> str:
        """Text of ``soup`` with line breaks only at ``<br>`` and block boundaries."""
        for br in soup.find_all("br"):
            br.replace_with("\n")
        for block in soup.find_all(cls.BLOCK_TAGS):
            block.append("\n")
        return soup.get_text()
