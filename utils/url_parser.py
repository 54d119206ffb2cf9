"""
URL Parser for the Daily Problem Scraper

This module resolves navigation targets and derives the problem id and slug
from provider problem URLs. Derivation is purely pattern based, so the same
URL always yields the same id/slug pair.

Supported Providers:
- LeetCode: https://leetcode.com/problems/{slug}/
- GeeksforGeeks: https://www.geeksforgeeks.org/problems/{slug}/{id}
                 https://www.geeksforgeeks.org/problem-of-day/{slug}

Example:
    >>> parser = URLParser()
    >>> parser.extract_id_and_slug(ProviderType.GFG,
    ...     "https://www.geeksforgeeks.org/problems/maximum-stone-removal-1662179442/1")
    ('1', 'maximum-stone-removal-1662179442')
"""

import re
import logging
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse, urljoin

from models.problem import ProviderType
from utils.error_handler import InvalidProblemUrl, URLValidationError

logger = logging.getLogger(__name__)


def resolve_url(url: str, base_url: Optional[str] = None) -> str:
    """
    Turn ``url`` into an absolute http(s) URL.

    Absolute URLs pass through unchanged. Relative ones are joined onto
    ``base_url``. Anything else raises URLValidationError before a browser
    ever sees it.

    Args:
        url (str): Absolute or relative URL
        base_url (Optional[str]): Base used for relative URLs

    Returns:
        str: Absolute URL

    Raises:
        URLValidationError: If the URL is empty or cannot be made absolute
    """
    if not url or not isinstance(url, str) or not url.strip():
        raise URLValidationError("URL cannot be empty", url)

    candidate = url.strip()
    parsed = urlparse(candidate)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return candidate

    if base_url:
        base = urlparse(base_url.strip())
        if base.scheme not in ("http", "https") or not base.netloc:
            raise URLValidationError(f"Invalid base URL: {base_url}", base_url)
        if parsed.scheme and parsed.scheme not in ("http", "https"):
            raise URLValidationError(f"Invalid URL: {candidate}", candidate)
        joined = urljoin(base_url.strip(), candidate)
        logger.debug(f"Resolved relative URL {candidate} -> {joined}")
        return joined

    raise URLValidationError(f"Invalid URL: {candidate}", candidate)


def strip_query(url: str) -> str:
    """Drop the query string and fragment from a URL."""
    return url.split("#", 1)[0].split("?", 1)[0]


class URLParser:
    """
    Derives problem identifiers from provider URLs.

    Attributes:
        PROBLEM_PATTERNS (Dict): Ordered ``(pattern, id_group, slug_group)``
            tuples per provider; the first matching pattern wins.
    """

    PROBLEM_PATTERNS: Dict[ProviderType, List[Tuple[str, int, int]]] = {
        ProviderType.LEETCODE: [
            (r'/problems/([^/?#]+)/?', 1, 1),
        ],
        ProviderType.GFG: [
            (r'/problems/([^/?#]+)/(\d+)', 2, 1),
            (r'/problem-of-day/([^/?#]+)', 1, 1),
        ],
    }

    def extract_id_and_slug(self, provider: ProviderType, url: str) -> Tuple[str, str]:
        """
        Extract ``(id, slug)`` from a problem URL.

        Args:
            provider (ProviderType): Provider whose URL scheme applies
            url (str): Problem URL

        Returns:
            Tuple[str, str]: Problem id and slug

        Raises:
            InvalidProblemUrl: If no known pattern matches

        Example:
            >>> URLParser().extract_id_and_slug(ProviderType.LEETCODE,
            ...     "https://leetcode.com/problems/two-sum/")
            ('two-sum', 'two-sum')
        """
        path = urlparse(url or "").path
        for pattern, id_group, slug_group in self.PROBLEM_PATTERNS.get(provider, []):
            match = re.search(pattern, path)
            if match:
                problem_id, slug = match.group(id_group), match.group(slug_group)
                logger.debug(f"{provider.value} URL {url} -> id={problem_id}, slug={slug}")
                return problem_id, slug

        logger.error(f"No {provider.value} problem pattern matches URL: {url}")
        raise InvalidProblemUrl(url, provider.value)

    def is_problem_url(self, provider: ProviderType, url: str) -> bool:
        """Return ``True`` if *url* looks like a problem URL of *provider*."""
        try:
            self.extract_id_and_slug(provider, url)
            return True
        except InvalidProblemUrl:
            return False
