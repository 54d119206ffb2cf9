import os, sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from models.problem import ProviderType
from utils.error_handler import InvalidProblemUrl, URLValidationError
from utils.url_parser import URLParser, resolve_url, strip_query


@pytest.fixture
def parser():
    return URLParser()


@pytest.mark.parametrize("url,expected", [
    ("https://leetcode.com/problems/two-sum/", ("two-sum", "two-sum")),
    ("https://leetcode.com/problems/two-sum", ("two-sum", "two-sum")),
    ("https://leetcode.com/problems/two-sum/description/?envType=daily-question", ("two-sum", "two-sum")),
])
def test_leetcode_id_and_slug(parser, url, expected):
    assert parser.extract_id_and_slug(ProviderType.LEETCODE, url) == expected


@pytest.mark.parametrize("url,expected", [
    ("https://www.geeksforgeeks.org/problems/maximum-stone-removal-1662179442/1",
     ("1", "maximum-stone-removal-1662179442")),
    ("https://www.geeksforgeeks.org/problems/missing-number-in-array1416/1?page=1",
     ("1", "missing-number-in-array1416")),
    ("https://www.geeksforgeeks.org/problem-of-day/sorted-subsequence",
     ("sorted-subsequence", "sorted-subsequence")),
])
def test_gfg_id_and_slug(parser, url, expected):
    assert parser.extract_id_and_slug(ProviderType.GFG, url) == expected


def test_extraction_is_deterministic(parser):
    url = "https://www.geeksforgeeks.org/problems/maximum-stone-removal-1662179442/1"
    results = {parser.extract_id_and_slug(ProviderType.GFG, url) for _ in range(5)}
    assert len(results) == 1


@pytest.mark.parametrize("provider,url", [
    (ProviderType.LEETCODE, "https://leetcode.com/problemset/"),
    (ProviderType.LEETCODE, "https://leetcode.com/problems/"),
    (ProviderType.GFG, "https://www.geeksforgeeks.org/problems/missing-number/"),
    (ProviderType.GFG, "https://www.geeksforgeeks.org/explore"),
    (ProviderType.GFG, ""),
])
def test_url_without_problem_segment_raises(parser, provider, url):
    with pytest.raises(InvalidProblemUrl) as exc_info:
        parser.extract_id_and_slug(provider, url)
    assert f"Invalid {provider.value} problem URL" in str(exc_info.value)
    assert not parser.is_problem_url(provider, url)


def test_is_problem_url(parser):
    assert parser.is_problem_url(ProviderType.LEETCODE, "https://leetcode.com/problems/two-sum/")


def test_resolve_url():
    assert resolve_url("https://leetcode.com/problems/a/") == "https://leetcode.com/problems/a/"
    assert resolve_url("/problems/a/", "https://leetcode.com") == "https://leetcode.com/problems/a/"
    assert resolve_url("  /x  ", "https://example.com/base/") == "https://example.com/x"
    with pytest.raises(URLValidationError):
        resolve_url("/problems/a/")
    with pytest.raises(URLValidationError):
        resolve_url("   ", "https://leetcode.com")
    with pytest.raises(URLValidationError):
        resolve_url("javascript:alert(1)", "https://leetcode.com")


def test_strip_query():
    assert strip_query("https://a.com/p/x/?envType=daily#top") == "https://a.com/p/x/"
    assert strip_query("https://a.com/p/x/") == "https://a.com/p/x/"
