import os, sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from browser.extraction import Extractor, element_text
from browser.navigation import Navigator, WaitUntil, ready_condition
from utils.error_handler import (
    CaptchaDetectedError, ElementNotFound, InsufficientElements, NavigationFailed,
    RequiredTextMissing, SessionNotReady, URLValidationError
)
from fakes import FakeDriver, fake_session, fast_settings, no_sleep

HOME = "https://example.com/"
LIST = "https://example.com/list"

LIST_HTML = """
<html><body>
  <h1 id="title">  Problem List  </h1>
  <h2 id="empty"></h2>
  <ul>
    <li class="item">alpha</li>
    <li class="item">beta</li>
  </ul>
  <div id="content"><p>Hello <b>world</b></p></div>
  <form><input id="search" name="q"><button id="go" type="submit">Go</button></form>
</body></html>
"""


def make_navigator(driver, **overrides):
    session = fake_session(driver, fast_settings(**overrides))
    session.new_page()
    navigator = Navigator(session, sleep=no_sleep)
    return session, navigator, Extractor(session, navigator)


def test_safe_goto_resolves_relative_url():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    _, navigator, _ = make_navigator(driver)

    target = navigator.safe_goto("/list", "https://example.com")

    assert target == LIST
    assert navigator.current_url() == LIST
    assert "Problem List" in navigator.page_source()


def test_safe_goto_passes_absolute_url_through():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    _, navigator, _ = make_navigator(driver)
    assert navigator.safe_goto(LIST, "https://other.example.org") == LIST


@pytest.mark.parametrize("url,base", [
    ("", None),
    ("/list", None),
    ("/list", "not a url"),
    ("ftp://example.com/file", None),
])
def test_safe_goto_rejects_malformed_urls(url, base):
    driver = FakeDriver()
    _, navigator, _ = make_navigator(driver)
    with pytest.raises(URLValidationError):
        navigator.safe_goto(url, base)
    assert driver.visited == []


def test_safe_goto_retries_transient_timeouts():
    driver = FakeDriver(pages={LIST: LIST_HTML}, get_failures={LIST: 1})
    _, navigator, _ = make_navigator(driver, retries=3)

    navigator.safe_goto(LIST)

    assert driver.visited == [LIST, LIST]


def test_safe_goto_exhaustion_raises_navigation_failed():
    driver = FakeDriver(get_failures={LIST: 10})
    _, navigator, _ = make_navigator(driver, retries=3)

    with pytest.raises(NavigationFailed) as exc_info:
        navigator.safe_goto(LIST)

    assert LIST in str(exc_info.value)
    assert "Attempt 3" in str(exc_info.value)
    assert len(driver.visited) == 3


def test_safe_goto_detects_challenge_page():
    driver = FakeDriver(pages={LIST: LIST_HTML}, titles={LIST: "Just a moment..."})
    _, navigator, _ = make_navigator(driver, retries=2)

    with pytest.raises(NavigationFailed) as exc_info:
        navigator.safe_goto(LIST)
    assert isinstance(exc_info.value.__cause__.errors[0], CaptchaDetectedError)


def test_safe_goto_times_out_when_document_never_loads():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    driver.ready_state = "loading"
    _, navigator, _ = make_navigator(driver, retries=1, page_timeout=0.05)

    with pytest.raises(NavigationFailed):
        navigator.safe_goto(LIST)


def test_safe_goto_without_page_raises_session_not_ready():
    session = fake_session(FakeDriver())
    navigator = Navigator(session, sleep=no_sleep)
    with pytest.raises(SessionNotReady):
        navigator.safe_goto(LIST)


def test_rate_limit_sleeps_between_navigations():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    session = fake_session(driver, fast_settings(rate_limit=5))
    session.new_page()
    sleeps = []
    navigator = Navigator(session, sleep=sleeps.append)

    navigator.safe_goto(LIST)
    navigator.safe_goto(LIST)

    assert len(sleeps) == 1
    assert 4 < sleeps[0] <= 5


@pytest.mark.parametrize("state,wait_until,expected", [
    ("interactive", WaitUntil.DOM_CONTENT_LOADED, True),
    ("interactive", WaitUntil.LOAD, False),
    ("complete", WaitUntil.LOAD, True),
    ("loading", WaitUntil.DOM_CONTENT_LOADED, False),
])
def test_ready_conditions(state, wait_until, expected):
    driver = FakeDriver()
    driver.ready_state = state
    assert ready_condition(wait_until)(driver) is expected


def test_network_idle_needs_a_stable_resource_count():
    driver = FakeDriver()
    condition = ready_condition(WaitUntil.NETWORK_IDLE)
    assert condition(driver) is False
    assert condition(driver) is True


def test_wait_for_element_returns_present_element():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    _, navigator, _ = make_navigator(driver)
    navigator.safe_goto(LIST)

    element = navigator.wait_for_element("#title")
    assert element_text(element) == "Problem List"


def test_wait_for_element_exhaustion_names_selector_and_attempts():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    _, navigator, _ = make_navigator(driver)
    navigator.safe_goto(LIST)

    with pytest.raises(ElementNotFound) as exc_info:
        navigator.wait_for_element("#missing", timeout=0.02, retries=3)

    error = exc_info.value
    assert error.selector == "#missing"
    assert error.attempts == 3
    assert '"#missing" after 3 attempts' in str(error)
    assert error.error_info.context["url"] == LIST


def test_wait_for_navigation_follows_url_change():
    target = "https://example.com/done"
    driver = FakeDriver(pages={LIST: LIST_HTML}, submit_targets={LIST: target})
    _, navigator, _ = make_navigator(driver)
    navigator.safe_goto(LIST)

    navigator.click("#go")
    assert navigator.wait_for_navigation(from_url=LIST) == target


def test_wait_for_navigation_timeout_accepts_non_blank_url():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    _, navigator, _ = make_navigator(driver)
    navigator.safe_goto(LIST)

    assert navigator.wait_for_navigation(timeout=0.05, from_url=LIST) == LIST


def test_wait_for_navigation_timeout_on_blank_page_fails():
    driver = FakeDriver()
    driver.ready_state = "loading"
    _, navigator, _ = make_navigator(driver)

    with pytest.raises(NavigationFailed):
        navigator.wait_for_navigation(timeout=0.05)


def test_wait_for_navigation_ready_selector_decides_on_timeout():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    _, navigator, _ = make_navigator(driver)
    navigator.safe_goto(LIST)

    assert navigator.wait_for_navigation(timeout=0.05, from_url=LIST, ready_selector="#title") == LIST
    with pytest.raises(NavigationFailed) as exc_info:
        navigator.wait_for_navigation(timeout=0.05, from_url=LIST, ready_selector="#dashboard")
    assert "#dashboard" in str(exc_info.value)


def test_type_text_sends_one_key_at_a_time():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    session = fake_session(driver)
    session.new_page()
    sleeps = []
    navigator = Navigator(session, sleep=sleeps.append)
    navigator.safe_goto(LIST)

    navigator.type_text("#search", "abc", delay=0.1)

    assert driver.typed["search"] == "abc"
    assert sleeps.count(0.1) == 3


def test_extract_text_required_and_optional():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    _, navigator, extractor = make_navigator(driver)
    navigator.safe_goto(LIST)

    assert extractor.extract_text("#title", required=True) == "Problem List"
    assert extractor.extract_text("#missing") == ""
    with pytest.raises(RequiredTextMissing):
        extractor.extract_text("#missing", required=True)
    with pytest.raises(RequiredTextMissing):
        extractor.extract_text("#empty", required=True)


def test_extract_elements_maps_matches_and_enforces_minimum():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    _, navigator, extractor = make_navigator(driver)
    navigator.safe_goto(LIST)

    assert extractor.extract_elements("li.item", element_text) == ["alpha", "beta"]
    assert extractor.extract_elements("li.none", element_text) == []
    with pytest.raises(InsufficientElements) as exc_info:
        extractor.extract_elements("li.item", element_text, min_count=3)
    assert exc_info.value.found == 2


def test_inner_html_and_has_element():
    driver = FakeDriver(pages={LIST: LIST_HTML})
    _, navigator, extractor = make_navigator(driver)
    navigator.safe_goto(LIST)

    assert extractor.inner_html("#content") == "<p>Hello <b>world</b></p>"
    assert extractor.inner_html("#nothing") == ""
    assert extractor.has_element("form input")
    assert not extractor.has_element("table")
