import os, sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import time

import pytest
from selenium.common.exceptions import WebDriverException

from browser.environment import ResolvedBrowser, SOURCE_COMMON_PATH
from browser.lifecycle import (
    ACCEPT_LANGUAGE, LAUNCH_ARGUMENTS, USER_AGENT, BrowserSession, build_chrome_options
)
from utils.error_handler import (
    BrowserLaunchFailed, ExecutableNotResolved, PageCreationFailed, SessionNotReady
)
from fakes import FakeDriver, fake_session, fast_settings


def test_close_before_launch_never_raises():
    session = BrowserSession(fast_settings())
    session.close()
    session.close()
    assert session.driver is None


def test_close_twice_quits_once():
    driver = FakeDriver()
    session = fake_session(driver)
    session.new_page()

    session.close()
    session.close()

    assert driver.quit_count == 1
    assert session.driver is None
    assert not session.has_page


def test_close_resets_authentication():
    session = fake_session(FakeDriver())
    session.new_page()
    session.authenticated = True
    session.close()
    assert session.authenticated is False


def test_close_swallows_quit_errors():
    driver = FakeDriver()

    def broken_quit():
        raise WebDriverException("already gone")

    driver.quit = broken_quit
    session = fake_session(driver)
    session.new_page()
    session.close()
    assert session.driver is None


def test_new_page_configures_viewport_agent_and_timeouts():
    driver = FakeDriver()
    session = fake_session(driver, fast_settings(page_timeout=7))

    session.new_page()

    assert driver.window_size == (1920, 1080)
    assert driver.page_load_timeout == 7
    assert driver.script_timeout == 7
    commands = dict(driver.cdp_commands)
    assert commands["Network.setUserAgentOverride"] == {
        "userAgent": USER_AGENT, "acceptLanguage": ACCEPT_LANGUAGE
    }
    assert "webdriver" in commands["Page.addScriptToEvaluateOnNewDocument"]["source"]


def test_first_page_reuses_launch_window_then_replaces_pages():
    driver = FakeDriver()
    session = fake_session(driver)

    session.new_page()
    assert driver.window_handles == ["window-1"]

    session.new_page()
    assert driver.window_handles == ["window-1"]
    assert driver.current_window_handle == "window-1"


def test_new_page_in_extra_tab_closes_previous_tab():
    driver = FakeDriver()
    session = fake_session(driver)
    session.new_page()
    driver.switch_to.new_window("tab")  # something else opened a tab
    driver.switch_to.window("window-1")

    session.new_page()

    assert driver.closed_windows == ["window-1"]
    assert driver.current_window_handle == "window-3"


def test_require_page_without_page_raises():
    session = fake_session(FakeDriver())
    with pytest.raises(SessionNotReady):
        session.require_page()


def test_require_page_after_window_closed_elsewhere_raises_typed_error():
    driver = FakeDriver()
    session = fake_session(driver)
    session.new_page()

    driver.close()

    with pytest.raises(SessionNotReady) as exc_info:
        session.require_page()
    assert "closed outside the session" in str(exc_info.value)
    session.close()
    assert driver.quit_count == 1


def test_stale_browser_is_relaunched():
    first, second = FakeDriver(), FakeDriver()
    drivers = [first, second]
    session = fake_session(first, driver_factory=lambda options, resolved: drivers.pop(0))

    session.new_page()
    first.disconnect()
    assert not session.is_connected()

    session.new_page()

    assert session.driver is second
    assert first.quit_count == 1


def test_page_creation_failure_reports_stale_browser():
    driver = FakeDriver()
    session = fake_session(driver)
    session.ensure_browser()
    session._reusable_handle = None
    driver.fail_new_window = True
    driver.disconnect_on_failure = True

    with pytest.raises(PageCreationFailed) as exc_info:
        session.new_page()
    assert exc_info.value.stale is True


def test_page_creation_failure_on_live_browser_is_not_stale():
    driver = FakeDriver()
    session = fake_session(driver)
    session.ensure_browser()
    session._reusable_handle = None
    driver.fail_new_window = True

    with pytest.raises(PageCreationFailed) as exc_info:
        session.new_page()
    assert exc_info.value.stale is False


def test_launch_failure_raises_browser_launch_failed():
    def failing_factory(options, resolved):
        raise WebDriverException("chrome not reachable")

    session = fake_session(FakeDriver(), driver_factory=failing_factory)
    with pytest.raises(BrowserLaunchFailed) as exc_info:
        session.new_page()
    assert "/usr/bin/google-chrome" in str(exc_info.value)


def test_launch_failure_from_guessed_windows_path_carries_remediation():
    def failing_factory(options, resolved):
        raise WebDriverException("cannot find Chrome binary")

    session = BrowserSession(
        fast_settings(executable_path=None),
        resolver=lambda s: ResolvedBrowser(r"C:\Program Files\Google\Chrome\Application\chrome.exe",
                                           source=SOURCE_COMMON_PATH),
        driver_factory=failing_factory,
    )
    with pytest.raises(BrowserLaunchFailed) as exc_info:
        session.ensure_browser()
    assert "CHROME_EXECUTABLE_PATH" in str(exc_info.value)


def test_launch_timeout_raises():
    def slow_factory(options, resolved):
        time.sleep(0.5)
        return FakeDriver()

    session = fake_session(FakeDriver(), fast_settings(launch_timeout=0.05), driver_factory=slow_factory)
    with pytest.raises(BrowserLaunchFailed) as exc_info:
        session.ensure_browser()
    assert "did not start within" in str(exc_info.value)


def test_resolution_failure_propagates_unchanged():
    def resolver(settings):
        raise ExecutableNotResolved("no chrome", "linux", "/usr/bin/google-chrome")

    session = BrowserSession(fast_settings(), resolver=resolver, driver_factory=lambda o, r: FakeDriver())
    with pytest.raises(ExecutableNotResolved):
        session.new_page()


def test_chrome_options_include_hardening_flags():
    resolved = ResolvedBrowser("/opt/chrome", extra_arguments=("--single-process", "--disable-gpu"))
    options = build_chrome_options(fast_settings(), resolved)

    assert options.binary_location == "/opt/chrome"
    assert "--headless=new" in options.arguments
    for argument in LAUNCH_ARGUMENTS:
        assert argument in options.arguments
    assert "--single-process" in options.arguments
    assert options.arguments.count("--disable-gpu") == 1
    assert options.experimental_options["excludeSwitches"] == ["enable-automation"]


def test_headed_mode_omits_headless_flag():
    options = build_chrome_options(fast_settings(headless=False), ResolvedBrowser("/opt/chrome"))
    assert "--headless=new" not in options.arguments
