"""
Browser lifecycle management.

A BrowserSession owns at most one Chrome process and one page (a window
handle) at a time. The process is launched lazily, relaunched when it has gone
stale and torn down by close(), which never raises.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from typing import Callable, Optional

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from webdriver_manager.chrome import ChromeDriverManager

from browser.environment import (
    SOURCE_COMMON_PATH, ResolvedBrowser, remediation_message, resolve_browser_executable
)
from utils.error_handler import (
    BrowserLaunchFailed, PageCreationFailed, ScraperError, SessionNotReady
)
from utils.settings import ScraperSettings

logger = logging.getLogger(__name__)

LAUNCH_ARGUMENTS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--disable-web-security",
    "--disable-features=IsolateOrigins,site-per-process",
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
)

VIEWPORT = (1920, 1080)
USER_AGENT = ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
              "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36")
ACCEPT_LANGUAGE = "en-US,en;q=0.9"
HIDE_WEBDRIVER_SCRIPT = "Object.defineProperty(navigator, 'webdriver', {get: () => undefined})"

Resolver = Callable[[ScraperSettings], ResolvedBrowser]
DriverFactory = Callable[[Options, ResolvedBrowser], webdriver.Chrome]


def build_chrome_options(settings: ScraperSettings, resolved: ResolvedBrowser) -> Options:
    """Chrome options for a hardened, automation-hidden launch."""
    options = Options()
    options.binary_location = resolved.executable_path
    if settings.headless:
        options.add_argument("--headless=new")
    for argument in LAUNCH_ARGUMENTS + tuple(resolved.extra_arguments):
        if argument not in options.arguments:
            options.add_argument(argument)
    options.add_experimental_option("excludeSwitches", ["enable-automation"])
    options.add_experimental_option("useAutomationExtension", False)
    return options


def create_chrome_driver(options: Options, resolved: ResolvedBrowser) -> webdriver.Chrome:
    """
    Start chromedriver and Chrome.

    The driver comes from the resolver when it supplied one, otherwise from
    ChromeDriverManager, and finally from Selenium Manager.
    """
    if resolved.driver_path:
        return webdriver.Chrome(service=Service(executable_path=resolved.driver_path),
                                options=options)
    try:
        service = Service(ChromeDriverManager().install())
    except Exception as driver_error:
        logger.warning(f"ChromeDriverManager failed: {driver_error}. Trying Selenium Manager...")
        service = Service()
    return webdriver.Chrome(service=service, options=options)


class BrowserSession:
    """
    One browser process and one page, created on demand.

    Args:
        settings (ScraperSettings): Timeouts, headless flag and environment signals
        resolver (Optional[Resolver]): Executable resolver, injectable for tests
        driver_factory (Optional[DriverFactory]): Builds the WebDriver from
            options, injectable for tests

    Attributes:
        authenticated (bool): A login succeeded in this session
    """

    def __init__(self, settings: Optional[ScraperSettings] = None,
                 resolver: Optional[Resolver] = None,
                 driver_factory: Optional[DriverFactory] = None):
        self.settings = settings or ScraperSettings.from_environment()
        self._resolver = resolver or resolve_browser_executable
        self._driver_factory = driver_factory or create_chrome_driver
        self.driver = None
        self.resolved: Optional[ResolvedBrowser] = None
        self.authenticated = False
        self._page_handle: Optional[str] = None
        self._reusable_handle: Optional[str] = None

    def __enter__(self) -> "BrowserSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def is_connected(self) -> bool:
        """True while the WebDriver session answers."""
        if self.driver is None or not getattr(self.driver, "session_id", None):
            return False
        try:
            self.driver.window_handles
            return True
        except WebDriverException:
            return False

    @property
    def has_page(self) -> bool:
        return self._page_handle is not None and self.is_connected()

    def ensure_browser(self):
        """
        Return a connected driver, launching one if needed.

        A stale driver is quit quietly and replaced.

        Raises:
            ExecutableNotResolved: If no browser executable can be determined
            BrowserLaunchFailed: If the browser does not start in time
        """
        if self.driver is not None:
            if self.is_connected():
                return self.driver
            logger.warning("Browser is no longer connected, relaunching")
            self._quit_driver()

        self.driver = self._launch()
        self._reusable_handle = self.driver.current_window_handle
        return self.driver

    def _launch(self):
        resolved = self._resolver(self.settings)
        self.resolved = resolved
        options = build_chrome_options(self.settings, resolved)
        remediation = remediation_message("windows") if resolved.source == SOURCE_COMMON_PATH else None

        logger.info(f"Launching browser {resolved.executable_path} ({resolved.source})")
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self._driver_factory, options, resolved)
        try:
            driver = future.result(timeout=self.settings.launch_timeout)
        except FuturesTimeout as e:
            future.add_done_callback(_quit_late_driver)
            message = f"Browser did not start within {self.settings.launch_timeout} seconds"
            logger.error(message)
            raise BrowserLaunchFailed(message, resolved.executable_path, e, remediation) from e
        except ScraperError:
            raise
        except Exception as e:
            message = f"Failed to launch browser at {resolved.executable_path}: {e}"
            if remediation:
                message = f"{message}\n\nSOLUTION: {remediation}"
            logger.error(message)
            raise BrowserLaunchFailed(message, resolved.executable_path, e, remediation) from e
        finally:
            executor.shutdown(wait=False)

        logger.info("Browser launched successfully")
        return driver

    def new_page(self):
        """
        Open a fresh, configured page and make it current.

        Any existing page is closed first.

        Returns:
            The driver, switched to the new page

        Raises:
            PageCreationFailed: If the page cannot be opened or configured.
                ``stale`` is set when the browser disconnected underneath.
        """
        if self._page_handle is not None:
            self._close_page()

        driver = self.ensure_browser()
        try:
            if self._reusable_handle is not None:
                driver.switch_to.window(self._reusable_handle)
                self._reusable_handle = None
            else:
                driver.switch_to.new_window("tab")
            self._configure_page(driver)
            self._page_handle = driver.current_window_handle
        except WebDriverException as e:
            stale = not self.is_connected()
            message = f"Failed to create page: {e.msg}"
            if stale:
                message = f"{message}. Browser disconnected; close it to relaunch"
            logger.error(message)
            raise PageCreationFailed(message, stale, e) from e

        logger.debug(f"Opened page {self._page_handle}")
        return driver

    def _configure_page(self, driver) -> None:
        width, height = VIEWPORT
        driver.set_window_size(width, height)
        driver.set_page_load_timeout(self.settings.page_timeout)
        driver.set_script_timeout(self.settings.page_timeout)
        driver.execute_cdp_cmd("Network.setUserAgentOverride", {
            "userAgent": USER_AGENT,
            "acceptLanguage": ACCEPT_LANGUAGE,
        })
        driver.execute_cdp_cmd("Page.addScriptToEvaluateOnNewDocument", {
            "source": HIDE_WEBDRIVER_SCRIPT,
        })

    def require_page(self):
        """
        Return the driver focused on the live page.

        Raises:
            SessionNotReady: If no page is open or the browser is gone
        """
        if not self.has_page:
            raise SessionNotReady()
        try:
            if self.driver.current_window_handle != self._page_handle:
                self.driver.switch_to.window(self._page_handle)
        except WebDriverException as e:
            logger.error(f"Page {self._page_handle} is no longer reachable: {e.msg}")
            raise SessionNotReady(f"Page closed outside the session: {e.msg}") from e
        return self.driver

    def _close_page(self) -> None:
        handle, self._page_handle = self._page_handle, None
        if handle is None or not self.is_connected():
            return
        try:
            handles = self.driver.window_handles
            # The last window cannot be closed without ending the session; reuse it instead.
            if len(handles) <= 1:
                self._reusable_handle = handle
                return
            self.driver.switch_to.window(handle)
            self.driver.close()
            remaining = [h for h in handles if h != handle]
            self.driver.switch_to.window(remaining[0])
        except WebDriverException as e:
            logger.warning(f"Error closing page: {e}")

    def _quit_driver(self) -> None:
        driver, self.driver = self.driver, None
        self._page_handle = None
        self._reusable_handle = None
        if driver is None:
            return
        try:
            driver.quit()
        except Exception as e:
            logger.warning(f"Error closing browser: {e}")

    def close(self) -> None:
        """Close the page and the browser. Never raises; safe to call repeatedly."""
        had_browser = self.driver is not None
        try:
            self._close_page()
        except Exception as e:
            logger.warning(f"Error closing page: {e}")
        self._quit_driver()
        self.authenticated = False
        if had_browser:
            logger.info("Browser closed")


def _quit_late_driver(future) -> None:
    """Quit a driver that finished starting after its launch already timed out."""
    if future.cancelled() or future.exception() is not None:
        return
    try:
        future.result().quit()
    except Exception as e:
        logger.warning(f"Error closing late browser: {e}")
