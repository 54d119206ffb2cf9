"""
Browser executable resolution.

No single discovery strategy works on a developer desktop, in a container and
inside a serverless function, so the executable is chosen by a layered policy:

1. an explicit ``CHROME_EXECUTABLE_PATH`` always wins
2. serverless platforms fetch a portable Chrome and turn graphics off
3. Windows desktops take the first well-known install path (unverified)
4. everything else fetches a portable Chrome
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from utils.error_handler import ExecutableNotResolved
from utils.settings import EXECUTABLE_PATH_ENV, ScraperSettings

logger = logging.getLogger(__name__)

SOURCE_OVERRIDE = "override"
SOURCE_PORTABLE = "portable"
SOURCE_COMMON_PATH = "common-path"

HEADLESS_GRAPHICS_ARGUMENTS = (
    "--disable-gpu",
    "--single-process",
    "--disable-software-rasterizer",
)

EXAMPLE_CHROME_PATHS = {
    "windows": r"C:\Program Files\Google\Chrome\Application\chrome.exe",
    "macos": "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "linux": "/usr/bin/google-chrome",
}


def example_chrome_path(os_family: str) -> str:
    """Typical Chrome location for ``os_family``, used in remediation messages."""
    return EXAMPLE_CHROME_PATHS.get(os_family, EXAMPLE_CHROME_PATHS["linux"])


def remediation_message(os_family: str) -> str:
    return (f"Set {EXECUTABLE_PATH_ENV} to your Chrome binary, for example "
            f'{EXECUTABLE_PATH_ENV}="{example_chrome_path(os_family)}", then restart.')


@dataclass(frozen=True)
class ResolvedBrowser:
    """
    Outcome of executable resolution.

    Attributes:
        executable_path (str): Absolute path of the browser binary
        driver_path (Optional[str]): Matching chromedriver, when the source provides one
        source (str): 'override', 'portable' or 'common-path'
        graphics_disabled (bool): Graphics mode was turned off for the binary
        extra_arguments (Tuple[str, ...]): Launch flags required by the source
    """
    executable_path: str
    driver_path: Optional[str] = None
    source: str = SOURCE_OVERRIDE
    graphics_disabled: bool = False
    extra_arguments: Tuple[str, ...] = ()


class PortableChromeProvider:
    """
    Fetches a self-contained Chrome for Testing build through Selenium Manager.

    Binaries are cached under ``cache_path``; on serverless platforms this has
    to be a writable location such as the temp directory.
    """

    def __init__(self, browser_version: str = "stable", cache_path: Optional[str] = None):
        self.browser_version = browser_version
        self.cache_path = cache_path
        self.graphics_mode = True

    def binary_paths(self) -> Tuple[str, Optional[str]]:
        """Return ``(browser_path, driver_path)``, downloading if necessary."""
        from selenium.webdriver.common.selenium_manager import SeleniumManager

        args = ["--browser", "chrome", "--browser-version", self.browser_version]
        if self.cache_path:
            args.extend(["--cache-path", self.cache_path])

        paths: Dict[str, str] = SeleniumManager().binary_paths(args)
        browser_path = (paths.get("browser_path") or "").strip()
        if not browser_path:
            raise RuntimeError("Selenium Manager did not return a browser path")
        return browser_path, paths.get("driver_path") or None


def windows_candidate_paths(environ: Mapping[str, str]) -> List[str]:
    """Well-known Chrome/Edge install locations on Windows, most likely first."""
    candidates = []
    for variable in ("PROGRAMFILES", "PROGRAMFILES(X86)", "LOCALAPPDATA"):
        root = environ.get(variable)
        if root:
            candidates.append(f"{root}\\Google\\Chrome\\Application\\chrome.exe")
    candidates.extend([
        r"C:\Program Files\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files\Microsoft\Edge\Application\msedge.exe",
    ])
    return candidates


def _from_portable_provider(settings: ScraperSettings,
                            provider: PortableChromeProvider) -> ResolvedBrowser:
    if settings.serverless:
        provider.graphics_mode = False

    try:
        browser_path, driver_path = provider.binary_paths()
    except Exception as e:
        if settings.serverless:
            message = ("A portable Chrome is required on serverless platforms but could not "
                       f"be fetched: {e}")
        else:
            message = (f"Failed to fetch a portable Chrome: {e}\n\n"
                       f"SOLUTION: {remediation_message(settings.os_family)}")
        logger.error(message)
        raise ExecutableNotResolved(
            message, settings.os_family, example_chrome_path(settings.os_family), e
        ) from e

    graphics_disabled = not provider.graphics_mode
    logger.info(f"Using portable Chrome at {browser_path}")
    return ResolvedBrowser(
        executable_path=browser_path,
        driver_path=driver_path,
        source=SOURCE_PORTABLE,
        graphics_disabled=graphics_disabled,
        extra_arguments=HEADLESS_GRAPHICS_ARGUMENTS if graphics_disabled else (),
    )


def resolve_browser_executable(settings: ScraperSettings,
                               portable_provider: Optional[PortableChromeProvider] = None,
                               environ: Optional[Mapping[str, str]] = None) -> ResolvedBrowser:
    """
    Decide which browser binary to launch.

    Args:
        settings (ScraperSettings): Deployment signals and override path
        portable_provider (Optional[PortableChromeProvider]): Source of portable
            binaries; a default provider is created when omitted
        environ (Optional[Mapping[str, str]]): Environment used for Windows
            install roots, ``os.environ`` when omitted

    Returns:
        ResolvedBrowser: The chosen executable and its launch requirements

    Raises:
        ExecutableNotResolved: If no usable executable path can be produced
    """
    environ = os.environ if environ is None else environ

    if settings.executable_path and settings.executable_path.strip():
        path = settings.executable_path.strip()
        logger.info(f"Using browser from {EXECUTABLE_PATH_ENV}: {path}")
        return ResolvedBrowser(executable_path=path, source=SOURCE_OVERRIDE)

    if settings.serverless:
        provider = portable_provider or PortableChromeProvider(
            cache_path=os.path.join(tempfile.gettempdir(), "selenium")
        )
        return _from_portable_provider(settings, provider)

    if settings.os_family == "windows":
        candidates = windows_candidate_paths(environ)
        if not candidates:
            message = (f"{EXECUTABLE_PATH_ENV} environment variable is required on Windows.\n\n"
                       f"SOLUTION: {remediation_message('windows')}")
            raise ExecutableNotResolved(message, "windows", example_chrome_path("windows"))
        # Existence is not checked here; a bad guess surfaces at launch with remediation text.
        logger.info(f"Using first known Windows browser location: {candidates[0]}")
        return ResolvedBrowser(executable_path=candidates[0], source=SOURCE_COMMON_PATH)

    return _from_portable_provider(settings, portable_provider or PortableChromeProvider())
