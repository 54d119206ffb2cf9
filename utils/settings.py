"""
Configuration for the Daily Problem Scraper

Settings come from three layers, later ones winning:
1. built-in defaults
2. an optional INI file with a [scraper] section
3. the process environment (browser override path and serverless markers)
"""

import configparser
import logging
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional, Union

logger = logging.getLogger(__name__)

EXECUTABLE_PATH_ENV = "CHROME_EXECUTABLE_PATH"
SERVERLESS_MARKERS = ("VERCEL", "VERCEL_ENV", "AWS_LAMBDA_FUNCTION_NAME")


def detect_os_family(platform_name: Optional[str] = None) -> str:
    """Map ``sys.platform`` to 'windows', 'macos' or 'linux'."""
    platform_name = platform_name or sys.platform
    if platform_name.startswith("win"):
        return "windows"
    if platform_name == "darwin":
        return "macos"
    return "linux"


def is_serverless_environment(environ: Mapping[str, str]) -> bool:
    """True on Vercel or AWS Lambda style constrained runtimes."""
    if environ.get("VERCEL") == "1":
        return True
    return bool(environ.get("VERCEL_ENV") or environ.get("AWS_LAMBDA_FUNCTION_NAME"))


@dataclass(frozen=True)
class ScraperSettings:
    """
    Runtime settings shared by every component of the engine.

    Attributes:
        executable_path (Optional[str]): Explicit browser binary override
        serverless (bool): Running on a constrained/serverless platform
        os_family (str): 'windows', 'macos' or 'linux'
        headless (bool): Run the browser without a visible window
        page_timeout (float): Seconds allowed for navigations and page scripts
        launch_timeout (float): Seconds allowed for the browser to start
        element_timeout (float): Seconds a short element wait lasts
        retries (int): Attempts for retried page operations
        retry_delay (float): Base delay in seconds for exponential backoff
        poll_interval (float): Seconds between condition polls
        rate_limit (float): Minimum seconds between two navigations
        typing_delay (float): Seconds between keystrokes when filling forms
    """
    executable_path: Optional[str] = None
    serverless: bool = False
    os_family: str = "linux"
    headless: bool = True
    page_timeout: float = 30.0
    launch_timeout: float = 30.0
    element_timeout: float = 10.0
    retries: int = 3
    retry_delay: float = 2.0
    poll_interval: float = 0.25
    rate_limit: float = 1.0
    typing_delay: float = 0.1

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None,
                         platform_name: Optional[str] = None,
                         base: Optional["ScraperSettings"] = None) -> "ScraperSettings":
        """Apply the environment layer on top of ``base`` (defaults when omitted)."""
        environ = os.environ if environ is None else environ
        base = base or cls()
        override = (environ.get(EXECUTABLE_PATH_ENV) or "").strip() or None
        return replace(
            base,
            executable_path=override,
            serverless=is_serverless_environment(environ),
            os_family=detect_os_family(platform_name),
        )

    @classmethod
    def load(cls, config_file: Optional[Union[str, Path]] = None,
             environ: Optional[Mapping[str, str]] = None,
             platform_name: Optional[str] = None) -> "ScraperSettings":
        """
        Build settings from defaults, an optional INI file and the environment.

        Args:
            config_file: Path to an INI file with a ``[scraper]`` section
            environ: Environment mapping, ``os.environ`` when omitted
            platform_name: Platform string, ``sys.platform`` when omitted

        Returns:
            ScraperSettings: The merged settings
        """
        base = cls()
        if config_file:
            base = cls._from_config_file(Path(config_file), base)
        return cls.from_environment(environ, platform_name, base)

    @classmethod
    def _from_config_file(cls, path: Path, base: "ScraperSettings") -> "ScraperSettings":
        if not path.exists():
            logger.warning(f"Configuration file not found: {path}. Using defaults.")
            return base

        parser = configparser.ConfigParser()
        parser.read(path, encoding="utf-8")
        if not parser.has_section("scraper"):
            logger.info(f"No [scraper] section in {path}, using defaults")
            return base

        section = parser["scraper"]
        values = {}
        for name in ("page_timeout", "launch_timeout", "element_timeout",
                     "retry_delay", "poll_interval", "rate_limit", "typing_delay"):
            if name in section:
                values[name] = section.getfloat(name)
        if "retries" in section:
            values["retries"] = section.getint("retries")
        if "headless" in section:
            values["headless"] = section.getboolean("headless")

        logger.debug(f"Loaded scraper configuration from {path}: {values}")
        return replace(base, **values)
