#!/usr/bin/env python3
"""
Daily Problem Scraper
Main entry point for the command-line interface

This module provides:
- Command-line argument parsing
- Logging configuration
- Settings loading from an INI file and the environment
- Optional provider login before scraping
- JSON output of the scraped problem
- Browser cleanup on every exit path
"""

__version__ = "1.0.0"
__author__ = "Daily Problem Scraper Team"
__license__ = "MIT"
__description__ = "Scrape the daily coding problem from LeetCode and GeeksforGeeks"

import sys
import os
import argparse
import getpass
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from models.problem import Credentials, Problem
from providers.provider_factory import ProviderFactory
from utils.error_handler import LoginError, ScraperError, UnsupportedProvider, error_reporter
from utils.settings import ScraperSettings

PASSWORD_ENV = "DAILY_PROBLEM_PASSWORD"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class ApplicationManager:
    """
    Runs one scrape: configures logging and settings, drives a provider
    adapter and writes the result.
    """

    def __init__(self, log_level: str = "INFO", log_file: Optional[str] = None,
                 config_file: Optional[str] = None, headed: bool = False):
        self.log_level = log_level
        self.log_file = Path(log_file) if log_file else None
        self.config_file = Path(config_file) if config_file else None
        self.headed = headed
        self.settings: Optional[ScraperSettings] = None

    def initialize(self):
        self._setup_logging()
        self.settings = ScraperSettings.load(self.config_file)
        if self.headed:
            self.settings = replace(self.settings, headless=False)
        logging.debug(f"Scraper settings: {self.settings}")

    def _setup_logging(self):
        """
        Configure logging with console and optional file handlers.

        The console handler writes to stderr so stdout only carries the JSON result.
        """
        log_level = getattr(logging, self.log_level.upper(), logging.INFO)

        detailed_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        )
        simple_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        root_logger.handlers.clear()

        if self.log_file:
            try:
                file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(detailed_formatter)
                root_logger.addHandler(file_handler)
            except OSError as e:
                print(f"Warning: Could not setup file logging: {e}", file=sys.stderr)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(simple_formatter)
        root_logger.addHandler(console_handler)

        logging.debug(f"Logging configured. Level: {log_level}, Log file: {self.log_file}")

    def run(self, provider_id: str, credentials: Optional[Credentials] = None) -> Problem:
        """
        Scrape today's problem from ``provider_id``.

        Raises:
            UnsupportedProvider: If the provider is unknown
            LoginError: If login was requested and not confirmed
            ScraperError: Any scraping failure
        """
        provider = ProviderFactory.create(provider_id, self.settings)
        try:
            if credentials is not None:
                if not provider.login(credentials):
                    raise LoginError(f"Login to {provider.name} could not be confirmed", provider.name)
            return provider.scrape_daily_question()
        finally:
            provider.close_browser()

    @staticmethod
    def write_result(problem: Problem, output: Optional[str] = None):
        payload = json.dumps(problem.to_dict(), indent=2, ensure_ascii=False)
        if output:
            Path(output).write_text(payload + "\n", encoding="utf-8")
            logging.info(f"Problem written to {output}")
        else:
            print(payload)


def read_password() -> str:
    """Password from the environment, else an interactive prompt."""
    password = os.environ.get(PASSWORD_ENV)
    if password:
        return password
    return getpass.getpass("Password: ")


def parse_arguments(argv: Optional[List[str]] = None):
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="daily-problem",
        description="Scrape today's featured coding problem",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  %(prog)s leetcode                          # Print today's LeetCode problem as JSON
  %(prog)s gfg --output potd.json            # Save the GFG problem of the day
  %(prog)s leetcode --login alice            # Log in first ({PASSWORD_ENV} or prompt)
  %(prog)s --list-providers                  # Show supported providers
        """
    )

    parser.add_argument(
        'provider',
        nargs='?',
        help='Provider identifier (e.g. LEETCODE, GFG; case-insensitive)'
    )

    parser.add_argument(
        '--list-providers',
        action='store_true',
        help='List supported providers and exit'
    )

    parser.add_argument(
        '--login',
        metavar='USERNAME',
        type=str,
        help=f'Log in before scraping; the password is read from {PASSWORD_ENV} or prompted'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Path to an INI configuration file with a [scraper] section'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Write the problem JSON to this file instead of stdout'
    )

    parser.add_argument(
        '--log-level', '-l',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='INFO',
        help='Set logging level (default: INFO)'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write detailed logs to this file'
    )

    parser.add_argument(
        '--headed',
        action='store_true',
        help='Show the browser window instead of running headless'
    )

    parser.add_argument(
        '--version', '-v',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function of the Daily Problem Scraper CLI.

    Returns:
        int: Process exit code
    """
    try:
        args = parse_arguments(argv)
    except SystemExit as e:
        return EXIT_OK if e.code == 0 else EXIT_USAGE

    if args.list_providers:
        for provider_id in ProviderFactory.list_supported():
            print(provider_id)
        return EXIT_OK

    if not args.provider:
        print("error: a provider is required (see --list-providers)", file=sys.stderr)
        return EXIT_USAGE

    app_manager = ApplicationManager(args.log_level, args.log_file, args.config, args.headed)
    app_manager.initialize()

    if not ProviderFactory.is_supported(args.provider):
        error = UnsupportedProvider(args.provider, ProviderFactory.list_supported())
        error_reporter.report_error(error.error_info)
        return EXIT_USAGE

    credentials = None
    if args.login:
        credentials = Credentials(identifier=args.login, secret=read_password())

    try:
        problem = app_manager.run(args.provider, credentials)
        app_manager.write_result(problem, args.output)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return EXIT_FAILURE
    except ScraperError as e:
        error_reporter.report_error(e.error_info)
        logging.warning(f"Error summary: {error_reporter.get_error_summary()}")
        return EXIT_FAILURE
    except OSError as e:
        logging.error(f"Failed to write output: {e}")
        return EXIT_FAILURE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
