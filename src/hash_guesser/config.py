"""
Configuration for the hash guesser.
"""

import argparse
import logging
import os
import string
import sys
from pathlib import Path

# Search server configuration
SEARCH_SERVER_HOST = "localhost"
SEARCH_SERVER_PORT = 8000
SEARCH_SERVER_URL = f"http://{SEARCH_SERVER_HOST}:{SEARCH_SERVER_PORT}"
REQUEST_TIMEOUT = 10

# Logger names
SEARCH_LOGGER = "hash_guesser"
SEARCH_SERVER_LOGGER = "search_server"
CLIENT_LOGGER = "search_client"

# Search configuration
DEFAULT_ALGORITHM = "SHA-256"
DEFAULT_MODE = "lexicographic"
DEFAULT_WORKERS = os.cpu_count() or 1
DEFAULT_REPORTING_INTERVAL = 1.0  # seconds between progress reports
WORKER_START_METHOD = "spawn"  # multiprocessing start method for worker processes
EVENT_POLL_SECONDS = 0.1  # how often the orchestrator checks on silent workers
LOG_DIR = Path("logs")

# Characters a bracketed class may contain without escaping
STRUCTURAL_CHARS = "()[]{}|,-\\"
CLASS_ALPHABET = string.ascii_letters + string.digits + "".join(
    c for c in string.punctuation if c not in STRUCTURAL_CHARS
)

LOG_LEVELS = ['debug', 'info', 'warning', 'error', 'critical']


def setup_logger(name: str, log_level: int = logging.INFO, log_file: str | None = None) -> logging.Logger:
    """
    Set up a logger with consistent formatting and handlers.

    Args:
        name: The name of the logger
        log_level: The logging level (default: INFO)
        log_file: File name under LOG_DIR to also log to (default: console only)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    # calling twice must not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        LOG_DIR.mkdir(exist_ok=True)
        file_handler = logging.FileHandler(
            LOG_DIR / log_file,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def add_log_level_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--log-level', type=str, default='info',
                        choices=LOG_LEVELS,
                        help='Log level to use')


def log_level_value(name: str) -> int:
    """Translate a --log-level choice into a logging constant."""
    return getattr(logging, name.upper())


def parse_server_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments for the search server."""
    parser = argparse.ArgumentParser(description="Hash Guesser Search Server")
    add_log_level_argument(parser)
    parser.add_argument("--host", type=str, default=SEARCH_SERVER_HOST,
                        help='Host to run the server on')
    parser.add_argument("--port", type=int, default=SEARCH_SERVER_PORT,
                        help='Port to run the server on')
    parser.add_argument("--log-file", type=str, default=None,
                        help='Also write logs to this file under logs/')

    args = parser.parse_args(argv)
    args.log_level = log_level_value(args.log_level)

    return args
