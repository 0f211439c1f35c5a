"""Logging utilities for the local user manager."""

import logging
import sys
from datetime import datetime
from pathlib import Path


def setup_logging(name: str, log_dir: str = None, level: str = 'INFO') -> logging.Logger:
    """Set up logging for a module tree.

    Args:
        name: Logger name (e.g. 'src' to cover every package module)
        log_dir: Directory for log files. If None, console-only
        level: Logging level

    Returns:
        Configured logger
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Console handler, added once per logger
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / f'{name}_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


# Common console output formatting
def print_section(title: str, width: int = 60):
    """Print section divider."""
    print(f"\n{'=' * width}")
    print(f"  {title}")
    print(f"{'=' * width}\n")


def print_success(message: str):
    print(f"[+] {message}")


def print_info(message: str):
    print(f"[i] {message}")


def print_warning(message: str):
    print(f"[!] {message}")


def print_error(message: str):
    print(f"[-] {message}")
