"""
Logger Configuration
Unified logging setup
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler
from rich.console import Console


console = Console(stderr=True)

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_FORMAT_SIMPLE = "%(message)s"

LOG_DIR = Path(__file__).parent.parent / "logs"

ROOT_LOGGER_NAME = "learnhub"


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    use_rich: bool = True,
) -> logging.Logger:
    """
    Configure a logger.

    Args:
        name: logger name
        level: log level
        log_file: optional file name under ``logs/``
        use_rich: pretty console output through Rich

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # avoid stacking handlers on repeated setup
    if logger.handlers:
        return logger

    if use_rich:
        console_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE))
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_DIR / log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger


def configure_package_loggers(level: int = logging.INFO, use_rich: bool = True) -> None:
    """
    Route the pipeline's module loggers through one handler.

    Library modules log via ``logging.getLogger(__name__)``; their top-level
    package names are attached to the shared root here.
    """
    root = setup_logger(ROOT_LOGGER_NAME, level=level, use_rich=use_rich)
    for package in (
        "aggregator",
        "intelligence",
        "orchestrator",
        "resolvers",
        "safety",
        "scoring",
        "scrapers",
        "sources",
        "verification",
    ):
        module_logger = logging.getLogger(package)
        module_logger.setLevel(level)
        if not module_logger.handlers:
            for handler in root.handlers:
                module_logger.addHandler(handler)
        module_logger.propagate = False
