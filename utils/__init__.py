"""
Utils Module
Logging and exception taxonomy
"""
from .logger import setup_logger, configure_package_loggers
from .exceptions import (
    LearnHubError,
    ConfigurationError,
    SourceUnavailable,
    SourceExhausted,
    ClassificationServiceUnavailable,
    RequestBlocked,
    VerificationInconclusive,
    LLMError,
)

__all__ = [
    "setup_logger",
    "configure_package_loggers",
    "LearnHubError",
    "ConfigurationError",
    "SourceUnavailable",
    "SourceExhausted",
    "ClassificationServiceUnavailable",
    "RequestBlocked",
    "VerificationInconclusive",
    "LLMError",
]
