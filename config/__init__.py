"""
Configuration Management Module
"""
from .settings import (
    Settings,
    get_settings,
    YouTubeSettings,
    FeedSettings,
    WebSearchSettings,
    VideoChainSettings,
    ResearchSettings,
    ClassificationSettings,
    VerificationSettings,
    GeneralSettings,
    LLMSettings,
)

__all__ = [
    "Settings",
    "get_settings",
    "YouTubeSettings",
    "FeedSettings",
    "WebSearchSettings",
    "VideoChainSettings",
    "ResearchSettings",
    "ClassificationSettings",
    "VerificationSettings",
    "GeneralSettings",
    "LLMSettings",
]
