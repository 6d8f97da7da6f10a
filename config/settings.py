"""
Settings Configuration
Pydantic-validated configuration, built once at process start and passed
explicitly into every resolver and service
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class YouTubeSettings(BaseSettings):
    """Credentialed video search/detail API"""
    api_key: Optional[str] = Field(default=None, description="YouTube Data API key")
    base_url: str = Field(default="https://www.googleapis.com/youtube/v3", description="API base URL")
    max_results: int = Field(default=25, description="Max search results")
    order: str = Field(default="relevance", description="Result ordering")
    video_duration: str = Field(default="medium", description="Duration bucket: short, medium, long, any")
    requests_per_second: float = Field(default=5.0, description="Client-side rate limit")

    model_config = SettingsConfigDict(env_prefix="YOUTUBE_", frozen=True)


class FeedSettings(BaseSettings):
    """Unauthenticated video feed index"""
    base_url: str = Field(default="https://www.youtube.com/feeds/videos.xml", description="Feed endpoint")
    query_delay_sec: float = Field(default=0.5, description="Pause between consecutive feed queries")
    provisional_score: float = Field(default=0.6, description="Flat score for feed-fallback candidates")

    model_config = SettingsConfigDict(env_prefix="FEED_", frozen=True)


class WebSearchSettings(BaseSettings):
    """Web search backend used by the single-tier resolvers"""
    endpoint: str = Field(default="https://html.duckduckgo.com/html/", description="HTML search endpoint")
    user_agent: str = Field(default="LearnHubResearch/1.0", description="User Agent")
    max_results: int = Field(default=10, description="Max hits parsed per query")

    model_config = SettingsConfigDict(env_prefix="WEB_SEARCH_", frozen=True)


class VideoChainSettings(BaseSettings):
    """Video Resolution Chain"""
    max_results: int = Field(default=15, description="Candidates requested per tier")
    tier_timeout_sec: float = Field(default=45.0, description="Upper bound for one tier attempt")
    ai_min_score: float = Field(default=0.5, description="Min combined AI score kept by the hybrid tier")
    local_min_score: float = Field(default=0.4, description="Min local score kept when AI is unavailable")
    preferred_boost: float = Field(default=0.15, description="Score boost for preferred sources")

    model_config = SettingsConfigDict(env_prefix="VIDEO_", frozen=True)


class ResearchSettings(BaseSettings):
    """Multi-Source Orchestrator"""
    source_timeout_sec: float = Field(default=60.0, description="Per-resolver timeout")
    verify_resources: bool = Field(default=True, description="Run the resource verifier after fan-in")
    order_videos: bool = Field(default=True, description="Rank and reorder the final video list for learning progression")
    stage_max_results: int = Field(default=5, description="Videos searched per learning-path stage")
    show_progress: bool = Field(default=False, description="Render a Rich spinner during fan-out")

    model_config = SettingsConfigDict(env_prefix="RESEARCH_", frozen=True)


class ClassificationSettings(BaseSettings):
    """AI classification service"""
    enabled: bool = Field(default=True, description="Disable to force every call site onto its default")
    timeout_sec: float = Field(default=20.0, description="Per-call timeout")

    model_config = SettingsConfigDict(env_prefix="CLASSIFIER_", frozen=True)


class VerificationSettings(BaseSettings):
    """Quality Verification Gate thresholds (policy choices, not invariants)"""
    coverage_threshold: float = Field(default=0.6)
    quality_threshold: float = Field(default=0.6)
    max_gaps_before_warning: int = Field(default=3)
    default_coverage_score: float = Field(default=0.8, description="Coverage assumed when the AI check fails")
    high_view_threshold: int = Field(default=10_000)
    low_view_threshold: int = Field(default=1_000)
    description_ratio_threshold: float = Field(default=0.8)
    diversity_ratio_threshold: float = Field(default=0.5)
    min_video_count: int = Field(default=5)
    max_video_count: int = Field(default=30)
    large_set_size: int = Field(default=5, description="Sets larger than this need a beginner marker")
    beginner_keywords: List[str] = Field(
        default_factory=lambda: [
            "introduction", "basics", "fundamentals", "beginner", "getting started", "what is",
        ]
    )
    advanced_keywords: List[str] = Field(
        default_factory=lambda: [
            "advanced", "expert", "mastery", "deep dive", "optimization", "professional",
        ]
    )
    check_urls: bool = Field(default=False, description="Issue HEAD requests when verifying resources")
    min_resource_quality: float = Field(default=0.5)

    model_config = SettingsConfigDict(env_prefix="VERIFICATION_", frozen=True)


class GeneralSettings(BaseSettings):
    """General"""
    request_timeout: int = Field(default=30, description="HTTP timeout (seconds)")

    model_config = SettingsConfigDict(frozen=True)


class LLMSettings(BaseSettings):
    """LLM provider backing the classification service"""
    provider: str = Field(default="openai", description="LLM provider: openai, anthropic, deepseek")
    model_name: Optional[str] = Field(default=None, description="Model name (provider default if unset)")
    temperature: float = Field(default=0.3, description="Sampling temperature")
    max_tokens: int = Field(default=2000, description="Max generated tokens")
    base_url: Optional[str] = Field(default=None, description="OpenAI-compatible base URL override")

    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API Key")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API Key")
    deepseek_api_key: Optional[str] = Field(default=None, description="DeepSeek API Key")

    model_config = SettingsConfigDict(env_prefix="LLM_", frozen=True, protected_namespaces=())

    def api_key_for(self, provider: Optional[str] = None) -> Optional[str]:
        keys = {
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
            "deepseek": self.deepseek_api_key,
        }
        return keys.get(provider or self.provider)


class Settings(BaseSettings):
    """Root configuration aggregating every sub-settings block"""

    youtube: YouTubeSettings = Field(default_factory=YouTubeSettings)
    feed: FeedSettings = Field(default_factory=FeedSettings)
    web_search: WebSearchSettings = Field(default_factory=WebSearchSettings)
    video: VideoChainSettings = Field(default_factory=VideoChainSettings)
    research: ResearchSettings = Field(default_factory=ResearchSettings)
    classification: ClassificationSettings = Field(default_factory=ClassificationSettings)
    verification: VerificationSettings = Field(default_factory=VerificationSettings)
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None) -> "Settings":
        """Load configuration after reading the given .env file"""
        if env_path is None:
            env_path = Path(__file__).parent / ".env"

        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)

        return cls(
            youtube=YouTubeSettings(),
            feed=FeedSettings(),
            web_search=WebSearchSettings(),
            video=VideoChainSettings(),
            research=ResearchSettings(),
            classification=ClassificationSettings(),
            verification=VerificationSettings(),
            general=GeneralSettings(),
            llm=LLMSettings(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings for entrypoints; library code takes Settings as a parameter."""
    return Settings.load_from_env_file()
