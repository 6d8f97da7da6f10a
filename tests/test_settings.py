from __future__ import annotations

import pytest
from pydantic import ValidationError

from config.settings import (
    ClassificationSettings,
    LLMSettings,
    Settings,
    VerificationSettings,
    VideoChainSettings,
)
from intelligence.llm import AnthropicLLM, DeepSeekLLM, get_llm
from models import Candidate, LearningRequest, SourceType
from utils.exceptions import ConfigurationError, LearnHubError, SourceExhausted


def test_sub_settings_read_their_env_prefix(monkeypatch) -> None:
    monkeypatch.setenv("VIDEO_MAX_RESULTS", "7")
    monkeypatch.setenv("VERIFICATION_CHECK_URLS", "true")

    assert VideoChainSettings().max_results == 7
    assert VerificationSettings().check_urls is True


def test_settings_are_frozen() -> None:
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.video = VideoChainSettings()


def test_load_from_env_file(tmp_path, monkeypatch) -> None:
    # registers the variable so teardown removes what load_dotenv writes
    monkeypatch.setenv("FEED_PROVISIONAL_SCORE", "0")
    monkeypatch.delenv("FEED_PROVISIONAL_SCORE")
    env_file = tmp_path / ".env"
    env_file.write_text("FEED_PROVISIONAL_SCORE=0.55\n", encoding="utf-8")

    settings = Settings.load_from_env_file(env_file)

    assert settings.feed.provisional_score == 0.55


def test_get_llm_returns_none_without_key() -> None:
    assert get_llm(LLMSettings(provider="openai", openai_api_key=None)) is None


def test_get_llm_builds_requested_provider() -> None:
    settings = LLMSettings(provider="anthropic", anthropic_api_key="k", deepseek_api_key="d")

    assert isinstance(get_llm(settings), AnthropicLLM)
    deepseek = get_llm(settings, provider="deepseek", timeout=5)
    assert isinstance(deepseek, DeepSeekLLM)
    assert deepseek.model == "deepseek-chat"
    assert deepseek.timeout == 5


def test_get_llm_rejects_unknown_provider() -> None:
    with pytest.raises(ConfigurationError):
        get_llm(LLMSettings(), provider="palm")


def test_request_validation() -> None:
    request = LearningRequest(topic="  graph theory ", description=" for CS ")
    assert request.topic == "graph theory"
    assert request.full_text == "graph theory for cs"
    with pytest.raises(ValidationError):
        LearningRequest(topic="   ")


def test_candidate_score_must_stay_in_unit_interval() -> None:
    with pytest.raises(ValidationError):
        Candidate(source_type=SourceType.VIDEO, title="x", score=1.2)


def test_error_details_formatting() -> None:
    error = SourceExhausted("no videos", tiers_tried=["hybrid", "api"])

    assert isinstance(error, LearnHubError)
    assert str(error) == "no videos | Details: {'tiers_tried': ['hybrid', 'api']}"


def test_sampling_parameters_live_only_on_llm_settings(monkeypatch) -> None:
    monkeypatch.setenv("LLM_TEMPERATURE", "0.1")

    assert "temperature" not in ClassificationSettings.model_fields
    assert "max_tokens" not in ClassificationSettings.model_fields
    assert LLMSettings().temperature == 0.1
    assert LLMSettings.model_config["env_prefix"] == "LLM_"
