from __future__ import annotations

from typing import List

import pytest

from config.settings import VerificationSettings
from models import Candidate, SourceResult, SourceType
from sources import connectors
from verification import ResourceVerifier, assess_quality
from verification.resource_verifier import assess_accessibility, assess_credibility


def _candidate(source_type: SourceType, url: str, score: float = 0.8, origin: str = "", **signals) -> Candidate:
    return Candidate(source_type=source_type, title="Graph theory", origin=origin, url=url, score=score, raw_signals=signals)


def test_credibility_tiers() -> None:
    assert assess_credibility(_candidate(SourceType.GOVERNMENT, "https://www.nist.gov/x")) == 1.0
    assert assess_credibility(_candidate(SourceType.COURSE, "https://www.coursera.org/learn/x")) == 0.9
    assert assess_credibility(_candidate(SourceType.BOOK, "https://www.amazon.com/dp/1")) == 0.8
    assert assess_credibility(
        _candidate(SourceType.VIDEO, "https://www.youtube.com/watch?v=1", origin="3Blue1Brown")
    ) == 0.8
    assert assess_credibility(
        _candidate(SourceType.VIDEO, "https://www.youtube.com/watch?v=1", origin="Random Vlogs")
    ) == 0.6
    assert assess_credibility(_candidate(SourceType.ARTICLE, "https://blog.example.com/x")) == 0.5


def test_accessibility_from_cost_label() -> None:
    assert assess_accessibility(_candidate(SourceType.ARTICLE, "https://a.com", cost_label="Free")) == 1.0
    assert assess_accessibility(_candidate(SourceType.BOOK, "https://a.com", cost_label="$20-40")) == 0.8
    assert assess_accessibility(_candidate(SourceType.COURSE, "https://a.com", cost_label="$149")) == 0.6
    assert assess_accessibility(_candidate(SourceType.CERTIFICATION, "https://a.com", cost_label="$1,500")) == 0.2
    assert assess_accessibility(_candidate(SourceType.COURSE, "https://a.com", cost_label="Varies")) == 0.5
    assert assess_accessibility(_candidate(SourceType.VIDEO, "https://a.com")) == 1.0


def test_quality_uses_per_type_weights() -> None:
    course = _candidate(SourceType.COURSE, "https://www.coursera.org/learn/x", score=0.8, cost_label="$49")

    quality = assess_quality(course)

    # 0.9*0.4 + 0.8*0.3 + 0.8*0.2 + 0.8*0.1
    assert quality["overall"] == 0.84
    assert quality["credibility"] == 0.9


@pytest.mark.asyncio
async def test_verify_result_marks_valid_urls_without_network(monkeypatch) -> None:
    async def _unexpected(url, **kwargs):
        raise AssertionError("HEAD should not be issued")

    monkeypatch.setattr(connectors, "check_url", _unexpected)
    verifier = ResourceVerifier(VerificationSettings())
    sources = {
        SourceType.COURSE: SourceResult(
            source_type=SourceType.COURSE,
            candidates=[
                _candidate(SourceType.COURSE, "https://www.edx.org/course/graphs"),
                _candidate(SourceType.COURSE, "ftp://files.example.com/graphs"),
            ],
        )
    }

    verified = await verifier.verify_result(sources)
    good, bad = verified[SourceType.COURSE].candidates

    assert good.verified is True
    assert 0.0 < good.raw_signals["quality_score"] <= 1.0
    assert bad.verified is False
    assert bad.raw_signals["verification_error"] == "Invalid URL"
    assert sources[SourceType.COURSE].candidates[0].verified is False


@pytest.mark.asyncio
async def test_head_check_runs_when_enabled(monkeypatch) -> None:
    checked: List[str] = []

    async def _fake_check(url, **kwargs):
        checked.append(url)
        return "alive" in url

    monkeypatch.setattr(connectors, "check_url", _fake_check)
    verifier = ResourceVerifier(VerificationSettings(check_urls=True))

    alive = await verifier.verify_candidate(_candidate(SourceType.ARTICLE, "https://alive.example.com"))
    dead = await verifier.verify_candidate(_candidate(SourceType.ARTICLE, "https://dead.example.com"))

    assert checked == ["https://alive.example.com", "https://dead.example.com"]
    assert alive.verified is True
    assert dead.verified is False
    assert dead.raw_signals["verification_error"] == "URL not reachable"


def _verified(source_type: SourceType, quality: float, verified: bool = True) -> Candidate:
    return _candidate(source_type, "https://example.com").with_verification(verified, quality_score=quality)


def test_filter_quality_drops_unverified_and_low_scores() -> None:
    verifier = ResourceVerifier(VerificationSettings())
    sources = {
        SourceType.BOOK: SourceResult(
            source_type=SourceType.BOOK,
            candidates=[
                _verified(SourceType.BOOK, 0.7),
                _verified(SourceType.BOOK, 0.3),
                _verified(SourceType.BOOK, 0.9, verified=False),
            ],
        )
    }

    default = verifier.filter_quality(sources)
    strict = verifier.filter_quality(sources, min_quality=0.8)

    assert [c.raw_signals["quality_score"] for c in default[SourceType.BOOK].candidates] == [0.7]
    assert strict[SourceType.BOOK].candidates == []


def test_quality_report_summarises_and_recommends() -> None:
    verifier = ResourceVerifier(VerificationSettings())
    sources = {
        SourceType.BOOK: SourceResult(
            source_type=SourceType.BOOK,
            candidates=[_verified(SourceType.BOOK, 0.5), _verified(SourceType.BOOK, 0.4, verified=False)],
        ),
        SourceType.COURSE: SourceResult(source_type=SourceType.COURSE),
    }

    report = verifier.quality_report(sources)

    assert report["total_resources"] == 2
    assert report["verified_resources"] == 1
    assert report["average_quality_score"] == 0.5
    assert report["by_source_type"]["book"] == {"total": 2, "verified": 1, "average_quality": 0.5}
    assert len(report["recommendations"]) == 3
