"""
Quality Verification Gate
Checks a research result's videos for topic coverage, resource quality and
learning sequence before the path is shown to the learner
"""
import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config.settings import VerificationSettings
from intelligence.classification import ClassificationRequest, ClassificationService, CoverageJudgment
from models import (
    Candidate,
    LearningRequest,
    ResearchResult,
    VerificationReport,
    VerificationStatus,
)
from utils.exceptions import VerificationInconclusive


logger = logging.getLogger(__name__)

OUT_OF_ORDER_ISSUE = "Learning sequence may be out of order (advanced content before basics)"
NO_INTRO_ISSUE = "No introductory content found - may be too advanced"


def _coverage_prompt(videos: Sequence[Candidate], request: LearningRequest) -> str:
    content = [{"title": v.title, "description": v.description[:200]} for v in videos]
    return (
        "Analyze whether this learning path adequately covers the requested topic.\n\n"
        f"Topic: {request.topic}\n"
        f"Description: {request.description or 'No description'}\n"
        f"Level: {request.level.value}\n\n"
        f"Learning path content:\n{json.dumps(content, indent=2, ensure_ascii=False)}\n\n"
        f'Evaluate whether it covers the main aspects of "{request.topic}", which important '
        "subtopics are missing, and whether it fits the requested level.\n\n"
        "Respond with JSON:\n"
        '{"coverageScore": 0.0, "mainTopicsCovered": [], "missingTopics": [], '
        '"levelAppropriate": true, "assessment": "brief explanation"}'
    )


class QualityVerificationGate:
    """
    Final gate over an assembled research result.

    Coverage comes from the classification service (optimistic default when
    it is unavailable); quality and sequence are local heuristics whose
    thresholds and keyword lists live in ``VerificationSettings``.
    """

    def __init__(self, classifier: ClassificationService, settings: Optional[VerificationSettings] = None):
        self.classifier = classifier
        self.settings = settings or VerificationSettings()

    async def verify(self, research: ResearchResult, request: LearningRequest) -> VerificationReport:
        try:
            return await self._verify(research, request)
        except Exception as e:
            logger.exception(f"[Verification] failed for '{request.topic}': {e}")
            return VerificationReport(
                status=VerificationStatus.VERIFICATION_FAILED,
                ready=True,
                confidence=0.5,
                sequence_valid=False,
                issues=[f"Verification failed: {e}"],
            )

    async def _verify(self, research: ResearchResult, request: LearningRequest) -> VerificationReport:
        videos = research.videos
        inconclusive: List[str] = []

        coverage_score, gaps, coverage_ok = await self.check_coverage(videos, request)
        if not coverage_ok:
            inconclusive.append("coverage")

        quality_score, issues, views_known = self.assess_quality(videos)
        if not views_known:
            inconclusive.append("view_counts")

        sequence_valid, sequence_issue = self.validate_sequence(videos)
        if sequence_issue:
            issues.append(sequence_issue)

        confidence = round((coverage_score + quality_score) / 2, 4)
        recommendations: List[str] = []
        s = self.settings

        if coverage_score < s.coverage_threshold:
            status, ready = VerificationStatus.INSUFFICIENT_COVERAGE, False
            recommendations.append("Search for additional resources to cover missing topics")
        elif quality_score < s.quality_threshold:
            status, ready = VerificationStatus.LOW_QUALITY, False
            recommendations.append("Filter out low-quality content and search for better resources")
        elif not sequence_valid:
            status, ready = VerificationStatus.POOR_SEQUENCE, False
            recommendations.append("Reorder content for better learning progression")
        elif len(gaps) > s.max_gaps_before_warning:
            status, ready = VerificationStatus.HAS_GAPS, True
            recommendations.append(f"Consider adding content for: {', '.join(gaps)}")
        else:
            status, ready = VerificationStatus.VERIFIED, True

        logger.info(
            f"[Verification] '{request.topic}': {status.value} "
            f"(coverage {coverage_score:.2f}, quality {quality_score:.2f})"
        )
        return VerificationReport(
            coverage_score=coverage_score,
            quality_score=quality_score,
            sequence_valid=sequence_valid,
            confidence=confidence,
            status=status,
            ready=ready,
            gaps=gaps,
            issues=issues,
            recommendations=recommendations,
            inconclusive_checks=inconclusive,
        )

    async def check_coverage(
        self,
        videos: Sequence[Candidate],
        request: LearningRequest,
    ) -> Tuple[float, List[str], bool]:
        """Returns (score, missing topics, judged by the service)."""
        result = await self.classifier.classify(
            ClassificationRequest(task="coverage", prompt=_coverage_prompt(videos, request)),
            response_model=CoverageJudgment,
            default=None,
        )
        if not result.ok or result.value is None:
            return self.settings.default_coverage_score, [], False
        judgment: CoverageJudgment = result.value
        return judgment.coverage_score, list(judgment.missing_topics), True

    def _average_views(self, videos: Sequence[Candidate]) -> float:
        known = [v.view_count for v in videos if v.view_count is not None]
        if not known:
            raise VerificationInconclusive("no view counts available", check="quality.views")
        return sum(known) / len(known)

    def assess_quality(self, videos: Sequence[Candidate]) -> Tuple[float, List[str], bool]:
        """Returns (score, issues, whether view counts were known)."""
        s = self.settings
        score = 0.0
        issues: List[str] = []
        views_known = True
        count = len(videos)

        try:
            average_views = self._average_views(videos)
            if average_views > s.high_view_threshold:
                score += 0.3
            elif average_views > s.low_view_threshold:
                score += 0.2
            else:
                score += 0.1
                issues.append("Some videos have low view counts")
        except VerificationInconclusive as e:
            logger.info(f"[Verification] {e.check} inconclusive: {e.message}")
            views_known = False
            score += 0.2
            issues.append("View counts unavailable for these videos")

        described = sum(1 for v in videos if v.description.strip())
        if count and described / count > s.description_ratio_threshold:
            score += 0.3
        else:
            score += 0.1
            issues.append("Some videos lack descriptions")

        channels = {v.origin for v in videos if v.origin}
        if count and len(channels) / count > s.diversity_ratio_threshold:
            score += 0.2
        else:
            score += 0.1
            issues.append("Limited source diversity")

        if s.min_video_count <= count <= s.max_video_count:
            score += 0.2
        elif count < s.min_video_count:
            issues.append("Too few videos found")
        else:
            issues.append("Too many videos - may be overwhelming")

        return round(min(score, 1.0), 4), issues, views_known

    def validate_sequence(self, videos: Sequence[Candidate]) -> Tuple[bool, Optional[str]]:
        if len(videos) < 2:
            return True, None

        beginner = [kw.lower() for kw in self.settings.beginner_keywords]
        advanced = [kw.lower() for kw in self.settings.advanced_keywords]
        beginner_count = 0
        last_beginner = -1
        first_advanced: Optional[int] = None

        for index, video in enumerate(videos):
            title = video.title.lower()
            if any(kw in title for kw in beginner):
                beginner_count += 1
                last_beginner = index
            if first_advanced is None and any(kw in title for kw in advanced):
                first_advanced = index

        if first_advanced is not None and first_advanced < last_beginner:
            return False, OUT_OF_ORDER_ISSUE
        if len(videos) > self.settings.large_set_size and beginner_count == 0:
            return False, NO_INTRO_ISSUE
        return True, None


def _rating(score: float, labels: Tuple[str, str, str]) -> str:
    if score >= 0.8:
        return labels[0]
    if score >= 0.6:
        return labels[1]
    return labels[2]


def generate_verification_summary(report: VerificationReport) -> Dict[str, Any]:
    """User-facing summary sections for a verification report."""
    sections: List[Dict[str, Any]] = []

    if report.coverage_score >= 0.8:
        coverage_details = "All major concepts covered"
    elif report.gaps:
        coverage_details = f"Missing: {', '.join(report.gaps[:3])}"
    else:
        coverage_details = "Some topics may not be fully covered"
    sections.append({
        "title": "Coverage",
        "score": round(report.coverage_score * 100),
        "rating": _rating(report.coverage_score, ("Excellent", "Good", "Needs Improvement")),
        "details": coverage_details,
    })

    sections.append({
        "title": "Quality",
        "score": round(report.quality_score * 100),
        "rating": _rating(report.quality_score, ("High Quality", "Good Quality", "Mixed Quality")),
        "details": report.issues[0] if report.issues else "Resources from credible sources",
    })

    sections.append({
        "title": "Sequence",
        "rating": "Validated" if report.sequence_valid else "Needs Review",
        "details": (
            "Logical progression from basics to advanced"
            if report.sequence_valid
            else "Learning order may need adjustment"
        ),
    })

    if report.gaps:
        sections.append({
            "title": "Gaps Identified",
            "details": ", ".join(report.gaps[:5]),
            "optional": True,
        })

    return {
        "title": "Learning Path Quality Verification",
        "status": report.status.value,
        "confidence": report.confidence,
        "ready": report.ready,
        "sections": sections,
    }
