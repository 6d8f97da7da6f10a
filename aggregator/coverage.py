"""Learning-stage coverage, content gaps and cost/time totals for a research result."""

from __future__ import annotations

from typing import Dict, List, Mapping, Tuple

from models import Candidate, CoverageReport, Gap, GapType, Severity, SourceResult, SourceType


STAGES = ("fundamentals", "reinforcement", "practical_application", "advanced_mastery")

REGULATED_TOPICS = (
    "wine", "alcohol", "brewing", "distilling",
    "medical", "healthcare", "pharmacy",
    "legal", "law", "attorney",
    "financial", "accounting", "tax",
    "construction", "electrical", "plumbing",
    "food", "restaurant", "catering",
)

_SEVERITY_POINTS = {Severity.HIGH: 40, Severity.MEDIUM: 25, Severity.LOW: 10}
_TYPE_POINTS = {GapType.ACADEMIC_COURSE: 20, GapType.PRACTICAL_GUIDE: 15}


def _counts(sources: Mapping[SourceType, SourceResult]) -> Dict[SourceType, int]:
    return {
        source_type: len(sources[source_type].candidates) if source_type in sources else 0
        for source_type in SourceType
    }


def stage_coverage(sources: Mapping[SourceType, SourceResult], stage: str) -> int:
    """
    Percentage coverage for one learning stage.

    Every stage uses the same rule table for now; ``stage`` is kept so a
    per-stage classifier can replace it without changing callers.
    """
    if stage not in STAGES:
        raise ValueError(f"unknown stage: {stage}")

    counts = _counts(sources)
    coverage = 0
    if counts[SourceType.COURSE] > 0:
        coverage += 30
    if counts[SourceType.COURSE] > 2:
        coverage += 20
    if counts[SourceType.BOOK] > 0:
        coverage += 20
    if counts[SourceType.BOOK] > 2:
        coverage += 10
    if counts[SourceType.CERTIFICATION] > 0:
        coverage += 20
    if counts[SourceType.GOVERNMENT] > 0:
        coverage += 10
    if counts[SourceType.VIDEO] > 5:
        coverage += 10
    if counts[SourceType.ARTICLE] > 5:
        coverage += 5
    if counts[SourceType.PODCAST] > 0:
        coverage += 5
    return min(coverage, 100)


def compute_coverage(sources: Mapping[SourceType, SourceResult]) -> CoverageReport:
    per_stage = {stage: stage_coverage(sources, stage) for stage in STAGES}
    overall = round(sum(per_stage.values()) / len(STAGES))
    return CoverageReport(**per_stage, overall=overall)


def requires_regulation(topic: str) -> bool:
    lowered = str(topic or "").lower()
    return any(regulated in lowered for regulated in REGULATED_TOPICS)


def opportunity_score(gap_type: GapType, severity: Severity, overall_coverage: int) -> int:
    score = _SEVERITY_POINTS[severity]
    if overall_coverage < 50:
        score += 30
    elif overall_coverage < 75:
        score += 20
    else:
        score += 10
    score += _TYPE_POINTS.get(gap_type, 10)
    return min(score, 100)


def _gap(
    gap_type: GapType,
    severity: Severity,
    title: str,
    description: str,
    impact: str,
    coverage: CoverageReport,
) -> Gap:
    return Gap(
        type=gap_type,
        severity=severity,
        title=title,
        description=description,
        impact=impact,
        opportunity_score=opportunity_score(gap_type, severity, coverage.overall),
    )


def identify_gaps(
    sources: Mapping[SourceType, SourceResult],
    coverage: CoverageReport,
    topic: str,
) -> List[Gap]:
    counts = _counts(sources)
    gaps: List[Gap] = []

    if counts[SourceType.COURSE] == 0:
        gaps.append(_gap(
            GapType.ACADEMIC_COURSE, Severity.HIGH,
            f"Comprehensive {topic} Course",
            f"No structured academic courses found for {topic}.",
            "Learners must piece together fundamentals from scattered sources.",
            coverage,
        ))
    if counts[SourceType.CERTIFICATION] == 0:
        gaps.append(_gap(
            GapType.CERTIFICATION, Severity.MEDIUM,
            f"Professional {topic} Certification",
            f"No professional certifications found for {topic}.",
            "Learners cannot prove their expertise through recognized credentials.",
            coverage,
        ))
    if counts[SourceType.GOVERNMENT] == 0 and requires_regulation(topic):
        gaps.append(_gap(
            GapType.GOVERNMENT_GUIDE, Severity.HIGH,
            f"Official {topic} Regulations and Guidelines",
            f"No government resources found for {topic}.",
            "Learners may miss legal requirements or compliance issues.",
            coverage,
        ))
    if coverage.practical_application < 50:
        gaps.append(_gap(
            GapType.PRACTICAL_GUIDE, Severity.HIGH,
            f"Practical Application Guide for {topic}",
            "Limited hands-on resources found; application is weak.",
            "Learners will struggle to apply knowledge in real situations.",
            coverage,
        ))
    if coverage.advanced_mastery < 40:
        gaps.append(_gap(
            GapType.ADVANCED_CONTENT, Severity.MEDIUM,
            f"Advanced {topic} Techniques and Mastery",
            "Limited advanced-level content found.",
            "Learners will hit a ceiling before reaching expert level.",
            coverage,
        ))
    return gaps


def _all_candidates(sources: Mapping[SourceType, SourceResult]) -> List[Candidate]:
    return [candidate for result in sources.values() for candidate in result.candidates]


def compute_totals(sources: Mapping[SourceType, SourceResult]) -> Tuple[float, int]:
    """Sum of parsed costs (rounded) and parsed hours over every candidate."""
    total_cost = 0.0
    total_hours = 0
    for candidate in _all_candidates(sources):
        cost = candidate.raw_signals.get("cost")
        if cost is not None:
            total_cost += float(cost)
        hours = candidate.raw_signals.get("hours")
        if hours is not None:
            total_hours += int(hours)
    return float(round(total_cost)), total_hours
