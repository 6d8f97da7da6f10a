"""
Data Models / Schemas
Unified data structures for requests, candidates, research results and reports
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Level(str, Enum):
    """Target learner level"""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class SourceType(str, Enum):
    """Resource source type"""
    VIDEO = "video"
    COURSE = "course"
    BOOK = "book"
    CERTIFICATION = "certification"
    GOVERNMENT = "government"
    ARTICLE = "article"
    PODCAST = "podcast"


class LearningRequest(BaseModel):
    """A learner's free-text request"""
    model_config = ConfigDict(frozen=True)

    topic: str = Field(..., description="Learning topic")
    description: str = Field(default="", description="Optional free-text context")
    level: Level = Field(default=Level.BEGINNER, description="Target level")
    preferred_sources: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Channel or provider names that receive a score boost",
    )

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("topic must not be empty")
        return value

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str) -> str:
        return (value or "").strip()

    @property
    def full_text(self) -> str:
        return f"{self.topic} {self.description}".strip().lower()


class Candidate(BaseModel):
    """One resolved learning resource; re-scoring produces a new instance"""
    model_config = ConfigDict(frozen=True)

    source_type: SourceType = Field(..., description="Source type")
    title: str = Field(..., description="Title")
    origin: str = Field(default="", description="Channel, provider, author or agency")
    url: str = Field(default="", description="Resource link")
    raw_signals: Dict[str, Any] = Field(default_factory=dict, description="Source-specific signals")
    score: float = Field(default=0.0, description="Relevance score in [0, 1]")
    verified: bool = Field(default=False, description="Passed resource verification")

    @field_validator("score")
    @classmethod
    def _score_in_unit_interval(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"score must be within [0, 1], got {value}")
        return value

    def with_score(self, score: float, **signals: Any) -> "Candidate":
        merged = {**self.raw_signals, **signals}
        return self.model_copy(update={"score": score, "raw_signals": merged})

    def with_verification(self, verified: bool, **signals: Any) -> "Candidate":
        merged = {**self.raw_signals, **signals}
        return self.model_copy(update={"verified": verified, "raw_signals": merged})

    @property
    def key(self) -> str:
        """Identity used for deduplication"""
        return str(self.raw_signals.get("id") or self.url or self.title)

    @property
    def description(self) -> str:
        return str(self.raw_signals.get("description") or "")

    @property
    def view_count(self) -> Optional[int]:
        return self.raw_signals.get("view_count")

    @property
    def like_count(self) -> Optional[int]:
        return self.raw_signals.get("like_count")

    @property
    def duration_minutes(self) -> Optional[float]:
        return self.raw_signals.get("duration_minutes")

    @property
    def published_at(self) -> Optional[datetime]:
        value = self.raw_signals.get("published_at")
        if isinstance(value, datetime):
            return value
        if isinstance(value, str) and value:
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return None
        return None


class SourceResult(BaseModel):
    """Ordered candidates produced by one resolver"""
    source_type: SourceType
    candidates: List[Candidate] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.candidates)


class GapType(str, Enum):
    ACADEMIC_COURSE = "academic_course"
    CERTIFICATION = "certification"
    GOVERNMENT_GUIDE = "government_guide"
    PRACTICAL_GUIDE = "practical_guide"
    ADVANCED_CONTENT = "advanced_content"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Gap(BaseModel):
    """A missing resource class and its opportunity score"""
    type: GapType
    severity: Severity
    title: str
    description: str = ""
    impact: str = ""
    opportunity_score: int = Field(default=0, ge=0, le=100)


class CoverageReport(BaseModel):
    """Integer coverage percentages per learning stage"""
    fundamentals: int = Field(default=0, ge=0, le=100)
    reinforcement: int = Field(default=0, ge=0, le=100)
    practical_application: int = Field(default=0, ge=0, le=100)
    advanced_mastery: int = Field(default=0, ge=0, le=100)
    overall: int = Field(default=0, ge=0, le=100)


class ResearchResult(BaseModel):
    """Aggregate of every resolver's output for one request"""
    model_config = ConfigDict(frozen=True)

    request: LearningRequest
    sources: Dict[SourceType, SourceResult] = Field(default_factory=dict)
    coverage: CoverageReport = Field(default_factory=CoverageReport)
    gaps: List[Gap] = Field(default_factory=list)
    source_errors: Dict[str, str] = Field(default_factory=dict, description="Resolver name -> failure reason")
    total_cost: float = Field(default=0.0, description="Sum of parsed resource prices")
    estimated_hours: int = Field(default=0, description="Sum of parsed course hours")
    created_at: datetime = Field(default_factory=datetime.now)

    def candidates(self, source_type: SourceType) -> List[Candidate]:
        result = self.sources.get(source_type)
        return list(result.candidates) if result else []

    @property
    def videos(self) -> List[Candidate]:
        return self.candidates(SourceType.VIDEO)

    @property
    def total_count(self) -> int:
        return sum(len(result.candidates) for result in self.sources.values())

    def summary(self) -> Dict[str, int]:
        counts = {source_type.value: len(self.candidates(source_type)) for source_type in SourceType}
        counts["total"] = self.total_count
        return counts


class DisclaimerSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SafetyDecision(BaseModel):
    """Outcome of safety screening; blocked decisions are terminal"""
    model_config = ConfigDict(frozen=True)

    allowed: bool = True
    reason: Optional[str] = None
    category: Optional[str] = None
    message: Optional[str] = None
    alternatives: List[str] = Field(default_factory=list)
    requires_disclaimer: bool = False
    disclaimer_type: Optional[str] = None
    disclaimer_severity: Optional[DisclaimerSeverity] = None
    requires_acceptance: bool = False
    requires_age_verification: bool = False
    min_age: Optional[int] = None
    warnings: List[str] = Field(default_factory=list)
    educational_context: Optional[str] = None


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    HAS_GAPS = "has_gaps"
    INSUFFICIENT_COVERAGE = "insufficient_coverage"
    LOW_QUALITY = "low_quality"
    POOR_SEQUENCE = "poor_sequence"
    VERIFICATION_FAILED = "verification_failed"


class VerificationReport(BaseModel):
    """Quality gate verdict over one research result"""
    coverage_score: float = Field(default=0.0, ge=0.0, le=1.0)
    quality_score: float = Field(default=0.0, ge=0.0, le=1.0)
    sequence_valid: bool = True
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    status: VerificationStatus = VerificationStatus.VERIFIED
    ready: bool = True
    gaps: List[str] = Field(default_factory=list, description="Missing topics")
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    inconclusive_checks: List[str] = Field(default_factory=list, description="Checks that fell back to defaults")


class KeyConcept(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    concept: str
    importance: str = ""
    prerequisites: List[str] = Field(default_factory=list)


class LearningStage(BaseModel):
    """One stage of a knowledge-first learning path; AI replies use camelCase keys"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    title: str
    description: str = ""
    estimated_hours: float = Field(default=0.0, alias="estimatedHours", ge=0.0)
    learning_objectives: List[str] = Field(default_factory=list, alias="learningObjectives")
    key_concepts: List[KeyConcept] = Field(default_factory=list, alias="keyConcepts")
    assessment_checkpoint: str = Field(default="", alias="assessmentCheckpoint")
    resources: List[Candidate] = Field(default_factory=list)
    status: str = Field(default="incomplete", description="complete | incomplete")


class LearningPathStructure(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    topic: str
    total_estimated_hours: float = Field(default=0.0, alias="totalEstimatedHours", ge=0.0)
    difficulty: Level = Level.BEGINNER
    prerequisites: List[str] = Field(default_factory=list)
    stages: List[LearningStage] = Field(default_factory=list)
    learning_outcomes: List[str] = Field(default_factory=list, alias="learningOutcomes")
    career_applications: List[str] = Field(default_factory=list, alias="careerApplications")
    next_steps: List[str] = Field(default_factory=list, alias="nextSteps")


class PathCompleteness(BaseModel):
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    completed_stages: int = 0
    total_stages: int = 0
    rating: str = "Needs Improvement"
    missing_stages: List[str] = Field(default_factory=list)


class KnowledgePath(BaseModel):
    """A structure whose stages carry their matched resources"""
    structure: LearningPathStructure
    total_resources: int = 0
    completeness: PathCompleteness = Field(default_factory=PathCompleteness)
    created_at: datetime = Field(default_factory=datetime.now)


class OutcomeStatus(str, Enum):
    BLOCKED = "blocked"
    READY = "ready"
    NEEDS_REFINEMENT = "needs_refinement"


class LearningPathOutcome(BaseModel):
    """Everything one run produced, for the caller to render"""
    request: LearningRequest
    safety: SafetyDecision
    research: Optional[ResearchResult] = None
    verification: Optional[VerificationReport] = None
    disclaimer: Optional[Dict[str, Any]] = None
    path: Optional[KnowledgePath] = None
    status: OutcomeStatus = OutcomeStatus.READY

    def raise_for_status(self) -> None:
        """Raise the matching pipeline error for blocked or video-less outcomes"""
        from utils.exceptions import RequestBlocked, SourceExhausted

        if not self.safety.allowed:
            raise RequestBlocked(self.safety)
        if self.research is not None and "video" in self.research.source_errors and not self.research.videos:
            raise SourceExhausted(self.research.source_errors["video"])
