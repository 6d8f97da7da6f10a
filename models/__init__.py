"""
Data Models
"""
from .schemas import (
    Level,
    SourceType,
    LearningRequest,
    Candidate,
    SourceResult,
    GapType,
    Severity,
    Gap,
    CoverageReport,
    ResearchResult,
    DisclaimerSeverity,
    SafetyDecision,
    VerificationStatus,
    VerificationReport,
    KeyConcept,
    LearningStage,
    LearningPathStructure,
    PathCompleteness,
    KnowledgePath,
    OutcomeStatus,
    LearningPathOutcome,
)

__all__ = [
    "Level",
    "SourceType",
    "LearningRequest",
    "Candidate",
    "SourceResult",
    "GapType",
    "Severity",
    "Gap",
    "CoverageReport",
    "ResearchResult",
    "DisclaimerSeverity",
    "SafetyDecision",
    "VerificationStatus",
    "VerificationReport",
    "KeyConcept",
    "LearningStage",
    "LearningPathStructure",
    "PathCompleteness",
    "KnowledgePath",
    "OutcomeStatus",
    "LearningPathOutcome",
]
