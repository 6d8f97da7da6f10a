"""
Aggregator Module
Multi-source fan-out plus coverage and gap analysis
"""
from .coverage import (
    REGULATED_TOPICS,
    STAGES,
    compute_coverage,
    compute_totals,
    identify_gaps,
    opportunity_score,
    requires_regulation,
    stage_coverage,
)
from .learning_path import (
    LearningPathArchitect,
    assemble_knowledge_path,
    calculate_completeness,
    fallback_structure,
    generate_path_summary,
    rank_and_order_videos,
    reorder_for_learning_sequence,
)
from .research_orchestrator import MultiSourceOrchestrator, print_summary

__all__ = [
    "REGULATED_TOPICS",
    "STAGES",
    "compute_coverage",
    "compute_totals",
    "identify_gaps",
    "opportunity_score",
    "requires_regulation",
    "stage_coverage",
    "LearningPathArchitect",
    "assemble_knowledge_path",
    "calculate_completeness",
    "fallback_structure",
    "generate_path_summary",
    "rank_and_order_videos",
    "reorder_for_learning_sequence",
    "MultiSourceOrchestrator",
    "print_summary",
]
