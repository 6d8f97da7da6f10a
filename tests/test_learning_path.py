"""Learning path ordering, stage design and completeness; no network."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Dict, List, Tuple

import pytest

from aggregator import (
    LearningPathArchitect,
    assemble_knowledge_path,
    calculate_completeness,
    fallback_structure,
    generate_path_summary,
    rank_and_order_videos,
    reorder_for_learning_sequence,
)
from intelligence.classification import ClassificationService
from intelligence.llm.base import BaseLLM, LLMResponse
from models import Candidate, LearningRequest, Level, SourceType
from utils.exceptions import SourceExhausted


def _video(title: str, score: float = 0.5, **signals) -> Candidate:
    return Candidate(
        source_type=SourceType.VIDEO,
        title=title,
        url=f"https://www.youtube.com/watch?v={title.replace(' ', '_')}",
        score=score,
        raw_signals=signals,
    )


MIXED = [
    _video("Advanced graph coloring"),
    _video("Graph theory introduction"),
    _video("Graph basics"),
    _video("Graph theory beginner guide"),
    _video("Expert proofs"),
    _video("Graph patterns"),
    _video("Graph exercises"),
]


def _titles(videos: List[Candidate]) -> List[str]:
    return [video.title for video in videos]


def test_beginner_sequence_leads_with_introductions() -> None:
    ordered = reorder_for_learning_sequence(MIXED, Level.BEGINNER)

    assert _titles(ordered) == [
        "Graph theory introduction",
        "Graph theory beginner guide",
        "Graph basics",
        "Graph patterns",
        "Advanced graph coloring",
        "Expert proofs",
        "Graph exercises",
    ]


def test_advanced_sequence_skips_introductions_up_front() -> None:
    ordered = reorder_for_learning_sequence(MIXED, Level.ADVANCED)

    assert _titles(ordered)[:4] == ["Graph basics", "Graph patterns", "Advanced graph coloring", "Expert proofs"]
    assert sorted(_titles(ordered)) == sorted(_titles(MIXED))


def test_intermediate_sequence_places_each_video_once() -> None:
    ordered = reorder_for_learning_sequence(MIXED, Level.INTERMEDIATE)

    assert _titles(ordered)[:5] == [
        "Graph theory introduction",
        "Graph basics",
        "Graph patterns",
        "Graph exercises",
        "Advanced graph coloring",
    ]
    assert len(ordered) == len(MIXED)


def test_rank_applies_recency_popularity_and_level_boosts() -> None:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    videos = [
        _video("Graph proofs", score=0.99, view_count=200_000),
        _video("Graph walkthrough", score=0.95, view_count=60_000),
        _video("Graph beginner lesson", score=0.5, view_count=200_000, published_at="2025-12-02T00:00:00Z"),
    ]

    ranked = rank_and_order_videos(videos, Level.BEGINNER, now=now)

    assert _titles(ranked) == ["Graph beginner lesson", "Graph proofs", "Graph walkthrough"]
    assert [video.score for video in ranked] == [0.73, 1.0, 0.98]
    assert ranked[0].raw_signals["base_score"] == 0.5


def test_old_unpopular_videos_keep_their_score() -> None:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    video = _video("Graph walkthrough", score=0.6, view_count=1_000, published_at="2020-01-01T00:00:00Z")

    ranked = rank_and_order_videos([video], Level.ADVANCED, now=now)

    assert ranked[0].score == 0.6


@pytest.mark.parametrize(
    "filled, rating",
    [(4, "Excellent"), (3, "Good"), (2, "Fair"), (1, "Needs Improvement")],
)
def test_completeness_rating(filled: int, rating: str) -> None:
    structure = fallback_structure("graph theory", Level.BEGINNER)
    content = {
        stage.id: [_video(f"{stage.title} {i}") for i in range(3)] if stage.id <= filled else []
        for stage in structure.stages
    }

    completeness = calculate_completeness(structure, content)

    assert completeness.rating == rating
    assert completeness.completed_stages == filled
    assert completeness.total_stages == 4
    assert len(completeness.missing_stages) == 4 - filled


class _RecordingSearch:
    def __init__(self, per_stage: Dict[str, List[Candidate]], failing: Tuple[str, ...] = ()):
        self.per_stage = per_stage
        self.failing = failing
        self.calls: List[Tuple[str, Level, int]] = []

    async def __call__(self, query: str, level: Level, max_results: int) -> List[Candidate]:
        self.calls.append((query, level, max_results))
        for title in self.failing:
            if query.endswith(title):
                raise SourceExhausted(f"no video tier produced results for '{query}'", tiers_tried=["hybrid"])
        for title, content in self.per_stage.items():
            if query.endswith(title):
                return list(content)
        return []


class _RoutingLLM(BaseLLM):
    def __init__(self, structure: dict, matches: dict):
        super().__init__(model="fake")
        self.structure = structure
        self.matches = matches

    @property
    def provider(self) -> str:
        return "fake"

    async def acomplete(self, messages, **kwargs) -> LLMResponse:
        prompt = messages[-1].content
        reply = self.structure if "Design a structured learning journey" in prompt else self.matches
        return LLMResponse(content=json.dumps(reply), model=self.model)


@pytest.mark.asyncio
async def test_build_uses_fallback_structure_without_classifier() -> None:
    three = [_video(f"Graph video {i}") for i in range(3)]
    search = _RecordingSearch(
        {"Fundamentals": three, "Reinforcement": three, "Practical Application": three},
    )
    architect = LearningPathArchitect(ClassificationService(None), search, max_results_per_stage=4)

    path = await architect.build(LearningRequest(topic="graph theory"))

    stages = path.structure.stages
    assert [stage.title for stage in stages] == [
        "Fundamentals", "Reinforcement", "Practical Application", "Advanced Mastery",
    ]
    assert sorted(level for _, level, _ in search.calls) == sorted(
        [Level.BEGINNER, Level.INTERMEDIATE, Level.INTERMEDIATE, Level.ADVANCED]
    )
    assert all(max_results == 4 for _, _, max_results in search.calls)
    assert [stage.status for stage in stages] == ["complete", "complete", "complete", "incomplete"]
    assert path.total_resources == 9
    assert path.completeness.rating == "Good"
    assert path.completeness.missing_stages == ["Advanced Mastery"]


@pytest.mark.asyncio
async def test_failing_stage_search_leaves_that_stage_empty() -> None:
    three = [_video(f"Graph video {i}") for i in range(3)]
    search = _RecordingSearch(
        {title: three for title in ("Fundamentals", "Reinforcement", "Practical Application", "Advanced Mastery")},
        failing=("Reinforcement",),
    )
    architect = LearningPathArchitect(ClassificationService(None), search)

    path = await architect.build(LearningRequest(topic="graph theory"))

    by_title = {stage.title: stage for stage in path.structure.stages}
    assert by_title["Reinforcement"].resources == []
    assert by_title["Reinforcement"].status == "incomplete"
    assert len(by_title["Fundamentals"].resources) == 3
    assert path.completeness.missing_stages == ["Reinforcement"]


@pytest.mark.asyncio
async def test_designed_stages_are_renumbered_and_matched_to_objectives() -> None:
    structure = {
        "topic": "graph theory",
        "totalEstimatedHours": 12,
        "difficulty": "beginner",
        "stages": [
            {
                "id": 1,
                "title": "Fundamentals",
                "estimatedHours": 6,
                "learningObjectives": ["Define vertices and edges", "Read adjacency matrices"],
                "keyConcepts": [{"concept": "Vertices and edges", "importance": "core vocabulary"}],
            },
            {
                "id": 1,
                "title": "Advanced Mastery",
                "estimatedHours": 6,
                "learningObjectives": ["Prove coloring bounds"],
            },
        ],
        "learningOutcomes": ["Model networks as graphs"],
        "nextSteps": ["Study network flows"],
    }
    matches = {
        "matches": [
            {
                "contentIndex": 1,
                "relevanceScore": 0.9,
                "matchedObjectives": [0, 7],
                "matchedConcepts": ["Vertices and edges"],
                "reasoning": "defines the vocabulary",
            },
            {"contentIndex": 9, "relevanceScore": 0.8},
        ]
    }
    content = [_video("Graph overview", score=0.5), _video("Vertices and edges explained", score=0.5)]
    search = _RecordingSearch({"Fundamentals": content, "Advanced Mastery": content})
    classifier = ClassificationService(_RoutingLLM(structure, matches))
    architect = LearningPathArchitect(classifier, search)

    path = await architect.build(LearningRequest(topic="graph theory"))

    stages = path.structure.stages
    assert [stage.id for stage in stages] == [1, 2]
    assert path.structure.total_estimated_hours == 12
    assert "graph theory Vertices and edges Fundamentals" in [query for query, _, _ in search.calls]

    fundamentals = stages[0].resources
    assert _titles(fundamentals) == ["Vertices and edges explained", "Graph overview"]
    assert fundamentals[0].score == 0.9
    assert fundamentals[0].raw_signals["matched_objectives"] == ["Define vertices and edges"]
    assert fundamentals[0].raw_signals["matched_concepts"] == ["Vertices and edges"]
    assert fundamentals[1].score == 0.5
    assert path.completeness.rating == "Needs Improvement"


def test_path_summary_reports_stage_overview() -> None:
    structure = fallback_structure("graph theory", Level.INTERMEDIATE)
    content = {stage.id: [_video(f"{stage.title} {i}") for i in range(3)] for stage in structure.stages}
    summary = generate_path_summary(assemble_knowledge_path(structure, content))

    assert summary["title"] == "Complete Learning Path: graph theory"
    assert summary["overview"]["total_time"] == "40 hours"
    assert summary["overview"]["resources"] == 12
    assert summary["overview"]["completeness"] == "Excellent"
    assert [stage["status"] for stage in summary["stages"]] == ["complete"] * 4
