"""
Learning Path Structuring
Final ranking and learning-sequence ordering of videos, plus knowledge-first
stage design: objectives per stage, content per stage, completeness
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from intelligence.classification import ClassificationRequest, ClassificationService, ObjectiveMatchBatch
from models import (
    Candidate,
    KeyConcept,
    KnowledgePath,
    LearningPathStructure,
    LearningRequest,
    LearningStage,
    Level,
    PathCompleteness,
)


logger = logging.getLogger(__name__)

INTRO_MARKERS = ("introduction", "beginner", "guide")
ADVANCED_MARKERS = ("advanced", "expert")

# (intro, intermediate, advanced) slots placed first for each level
SEQUENCE_SLOTS: Dict[Level, tuple] = {
    Level.BEGINNER: (2, 2, 1),
    Level.INTERMEDIATE: (1, 3, 1),
    Level.ADVANCED: (0, 2, 3),
}

RECENT_WINDOW = timedelta(days=180)
STAGE_COMPLETE_MIN_RESOURCES = 3

StageSearch = Callable[[str, Level, int], Awaitable[List[Candidate]]]


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _final_score(candidate: Candidate, level: Level, now: datetime) -> float:
    score = candidate.score
    published = candidate.published_at
    if published is not None and now - _as_utc(published) < RECENT_WINDOW:
        score += 0.05

    views = candidate.view_count or 0
    if views > 100_000:
        score += 0.05
    if views > 50_000:
        score += 0.03

    title = candidate.title.lower()
    if level == Level.BEGINNER and "beginner" in title:
        score += 0.1
    if level == Level.ADVANCED and "advanced" in title:
        score += 0.1
    return round(min(score, 1.0), 4)


def reorder_for_learning_sequence(videos: Sequence[Candidate], level: Level) -> List[Candidate]:
    """
    Put a level-shaped progression at the front of a score-ordered list.

    Videos fall into exactly one of intro, intermediate or advanced; the
    leading slots per level come from ``SEQUENCE_SLOTS`` and the rest keep
    their incoming order.
    """
    intro: List[Candidate] = []
    intermediate: List[Candidate] = []
    advanced: List[Candidate] = []
    for video in videos:
        title = video.title.lower()
        if any(marker in title for marker in INTRO_MARKERS):
            intro.append(video)
        elif any(marker in title for marker in ADVANCED_MARKERS):
            advanced.append(video)
        else:
            intermediate.append(video)

    n_intro, n_mid, n_adv = SEQUENCE_SLOTS[level]
    sequence = intro[:n_intro] + intermediate[:n_mid] + advanced[:n_adv]
    placed = {id(video) for video in sequence}
    sequence.extend(video for video in videos if id(video) not in placed)
    return sequence


def rank_and_order_videos(
    videos: Sequence[Candidate],
    level: Level,
    now: Optional[datetime] = None,
) -> List[Candidate]:
    """Apply final ranking boosts, sort by score and reorder for learning progression."""
    now = _as_utc(now or datetime.now(timezone.utc))
    scored = [
        video.with_score(_final_score(video, level, now), base_score=video.score)
        for video in videos
    ]
    scored.sort(key=lambda video: video.score, reverse=True)
    return reorder_for_learning_sequence(scored, level)


# ------------------------------------------------------------------
# Stage design
# ------------------------------------------------------------------

def stage_level(stage: LearningStage) -> Level:
    title = stage.title.lower()
    if title == "fundamentals":
        return Level.BEGINNER
    if title in ("reinforcement", "practical application"):
        return Level.INTERMEDIATE
    return Level.ADVANCED


def fallback_structure(topic: str, level: Level) -> LearningPathStructure:
    """Fixed four-stage structure used when the classification service is unavailable"""
    total_hours = {Level.BEGINNER: 20, Level.INTERMEDIATE: 40, Level.ADVANCED: 60}[level]
    stages = [
        LearningStage(
            id=1,
            title="Fundamentals",
            description=f"Learn the core concepts of {topic}",
            estimated_hours=8,
            learning_objectives=[
                f"Understand what {topic} is and why it matters",
                "Learn fundamental terminology and concepts",
                "Identify key principles and best practices",
            ],
            key_concepts=[KeyConcept(concept="Basic Concepts", importance="Foundation for all future learning")],
            assessment_checkpoint="Can explain core concepts to a beginner",
        ),
        LearningStage(
            id=2,
            title="Reinforcement",
            description=f"Deepen your understanding of {topic}",
            estimated_hours=8,
            learning_objectives=[
                "Apply concepts to simple scenarios",
                "Understand common patterns and techniques",
                "Recognize and avoid common mistakes",
            ],
            key_concepts=[
                KeyConcept(
                    concept="Practical Techniques",
                    importance="Enables real-world application",
                    prerequisites=["Basic Concepts"],
                )
            ],
            assessment_checkpoint="Can apply concepts to solve simple problems",
        ),
        LearningStage(
            id=3,
            title="Practical Application",
            description=f"Apply {topic} to real-world scenarios",
            estimated_hours=12,
            learning_objectives=[
                "Complete hands-on projects",
                "Solve real-world problems",
                "Build portfolio-worthy work",
            ],
            key_concepts=[
                KeyConcept(
                    concept="Real-World Application",
                    importance="Demonstrates mastery",
                    prerequisites=["Basic Concepts", "Practical Techniques"],
                )
            ],
            assessment_checkpoint="Can complete projects independently",
        ),
        LearningStage(
            id=4,
            title="Advanced Mastery",
            description=f"Master advanced aspects of {topic}",
            estimated_hours=12,
            learning_objectives=[
                "Understand advanced techniques",
                "Optimize for performance and quality",
                "Teach others and contribute to the field",
            ],
            key_concepts=[
                KeyConcept(
                    concept="Advanced Techniques",
                    importance="Separates experts from practitioners",
                    prerequisites=["Real-World Application"],
                )
            ],
            assessment_checkpoint="Can mentor others and solve complex problems",
        ),
    ]
    return LearningPathStructure(
        topic=topic,
        total_estimated_hours=total_hours,
        difficulty=level,
        stages=stages,
        learning_outcomes=[
            f"Comprehensive understanding of {topic}",
            "Ability to apply knowledge to real-world scenarios",
            "Confidence to teach others",
        ],
        career_applications=["Professional use in relevant fields"],
        next_steps=["Specialize in advanced topics", "Contribute to the community"],
    )


def _structure_prompt(request: LearningRequest) -> str:
    return (
        f'Design a structured learning journey for someone who wants to learn about: "{request.topic}"\n\n'
        f"Additional context: {request.description or 'No additional context provided'}\n"
        f"Current level: {request.level.value}\n\n"
        "Use these stages in order: Fundamentals, Reinforcement, Practical Application, Advanced Mastery.\n"
        "For each stage give learning objectives, key concepts, estimated hours and an assessment checkpoint.\n\n"
        "Respond with JSON:\n"
        '{"topic": "...", "totalEstimatedHours": 20, "difficulty": "beginner|intermediate|advanced", '
        '"prerequisites": [], "stages": [{"id": 1, "title": "Fundamentals", "description": "...", '
        '"estimatedHours": 8, "learningObjectives": ["..."], '
        '"keyConcepts": [{"concept": "...", "importance": "...", "prerequisites": []}], '
        '"assessmentCheckpoint": "..."}], "learningOutcomes": [], "careerApplications": [], "nextSteps": []}'
    )


def _matching_prompt(stage: LearningStage, content: Sequence[Candidate]) -> str:
    objectives = "\n".join(f"{i}. {objective}" for i, objective in enumerate(stage.learning_objectives))
    concepts = "\n".join(f"- {c.concept}: {c.importance}" for c in stage.key_concepts)
    listing = "\n".join(f"{i}. {item.title}" for i, item in enumerate(content))
    return (
        f"Evaluate educational content for the learning stage \"{stage.title}\".\n\n"
        f"Learning objectives:\n{objectives}\n\nKey concepts:\n{concepts}\n\n"
        f"Content:\n{listing}\n\n"
        "Rate how well each item matches the objectives (0-1) and list the objective indices "
        "and concepts it addresses.\n"
        'Respond with JSON: {"matches": [{"contentIndex": 0, "relevanceScore": 0.8, '
        '"matchedObjectives": [0], "matchedConcepts": ["..."], "reasoning": "brief"}]}'
    )


def calculate_completeness(structure: LearningPathStructure, stage_content: Dict[int, List[Candidate]]) -> PathCompleteness:
    total = len(structure.stages)
    missing = [
        stage.title for stage in structure.stages
        if len(stage_content.get(stage.id, [])) < STAGE_COMPLETE_MIN_RESOURCES
    ]
    completed = total - len(missing)
    score = completed / total if total else 0.0

    if score >= 0.9:
        rating = "Excellent"
    elif score >= 0.7:
        rating = "Good"
    elif score >= 0.5:
        rating = "Fair"
    else:
        rating = "Needs Improvement"

    return PathCompleteness(
        score=round(score, 4),
        completed_stages=completed,
        total_stages=total,
        rating=rating,
        missing_stages=missing,
    )


def assemble_knowledge_path(structure: LearningPathStructure, stage_content: Dict[int, List[Candidate]]) -> KnowledgePath:
    stages = []
    for stage in structure.stages:
        resources = list(stage_content.get(stage.id, []))
        stages.append(
            stage.model_copy(update={
                "resources": resources,
                "status": "complete" if resources else "incomplete",
            })
        )
    assembled = structure.model_copy(update={"stages": stages})
    path = KnowledgePath(
        structure=assembled,
        total_resources=sum(len(content) for content in stage_content.values()),
        completeness=calculate_completeness(structure, stage_content),
    )
    logger.info(
        f"[Path] assembled {path.total_resources} resources across {len(stages)} stages "
        f"({path.completeness.rating})"
    )
    return path


def generate_path_summary(path: KnowledgePath) -> Dict[str, Any]:
    structure = path.structure
    return {
        "title": f"Complete Learning Path: {structure.topic}",
        "overview": {
            "total_time": f"{structure.total_estimated_hours:g} hours",
            "difficulty": structure.difficulty.value,
            "stages": len(structure.stages),
            "resources": path.total_resources,
            "completeness": path.completeness.rating,
        },
        "stages": [
            {
                "title": stage.title,
                "time": f"{stage.estimated_hours:g} hours",
                "objectives": len(stage.learning_objectives),
                "resources": len(stage.resources),
                "status": stage.status,
            }
            for stage in structure.stages
        ],
        "outcomes": structure.learning_outcomes,
        "next_steps": structure.next_steps,
    }


class LearningPathArchitect:
    """
    Knowledge-first path builder.

    Designs the stage structure, searches content per stage concurrently,
    matches content to stage objectives and assembles the result. Every AI
    step has a deterministic fallback; a failing stage search yields an
    empty stage.
    """

    def __init__(
        self,
        classifier: ClassificationService,
        search: StageSearch,
        max_results_per_stage: int = 5,
    ):
        self.classifier = classifier
        self.search = search
        self.max_results_per_stage = max_results_per_stage

    async def design_structure(self, request: LearningRequest) -> LearningPathStructure:
        result = await self.classifier.classify(
            ClassificationRequest(task="path_structure", prompt=_structure_prompt(request)),
            response_model=LearningPathStructure,
            default=None,
        )
        if not result.ok or result.value is None or not result.value.stages:
            logger.warning(f"[Path] using fallback structure for '{request.topic}'")
            return fallback_structure(request.topic, request.level)
        # stage ids key the per-stage content, so they must be unique
        stages = [stage.model_copy(update={"id": i}) for i, stage in enumerate(result.value.stages, start=1)]
        logger.info(f"[Path] designed {len(stages)} stages for '{request.topic}'")
        return result.value.model_copy(update={"stages": stages})

    async def _search_stage(self, structure: LearningPathStructure, stage: LearningStage) -> List[Candidate]:
        keywords = " ".join(c.concept for c in stage.key_concepts)
        query = " ".join(part for part in (structure.topic, keywords, stage.title) if part)
        try:
            return await self.search(query, stage_level(stage), self.max_results_per_stage)
        except Exception as e:
            logger.warning(f"[Path] stage {stage.id} search failed: {e}")
            return []

    async def search_content_for_stages(self, structure: LearningPathStructure) -> Dict[int, List[Candidate]]:
        results = await asyncio.gather(*[self._search_stage(structure, stage) for stage in structure.stages])
        return {stage.id: content for stage, content in zip(structure.stages, results)}

    async def match_content_to_objectives(self, stage: LearningStage, content: List[Candidate]) -> List[Candidate]:
        """Score content against the stage objectives; unchanged content when no judgment is available."""
        if not content:
            return content
        result = await self.classifier.classify(
            ClassificationRequest(task="objective_match", prompt=_matching_prompt(stage, content)),
            response_model=ObjectiveMatchBatch,
            default=None,
        )
        if not result.ok or result.value is None:
            return content

        matches = {m.content_index: m for m in result.value.matches if 0 <= m.content_index < len(content)}
        enhanced = []
        for index, item in enumerate(content):
            match = matches.get(index)
            if match is None:
                enhanced.append(item)
                continue
            objectives = [
                stage.learning_objectives[i] for i in match.matched_objectives
                if 0 <= i < len(stage.learning_objectives)
            ]
            enhanced.append(
                item.with_score(
                    match.relevance_score,
                    matched_objectives=objectives,
                    matched_concepts=match.matched_concepts,
                    match_reasoning=match.reasoning,
                )
            )
        enhanced.sort(key=lambda c: c.score, reverse=True)
        return enhanced

    async def build(self, request: LearningRequest) -> KnowledgePath:
        structure = await self.design_structure(request)
        stage_content = await self.search_content_for_stages(structure)
        matched = await asyncio.gather(*[
            self.match_content_to_objectives(stage, stage_content[stage.id]) for stage in structure.stages
        ])
        stage_content = {stage.id: content for stage, content in zip(structure.stages, matched)}
        return assemble_knowledge_path(structure, stage_content)
