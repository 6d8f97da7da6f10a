"""
Safety Screening Pipeline
Sequential request screening: hard block, AI check, disclaimers, age gate
"""
import logging
from typing import List, Optional

from intelligence.classification import ClassificationRequest, ClassificationService, SafetyJudgment
from models import DisclaimerSeverity, LearningRequest, SafetyDecision

from .classifier import Classifier, KeywordClassifier
from .policy import (
    AGE_BLOCK_MESSAGE,
    AGE_RESTRICTIONS,
    AGE_SAFETY_WARNING,
    DISCLAIMER_CATEGORIES,
    DISCLAIMER_WARNING,
    PROHIBITED_CONTENT,
    PROHIBITED_PHRASINGS,
    alternatives_for,
    keyword_table,
    prohibited_message,
)


logger = logging.getLogger(__name__)

SAFETY_SYSTEM_PROMPT = (
    "You review learning requests for an educational platform. "
    "Respond with a single JSON object and nothing else."
)

_AI_DISCLAIMER_SEVERITY = {
    "medical": DisclaimerSeverity.CRITICAL,
    "legal": DisclaimerSeverity.HIGH,
    "financial": DisclaimerSeverity.HIGH,
    "safety": DisclaimerSeverity.MEDIUM,
}
GENERIC_AI_DISCLAIMER = "safety"


def _safety_prompt(request: LearningRequest) -> str:
    return (
        "Analyze this learning request for safety and educational value.\n\n"
        f"Topic: {request.topic}\n"
        f"Description: {request.description or 'No description provided'}\n\n"
        "Decide whether it is a legitimate educational request, whether it involves illegal "
        "activity or could cause direct harm, and which disclaimer (if any) it needs.\n\n"
        "Respond with JSON:\n"
        '{"safe": true, "allowWithDisclaimer": false, "reason": "explanation", '
        '"educationalValue": "low|medium|high", "disclaimer": "medical|legal|financial|safety|none", '
        '"educationalContext": "brief context for the learner"}'
    )


class SafetyScreeningPipeline:
    """
    Screen a learning request.

    Stages run in order and a block at any stage is terminal. ``screen``
    never raises: the AI stage falls back to "safe" when the classification
    service is unavailable.
    """

    def __init__(
        self,
        classifier: ClassificationService,
        prohibited: Optional[Classifier] = None,
        disclaimers: Optional[Classifier] = None,
        age_restrictions: Optional[Classifier] = None,
    ):
        self.classifier = classifier
        self.prohibited = prohibited or KeywordClassifier(PROHIBITED_CONTENT, PROHIBITED_PHRASINGS)
        self.disclaimers = disclaimers or KeywordClassifier(keyword_table(DISCLAIMER_CATEGORIES))
        self.age_restrictions = age_restrictions or KeywordClassifier(keyword_table(AGE_RESTRICTIONS))

    async def screen(self, request: LearningRequest, user_age: Optional[int] = None) -> SafetyDecision:
        try:
            return await self._screen(request, user_age)
        except Exception as e:
            logger.exception(f"[Safety] screening failed for '{request.topic}': {e}")
            return SafetyDecision(
                allowed=False,
                reason="screening_failed",
                message="This request cannot be processed.",
            )

    async def _screen(self, request: LearningRequest, user_age: Optional[int]) -> SafetyDecision:
        text = request.full_text

        # 1. hard block
        hit = self.prohibited.match(text)
        if hit:
            logger.warning(f"[Safety] blocked '{request.topic}': {hit.category} ({hit.matched_text})")
            return SafetyDecision(
                allowed=False,
                reason="prohibited_content",
                category=hit.category,
                message=prohibited_message(hit.category),
                alternatives=alternatives_for(hit.keyword),
            )

        # 2. AI nuanced check
        result = await self.classifier.classify(
            ClassificationRequest(task="safety", prompt=_safety_prompt(request), system_prompt=SAFETY_SYSTEM_PROMPT),
            response_model=SafetyJudgment,
            default=SafetyJudgment(safe=True),
        )
        judgment: SafetyJudgment = result.value
        if not judgment.safe and not judgment.allow_with_disclaimer:
            logger.warning(f"[Safety] AI flagged '{request.topic}': {judgment.reason}")
            return SafetyDecision(
                allowed=False,
                reason="ai_flagged",
                message=judgment.reason or "This request cannot be processed.",
            )

        decision = {
            "allowed": True,
            "educational_context": judgment.educational_context,
        }
        warnings: List[str] = []

        if judgment.allow_with_disclaimer:
            ai_disclaimer = (judgment.disclaimer or "").strip().lower()
            if ai_disclaimer in ("", "none"):
                ai_disclaimer = GENERIC_AI_DISCLAIMER
            decision.update(
                requires_disclaimer=True,
                disclaimer_type=ai_disclaimer,
                disclaimer_severity=_AI_DISCLAIMER_SEVERITY.get(ai_disclaimer, DisclaimerSeverity.MEDIUM),
                requires_acceptance=True,
                reason="ai_disclaimer",
            )
            warnings.append(DISCLAIMER_WARNING.format(type=ai_disclaimer))

        # 3. disclaimer categories, first match
        disclaimer_hit = self.disclaimers.match(text)
        if disclaimer_hit and not decision.get("requires_disclaimer"):
            config = DISCLAIMER_CATEGORIES.get(disclaimer_hit.category, {})
            decision.update(
                requires_disclaimer=True,
                disclaimer_type=disclaimer_hit.category,
                disclaimer_severity=config.get("severity"),
                requires_acceptance=bool(config.get("requires_acceptance")),
            )
            warnings.append(DISCLAIMER_WARNING.format(type=disclaimer_hit.category))

        # 4. age restrictions
        age_hit = self.age_restrictions.match(text)
        if age_hit:
            config = AGE_RESTRICTIONS.get(age_hit.category, {})
            min_age = int(config.get("min_age", 18))
            if user_age is not None and user_age < min_age:
                logger.info(f"[Safety] age-restricted '{request.topic}' ({age_hit.category})")
                return SafetyDecision(
                    allowed=False,
                    reason="age_restricted",
                    category=age_hit.category,
                    min_age=min_age,
                    message=AGE_BLOCK_MESSAGE.format(min_age=min_age),
                )
            decision.update(min_age=min_age, requires_age_verification=user_age is None)
            if config.get("requires_safety_disclaimer"):
                warnings.append(AGE_SAFETY_WARNING)

        return SafetyDecision(warnings=warnings, **decision)
