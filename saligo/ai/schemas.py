"""Expected JSON shapes of provider replies, with conversion to domain models."""

import re
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from saligo.domain.centers import (
    STRENGTH_CONFIDENCE,
    CenterAssessment,
    DiscoveredCenter,
    ExpansionPrompt,
    Gap,
    TextCenter,
    TextPosition,
    TransitionStrength,
    UnityCheck,
    UnityScore,
    WholenessAnalysis,
)

EXPANSION_TYPES = ("before", "after", "elaborate", "contrast", "example")
GAP_SEVERITY = {"high": 5, "medium": 3}


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


def paragraph_index(text: str, offset: int) -> int:
    """Index of the paragraph (split on blank lines) containing a character offset."""
    paragraphs = [p.strip() for p in re.split(r"\n\n+", text) if p.strip()]
    position = 0
    for index, paragraph in enumerate(paragraphs):
        end = position + len(paragraph)
        if offset < end:
            return index
        position = end + 2
    return 0


class WirePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PositionPayload(WirePayload):
    start: int
    end: int


class TextCenterPayload(WirePayload):
    text: str = Field(min_length=1)
    position: PositionPayload
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    explanation: str | None = None

    def to_center(self, source_text: str) -> TextCenter:
        return TextCenter(
            id=generate_id("center"),
            text=self.text,
            position=TextPosition(start=self.position.start, end=self.position.end),
            paragraph=paragraph_index(source_text, self.position.start),
            confidence=0.8 if self.confidence is None else self.confidence,
            explanation=self.explanation or "",
        )


class FindCentersPayload(WirePayload):
    """Reply to a find-centers request."""

    centers: list[TextCenterPayload]

    def to_centers(self, source_text: str) -> list[TextCenter]:
        return [center.to_center(source_text) for center in self.centers]


class ExpansionPayload(WirePayload):
    direction: str | None = None
    prompt: str = Field(min_length=1)
    rationale: str | None = None

    @property
    def expansion_type(self) -> str:
        direction = (self.direction or "").lower()
        for kind in EXPANSION_TYPES:
            if kind in direction:
                return kind
        return "elaborate"


class SuggestExpansionsPayload(WirePayload):
    """Reply to a suggest-expansions request."""

    expansions: list[ExpansionPayload]

    def to_prompts(self, center_id: str) -> list[ExpansionPrompt]:
        return [
            ExpansionPrompt(
                id=generate_id("expansion"),
                center_id=center_id,
                type=expansion.expansion_type,
                prompt=expansion.prompt,
                # Earlier suggestions rank higher
                priority=min(5, max(1, 5 - index)),
                rationale=expansion.rationale or "",
            )
            for index, expansion in enumerate(self.expansions)
        ]


class ParagraphUnityPayload(WirePayload):
    paragraph_index: int | None = Field(default=None, alias="paragraphIndex")
    unity_score: float | None = Field(default=None, alias="unityScore")
    issue: str | None = None


class TransitionPayload(WirePayload):
    from_paragraph: int | None = Field(default=None, alias="from")
    to_paragraph: int | None = Field(default=None, alias="to")
    strength: float | None = None
    suggestion: str | None = None


class GapPayload(WirePayload):
    after: int | None = None
    description: str | None = None
    severity: str | None = None


class WholenessPayload(WirePayload):
    """Reply to an analyze-wholeness request."""

    score: float
    suggestions: list[Any]
    paragraph_unity: list[ParagraphUnityPayload] = Field(default=[], alias="paragraphUnity")
    transitions: list[TransitionPayload] = []
    gaps: list[GapPayload] = []

    def to_analysis(self) -> WholenessAnalysis:
        return WholenessAnalysis(
            score=self.score,
            paragraph_unity=[
                UnityScore(
                    paragraph_index=unity.paragraph_index or 0,
                    score=unity.unity_score or 0.5,
                    main_topic=unity.issue or "",
                )
                for unity in self.paragraph_unity
            ],
            transitions=[
                TransitionStrength(
                    from_paragraph=transition.from_paragraph or 0,
                    to_paragraph=transition.to_paragraph or 0,
                    strength=transition.strength or 0.5,
                    suggestion=transition.suggestion,
                )
                for transition in self.transitions
            ],
            gaps=[
                Gap(
                    after_paragraph=gap.after,
                    severity=GAP_SEVERITY.get((gap.severity or "").lower(), 1),
                    description=gap.description or "",
                )
                for gap in self.gaps
            ],
            suggestions=[s for s in self.suggestions if isinstance(s, str)],
        )


class OffTopicSentencePayload(WirePayload):
    sentence: str | None = None
    reason: str | None = None


class UnityPayload(WirePayload):
    """Reply to a check-unity request."""

    has_unity: bool = Field(alias="hasUnity")
    score: float
    main_idea: str = Field(alias="mainIdea")
    off_topic_sentences: list[OffTopicSentencePayload] = Field(
        default=[], alias="offTopicSentences"
    )
    suggestions: list[Any] = []

    def to_unity_check(self) -> UnityCheck:
        return UnityCheck(
            is_unified=self.has_unity,
            score=self.score,
            main_topic=self.main_idea,
            off_topic_sentences=[s.sentence or "" for s in self.off_topic_sentences],
            suggestions=[s for s in self.suggestions if isinstance(s, str)],
        )


class AssessmentPayload(WirePayload):
    cross_domain: bool | None = Field(default=None, alias="crossDomain")
    emotional_resonance: bool | None = Field(default=None, alias="emotionalResonance")
    has_concrete: bool | None = Field(default=None, alias="hasConcrete")
    structural_pivot: bool | None = Field(default=None, alias="structuralPivot")

    def to_assessment(self) -> CenterAssessment:
        return CenterAssessment(
            cross_domain=bool(self.cross_domain),
            emotional_resonance=bool(self.emotional_resonance),
            has_concrete=bool(self.has_concrete),
            structural_pivot=bool(self.structural_pivot),
        )


class SeedCenterPayload(WirePayload):
    name: str = Field(min_length=1)
    explanation: str = Field(min_length=1)
    strength: str
    connected_seeds: list[str] = Field(alias="connectedSeeds")
    recommendation: str | None = None
    assessment: AssessmentPayload | None = None

    @field_validator("strength", mode="before")
    @classmethod
    def _check_strength(cls, value: Any) -> str:
        strength = str(value or "").lower()
        if strength not in STRENGTH_CONFIDENCE:
            raise ValueError("strength must be 'strong', 'medium', or 'weak'")
        return strength

    def to_center(self) -> DiscoveredCenter:
        assessment = self.assessment or AssessmentPayload()
        return DiscoveredCenter(
            name=self.name,
            explanation=self.explanation,
            strength=self.strength,
            connected_note_ids=list(self.connected_seeds),
            recommendation=self.recommendation,
            confidence=STRENGTH_CONFIDENCE[self.strength],
            assessment=assessment.to_assessment(),
        )


class SeedCentersPayload(WirePayload):
    """Reply to a find-centers-from-seeds or MOC discovery request.

    Connected note ids are still the anonymized seed ids at this point.
    """

    centers: list[SeedCenterPayload]

    @field_validator("centers")
    @classmethod
    def _require_centers(cls, centers: list[SeedCenterPayload]) -> list[SeedCenterPayload]:
        if not centers:
            raise ValueError("no centers found, the seeds may be too disconnected")
        return centers

    def to_centers(self) -> list[DiscoveredCenter]:
        return [center.to_center() for center in self.centers]
