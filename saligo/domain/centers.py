"""Center domain models returned by the discovery engine."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

CenterStrength = Literal["strong", "medium", "weak"]

STRENGTH_CONFIDENCE: dict[str, float] = {"strong": 0.9, "medium": 0.7, "weak": 0.5}
STRENGTH_RANK: dict[str, int] = {"strong": 3, "medium": 2, "weak": 1}


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CenterAssessment(BaseModel):
    """Qualities that make a theme a center worth developing."""

    cross_domain: bool = False
    emotional_resonance: bool = False
    has_concrete: bool = False
    structural_pivot: bool = False


class DiscoveredCenter(BaseModel):
    """A thematic center discovered across several notes.

    Attributes:
        name: Short theme phrase
        explanation: Why this theme is a center
        strength: strong, medium or weak
        connected_note_ids: IDs of the notes that carry the theme
        recommendation: Why to start writing here (top-ranked center only)
        confidence: Derived from strength (strong 0.9, medium 0.7, weak 0.5)
        assessment: The four center qualities
    """

    name: str
    explanation: str
    strength: CenterStrength
    connected_note_ids: list[str] = []
    recommendation: str | None = None
    confidence: float
    assessment: CenterAssessment = Field(default_factory=CenterAssessment)


class TextPosition(BaseModel):
    start: int
    end: int


class TextCenter(BaseModel):
    """A structural pivot inside a piece of prose."""

    id: str
    text: str
    position: TextPosition
    paragraph: int = 0
    confidence: float = 0.8
    timestamp: str = Field(default_factory=utc_now)
    source: Literal["ai-suggested", "user-identified"] = "ai-suggested"
    accepted: bool = False
    explanation: str = ""


ExpansionType = Literal["before", "after", "elaborate", "contrast", "example"]


class ExpansionPrompt(BaseModel):
    """Suggestion for developing content around a center."""

    id: str
    center_id: str
    type: ExpansionType = "elaborate"
    prompt: str
    priority: int = 3  # 1-5, higher is more important
    rationale: str = ""


class UnityScore(BaseModel):
    paragraph_index: int
    score: float
    main_topic: str = ""


class TransitionStrength(BaseModel):
    from_paragraph: int
    to_paragraph: int
    strength: float
    suggestion: str | None = None


class Gap(BaseModel):
    after_paragraph: int | None = None
    severity: int = 1  # 1-5
    description: str = ""


class WholenessAnalysis(BaseModel):
    """Overall structural assessment of a document."""

    score: float  # 1-10
    paragraph_unity: list[UnityScore] = []
    transitions: list[TransitionStrength] = []
    gaps: list[Gap] = []
    suggestions: list[str] = []
    timestamp: str = Field(default_factory=utc_now)


class UnityCheck(BaseModel):
    """Whether a paragraph focuses on a single idea."""

    is_unified: bool
    score: float
    main_topic: str
    off_topic_sentences: list[str] = []
    suggestions: list[str] = []


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CostEstimate(BaseModel):
    input_tokens: int
    output_tokens: int
    cost_usd: float


class CenterFindingResult(BaseModel):
    """Raw result of a center-finding provider call."""

    centers: list[DiscoveredCenter]
    usage: TokenUsage = Field(default_factory=TokenUsage)
    estimated_cost: float = 0.0
    provider: str = ""
    timestamp: str = Field(default_factory=utc_now)


class Coverage(BaseModel):
    connected_notes: int
    total_notes: int
    percentage: int  # 0-100


class CenterDiscoveryResult(BaseModel):
    """Ranked centers for one discovery request."""

    centers: list[DiscoveredCenter]
    source: str
    note_ids: list[str]
    coverage: Coverage | None = None
    usage: TokenUsage = Field(default_factory=TokenUsage)
    estimated_cost: float = 0.0
    duration_ms: int = 0
