from datetime import datetime, timezone

from pydantic import BaseModel

from saligo.domain.centers import TextCenter
from saligo.domain.context import CenterFindingContext, SeedContext

SALIGO_CONTEXT = """You are an expert in Saligo Writing, a methodology inspired by Christopher Alexander's "The Nature of Order".

Key concepts:
- Centers: Strong, coherent ideas that naturally attract attention and serve as focal points
- Wholeness: The structural quality that makes writing feel coherent and alive
- Generative Sequence: Development through small, structure-preserving transformations
- Bill Evans' Philosophy: "Don't approximate the whole vaguely. Take a small part and be entirely true about it.\""""

SEED_SYSTEM_PROMPT = """You are a Saligo Writing expert. Saligo Writing is a generative, iterative writing methodology inspired by Christopher Alexander's "The Nature of Order" and Bill Evans' practice philosophy.

CORE PRINCIPLES:

1. Start small and true: "Don't approximate the whole vaguely. Take a small part and be entirely true about it." (Bill Evans)

2. Centers: Identify structural pivots where writing has the most "life" and can expand naturally. Centers are not just topics. They are ideas with:
   - Cross-domain presence (appearing in multiple contexts)
   - Emotional resonance (the writer expressed strong feeling)
   - Concreteness (lived experience, not just abstract concepts)
   - Structural pivot potential (can expand in multiple directions)

3. Generative Sequence: Let structure emerge through writing, not predetermined outlines.

YOUR TASK: Analyze seed notes to identify {min_centers}-{max_centers} "centers", the structural themes with the strongest potential for development into coherent writing."""

FIND_CENTERS_TEMPLATE = """TEXT TO ANALYZE:
{text}{context}

INSTRUCTIONS:
1. Identify 2-5 centers (strong ideas or phrases)
2. For each center, provide:
   - The exact text (quote from the input)
   - Position in the text (character start/end)
   - Confidence (0.0-1.0)
   - Brief explanation of why this is a center

Return your response in JSON format:
{{
  "centers": [
    {{
      "text": "exact quote",
      "position": {{ "start": 0, "end": 20 }},
      "confidence": 0.85,
      "explanation": "why this is a strong center"
    }}
  ]
}}"""

SUGGEST_EXPANSIONS_TEMPLATE = """CENTER:
{center}

EXPLANATION:
{explanation}{context}

INSTRUCTIONS:
Suggest 3-5 expansion prompts that:
1. Build on the center's strength
2. Maintain structural wholeness
3. Follow Bill Evans' principle: "Take a small part and be entirely true about it"

Return your response in JSON format:
{{
  "expansions": [
    {{
      "direction": "brief title (e.g., 'Explore Historical Context')",
      "prompt": "detailed prompt for the writer",
      "rationale": "why this expansion strengthens wholeness"
    }}
  ]
}}"""

ANALYZE_WHOLENESS_TEMPLATE = """DOCUMENT:
{document}

INSTRUCTIONS:
Evaluate the document on a scale of 1-10 for structural coherence and "life". Consider:
1. How well paragraphs connect to each other
2. Whether there's a clear center or multiple centers
3. Transition quality between ideas
4. Structural gaps or weak spots

Return your response in JSON format:
{{
  "score": 7.5,
  "paragraphUnity": [
    {{ "paragraphIndex": 0, "unityScore": 0.8, "issue": "..." }}
  ],
  "transitions": [
    {{ "from": 0, "to": 1, "strength": 0.7, "suggestion": "..." }}
  ],
  "gaps": [
    {{ "after": 2, "description": "missing connection to...", "severity": "medium" }}
  ],
  "suggestions": [
    "Consider developing the idea in paragraph 3...",
    "The transition from paragraph 1 to 2 could be smoother..."
  ]
}}"""

CHECK_UNITY_TEMPLATE = """PARAGRAPH:
{paragraph}

INSTRUCTIONS:
Evaluate:
1. Does the paragraph have a single clear focus?
2. Do all sentences support that focus?
3. Is there a clear claim, evidence, or analysis structure?

Return your response in JSON format:
{{
  "hasUnity": true,
  "score": 0.85,
  "mainIdea": "brief statement of the paragraph's main idea",
  "offTopicSentences": [
    {{ "sentence": "quote", "reason": "why it's off-topic" }}
  ],
  "suggestions": [
    "Consider moving sentence 3 to a new paragraph about...",
    "The paragraph would be stronger if..."
  ]
}}"""

SEED_TEMPLATE = """Here are my seed notes:

{seeds}{moc}

EVALUATION CRITERIA:

Identify centers using these criteria:
- **Cross-domain presence**: Does this idea appear across multiple contexts/seeds?
- **Emotional resonance**: Did I express strong feeling (keywords: "shocking", "amazing", "realized", "came easily")?
- **Concreteness**: Do I have lived experience, or is it just an abstract concept?
- **Structural pivot**: Can this idea expand in multiple directions?

STRENGTH RATINGS:
- **Strong**: Present in 3+ seeds + concrete experience + emotional resonance
- **Medium**: Present in 2 seeds OR has one strong quality
- **Weak**: Mentioned once OR too abstract

RETURN JSON FORMAT:
{{
  "centers": [
    {{
      "name": "Center theme (short phrase, e.g., 'Completeness vs Approximation')",
      "explanation": "Why this is a center (2-3 sentences explaining cross-domain, emotional, concrete, structural pivot)",
      "strength": "strong" | "medium" | "weak",
      "connectedSeeds": ["seed-1", "seed-3"],
      "recommendation": "Why to start here (only for strongest center)",
      "assessment": {{
        "crossDomain": true,
        "emotionalResonance": true,
        "hasConcrete": true,
        "structuralPivot": true
      }}
    }}
  ]
}}

Identify {min_centers}-{max_centers} centers. Rank by strength (strongest first). Include recommendation only for the top center. Refer to seeds only by their ids (seed-1, seed-2, ...)."""

DEFAULT_MIN_CENTERS = 2
DEFAULT_MAX_CENTERS = 4


class Prompt(BaseModel):
    system: str
    user: str


def find_centers_prompt(text: str, context: str | None = None) -> Prompt:
    context_section = f"\n\nCONTEXT (surrounding paragraphs):\n{context}" if context else ""
    return Prompt(
        system=SALIGO_CONTEXT,
        user=FIND_CENTERS_TEMPLATE.format(text=text, context=context_section),
    )


def suggest_expansions_prompt(center: TextCenter, document_context: str | None = None) -> Prompt:
    context_section = f"\n\nSURROUNDING TEXT:\n{document_context}" if document_context else ""
    return Prompt(
        system=SALIGO_CONTEXT,
        user=SUGGEST_EXPANSIONS_TEMPLATE.format(
            center=center.text,
            explanation=center.explanation or "No explanation provided",
            context=context_section,
        ),
    )


def analyze_wholeness_prompt(document: str) -> Prompt:
    return Prompt(system=SALIGO_CONTEXT, user=ANALYZE_WHOLENESS_TEMPLATE.format(document=document))


def check_unity_prompt(paragraph: str) -> Prompt:
    return Prompt(system=SALIGO_CONTEXT, user=CHECK_UNITY_TEMPLATE.format(paragraph=paragraph))


def format_created(timestamp: float) -> str:
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).date().isoformat()
    except (OverflowError, OSError, ValueError):
        return "unknown"


def format_seed(seed: SeedContext) -> str:
    created = format_created(seed.created)
    lines = [
        f"{seed.id}:",
        f"Content: {seed.content or '[No text content]'}",
        f"Tags: {', '.join(seed.tags)}",
        f"Created: {created}",
    ]
    if seed.has_photo:
        lines.append(f"Photo: {seed.photo_caption or 'No caption'}")
    if seed.backlink_count > 0:
        lines.append(f"Backlinks: {seed.backlink_count}")
    return "\n".join(lines)


def seed_centers_prompt(context: CenterFindingContext) -> Prompt:
    """Prompt for discovering centers across seed notes, with optional MOC structure."""
    min_centers = context.min_centers or DEFAULT_MIN_CENTERS
    max_centers = max(context.max_centers or DEFAULT_MAX_CENTERS, min_centers)

    seeds = "\n\n---\n\n".join(format_seed(seed) for seed in context.seeds)

    moc_section = ""
    if context.moc:
        moc_section = (
            f"\n\nMOC CONTEXT:\nMOC Title: {context.moc.title}\n"
            f"Headings: {' > '.join(context.moc.headings)}"
        )
        if context.moc.seeds_from_heading:
            grouping = "\n".join(
                f"- {seed_id}: {heading}"
                for seed_id, heading in context.moc.seeds_from_heading.items()
            )
            moc_section += f"\nSeeds by heading:\n{grouping}"

    return Prompt(
        system=SEED_SYSTEM_PROMPT.format(min_centers=min_centers, max_centers=max_centers),
        user=SEED_TEMPLATE.format(
            seeds=seeds, moc=moc_section, min_centers=min_centers, max_centers=max_centers
        ),
    )
