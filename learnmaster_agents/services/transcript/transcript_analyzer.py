"""AI-powered transcript analysis with a keyword-heuristic fallback.

Identifies the key educational moments of a video transcript and
produces the analysis record consumed by document export.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

import structlog

from ...core.config import LLMConfig
from ...models.outcome import Outcome
from ...models.transcript import Highlight, Transcript, TranscriptAnalysis
from ...utils.json_extractor import parse_llm_json
from ..llm.chat_client import ChatCompletionClient
from ..llm.schemas import LLMClientError
from .transcript_processing import format_time

logger = structlog.get_logger(__name__)

DEFAULT_ANALYSIS_CONFIG = LLMConfig(model="gpt-4.1-mini", temperature=0.3, max_tokens=2000)

MAX_TRANSCRIPT_CHARS = 8000
TRUNCATION_MARKER = "\n...(transcript continues)"

MIN_HIGHLIGHT_SCORE = 3
MAX_HIGHLIGHTS = 10
MAX_CONCEPTS = 5
LONG_SEGMENT_CHARS = 100

EDUCATIONAL_KEYWORDS = (
    "important",
    "key",
    "fundamental",
    "essential",
    "critical",
    "remember",
    "note that",
    "basically",
    "in other words",
    "for example",
    "such as",
    "like",
    "means",
    "definition",
)

_CAPITALIZED_PHRASE = re.compile(r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*")

SYSTEM_PROMPT = (
    "You are an expert educational content analyst who identifies key learning "
    "moments in educational videos."
)

ANALYSIS_PROMPT = """You are an expert educational content analyst. Analyze this video transcript about "{topic}" for {level} learners.

TRANSCRIPT:
{transcript}

TASK:
Identify the most important educational moments in this transcript. For each key moment:
1. Identify the timestamp
2. Explain why it's important
3. Extract key concepts taught
4. Rate importance (1-10)

Focus on:
- Core definitions and explanations
- Critical concepts for understanding {topic}
- Practical examples and applications
- Common mistakes or clarifications
- Implementation details

Respond in JSON format:
{{
  "summary": "Brief 2-3 sentence summary of the video",
  "keyLearnings": ["learning 1", "learning 2", ...],
  "highlights": [
    {{
      "timestamp": 45,
      "text": "exact quote from transcript",
      "reason": "why this is important",
      "concepts": ["concept1", "concept2"],
      "importance": 9
    }}
  ],
  "prerequisites": ["prerequisite knowledge needed"],
  "nextSteps": ["what to learn next"]
}}

Only include the TOP 5-10 most important moments. Be selective!"""


def topic_terms(topic: str) -> list[str]:
    return [term for term in topic.lower().split(" ") if len(term) > 3]


def build_transcript_text(transcript: Transcript) -> str:
    """Timestamped transcript text, truncated for the prompt."""
    text = "\n".join(f"[{format_time(seg.start)}] {seg.text}" for seg in transcript.segments)
    if len(text) > MAX_TRANSCRIPT_CHARS:
        return text[:MAX_TRANSCRIPT_CHARS] + TRUNCATION_MARKER
    return text


def extract_concepts(text: str, terms: list[str]) -> list[str]:
    """Topic terms found in the text plus up to three capitalized phrases."""
    concepts: dict[str, None] = {}
    text_lower = text.lower()
    for term in terms:
        if term in text_lower:
            concepts[term] = None
    for phrase in _CAPITALIZED_PHRASE.findall(text)[:3]:
        concepts[phrase] = None
    return list(concepts)[:MAX_CONCEPTS]


def _score_segment(text: str, terms: list[str]) -> int:
    text_lower = text.lower()
    score = sum(2 for term in terms if term in text_lower)
    score += sum(1 for keyword in EDUCATIONAL_KEYWORDS if keyword in text_lower)
    if len(text) > LONG_SEGMENT_CHARS:
        score += 1
    return score


def basic_analysis(
    transcript: Transcript, topic: str, level: str = "beginner"
) -> TranscriptAnalysis:
    """Heuristic analysis used when the AI path is unavailable.

    Segments score 2 per topic term and 1 per educational keyword they
    contain, plus 1 when longer than 100 characters. The ten best segments
    scoring at least 3 become highlights.
    """
    terms = topic_terms(topic)
    scored = [(segment, _score_segment(segment.text, terms)) for segment in transcript.segments]
    selected = sorted(
        (item for item in scored if item[1] >= MIN_HIGHLIGHT_SCORE),
        key=lambda item: item[1],
        reverse=True,
    )[:MAX_HIGHLIGHTS]

    highlights = [
        Highlight(
            timestamp=segment.start,
            text=segment.text,
            reason="Contains relevant keywords and educational content",
            concepts=extract_concepts(segment.text, terms),
            importance=min(10, score),
        )
        for segment, score in selected
    ]
    return TranscriptAnalysis(
        summary=f"Educational video about {topic}",
        key_learnings=[f"Understanding {topic}", "Key concepts and terminology"],
        highlights=highlights,
        prerequisites=["Basic understanding of the subject"],
        next_steps=["Practice with examples", "Explore advanced topics"],
        analyzed_at=datetime.now(timezone.utc),
        topic=topic,
        level=level,
    )


class TranscriptAnalyzer:
    """Finds the key learning moments of a transcript.

    Args:
        llm_client: Chat client, or None to always use the heuristic
        llm_config: Model, temperature and token limit for the analysis call
    """

    def __init__(
        self,
        llm_client: ChatCompletionClient | None,
        llm_config: LLMConfig | None = None,
    ) -> None:
        self.llm_client = llm_client
        self.llm_config = llm_config or DEFAULT_ANALYSIS_CONFIG

    async def analyze_transcript(
        self, transcript: Transcript, topic: str, level: str = "beginner"
    ) -> Outcome[TranscriptAnalysis]:
        """Analyze a transcript. Never raises; falls back to ``basic_analysis``."""
        logger.info(
            "transcript_analysis_start",
            video_id=transcript.video_id,
            topic=topic,
            segments=len(transcript.segments),
        )
        if self.llm_client is None:
            return Outcome.fallback(basic_analysis(transcript, topic, level), "ai_disabled")

        prompt = ANALYSIS_PROMPT.format(
            topic=topic, level=level, transcript=build_transcript_text(transcript)
        )
        try:
            result = await self.llm_client.chat(
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.llm_config.temperature,
                max_tokens=self.llm_config.max_tokens,
                model=self.llm_config.model,
                response_format={"type": "json_object"},
            )
            payload = parse_llm_json(result.content)
            if not isinstance(payload, dict):
                raise ValueError("Analysis response is not a JSON object")
            analysis = TranscriptAnalysis.model_validate(
                {
                    **payload,
                    "analyzedAt": datetime.now(timezone.utc),
                    "topic": topic,
                    "level": level,
                }
            )
        except LLMClientError as e:
            logger.error(
                "transcript_analysis_llm_failed", video_id=transcript.video_id, error=str(e)
            )
            return Outcome.fallback(basic_analysis(transcript, topic, level), "llm_error")
        except ValueError as e:
            logger.error(
                "transcript_analysis_invalid_response", video_id=transcript.video_id, error=str(e)
            )
            return Outcome.fallback(basic_analysis(transcript, topic, level), "invalid_response")
        except Exception as e:
            logger.error("transcript_analysis_failed", video_id=transcript.video_id, error=str(e))
            return Outcome.fallback(basic_analysis(transcript, topic, level), "llm_error")

        logger.info(
            "transcript_analysis_complete",
            video_id=transcript.video_id,
            highlights=len(analysis.highlights),
        )
        return Outcome.ok(analysis)
