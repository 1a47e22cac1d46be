"""Tests for TranscriptAnalyzer and the heuristic fallback."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from learnmaster_agents.models.transcript import Transcript, TranscriptSegment
from learnmaster_agents.services.llm.schemas import LLMClientError
from learnmaster_agents.services.transcript import TranscriptAnalyzer, basic_analysis
from learnmaster_agents.services.transcript.transcript_analyzer import (
    MAX_TRANSCRIPT_CHARS,
    TRUNCATION_MARKER,
    build_transcript_text,
    extract_concepts,
)


@pytest.fixture
def transcript() -> Transcript:
    return Transcript(
        video_id="vid1",
        available=True,
        segments=[
            TranscriptSegment(start=0, duration=4, text="Hi everyone, welcome back"),
            TranscriptSegment(
                start=4,
                duration=6,
                text="Recursion is important: a function that calls itself, for example factorial",
            ),
            TranscriptSegment(start=10, duration=5, text="Remember the base case is key"),
            TranscriptSegment(start=15, duration=5, text="Thanks for watching"),
        ],
    )


@pytest.mark.unit
class TestBasicAnalysis:
    def test_scored_segments_become_highlights(self, transcript: Transcript) -> None:
        """Given: segments with topic terms and educational keywords
        When: the heuristic analysis runs
        Then: segments scoring at least 3 are highlighted, best first
        """
        analysis = basic_analysis(transcript, "recursion basics", "beginner")

        assert [h.timestamp for h in analysis.highlights] == [4]
        highlight = analysis.highlights[0]
        # recursion +2, important +1, for example +1
        assert highlight.importance == 4
        assert highlight.concepts[0] == "recursion"
        assert highlight.reason == "Contains relevant keywords and educational content"
        assert analysis.summary == "Educational video about recursion basics"
        assert analysis.topic == "recursion basics"
        assert analysis.level == "beginner"
        assert analysis.analyzed_at is not None

    def test_no_highlights_below_threshold(self) -> None:
        quiet = Transcript(
            video_id="v",
            available=True,
            segments=[TranscriptSegment(start=0, duration=1, text="hello there")],
        )

        analysis = basic_analysis(quiet, "graphs")

        assert analysis.highlights == []
        assert analysis.key_learnings == ["Understanding graphs", "Key concepts and terminology"]

    def test_importance_is_capped_at_ten(self) -> None:
        text = (
            "important key fundamental essential critical remember note that basically "
            "in other words for example such as like means definition of sorting algorithms"
        )
        dense = Transcript(
            video_id="v",
            available=True,
            segments=[TranscriptSegment(start=3, duration=5, text=text)],
        )

        analysis = basic_analysis(dense, "sorting algorithms")

        assert analysis.highlights[0].importance == 10


@pytest.mark.unit
class TestHelpers:
    def test_transcript_text_is_timestamped(self, transcript: Transcript) -> None:
        text = build_transcript_text(transcript)

        assert text.splitlines()[0] == "[00:00] Hi everyone, welcome back"
        assert text.splitlines()[2] == "[00:10] Remember the base case is key"

    def test_transcript_text_is_truncated(self) -> None:
        long = Transcript(
            video_id="v",
            available=True,
            segments=[TranscriptSegment(start=i, duration=1, text="x" * 100) for i in range(200)],
        )

        text = build_transcript_text(long)

        assert text.endswith(TRUNCATION_MARKER)
        assert len(text) == MAX_TRANSCRIPT_CHARS + len(TRUNCATION_MARKER)

    def test_extract_concepts_caps_at_five(self) -> None:
        concepts = extract_concepts(
            "Alpha Beta and Gamma Delta then Epsilon Zeta", ["alpha", "gamma", "epsilon"]
        )

        assert concepts == ["alpha", "gamma", "epsilon", "Alpha Beta", "Gamma Delta"]


@pytest.mark.unit
class TestAnalyzeTranscript:
    @pytest.mark.asyncio
    async def test_without_client_uses_heuristic(self, transcript: Transcript) -> None:
        outcome = await TranscriptAnalyzer(None).analyze_transcript(transcript, "recursion")

        assert outcome.fallback_used is True
        assert outcome.reason == "ai_disabled"
        assert outcome.value.summary == "Educational video about recursion"

    @pytest.mark.asyncio
    async def test_ai_analysis_is_parsed(
        self, mock_llm_client: MagicMock, chat_result, transcript: Transcript
    ) -> None:
        mock_llm_client.chat.return_value = chat_result(
            {
                "summary": "Introduces recursion.",
                "keyLearnings": ["Base cases stop recursion"],
                "highlights": [
                    {
                        "timestamp": 10,
                        "text": "Remember the base case is key",
                        "reason": "Defines termination",
                        "concepts": ["base case"],
                        "importance": 9,
                    }
                ],
                "prerequisites": ["Functions"],
                "nextSteps": ["Dynamic programming"],
            }
        )

        outcome = await TranscriptAnalyzer(mock_llm_client).analyze_transcript(
            transcript, "recursion", "intermediate"
        )

        assert outcome.fallback_used is False
        analysis = outcome.value
        assert analysis.highlights[0].importance == 9
        assert analysis.next_steps == ["Dynamic programming"]
        assert analysis.level == "intermediate"
        assert analysis.analyzed_at is not None

        kwargs = mock_llm_client.chat.call_args.kwargs
        assert [m["role"] for m in kwargs["messages"]] == ["system", "user"]
        assert "[00:04] Recursion is important" in kwargs["messages"][1]["content"]
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 2000

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", ["no json here", ["a", "list"], {"keyLearnings": []}])
    async def test_invalid_response_falls_back(
        self, mock_llm_client: MagicMock, chat_result, transcript: Transcript, response
    ) -> None:
        mock_llm_client.chat.return_value = chat_result(response)

        outcome = await TranscriptAnalyzer(mock_llm_client).analyze_transcript(
            transcript, "recursion"
        )

        assert outcome.fallback_used is True
        assert outcome.reason == "invalid_response"
        assert outcome.value.summary == "Educational video about recursion"

    @pytest.mark.asyncio
    async def test_llm_error_falls_back(
        self, mock_llm_client: MagicMock, transcript: Transcript
    ) -> None:
        mock_llm_client.chat.side_effect = LLMClientError("Maximum number of retries (3) exceeded")

        outcome = await TranscriptAnalyzer(mock_llm_client).analyze_transcript(
            transcript, "recursion"
        )

        assert outcome.reason == "llm_error"
        assert len(outcome.value.highlights) == 1
