"""Prompt construction for match predictions."""

from typing import Dict, List, Optional, Sequence

from majorpredictor.constants import DEFAULT_MATCH_TYPE, SYSTEM_PROMPT
from majorpredictor.providers.search import SearchResponse
from majorpredictor.schema import PredictionRequest

RESPONSE_SCHEMA = """{
  "predictedWinner": "Team Name",
  "confidence": 75,
  "predictedScore": "2-1",
  "keyFactors": [
    "Factor 1 explanation",
    "Factor 2 explanation",
    "Factor 3 explanation"
  ],
  "team1Strengths": ["strength1", "strength2"],
  "team1Weaknesses": ["weakness1"],
  "team2Strengths": ["strength1", "strength2"],
  "team2Weaknesses": ["weakness1"],
  "mapPrediction": {
    "team1BestMaps": ["map1", "map2"],
    "team2BestMaps": ["map1", "map2"],
    "likelyDecider": "map name"
  },
  "riskLevel": "low|medium|high",
  "briefAnalysis": "2-3 sentence summary of the prediction rationale"
}"""


def ranking_query(request: PredictionRequest) -> str:
    return f"{request.team1} {request.team2} CS2 ranking recent results"


def head_to_head_query(request: PredictionRequest) -> str:
    return f"{request.team1} vs {request.team2} CS2 head to head history"


def _truncate(text: str, limit: int) -> str:
    text = " ".join((text or "").split())
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def format_search_context(responses: Sequence[SearchResponse], snippet_max_chars: int = 400) -> str:
    """Render search answers and numbered snippets; empty when nothing came back."""
    lines: List[str] = []
    index = 1
    for response in responses:
        if response is None or response.is_empty:
            continue
        if response.answer:
            lines.append(f"Summary ({response.query}): {_truncate(response.answer, snippet_max_chars)}")
        for hit in response.results:
            content = _truncate(hit.content, snippet_max_chars)
            if not content:
                continue
            title = hit.title or "Untitled"
            lines.append(f"{index}. {title}: {content}")
            index += 1
    return "\n".join(lines)


def build_prediction_prompt(request: PredictionRequest, search_context: Optional[str] = None) -> str:
    prompt = f"""Analyze this CS2 match and provide a prediction:

**Match Details:**
- Team 1: {request.team1}
- Team 2: {request.team2}
- Tournament: {request.tournament or 'Major Championship'}
- Match Type: {request.match_type or DEFAULT_MATCH_TYPE}
- Date: {request.date or 'Upcoming'}

**Analysis Request:**
Based on your knowledge of these teams' recent performances, head-to-head records, map pools, current form, and any recent roster changes, predict the outcome of this match.

Please provide your response in the following JSON format:
{RESPONSE_SCHEMA}"""

    if search_context:
        prompt += (
            "\n\n**Recent data:**\n"
            "Weigh these search results above older knowledge when they conflict.\n"
            f"{search_context}"
        )

    if request.additional_context:
        prompt += f"\n\n**Additional Context:**\n{request.additional_context}"

    return prompt


def build_messages(request: PredictionRequest, search_context: Optional[str] = None) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_prediction_prompt(request, search_context)},
    ]
