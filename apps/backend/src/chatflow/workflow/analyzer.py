"""Intent analyzer: natural-language request -> structured workflow plan."""

from __future__ import annotations

import json
import logging
from typing import Any

import anthropic
from pydantic import ValidationError

from .errors import PlanExtractionError, PlanParseError, PlanShapeError, UpstreamCallError
from .schema import PlanAnalysis

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-opus-4-1-20250805"
DEFAULT_MAX_TOKENS = 2000

REQUIRED_FIELDS = ("intent", "requiredServices", "complexity", "plan")
COMPLEXITY_LEVELS = ("simple", "moderate", "complex")

ANALYSIS_PROMPT = """\
Analyze this workflow request and create a detailed implementation plan:

"{request}"

Respond with JSON containing:
{{
  "intent": "clear description of what this workflow should do",
  "requiredServices": ["list of external services needed - gmail, slack, http, etc"],
  "complexity": "simple|moderate|complex",
  "plan": {{
    "name": "workflow name",
    "description": "detailed description",
    "triggers": ["what initiates this workflow"],
    "steps": [
      {{
        "id": "step_1",
        "name": "step name",
        "type": "http|ai|database|conditional|email|slack|etc",
        "config": {{
          "description": "step configuration parameters"
        }}
      }}
    ],
    "expectedOutputs": ["what this workflow produces"]
  }}
}}

Every "config" value must be a flat scalar (string, number or boolean).
Do not nest objects or arrays inside "config"."""


def build_analysis_prompt(request: str) -> str:
    return ANALYSIS_PROMPT.format(request=request)


def extract_json_object(text: str) -> str:
    """Return the substring from the first ``{`` to the last ``}`` inclusive."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise PlanExtractionError("Could not extract workflow plan from completion response")
    return text[start : end + 1]


def parse_analysis(text: str) -> PlanAnalysis:
    """Extract, parse and validate the analysis JSON embedded in completion text."""
    candidate = extract_json_object(text)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise PlanParseError(f"Workflow plan is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise PlanShapeError("Workflow plan must be a JSON object")

    missing = [field for field in REQUIRED_FIELDS if field not in data]
    if missing:
        raise PlanShapeError(f"Workflow plan is missing required fields: {', '.join(missing)}")

    if data["complexity"] not in COMPLEXITY_LEVELS:
        raise PlanShapeError(
            f"Unknown complexity {data['complexity']!r}; expected one of {', '.join(COMPLEXITY_LEVELS)}"
        )

    try:
        return PlanAnalysis.model_validate(data)
    except ValidationError as e:
        raise PlanShapeError(f"Workflow plan has an invalid shape: {e}") from e


def first_text_block(response: Any) -> str:
    """Return the text of the first ``text`` content block, or an empty string."""
    for block in getattr(response, "content", None) or []:
        if getattr(block, "type", None) == "text":
            return block.text
    return ""


class IntentAnalyzer:
    """Turns a free-text request into a :class:`PlanAnalysis` via a completion call.

    The completion client is injected so callers own its lifecycle (and
    its timeout). Nothing is retried here.
    """

    def __init__(
        self,
        client: anthropic.AsyncAnthropic,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    async def complete(self, request: str) -> str:
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": build_analysis_prompt(request)}],
            )
        except anthropic.APIError as e:
            raise UpstreamCallError(f"Completion request failed: {e}", upstream=e) from e
        return first_text_block(response)

    async def analyze(self, request: str) -> PlanAnalysis:
        if not request or not request.strip():
            raise ValueError("Workflow request must not be empty")

        logger.info("Analyzing workflow request (%d chars) with %s", len(request), self.model)
        text = await self.complete(request)
        analysis = parse_analysis(text)
        logger.debug(
            "Parsed plan %r: %d trigger(s), %d step(s), complexity=%s",
            analysis.plan.name,
            len(analysis.plan.triggers),
            len(analysis.plan.steps),
            analysis.complexity,
        )
        return analysis
