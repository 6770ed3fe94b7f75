import json
import sys
import unittest
from pathlib import Path
from types import SimpleNamespace

import anthropic
import httpx

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from chatflow.workflow.analyzer import (
    IntentAnalyzer,
    build_analysis_prompt,
    extract_json_object,
    parse_analysis,
)
from chatflow.workflow.errors import (
    PlanExtractionError,
    PlanParseError,
    PlanShapeError,
    UpstreamCallError,
)

ANALYSIS = {
    "intent": "Summarize new GitHub issues into Slack",
    "requiredServices": ["github", "slack"],
    "complexity": "simple",
    "plan": {
        "name": "Issue digest",
        "description": "Daily digest of new issues",
        "triggers": ["schedule"],
        "steps": [
            {"id": "step_1", "name": "Fetch issues", "type": "http", "config": {"url": "https://x"}},
            {"id": "step_2", "name": "Post", "type": "slack", "config": {"channel": "#ops"}},
        ],
        "expectedOutputs": ["slack message"],
    },
}


def _response(*blocks):
    return SimpleNamespace(content=list(blocks))


def _text(text: str):
    return SimpleNamespace(type="text", text=text)


class FakeMessages:
    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeClient:
    def __init__(self, response=None, error: Exception | None = None):
        self.messages = FakeMessages(response, error)


class ParseAnalysisTests(unittest.TestCase):
    def test_extracts_json_surrounded_by_prose(self):
        text = f"Sure, here you go:\n{json.dumps(ANALYSIS)}\nLet me know!"
        analysis = parse_analysis(text)

        self.assertEqual(analysis.intent, ANALYSIS["intent"])
        self.assertEqual(analysis.required_services, ["github", "slack"])
        self.assertEqual(analysis.complexity, "simple")
        self.assertEqual(analysis.plan.name, "Issue digest")
        self.assertEqual([s.id for s in analysis.plan.steps], ["step_1", "step_2"])
        self.assertEqual(analysis.plan.expected_outputs, ["slack message"])

    def test_extract_uses_first_open_and_last_close_brace(self):
        self.assertEqual(extract_json_object('a {"x": {"y": 1}} b } c'), '{"x": {"y": 1}} b }')

    def test_no_brace_raises_extraction_error(self):
        with self.assertRaises(PlanExtractionError):
            parse_analysis("I could not come up with a plan.")

    def test_close_brace_before_open_raises_extraction_error(self):
        with self.assertRaises(PlanExtractionError):
            extract_json_object("} nothing here {")

    def test_invalid_json_raises_parse_error(self):
        with self.assertRaises(PlanParseError):
            parse_analysis('Here: {"intent": "x", "complexity": } done')

    def test_missing_fields_raise_shape_error(self):
        partial = {k: v for k, v in ANALYSIS.items() if k != "requiredServices"}
        with self.assertRaises(PlanShapeError) as ctx:
            parse_analysis(json.dumps(partial))
        self.assertIn("requiredServices", str(ctx.exception))

    def test_out_of_range_complexity_raises_shape_error(self):
        with self.assertRaises(PlanShapeError):
            parse_analysis(json.dumps({**ANALYSIS, "complexity": "medium"}))

    def test_malformed_plan_raises_shape_error(self):
        with self.assertRaises(PlanShapeError):
            parse_analysis(json.dumps({**ANALYSIS, "plan": {"description": "no name"}}))

    def test_unknown_step_type_is_accepted(self):
        data = json.loads(json.dumps(ANALYSIS))
        data["plan"]["steps"][0]["type"] = "quantum"
        analysis = parse_analysis(json.dumps(data))
        self.assertEqual(analysis.plan.steps[0].type, "quantum")

    def test_prompt_embeds_request(self):
        prompt = build_analysis_prompt("send me a daily email")
        self.assertIn('"send me a daily email"', prompt)
        self.assertIn('"requiredServices"', prompt)
        self.assertIn("flat scalar", prompt)


class IntentAnalyzerTests(unittest.IsolatedAsyncioTestCase):
    async def test_analyze_calls_completion_with_prompt(self):
        client = FakeClient(_response(_text(json.dumps(ANALYSIS))))
        analyzer = IntentAnalyzer(client, model="test-model", max_tokens=123)

        analysis = await analyzer.analyze("digest my issues")

        self.assertEqual(analysis.plan.name, "Issue digest")
        call = client.messages.calls[0]
        self.assertEqual(call["model"], "test-model")
        self.assertEqual(call["max_tokens"], 123)
        self.assertEqual(call["messages"][0]["role"], "user")
        self.assertIn("digest my issues", call["messages"][0]["content"])

    async def test_reads_first_text_block_only(self):
        client = FakeClient(
            _response(
                SimpleNamespace(type="thinking", thinking="hmm"),
                _text(json.dumps(ANALYSIS)),
                _text("{not json"),
            )
        )
        analysis = await IntentAnalyzer(client).analyze("anything")
        self.assertEqual(analysis.complexity, "simple")

    async def test_response_without_text_raises_extraction_error(self):
        client = FakeClient(_response())
        with self.assertRaises(PlanExtractionError):
            await IntentAnalyzer(client).analyze("anything")

    async def test_upstream_failure_is_wrapped(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        upstream = anthropic.APIConnectionError(request=request)
        client = FakeClient(error=upstream)

        with self.assertRaises(UpstreamCallError) as ctx:
            await IntentAnalyzer(client).analyze("anything")
        self.assertIs(ctx.exception.upstream, upstream)
        self.assertEqual(len(client.messages.calls), 1)

    async def test_empty_request_is_rejected_before_calling(self):
        client = FakeClient(_response(_text(json.dumps(ANALYSIS))))
        with self.assertRaises(ValueError):
            await IntentAnalyzer(client).analyze("   ")
        self.assertEqual(client.messages.calls, [])


if __name__ == "__main__":
    unittest.main()
