import json
from types import SimpleNamespace

import pytest

from models.errors import OracleError
from services.openai.criteria_extractor import CriteriaExtractor
from services.openai.image_analyzer import ImageAnalyzer
from services.openai.image_schema import ANALYZE_FUNCTION_NAME, CRITERIA_FUNCTION_NAME
from services.openai.response_parser import parse_function_call


def function_call_response(name, arguments):
    item = SimpleNamespace(type="function_call", name=name, arguments=json.dumps(arguments))
    usage = SimpleNamespace(input_tokens=120, output_tokens=40)
    return SimpleNamespace(output=[SimpleNamespace(type="reasoning"), item], usage=usage)


class FakeResponses:
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def fake_client(result):
    return SimpleNamespace(responses=FakeResponses(result))


def test_parse_function_call_requires_matching_tool():
    response = function_call_response("other_tool", {})
    with pytest.raises(RuntimeError):
        parse_function_call(response, tool_name=ANALYZE_FUNCTION_NAME)


async def test_analyzer_builds_metadata_from_tool_call():
    client = fake_client(
        function_call_response(
            ANALYZE_FUNCTION_NAME,
            {
                "medium": "Photography",
                "people": {"number": 1, "gender": "Female"},
                "actions": None,
                "clothes": "Casual",
                "environment": "Beach",
                "colors": ["Blue", "White"],
                "style": "Realistic",
                "mood": "Peaceful",
                "scene": "A woman walking on the beach.",
            },
        )
    )
    metadata = await ImageAnalyzer(client, model="test-model").analyze(b"\x89PNG", "image/png")

    assert metadata.environment == "Beach"
    assert metadata.people.number == 1
    assert metadata.actions is None
    call = client.responses.calls[0]
    assert call["model"] == "test-model"
    assert call["tool_choice"] == {"type": "function", "name": ANALYZE_FUNCTION_NAME}


async def test_analyzer_wraps_request_errors():
    client = fake_client(RuntimeError("timeout"))
    with pytest.raises(OracleError):
        await ImageAnalyzer(client).analyze(b"data", "image/jpeg")


async def test_analyzer_rejects_missing_tool_output():
    client = fake_client(SimpleNamespace(output=[]))
    with pytest.raises(OracleError):
        await ImageAnalyzer(client).analyze(b"data", "image/jpeg")


async def test_criteria_extractor_returns_arguments():
    criteria = {"mood": "Happy", "keywords": ["dog"]}
    client = fake_client(function_call_response(CRITERIA_FUNCTION_NAME, criteria))
    assert await CriteriaExtractor(client).extract("happy dog") == criteria


async def test_criteria_extractor_swallows_failures():
    assert await CriteriaExtractor(fake_client(RuntimeError("boom"))).extract("happy dog") == {}
