import json

import httpx
import pytest

from carniceria.services.summarizer_service import (
    ChatCompletionsSummarizer,
    SummarizerUnavailable,
    build_summarizer,
)


def _summarizer(handler, api_key="sk-test"):
    return ChatCompletionsSummarizer(
        api_key=api_key,
        base_url="https://llm.example/v1/",
        model="gpt-5.1",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


def _completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def test_request_shape_and_content():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return _completion('{"mostSoldProduct": "Costillar"}')

    result = _summarizer(handler).summarize("Analiza el día")

    assert result == '{"mostSoldProduct": "Costillar"}'
    assert seen["url"] == "https://llm.example/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {
        "model": "gpt-5.1",
        "messages": [{"role": "user", "content": "Analiza el día"}],
        "response_format": {"type": "json_object"},
        "max_completion_tokens": 1000,
    }


def test_timeout_is_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(SummarizerUnavailable):
        _summarizer(handler).summarize("x")


def test_connection_error_is_unavailable():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(SummarizerUnavailable):
        _summarizer(handler).summarize("x")


def test_error_status_is_unavailable():
    with pytest.raises(SummarizerUnavailable, match="503"):
        _summarizer(lambda request: httpx.Response(503, text="busy")).summarize("x")


def test_missing_api_key_is_unavailable():
    def handler(request):
        raise AssertionError("no request should be sent")

    with pytest.raises(SummarizerUnavailable):
        _summarizer(handler, api_key=None).summarize("x")


@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>oops</html>"),
    httpx.Response(200, json={"choices": []}),
    httpx.Response(200, json={"choices": [{"message": {"content": None}}]}),
    httpx.Response(200, json=["unexpected"]),
])
def test_unexpected_envelope_returns_none(response):
    assert _summarizer(lambda request: response).summarize("x") is None


def test_build_from_config():
    summarizer = build_summarizer({
        "AI_INTEGRATIONS_OPENAI_API_KEY": "sk-live",
        "AI_INTEGRATIONS_OPENAI_BASE_URL": "https://proxy.local/v1",
        "SUMMARIZER_MODEL": "gpt-5.1",
        "SUMMARIZER_TIMEOUT_SECONDS": 12.0,
    })

    assert summarizer.api_key == "sk-live"
    assert summarizer.base_url == "https://proxy.local/v1"
    assert summarizer.timeout == 12.0
