import asyncio
import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from app.core.errors import ProviderError, ProviderUnsupported
from app.services.providers import (
    GeminiProvider,
    HuggingFaceProvider,
    OpenAIProvider,
    clean_generated_python,
    parse_json_response,
    strip_code_fences,
    user_prompt,
)


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def openai_provider(content=None, error=None):
    completions = FakeCompletions(content, error)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenAIProvider("sk-live", client=client), completions


class TestResponseParsing:
    def test_strip_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strip_plain_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_parse_rejects_non_objects(self):
        with pytest.raises(ValueError):
            parse_json_response("[1, 2]")
        with pytest.raises(ValueError):
            parse_json_response("not json")

    def test_user_prompt_with_target(self):
        assert user_prompt("x", "Java", "Python") == "Language: Java\nTarget Language: Python\nCode:\nx"


class TestOpenAIProvider:
    def test_unavailable_without_key(self):
        assert not OpenAIProvider(None).available

    def test_analyze_parses_fenced_json(self):
        provider, completions = openai_provider('```json\n{"language": "Python", "overview": "ok"}\n```')
        result = asyncio.run(provider.analyze("print(1)", "Python"))
        assert result == {"language": "Python", "overview": "ok"}
        assert completions.kwargs["model"] == "gpt-4o-mini"
        assert completions.kwargs["temperature"] == 0.3
        assert completions.kwargs["max_tokens"] == 2000
        assert completions.kwargs["messages"][1]["content"] == "Language: Python\nCode:\nprint(1)"

    def test_analyze_unparseable_keeps_raw_text(self):
        provider, _ = openai_provider("Looks fine to me")
        result = asyncio.run(provider.analyze("x", "Python"))
        assert result["error"] == "Failed to parse AI response"
        assert result["rawResponse"] == "Looks fine to me"
        assert result["lineByLineAnalysis"] == []

    def test_debug_unparseable_becomes_parsing_issue(self):
        provider, _ = openai_provider("There is a bug on line 2")
        result = asyncio.run(provider.debug("x = 1", "Python"))
        assert result["issues"][0]["type"] == "parsing"
        assert result["fixedCode"] == "x = 1"
        assert result["rawResponse"] == "There is a bug on line 2"

    def test_translate_unparseable_raises(self):
        provider, completions = openai_provider("def f(): pass")
        with pytest.raises(ProviderError):
            asyncio.run(provider.translate("function f() {}", "JavaScript"))
        assert "Target Language: Python" in completions.kwargs["messages"][1]["content"]

    def test_sdk_error_becomes_provider_error(self):
        error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
        provider, _ = openai_provider(error=error)
        with pytest.raises(ProviderError):
            asyncio.run(provider.analyze("x", "Python"))


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content(self, model, contents):
        self.calls.append((model, contents))
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


class TestGeminiProvider:
    def test_debug_parses_json(self):
        models = FakeModels(text='{"language": "Go", "issues": []}')
        provider = GeminiProvider("g-key", client=SimpleNamespace(aio=SimpleNamespace(models=models)))
        result = asyncio.run(provider.debug("x", "Go"))
        assert result["language"] == "Go"
        model, contents = models.calls[0]
        assert model == "gemini-1.5-flash"
        assert contents.endswith("Language: Go\nCode:\nx")

    def test_unparseable_response_raises(self):
        models = FakeModels(text="no json here")
        provider = GeminiProvider("g-key", client=SimpleNamespace(aio=SimpleNamespace(models=models)))
        with pytest.raises(ProviderError):
            asyncio.run(provider.debug("x", "Go"))

    def test_sdk_failure_raises_provider_error(self):
        models = FakeModels(error=RuntimeError("quota exceeded"))
        provider = GeminiProvider("g-key", client=SimpleNamespace(aio=SimpleNamespace(models=models)))
        with pytest.raises(ProviderError):
            asyncio.run(provider.debug("x", "Go"))

    def test_analyze_unsupported(self):
        with pytest.raises(ProviderUnsupported):
            asyncio.run(GeminiProvider("g-key").analyze("x", "Go"))


def hf_provider(handler):
    return HuggingFaceProvider("hf-key", transport=httpx.MockTransport(handler))


class TestHuggingFaceProvider:
    def test_translate_strips_echoed_prompt(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers["authorization"]
            generated = seen["body"]["inputs"] + "\ndef add(a, b):\n    return a + b"
            return httpx.Response(200, json=[{"generated_text": generated}])

        result = asyncio.run(hf_provider(handler).translate("function add(a, b) { return a + b; }", "JavaScript"))
        assert result["translatedCode"] == "def add(a, b):\n    return a + b"
        assert result["language"] == "Python"
        assert seen["auth"] == "Bearer hf-key"
        assert seen["body"]["parameters"]["max_new_tokens"] == 512
        assert seen["body"]["parameters"]["repetition_penalty"] == 1.1

    def test_short_output_is_enhanced(self):
        def handler(request):
            return httpx.Response(200, json=[{"generated_text": "## Python Translation:\nprint(1)"}])

        result = asyncio.run(hf_provider(handler).translate("console.log(1);", "JavaScript"))
        assert result["translatedCode"].startswith("# Translated from JavaScript to Python")
        assert "# Additional translation:" in result["translatedCode"]

    def test_http_error_raises_provider_error(self):
        def handler(request):
            return httpx.Response(503, json={"error": "Model is loading"})

        with pytest.raises(ProviderError):
            asyncio.run(hf_provider(handler).translate("x", "JavaScript"))

    def test_clean_removes_prompt_artifacts(self):
        text = "# Task: Translate\n# Source Language: Java\nx = 1\n\n\n\ny = 2"
        assert clean_generated_python(text) == "x = 1\n\ny = 2"
