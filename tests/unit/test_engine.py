import asyncio

from app.core.errors import ProviderError
from app.services.engine import CodeEngine
from app.services.providers import Provider


class FakeProvider(Provider):
    def __init__(self, name, result=None, error=None, available=True):
        self.name = name
        self.result = result
        self.error = error
        self._available = available
        self.calls = 0

    @property
    def available(self):
        return self._available

    async def _respond(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.result

    async def analyze(self, code, language):
        return await self._respond()

    async def debug(self, code, language):
        return await self._respond()

    async def translate(self, code, language):
        return await self._respond()


LIVE_ANALYSIS = {
    "language": "Python",
    "overview": "Prints a greeting",
    "lineByLineAnalysis": [{"line": "print('hi')", "explanation": "prints hi"}],
    "output": "hi",
    "summary": "Greeting",
    "suggestions": [],
    "keyComponents": [],
}


class TestCodeEngine:
    def test_no_providers_configured_falls_back(self):
        engine = CodeEngine({"openai": FakeProvider("openai", available=False)})
        result = asyncio.run(engine.analyze("print('hi')", "Python"))
        assert result["resultKind"] == "fallback"
        assert result["provider"] == "heuristic"
        assert result["language"] == "Python"
        assert engine.providers["openai"].calls == 0

    def test_live_result_is_tagged(self):
        engine = CodeEngine({"openai": FakeProvider("openai", result=LIVE_ANALYSIS)})
        result = asyncio.run(engine.analyze("print('hi')", "Python"))
        assert result["resultKind"] == "live"
        assert result["provider"] == "openai"
        assert result["lineByLineAnalysis"][0]["explanation"] == "prints hi"
        assert result["keyComponents"] == []

    def test_provider_error_falls_back(self):
        engine = CodeEngine({"openai": FakeProvider("openai", error=ProviderError("rate limit"))})
        result = asyncio.run(engine.analyze("print('hi')", "Python"))
        assert result["resultKind"] == "fallback"

    def test_unexpected_error_falls_back(self):
        engine = CodeEngine({"openai": FakeProvider("openai", error=KeyError("choices"))})
        assert asyncio.run(engine.debug("x", "Go"))["resultKind"] == "fallback"

    def test_debug_tries_gemini_then_openai(self):
        debug_result = {"language": "Go", "issues": [{"type": "logic", "severity": "high"}], "fixedCode": "x"}
        gemini = FakeProvider("gemini", error=ProviderError("bad json"))
        openai = FakeProvider("openai", result=debug_result)
        engine = CodeEngine({"gemini": gemini, "openai": openai})
        result = asyncio.run(engine.debug("x", "Go"))
        assert result["provider"] == "openai"
        assert result["issues"][0]["type"] == "logic"
        assert result["issues"][0]["line"] == "N/A"
        assert gemini.calls == 1

    def test_unusable_translation_falls_back(self):
        engine = CodeEngine({"huggingface": FakeProvider("huggingface", result={"notes": "no code"})})
        result = asyncio.run(engine.translate("let x = 1;", "JavaScript", "Python"))
        assert result["resultKind"] == "fallback"
        assert "x = 1" in result["translatedCode"]

    def test_translate_echoes_requested_target(self):
        engine = CodeEngine({})
        result = asyncio.run(engine.translate("let x = 1;", "JavaScript", "Rust"))
        assert result["language"] == "Python"
        assert result["requestedTargetLanguage"] == "Rust"
        assert result["notes"].startswith("Only Python output is supported; Rust was requested.")
