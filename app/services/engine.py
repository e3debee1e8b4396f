"""Pick a provider per operation and fall back to the heuristic tier."""
import logging

from pydantic import BaseModel, ValidationError

from app.core.config import Settings
from app.core.errors import ProviderError
from app.schemas.code import AnalysisResultSchema, DebugResultSchema, TranslationResultSchema
from app.services.heuristics import HeuristicProvider
from app.services.providers import Provider, build_providers

logger = logging.getLogger(__name__)

# Live providers tried in order before the heuristic tier
OPERATION_CHAINS = {
    "analyze": ["openai"],
    "debug": ["gemini", "openai"],
    "translate": ["huggingface", "openai"],
}

RESULT_SCHEMAS: dict[str, type[BaseModel]] = {
    "analyze": AnalysisResultSchema,
    "debug": DebugResultSchema,
    "translate": TranslationResultSchema,
}


class CodeEngine:
    def __init__(self, providers: dict[str, Provider], heuristic: Provider | None = None):
        self.providers = providers
        self.heuristic = heuristic or HeuristicProvider()

    @classmethod
    def from_settings(cls, settings: Settings) -> "CodeEngine":
        return cls(build_providers(settings))

    def chain(self, operation: str) -> list[Provider]:
        return [self.providers[name] for name in OPERATION_CHAINS[operation] if name in self.providers]

    async def _run(self, operation: str, code: str, language: str) -> dict:
        schema = RESULT_SCHEMAS[operation]
        for provider in self.chain(operation):
            if not provider.available:
                continue
            try:
                raw = await getattr(provider, operation)(code, language)
                result = schema.model_validate(raw)
            except (ProviderError, ValidationError) as e:
                logger.warning("%s %s failed, trying next provider: %s", provider.name, operation, e)
                continue
            except Exception:
                logger.exception("%s %s raised unexpectedly, trying next provider", provider.name, operation)
                continue
            result.result_kind = "live"
            result.provider = provider.name
            logger.info("%s served by %s", operation, provider.name)
            return result.model_dump(by_alias=True)

        logger.info("%s served by heuristic fallback", operation)
        raw = await getattr(self.heuristic, operation)(code, language)
        result = schema.model_validate(raw)
        result.result_kind = "fallback"
        result.provider = self.heuristic.name
        return result.model_dump(by_alias=True)

    async def analyze(self, code: str, language: str) -> dict:
        return await self._run("analyze", code, language)

    async def debug(self, code: str, language: str) -> dict:
        return await self._run("debug", code, language)

    async def translate(self, code: str, language: str, target_language: str) -> dict:
        """Destination is always Python; the requested target is echoed back."""
        result = await self._run("translate", code, language)
        result["requestedTargetLanguage"] = target_language
        if target_language.strip().lower() != "python":
            note = f"Only Python output is supported; {target_language} was requested."
            result["notes"] = f"{note} {result.get('notes', '')}".strip()
        return result
