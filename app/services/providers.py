"""Live AI provider adapters (OpenAI, Gemini, Hugging Face)."""
import json
import logging
import re

import httpx
import openai
from fastapi.concurrency import run_in_threadpool
from google import genai

from app.core.config import Settings
from app.core.errors import ProviderError, ProviderUnsupported
from app.services.transliterate import extract_python_dependencies, translate_to_python

logger = logging.getLogger(__name__)

PROMPTS = {
    "analyze": """You are a helpful programming tutor and expert code analyst. Analyze the provided code in clear, beginner-friendly language. Explain what the code does and provide a line-by-line breakdown.

IMPORTANT INSTRUCTIONS:
- Analyze the EXACT code provided - explain what it actually does
- Automatically detect the programming language from the code
- Use friendly, conversational language like you're teaching a friend
- Focus on WHY things work, not just WHAT they do
- Be concise but informative

Output must be valid JSON format:
{
  "language": "<detected programming language>",
  "overview": "<friendly explanation of what this specific code does and its main purpose>",
  "lineByLineAnalysis": [
    { "line": "<actual code line>", "explanation": "<explanation of what this specific line accomplishes>" }
  ],
  "output": "<what happens when this code runs>",
  "summary": "<summary explaining the specific functionality this code provides>",
  "suggestions": ["<specific improvements for this exact code>"]
}""",
    "translate": """You are a code translator. Convert code into the selected target language, preserving functionality.

Rules:
- If using browser APIs (DOM), convert to appropriate GUI framework or backend equivalent
- Only return runnable code
- Maintain the same logic and functionality
- Add necessary imports/dependencies

Output JSON format:
{
  "language": "<target language>",
  "translatedCode": "<complete runnable code>",
  "dependencies": ["<dependency 1>", "<dependency 2>"],
  "notes": "<any important notes about the translation>"
}""",
    "debug": """You are an expert code debugger and quality assurance specialist. Analyze the provided code to find errors, potential bugs, and suggest fixes.

CRITICAL: You MUST respond with ONLY valid JSON format. Do not include any text before or after the JSON. Do not wrap in markdown code blocks.

IMPORTANT INSTRUCTIONS:
- Carefully examine the code for syntax errors, logic errors, and potential runtime issues
- Identify security vulnerabilities and performance issues
- Provide specific, actionable suggestions for fixes
- When possible, provide the corrected version of the code
- Categorize issues by severity (high, medium, low)
- Be thorough but concise in explanations

Respond with ONLY this JSON structure (no additional text):
{
  "language": "<detected programming language>",
  "issues": [
    {
      "type": "<error type (syntax, logic, runtime, security, performance)>",
      "severity": "<high|medium|low>",
      "line": "<line number if applicable>",
      "description": "<clear description of the issue>",
      "suggestion": "<specific fix suggestion>"
    }
  ],
  "suggestions": ["<general improvement suggestions>"],
  "fixedCode": "<corrected version of the code if fixes are possible>",
  "summary": "<overall assessment of code quality and main issues found>"
}""",
}

_FENCE_START_RE = re.compile(r"^```(?:json)?\s*")
_FENCE_END_RE = re.compile(r"\s*```$")

# Lines of the Hugging Face prompt that the model tends to echo back
_HF_ARTIFACT_RES = [
    re.compile(r"^# Task:.*$", re.MULTILINE),
    re.compile(r"^# Source Language:.*$", re.MULTILINE),
    re.compile(r"^# Target Language:.*$", re.MULTILINE),
    re.compile(r"^# Instructions:.*$", re.MULTILINE),
    re.compile(r"^## .*Code:$", re.MULTILINE),
]
_HF_MARKERS = ("## Python Translation:", "Python Translation:", "Python:")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and its closing fence."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_END_RE.sub("", _FENCE_START_RE.sub("", cleaned, count=1))
    return cleaned


def parse_json_response(text: str) -> dict:
    """Parse a model reply as a JSON object; raises ValueError otherwise."""
    parsed = json.loads(strip_code_fences(text))
    if not isinstance(parsed, dict):
        raise ValueError("Expected a JSON object")
    return parsed


def user_prompt(code: str, language: str, target_language: str | None = None) -> str:
    if target_language:
        return f"Language: {language}\nTarget Language: {target_language}\nCode:\n{code}"
    return f"Language: {language}\nCode:\n{code}"


class Provider:
    """One backend able to serve some of analyze / debug / translate."""

    name = "provider"

    @property
    def available(self) -> bool:
        return False

    async def analyze(self, code: str, language: str) -> dict:
        raise ProviderUnsupported(f"{self.name} does not support analyze")

    async def debug(self, code: str, language: str) -> dict:
        raise ProviderUnsupported(f"{self.name} does not support debug")

    async def translate(self, code: str, language: str) -> dict:
        raise ProviderUnsupported(f"{self.name} does not support translate")


class OpenAIProvider(Provider):
    name = "openai"

    def __init__(self, api_key: str | None, model: str = "gpt-4o-mini", client=None):
        self.api_key = api_key
        self.model = model
        self._client = client

    @property
    def available(self) -> bool:
        return self.api_key is not None

    @property
    def client(self):
        if self._client is None:
            self._client = openai.AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def complete(self, system_prompt: str, prompt: str) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.3,
                max_tokens=2000,
            )
        except openai.OpenAIError as e:
            raise ProviderError(f"OpenAI request failed: {e}") from e
        content = completion.choices[0].message.content
        if not content:
            raise ProviderError("OpenAI returned an empty response")
        logger.debug("OpenAI response length: %d", len(content))
        return content

    async def analyze(self, code: str, language: str) -> dict:
        response = await self.complete(PROMPTS["analyze"], user_prompt(code, language))
        try:
            return parse_json_response(response)
        except ValueError:
            logger.warning("OpenAI analyze response was not valid JSON")
            return {
                "error": "Failed to parse AI response",
                "rawResponse": response,
                "language": language,
                "overview": "The AI response could not be parsed as JSON; see rawResponse.",
                "lineByLineAnalysis": [],
                "output": "",
                "summary": "AI analysis completed but response format needs adjustment",
                "suggestions": [],
            }

    async def debug(self, code: str, language: str) -> dict:
        response = await self.complete(PROMPTS["debug"], user_prompt(code, language))
        try:
            return parse_json_response(response)
        except ValueError:
            logger.warning("OpenAI debug response was not valid JSON")
            return {
                "language": language,
                "issues": [{
                    "type": "parsing",
                    "severity": "low",
                    "line": "N/A",
                    "description": "AI response could not be parsed as JSON",
                    "suggestion": "The AI provided analysis in text format instead of structured JSON",
                }],
                "suggestions": ["Review the raw AI response for debugging insights"],
                "fixedCode": code,
                "summary": "AI analysis completed but response format needs adjustment",
                "rawResponse": response,
            }

    async def translate(self, code: str, language: str) -> dict:
        response = await self.complete(PROMPTS["translate"], user_prompt(code, language, "Python"))
        try:
            return parse_json_response(response)
        except ValueError as e:
            raise ProviderError("OpenAI translate response was not valid JSON") from e


class GeminiProvider(Provider):
    name = "gemini"

    def __init__(self, api_key: str | None, model: str = "gemini-1.5-flash", client=None):
        self.api_key = api_key
        self.model = model
        self._client = client

    @property
    def available(self) -> bool:
        return self.api_key is not None

    @property
    def client(self):
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def debug(self, code: str, language: str) -> dict:
        prompt = f"{PROMPTS['debug']}\n\n{user_prompt(code, language)}"
        try:
            response = await self.client.aio.models.generate_content(model=self.model, contents=prompt)
        except Exception as e:
            # the SDK raises its own error types as well as httpx ones
            raise ProviderError(f"Gemini request failed: {e}") from e
        text = response.text or ""
        try:
            return parse_json_response(text)
        except ValueError as e:
            raise ProviderError("Gemini debug response was not valid JSON") from e


def clean_generated_python(generated: str) -> str:
    """Drop the echoed prompt and prompt artifacts from a Hugging Face completion."""
    python_code = generated.strip()
    for marker in _HF_MARKERS:
        if marker in python_code:
            python_code = python_code.split(marker, 1)[1].strip()
            break
    for pattern in _HF_ARTIFACT_RES:
        python_code = pattern.sub("", python_code)
    return re.sub(r"\n\s*\n\s*\n", "\n\n", python_code).strip()


def enhance_translation(code: str, language: str, short_response: str) -> str:
    """Combine a too-short model answer with the pattern-based translation."""
    transliterated = translate_to_python(code, language)
    if len(short_response) > 5:
        return (
            f"# Translated from {language} to Python\n"
            "# Enhanced with pattern matching\n\n"
            f"{short_response}\n\n"
            f"# Additional translation:\n{transliterated}"
        )
    return transliterated


def add_main_scaffold(python_code: str, language: str) -> str:
    return (
        f"# Translated from {language} to Python\n"
        f"{python_code}\n\n"
        "def main():\n"
        "    # Main execution\n"
        "    pass\n\n"
        'if __name__ == "__main__":\n'
        "    main()"
    )


class HuggingFaceProvider(Provider):
    name = "huggingface"

    def __init__(
        self,
        api_key: str | None,
        api_url: str = "https://api-inference.huggingface.co/models",
        model: str = "Salesforce/codet5p-770m",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.url = f"{api_url.rstrip('/')}/{model}"
        self.model = model
        self.timeout = timeout
        self.transport = transport

    @property
    def available(self) -> bool:
        return self.api_key is not None

    @staticmethod
    def build_prompt(code: str, language: str) -> str:
        return (
            f"# Task: Translate {language} code to Python\n"
            f"# Source Language: {language}\n"
            "# Target Language: Python\n"
            "# Instructions: Convert the following code to equivalent Python code, "
            "maintaining the same functionality and logic.\n\n"
            f"## {language} Code:\n{code}\n\n"
            "## Python Translation:"
        )

    async def generate(self, prompt: str):
        payload = {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": 512,
                "temperature": 0.3,
                "do_sample": True,
                "top_p": 0.9,
                "repetition_penalty": 1.1,
            },
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json=payload, headers=headers)
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(f"Hugging Face request failed: {e}") from e

    @staticmethod
    def generated_text(body) -> str:
        if isinstance(body, list) and body and isinstance(body[0], dict):
            return body[0].get("generated_text") or ""
        if isinstance(body, dict):
            return body.get("generated_text") or ""
        if isinstance(body, str):
            return body
        return ""

    async def translate(self, code: str, language: str) -> dict:
        body = await self.generate(self.build_prompt(code, language))
        python_code = clean_generated_python(self.generated_text(body))

        if len(python_code) < 20 or "\n" not in python_code:
            logger.info("Hugging Face output too short (%d chars), enhancing", len(python_code))
            python_code = await run_in_threadpool(enhance_translation, code, language, python_code)

        if len(code) > 50 and not any(tok in python_code for tok in ("def ", "class ", "import ", "from ")):
            python_code = add_main_scaffold(python_code, language)

        return {
            "language": "Python",
            "translatedCode": python_code,
            "dependencies": extract_python_dependencies(python_code),
            "notes": f"Translated {language} code to Python with the Hugging Face {self.model} model.",
        }


def build_providers(settings: Settings) -> dict[str, Provider]:
    return {
        "openai": OpenAIProvider(settings.openai_api_key, settings.openai_model),
        "gemini": GeminiProvider(settings.gemini_api_key, settings.gemini_model),
        "huggingface": HuggingFaceProvider(
            settings.hf_api_key,
            api_url=settings.hf_api_url,
            model=settings.hf_model,
            timeout=settings.hf_timeout_seconds,
        ),
    }
