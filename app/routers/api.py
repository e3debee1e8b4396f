"""API routes: analyze, debug, translate, history, languages, health."""
import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.config import get_settings
from app.routers.auth import get_current_user, get_current_user_optional, get_user_store
from app.schemas.auth import AuthUserSchema
from app.schemas.code import CodeRequestSchema, TranslateRequestSchema
from app.services.detection import SUPPORTED_LANGUAGES
from app.services.engine import CodeEngine
from app.services.users import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])
settings = get_settings()


def get_engine() -> CodeEngine:
    return CodeEngine.from_settings(settings)


def _check_size(code: str) -> None:
    if len(code) > settings.max_code_length:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            f"Code is too long. Maximum {settings.max_code_length:,} characters allowed.",
        )


async def _record(
    store: UserStore,
    user: AuthUserSchema | None,
    kind: str,
    payload: CodeRequestSchema,
    result: dict,
    target_language: str | None = None,
) -> None:
    """Append to the caller's history; anonymous calls leave no trace."""
    if user is None:
        return
    await store.add_session(
        user.id,
        {
            "type": kind,
            "code": payload.code,
            "language": payload.language,
            "targetLanguage": target_language,
            "result": result,
        },
    )


@router.post("/analyze")
async def analyze(
    payload: CodeRequestSchema,
    engine: Annotated[CodeEngine, Depends(get_engine)],
    store: Annotated[UserStore, Depends(get_user_store)],
    current_user: Annotated[AuthUserSchema | None, Depends(get_current_user_optional)],
):
    """Explain code line by line and predict its output."""
    if not payload.code or not payload.language:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Code and language are required")
    _check_size(payload.code)

    result = await engine.analyze(payload.code, payload.language)
    await _record(store, current_user, "analyze", payload, result)
    return {"success": True, "data": result}


@router.post("/debug")
async def debug(
    payload: CodeRequestSchema,
    engine: Annotated[CodeEngine, Depends(get_engine)],
    store: Annotated[UserStore, Depends(get_user_store)],
    current_user: Annotated[AuthUserSchema | None, Depends(get_current_user_optional)],
):
    """Find issues in code and suggest a fixed version."""
    if not payload.code or not payload.language:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Code and language are required")
    _check_size(payload.code)

    result = await engine.debug(payload.code, payload.language)
    await _record(store, current_user, "debug", payload, result)
    return {"success": True, "data": result}


@router.post("/translate")
async def translate(
    payload: TranslateRequestSchema,
    engine: Annotated[CodeEngine, Depends(get_engine)],
    store: Annotated[UserStore, Depends(get_user_store)],
    current_user: Annotated[AuthUserSchema | None, Depends(get_current_user_optional)],
):
    """Translate code to Python; the requested target is echoed back."""
    if not payload.code or not payload.language or not payload.target_language:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "Code, source language, and target language are required",
        )
    _check_size(payload.code)

    result = await engine.translate(payload.code, payload.language, payload.target_language)
    await _record(store, current_user, "translate", payload, result, payload.target_language)
    return {"success": True, "data": result}


@router.get("/history")
async def history(
    current_user: Annotated[AuthUserSchema, Depends(get_current_user)],
    store: Annotated[UserStore, Depends(get_user_store)],
):
    """The caller's code sessions, oldest first."""
    return {"success": True, "data": await store.list_sessions(current_user.id)}


@router.get("/languages")
async def languages():
    """Languages the analyzer knows about."""
    return {"success": True, "data": SUPPORTED_LANGUAGES}


@router.get("/health")
async def health():
    """Liveness and which providers are configured."""
    return {
        "success": True,
        "message": "API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "openaiConfigured": settings.openai_api_key is not None,
        "geminiConfigured": settings.gemini_api_key is not None,
        "huggingFaceConfigured": settings.hf_api_key is not None,
    }
