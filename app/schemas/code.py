"""Pydantic schemas for code operation requests and their results."""
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.auth import as_utc

ResultKind = Literal["live", "fallback"]


class CodeRequestSchema(BaseModel):
    code: str | None = None
    language: str | None = None


class TranslateRequestSchema(CodeRequestSchema):
    target_language: str | None = Field(default=None, alias="targetLanguage")

    class Config:
        populate_by_name = True


class _ResultBase(BaseModel):
    """Provider output is validated into these; unknown keys are kept as-is."""

    result_kind: ResultKind = "live"
    provider: str = "heuristic"

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "allow"


class LineExplanationSchema(BaseModel):
    line: str | int = ""
    explanation: str = ""


class AnalysisResultSchema(_ResultBase):
    language: str = ""
    overview: str = ""
    line_by_line_analysis: list[LineExplanationSchema] = []
    output: str = ""
    summary: str = ""
    suggestions: list[str] = []


class IssueSchema(BaseModel):
    type: str = "general"
    severity: str = "low"
    line: str | int = "N/A"
    description: str = ""
    suggestion: str = ""


class DebugResultSchema(_ResultBase):
    language: str = ""
    issues: list[IssueSchema] = []
    suggestions: list[str] = []
    fixed_code: str = ""
    summary: str = ""


class TranslationResultSchema(_ResultBase):
    language: str = "Python"
    translated_code: str
    dependencies: list[str] = []
    notes: str = ""
    requested_target_language: str | None = None


class HistoryEntrySchema(BaseModel):
    id: int
    type: str
    code: str
    language: str
    target_language: str | None = None
    result: dict[str, Any]
    timestamp: datetime | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)
