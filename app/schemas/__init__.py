from app.schemas.auth import AuthUserSchema, LoginSchema, SignupSchema, UserOutSchema, UserSummarySchema
from app.schemas.code import (
    AnalysisResultSchema,
    CodeRequestSchema,
    DebugResultSchema,
    HistoryEntrySchema,
    TranslateRequestSchema,
    TranslationResultSchema,
)

__all__ = [
    "AnalysisResultSchema",
    "AuthUserSchema",
    "CodeRequestSchema",
    "DebugResultSchema",
    "HistoryEntrySchema",
    "LoginSchema",
    "SignupSchema",
    "TranslateRequestSchema",
    "TranslationResultSchema",
    "UserOutSchema",
    "UserSummarySchema",
]
