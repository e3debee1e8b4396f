"""Application configuration from environment."""
from pydantic import field_validator
from pydantic_settings import BaseSettings

# Values shipped in sample .env files; treated as "no key configured"
PLACEHOLDER_KEYS = {
    "your_openai_api_key_here",
    "sk-test-demo-key-for-testing",
    "demo-key",
    "your_gemini_api_key_here",
    "your_token_here",
    "hf_your_actual_token_here",
}


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "CodeClarity"
    environment: str = "development"
    port: int = 3000
    log_level: str = "INFO"

    # CORS
    frontend_url: str = "http://localhost:3000"

    # Database
    database_url: str = "sqlite+aiosqlite:///./codeclarity.db"

    # JWT
    jwt_secret: str | None = None
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # bcrypt cost factor
    bcrypt_rounds: int = 12

    # AI providers
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-flash"
    hf_api_key: str | None = None
    hf_api_url: str = "https://api-inference.huggingface.co/models"
    hf_model: str = "Salesforce/codet5p-770m"
    hf_timeout_seconds: float = 30.0

    # Rate limiting on /api/ (per client IP)
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60

    # Code operations
    max_code_length: int = 10_000
    session_history_limit: int = 50

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @field_validator("openai_api_key", "gemini_api_key", "hf_api_key", "jwt_secret")
    @classmethod
    def _drop_placeholders(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value or value in PLACEHOLDER_KEYS:
            return None
        return value

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


def get_settings() -> Settings:
    return Settings()
