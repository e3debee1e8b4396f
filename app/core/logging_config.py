"""Process-wide logging setup."""
import logging

from app.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_provider_status(logger: logging.Logger, settings: Settings) -> None:
    """Log which provider credentials are configured, never the values."""
    logger.info(
        "Providers configured: openai=%s gemini=%s huggingface=%s",
        settings.openai_api_key is not None,
        settings.gemini_api_key is not None,
        settings.hf_api_key is not None,
    )
    if settings.jwt_secret is None:
        logger.warning("JWT_SECRET is not set; using the built-in development secret")
