from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import logging
import os
from pathlib import Path

_logger = logging.getLogger(__name__)

# Load .env explicitly before creating Settings.
# Look for .env in api directory (parent of lingodeck directory)
api_dir = Path(__file__).parent.parent.parent
env_path = api_dir / ".env"

if env_path.exists():
    load_dotenv(env_path, override=True)
    _logger.info(f"Loaded .env file from: {env_path}")
else:
    # Fallback to current directory
    current_env = Path(".env")
    if current_env.exists():
        load_dotenv(current_env, override=True)
        _logger.info(f"Loaded .env file from: {current_env.absolute()}")
    else:
        _logger.debug(f".env file not found at {env_path} or {current_env.absolute()}")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database - single-user app defaults to a local SQLite file
    database_url: str = "sqlite:///./lingodeck.db"

    # API
    api_v1_prefix: str = "/api/v1"

    # CORS
    cors_origins: list[str] = ["*"]

    # Google Generative AI (Gemini) API, used for semantic answer checking
    google_gemini_api_key: str = ""
    gemini_model_name: str = "gemini-2.5-flash"
    answer_evaluation_max_retries: int = 3
    answer_evaluation_base_delay_ms: int = 1000

    # Card stack undo window
    undo_window_ms: int = 5000

    # Exercise progress persistence
    exercise_progress_ttl_hours: int = 24
    exercise_progress_key_prefix: str = "exercise-progress-"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def __init__(self, **kwargs):
        # Read DATABASE_URL explicitly (hosting platforms provide it uppercase)
        if not kwargs.get("database_url") and os.getenv("DATABASE_URL"):
            kwargs["database_url"] = os.getenv("DATABASE_URL")
        if not kwargs.get("google_gemini_api_key"):
            kwargs["google_gemini_api_key"] = os.getenv("GOOGLE_GEMINI_API_KEY", "")
        super().__init__(**kwargs)


# Create settings instance
settings = Settings()
