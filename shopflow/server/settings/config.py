from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv()


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Settings(BaseModel):
    app_name: str = "Shopflow - work orders & quotes"
    environment: str = os.getenv("ENVIRONMENT", "dev")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./shopflow.db")
    debug: bool = os.getenv("DEBUG", "0") == "1"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # header X-SHOPFLOW-API-KEY must carry this value
    api_key: str = os.getenv("SHOPFLOW_API_KEY", "shopflow-dev-key")

    # AI (OpenAI-compatible chat completions endpoint)
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "").strip()
    ai_api_url: str = os.getenv("AI_API_URL", "https://api.openai.com/v1/chat/completions")
    ai_model: str = os.getenv("AI_MODEL", "gpt-4.1-mini")
    ai_timeout_seconds: float = _float_env("AI_TIMEOUT_SECONDS", 20.0)

    # in-process inspection session cache
    session_cache_ttl_seconds: float = _float_env("SESSION_CACHE_TTL_SECONDS", 3600.0)
    session_cache_max_entries: int = int(_float_env("SESSION_CACHE_MAX_ENTRIES", 500))

    default_labor_rate: float = _float_env("DEFAULT_LABOR_RATE", 120.0)

settings = Settings()
