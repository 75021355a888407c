"""Environment-based configuration for the letter scanner extraction service."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Letter scanner settings, loaded from environment variables."""

    # Server
    PORT: int = 8092

    # LLM service connection (empty = AI extraction unavailable, local dev default)
    LLM_SERVICE_URL: str = ""
    LLM_MODEL: str = "llama3.1:8b"
    LLM_TEMPERATURE: float = 0.1

    # LLM service timeouts and retry
    LLM_TIMEOUT_SECONDS: int = 120
    LLM_CONNECT_TIMEOUT: int = 10
    LLM_RETRY_ATTEMPTS: int = 3
    LLM_RETRY_DELAY: float = 2.0
    LLM_RETRY_BACKOFF: float = 2.0
    LLM_RETRY_MAX_WAIT: float = 60.0

    # Pipeline
    EXTRACTION_TIMEOUT_SECONDS: float = 180.0  # upper bound on the whole AI call, retries included
    FALLBACK_ON_AI_FAILURE: bool = False

    model_config = {"env_prefix": "", "case_sensitive": True}


settings = Settings()
