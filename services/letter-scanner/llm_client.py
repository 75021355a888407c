"""HTTP client for the LLM text generation service (Ollama-compatible API).

Uses httpx with configurable timeouts and tenacity for retry with
exponential backoff on 503 (model loading) and connection errors.
"""

import logging

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import settings

logger = logging.getLogger(__name__)


class LLMServiceUnavailable(Exception):
    """LLM service is temporarily unavailable (retryable: 503, connection error, timeout)."""


class LLMServiceError(Exception):
    """LLM service returned a non-retryable error (400, 500, unexpected body)."""


class LLMClient:
    """HTTP client for the LLM service with retry and backoff."""

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
        retry_attempts: int | None = None,
        retry_delay: float | None = None,
        retry_backoff: float | None = None,
        retry_max_wait: float | None = None,
    ):
        self._base_url = (base_url or settings.LLM_SERVICE_URL).rstrip("/")
        self._model = model or settings.LLM_MODEL
        self._retry_attempts = retry_attempts if retry_attempts is not None else settings.LLM_RETRY_ATTEMPTS
        self._retry_delay = retry_delay if retry_delay is not None else settings.LLM_RETRY_DELAY
        self._retry_backoff = retry_backoff if retry_backoff is not None else settings.LLM_RETRY_BACKOFF
        self._retry_max_wait = retry_max_wait if retry_max_wait is not None else settings.LLM_RETRY_MAX_WAIT

        read_timeout = timeout if timeout is not None else settings.LLM_TIMEOUT_SECONDS
        conn_timeout = connect_timeout if connect_timeout is not None else settings.LLM_CONNECT_TIMEOUT

        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=httpx.Timeout(
                connect=float(conn_timeout),
                read=float(read_timeout),
                write=30.0,
                pool=30.0,
            ),
        )

    @property
    def model(self) -> str:
        return self._model

    def close(self):
        self._client.close()

    def generate(self, prompt: str) -> tuple[str, int]:
        """Send a prompt to the LLM service.

        Returns (raw_text, inference_time_ms).
        Raises LLMServiceUnavailable (retryable) or LLMServiceError (non-retryable).
        """
        payload = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": settings.LLM_TEMPERATURE},
        }

        return self._generate_with_retry(payload)

    def _generate_with_retry(self, payload: dict) -> tuple[str, int]:
        """Retry wrapper — configured dynamically based on settings."""

        @retry(
            retry=retry_if_exception_type(LLMServiceUnavailable),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(
                multiplier=self._retry_delay,
                exp_base=self._retry_backoff,
                max=self._retry_max_wait,
            ),
            reraise=True,
            before_sleep=lambda state: logger.warning(
                "LLM service unavailable, retrying in %.1fs (attempt %d/%d)",
                state.next_action.sleep,  # type: ignore[union-attr]
                state.attempt_number,
                self._retry_attempts,
            ),
        )
        def _do_generate() -> tuple[str, int]:
            return self._send_generate(payload)

        return _do_generate()

    def _send_generate(self, payload: dict) -> tuple[str, int]:
        """Send a single generation request to the LLM service."""
        try:
            resp = self._client.post("/api/generate", json=payload)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.warning("LLM service connection failed: %s", e)
            raise LLMServiceUnavailable(f"Cannot connect to LLM service: {e}") from e
        except httpx.ReadTimeout as e:
            logger.warning("LLM service read timeout: %s", e)
            raise LLMServiceUnavailable(f"LLM service read timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.error("LLM service HTTP error: %s", e)
            raise LLMServiceError(f"LLM service HTTP error: {e}") from e

        if resp.status_code == 503:
            detail = _error_detail(resp, "Service unavailable")
            logger.warning("LLM service returned 503: %s", detail)
            raise LLMServiceUnavailable(detail)

        if resp.status_code != 200:
            detail = _error_detail(resp, f"HTTP {resp.status_code}")
            logger.error("LLM service error %d: %s", resp.status_code, detail)
            raise LLMServiceError(detail)

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMServiceError(f"LLM service returned a non-JSON body: {e}") from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise LLMServiceError("LLM service response has no 'response' text")

        # Ollama reports durations in nanoseconds
        inference_ms = int(data.get("total_duration") or 0) // 1_000_000
        return text, inference_ms

    def health(self) -> dict:
        """Check LLM service health. Returns health dict, never raises."""
        try:
            resp = self._client.get("/api/tags", timeout=10.0)
            models = [m.get("name", "") for m in resp.json().get("models", [])]
            ready = any(self._model in name for name in models)
            return {
                "status": "healthy" if ready else "degraded",
                "ready": ready,
                "model": self._model,
                "available_models": models,
            }
        except Exception as e:
            logger.warning("LLM health check failed: %s", e)
            return {"status": "unreachable", "ready": False, "error": str(e)}


def _error_detail(resp: httpx.Response, default: str) -> str:
    """Pull an error message out of an error response body."""
    try:
        body = resp.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or default)
    return default
