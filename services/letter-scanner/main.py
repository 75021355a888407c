"""FastAPI letter scanner service — field extraction from OCR text.

Receives the OCR text of a scanned business letter and its OCR confidence,
returns sender, recipient, date and subject with a blended confidence.
Delegates AI extraction to an external LLM service; falls back to patterns.
Privacy: letter text is never logged, only its length.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import settings
from extraction import extract_fields
from llm_client import LLMClient
from models import StructuredRecord

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_llm_client: LLMClient | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the LLM client on startup if configured."""
    global _llm_client

    if not settings.LLM_SERVICE_URL:
        logger.info("LLM service not configured (LLM_SERVICE_URL is empty) — pattern extraction only")
    else:
        logger.info("Connecting to LLM service at %s (model=%s)", settings.LLM_SERVICE_URL, settings.LLM_MODEL)
        _llm_client = LLMClient()

        # Non-blocking health probe at startup (log only)
        health = _llm_client.health()
        if health.get("ready"):
            logger.info("LLM service is ready: %s", health.get("model"))
        else:
            logger.warning("LLM service not yet ready: %s", health)

    yield

    if _llm_client is not None:
        _llm_client.close()
        _llm_client = None


app = FastAPI(title="Letter Scanner Extraction", version="1.0.0", lifespan=lifespan)


class ExtractRequest(BaseModel):
    text: str
    ocr_confidence: float


@app.post("/api/v1/extract", response_model=StructuredRecord)
def extract(req: ExtractRequest):
    """Extract sender, recipient, date and subject from letter text.

    Blank text is rejected with 400; any other input yields a record,
    degraded when the AI extractor fails.
    """
    if not req.text.strip():
        return JSONResponse(
            status_code=400,
            content={"detail": "Empty letter text"},
        )

    logger.info(
        "Processing extraction: text=%d chars ocr_confidence=%.3f",
        len(req.text),
        req.ocr_confidence,
    )

    return extract_fields(req.text, req.ocr_confidence, _llm_client)


@app.get("/health")
async def health():
    """Return service status and LLM availability."""
    base = {
        "status": "healthy",
        "llm_available": _llm_client is not None,
    }

    if _llm_client is not None:
        base["llm_health"] = _llm_client.health()

    return base


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
