"""Extraction orchestrator — call the LLM, parse its JSON, fill gaps with patterns.

Single pass per letter:

1. one AI extraction call, bounded by a timeout
2. strict parsing of the reply into a parsed/failed outcome
3. pattern fallback (and keyword subject inference) for fields the AI left empty
4. one confidence blend

Every path ends in a StructuredRecord. Nothing in here raises to the caller;
a failed AI call yields a degraded record instead.
"""

import json
import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Protocol

from pydantic import ValidationError

from confidence import blend, degrade
from config import settings
from fallback import FallbackResolver
from llm_client import LLMServiceError, LLMServiceUnavailable
from models import (
    AIExtractionResult,
    ExtractionOutcome,
    FailedExtraction,
    FieldCandidate,
    FieldSource,
    ParsedExtraction,
    RawDocument,
    StructuredRecord,
)
from patterns import FieldName
from prompts import build_prompt
from subject_inference import infer_subject

logger = logging.getLogger(__name__)

_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)
_FENCE_RE = re.compile(r"^```[A-Za-z]*[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> tuple[str, int]: ...


def extract_fields(
    text: str,
    ocr_confidence: float,
    client: TextGenerator | None,
    *,
    timeout: float | None = None,
    fallback_on_failure: bool | None = None,
    resolver: FallbackResolver | None = None,
) -> StructuredRecord:
    """Run the extraction pipeline: AI call -> parse -> fallback -> confidence."""
    start = time.monotonic()

    if timeout is None:
        timeout = settings.EXTRACTION_TIMEOUT_SECONDS
    if fallback_on_failure is None:
        fallback_on_failure = settings.FALLBACK_ON_AI_FAILURE

    try:
        document = RawDocument(text=text, ocr_confidence=ocr_confidence)
    except ValidationError as e:
        logger.warning("Invalid OCR input, treating confidence as 0: %s", e.errors()[0]["msg"])
        document = RawDocument(text=text if isinstance(text, str) else "", ocr_confidence=0.0)

    try:
        outcome = call_extractor(client, document.text, timeout)
    except Exception as e:
        logger.exception("AI extraction step failed")
        outcome = FailedExtraction(reason=f"AI extraction failed: {e.__class__.__name__}")

    try:
        record = reconcile(
            document,
            outcome,
            resolver=resolver,
            fallback_on_failure=fallback_on_failure,
        )
    except Exception:
        logger.exception("Field reconciliation failed, returning empty record")
        record = StructuredRecord(confidence=degrade(document.ocr_confidence))

    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        "Extraction finished in %dms: ai=%s fields=%d confidence=%.3f",
        elapsed_ms, outcome.status, len(record.sources), record.confidence,
    )
    return record


def call_extractor(
    client: TextGenerator | None,
    text: str,
    timeout: float | None,
) -> ExtractionOutcome:
    """Invoke the AI extractor once and classify the result.

    The call runs on a worker thread so ``timeout`` can be enforced; on
    timeout the outstanding call is abandoned, not awaited.
    """
    if client is None:
        return FailedExtraction(reason="AI extraction service not configured")

    prompt = build_prompt(text)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="llm-extract")

    try:
        future = executor.submit(client.generate, prompt)
        raw_text, inference_ms = future.result(timeout=timeout)
    except FutureTimeoutError:
        logger.error("LLM extraction timed out after %.1fs", timeout)
        return FailedExtraction(reason=f"AI extraction timed out after {timeout}s")
    except LLMServiceUnavailable as e:
        logger.error("LLM service unavailable after retries: %s", e)
        return FailedExtraction(reason=f"AI extraction service unavailable: {e}")
    except LLMServiceError as e:
        logger.error("LLM service error: %s", e)
        return FailedExtraction(reason=f"AI extraction failed: {e}")
    except Exception as e:
        logger.exception("Unexpected error calling LLM service")
        return FailedExtraction(reason=f"AI extraction failed: {e}")
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    logger.info("LLM extraction completed in %dms (%d chars)", inference_ms, len(raw_text))
    return parse_extraction_response(raw_text)


def strip_formatting(raw: str) -> str:
    """Remove <think> blocks and surrounding code fences from a model reply."""
    cleaned = _THINK_RE.sub("", raw).strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        cleaned = match.group(1).strip()
    return cleaned


def parse_extraction_response(raw: str) -> ExtractionOutcome:
    """Parse the model reply into an AIExtractionResult, strictly.

    Only formatting wrappers are removed. Anything that is not a single JSON
    object with the expected keys and types is a failure; partial results are
    never trusted.
    """
    if not isinstance(raw, str) or not raw.strip():
        return FailedExtraction(reason="Empty response from AI extractor")

    cleaned = strip_formatting(raw)

    try:
        data = json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError, oversized integer literals and runaway nesting
        logger.warning("Could not parse JSON from model response: %s", cleaned[:200])
        return FailedExtraction(reason=f"Response is not valid JSON: {str(e)[:200]}")

    if not isinstance(data, dict):
        logger.warning("Model response is JSON but not an object: %s", type(data).__name__)
        return FailedExtraction(reason="Response is not a JSON object")

    try:
        result = AIExtractionResult.model_validate(data)
    except ValidationError as e:
        logger.warning("Model response has an unexpected shape (%d errors)", e.error_count())
        return FailedExtraction(reason=f"Response does not match the expected shape: {e.error_count()} error(s)")

    return ParsedExtraction(result=result)


def reconcile(
    document: RawDocument,
    outcome: ExtractionOutcome,
    *,
    resolver: FallbackResolver | None = None,
    fallback_on_failure: bool = False,
) -> StructuredRecord:
    """Combine an AI outcome with pattern fallback into the final record."""
    resolver = resolver or FallbackResolver()

    if isinstance(outcome, ParsedExtraction):
        candidates = _ai_candidates(outcome.result)
        _fill_gaps(candidates, document.text, resolver)
        confidence = blend(outcome.result.confidence_score, document.ocr_confidence)
    else:
        logger.warning("AI extraction failed: %s", outcome.reason)
        candidates = {}
        if fallback_on_failure:
            _fill_gaps(candidates, document.text, resolver)
        confidence = degrade(document.ocr_confidence)

    return StructuredRecord.from_candidates(candidates, confidence)


def _ai_candidates(result: AIExtractionResult) -> dict[FieldName, FieldCandidate]:
    candidates = {}
    for field in FieldName:
        value = result.value_of(field)
        if value is not None:
            candidates[field] = FieldCandidate(value=value, source=FieldSource.AI)
    return candidates


def _fill_gaps(
    candidates: dict[FieldName, FieldCandidate],
    text: str,
    resolver: FallbackResolver,
) -> None:
    """Fill missing fields in place. Fields already present are left alone."""
    for field in FieldName:
        if field in candidates:
            continue

        value = resolver.resolve(field, text)
        if value is not None:
            candidates[field] = FieldCandidate(value=value, source=FieldSource.PATTERN)
            continue

        if field is FieldName.SUBJECT:
            label = infer_subject(text)
            if label is not None:
                candidates[field] = FieldCandidate(value=label, source=FieldSource.KEYWORD)
