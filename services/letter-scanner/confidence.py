"""Confidence arithmetic for extracted letter records.

Every confidence number reported by the service is produced here:

- ``blend`` when the AI extractor answered with a parseable result
- ``degrade`` when the AI extractor failed outright

Inputs are clamped before use and outputs are clamped before return.
"""

import math

AI_WEIGHT = 0.6
OCR_WEIGHT = 0.4
FAILURE_FACTOR = 0.5


def clamp(value: float) -> float:
    """Clamp a confidence value into [0, 1]. NaN is treated as no confidence."""
    value = float(value)
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def blend(ai_confidence: float, ocr_confidence: float) -> float:
    """Combine the extractor's self-reported confidence with OCR confidence."""
    return clamp(AI_WEIGHT * clamp(ai_confidence) + OCR_WEIGHT * clamp(ocr_confidence))


def degrade(ocr_confidence: float) -> float:
    """Confidence for a record produced without a usable AI result."""
    return clamp(FAILURE_FACTOR * clamp(ocr_confidence))
