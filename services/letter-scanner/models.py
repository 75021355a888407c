"""Pydantic models for letter field extraction.

The AI extractor's JSON uses the key ``from``, which is a Python keyword;
models expose it as ``from_`` and serialize it back under its alias.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from confidence import clamp
from patterns import FieldName

NULL_SENTINEL = "null"


class FieldSource(str, Enum):
    AI = "ai"
    PATTERN = "pattern"
    KEYWORD = "keyword"


class RawDocument(BaseModel):
    """OCR output for one scanned letter."""

    model_config = ConfigDict(frozen=True)

    text: str
    ocr_confidence: float

    @field_validator("ocr_confidence")
    @classmethod
    def _clamp_ocr_confidence(cls, value: float) -> float:
        return clamp(value)


class FieldCandidate(BaseModel):
    value: str
    source: FieldSource


class AIExtractionResult(BaseModel):
    """Validated reply of the AI extractor.

    All five keys must be present. Field values are strings or null; blank
    strings and the literal "null" some models emit are normalized to None
    here so nothing downstream has to know about them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    from_: str | None = Field(alias="from")
    to: str | None
    date: str | None
    subject: str | None
    confidence_score: float

    @field_validator("from_", "to", "date", "subject", mode="before")
    @classmethod
    def _normalize_null(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if not value or value.lower() == NULL_SENTINEL:
                return None
        return value

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _check_confidence(cls, value):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("confidence_score must be a number")
        try:
            float(value)
        except OverflowError:
            raise ValueError("confidence_score is out of float range") from None
        return clamp(value)

    def value_of(self, field: FieldName) -> str | None:
        return self.from_ if field is FieldName.FROM else getattr(self, field.value)


class ParsedExtraction(BaseModel):
    status: Literal["parsed"] = "parsed"
    result: AIExtractionResult


class FailedExtraction(BaseModel):
    status: Literal["failed"] = "failed"
    reason: str


ExtractionOutcome = Annotated[ParsedExtraction | FailedExtraction, Field(discriminator="status")]


class StructuredRecord(BaseModel):
    """Final extraction result. A None field means "not determined"."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    date: str | None = None
    subject: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    sources: dict[FieldName, FieldSource] = {}

    @classmethod
    def from_candidates(
        cls,
        candidates: dict[FieldName, FieldCandidate],
        confidence: float,
    ) -> "StructuredRecord":
        values = {field: candidate.value for field, candidate in candidates.items()}
        return cls(
            from_=values.get(FieldName.FROM),
            to=values.get(FieldName.TO),
            date=values.get(FieldName.DATE),
            subject=values.get(FieldName.SUBJECT),
            confidence=clamp(confidence),
            sources={field: candidate.source for field, candidate in candidates.items()},
        )
