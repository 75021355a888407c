"""Ordered fallback extraction rules for business letter fields.

Each field has a fixed, ordered tuple of rules. Earlier rules encode
higher-precision heuristics (an "Embassy of ..." phrase outranks a generic
"To:" label), so the order is part of the contract and must not change
without updating the tests.

Captures are line-bounded and validated on their trimmed length; the
resolver in fallback.py applies them.
"""

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class FieldName(str, Enum):
    FROM = "from"
    TO = "to"
    DATE = "date"
    SUBJECT = "subject"


@dataclass(frozen=True)
class ExtractionRule:
    field: FieldName
    order: int
    pattern: re.Pattern
    group_index: int
    min_length: int
    max_length: int
    truncate_to: int | None = None


SUBJECT_MAX_CHARS = 100

_CLOSINGS = r"\b(?:Sincerely|Regards|Yours\s+faithfully|Yours\s+truly)"
_TITLES = r"(?:General\s+Manager|Manager|Director|Head)"
_COMPANY_SUFFIXES = r"(?:Limited|Ltd|Corporation|Corp|Company|Services|Pvt|Inc|LLC)"
_MONTHS = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|"
    r"Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)


def _rule(
    field: FieldName,
    order: int,
    pattern: str,
    min_length: int,
    max_length: int,
    flags: int = re.IGNORECASE,
    truncate_to: int | None = None,
) -> ExtractionRule:
    return ExtractionRule(
        field=field,
        order=order,
        pattern=re.compile(pattern, flags),
        group_index=1,
        min_length=min_length,
        max_length=max_length,
        truncate_to=truncate_to,
    )


_FROM_RULES = (
    # "Sincerely,\nfor Acme Trading Ltd"
    _rule(FieldName.FROM, 1, _CLOSINGS + r"[,\s]*\bfor\s+([A-Z][^\n]*)", 10, 80),
    # "(JOHN SMITH)\nGeneral Manager"
    _rule(
        FieldName.FROM, 2,
        r"\(([A-Z][A-Za-z .'-]*)\)\s*(?i:" + _TITLES + r")\b",
        10, 50,
        flags=0,
    ),
    _rule(FieldName.FROM, 3, r"\bfor\s+([A-Z][^\n]*\b" + _COMPANY_SUFFIXES + r"\b\.?)", 10, 80),
)

_TO_RULES = (
    _rule(FieldName.TO, 1, r"\b(Embassy\s+of\s+[^\n]*)", 5, 70),
    _rule(FieldName.TO, 2, r"\b(Ministry\s+of\s+[^\n]*)", 5, 70),
    _rule(FieldName.TO, 3, r"\b(?:To|Dear|Attention)\s*:\s*([^\n]*)", 10, 80),
)

_DATE_RULES = (
    # July 12, 2024 / Sept. 3 2023
    _rule(FieldName.DATE, 1, r"\b(" + _MONTHS + r"\.?\s+\d{1,2},?\s+\d{4})\b", 6, 30, flags=0),
    # 12-07-2024 / 12/7/2024
    _rule(FieldName.DATE, 2, r"\b(\d{1,2}[-/]\d{1,2}[-/]\d{4})\b", 6, 30, flags=0),
    # 2024-07-12
    _rule(FieldName.DATE, 3, r"\b(\d{4}[-/]\d{1,2}[-/]\d{1,2})\b", 6, 30, flags=0),
)

_SUBJECT_RULES = (
    _rule(
        FieldName.SUBJECT, 1,
        r"\b(?:Subject|Re|Regarding)\s*:\s*([^\n]*)",
        10, 150,
        truncate_to=SUBJECT_MAX_CHARS,
    ),
    _rule(
        FieldName.SUBJECT, 2,
        r"\b(?:Request\s+to|Application\s+for|Invitation)\s+([^\n]*)",
        10, 100,
        truncate_to=SUBJECT_MAX_CHARS,
    ),
    # Underlined headings come out of OCR as "____ text ____"
    _rule(
        FieldName.SUBJECT, 3,
        r"_{2,}\s*([^\n_]+?)\s*_{2,}",
        10, 150,
        flags=0,
        truncate_to=SUBJECT_MAX_CHARS,
    ),
)

RULES: Mapping[FieldName, tuple[ExtractionRule, ...]] = MappingProxyType({
    FieldName.FROM: _FROM_RULES,
    FieldName.TO: _TO_RULES,
    FieldName.DATE: _DATE_RULES,
    FieldName.SUBJECT: _SUBJECT_RULES,
})


def rules_for(field: FieldName) -> tuple[ExtractionRule, ...]:
    """Return the ordered rules for a field."""
    return RULES[FieldName(field)]
