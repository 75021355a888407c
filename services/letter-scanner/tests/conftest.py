"""Shared test fixtures for letter scanner tests."""

import json
import sys
from pathlib import Path

import pytest

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def visa_letter_text() -> str:
    """OCR text of a visa extension letter with a subject label and signature block."""
    return (
        "Dear Sir,\n"
        "Subject: Visa Extension Request\n"
        "\n"
        "We kindly ask you to extend the visa of our employee for a further six months.\n"
        "\n"
        "Sincerely,\n"
        "for Acme Trading Ltd\n"
    )


@pytest.fixture
def embassy_letter_text() -> str:
    """Letter addressed to an embassy, with a date and a signatory."""
    return (
        "GLOBAL EXPORTS CORPORATION\n"
        "July 12, 2024\n"
        "Ref: GE/2024/117\n"
        "\n"
        "Embassy of Japan\n"
        "To: The Consular Section\n"
        "\n"
        "Application for business visa for our delegation\n"
        "\n"
        "Yours faithfully,\n"
        "(JOHN SMITH)\n"
        "General Manager\n"
    )


@pytest.fixture
def meeting_letter_text() -> str:
    """Letter without subject markers that mentions a meeting."""
    return (
        "Dear Ms. Okafor,\n"
        "Thank you for your time last week. We would like to schedule a meeting\n"
        "with your procurement team at your earliest convenience.\n"
        "Kind regards\n"
    )


@pytest.fixture
def null_ai_response() -> str:
    """AI reply where every field is null."""
    return json.dumps({
        "from": None,
        "to": None,
        "date": None,
        "subject": None,
        "confidence_score": 0.0,
    })


@pytest.fixture
def full_ai_response() -> str:
    """AI reply with every field populated."""
    return json.dumps({
        "from": "Acme Trading Ltd",
        "to": "Embassy of Japan",
        "date": "2024-07-12",
        "subject": "Visa Extension Request",
        "confidence_score": 0.95,
    })


@pytest.fixture
def sentinel_ai_response() -> str:
    """AI reply using the literal string "null" for missing fields."""
    return json.dumps({
        "from": "null",
        "to": "Embassy of Japan",
        "date": "NULL",
        "subject": " null ",
        "confidence_score": 0.7,
    })


@pytest.fixture
def fenced_ai_response(full_ai_response: str) -> str:
    """AI reply wrapped in a markdown code fence."""
    return f"```json\n{full_ai_response}\n```"
