"""Tests for keyword subject inference."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from subject_inference import SUBJECT_KEYWORDS, infer_subject


class TestInferSubject:
    @pytest.mark.parametrize("text,expected", [
        ("Please process the VISA for our engineer.", "Visa Application"),
        ("Could we arrange a Meeting next Tuesday?", "Meeting Request"),
        ("You are cordially invited; this invitation stands.", "Invitation"),
    ])
    def test_keywords(self, text: str, expected: str):
        assert infer_subject(text) == expected

    def test_visa_beats_meeting_and_invitation(self):
        text = "An invitation to a meeting about your visa."
        assert infer_subject(text) == "Visa Application"

    def test_meeting_beats_invitation(self):
        text = "This invitation concerns the board meeting."
        assert infer_subject(text) == "Meeting Request"

    def test_no_keyword(self):
        assert infer_subject("Please find the quarterly invoice enclosed.") is None

    def test_empty(self):
        assert infer_subject("") is None

    def test_priority_order(self):
        assert [keyword for keyword, _ in SUBJECT_KEYWORDS] == ["visa", "meeting", "invitation"]
