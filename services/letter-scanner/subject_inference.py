"""Keyword-based subject labels, used when no subject pattern matches."""

# Checked in order; the first keyword found in the text wins.
SUBJECT_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("visa", "Visa Application"),
    ("meeting", "Meeting Request"),
    ("invitation", "Invitation"),
)


def infer_subject(text: str) -> str | None:
    """Map the first matching domain keyword in ``text`` to a canonical subject."""
    if not text:
        return None

    lowered = text.lower()
    for keyword, label in SUBJECT_KEYWORDS:
        if keyword in lowered:
            return label
    return None
