"""Prompt for business letter field extraction.

Carries the letter-reading rules (where senders, recipients, dates and
subjects usually appear) and strict JSON-only output instructions so the
reply can be parsed without guessing.
"""

_JSON_SUFFIX = """

CRITICAL OUTPUT RULES:
- Return ONLY a single valid JSON object with exactly these keys:
  {"from": "...", "to": "...", "date": "...", "subject": "...", "confidence_score": 0.0}
- Do NOT include any thinking, preamble, explanation, or markdown formatting.
- Do NOT wrap in code fences. Just raw JSON.
- If a field cannot be determined, set it to null. Never omit a key.
- "confidence_score" is a number between 0.0 and 1.0 describing how sure you are overall."""

LETTER_PROMPT = """You are an expert at reading business letters. The text below was produced by OCR
from a scanned letter and may contain recognition errors.
Extract the following fields and return them as a JSON object.

EXTRACTION RULES:
1. FROM (sender):
   - Look for a company letterhead at the top
   - Check the signature block at the bottom and who signed it
   - Look for "for [Company Name]" after the closing
   - Format: "Name, Company" or just "Company Name"

2. TO (recipient):
   - First look for explicit "To:", "Dear", "Attention:"
   - If not found, look at the address block (usually after the reference number)
   - Look for "Embassy of", "Ministry of" and other organization names
   - Format: "Name/Organization, Address"

3. DATE:
   - Usually in the top-right corner, below the letterhead or above the address
   - Common formats: "July 12, 2024", "12-07-2024", "2024-07-12"
   - Convert to YYYY-MM-DD format

4. SUBJECT:
   - Look for underlined text and for "Re:", "Subject:", "Regarding:"
   - If not explicit, use the purpose stated in the first paragraph
     (visa requests, meeting requests, applications, invitations)
   - Keep it under 100 characters

LETTER TEXT:
{text}""" + _JSON_SUFFIX


def build_prompt(text: str) -> str:
    """Insert the OCR text of a letter into the extraction prompt."""
    return LETTER_PROMPT.replace("{text}", text)
