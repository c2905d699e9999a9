"""
Receipt text parser.

Turns noisy OCR output from a bank / mobile-money transfer screenshot into a
ReceiptCandidate. Every field is optional and parsing never raises. Within
each field the first matching line wins; later candidates are ignored.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

AMOUNT_RE = re.compile(
    r"(?:\b(?:Rs\.?|MUR)|₨)\s*(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)",
    re.IGNORECASE,
)
REFERENCE_RE = re.compile(r"(?i:\b(?:ref|reference|note|description)\b).*?(TCK\w+)")
TRANSACTION_RE = re.compile(
    r"\b(?:transaction|txn|trans\b|id\b).*?\b([A-Za-z0-9]{8,})\b",
    re.IGNORECASE,
)
DATE_RE = re.compile(r"\b(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})\b")
TIME_RE = re.compile(r"\b(\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AP]M)?)", re.IGNORECASE)
RECIPIENT_RE = re.compile(
    r"\b(?:to|recipient)\b.*?(\+?\d{3}\s?\d{4}\s?\d{4})",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ReceiptCandidate:
    amount: Optional[Decimal] = None
    reference: Optional[str] = None
    transaction_id: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    recipient: Optional[str] = None
    raw_text: str = ""


def _first_line_match(pattern, lines):
    for line in lines:
        match = pattern.search(line)
        if match:
            return match.group(1)
    return None


def _to_amount(value):
    if value is None:
        return None
    try:
        return Decimal(value.replace(",", ""))
    except InvalidOperation:
        return None


def parse_receipt_text(text):
    text = text or ""
    lines = [line.strip() for line in text.splitlines() if line.strip()]

    date = DATE_RE.search(text)
    time = TIME_RE.search(text)

    return ReceiptCandidate(
        amount=_to_amount(_first_line_match(AMOUNT_RE, lines)),
        reference=_first_line_match(REFERENCE_RE, lines),
        transaction_id=_first_line_match(TRANSACTION_RE, lines),
        date=date.group(1) if date else None,
        time=time.group(1) if time else None,
        recipient=_first_line_match(RECIPIENT_RE, lines),
        raw_text=text,
    )
