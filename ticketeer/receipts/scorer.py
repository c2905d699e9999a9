"""
Receipt confidence scoring.

Weights (out of 100):
- amount matches the order total (within one cent)   40
- reference code equals the order's payment reference 40
- recipient number matches the merchant number        10
- a transaction id is present                          10

A receipt is considered valid at 40 points or more.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from ticketeer.receipts.parser import ReceiptCandidate, parse_receipt_text

logger = logging.getLogger(__name__)

AMOUNT_WEIGHT = 40
REFERENCE_WEIGHT = 40
RECIPIENT_WEIGHT = 10
TRANSACTION_WEIGHT = 10

AMOUNT_TOLERANCE = Decimal("0.01")
VALID_THRESHOLD = 40

PROCESSING_FAILED_ISSUE = "Failed to process receipt image"


@dataclass(frozen=True)
class VerificationChecks:
    amount_match: bool = False
    reference_match: bool = False
    recipient_match: bool = False
    has_transaction_id: bool = False

    def to_dict(self):
        return {
            "amount_match": self.amount_match,
            "reference_match": self.reference_match,
            "recipient_match": self.recipient_match,
            "has_transaction_id": self.has_transaction_id,
        }


@dataclass
class VerificationResult:
    is_valid: bool
    confidence: int
    checks: VerificationChecks
    issues: List[str] = field(default_factory=list)
    candidate: Optional[ReceiptCandidate] = None
    error: Optional[str] = None

    @property
    def extraction_failed(self):
        return self.error is not None

    def summary(self):
        issues = ", ".join(self.issues) if self.issues else "None"
        return f"Automatic verification: {self.confidence}% confidence. Issues: {issues}"


def _digits_only(value):
    return "".join(value.split())


def _format_amount(value):
    return f"{Decimal(value):.2f}"


def score_receipt(candidate, expected_amount, expected_reference, expected_recipient=None):
    issues = []
    confidence = 0
    expected_amount = Decimal(str(expected_amount))

    amount_match = False
    if candidate.amount is None:
        issues.append("Amount not found in receipt")
    elif abs(candidate.amount - expected_amount) <= AMOUNT_TOLERANCE:
        amount_match = True
        confidence += AMOUNT_WEIGHT
    else:
        issues.append(
            f"Amount mismatch: expected {_format_amount(expected_amount)}, "
            f"found {_format_amount(candidate.amount)}"
        )

    reference_match = False
    if candidate.reference is None:
        issues.append("Reference code not found in receipt")
    elif candidate.reference == expected_reference:
        reference_match = True
        confidence += REFERENCE_WEIGHT
    else:
        issues.append(
            f"Reference mismatch: expected {expected_reference}, found {candidate.reference}"
        )

    # Only a recipient that was both expected and read can fail the check.
    recipient_match = True
    if expected_recipient and candidate.recipient:
        found = _digits_only(candidate.recipient)
        wanted = _digits_only(expected_recipient)
        recipient_match = found in wanted or wanted in found
        if not recipient_match:
            issues.append(
                f"Recipient mismatch: expected {expected_recipient}, found {candidate.recipient}"
            )
    if recipient_match:
        confidence += RECIPIENT_WEIGHT

    has_transaction_id = candidate.transaction_id is not None
    if has_transaction_id:
        confidence += TRANSACTION_WEIGHT

    return VerificationResult(
        is_valid=confidence >= VALID_THRESHOLD,
        confidence=confidence,
        checks=VerificationChecks(
            amount_match=amount_match,
            reference_match=reference_match,
            recipient_match=recipient_match,
            has_transaction_id=has_transaction_id,
        ),
        issues=issues,
        candidate=candidate,
    )


def failed_result(error):
    return VerificationResult(
        is_valid=False,
        confidence=0,
        checks=VerificationChecks(),
        issues=[PROCESSING_FAILED_ISSUE],
        error=error,
    )


def verify_receipt(extractor, image_ref, expected_amount, expected_reference, expected_recipient=None):
    """
    Extract, parse and score a receipt image.

    Never raises: any failure along the way yields a zero-confidence result
    with ``error`` set, which the routing policy treats as an OCR outage.
    """
    try:
        text = extractor.extract(image_ref)
        candidate = parse_receipt_text(text)
        return score_receipt(candidate, expected_amount, expected_reference, expected_recipient)
    except Exception as e:
        logger.exception("Receipt verification failed", extra={"image": str(image_ref)})
        return failed_result(str(e) or e.__class__.__name__)
