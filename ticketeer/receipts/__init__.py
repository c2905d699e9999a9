from ticketeer.receipts.extractor import TesseractReceiptExtractor
from ticketeer.receipts.parser import ReceiptCandidate, parse_receipt_text
from ticketeer.receipts.scorer import (
    VerificationChecks,
    VerificationResult,
    failed_result,
    score_receipt,
    verify_receipt,
)

__all__ = [
    "ReceiptCandidate",
    "TesseractReceiptExtractor",
    "VerificationChecks",
    "VerificationResult",
    "failed_result",
    "parse_receipt_text",
    "score_receipt",
    "verify_receipt",
]
