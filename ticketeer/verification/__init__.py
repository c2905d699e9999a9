from ticketeer.verification.policy import Tier, decide_tier
from ticketeer.verification.service import VerificationService

__all__ = ["Tier", "VerificationService", "decide_tier"]
