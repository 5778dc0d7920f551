"""
NotaryPro Backend — Identity Verification Service
===================================================

What:  Abstract identity-verification contract plus the simulated provider
       used until a real biometric/registry provider is integrated.
How:   Concrete implementations inherit from IdentityVerifier and implement
       verify(). The workflow only sees VerificationResult, so swapping in a
       real provider touches nothing else.
Who:   Called by CertificationWorkflow.verify_identity().

Simulated Check:
    1. The RUT must be well-formed: 7-8 digit body plus check digit, with
       optional thousands dots and dash (12.345.678-5, 12345678-5, 123456785)
    2. The check digit must match the modulo-11 algorithm
    3. If the submitter has a RUT on file and identity_require_rut_match is
       enabled, the submitted RUT must be the same person
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from app.config import settings
from app.models.user import User

logger = logging.getLogger(__name__)

_RUT_PATTERN = re.compile(r"^(\d{7,8})([0-9K])$")


# ══════════════════════════════════════════════════════════════════════════
# RUT Helpers
# ══════════════════════════════════════════════════════════════════════════

def normalize_rut(raw: str) -> str:
    """'12.345.678-k' → '12345678K'. Does not validate."""
    return re.sub(r"[.\-\s]", "", raw or "").upper()


def rut_check_digit(body: str) -> str:
    """
    Modulo-11 check digit for a RUT body.

    Digits are weighted 2, 3, 4, 5, 6, 7, 2, 3, ... from the right;
    11 - (sum mod 11) gives the digit, with 11 → '0' and 10 → 'K'.
    """
    total = 0
    factor = 2
    for digit in reversed(body):
        total += int(digit) * factor
        factor = 2 if factor == 7 else factor + 1
    remainder = 11 - (total % 11)
    if remainder == 11:
        return "0"
    if remainder == 10:
        return "K"
    return str(remainder)


def is_valid_rut(raw: str) -> bool:
    match = _RUT_PATTERN.match(normalize_rut(raw))
    if not match:
        return False
    body, dv = match.groups()
    return rut_check_digit(body) == dv


def format_rut(raw: str) -> str:
    """'123456785' → '12345678-5' (storage format)."""
    normalized = normalize_rut(raw)
    return f"{normalized[:-1]}-{normalized[-1]}"


# ══════════════════════════════════════════════════════════════════════════
# Verifier Contract
# ══════════════════════════════════════════════════════════════════════════

@dataclass
class VerificationResult:
    """
    Outcome of an identity check.

    data is stored on the document (verification_data) when verified.
    reason is shown to the submitter when not verified.
    """
    verified: bool
    reason: str = ""
    data: Dict[str, Any] = field(default_factory=dict)


class IdentityVerifier(ABC):
    """
    Contract:
        - verify() never raises for a negative outcome; it returns
          VerificationResult(verified=False, reason=...)
        - verify() performs no database writes; the workflow applies the
          result
    """

    provider_name: str = "abstract"

    @abstractmethod
    async def verify(
        self,
        submitter: User,
        rut: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> VerificationResult:
        ...


class SimulatedIdentityVerifier(IdentityVerifier):
    """RUT format/check-digit validation standing in for a real provider."""

    provider_name = "simulated"

    def __init__(self, require_rut_match: Optional[bool] = None):
        self.require_rut_match = (
            settings.identity_require_rut_match
            if require_rut_match is None
            else require_rut_match
        )

    async def verify(
        self,
        submitter: User,
        rut: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> VerificationResult:
        if not is_valid_rut(rut):
            logger.info("Identity check failed for user %s: invalid RUT", submitter.id)
            return VerificationResult(
                verified=False,
                reason="The RUT is not valid. Check the number and its verification digit.",
            )

        submitted = format_rut(rut)
        if self.require_rut_match and submitter.rut and format_rut(submitter.rut) != submitted:
            logger.info("Identity check failed for user %s: RUT mismatch", submitter.id)
            return VerificationResult(
                verified=False,
                reason="The RUT does not match the one registered for this account.",
            )

        return VerificationResult(
            verified=True,
            data={
                "provider": self.provider_name,
                "rut": submitted,
                "first_name": first_name or submitter.first_name,
                "last_name": last_name or submitter.last_name,
                "verified_at": datetime.now(timezone.utc).isoformat(),
            },
        )


# ── Singleton Instance ────────────────────────────────────────────────────
identity_verifier = SimulatedIdentityVerifier()
