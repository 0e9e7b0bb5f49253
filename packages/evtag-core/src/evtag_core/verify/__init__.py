"""Verification of recorded digest lines."""

from evtag_core.verify.parser import DigestLineParser, VerificationLine
from evtag_core.verify.verifier import (
    VerificationOutcome,
    find_digest_lines,
    verify_digest,
    verify_line,
)

__all__ = [
    "DigestLineParser",
    "VerificationLine",
    "VerificationOutcome",
    "find_digest_lines",
    "verify_digest",
    "verify_line",
]
