"""Compare recorded digest lines against freshly computed digests."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from evtag_core.digest.accumulator import DigestResult
from evtag_core.digest.formats import DigestFormat
from evtag_core.errors import DigestMismatch, PrefixNotFound
from evtag_core.verify.parser import DigestLineParser, VerificationLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationOutcome:
    """A successful comparison and the line that matched."""

    line: VerificationLine
    result: DigestResult

    @property
    def format(self) -> DigestFormat:
        return self.result.format


def _compare(found: VerificationLine, result: DigestResult) -> VerificationOutcome:
    if found.hex != result.hex:
        raise DigestMismatch(expected=found.hex, actual=result.hex, prefix=found.prefix)
    logger.info("Verified %s at line %d", found.prefix, found.lineno)
    return VerificationOutcome(line=found, result=result)


def verify_digest(text: str, result: DigestResult) -> VerificationOutcome:
    """Find the first line in *text* carrying *result*'s prefix and compare it.

    Only the line with the exact prefix of the result's format is
    considered; lines for other formats are ignored.

    Raises:
        PrefixNotFound: no line carries the prefix.
        MalformedVerificationLine: the line carries the prefix but no hex digest.
        DigestMismatch: the recorded digest differs (case-sensitive).
    """
    found = DigestLineParser(result.prefix).find(text)
    return _compare(found, result)


def verify_line(line: str, result: DigestResult) -> VerificationOutcome:
    """Check a single provided digest line against *result*."""
    parser = DigestLineParser(result.prefix)
    return _compare(parser.parse_line(line.rstrip("\r\n")), result)


def find_digest_lines(text: str) -> dict[DigestFormat, VerificationLine]:
    """Return the first line for every known format present in *text*."""
    found: dict[DigestFormat, VerificationLine] = {}
    for fmt in DigestFormat:
        try:
            found[fmt] = DigestLineParser(fmt.prefix).find(text)
        except PrefixNotFound:
            continue
    return found
