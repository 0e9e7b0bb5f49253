"""Line-oriented parser for ``<prefix> <hex>`` digest lines."""

from __future__ import annotations

import io
import re
from collections.abc import Iterator
from dataclasses import dataclass

from evtag_core.errors import MalformedVerificationLine, PrefixNotFound

_HEX_RE = re.compile(r"[0-9a-fA-F]+")

# Whitespace trimmed around the value; anything inside it is kept
_TRIM = " \t\r"


@dataclass(frozen=True)
class VerificationLine:
    """A digest line found in a block of text."""

    prefix: str
    hex: str
    line: str
    lineno: int


class DigestLineParser:
    """Finds the first line that starts with one exact prefix.

    Lines are produced lazily from the text and scanning stops at the first
    match, so a large message with the digest near the top is cheap.
    """

    def __init__(self, prefix: str) -> None:
        if not prefix:
            raise ValueError("prefix must not be empty")
        self.prefix = prefix

    def lines(self, text: str) -> Iterator[tuple[int, str]]:
        for lineno, raw in enumerate(io.StringIO(text), start=1):
            yield lineno, raw.rstrip("\n")

    def parse_line(self, line: str, lineno: int = 1) -> VerificationLine:
        """Parse one line already known to start with the prefix."""
        if not line.startswith(self.prefix):
            raise PrefixNotFound(self.prefix)
        value = line[len(self.prefix):].strip(_TRIM)
        if not value:
            raise MalformedVerificationLine(line, "no digest after prefix")
        if not _HEX_RE.fullmatch(value):
            raise MalformedVerificationLine(line, "digest is not a hex string")
        return VerificationLine(prefix=self.prefix, hex=value, line=line.rstrip(_TRIM), lineno=lineno)

    def find(self, text: str) -> VerificationLine:
        """Return the first matching line in *text*.

        Raises:
            PrefixNotFound: if no line starts with the prefix.
            MalformedVerificationLine: if the first matching line has no valid hex.
        """
        for lineno, line in self.lines(text):
            if line.startswith(self.prefix):
                return self.parse_line(line, lineno)
        raise PrefixNotFound(self.prefix)
