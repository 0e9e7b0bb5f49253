"""Versioned digest formats and their line prefixes."""

from __future__ import annotations

from enum import Enum


class DigestFormat(str, Enum):
    """A digest format selects the canonicalization rule and the line prefix together.

    ``v0`` frames every object with a ``<kind> <size>\\0`` header before its
    bytes; ``plain`` is the earlier rule that hashes raw object bytes only.
    ``archive`` is the legacy SHA-256 over ``git archive --format=tar`` and is
    produced by a separate pipeline, not by the graph walker.
    """

    V0_TYPED_HEADER = "v0"
    V0_PLAIN = "plain"
    LEGACY_ARCHIVE = "archive"

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]

    @property
    def algorithm(self) -> str:
        return "sha256" if self is DigestFormat.LEGACY_ARCHIVE else "sha512"

    @property
    def framed(self) -> bool:
        """Whether each object is preceded by its canonical header."""
        return self is DigestFormat.V0_TYPED_HEADER

    @property
    def walks_graph(self) -> bool:
        return self is not DigestFormat.LEGACY_ARCHIVE

    @classmethod
    def from_prefix(cls, prefix: str) -> DigestFormat:
        for fmt, p in _PREFIXES.items():
            if p == prefix:
                return fmt
        raise ValueError(f"unknown digest prefix {prefix!r}")


_PREFIXES = {
    DigestFormat.V0_TYPED_HEADER: "Git-EVTag-v0-SHA512:",
    DigestFormat.V0_PLAIN: "Git-EVTag-Contents-SHA512:",
    DigestFormat.LEGACY_ARCHIVE: "ExtendedVerify-SHA256-archive-tar:",
}

DEFAULT_FORMAT = DigestFormat.V0_TYPED_HEADER

STATS_COMMENT_PREFIX = "# git-evtag comment:"
