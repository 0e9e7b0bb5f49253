"""Running hash state and traversal statistics."""

from __future__ import annotations

import hashlib
import logging

from pydantic import BaseModel, ConfigDict

from evtag_core.digest.encoder import encode_header
from evtag_core.digest.formats import STATS_COMMENT_PREFIX, DigestFormat
from evtag_core.errors import AccumulatorFinalized, UnexpectedObjectKind
from evtag_core.store.models import ObjectKind, RawObject

logger = logging.getLogger(__name__)


class DigestStats(BaseModel):
    """Counts of what was absorbed. Diagnostic only, never part of the digest."""

    n_commits: int = 0
    n_trees: int = 0
    n_blobs: int = 0
    n_submodules: int = 0
    commit_bytes: int = 0
    tree_bytes: int = 0
    blob_bytes: int = 0

    @property
    def n_objects(self) -> int:
        return self.n_commits + self.n_trees + self.n_blobs

    @property
    def total_bytes(self) -> int:
        return self.commit_bytes + self.tree_bytes + self.blob_bytes

    def comment_line(self) -> str:
        """Render the advisory statistics line embedded in tag messages."""
        return (
            f"{STATS_COMMENT_PREFIX} submodules={self.n_submodules} "
            f"commits={self.n_commits} ({self.commit_bytes}) "
            f"trees={self.n_trees} ({self.tree_bytes}) "
            f"blobs={self.n_blobs} ({self.blob_bytes})"
        )


class DigestResult(BaseModel):
    """A finalized digest. Immutable."""

    model_config = ConfigDict(frozen=True)

    format: DigestFormat
    hex: str
    stats: DigestStats | None = None

    @property
    def algorithm(self) -> str:
        return self.format.algorithm

    @property
    def prefix(self) -> str:
        return self.format.prefix

    def line(self) -> str:
        """``<prefix> <hex>``, the form stored in tag messages."""
        return f"{self.format.prefix} {self.hex}"


class DigestAccumulator:
    """Owns one hash context for exactly one traversal.

    Objects are absorbed as header (when the format frames objects) followed
    by payload, with no other separators. After :meth:`finalize` the
    accumulator refuses further use.
    """

    def __init__(self, fmt: DigestFormat = DigestFormat.V0_TYPED_HEADER) -> None:
        if not fmt.walks_graph:
            raise ValueError(f"{fmt.value} digests are not computed by object absorption")
        self.format = fmt
        self.stats = DigestStats()
        self._hash = hashlib.new(fmt.algorithm)
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _check_open(self) -> None:
        if self._finalized:
            raise AccumulatorFinalized()

    def absorb(self, obj: RawObject) -> None:
        """Feed one object into the hash and count it."""
        self._check_open()
        if self.format.framed:
            header = encode_header(obj.kind, obj.size)
        elif obj.kind is ObjectKind.TAG:
            raise UnexpectedObjectKind(obj.kind.value)
        else:
            header = b""
        self._hash.update(header)
        self._hash.update(obj.data)

        counted = len(header) + obj.size
        if obj.kind is ObjectKind.COMMIT:
            self.stats.n_commits += 1
            self.stats.commit_bytes += counted
        elif obj.kind is ObjectKind.TREE:
            self.stats.n_trees += 1
            self.stats.tree_bytes += counted
        else:
            self.stats.n_blobs += 1
            self.stats.blob_bytes += counted
        logger.debug("absorbed %s %s (%d bytes)", obj.kind.value, obj.id, obj.size)

    def note_submodule(self) -> None:
        self._check_open()
        self.stats.n_submodules += 1

    def finalize(self) -> DigestResult:
        """Produce the digest. May be called once."""
        self._check_open()
        self._finalized = True
        return DigestResult(
            format=self.format,
            hex=self._hash.hexdigest(),
            stats=self.stats.model_copy(),
        )
