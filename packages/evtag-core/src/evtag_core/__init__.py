"""evtag core - strong content digests over git commits, including submodules."""

from evtag_core.digest import (
    DigestAccumulator,
    DigestFormat,
    DigestResult,
    DigestStats,
    GraphWalker,
    compute_digest,
    encode_header,
)
from evtag_core.store import GitObjectStore, MemoryObjectStore, ObjectStore
from evtag_core.verify import verify_digest, verify_line
from evtag_core.legacy import compute_archive_digest
from evtag_core.config import EvtagConfig, load_config

__version__ = "0.1.0"

__all__ = [
    "DigestAccumulator",
    "DigestFormat",
    "DigestResult",
    "DigestStats",
    "EvtagConfig",
    "GitObjectStore",
    "GraphWalker",
    "MemoryObjectStore",
    "ObjectStore",
    "compute_archive_digest",
    "compute_digest",
    "encode_header",
    "load_config",
    "verify_digest",
    "verify_line",
]
