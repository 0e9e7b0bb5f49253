"""Content digest engine: canonical framing, accumulation and graph traversal."""

from evtag_core.digest.accumulator import DigestAccumulator, DigestResult, DigestStats
from evtag_core.digest.encoder import encode_header
from evtag_core.digest.formats import DEFAULT_FORMAT, STATS_COMMENT_PREFIX, DigestFormat
from evtag_core.digest.walker import GraphWalker, compute_digest

__all__ = [
    "DEFAULT_FORMAT",
    "STATS_COMMENT_PREFIX",
    "DigestAccumulator",
    "DigestFormat",
    "DigestResult",
    "DigestStats",
    "GraphWalker",
    "compute_digest",
    "encode_header",
]
