"""Legacy auxiliary digests computed outside the graph walk."""

from evtag_core.legacy.archive import compute_archive_digest

__all__ = ["compute_archive_digest"]
