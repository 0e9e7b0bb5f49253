"""Canonical object header used to frame bytes before hashing."""

from __future__ import annotations

from evtag_core.errors import UnexpectedObjectKind
from evtag_core.store.models import ObjectKind

_HASHABLE = frozenset({ObjectKind.BLOB, ObjectKind.TREE, ObjectKind.COMMIT})


def encode_header(kind: ObjectKind, size: int) -> bytes:
    """Return ``b"<kind> <size>\\0"``.

    The kind name and decimal size make every (kind, size) pair distinct, and
    the NUL terminator makes the header self-delimiting.
    """
    if kind not in _HASHABLE:
        raise UnexpectedObjectKind(kind.value)
    if size < 0:
        raise ValueError(f"object size must be non-negative, got {size}")
    return f"{kind.value} {size}\0".encode("ascii")
