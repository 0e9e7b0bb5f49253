"""Data models for objects read out of a content-addressed store."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Tree entry modes that are not blobs
MODE_TREE = "40000"
MODE_GITLINK = "160000"


class ObjectKind(str, Enum):
    """Object types as named by the store."""

    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"
    TAG = "tag"

    @classmethod
    def from_mode(cls, mode: str) -> ObjectKind:
        """Derive the kind an entry points at from its tree mode."""
        if mode == MODE_TREE:
            return cls.TREE
        if mode == MODE_GITLINK:
            return cls.COMMIT
        return cls.BLOB


@dataclass(frozen=True)
class RawObject:
    """One object's type, size and bytes exactly as stored."""

    id: str
    kind: ObjectKind
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class TreeEntry:
    """A named entry of a tree. A commit-kind entry is a submodule link."""

    name: str
    mode: str
    id: str

    @property
    def kind(self) -> ObjectKind:
        return ObjectKind.from_mode(self.mode)


@dataclass(frozen=True)
class Commit:
    """The parts of a commit the digest walk needs."""

    id: str
    root_tree_id: str


@dataclass(frozen=True)
class SubmoduleLink:
    """A gitlink entry resolved to its on-disk checkout."""

    path: str
    recorded_id: str
    working_id: str

    @property
    def drifted(self) -> bool:
        """True when the checkout is not at the commit the parent tree records."""
        return self.recorded_id != self.working_id
