"""Abstract read-only object store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from evtag_core.errors import MalformedObject, NotACommit
from evtag_core.store.models import Commit, ObjectKind, RawObject, SubmoduleLink, TreeEntry


class ObjectStore(ABC):
    """Read-only accessor to a content-addressed object store.

    Defines what the digest walker needs from a backend: raw object reads,
    commit and tree decoding, and a way to reach the independent store of a
    submodule. Implementations never mutate the store.
    """

    #: Human-readable location used in error messages.
    location: str = ""

    @abstractmethod
    def resolve(self, rev: str) -> str:
        """Turn a revision expression (branch, tag, abbreviated id) into a full object id."""
        ...

    @abstractmethod
    def read_object(self, object_id: str) -> RawObject:
        """Read one object.

        Raises:
            ObjectNotFound: if the store has no such object.
        """
        ...

    @abstractmethod
    def resolve_submodule(self, path: str, recorded_id: str) -> SubmoduleLink:
        """Resolve a gitlink entry at *path* to its working checkout.

        Raises:
            SubmoduleOpenFailure: if the submodule is not available.
        """
        ...

    @abstractmethod
    def open_substore(self, link: SubmoduleLink) -> ObjectStore:
        """Open the submodule's own store, bound to its on-disk checkout."""
        ...

    def read_commit(self, object_id: str) -> Commit:
        """Read a commit and return its root tree id.

        Raises:
            NotACommit: if *object_id* names some other kind of object.
        """
        obj = self.read_object(object_id)
        if obj.kind is not ObjectKind.COMMIT:
            raise NotACommit(object_id, obj.kind.value)
        return Commit(id=obj.id, root_tree_id=parse_commit_tree(obj.data, obj.id))

    def read_tree(self, object_id: str) -> list[TreeEntry]:
        """List a tree's entries in the store's own canonical order."""
        obj = self.read_object(object_id)
        if obj.kind is not ObjectKind.TREE:
            raise MalformedObject(object_id, f"expected a tree, found a {obj.kind.value}")
        return self.decode_tree(obj)

    def decode_tree(self, obj: RawObject) -> list[TreeEntry]:
        """Decode an already-read tree object without re-sorting its entries.

        Entry ids are as wide as the tree's own id, so *obj.id* must be the
        full id the store reported, never an abbreviation or a revision.
        """
        return parse_tree(obj.data, id_len=len(obj.id) // 2, object_id=obj.id)

    def close(self) -> None:
        """Release backend resources. The default has nothing to release."""

    def __enter__(self) -> ObjectStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def parse_commit_tree(data: bytes, object_id: str = "") -> str:
    """Return the id on the ``tree`` header line of a raw commit.

    Raises:
        MalformedObject: if the commit has no ``tree`` header.
    """
    header, _, _ = data.partition(b"\n\n")
    for line in header.split(b"\n"):
        if line.startswith(b"tree "):
            return line[5:].decode("ascii").strip()
    raise MalformedObject(object_id, "commit has no tree header")


def parse_tree(data: bytes, id_len: int = 20, object_id: str = "") -> list[TreeEntry]:
    """Decode raw tree bytes into entries, preserving their stored order.

    Each entry is ``<mode> <name>\\0<binary id>``; the id is 20 bytes in
    SHA-1 repositories and 32 in SHA-256 ones.

    Raises:
        MalformedObject: if an entry is cut short or lacks its separators.
    """
    entries: list[TreeEntry] = []
    pos = 0
    while pos < len(data):
        space = data.find(b" ", pos)
        nul = data.find(b"\0", space + 1) if space != -1 else -1
        if nul == -1:
            raise MalformedObject(object_id, f"tree entry at offset {pos} has no mode or name")
        mode = data[pos:space].decode("ascii", errors="replace")
        name = data[space + 1:nul].decode("utf-8", errors="surrogateescape")
        raw_id = data[nul + 1:nul + 1 + id_len]
        if len(raw_id) != id_len:
            raise MalformedObject(object_id, f"truncated tree entry {name!r}")
        entries.append(TreeEntry(name=name, mode=mode, id=raw_id.hex()))
        pos = nul + 1 + id_len
    return entries
