"""Dictionary-backed object store, handy for tests and embedding."""

from __future__ import annotations

import hashlib

from evtag_core.errors import ObjectNotFound, SubmoduleOpenFailure
from evtag_core.store.base import ObjectStore
from evtag_core.store.models import ObjectKind, RawObject, SubmoduleLink, TreeEntry

MODE_FILE = "100644"


def object_id_for(kind: ObjectKind, data: bytes) -> str:
    """Compute an object id the way git does (SHA-1 over header and data)."""
    header = f"{kind.value} {len(data)}\0".encode("ascii")
    return hashlib.sha1(header + data).hexdigest()


def encode_tree(entries: list[TreeEntry]) -> bytes:
    """Serialize entries in the given order, without sorting them."""
    return b"".join(
        f"{e.mode} {e.name}\0".encode("utf-8") + bytes.fromhex(e.id) for e in entries
    )


class MemoryObjectStore(ObjectStore):
    """An in-memory store whose trees keep exactly the entry order they were given."""

    def __init__(self, location: str = "memory") -> None:
        self.location = location
        self.objects: dict[str, RawObject] = {}
        self.refs: dict[str, str] = {}
        # submodule path -> (store, checked-out commit id)
        self.submodules: dict[str, tuple[MemoryObjectStore, str]] = {}

    def add(self, kind: ObjectKind, data: bytes) -> str:
        oid = object_id_for(kind, data)
        self.objects[oid] = RawObject(id=oid, kind=kind, data=data)
        return oid

    def add_blob(self, data: bytes | str) -> str:
        if isinstance(data, str):
            data = data.encode("utf-8")
        return self.add(ObjectKind.BLOB, data)

    def add_tree(self, entries: list[tuple[str, str, str]]) -> str:
        """Add a tree from ``(mode, name, id)`` triples, stored in the order given."""
        tree_entries = [TreeEntry(name=name, mode=mode, id=oid) for mode, name, oid in entries]
        return self.add(ObjectKind.TREE, encode_tree(tree_entries))

    def add_commit(
        self,
        tree_id: str,
        message: str = "commit\n",
        parents: list[str] | None = None,
        ref: str | None = None,
    ) -> str:
        lines = [f"tree {tree_id}"]
        lines.extend(f"parent {p}" for p in parents or [])
        lines.append("author A U Thor <author@example.com> 1112911993 -0700")
        lines.append("committer C O Mitter <committer@example.com> 1112911993 -0700")
        data = ("\n".join(lines) + "\n\n" + message).encode("utf-8")
        oid = self.add(ObjectKind.COMMIT, data)
        if ref is not None:
            self.refs[ref] = oid
        return oid

    def add_submodule(self, path: str, store: MemoryObjectStore, checkout_id: str) -> None:
        """Register *store* as the checkout for the gitlink at *path*."""
        self.submodules[path] = (store, checkout_id)

    # ------------------------------------------------------------------
    # ObjectStore
    # ------------------------------------------------------------------

    def resolve(self, rev: str) -> str:
        if rev in self.refs:
            return self.refs[rev]
        matches = [oid for oid in self.objects if oid.startswith(rev)] if len(rev) >= 4 else []
        if len(matches) != 1:
            raise ObjectNotFound(rev, self.location)
        return matches[0]

    def read_object(self, object_id: str) -> RawObject:
        try:
            return self.objects[object_id]
        except KeyError:
            raise ObjectNotFound(object_id, self.location) from None

    def resolve_submodule(self, path: str, recorded_id: str) -> SubmoduleLink:
        if path not in self.submodules:
            raise SubmoduleOpenFailure(path, "not registered")
        _, checkout_id = self.submodules[path]
        return SubmoduleLink(path=path, recorded_id=recorded_id, working_id=checkout_id)

    def open_substore(self, link: SubmoduleLink) -> MemoryObjectStore:
        try:
            store, _ = self.submodules[link.path]
        except KeyError:
            raise SubmoduleOpenFailure(link.path, "not registered") from None
        return store

