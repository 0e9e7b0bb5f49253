"""Deterministic traversal of a commit's object graph.

The absorption order is part of the digest: the commit object, then its root
tree object, then the tree's entries in the order the store lists them. Blobs
are absorbed where they appear, subtrees are absorbed and then walked, and
submodule links descend into the submodule's own store at the point the entry
is met. Nothing is memoized, so an object reachable twice is absorbed twice.
"""

from __future__ import annotations

import logging
import threading

from evtag_core.digest.accumulator import DigestAccumulator, DigestResult
from evtag_core.digest.formats import DEFAULT_FORMAT, DigestFormat
from evtag_core.errors import (
    MalformedObject,
    NotACommit,
    TraversalCancelled,
    UnexpectedObjectKind,
)
from evtag_core.store.base import ObjectStore, parse_commit_tree
from evtag_core.store.models import ObjectKind, RawObject

logger = logging.getLogger(__name__)


class GraphWalker:
    """Walks the graph under one commit and feeds a single accumulator."""

    def __init__(
        self,
        store: ObjectStore,
        fmt: DigestFormat = DEFAULT_FORMAT,
        cancel: threading.Event | None = None,
    ) -> None:
        self.store = store
        self.format = fmt
        self.cancel = cancel

    def compute(self, commit_id: str) -> DigestResult:
        """Digest everything reachable from *commit_id*.

        Any failure aborts the whole walk; the partial hash state is dropped
        with the accumulator and never finalized.
        """
        acc = DigestAccumulator(self.format)
        self._walk_commit(self.store, commit_id, acc)
        result = acc.finalize()
        logger.info(
            "Computed %s digest of %s over %d objects (%d submodules)",
            self.format.value,
            commit_id,
            result.stats.n_objects,
            result.stats.n_submodules,
        )
        return result

    def _absorb(
        self,
        store: ObjectStore,
        object_id: str,
        expected: ObjectKind,
        path: str,
        acc: DigestAccumulator,
    ) -> RawObject:
        if self.cancel is not None and self.cancel.is_set():
            raise TraversalCancelled(acc.stats.n_objects)
        obj = store.read_object(object_id)
        if obj.kind is not expected:
            where = path or "root tree"
            raise MalformedObject(
                object_id, f"{where} should be a {expected.value}, found a {obj.kind.value}"
            )
        acc.absorb(obj)
        return obj

    def _walk_commit(self, store: ObjectStore, commit_id: str, acc: DigestAccumulator) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise TraversalCancelled(acc.stats.n_objects)
        commit = store.read_object(commit_id)
        if commit.kind is not ObjectKind.COMMIT:
            raise NotACommit(commit_id, commit.kind.value)
        acc.absorb(commit)
        tree_id = parse_commit_tree(commit.data, commit.id)
        tree = self._absorb(store, tree_id, ObjectKind.TREE, "", acc)
        self._walk_tree(store, tree, "", acc)

    def _walk_tree(
        self,
        store: ObjectStore,
        tree: RawObject,
        prefix: str,
        acc: DigestAccumulator,
    ) -> None:
        for entry in store.decode_tree(tree):
            path = f"{prefix}{entry.name}"
            kind = entry.kind
            if kind is ObjectKind.BLOB:
                self._absorb(store, entry.id, kind, path, acc)
            elif kind is ObjectKind.TREE:
                subtree = self._absorb(store, entry.id, kind, path, acc)
                self._walk_tree(store, subtree, f"{path}/", acc)
            elif kind is ObjectKind.COMMIT:
                self._walk_submodule(store, path, entry.id, acc)
            else:
                raise UnexpectedObjectKind(kind.value)

    def _walk_submodule(
        self,
        store: ObjectStore,
        path: str,
        recorded_id: str,
        acc: DigestAccumulator,
    ) -> None:
        acc.note_submodule()
        link = store.resolve_submodule(path, recorded_id)
        logger.debug("Entering submodule %s at %s", path, link.working_id)
        with store.open_substore(link) as substore:
            self._walk_commit(substore, link.working_id, acc)


def compute_digest(
    store: ObjectStore,
    rev: str = "HEAD",
    fmt: DigestFormat = DEFAULT_FORMAT,
    cancel: threading.Event | None = None,
) -> DigestResult:
    """Resolve *rev* in *store* and digest the commit it names."""
    commit_id = store.resolve(rev)
    return GraphWalker(store, fmt, cancel=cancel).compute(commit_id)
