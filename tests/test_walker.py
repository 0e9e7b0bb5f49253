"""Tests for the graph walker: traversal order, coverage and failure modes."""

from __future__ import annotations

import hashlib
import threading

import pytest

from conftest import build_with_submodule
from evtag_core.digest import DigestFormat, GraphWalker, compute_digest
from evtag_core.errors import (
    EvtagError,
    MalformedObject,
    NotACommit,
    ObjectNotFound,
    SubmoduleOpenFailure,
    TraversalCancelled,
)
from evtag_core.store.memory import MODE_FILE, MemoryObjectStore
from evtag_core.store.models import MODE_GITLINK, MODE_TREE, ObjectKind


def _framed(store: MemoryObjectStore, oid: str) -> bytes:
    obj = store.objects[oid]
    return f"{obj.kind.value} {obj.size}\0".encode() + obj.data


# ── Canonical scenario ───────────────────────────────────────────────


def test_hello_scenario_exact_bytes(hello_store):
    """compute(C) is SHA-512 of the six framed segments, in order."""
    store, commit, tree, blob = hello_store
    expected = hashlib.sha512(
        _framed(store, commit) + _framed(store, tree) + b"blob 5\0hello"
    ).hexdigest()
    assert GraphWalker(store).compute(commit).hex == expected


def test_hello_scenario_ignores_unreachable_objects(hello_store):
    store, commit, _, _ = hello_store
    before = GraphWalker(store).compute(commit).hex
    store.add_blob("not referenced by anything")
    store.add_tree([(MODE_FILE, "other", store.add_blob("x"))])
    assert GraphWalker(store).compute(commit).hex == before


def test_hello_scenario_stats(hello_store):
    store, commit, tree, _ = hello_store
    stats = GraphWalker(store).compute(commit).stats
    assert (stats.n_commits, stats.n_trees, stats.n_blobs, stats.n_submodules) == (1, 1, 1, 0)
    assert stats.blob_bytes == len(b"blob 5\0hello")
    assert stats.tree_bytes == len(_framed(store, tree))


def test_plain_format_hello(hello_store):
    store, commit, tree, _ = hello_store
    expected = hashlib.sha512(
        store.objects[commit].data + store.objects[tree].data + b"hello"
    ).hexdigest()
    assert GraphWalker(store, DigestFormat.V0_PLAIN).compute(commit).hex == expected


# ── Determinism & sensitivity ────────────────────────────────────────


def test_deterministic(nested_store):
    store, commit = nested_store
    first = GraphWalker(store).compute(commit)
    second = GraphWalker(store).compute(commit)
    assert first.hex == second.hex
    assert len(first.hex) == 128


def test_compute_digest_resolves_rev(nested_store):
    store, commit = nested_store
    assert compute_digest(store, "HEAD").hex == GraphWalker(store).compute(commit).hex


def _single_file_commit(content: bytes) -> tuple[MemoryObjectStore, str]:
    store = MemoryObjectStore()
    blob = store.add_blob(content)
    sub = store.add_tree([(MODE_FILE, "data.bin", blob)])
    root = store.add_tree([(MODE_TREE, "dir", sub)])
    return store, store.add_commit(root)


def test_single_byte_flip_changes_digest():
    store_a, commit_a = _single_file_commit(b"abcdef")
    store_b, commit_b = _single_file_commit(b"abcdeg")
    assert GraphWalker(store_a).compute(commit_a).hex != GraphWalker(store_b).compute(commit_b).hex


# ── Traversal order ──────────────────────────────────────────────────


def test_pre_order_absorption(nested_store):
    """Subtree contents are absorbed right after the subtree object itself."""
    store, commit = nested_store
    root_id = store.read_commit(commit).root_tree_id
    readme, src = store.read_tree(root_id)
    main, util = store.read_tree(src.id)
    expected = hashlib.sha512(
        b"".join(
            _framed(store, oid)
            for oid in (commit, root_id, readme.id, src.id, main.id, util.id)
        )
    ).hexdigest()
    assert GraphWalker(store).compute(commit).hex == expected


class _ReversedStore(MemoryObjectStore):
    """Same objects, but reports every tree's entries in reverse."""

    def decode_tree(self, obj):
        return list(reversed(super().decode_tree(obj)))


def _two_file_commit(store: MemoryObjectStore) -> str:
    a = store.add_blob("a")
    b = store.add_blob("b")
    return store.add_commit(store.add_tree([(MODE_FILE, "a", a), (MODE_FILE, "b", b)]))


def test_reported_entry_order_changes_digest():
    """The store's entry order is absorbed as-is, not normalized away."""
    forward = MemoryObjectStore()
    reversed_store = _ReversedStore()
    commit = _two_file_commit(forward)
    assert _two_file_commit(reversed_store) == commit

    assert GraphWalker(forward).compute(commit).hex != GraphWalker(reversed_store).compute(commit).hex


def test_shared_subtree_absorbed_twice():
    """No memoization: a subtree reachable via two entries is absorbed twice."""
    store = MemoryObjectStore()
    blob = store.add_blob("shared")
    shared = store.add_tree([(MODE_FILE, "f", blob)])
    twice = store.add_tree([(MODE_TREE, "one", shared), (MODE_TREE, "two", shared)])
    once = store.add_tree([(MODE_TREE, "one", shared)])
    commit_twice = store.add_commit(twice)
    commit_once = store.add_commit(once)

    walker = GraphWalker(store)
    result_twice = walker.compute(commit_twice)
    result_once = walker.compute(commit_once)
    assert result_twice.hex != result_once.hex
    assert result_twice.stats.n_trees == 3
    assert result_twice.stats.n_blobs == 2
    assert result_once.stats.n_trees == 2


# ── Submodules ───────────────────────────────────────────────────────


def test_submodule_contents_absorbed_inline(submodule_store):
    parent, commit, sub = submodule_store
    sub_commit = parent.submodules["vendor/lib"][1]
    sub_tree = sub.read_commit(sub_commit).root_tree_id
    (sub_blob,) = sub.read_tree(sub_tree)

    root_id = parent.read_commit(commit).root_tree_id
    readme, vendor = parent.read_tree(root_id)
    expected = hashlib.sha512(
        _framed(parent, commit)
        + _framed(parent, root_id)
        + _framed(parent, readme.id)
        + _framed(parent, vendor.id)
        + _framed(sub, sub_commit)
        + _framed(sub, sub_tree)
        + _framed(sub, sub_blob.id)
    ).hexdigest()

    result = GraphWalker(parent).compute(commit)
    assert result.hex == expected
    assert result.stats.n_submodules == 1
    assert result.stats.n_commits == 2


def test_submodule_change_propagates():
    parent_a, commit_a, _ = build_with_submodule("library code\n")
    parent_b, commit_b, _ = build_with_submodule("library code!\n")
    assert GraphWalker(parent_a).compute(commit_a).hex != GraphWalker(parent_b).compute(commit_b).hex


def test_submodule_hashes_working_checkout(submodule_store):
    """The checkout's commit is hashed, not the id recorded in the parent tree."""
    parent, commit, sub = submodule_store
    before = GraphWalker(parent).compute(commit).hex
    newer_blob = sub.add_blob("newer\n")
    newer = sub.add_commit(sub.add_tree([(MODE_FILE, "lib.c", newer_blob)]))
    parent.add_submodule("vendor/lib", sub, newer)
    assert GraphWalker(parent).compute(commit).hex != before


def test_nested_submodules():
    inner = MemoryObjectStore("inner")
    inner_commit = inner.add_commit(inner.add_tree([(MODE_FILE, "x", inner.add_blob("x"))]))
    middle = MemoryObjectStore("middle")
    middle_commit = middle.add_commit(middle.add_tree([(MODE_GITLINK, "inner", inner_commit)]))
    middle.add_submodule("inner", inner, inner_commit)
    top = MemoryObjectStore("top")
    top_commit = top.add_commit(top.add_tree([(MODE_GITLINK, "middle", middle_commit)]))
    top.add_submodule("middle", middle, middle_commit)

    stats = GraphWalker(top).compute(top_commit).stats
    assert stats.n_submodules == 2
    assert stats.n_commits == 3
    assert stats.n_blobs == 1


def test_missing_submodule_aborts():
    store = MemoryObjectStore()
    fake_commit = "1" * 40
    commit = store.add_commit(store.add_tree([(MODE_GITLINK, "missing", fake_commit)]))
    with pytest.raises(SubmoduleOpenFailure) as exc_info:
        GraphWalker(store).compute(commit)
    assert exc_info.value.path == "missing"


# ── Failures ─────────────────────────────────────────────────────────


def test_missing_blob_aborts(hello_store):
    store, commit, _, blob = hello_store
    del store.objects[blob]
    with pytest.raises(ObjectNotFound) as exc_info:
        GraphWalker(store).compute(commit)
    assert exc_info.value.object_id == blob


def test_target_not_a_commit(hello_store):
    store, _, tree, _ = hello_store
    with pytest.raises(NotACommit) as exc_info:
        GraphWalker(store).compute(tree)
    assert exc_info.value.kind == "tree"
    assert exc_info.value.object_id == tree


def test_unknown_rev(hello_store):
    store, _, _, _ = hello_store
    with pytest.raises(ObjectNotFound):
        compute_digest(store, "no-such-branch")


def test_tree_entry_pointing_at_blob(hello_store):
    store, _, _, blob = hello_store
    root = store.add_tree([(MODE_TREE, "dir", blob)])
    commit = store.add_commit(root)
    with pytest.raises(MalformedObject) as exc_info:
        GraphWalker(store).compute(commit)
    assert exc_info.value.object_id == blob
    assert "dir should be a tree, found a blob" in str(exc_info.value)


def test_file_entry_pointing_at_tree(hello_store):
    store, _, tree, _ = hello_store
    commit = store.add_commit(store.add_tree([(MODE_FILE, "notes.txt", tree)]))
    with pytest.raises(MalformedObject) as exc_info:
        GraphWalker(store).compute(commit)
    assert exc_info.value.object_id == tree


def test_commit_without_tree_header():
    store = MemoryObjectStore()
    commit = store.add(ObjectKind.COMMIT, b"author A U Thor <a@example.com> 0 +0000\n\nno tree\n")
    with pytest.raises(MalformedObject) as exc_info:
        GraphWalker(store).compute(commit)
    assert exc_info.value.object_id == commit
    assert "no tree header" in exc_info.value.reason


def test_truncated_tree_object():
    store = MemoryObjectStore()
    tree = store.add(ObjectKind.TREE, b"100644 a.txt\0" + bytes(7))
    commit = store.add_commit(tree)
    with pytest.raises(MalformedObject) as exc_info:
        GraphWalker(store).compute(commit)
    assert exc_info.value.object_id == tree


def test_malformed_objects_are_evtag_errors():
    store = MemoryObjectStore()
    tree = store.add(ObjectKind.TREE, b"garbage without separators")
    with pytest.raises(EvtagError):
        GraphWalker(store).compute(store.add_commit(tree))


def test_cancelled_before_start(hello_store):
    store, commit, _, _ = hello_store
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(TraversalCancelled) as exc_info:
        GraphWalker(store, cancel=cancel).compute(commit)
    assert exc_info.value.objects_absorbed == 0


def test_cancelled_mid_walk(nested_store):
    """Cancellation lands between objects and no digest is produced."""
    store, commit = nested_store
    cancel = threading.Event()
    original = store.read_object

    def read_and_cancel(object_id):
        obj = original(object_id)
        if obj.kind.value == "tree":
            cancel.set()
        return obj

    store.read_object = read_and_cancel
    with pytest.raises(TraversalCancelled) as exc_info:
        GraphWalker(store, cancel=cancel).compute(commit)
    # commit and root tree were absorbed whole before the check fired
    assert exc_info.value.objects_absorbed == 2
