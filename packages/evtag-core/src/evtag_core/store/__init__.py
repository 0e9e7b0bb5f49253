"""Object store readers consumed by the digest walker."""

from evtag_core.store.base import ObjectStore, parse_commit_tree, parse_tree
from evtag_core.store.git import GitObjectStore, run_git
from evtag_core.store.memory import MemoryObjectStore, object_id_for
from evtag_core.store.models import Commit, ObjectKind, RawObject, SubmoduleLink, TreeEntry

__all__ = [
    "Commit",
    "GitObjectStore",
    "MemoryObjectStore",
    "ObjectKind",
    "ObjectStore",
    "RawObject",
    "SubmoduleLink",
    "TreeEntry",
    "object_id_for",
    "parse_commit_tree",
    "parse_tree",
    "run_git",
]
