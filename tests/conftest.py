"""Shared test fixtures for evtag."""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from evtag_core.config.models import EvtagConfig
from evtag_core.store.memory import MODE_FILE, MemoryObjectStore
from evtag_core.store.models import MODE_GITLINK, MODE_TREE

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")

_GIT_ENV = {
    "GIT_AUTHOR_NAME": "A U Thor",
    "GIT_AUTHOR_EMAIL": "author@example.com",
    "GIT_AUTHOR_DATE": "1112911993 -0700",
    "GIT_COMMITTER_NAME": "C O Mitter",
    "GIT_COMMITTER_EMAIL": "committer@example.com",
    "GIT_COMMITTER_DATE": "1112911993 -0700",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def git(cwd: Path, *args: str) -> str:
    """Run git in *cwd* with a fixed identity and return stripped stdout."""
    env = {**os.environ, **_GIT_ENV, "HOME": str(cwd)}
    result = subprocess.run(
        ["git", "-c", "init.defaultBranch=main", "-c", "protocol.file.allow=always", *args],
        cwd=str(cwd),
        env=env,
        capture_output=True,
        check=True,
    )
    return result.stdout.decode("utf-8").strip()


def git_bytes(cwd: Path, *args: str) -> bytes:
    env = {**os.environ, **_GIT_ENV, "HOME": str(cwd)}
    return subprocess.run(
        ["git", *args], cwd=str(cwd), env=env, capture_output=True, check=True
    ).stdout


def make_repo(root: Path, files: dict[str, str]) -> Path:
    """Create a git repository at *root* with *files* committed."""
    root.mkdir(parents=True, exist_ok=True)
    git(root, "init", "-q")
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    git(root, "add", "-A")
    git(root, "commit", "-q", "-m", "initial")
    return root


@pytest.fixture
def hello_store():
    """The canonical example: commit C -> tree T -> greeting.txt = "hello"."""
    store = MemoryObjectStore()
    blob = store.add_blob(b"hello")
    tree = store.add_tree([(MODE_FILE, "greeting.txt", blob)])
    commit = store.add_commit(tree, ref="HEAD")
    return store, commit, tree, blob


@pytest.fixture
def nested_store():
    """A store with a subdirectory and two files at the root."""
    store = MemoryObjectStore()
    readme = store.add_blob("# Widget\n")
    main = store.add_blob("print('hi')\n")
    util = store.add_blob("def helper(): pass\n")
    src = store.add_tree([(MODE_FILE, "main.py", main), (MODE_FILE, "util.py", util)])
    root = store.add_tree([(MODE_FILE, "README.md", readme), (MODE_TREE, "src", src)])
    commit = store.add_commit(root, ref="HEAD")
    return store, commit


def build_with_submodule(sub_content: str = "library code\n"):
    """Parent store whose tree links a submodule at ``vendor/lib``."""
    sub = MemoryObjectStore("memory:vendor/lib")
    sub_blob = sub.add_blob(sub_content)
    sub_tree = sub.add_tree([(MODE_FILE, "lib.c", sub_blob)])
    sub_commit = sub.add_commit(sub_tree)

    parent = MemoryObjectStore("memory:parent")
    readme = parent.add_blob("parent\n")
    vendor = parent.add_tree([(MODE_GITLINK, "lib", sub_commit)])
    root = parent.add_tree([(MODE_FILE, "README", readme), (MODE_TREE, "vendor", vendor)])
    commit = parent.add_commit(root, ref="HEAD")
    parent.add_submodule("vendor/lib", sub, sub_commit)
    return parent, commit, sub


@pytest.fixture
def submodule_store():
    return build_with_submodule()


@pytest.fixture
def sample_config():
    return EvtagConfig()


@pytest.fixture
def git_repo(tmp_path):
    """A real repository containing greeting.txt = "hello"."""
    return make_repo(tmp_path / "repo", {"greeting.txt": "hello"})
