"""Creating, reading and signature-checking annotated tags via git."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from evtag_core.errors import EvtagError, NotACommit
from evtag_core.store.git import run_git

logger = logging.getLogger(__name__)


class TagInfo(BaseModel):
    """An annotated tag object as read from the repository."""

    name: str
    id: str
    target_id: str
    target_kind: str
    message: str


def parse_tag_object(name: str, tag_id: str, data: bytes) -> TagInfo:
    """Split a raw tag object into its header fields and message."""
    text = data.decode("utf-8", errors="replace")
    header, _, message = text.partition("\n\n")
    fields: dict[str, str] = {}
    for line in header.splitlines():
        key, _, value = line.partition(" ")
        fields.setdefault(key, value)
    return TagInfo(
        name=name,
        id=tag_id,
        target_id=fields.get("object", ""),
        target_kind=fields.get("type", ""),
        message=message,
    )


def read_tag(repo: Path | str, name: str, git: str = "git") -> TagInfo:
    """Read ``refs/tags/<name>``, which must be an annotated tag of a commit."""
    ref = f"refs/tags/{name}"
    tag_id = run_git(["rev-parse", "--verify", ref], cwd=repo, git=git).decode("ascii").strip()
    kind = run_git(["cat-file", "-t", tag_id], cwd=repo, git=git).decode("ascii").strip()
    if kind != "tag":
        raise EvtagError(f"{name} is a lightweight tag pointing at a {kind}; an annotated tag is required")
    info = parse_tag_object(name, tag_id, run_git(["cat-file", "tag", tag_id], cwd=repo, git=git))
    if info.target_kind != "commit":
        raise NotACommit(info.target_id, info.target_kind)
    return info


def create_tag(
    repo: Path | str,
    name: str,
    rev: str,
    message: str,
    sign: bool = True,
    key_id: str | None = None,
    git: str = "git",
) -> str:
    """Create tag *name* at *rev* with *message* verbatim and return the tag id.

    Comment lines are kept (``--cleanup=verbatim``) so the stats line survives.
    """
    args = ["tag"]
    if not sign:
        args.append("-a")
    elif key_id:
        args += ["-u", key_id]
    else:
        args.append("-s")
    args += ["--cleanup=verbatim", "-F", "-", name, rev]
    run_git(args, cwd=repo, git=git, input=message.encode("utf-8"))
    tag_id = run_git(["rev-parse", f"refs/tags/{name}"], cwd=repo, git=git).decode("ascii").strip()
    logger.info("Created tag %s (%s) at %s", name, tag_id, rev)
    return tag_id


def verify_tag_signature(repo: Path | str, name: str, git: str = "git") -> None:
    """Run ``git verify-tag``; raises GitCommandError when the signature is bad."""
    run_git(["verify-tag", name], cwd=repo, git=git)
    logger.info("Signature on %s verified", name)
