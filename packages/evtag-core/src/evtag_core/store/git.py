"""Object store backed by the git executable.

Objects are streamed through one long-lived ``git cat-file --batch`` process
per repository, which is much faster than spawning git per object.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from evtag_core.errors import GitCommandError, ObjectNotFound, SubmoduleOpenFailure
from evtag_core.store.base import ObjectStore
from evtag_core.store.models import ObjectKind, RawObject, SubmoduleLink

logger = logging.getLogger(__name__)

_READ_CHUNK = 65536


def run_git(
    args: list[str],
    cwd: Path | str,
    git: str = "git",
    input: bytes | None = None,
) -> bytes:
    """Run one git command and return its stdout.

    Raises:
        GitCommandError: if git cannot be started or exits non-zero.
    """
    command = [git, *args]
    try:
        result = subprocess.run(
            command,
            cwd=str(cwd),
            input=input,
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        raise GitCommandError(command, None, str(exc)) from exc
    if result.returncode != 0:
        raise GitCommandError(
            command, result.returncode, result.stderr.decode("utf-8", errors="replace")
        )
    return result.stdout


class GitObjectStore(ObjectStore):
    """Reads objects from a git repository on disk."""

    def __init__(
        self,
        path: Path | str = ".",
        git: str = "git",
        require_recorded_commit: bool = False,
    ) -> None:
        self.git = git
        self.require_recorded_commit = require_recorded_commit
        self.workdir = self._discover(Path(path))
        self.location = str(self.workdir)
        self._proc: subprocess.Popen | None = None

    def _discover(self, path: Path) -> Path:
        """Find the top of the working tree containing *path*."""
        out = run_git(["rev-parse", "--show-toplevel"], cwd=path, git=self.git)
        return Path(out.decode("utf-8").strip())

    def _git(self, *args: str) -> bytes:
        return run_git(list(args), cwd=self.workdir, git=self.git)

    # ------------------------------------------------------------------
    # Batch reader
    # ------------------------------------------------------------------

    def _batch(self) -> subprocess.Popen:
        if self._proc is None:
            command = [self.git, "cat-file", "--batch"]
            try:
                self._proc = subprocess.Popen(
                    command,
                    cwd=str(self.workdir),
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                )
            except OSError as exc:
                raise GitCommandError(command, None, str(exc)) from exc
        return self._proc

    def _read_exact(self, stream, size: int) -> bytes:
        chunks: list[bytes] = []
        remaining = size
        while remaining:
            piece = stream.read(min(_READ_CHUNK, remaining))
            if not piece:
                raise GitCommandError(
                    [self.git, "cat-file", "--batch"], None, "premature EOF reading object data"
                )
            chunks.append(piece)
            remaining -= len(piece)
        return b"".join(chunks)

    def read_object(self, object_id: str) -> RawObject:
        proc = self._batch()
        proc.stdin.write(object_id.encode("ascii") + b"\n")
        proc.stdin.flush()
        header = proc.stdout.readline()
        if not header:
            raise GitCommandError(
                [self.git, "cat-file", "--batch"], proc.poll(), "batch process exited"
            )
        fields = header.split()
        if len(fields) == 2 and fields[1] in (b"missing", b"ambiguous"):
            raise ObjectNotFound(object_id, self.location)
        full_id, kind, size = fields
        data = self._read_exact(proc.stdout, int(size))
        # Each object is followed by a single LF
        proc.stdout.read(1)
        obj = RawObject(id=full_id.decode("ascii"), kind=ObjectKind(kind.decode("ascii")), data=data)
        logger.debug("read %s %s (%d bytes) from %s", obj.kind.value, obj.id, obj.size, self.location)
        return obj

    def close(self) -> None:
        if self._proc is None:
            return
        proc, self._proc = self._proc, None
        proc.stdin.close()
        proc.stdout.close()
        proc.wait()
        proc.stderr.close()

    # ------------------------------------------------------------------
    # ObjectStore
    # ------------------------------------------------------------------

    def resolve(self, rev: str) -> str:
        try:
            out = self._git("rev-parse", "--verify", "--quiet", f"{rev}^{{object}}")
        except GitCommandError as exc:
            raise ObjectNotFound(rev, self.location) from exc
        return out.decode("ascii").strip()

    def resolve_submodule(self, path: str, recorded_id: str) -> SubmoduleLink:
        checkout = self.workdir / path
        if not (checkout / ".git").exists():
            raise SubmoduleOpenFailure(path, f"no checkout at {checkout}")
        try:
            out = run_git(["rev-parse", "--verify", "HEAD"], cwd=checkout, git=self.git)
        except GitCommandError as exc:
            raise SubmoduleOpenFailure(path, str(exc)) from exc
        link = SubmoduleLink(
            path=path, recorded_id=recorded_id, working_id=out.decode("ascii").strip()
        )
        if link.drifted:
            if self.require_recorded_commit:
                raise SubmoduleOpenFailure(
                    path,
                    f"checkout is at {link.working_id} but the tree records {recorded_id}",
                )
            logger.warning(
                "Submodule %s is checked out at %s, tree records %s; hashing the checkout",
                path,
                link.working_id,
                recorded_id,
            )
        return link

    def open_substore(self, link: SubmoduleLink) -> GitObjectStore:
        try:
            return GitObjectStore(
                self.workdir / link.path,
                git=self.git,
                require_recorded_commit=self.require_recorded_commit,
            )
        except GitCommandError as exc:
            raise SubmoduleOpenFailure(link.path, str(exc)) from exc

    # ------------------------------------------------------------------
    # Working tree state
    # ------------------------------------------------------------------

    def head(self) -> str:
        """Return the commit id currently checked out."""
        return self.resolve("HEAD")

    def is_dirty(self) -> bool:
        """True when tracked files or submodules differ from HEAD."""
        out = self._git(
            "status", "--porcelain", "--untracked-files=no", "--ignore-submodules=none"
        )
        return bool(out.strip())
