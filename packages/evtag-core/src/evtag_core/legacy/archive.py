"""Legacy SHA-256 digest over a ``git archive`` tarball.

This is an independent pipeline from the graph walk: it hashes whatever
``git archive --format=tar`` emits for the commit, which depends on the git
version producing it. It is kept only so older tags can be re-checked.
"""

from __future__ import annotations

import hashlib
import logging
import subprocess
from pathlib import Path

from evtag_core.digest.accumulator import DigestResult
from evtag_core.digest.formats import DigestFormat
from evtag_core.errors import GitCommandError

logger = logging.getLogger(__name__)

_READ_CHUNK = 65536


def compute_archive_digest(repo_path: Path | str, rev: str, git: str = "git") -> DigestResult:
    """Stream ``git archive`` for *rev* through SHA-256."""
    command = [git, "archive", "--format=tar", rev]
    digest = hashlib.sha256()
    size = 0
    try:
        proc = subprocess.Popen(
            command,
            cwd=str(repo_path),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise GitCommandError(command, None, str(exc)) from exc

    with proc:
        while True:
            chunk = proc.stdout.read(_READ_CHUNK)
            if not chunk:
                break
            digest.update(chunk)
            size += len(chunk)
        stderr = proc.stderr.read()
        returncode = proc.wait()
    if returncode != 0:
        raise GitCommandError(command, returncode, stderr.decode("utf-8", errors="replace"))

    logger.debug("Hashed %d bytes of archive output for %s", size, rev)
    return DigestResult(format=DigestFormat.LEGACY_ARCHIVE, hex=digest.hexdigest())
