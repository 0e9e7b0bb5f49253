"""Composing tag messages that carry digest lines."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path

from evtag_core.digest.accumulator import DigestResult, DigestStats
from evtag_core.errors import GitCommandError

logger = logging.getLogger(__name__)

EDITOR_HELP = """\

# Write a message for tag {name}.
# Lines starting with '#' will be ignored; the digest lines are appended after editing.
"""


def build_tag_message(
    body: str,
    results: list[DigestResult],
    stats: DigestStats | None = None,
) -> str:
    """Append the stats comment (when given) and one line per digest to *body*."""
    lines: list[str] = []
    if body.strip():
        lines.append(body.rstrip("\n"))
        lines.append("")
    if stats is not None:
        lines.append(stats.comment_line())
    lines.extend(r.line() for r in results)
    return "\n".join(lines) + "\n"


def strip_comments(text: str) -> str:
    """Drop ``#`` lines and surrounding blank lines, the way git cleans messages."""
    kept = [line for line in text.splitlines() if not line.startswith("#")]
    return "\n".join(kept).strip("\n")


def resolve_editor(configured: str | None = None) -> str:
    """Pick an editor: config, then $GIT_EDITOR, $VISUAL, $EDITOR, then vi."""
    for candidate in (
        configured,
        os.environ.get("GIT_EDITOR"),
        os.environ.get("VISUAL"),
        os.environ.get("EDITOR"),
    ):
        if candidate:
            return candidate
    return "vi"


def compose_message(name: str, initial: str = "", editor: str | None = None) -> str:
    """Open an editor on a scratch file and return the edited message.

    Raises:
        ValueError: if the message is empty after removing comments.
        GitCommandError: if the editor exits non-zero.
    """
    command = shlex.split(resolve_editor(editor))
    with tempfile.TemporaryDirectory(prefix="evtag-") as tmp:
        path = Path(tmp) / "TAG_EDITMSG"
        path.write_text(initial + EDITOR_HELP.format(name=name), encoding="utf-8")
        logger.debug("Running editor %s on %s", command, path)
        try:
            result = subprocess.run([*command, str(path)], check=False)
        except OSError as exc:
            raise GitCommandError([*command, str(path)], None, str(exc)) from exc
        if result.returncode != 0:
            raise GitCommandError([*command, str(path)], result.returncode)
        message = strip_comments(path.read_text(encoding="utf-8"))
    if not message.strip():
        raise ValueError("empty tag message, aborting")
    return message
