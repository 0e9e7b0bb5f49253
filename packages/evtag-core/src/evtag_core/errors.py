"""Exception taxonomy for digest computation and verification."""

from __future__ import annotations


class EvtagError(Exception):
    """Base class for every failure surfaced by evtag_core."""


class ObjectNotFound(EvtagError):
    """An object id could not be read from the store."""

    def __init__(self, object_id: str, store: str = "") -> None:
        self.object_id = object_id
        self.store = store
        where = f" in {store}" if store else ""
        super().__init__(f"object {object_id} not found{where}")


class NotACommit(EvtagError):
    """The target id resolves to something other than a commit."""

    def __init__(self, object_id: str, kind: str) -> None:
        self.object_id = object_id
        self.kind = kind
        super().__init__(f"{object_id} names a {kind}, not a commit")


class SubmoduleOpenFailure(EvtagError):
    """A linked submodule could not be opened at its working checkout."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot open submodule {path!r}: {reason}")


class UnexpectedObjectKind(EvtagError):
    """An object of a kind the traversal never absorbs (a tag) reached the encoder."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"unexpected object kind {kind!r} during traversal")


class MalformedObject(EvtagError):
    """An object read from the store is not what its position requires, or cannot be decoded."""

    def __init__(self, object_id: str, reason: str) -> None:
        self.object_id = object_id
        self.reason = reason
        super().__init__(f"malformed object {object_id}: {reason}")


class PrefixNotFound(EvtagError):
    """No line in the text starts with the requested digest prefix."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        super().__init__(f"no line starting with {prefix!r} found")


class MalformedVerificationLine(EvtagError):
    """The prefix matched but the value after it is not a hex digest."""

    def __init__(self, line: str, reason: str = "") -> None:
        self.line = line
        self.reason = reason
        detail = f" ({reason})" if reason else ""
        super().__init__(f"malformed digest line {line!r}{detail}")


class DigestMismatch(EvtagError):
    """The recorded digest differs from the freshly computed one."""

    def __init__(self, expected: str, actual: str, prefix: str = "") -> None:
        self.expected = expected
        self.actual = actual
        self.prefix = prefix
        label = f"{prefix} " if prefix else ""
        super().__init__(
            f"{label}digest mismatch: recorded {expected} but computed {actual}"
        )


class AccumulatorFinalized(EvtagError):
    """The accumulator was used after finalize()."""

    def __init__(self) -> None:
        super().__init__("digest accumulator already finalized")


class TraversalCancelled(EvtagError):
    """Cancellation was requested between two object absorptions."""

    def __init__(self, objects_absorbed: int) -> None:
        self.objects_absorbed = objects_absorbed
        super().__init__(f"traversal cancelled after {objects_absorbed} objects")


class GitCommandError(EvtagError):
    """A git subprocess exited non-zero or could not be started."""

    def __init__(self, command: list[str], returncode: int | None, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        status = "could not be started" if returncode is None else f"exited with {returncode}"
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"`{' '.join(command)}` {status}{detail}")


class DirtyWorkingTree(EvtagError):
    """Signing was refused because the working tree has uncommitted changes."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"working tree at {path} has uncommitted changes")
