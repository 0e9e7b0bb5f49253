"""Signed tag glue: message composition and git tag commands."""

from evtag_core.tag.git_tag import (
    TagInfo,
    create_tag,
    parse_tag_object,
    read_tag,
    verify_tag_signature,
)
from evtag_core.tag.message import (
    build_tag_message,
    compose_message,
    resolve_editor,
    strip_comments,
)

__all__ = [
    "TagInfo",
    "build_tag_message",
    "compose_message",
    "create_tag",
    "parse_tag_object",
    "read_tag",
    "resolve_editor",
    "strip_comments",
    "verify_tag_signature",
]
