"""CLI entry point for evtag."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.syntax import Syntax

from evtag_core.config import EvtagConfig, load_config
from evtag_core.config.loader import DEFAULT_CONFIG_TEMPLATE
from evtag_core.digest import DigestFormat, DigestResult, GraphWalker
from evtag_core.errors import DirtyWorkingTree, EvtagError, PrefixNotFound
from evtag_core.legacy import compute_archive_digest
from evtag_core.store import GitObjectStore
from evtag_core.tag import (
    build_tag_message,
    compose_message,
    create_tag,
    read_tag,
    verify_tag_signature,
)
from evtag_core.verify import find_digest_lines, verify_digest, verify_line

app = typer.Typer(
    name="evtag",
    help="Strong, submodule-aware content digests for git tags.",
)

config_app = typer.Typer(help="Manage evtag configuration.")
app.add_typer(config_app, name="config")

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

# Global state
_config: EvtagConfig | None = None


def _get_config() -> EvtagConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to evtag.yaml")
    ] = None,
    repo: Annotated[
        str | None, typer.Option("--repo", "-C", help="Repository to operate on")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    if repo is not None:
        _config.git.repository = repo
    logging.basicConfig(
        level=_LOG_LEVELS[_config.log_level],
        format="%(levelname)s %(name)s: %(message)s",
    )


def _open_store(cfg: EvtagConfig) -> GitObjectStore:
    return GitObjectStore(
        cfg.git.repository,
        git=cfg.git.executable,
        require_recorded_commit=cfg.submodules.require_recorded_commit,
    )


def _parse_format(value: str | None, cfg: EvtagConfig) -> DigestFormat:
    if value is None:
        return cfg.digest.digest_format
    try:
        fmt = DigestFormat(value)
    except ValueError:
        raise typer.BadParameter(f"unknown format {value!r} (expected v0 or plain)")
    if not fmt.walks_graph:
        raise typer.BadParameter("use --with-legacy-archive for the archive digest")
    return fmt


def _compute(
    store: GitObjectStore, commit_id: str, fmt: DigestFormat, legacy: bool, git: str
) -> list[DigestResult]:
    results = [GraphWalker(store, fmt).compute(commit_id)]
    if legacy:
        results.append(compute_archive_digest(store.workdir, commit_id, git=git))
    return results


def _fail(e: Exception) -> typer.Exit:
    rprint(f"[red]Error:[/red] {e}")
    return typer.Exit(1)


@app.command()
def compute(
    rev: Annotated[str, typer.Argument(help="Commit to digest")] = "HEAD",
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Print statistics on what was hashed")
    ] = False,
    fmt: Annotated[
        str | None, typer.Option("--format", help="Digest format: v0 or plain")
    ] = None,
    with_legacy_archive: Annotated[
        bool,
        typer.Option("--with-legacy-archive", help="Also print the git-archive SHA-256"),
    ] = False,
) -> None:
    """Compute and print the digest line for REV."""
    cfg = _get_config()
    digest_format = _parse_format(fmt, cfg)
    legacy = with_legacy_archive or cfg.digest.with_legacy_archive
    try:
        with _open_store(cfg) as store:
            commit_id = store.resolve(rev)
            results = _compute(store, commit_id, digest_format, legacy, cfg.git.executable)
    except EvtagError as e:
        raise _fail(e)

    if verbose or cfg.digest.with_stats:
        typer.echo(results[0].stats.comment_line())
    for result in results:
        typer.echo(result.line())


@app.command(name="check-line")
def check_line(
    line: Annotated[str, typer.Argument(help="A full digest line, prefix included")],
    rev: Annotated[str, typer.Argument(help="Commit to check against")] = "HEAD",
) -> None:
    """Verify one provided digest line against REV."""
    cfg = _get_config()
    try:
        matched = find_digest_lines(line)
        if not matched:
            rprint(f"[red]Error:[/red] {line!r} does not start with a known digest prefix")
            raise typer.Exit(1)
        fmt = next(iter(matched))
        with _open_store(cfg) as store:
            commit_id = store.resolve(rev)
            if fmt.walks_graph:
                result = GraphWalker(store, fmt).compute(commit_id)
            else:
                result = compute_archive_digest(store.workdir, commit_id, git=cfg.git.executable)
        outcome = verify_line(line, result)
    except EvtagError as e:
        raise _fail(e)
    rprint(f"[green]Successfully verified:[/green] {outcome.line.line}")


@app.command()
def verify(
    tagname: Annotated[str, typer.Argument(help="Tag name")],
    no_signature: Annotated[
        bool, typer.Option("--no-signature", "-n", help="Do not verify the GPG signature")
    ] = False,
) -> None:
    """Verify a tag's signature and every digest line in its message."""
    cfg = _get_config()
    repo = Path(cfg.git.repository)
    git = cfg.git.executable
    try:
        tag = read_tag(repo, tagname, git=git)
        if cfg.tag.verify_signature and not no_signature:
            verify_tag_signature(repo, tagname, git=git)

        found = find_digest_lines(tag.message)
        required = cfg.digest.digest_format
        if required not in found:
            raise PrefixNotFound(required.prefix)

        with _open_store(cfg) as store:
            for fmt in found:
                if fmt.walks_graph:
                    result = GraphWalker(store, fmt).compute(tag.target_id)
                else:
                    result = compute_archive_digest(store.workdir, tag.target_id, git=git)
                outcome = verify_digest(tag.message, result)
                rprint(f"[green]Successfully verified:[/green] {outcome.line.line}")
    except EvtagError as e:
        raise _fail(e)


@app.command()
def sign(
    tagname: Annotated[str, typer.Argument(help="Name of the tag to create")],
    rev: Annotated[str, typer.Argument(help="Commit to tag; must be checked out")] = "HEAD",
    message: Annotated[
        str | None, typer.Option("--message", "-m", help="Tag message (skips the editor)")
    ] = None,
    no_sign: Annotated[
        bool, typer.Option("--no-sign", help="Create an annotated tag without a signature")
    ] = False,
    with_legacy_archive: Annotated[
        bool, typer.Option("--with-legacy-archive", help="Also record the git-archive SHA-256")
    ] = False,
    allow_dirty: Annotated[
        bool, typer.Option("--allow-dirty", help="Sign even with uncommitted changes")
    ] = False,
) -> None:
    """Compute the digest of REV and create a tag carrying it."""
    cfg = _get_config()
    git = cfg.git.executable
    legacy = with_legacy_archive or cfg.digest.with_legacy_archive
    try:
        with _open_store(cfg) as store:
            commit_id = store.resolve(rev)
            if commit_id != store.head():
                rprint(f"[red]Error:[/red] {rev} ({commit_id}) is not the checked out HEAD")
                raise typer.Exit(1)
            if not (allow_dirty or cfg.tag.allow_dirty) and store.is_dirty():
                raise DirtyWorkingTree(str(store.workdir))
            results = _compute(store, commit_id, cfg.digest.digest_format, legacy, git)
            workdir = store.workdir

        body = message if message is not None else compose_message(tagname, editor=cfg.tag.editor)
        stats = results[0].stats if cfg.digest.with_stats else None
        full_message = build_tag_message(body, results, stats)
        tag_id = create_tag(
            workdir,
            tagname,
            commit_id,
            full_message,
            sign=cfg.tag.sign and not no_sign,
            key_id=cfg.tag.key_id,
            git=git,
        )
    except (EvtagError, ValueError) as e:
        raise _fail(e)

    rprint(f"[green]Created tag[/green] {tagname} ({tag_id})")
    for result in results:
        typer.echo(result.line())


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default evtag.yaml in current directory."""
    target = Path("evtag.yaml")
    if target.exists() and not force:
        rprint("[yellow]evtag.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
