"""CLI command implementations"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from postpub.config import Settings, load_config
from postpub.core.emit import emit_metadata_json, emit_post
from postpub.core.errors import PostError
from postpub.core.models import TAXONOMIES
from postpub.core.parse import parse_file
from postpub.core.pipeline import run_check, run_commit, run_export
from postpub.crud.database import init_db, make_engine, reset_db
from postpub.crud.posts import (
    get_all_posts,
    get_by_term,
    get_last_committed,
    list_aliases,
    list_terms,
)
from postpub.logs import configure_logging


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def _engine(settings: Settings):
    engine = make_engine(settings.db_url)
    init_db(engine)
    return engine


def check_cmd(
    path: Annotated[Optional[str], typer.Argument(help="File or directory to validate")] = None,
    ):
    """Validate metadata blocks and bodies; exit 1 if any file is invalid."""
    settings = _settings()
    target = Path(path or settings.content_dir)
    if not target.exists():
        _fail(f"No such file or directory: {target}")
    issues = run_check(target)
    for issue in issues:
        typer.echo(str(issue), err=True)
    if issues:
        typer.echo(f"{len(issues)} invalid post(s).", err=True)
        raise typer.Exit(1)
    typer.echo("All posts valid.")


def show_cmd(
    path: Annotated[Path, typer.Argument(help="Post file to display")],
    fmt: Annotated[Optional[str], typer.Option("--format", help="toml or yaml; defaults to the file's own")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the metadata sidecar instead")] = False,
    ):
    """Print a post with its metadata block normalized."""
    settings = _settings()
    if fmt is not None and fmt not in ("toml", "yaml"):
        _fail(f"Unknown format: {fmt}")
    try:
        post = parse_file(path)
    except (OSError, PostError) as e:
        _fail("Could not read post", e)
    try:
        if as_json:
            text = json.dumps(emit_metadata_json(post, settings.parser_config), indent=2, ensure_ascii=False) + "\n"
        else:
            text = emit_post(post, fmt)
    except (TypeError, ValueError) as e:
        _fail("Could not encode post", e)
    typer.echo(text, nl=False)


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize the index schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def commit_cmd(
    path: Annotated[Optional[str], typer.Argument(help="File or directory to index")] = None,
    ):
    """Parse posts and upsert them into the index."""
    settings = _settings()
    engine = _engine(settings)
    try:
        counts, changes = run_commit(engine, Path(path or settings.content_dir))
    except Exception as e:
        _fail("Commit failed", e)
    if not counts:
        typer.echo("No posts found.")
        raise typer.Exit(1)

    for status, slug in changes:
        typer.echo(f"  {status}: {slug}")
    typer.echo(
        f"Commit complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged"
    )


def export_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    all_posts: Annotated[bool, typer.Option("--all", help="Export every indexed post")] = False,
    tag: Annotated[Optional[str], typer.Option("--tag", help="Export posts with this tag")] = None,
    drafts: Annotated[Optional[bool], typer.Option("--drafts/--no-drafts", help="Include draft posts")] = None,
    ):
    """Render indexed posts to HTML with sidecar JSON, redirects, and taxonomies."""
    settings = _settings(overrides={"output_dir": out, "include_drafts": drafts})
    engine = _engine(settings)
    output_dir = Path(settings.output_dir)

    try:
        with Session(engine) as session:
            if all_posts:
                records = get_all_posts(session)
                scope = "all"
            elif tag:
                records = get_by_term(session, "tags", tag)
                scope = f"tag '{tag}'"
            else:
                records = get_last_committed(session)
                scope = "last commit"

            if not records:
                typer.echo(f"No posts found for scope: {scope}.")
                raise typer.Exit(1)

            results = run_export(
                session, records, output_dir, settings.parser_config, settings.include_drafts,
            )
    except typer.Exit:
        raise
    except Exception as e:
        _fail("Export failed", e)

    for slug, html_path in results:
        typer.echo(f"  {slug} -> {html_path}")
    typer.echo(f"Exported {len(results)} post(s) to {output_dir}/")


def terms_cmd(
    taxonomy: Annotated[str, typer.Argument(help="tags, categories, or series")] = "tags",
    ):
    """List taxonomy terms with post counts."""
    settings = _settings()
    if taxonomy not in TAXONOMIES:
        _fail(f"Unknown taxonomy: {taxonomy} (expected one of {', '.join(TAXONOMIES)})")
    with Session(_engine(settings)) as session:
        counts = list_terms(session, taxonomy)
    if not counts:
        typer.echo(f"No {taxonomy} found in index.")
        raise typer.Exit(1)
    for term, count in counts.items():
        typer.echo(f"{term}\t{count}")


def aliases_cmd():
    """List alias paths and the post each redirects to."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        pairs = list_aliases(session)
    if not pairs:
        typer.echo("No aliases found in index.")
        raise typer.Exit(1)
    for alias, slug in pairs:
        typer.echo(f"{alias} -> /posts/{slug}/")
