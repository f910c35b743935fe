"""Pipeline step functions: check, commit, and export orchestration"""

import json
import logging
from datetime import datetime
from pathlib import Path

from sqlmodel import Session

from postpub.core.emit import emit_metadata_json
from postpub.core.errors import MalformedMetadata, PostError
from postpub.core.models import TAXONOMIES, Post, PostIssue
from postpub.core.parse import discover_files, parse_file
from postpub.core.render import render_html
from postpub.core.taxonomy import SiteIndex
from postpub.crud.posts import commit_post, to_post


logger = logging.getLogger(__name__)


def run_check(path: Path) -> list[PostIssue]:
    """Parse every post under path and collect one issue per invalid file."""
    issues = []
    files = discover_files(path)
    for p in files:
        try:
            parse_file(p)
        except MalformedMetadata as e:
            issues.append(PostIssue(path=str(p), field=e.field, message=e.message))
        except PostError as e:
            issues.append(PostIssue(path=str(p), field=None, message=e.message))
        except UnicodeDecodeError as e:
            issues.append(PostIssue(path=str(p), field=None, message=f"not valid UTF-8: {e.reason}"))
    logger.info("Checked %d file(s), %d issue(s)", len(files), len(issues))
    return issues


def run_commit(engine, path: Path) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Parse posts under path and commit them to the index in one transaction.

    Returns (counts, changes) where changes is a list of (status, slug) for
    created/updated posts. Returns ({}, []) when no post files are found.
    """
    files = discover_files(path)
    if not files:
        return {}, []

    posts = []
    for p in files:
        try:
            posts.append(parse_file(p))
        except (PostError, UnicodeDecodeError) as e:
            raise RuntimeError(f"Failed to parse {p}: {e}") from e

    committed_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0}
    changes = []
    with Session(engine) as session:
        for post in posts:
            record, status = commit_post(session, post, committed_at)
            counts[status] += 1
            if status != 'unchanged':
                changes.append((status, record.slug))
                logger.info("%s %s", status, record.slug)
        session.commit()
    return counts, changes


def _write_json(path: Path, data) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding='utf-8')


def write_post(post: Post, output_dir: Path, preset: str = 'gfm-like') -> tuple[Path, Path]:
    """Write posts/<slug>/index.html and posts/<slug>/index.json. Returns (html_path, json_path)."""
    dest = output_dir / "posts" / post.slug
    dest.mkdir(parents=True, exist_ok=True)
    html_path = dest / "index.html"
    json_path = dest / "index.json"
    html_path.write_text(render_html(post.body, preset), encoding='utf-8')
    _write_json(json_path, emit_metadata_json(post, preset))
    return html_path, json_path


def run_export(
    session: Session,
    records: list,
    output_dir: Path,
    preset: str = 'gfm-like',
    include_drafts: bool = False,
    ) -> list[tuple[str, Path]]:
    """Render stored posts plus redirects.json and taxonomies.json. Returns (slug, html_path) pairs.

    The redirect map and term pages are built before anything is written, so an
    AliasConflict leaves output_dir untouched.
    """
    posts = [to_post(r) for r in records]
    index = SiteIndex.build(posts, include_drafts=include_drafts)
    redirects = index.redirects()
    taxonomies = {
        taxonomy: {term: [p.slug for p in members] for term, members in index.terms(taxonomy).items()}
        for taxonomy in TAXONOMIES
    }
    output_dir.mkdir(parents=True, exist_ok=True)

    results = []
    for post in index.by_date():
        html_path, _ = write_post(post, output_dir, preset)
        results.append((post.slug, html_path))

    _write_json(output_dir / "redirects.json", redirects)
    _write_json(output_dir / "taxonomies.json", taxonomies)
    logger.info("Exported %d post(s) to %s", len(results), output_dir)
    return results
