"""File discovery and post parsing: metadata block + opaque Markdown body"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from postpub.core.errors import MalformedMetadata, PostError
from postpub.core.frontmatter import load_metadata, split_front_matter
from postpub.core.models import Post, PostMeta
from postpub.core.utils.hashing import sha256
from postpub.core.utils.slug import slugify


logger = logging.getLogger(__name__)

MD_EXTENSIONS = {'.md', '.markdown'}


def _validate(data: dict) -> PostMeta:
    """Build PostMeta, reporting the first failing field as MalformedMetadata."""
    try:
        return PostMeta.model_validate(data)
    except ValidationError as e:
        err = e.errors()[0]
        field = str(err['loc'][0]) if err['loc'] else None
        message = "required field is missing" if err['type'] == 'missing' else err['msg']
        raise MalformedMetadata(field, message) from e


def _slug(meta: PostMeta, path: Optional[Path]) -> str:
    """Explicit slug field, else file stem, else title."""
    if meta.slug is not None:
        if not meta.slug.strip() or slugify(meta.slug) != meta.slug:
            raise MalformedMetadata('slug', f"must be a lowercase URL slug such as 'my-post', got {meta.slug!r}")
        return meta.slug
    if path is not None and slugify(path.stem):
        return slugify(path.stem)
    return slugify(meta.title)


def parse_text(text: str, path: Optional[Path] = None) -> Post:
    """Parse one document into a Post. Pure; raises a PostError subclass on bad input."""
    fmt, meta_text, body = split_front_matter(text)
    meta = _validate(load_metadata(meta_text, fmt))
    if not body.strip():
        raise MalformedMetadata('body', "post body is empty")
    return Post(
        slug=_slug(meta, path),
        path=str(path) if path is not None else None,
        format=fmt,
        meta=meta,
        body=body,
        hash=sha256(text),
    )


def parse_file(path: Path) -> Post:
    """Read a UTF-8 post file and parse it; errors carry the file path."""
    raw = path.read_text(encoding='utf-8')
    try:
        post = parse_text(raw, path)
    except PostError as e:
        e.with_path(str(path))
        raise
    logger.debug("Parsed %s (slug=%s)", path, post.slug)
    return post


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.markdown files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix in MD_EXTENSIONS)


def parse_dir(path: Path) -> list[Post]:
    """Parse all post files under path (file or directory); stops at the first error."""
    return [parse_file(p) for p in discover_files(path)]
