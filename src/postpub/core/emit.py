"""Post serialization: normalized source text and metadata sidecar JSON"""

from typing import Any, Optional

from postpub.core.frontmatter import dump_metadata, wrap
from postpub.core.models import Post
from postpub.core.render import code_languages, headings, outline, word_count


def emit_post(post: Post, fmt: Optional[str] = None) -> str:
    """Return the post as source text with a normalized metadata block.

    fmt defaults to the post's own front matter format.
    """
    fmt = fmt or post.format
    header = wrap(dump_metadata(post.meta.to_metadata(), fmt), fmt)
    return f"{header}\n{post.body}"


def emit_metadata_json(post: Post, preset: str = 'gfm-like') -> dict[str, Any]:
    """Build the sidecar dict consumed by indexes and redirect maps."""
    blocks = outline(post.body, preset)
    return {
        "slug": post.slug,
        "url": post.url,
        "path": post.path,
        "hash": post.hash,
        "metadata": post.meta.model_dump(mode='json'),
        "headings": [{"level": level, "text": text} for level, text in headings(blocks)],
        "code_languages": code_languages(blocks),
        "word_count": word_count(blocks),
    }
