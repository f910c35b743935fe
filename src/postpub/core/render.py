"""Markdown body rendering and block outline via markdown-it"""

import re
from typing import Optional

from markdown_it import MarkdownIt
from pydantic import BaseModel


BLOCK_TYPES: dict[str, str] = {
    'heading_open':      'heading',
    'paragraph_open':    'paragraph',
    'bullet_list_open':  'list',
    'ordered_list_open': 'list',
    'fence':             'code',
    'code_block':        'code',
    'table_open':        'table',
    'html_block':        'html',
    'blockquote_open':   'quote',
}

_WORD_RE = re.compile(r"\w+(?:['’-]\w+)*")


class Block(BaseModel):
    """A top-level block of a post body."""
    type:     str
    content:  str
    level:    Optional[int] = None  # heading level (1-6)
    language: Optional[str] = None  # fenced code info string, first word only


def make_parser(preset: str = 'gfm-like') -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def render_html(body: str, preset: str = 'gfm-like') -> str:
    """Render a Markdown body to HTML."""
    return make_parser(preset).render(body)


def _heading_level(token) -> Optional[int]:
    if token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def _source_slice(token, source_lines: list[str]) -> str:
    """Raw source for a block via token.map; fallback to token.content."""
    if token.map:
        start, end = token.map
        return ''.join(source_lines[start:end]).rstrip()
    return token.content.rstrip()


def outline(body: str, preset: str = 'gfm-like') -> list[Block]:
    """Return the body's top-level blocks in order (nested list/quote content is not split)."""
    tokens = make_parser(preset).parse(body)
    source_lines = body.splitlines(keepends=True)
    blocks: list[Block] = []
    for tok in tokens:
        if tok.level != 0:
            continue
        block_type = BLOCK_TYPES.get(tok.type)
        if block_type is None:
            continue
        language = tok.info.split()[0] if tok.type == 'fence' and tok.info.strip() else None
        blocks.append(Block(
            type=block_type,
            content=_source_slice(tok, source_lines),
            level=_heading_level(tok) if block_type == 'heading' else None,
            language=language,
        ))
    return blocks


def _heading_text(content: str) -> str:
    line = content.splitlines()[0]
    line = re.sub(r"^\s*#{1,6}\s*", "", line)
    return re.sub(r"\s+#+\s*$", "", line).strip()


def headings(blocks: list[Block]) -> list[tuple[int, str]]:
    """(level, text) for each heading block, ATX markers stripped."""
    return [(b.level, _heading_text(b.content)) for b in blocks if b.type == 'heading']


def code_languages(blocks: list[Block]) -> list[str]:
    """Distinct fenced-code language hints in first-seen order."""
    return list(dict.fromkeys(b.language for b in blocks if b.language))


def word_count(blocks: list[Block]) -> int:
    """Count words in prose blocks (code and raw HTML excluded)."""
    return sum(len(_WORD_RE.findall(b.content)) for b in blocks if b.type not in ('code', 'html'))
