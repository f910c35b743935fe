"""Metadata block detection and TOML/YAML encoding"""

import logging
import re
import tomllib
from typing import Any

import tomli_w
import yaml

from postpub.core.errors import MalformedMetadata, MissingDelimiter


logger = logging.getLogger(__name__)

DELIMITERS = {'toml': '+++', 'yaml': '---'}
FIELD_ORDER = ('author', 'title', 'date', 'description', 'tags', 'categories', 'series', 'aliases')

_OPEN_RE = re.compile(r'^(\+\+\+|---)[ \t]*\r?\n')


def split_front_matter(text: str) -> tuple[str, str, str]:
    """Return (fmt, metadata_text, body) for a document.

    The opening delimiter must be the first line. The body has leading blank
    lines removed and is otherwise untouched.
    """
    text = text.lstrip('\ufeff')
    m = _OPEN_RE.match(text)
    if not m:
        raise MissingDelimiter("metadata block must start with '+++' (TOML) or '---' (YAML)")
    marker = m.group(1)
    fmt = 'toml' if marker == '+++' else 'yaml'

    close_re = re.compile(rf'^{re.escape(marker)}[ \t]*(?:\r?\n|\Z)', re.MULTILINE)
    close = close_re.search(text, m.end())
    if not close:
        raise MissingDelimiter(f"metadata block opened with '{marker}' is never closed")

    meta_text = text[m.end():close.start()]
    body = text[close.end():].lstrip('\r\n')
    logger.debug("Found %s metadata block (%d chars)", fmt, len(meta_text))
    return fmt, meta_text, body


def load_metadata(meta_text: str, fmt: str) -> dict[str, Any]:
    """Decode the metadata block; raise MalformedMetadata if it is not a mapping."""
    try:
        if fmt == 'toml':
            data = tomllib.loads(meta_text)
        else:
            data = yaml.safe_load(meta_text) or {}
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise MalformedMetadata(None, f"invalid {fmt.upper()} metadata: {e}") from e
    if not isinstance(data, dict):
        raise MalformedMetadata(None, f"metadata must be a mapping, got {type(data).__name__}")
    return data


def _ordered(data: dict[str, Any]) -> dict[str, Any]:
    """Known fields first in FIELD_ORDER, then the rest in input order."""
    out = {k: data[k] for k in FIELD_ORDER if k in data}
    out.update((k, v) for k, v in data.items() if k not in out)
    return out


def _drop_none(value: Any) -> Any:
    # TOML has no null: remove None at every depth
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(v) for v in value if v is not None]
    return value


def dump_metadata(data: dict[str, Any], fmt: str) -> str:
    """Encode metadata to TOML or YAML text (without delimiters).

    YAML keeps null values; TOML cannot represent them, so they are dropped.
    """
    data = _ordered(data)
    if fmt == 'toml':
        return tomli_w.dumps(_drop_none(data))
    if fmt == 'yaml':
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    raise ValueError(f"Unknown front matter format: {fmt}")


def wrap(meta_text: str, fmt: str) -> str:
    """Surround encoded metadata with the delimiter lines for fmt."""
    marker = DELIMITERS[fmt]
    if meta_text and not meta_text.endswith('\n'):
        meta_text += '\n'
    return f"{marker}\n{meta_text}{marker}\n"
