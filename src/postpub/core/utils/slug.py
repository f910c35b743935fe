"""Slug generation for post identifiers and taxonomy terms"""

import re


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def url_path(value: str) -> str:
    """Normalise a URL path to '/a/b/' form (leading and trailing slash, no doubles)."""
    parts = [p for p in value.strip().split('/') if p]
    return '/' + '/'.join(parts) + '/' if parts else '/'
