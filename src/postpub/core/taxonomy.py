"""In-memory site index: date ordering, taxonomy term pages, series, alias redirects"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from postpub.core.errors import AliasConflict
from postpub.core.models import TAXONOMIES, Post
from postpub.core.utils.slug import slugify, url_path


logger = logging.getLogger(__name__)


def _newest_first(posts: Iterable[Post]) -> list[Post]:
    # stable two-pass sort: title ascending, then date descending
    return sorted(sorted(posts, key=lambda p: p.meta.title), key=lambda p: p.meta.date, reverse=True)


@dataclass
class SiteIndex:
    """Navigation views a static site generator needs from a set of posts."""
    posts: list[Post] = field(default_factory=list)

    @classmethod
    def build(cls, posts: Iterable[Post], include_drafts: bool = False) -> "SiteIndex":
        kept = [p for p in posts if include_drafts or not p.meta.draft]
        return cls(posts=_newest_first(kept))

    def by_date(self) -> list[Post]:
        """Posts newest first; same-day posts ordered by title."""
        return list(self.posts)

    def terms(self, taxonomy: str) -> dict[str, list[Post]]:
        """Map term slug -> posts carrying that term, newest first.

        Terms appear in the order first seen walking posts newest first. Terms
        with an empty slug are skipped; distinct terms sharing a slug are merged.
        """
        if taxonomy not in TAXONOMIES:
            raise ValueError(f"Unknown taxonomy: {taxonomy}")
        pages: dict[str, list[Post]] = {}
        seen: dict[str, str] = {}
        for post in self.posts:
            for term in post.terms(taxonomy):
                key = slugify(term)
                if not key:
                    logger.warning("Skipping %s term %r of %s: it has no URL slug", taxonomy, term, post.slug)
                    continue
                first = seen.setdefault(key, term)
                if first != term:
                    logger.warning("%s terms %r and %r share the slug %r; merged", taxonomy, first, term, key)
                bucket = pages.setdefault(key, [])
                if post not in bucket:
                    bucket.append(post)
        return pages

    def series_order(self, name: str) -> list[Post]:
        """Posts in a series, oldest first (reading order)."""
        return list(reversed(self.terms('series').get(slugify(name), [])))

    def redirects(self) -> dict[str, str]:
        """Map each alias path to its post URL.

        Raises AliasConflict if two posts share an alias or an alias equals a post URL.
        """
        urls = {p.url: p.slug for p in self.posts}
        owners: dict[str, list[str]] = {}
        for post in self.posts:
            for alias in post.meta.aliases:
                owners.setdefault(url_path(alias), []).append(post.slug)

        redirects = {}
        for alias, slugs in owners.items():
            distinct = list(dict.fromkeys(slugs))
            if len(distinct) > 1:
                raise AliasConflict(alias, distinct)
            if alias in urls and urls[alias] != distinct[0]:
                raise AliasConflict(alias, [urls[alias], distinct[0]])
            if alias in urls:
                logger.warning("Alias %s of %s points at its own URL; skipped", alias, distinct[0])
                continue
            redirects[alias] = f"/posts/{distinct[0]}/"
        return redirects
