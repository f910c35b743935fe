"""Post persistence: upsert, term/alias replacement, and index queries"""

from collections import Counter
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from postpub.core.errors import PostError
from postpub.core.models import TAXONOMIES, Post, PostMeta
from postpub.core.utils.slug import slugify, url_path
from postpub.crud.models import PostAlias, PostRecord, PostTerm


def get_by_path(session: Session, path: str) -> PostRecord | None:
    """Return the PostRecord with the given source path, or None if not found."""
    return session.exec(select(PostRecord).where(PostRecord.path == path)).one_or_none()


def get_by_slug(session: Session, slug: str) -> PostRecord | None:
    """Return the PostRecord with the given slug, or None if not found."""
    return session.exec(select(PostRecord).where(PostRecord.slug == slug)).one_or_none()


def get_all_posts(session: Session, include_drafts: bool = True) -> list[PostRecord]:
    """Return all posts, newest first."""
    stmt = select(PostRecord).order_by(PostRecord.date.desc(), PostRecord.title)
    if not include_drafts:
        stmt = stmt.where(PostRecord.draft == False)  # noqa: E712
    return list(session.exec(stmt).all())


def get_last_committed(session: Session) -> list[PostRecord]:
    """Return posts from the most recent commit batch (MAX committed_at)."""
    max_ts = session.exec(select(func.max(PostRecord.committed_at))).one()
    if max_ts is None:
        return []
    stmt = select(PostRecord).where(PostRecord.committed_at == max_ts).order_by(PostRecord.date.desc())
    return list(session.exec(stmt).all())


def get_by_term(session: Session, taxonomy: str, term: str) -> list[PostRecord]:
    """Return posts carrying a tag/category/series (matched by slug), newest first."""
    stmt = (
        select(PostRecord)
        .distinct()
        .join(PostTerm, PostTerm.post_id == PostRecord.id)
        .where(PostTerm.taxonomy == taxonomy)
        .where(PostTerm.term_slug == slugify(term))
        .order_by(PostRecord.date.desc(), PostRecord.title)
    )
    return list(session.exec(stmt).all())


def list_terms(session: Session, taxonomy: str) -> dict[str, int]:
    """Return term -> number of posts for a taxonomy, most used first then alphabetical."""
    if taxonomy not in TAXONOMIES:
        raise ValueError(f"Unknown taxonomy: {taxonomy}")
    rows = session.exec(select(PostTerm.term_slug, PostTerm.post_id).where(PostTerm.taxonomy == taxonomy)).all()
    counts = Counter(slug for slug, _ in set(rows))
    return dict(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))


def resolve_alias(session: Session, alias: str) -> PostRecord | None:
    """Return the post an alias path redirects to, or None."""
    row = session.get(PostAlias, url_path(alias))
    return session.get(PostRecord, row.post_id) if row else None


def list_aliases(session: Session) -> list[tuple[str, str]]:
    """Return sorted (alias path, post slug) pairs."""
    stmt = select(PostAlias.path, PostRecord.slug).join(PostRecord, PostAlias.post_id == PostRecord.id)
    return sorted((path, slug) for path, slug in session.exec(stmt).all())


def _replace_links(session: Session, record: PostRecord, post: Post) -> None:
    """Delete the post's terms and aliases and insert the current ones."""
    for row in session.exec(select(PostTerm).where(PostTerm.post_id == record.id)).all():
        session.delete(row)
    for row in session.exec(select(PostAlias).where(PostAlias.post_id == record.id)).all():
        session.delete(row)
    session.flush()

    for taxonomy in TAXONOMIES:
        for position, term in enumerate(post.terms(taxonomy)):
            session.add(PostTerm(
                post_id=record.id, taxonomy=taxonomy, term=term,
                term_slug=slugify(term), position=position,
            ))

    for alias in post.meta.aliases:
        path = url_path(alias)
        owner = session.get(PostAlias, path)
        if owner is not None and owner.post_id == record.id:
            continue
        if owner is not None:
            other = session.get(PostRecord, owner.post_id)
            raise PostError(f"alias {path} already used by {other.slug}", post.path)
        session.add(PostAlias(path=path, alias=alias, post_id=record.id))
        session.flush()

    session.flush()


def _apply(record: PostRecord, post: Post) -> None:
    record.slug = post.slug
    record.path = post.path
    record.title = post.meta.title
    record.author = post.meta.author
    record.date = post.meta.date
    record.description = post.meta.description
    record.draft = post.meta.draft
    record.format = post.format
    record.meta = post.meta.model_dump(mode='json')
    record.body = post.body
    record.hash = post.hash


def commit_post(
    session: Session,
    post: Post,
    committed_at: datetime | None = None,
    ) -> tuple[PostRecord, str]:
    """Upsert a parsed Post keyed by its source path.

    Returns (record, status) where status is 'created', 'updated', or 'unchanged'.
    Flushes but does not commit; caller controls the transaction.
    """
    if post.path is None:
        raise ValueError("Only posts read from a file can be committed")

    clash = get_by_slug(session, post.slug)
    if clash is not None and clash.path != post.path:
        raise PostError(f"slug '{post.slug}' already used by {clash.path}", post.path)

    record = get_by_path(session, post.path)
    if record:
        if record.hash == post.hash:
            return record, 'unchanged'
        _apply(record, post)
        record.updated_at = datetime.now()
        record.committed_at = committed_at
        session.add(record)
        session.flush()
        _replace_links(session, record, post)
        return record, 'updated'

    record = PostRecord(
        slug=post.slug, path=post.path, title=post.meta.title, author=post.meta.author,
        date=post.meta.date, body=post.body, hash=post.hash, committed_at=committed_at,
    )
    _apply(record, post)
    session.add(record)
    session.flush()
    _replace_links(session, record, post)
    return record, 'created'


def to_post(record: PostRecord) -> Post:
    """Rebuild a core Post from its stored row (for rendering and emit)."""
    return Post(
        slug=record.slug,
        path=record.path,
        format=record.format,
        meta=PostMeta.model_validate(record.meta or {}),
        body=record.body,
        hash=record.hash,
    )
