"""Database table definitions for indexed posts, taxonomy terms, and aliases"""

import datetime as dt
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, JSON, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel


class PostRecord(SQLModel, table=True):
    """A committed post; the source file remains the source of truth"""
    __tablename__ = "posts"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    slug: str = Field(..., sa_column=Column(String, nullable=False, unique=True, index=True))
    path: str = Field(..., sa_column=Column(Text, nullable=False, unique=True))
    title: str = Field(..., nullable=False)
    author: str = Field(..., nullable=False)
    date: dt.date = Field(..., index=True, nullable=False)
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    draft: bool = Field(default=False, nullable=False)
    format: str = Field(default="toml", nullable=False)
    meta: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    body: str = Field(..., sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    created_at: dt.datetime = Field(default_factory=dt.datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: dt.datetime = Field(default_factory=dt.datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    committed_at: Optional[dt.datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))


class PostTerm(SQLModel, table=True):
    """One tag, category, or series value of a post, in authored order"""
    __tablename__ = "post_terms"
    __table_args__ = (UniqueConstraint("post_id", "taxonomy", "position", name="uq_postterm_pos"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    post_id: UUID = Field(..., foreign_key="posts.id", index=True, nullable=False)
    taxonomy: str = Field(..., index=True, nullable=False, description="tags, categories, or series")
    term: str = Field(..., nullable=False, description="Value as written by the author")
    term_slug: str = Field(..., index=True, nullable=False)
    position: int = Field(..., nullable=False, description="Position within the post's list")


class PostAlias(SQLModel, table=True):
    """An alternate URL path that redirects to a post"""
    __tablename__ = "post_aliases"
    path: str = Field(primary_key=True, description="Normalized '/a/b/' path")
    alias: str = Field(..., nullable=False, description="Alias exactly as written")
    post_id: UUID = Field(..., foreign_key="posts.id", index=True, nullable=False)
