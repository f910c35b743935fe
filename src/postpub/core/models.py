"""Post metadata and parsed post models"""

from dataclasses import dataclass
import datetime as dt
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


TAXONOMIES = ('tags', 'categories', 'series')


class PostMeta(BaseModel):
    """Publication attributes declared in a post's metadata block.

    Unknown keys are kept as extra fields so a post can be re-serialized
    without losing anything the author wrote.
    """
    model_config = ConfigDict(extra='allow')

    title:       str
    author:      str
    date:        dt.date
    description: Optional[str] = None
    tags:        list[str] = Field(default_factory=list)
    categories:  list[str] = Field(default_factory=list)
    series:      list[str] = Field(default_factory=list)
    aliases:     list[str] = Field(default_factory=list)   # alternate URL paths, kept verbatim
    draft:       bool = False
    slug:        Optional[str] = None

    @field_validator('title', 'author')
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator('date', mode='before')
    @classmethod
    def _parse_date(cls, v: Any) -> Any:
        # TOML/YAML hand back datetime for timestamps; strings may carry a time part too
        if isinstance(v, dt.datetime):
            return v.date()
        if isinstance(v, str):
            text = v.strip()
            try:
                return dt.date.fromisoformat(text)
            except ValueError:
                pass
            try:
                return dt.datetime.fromisoformat(text.replace('Z', '+00:00')).date()
            except ValueError:
                raise ValueError(f"not a calendar date: {v!r}") from None
        return v

    @field_validator('tags', 'categories', 'series', 'aliases', mode='before')
    @classmethod
    def _sequence(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            raise ValueError("must be a list of strings, not a single string")
        return v

    def to_metadata(self) -> dict[str, Any]:
        """Return metadata as a plain dict with empty/default fields omitted."""
        return self.model_dump(exclude_defaults=True)


class Post(BaseModel):
    """A parsed post: validated metadata plus the opaque Markdown body."""
    slug:   str
    path:   Optional[str] = None
    format: Literal['toml', 'yaml'] = 'toml'
    meta:   PostMeta
    body:   str
    hash:   str                     # sha256 of the raw file text

    @property
    def url(self) -> str:
        return f"/posts/{self.slug}/"

    def terms(self, taxonomy: str) -> list[str]:
        """Return the post's values for tags, categories, or series."""
        if taxonomy not in TAXONOMIES:
            raise ValueError(f"Unknown taxonomy: {taxonomy}")
        return list(getattr(self.meta, taxonomy))


@dataclass
class PostIssue:
    """One validation failure reported by a check run."""
    path:    str
    field:   Optional[str]
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.field}: {self.message}" if self.field else f"{self.path}: {self.message}"
