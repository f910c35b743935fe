"""Validation errors raised while parsing and indexing posts"""

from typing import Optional


class PostError(ValueError):
    """Base class for authoring mistakes found in a post file."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.message = message
        self.path = path
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message

    def with_path(self, path: str) -> "PostError":
        """Attach a source path and return self (for re-raising from parse_file)."""
        self.path = path
        self.args = (str(self),)
        return self


class MissingDelimiter(PostError):
    """The metadata block is absent or never closed."""


class MalformedMetadata(PostError):
    """A metadata field is missing or does not parse to its declared type."""

    def __init__(self, field: Optional[str], message: str, path: Optional[str] = None):
        self.field = field
        super().__init__(message, path)

    def __str__(self) -> str:
        detail = f"{self.field}: {self.message}" if self.field else self.message
        return f"{self.path}: {detail}" if self.path else detail


class AliasConflict(PostError):
    """Two posts claim the same alias, or an alias shadows a post URL."""

    def __init__(self, alias: str, slugs: list[str]):
        self.alias = alias
        self.slugs = slugs
        super().__init__(f"alias {alias} claimed by {', '.join(slugs)}")
