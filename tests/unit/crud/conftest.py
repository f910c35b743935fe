"""Shared fixtures for crud unit tests"""

from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from postpub.core.parse import parse_text
import postpub.crud.models  # noqa: F401


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="make_post")
def make_post_fixture():
    """Build a parsed Post with a source path from a few metadata values."""
    def _make(path="content/posts/dispatchers.md", title="Dispatchers", date="2023-06-04",
              tags=("kotlin", "android"), series=(), aliases=(), body="Body text.\n", draft=False):
        def arr(values):
            return "[" + ", ".join(f'"{v}"' for v in values) + "]"
        text = (
            "+++\n"
            f'author = "Jane Doe"\ntitle = "{title}"\ndate = "{date}"\n'
            f"tags = {arr(tags)}\nseries = {arr(series)}\naliases = {arr(aliases)}\n"
            f"draft = {'true' if draft else 'false'}\n"
            "+++\n\n" + body
        )
        return parse_text(text, Path(path))
    return _make
