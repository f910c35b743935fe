"""Integration tests for the check -> commit -> export pipeline.

Content tree used throughout
----------------------------
    content/posts/2023/dispatchers.md   TOML block, series "Coroutines", alias
    content/posts/2023/testing.md       YAML block, same series, later date
    content/posts/drafts/flows.md       TOML block, draft = true

Expected site after export with default settings:
    posts/testing/index.html
    posts/dispatchers/index.html        (drafts are skipped)
    redirects.json                      {"/2023/06/04/dispatchers/": "/posts/dispatchers/"}
    taxonomies.json                     series "coroutines": testing, dispatchers
"""

import json

import pytest
from sqlmodel import Session

from postpub.core.emit import emit_post
from postpub.core.parse import parse_file
from postpub.core.pipeline import run_check, run_commit, run_export
from postpub.crud.database import init_db, make_engine
from postpub.crud.posts import get_all_posts


DISPATCHERS = '''\
+++
author = "Jane Doe"
title = "Dispatchers in practice"
date = 2023-06-04
tags = ["kotlin", "android", "coroutines"]
categories = ["kotlin"]
series = ["Coroutines"]
aliases = ["/2023/06/04/dispatchers/"]
+++

# Dispatchers in practice

```kotlin
viewModelScope.launch(Dispatchers.Default) { sort(items) }
```
'''

TESTING = '''\
---
author: Jane Doe
title: Testing coroutines
date: 2023-07-12
tags: [kotlin, testing]
series: [Coroutines]
---

# Testing coroutines

> runTest skips delays.
'''

FLOWS = '''\
+++
author = "Jane Doe"
title = "Flows"
date = 2023-09-01
draft = true
+++

Work in progress.
'''


@pytest.fixture(name="content")
def content_fixture(tmp_path):
    root = tmp_path / "content" / "posts"
    (root / "2023").mkdir(parents=True)
    (root / "drafts").mkdir()
    (root / "2023" / "dispatchers.md").write_text(DISPATCHERS, encoding="utf-8")
    (root / "2023" / "testing.md").write_text(TESTING, encoding="utf-8")
    (root / "drafts" / "flows.md").write_text(FLOWS, encoding="utf-8")
    return root


@pytest.fixture(name="engine")
def engine_fixture(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path}/site.db")
    init_db(engine)
    return engine


def test_full_build(content, engine, tmp_path):
    assert run_check(content) == []

    counts, _ = run_commit(engine, content)
    assert counts == {"created": 3, "updated": 0, "unchanged": 0}

    out = tmp_path / "public"
    with Session(engine) as session:
        results = run_export(session, get_all_posts(session), out)

    assert [slug for slug, _ in results] == ["testing", "dispatchers"]
    assert not (out / "posts" / "flows").exists()
    assert json.loads((out / "redirects.json").read_text()) == {
        "/2023/06/04/dispatchers/": "/posts/dispatchers/",
    }
    taxonomies = json.loads((out / "taxonomies.json").read_text())
    assert taxonomies["series"] == {"coroutines": ["testing", "dispatchers"]}
    assert taxonomies["categories"] == {"kotlin": ["dispatchers"]}


def test_build_with_drafts(content, engine, tmp_path):
    run_commit(engine, content)
    out = tmp_path / "public"
    with Session(engine) as session:
        results = run_export(session, get_all_posts(session), out, include_drafts=True)
    assert [slug for slug, _ in results] == ["flows", "testing", "dispatchers"]


def test_normalized_sources_reindex_as_unchanged_metadata(content, engine):
    """Rewriting every post with a normalized block keeps its indexed metadata."""
    run_commit(engine, content)
    with Session(engine) as session:
        before = {r.slug: r.meta for r in get_all_posts(session)}

    for path in sorted(content.rglob("*.md")):
        path.write_text(emit_post(parse_file(path), "toml"), encoding="utf-8")

    counts, _ = run_commit(engine, content)
    assert counts["created"] == 0
    with Session(engine) as session:
        after = {r.slug: r.meta for r in get_all_posts(session)}
    assert after == before


def test_check_flags_broken_post_without_stopping(content):
    (content / "2023" / "broken.md").write_text('+++\ntitle = "No author"\ndate = 2023-01-01\n+++\n\nBody\n')
    issues = run_check(content)
    assert [(i.field, i.message) for i in issues] == [("author", "required field is missing")]
