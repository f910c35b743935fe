"""Shared fixtures for core unit tests"""

import pytest


DISPATCHERS_TOML = '''\
+++
author = "Jane Doe"
title = "Choosing the right dispatcher"
date = "2023-06-04"
description = "When to use IO, Default, and Main."
tags = ["kotlin", "android", "coroutines"]
categories = ["kotlin"]
series = ["Coroutines in practice"]
aliases = ["/2023/06/dispatchers/"]
+++

# Dispatchers

A dispatcher decides **which thread** runs a coroutine.

> Never block the main thread.

```kotlin
withContext(Dispatchers.IO) {
    repository.load()
}
```

## Testing

Inject the dispatcher so tests can swap it.
'''

TESTING_YAML = '''\
---
author: Jane Doe
title: Testing coroutines
date: 2023-07-12
tags:
  - kotlin
  - testing
  - kotlin
---

# runTest

Use `runTest` from kotlinx-coroutines-test.
'''


@pytest.fixture(name="toml_text")
def toml_text_fixture():
    return DISPATCHERS_TOML


@pytest.fixture(name="yaml_text")
def yaml_text_fixture():
    return TESTING_YAML


@pytest.fixture(name="content_dir")
def content_dir_fixture(tmp_path):
    """A small content tree with one TOML and one YAML post."""
    root = tmp_path / "content" / "posts"
    root.mkdir(parents=True)
    (root / "dispatchers.md").write_text(DISPATCHERS_TOML, encoding="utf-8")
    (root / "testing-coroutines.md").write_text(TESTING_YAML, encoding="utf-8")
    return root
