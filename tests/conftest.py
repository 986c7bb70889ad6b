"""Shared test fixtures for skillref-engine."""

import logging
from pathlib import Path

import pytest

from skillref_engine.outputs import KIND_RULES, OutputSpec

BASICS_MD = """\
---
title: The Basics
---
Every value in JavaScript has a set of behaviors. Running code shows them.

## Static type-checking

Static checking finds bugs before the code runs. TypeScript is a static type checker.

```ts twoslash
// @errors: 2349
const message = "hello!";

message();
```

### Example

```ts
function greet(person: string) {
  console.log(`Hello ${person}!`);
}
```
"""

NARROWING_MD = """\
---
title: Narrowing
---
## typeof guards

JavaScript supports a `typeof` operator. See [the handbook](/docs/handbook/intro.html) for more.

```ts
function padLeft(padding: number | string, input: string) {
  if (typeof padding === "number") {
    return " ".repeat(padding) + input;
  }
  return padding + input;
}
```

```python
print("ignored")
```
"""

DOS_AND_DONTS_MD = """\
# Do's and Don'ts

## General Types

### Number, String, Boolean, Symbol and Object

❌ **Don't** ever use the types `Number`, `String`, `Boolean`, `Symbol`, or `Object`.

```ts
/* WRONG */
function reverse(s: String): String;
```

✅ **Do** use the types `number`, `string`, `boolean`, and `symbol`.

```ts
/* OK */
function reverse(s: string): string;
```
"""


def write_docs(root: Path, files: dict[str, str]) -> Path:
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def docs_root(tmp_path):
    """A small documentation tree: two guide pages and a do/don't page."""
    return write_docs(tmp_path / "docs", {
        "guide/basics.md": BASICS_MD,
        "guide/narrowing.md": NARROWING_MD,
        "declaration-files/Do's and Don'ts.md": DOS_AND_DONTS_MD,
    })


@pytest.fixture
def specs():
    return {
        "guide.md": OutputSpec("guide.md", ("guide/*.md",), 60, ("code-examples", "gotchas")),
        "declaration-files.md": OutputSpec(
            "declaration-files.md", ("declaration-files/*.md",), 80, ("patterns",), KIND_RULES,
        ),
    }


@pytest.fixture
def skill_dir(tmp_path):
    return tmp_path / "skill"


@pytest.fixture
def manifest_file(tmp_path):
    return tmp_path / "manifest.json"


@pytest.fixture(autouse=True)
def _reset_skillref_logger():
    yield
    logger = logging.getLogger("skillref")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
