"""Tests for artifact assembly and budget enforcement."""

import logging

import pytest

from conftest import BASICS_MD, NARROWING_MD, write_docs
from skillref_engine.assemble import enforce_budget, generate_all, generate_artifact, resolve_sources
from skillref_engine.assemble.assembler import (
    TRUNCATION_MARKER,
    load_docs,
    split_doc_budgets,
    title_case,
)
from skillref_engine.extract import extract_doc
from skillref_engine.outputs import KIND_CHECKLIST, KIND_OPTIONS, KIND_TEMPLATES, OutputSpec


def _long_doc(sections: int, lines_per_section: int) -> str:
    out = []
    for i in range(sections):
        out.append(f"## Topic {i}")
        for j in range(lines_per_section - 1):
            out.append(f"Sentence {j} about topic {i}. It goes on.")
    return "\n".join(out)


class TestResolveSources:
    def test_glob_sorted(self, tmp_path):
        write_docs(tmp_path, {"guide/c.md": "c", "guide/a.md": "a", "guide/b.md": "b"})
        assert resolve_sources(["guide/*.md"], tmp_path) == ["guide/a.md", "guide/b.md", "guide/c.md"]

    def test_literal_kept_even_if_missing(self, tmp_path):
        assert resolve_sources(["missing.md"], tmp_path) == ["missing.md"]

    def test_deduplicated_in_first_seen_order(self, tmp_path):
        write_docs(tmp_path, {"guide/a.md": "a", "guide/b.md": "b"})
        assert resolve_sources(["guide/b.md", "guide/*.md"], tmp_path) == ["guide/b.md", "guide/a.md"]

    def test_recursive_glob(self, tmp_path):
        write_docs(tmp_path, {"docs/x/deep.md": "d", "docs/top.md": "t"})
        assert resolve_sources(["docs/**/*.md"], tmp_path) == ["docs/top.md", "docs/x/deep.md"]


class TestLoadDocs:
    def test_skips_unreadable(self, tmp_path, caplog):
        write_docs(tmp_path, {
            "ok.md": "# Fine",
            "bad-frontmatter.md": "---\ntitle: [oops\n---\nbody",
        })
        (tmp_path / "binary.md").write_bytes(b"\xff\xfe\x00\x81bad")
        with caplog.at_level(logging.WARNING, logger="skillref"):
            docs = load_docs(["ok.md", "missing.md", "bad-frontmatter.md", "binary.md"], tmp_path)
        assert [d.path for d in docs] == ["ok.md"]
        assert "missing.md" in caplog.text
        assert "bad-frontmatter.md" in caplog.text
        assert "binary.md" in caplog.text


class TestEnforceBudget:
    def test_within_budget_unchanged(self):
        content = "\n".join(["line"] * 10)
        assert enforce_budget(content, 10) == (content, False)

    def test_truncated_with_marker(self):
        content = "\n".join(f"line {i}" for i in range(30))
        result, truncated = enforce_budget(content, 10)
        assert truncated
        assert result.endswith(TRUNCATION_MARKER)
        assert len(result.split("\n")) == 12

    def test_cut_never_leaves_fence_open(self):
        content = "\n".join(["a", "```ts", "x", "y", "z", "```", "b"])
        result, truncated = enforce_budget(content, 4)
        assert truncated
        assert result == "a\n\n" + TRUNCATION_MARKER


class TestBudgets:
    def test_proportional_doc_split(self):
        docs = [
            extract_doc("a.md", "\n".join(["x"] * 200)),
            extract_doc("b.md", "\n".join(["y"] * 100)),
        ]
        assert split_doc_budgets(docs, 90) == [59, 29]

    def test_title_case(self):
        assert title_case("type-system-core.md") == "Type System Core"


class TestGenerateArtifact:
    def test_condensed_within_budget(self, tmp_path):
        write_docs(tmp_path, {"docs/a.md": _long_doc(10, 20), "docs/b.md": _long_doc(5, 20)})
        spec = OutputSpec("guide.md", ("docs/*.md",), 90, ("code-examples",))
        artifact = generate_artifact(spec, tmp_path)
        assert artifact.source_files == ("docs/a.md", "docs/b.md")
        assert artifact.line_count <= spec.max_lines + 2
        assert artifact.content.startswith("# Guide\n")
        lines = artifact.content.split("\n")
        assert "## a" in lines
        assert "## b" in lines

    def test_tight_budget_truncates(self, tmp_path):
        write_docs(tmp_path, {"docs/a.md": _long_doc(30, 10)})
        spec = OutputSpec("tiny.md", ("docs/a.md",), 8)
        artifact = generate_artifact(spec, tmp_path)
        assert artifact.line_count <= 10

    def test_custom_title(self, docs_root):
        spec = OutputSpec("guide.md", ("guide/*.md",), 60, title="Field Guide")
        assert generate_artifact(spec, docs_root).content.startswith("# Field Guide\n")

    def test_independent_of_creation_order(self, tmp_path):
        first = write_docs(tmp_path / "one", {"g/basics.md": BASICS_MD, "g/narrowing.md": NARROWING_MD})
        second = write_docs(tmp_path / "two", {"g/narrowing.md": NARROWING_MD, "g/basics.md": BASICS_MD})
        spec = OutputSpec("guide.md", ("g/*.md",), 40)
        assert generate_artifact(spec, first).content == generate_artifact(spec, second).content

    def test_deterministic(self, docs_root, specs):
        first = [a.content for a in generate_all(specs, docs_root)]
        second = [a.content for a in generate_all(specs, docs_root)]
        assert first == second

    def test_missing_literal_source_skipped(self, docs_root):
        spec = OutputSpec("guide.md", ("guide/basics.md", "guide/gone.md"), 60)
        artifact = generate_artifact(spec, docs_root)
        assert artifact.source_files == ("guide/basics.md",)
        assert "The Basics" in artifact.content

    def test_rules_kind(self, docs_root, specs):
        artifact = generate_artifact(specs["declaration-files.md"], docs_root)
        assert artifact.content.startswith("# Declaration Files\n")
        assert "Wrong:" in artifact.content

    def test_static_kinds(self, docs_root):
        checklist = generate_artifact(
            OutputSpec("review.md", ("declaration-files/*.md",), 250, kind=KIND_CHECKLIST), docs_root,
        )
        assert "## Declaration File Rules" in checklist.content
        templates = generate_artifact(OutputSpec("t.md", ("guide/*.md",), 300, kind=KIND_TEMPLATES), docs_root)
        assert "```json" in templates.content
        options = generate_artifact(OutputSpec("o.md", ("guide/*.md",), 300, kind=KIND_OPTIONS), docs_root)
        assert options.content.startswith("# TSConfig Options Reference")

    def test_unknown_kind(self, docs_root):
        with pytest.raises(ValueError, match="Unknown output kind"):
            generate_artifact(OutputSpec("x.md", ("guide/*.md",), 10, kind="bogus"), docs_root)
