"""Tests for output spec defaults and YAML loading."""

import pytest

from skillref_engine.outputs import (
    DEFAULT_OUTPUT_SPECS,
    KIND_CHECKLIST,
    KIND_CONDENSED,
    KIND_OPTIONS,
    KIND_RULES,
    KIND_TEMPLATES,
    load_output_specs,
    scan_patterns_for,
    spec_from_dict,
)


class TestDefaults:
    def test_ten_artifacts(self):
        assert len(DEFAULT_OUTPUT_SPECS) == 10
        assert all(spec.name.endswith(".md") for spec in DEFAULT_OUTPUT_SPECS.values())

    def test_budgets_and_kinds(self):
        assert DEFAULT_OUTPUT_SPECS["type-system-core.md"].max_lines == 350
        assert DEFAULT_OUTPUT_SPECS["type-system-core.md"].kind == KIND_CONDENSED
        assert DEFAULT_OUTPUT_SPECS["declaration-files.md"].kind == KIND_RULES
        assert DEFAULT_OUTPUT_SPECS["code-review-checklist.md"].kind == KIND_CHECKLIST
        assert DEFAULT_OUTPUT_SPECS["project-templates.md"].kind == KIND_TEMPLATES
        assert DEFAULT_OUTPUT_SPECS["tsconfig-options-reference.md"].kind == KIND_OPTIONS

    def test_priorities_are_ordered_tuples(self):
        spec = DEFAULT_OUTPUT_SPECS["utility-types.md"]
        assert spec.priorities == ("signatures", "code-examples", "gotchas")


class TestSpecFromDict:
    def test_string_source_and_camel_case_budget(self):
        spec = spec_from_dict("a.md", {"sources": "docs/a.md", "maxLines": 40})
        assert spec.sources == ("docs/a.md",)
        assert spec.max_lines == 40
        assert spec.kind == KIND_CONDENSED

    def test_missing_sources(self):
        with pytest.raises(ValueError, match="no sources"):
            spec_from_dict("a.md", {"max_lines": 10})

    @pytest.mark.parametrize("max_lines", [None, 0, -5, "100"])
    def test_bad_budget(self, max_lines):
        with pytest.raises(ValueError, match="max_lines"):
            spec_from_dict("a.md", {"sources": ["x.md"], "max_lines": max_lines})

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="unknown kind"):
            spec_from_dict("a.md", {"sources": ["x.md"], "max_lines": 10, "kind": "poetry"})

    def test_unknown_priority(self):
        with pytest.raises(ValueError, match="unknown priorities"):
            spec_from_dict("a.md", {"sources": ["x.md"], "max_lines": 10, "priorities": ["speed"]})


class TestLoadOutputSpecs:
    def test_outputs_key(self, tmp_path):
        config = tmp_path / "outputs.yaml"
        config.write_text(
            "outputs:\n"
            "  guide.md:\n"
            "    sources: ['guide/*.md']\n"
            "    max_lines: 60\n"
            "    priorities: [code-examples, gotchas]\n"
            "    title: Field Guide\n"
            "  rules.md:\n"
            "    sources: ['rules/*.md']\n"
            "    max_lines: 80\n"
            "    kind: rules\n"
        )
        specs = load_output_specs(config)
        assert list(specs) == ["guide.md", "rules.md"]
        assert specs["guide.md"].title == "Field Guide"
        assert specs["guide.md"].priorities == ("code-examples", "gotchas")
        assert specs["rules.md"].kind == KIND_RULES

    def test_top_level_mapping(self, tmp_path):
        config = tmp_path / "outputs.yaml"
        config.write_text("guide.md:\n  sources: [a.md]\n  max_lines: 10\n")
        assert load_output_specs(config)["guide.md"].sources == ("a.md",)

    def test_not_a_mapping(self, tmp_path):
        config = tmp_path / "outputs.yaml"
        config.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_output_specs(config)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_output_specs(tmp_path / "nope.yaml")


class TestScanPatterns:
    def test_patterns_from_specs(self, specs):
        assert scan_patterns_for(specs) == ("guide/*.md", "declaration-files/*.md")

    def test_shared_patterns_listed_once(self):
        specs = {
            "a.md": spec_from_dict("a.md", {"sources": ["docs/*.md", "x.md"], "max_lines": 10}),
            "b.md": spec_from_dict("b.md", {"sources": ["docs/*.md"], "max_lines": 10}),
        }
        assert scan_patterns_for(specs) == ("docs/*.md", "x.md")
