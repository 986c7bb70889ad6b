"""Tests for budget allocation and document condensation."""

from conftest import BASICS_MD, NARROWING_MD
from skillref_engine.condense import condense_doc, condense_section
from skillref_engine.condense.condenser import allocate_budgets, digest_prose, first_sentence
from skillref_engine.extract import extract_doc
from skillref_engine.extract.models import Section

PITFALLS_BODY = (
    "First paragraph sentence. More detail here.\n"
    "\n"
    "Second paragraph. Extra words.\n"
    "\n"
    "- Never use `any` here.\n"
    "\n"
    "Third paragraph."
)


class TestAllocateBudgets:
    def test_proportional(self):
        assert allocate_budgets([200, 100], 88) == [59, 29]

    def test_zero_weights_split_evenly(self):
        assert allocate_budgets([0, 0], 10) == [5, 5]

    def test_floor(self):
        assert allocate_budgets([1, 99], 10, floor=3) == [3, 10]

    def test_empty(self):
        assert allocate_budgets([], 10) == []


class TestFirstSentence:
    def test_first_sentence(self):
        assert first_sentence("This is one. And two.") == "This is one."

    def test_joins_wrapped_lines(self):
        assert first_sentence("Wrapped\nsentence here! Next.") == "Wrapped sentence here!"

    def test_strips_list_marker(self):
        assert first_sentence("- List item without end") == "List item without end"

    def test_falls_back_to_prefix(self):
        text = "word " * 60
        assert first_sentence(text, limit=20) == text.strip()[:20]


class TestDigestProse:
    def test_fits_verbatim(self):
        assert digest_prose(["one", "", "two"], 5) == ["one", "two"]

    def test_first_sentences_when_over_budget(self):
        lines = PITFALLS_BODY.split("\n")
        assert digest_prose(lines, 2) == [
            "- First paragraph sentence.",
            "- Second paragraph.",
        ]

    def test_rules_first(self):
        lines = PITFALLS_BODY.split("\n")
        assert digest_prose(lines, 2, rules_first=True) == [
            "- DON'T: Never use `any` here.",
            "- First paragraph sentence.",
        ]

    def test_zero_budget(self):
        assert digest_prose(["a"], 0) == []


class TestCondenseSection:
    def test_heading_counts_against_budget(self):
        section = Section("Pitfalls", 2, "", PITFALLS_BODY)
        lines = condense_section(section, 4, heading="Pitfalls")
        assert lines == ["### Pitfalls", "- First paragraph sentence."]

    def test_rule_priorities_promote_rules(self):
        section = Section("Pitfalls", 2, "", PITFALLS_BODY)
        lines = condense_section(section, 4, heading="Pitfalls", priorities=("gotchas",))
        assert lines == ["### Pitfalls", "- DON'T: Never use `any` here."]

    def test_nothing_fits(self):
        section = Section("Pitfalls", 2, "", PITFALLS_BODY)
        assert condense_section(section, 1, heading="Pitfalls") == []

    def test_code_included_when_budget_allows(self):
        doc = extract_doc("guide/narrowing.md", NARROWING_MD)
        lines = condense_section(doc.sections[0], 40, heading="typeof guards")
        assert "```ts" in lines
        assert "```python" not in lines
        assert any("padLeft" in line for line in lines)


class TestCondenseDoc:
    def test_within_budget(self):
        doc = extract_doc("guide/basics.md", BASICS_MD)
        for budget in (0, 2, 3, 5, 8, 13, 21, 40, 100):
            out = condense_doc(doc, budget)
            assert out == "" or len(out.split("\n")) <= budget

    def test_tiny_budget_is_empty(self):
        doc = extract_doc("guide/basics.md", BASICS_MD)
        assert condense_doc(doc, 2) == ""

    def test_deterministic(self):
        doc = extract_doc("guide/basics.md", BASICS_MD)
        assert condense_doc(doc, 30) == condense_doc(doc, 30)

    def test_title_and_generic_heading(self):
        doc = extract_doc("guide/basics.md", BASICS_MD)
        out = condense_doc(doc, 100)
        assert out.startswith("## The Basics\n")
        assert "### Example" not in out
        assert out.count("### Static type-checking") == 1
        assert "function greet(person: string) {" in out

    def test_twoslash_lines_removed(self):
        doc = extract_doc("guide/basics.md", BASICS_MD)
        out = condense_doc(doc, 100)
        assert "message();" in out
        assert "// @errors" not in out

    def test_links_flattened(self):
        doc = extract_doc("guide/narrowing.md", NARROWING_MD)
        out = condense_doc(doc, 100)
        assert "the handbook" in out
        assert "/docs/handbook" not in out
