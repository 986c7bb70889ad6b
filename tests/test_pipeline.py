"""Tests for the build, check, and diff runs."""

import subprocess

from skillref_engine import pipeline
from skillref_engine.manifest import read_manifest, verify_manifest
from skillref_engine.outputs import OutputSpec, scan_patterns_for
from skillref_engine.pipeline import (
    DIFF_CHANGED,
    DIFF_NEW,
    DIFF_UNCHANGED,
    DiffEntry,
    run_build,
    run_check,
    run_diff,
    source_revision,
)


def _fake_git(returncode: int, stdout: str):
    def run(args, cwd):
        return subprocess.CompletedProcess(["git"] + args, returncode, stdout=stdout, stderr="")
    return run


class TestSourceRevision:
    def test_head_commit(self, monkeypatch, tmp_path):
        monkeypatch.setattr(pipeline, "_run_git", _fake_git(0, "deadbeef1234\n"))
        assert source_revision(tmp_path) == "deadbeef1234"

    def test_not_a_repo(self, monkeypatch, tmp_path):
        monkeypatch.setattr(pipeline, "_run_git", _fake_git(128, ""))
        assert source_revision(tmp_path) == "unknown"

    def test_git_unavailable(self, monkeypatch, tmp_path):
        def boom(args, cwd):
            raise FileNotFoundError("git")
        monkeypatch.setattr(pipeline, "_run_git", boom)
        assert source_revision(tmp_path) == "unknown"


class TestRunBuild:
    def test_writes_outputs_and_manifest(self, monkeypatch, docs_root, specs, skill_dir, manifest_file):
        monkeypatch.setattr(pipeline, "_run_git", _fake_git(0, "0123456789abcdef\n"))
        result = run_build(specs, docs_root, skill_dir, manifest_file)

        assert (skill_dir / "refs" / "guide.md").is_file()
        assert (skill_dir / "refs" / "declaration-files.md").is_file()
        assert "0123456789ab" in (skill_dir / "SKILL.md").read_text()
        assert [a.name for a in result.artifacts] == ["guide.md", "declaration-files.md"]

        manifest = read_manifest(manifest_file)
        assert manifest.source_commit == "0123456789abcdef"
        assert sorted(manifest.outputs) == [
            "SKILL.md", "refs/declaration-files.md", "refs/guide.md",
        ]
        assert manifest.outputs["SKILL.md"].generated_from == ["template"]
        assert manifest.sources["guide/basics.md"].feeds_into == ["guide.md"]

    def test_missing_literal_source_not_recorded(self, docs_root, skill_dir, manifest_file):
        specs = {"guide.md": OutputSpec("guide.md", ("guide/basics.md", "guide/gone.md"), 60)}
        run_build(specs, docs_root, skill_dir, manifest_file)
        manifest = read_manifest(manifest_file)
        assert list(manifest.sources) == ["guide/basics.md"]
        assert manifest.outputs["refs/guide.md"].generated_from == ["guide/basics.md"]
        assert verify_manifest(manifest, docs_root, skill_dir).passed

    def test_artifacts_within_budget(self, docs_root, specs, skill_dir, manifest_file):
        result = run_build(specs, docs_root, skill_dir, manifest_file)
        for artifact in result.artifacts:
            assert artifact.line_count <= specs[artifact.name].max_lines + 2

    def test_summary(self, monkeypatch, docs_root, specs, skill_dir, manifest_file):
        monkeypatch.setattr(pipeline, "_run_git", _fake_git(128, ""))
        summary = run_build(specs, docs_root, skill_dir, manifest_file).summary()
        assert "Source commit: unknown" in summary
        assert "guide.md:" in summary
        assert "Manifest:" in summary


class TestRunCheck:
    def test_clean_then_drift(self, docs_root, specs, skill_dir, manifest_file):
        run_build(specs, docs_root, skill_dir, manifest_file)
        assert not run_check(manifest_file, docs_root).has_drift

        (docs_root / "guide/basics.md").write_text("# Rewritten\n")
        report = run_check(manifest_file, docs_root)
        assert report.changed == ["guide/basics.md"]
        assert report.affected_outputs == ["guide.md"]

    def test_added_under_configured_pattern(self, docs_root, specs, skill_dir, manifest_file):
        run_build(specs, docs_root, skill_dir, manifest_file)
        (docs_root / "guide/new-page.md").write_text("# New page\n")
        report = run_check(manifest_file, docs_root, scan_patterns_for(specs))
        assert report.added == ["guide/new-page.md"]
        assert report.affected_outputs == []
        assert report.has_drift


class TestRunDiff:
    def test_everything_new_before_build(self, docs_root, specs, skill_dir):
        entries = run_diff(specs, docs_root, skill_dir)
        assert [e.name for e in entries] == ["guide.md", "declaration-files.md", "SKILL.md"]
        assert all(e.status == DIFF_NEW for e in entries)
        assert not skill_dir.exists()

    def test_unchanged_after_build(self, monkeypatch, docs_root, specs, skill_dir, manifest_file):
        monkeypatch.setattr(pipeline, "_run_git", _fake_git(0, "abc\n"))
        run_build(specs, docs_root, skill_dir, manifest_file)
        entries = run_diff(specs, docs_root, skill_dir)
        assert all(e.status == DIFF_UNCHANGED for e in entries)

    def test_changed_source(self, monkeypatch, docs_root, specs, skill_dir, manifest_file):
        monkeypatch.setattr(pipeline, "_run_git", _fake_git(0, "abc\n"))
        run_build(specs, docs_root, skill_dir, manifest_file)
        (docs_root / "guide/narrowing.md").unlink()
        statuses = {e.name: e.status for e in run_diff(specs, docs_root, skill_dir)}
        assert statuses == {
            "guide.md": DIFF_CHANGED,
            "declaration-files.md": DIFF_UNCHANGED,
            "SKILL.md": DIFF_UNCHANGED,
        }

    def test_describe(self):
        assert DiffEntry("a.md", DIFF_NEW, new_lines=4).describe() == "NEW: a.md (4 lines)"
        assert DiffEntry("a.md", DIFF_CHANGED, 3, 5).describe() == "CHANGED: a.md (3 → 5 lines)"
        assert DiffEntry("a.md", DIFF_UNCHANGED, 3, 3).describe() == "UNCHANGED: a.md"
