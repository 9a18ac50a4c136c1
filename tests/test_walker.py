"""Tests for the marker walker."""

from __future__ import annotations

import os

import pytest

from diskclean.core.walker import PERMANENT_SKIP, build_skip_set, find_markers
from diskclean.rules import BUILTIN_RULES


class TestBuildSkipSet:
    def test_includes_permanent_dirs(self):
        skip = build_skip_set(BUILTIN_RULES)
        assert {".git", ".hg", ".svn", ".cache"} <= skip

    def test_includes_all_rule_targets(self):
        skip = build_skip_set(BUILTIN_RULES)
        for name in ("target", "node_modules", ".venv", "zig-cache", "nimcache"):
            assert name in skip

    def test_no_rules(self):
        assert build_skip_set([]) == PERMANENT_SKIP


class TestFindMarkers:
    def test_finds_marker_in_nested_dir(self, tmp_path):
        proj = tmp_path / "sub" / "myproject"
        proj.mkdir(parents=True)
        (proj / "Cargo.toml").write_text("[package]")

        found = find_markers(tmp_path, ["Cargo.toml"], build_skip_set(BUILTIN_RULES))
        assert found == [proj / "Cargo.toml"]

    def test_returns_absolute_paths(self, tmp_path, monkeypatch):
        (tmp_path / "p").mkdir()
        (tmp_path / "p" / "Cargo.toml").write_text("")
        monkeypatch.chdir(tmp_path)

        found = find_markers(".", ["Cargo.toml"])
        assert len(found) == 1
        assert found[0].is_absolute()

    def test_finds_multiple_marker_variants(self, tmp_path):
        for name, marker in (("p1", "build.gradle"), ("p2", "build.gradle.kts")):
            (tmp_path / name).mkdir()
            (tmp_path / name / marker).write_text("")

        found = find_markers(tmp_path, ["build.gradle", "build.gradle.kts"])
        assert len(found) == 2

    def test_skips_excluded_directories(self, tmp_path):
        fake = tmp_path / "node_modules" / "fake"
        fake.mkdir(parents=True)
        (fake / "Cargo.toml").write_text("[package]")

        found = find_markers(tmp_path, ["Cargo.toml"], build_skip_set(BUILTIN_RULES))
        assert found == []

    def test_never_returns_paths_under_skipped_dirs(self, tmp_path):
        for skipped in (".git", "target", "node_modules"):
            nested = tmp_path / "proj" / skipped / "deep"
            nested.mkdir(parents=True)
            (nested / "package.json").write_text("{}")
        (tmp_path / "proj" / "package.json").write_text("{}")

        skip = build_skip_set(BUILTIN_RULES)
        found = find_markers(tmp_path, ["package.json"], skip)
        assert found == [tmp_path / "proj" / "package.json"]
        for path in found:
            assert not set(path.relative_to(tmp_path).parts[:-1]) & skip

    def test_wildcard_marker(self, tmp_path):
        proj = tmp_path / "mynim"
        proj.mkdir()
        (proj / "mynim.nimble").write_text('version = "0.1.0"')

        found = find_markers(tmp_path, ["*.nimble"])
        assert len(found) == 1
        assert found[0].name == "mynim.nimble"

    def test_wildcard_matches_bare_suffix(self, tmp_path):
        (tmp_path / ".nimble").write_text("")
        found = find_markers(tmp_path, ["*.nimble"])
        assert found == [tmp_path / ".nimble"]

    def test_other_glob_syntax_is_literal(self, tmp_path):
        (tmp_path / "a.toml").write_text("")
        (tmp_path / "?.toml").write_text("")

        found = find_markers(tmp_path, ["?.toml", "[ab].toml", "**/a.toml"])
        assert found == [tmp_path / "?.toml"]

    def test_directory_is_never_a_match(self, tmp_path):
        (tmp_path / "Cargo.toml").mkdir()
        assert find_markers(tmp_path, ["Cargo.toml"]) == []

    def test_nonexistent_root_returns_empty(self, tmp_path):
        assert find_markers(tmp_path / "nope", ["x"]) == []

    def test_follows_symlinks(self, tmp_path):
        real = tmp_path / "real"
        real.mkdir()
        (real / "pom.xml").write_text("")
        scan_root = tmp_path / "scan"
        scan_root.mkdir()
        (scan_root / "linked").symlink_to(real, target_is_directory=True)
        (scan_root / "marker-link.xml").symlink_to(real / "pom.xml")

        found = find_markers(scan_root, ["pom.xml", "*-link.xml"])
        assert sorted(p.name for p in found) == ["marker-link.xml", "pom.xml"]

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can read any directory")
    def test_unreadable_directory_is_skipped(self, tmp_path):
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "Cargo.toml").write_text("")
        sibling = tmp_path / "open"
        sibling.mkdir()
        (sibling / "Cargo.toml").write_text("")

        locked.chmod(0)
        try:
            found = find_markers(tmp_path, ["Cargo.toml"])
        finally:
            locked.chmod(0o755)

        assert found == [sibling / "Cargo.toml"]
