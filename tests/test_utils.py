"""Tests for size calculation and formatting helpers."""

from __future__ import annotations

import os
import subprocess

import pytest

from diskclean import utils
from diskclean.utils import bytes_to_human, dir_info, dir_size, format_elapsed


@pytest.fixture(params=["find", "scandir"])
def walk_impl(request, monkeypatch):
    """Run each size test with GNU find and with the scandir fallback."""
    if request.param == "scandir":

        def no_find(*args, **kwargs):
            raise FileNotFoundError("find")

        monkeypatch.setattr(utils.subprocess, "run", no_find)
    return request.param


class TestDirSize:
    def test_sums_file_sizes(self, tmp_path, walk_impl):
        (tmp_path / "a.txt").write_text("hello")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "b.txt").write_text("world!")
        assert dir_size(tmp_path) == 11

    def test_counts_files(self, tmp_path, walk_impl):
        (tmp_path / "a").write_bytes(b"1")
        (tmp_path / "b").write_bytes(b"22")
        assert dir_info(tmp_path) == (3, 2)

    def test_nonexistent_is_zero(self, tmp_path, walk_impl):
        assert dir_size(tmp_path / "missing") == 0

    def test_file_path_is_zero(self, tmp_path):
        (tmp_path / "f").write_text("data")
        assert dir_size(tmp_path / "f") == 0

    def test_does_not_follow_inner_symlinks(self, tmp_path, walk_impl):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "big").write_bytes(b"x" * 1000)
        inside = tmp_path / "inside"
        inside.mkdir()
        (inside / "small").write_bytes(b"x" * 10)
        (inside / "link").symlink_to(outside, target_is_directory=True)
        assert dir_size(inside) == 10

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can read any file")
    def test_unreadable_file_not_counted(self, tmp_path, walk_impl):
        (tmp_path / "ok").write_bytes(b"o" * 40)
        secret = tmp_path / "secret"
        secret.write_bytes(b"s" * 500)
        secret.chmod(0)
        try:
            assert dir_size(tmp_path) == 40
        finally:
            secret.chmod(0o644)

    def test_find_failure_falls_back(self, tmp_path, monkeypatch):
        (tmp_path / "a").write_bytes(b"abc")
        monkeypatch.setattr(
            utils.subprocess,
            "run",
            lambda *a, **k: subprocess.CompletedProcess(a, 1, stdout=b"", stderr=b"find: unknown predicate"),
        )
        assert dir_size(tmp_path) == 3


class TestBytesToHuman:
    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0 B"),
            (512, "512 B"),
            (1024, "1.0 KB"),
            (1_048_576, "1.0 MB"),
            (1_073_741_824, "1.0 GB"),
            (-2048, "-2.0 KB"),
        ],
    )
    def test_formats(self, size, expected):
        assert bytes_to_human(size) == expected


def test_format_elapsed():
    assert format_elapsed(0.25) == "250 ms"
    assert format_elapsed(3.21) == "3.2s"
    assert format_elapsed(125) == "2m 5s"
