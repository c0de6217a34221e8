"""Tests for relphase.artifacts.archive module."""

from __future__ import annotations

import io
import os
import tarfile
import time
from pathlib import Path

from relphase.core.result import Err, Ok
from relphase.artifacts.archive import pack_directory, unpack_archive


def _tree(root: Path) -> Path:
    (root / "css").mkdir(parents=True)
    (root / "index.html").write_text("<h1>hi</h1>", encoding="utf-8")
    (root / "css" / "site.css").write_text("body{}", encoding="utf-8")
    return root


def _malicious_archive(path: Path) -> None:
    with tarfile.open(path, "w:gz") as tar:
        for name, data in (
            ("../escape.txt", b"bad"),
            ("/abs.txt", b"bad"),
            ("ok/inside.txt", b"good"),
        ):
            info = tarfile.TarInfo(name=name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
        link = tarfile.TarInfo(name="link")
        link.type = tarfile.SYMTYPE
        link.linkname = "/etc/passwd"
        tar.addfile(link)


class TestPackDirectory:
    def test_packs_regular_files(self, tmp_path: Path) -> None:
        source = _tree(tmp_path / "src")
        archive = tmp_path / "out.tgz"

        result = pack_directory(source, archive)

        assert isinstance(result, Ok)
        assert result.value.files_count == 2
        assert result.value.size == archive.stat().st_size
        with tarfile.open(archive, "r:gz") as tar:
            assert tar.getnames() == ["css/site.css", "index.html"]

    def test_deterministic(self, tmp_path: Path) -> None:
        source = _tree(tmp_path / "src")
        first = tmp_path / "a.tgz"
        second = tmp_path / "b.tgz"

        pack_directory(source, first)
        future = time.time() + 100
        for p in source.rglob("*"):
            os.utime(p, (future, future))
        pack_directory(source, second)

        assert first.read_bytes() == second.read_bytes()

    def test_skips_symlinks(self, tmp_path: Path) -> None:
        source = _tree(tmp_path / "src")
        os.symlink(source / "index.html", source / "alias.html")

        result = pack_directory(source, tmp_path / "out.tgz")

        assert isinstance(result, Ok)
        assert result.value.files_count == 2

    def test_missing_source(self, tmp_path: Path) -> None:
        result = pack_directory(tmp_path / "missing", tmp_path / "out.tgz")
        assert isinstance(result, Err)
        assert "not found" in result.error.message


class TestUnpackArchive:
    def test_round_trip(self, tmp_path: Path) -> None:
        source = _tree(tmp_path / "src")
        archive = tmp_path / "out.tgz"
        pack_directory(source, archive)

        dest = tmp_path / "dest"
        result = unpack_archive(archive, dest)

        assert isinstance(result, Ok)
        assert result.value.files_count == 2
        assert (dest / "index.html").read_text(encoding="utf-8") == "<h1>hi</h1>"
        assert (dest / "css" / "site.css").read_text(encoding="utf-8") == "body{}"

    def test_overwrites_and_keeps_other_files(self, tmp_path: Path) -> None:
        source = _tree(tmp_path / "src")
        archive = tmp_path / "out.tgz"
        pack_directory(source, archive)
        dest = tmp_path / "dest"
        dest.mkdir()
        (dest / "index.html").write_text("stale", encoding="utf-8")
        (dest / "keep.txt").write_text("mine", encoding="utf-8")

        unpack_archive(archive, dest)

        assert (dest / "index.html").read_text(encoding="utf-8") == "<h1>hi</h1>"
        assert (dest / "keep.txt").read_text(encoding="utf-8") == "mine"

    def test_unsafe_members_are_skipped(self, tmp_path: Path) -> None:
        archive = tmp_path / "evil.tgz"
        _malicious_archive(archive)
        dest = tmp_path / "work" / "dest"

        result = unpack_archive(archive, dest)

        assert isinstance(result, Ok)
        assert result.value.files_count == 1
        assert (dest / "ok" / "inside.txt").read_bytes() == b"good"
        assert not (tmp_path / "work" / "escape.txt").exists()
        assert not (dest / "link").exists()

    def test_corrupt_archive(self, tmp_path: Path) -> None:
        archive = tmp_path / "bad.tgz"
        archive.write_bytes(b"this is not a gzip stream")

        result = unpack_archive(archive, tmp_path / "dest")

        assert isinstance(result, Err)
        assert result.error.archive == archive

    def test_missing_archive(self, tmp_path: Path) -> None:
        result = unpack_archive(tmp_path / "none.tgz", tmp_path / "dest")
        assert isinstance(result, Err)
        assert result.error.message == "Archive not found"
