from pathlib import Path

import pytest

from uplang.loaders.directory import load_sources


def test_load_sources_finds_up_files(sample_sources_path: Path) -> None:
    tree = load_sources(sample_sources_path)

    assert tree.paths() == {"app.up", "services/worker.up"}
    assert [source.relative_path for source in tree.sources] == [
        "app.up",
        "services/worker.up",
    ]
    assert "server {" in tree.find_by_path("app.up").content


def test_pretty_renders_tree(sample_sources_path: Path) -> None:
    pretty = load_sources(sample_sources_path).pretty()

    assert "sample_sources/" in pretty
    assert "  app.up" in pretty
    assert "  services/" in pretty
    assert "    worker.up" in pretty


def test_single_file_target(sample_sources_path: Path) -> None:
    tree = load_sources(sample_sources_path / "app.up")

    assert tree.root == sample_sources_path
    assert tree.paths() == {"app.up"}


def test_hidden_entries_are_skipped(tmp_path: Path) -> None:
    (tmp_path / ".hidden").mkdir()
    (tmp_path / ".hidden" / "secret.up").write_text("a 1", encoding="utf-8")
    (tmp_path / ".dot.up").write_text("a 1", encoding="utf-8")
    (tmp_path / "visible.up").write_text("a 1", encoding="utf-8")

    assert load_sources(tmp_path).paths() == {"visible.up"}


def test_undecodable_file_is_flagged(tmp_path: Path) -> None:
    (tmp_path / "bad.up").write_bytes(b"\xff\xfe\x00bad")

    source = load_sources(tmp_path).find_by_path("bad.up")

    assert source is not None
    assert source.read_error
    assert source.content == ""


def test_missing_path_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_sources(tmp_path / "nope")


def test_content_keeps_line_endings_untranslated(tmp_path: Path) -> None:
    (tmp_path / "app.up").write_bytes(b"a 1\r\nb x\ry\n")

    source = load_sources(tmp_path).find_by_path("app.up")

    assert source is not None
    assert source.content == "a 1\r\nb x\ry\n"
