import struct

import pytest

from hivekit.memar import (
    FILE_NAME_MAX,
    HEADER_FIXED_SIZE,
    MEMAR_MAGIC,
    MemarError,
    file_header,
    iter_tree,
    main,
    write_archive,
)
from hivekit.prot import align_up


def _parse(blob):
    entries = []
    pos = 0
    while pos < len(blob):
        magic, hdr_size, file_size = struct.unpack_from("<4sQQ", blob, pos)
        assert magic == b"LORD"
        name = blob[pos + HEADER_FIXED_SIZE:pos + hdr_size].decode()
        start = pos + hdr_size
        entries.append((name, blob[start:start + file_size]))
        pos = start + align_up(file_size, 8)
    return entries


@pytest.fixture
def tree(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    root = tmp_path / "root"
    (root / "sub").mkdir(parents=True)
    (root / "a").write_bytes(b"hello")
    (root / "sub" / "b").write_bytes(b"12345678")
    (root / ".hidden").write_bytes(b"nope")
    return root


def test_file_header_layout():
    header = file_header("root/sbin/rts", 10)
    magic, hdr_size, file_size = struct.unpack_from("<4sQQ", header)
    assert magic == MEMAR_MAGIC
    assert hdr_size == len(header)
    assert file_size == 10
    assert header[HEADER_FIXED_SIZE:] == b"sbin/rts"


def test_file_header_fixed_part_is_twenty_bytes():
    assert len(file_header("root/x", 0)) == 20 + 1


def test_file_header_truncates_long_names():
    header = file_header("root/" + "n" * 150, 0)
    assert header[HEADER_FIXED_SIZE:] == b"n" * (FILE_NAME_MAX - 1)


def test_file_header_requires_root_component():
    with pytest.raises(MemarError):
        file_header("plainname", 3)


def test_iter_tree_skips_hidden_and_recurses(tree):
    assert list(iter_tree("root")) == [
        ("f", "root/a"),
        ("d", "root/sub"),
        ("f", "root/sub/b"),
    ]


def test_write_archive_contents(tree):
    lines = []
    count = write_archive("root", "out.mr", log=lines.append)
    assert count == 2
    assert lines == ["[f] root/a", "[d] root/sub", "[f] root/sub/b"]
    blob = (tree.parent / "out.mr").read_bytes()
    assert _parse(blob) == [("a", b"hello"), ("sub/b", b"12345678")]
    assert b"nope" not in blob


def test_write_archive_pads_file_contents(tree):
    count = write_archive("root", "out.mr", log=None)
    assert count == 2
    blob = (tree.parent / "out.mr").read_bytes()
    first = struct.pack("<4sQQ", b"LORD", 21, 5) + b"a" + b"hello" + bytes(3)
    assert blob[: len(first)] == first


def test_write_archive_rejects_file_input(tree):
    with pytest.raises(MemarError):
        write_archive("root/a", "out.mr", log=None)


def test_write_archive_rejects_missing_input(tree):
    with pytest.raises(MemarError):
        write_archive("missing", "out.mr", log=None)


def test_main_builds_archive(tree, capsys):
    assert main(["-i", "root", "-o", "out.mr"]) == 0
    blob = (tree.parent / "out.mr").read_bytes()
    assert [name for name, _ in _parse(blob)] == ["a", "sub/b"]
    assert "[d] root/sub" in capsys.readouterr().out


def test_main_without_input(capsys):
    assert main([]) == -1
    assert "expected input file" in capsys.readouterr().out


def test_main_help(capsys):
    assert main(["-h"]) == -1
    assert "generate a memory archive" in capsys.readouterr().out


def test_main_reports_missing_directory(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["-i", "missing"]) == 1
    assert "error" in capsys.readouterr().out