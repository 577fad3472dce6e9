import pytest

from enwikprep.splitting import split_for_compression, split_for_decompression


@pytest.fixture
def paths(tmp_path):
    return tuple(tmp_path / name for name in ("intro", "main", "coda"))


def _lines(count):
    return b"".join(b"line %d\n" % i for i in range(count))


def test_compression_split_small_file_goes_to_intro(tmp_path, paths):
    source = tmp_path / "corpus"
    source.write_bytes(_lines(10))
    split_for_compression(source, *paths)
    intro, main, coda = paths
    assert intro.read_bytes() == _lines(10)
    assert main.read_bytes() == b""
    assert coda.read_bytes() == b""


def test_compression_split_moves_lines_past_intro_to_main(tmp_path, paths):
    source = tmp_path / "corpus"
    source.write_bytes(_lines(40))
    split_for_compression(source, *paths)
    intro, main, coda = paths
    assert intro.read_bytes() + main.read_bytes() == _lines(40)
    assert intro.read_bytes().count(b"\n") == 29


def test_compression_split_adds_missing_final_newline(tmp_path, paths):
    source = tmp_path / "corpus"
    source.write_bytes(b"first\nsecond")
    split_for_compression(source, *paths)
    assert paths[0].read_bytes() == b"first\nsecond\n"


def test_decompression_split_small_file_goes_to_main(tmp_path, paths):
    source = tmp_path / "decoded"
    source.write_bytes(_lines(50))
    split_for_decompression(source, *paths)
    intro, main, coda = paths
    assert main.read_bytes() == _lines(50)
    assert intro.read_bytes() == b""
    assert coda.read_bytes() == b""


def test_empty_source_gives_empty_parts(tmp_path, paths):
    source = tmp_path / "empty"
    source.write_bytes(b"")
    split_for_compression(source, *paths)
    assert [p.read_bytes() for p in paths] == [b"", b"", b""]


def test_missing_source_raises(tmp_path, paths):
    with pytest.raises(FileNotFoundError):
        split_for_decompression(tmp_path / "absent", *paths)