import io
import itertools
import string

import pytest

from enwikprep.dictionary import Dictionary

WORDS = b"apple\nbanana\ncomputer\nquick\nbrown\nlazy\n"


def _big_word_list(count):
    words = (
        "".join(letters)
        for letters in itertools.product(string.ascii_lowercase, repeat=3)
    )
    return list(itertools.islice(words, count))


@pytest.fixture
def dictionary():
    return Dictionary(WORDS)


def test_first_word_gets_single_byte_code(dictionary):
    assert dictionary.encode(b"apple") == b"\x80"


def test_capitalized_word_has_marker(dictionary):
    assert dictionary.encode(b"Apple") == b"\x40" + dictionary.encode(b"apple")


def test_uppercase_word_has_marker(dictionary):
    assert dictionary.encode(b"APPLE") == b"\x07" + dictionary.encode(b"apple")


def test_marker_bytes_are_escaped(dictionary):
    assert dictionary.encode(b"@") == b"\x0c@"


def test_quote_entity_is_folded(dictionary):
    assert dictionary.encode(b"&quot;") == b"&\x08"


def test_text_without_letters_is_unchanged(dictionary):
    assert dictionary.encode(b"123 ,.;!") == b"123 ,.;!"


def test_prefix_substring_is_coded(dictionary):
    assert dictionary.encode(b"computers") == dictionary.encode(b"computer") + b"s"


def test_second_code_range_uses_two_bytes():
    words = _big_word_list(100)
    coder = Dictionary(("\n".join(words) + "\n").encode())
    assert coder.encode(words[80].encode()) == b"\xd0\x80"


def test_third_code_range_uses_three_bytes():
    words = _big_word_list(4000)
    coder = Dictionary(("\n".join(words) + "\n").encode())
    encoded = coder.encode(words[3920].encode())
    assert encoded == b"\xf0\xd0\x80"
    assert coder.decode(encoded) == words[3920].encode()


def test_big_dictionary_round_trip():
    words = _big_word_list(4000)
    raw = ("\n".join(words) + "\n").encode()
    text = b" ".join(w.encode() for w in words[::37]) + b" The End"
    assert Dictionary(raw).decode(Dictionary(raw).encode(text)) == text


@pytest.mark.parametrize(
    "text",
    [
        b"",
        b"apple",
        b"The quick brown fox jumps over the lazy dog.",
        b"APPLE pie, Banana split and computers\n",
        b"HELLOworld hELLO AbC ABc",
        b"&quot;quoted&quot; & &amp; &quotient",
        b"\x80\xff\x06\x07\x08\x0c@ bytes",
        b"supercalifragilistic expialidocious",
        b"x",
        b"Q",
    ],
)
def test_round_trip(text):
    encoder = Dictionary(WORDS)
    decoder = Dictionary(WORDS)
    assert decoder.decode(encoder.encode(text)) == text


def test_decode_byte_reads_one_byte_at_a_time(dictionary):
    stream = io.BytesIO(Dictionary(WORDS).encode(b"Apple!"))
    result = bytes(dictionary.decode_byte(stream) for _ in range(6))
    assert result == b"Apple!"
    with pytest.raises(EOFError):
        dictionary.decode_byte(stream)


def test_truncated_escape_raises(dictionary):
    with pytest.raises(EOFError):
        dictionary.decode(b"\x0c")


def test_encoding_only_dictionary_cannot_restore_words():
    coder = Dictionary(WORDS, for_encoding=True, for_decoding=False)
    assert coder.decode(coder.encode(b"apple")) == b""


def test_last_word_without_separator_is_ignored():
    coder = Dictionary(b"apple\nbanana")
    assert coder.encode(b"banana") == b"banana"