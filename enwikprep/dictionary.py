"""Word-replacing text transform driven by a word list."""

from __future__ import annotations

from collections import deque
from typing import BinaryIO

CAPITALIZED = 0x40
UPPERCASE = 0x07
END_UPPER = 0x06
ESCAPE = 0x0C
QUOTE = 0x08

_QUOTE_PATTERN = b"&quot;\x00"
_QUOTE_TAIL = b"quot;"
_ESCAPED = frozenset((END_UPPER, ESCAPE, UPPERCASE, CAPITALIZED, QUOTE))

_BOUNDARY1 = 80
_BOUNDARY2 = _BOUNDARY1 + 3840
_BOUNDARY3 = _BOUNDARY2 + 40960
_BOUNDARY4 = _BOUNDARY3 + 81920

_LOWER_A, _LOWER_Z = ord("a"), ord("z")
_UPPER_A, _UPPER_Z = ord("A"), ord("Z")


def _is_lower(c: int) -> bool:
    return _LOWER_A <= c <= _LOWER_Z


def _is_upper(c: int) -> bool:
    return _UPPER_A <= c <= _UPPER_Z


def _to_upper(c: int) -> int:
    return (c - _LOWER_A + _UPPER_A) & 0xFF


def _code_for(index: int) -> int | None:
    """Return the packed code of the dictionary word at ``index``."""
    if index < _BOUNDARY1:
        return 0x80 + index
    if index < _BOUNDARY2:
        k = index - _BOUNDARY1
        return (0xD0 + k // 80) + ((0x80 + k % 80) << 8)
    if index < _BOUNDARY4:
        k = index - _BOUNDARY2
        group = k // 80
        lead = 0xF0 if index < _BOUNDARY3 else 0xD0
        return (
            (lead + group // 32)
            + ((0xD0 + group % 32) << 8)
            + ((0x80 + k % 80) << 16)
        )
    return None


def _append_code(out: bytearray, code: int) -> None:
    out.append(code & 0xFF)
    if not code & 0xFF00:
        return
    out.append((code >> 8) & 0xFF)
    if code & 0xFF0000:
        out.append((code >> 16) & 0xFF)


def _append_byte(out: bytearray, c: int) -> None:
    if c in _ESCAPED or c >= 0x80:
        out.append(ESCAPE)
    out.append(c)


class Dictionary:
    """Replaces lower-case words found in a word list with short byte codes.

    Capitalisation is recorded with marker bytes, ``&quot;`` is folded into a
    single byte and bytes that collide with markers or codes are escaped.
    """

    def __init__(
        self, dictionary: bytes, for_encoding: bool = True, for_decoding: bool = True
    ) -> None:
        self._byte_map: dict[bytes, int] = {}
        self._reverse_map: dict[int, bytes] = {}
        self._buffer: deque[int] = deque()
        self._decode_upper = False
        self._decode_capital = False
        self._longest_word = 0

        index = 0
        word = bytearray()
        for c in dictionary:
            if _is_lower(c):
                word.append(c)
                continue
            if not word:
                continue
            key = bytes(word)
            word.clear()
            self._longest_word = max(self._longest_word, len(key))
            code = _code_for(index)
            index += 1
            if code is None:
                continue
            if for_encoding:
                self._byte_map[key] = code
            if for_decoding:
                self._reverse_map[code] = key

    def encode(self, data: bytes) -> bytes:
        """Return the transformed form of ``data``."""
        out = bytearray()
        word = bytearray()
        num_upper = num_lower = quote_state = 0
        last = len(data) - 1
        for pos, c in enumerate(data):
            expected = (
                _QUOTE_PATTERN[quote_state]
                if quote_state < len(_QUOTE_PATTERN)
                else None
            )
            if c == expected:
                quote_state += 1
                if quote_state == 6:
                    out.append(QUOTE)
                    num_upper = num_lower = 0
                    word.clear()
                    continue
            else:
                quote_state = 0

            advance = False
            if len(word) > self._longest_word:
                advance = True
            elif _is_lower(c):
                if num_upper > 1:
                    advance = True
                else:
                    num_lower += 1
                    word.append(c)
            elif _is_upper(c):
                if num_lower > 0:
                    advance = True
                else:
                    num_upper += 1
                    word.append(c - _UPPER_A + _LOWER_A)
            else:
                advance = True

            if pos == last and not advance:
                self._encode_word(out, bytes(word), num_upper, False)
            if not advance:
                continue
            if not word:
                _append_byte(out, c)
                continue

            next_lower = _is_lower(c)
            self._encode_word(out, bytes(word), num_upper, next_lower)
            num_lower = num_upper = 0
            word.clear()
            if next_lower:
                num_lower = 1
                word.append(c)
            elif _is_upper(c):
                num_upper = 1
                word.append(c - _UPPER_A + _LOWER_A)
            else:
                _append_byte(out, c)
            if pos == last and word:
                self._encode_word(out, bytes(word), num_upper, False)
        return bytes(out)

    def _encode_word(
        self, out: bytearray, word: bytes, num_upper: int, next_lower: bool
    ) -> None:
        if num_upper > 1:
            out.append(UPPERCASE)
        elif num_upper == 1:
            out.append(CAPITALIZED)
        code = self._byte_map.get(word)
        if code is not None:
            _append_code(out, code)
        elif not self._encode_substring(out, word):
            out.extend(word)
        if num_upper > 1 and next_lower:
            out.append(END_UPPER)

    def _encode_substring(self, out: bytearray, word: bytes) -> bool:
        if len(word) <= 7:
            return False
        size = min(len(word) - 1, self._longest_word)
        suffix = word[len(word) - size :]
        while len(suffix) >= 7:
            code = self._byte_map.get(suffix)
            if code is not None:
                out.extend(word[: len(word) - len(suffix)])
                _append_code(out, code)
                return True
            suffix = suffix[1:]
        prefix = word[:size]
        while len(prefix) >= 7:
            code = self._byte_map.get(prefix)
            if code is not None:
                _append_code(out, code)
                out.extend(word[len(prefix) :])
                return True
            prefix = prefix[:-1]
        return False

    def decode_byte(self, stream: BinaryIO) -> int:
        """Read from ``stream`` until one original byte is available and return it."""
        while not self._buffer:
            self._add_to_buffer(stream)
        return self._buffer.popleft()

    def decode(self, data: bytes) -> bytes:
        """Undo :meth:`encode` on a complete encoded block."""
        out = bytearray(self._buffer)
        self._buffer.clear()
        position = 0
        view = memoryview(data)
        while position < len(data):
            position += self._consume(view[position:])
            out.extend(self._buffer)
            self._buffer.clear()
        return bytes(out)

    def _consume(self, view: memoryview) -> int:
        reader = _ViewReader(view)
        self._add_to_buffer(reader)
        return reader.offset

    @staticmethod
    def _read(stream: BinaryIO) -> int:
        chunk = stream.read(1)
        if not chunk:
            raise EOFError("encoded text ended in the middle of a token")
        return chunk[0]

    def _add_to_buffer(self, stream: BinaryIO) -> None:
        c = self._read(stream)
        if c == ESCAPE:
            self._decode_upper = False
            self._buffer.append(self._read(stream))
        elif c == QUOTE:
            self._buffer.extend(_QUOTE_TAIL)
        elif c == UPPERCASE:
            self._decode_upper = True
        elif c == CAPITALIZED:
            self._decode_capital = True
        elif c == END_UPPER:
            self._decode_upper = False
        elif c >= 0x80:
            code = c
            if c > 0xCF:
                c = self._read(stream)
                code += c << 8
                if c > 0xCF:
                    c = self._read(stream)
                    code += c << 16
            for i, letter in enumerate(self._reverse_map.get(code, b"")):
                if i == 0 and self._decode_capital:
                    letter = _to_upper(letter)
                    self._decode_capital = False
                if self._decode_upper:
                    letter = _to_upper(letter)
                self._buffer.append(letter)
        else:
            if not (_is_lower(c) or _is_upper(c)):
                self._decode_upper = False
            if self._decode_capital or self._decode_upper:
                c = _to_upper(c)
            self._decode_capital = False
            self._buffer.append(c)


class _ViewReader:
    """Minimal reader over a memoryview that remembers how far it read."""

    def __init__(self, view: memoryview) -> None:
        self._view = view
        self.offset = 0

    def read(self, size: int = 1) -> bytes:
        chunk = bytes(self._view[self.offset : self.offset + size])
        self.offset += len(chunk)
        return chunk