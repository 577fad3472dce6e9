"""Reversible XML rewrites that make the corpus's page markup easier to model.

The ``prepr*`` steps split and shorten the markup; the matching ``resto*``
steps put it back. Some steps read their input as one block whose part sizes
are fixed by the module constants below.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import BinaryIO, Callable

PathLike = str | os.PathLike

P3_INPUT_SIZE = 999988944
P4_INPUT_SIZE = 985154324
TMP1A_SIZE = 937788523
TMP1B_SIZE = 16193156
TMP2A_SIZE = 929737295
TMP2B_SIZE = 24244366
OUT5_SIZE = 980080701
R3_INPUT_SIZE = 984215015
R4_INPUT_SIZE = 999049635

_SHORT_LINE = 8192
_LONG_LINE = 16384

_PREPR3_MAP = {b"amp;": b"&&", b"quot;": b'&"', b"lt;": b"&<", b"gt;": b"&>"}
_PREPR3_RE = re.compile(rb"&(amp;|quot;|lt;|gt;)")
_PREPR4_MAP = {
    b"quot;": b'"',
    b"nbsp;": b"}",
    b"ndash;": b"@",
    b"mdash;": b"`",
    b"lt;": b"<",
    b"gt;": b">",
}
_PREPR4_RE = re.compile(rb"(?<=&)&(quot;|nbsp;|ndash;|mdash;|lt;|gt;)")
_RESTO3_MAP = {b"&": b"amp;", b'"': b"quot;", b"<": b"lt;", b">": b"gt;"}
_RESTO3_RE = re.compile(rb"&(.)", re.DOTALL)
_RESTO4_MAP = {
    b'"': b"quot;",
    b"<": b"lt;",
    b">": b"gt;",
    b"}": b"nbsp;",
    b"@": b"ndash;",
    b"`": b"mdash;",
}
_RESTO4_RE = re.compile(rb"(?<=&amp;)(.)", re.DOTALL)

_LINK_PREFIXES_AT_2 = (
    b"http:",
    b"user:",
    b"media:",
    b"fr:Wikip\xc3\xa9dia:Aide]]",
    b"de:Boogie Down Produ",
    b"da:Wikipedia:Hvordan",
    b"sv:Indiska musikinstrument",
)
_LINK_PREFIXES_AT_3 = (b"mage:", b"ategory:")
_ESCAPED_IN_TEXT = (ord('"'), ord("<"), ord(">"))


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def _fgets(stream: BinaryIO, size: int) -> tuple[bytes, bool]:
    """Read one line of at most ``size - 1`` bytes; report whether EOF was hit."""
    chunk = stream.readline(size - 1)
    eof = not chunk or (not chunk.endswith(b"\n") and len(chunk) < size - 1)
    return chunk, eof


def _atoi(data: bytes | bytearray, offset: int) -> int:
    pos = offset
    while pos < len(data) and data[pos] in b" \t\n\r\v\f":
        pos += 1
    sign = 1
    if pos < len(data) and data[pos] in b"+-":
        sign = -1 if data[pos] == ord("-") else 1
        pos += 1
    value = 0
    while pos < len(data) and 48 <= data[pos] <= 57:
        value = value * 10 + data[pos] - 48
        pos += 1
    return sign * value


def _line_end(data: bytes, start: int) -> int:
    newline = data.find(b"\n", start)
    if newline < 0:
        raise ValueError("second part ended in the middle of a line")
    return newline + 1


def cat(first: PathLike, second: PathLike, target: PathLike) -> None:
    """Write the bytes of ``first`` followed by those of ``second`` to ``target``."""
    Path(target).write_bytes(Path(first).read_bytes() + Path(second).read_bytes())


def sed(
    old: str | bytes, new: str | bytes, source: PathLike, target: PathLike
) -> None:
    """Replace the first ``old`` on each line; every line ends with a newline."""
    old_b, new_b = _as_bytes(old), _as_bytes(new)
    with open(source, "rb") as src, open(target, "wb") as dst:
        for raw in src:
            line = raw[:-1] if raw.endswith(b"\n") else raw
            dst.write(line.replace(old_b, new_b, 1) + b"\n")


def _is_link_line(s: bytes) -> bool:
    if s[:2] != b"[[":
        return False
    c = 2
    while c < len(s) and (s[c] >= ord("a") or s[c] == ord("-")) and s[c] <= ord("z"):
        c += 1
    return c < len(s) and s[c] == ord(":")


def prepr1(source: PathLike, first: PathLike, second: PathLike) -> None:
    """Move language-link blocks at the end of article texts to ``second``."""
    lnu = b1 = 0
    in_block = False
    with open(source, "rb") as sf, open(first, "wb") as t1, open(second, "wb") as t2:
        while True:
            s, eof = _fgets(sf, _SHORT_LINE)
            lnu += 1
            if eof:
                break
            if b"<tex" in s:
                b1 = lnu
            if not in_block:
                if not _is_link_line(s):
                    t1.write(s)
                    continue
                ps = 1 if s[2:3] == b":" else 0
                if (
                    any(s[ps + 2 :].startswith(p) for p in _LINK_PREFIXES_AT_2)
                    or any(s[ps + 3 :].startswith(p) for p in _LINK_PREFIXES_AT_3)
                    or lnu - b1 < 4
                ):
                    t1.write(s)
                    continue
                in_block = True
            if b"</te" in s:
                in_block = False
            t2.write(s)


def prepr2(source: PathLike, first: PathLike, second: PathLike) -> None:
    """Move page ids and revision metadata to ``second`` in a compact form."""
    state = 0
    last_id = 0

    def step(s: bytes) -> bytes:
        nonlocal state, last_id
        length = len(s)
        buf = bytearray(s) + bytes(16)

        def cstr(offset: int) -> bytes:
            return bytes(buf[offset : buf.find(0, offset)])

        if state == 2:
            cur_id = _atoi(buf, 8)
            if buf[4:8] in (b"<id>", b"<hea"):
                t2.write(b">%d\n" % (cur_id - last_id))
                last_id = cur_id
                state = 1
                return cstr(0)
            state = 0
        if state:
            if buf[6:10] == b"<tim":
                year, month, day = _atoi(buf, 17), _atoi(buf, 22), _atoi(buf, 25)
                hour, minute, second_ = _atoi(buf, 28), _atoi(buf, 31), _atoi(buf, 34)
                t2.write(
                    b"timestamp>%d%d:%d\n"
                    % (
                        year - 2002,
                        month * 31 + day - 32,
                        hour * 3600 + minute * 60 + second_,
                    )
                )
                return cstr(0)
            close = buf.find(b">", 0, length)
            if close >= 0:
                opening = buf.find(b"<", close + 1, length)
                if opening >= 0:
                    buf[opening] = 10
                    buf[opening + 1] = 0
            if state == 3:
                t2.write(cstr(7) if buf[6:10] == b"</co" else cstr(9))
            else:
                t2.write(cstr(5) if buf[4:8] in (b"<rev", b"<res") else cstr(7))
                if buf[6:10] == b"<con":
                    state = 3
        else:
            t1.write(cstr(0))
        title = buf.find(b"</title>", 0, length + 7)
        if 0 <= title < length and buf[0:4] == b"    ":
            state = 2
        contributor = buf.find(b"</contri", 0, length + 7)
        if 0 <= contributor < length:
            state = 0
        return cstr(0)

    with open(source, "rb") as sf, open(first, "wb") as t1, open(second, "wb") as t2:
        _run_lines(sf, _SHORT_LINE, step)


def _run_lines(stream: BinaryIO, size: int, step: Callable[[bytes], bytes]) -> None:
    """Feed lines to ``step``; at end of file the last line is seen once more."""
    last: bytes | None = None
    while True:
        chunk, eof = _fgets(stream, size)
        if chunk:
            last = chunk
        if last is not None:
            last = step(last)
        if eof:
            break


def prepr3(source: PathLike, target: PathLike) -> None:
    """Shorten ``&amp;``, ``&quot;``, ``&lt;`` and ``&gt;`` to two bytes."""
    data = Path(source).read_bytes()
    Path(target).write_bytes(_PREPR3_RE.sub(lambda m: _PREPR3_MAP[m.group(1)], data))


def prepr4(source: PathLike, target: PathLike) -> None:
    """Shorten entities that follow a doubled ampersand."""
    data = Path(source).read_bytes()
    Path(target).write_bytes(_PREPR4_RE.sub(lambda m: b"&" + _PREPR4_MAP[m.group(1)], data))


def _text_region(s: bytes, in_text: bool) -> tuple[int, bool]:
    start = 0
    tag = s.find(b"<text ")
    if tag >= 0:
        in_text = True
        close = s.find(b">", tag)
        if close < 0:
            raise ValueError("unterminated <text> tag")
        if s[close - 1] == ord("/"):
            in_text = False
        start = close + 1
    if b"</text>" in s:
        in_text = False
    return start, in_text


def _line_filter(
    source: PathLike, target: PathLike, rewrite: Callable[[bytes, int], bytes]
) -> None:
    in_text = False

    def step(s: bytes) -> bytes:
        nonlocal in_text
        start, in_text = _text_region(s, in_text)
        if in_text:
            s = rewrite(s, start)
        dst.write(s)
        return s

    with open(source, "rb") as src, open(target, "wb") as dst:
        _run_lines(src, _LONG_LINE, step)


def _unescape_text(s: bytes, start: int) -> bytes:
    result = bytearray(s[:start])
    for index in range(start, len(s)):
        ch = s[index]
        if ch in _ESCAPED_IN_TEXT:
            if index == 0 or s[index - 1] != ord("&"):
                raise ValueError("quote or angle bracket in text is not escaped")
            result.pop()
        result.append(ch)
    return bytes(result)


def _escape_text(s: bytes, start: int) -> bytes:
    result = bytearray(s[:start])
    for ch in s[start:]:
        if ch in _ESCAPED_IN_TEXT:
            result.append(ord("&"))
        result.append(ch)
    return bytes(result)


def prepr5(source: PathLike, target: PathLike) -> None:
    """Drop the ampersand before quotes and angle brackets inside article text."""
    _line_filter(source, target, _unescape_text)


def _swap_runs(line: bytes) -> bytes:
    for symbol in (b"[", b"]", b"&"):

        def swap(match: re.Match, symbol: bytes = symbol) -> bytes:
            count = len(match.group())
            return symbol * (3 - count) if count in (1, 2) else match.group()

        line = re.sub(re.escape(symbol) + b"+", swap, line)
    return line


def prepr6(source: PathLike, target: PathLike) -> None:
    """Swap single and double runs of ``[``, ``]`` and ``&``; it is its own inverse."""
    with open(source, "rb") as src, open(target, "wb") as dst:
        while True:
            s, eof = _fgets(src, _LONG_LINE)
            if eof:
                break
            dst.write(_swap_runs(s))


def _split_block(data: bytes, split: int) -> None:
    if split > len(data):
        raise ValueError("input is shorter than its first part")


def resto1(source: PathLike, target: PathLike) -> None:
    """Put the link blocks moved by :func:`prepr1` back into the article texts."""
    data = Path(source).read_bytes()
    split = TMP1A_SIZE
    _split_block(data, split)
    total = len(data)
    out = bytearray()
    p1, p2 = 0, split
    lnu = marked = 0
    in_text = False
    while len(out) < total:
        lnu += 1
        newline = data.find(b"\n", p1, split)
        j = newline + 1 - p1 if newline >= 0 else split - p1
        if j <= 0:
            raise ValueError("first part ended before the output was complete")
        window = data[p1 : p1 + j + 3]
        if b"<tex" in window:
            in_text, marked = True, lnu
        if b"</te" in window:
            in_text = False
        line = data[p1 : p1 + j]
        if (
            j >= 12
            and line[j - 12 : j - 1] == b"</revision>"
            and in_text
            and lnu - marked >= 4
        ):
            while True:
                end = _line_end(data, p2)
                out += data[p2:end]
                p2 = end
                if data[p2 - 8 : p2 - 1] == b"</text>":
                    break
        out += line
        p1 += j
    Path(target).write_bytes(bytes(out[:total]))


def _restore_revision(data: bytes, p2: int, out: bytearray) -> int:
    seen_contributor = False
    while True:
        head = data[p2 : p2 + 4]
        if head == b"time":
            p2 += 11
            colon = data.find(b":", p2)
            days, hms = _atoi(data, p2), _atoi(data, colon + 1)
            hours = hms // 3600
            out += b"      <timestamp>%d-%02d-%02dT%02d:%02d:%02dZ</timestamp>\n" % (
                data[p2 - 1] - ord("0") + 2002,
                days // 31 + 1,
                days % 31 + 1,
                hours,
                hms // 60 - hours * 60,
                hms % 60,
            )
            p2 = _line_end(data, p2)
        else:
            end = _line_end(data, p2)
            line = data[p2:end]
            out += b"    "
            if head not in (b"revi", b"rest"):
                out += b"  "
                if seen_contributor and head != b"/con":
                    out += b"  "
                if head == b"cont":
                    seen_contributor = True
            out += b"<" + line
            p2 = end
            if data[p2 - 2] != ord(">"):
                name_end = line.find(b">")
                if name_end < 0:
                    raise ValueError("metadata line has no tag name")
                out[-1] = ord("<")
                out += b"/" + line[: name_end + 1] + b"\n"
        if data[p2 - 14 : p2 - 1] == b"/contributor>":
            return p2


def resto2(source: PathLike, target: PathLike) -> None:
    """Rebuild page ids and revision metadata removed by :func:`prepr2`."""
    data = Path(source).read_bytes()
    split = TMP2A_SIZE
    _split_block(data, split)
    total = OUT5_SIZE
    out = bytearray()
    p1, p2 = 0, split
    last_id = 0
    while len(out) < total:
        newline = data.find(b"\n", p1, split)
        j = newline + 1 - p1 if newline >= 0 else split - p1
        if j <= 0:
            raise ValueError("first part ended before the output was complete")
        out += data[p1 : p1 + j]
        p1 += j
        if data[p1 - 9 : p1 - 1] == b"</title>" and data[p1 : p1 + 4] == b"    ":
            last_id += _atoi(data, p2 + 1)
            out += b"    <id>%d</id>\n" % last_id
            p2 = _line_end(data, p2)
            p2 = _restore_revision(data, p2, out)
    Path(target).write_bytes(bytes(out[:total]))


def resto3(source: PathLike, target: PathLike) -> None:
    """Expand the two-byte forms written by :func:`prepr3`."""
    data = Path(source).read_bytes()

    def expand(match: re.Match) -> bytes:
        return b"&" + _RESTO3_MAP.get(match.group(1), match.group(1))

    Path(target).write_bytes(_RESTO3_RE.sub(expand, data))


def resto4(source: PathLike, target: PathLike) -> None:
    """Expand the shortened entities written by :func:`prepr4`."""
    data = Path(source).read_bytes()

    def expand(match: re.Match) -> bytes:
        return _RESTO4_MAP.get(match.group(1), match.group(1))

    Path(target).write_bytes(_RESTO4_RE.sub(expand, data))


def resto5(source: PathLike, target: PathLike) -> None:
    """Put back the ampersands removed by :func:`prepr5`."""
    _line_filter(source, target, _escape_text)


def phda9_prepr(workdir: PathLike = ".") -> Path:
    """Run the forward chain on ``.main_reordered``; return the result's path."""
    w = Path(workdir)
    sed("&lt;/title&gt;", "&lt;/tiqqqtle&gt;", w / ".main_reordered", w / "out8")
    sed("&amp;<", "&amp;qqq<", w / "out8", w / "out7")
    prepr3(w / "out7", w / "out3")
    prepr4(w / "out3", w / "out4")
    prepr5(w / "out4", w / "out5")
    prepr2(w / "out5", w / "tmp2a", w / "tmp2b")
    cat(w / "tmp2a", w / "tmp2b", w / "out2")
    sed("<textarea", "<tqqextarea", w / "out2", w / "out10")
    sed("</textarea", "</tqqextarea", w / "out10", w / "out11")
    sed("<textinput", "<tqqextinput", w / "out11", w / "out12")
    sed("</textinput", "</tqqextinput", w / "out12", w / "out9")
    prepr1(w / "out9", w / "tmp1a", w / "tmp1b")
    cat(w / "tmp1a", w / "tmp1b", w / "out1")
    result = w / ".main_phda9prepr"
    prepr6(w / "out1", result)
    return result


def phda9_resto(workdir: PathLike = ".") -> Path:
    """Run the reverse chain on ``.main_decomp``; return the result's path."""
    w = Path(workdir)
    prepr6(w / ".main_decomp", w / "out6d")
    resto1(w / "out6d", w / "out1d")
    sed("</tqqextinput", "</textinput", w / "out1d", w / "out13d")
    sed("<tqqextinput", "<textinput", w / "out13d", w / "out11d")
    sed("</tqqextarea", "</textarea", w / "out11d", w / "out12d")
    sed("<tqqextarea", "<textarea", w / "out12d", w / "out10d")
    resto2(w / "out10d", w / "out2d")
    resto5(w / "out2d", w / "out5d")
    resto3(w / "out5d", w / "out3d")
    resto4(w / "out3d", w / "out4d")
    sed("&amp;qqq<", "&amp;<", w / "out4d", w / "out15d")
    result = w / ".main_decomp_restored"
    sed("&lt;/tiqqqtle&gt;", "&lt;/title&gt;", w / "out15d", result)
    return result