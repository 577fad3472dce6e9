"""Reordering of ``<page>`` articles and restoring their order by page id."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

PathLike = str | os.PathLike

NUM_OF_ARTICLES = 243425

_PATTERNS = (b"<page>", b"<id>", b"</page>")
_EXPECT_PAGE, _EXPECT_ID, _EXPECT_PAGEEND = range(3)
_LEADING_INT = re.compile(rb"\s*([+-]?\d+)")


@dataclass
class Article:
    """A page: its id and the first and last line it spans (inclusive)."""

    id: int = 0
    start: int = 0
    end: int = 0


def _stoi(text: bytes) -> int:
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"no integer at the start of {text!r}")
    return int(match.group(1))


def _page_id(line: bytes) -> int:
    text = line.replace(b" ", b"")
    text = text.replace(b"<id>", b"", 1)
    text = text.replace(b"</id>", b"", 1)
    return _stoi(text)


def _read_lines(path: PathLike) -> list[bytes]:
    data = Path(path).read_bytes()
    if not data:
        return []
    lines = data.split(b"\n")
    if data.endswith(b"\n"):
        lines.pop()
    return lines


def _write_articles(
    path: PathLike, lines: list[bytes], articles: Iterable[Article]
) -> None:
    with open(path, "wb") as out:
        for article in articles:
            for line in lines[article.start : article.end + 1]:
                out.write(line + b"\n")


def parse_articles(lines: Iterable[bytes]) -> list[Article]:
    """Find the pages in ``lines`` (byte strings without line endings)."""
    articles: list[Article] = []
    state = _EXPECT_PAGE
    current = Article()
    for number, line in enumerate(lines):
        if _PATTERNS[state] not in line:
            continue
        if state == _EXPECT_PAGE:
            current.start = number
            state = _EXPECT_ID
        elif state == _EXPECT_ID:
            current.id = _page_id(line)
            state = _EXPECT_PAGEEND
        else:
            current.end = number
            articles.append(Article(current.id, current.start, current.end))
            state = _EXPECT_PAGE
    return articles


def reorder(
    main_path: PathLike,
    order_path: PathLike,
    output_path: PathLike,
    num_articles: int = NUM_OF_ARTICLES,
) -> list[int]:
    """Write the pages of ``main_path`` in the order listed in ``order_path``.

    Pages missing from the order file follow in their original order. Returns
    the order used.
    """
    lines = _read_lines(main_path)
    articles = parse_articles(lines)

    positions: list[int] = []
    used = [False] * num_articles
    for entry in _read_lines(order_path):
        position = _stoi(entry)
        if not 0 <= position < num_articles:
            raise ValueError(f"article position {position} is out of range")
        positions.append(position)
        used[position] = True

    if len(positions) < num_articles:
        positions.extend(i for i, seen in enumerate(used) if not seen)

    if any(position >= len(articles) for position in positions):
        raise ValueError(
            f"order refers to more articles than the {len(articles)} found"
        )
    _write_articles(output_path, lines, (articles[p] for p in positions))
    return positions


def sort_articles(input_path: PathLike, output_path: PathLike) -> list[Article]:
    """Write the pages of ``input_path`` sorted by page id, keeping ties in order."""
    lines = _read_lines(input_path)
    articles = sorted(parse_articles(lines), key=lambda article: article.id)
    _write_articles(output_path, lines, articles)
    return articles