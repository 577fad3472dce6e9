"""Splitting the corpus into intro, main body and coda by line number."""

from __future__ import annotations

import os
from contextlib import ExitStack
from typing import BinaryIO

PathLike = str | os.PathLike

COMP_INTRO_END_LINE = 29
COMP_MAIN_END_LINE = 13146932
COMP_CODA_END_LINE = 13147025

DECOMP_MAIN_END_LINE = 13146905
DECOMP_INTRO_END_LINE = 13146934
DECOMP_CODA_END_LINE = 13147027


def _route_lines(
    source: PathLike, routes: list[tuple[int, BinaryIO]], tail: BinaryIO
) -> None:
    with open(source, "rb") as stream:
        for number, raw in enumerate(stream):
            line = raw[:-1] if raw.endswith(b"\n") else raw
            for limit, target in routes:
                if number < limit:
                    target.write(line + b"\n")
                    break
            else:
                tail.write(line)


def split_for_compression(
    source: PathLike, intro: PathLike, main: PathLike, coda: PathLike
) -> None:
    """Split the original corpus into its intro, main body and coda."""
    with ExitStack() as stack:
        intro_out, main_out, coda_out = (
            stack.enter_context(open(path, "wb")) for path in (intro, main, coda)
        )
        _route_lines(
            source,
            [
                (COMP_INTRO_END_LINE, intro_out),
                (COMP_MAIN_END_LINE, main_out),
                (COMP_CODA_END_LINE, coda_out),
            ],
            coda_out,
        )


def split_for_decompression(
    source: PathLike, intro: PathLike, main: PathLike, coda: PathLike
) -> None:
    """Split a decompressed stream, where the main body comes first."""
    with ExitStack() as stack:
        intro_out, main_out, coda_out = (
            stack.enter_context(open(path, "wb")) for path in (intro, main, coda)
        )
        _route_lines(
            source,
            [
                (DECOMP_MAIN_END_LINE, main_out),
                (DECOMP_INTRO_END_LINE, intro_out),
                (DECOMP_CODA_END_LINE, coda_out),
            ],
            coda_out,
        )