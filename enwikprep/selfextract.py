"""Header handling and unpacking of self-extracting archives."""

from __future__ import annotations

import os
import struct
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

_LAYOUT = struct.Struct("<3i")

PathLike = str | os.PathLike


@dataclass
class HeaderInfo:
    """Sizes of the parts appended to an archive, stored at its very end."""

    dict_size: int = 0
    new_article_order_size: int = 0
    decomp_input_size: int = 0

    SIZE: ClassVar[int] = _LAYOUT.size

    def pack(self) -> bytes:
        """Return the fixed-size binary form of the header."""
        return _LAYOUT.pack(
            self.dict_size, self.new_article_order_size, self.decomp_input_size
        )

    @classmethod
    def unpack(cls, data: bytes) -> HeaderInfo:
        """Build a header from exactly :attr:`SIZE` bytes."""
        if len(data) != cls.SIZE:
            raise ValueError(f"header needs {cls.SIZE} bytes, got {len(data)}")
        return cls(*_LAYOUT.unpack(data))


def write_header(path: PathLike, header: HeaderInfo) -> None:
    """Write ``header`` to ``path``."""
    Path(path).write_bytes(header.pack())


def read_header(path: PathLike) -> HeaderInfo:
    """Read a header from the start of ``path``."""
    with open(path, "rb") as stream:
        return HeaderInfo.unpack(stream.read(HeaderInfo.SIZE))


def _trailing_header(blob: bytes, workdir: Path) -> HeaderInfo:
    if len(blob) < HeaderInfo.SIZE:
        raise ValueError("file is too short to carry a header")
    header_path = workdir / "test.dat"
    header_path.write_bytes(blob[-HeaderInfo.SIZE :])
    return read_header(header_path)


def _payload_offset(blob: bytes, *sizes: int) -> int:
    if any(size < 0 for size in sizes):
        raise ValueError("header holds a negative size")
    offset = len(blob) - sum(sizes) - HeaderInfo.SIZE
    if offset < 0:
        raise ValueError("header sizes exceed the file size")
    return offset


def _decompress(program: PathLike, source: str, target: str, workdir: Path) -> None:
    subprocess.run(
        [str(Path(program).resolve()), "-d", source, target],
        cwd=workdir,
        check=True,
    )


def selfextract_comp(binary_path: PathLike, workdir: PathLike = ".") -> HeaderInfo:
    """Split the compressor binary into program, dictionary and article order.

    The dictionary and the article order are unpacked by running the binary
    itself in decompression mode.
    """
    work = Path(workdir)
    blob = Path(binary_path).read_bytes()
    header = _trailing_header(blob, work)
    program_size = _payload_offset(
        blob, header.dict_size, header.new_article_order_size
    )
    dict_end = program_size + header.dict_size
    order_end = dict_end + header.new_article_order_size

    (work / ".decomp_bin").write_bytes(blob[:program_size])
    (work / ".dict.comp").write_bytes(blob[program_size:dict_end])
    _decompress(binary_path, ".dict.comp", ".dict", work)
    (work / ".new_article_order.comp").write_bytes(blob[dict_end:order_end])
    _decompress(binary_path, ".new_article_order.comp", ".new_article_order", work)
    return header


def selfextract_decomp(archive_path: PathLike, workdir: PathLike = ".") -> HeaderInfo:
    """Split an archive into its dictionary and compressed payload.

    The dictionary is unpacked by running the archive in decompression mode.
    """
    work = Path(workdir)
    blob = Path(archive_path).read_bytes()
    header = _trailing_header(blob, work)
    program_size = _payload_offset(blob, header.dict_size, header.decomp_input_size)
    dict_end = program_size + header.dict_size
    payload_end = dict_end + header.decomp_input_size

    (work / ".dict.comp_decomp").write_bytes(blob[program_size:dict_end])
    _decompress(archive_path, ".dict.comp_decomp", ".dict_decomp", work)
    (work / ".ready4cmix_decomp").write_bytes(blob[dict_end:payload_end])
    return header