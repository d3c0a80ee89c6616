from __future__ import annotations

import struct
from typing import Any, Callable

import pytest

# (tag, type code, value): str for ASCII, [(num, den), ...] for RATIONAL,
# int for SHORT/LONG, raw bytes for any other type.
Entry = tuple[int, int, Any]

GPS_PITTSBURGH: list[Entry] = [
    (0x0001, 2, "N"),
    (0x0002, 5, [(40, 1), (26, 1), (46, 1)]),
    (0x0003, 2, "W"),
    (0x0004, 5, [(79, 1), (56, 1), (55, 1)]),
]


def _encode_entry(entry: Entry, le: bool) -> tuple[int, bytes]:
    """Return (count, value bytes) for an entry."""
    bo = "<" if le else ">"
    _, typ, value = entry
    if typ == 2:
        raw = value.encode("latin-1") + b"\x00"
        return len(raw), raw
    if typ == 5:
        return len(value), b"".join(struct.pack(bo + "II", n, d) for n, d in value)
    if typ == 3:
        return 1, struct.pack(bo + "H", value) + b"\x00\x00"
    if typ == 4:
        return 1, struct.pack(bo + "I", value)
    return len(value), bytes(value)


def build_tiff(
    ifd0: list[Entry],
    gps: list[Entry] | None = None,
    exif: list[Entry] | None = None,
    little_endian: bool = True,
) -> bytes:
    bo = "<" if little_endian else ">"
    dirs = [list(ifd0)]
    pointer_tags = []
    if gps is not None:
        dirs.append(list(gps))
        pointer_tags.append(0x8825)
    if exif is not None:
        dirs.append(list(exif))
        pointer_tags.append(0x8769)

    sizes = [len(dirs[0]) + len(pointer_tags)] + [len(d) for d in dirs[1:]]
    offsets = []
    pos = 8
    for n in sizes:
        offsets.append(pos)
        pos += 2 + 12 * n + 4
    for tag, offset in zip(pointer_tags, offsets[1:]):
        dirs[0].append((tag, 4, offset))

    data_start = pos
    data = bytearray()
    out = bytearray(b"II" if little_endian else b"MM")
    out += struct.pack(bo + "HI", 42, 8)
    for d in dirs:
        out += struct.pack(bo + "H", len(d))
        for entry in d:
            count, raw = _encode_entry(entry, little_endian)
            if entry[1] == 5 or len(raw) > 4:
                field = struct.pack(bo + "I", data_start + len(data))
                data += raw
            else:
                field = raw.ljust(4, b"\x00")
            out += struct.pack(bo + "HHI", entry[0], entry[1], count) + field
        out += struct.pack(bo + "I", 0)
    return bytes(out + data)


def segment(marker: int, payload: bytes) -> bytes:
    return struct.pack(">HH", marker, len(payload) + 2) + payload


JFIF_APP0 = segment(0xFFE0, b"JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00")


def wrap_jpeg(tiff: bytes, ident: bytes = b"Exif\x00\x00", leading: bytes = JFIF_APP0) -> bytes:
    return b"\xff\xd8" + leading + segment(0xFFE1, ident + tiff) + b"\xff\xd9"


@pytest.fixture
def make_jpeg() -> Callable[..., bytes]:
    def _make(
        ifd0: list[Entry] | None = None,
        gps: list[Entry] | None = None,
        exif: list[Entry] | None = None,
        little_endian: bool = True,
        ident: bytes = b"Exif\x00\x00",
        leading: bytes = JFIF_APP0,
    ) -> bytes:
        tiff = build_tiff(ifd0 or [], gps=gps, exif=exif, little_endian=little_endian)
        return wrap_jpeg(tiff, ident=ident, leading=leading)

    return _make


@pytest.fixture
def gps_pittsburgh() -> list[Entry]:
    return list(GPS_PITTSBURGH)
