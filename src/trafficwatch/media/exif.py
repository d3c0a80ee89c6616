"""Minimal EXIF reader for JPEG files.

Walks the JPEG marker stream to the APP1 "Exif" segment, decodes the TIFF
directories it carries and resolves the GPS position and capture time. Only
the tags needed for those two values are decoded. Malformed or missing
metadata produces an empty :class:`ExifResult`; nothing here raises for bad
input bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from pathlib import Path
import re
from typing import Any, Union

from trafficwatch.media.binary import ByteReader

log = logging.getLogger(__name__)

SOI_MARKER = 0xFFD8
APP1_MARKER = 0xFFE1
EXIF_LITERAL = b"Exif"

TYPE_ASCII = 2
TYPE_SHORT = 3
TYPE_LONG = 4
TYPE_RATIONAL = 5

IFD_ENTRY_SIZE = 12

TAG_GPS_IFD = 0x8825
TAG_EXIF_IFD = 0x8769
TAG_GPS_LATITUDE_REF = 0x0001
TAG_GPS_LATITUDE = 0x0002
TAG_GPS_LONGITUDE_REF = 0x0003
TAG_GPS_LONGITUDE = 0x0004
TAG_DATETIME_ORIGINAL = 0x9003
TAG_DATETIME_DIGITIZED = 0x9004
TAG_MODIFY_DATE = 0x0132

TagValue = Union[int, str, list[Union[float, None]]]
TagTable = dict[int, TagValue]

_EXIF_DATETIME_RE = re.compile(r"([0-9]{4}):([0-9]{2}):([0-9]{2}) ([0-9]{2}):([0-9]{2}):([0-9]{2})")


@dataclass(frozen=True, slots=True)
class GeoCoordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class ExifResult:
    location: GeoCoordinate | None = None
    date_time: str | None = None

    @property
    def latitude(self) -> float | None:
        return self.location.latitude if self.location else None

    @property
    def longitude(self) -> float | None:
        return self.location.longitude if self.location else None

    @property
    def is_empty(self) -> bool:
        return self.location is None and self.date_time is None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.location is not None:
            out["latitude"] = self.location.latitude
            out["longitude"] = self.location.longitude
        if self.date_time is not None:
            out["dateTime"] = self.date_time
        return out


EMPTY_RESULT = ExifResult()


def find_tiff_start(data: bytes | ByteReader) -> int | None:
    """Return the absolute offset of the TIFF header inside the APP1 segment."""
    reader = data if isinstance(data, ByteReader) else ByteReader(data)
    if reader.u16(0) != SOI_MARKER:
        log.debug("no JPEG SOI marker")
        return None

    offset = 2
    while True:
        marker = reader.u16(offset)
        if marker is None:
            log.debug("marker stream ended at %d without APP1", offset)
            return None
        offset += 2

        if marker == APP1_MARKER:
            if reader.u16(offset) is None:
                return None
            offset += 2
            if reader.take(offset, 4) != EXIF_LITERAL:
                log.debug("APP1 segment at %d is not Exif", offset)
                return None
            # "Exif\0\0"
            return offset + 6

        if (marker & 0xFF00) != 0xFF00:
            log.debug("invalid marker 0x%04x at %d", marker, offset - 2)
            return None

        length = reader.u16(offset)
        if length is None or length < 2:
            return None
        offset += length


def read_byte_order(reader: ByteReader, tiff_start: int) -> bool | None:
    """True for little-endian ("II"), False for big-endian ("MM")."""
    mark = reader.take(tiff_start, 2)
    if mark == b"II":
        return True
    if mark == b"MM":
        return False
    return None


def _decode_ascii(reader: ByteReader, tiff_start: int, field: int, count: int, le: bool) -> str | None:
    if count <= 4:
        raw = reader.take(field, count)
    else:
        pointer = reader.u32(field, le)
        raw = None if pointer is None else reader.take(tiff_start + pointer, count)
    if raw is None:
        return None
    return raw.rstrip(b"\x00").decode("latin-1")


def _decode_rationals(
    reader: ByteReader, tiff_start: int, field: int, count: int, le: bool
) -> list[float | None] | None:
    pointer = reader.u32(field, le)
    if pointer is None:
        return None
    start = tiff_start + pointer
    if not reader.has(start, count * 8):
        return None

    values: list[float | None] = []
    for j in range(count):
        num = reader.u32(start + j * 8, le)
        den = reader.u32(start + j * 8 + 4, le)
        if num is None or den is None:
            return None
        values.append(num / den if den else None)
    return values


def _decode_entry(
    reader: ByteReader, tiff_start: int, field: int, type_code: int, count: int, le: bool
) -> TagValue | None:
    if type_code == TYPE_ASCII:
        return _decode_ascii(reader, tiff_start, field, count, le)
    if type_code == TYPE_RATIONAL:
        return _decode_rationals(reader, tiff_start, field, count, le)
    if type_code == TYPE_SHORT:
        # A SHORT sits in the first two bytes of the field for either byte order.
        return reader.u16(field, le)
    if type_code == TYPE_LONG:
        return reader.u32(field, le)
    return None


def parse_ifd(reader: ByteReader, tiff_start: int, ifd_offset: int, little_endian: bool) -> TagTable | None:
    """Decode one image file directory.

    ``ifd_offset`` is relative to ``tiff_start``. Returns ``None`` when the
    entry count or an entry record lies outside the buffer. Entries of
    unsupported types, and values whose storage is out of range, are left
    out of the table.
    """
    base = tiff_start + ifd_offset
    count = reader.u16(base, little_endian)
    if count is None:
        return None

    order = "little" if little_endian else "big"
    tags: TagTable = {}
    for i in range(count):
        entry = base + 2 + i * IFD_ENTRY_SIZE
        record = reader.take(entry, IFD_ENTRY_SIZE)
        if record is None:
            log.debug("directory at %d truncated at entry %d of %d", base, i, count)
            return None
        tag = int.from_bytes(record[0:2], order)
        type_code = int.from_bytes(record[2:4], order)
        value_count = int.from_bytes(record[4:8], order)

        value = _decode_entry(reader, tiff_start, entry + 8, type_code, value_count, little_endian)
        if value is not None:
            tags[tag] = value
    return tags


def dms_to_decimal(dms: Any, ref: Any) -> float | None:
    """Degrees/minutes/seconds plus hemisphere reference to signed degrees."""
    if not isinstance(dms, (list, tuple)) or len(dms) < 3:
        return None
    if not isinstance(ref, str) or not ref.strip():
        return None
    parts = dms[:3]
    if any(not isinstance(p, (int, float)) or not math.isfinite(p) for p in parts):
        return None

    degrees, minutes, seconds = parts
    value = degrees + minutes / 60 + seconds / 3600
    if ref.strip()[0].upper() in ("S", "W"):
        value = -value
    return value


def resolve_location(gps_tags: TagTable) -> GeoCoordinate | None:
    lat = dms_to_decimal(gps_tags.get(TAG_GPS_LATITUDE), gps_tags.get(TAG_GPS_LATITUDE_REF))
    lon = dms_to_decimal(gps_tags.get(TAG_GPS_LONGITUDE), gps_tags.get(TAG_GPS_LONGITUDE_REF))
    if lat is None or lon is None:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        log.debug("GPS position out of range: %s, %s", lat, lon)
        return None
    return GeoCoordinate(latitude=lat, longitude=lon)


def normalize_exif_datetime(value: Any) -> str | None:
    """Convert ``YYYY:MM:DD HH:MM:SS`` to ``YYYY-MM-DDTHH:MM:SS``."""
    if not isinstance(value, str):
        return None
    m = _EXIF_DATETIME_RE.fullmatch(value)
    if m is None:
        return None
    year, month, day, hour, minute, second = m.groups()
    return f"{year}-{month}-{day}T{hour}:{minute}:{second}"


def resolve_timestamp(exif_tags: TagTable | None, ifd0_tags: TagTable) -> str | None:
    # ModifyDate tracks file edits, not capture; only used when the Exif IFD has nothing.
    candidates: list[TagValue | None] = []
    if exif_tags:
        candidates.append(exif_tags.get(TAG_DATETIME_ORIGINAL))
        candidates.append(exif_tags.get(TAG_DATETIME_DIGITIZED))
    candidates.append(ifd0_tags.get(TAG_MODIFY_DATE))

    for value in candidates:
        if isinstance(value, str):
            return normalize_exif_datetime(value)
    return None


def _sub_ifd(reader: ByteReader, tiff_start: int, ifd0: TagTable, pointer_tag: int, le: bool) -> TagTable | None:
    pointer = ifd0.get(pointer_tag)
    if not isinstance(pointer, int) or pointer == 0:
        return None
    return parse_ifd(reader, tiff_start, pointer, le)


def extract_exif(data: bytes) -> ExifResult:
    """Extract GPS position and capture time from JPEG bytes."""
    reader = ByteReader(data)
    tiff_start = find_tiff_start(reader)
    if tiff_start is None:
        return EMPTY_RESULT

    little_endian = read_byte_order(reader, tiff_start)
    if little_endian is None:
        log.debug("unknown TIFF byte order at %d", tiff_start)
        return EMPTY_RESULT

    ifd0_offset = reader.u32(tiff_start + 4, little_endian)
    if ifd0_offset is None:
        return EMPTY_RESULT
    ifd0 = parse_ifd(reader, tiff_start, ifd0_offset, little_endian)
    if ifd0 is None:
        return EMPTY_RESULT

    location = None
    gps_tags = _sub_ifd(reader, tiff_start, ifd0, TAG_GPS_IFD, little_endian)
    if gps_tags is not None:
        location = resolve_location(gps_tags)

    exif_tags = _sub_ifd(reader, tiff_start, ifd0, TAG_EXIF_IFD, little_endian)
    date_time = resolve_timestamp(exif_tags, ifd0)

    return ExifResult(location=location, date_time=date_time)


def extract_exif_from_path(path: str | Path) -> ExifResult:
    return extract_exif(Path(path).read_bytes())
