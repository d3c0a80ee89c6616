from __future__ import annotations


class ByteReader:
    """Random-access reads over an immutable buffer.

    Every accessor takes an absolute offset and returns ``None`` instead of
    raising when the read would leave the buffer.
    """

    __slots__ = ("_data",)

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(bytes(data))

    def __len__(self) -> int:
        return len(self._data)

    def remaining(self, offset: int) -> int:
        if offset < 0:
            return 0
        return max(len(self._data) - offset, 0)

    def has(self, offset: int, length: int) -> bool:
        return offset >= 0 and length >= 0 and offset + length <= len(self._data)

    def take(self, offset: int, length: int) -> bytes | None:
        if not self.has(offset, length):
            return None
        return bytes(self._data[offset : offset + length])

    def u8(self, offset: int) -> int | None:
        if not self.has(offset, 1):
            return None
        return self._data[offset]

    def u16(self, offset: int, little_endian: bool = False) -> int | None:
        raw = self.take(offset, 2)
        if raw is None:
            return None
        return int.from_bytes(raw, "little" if little_endian else "big")

    def u32(self, offset: int, little_endian: bool = False) -> int | None:
        raw = self.take(offset, 4)
        if raw is None:
            return None
        return int.from_bytes(raw, "little" if little_endian else "big")
