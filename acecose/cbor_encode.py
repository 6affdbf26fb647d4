"""A small CBOR encoder with a fixed output capacity, plus item inspection helpers."""

from __future__ import annotations

from enum import IntEnum
from typing import Optional, Tuple, Union

BytesLike = Union[bytes, bytearray, memoryview]

_UINT64_MAX = (1 << 64) - 1

# Additional-information values that announce a following argument of
# the given width in bytes.
_ARGUMENT_WIDTHS = {24: 1, 25: 2, 26: 4, 27: 8}

_SIMPLE_FALSE = 20
_SIMPLE_TRUE = 21
_SIMPLE_NULL = 22
_SIMPLE_UNDEFINED = 23


class MajorType(IntEnum):
    """CBOR major types; INVALID marks a position where no item can be read."""

    UINT = 0
    NEGINT = 1
    BSTR = 2
    TSTR = 3
    ARRAY = 4
    MAP = 5
    TAG = 6
    SPECIAL = 7
    INVALID = 99


class CBORError(ValueError):
    """Base class for CBOR encoding and decoding errors."""


class CBOREncodeError(CBORError):
    """Raised when a value cannot be encoded or does not fit the output."""


class CBORDecodeError(CBORError):
    """Raised when input is not a complete, well-formed CBOR item."""


def major_type(initial_byte: int) -> MajorType:
    """Return the major type encoded in the initial byte of a CBOR item."""
    if not 0 <= initial_byte <= 0xFF:
        raise ValueError(f"not a byte value: {initial_byte!r}")
    return MajorType(initial_byte >> 5)


def _encode_head(major: int, value: int) -> bytes:
    if not 0 <= value <= _UINT64_MAX:
        raise CBOREncodeError(f"argument out of range: {value!r}")
    base = major << 5
    if value <= 23:
        return bytes([base | value])
    for info, width in _ARGUMENT_WIDTHS.items():
        if value < 1 << (8 * width):
            return bytes([base | info]) + value.to_bytes(width, "big")
    raise CBOREncodeError(f"argument out of range: {value!r}")  # pragma: no cover


def _read_head(data: BytesLike, offset: int) -> Tuple[MajorType, int, int]:
    """Read the item head at ``offset``: (major type, argument, head length)."""
    if offset < 0 or offset >= len(data):
        raise CBORDecodeError("no CBOR item at this position")
    initial = data[offset]
    major = MajorType(initial >> 5)
    info = initial & 0x1F
    if info <= 23:
        return major, info, 1
    width = _ARGUMENT_WIDTHS.get(info)
    if width is None:
        raise CBORDecodeError(f"unsupported additional information: {info}")
    end = offset + 1 + width
    if end > len(data):
        raise CBORDecodeError("truncated item head")
    return major, int.from_bytes(bytes(data[offset + 1:end]), "big"), 1 + width


def item_size(data: BytesLike, offset: int = 0) -> int:
    """Return the encoded size of the complete CBOR item starting at ``offset``.

    Nested arrays, maps and tagged items are included. Raises CBORDecodeError
    if the item is truncated or uses an unsupported encoding.
    """
    if offset < 0:
        raise ValueError("offset must not be negative")
    end = len(data)
    pos = offset
    pending = 1
    while pending:
        major, argument, head = _read_head(data, pos)
        pos += head
        pending -= 1
        if major in (MajorType.BSTR, MajorType.TSTR):
            if end - pos < argument:
                raise CBORDecodeError("truncated string contents")
            pos += argument
        elif major is MajorType.ARRAY:
            pending += argument
        elif major is MajorType.MAP:
            pending += 2 * argument
        elif major is MajorType.TAG:
            pending += 1
    return pos - offset


class Encoder:
    """Writes CBOR items into an output of bounded size.

    A write that does not fit raises CBOREncodeError and leaves the output
    unchanged. A capacity of None means the output is unbounded.
    """

    def __init__(self, capacity: Optional[int] = None) -> None:
        if capacity is not None and capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = capacity
        self._buffer = bytearray()

    @property
    def available(self) -> Optional[int]:
        """Bytes still free, or None for an unbounded encoder."""
        if self.capacity is None:
            return None
        return self.capacity - len(self._buffer)

    def _append(self, *chunks: BytesLike) -> None:
        size = sum(len(chunk) for chunk in chunks)
        if self.capacity is not None and len(self._buffer) + size > self.capacity:
            raise CBOREncodeError(
                f"need {size} bytes, only {self.capacity - len(self._buffer)} available"
            )
        for chunk in chunks:
            self._buffer += chunk

    def write_head(self, major: int, value: int) -> None:
        """Write an item head of the given major type and argument."""
        if not 0 <= int(major) <= 7:
            raise ValueError(f"invalid major type: {major!r}")
        self._append(_encode_head(int(major), value))

    def write_array(self, count: int) -> None:
        """Start an array of ``count`` items."""
        self.write_head(MajorType.ARRAY, count)

    def write_map(self, count: int) -> None:
        """Start a map of ``count`` key/value pairs."""
        self.write_head(MajorType.MAP, count)

    def write_uint(self, value: int) -> None:
        """Write an unsigned integer."""
        self.write_head(MajorType.UINT, value)

    def write_int(self, value: int) -> None:
        """Write a signed integer, as a negative integer item when below zero."""
        if value < 0:
            self.write_head(MajorType.NEGINT, ~value)
        else:
            self.write_head(MajorType.UINT, value)

    def _write_sequence(self, major: MajorType, data: BytesLike) -> None:
        self._append(_encode_head(major, len(data)), data)

    def write_bytes(self, data: BytesLike) -> None:
        """Write a byte string."""
        self._write_sequence(MajorType.BSTR, bytes(data))

    def write_text(self, text: str) -> None:
        """Write a UTF-8 text string."""
        self._write_sequence(MajorType.TSTR, text.encode("utf-8"))

    def write_bool(self, value: bool) -> None:
        """Write true or false."""
        self.write_head(MajorType.SPECIAL, _SIMPLE_TRUE if value else _SIMPLE_FALSE)

    def write_null(self) -> None:
        """Write null."""
        self.write_head(MajorType.SPECIAL, _SIMPLE_NULL)

    def write_undefined(self) -> None:
        """Write undefined."""
        self.write_head(MajorType.SPECIAL, _SIMPLE_UNDEFINED)

    def write_tag(self, tag: int) -> None:
        """Write a tag; the next item written is the tagged content."""
        self.write_head(MajorType.TAG, tag)

    def copy_raw(self, data: BytesLike) -> int:
        """Copy the first complete CBOR item of ``data`` and return its size."""
        size = item_size(data)
        self._append(bytes(data[:size]))
        return size

    def finish(self) -> bytes:
        """Return everything written so far."""
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)