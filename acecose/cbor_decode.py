"""Reading CBOR items in place, without building Python objects for the whole input."""

from __future__ import annotations

from typing import Iterator, Optional

from .cbor_encode import (
    BytesLike,
    CBORDecodeError,
    Encoder,
    MajorType,
    _read_head,
    item_size,
    major_type,
)

_INT_MAX = (1 << 31) - 1
_INT_MIN = -(1 << 31)
_NULL_BYTE = (MajorType.SPECIAL << 5) | 22


class Decoder:
    """A read position in a CBOR-encoded buffer.

    The decoder looks at the item that starts at ``offset``. Lookups such as
    map_get() and items() return new decoders that share the same buffer.
    """

    def __init__(self, data: BytesLike, offset: int = 0) -> None:
        buffer = bytes(data)
        if not 0 <= offset <= len(buffer):
            raise ValueError(f"offset {offset} outside of buffer of {len(buffer)} bytes")
        self.data = buffer
        self.offset = offset

    def __repr__(self) -> str:
        return f"Decoder(offset={self.offset}, remaining={self.remaining()})"

    def _head(self):
        return _read_head(self.data, self.offset)

    def type(self) -> MajorType:
        """Return the major type of the current item, INVALID if no data is left."""
        if self.remaining() <= 0:
            return MajorType.INVALID
        return major_type(self.data[self.offset])

    def check_type(self, major: MajorType) -> bool:
        """Return True if the current item has the given major type."""
        return self.remaining() > 0 and self.type() == major

    def is_null(self) -> bool:
        """Return True if the current item is the simple value null."""
        return self.remaining() > 0 and self.data[self.offset] == _NULL_BYTE

    def remaining(self) -> int:
        """Return the number of bytes from the current position to the end."""
        return len(self.data) - self.offset

    def size(self) -> int:
        """Return the encoded size of the current item, nested content included."""
        return item_size(self.data, self.offset)

    def raw(self) -> bytes:
        """Return the complete encoding of the current item."""
        return self.data[self.offset:self.offset + self.size()]

    def map_get(self, label: int) -> Optional["Decoder"]:
        """Return a decoder for the value stored under integer ``label``.

        Returns None if the current item is not a map or has no such label;
        the first matching entry wins. Non-integer labels are skipped.
        Raises CBORDecodeError if the map is malformed before a match is found.
        """
        if not self.check_type(MajorType.MAP):
            return None
        _, pairs, head = self._head()
        want_major = MajorType.UINT if label >= 0 else MajorType.NEGINT
        want_value = label if label >= 0 else ~label
        pos = self.offset + head
        end = len(self.data)
        for _ in range(pairs):
            if pos >= end:
                break
            key_major, key_value, key_head = _read_head(self.data, pos)
            if key_major in (MajorType.UINT, MajorType.NEGINT):
                pos += key_head
                if key_major == want_major and key_value == want_value:
                    return Decoder(self.data, pos)
            else:
                pos += item_size(self.data, pos)
            pos += item_size(self.data, pos)
        return None

    def get_uint(self) -> int:
        """Return the value of an unsigned integer item."""
        if not self.check_type(MajorType.UINT):
            raise CBORDecodeError(f"expected unsigned integer, found {self.type().name}")
        return self._head()[1]

    def get_int(self) -> int:
        """Return the value of an integer item that fits a signed 32-bit int."""
        kind = self.type()
        if kind not in (MajorType.UINT, MajorType.NEGINT):
            raise CBORDecodeError(f"expected integer, found {kind.name}")
        argument = self._head()[1]
        value = argument if kind == MajorType.UINT else ~argument
        if not _INT_MIN <= value <= _INT_MAX:
            raise CBORDecodeError(f"integer out of range: {value}")
        return value

    def consume_tag(self, tag: int) -> bool:
        """Step over a tag head with value ``tag``; return whether one was consumed."""
        if not self.check_type(MajorType.TAG):
            return False
        _, value, head = self._head()
        if value != tag:
            return False
        self.offset += head
        return True

    def sequence_length(self) -> int:
        """Return the byte length of a string, or the element count of an array or map."""
        kind = self.type()
        if kind not in (MajorType.BSTR, MajorType.TSTR, MajorType.ARRAY, MajorType.MAP):
            raise CBORDecodeError(f"item of type {kind.name} has no length")
        _, count, head = self._head()
        if head + count > self.remaining():
            raise CBORDecodeError("item exceeds the available data")
        return count

    def get_bytes(self) -> bytes:
        """Return the contents of a byte or text string item."""
        kind = self.type()
        if kind not in (MajorType.BSTR, MajorType.TSTR):
            raise CBORDecodeError(f"expected string, found {kind.name}")
        _, length, head = self._head()
        start = self.offset + head
        if start + length > len(self.data):
            raise CBORDecodeError("truncated string contents")
        return self.data[start:start + length]

    def get_text(self) -> str:
        """Return the contents of a text string item."""
        if not self.check_type(MajorType.TSTR):
            raise CBORDecodeError(f"expected text string, found {self.type().name}")
        try:
            return self.get_bytes().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CBORDecodeError(f"invalid UTF-8 in text string: {exc}") from None

    def items(self) -> Iterator["Decoder"]:
        """Yield a decoder for each element of an array, or key and value of a map in turn."""
        kind = self.type()
        if kind not in (MajorType.ARRAY, MajorType.MAP):
            raise CBORDecodeError(f"expected array or map, found {kind.name}")
        _, count, head = self._head()
        total = count if kind == MajorType.ARRAY else 2 * count
        pos = self.offset + head
        for _ in range(total):
            size = item_size(self.data, pos)
            yield Decoder(self.data, pos)
            pos += size


def copy_item(decoder: Decoder, encoder: Encoder) -> int:
    """Copy the current item of ``decoder`` into ``encoder`` and return its size."""
    return encoder.copy_raw(decoder.raw())