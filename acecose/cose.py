"""COSE objects: parsing and serializing the bucket layout of COSE messages."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Optional

from .cbor_decode import Decoder
from .cbor_encode import BytesLike, CBORError, Encoder, MajorType
from .cose_types import CoseType

log = logging.getLogger(__name__)


class CoseError(Exception):
    """Base class for errors raised while handling COSE objects."""


class CoseTypeError(CoseError):
    """Raised when a COSE object or one of its parts has the wrong type."""


class CoseParseError(CoseError):
    """Raised when a COSE message is not well-formed CBOR."""


class CoseNotSupportedError(CoseError):
    """Raised for COSE features or algorithms that are not supported."""


class CoseSerializeError(CoseError):
    """Raised when a COSE object cannot be serialized."""


class CoseEncryptError(CoseError):
    """Raised when encryption fails."""


class CoseDecryptError(CoseError):
    """Raised when decryption fails."""


class Bucket(IntEnum):
    """The parts of a COSE message, in the order they appear on the wire."""

    PROTECTED = 0
    UNPROTECTED = 1
    DATA = 2
    OTHER = 3


class CoseObject:
    """A COSE message split into buckets of raw CBOR.

    The protected bucket holds the encoded protected header map (without
    the byte string that wraps it on the wire); every other bucket holds
    the complete encoding of its CBOR item. An empty bucket is unused.
    """

    def __init__(self, cose_type: int = 0) -> None:
        self.type = int(cose_type)
        self._buckets = [b""] * len(Bucket)

    def __repr__(self) -> str:
        used = ", ".join(b.name for b in Bucket if self.has_bucket(b))
        return f"CoseObject(type={self.type}, buckets=[{used}])"

    def set_bucket(self, bucket: int, data: Optional[BytesLike]) -> None:
        """Store ``data`` in ``bucket``; None or empty data clears the bucket."""
        self._buckets[Bucket(bucket)] = bytes(data) if data else b""

    def get_bucket(self, bucket: int) -> bytes:
        """Return the contents of ``bucket``, empty if the bucket is unused."""
        return self._buckets[Bucket(bucket)]

    def has_bucket(self, bucket: int) -> bool:
        """Return True if ``bucket`` holds data."""
        return bool(self._buckets[Bucket(bucket)])

    def flags(self) -> int:
        """Return a bit mask with bit ``n`` set when bucket ``n`` is in use."""
        return sum(1 << bucket for bucket in Bucket if self._buckets[bucket])


def _array_length(decoder: Decoder) -> int:
    try:
        return decoder.sequence_length()
    except CBORError:
        return 0


def _parse_into(obj: CoseObject, cbor: Decoder) -> None:
    cbor.consume_tag(obj.type)

    if not cbor.check_type(MajorType.ARRAY) or _array_length(cbor) < 3:
        log.debug("cose parse: no array or too short")
        raise CoseTypeError("COSE object must be an array of at least three elements")

    items = cbor.items()
    protected = next(items)
    if protected.is_null() or (
        protected.check_type(MajorType.ARRAY) and protected.sequence_length() == 0
    ):
        log.debug("protected header is empty, but its encoding is wrong")
    elif protected.check_type(MajorType.BSTR):
        content = protected.get_bytes()
        if content:
            header = Decoder(content)
            if not header.check_type(MajorType.MAP):
                raise CoseTypeError("protected header is not a map")
            obj.set_bucket(Bucket.PROTECTED, header.raw())
    else:
        raise CoseTypeError("protected header has the wrong encoding")

    unprotected = next(items)
    if not unprotected.check_type(MajorType.MAP):
        raise CoseTypeError("unprotected header is not a map")
    obj.set_bucket(Bucket.UNPROTECTED, unprotected.raw())

    for bucket in (Bucket.DATA, Bucket.OTHER):
        item = next(items, None)
        if item is None:
            break
        obj.set_bucket(bucket, item.raw())


def parse(data: BytesLike) -> CoseObject:
    """Parse a COSE message, optionally tagged as COSE_Encrypt0.

    Raises CoseTypeError if the structure is wrong and CoseParseError if the
    CBOR is malformed.
    """
    obj = CoseObject(CoseType.ENCRYPT0)
    try:
        _parse_into(obj, Decoder(data))
    except CBORError as exc:
        raise CoseParseError(f"malformed COSE message: {exc}") from None
    return obj


def serialize(
    obj: CoseObject, tagged: bool = False, capacity: Optional[int] = None
) -> bytes:
    """Encode ``obj`` as a CBOR array of its used buckets.

    The protected bucket is always written, wrapped in a byte string. With
    ``tagged`` the array is preceded by the object's type as tag. Raises
    CoseSerializeError if the result exceeds ``capacity`` or a bucket does
    not hold a complete CBOR item.
    """
    if capacity is not None and capacity <= 0:
        raise CoseSerializeError("no room for output")
    encoder = Encoder(capacity)
    remaining = [
        bucket
        for bucket in Bucket
        if bucket is not Bucket.PROTECTED and obj.has_bucket(bucket)
    ]
    try:
        if tagged:
            encoder.write_tag(obj.type)
        encoder.write_array(len(remaining) + 1)
        encoder.write_bytes(obj.get_bucket(Bucket.PROTECTED))
        for bucket in remaining:
            encoder.copy_raw(obj.get_bucket(bucket))
    except CBORError as exc:
        raise CoseSerializeError(f"cannot serialize COSE object: {exc}") from None
    return encoder.finish()