"""COSE_Encrypt0 encryption and decryption with AES-CCM."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESCCM

from .cbor_decode import Decoder
from .cbor_encode import BytesLike, CBORError, Encoder, MajorType
from .cose import (
    Bucket,
    CoseDecryptError,
    CoseEncryptError,
    CoseNotSupportedError,
    CoseObject,
    CoseTypeError,
)
from .cose_types import (
    DEFAULT_CCM_PARAMETERS,
    CcmParameters,
    CoseType,
    HeaderParam,
    KeyType,
    ccm_parameters,
)

log = logging.getLogger(__name__)

KeyLookup = Callable[[Optional[bytes]], Optional[bytes]]

_CONTEXTS = {CoseType.ENCRYPT0: "Encrypt0", CoseType.ENCRYPT: "Encrypt"}


@dataclass(frozen=True)
class CryptoParams:
    """Everything needed to run AES-CCM on a COSE object."""

    key_type: KeyType
    key: bytes = field(repr=False)
    tag_length: int
    length_size: int
    nonce: bytes

    @property
    def nonce_length(self) -> int:
        """Nonce size in bytes."""
        return 15 - self.length_size


def enc_structure(
    context: Union[int, str],
    protected: BytesLike = b"",
    external_aad: BytesLike = b"",
) -> bytes:
    """Build the Enc_structure that serves as additional authenticated data.

    ``context`` is a COSE type (Encrypt0 or Encrypt) or the context string.
    """
    if isinstance(context, str):
        name = context
    else:
        try:
            name = _CONTEXTS[CoseType(context)]
        except (ValueError, KeyError):
            raise ValueError(f"no Enc_structure context for type {context!r}") from None
    encoder = Encoder()
    encoder.write_array(3)
    encoder.write_text(name)
    encoder.write_bytes(protected)
    encoder.write_bytes(external_aad)
    return encoder.finish()


def encrypt0(
    alg: int,
    key: BytesLike,
    data: BytesLike,
    external_aad: BytesLike = b"",
    nonce: Optional[BytesLike] = None,
) -> CoseObject:
    """Encrypt ``data`` into a new COSE_Encrypt0 object.

    The algorithm goes into the protected header and the nonce into the
    unprotected header. A random nonce is drawn unless one is given.
    """
    try:
        params = ccm_parameters(alg)
    except ValueError as exc:
        raise CoseNotSupportedError(str(exc)) from None

    if nonce is None:
        nonce = os.urandom(params.nonce_length())
    nonce = bytes(nonce)
    if len(nonce) != params.nonce_length():
        raise ValueError(
            f"nonce must be {params.nonce_length()} bytes, got {len(nonce)}"
        )

    header = Encoder()
    header.write_map(1)
    header.write_int(HeaderParam.ALG)
    header.write_int(params.alg)
    protected = header.finish()

    aad = enc_structure(CoseType.ENCRYPT0, protected, external_aad)

    header = Encoder()
    header.write_map(1)
    header.write_int(HeaderParam.IV)
    header.write_bytes(nonce)
    unprotected = header.finish()

    try:
        cipher = AESCCM(bytes(key), tag_length=params.tag_length)
        ciphertext = cipher.encrypt(nonce, bytes(data), aad)
    except (ValueError, TypeError, OverflowError) as exc:
        raise CoseEncryptError(f"encryption failed: {exc}") from None

    body = Encoder()
    body.write_bytes(ciphertext)

    obj = CoseObject(CoseType.ENCRYPT0)
    obj.set_bucket(Bucket.PROTECTED, protected)
    obj.set_bucket(Bucket.UNPROTECTED, unprotected)
    obj.set_bucket(Bucket.DATA, body.finish())
    log.debug("encrypted %d bytes into %d", len(data), len(ciphertext))
    return obj


def _lookup(header: Decoder, label: int) -> Optional[Decoder]:
    try:
        return header.map_get(label)
    except CBORError:
        return None


def _string(item: Optional[Decoder]) -> Optional[bytes]:
    if item is None:
        return None
    if not (item.check_type(MajorType.BSTR) or item.check_type(MajorType.TSTR)):
        return None
    try:
        return item.get_bytes()
    except CBORError:
        return None


def _algorithm(alg: Optional[Decoder]) -> CcmParameters:
    if alg is None or not alg.check_type(MajorType.UINT):
        return DEFAULT_CCM_PARAMETERS
    try:
        number = alg.get_int()
    except CBORError:
        raise CoseTypeError("invalid alg parameter") from None
    try:
        return ccm_parameters(number)
    except ValueError:
        raise CoseTypeError(f"unsupported alg parameter: {number}") from None


def crypto_params(obj: CoseObject, key_lookup: KeyLookup) -> CryptoParams:
    """Collect algorithm, key and nonce for decrypting ``obj``.

    Header parameters are taken from the protected bucket first, then from
    the unprotected one. ``key_lookup`` is called with the key identifier,
    and with None if there is no usable identifier or no key was found for
    it. Raises CoseTypeError if no key or no valid nonce is available.
    """
    found = {}
    for bucket in (Bucket.PROTECTED, Bucket.UNPROTECTED):
        raw = obj.get_bucket(bucket)
        if not raw:
            continue
        header = Decoder(raw)
        for label in (HeaderParam.ALG, HeaderParam.KID, HeaderParam.IV):
            if label not in found:
                value = _lookup(header, label)
                if value is not None:
                    found[label] = value

    ccm = _algorithm(found.get(HeaderParam.ALG))

    key = None
    kid = found.get(HeaderParam.KID)
    kid_value = _string(kid)
    if kid_value is not None:
        key = key_lookup(kid_value)
    elif kid is not None:
        log.warning("illegal type for kid parameter")
    if key is None:
        key = key_lookup(None)
    if key is None:
        raise CoseTypeError("no key found")

    nonce = _string(found.get(HeaderParam.IV))
    if nonce is None or len(nonce) != ccm.nonce_length():
        raise CoseTypeError("invalid nonce")

    return CryptoParams(
        key_type=ccm.key_type,
        key=bytes(key),
        tag_length=ccm.tag_length,
        length_size=ccm.length_size,
        nonce=nonce,
    )


def decrypt(
    obj: CoseObject, key_lookup: KeyLookup, external_aad: BytesLike = b""
) -> bytes:
    """Decrypt a COSE_Encrypt0 object and return the plaintext.

    An object without type counts as COSE_Encrypt when its fourth bucket is
    used and as COSE_Encrypt0 otherwise; only the latter is supported.
    """
    if obj.type:
        cose_type = obj.type
    elif obj.has_bucket(Bucket.OTHER):
        cose_type = CoseType.ENCRYPT
    else:
        cose_type = CoseType.ENCRYPT0

    if cose_type not in (CoseType.ENCRYPT0, CoseType.ENCRYPT):
        raise CoseTypeError("cannot decrypt COSE object of this type")
    if cose_type == CoseType.ENCRYPT:
        raise CoseNotSupportedError("COSE_Encrypt is not supported")

    aad = enc_structure(CoseType.ENCRYPT0, obj.get_bucket(Bucket.PROTECTED), external_aad)
    params = crypto_params(obj, key_lookup)

    ciphertext = _string(Decoder(obj.get_bucket(Bucket.DATA)))
    if ciphertext is None:
        raise CoseDecryptError("no ciphertext in COSE object")

    try:
        cipher = AESCCM(params.key, tag_length=params.tag_length)
        plaintext = cipher.decrypt(params.nonce, ciphertext, aad)
    except (InvalidTag, ValueError, TypeError, OverflowError):
        log.debug("cose decrypt failed")
        raise CoseDecryptError("decryption failed") from None
    log.debug("decrypted %d bytes", len(plaintext))
    return plaintext