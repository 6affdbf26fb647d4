"""COSE identifiers and the AES-CCM parameter sets they select."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType


class KeyType(IntEnum):
    """Kinds of key material known to DCAF."""

    NONE = 0
    AES_128 = 1
    AES_256 = 2
    HS256 = 64
    KID = 4096


class HeaderParam(IntEnum):
    """Common COSE header parameter labels."""

    ALG = 1
    CRIT = 2
    CONTENT_TYPE = 3
    KID = 4
    IV = 5
    PARTIAL_IV = 6
    COUNTER_SIGNATURE = 7


class CoseKeyLabel(IntEnum):
    """Labels used in a COSE_Key map."""

    K = -1
    KTY = 1
    KID = 2
    ALG = 3
    OPS = 4
    BASE_IV = 5


class CoseKeyTypeValue(IntEnum):
    """Values of the COSE_Key kty parameter."""

    OKP = 1
    EC2 = 2
    SYMMETRIC = 4


class CoseType(IntEnum):
    """Tags of the major COSE object types, also usable as content formats."""

    ENCRYPT0 = 16
    MAC0 = 17
    SIGN1 = 18
    ENCRYPT = 96
    MAC = 97
    SIGN = 98
    KEY = 101
    KEY_SET = 102


class CoseAlgorithm(IntEnum):
    """COSE algorithm identifiers."""

    A128KW = -3
    A192KW = -4
    A256KW = -5
    HS256 = 3
    AES_CCM_16_64_128 = 10
    AES_CCM_16_64_256 = 11
    AES_CCM_64_64_128 = 12
    AES_CCM_64_64_256 = 13
    AES_CCM_16_128_128 = 30
    AES_CCM_16_128_256 = 31
    AES_CCM_64_128_128 = 32
    AES_CCM_64_128_256 = 33


# Labels of a CWT confirmation claim.
CWT_COSE_KEY = 1
CWT_ENCRYPTED_COSE_KEY = 2
CWT_KID = 3

_KEY_LENGTHS = MappingProxyType({KeyType.AES_128: 16, KeyType.AES_256: 32})


@dataclass(frozen=True)
class CcmParameters:
    """AES-CCM settings: size of the length field, tag length and key type."""

    alg: CoseAlgorithm
    length_size: int
    tag_length: int
    key_type: KeyType

    def nonce_length(self) -> int:
        """Return the nonce size in bytes, 15 minus the length field size."""
        return 15 - self.length_size

    def key_length(self) -> int:
        """Return the key size in bytes for this parameter set."""
        return _KEY_LENGTHS[self.key_type]


_CCM_TABLE = MappingProxyType(
    {
        params.alg: params
        for params in (
            CcmParameters(CoseAlgorithm.AES_CCM_16_64_128, 2, 8, KeyType.AES_128),
            CcmParameters(CoseAlgorithm.AES_CCM_16_64_256, 2, 8, KeyType.AES_256),
            CcmParameters(CoseAlgorithm.AES_CCM_64_64_128, 8, 8, KeyType.AES_128),
            CcmParameters(CoseAlgorithm.AES_CCM_64_64_256, 8, 8, KeyType.AES_256),
            CcmParameters(CoseAlgorithm.AES_CCM_16_128_128, 2, 16, KeyType.AES_128),
            CcmParameters(CoseAlgorithm.AES_CCM_16_128_256, 2, 16, KeyType.AES_256),
            CcmParameters(CoseAlgorithm.AES_CCM_64_128_128, 8, 16, KeyType.AES_128),
            CcmParameters(CoseAlgorithm.AES_CCM_64_128_256, 8, 16, KeyType.AES_256),
        )
    }
)

SUPPORTED_ALGORITHMS = tuple(_CCM_TABLE)

# Used when a COSE object names no algorithm.
DEFAULT_CCM_PARAMETERS = _CCM_TABLE[CoseAlgorithm.AES_CCM_16_64_128]


def ccm_parameters(alg: int) -> CcmParameters:
    """Return the AES-CCM parameters for ``alg``.

    Raises ValueError if ``alg`` is not one of the supported AES-CCM algorithms.
    """
    try:
        return _CCM_TABLE[CoseAlgorithm(alg)]
    except (ValueError, KeyError):
        raise ValueError(f"unsupported COSE algorithm: {alg!r}") from None