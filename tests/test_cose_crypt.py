import pytest

from acecose.cbor_decode import Decoder
from acecose.cbor_encode import Encoder
from acecose.cose import (
    Bucket,
    CoseDecryptError,
    CoseEncryptError,
    CoseNotSupportedError,
    CoseObject,
    CoseTypeError,
    parse,
    serialize,
)
from acecose.cose_crypt import crypto_params, decrypt, enc_structure, encrypt0
from acecose.cose_types import (
    DEFAULT_CCM_PARAMETERS,
    SUPPORTED_ALGORITHMS,
    CoseAlgorithm,
    CoseType,
    HeaderParam,
    ccm_parameters,
)

PLAINTEXT = b"attack at dawn"
ALG = CoseAlgorithm.AES_CCM_16_64_128


def _key_for(alg):
    return bytes(range(ccm_parameters(alg).key_length()))


def _nonce_for(alg):
    return bytes(range(100, 100 + ccm_parameters(alg).nonce_length()))


def _always(key):
    return lambda kid: key


def _header(*pairs):
    enc = Encoder()
    enc.write_map(len(pairs))
    for label, value in pairs:
        enc.write_int(label)
        enc.write_bytes(value)
    return enc.finish()


def test_enc_structure_empty():
    assert enc_structure(CoseType.ENCRYPT0, b"", b"") == b"\x83\x68Encrypt0\x40\x40"


def test_enc_structure_contents():
    items = list(Decoder(enc_structure(CoseType.ENCRYPT, b"\xa0", b"aad")).items())
    assert items[0].get_text() == "Encrypt"
    assert items[1].get_bytes() == b"\xa0"
    assert items[2].get_bytes() == b"aad"


def test_enc_structure_unknown_context():
    with pytest.raises(ValueError):
        enc_structure(CoseType.MAC0)


@pytest.mark.parametrize("alg", SUPPORTED_ALGORITHMS)
def test_encrypt_decrypt_round_trip(alg):
    key = _key_for(alg)
    obj = encrypt0(alg, key, PLAINTEXT, external_aad=b"ctx")
    assert decrypt(obj, _always(key), external_aad=b"ctx") == PLAINTEXT


@pytest.mark.parametrize("alg", SUPPORTED_ALGORITHMS)
def test_ciphertext_carries_tag(alg):
    obj = encrypt0(alg, _key_for(alg), PLAINTEXT)
    ciphertext = Decoder(obj.get_bucket(Bucket.DATA)).get_bytes()
    assert len(ciphertext) == len(PLAINTEXT) + ccm_parameters(alg).tag_length


def test_headers_hold_alg_and_nonce():
    nonce = _nonce_for(ALG)
    obj = encrypt0(ALG, _key_for(ALG), PLAINTEXT, nonce=nonce)
    assert obj.type == CoseType.ENCRYPT0
    assert Decoder(obj.get_bucket(Bucket.PROTECTED)).map_get(HeaderParam.ALG).get_int() == ALG
    assert Decoder(obj.get_bucket(Bucket.UNPROTECTED)).map_get(HeaderParam.IV).get_bytes() == nonce


def test_fixed_nonce_is_deterministic():
    nonce = _nonce_for(ALG)
    first = encrypt0(ALG, _key_for(ALG), PLAINTEXT, nonce=nonce)
    second = encrypt0(ALG, _key_for(ALG), PLAINTEXT, nonce=nonce)
    assert first.get_bucket(Bucket.DATA) == second.get_bucket(Bucket.DATA)


def test_random_nonce_has_right_length():
    obj = encrypt0(CoseAlgorithm.AES_CCM_64_64_128, _key_for(ALG), PLAINTEXT)
    nonce = Decoder(obj.get_bucket(Bucket.UNPROTECTED)).map_get(HeaderParam.IV).get_bytes()
    assert len(nonce) == ccm_parameters(CoseAlgorithm.AES_CCM_64_64_128).nonce_length()


def test_encrypt_rejects_wrong_nonce_length():
    with pytest.raises(ValueError):
        encrypt0(ALG, _key_for(ALG), PLAINTEXT, nonce=b"short")


def test_encrypt_rejects_unsupported_algorithm():
    with pytest.raises(CoseNotSupportedError):
        encrypt0(CoseAlgorithm.HS256, _key_for(ALG), PLAINTEXT)


def test_encrypt_rejects_bad_key_length():
    with pytest.raises(CoseEncryptError):
        encrypt0(ALG, bytes(5), PLAINTEXT)


def test_decrypt_with_wrong_aad_fails():
    obj = encrypt0(ALG, _key_for(ALG), PLAINTEXT, external_aad=b"one")
    with pytest.raises(CoseDecryptError):
        decrypt(obj, _always(_key_for(ALG)), external_aad=b"two")


def test_decrypt_with_wrong_key_fails():
    obj = encrypt0(ALG, _key_for(ALG), PLAINTEXT)
    with pytest.raises(CoseDecryptError):
        decrypt(obj, _always(bytes(16)))


def test_decrypt_tampered_ciphertext_fails():
    obj = encrypt0(ALG, _key_for(ALG), PLAINTEXT)
    ciphertext = bytearray(Decoder(obj.get_bucket(Bucket.DATA)).get_bytes())
    ciphertext[0] ^= 1
    enc = Encoder()
    enc.write_bytes(ciphertext)
    obj.set_bucket(Bucket.DATA, enc.finish())
    with pytest.raises(CoseDecryptError):
        decrypt(obj, _always(_key_for(ALG)))


def test_decrypt_without_key_fails():
    obj = encrypt0(ALG, _key_for(ALG), PLAINTEXT)
    with pytest.raises(CoseTypeError):
        decrypt(obj, _always(None))


def test_decrypt_after_serialize_and_parse():
    key = _key_for(ALG)
    wire = serialize(encrypt0(ALG, key, PLAINTEXT), tagged=True)
    assert decrypt(parse(wire), _always(key)) == PLAINTEXT


def test_key_lookup_by_kid():
    key = _key_for(ALG)
    nonce = _nonce_for(ALG)
    obj = encrypt0(ALG, key, PLAINTEXT, nonce=nonce)
    obj.set_bucket(Bucket.UNPROTECTED, _header((HeaderParam.KID, b"kid-1"), (HeaderParam.IV, nonce)))
    calls = []

    def lookup(kid):
        calls.append(kid)
        return key if kid == b"kid-1" else None

    assert decrypt(obj, lookup) == PLAINTEXT
    assert calls == [b"kid-1"]


def test_unknown_kid_falls_back_to_default_key():
    key = _key_for(ALG)
    nonce = _nonce_for(ALG)
    obj = encrypt0(ALG, key, PLAINTEXT, nonce=nonce)
    obj.set_bucket(Bucket.UNPROTECTED, _header((HeaderParam.KID, b"other"), (HeaderParam.IV, nonce)))
    calls = []

    def lookup(kid):
        calls.append(kid)
        return key if kid is None else None

    assert decrypt(obj, lookup) == PLAINTEXT
    assert calls == [b"other", None]


def test_crypto_params_defaults_without_alg():
    nonce = _nonce_for(DEFAULT_CCM_PARAMETERS.alg)
    obj = CoseObject(CoseType.ENCRYPT0)
    obj.set_bucket(Bucket.UNPROTECTED, _header((HeaderParam.IV, nonce)))
    params = crypto_params(obj, _always(bytes(16)))
    assert params.tag_length == DEFAULT_CCM_PARAMETERS.tag_length
    assert params.length_size == DEFAULT_CCM_PARAMETERS.length_size
    assert params.key_type == DEFAULT_CCM_PARAMETERS.key_type
    assert params.nonce == nonce
    assert params.key == bytes(16)


def test_crypto_params_rejects_wrong_nonce_length():
    obj = CoseObject(CoseType.ENCRYPT0)
    obj.set_bucket(Bucket.UNPROTECTED, _header((HeaderParam.IV, b"abc")))
    with pytest.raises(CoseTypeError):
        crypto_params(obj, _always(bytes(16)))


def test_crypto_params_rejects_unsupported_alg():
    enc = Encoder()
    enc.write_map(2)
    enc.write_int(HeaderParam.ALG)
    enc.write_int(99)
    enc.write_int(HeaderParam.IV)
    enc.write_bytes(bytes(13))
    obj = CoseObject(CoseType.ENCRYPT0)
    obj.set_bucket(Bucket.UNPROTECTED, enc.finish())
    with pytest.raises(CoseTypeError):
        crypto_params(obj, _always(bytes(16)))


def test_decrypt_rejects_other_types():
    obj = encrypt0(ALG, _key_for(ALG), PLAINTEXT)
    obj.type = CoseType.MAC0
    with pytest.raises(CoseTypeError):
        decrypt(obj, _always(_key_for(ALG)))


def test_decrypt_rejects_cose_encrypt():
    obj = encrypt0(ALG, _key_for(ALG), PLAINTEXT)
    obj.type = CoseType.ENCRYPT
    with pytest.raises(CoseNotSupportedError):
        decrypt(obj, _always(_key_for(ALG)))


def test_untyped_object_with_other_bucket_counts_as_encrypt():
    obj = encrypt0(ALG, _key_for(ALG), PLAINTEXT)
    obj.type = 0
    obj.set_bucket(Bucket.OTHER, b"\xf6")
    with pytest.raises(CoseNotSupportedError):
        decrypt(obj, _always(_key_for(ALG)))


def test_untyped_object_decrypts_as_encrypt0():
    obj = encrypt0(ALG, _key_for(ALG), PLAINTEXT)
    obj.type = 0
    assert decrypt(obj, _always(_key_for(ALG))) == PLAINTEXT


def test_decrypt_rejects_non_string_data():
    obj = encrypt0(ALG, _key_for(ALG), PLAINTEXT)
    obj.set_bucket(Bucket.DATA, b"\x01")
    with pytest.raises(CoseDecryptError):
        decrypt(obj, _always(_key_for(ALG)))