# acecose

Building blocks for the ACE authorization framework on constrained
networks: a small CBOR encoder with a bounded output, a decoder that reads
CBOR items in place, and COSE `Encrypt0` objects protected with AES-CCM.

## Installation

```
pip install acecose
```

To run the test suite, install the `test` extra and run `pytest`:

```
pip install "acecose[test]"
pytest
```

## Modules

- `acecose.definitions`: enumerations for ACE message fields (`AceMessage`),
  grant types (`GrantType`), profiles (`Profile`), error codes
  (`AceErrorCode`), request creation hints (`RequestCreationHint`), log
  levels (`LogLevel`), transaction states and types (`TransactionState`,
  `TransactionType`), `DcafOption`, `ScopeType`, and the CoAP `MediaType` and
  `CoapOption` numbers, plus `COAP_DEFAULT_PORT` and `COAPS_DEFAULT_PORT`.
- `acecose.cose_types`: COSE header parameters (`HeaderParam`), key labels
  (`CoseKeyLabel`, `CoseKeyTypeValue`), object types (`CoseType`),
  algorithms (`CoseAlgorithm`), `KeyType`, and `ccm_parameters(alg)`, which
  returns a `CcmParameters` value with the tag length, length field size,
  `nonce_length()` and `key_length()` of an AES-CCM algorithm. It raises
  `ValueError` for any other algorithm.
- `acecose.cbor_encode`: `Encoder`, a CBOR writer with an optional capacity.
  A write that does not fit raises `CBOREncodeError` and leaves the output
  unchanged; `finish()` returns the bytes written. The module also has
  `MajorType`, `major_type()` and `item_size()`, which measures a complete
  item including nested content.
- `acecose.cbor_decode`: `Decoder`, a read position in a CBOR buffer. It
  offers type checks, `map_get()` by integer label, `get_uint()`,
  `get_int()` (signed 32-bit range), `consume_tag()`, `sequence_length()`,
  `get_bytes()`, `get_text()`, `raw()`, and `items()` to iterate over the
  elements of an array or the keys and values of a map. `copy_item()`
  copies the current item into an `Encoder`.
- `acecose.cose`: `parse()` and `serialize()` for COSE messages. A
  `CoseObject` holds raw CBOR in the `Bucket`s `PROTECTED`, `UNPROTECTED`,
  `DATA` and `OTHER`.
- `acecose.cose_crypt`: `encrypt0()` to create an `Encrypt0` object,
  `decrypt()` to open one, and the helpers `enc_structure()` and
  `crypto_params()` (which returns `CryptoParams`).

## Example

```python
from acecose.cose import parse, serialize
from acecose.cose_crypt import decrypt, encrypt0
from acecose.cose_types import CoseAlgorithm

key = bytes(16)  # placeholder key material

obj = encrypt0(CoseAlgorithm.AES_CCM_16_64_128, key, b"hello")
wire = serialize(obj, tagged=True, capacity=256)

received = parse(wire)
plaintext = decrypt(received, lambda kid: key)
assert plaintext == b"hello"
```

`encrypt0()` puts the algorithm into the protected header and the nonce
into the unprotected header; it draws a random nonce unless one is passed.

The key lookup callable receives the key identifier (`kid`) from the
object's headers. It is called with `None` when there is no usable
identifier or when no key was returned for it. It returns the key bytes, or
`None` if it has no key.

## Errors

Errors are raised as exceptions. The COSE ones are `CoseError` and its
subclasses `CoseTypeError`, `CoseParseError`, `CoseNotSupportedError`,
`CoseSerializeError`, `CoseEncryptError` and `CoseDecryptError`. The CBOR
ones are `CBORError` and its subclasses `CBOREncodeError` and
`CBORDecodeError`.

## What this package does not do

It covers message encoding and COSE protection only. It has no CoAP
transport, no server or client, no key store, no token or ticket handling,
and no command-line tool. Only `Encrypt0` with the AES-CCM algorithms is
supported; decrypting a COSE `Encrypt` object raises
`CoseNotSupportedError`.