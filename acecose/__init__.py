"""Bounded CBOR encoding, in-place CBOR decoding and COSE Encrypt0 with AES-CCM."""

__version__ = "0.2.0"