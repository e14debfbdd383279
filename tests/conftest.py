"""Shared fixtures for the yoti-identity test suite.

Keys and certificates are generated once per session; the helper fixtures
build the encrypted artefacts the platform would normally produce.
"""

from __future__ import annotations

import base64
import json
import os
from datetime import datetime, timezone
from typing import Any, Callable

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, padding, serialization
from cryptography.hazmat.primitives.asymmetric import padding as asym_padding
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.x509.oid import NameOID

from yoti_identity.wire import (
    EncryptedData,
    RawAttribute,
    encode_attribute_list,
    encode_encrypted_data,
)


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def pem_bytes(rsa_key: rsa.RSAPrivateKey) -> bytes:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def receipt_key() -> bytes:
    return bytes(range(32))


@pytest.fixture()
def encrypt_token(rsa_key: rsa.RSAPrivateKey) -> Callable[[str], str]:
    """Encrypt a token the way the platform hands it to the callback."""

    def _encrypt(token: str) -> str:
        cipher = rsa_key.public_key().encrypt(token.encode(), asym_padding.PKCS1v15())
        return base64.urlsafe_b64encode(cipher).decode("ascii")

    return _encrypt


@pytest.fixture()
def encrypt_profile(receipt_key: bytes) -> Callable[[list[RawAttribute]], str]:
    """Encode, AES-encrypt and base64 an attribute list."""

    def _encrypt(attributes: list[RawAttribute]) -> str:
        return aes_encrypt_content(encode_attribute_list(attributes), receipt_key)

    return _encrypt


@pytest.fixture()
def make_receipt(
    rsa_key: rsa.RSAPrivateKey,
    receipt_key: bytes,
    encrypt_profile: Callable[[list[RawAttribute]], str],
) -> Callable[..., bytes]:
    """Build a complete profile response body."""

    def _make(
        user_attributes: list[RawAttribute] | None = None,
        application_attributes: list[RawAttribute] | None = None,
        **overrides: Any,
    ) -> bytes:
        wrapped = rsa_key.public_key().encrypt(receipt_key, asym_padding.PKCS1v15())
        receipt: dict[str, Any] = {
            "sharing_outcome": "SUCCESS",
            "remember_me_id": "remember-me-id-123",
            "parent_remember_me_id": "parent-remember-me-id-456",
            "timestamp": "2016-07-19T08:55:38Z",
            "receipt_id": "receipt-id-789",
            "wrapped_receipt_key": base64.b64encode(wrapped).decode("ascii"),
            "other_party_profile_content": (
                encrypt_profile(user_attributes) if user_attributes is not None else ""
            ),
            "profile_content": (
                encrypt_profile(application_attributes)
                if application_attributes is not None
                else ""
            ),
        }
        receipt.update(overrides)
        return json.dumps({"receipt": receipt}).encode()

    return _make


@pytest.fixture(scope="session")
def anchor_cert(rsa_key: rsa.RSAPrivateKey) -> Callable[..., bytes]:
    """Build a DER certificate carrying an anchor extension.

    With ``duplicate=True`` the extension appears twice. The builder refuses
    duplicates, so a same-length placeholder OID is added and its DER bytes
    are swapped for *oid* after signing.
    """

    def _make(oid: str | None, value: str = "PASSPORT", *, duplicate: bool = False) -> bytes:
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "anchor-origin")])
        builder = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(rsa_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(datetime(2020, 1, 1, tzinfo=timezone.utc))
            .not_valid_after(datetime(2040, 1, 1, tzinfo=timezone.utc))
        )
        placeholder = None
        if oid is not None:
            builder = builder.add_extension(
                x509.UnrecognizedExtension(x509.ObjectIdentifier(oid), anchor_extension_value(value)),
                critical=False,
            )
            if duplicate:
                placeholder = oid.rsplit(".", 1)[0] + ".99"
                builder = builder.add_extension(
                    x509.UnrecognizedExtension(
                        x509.ObjectIdentifier(placeholder), anchor_extension_value(value)
                    ),
                    critical=False,
                )
        cert = builder.sign(rsa_key, hashes.SHA256())
        der = cert.public_bytes(serialization.Encoding.DER)
        if placeholder is not None:
            der = der.replace(oid_der(placeholder), oid_der(oid))
        return der

    return _make


def oid_der(dotted: str) -> bytes:
    """DER ``OBJECT IDENTIFIER`` encoding of *dotted*."""
    arcs = [int(arc) for arc in dotted.split(".")]
    body = bytearray([40 * arcs[0] + arcs[1]])
    for arc in arcs[2:]:
        chunk = [arc & 0x7F]
        arc >>= 7
        while arc:
            chunk.append((arc & 0x7F) | 0x80)
            arc >>= 7
        body += bytes(reversed(chunk))
    return b"\x06" + bytes([len(body)]) + bytes(body)


def anchor_extension_value(value: str) -> bytes:
    """DER ``SEQUENCE { [0] IMPLICIT UTF8String }``."""
    text = value.encode("utf-8")
    inner = b"\x80" + bytes([len(text)]) + text
    return b"\x30" + bytes([len(inner)]) + inner


def aes_encrypt_content(plain: bytes, key: bytes) -> str:
    iv = os.urandom(16)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plain) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    cipher_text = encryptor.update(padded) + encryptor.finalize()
    envelope = encode_encrypted_data(EncryptedData(iv=iv, cipher_text=cipher_text))
    return base64.b64encode(envelope).decode("ascii")
