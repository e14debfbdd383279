# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""RSA and AES primitives used to open receipts and sign API requests.

Every function here is pure: it depends only on its arguments and never
retries. A failure is reported as one of the SDK exceptions and is meant to
abort the enclosing operation.

Receipt opening
---------------
- The one-time token is RSA-encrypted (PKCS#1 v1.5) and URL-safe base64
  encoded.
- Each receipt carries a per-receipt AES key, RSA-wrapped under the
  application's public key and standard base64 encoded.
- Profile payloads are AES-CBC encrypted with PKCS#7 padding; the IV travels
  next to the ciphertext.

Request signing
---------------
Outgoing requests carry the application's public key and an RSA-SHA256
signature over ``METHOD&ENDPOINT[&BASE64(BODY)]``.
"""

from __future__ import annotations

import base64
import binascii
import uuid

from cryptography.hazmat.primitives import hashes, padding, serialization
from cryptography.hazmat.primitives.asymmetric import padding as asym_padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .types import (
    DecryptionError,
    InvalidKeyError,
    KeyUnwrapError,
    SigningError,
    TokenDecryptionError,
)


def load_private_key(pem: bytes | str) -> RSAPrivateKey:
    """Load a PEM-encoded, unencrypted RSA private key.

    Raises
    ------
    InvalidKeyError
        If *pem* is not a PEM private key, or the key is not RSA.
    """
    if isinstance(pem, str):
        pem = pem.encode("ascii")
    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError) as exc:
        raise InvalidKeyError(f"invalid key: {exc}") from exc

    if not isinstance(key, RSAPrivateKey):
        raise InvalidKeyError(
            f"invalid key: expected an RSA private key, got {type(key).__name__}"
        )
    return key


def decrypt_asymmetric(cipher: bytes, key: RSAPrivateKey) -> bytes:
    """RSA-decrypt *cipher* with PKCS#1 v1.5 padding."""
    try:
        return key.decrypt(cipher, asym_padding.PKCS1v15())
    except ValueError as exc:
        raise DecryptionError(f"RSA decryption failed: {exc}") from exc


def decrypt_token(encrypted_token: str, key: RSAPrivateKey) -> str:
    """Recover the connect token from its encrypted, URL-safe base64 form."""
    if not encrypted_token:
        raise TokenDecryptionError("token decryption failed: token is empty")
    try:
        cipher = _b64url_decode(encrypted_token)
        return decrypt_asymmetric(cipher, key).decode("utf-8")
    except (binascii.Error, ValueError, DecryptionError) as exc:
        raise TokenDecryptionError(f"token decryption failed: {exc}") from exc


def unwrap_receipt_key(wrapped_key: str, key: RSAPrivateKey) -> bytes:
    """Unwrap the per-receipt AES key delivered as standard base64."""
    try:
        return decrypt_asymmetric(base64.b64decode(wrapped_key, validate=True), key)
    except (binascii.Error, ValueError, DecryptionError) as exc:
        raise KeyUnwrapError(f"unable to unwrap receipt key: {exc}") from exc


def decrypt_symmetric(key: bytes, iv: bytes, cipher_text: bytes) -> bytes:
    """AES-CBC decrypt *cipher_text* and strip its PKCS#7 padding."""
    try:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(cipher_text) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise DecryptionError(f"AES decryption failed: {exc}") from exc


def sign(message: bytes, key: RSAPrivateKey) -> bytes:
    """Sign *message* with RSA PKCS#1 v1.5 over SHA-256."""
    try:
        return key.sign(message, asym_padding.PKCS1v15(), hashes.SHA256())
    except (ValueError, TypeError) as exc:
        raise SigningError(f"unable to sign request digest: {exc}") from exc


def get_auth_key(key: RSAPrivateKey) -> str:
    """Return the base64 DER SubjectPublicKeyInfo of *key*'s public half."""
    der = key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(der).decode("ascii")


def get_auth_digest(
    http_method: str,
    endpoint: str,
    body: bytes | None,
    key: RSAPrivateKey,
) -> str:
    """Sign the request digest and return it base64 encoded."""
    digest = f"{http_method}&{endpoint}"
    if body is not None:
        digest += "&" + base64.b64encode(body).decode("ascii")
    return base64.b64encode(sign(digest.encode("utf-8"), key)).decode("ascii")


def generate_nonce() -> str:
    return str(uuid.uuid4())


def _b64url_decode(token: str) -> bytes:
    """Decode URL-safe base64, with or without padding."""
    padding_chars = "=" * (-len(token) % 4)
    return base64.urlsafe_b64decode(token + padding_chars)
