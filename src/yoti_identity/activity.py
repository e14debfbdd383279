# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Receipt opening: from a profile response body to :class:`ActivityDetails`.

:func:`build_activity_details` runs the post-transport half of the sharing
flow as a strictly linear sequence. Every step either succeeds or raises
exactly one error; no partially built result is ever returned.

1. Parse the JSON receipt envelope (:class:`~types.ParseError`).
2. Require a ``SUCCESS`` sharing outcome (:class:`~types.SharingFailureError`).
3. Unwrap the receipt key (:class:`~types.KeyUnwrapError`).
4. Decrypt the user's and the application's profile payloads
   (:class:`~types.PayloadDecryptionError`). An empty payload yields an
   empty profile.
5. Decode both payloads (:class:`~types.DecodeError`) and wrap them in
   profile facades.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .crypto import decrypt_symmetric, unwrap_receipt_key
from .profile import DEFAULT_ATTRIBUTE_NAMES, ApplicationProfile, AttributeNames, Profile
from .types import (
    DecodeError,
    DecryptionError,
    ParseError,
    PayloadDecryptionError,
    SharingFailureError,
    SharingOutcome,
)
from .wire import RawAttribute, decode_attribute_list, decode_encrypted_data

logger = logging.getLogger(__name__)

# Only needed once the outcome is SUCCESS.
_REQUIRED_RECEIPT_FIELDS = ("wrapped_receipt_key", "timestamp", "receipt_id")


@dataclass(frozen=True)
class Receipt:
    """The ``receipt`` object of a profile response."""

    sharing_outcome: str
    wrapped_receipt_key: str = ""
    timestamp: str = ""
    receipt_id: str = ""
    remember_me_id: str = ""
    parent_remember_me_id: str | None = None
    other_party_profile_content: str = ""
    profile_content: str = ""


@dataclass(frozen=True)
class ActivityDetails:
    """One completed sharing transaction."""

    user_profile: Profile
    application_profile: ApplicationProfile
    remember_me_id: str
    parent_remember_me_id: str | None
    receipt_id: str
    timestamp: datetime


def parse_receipt(content: bytes | str) -> Receipt:
    """Parse a profile response body into a :class:`Receipt`.

    Raises
    ------
    ParseError
        If the body is not JSON, has no ``receipt`` object, lacks a
        ``sharing_outcome``, or carries a non-string field.
    """
    try:
        body = json.loads(content)
    except ValueError as exc:
        raise ParseError(f"profile response is not valid JSON: {exc}") from exc

    raw = body.get("receipt") if isinstance(body, dict) else None
    if not isinstance(raw, dict):
        raise ParseError("profile response has no 'receipt' object")

    if not isinstance(raw.get("sharing_outcome"), str):
        raise ParseError("receipt is missing required string field 'sharing_outcome'")

    return Receipt(
        sharing_outcome=raw["sharing_outcome"],
        wrapped_receipt_key=_optional_str(raw, "wrapped_receipt_key") or "",
        timestamp=_optional_str(raw, "timestamp") or "",
        receipt_id=_optional_str(raw, "receipt_id") or "",
        remember_me_id=_optional_str(raw, "remember_me_id") or "",
        parent_remember_me_id=_optional_str(raw, "parent_remember_me_id") or None,
        other_party_profile_content=_optional_str(raw, "other_party_profile_content") or "",
        profile_content=_optional_str(raw, "profile_content") or "",
    )


def decrypt_profile_content(content: str, receipt_key: bytes) -> list[RawAttribute]:
    """Decrypt and decode one base64 ``EncryptedData`` profile payload.

    An empty *content* is a legitimately absent profile and yields ``[]``.
    """
    if not content:
        return []

    try:
        envelope = decode_encrypted_data(base64.b64decode(content, validate=True))
        plain = decrypt_symmetric(receipt_key, envelope.iv, envelope.cipher_text)
    except (binascii.Error, DecodeError, DecryptionError) as exc:
        raise PayloadDecryptionError(f"unable to decrypt profile content: {exc}") from exc

    return decode_attribute_list(plain)


def build_activity_details(
    content: bytes | str,
    key: RSAPrivateKey,
    *,
    names: AttributeNames = DEFAULT_ATTRIBUTE_NAMES,
) -> ActivityDetails:
    """Open a profile response body with the application's private key."""
    receipt = parse_receipt(content)

    if receipt.sharing_outcome != SharingOutcome.SUCCESS.value:
        raise SharingFailureError(receipt.sharing_outcome)

    missing = [name for name in _REQUIRED_RECEIPT_FIELDS if not getattr(receipt, name)]
    if missing:
        raise ParseError(f"receipt is missing required fields: {missing}")

    timestamp = _parse_timestamp(receipt.timestamp)
    receipt_key = unwrap_receipt_key(receipt.wrapped_receipt_key, key)

    user_attributes = decrypt_profile_content(receipt.other_party_profile_content, receipt_key)
    application_attributes = decrypt_profile_content(receipt.profile_content, receipt_key)

    logger.debug(
        "Opened receipt %s: %d user attributes, %d application attributes",
        receipt.receipt_id,
        len(user_attributes),
        len(application_attributes),
    )

    return ActivityDetails(
        user_profile=Profile(user_attributes, names=names),
        application_profile=ApplicationProfile(application_attributes, names=names),
        remember_me_id=receipt.remember_me_id,
        parent_remember_me_id=receipt.parent_remember_me_id,
        receipt_id=receipt.receipt_id,
        timestamp=timestamp,
    )


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _optional_str(raw: dict[str, Any], name: str) -> str | None:
    value = raw.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ParseError(f"receipt field {name!r} must be a string, got {type(value).__name__}")
    return value


def _parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 receipt timestamp to a timezone-aware datetime."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ParseError(f"receipt timestamp {value!r} is invalid: {exc}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
