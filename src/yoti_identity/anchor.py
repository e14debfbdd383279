# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Anchor parsing: provenance assertions attached to profile attributes.

An anchor's type is declared by a private X.509 extension in its
origin-server certificate chain. The extension OID is the type tag and the
extension payload (``SEQUENCE { [0] UTF8String }``) is the anchor value, for
example ``"PASSPORT"``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable

from cryptography import x509

from .types import AnchorType, DecodeError
from .wire import RawAnchor, decode_signed_timestamp

logger = logging.getLogger(__name__)

SOURCE_OID = "1.3.6.1.4.1.47127.1.1.1"
VERIFIER_OID = "1.3.6.1.4.1.47127.1.1.2"

_ANCHOR_TYPES = {
    SOURCE_OID: AnchorType.SOURCE,
    VERIFIER_OID: AnchorType.VERIFIER,
}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class SignedTimestamp:
    version: int
    timestamp: datetime


@dataclass(frozen=True)
class Anchor:
    """One provenance assertion about an attribute."""

    anchor_type: AnchorType
    sub_type: str
    value: str
    signed_timestamp: SignedTimestamp | None
    # DER certificates, leaf last.
    origin_server_certs: tuple[bytes, ...] = ()


def classify_anchor_type(type_tag: str) -> AnchorType:
    return _ANCHOR_TYPES.get(type_tag, AnchorType.UNKNOWN)


def parse_signed_timestamp(data: bytes) -> SignedTimestamp:
    """Decode a ``SignedTimestamp`` message into a UTC datetime."""
    version, micros = decode_signed_timestamp(data)
    return SignedTimestamp(version=version, timestamp=_EPOCH + timedelta(microseconds=micros))


def parse_anchor(raw: RawAnchor) -> Anchor:
    """Convert one wire anchor. Never raises; problems degrade to UNKNOWN."""
    anchor_type = AnchorType.UNKNOWN
    value = ""
    for cert_der in raw.origin_server_certs:
        found = _find_anchor_extension(cert_der)
        if found is not None:
            anchor_type, value = found

    signed_timestamp = None
    if raw.signed_time_stamp:
        try:
            signed_timestamp = parse_signed_timestamp(raw.signed_time_stamp)
        except DecodeError as exc:
            logger.warning("Unable to parse anchor signed timestamp: %s", exc)

    return Anchor(
        anchor_type=anchor_type,
        sub_type=raw.sub_type,
        value=value,
        signed_timestamp=signed_timestamp,
        origin_server_certs=raw.origin_server_certs,
    )


def parse_anchors(raw_anchors: Iterable[RawAnchor]) -> list[Anchor]:
    return [parse_anchor(raw) for raw in raw_anchors]


def _find_anchor_extension(cert_der: bytes) -> tuple[AnchorType, str] | None:
    try:
        cert = x509.load_der_x509_certificate(cert_der)
        extensions = list(cert.extensions)
    except (ValueError, x509.DuplicateExtension) as exc:
        logger.warning("Unable to parse anchor certificate: %s", exc)
        return None

    for extension in extensions:
        anchor_type = classify_anchor_type(extension.oid.dotted_string)
        if anchor_type is AnchorType.UNKNOWN:
            continue
        if not isinstance(extension.value, x509.UnrecognizedExtension):
            continue
        try:
            return anchor_type, _decode_extension_value(extension.value.value)
        except ValueError as exc:
            logger.warning(
                "Unable to decode %s anchor extension: %s", anchor_type.value, exc
            )
            return anchor_type, ""
    return None


def _decode_extension_value(der: bytes) -> str:
    """Decode ``SEQUENCE { [0] UTF8String }`` (tag 0 implicit or explicit)."""
    tag, body, _ = _read_tlv(der, 0)
    if tag != 0x30:
        raise ValueError(f"expected SEQUENCE, got tag 0x{tag:02x}")
    tag, inner, _ = _read_tlv(body, 0)
    if tag == 0xA0:
        tag, inner, _ = _read_tlv(inner, 0)
    if tag not in (0x80, 0x0C):
        raise ValueError(f"expected UTF8String, got tag 0x{tag:02x}")
    return inner.decode("utf-8")


def _read_tlv(data: bytes, pos: int) -> tuple[int, bytes, int]:
    if pos + 2 > len(data):
        raise ValueError("truncated DER value")
    tag = data[pos]
    length = data[pos + 1]
    pos += 2
    if length & 0x80:
        num_bytes = length & 0x7F
        if num_bytes == 0 or pos + num_bytes > len(data):
            raise ValueError("invalid DER length")
        length = int.from_bytes(data[pos : pos + num_bytes], "big")
        pos += num_bytes
    if pos + length > len(data):
        raise ValueError("truncated DER value")
    return tag, data[pos : pos + length], pos + length
