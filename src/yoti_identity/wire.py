# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Decoding and encoding of the platform's binary profile messages.

The protobuf schemas live in :mod:`.schema`. This module converts between
those messages and the plain frozen dataclasses the rest of the SDK uses:

==================  ==========================================================
Message             Fields
==================  ==========================================================
EncryptedData       1 iv (bytes), 2 cipher_text (bytes)
AttributeList       1 attributes (repeated Attribute)
Attribute           1 name (string), 2 value (bytes), 3 content_type (enum),
                    4 anchors (repeated Anchor)
Anchor              1 artifact_link, 2 origin_server_certs (repeated),
                    3 artifact_signature, 4 sub_type (string), 5 signature,
                    6 signed_time_stamp
MultiValue          1 values (repeated Value{1 content_type, 2 data})
SignedTimestamp     1 version (int32), 2 timestamp (uint64, microseconds)
==================  ==========================================================

Attribute order is preserved and unknown fields are skipped. Content-type
values outside :class:`~types.ContentType` are kept as plain integers.
Malformed input raises :class:`~types.DecodeError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

from google.protobuf.message import DecodeError as ProtobufDecodeError
from google.protobuf.message import Message

from . import schema
from .types import ContentType, DecodeError

_M = TypeVar("_M", bound=Message)


@dataclass(frozen=True)
class EncryptedData:
    iv: bytes
    cipher_text: bytes


@dataclass(frozen=True)
class RawAnchor:
    """An anchor exactly as carried on the wire."""

    origin_server_certs: tuple[bytes, ...] = ()
    sub_type: str = ""
    signed_time_stamp: bytes = b""
    artifact_link: bytes = b""
    artifact_signature: bytes = b""
    signature: bytes = b""


@dataclass(frozen=True)
class RawAttribute:
    """A decoded but unconverted profile attribute."""

    name: str
    value: bytes
    content_type: ContentType | int = ContentType.UNDEFINED
    anchors: tuple[RawAnchor, ...] = ()


@dataclass(frozen=True)
class RawMultiValueItem:
    content_type: ContentType | int
    data: bytes


def _parse(message_class: type[_M], data: bytes) -> _M:
    message = message_class()
    try:
        message.ParseFromString(data)
    except ProtobufDecodeError as exc:
        raise DecodeError(f"{message.DESCRIPTOR.name}: {exc}") from exc
    return message


def _content_type(value: int) -> ContentType | int:
    try:
        return ContentType(value)
    except ValueError:
        return value


# ------------------------------------------------------------------
# Message -> dataclass
# ------------------------------------------------------------------


def _from_anchor(message) -> RawAnchor:
    return RawAnchor(
        origin_server_certs=tuple(message.origin_server_certs),
        sub_type=message.sub_type,
        signed_time_stamp=message.signed_time_stamp,
        artifact_link=message.artifact_link,
        artifact_signature=message.artifact_signature,
        signature=message.signature,
    )


def _from_attribute(message) -> RawAttribute:
    if not message.name:
        raise DecodeError("Attribute: missing required field 'name'")
    return RawAttribute(
        name=message.name,
        value=message.value,
        content_type=_content_type(message.content_type),
        anchors=tuple(_from_anchor(a) for a in message.anchors),
    )


def decode_encrypted_data(data: bytes) -> EncryptedData:
    message = _parse(schema.EncryptedData, data)
    if not message.iv or not message.cipher_text:
        raise DecodeError("EncryptedData: missing iv or cipher_text")
    return EncryptedData(iv=message.iv, cipher_text=message.cipher_text)


def decode_anchor(data: bytes) -> RawAnchor:
    return _from_anchor(_parse(schema.Anchor, data))


def decode_attribute(data: bytes) -> RawAttribute:
    return _from_attribute(_parse(schema.Attribute, data))


def decode_attribute_list(data: bytes) -> list[RawAttribute]:
    """Decode an ``AttributeList`` into attributes in payload order."""
    message = _parse(schema.AttributeList, data)
    return [_from_attribute(a) for a in message.attributes]


def decode_multi_value(data: bytes) -> list[RawMultiValueItem]:
    message = _parse(schema.MultiValue, data)
    return [
        RawMultiValueItem(content_type=_content_type(v.content_type), data=v.data)
        for v in message.values
    ]


def decode_signed_timestamp(data: bytes) -> tuple[int, int]:
    """Return ``(version, timestamp_microseconds)``."""
    message = _parse(schema.SignedTimestamp, data)
    return message.version, message.timestamp


# ------------------------------------------------------------------
# Dataclass -> message
# ------------------------------------------------------------------


def _to_anchor(anchor: RawAnchor, message) -> None:
    message.artifact_link = anchor.artifact_link
    message.origin_server_certs.extend(anchor.origin_server_certs)
    message.artifact_signature = anchor.artifact_signature
    message.sub_type = anchor.sub_type
    message.signature = anchor.signature
    message.signed_time_stamp = anchor.signed_time_stamp


def _to_attribute(attribute: RawAttribute, message) -> None:
    message.name = attribute.name
    message.value = attribute.value
    message.content_type = int(attribute.content_type)
    for anchor in attribute.anchors:
        _to_anchor(anchor, message.anchors.add())


def encode_encrypted_data(encrypted: EncryptedData) -> bytes:
    return schema.EncryptedData(
        iv=encrypted.iv, cipher_text=encrypted.cipher_text
    ).SerializeToString()


def encode_anchor(anchor: RawAnchor) -> bytes:
    message = schema.Anchor()
    _to_anchor(anchor, message)
    return message.SerializeToString()


def encode_attribute(attribute: RawAttribute) -> bytes:
    message = schema.Attribute()
    _to_attribute(attribute, message)
    return message.SerializeToString()


def encode_attribute_list(attributes: list[RawAttribute]) -> bytes:
    message = schema.AttributeList()
    for attribute in attributes:
        _to_attribute(attribute, message.attributes.add())
    return message.SerializeToString()


def encode_multi_value(items: list[RawMultiValueItem]) -> bytes:
    message = schema.MultiValue()
    for item in items:
        message.values.add(content_type=int(item.content_type), data=item.data)
    return message.SerializeToString()


def encode_signed_timestamp(version: int, timestamp_us: int) -> bytes:
    return schema.SignedTimestamp(version=version, timestamp=timestamp_us).SerializeToString()
