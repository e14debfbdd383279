# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Typed profile attributes and the conversions that produce them.

Each ``to_*`` function takes a :class:`~wire.RawAttribute` and returns one
typed variant, or raises :class:`~types.AttributeConversionError` when the
raw content type does not fit the requested kind or the value is malformed.
:func:`to_typed` picks the variant from the content-type tag alone.
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, ClassVar, Union

from .anchor import Anchor, parse_anchors
from .types import (
    AnchorType,
    AttributeConversionError,
    AttributeKind,
    ContentType,
    DecodeError,
    DocumentDetailsParseError,
)
from .wire import RawAttribute, decode_multi_value

DATE_FORMAT = "%Y-%m-%d"

_IMAGE_MIME_TYPES = {
    ContentType.JPEG: "image/jpeg",
    ContentType.PNG: "image/png",
}


@dataclass(frozen=True)
class Image:
    """Image bytes together with their MIME type."""

    mime_type: str
    data: bytes

    def base64_url(self) -> str:
        """Render the image as a ``data:`` URL."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class _Anchored:
    anchors: tuple[Anchor, ...]

    def sources(self) -> list[Anchor]:
        return [a for a in self.anchors if a.anchor_type is AnchorType.SOURCE]

    def verifiers(self) -> list[Anchor]:
        return [a for a in self.anchors if a.anchor_type is AnchorType.VERIFIER]


@dataclass(frozen=True)
class StringAttribute(_Anchored):
    kind: ClassVar[AttributeKind] = AttributeKind.STRING

    name: str
    value: str
    anchors: tuple[Anchor, ...] = ()


@dataclass(frozen=True)
class TimeAttribute(_Anchored):
    kind: ClassVar[AttributeKind] = AttributeKind.TIME

    name: str
    value: date
    anchors: tuple[Anchor, ...] = ()


@dataclass(frozen=True)
class ImageAttribute(_Anchored):
    kind: ClassVar[AttributeKind] = AttributeKind.IMAGE

    name: str
    mime_type: str
    data: bytes
    anchors: tuple[Anchor, ...] = ()

    @property
    def value(self) -> Image:
        return Image(mime_type=self.mime_type, data=self.data)

    def base64_url(self) -> str:
        return self.value.base64_url()


@dataclass(frozen=True)
class ImageSliceAttribute(_Anchored):
    kind: ClassVar[AttributeKind] = AttributeKind.IMAGE_SLICE

    name: str
    value: tuple[Image, ...]
    anchors: tuple[Anchor, ...] = ()


@dataclass(frozen=True)
class JSONAttribute(_Anchored):
    kind: ClassVar[AttributeKind] = AttributeKind.JSON

    name: str
    value: Any
    anchors: tuple[Anchor, ...] = ()


@dataclass(frozen=True)
class GenericAttribute(_Anchored):
    """Fallback variant: the attribute exactly as received."""

    kind: ClassVar[AttributeKind] = AttributeKind.GENERIC

    name: str
    content_type: ContentType | int
    value: bytes
    anchors: tuple[Anchor, ...] = ()


@dataclass(frozen=True)
class DocumentDetails:
    """Structured form of a ``document_details`` attribute value.

    The value is a space separated string::

        <type> <issuing country> <number> [<expiry>|-] [<issuing authority>]

    e.g. ``"PASSPORT GBR 1234567 2022-09-12"`` or
    ``"PASS_CARD GBR 1234abc - DVLA"``. A ``-`` in the expiry position is a
    placeholder for a document without an expiration date.
    """

    document_type: str
    issuing_country: str
    document_number: str
    expiration_date: date | None = None
    issuing_authority: str = ""

    @classmethod
    def parse(cls, raw: str) -> "DocumentDetails":
        """Parse a document details string.

        Raises
        ------
        DocumentDetailsParseError
            If fewer than three fields are present, or the expiry field is
            neither ``-`` nor a ``YYYY-MM-DD`` date.
        """
        fields = raw.split()
        if len(fields) < 3:
            raise DocumentDetailsParseError(f"document details data is invalid: {raw!r}")

        expiration_date = None
        if len(fields) > 3 and fields[3] != "-":
            try:
                expiration_date = _parse_date(fields[3])
            except ValueError as exc:
                raise DocumentDetailsParseError(
                    f"document details expiration date {fields[3]!r} is invalid: {exc}"
                ) from exc

        return cls(
            document_type=fields[0],
            issuing_country=fields[1],
            document_number=fields[2],
            expiration_date=expiration_date,
            issuing_authority=fields[4] if len(fields) > 4 else "",
        )


@dataclass(frozen=True)
class DocumentDetailsAttribute(_Anchored):
    kind: ClassVar[AttributeKind] = AttributeKind.DOCUMENT_DETAILS

    name: str
    value: DocumentDetails
    anchors: tuple[Anchor, ...] = ()


TypedAttribute = Union[
    StringAttribute,
    TimeAttribute,
    ImageAttribute,
    ImageSliceAttribute,
    JSONAttribute,
    DocumentDetailsAttribute,
    GenericAttribute,
]


@dataclass(frozen=True)
class MultiValueItem:
    """One entry of a MULTI_VALUE attribute.

    Nested MULTI_VALUE entries are decoded eagerly into ``items``.
    """

    content_type: ContentType | int
    data: bytes
    items: tuple["MultiValueItem", ...] = ()

    @property
    def value(self) -> Any:
        if self.content_type in _IMAGE_MIME_TYPES:
            return Image(mime_type=_IMAGE_MIME_TYPES[self.content_type], data=self.data)
        if self.content_type == ContentType.MULTI_VALUE:
            return tuple(item.value for item in self.items)
        if self.content_type == ContentType.STRING:
            return self.data.decode("utf-8")
        return self.data


def parse_multi_value(data: bytes) -> list[MultiValueItem]:
    """Recursively decode the items of a MULTI_VALUE attribute value."""
    try:
        raw_items = decode_multi_value(data)
    except DecodeError as exc:
        raise AttributeConversionError(f"unable to parse multi value: {exc}") from exc

    items = []
    for raw in raw_items:
        children: tuple[MultiValueItem, ...] = ()
        if raw.content_type == ContentType.MULTI_VALUE:
            children = tuple(parse_multi_value(raw.data))
        items.append(
            MultiValueItem(content_type=raw.content_type, data=raw.data, items=children)
        )
    return items


# ------------------------------------------------------------------
# Conversions
# ------------------------------------------------------------------


def to_string(raw: RawAttribute) -> StringAttribute:
    _require(raw, ContentType.STRING)
    try:
        value = raw.value.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise AttributeConversionError(f"{raw.name}: value is not valid UTF-8") from exc
    return StringAttribute(name=raw.name, value=value, anchors=_anchors(raw))


def to_time(raw: RawAttribute) -> TimeAttribute:
    _require(raw, ContentType.DATE)
    try:
        value = _parse_date(raw.value.decode("utf-8"))
    except ValueError as exc:
        raise AttributeConversionError(
            f"{raw.name}: unable to parse date value {raw.value!r}: {exc}"
        ) from exc
    return TimeAttribute(name=raw.name, value=value, anchors=_anchors(raw))


def to_image(raw: RawAttribute) -> ImageAttribute:
    _require(raw, ContentType.JPEG, ContentType.PNG)
    return ImageAttribute(
        name=raw.name,
        mime_type=_IMAGE_MIME_TYPES[ContentType(raw.content_type)],
        data=raw.value,
        anchors=_anchors(raw),
    )


def to_image_slice(raw: RawAttribute) -> ImageSliceAttribute:
    _require(raw, ContentType.MULTI_VALUE)
    images = []
    for item in parse_multi_value(raw.value):
        if item.content_type not in _IMAGE_MIME_TYPES:
            raise AttributeConversionError(
                f"{raw.name}: multi value item has content type "
                f"{_type_name(item.content_type)}, expected an image"
            )
        images.append(item.value)
    return ImageSliceAttribute(name=raw.name, value=tuple(images), anchors=_anchors(raw))


def to_json(raw: RawAttribute) -> JSONAttribute:
    _require(raw, ContentType.JSON)
    try:
        value = json.loads(raw.value)
    except ValueError as exc:
        raise AttributeConversionError(f"{raw.name}: value is not valid JSON: {exc}") from exc
    return JSONAttribute(name=raw.name, value=value, anchors=_anchors(raw))


def to_document_details(raw: RawAttribute) -> DocumentDetailsAttribute:
    text = to_string(raw)
    return DocumentDetailsAttribute(
        name=raw.name,
        value=DocumentDetails.parse(text.value),
        anchors=text.anchors,
    )


def to_generic(raw: RawAttribute) -> GenericAttribute:
    return GenericAttribute(
        name=raw.name,
        content_type=raw.content_type,
        value=raw.value,
        anchors=_anchors(raw),
    )


_CONVERTERS: dict[int, Callable[[RawAttribute], TypedAttribute]] = {
    ContentType.STRING: to_string,
    ContentType.DATE: to_time,
    ContentType.JPEG: to_image,
    ContentType.PNG: to_image,
    ContentType.JSON: to_json,
}


def to_typed(raw: RawAttribute) -> TypedAttribute:
    """Convert *raw* to the variant its content-type tag calls for.

    MULTI_VALUE attributes become an :class:`ImageSliceAttribute` when every
    item is an image and a :class:`GenericAttribute` otherwise; unrecognised
    tags always become a :class:`GenericAttribute`.
    """
    if raw.content_type == ContentType.MULTI_VALUE:
        items = parse_multi_value(raw.value)
        if all(item.content_type in _IMAGE_MIME_TYPES for item in items):
            return to_image_slice(raw)
        return to_generic(raw)

    converter = _CONVERTERS.get(int(raw.content_type), to_generic)
    return converter(raw)


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _require(raw: RawAttribute, *allowed: ContentType) -> None:
    if raw.content_type not in allowed:
        expected = " or ".join(c.name for c in allowed)
        raise AttributeConversionError(
            f"{raw.name}: cannot convert content type "
            f"{_type_name(raw.content_type)} (expected {expected})"
        )


def _type_name(content_type: ContentType | int) -> str:
    if isinstance(content_type, ContentType):
        return content_type.name
    return str(content_type)


def _anchors(raw: RawAttribute) -> tuple[Anchor, ...]:
    return tuple(parse_anchors(raw.anchors))


def _parse_date(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()
