"""Tests for the yoti_identity.attribute module."""

from __future__ import annotations

import base64
from datetime import date

import pytest

from yoti_identity.anchor import SOURCE_OID, VERIFIER_OID
from yoti_identity.attribute import (
    GenericAttribute,
    Image,
    ImageAttribute,
    ImageSliceAttribute,
    JSONAttribute,
    StringAttribute,
    TimeAttribute,
    parse_multi_value,
    to_generic,
    to_image,
    to_image_slice,
    to_json,
    to_string,
    to_time,
    to_typed,
)
from yoti_identity.types import AnchorType, AttributeConversionError, AttributeKind, ContentType
from yoti_identity.wire import RawAnchor, RawAttribute, RawMultiValueItem, encode_multi_value


def _multi_value(*items: tuple[ContentType, bytes]) -> bytes:
    return encode_multi_value([RawMultiValueItem(content_type=c, data=d) for c, d in items])


class TestToString:
    def test_converts(self) -> None:
        attribute = to_string(RawAttribute("given_names", b"Jane", ContentType.STRING))
        assert attribute == StringAttribute(name="given_names", value="Jane")
        assert attribute.kind is AttributeKind.STRING

    def test_rejects_other_content_type(self) -> None:
        with pytest.raises(AttributeConversionError, match="JPEG"):
            to_string(RawAttribute("selfie", b"\xff\xd8", ContentType.JPEG))


class TestToTime:
    def test_parses_date(self) -> None:
        attribute = to_time(RawAttribute("date_of_birth", b"1980-01-31", ContentType.DATE))
        assert isinstance(attribute, TimeAttribute)
        assert attribute.value == date(1980, 1, 31)

    def test_malformed_date(self) -> None:
        with pytest.raises(AttributeConversionError, match="unable to parse date"):
            to_time(RawAttribute("date_of_birth", b"1980-13-01", ContentType.DATE))

    def test_wrong_format(self) -> None:
        with pytest.raises(AttributeConversionError):
            to_time(RawAttribute("date_of_birth", b"31/01/1980", ContentType.DATE))


class TestToImage:
    @pytest.mark.parametrize(
        ("content_type", "mime_type"),
        [(ContentType.JPEG, "image/jpeg"), (ContentType.PNG, "image/png")],
    )
    def test_mime_type_from_content_type(self, content_type, mime_type) -> None:
        attribute = to_image(RawAttribute("selfie", b"value", content_type))
        assert attribute.mime_type == mime_type
        assert attribute.data == b"value"

    def test_base64_url(self) -> None:
        attribute = to_image(RawAttribute("selfie", b"value", ContentType.PNG))
        expected = "data:image/png;base64," + base64.b64encode(b"value").decode()
        assert attribute.base64_url() == expected
        assert attribute.value == Image(mime_type="image/png", data=b"value")

    def test_rejects_string(self) -> None:
        with pytest.raises(AttributeConversionError):
            to_image(RawAttribute("selfie", b"value", ContentType.STRING))


class TestToImageSlice:
    def test_converts_images_in_order(self) -> None:
        raw = RawAttribute(
            "document_images",
            _multi_value((ContentType.JPEG, b"first"), (ContentType.PNG, b"second")),
            ContentType.MULTI_VALUE,
        )

        attribute = to_image_slice(raw)

        assert attribute.value == (
            Image(mime_type="image/jpeg", data=b"first"),
            Image(mime_type="image/png", data=b"second"),
        )

    def test_rejects_non_multi_value(self) -> None:
        with pytest.raises(AttributeConversionError, match="MULTI_VALUE"):
            to_image_slice(RawAttribute("document_images", b"x", ContentType.STRING))

    def test_rejects_non_image_item(self) -> None:
        raw = RawAttribute(
            "document_images",
            _multi_value((ContentType.JPEG, b"first"), (ContentType.STRING, b"oops")),
            ContentType.MULTI_VALUE,
        )
        with pytest.raises(AttributeConversionError, match="expected an image"):
            to_image_slice(raw)

    def test_rejects_malformed_multi_value(self) -> None:
        raw = RawAttribute("document_images", b"\x0a\x09", ContentType.MULTI_VALUE)
        with pytest.raises(AttributeConversionError, match="unable to parse multi value"):
            to_image_slice(raw)


class TestParseMultiValue:
    def test_nested_items(self) -> None:
        nested = _multi_value((ContentType.STRING, b"inner"))
        data = _multi_value((ContentType.MULTI_VALUE, nested), (ContentType.PNG, b"img"))

        items = parse_multi_value(data)

        assert items[0].items[0].value == "inner"
        assert items[0].value == ("inner",)
        assert items[1].value == Image(mime_type="image/png", data=b"img")


class TestToJSON:
    def test_parses_object(self) -> None:
        raw = RawAttribute(
            "structured_postal_address",
            b'{"building_number": "15", "formatted_address": "15 Main St"}',
            ContentType.JSON,
        )
        attribute = to_json(raw)
        assert isinstance(attribute, JSONAttribute)
        assert attribute.value["formatted_address"] == "15 Main St"

    def test_parses_array(self) -> None:
        assert to_json(RawAttribute("list", b"[1, 2]", ContentType.JSON)).value == [1, 2]

    def test_invalid_json(self) -> None:
        with pytest.raises(AttributeConversionError, match="not valid JSON"):
            to_json(RawAttribute("structured_postal_address", b"{nope", ContentType.JSON))


class TestToGeneric:
    def test_keeps_everything(self) -> None:
        attribute = to_generic(RawAttribute("mystery", b"\x00\x01", 42))
        assert attribute == GenericAttribute(name="mystery", content_type=42, value=b"\x00\x01")


class TestToTyped:
    @pytest.mark.parametrize(
        ("raw", "expected_type"),
        [
            (RawAttribute("a", b"text", ContentType.STRING), StringAttribute),
            (RawAttribute("b", b"2000-02-29", ContentType.DATE), TimeAttribute),
            (RawAttribute("c", b"img", ContentType.JPEG), ImageAttribute),
            (RawAttribute("d", b"{}", ContentType.JSON), JSONAttribute),
            (RawAttribute("e", b"1", ContentType.INT), GenericAttribute),
            (RawAttribute("f", b"?", ContentType.UNDEFINED), GenericAttribute),
            (RawAttribute("g", b"?", 77), GenericAttribute),
        ],
    )
    def test_dispatch(self, raw, expected_type) -> None:
        assert isinstance(to_typed(raw), expected_type)

    def test_multi_value_of_images(self) -> None:
        raw = RawAttribute("imgs", _multi_value((ContentType.PNG, b"x")), ContentType.MULTI_VALUE)
        assert isinstance(to_typed(raw), ImageSliceAttribute)

    def test_mixed_multi_value_is_generic(self) -> None:
        raw = RawAttribute(
            "mixed",
            _multi_value((ContentType.PNG, b"x"), (ContentType.STRING, b"y")),
            ContentType.MULTI_VALUE,
        )
        assert isinstance(to_typed(raw), GenericAttribute)


def test_anchors_are_parsed_and_filterable(anchor_cert) -> None:
    raw = RawAttribute(
        "given_names",
        b"Jane",
        ContentType.STRING,
        anchors=(
            RawAnchor(origin_server_certs=(anchor_cert(SOURCE_OID, "PASSPORT"),)),
            RawAnchor(origin_server_certs=(anchor_cert(VERIFIER_OID, "YOTI_ADMIN"),)),
        ),
    )

    attribute = to_string(raw)

    assert [a.anchor_type for a in attribute.anchors] == [AnchorType.SOURCE, AnchorType.VERIFIER]
    assert [a.value for a in attribute.sources()] == ["PASSPORT"]
    assert [a.value for a in attribute.verifiers()] == ["YOTI_ADMIN"]
