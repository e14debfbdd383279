"""Tests for DocumentDetails parsing."""

from __future__ import annotations

from datetime import date

import pytest

from yoti_identity.attribute import DocumentDetails, to_document_details
from yoti_identity.types import ContentType, DocumentDetailsParseError
from yoti_identity.wire import RawAttribute


def test_passport_with_expiry() -> None:
    details = DocumentDetails.parse("PASSPORT GBR 1234567 2022-09-12")

    assert details.document_type == "PASSPORT"
    assert details.issuing_country == "GBR"
    assert details.document_number == "1234567"
    assert details.expiration_date == date(2022, 9, 12)
    assert details.issuing_authority == ""


def test_placeholder_expiry_with_authority() -> None:
    details = DocumentDetails.parse("PASS_CARD GBR 1234abc - DVLA")

    assert details.document_type == "PASS_CARD"
    assert details.issuing_country == "GBR"
    assert details.document_number == "1234abc"
    assert details.expiration_date is None
    assert details.issuing_authority == "DVLA"


def test_minimal_three_fields() -> None:
    details = DocumentDetails.parse("PASSPORT GBR 1234abc")

    assert details.expiration_date is None
    assert details.issuing_authority == ""


def test_expiry_and_authority() -> None:
    details = DocumentDetails.parse("DRIVING_LICENCE GBR 1234abc 2016-05-01 DVLA")

    assert details.expiration_date == date(2016, 5, 1)
    assert details.issuing_authority == "DVLA"


def test_trailing_fields_are_ignored() -> None:
    details = DocumentDetails.parse("DRIVING_LICENCE GBR 1234abc 2016-05-01 DVLA someThirdAttribute")

    assert details.document_type == "DRIVING_LICENCE"
    assert details.issuing_authority == "DVLA"


def test_aadhaar() -> None:
    details = DocumentDetails.parse("AADHAAR IND 1234abc 2016-05-01")

    assert details.issuing_country == "IND"
    assert details.expiration_date == date(2016, 5, 1)


@pytest.mark.parametrize("raw", ["", "PASSPORT", "PASSPORT GBR"])
def test_too_few_fields(raw: str) -> None:
    with pytest.raises(DocumentDetailsParseError, match="invalid"):
        DocumentDetails.parse(raw)


def test_malformed_expiry_date() -> None:
    with pytest.raises(DocumentDetailsParseError, match="expiration date"):
        DocumentDetails.parse("PASSPORT GBR 1234abc 2016-13-01")


def test_attribute_conversion_keeps_name() -> None:
    raw = RawAttribute("document_details", b"PASSPORT GBR 1234567 2022-09-12", ContentType.STRING)

    attribute = to_document_details(raw)

    assert attribute.name == "document_details"
    assert attribute.value.document_number == "1234567"
