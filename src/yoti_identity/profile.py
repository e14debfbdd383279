# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Read-only profile facades over a decoded attribute sequence.

Lookups scan the attributes in payload order and use the first match. An
absent attribute is a normal outcome and yields ``None``; an attribute that
is present but cannot be converted raises
:class:`~types.AttributeConversionError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, TypeVar

from .attribute import (
    DocumentDetailsAttribute,
    GenericAttribute,
    ImageAttribute,
    ImageSliceAttribute,
    JSONAttribute,
    StringAttribute,
    TimeAttribute,
    to_document_details,
    to_generic,
    to_image,
    to_image_slice,
    to_json,
    to_string,
    to_time,
)
from .types import AttributeConversionError
from .wire import RawAttribute

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

AGE_OVER = "age_over"
AGE_UNDER = "age_under"


@dataclass(frozen=True)
class AttributeNames:
    """Names under which well-known attributes are shared."""

    selfie: str = "selfie"
    given_names: str = "given_names"
    family_name: str = "family_name"
    full_name: str = "full_name"
    mobile_number: str = "phone_number"
    email_address: str = "email_address"
    date_of_birth: str = "date_of_birth"
    postal_address: str = "postal_address"
    structured_postal_address: str = "structured_postal_address"
    gender: str = "gender"
    nationality: str = "nationality"
    document_images: str = "document_images"
    document_details: str = "document_details"
    application_name: str = "application_name"
    application_url: str = "application_url"
    application_logo: str = "application_logo"
    application_receipt_bg_color: str = "application_receipt_bgcolor"
    formatted_address_key: str = "formatted_address"


DEFAULT_ATTRIBUTE_NAMES = AttributeNames()


@dataclass(frozen=True)
class AgeVerification:
    """Outcome of an ``age_over:<n>`` / ``age_under:<n>`` derivation."""

    check_type: str
    age: int
    result: bool
    attribute: StringAttribute


class BaseProfile:
    """Name-indexed view over an ordered attribute sequence."""

    def __init__(
        self,
        attributes: Iterable[RawAttribute] = (),
        *,
        names: AttributeNames = DEFAULT_ATTRIBUTE_NAMES,
    ) -> None:
        self._attributes = tuple(attributes)
        self._names = names

    @property
    def attributes(self) -> tuple[RawAttribute, ...]:
        """The attributes exactly as decoded, in payload order."""
        return self._attributes

    @property
    def names(self) -> AttributeNames:
        return self._names

    def __len__(self) -> int:
        return len(self._attributes)

    def __iter__(self) -> Iterator[RawAttribute]:
        return iter(self._attributes)

    def __repr__(self) -> str:
        names = [a.name for a in self._attributes]
        return f"{type(self).__name__}(attributes={names!r})"

    def get_attribute(self, name: str) -> GenericAttribute | None:
        """Return the first attribute called *name*, or ``None``."""
        return self._lookup(name, to_generic)

    def get_attributes_by_name(self, name: str) -> list[GenericAttribute]:
        return [to_generic(a) for a in self._attributes if a.name == name]

    def get_string_attribute(self, name: str) -> StringAttribute | None:
        return self._lookup(name, to_string)

    def get_time_attribute(self, name: str) -> TimeAttribute | None:
        return self._lookup(name, to_time)

    def get_image_attribute(self, name: str) -> ImageAttribute | None:
        return self._lookup(name, to_image)

    def get_image_slice_attribute(self, name: str) -> ImageSliceAttribute | None:
        return self._lookup(name, to_image_slice)

    def get_json_attribute(self, name: str) -> JSONAttribute | None:
        return self._lookup(name, to_json)

    def _find(self, name: str) -> RawAttribute | None:
        for attribute in self._attributes:
            if attribute.name == name:
                return attribute
        return None

    def _lookup(self, name: str, convert: Callable[[RawAttribute], _T]) -> _T | None:
        raw = self._find(name)
        if raw is None:
            return None
        return convert(raw)


class Profile(BaseProfile):
    """The sharing user's profile."""

    def selfie(self) -> ImageAttribute | None:
        return self.get_image_attribute(self._names.selfie)

    def given_names(self) -> StringAttribute | None:
        return self.get_string_attribute(self._names.given_names)

    def family_name(self) -> StringAttribute | None:
        return self.get_string_attribute(self._names.family_name)

    def full_name(self) -> StringAttribute | None:
        return self.get_string_attribute(self._names.full_name)

    def mobile_number(self) -> StringAttribute | None:
        """Mobile number in E.164 format, e.g. ``"+447777123456"``."""
        return self.get_string_attribute(self._names.mobile_number)

    def email_address(self) -> StringAttribute | None:
        return self.get_string_attribute(self._names.email_address)

    def date_of_birth(self) -> TimeAttribute | None:
        return self.get_time_attribute(self._names.date_of_birth)

    def gender(self) -> StringAttribute | None:
        """One of ``MALE``, ``FEMALE``, ``TRANSGENDER`` or ``OTHER``."""
        return self.get_string_attribute(self._names.gender)

    def nationality(self) -> StringAttribute | None:
        """ISO-3166-1 alpha-3 code with ICAO9303 extensions."""
        return self.get_string_attribute(self._names.nationality)

    def structured_postal_address(self) -> JSONAttribute | None:
        return self.get_json_attribute(self._names.structured_postal_address)

    def postal_address(self) -> StringAttribute | None:
        """The user's address as a single formatted string.

        When the plain address was not shared, it is derived from the
        ``formatted_address`` field of the structured postal address and
        carries that attribute's anchors. The derived value is not added to
        :attr:`attributes`. If the structured address cannot be used the
        problem is logged and ``None`` is returned.
        """
        address = self.get_string_attribute(self._names.postal_address)
        if address is not None:
            return address

        try:
            structured = self.structured_postal_address()
        except AttributeConversionError as exc:
            logger.warning(
                "Unable to derive postal address from structured postal address: %s",
                exc,
            )
            return None
        if structured is None or not isinstance(structured.value, dict):
            return None

        formatted = structured.value.get(self._names.formatted_address_key)
        if not isinstance(formatted, str):
            return None
        return StringAttribute(
            name=self._names.postal_address,
            value=formatted,
            anchors=structured.anchors,
        )

    def document_images(self) -> ImageSliceAttribute | None:
        return self.get_image_slice_attribute(self._names.document_images)

    def document_details(self) -> DocumentDetailsAttribute | None:
        return self._lookup(self._names.document_details, to_document_details)

    def age_verifications(self) -> list[AgeVerification]:
        """All ``age_over:<n>`` / ``age_under:<n>`` results, in payload order."""
        verifications = []
        for raw in self._attributes:
            check_type, sep, age = raw.name.partition(":")
            if not sep or check_type not in (AGE_OVER, AGE_UNDER):
                continue
            verifications.append(_parse_age_verification(raw, check_type, age))
        return verifications

    def find_age_over_verification(self, age: int) -> AgeVerification | None:
        return self._find_age_verification(AGE_OVER, age)

    def find_age_under_verification(self, age: int) -> AgeVerification | None:
        return self._find_age_verification(AGE_UNDER, age)

    def _find_age_verification(self, check_type: str, age: int) -> AgeVerification | None:
        raw = self._find(f"{check_type}:{age}")
        if raw is None:
            return None
        return _parse_age_verification(raw, check_type, str(age))


class ApplicationProfile(BaseProfile):
    """The relying application's own declared attributes."""

    def application_name(self) -> StringAttribute | None:
        return self.get_string_attribute(self._names.application_name)

    def application_url(self) -> StringAttribute | None:
        return self.get_string_attribute(self._names.application_url)

    def application_logo(self) -> ImageAttribute | None:
        return self.get_image_attribute(self._names.application_logo)

    def application_receipt_bg_color(self) -> StringAttribute | None:
        """Background colour of the receipt the user sees, e.g. ``"#ffffff"``."""
        return self.get_string_attribute(self._names.application_receipt_bg_color)


def _parse_age_verification(raw: RawAttribute, check_type: str, age: str) -> AgeVerification:
    attribute = to_string(raw)
    try:
        age_value = int(age)
    except ValueError as exc:
        raise AttributeConversionError(f"{raw.name}: invalid age {age!r}") from exc

    result = attribute.value.strip().lower()
    if result not in ("true", "false"):
        raise AttributeConversionError(
            f"{raw.name}: age verification value must be 'true' or 'false', "
            f"got {attribute.value!r}"
        )
    return AgeVerification(
        check_type=check_type,
        age=age_value,
        result=result == "true",
        attribute=attribute,
    )
