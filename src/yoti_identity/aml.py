# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Anti Money Laundering (AML) check request and result types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class AmlAddress:
    """Address of the person being checked.

    *country* is an ISO-3166-1 alpha-3 code. *post_code* is required by the
    platform for checks against ``USA`` and ``GBR``.
    """

    country: str
    post_code: str | None = None


@dataclass(frozen=True)
class AmlProfile:
    given_names: str
    family_name: str
    address: AmlAddress
    ssn: str | None = None

    def to_dict(self) -> dict[str, Any]:
        address: dict[str, Any] = {"country": self.address.country}
        if self.address.post_code:
            address["post_code"] = self.address.post_code
        payload: dict[str, Any] = {
            "given_names": self.given_names,
            "family_name": self.family_name,
            "address": address,
        }
        if self.ssn:
            payload["ssn"] = self.ssn
        return payload


@dataclass(frozen=True)
class AmlResult:
    on_fraud_list: bool
    on_pep_list: bool
    on_watch_list: bool


def parse_aml_result(raw: Any) -> AmlResult:
    """Parse a JSON-decoded AML response.

    Raises
    ------
    ValueError
        If a list flag is missing or is not a boolean.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"parse_aml_result: expected dict, got {type(raw).__name__}")

    flags = {}
    for field_name in ("on_fraud_list", "on_pep_list", "on_watch_list"):
        value = raw.get(field_name)
        if not isinstance(value, bool):
            raise ValueError(f"parse_aml_result: field {field_name!r} must be a boolean")
        flags[field_name] = value
    return AmlResult(**flags)
