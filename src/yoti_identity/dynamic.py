# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Dynamic sharing: scenario configuration and share URL results.

A :class:`DynamicScenario` describes what the application asks the user to
share. It is posted to the platform, which answers with a :class:`ShareURL`
the application renders as a QR code or link.

All configuration objects are immutable and serialize with ``to_dict``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .profile import AGE_OVER, AGE_UNDER, DEFAULT_ATTRIBUTE_NAMES
from .types import AuthType


@dataclass(frozen=True)
class SourceConstraint:
    """Restrict an attribute to values anchored by specific documents.

    *anchors* holds ``(name, sub_type)`` pairs such as ``("PASSPORT", "")``.
    """

    anchors: tuple[tuple[str, str], ...]
    soft_preference: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "SOURCE",
            "preferred_sources": {
                "anchors": [{"name": n, "sub_type": s} for n, s in self.anchors],
                "soft_preference": self.soft_preference,
            },
        }


@dataclass(frozen=True)
class WantedAttribute:
    name: str
    derivation: str | None = None
    accept_self_asserted: bool | None = None
    constraints: tuple[SourceConstraint, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("WantedAttribute: name must not be empty")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "optional": False}
        if self.derivation:
            payload["derivation"] = self.derivation
        if self.accept_self_asserted is not None:
            payload["accept_self_asserted"] = self.accept_self_asserted
        if self.constraints:
            payload["constraints"] = [c.to_dict() for c in self.constraints]
        return payload


@dataclass(frozen=True)
class DynamicPolicy:
    wanted: tuple[WantedAttribute, ...] = ()
    wanted_auth_types: tuple[AuthType, ...] = ()
    wanted_remember_me: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "wanted": [w.to_dict() for w in self.wanted],
            "wanted_auth_types": [int(t) for t in self.wanted_auth_types],
            "wanted_remember_me": self.wanted_remember_me,
            "wanted_remember_me_optional": False,
        }


@dataclass(frozen=True)
class Extension:
    """A typed extension attached to a scenario; *content* must be JSON-able."""

    type: str
    content: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "content": self.content}


@dataclass(frozen=True)
class DynamicScenario:
    policy: DynamicPolicy = field(default_factory=DynamicPolicy)
    extensions: tuple[Extension, ...] = ()
    callback_endpoint: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "policy": self.policy.to_dict(),
            "extensions": [e.to_dict() for e in self.extensions],
            "callback_endpoint": self.callback_endpoint,
        }


@dataclass(frozen=True)
class ShareURL:
    share_url: str
    ref_id: str


def parse_share_url(raw: Any) -> ShareURL:
    """Parse the JSON-decoded response of a share URL request.

    Raises
    ------
    ValueError
        If ``qrcode`` or ``ref_id`` is missing.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"parse_share_url: expected dict, got {type(raw).__name__}")
    share_url = raw.get("qrcode")
    ref_id = raw.get("ref_id")
    if not isinstance(share_url, str) or not isinstance(ref_id, str):
        raise ValueError("parse_share_url: response must contain 'qrcode' and 'ref_id'")
    return ShareURL(share_url=share_url, ref_id=ref_id)


# ------------------------------------------------------------------
# Constructors for common configurations
# ------------------------------------------------------------------


def wanted_age_over(age: int, **kwargs: Any) -> WantedAttribute:
    """Ask for an ``age_over:<age>`` derivation of the date of birth."""
    return WantedAttribute(
        name=DEFAULT_ATTRIBUTE_NAMES.date_of_birth,
        derivation=f"{AGE_OVER}:{age}",
        **kwargs,
    )


def wanted_age_under(age: int, **kwargs: Any) -> WantedAttribute:
    return WantedAttribute(
        name=DEFAULT_ATTRIBUTE_NAMES.date_of_birth,
        derivation=f"{AGE_UNDER}:{age}",
        **kwargs,
    )


def location_constraint_extension(
    latitude: float,
    longitude: float,
    *,
    radius: float = 150.0,
    max_uncertainty_radius: float = 150.0,
) -> Extension:
    """Require the user's device to be within *radius* metres of a point."""
    if not -90 <= latitude <= 90:
        raise ValueError(f"location_constraint_extension: latitude {latitude} out of range")
    if not -180 <= longitude <= 180:
        raise ValueError(f"location_constraint_extension: longitude {longitude} out of range")
    if radius < 0 or max_uncertainty_radius < 0:
        raise ValueError("location_constraint_extension: radii must not be negative")
    return Extension(
        type="LOCATION_CONSTRAINT",
        content={
            "expected_device_location": {
                "latitude": latitude,
                "longitude": longitude,
                "radius": radius,
                "max_uncertainty_radius": max_uncertainty_radius,
            }
        },
    )


def transactional_flow_extension(content: Any) -> Extension:
    return Extension(type="TRANSACTIONAL_FLOW", content=content)
