# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""yoti-identity: client SDK for the Yoti identity-verification platform.

Quickstart
----------
>>> import asyncio
>>> from yoti_identity import YotiClient
>>> client = YotiClient("your-sdk-id", pem_bytes)
>>> activity = asyncio.run(client.get_activity_details(token))
>>> print(activity.user_profile.given_names().value)
Jane

Opening a profile response body you fetched yourself:

>>> from yoti_identity import build_activity_details, load_private_key
>>> activity = build_activity_details(body, load_private_key(pem_bytes))
"""

from .activity import ActivityDetails, build_activity_details
from .aml import AmlAddress, AmlProfile, AmlResult
from .anchor import Anchor, SignedTimestamp
from .attribute import (
    DocumentDetails,
    GenericAttribute,
    Image,
    ImageAttribute,
    ImageSliceAttribute,
    JSONAttribute,
    StringAttribute,
    TimeAttribute,
)
from .client import SDK_VERSION, YotiClient
from .crypto import load_private_key
from .dynamic import DynamicPolicy, DynamicScenario, Extension, ShareURL, WantedAttribute
from .profile import ApplicationProfile, AttributeNames, Profile
from .types import (
    AnchorType,
    AttributeConversionError,
    ContentType,
    DecodeError,
    DocumentDetailsParseError,
    InvalidKeyError,
    KeyUnwrapError,
    ParseError,
    PayloadDecryptionError,
    ProfileNotFoundError,
    RequestFailedError,
    SharingFailureError,
    TokenDecryptionError,
    YotiError,
)

__version__ = SDK_VERSION

__all__ = [
    # Primary client
    "YotiClient",
    "build_activity_details",
    "load_private_key",
    # Receipt results
    "ActivityDetails",
    "Profile",
    "ApplicationProfile",
    "AttributeNames",
    # Attributes
    "Anchor",
    "AnchorType",
    "SignedTimestamp",
    "ContentType",
    "StringAttribute",
    "TimeAttribute",
    "ImageAttribute",
    "ImageSliceAttribute",
    "JSONAttribute",
    "GenericAttribute",
    "Image",
    "DocumentDetails",
    # AML and dynamic sharing
    "AmlAddress",
    "AmlProfile",
    "AmlResult",
    "DynamicPolicy",
    "DynamicScenario",
    "Extension",
    "ShareURL",
    "WantedAttribute",
    # Exceptions
    "YotiError",
    "InvalidKeyError",
    "TokenDecryptionError",
    "RequestFailedError",
    "ProfileNotFoundError",
    "ParseError",
    "DecodeError",
    "SharingFailureError",
    "KeyUnwrapError",
    "PayloadDecryptionError",
    "AttributeConversionError",
    "DocumentDetailsParseError",
]
