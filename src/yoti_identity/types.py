# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Shared value types and exceptions for the yoti-identity Python SDK."""

from __future__ import annotations

from enum import Enum, IntEnum


class ContentType(IntEnum):
    """Content-type tag carried by every attribute on the wire."""

    UNDEFINED = 0
    STRING = 1
    JPEG = 2
    DATE = 3
    PNG = 4
    JSON = 5
    MULTI_VALUE = 6
    INT = 7


class AnchorType(str, Enum):
    """Kind of provenance assertion an anchor makes about an attribute."""

    SOURCE = "SOURCE"
    VERIFIER = "VERIFIER"
    UNKNOWN = "UNKNOWN"


class AttributeKind(str, Enum):
    """Discriminator of the typed attribute variants."""

    STRING = "string"
    TIME = "time"
    IMAGE = "image"
    IMAGE_SLICE = "image_slice"
    JSON = "json"
    DOCUMENT_DETAILS = "document_details"
    GENERIC = "generic"


class AuthType(IntEnum):
    """Authentication types a dynamic policy can require of the user."""

    SELFIE = 1
    PIN = 2


class SharingOutcome(str, Enum):
    """Outcome the platform records on a receipt; anything but SUCCESS is a failure."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


# ------------------------------------------------------------------
# Exceptions
# ------------------------------------------------------------------


class YotiError(Exception):
    """Base class for every error raised by this SDK."""


class InvalidKeyError(YotiError):
    """Raised when the application's private key cannot be loaded."""


class SigningError(YotiError):
    """Raised when a request digest cannot be signed."""


class DecryptionError(YotiError):
    """Raised when an asymmetric or symmetric decryption step fails."""


class TokenDecryptionError(DecryptionError):
    """Raised when the one-time connect token cannot be decrypted."""


class KeyUnwrapError(DecryptionError):
    """Raised when the receipt's wrapped symmetric key cannot be unwrapped."""


class PayloadDecryptionError(DecryptionError):
    """Raised when an encrypted profile payload cannot be decrypted."""


class RequestFailedError(YotiError):
    """Raised when the platform returns a non-2xx response or is unreachable."""

    def __init__(self, status_code: int, endpoint: str, message: str) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)

    @property
    def temporary(self) -> bool:
        """True when retrying the same request may succeed."""
        return self.status_code >= 500


class ProfileNotFoundError(RequestFailedError):
    """Raised when the platform has no profile for the supplied token."""


class ParseError(YotiError):
    """Raised when a response or payload is not well-formed."""


class DecodeError(ParseError):
    """Raised when a binary payload is not a valid encoding of its schema."""


class SharingFailureError(YotiError):
    """Raised when the receipt reports that the user did not share data."""

    def __init__(self, outcome: str) -> None:
        self.outcome = outcome
        super().__init__(f"sharing failure: receipt outcome is {outcome!r}")


class AttributeConversionError(YotiError):
    """Raised when an attribute cannot be converted to the requested kind."""


class DocumentDetailsParseError(AttributeConversionError):
    """Raised when a document details value is malformed."""
