# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Protobuf message classes for the platform's binary profile payloads.

The schemas are declared as descriptors and registered in a private
:class:`~google.protobuf.descriptor_pool.DescriptorPool`, so no generated
``_pb2`` modules or ``protoc`` step are needed. Field numbers and types match
the platform's ``attrpubapi_v1`` and ``compubapi_v1`` packages.

``content_type`` fields are declared ``int32``. This is wire-compatible with
the platform's ``ContentType`` enum and keeps tags this SDK does not know.
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_Field = descriptor_pb2.FieldDescriptorProto

ATTRIBUTE_PACKAGE = "attrpubapi_v1"
COMMON_PACKAGE = "compubapi_v1"


def _field(
    name: str,
    number: int,
    field_type: int,
    *,
    repeated: bool = False,
    type_name: str | None = None,
) -> descriptor_pb2.FieldDescriptorProto:
    field = _Field(
        name=name,
        number=number,
        type=field_type,
        label=_Field.LABEL_REPEATED if repeated else _Field.LABEL_OPTIONAL,
    )
    if type_name is not None:
        field.type_name = type_name
    return field


def _common_file() -> descriptor_pb2.FileDescriptorProto:
    return descriptor_pb2.FileDescriptorProto(
        name="compubapi_v1/common.proto",
        package=COMMON_PACKAGE,
        syntax="proto3",
        message_type=[
            descriptor_pb2.DescriptorProto(
                name="EncryptedData",
                field=[
                    _field("iv", 1, _Field.TYPE_BYTES),
                    _field("cipher_text", 2, _Field.TYPE_BYTES),
                ],
            ),
            descriptor_pb2.DescriptorProto(
                name="SignedTimestamp",
                field=[
                    _field("version", 1, _Field.TYPE_INT32),
                    _field("timestamp", 2, _Field.TYPE_UINT64),
                ],
            ),
        ],
    )


def _attribute_file() -> descriptor_pb2.FileDescriptorProto:
    prefix = f".{ATTRIBUTE_PACKAGE}."
    return descriptor_pb2.FileDescriptorProto(
        name="attrpubapi_v1/attribute.proto",
        package=ATTRIBUTE_PACKAGE,
        syntax="proto3",
        message_type=[
            descriptor_pb2.DescriptorProto(
                name="Anchor",
                field=[
                    _field("artifact_link", 1, _Field.TYPE_BYTES),
                    _field("origin_server_certs", 2, _Field.TYPE_BYTES, repeated=True),
                    _field("artifact_signature", 3, _Field.TYPE_BYTES),
                    _field("sub_type", 4, _Field.TYPE_STRING),
                    _field("signature", 5, _Field.TYPE_BYTES),
                    _field("signed_time_stamp", 6, _Field.TYPE_BYTES),
                ],
            ),
            descriptor_pb2.DescriptorProto(
                name="Attribute",
                field=[
                    _field("name", 1, _Field.TYPE_STRING),
                    _field("value", 2, _Field.TYPE_BYTES),
                    _field("content_type", 3, _Field.TYPE_INT32),
                    _field(
                        "anchors",
                        4,
                        _Field.TYPE_MESSAGE,
                        repeated=True,
                        type_name=prefix + "Anchor",
                    ),
                ],
            ),
            descriptor_pb2.DescriptorProto(
                name="AttributeList",
                field=[
                    _field(
                        "attributes",
                        1,
                        _Field.TYPE_MESSAGE,
                        repeated=True,
                        type_name=prefix + "Attribute",
                    ),
                ],
            ),
            descriptor_pb2.DescriptorProto(
                name="MultiValue",
                field=[
                    _field(
                        "values",
                        1,
                        _Field.TYPE_MESSAGE,
                        repeated=True,
                        type_name=prefix + "MultiValue.Value",
                    ),
                ],
                nested_type=[
                    descriptor_pb2.DescriptorProto(
                        name="Value",
                        field=[
                            _field("content_type", 1, _Field.TYPE_INT32),
                            _field("data", 2, _Field.TYPE_BYTES),
                        ],
                    ),
                ],
            ),
        ],
    )


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_common_file().SerializeToString())
_pool.AddSerializedFile(_attribute_file().SerializeToString())


def _message_class(full_name: str):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(full_name))


EncryptedData = _message_class(f"{COMMON_PACKAGE}.EncryptedData")
SignedTimestamp = _message_class(f"{COMMON_PACKAGE}.SignedTimestamp")
Anchor = _message_class(f"{ATTRIBUTE_PACKAGE}.Anchor")
Attribute = _message_class(f"{ATTRIBUTE_PACKAGE}.Attribute")
AttributeList = _message_class(f"{ATTRIBUTE_PACKAGE}.AttributeList")
MultiValue = _message_class(f"{ATTRIBUTE_PACKAGE}.MultiValue")
