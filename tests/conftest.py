"""
Shared fixtures: protobuf message classes built from descriptors at runtime
"""
import pytest
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from proto_mapper.config import MapperConfig
from proto_mapper.mapper import ProtobufObjectMapper

PACKAGE = "proto_mapper.test"

FieldProto = descriptor_pb2.FieldDescriptorProto


def _add_field(message, name, number, field_type, json_name=None,
               label=FieldProto.LABEL_OPTIONAL, type_name=None):
    field = message.field.add(
        name=name,
        number=number,
        type=field_type,
        label=label,
        json_name=json_name or name,
    )
    if type_name:
        field.type_name = type_name
    return field


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="proto_mapper_test/greeting.proto",
        package=PACKAGE,
        syntax="proto3",
    )

    # message Greeting { string greeting = 1; repeated string test = 2; }
    greeting = file_proto.message_type.add(name="Greeting")
    _add_field(greeting, "greeting", 1, FieldProto.TYPE_STRING)
    _add_field(greeting, "test", 2, FieldProto.TYPE_STRING, label=FieldProto.LABEL_REPEATED)

    status = file_proto.enum_type.add(name="Status")
    status.value.add(name="STATUS_UNKNOWN", number=0)
    status.value.add(name="STATUS_ACTIVE", number=1)

    envelope = file_proto.message_type.add(name="Envelope")
    labels_entry = envelope.nested_type.add(name="LabelsEntry")
    labels_entry.options.map_entry = True
    _add_field(labels_entry, "key", 1, FieldProto.TYPE_STRING)
    _add_field(labels_entry, "value", 2, FieldProto.TYPE_STRING)

    _add_field(envelope, "message_id", 1, FieldProto.TYPE_STRING, json_name="messageId")
    _add_field(envelope, "greeting", 2, FieldProto.TYPE_MESSAGE, type_name=f".{PACKAGE}.Greeting")
    _add_field(envelope, "history", 3, FieldProto.TYPE_MESSAGE,
               label=FieldProto.LABEL_REPEATED, type_name=f".{PACKAGE}.Greeting")
    _add_field(envelope, "retry_count", 4, FieldProto.TYPE_INT64, json_name="retryCount")
    _add_field(envelope, "labels", 5, FieldProto.TYPE_MESSAGE, label=FieldProto.LABEL_REPEATED,
               type_name=f".{PACKAGE}.Envelope.LabelsEntry")
    _add_field(envelope, "status", 6, FieldProto.TYPE_ENUM, type_name=f".{PACKAGE}.Status")

    batch = file_proto.message_type.add(name="Batch")
    by_id_entry = batch.nested_type.add(name="ByIdEntry")
    by_id_entry.options.map_entry = True
    _add_field(by_id_entry, "key", 1, FieldProto.TYPE_STRING)
    _add_field(by_id_entry, "value", 2, FieldProto.TYPE_MESSAGE, type_name=f".{PACKAGE}.Envelope")

    _add_field(batch, "primary", 1, FieldProto.TYPE_MESSAGE, type_name=f".{PACKAGE}.Envelope")
    _add_field(batch, "envelopes", 2, FieldProto.TYPE_MESSAGE,
               label=FieldProto.LABEL_REPEATED, type_name=f".{PACKAGE}.Envelope")
    _add_field(batch, "by_id", 3, FieldProto.TYPE_MESSAGE, json_name="byId",
               label=FieldProto.LABEL_REPEATED, type_name=f".{PACKAGE}.Batch.ByIdEntry")

    return file_proto


@pytest.fixture(scope="session")
def message_pool():
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(_build_file().SerializeToString())
    return pool


@pytest.fixture(scope="session")
def greeting_cls(message_pool):
    """Greeting message class"""
    return message_factory.GetMessageClass(message_pool.FindMessageTypeByName(f"{PACKAGE}.Greeting"))


@pytest.fixture(scope="session")
def envelope_cls(message_pool):
    """Envelope message class (nested message, map, int64 and enum fields)"""
    return message_factory.GetMessageClass(message_pool.FindMessageTypeByName(f"{PACKAGE}.Envelope"))


@pytest.fixture(scope="session")
def batch_cls(message_pool):
    """Batch message class (Envelope as singular, repeated and map value)"""
    return message_factory.GetMessageClass(message_pool.FindMessageTypeByName(f"{PACKAGE}.Batch"))


@pytest.fixture
def mapper():
    return ProtobufObjectMapper()


@pytest.fixture
def quiet_mapper():
    """Mapper with telemetry disabled"""
    return ProtobufObjectMapper(MapperConfig(enable_tracing=False, enable_metrics=False))
