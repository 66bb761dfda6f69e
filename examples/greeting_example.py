#!/usr/bin/env python
"""
Greeting Mapper Example

Demonstrates converting a dataclass to a protobuf message, to JSON and back,
and reading/writing JSON documents through JSONPath expressions.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from proto_mapper import ProtobufObjectMapper, MapperConfig, PathNotFoundError


@dataclass
class GreetingObject:
    greeting: Optional[str] = None
    test: List[str] = field(default_factory=list)


def setup_logging():
    """Setup logging configuration"""
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_greeting_class():
    """Build the Greeting message class from a descriptor (no protoc step)"""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="example/greeting.proto",
        package="example",
        syntax="proto3",
    )
    message = file_proto.message_type.add(name="Greeting")
    message.field.add(
        name="greeting", number=1, json_name="greeting",
        type=descriptor_pb2.FieldDescriptorProto.TYPE_STRING,
        label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
    )
    message.field.add(
        name="test", number=2, json_name="test",
        type=descriptor_pb2.FieldDescriptorProto.TYPE_STRING,
        label=descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED,
    )

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(file_proto.SerializeToString())
    return message_factory.GetMessageClass(pool.FindMessageTypeByName("example.Greeting"))


def main():
    setup_logging()
    Greeting = build_greeting_class()
    mapper = ProtobufObjectMapper(MapperConfig(json_indent=2, enable_tracing=False, enable_metrics=False))

    obj = GreetingObject(greeting="Hello world", test=["hello", "world"])
    proto = mapper.map(obj, Greeting)
    print(f"Object -> proto: greeting={proto.greeting!r}, test={list(proto.test)}")

    json_text = mapper.proto_to_json(proto)
    print(f"Proto -> JSON:\n{json_text}")

    print(f"JSON -> object: {mapper.json_to_object(json_text, GreetingObject)}")
    print(f"$.test.[*] = {mapper.read_field_from_json(json_text, '$.test.[*]', List[str])}")
    print(f"Put testkey:\n{mapper.put_value_in_json(json_text, '$', 'testkey', ['bla'])}")
    reversed_copy = mapper.read_and_put(json_text, "$.test", "{}", "$", "testkey", lambda v: v[::-1])
    print(f"Read and put:\n{reversed_copy}")

    try:
        mapper.read_field_from_json(json_text, "$.missing")
    except PathNotFoundError as e:
        print(f"Expected failure: {e}")


if __name__ == "__main__":
    main()
