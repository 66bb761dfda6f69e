"""
Protobuf serialization/deserialization tools

Provides functionality for converting between Protobuf messages, Python
dictionaries, dataclass instances and JSON text. Failures of the underlying
codecs are translated into mapper exceptions.
"""

import json
import logging
import dataclasses
from enum import Enum
from typing import Dict, Any, Callable, Optional

from google.protobuf import json_format
from google.protobuf.descriptor import FieldDescriptor
from google.protobuf.message import Message

from proto_mapper.exceptions import ParseError, ConversionError, SerializationError

logger = logging.getLogger(__name__)

MessageFactory = Callable[[], Message]

# Well-known types have their own JSON forms (Struct keys are free-form)
_WELL_KNOWN_PREFIX = "google.protobuf."


def _reject_constant(name: str):
    # json accepts NaN and +/-Infinity, which are not JSON
    raise ParseError(f"Malformed JSON: {name} is not a valid JSON value")


def loads(json_str: str) -> Any:
    """Parse JSON text

    Args:
        json_str: JSON string

    Returns:
        Any: Parsed JSON value

    Raises:
        ParseError: If the text is not well-formed JSON
    """
    try:
        return json.loads(json_str, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
        raise ParseError(f"Malformed JSON: {e}") from e


def dumps(value: Any, indent: Optional[int] = None) -> str:
    """Render a JSON-native value as JSON text

    Raises:
        SerializationError: If the value is not representable in JSON
    """
    try:
        return json.dumps(value, indent=indent, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Value is not representable in JSON: {e}") from e


def protobuf_to_dict(message: Message,
                     preserving_proto_field_name: bool = True,
                     include_default_values: bool = False) -> Dict[str, Any]:
    """Convert Protobuf message to dictionary

    Args:
        message: Protobuf message object
        preserving_proto_field_name: Use proto field names instead of lowerCamelCase
        include_default_values: Also emit fields holding their default value

    Returns:
        Dict: Dictionary containing message fields
    """
    if message is None:
        return {}

    if not isinstance(message, Message):
        raise SerializationError(f"Expected a protobuf message, got {type(message).__name__}")

    try:
        return json_format.MessageToDict(
            message,
            preserving_proto_field_name=preserving_proto_field_name,
            always_print_fields_with_no_presence=include_default_values,
        )
    except json_format.SerializeToJsonError as e:
        raise SerializationError(f"Cannot serialize {message.DESCRIPTOR.full_name}: {e}") from e


def dict_to_protobuf(data: Dict[str, Any],
                     factory: MessageFactory,
                     ignore_unknown_fields: bool = True,
                     exact_names: bool = False) -> Message:
    """Convert dictionary to Protobuf message

    Args:
        data: Dictionary data
        factory: Callable returning an empty message, usually the message class
        ignore_unknown_fields: Skip keys that have no matching proto field
        exact_names: Only accept proto field names, dropping every other key
            (including lowerCamelCase json names)

    Returns:
        Message: Protobuf message object

    Raises:
        ConversionError: If a value does not fit its proto field
    """
    message = factory()
    if not isinstance(message, Message):
        raise ConversionError(f"Factory produced {type(message).__name__}, not a protobuf message")

    if not data:
        return message

    if not isinstance(data, dict):
        raise ConversionError(
            f"Cannot map {type(data).__name__} onto {message.DESCRIPTOR.full_name}, expected an object"
        )

    if exact_names:
        data = _declared_only(data, message.DESCRIPTOR)

    try:
        json_format.ParseDict(data, message, ignore_unknown_fields=ignore_unknown_fields)
    except json_format.ParseError as e:
        raise ConversionError(f"Cannot map onto {message.DESCRIPTOR.full_name}: {e}") from e
    return message


def protobuf_to_json(message: Message,
                     preserving_proto_field_name: bool = True,
                     include_default_values: bool = False,
                     indent: Optional[int] = None) -> str:
    """Convert Protobuf message to JSON string

    Args:
        message: Protobuf message object
        preserving_proto_field_name: Use proto field names instead of lowerCamelCase
        include_default_values: Also emit fields holding their default value
        indent: JSON indentation, compact output when None

    Returns:
        str: JSON string
    """
    if message is None:
        return "{}"

    return dumps(
        protobuf_to_dict(message, preserving_proto_field_name, include_default_values),
        indent=indent,
    )


def json_to_protobuf(json_str: str,
                     factory: MessageFactory,
                     ignore_unknown_fields: bool = True) -> Message:
    """Convert JSON string to Protobuf message

    Args:
        json_str: JSON string
        factory: Callable returning an empty message
        ignore_unknown_fields: Skip keys that have no matching proto field

    Returns:
        Message: Protobuf message object
    """
    data = loads(json_str)
    if not isinstance(data, dict):
        raise ConversionError(f"Expected a JSON object, got {type(data).__name__}")
    return dict_to_protobuf(data, factory, ignore_unknown_fields)


def _is_repeated(field: FieldDescriptor) -> bool:
    if hasattr(field, "is_repeated"):
        return field.is_repeated
    return field.label == FieldDescriptor.LABEL_REPEATED


def _is_map(field: FieldDescriptor) -> bool:
    return field.message_type is not None and field.message_type.GetOptions().map_entry


def _declared_only(data: Any, descriptor) -> Any:
    """Drop keys that are not proto field names, at every message level

    ParseDict also accepts lowerCamelCase json names; filtering first keeps
    object -> proto matching exact and case-sensitive for nested messages,
    repeated messages and message-valued maps.
    """
    if not isinstance(data, dict) or descriptor.full_name.startswith(_WELL_KNOWN_PREFIX):
        return data

    declared = descriptor.fields_by_name
    skipped = [key for key in data if key not in declared]
    if skipped:
        logger.debug(f"Skipping fields not declared on {descriptor.full_name}: {skipped}")

    kept = {}
    for key, value in data.items():
        field = declared.get(key)
        if field is None:
            continue
        if field.message_type is None:
            kept[key] = value
        elif _is_map(field):
            value_type = field.message_type.fields_by_name["value"].message_type
            if value_type is not None and isinstance(value, dict):
                value = {k: _declared_only(v, value_type) for k, v in value.items()}
            kept[key] = value
        elif _is_repeated(field) and isinstance(value, list):
            kept[key] = [_declared_only(item, field.message_type) for item in value]
        else:
            kept[key] = _declared_only(value, field.message_type)
    return kept


def _native(field: FieldDescriptor, value: Any) -> Any:
    if field.type == FieldDescriptor.TYPE_MESSAGE:
        return message_to_fields(value)
    return value


def message_to_fields(message: Message) -> Dict[str, Any]:
    """Walk a message by descriptor and return its fields as native values

    Unlike protobuf_to_dict, every declared field is present, 64-bit integers
    stay integers and enums are their numeric value. Unset singular message
    fields are omitted; nested messages become dictionaries.
    """
    fields = {}
    for field in message.DESCRIPTOR.fields:
        value = getattr(message, field.name)
        if _is_map(field):
            value_field = field.message_type.fields_by_name["value"]
            fields[field.name] = {k: _native(value_field, v) for k, v in value.items()}
        elif _is_repeated(field):
            fields[field.name] = [_native(field, item) for item in value]
        elif field.type == FieldDescriptor.TYPE_MESSAGE:
            if message.HasField(field.name):
                fields[field.name] = message_to_fields(value)
        else:
            fields[field.name] = value
    return fields


def object_to_dict(obj: Any) -> Dict[str, Any]:
    """Convert a dataclass instance to a dictionary in field declaration order

    Raises:
        ConversionError: If obj is not a dataclass instance
    """
    if not dataclasses.is_dataclass(obj) or isinstance(obj, type):
        raise ConversionError(f"Expected a dataclass instance, got {type(obj).__name__}")
    return to_json_value(obj)


def to_json_value(value: Any,
                  preserving_proto_field_name: bool = True,
                  include_default_values: bool = False) -> Any:
    """Reduce dataclasses, enums, messages and containers to JSON-native values

    Messages are rendered with the given naming and default-value options,
    the same way protobuf_to_dict renders them.
    """
    def convert(item):
        return to_json_value(item, preserving_proto_field_name, include_default_values)

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: convert(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Message):
        return protobuf_to_dict(value, preserving_proto_field_name, include_default_values)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: convert(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [convert(item) for item in value]
    return value
