"""
Protobuf Object Mapper

Converts between dataclass instances, protobuf messages and JSON text, and
reads/writes JSON text through JSONPath expressions. The mapper holds only
its configuration; every call parses its inputs afresh and returns new values.
"""

import logging
import time
from contextlib import contextmanager, nullcontext
from typing import Any, Callable, Optional, Type, TypeVar

from google.protobuf.message import Message

from proto_mapper.config import MapperConfig
from proto_mapper.exceptions import ConversionError, MapperError, SerializationError
from proto_mapper.telemetry.metrics import record_operation
from proto_mapper.telemetry.tracer import create_span
from proto_mapper.utils.binding import bind, dict_to_object
from proto_mapper.utils.json_path import put_value, read_path
from proto_mapper.utils.serialization import (
    MessageFactory,
    dict_to_protobuf,
    dumps,
    json_to_protobuf,
    loads,
    message_to_fields,
    object_to_dict,
    protobuf_to_json,
    to_json_value,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=Message)


class ProtobufObjectMapper:
    """
    Stateless façade over the JSON codec, the protobuf codec and the JSONPath
    engine.

    Typed objects are dataclasses. Wherever a message has to be created the
    caller passes a factory: any zero-argument callable returning an empty
    message, normally the generated message class itself.
    """

    def __init__(self, config: Optional[MapperConfig] = None):
        self.config = config or MapperConfig()

    @contextmanager
    def _operation(self, name: str):
        start = time.time()
        outcome = "ok"
        span = create_span(f"proto_mapper.{name}") if self.config.enable_tracing else nullcontext()
        try:
            with span:
                yield
        except MapperError as e:
            outcome = type(e).__name__
            logger.debug(f"{name} failed: {outcome}: {e}")
            raise
        except Exception as e:
            # Raised by caller code, e.g. a read_and_put transform
            outcome = type(e).__name__
            raise
        finally:
            if self.config.enable_metrics:
                record_operation(name, outcome, (time.time() - start) * 1000)

    def _json_value(self, value: Any) -> Any:
        return to_json_value(
            value,
            preserving_proto_field_name=self.config.preserve_proto_field_names,
            include_default_values=self.config.include_default_values,
        )

    def map(self, source: Any, target: Any) -> Any:
        """Map an object onto a message or a message onto an object

        A protobuf message source is converted to an instance of the target
        class; any other source is copied into the message built by the
        target factory.
        """
        if isinstance(source, Message):
            return self.proto_to_object(source, target)
        return self.object_to_proto(source, target)

    def object_to_proto(self, obj: Any, factory: Callable[[], M]) -> M:
        """Copy the fields of a dataclass instance into a new message

        Fields are matched by exact proto field name; fields present on only
        one side are skipped.

        Raises:
            ConversionError: If a value does not fit its proto field
        """
        with self._operation("object_to_proto"):
            return dict_to_protobuf(object_to_dict(obj), factory,
                                    ignore_unknown_fields=True, exact_names=True)

    def proto_to_object(self, message: Message, target_cls: Type[T]) -> T:
        """Create an instance of target_cls populated from message fields

        Raises:
            ConversionError: If target_cls is not a dataclass, lacks a value
                for a required field, or a value does not fit a field type
        """
        with self._operation("proto_to_object"):
            if not isinstance(message, Message):
                raise ConversionError(f"Expected a protobuf message, got {type(message).__name__}")
            return dict_to_object(message_to_fields(message), target_cls)

    def proto_to_json(self, message: Message) -> str:
        """Render a message as JSON text

        Raises:
            SerializationError: If the message cannot be rendered
        """
        with self._operation("proto_to_json"):
            return protobuf_to_json(
                message,
                preserving_proto_field_name=self.config.preserve_proto_field_names,
                include_default_values=self.config.include_default_values,
                indent=self.config.json_indent,
            )

    def json_to_proto(self, json_text: str, factory: MessageFactory) -> Message:
        """Parse JSON text into the message built by factory

        Raises:
            ParseError: If the text is not well-formed JSON
            ConversionError: If a value does not fit its proto field
        """
        with self._operation("json_to_proto"):
            return json_to_protobuf(json_text, factory,
                                    ignore_unknown_fields=self.config.ignore_unknown_fields)

    def json_to_object(self, json_text: str, target_cls: Type[T]) -> T:
        """Parse JSON text into a new instance of target_cls

        Raises:
            ParseError: If the text is not well-formed JSON
            ConversionError: If the document does not fit target_cls
        """
        with self._operation("json_to_object"):
            return dict_to_object(loads(json_text), target_cls,
                                  fail_on_unknown=self.config.fail_on_unknown_properties)

    def object_to_json(self, obj: Any) -> str:
        """Render a dataclass instance as JSON text, keys in declaration order

        Raises:
            SerializationError: If obj or one of its values has no JSON form
        """
        with self._operation("object_to_json"):
            try:
                data = object_to_dict(obj)
            except ConversionError as e:
                raise SerializationError(str(e)) from e
            return dumps(data, indent=self.config.json_indent)

    def read_field_from_json(self, json_text: str, path: str, value_type: Any = None) -> Any:
        """Read the value at a JSONPath expression

        Args:
            json_text: JSON document
            path: JSONPath expression; definite paths yield one value, any
                other path yields the list of matched values
            value_type: Optional class or typing hint the result is bound to,
                e.g. List[str]

        Raises:
            ParseError: If the document or the expression is malformed
            PathNotFoundError: If the path matches nothing
            ConversionError: If the value does not fit value_type
        """
        with self._operation("read_field_from_json"):
            value = read_path(loads(json_text), path)
            if value_type is None:
                return value
            return bind(value, value_type, path)

    def put_value_in_json(self, json_text: str, base_path: str, key: str, value: Any) -> str:
        """Return json_text with key set to value on the object(s) at base_path

        Existing keys are overwritten in place; new keys are appended after
        the original ones. value may be a JSON-native value, a dataclass
        instance or a protobuf message.

        Raises:
            PathNotFoundError: If base_path does not resolve to an object
        """
        with self._operation("put_value_in_json"):
            document = loads(json_text)
            put_value(document, base_path, key, self._json_value(value))
            return dumps(document, indent=self.config.json_indent)

    def read_and_put(self, json_text: str, read_path_expr: str, target_json: str,
                     write_path_expr: str, key: str,
                     transform: Optional[Callable[[Any], Any]] = None) -> str:
        """Read a value from one document and put it into another

        The value read at read_path_expr in json_text is passed through
        transform (identity when None) and stored under key on the object(s)
        at write_path_expr in target_json.

        Raises:
            PathNotFoundError: If either path fails to resolve
        """
        with self._operation("read_and_put"):
            value = read_path(loads(json_text), read_path_expr)
            if transform is not None:
                value = transform(value)
            document = loads(target_json)
            put_value(document, write_path_expr, key, self._json_value(value))
            return dumps(document, indent=self.config.json_indent)
