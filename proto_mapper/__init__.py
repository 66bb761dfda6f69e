"""
Protobuf Object Mapper

Converts between dataclass instances, protobuf messages and JSON text, and
reads/writes JSON text through JSONPath expressions.
"""

from importlib import import_module

__version__ = "0.1.0"

__all__ = [
    "ProtobufObjectMapper",
    "MapperConfig",
    "FieldNaming",
    "MapperError",
    "ParseError",
    "InvalidPathError",
    "ConversionError",
    "SerializationError",
    "PathNotFoundError",
]

_EXCEPTIONS = {
    "MapperError",
    "ParseError",
    "InvalidPathError",
    "ConversionError",
    "SerializationError",
    "PathNotFoundError",
}


def __getattr__(name: str):
    """Lazily import symbols to avoid loading protobuf and OpenTelemetry at import time."""
    if name == "ProtobufObjectMapper":
        return import_module(".mapper", __package__).ProtobufObjectMapper
    if name in ("MapperConfig", "FieldNaming"):
        return getattr(import_module(".config", __package__), name)
    if name in _EXCEPTIONS:
        return getattr(import_module(".exceptions", __package__), name)
    raise AttributeError(name)
