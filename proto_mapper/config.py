"""
Configuration settings for the protobuf object mapper
"""
import os
from typing import Dict, Any, Optional
from dataclasses import dataclass
from enum import Enum


class FieldNaming(Enum):
    """JSON field naming conventions for protobuf output"""
    PROTO = "proto"  # Verbatim proto field names
    JSON = "json"  # lowerCamelCase json_name from the descriptor


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class MapperConfig:
    """Configuration for ProtobufObjectMapper"""
    field_naming: FieldNaming = FieldNaming.PROTO
    include_default_values: bool = False
    ignore_unknown_fields: bool = True
    fail_on_unknown_properties: bool = False
    json_indent: Optional[int] = None

    # Telemetry configuration
    enable_tracing: bool = True
    enable_metrics: bool = True

    @property
    def preserve_proto_field_names(self) -> bool:
        return self.field_naming == FieldNaming.PROTO

    @classmethod
    def from_env(cls) -> "MapperConfig":
        """Create config from environment variables"""
        naming = os.getenv("PROTO_MAPPER_FIELD_NAMING", FieldNaming.PROTO.value).strip().lower()
        try:
            field_naming = FieldNaming(naming)
        except ValueError:
            raise ValueError(f"Unsupported field naming: {naming}") from None

        indent = os.getenv("PROTO_MAPPER_JSON_INDENT")

        return cls(
            field_naming=field_naming,
            include_default_values=_env_flag("PROTO_MAPPER_INCLUDE_DEFAULTS", False),
            ignore_unknown_fields=_env_flag("PROTO_MAPPER_IGNORE_UNKNOWN_FIELDS", True),
            fail_on_unknown_properties=_env_flag("PROTO_MAPPER_FAIL_ON_UNKNOWN_PROPERTIES", False),
            json_indent=int(indent) if indent else None,
            enable_tracing=_env_flag("PROTO_MAPPER_ENABLE_TRACING", True),
            enable_metrics=_env_flag("PROTO_MAPPER_ENABLE_METRICS", True),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "field_naming": self.field_naming.value,
            "include_default_values": self.include_default_values,
            "ignore_unknown_fields": self.ignore_unknown_fields,
            "fail_on_unknown_properties": self.fail_on_unknown_properties,
            "json_indent": self.json_indent,
            "enable_tracing": self.enable_tracing,
            "enable_metrics": self.enable_metrics,
        }
