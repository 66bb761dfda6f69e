"""
Typed object binding

Binds JSON-native values (dicts, lists, scalars) onto dataclasses and typing
hints through pydantic type adapters. Validation failures are reported as
ConversionError with the location of every offending value.
"""

import dataclasses
import logging
import types
import typing
from functools import lru_cache
from typing import Any, Dict, Iterator, Type, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticUndefinedAnnotation, PydanticUserError

from proto_mapper.exceptions import ConversionError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNION_ORIGINS = (typing.Union, getattr(types, "UnionType", typing.Union))


def _type_name(hint: Any) -> str:
    return getattr(hint, "__name__", None) or str(hint)


@lru_cache(maxsize=256)
def _cached_adapter(hint: Any) -> TypeAdapter:
    return TypeAdapter(hint)


def _adapter(hint: Any) -> TypeAdapter:
    try:
        hash(hint)
    except TypeError:
        return TypeAdapter(hint)
    return _cached_adapter(hint)


def _location(path: str, loc: tuple) -> str:
    for part in loc:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return path


def _describe(error: ValidationError, path: str) -> str:
    return "; ".join(f"{_location(path, e['loc'])}: {e['msg']}" for e in error.errors())


def bind(value: Any, hint: Any, path: str = "$") -> Any:
    """Bind a JSON-native value to a type hint

    Args:
        value: Parsed JSON value
        hint: Target class or typing hint (List[str], Optional[Foo], ...)
        path: Location of value, used in error messages

    Returns:
        Any: The value converted to the requested shape

    Raises:
        ConversionError: If the value does not fit the hint, or the hint
            cannot be resolved into a validator
    """
    try:
        return _adapter(hint).validate_python(value)
    except ValidationError as e:
        raise ConversionError(_describe(e, path)) from e
    except (PydanticUserError, PydanticUndefinedAnnotation) as e:
        raise ConversionError(f"{path}: cannot bind to {_type_name(hint)}: {e}") from e


def _unknown_keys(value: Any, hint: Any, path: str) -> Iterator[str]:
    """Yield the location of every object key with no matching dataclass field"""
    if typing.get_origin(hint) in _UNION_ORIGINS:
        for candidate in typing.get_args(hint):
            if dataclasses.is_dataclass(candidate):
                yield from _unknown_keys(value, candidate, path)
                return
        return

    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        if not isinstance(value, dict):
            return
        hints = typing.get_type_hints(hint)
        names = {f.name for f in dataclasses.fields(hint)}
        for key, item in value.items():
            if key in names:
                yield from _unknown_keys(item, hints.get(key, Any), f"{path}.{key}")
            else:
                yield f"{path}.{key}"
        return

    args = typing.get_args(hint)
    if not args:
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            yield from _unknown_keys(item, args[0], f"{path}[{i}]")
    elif isinstance(value, dict):
        for key, item in value.items():
            yield from _unknown_keys(item, args[-1], f"{path}.{key}")


def dict_to_object(data: Dict[str, Any], cls: Type[T], path: str = "$",
                   fail_on_unknown: bool = False) -> T:
    """Create a dataclass instance from a dictionary

    Fields are matched by exact name. Keys with no matching field are
    skipped unless fail_on_unknown is set; fields missing from data keep
    their defaults.

    Raises:
        ConversionError: If cls is not a dataclass, a required field is
            missing, or a value does not fit its field type
    """
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise ConversionError(f"{path}: target {_type_name(cls)} is not a dataclass")
    if not isinstance(data, dict):
        raise ConversionError(f"{path}: expected an object for {cls.__name__}, got {type(data).__name__}")

    obj = bind(data, cls, path)

    if fail_on_unknown:
        try:
            unknown = list(_unknown_keys(data, cls, path))
        except (NameError, TypeError) as e:
            raise ConversionError(f"{path}: cannot resolve field types of {cls.__name__}: {e}") from e
        if unknown:
            raise ConversionError(f"{path}: unknown fields for {cls.__name__}: {', '.join(unknown)}")

    return obj
