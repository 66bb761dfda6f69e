"""
JSONPath helpers

Reads and writes parsed JSON documents through JSONPath expressions using the
jsonpath-ng extended parser. Documents are plain dicts/lists as produced by
json.loads; writes mutate the given document, so callers pass a fresh parse.
"""

import logging
from functools import lru_cache
from typing import Any, List

from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse
from jsonpath_ng.jsonpath import Child, Fields, Index, JSONPath, Root, This

from proto_mapper.exceptions import InvalidPathError, PathNotFoundError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def compile_path(path: str) -> JSONPath:
    """Parse a JSONPath expression

    Args:
        path: JSONPath expression, e.g. "$.test.[*]"

    Returns:
        JSONPath: Compiled expression

    Raises:
        InvalidPathError: If the expression cannot be parsed
    """
    if not isinstance(path, str) or not path.strip():
        raise InvalidPathError(str(path), "expression is empty")
    try:
        return parse(path)
    except JSONPathError as e:
        raise InvalidPathError(path, str(e)) from e


def is_definite(expr: JSONPath) -> bool:
    """Check whether an expression can match at most one location

    Only the root, single named fields and single indexes are definite;
    wildcards, slices, recursive descent, filters and unions are not.
    """
    if isinstance(expr, (Root, This)):
        return True
    if isinstance(expr, Child):
        return is_definite(expr.left) and is_definite(expr.right)
    if isinstance(expr, Fields):
        return len(expr.fields) == 1 and expr.fields[0] != "*"
    if isinstance(expr, Index):
        indices = getattr(expr, "indices", None) or (expr.index,)
        return len(indices) == 1
    return False


def find_values(document: Any, path: str) -> List[Any]:
    """Return the values matched by path in document order

    Raises:
        PathNotFoundError: If nothing matches
    """
    matches = compile_path(path).find(document)
    if not matches:
        raise PathNotFoundError(path)
    return [match.value for match in matches]


def read_path(document: Any, path: str) -> Any:
    """Read the value(s) at path

    A definite path returns the single matched value, any other path returns
    the list of matched values.

    Raises:
        PathNotFoundError: If nothing matches
    """
    values = find_values(document, path)
    if is_definite(compile_path(path)):
        return values[0]
    return values


def put_value(document: Any, path: str, key: str, value: Any) -> Any:
    """Set key to value on every object matched by path

    Existing keys keep their position and are overwritten, new keys are
    appended. The document is modified in place and returned.

    Raises:
        PathNotFoundError: If nothing matches or a match is not an object
    """
    targets = find_values(document, path)
    for target in targets:
        if not isinstance(target, dict):
            raise PathNotFoundError(
                path, f"Path {path} resolved to {type(target).__name__}, expected an object"
            )

    for target in targets:
        if key in target:
            logger.debug(f"Overwriting existing key '{key}' at {path}")
        target[key] = value
    return document
