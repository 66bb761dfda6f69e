"""
Mapper exceptions

Every failure raised by the mapper derives from MapperError, so callers can
catch one type or pick the specific kind they care about.
"""


class MapperError(Exception):
    """Base exception for mapper errors."""
    pass


class ParseError(MapperError):
    """Raised when input JSON text is not well-formed."""
    pass


class InvalidPathError(ParseError):
    """Raised when a JSONPath expression cannot be parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid JSONPath expression '{path}': {reason}")
        self.path = path


class ConversionError(MapperError):
    """Raised when a value has no compatible representation on the other side."""
    pass


class SerializationError(MapperError):
    """Raised when a value cannot be rendered into the target format."""
    pass


class PathNotFoundError(MapperError):
    """Raised when a JSONPath expression does not resolve against a document."""

    def __init__(self, path: str, message: str = None):
        super().__init__(message or f"No results for path: {path}")
        self.path = path
