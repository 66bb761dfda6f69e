"""
Conversion utilities: protobuf/JSON serialization, typed object binding and
JSONPath access.
"""
