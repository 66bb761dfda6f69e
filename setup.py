from setuptools import setup, find_packages

setup(
    name="proto_mapper",
    version="0.1.0",
    description="Protobuf Object Mapper - conversions between dataclasses, protobuf messages and JSON",
    author="proto_mapper Team",
    packages=find_packages(include=["proto_mapper", "proto_mapper.*"]),
    install_requires=[
        "protobuf>=5.26.0",
        "jsonpath-ng>=1.6.0",
        "pydantic>=2.5.0",
        "opentelemetry-api>=1.14.0",
        "opentelemetry-sdk>=1.14.0",
        "opentelemetry-exporter-otlp>=1.14.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-benchmark",
            "pytest-cov",
            "black",
            "isort",
            "pylint",
        ],
    },
    python_requires=">=3.9",
)
