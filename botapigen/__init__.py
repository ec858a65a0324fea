"""botapigen - Generate typed Python bindings from bot API specifications.

botapigen reads a machine-readable description of a bot API (types with
fields, methods with parameters and return types) and generates pydantic
models plus method bindings that delegate to a pluggable transport.

Quick Start:
    >>> from botapigen import Generator
    >>>
    >>> source = Generator(open('api.json').read()).generate()
    >>> print(source.types)
    >>> print(source.methods)

CLI Usage:
    $ botapigen generate --config botapigen.yaml
    $ botapigen validate ./api.json
"""

from botapigen._version import version as __version__
from botapigen.codegen.codegen import Codegen
from botapigen.codegen.generator import GeneratedSource, Generator
from botapigen.codegen.schema import Spec, parse
from botapigen.codegen.schema_loader import SpecLoader
from botapigen.config import CodegenConfig, DocumentConfig, GeneratorConfig, get_config
from botapigen.exceptions import (
    BotAPIGenError,
    ConfigurationError,
    GenerationError,
    MalformedSchemaError,
    MethodGenerationError,
    NamingError,
    OutputError,
    ReservedCollisionError,
    SchemaError,
    SpecLoadError,
    TypeGenerationError,
    UnknownTypeError,
    UnresolvedUnionError,
)

__all__ = [
    # Main classes
    'Codegen',
    'Generator',
    'GeneratedSource',
    'Spec',
    'SpecLoader',
    'parse',
    # Configuration
    'CodegenConfig',
    'DocumentConfig',
    'GeneratorConfig',
    'get_config',
    # Exceptions
    'BotAPIGenError',
    'SchemaError',
    'MalformedSchemaError',
    'UnknownTypeError',
    'SpecLoadError',
    'NamingError',
    'ReservedCollisionError',
    'GenerationError',
    'UnresolvedUnionError',
    'TypeGenerationError',
    'MethodGenerationError',
    'ConfigurationError',
    'OutputError',
]
