"""Code generation module for botapigen.

Main Components:
    - Generator: Sequences type generation and method generation
    - TypeGenerator: Emits pydantic models and synthesized unions
    - MethodGenerator: Emits sync and async method bindings
    - MultitypeRegistry: Maps union member sets to synthesized class names
    - SpecLoader: Loads specifications from URLs or files
    - Codegen: Writes a generated package to disk

Example:
    >>> from botapigen.codegen import Generator
    >>> source = Generator(spec_text).generate()
"""

from botapigen.codegen.codegen import Codegen
from botapigen.codegen.emitter import CodeEmitter, FileEmitter, StringEmitter
from botapigen.codegen.generator import GeneratedSource, Generator
from botapigen.codegen.methods import MethodGenerator
from botapigen.codegen.multitypes import MultitypeKey, MultitypeRegistry
from botapigen.codegen.schema import Spec, parse
from botapigen.codegen.schema_loader import SpecLoader
from botapigen.codegen.types import TypeGenerator

__all__ = [
    'Codegen',
    'Generator',
    'GeneratedSource',
    'TypeGenerator',
    'MethodGenerator',
    'MultitypeKey',
    'MultitypeRegistry',
    'Spec',
    'SpecLoader',
    'parse',
    'CodeEmitter',
    'FileEmitter',
    'StringEmitter',
]
