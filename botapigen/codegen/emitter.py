"""Code emitter interfaces and implementations for generated output.

The generator produces finished source text; an emitter decides where that
text ends up (files on disk, or an in-memory mapping for tests).
"""

import ast
from abc import ABC, abstractmethod
from pathlib import Path

from upath import UPath

from botapigen.codegen.ast_utils import _all
from botapigen.exceptions import OutputError


class CodeEmitter(ABC):
    """Abstract base class for code emitters."""

    @abstractmethod
    def emit_module(self, name: str, source: str) -> str | None:
        """Emit a complete Python module.

        Args:
            name: The module name (used for file naming or identification).
            source: The module source text.

        Returns:
            The path to the emitted file, or the code string, depending
            on the implementation.
        """
        pass

    def emit_init(self, exports: dict[str, list[str]] | None = None) -> str | None:
        """Emit an ``__init__`` module re-exporting names of sibling modules.

        Args:
            exports: Mapping of module name to the names it exports.
        """
        body: list[ast.stmt] = []
        names: list[str] = []
        for module, module_names in (exports or {}).items():
            body.append(
                ast.ImportFrom(
                    module=module,
                    names=[ast.alias(name=n) for n in module_names],
                    level=1,
                )
            )
            names.extend(module_names)
        if names:
            body.append(_all(names))

        module = ast.Module(body=body, type_ignores=[])
        ast.fix_missing_locations(module)
        source = ast.unparse(module) + '\n' if body else ''
        return self.emit_module('__init__', source)


class FileEmitter(CodeEmitter):
    """Emits generated code to Python files on disk.

    This emitter writes generated code to files in a specified output
    directory, handling directory creation and syntax validation.
    """

    def __init__(self, output_dir: str | Path | UPath, validate_syntax: bool = True):
        """Initialize the file emitter.

        Args:
            output_dir: Directory where files will be written.
            validate_syntax: Whether to validate Python syntax before writing.
        """
        self.output_dir = UPath(output_dir)
        self.validate_syntax = validate_syntax
        self._written_files: list[str] = []

    def emit_module(self, name: str, source: str) -> str:
        if self.validate_syntax:
            self._validate_syntax(source, name)
        return self._write_file(f'{name}.py', source)

    def emit_py_typed(self) -> str:
        """Emit a py.typed marker file for PEP 561."""
        return self._write_file('py.typed', '')

    def _write_file(self, filename: str, content: str) -> str:
        file_path = self.output_dir / filename
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding='utf-8')
        except OSError as e:
            raise OutputError(str(file_path), cause=e) from e
        self._written_files.append(str(file_path))
        return str(file_path)

    def _validate_syntax(self, source: str, name: str) -> None:
        try:
            compile(source, f'{name}.py', 'exec')
        except SyntaxError as e:
            raise OutputError(str(self.output_dir / f'{name}.py'), cause=e) from e

    def get_written_files(self) -> list[str]:
        return self._written_files.copy()


class StringEmitter(CodeEmitter):
    """Keeps emitted modules in memory.

    This emitter is useful for testing or when the caller wants to post-process
    the generated code before writing it.
    """

    def __init__(self):
        self._modules: dict[str, str] = {}

    def emit_module(self, name: str, source: str) -> str:
        self._modules[name] = source
        return source

    def get_module(self, name: str) -> str | None:
        return self._modules.get(name)

    def get_all_modules(self) -> dict[str, str]:
        return self._modules.copy()
