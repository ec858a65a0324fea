"""Driver that turns a configured document into a generated package."""

import ast
import logging
from pathlib import Path

from botapigen.codegen.emitter import CodeEmitter, FileEmitter
from botapigen.codegen.generator import GeneratedSource, Generator
from botapigen.codegen.schema_loader import SpecLoader
from botapigen.config import DocumentConfig

__all__ = ['Codegen']

logger = logging.getLogger(__name__)


def _exported_names(source: str) -> list[str]:
    for node in ast.parse(source).body:
        if (
            isinstance(node, ast.Assign)
            and isinstance(node.targets[0], ast.Name)
            and node.targets[0].id == '__all__'
        ):
            return list(ast.literal_eval(node.value))
    return []


class Codegen:
    """Loads a specification, generates both modules and writes them out.

    Example:
        >>> config = DocumentConfig(source='./api.json', output='./client')
        >>> Codegen(config).generate()
    """

    def __init__(
        self,
        config: DocumentConfig,
        spec_loader: SpecLoader | None = None,
        emitter: CodeEmitter | None = None,
        write_methods: bool = True,
    ):
        self.config = config
        self._spec_loader = spec_loader or SpecLoader()
        self._emitter = emitter or FileEmitter(config.output)
        self.write_methods = write_methods

    @property
    def types_module(self) -> str:
        return Path(self.config.types_file).stem

    @property
    def methods_module(self) -> str:
        return Path(self.config.methods_file).stem

    def generate(self) -> GeneratedSource:
        """Generate and emit the package.

        Nothing is written unless both modules were generated successfully.
        """
        spec = self._spec_loader.load(self.config.source)
        generator_config = self.config.generator.model_copy(
            update={'types_module': self.types_module}
        )
        source = Generator(spec, generator_config).generate()

        exports = {self.types_module: _exported_names(source.types)}
        self._emitter.emit_module(self.types_module, source.types)
        if self.write_methods:
            exports[self.methods_module] = _exported_names(source.methods)
            self._emitter.emit_module(self.methods_module, source.methods)
        self._emitter.emit_init(exports)
        if isinstance(self._emitter, FileEmitter):
            self._emitter.emit_py_typed()

        logger.info('Generated package for %s in %s', self.config.source, self.config.output)
        return source
