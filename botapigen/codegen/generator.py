"""Sequencing of the generation phases.

``Generator`` parses the specification, runs type generation, freezes the
multitype registry and then runs method generation. Either both source blocks
are produced or an exception is raised and nothing is returned.
"""

import dataclasses
import logging

from botapigen.codegen.methods import MethodGenerator
from botapigen.codegen.multitypes import MultitypeRegistry
from botapigen.codegen.schema import Spec, parse
from botapigen.codegen.types import TypeGenerator
from botapigen.config import GeneratorConfig

__all__ = ['GeneratedSource', 'Generator']

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class GeneratedSource:
    """The two generated source blocks."""

    types: str
    methods: str


class Generator:
    """Generator for both types and methods.

    Example:
        >>> generator = Generator(spec_text)
        >>> source = generator.generate()
        >>> print(source.types)
    """

    def __init__(
        self,
        spec: Spec | str | bytes,
        config: GeneratorConfig | None = None,
    ):
        self.spec = spec if isinstance(spec, Spec) else parse(spec)
        self.config = config or GeneratorConfig()
        self.multitypes = self._new_registry()

    def _new_registry(self) -> MultitypeRegistry:
        return MultitypeRegistry(prefix=self.config.union_prefix)

    def generate_types(self) -> str:
        """Run type generation, filling the current registry."""
        return TypeGenerator(self.spec, self.multitypes, self.config).generate()

    def generate_methods(self) -> str:
        """Run method generation against the current registry.

        Raises:
            UnresolvedUnionError: If type generation has not populated the
                registry with a union a method uses.
        """
        return MethodGenerator(self.spec, self.multitypes, self.config).generate()

    def generate(self) -> GeneratedSource:
        """Generate both blocks with a fresh registry."""
        self.multitypes = self._new_registry()
        types = self.generate_types()
        self.multitypes.freeze()
        methods = self.generate_methods()
        logger.debug(
            'Generation finished: %d types, %d methods, %d unions',
            len(self.spec.types),
            len(self.spec.methods),
            len(self.multitypes),
        )
        return GeneratedSource(types=types, methods=methods)
