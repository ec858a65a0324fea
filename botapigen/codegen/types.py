"""Generation of pydantic models from the specification's types.

This module provides:
- ``annotation_for`` which maps a ``TypeRef`` onto an annotation expression
- ``TypeGenerator`` which emits one pydantic model per declared type, a
  ``RootModel`` per synthesized union and registers every union it meets in
  the ``MultitypeRegistry``
"""

import ast
import dataclasses
import logging
from collections.abc import Callable, Iterator

from botapigen.codegen.ast_utils import (
    ImportCollector,
    _all,
    _argument,
    _assign,
    _attr,
    _call,
    _class,
    _docstring,
    _func,
    _name,
    _optional_expr,
    _subscript,
    _union_expr,
    render_module,
)
from botapigen.codegen.multitypes import MultitypeKey, MultitypeRegistry
from botapigen.codegen.naming import NameTable, to_field_identifier, to_type_identifier
from botapigen.codegen.schema import (
    ArrayOf,
    FieldDef,
    Reference,
    Scalar,
    Spec,
    TypeDef,
    TypeRef,
    UnionOf,
)
from botapigen.config import GeneratorConfig
from botapigen.exceptions import BotAPIGenError, TypeGenerationError

__all__ = ['TypeGenerator', 'annotation_for', 'iter_unions']

logger = logging.getLogger(__name__)

FILE_BYTES = 'FileBytes'


def iter_unions(ref: TypeRef) -> Iterator[UnionOf]:
    """Yield the unions inside ``ref``, outermost first."""
    if isinstance(ref, UnionOf):
        yield ref
    elif isinstance(ref, ArrayOf):
        yield from iter_unions(ref.item)


def annotation_for(ref: TypeRef, union_name: Callable[[UnionOf], str]) -> ast.expr:
    """Build the annotation expression for ``ref``.

    Args:
        ref: The type to annotate.
        union_name: Resolves a union to the name of its synthesized class.
    """
    if isinstance(ref, Scalar):
        return _name(ref.python_type)
    if isinstance(ref, Reference):
        return _name(to_type_identifier(ref.name))
    if isinstance(ref, ArrayOf):
        return _subscript('list', annotation_for(ref.item, union_name))
    return _name(union_name(ref))


@dataclasses.dataclass
class TypeGenerator:
    """Emits the types module for a ``Spec``.

    Types are emitted in declaration order. A synthesized union is emitted
    right before the first class that uses it. Unions that only appear in
    method signatures are emitted after the declared types, so the registry
    holds every union method generation will ask for.
    """

    spec: Spec
    multitypes: MultitypeRegistry
    config: GeneratorConfig = dataclasses.field(default_factory=GeneratorConfig)

    def __post_init__(self):
        self._reset()

    def _reset(self) -> None:
        self._body: list[ast.stmt] = []
        self._class_names: list[str] = []
        self._imports = ImportCollector()
        self._type_names = NameTable.for_types()

    def generate(self) -> str:
        """Generate the source of the types module."""
        self._reset()
        self._imports.add_import('__future__', 'annotations')
        self._imports.add_import('pydantic', 'BaseModel')

        for type_def in self.spec.types.values():
            self._type_names.register(type_def.name, to_type_identifier(type_def.name))

        for type_def in self.spec.types.values():
            try:
                self._emit_type(type_def)
            except BotAPIGenError:
                raise
            except Exception as e:
                raise TypeGenerationError(type_def.name, cause=e) from e

        for method in self.spec.methods.values():
            for ref in [p.type for p in method.params] + [method.returns]:
                self._register_unions(ref, f'method {method.name}')

        logger.info(
            'Generated %d classes (%d synthesized unions)',
            len(self._class_names),
            len(self.multitypes),
        )
        return render_module(self._module_body(), self._module_docstring())

    def _module_docstring(self) -> str:
        docstring = 'Bot API types generated by botapigen.'
        if self.spec.version:
            docstring += f'\n\nSpecification: {self.spec.version}'
            if self.spec.release_date:
                docstring += f' ({self.spec.release_date})'
        return docstring

    def _module_body(self) -> list[ast.stmt]:
        body: list[ast.stmt] = list(self._imports.to_ast())
        body.append(_all(self._class_names))
        body.extend(self._body)
        if self._class_names:
            body.append(
                ast.For(
                    target=ast.Name(id='_model', ctx=ast.Store()),
                    iter=ast.Tuple(
                        elts=[_name(n) for n in self._class_names], ctx=ast.Load()
                    ),
                    body=[ast.Expr(value=_call(_attr('_model', 'model_rebuild')))],
                    orelse=[],
                )
            )
        return body

    def _add_class(self, class_def: ast.ClassDef) -> None:
        self._body.append(class_def)
        self._class_names.append(class_def.name)

    def _union_name(self, ref: UnionOf) -> str:
        name, _ = self.multitypes.get_or_create(MultitypeKey.from_union(ref))
        return name

    def _register_unions(self, ref: TypeRef, context: str) -> None:
        for union in iter_unions(ref):
            name, created = self.multitypes.get_or_create(
                MultitypeKey.from_union(union), context=context
            )
            if created:
                self._emit_union(name, union.members)

    def _emit_root(self, name: str, annotation: ast.expr, docstring: str | None) -> None:
        self._imports.add_import('pydantic', 'RootModel')
        self._add_class(
            _class(
                name,
                ['RootModel'],
                [ast.AnnAssign(target=_name('root'), annotation=annotation, simple=1)],
                docstring=docstring,
            )
        )

    def _emit_union(self, name: str, members: tuple[TypeRef, ...]) -> None:
        annotations = [annotation_for(m, self._union_name) for m in members]
        docstring = 'One of: {}.'.format(', '.join(ast.unparse(a) for a in annotations))
        self._emit_root(name, _union_expr(annotations), docstring)

    def _emit_type(self, type_def: TypeDef) -> None:
        class_name = to_type_identifier(type_def.name)

        if type_def.name == self.config.input_file_type:
            self._emit_input_file(class_name, type_def)
            return

        if type_def.is_abstract:
            self._emit_subtype_union(class_name, type_def)
            return

        for field in type_def.fields:
            self._register_unions(field.type, f'type {type_def.name}')

        payload = self._envelope_payload(type_def)

        field_names = NameTable(f'fields of {type_def.name}')
        body: list[ast.stmt] = []
        aliased = False
        for field in type_def.fields:
            identifier = field_names.register(field.name, to_field_identifier(field.name))
            aliased |= identifier != field.name
            body.append(self._field(identifier, field))

        if payload is not None:
            if 'payload' in field_names:
                logger.debug(
                    'Skipping payload property of %s: a field is already named payload',
                    type_def.name,
                )
            else:
                body.append(payload)

        if aliased:
            self._imports.add_import('pydantic', 'ConfigDict')
            body.insert(
                0,
                _assign(
                    _name('model_config'),
                    _call(
                        _name('ConfigDict'),
                        keywords=[
                            ast.keyword(arg='populate_by_name', value=ast.Constant(True))
                        ],
                    ),
                ),
            )

        self._add_class(
            _class(class_name, ['BaseModel'], body, docstring=type_def.description)
        )

    def _field(self, identifier: str, field: FieldDef) -> ast.AnnAssign:
        annotation = annotation_for(field.type, self._union_name)
        keywords: list[ast.keyword] = []
        if not field.required:
            annotation = _optional_expr(annotation)
            keywords.append(ast.keyword(arg='default', value=ast.Constant(None)))
        if identifier != field.name:
            keywords.append(ast.keyword(arg='alias', value=ast.Constant(field.name)))
        if field.description:
            keywords.append(
                ast.keyword(arg='description', value=ast.Constant(field.description))
            )

        value = None
        if keywords:
            self._imports.add_import('pydantic', 'Field')
            value = _call(_name('Field'), keywords=keywords)

        return ast.AnnAssign(
            target=_name(identifier), annotation=annotation, value=value, simple=1
        )

    def _emit_input_file(self, class_name: str, type_def: TypeDef) -> None:
        self._add_class(
            _class(
                FILE_BYTES,
                ['BaseModel'],
                [
                    ast.AnnAssign(target=_name('name'), annotation=_name('str'), simple=1),
                    ast.AnnAssign(target=_name('data'), annotation=_name('bytes'), simple=1),
                ],
                docstring='Raw file content uploaded with multipart/form-data.',
            )
        )
        self._emit_root(
            class_name,
            _union_expr([_name(FILE_BYTES), _name('str')]),
            type_def.description,
        )

    def _emit_subtype_union(self, class_name: str, type_def: TypeDef) -> None:
        members = [_name(to_type_identifier(name)) for name in type_def.subtypes]
        self._emit_root(class_name, _union_expr(members), type_def.description)

    def _envelope_payload(self, type_def: TypeDef) -> ast.FunctionDef | None:
        """Build the ``payload`` property of the envelope type.

        The envelope carries exactly one event in one of its optional fields.
        Their distinct types form a union registered like any other.
        """
        if type_def.name != self.config.envelope_type:
            return None

        events = [
            f for f in type_def.fields if not f.required and isinstance(f.type, Reference)
        ]
        distinct = tuple(dict.fromkeys(f.type for f in events))
        if len(distinct) < 2:
            return None

        union = UnionOf(distinct)
        name, created = self.multitypes.get_or_create(
            MultitypeKey.from_union(union), context=f'type {type_def.name}'
        )
        if created:
            self._emit_union(name, union.members)

        # TODO: support envelopes whose events are arrays or scalars
        value = ast.Name(id='value', ctx=ast.Store())
        loop = ast.For(
            target=value,
            iter=ast.Tuple(
                elts=[_attr('self', to_field_identifier(f.name)) for f in events],
                ctx=ast.Load(),
            ),
            body=[
                ast.If(
                    test=ast.Compare(
                        left=_name('value'),
                        ops=[ast.IsNot()],
                        comparators=[ast.Constant(None)],
                    ),
                    body=[ast.Return(value=_call(_name(name), args=[_name('value')]))],
                    orelse=[],
                )
            ],
            orelse=[],
        )
        return _func(
            'payload',
            [_argument('self')],
            [
                _docstring('The event carried by this envelope, if any.'),
                loop,
                ast.Return(value=ast.Constant(None)),
            ],
            returns=_optional_expr(_name(name)),
            decorators=[_name('property')],
        )
