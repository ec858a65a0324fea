"""Generation of method bindings from the specification's methods.

Every method becomes a method on a ``Methods`` class (and an ``AsyncMethods``
class). The generated bodies only collect the arguments under their wire names
and hand them to ``_call``, which a transport implements.
"""

import ast
import dataclasses
import logging

from botapigen.codegen.ast_utils import (
    ImportCollector,
    _all,
    _argument,
    _attr,
    _async_func,
    _call,
    _class,
    _docstring,
    _func,
    _name,
    _optional_expr,
    _subscript,
    render_module,
)
from botapigen.codegen.multitypes import MultitypeKey, MultitypeRegistry
from botapigen.codegen.naming import (
    NameTable,
    to_field_identifier,
    to_method_identifier,
)
from botapigen.codegen.schema import MethodDef, ParamDef, Spec, UnionOf, referenced_names
from botapigen.codegen.types import annotation_for
from botapigen.config import GeneratorConfig
from botapigen.exceptions import (
    BotAPIGenError,
    MethodGenerationError,
    ReservedCollisionError,
)

__all__ = ['MethodGenerator', 'order_params']

logger = logging.getLogger(__name__)

MULTIPART_PARAMS = 'MULTIPART_PARAMS'

_BUILTINS = frozenset({'bool', 'bytes', 'float', 'int', 'list', 'str'})


def order_params(params: tuple[ParamDef, ...]) -> list[ParamDef]:
    """Required parameters first, each group keeping its declared order."""
    return [p for p in params if p.required] + [p for p in params if not p.required]


@dataclasses.dataclass
class _Binding:
    method: MethodDef
    identifier: str
    params: list[tuple[str, ParamDef, ast.expr]]
    returns: ast.expr
    multipart: tuple[str, ...]


@dataclasses.dataclass
class MethodGenerator:
    """Emits the methods module for a ``Spec``.

    Unions are resolved with ``MultitypeRegistry.lookup`` only, so type
    generation must have run on the same registry first.
    """

    spec: Spec
    multitypes: MultitypeRegistry
    config: GeneratorConfig = dataclasses.field(default_factory=GeneratorConfig)

    def generate(self) -> str:
        """Generate the source of the methods module.

        Raises:
            UnresolvedUnionError: If a method uses a union the registry lacks.
        """
        self._imports = ImportCollector()
        self._imports.add_import('__future__', 'annotations')
        self._imports.add_import('typing', 'Any')
        self._used_types: set[str] = set()

        method_names = NameTable('methods')
        bindings = []
        for method in self.spec.methods.values():
            try:
                identifier = method_names.register(
                    method.name, to_method_identifier(method.name)
                )
                bindings.append(self._binding(method, identifier))
            except BotAPIGenError:
                raise
            except Exception as e:
                raise MethodGenerationError(method.name, cause=e) from e

        class_names = [self.config.methods_class]
        if self.config.async_methods:
            class_names.append(f'Async{self.config.methods_class}')
        for class_name in class_names:
            if class_name in self._used_types:
                raise ReservedCollisionError(
                    class_name,
                    (f'{class_name} (bindings)', f'{class_name} (type)'),
                    'methods module',
                )

        body: list[ast.stmt] = []
        if self._used_types:
            types_module = f'.{self.config.types_module}'
            for name in self._used_types:
                self._imports.add_import(types_module, name)
        body.extend(self._imports.to_ast())
        body.append(_all(sorted(class_names + [MULTIPART_PARAMS])))
        body.append(self._multipart_table(bindings))
        body.append(self._methods_class(class_names[0], bindings, is_async=False))
        if self.config.async_methods:
            body.append(self._methods_class(class_names[1], bindings, is_async=True))

        logger.info('Generated %d method bindings', len(bindings))
        return render_module(body, 'Bot API method bindings generated by botapigen.')

    def _union_name(self, ref: UnionOf) -> str:
        name = self.multitypes.lookup(MultitypeKey.from_union(ref), context=self._context)
        self._used_types.add(name)
        return name

    def _annotation(self, ref) -> ast.expr:
        annotation = annotation_for(ref, self._union_name)
        for node in ast.walk(annotation):
            if isinstance(node, ast.Name) and node.id not in _BUILTINS:
                self._used_types.add(node.id)
        return annotation

    def _binding(self, method: MethodDef, identifier: str) -> _Binding:
        self._context = f'method {method.name}'
        param_names = NameTable(f'parameters of {method.name}')
        params = []
        for param in order_params(method.params):
            param_id = param_names.register(param.name, to_field_identifier(param.name))
            params.append((param_id, param, self._annotation(param.type)))

        input_file = self.config.input_file_type
        multipart = tuple(
            p.name for p in method.params if input_file in referenced_names(p.type)
        )
        return _Binding(
            method=method,
            identifier=identifier,
            params=params,
            returns=self._annotation(method.returns),
            multipart=multipart,
        )

    def _multipart_table(self, bindings: list[_Binding]) -> ast.AnnAssign:
        keys, values = [], []
        for binding in bindings:
            if binding.multipart:
                keys.append(ast.Constant(binding.method.name))
                values.append(
                    ast.Tuple(
                        elts=[ast.Constant(n) for n in binding.multipart], ctx=ast.Load()
                    )
                )
        annotation = ast.Subscript(
            value=_name('dict'),
            slice=ast.Tuple(
                elts=[
                    _name('str'),
                    _subscript(
                        'tuple',
                        ast.Tuple(elts=[_name('str'), ast.Constant(...)], ctx=ast.Load()),
                    ),
                ],
                ctx=ast.Load(),
            ),
            ctx=ast.Load(),
        )
        return ast.AnnAssign(
            target=_name(MULTIPART_PARAMS),
            annotation=annotation,
            value=ast.Dict(keys=keys, values=values),
            simple=1,
        )

    def _methods_class(
        self, class_name: str, bindings: list[_Binding], is_async: bool
    ) -> ast.ClassDef:
        func = _async_func if is_async else _func
        body: list[ast.stmt] = [self._transport_hook(func)]
        for binding in bindings:
            body.append(self._method(func, binding, is_async))
        kind = 'Asynchronous bindings' if is_async else 'Bindings'
        return _class(
            class_name,
            [],
            body,
            docstring=f'{kind} for every API method.\n\n'
            'Subclasses implement ``_call`` to send the request.',
        )

    def _transport_hook(self, func) -> ast.stmt:
        return func(
            '_call',
            [
                _argument('self'),
                _argument('method', _name('str')),
                _argument(
                    'params',
                    _subscript(
                        'dict',
                        ast.Tuple(elts=[_name('str'), _name('Any')], ctx=ast.Load()),
                    ),
                ),
                _argument('returns', _name('Any')),
                _argument(
                    'multipart',
                    _subscript(
                        'tuple',
                        ast.Tuple(elts=[_name('str'), ast.Constant(...)], ctx=ast.Load()),
                    ),
                ),
            ],
            [
                _docstring(
                    'Send ``method`` with ``params`` and parse the result as ``returns``.\n\n'
                    'Parameters whose value is None are unset. Names in ``multipart``\n'
                    'must be sent as multipart/form-data.'
                ),
                ast.Raise(exc=_name('NotImplementedError')),
            ],
            returns=_name('Any'),
            defaults=[ast.Tuple(elts=[], ctx=ast.Load())],
        )

    def _method_docstring(self, binding: _Binding) -> str | None:
        lines = []
        if binding.method.description:
            lines.append(binding.method.description)
        described = [(i, p) for i, p, _ in binding.params if p.description]
        if described:
            if lines:
                lines.append('')
            lines.append('Args:')
            for identifier, param in described:
                lines.append(f'    {identifier}: {param.description}')
        return '\n'.join(lines) or None

    def _method(self, func, binding: _Binding, is_async: bool) -> ast.stmt:
        args = [_argument('self')]
        defaults = []
        for identifier, param, annotation in binding.params:
            if param.required:
                args.append(_argument(identifier, annotation))
            else:
                args.append(_argument(identifier, _optional_expr(annotation)))
                defaults.append(ast.Constant(None))

        params = ast.Dict(
            keys=[ast.Constant(p.name) for _, p, _ in binding.params],
            values=[_name(i) for i, _, _ in binding.params],
        )
        keywords = []
        if binding.multipart:
            keywords.append(
                ast.keyword(
                    arg='multipart',
                    value=ast.Tuple(
                        elts=[ast.Constant(n) for n in binding.multipart], ctx=ast.Load()
                    ),
                )
            )
        call = _call(
            _attr('self', '_call'),
            [ast.Constant(binding.method.name), params, binding.returns],
            keywords,
        )
        result = ast.Await(value=call) if is_async else call

        body: list[ast.stmt] = []
        docstring = self._method_docstring(binding)
        if docstring:
            body.append(_docstring(docstring))
        body.append(ast.Return(value=result))
        return func(
            binding.identifier, args, body, returns=binding.returns, defaults=defaults
        )
