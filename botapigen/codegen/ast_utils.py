"""AST utilities and import collection for code generation.

This module provides helper functions for building Python AST nodes
and utilities for collecting and organizing imports during code generation.
"""

import ast
import sys
from collections.abc import Iterable

__all__ = [
    # AST helpers
    '_name',
    '_attr',
    '_subscript',
    '_union_expr',
    '_optional_expr',
    '_argument',
    '_assign',
    '_call',
    '_func',
    '_async_func',
    '_class',
    '_docstring',
    '_all',
    'render_module',
    # Import collection
    'ImportCollector',
]


def _name(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def _attr(value: str | ast.expr, attr: str) -> ast.Attribute:
    return ast.Attribute(
        value=_name(value) if isinstance(value, str) else value,
        attr=attr,
        ctx=ast.Load(),
    )


def _subscript(generic: str, inner: ast.expr) -> ast.Subscript:
    return ast.Subscript(value=_name(generic), slice=inner, ctx=ast.Load())


def _union_expr(types: list[ast.expr]) -> ast.expr:
    # A | B | C (using pipe operator instead of Union[A, B, C])
    if not types:
        raise ValueError('_union_expr requires at least one type')
    result = types[0]
    for t in types[1:]:
        result = ast.BinOp(left=result, op=ast.BitOr(), right=t)
    return result


def _optional_expr(inner: ast.expr) -> ast.expr:
    return _union_expr([inner, ast.Constant(value=None)])


def _argument(name: str, value: ast.expr | None = None) -> ast.arg:
    return ast.arg(
        arg=name,
        annotation=value,
    )


def _assign(target: ast.expr, value: ast.expr) -> ast.Assign:
    if isinstance(target, ast.Name):
        target = ast.Name(id=target.id, ctx=ast.Store())
    elif isinstance(target, ast.Attribute):
        target.ctx = ast.Store()
    return ast.Assign(
        targets=[target],
        value=value,
    )


def _call(
    func: ast.expr,
    args: list[ast.expr] | None = None,
    keywords: list[ast.keyword] | None = None,
) -> ast.Call:
    return ast.Call(
        func=func,
        args=args or [],
        keywords=keywords or [],
    )


def _func(
    name: str,
    args: list[ast.arg],
    body: list[ast.stmt],
    returns: ast.expr | None = None,
    defaults: list[ast.expr] | None = None,
    decorators: list[ast.expr] | None = None,
) -> ast.FunctionDef:
    return ast.FunctionDef(
        name=name,
        args=ast.arguments(
            posonlyargs=[],
            args=args,
            vararg=None,
            kwonlyargs=[],
            kw_defaults=[],
            kwarg=None,
            defaults=defaults or [],
        ),
        body=body,
        decorator_list=decorators or [],
        returns=returns,
        type_params=[],
    )


def _async_func(
    name: str,
    args: list[ast.arg],
    body: list[ast.stmt],
    returns: ast.expr | None = None,
    defaults: list[ast.expr] | None = None,
) -> ast.AsyncFunctionDef:
    return ast.AsyncFunctionDef(
        name=name,
        args=ast.arguments(
            posonlyargs=[],
            args=args,
            vararg=None,
            kwonlyargs=[],
            kw_defaults=[],
            kwarg=None,
            defaults=defaults or [],
        ),
        body=body,
        decorator_list=[],
        returns=returns,
        type_params=[],
    )


def _docstring(text: str) -> ast.Expr:
    return ast.Expr(value=ast.Constant(value=text))


def _class(
    name: str,
    bases: list[str],
    body: list[ast.stmt],
    docstring: str | None = None,
) -> ast.ClassDef:
    if docstring:
        body = [_docstring(docstring)] + body
    return ast.ClassDef(
        name=name,
        bases=[_name(base) for base in bases],
        keywords=[],
        body=body or [ast.Pass()],
        decorator_list=[],
        type_params=[],
    )


def _all(names: Iterable[str]) -> ast.Assign:
    return _assign(
        target=_name('__all__'),
        value=ast.Tuple(
            elts=[ast.Constant(value=name) for name in names], ctx=ast.Load()
        ),
    )


def render_module(body: list[ast.stmt], docstring: str | None = None) -> str:
    """Unparse a module body into source text ending with a newline."""
    if docstring:
        body = [_docstring(docstring)] + body
    module = ast.Module(body=body, type_ignores=[])
    ast.fix_missing_locations(module)
    return ast.unparse(module) + '\n'


# =============================================================================
# Import Collection
# =============================================================================


class ImportCollector:
    """Collects and manages imports for generated Python code.

    Imports are deduplicated and sorted, so the same set of calls always
    yields the same statements.

    Example:
        >>> collector = ImportCollector()
        >>> collector.add_imports({'pydantic': {'BaseModel', 'Field'}})
        >>> collector.add_import('.types', 'Message')
        >>> imports = collector.to_ast()
    """

    def __init__(self):
        self._imports: dict[str, set[str]] = {}

    def add_imports(self, imports: dict[str, set[str]]) -> None:
        for module, names in imports.items():
            if module not in self._imports:
                self._imports[module] = set()
            self._imports[module].update(names)

    def add_import(self, module: str, name: str) -> None:
        if module not in self._imports:
            self._imports[module] = set()
        self._imports[module].add(name)

    def _get_import_category(self, module: str) -> int:
        """Get the sort category for a module.

        Returns:
            -1 for __future__, 0 for standard library, 1 for third-party,
            2 for local/relative imports.
        """
        if module == '__future__':
            return -1
        if module.startswith('.'):
            return 2

        base_module = module.split('.')[0]
        if base_module in sys.stdlib_module_names:
            return 0

        return 1

    def to_ast(self) -> list[ast.ImportFrom]:
        """Convert collected imports to sorted ``ImportFrom`` statements.

        ``__future__`` imports come first, then the standard library,
        third-party and finally relative imports. Modules and names are sorted
        alphabetically within each group.
        """
        import_stmts = []

        sorted_modules = sorted(
            self._imports.items(),
            key=lambda x: (self._get_import_category(x[0]), x[0]),
        )

        for module, names in sorted_modules:
            if module.startswith('.'):
                level = len(module) - len(module.lstrip('.'))
                import_module = module.lstrip('.') or None
            else:
                level = 0
                import_module = module

            import_stmts.append(
                ast.ImportFrom(
                    module=import_module,
                    names=[ast.alias(name=name, asname=None) for name in sorted(names)],
                    level=level,
                )
            )
        return import_stmts

    def has_imports(self) -> bool:
        return bool(self._imports)

    def get_modules(self) -> set[str]:
        return set(self._imports.keys())
