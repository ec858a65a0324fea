"""In-memory model of a bot API specification.

This module turns the raw specification document into a graph of frozen
dataclasses. Type tokens such as ``"Array of PhotoSize"`` or
``["Integer", "String"]`` are parsed exactly once, here, into ``TypeRef``
values; nothing downstream looks at the raw strings again.

Example:
    >>> spec = parse('{"types": {}, "methods": {"getMe": {"returns": ["Boolean"]}}}')
    >>> spec.methods['getMe'].returns
    Scalar(name='Boolean')
"""

import dataclasses
import json
import logging
import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from botapigen.exceptions import MalformedSchemaError, UnknownTypeError

__all__ = [
    'ARRAY_OF',
    'SCALARS',
    'Scalar',
    'ArrayOf',
    'Reference',
    'UnionOf',
    'TypeRef',
    'FieldDef',
    'TypeDef',
    'ParamDef',
    'MethodDef',
    'Spec',
    'parse',
    'parse_document',
    'parse_type_tokens',
    'referenced_names',
]

logger = logging.getLogger(__name__)

ARRAY_OF = 'Array of '

# TypeRef walkers recurse once per array level
MAX_ARRAY_DEPTH = 32

# spec scalar name -> python builtin
SCALARS = {
    'Integer': 'int',
    'Float': 'float',
    'String': 'str',
    'Boolean': 'bool',
    'True': 'bool',
}

_NAME_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


@dataclasses.dataclass(frozen=True)
class Scalar:
    name: str

    @property
    def python_type(self) -> str:
        return SCALARS[self.name]


@dataclasses.dataclass(frozen=True)
class ArrayOf:
    item: 'TypeRef'


@dataclasses.dataclass(frozen=True)
class Reference:
    name: str


@dataclasses.dataclass(frozen=True)
class UnionOf:
    """A field, parameter or return value accepting one of several types.

    Members keep the order they were declared in; the order-independent
    identity of a union is its ``MultitypeKey``.
    """

    members: tuple['TypeRef', ...]

    def __post_init__(self):
        if len(self.members) < 2:
            raise ValueError('a union needs at least two members')


TypeRef = Scalar | ArrayOf | Reference | UnionOf


@dataclasses.dataclass(frozen=True)
class FieldDef:
    name: str
    type: TypeRef
    required: bool
    description: str = ''


@dataclasses.dataclass(frozen=True)
class TypeDef:
    name: str
    fields: tuple[FieldDef, ...] = ()
    description: str = ''
    subtypes: tuple[str, ...] = ()
    subtype_of: tuple[str, ...] = ()

    @property
    def is_abstract(self) -> bool:
        """An abstract type has no fields of its own and is one of its subtypes."""
        return bool(self.subtypes) and not self.fields


@dataclasses.dataclass(frozen=True)
class ParamDef:
    name: str
    type: TypeRef
    required: bool
    description: str = ''


@dataclasses.dataclass(frozen=True)
class MethodDef:
    name: str
    params: tuple[ParamDef, ...]
    returns: TypeRef
    description: str = ''


@dataclasses.dataclass(frozen=True)
class Spec:
    """The parsed specification.

    ``types`` and ``methods`` iterate in declaration order and are read-only.
    """

    types: Mapping[str, TypeDef]
    methods: Mapping[str, MethodDef]
    version: str | None = None
    release_date: str | None = None
    changelog: str | None = None

    def __post_init__(self):
        object.__setattr__(self, 'types', MappingProxyType(dict(self.types)))
        object.__setattr__(self, 'methods', MappingProxyType(dict(self.methods)))

    def is_known(self, name: str) -> bool:
        return name in SCALARS or name in self.types


def referenced_names(ref: TypeRef) -> Iterator[str]:
    """Yield every scalar or type name reachable from ``ref``."""
    if isinstance(ref, (Scalar, Reference)):
        yield ref.name
    elif isinstance(ref, ArrayOf):
        yield from referenced_names(ref.item)
    else:
        for member in ref.members:
            yield from referenced_names(member)


def _parse_token(token: Any, path: str) -> TypeRef:
    if not isinstance(token, str) or not token.strip():
        raise MalformedSchemaError(f'invalid type token {token!r}', path)
    token = token.strip()
    depth = 0
    while token.startswith(ARRAY_OF):
        token = token[len(ARRAY_OF) :].strip()
        depth += 1
    if depth > MAX_ARRAY_DEPTH:
        raise MalformedSchemaError(
            f'arrays nested deeper than {MAX_ARRAY_DEPTH} levels', path
        )

    ref: TypeRef
    if token in SCALARS:
        ref = Scalar(token)
    elif _NAME_RE.match(token):
        ref = Reference(token)
    else:
        raise MalformedSchemaError(f'invalid type token {token!r}', path)
    for _ in range(depth):
        ref = ArrayOf(ref)
    return ref


def parse_type_tokens(tokens: Any, path: str) -> TypeRef:
    """Parse the ``types``/``returns`` list of a field, parameter or method.

    One distinct token is that token; two or more form a union. When every
    member of a union is an array the array is factored out, so
    ``["Array of A", "Array of B"]`` becomes an array of the union of A and B.
    """
    if isinstance(tokens, str):
        tokens = [tokens]
    if not isinstance(tokens, list) or not tokens:
        raise MalformedSchemaError('expected a non-empty list of type tokens', path)

    members: list[TypeRef] = []
    for token in tokens:
        ref = _parse_token(token, path)
        if ref not in members:
            members.append(ref)

    if len(members) == 1:
        return members[0]
    return _factor_arrays(tuple(members))


def _factor_arrays(members: tuple[TypeRef, ...]) -> TypeRef:
    if all(isinstance(m, ArrayOf) for m in members):
        inner: list[TypeRef] = []
        for m in members:
            if m.item not in inner:
                inner.append(m.item)
        if len(inner) == 1:
            return ArrayOf(inner[0])
        return ArrayOf(_factor_arrays(tuple(inner)))
    return UnionOf(members)


def _description(value: Any, path: str) -> str:
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return '\n'.join(value)
    raise MalformedSchemaError('description must be a string or list of strings', path)


def _check_name(name: Any, path: str) -> str:
    if not isinstance(name, str) or not name:
        raise MalformedSchemaError('name must be a non-empty string', path)
    if not _NAME_RE.match(name):
        raise MalformedSchemaError(f'invalid name {name!r}', path)
    return name


def _entry_name(key: str, entry: Any, path: str) -> str:
    if not isinstance(entry, dict):
        raise MalformedSchemaError('expected an object', path)
    name = _check_name(entry.get('name', key), path)
    if name != key:
        raise MalformedSchemaError(f'name {name!r} does not match key {key!r}', path)
    return name


def _parse_members(entries: Any, path: str) -> list[tuple[str, TypeRef, bool, str]]:
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise MalformedSchemaError('fields must be a list', path)

    seen: set[str] = set()
    members = []
    for i, entry in enumerate(entries):
        entry_path = f'{path}[{i}]'
        if not isinstance(entry, dict):
            raise MalformedSchemaError('expected an object', entry_path)
        name = _check_name(entry.get('name'), entry_path)
        if name in seen:
            raise MalformedSchemaError(f'duplicate field {name!r}', entry_path)
        seen.add(name)

        required = entry.get('required', False)
        if not isinstance(required, bool):
            raise MalformedSchemaError('required must be a boolean', entry_path)

        members.append(
            (
                name,
                parse_type_tokens(entry.get('types'), entry_path),
                required,
                _description(entry.get('description'), entry_path),
            )
        )
    return members


def _string_list(value: Any, path: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise MalformedSchemaError('expected a list of names', path)
    return tuple(_check_name(v, path) for v in value)


def _parse_type(key: str, entry: Any) -> TypeDef:
    path = f'types.{key}'
    name = _entry_name(key, entry, path)
    fields = tuple(
        FieldDef(name=n, type=t, required=r, description=d)
        for n, t, r, d in _parse_members(entry.get('fields'), f'{path}.fields')
    )
    return TypeDef(
        name=name,
        fields=fields,
        description=_description(entry.get('description'), path),
        subtypes=_string_list(entry.get('subtypes'), f'{path}.subtypes'),
        subtype_of=_string_list(entry.get('subtype_of'), f'{path}.subtype_of'),
    )


def _parse_method(key: str, entry: Any) -> MethodDef:
    path = f'methods.{key}'
    name = _entry_name(key, entry, path)
    if 'returns' not in entry:
        raise MalformedSchemaError('missing return type', path)
    params = tuple(
        ParamDef(name=n, type=t, required=r, description=d)
        for n, t, r, d in _parse_members(entry.get('fields'), f'{path}.fields')
    )
    return MethodDef(
        name=name,
        params=params,
        returns=parse_type_tokens(entry['returns'], f'{path}.returns'),
        description=_description(entry.get('description'), path),
    )


def _check_references(spec: Spec) -> None:
    for type_def in spec.types.values():
        for field in type_def.fields:
            for name in referenced_names(field.type):
                if not spec.is_known(name):
                    raise UnknownTypeError(name, f'types.{type_def.name}.{field.name}')
        for name in type_def.subtypes + type_def.subtype_of:
            if name not in spec.types:
                raise UnknownTypeError(name, f'types.{type_def.name}')

    for method in spec.methods.values():
        for param in method.params:
            for name in referenced_names(param.type):
                if not spec.is_known(name):
                    raise UnknownTypeError(name, f'methods.{method.name}.{param.name}')
        for name in referenced_names(method.returns):
            if not spec.is_known(name):
                raise UnknownTypeError(name, f'methods.{method.name}.returns')


def parse_document(document: Any) -> Spec:
    """Build a ``Spec`` from an already decoded document.

    Raises:
        MalformedSchemaError: If the document does not match the data model.
        UnknownTypeError: If a reference names no scalar or declared type.
    """
    if not isinstance(document, dict):
        raise MalformedSchemaError('specification must be an object')

    types = document.get('types', {})
    methods = document.get('methods', {})
    if not isinstance(types, dict):
        raise MalformedSchemaError('expected an object', 'types')
    if not isinstance(methods, dict):
        raise MalformedSchemaError('expected an object', 'methods')

    for key in types:
        if key in SCALARS:
            raise MalformedSchemaError(f'{key!r} shadows a scalar type', f'types.{key}')

    # references are resolved only after every type has been read, so
    # forward references are legal
    spec = Spec(
        types={key: _parse_type(key, entry) for key, entry in types.items()},
        methods={key: _parse_method(key, entry) for key, entry in methods.items()},
        version=document.get('version'),
        release_date=document.get('release_date'),
        changelog=document.get('changelog'),
    )
    _check_references(spec)

    logger.debug(
        'Parsed specification with %d types and %d methods',
        len(spec.types),
        len(spec.methods),
    )
    return spec


def _reject_duplicates(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise MalformedSchemaError(f'duplicate key {key!r}')
        result[key] = value
    return result


def parse(text: str | bytes) -> Spec:
    """Parse raw JSON specification text into a ``Spec``.

    Duplicate keys anywhere in the document are rejected rather than
    silently overwritten, which is how type and method names are kept unique.
    """
    try:
        document = json.loads(text, object_pairs_hook=_reject_duplicates)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedSchemaError(f'invalid JSON: {e}') from e
    return parse_document(document)
