"""Translation of specification names into Python identifiers.

All functions here are pure. The original spec name always survives as the
wire key (a pydantic alias for fields, a dict key for method parameters), so
escaping a name never changes what goes over the wire.

Synthesized union names are ``<prefix>`` followed by the ``_``-joined type
identifiers of the union's members, in key order. Type identifiers are
alphanumeric and never contain ``_``, which makes the join injective and keeps
synthesized names disjoint from declared ones.
"""

import keyword
import re

from botapigen.codegen.schema import ARRAY_OF, SCALARS
from botapigen.exceptions import ReservedCollisionError

__all__ = [
    'NameTable',
    'to_type_identifier',
    'to_field_identifier',
    'to_method_identifier',
    'synthesize_union_name',
]

PYTHON_KEYWORDS = frozenset(keyword.kwlist)

# names the generated modules import or define themselves
RESERVED_TYPE_NAMES = frozenset(
    {'Any', 'BaseModel', 'ConfigDict', 'Field', 'FileBytes', 'RootModel'}
)

# pydantic BaseModel attributes and builtins used inside annotations
RESERVED_FIELD_NAMES = frozenset(
    {
        'bool',
        'bytes',
        'construct',
        'copy',
        'dict',
        'float',
        'int',
        'json',
        'list',
        'parse_file',
        'parse_obj',
        'parse_raw',
        'schema',
        'schema_json',
        'self',
        'str',
        'update_forward_refs',
        'validate',
    }
)


def _capitalize(part: str) -> str:
    return part[0].upper() + part[1:] if part else ''


def to_type_identifier(name: str) -> str:
    """Convert a spec type name into a PascalCase class name.

    The result is alphanumeric, never starts with a digit and never contains
    an underscore.
    """
    identifier = ''.join(_capitalize(p) for p in re.split(r'[^A-Za-z0-9]+', name))
    if not identifier:
        identifier = 'Unnamed'
    if identifier[0].isdigit():
        identifier = f'T{identifier}'
    if identifier in PYTHON_KEYWORDS or identifier in RESERVED_TYPE_NAMES:
        identifier = f'{identifier}Type'
    return identifier


def _escape_member(identifier: str) -> str:
    identifier = identifier.lstrip('_') or 'field'
    if (
        identifier in PYTHON_KEYWORDS
        or identifier in RESERVED_FIELD_NAMES
        or identifier.startswith('model_')
    ):
        identifier = f'{identifier}_'
    return identifier


def to_field_identifier(name: str) -> str:
    """Convert a field or parameter name into an attribute identifier.

    Leading underscores are dropped (pydantic treats them as private), and
    keywords or names that shadow ``BaseModel`` attributes get a trailing
    underscore.

    Example:
        >>> to_field_identifier('from')
        'from_'
        >>> to_field_identifier('chat_id')
        'chat_id'
    """
    return _escape_member(name)


def to_method_identifier(name: str) -> str:
    """Convert a camelCase method name into a snake_case function name."""
    snake = re.sub(r'(?<=[a-z0-9])([A-Z])', r'_\1', name)
    snake = re.sub(r'(?<=[A-Z])([A-Z][a-z])', r'_\1', snake)
    return _escape_member(snake.lower())


def _key_part(entry: str) -> str:
    depth = 0
    while entry.startswith(ARRAY_OF):
        entry = entry[len(ARRAY_OF) :]
        depth += 1
    identifier = to_type_identifier(entry)
    # identifiers never start with a digit, so the depth marker cannot clash
    return f'{depth}{identifier}' if depth else identifier


def synthesize_union_name(key: tuple[str, ...], prefix: str = 'E') -> str:
    """Derive the class name of a synthesized union from its key.

    Example:
        >>> synthesize_union_name(('Integer', 'String'))
        'EInteger_String'
    """
    return prefix + '_'.join(_key_part(entry) for entry in key)


class NameTable:
    """Tracks the identifiers handed out within one namespace.

    Registering two different spec names that resolve to the same identifier
    is fatal; the table never picks an alternative name.
    """

    def __init__(self, namespace: str):
        self.namespace = namespace
        self._by_identifier: dict[str, str] = {}

    def register(self, name: str, identifier: str) -> str:
        existing = self._by_identifier.get(identifier)
        if existing is not None and existing != name:
            raise ReservedCollisionError(identifier, (existing, name), self.namespace)
        self._by_identifier[identifier] = name
        return identifier

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._by_identifier

    def __len__(self) -> int:
        return len(self._by_identifier)

    @classmethod
    def for_types(cls) -> 'NameTable':
        """A table for the type namespace, pre-seeded with the scalar names."""
        table = cls('types')
        for scalar in SCALARS:
            table.register(scalar, to_type_identifier(scalar))
        return table
