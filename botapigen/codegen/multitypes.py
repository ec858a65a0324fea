"""Registry of synthesized union ("multitype") classes.

Type generation registers every union it meets; method generation only looks
unions up. A lookup miss means method generation saw a union that no emitted
type definition backs, so it is fatal instead of creating a new entry.
"""

import dataclasses
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from botapigen.codegen.naming import synthesize_union_name
from botapigen.codegen.schema import ARRAY_OF, ArrayOf, Reference, Scalar, TypeRef, UnionOf
from botapigen.exceptions import UnresolvedUnionError

__all__ = ['MultitypeKey', 'MultitypeRegistry', 'ReadWriteLock']

logger = logging.getLogger(__name__)


def _member_token(ref: TypeRef) -> str:
    if isinstance(ref, (Scalar, Reference)):
        return ref.name
    if isinstance(ref, ArrayOf):
        return ARRAY_OF + _member_token(ref.item)
    raise ValueError('unions nested inside unions have no key')


@dataclasses.dataclass(frozen=True, order=True)
class MultitypeKey:
    """The sorted, de-duplicated member tokens of a union."""

    names: tuple[str, ...]

    @classmethod
    def from_union(cls, ref: UnionOf) -> 'MultitypeKey':
        return cls(tuple(sorted({_member_token(m) for m in ref.members})))

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)


class ReadWriteLock:
    """A lock allowing many concurrent readers or one exclusive writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self):
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class MultitypeRegistry:
    """Maps a union's ``MultitypeKey`` to the name of its synthesized class.

    Entries are write-once: a key keeps the name it was first given for the
    lifetime of the registry. One registry serves exactly one generation run.

    Example:
        >>> registry = MultitypeRegistry()
        >>> key = MultitypeKey(('Integer', 'String'))
        >>> registry.get_or_create(key)
        ('EInteger_String', True)
        >>> registry.lookup(key)
        'EInteger_String'
    """

    def __init__(self, prefix: str = 'E'):
        self.prefix = prefix
        self._entries: dict[MultitypeKey, str] = {}
        self._lock = ReadWriteLock()
        self._frozen = False

    def get_or_create(
        self, key: MultitypeKey, context: str | None = None
    ) -> tuple[str, bool]:
        """Return the name for ``key``, registering it if it is new.

        Returns:
            The synthesized name and whether this call created the entry.

        Raises:
            UnresolvedUnionError: If the key is new and the registry is frozen.
        """
        with self._lock.write():
            name = self._entries.get(key)
            if name is not None:
                return name, False
            if self._frozen:
                raise UnresolvedUnionError(key.names, context=context)
            name = synthesize_union_name(key.names, self.prefix)
            self._entries[key] = name
        logger.debug('Synthesized union %s for (%s)', name, ', '.join(key))
        return name, True

    def lookup(self, key: MultitypeKey, context: str | None = None) -> str:
        """Return the name registered for ``key``; never creates an entry.

        Raises:
            UnresolvedUnionError: If the key was never registered.
        """
        with self._lock.read():
            name = self._entries.get(key)
        if name is None:
            raise UnresolvedUnionError(key.names, context=context)
        return name

    def freeze(self) -> None:
        """Reject any new key from now on."""
        with self._lock.write():
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def items(self) -> list[tuple[MultitypeKey, str]]:
        """All entries, sorted by key."""
        with self._lock.read():
            return sorted(self._entries.items())

    def __contains__(self, key: MultitypeKey) -> bool:
        with self._lock.read():
            return key in self._entries

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)
