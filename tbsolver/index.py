"""
Physical Index Module

This module contains the PhysicalIndex class, the hierarchical key used to
identify single-particle states, together with the wildcard sentinel used
for pattern search.

A physical index is an ordered sequence of integers such as {x, y, spin}.
Indices are compared lexicographically, which fixes the order in which
basis offsets are assigned once an index set is sealed.
"""

import functools
import re
from typing import Iterable, Iterator, Tuple, Union

# Reserved component value matching any concrete value during pattern search
IDX_ALL = -1

_WILDCARD_TEXT = '*'
_INDEX_PATTERN = re.compile(r'^\s*\{(.*)\}\s*$')


@functools.total_ordering
class PhysicalIndex:
    """
    Immutable ordered sequence of integer components.

    Components are non-negative integers, or IDX_ALL to mark a wildcard
    position in a search pattern.

    Parameters
    ----------
    *components : int or iterable of int
        Either the components themselves, or a single iterable holding them.

    Examples
    --------
    >>> PhysicalIndex(0, 1, IDX_ALL)
    PhysicalIndex({0, 1, *})
    >>> PhysicalIndex([0, 1]) + PhysicalIndex([2])
    PhysicalIndex({0, 1, 2})
    """

    __slots__ = ('_components',)

    def __init__(self, *components):
        if len(components) == 1 and hasattr(components[0], '__iter__'):
            components = tuple(components[0])
        self._components = tuple(_validate_component(c) for c in components)

    @classmethod
    def coerce(cls, value: Union['PhysicalIndex', Iterable[int]]) -> 'PhysicalIndex':
        """Return value as a PhysicalIndex, converting sequences of ints."""
        if isinstance(value, cls):
            return value
        if hasattr(value, '__iter__'):
            return cls(tuple(value))
        return cls(value)

    @classmethod
    def from_string(cls, text: str) -> 'PhysicalIndex':
        """
        Parse the text form produced by str(), e.g. '{0, 1, *}'.

        Raises
        ------
        ValueError
            If the text is not a brace-enclosed, comma separated list.
        """
        match = _INDEX_PATTERN.match(text)
        if match is None:
            raise ValueError(f"Malformed index string: {text!r}")
        body = match.group(1).strip()
        if not body:
            return cls()
        components = []
        for token in body.split(','):
            token = token.strip()
            if token == _WILDCARD_TEXT:
                components.append(IDX_ALL)
            else:
                try:
                    components.append(int(token))
                except ValueError:
                    raise ValueError(
                        f"Malformed index component {token!r} in {text!r}"
                    ) from None
        return cls(components)

    @property
    def components(self) -> Tuple[int, ...]:
        return self._components

    def is_pattern(self) -> bool:
        """True if any component is the wildcard."""
        return IDX_ALL in self._components

    def matches(self, pattern: Union['PhysicalIndex', Iterable[int]]) -> bool:
        """
        Check whether this index matches a pattern component-wise.

        Lengths must agree; concrete pattern components must be equal and
        wildcard pattern components match anything.
        """
        pattern = PhysicalIndex.coerce(pattern)
        if len(pattern) != len(self):
            return False
        return all(
            p == IDX_ALL or p == c
            for p, c in zip(pattern._components, self._components)
        )

    def concatenate(self, other: Union['PhysicalIndex', Iterable[int]]) -> 'PhysicalIndex':
        """Return the longer index formed by appending other's components."""
        other = PhysicalIndex.coerce(other)
        return PhysicalIndex(self._components + other._components)

    def __add__(self, other):
        try:
            return self.concatenate(other)
        except TypeError:
            return NotImplemented

    def __len__(self) -> int:
        return len(self._components)

    def __getitem__(self, position):
        if isinstance(position, slice):
            return PhysicalIndex(self._components[position])
        return self._components[position]

    def __iter__(self) -> Iterator[int]:
        return iter(self._components)

    def __hash__(self):
        return hash(self._components)

    def __eq__(self, other):
        other = _maybe_coerce(other)
        if other is None:
            return NotImplemented
        return self._components == other._components

    def __lt__(self, other):
        other = _maybe_coerce(other)
        if other is None:
            return NotImplemented
        return self._components < other._components

    def __str__(self):
        return '{' + ', '.join(
            _WILDCARD_TEXT if c == IDX_ALL else str(c) for c in self._components
        ) + '}'

    def __repr__(self):
        return f"PhysicalIndex({self})"


def compare(a, b) -> int:
    """
    Lexicographic comparison of two indices.

    Returns -1, 0 or 1. A shorter index that is a prefix of a longer one
    compares as smaller.
    """
    a = PhysicalIndex.coerce(a)
    b = PhysicalIndex.coerce(b)
    if a == b:
        return 0
    return -1 if a < b else 1


def _validate_component(component) -> int:
    # numpy integers are accepted through __index__
    if isinstance(component, bool) or not hasattr(component, '__index__'):
        raise TypeError(
            f"Index components must be integers, got {type(component).__name__}"
        )
    component = component.__index__()
    if component < 0 and component != IDX_ALL:
        raise ValueError(
            f"Index components must be >= 0 or IDX_ALL ({IDX_ALL}), got {component}"
        )
    return int(component)


def _maybe_coerce(value):
    if isinstance(value, PhysicalIndex):
        return value
    if isinstance(value, (tuple, list)):
        try:
            return PhysicalIndex(value)
        except (TypeError, ValueError):
            return None
    return None
