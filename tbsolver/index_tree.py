"""
Index Tree Module

This module contains the IndexTree class, a nested ordered container of
physical indices. One level of nesting exists per index component, so the
depth of the tree equals the length of the longest stored index.

Once generated, the tree assigns every distinct stored index a contiguous
basis offset in [0, N) following the lexicographic index order, and serves
both directions of that bijection.
"""

from typing import Iterator, List, Optional

from .exceptions import IndexNotFoundError, StructuralError
from .index import IDX_ALL, PhysicalIndex


class _Node:
    """One level of the tree. `terminal` marks that an index ends here."""

    __slots__ = ('children', 'terminal', 'offset')

    def __init__(self):
        self.children = {}
        self.terminal = False
        self.offset = None


class IndexMatches:
    """
    Lazy, restartable sequence of the stored indices matching a pattern.

    Each call to iter() starts a fresh descent of the tree, so the object
    can be iterated any number of times.
    """

    def __init__(self, tree: 'IndexTree', pattern: PhysicalIndex):
        self._tree = tree
        self.pattern = pattern

    def __iter__(self) -> Iterator[PhysicalIndex]:
        return self._tree._search(self._tree._root, self.pattern.components, ())

    def __repr__(self):
        return f"IndexMatches(pattern={self.pattern})"


class IndexTree:
    """
    Sorted container of physical indices with basis offset assignment.

    Attributes
    ----------
    depth : int
        Length of the longest stored index

    Examples
    --------
    >>> tree = IndexTree()
    >>> tree.insert([1, 0])
    >>> tree.insert([0, 1])
    >>> tree.generate()
    2
    >>> tree.offset_of([1, 0])
    1
    >>> list(tree.matching([IDX_ALL, 1]))
    [PhysicalIndex({0, 1})]
    """

    def __init__(self):
        self._root = _Node()
        self._size = 0
        self.depth = 0
        self._indices: List[PhysicalIndex] = []
        self._generated = False

    def insert(self, index) -> None:
        """
        Add an index to the tree. Inserting an index twice is a no-op.

        Raises
        ------
        ValueError
            If the index is empty or contains a wildcard component
        """
        index = PhysicalIndex.coerce(index)
        if len(index) == 0:
            raise ValueError("Cannot insert an empty index")
        if index.is_pattern():
            raise ValueError(f"Cannot insert pattern index {index} into the basis")

        node = self._root
        for component in index:
            child = node.children.get(component)
            if child is None:
                child = _Node()
                node.children[component] = child
            node = child

        if not node.terminal:
            node.terminal = True
            self._size += 1
            self.depth = max(self.depth, len(index))
            self._generated = False

    def generate(self) -> int:
        """
        Assign sequential basis offsets in sorted index order.

        Calling this again without new insertions leaves the offsets
        unchanged.

        Returns
        -------
        int
            Number of distinct indices (the basis size)

        Raises
        ------
        StructuralError
            If the tree is empty
        """
        if self._size == 0:
            raise StructuralError("Cannot generate basis offsets for an empty index tree")
        if self._generated:
            return self._size

        self._indices = []
        for index, node in self._walk(self._root, ()):
            node.offset = len(self._indices)
            self._indices.append(index)

        self._generated = True
        return self._size

    def is_generated(self) -> bool:
        return self._generated

    def offset_of(self, index) -> int:
        """
        Basis offset of an index.

        Raises
        ------
        StructuralError
            If generate() has not been called since the last insertion
        IndexNotFoundError
            If the index was never inserted
        """
        self._require_generated()
        index = PhysicalIndex.coerce(index)
        node = self._find(index)
        if node is None:
            raise IndexNotFoundError(f"Index {index} is not part of the basis")
        return node.offset

    def index_of(self, offset: int) -> PhysicalIndex:
        """
        Index stored at a basis offset.

        Raises
        ------
        StructuralError
            If generate() has not been called since the last insertion
        IndexNotFoundError
            If the offset lies outside [0, N)
        """
        self._require_generated()
        if isinstance(offset, bool) or not hasattr(offset, '__index__'):
            raise TypeError(f"Basis offset must be an integer, got {type(offset).__name__}")
        offset = offset.__index__()
        if not 0 <= offset < self._size:
            raise IndexNotFoundError(
                f"Basis offset {offset} outside [0, {self._size})"
            )
        return self._indices[offset]

    def matching(self, pattern) -> IndexMatches:
        """
        All stored indices matching pattern component-wise.

        Concrete pattern components must be equal to the stored component;
        IDX_ALL components match any value. Only indices of the same length
        as the pattern are returned, in sorted order.
        """
        return IndexMatches(self, PhysicalIndex.coerce(pattern))

    def __len__(self):
        return self._size

    def __contains__(self, index):
        try:
            index = PhysicalIndex.coerce(index)
        except (TypeError, ValueError):
            return False
        return self._find(index) is not None

    def __iter__(self) -> Iterator[PhysicalIndex]:
        """Iterate over the stored indices in sorted order."""
        for index, _ in self._walk(self._root, ()):
            yield index

    def __repr__(self):
        return (
            f"IndexTree(size={self._size}, depth={self.depth}, "
            f"generated={self._generated})"
        )

    def _require_generated(self):
        if not self._generated:
            raise StructuralError(
                "Basis offsets are not available. Call generate() first."
            )

    def _find(self, index: PhysicalIndex) -> Optional[_Node]:
        node = self._root
        for component in index:
            node = node.children.get(component)
            if node is None:
                return None
        return node if node.terminal else None

    def _walk(self, node: _Node, prefix: tuple):
        # An index ending at this node precedes every longer index below it
        if node.terminal:
            yield PhysicalIndex(prefix), node
        for key in sorted(node.children):
            yield from self._walk(node.children[key], prefix + (key,))

    def _search(self, node: _Node, pattern: tuple, prefix: tuple):
        if not pattern:
            if node.terminal:
                yield PhysicalIndex(prefix)
            return

        head, rest = pattern[0], pattern[1:]
        if head == IDX_ALL:
            for key in sorted(node.children):
                yield from self._search(node.children[key], rest, prefix + (key,))
        else:
            child = node.children.get(head)
            if child is not None:
                yield from self._search(child, rest, prefix + (head,))
