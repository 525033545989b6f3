"""
Amplitude Set Module

This module contains the AmplitudeSet class, an adjacency-list builder for
sparse Hamiltonians. Amplitudes are stored per 'from' index. The set owns
one IndexTree holding every index that appears on an amplitude.

Lifecycle
---------
Open:   amplitudes may be added, no basis offsets exist yet
Sealed: construct() has fixed the basis; offsets and the basis size can be
        queried and entries iterated, but no amplitude can be added.
        Callback-backed amplitudes may still change value.
"""

from typing import Callable, Dict, Iterator, List, Tuple

from .amplitude import Amplitude
from .exceptions import StructuralError
from .index import PhysicalIndex
from .index_tree import IndexMatches, IndexTree


class AmplitudeSet:
    """
    Sparse Hamiltonian builder keyed by 'from' index.

    Parameters
    ----------
    assume_hermitian : bool, optional
        If True, entry iteration synthesizes the conjugate value for every
        amplitude whose conjugate partner (to=from, from=to) was never added.
        Default False: conjugates must be added explicitly, e.g. with
        `amplitude + HC`.

    Examples
    --------
    >>> amplitudes = AmplitudeSet()
    >>> amplitudes.add(Amplitude(1.0, [0], [1]) + HC)
    >>> amplitudes.construct()
    2
    >>> sorted(amplitudes.iter_entries())
    [(0, 1, (1+0j)), (1, 0, (1+0j))]
    """

    def __init__(self, assume_hermitian: bool = False):
        self.assume_hermitian = assume_hermitian
        self._amplitudes: Dict[PhysicalIndex, List[Amplitude]] = {}
        self._pairs = set()
        self._count = 0
        self._tree = IndexTree()
        self._sealed = False

    # ==============================
    # Building
    # ==============================

    def add(self, amplitude) -> None:
        """
        Append an amplitude, or every amplitude of a tuple/list such as the
        pair produced by `amplitude + HC`.

        Raises
        ------
        StructuralError
            If the set has already been constructed
        TypeError
            If something other than an Amplitude is given
        """
        if self._sealed:
            raise StructuralError(
                "Cannot add amplitudes after construct() has sealed the basis"
            )
        if isinstance(amplitude, (tuple, list)):
            for item in amplitude:
                self.add(item)
            return
        if not isinstance(amplitude, Amplitude):
            raise TypeError(f"Expected an Amplitude, got {type(amplitude).__name__}")

        self._amplitudes.setdefault(amplitude.from_index, []).append(amplitude)
        self._pairs.add((amplitude.to_index, amplitude.from_index))
        self._count += 1

    def construct(self) -> int:
        """
        Seal the set: insert every index into the tree and fix basis offsets.

        Calling construct() again is a no-op: add() refuses new amplitudes
        once the set is sealed and amplitude indices cannot be reassigned,
        so the content is unchanged.

        Returns
        -------
        int
            Basis size

        Raises
        ------
        StructuralError
            If the set is empty
        """
        if self._sealed:
            return len(self._tree)

        if self._count == 0:
            raise StructuralError("Cannot construct a basis from an empty amplitude set")

        for amplitude in self:
            self._tree.insert(amplitude.to_index)
            self._tree.insert(amplitude.from_index)
        self._tree.generate()

        self._sealed = True
        return len(self._tree)

    def is_constructed(self) -> bool:
        return self._sealed

    # ==============================
    # Basis queries (sealed only)
    # ==============================

    def basis_size(self) -> int:
        self._require_sealed('basis_size')
        return len(self._tree)

    def basis_offset(self, index) -> int:
        """
        Basis offset of a physical index.

        Raises
        ------
        StructuralError
            If the set has not been constructed
        IndexNotFoundError
            If the index does not occur on any amplitude
        """
        self._require_sealed('basis_offset')
        return self._tree.offset_of(index)

    def physical_index(self, offset: int) -> PhysicalIndex:
        """Inverse of basis_offset()."""
        self._require_sealed('physical_index')
        return self._tree.index_of(offset)

    def matching(self, pattern) -> IndexMatches:
        """Basis indices matching a pattern (see IndexTree.matching)."""
        self._require_sealed('matching')
        return self._tree.matching(pattern)

    # ==============================
    # Amplitude access
    # ==============================

    def amplitudes_from(self, from_index) -> List[Amplitude]:
        """Amplitudes leaving from_index, in insertion order."""
        return list(self._amplitudes.get(PhysicalIndex.coerce(from_index), ()))

    def has_amplitude(self, to_index, from_index) -> bool:
        """True if an explicit amplitude (to_index, from_index) was added."""
        key = (PhysicalIndex.coerce(to_index), PhysicalIndex.coerce(from_index))
        return key in self._pairs

    def iter_entries(self) -> Iterator[Tuple[int, int, complex]]:
        """
        Yield (row, col, value) for every stored amplitude.

        Values are evaluated at the time of iteration, so callback-backed
        amplitudes reflect the current feedback state. With assume_hermitian
        set, the conjugate entry (col, row, conj(value)) follows each
        amplitude whose explicit partner is missing.
        """
        self._require_sealed('iter_entries')
        offset_of = self._tree.offset_of
        for amplitude in self:
            to_index = amplitude.to_index
            from_index = amplitude.from_index
            row = offset_of(to_index)
            col = offset_of(from_index)
            value = amplitude.value(to_index, from_index)
            yield row, col, value

            if self.assume_hermitian and (from_index, to_index) not in self._pairs:
                yield col, row, value.conjugate()

    def for_each_entry(self, visitor: Callable[[int, int, complex], None]) -> None:
        """Call visitor(row, col, value) for every entry of iter_entries()."""
        for row, col, value in self.iter_entries():
            visitor(row, col, value)

    def __iter__(self) -> Iterator[Amplitude]:
        """Iterate over all amplitudes, grouped by from index."""
        for amplitudes in self._amplitudes.values():
            yield from amplitudes

    def __len__(self):
        return self._count

    def __repr__(self):
        state = 'sealed' if self._sealed else 'open'
        return (
            f"AmplitudeSet(amplitudes={self._count}, state={state}, "
            f"assume_hermitian={self.assume_hermitian})"
        )

    def _require_sealed(self, operation: str):
        if not self._sealed:
            raise StructuralError(
                f"{operation}() requires a constructed amplitude set. "
                f"Call construct() first."
            )
