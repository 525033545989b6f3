"""
tbsolver Package

A Python package for building sparse single-particle (tight-binding)
Hamiltonians from hierarchical physical indices and solving them by
diagonalization, optionally self-consistently.

Main Components
---------------
DiagonalizationSolver : class
    Builds the dense Hamiltonian of a Model, diagonalizes it and drives
    the self-consistency loop
Model : class
    Single-particle context owning an AmplitudeSet

Basis Construction
------------------
PhysicalIndex : class
    Hierarchical key identifying a single-particle state
IndexTree : class
    Sorted index container assigning basis offsets, with wildcard search
Amplitude : class
    One Hamiltonian entry a_{to,from}, fixed or callback-valued
AmplitudeSet : class
    Adjacency-list Hamiltonian builder owning the IndexTree

Example
-------
>>> from tbsolver import Amplitude, DiagonalizationSolver, HC, Model
>>>
>>> # Open chain of 10 sites with nearest-neighbour hopping t = 1
>>> model = Model()
>>> for x in range(9):
...     model << Amplitude(-1.0, [x + 1], [x]) + HC
>>> model.construct()
>>>
>>> solver = DiagonalizationSolver(model)
>>> solver.run()
>>> solver.eigenvalues()
>>> solver.get_amplitude(0, [5])
"""

__version__ = "1.0.0"

# Main classes
from .engine import DiagonalizationSolver, SolverState, DEFAULT_MAX_ITERATIONS
from .model import Model, Statistics

# Basis construction
from .index import PhysicalIndex, IDX_ALL, compare
from .index_tree import IndexTree, IndexMatches
from .amplitude import (
    Amplitude,
    AmplitudeCallback,
    FunctionCallback,
    ConjugatedCallback,
    HC,
)
from .amplitude_set import AmplitudeSet

# Solver functions
from .solver import assemble_hamiltonian, diagonalize_hermitian

# Errors
from .exceptions import (
    TBSolverError,
    ConfigurationError,
    StructuralError,
    IndexNotFoundError,
    NumericalError,
    SerializationError,
)

# Verification functions
from .verification import (
    is_hermitian,
    verify_hermiticity,
    verify_orthonormality,
    verify_eigenvalue_sorting,
    verify_trace,
    verify_energy_range,
    run_all_verifications,
)

# Utility functions
from .utils import (
    estimate_memory,
    print_basis_summary,
    print_calculation_info,
)

# Public API
__all__ = [
    # Main classes
    'DiagonalizationSolver',
    'SolverState',
    'DEFAULT_MAX_ITERATIONS',
    'Model',
    'Statistics',

    # Basis construction
    'PhysicalIndex',
    'IDX_ALL',
    'compare',
    'IndexTree',
    'IndexMatches',
    'Amplitude',
    'AmplitudeCallback',
    'FunctionCallback',
    'ConjugatedCallback',
    'HC',
    'AmplitudeSet',

    # Solver
    'assemble_hamiltonian',
    'diagonalize_hermitian',

    # Errors
    'TBSolverError',
    'ConfigurationError',
    'StructuralError',
    'IndexNotFoundError',
    'NumericalError',
    'SerializationError',

    # Verification
    'is_hermitian',
    'verify_hermiticity',
    'verify_orthonormality',
    'verify_eigenvalue_sorting',
    'verify_trace',
    'verify_energy_range',
    'run_all_verifications',

    # Utils
    'estimate_memory',
    'print_basis_summary',
    'print_calculation_info',
]
