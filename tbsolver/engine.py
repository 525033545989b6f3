"""
Main Engine Module

This module contains the DiagonalizationSolver class that builds the dense
Hamiltonian of a Model, diagonalizes it and optionally drives a
self-consistency loop.

State machine
-------------
UNINITIALIZED -> BUILT -> DIAGONALIZED -> CONVERGED | ITERATION_LIMIT_REACHED

BUILT is re-entered from DIAGONALIZED while a self-consistency callback
keeps returning False.
"""

import enum
import warnings
from typing import Callable, Optional

import numpy as np

from .exceptions import ConfigurationError, IndexNotFoundError, StructuralError
from .solver import assemble_hamiltonian, diagonalize_hermitian
from .utils import print_calculation_info
from .verification import is_hermitian, run_all_verifications

DEFAULT_MAX_ITERATIONS = 50


class SolverState(enum.Enum):
    UNINITIALIZED = 'uninitialized'
    BUILT = 'built'
    DIAGONALIZED = 'diagonalized'
    CONVERGED = 'converged'
    ITERATION_LIMIT_REACHED = 'iteration_limit_reached'


class DiagonalizationSolver:
    """
    Solves a Model by dense diagonalization of its Hamiltonian.

    Scales as O(N^3) in the basis size N. The eigenvalues and eigenstates
    can be read directly or through get_amplitude() to compute custom
    quantities, including feedback for a self-consistent model.

    Attributes
    ----------
    model : Model
        Bound model (anything exposing amplitude_set(), basis_size() and
        basis_offset())
    max_iterations : int
        Cap on the number of build/diagonalize cycles of the
        self-consistency loop
    state : SolverState
        Current state. After run() this is DIAGONALIZED (no callback),
        CONVERGED or ITERATION_LIMIT_REACHED.
    iteration_count : int
        Number of build/diagonalize cycles performed by the last run()

    Examples
    --------
    Single diagonalization:

    >>> solver = DiagonalizationSolver(model)
    >>> solver.run()
    <SolverState.DIAGONALIZED: 'diagonalized'>
    >>> solver.eigenvalues()
    array([-1.,  1.])

    Self-consistent loop:

    >>> def callback(solver):
    ...     converged = update_mean_field(solver)
    ...     return converged
    >>> solver.set_self_consistency_callback(callback)
    >>> solver.set_max_iterations(100)
    >>> solver.run()
    <SolverState.CONVERGED: 'converged'>
    """

    def __init__(
        self,
        model=None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        self_consistency_callback: Optional[Callable[['DiagonalizationSolver'], bool]] = None,
        verbose: bool = False,
        check_hermiticity: bool = True,
        hermiticity_tolerance: float = 1e-10
    ):
        """
        Initialize the solver.

        Parameters
        ----------
        model : Model, optional
            Model to solve. Can also be bound later with set_model().
        max_iterations : int, optional
            Maximum number of self-consistency cycles (default: 50)
        self_consistency_callback : callable, optional
            callback(solver) -> bool, called after every diagonalization.
            Returning True ends the loop. If None, run() diagonalizes once.
        verbose : bool, optional
            Print progress information (default: False)
        check_hermiticity : bool, optional
            Warn when the assembled Hamiltonian is not Hermitian
            (default: True)
        hermiticity_tolerance : float, optional
            Absolute tolerance of the Hermiticity check (default: 1e-10)
        """
        self.model = None
        self.max_iterations = DEFAULT_MAX_ITERATIONS
        self.self_consistency_callback = None
        self.verbose = verbose
        self.check_hermiticity = check_hermiticity
        self.hermiticity_tolerance = hermiticity_tolerance

        self.state = SolverState.UNINITIALIZED
        self.iteration_count = 0

        # Buffers, owned by the solver and reallocated on basis size change
        self._hamiltonian = None
        self._eigenvalues = None
        self._eigenvectors = None
        self._has_solution = False

        if model is not None:
            self.set_model(model)
        self.set_max_iterations(max_iterations)
        self.set_self_consistency_callback(self_consistency_callback)

    # ==============================
    # Configuration
    # ==============================

    def set_model(self, model) -> None:
        """
        Bind the model to solve. Results of a previous run are discarded.

        Raises
        ------
        ConfigurationError
            If model lacks amplitude_set(), basis_size() or basis_offset()
        """
        for method in ('amplitude_set', 'basis_size', 'basis_offset'):
            if not callable(getattr(model, method, None)):
                raise ConfigurationError(
                    f"Model of type {type(model).__name__} does not provide {method}()"
                )
        self.model = model
        self.state = SolverState.UNINITIALIZED
        self.iteration_count = 0
        self._has_solution = False

    def get_model(self):
        return self.model

    def set_self_consistency_callback(
        self,
        callback: Optional[Callable[['DiagonalizationSolver'], bool]]
    ) -> None:
        """Set the self-consistency callback. None disables the loop."""
        if callback is not None and not callable(callback):
            raise ConfigurationError(
                f"Self-consistency callback must be callable, got {type(callback).__name__}"
            )
        self.self_consistency_callback = callback

    def set_max_iterations(self, max_iterations: int) -> None:
        if isinstance(max_iterations, bool) or not hasattr(max_iterations, '__index__') \
                or max_iterations.__index__() < 1:
            raise ConfigurationError(
                f"max_iterations must be a positive integer, got {max_iterations!r}"
            )
        self.max_iterations = max_iterations.__index__()

    # ==============================
    # Run
    # ==============================

    def run(self) -> SolverState:
        """
        Build and diagonalize the Hamiltonian.

        Without a self-consistency callback a single build/diagonalize cycle
        is performed. With a callback, cycles repeat until the callback
        returns True (CONVERGED) or max_iterations cycles have been performed
        (ITERATION_LIMIT_REACHED, which is not an error).

        Returns
        -------
        SolverState
            The final state

        Raises
        ------
        ConfigurationError
            If no model is bound or the basis is empty
        StructuralError
            If the model's amplitude set has not been constructed
        NumericalError
            If the eigensolver fails; no partial result is kept
        """
        if self.model is None:
            raise ConfigurationError("No model bound. Call set_model() before run().")

        basis_size = self.model.basis_size()
        if basis_size == 0:
            raise ConfigurationError("Model has an empty basis")

        amplitude_set = self.model.amplitude_set()
        callback = self.self_consistency_callback

        if self.verbose:
            print_calculation_info(basis_size, self.max_iterations, callback is not None)

        self._allocate(basis_size)
        self.iteration_count = 0

        while True:
            self._build(amplitude_set)
            self._diagonalize()
            self.iteration_count += 1

            if callback is None:
                break

            if self.verbose:
                print(f"Self-consistency iteration {self.iteration_count}: "
                      f"E_min = {self._eigenvalues[0]:.6f}")

            if callback(self):
                self.state = SolverState.CONVERGED
                if self.verbose:
                    print(f"✓ Converged after {self.iteration_count} iterations")
                break

            if self.iteration_count >= self.max_iterations:
                self.state = SolverState.ITERATION_LIMIT_REACHED
                warnings.warn(
                    f"Self-consistency loop stopped after {self.max_iterations} "
                    f"iterations without convergence"
                )
                break

        return self.state

    def _allocate(self, basis_size: int) -> None:
        shape = (basis_size, basis_size)
        if self._hamiltonian is not None and self._hamiltonian.shape == shape:
            return

        # Release the old buffers before allocating at the new size
        self._hamiltonian = None
        self._eigenvalues = None
        self._eigenvectors = None
        self._has_solution = False

        self._hamiltonian = np.zeros(shape, dtype=np.complex128)
        self._eigenvalues = np.zeros(basis_size, dtype=np.float64)
        self._eigenvectors = np.zeros(shape, dtype=np.complex128)

    def _build(self, amplitude_set) -> None:
        self._has_solution = False
        assemble_hamiltonian(amplitude_set, out=self._hamiltonian)

        if self.check_hermiticity and not is_hermitian(
            self._hamiltonian, tol=self.hermiticity_tolerance
        ):
            warnings.warn(
                "Assembled Hamiltonian is not Hermitian; add the missing "
                "conjugate amplitudes or enable assume_hermitian"
            )

        self.state = SolverState.BUILT

    def _diagonalize(self) -> None:
        eigenvalues, eigenvectors = diagonalize_hermitian(self._hamiltonian)

        self._eigenvalues[:] = eigenvalues
        # Row n holds eigenstate n
        self._eigenvectors[:] = eigenvectors.T
        self._has_solution = True
        self.state = SolverState.DIAGONALIZED

    # ==============================
    # Results
    # ==============================

    def eigenvalues(self) -> np.ndarray:
        """Eigenvalues in non-decreasing order (read-only view)."""
        self._require_solution()
        return _read_only(self._eigenvalues)

    def eigenvectors(self) -> np.ndarray:
        """
        Eigenstates as rows (read-only view).

        eigenvectors()[n, basis_offset(index)] is the amplitude of state n
        on index; flattened, this is position basis_size * n + offset.
        """
        self._require_solution()
        return _read_only(self._eigenvectors)

    def hamiltonian(self) -> np.ndarray:
        """Last assembled Hamiltonian (read-only view)."""
        if self._hamiltonian is None or self.state is SolverState.UNINITIALIZED:
            raise StructuralError("No Hamiltonian has been built. Call run() first.")
        return _read_only(self._hamiltonian)

    def get_amplitude(self, state: int, index) -> complex:
        """
        Amplitude Psi_state(index) of an eigenstate on a physical index.

        Raises
        ------
        StructuralError
            If no successful diagonalization is available
        IndexNotFoundError
            If state is out of range or index is not part of the basis
        """
        self._require_solution()
        basis_size = len(self._eigenvalues)
        if isinstance(state, bool) or not hasattr(state, '__index__'):
            raise TypeError(f"State must be an integer, got {type(state).__name__}")
        state = state.__index__()
        if not 0 <= state < basis_size:
            raise IndexNotFoundError(f"State {state} outside [0, {basis_size})")
        return complex(self._eigenvectors[state, self.model.basis_offset(index)])

    def verify_results(self) -> dict:
        """
        Run all verification checks on the current solution.

        Returns
        -------
        dict
            Dictionary containing verification results
        """
        self._require_solution()

        if self.verbose:
            print(f"\n{'=' * 70}")
            print("Verification Checks")
            print(f"{'=' * 70}")

        results = run_all_verifications(
            self._hamiltonian,
            self._eigenvalues,
            self._eigenvectors,
            verbose=self.verbose
        )

        if self.verbose:
            print(f"{'=' * 70}")

        return results

    def _require_solution(self):
        if not self._has_solution:
            raise StructuralError("No eigensolution available. Call run() first.")

    def __repr__(self):
        basis_size = 0 if self._eigenvalues is None else len(self._eigenvalues)
        return (
            f"DiagonalizationSolver(state={self.state.name}, basis_size={basis_size}, "
            f"iteration_count={self.iteration_count}, "
            f"max_iterations={self.max_iterations})"
        )


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view
