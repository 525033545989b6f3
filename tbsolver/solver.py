"""
Eigenvalue Solver Module

This module contains the functions that turn a sealed AmplitudeSet into a
dense Hamiltonian matrix and diagonalize it:

    H[row, col] = sum of a_{to,from} with row = offset(to), col = offset(from)
    H C = C E
"""

import numpy as np
from scipy.linalg import LinAlgError, eigh
from typing import Optional, Tuple

from .amplitude_set import AmplitudeSet
from .exceptions import NumericalError, StructuralError


def assemble_hamiltonian(
    amplitude_set: AmplitudeSet,
    out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Assemble the dense Hamiltonian of a sealed amplitude set.

    Every (row, col, value) entry is accumulated, so repeated amplitudes
    between the same pair of indices add up. Callback-backed amplitudes
    are evaluated at the time of the call.

    Parameters
    ----------
    amplitude_set : AmplitudeSet
        Constructed amplitude set
    out : ndarray of shape (N, N), optional
        complex128 buffer to reuse. It is zeroed before assembly.

    Returns
    -------
    H : ndarray of shape (N, N)
        The assembled matrix (out itself when given)

    Raises
    ------
    StructuralError
        If the set is not constructed, or out has the wrong shape
    """
    basis_size = amplitude_set.basis_size()

    if out is None:
        H = np.zeros((basis_size, basis_size), dtype=np.complex128)
    else:
        if out.shape != (basis_size, basis_size):
            raise StructuralError(
                f"Hamiltonian buffer has shape {out.shape}, expected "
                f"({basis_size}, {basis_size})"
            )
        H = out
        H.fill(0)

    for row, col, value in amplitude_set.iter_entries():
        H[row, col] += value

    return H


def diagonalize_hermitian(H: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Solve the Hermitian eigenvalue problem H C = C E.

    Uses scipy.linalg.eigh, which reads the lower triangle of H only and
    returns eigenvalues in ascending order with orthonormal eigenvectors.

    Parameters
    ----------
    H : ndarray of shape (N, N)
        Hermitian matrix. It is not modified.

    Returns
    -------
    eigenvalues : ndarray of shape (N,)
        Real eigenvalues, non-decreasing
    eigenvectors : ndarray of shape (N, N)
        Eigenvectors as columns, eigenvectors[:, n] belongs to eigenvalues[n]

    Raises
    ------
    NumericalError
        If the eigensolver does not converge or H contains non-finite values

    Notes
    -----
    Within a degenerate subspace the choice of eigenvectors is whatever
    LAPACK returns and may differ between runs.
    """
    try:
        eigenvalues, eigenvectors = eigh(H)
    except LinAlgError as e:
        raise NumericalError(f"Eigensolver failed to converge: {e}") from e
    except ValueError as e:
        raise NumericalError(f"Cannot diagonalize Hamiltonian: {e}") from e

    return eigenvalues, eigenvectors
