"""
Verification Module

This module contains functions for verifying the numerical accuracy
and physical correctness of an assembled Hamiltonian and its
eigendecomposition.
"""

import numpy as np
import warnings
from typing import Tuple

# ==============================
# Basic Utility
# ==============================

def is_hermitian(matrix: np.ndarray, tol: float = 1e-10) -> bool:
    """Check if a matrix is Hermitian."""
    return np.allclose(matrix, matrix.conj().T, atol=tol)


# ==============================
# Hamiltonian Verification
# ==============================

def verify_hermiticity(
    H: np.ndarray,
    tol: float = 1e-10,
    verbose: bool = True
) -> float:
    """
    Verify that H equals its conjugate transpose.

    Returns
    -------
    float
        Largest absolute deviation |H - H^dagger|
    """
    if verbose:
        print("\nVerifying Hermiticity of H...")

    deviation = float(np.max(np.abs(H - H.conj().T))) if H.size else 0.0

    if verbose:
        print(f"  Max H Hermiticity deviation: {deviation:.2e}")

    if deviation > tol:
        warnings.warn(f"H is not Hermitian within tolerance {tol} (Max Err: {deviation:.2e})")

    return deviation


def verify_trace(
    H: np.ndarray,
    eigenvalues: np.ndarray,
    tol: float = 1e-8,
    verbose: bool = True
) -> float:
    """Verify that the eigenvalues sum to the trace of H."""
    deviation = float(abs(np.trace(H).real - np.sum(eigenvalues)))

    if verbose:
        print(f"\nTrace check: |Tr H - sum(E)| = {deviation:.2e}")

    if deviation > tol * max(1.0, float(np.sum(np.abs(eigenvalues)))):
        warnings.warn(f"Eigenvalue sum deviates from Tr H by {deviation:.2e}")

    return deviation


# ==============================
# Eigenstate Verification
# ==============================

def verify_orthonormality(
    eigenvectors: np.ndarray,
    tol: float = 1e-8,
    verbose: bool = True
) -> float:
    """
    Verify that the eigenstates are orthonormal.

    Parameters
    ----------
    eigenvectors : ndarray of shape (N, N)
        Eigenstates as rows, eigenvectors[n] is state n

    Returns
    -------
    float
        Largest deviation of the state overlap matrix from the identity
    """
    if verbose:
        print("\nVerifying orthonormality of eigenstates...")

    overlap = eigenvectors.conj() @ eigenvectors.T
    identity = np.eye(eigenvectors.shape[0])
    deviation = float(np.max(np.abs(overlap - identity))) if overlap.size else 0.0

    if verbose:
        print(f"  Max deviation from identity = {deviation:.2e}")

    if deviation > tol:
        warnings.warn("Orthonormality check failed")

    return deviation


def verify_eigenvalue_sorting(
    eigenvalues: np.ndarray,
    verbose: bool = True
) -> bool:
    """Verify that eigenvalues are sorted in ascending order."""
    if verbose:
        print("\nVerifying eigenvalue sorting...")

    is_sorted = bool(np.all(eigenvalues[:-1] <= eigenvalues[1:]))

    if verbose:
        if is_sorted:
            print("  ✓ Eigenvalues are properly sorted")
        else:
            print("  Warning: Eigenvalues are not sorted")

    return is_sorted


def verify_energy_range(
    eigenvalues: np.ndarray,
    verbose: bool = True
) -> Tuple[float, float]:
    """Check the energy range of computed eigenvalues."""
    if len(eigenvalues) == 0:
        return 0.0, 0.0

    E_min = float(np.min(eigenvalues))
    E_max = float(np.max(eigenvalues))

    if verbose:
        print("\nEnergy range:")
        print(f"  Minimum eigenvalue: {E_min:.6f}")
        print(f"  Maximum eigenvalue: {E_max:.6f}")
        print(f"  Energy span: {E_max - E_min:.6f}")

    return E_min, E_max


def run_all_verifications(
    H: np.ndarray,
    eigenvalues: np.ndarray,
    eigenvectors: np.ndarray,
    verbose: bool = True
) -> dict:
    """Run all verification checks and return results."""
    results = {}

    results['hermiticity'] = {'H_deviation': verify_hermiticity(H, verbose=verbose)}

    results['orthonormality'] = {
        'max_deviation': verify_orthonormality(eigenvectors, verbose=verbose)
    }

    results['eigenvalue_sorting'] = {
        'sorted': verify_eigenvalue_sorting(eigenvalues, verbose=verbose)
    }

    results['trace'] = {'deviation': verify_trace(H, eigenvalues, verbose=verbose)}

    E_min, E_max = verify_energy_range(eigenvalues, verbose=verbose)
    results['energy_range'] = {'E_min': E_min, 'E_max': E_max}

    return results
