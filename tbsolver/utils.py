"""
Utility Functions Module

This module contains reporting helpers for amplitude sets and solver runs.
"""

from typing import Dict

from .amplitude_set import AmplitudeSet

# Number of basis states listed individually by print_basis_summary
MAX_LISTED_STATES = 10


def estimate_memory(basis_size: int) -> Dict[str, float]:
    """
    Estimate the solver buffer sizes in MB.

    The solver keeps one complex Hamiltonian, one complex eigenvector
    matrix and one real eigenvalue vector.
    """
    bytes_per_complex = 16
    bytes_per_real = 8
    hamiltonian_mb = basis_size**2 * bytes_per_complex / 1e6
    eigenvectors_mb = basis_size**2 * bytes_per_complex / 1e6
    eigenvalues_mb = basis_size * bytes_per_real / 1e6
    return {
        'hamiltonian': hamiltonian_mb,
        'eigenvectors': eigenvectors_mb,
        'eigenvalues': eigenvalues_mb,
        'total': hamiltonian_mb + eigenvectors_mb + eigenvalues_mb,
    }


def print_basis_summary(amplitude_set: AmplitudeSet) -> None:
    """Print a summary of a constructed amplitude set."""
    print("\n" + "=" * 70)
    print("Amplitude Set Summary")
    print("=" * 70)

    print(f"Number of amplitudes: {len(amplitude_set)}")
    num_callback = sum(1 for a in amplitude_set if a.is_callback_dependent())
    print(f"Callback-dependent amplitudes: {num_callback}")
    print(f"Assume Hermitian: {amplitude_set.assume_hermitian}")

    if amplitude_set.is_constructed():
        basis_size = amplitude_set.basis_size()
        print(f"Basis size: {basis_size}")

        print("\nBasis states:")
        for offset in range(min(basis_size, MAX_LISTED_STATES)):
            print(f"  {offset:>6d}: {amplitude_set.physical_index(offset)}")
        if basis_size > MAX_LISTED_STATES:
            print(f"  ... ({basis_size - MAX_LISTED_STATES} more)")
    else:
        print("Basis: not constructed")

    print("=" * 70)


def print_calculation_info(
    basis_size: int,
    max_iterations: int,
    self_consistent: bool
) -> None:
    """Print information about the calculation parameters and memory."""
    print("\n" + "=" * 70)
    print("Calculation Information")
    print("=" * 70)
    print(f"Basis size: {basis_size}")
    if self_consistent:
        print(f"Self-consistency: enabled (max {max_iterations} iterations)")
    else:
        print("Self-consistency: disabled (single diagonalization)")

    memory = estimate_memory(basis_size)
    print(f"\nEstimated memory usage:")
    print(f"  Hamiltonian:  {memory['hamiltonian']:.1f} MB")
    print(f"  Eigenvectors: {memory['eigenvectors']:.1f} MB")
    print(f"  Eigenvalues:  {memory['eigenvalues']:.1f} MB")
    print(f"  Total:        {memory['total']:.1f} MB")
    print("=" * 70)
