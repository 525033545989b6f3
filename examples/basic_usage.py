"""
Basic Usage Example for tbsolver Package

This example builds a spinful square lattice, diagonalizes it once and
reads out eigenvalues and eigenstate amplitudes.
"""

import numpy as np
import sys
import os

# Add parent directory to path for development
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tbsolver import Amplitude, DiagonalizationSolver, HC, IDX_ALL, Model


def create_square_lattice(size_x=10, size_y=10, t=1.0, mu=-1.0):
    """Create a spinful square lattice with open boundaries."""
    model = Model(verbose=True)

    for x in range(size_x):
        for y in range(size_y):
            for s in range(2):
                # On-site term
                model << Amplitude(-mu, [x, y, s], [x, y, s])

                # Nearest-neighbour hopping, conjugate added with HC
                if x + 1 < size_x:
                    model << Amplitude(-t, [x + 1, y, s], [x, y, s]) + HC
                if y + 1 < size_y:
                    model << Amplitude(-t, [x, y + 1, s], [x, y, s]) + HC

    model.construct()
    return model


def main():
    """Main execution function."""
    print("=" * 70)
    print("BASIC USAGE EXAMPLE - TBSOLVER PACKAGE")
    print("=" * 70)

    # Create the model
    print("\nStep 1: Creating square lattice model...")
    model = create_square_lattice(size_x=10, size_y=10)
    print(f"  ✓ Basis size: {model.basis_size()}")

    # Diagonalize
    print("\nStep 2: Diagonalizing...")
    solver = DiagonalizationSolver(model, verbose=True)
    state = solver.run()
    print(f"  ✓ Final state: {state.name}")

    # Verify
    print("\nStep 3: Verifying results...")
    results = solver.verify_results()

    # Ground state density on the spin-up sites
    amplitudes = model.amplitude_set()
    spin_up = list(amplitudes.matching([IDX_ALL, IDX_ALL, 0]))
    weight = sum(abs(solver.get_amplitude(0, index))**2 for index in spin_up)

    # Summary
    print("\n" + "=" * 70)
    print("EXAMPLE COMPLETED SUCCESSFULLY!")
    print("=" * 70)
    print(f"\nLowest eigenvalues: {np.round(solver.eigenvalues()[:4], 6)}")
    print(f"Ground state weight on spin-up sites: {weight:.6f}")
    print("\nVerification results:")
    print(f"  • Hermiticity deviation: {results['hermiticity']['H_deviation']:.2e}")
    print(f"  • Orthonormality deviation: {results['orthonormality']['max_deviation']:.2e}")
    print("=" * 70)


if __name__ == "__main__":
    main()
