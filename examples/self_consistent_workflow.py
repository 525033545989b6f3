"""
Self-Consistent Workflow Example for tbsolver Package

This example solves a Hubbard chain in the Hartree mean-field
approximation. On-site amplitudes are callbacks reading the current spin
densities; the self-consistency callback recomputes those densities from
the eigenstates after every diagonalization.
"""

import numpy as np
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tbsolver import Amplitude, DiagonalizationSolver, HC, Model, SolverState


class HubbardChain:
    """
    Hubbard chain with mean-field state.

    Parameters
    ----------
    num_sites : int
        Number of sites
    U : float
        On-site interaction
    t : float
        Hopping amplitude
    mixing : float
        Fraction of the new density mixed into the old one per iteration
    """

    def __init__(self, num_sites=20, U=3.0, t=1.0, temperature=0.01, mixing=0.3):
        self.num_sites = num_sites
        self.U = U
        self.mixing = mixing

        # Staggered initial guess to allow antiferromagnetic order
        stagger = 0.2 * (-1.0) ** np.arange(num_sites)
        self.density = np.array([0.5 + stagger, 0.5 - stagger])

        self.model = Model(temperature=temperature, chemical_potential=U / 2)
        for x in range(num_sites):
            for s in range(2):
                self.model << Amplitude(self.hartree, [x, s], [x, s])
                if x + 1 < num_sites:
                    self.model << Amplitude(-t, [x + 1, s], [x, s]) + HC
        self.model.construct()

    def hartree(self, to, from_):
        x, s = to[0], to[1]
        return self.U * self.density[1 - s, x]

    def update(self, solver):
        """Self-consistency callback: recompute densities from eigenstates."""
        occupations = self.model.occupation(solver.eigenvalues())
        eigenvectors = solver.eigenvectors()

        new_density = np.zeros_like(self.density)
        for x in range(self.num_sites):
            for s in range(2):
                offset = self.model.basis_offset([x, s])
                weights = np.abs(eigenvectors[:, offset])**2
                new_density[s, x] = np.dot(weights, occupations)

        change = np.max(np.abs(new_density - self.density))
        self.density = (1 - self.mixing) * self.density + self.mixing * new_density
        print(f"  Iteration {solver.iteration_count}: max density change = {change:.2e}")
        return change < 1e-6


def main():
    """Main execution function."""
    print("=" * 70)
    print("SELF-CONSISTENT WORKFLOW EXAMPLE - TBSOLVER PACKAGE")
    print("=" * 70)

    chain = HubbardChain(num_sites=20, U=3.0)

    solver = DiagonalizationSolver(
        chain.model,
        max_iterations=300,
        self_consistency_callback=chain.update
    )
    state = solver.run()

    magnetization = 0.5 * (chain.density[0] - chain.density[1])

    print("\n" + "=" * 70)
    if state is SolverState.CONVERGED:
        print(f"✓ Converged after {solver.iteration_count} iterations")
    else:
        print(f"Stopped after {solver.iteration_count} iterations without convergence")
    print("=" * 70)
    print(f"Total density: {np.sum(chain.density):.6f}")
    print(f"Staggered magnetization: "
          f"{np.mean(magnetization * (-1.0) ** np.arange(chain.num_sites)):.6f}")
    print("=" * 70)


if __name__ == "__main__":
    main()
