"""
Comprehensive Test Suite for tbsolver Package

Run with: python -m pytest tests/ or python tests/test_all.py
"""

import numpy as np
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tbsolver import (
    Amplitude,
    DiagonalizationSolver,
    HC,
    IDX_ALL,
    Model,
    PhysicalIndex,
    SolverState,
)


def create_square_lattice_model(size_x=4, size_y=3, t=1.0, mu=-1.0, assume_hermitian=False):
    """Spinful square lattice {x, y, spin} with open boundaries."""
    model = Model(assume_hermitian=assume_hermitian)

    for x in range(size_x):
        for y in range(size_y):
            for s in range(2):
                model << Amplitude(-mu, [x, y, s], [x, y, s])

                neighbours = []
                if x + 1 < size_x:
                    neighbours.append([x + 1, y, s])
                if y + 1 < size_y:
                    neighbours.append([x, y + 1, s])

                for neighbour in neighbours:
                    amplitude = Amplitude(-t, neighbour, [x, y, s])
                    if assume_hermitian:
                        model << amplitude
                    else:
                        model << amplitude + HC

    model.construct()
    return model


def test_square_lattice_spectrum():
    """Test the spectrum against the analytic open-boundary result."""
    print("\nTest 1: Square Lattice Spectrum")
    print("-" * 50)

    size_x, size_y, t, mu = 4, 3, 1.0, -1.0
    model = create_square_lattice_model(size_x, size_y, t, mu)
    solver = DiagonalizationSolver(model)
    solver.run()

    kx = np.pi * np.arange(1, size_x + 1) / (size_x + 1)
    ky = np.pi * np.arange(1, size_y + 1) / (size_y + 1)
    analytic = (-2 * t * (np.cos(kx)[:, None] + np.cos(ky)[None, :]) - mu).ravel()
    analytic = np.sort(np.concatenate([analytic, analytic]))  # spin degeneracy

    assert model.basis_size() == 2 * size_x * size_y
    assert np.allclose(solver.eigenvalues(), analytic, atol=1e-9)

    print(f"  Basis size: {model.basis_size()}")
    print(f"  Lowest eigenvalue: {solver.eigenvalues()[0]:.6f}")
    print("  PASSED")


def test_hermitian_policy_equivalence():
    """Test that assume_hermitian reproduces explicitly conjugated models."""
    print("\nTest 2: Hermiticity Policy")
    print("-" * 50)

    explicit = DiagonalizationSolver(create_square_lattice_model())
    synthesized = DiagonalizationSolver(create_square_lattice_model(assume_hermitian=True))
    explicit.run()
    synthesized.run()

    assert np.allclose(explicit.hamiltonian(), synthesized.hamiltonian())
    assert np.allclose(explicit.eigenvalues(), synthesized.eigenvalues())
    print("  PASSED")


def test_wildcard_spin_projection():
    """Test pattern search over the sealed basis."""
    print("\nTest 3: Wildcard Spin Projection")
    print("-" * 50)

    model = create_square_lattice_model()
    solver = DiagonalizationSolver(model)
    solver.run()

    amplitudes = model.amplitude_set()
    spin_up = list(amplitudes.matching([IDX_ALL, IDX_ALL, 0]))
    spin_down = list(amplitudes.matching([IDX_ALL, IDX_ALL, 1]))
    column = list(amplitudes.matching([2, IDX_ALL, IDX_ALL]))

    assert len(spin_up) == len(spin_down) == 12
    assert len(column) == 6
    assert all(index[0] == 2 for index in column)

    # Each normalized eigenstate splits its weight over the two spin sectors
    for state in range(model.basis_size()):
        weight_up = sum(abs(solver.get_amplitude(state, i))**2 for i in spin_up)
        weight_down = sum(abs(solver.get_amplitude(state, i))**2 for i in spin_down)
        assert np.isclose(weight_up + weight_down, 1.0)

    print(f"  Spin-up states: {len(spin_up)}")
    print("  PASSED")


def test_subsystem_index_composition():
    """Test concatenated indices for a two-subsystem model."""
    print("\nTest 4: Subsystem Composition")
    print("-" * 50)

    model = Model()
    for subsystem in range(2):
        prefix = PhysicalIndex(subsystem)
        for x in range(3):
            model << Amplitude(-1.0, prefix + [x + 1], prefix + [x]) + HC
    # Weak coupling between the subsystems
    model << Amplitude(0.1, [1, 0], [0, 3]) + HC
    model.construct()

    assert model.basis_size() == 8
    assert model.basis_offset([0, 0]) == 0
    assert model.basis_offset([1, 0]) == 4

    solver = DiagonalizationSolver(model)
    assert solver.run() is SolverState.DIAGONALIZED
    print("  PASSED")


def test_amplitude_records():
    """Test that fixed amplitudes of a model can be stored and rebuilt."""
    print("\nTest 5: Amplitude Records")
    print("-" * 50)

    model = create_square_lattice_model(3, 2)
    records = [amplitude.serialize() for amplitude in model.amplitude_set()]

    rebuilt = Model()
    for record in records:
        rebuilt << Amplitude.deserialize(record)
    rebuilt.construct()

    original = DiagonalizationSolver(model)
    restored = DiagonalizationSolver(rebuilt)
    original.run()
    restored.run()

    assert np.allclose(original.hamiltonian(), restored.hamiltonian())
    print(f"  Records: {len(records)}")
    print("  PASSED")


def test_self_consistent_magnetization():
    """Test a Hubbard-like mean-field loop driven by occupations."""
    print("\nTest 6: Self-Consistent Mean Field")
    print("-" * 50)

    num_sites = 6
    U = 0.5
    # Start from a magnetized guess
    density = {(x, s): 0.3 + 0.4 * s for x in range(num_sites) for s in range(2)}

    def hartree(to, from_):
        x, s = to[0], to[1]
        return U * density[(x, 1 - s)]

    model = Model(temperature=0.05, chemical_potential=0.5)
    for x in range(num_sites):
        for s in range(2):
            model << Amplitude(hartree, [x, s], [x, s])
            if x + 1 < num_sites:
                model << Amplitude(-1.0, [x + 1, s], [x, s]) + HC
    model.construct()

    def callback(solver):
        occupations = model.occupation(solver.eigenvalues())
        new_density = {}
        for (x, s) in density:
            weights = np.array([
                abs(solver.get_amplitude(n, [x, s]))**2
                for n in range(model.basis_size())
            ])
            new_density[(x, s)] = float(np.dot(weights, occupations))
        change = max(abs(new_density[key] - density[key]) for key in density)
        for key in density:
            density[key] = 0.5 * density[key] + 0.5 * new_density[key]
        return change < 1e-8

    solver = DiagonalizationSolver(model, max_iterations=500,
                                   self_consistency_callback=callback)
    state = solver.run()

    assert state is SolverState.CONVERGED
    assert solver.iteration_count > 1
    print(f"  Converged in {solver.iteration_count} iterations")
    print("  PASSED")


def run_all_tests():
    """Run all tests."""
    print("\n" + "=" * 70)
    print("RUNNING ALL TESTS FOR TBSOLVER PACKAGE")
    print("=" * 70)

    tests = [
        test_square_lattice_spectrum,
        test_hermitian_policy_equivalence,
        test_wildcard_spin_projection,
        test_subsystem_index_composition,
        test_amplitude_records,
        test_self_consistent_magnetization,
    ]

    passed = 0
    failed = 0

    for test_func in tests:
        try:
            test_func()
            passed += 1
        except Exception as e:
            print(f"  ✗ FAILED: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print("\n" + "=" * 70)
    print(f"TEST SUMMARY: {passed} passed, {failed} failed")
    print("=" * 70)

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
