"""
Model Module

This module contains the Model class, the single-particle context handed to
the DiagonalizationSolver. A Model owns one AmplitudeSet together with the
particle statistics, temperature and chemical potential that
self-consistency callbacks use to occupy the computed eigenstates.

Temperatures are given in energy units (k_B = 1).
"""

import enum
from typing import Union

import numpy as np

from .amplitude_set import AmplitudeSet
from .exceptions import ConfigurationError
from .utils import print_basis_summary


class Statistics(enum.Enum):
    """Particle statistics used by Model.occupation()."""
    FERMI_DIRAC = 'fermi_dirac'
    BOSE_EINSTEIN = 'bose_einstein'


class Model:
    """
    Single-particle model: amplitudes plus thermodynamic context.

    Parameters
    ----------
    assume_hermitian : bool, optional
        Hermiticity policy forwarded to the owned AmplitudeSet
    statistics : Statistics, optional
        Particle statistics (default: Fermi-Dirac)
    temperature : float, optional
        Temperature in energy units (default: 0.0)
    chemical_potential : float, optional
        Chemical potential (default: 0.0)
    verbose : bool, optional
        Print a summary when the basis is constructed (default: False)

    Examples
    --------
    >>> model = Model()
    >>> model.add(Amplitude(-1.0, [0], [1]) + HC)
    >>> model.construct()
    2
    >>> model.basis_offset([1])
    1
    """

    def __init__(
        self,
        assume_hermitian: bool = False,
        statistics: Statistics = Statistics.FERMI_DIRAC,
        temperature: float = 0.0,
        chemical_potential: float = 0.0,
        verbose: bool = False
    ):
        if not isinstance(statistics, Statistics):
            raise ConfigurationError(f"Unknown statistics: {statistics!r}")
        if temperature < 0:
            raise ConfigurationError(f"Temperature must be >= 0, got {temperature}")

        self._amplitude_set = AmplitudeSet(assume_hermitian=assume_hermitian)
        self.statistics = statistics
        self.temperature = temperature
        self.chemical_potential = chemical_potential
        self.verbose = verbose

    def add(self, amplitude) -> None:
        """Add an amplitude (or a tuple of them, e.g. `amplitude + HC`)."""
        self._amplitude_set.add(amplitude)

    def __lshift__(self, amplitude) -> 'Model':
        self.add(amplitude)
        return self

    def construct(self) -> int:
        """Seal the basis. Returns the basis size."""
        basis_size = self._amplitude_set.construct()
        if self.verbose:
            print_basis_summary(self._amplitude_set)
        return basis_size

    def is_constructed(self) -> bool:
        return self._amplitude_set.is_constructed()

    def amplitude_set(self) -> AmplitudeSet:
        return self._amplitude_set

    def basis_size(self) -> int:
        return self._amplitude_set.basis_size()

    def basis_offset(self, index) -> int:
        return self._amplitude_set.basis_offset(index)

    def occupation(self, energy: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """
        Distribution function at the given energies.

        Fermi-Dirac at zero temperature is a step at the chemical potential
        (1/2 exactly at it). Bose-Einstein requires a finite temperature and
        energies strictly above the chemical potential.
        """
        energy = np.asarray(energy, dtype=float)
        x = energy - self.chemical_potential

        if self.statistics is Statistics.FERMI_DIRAC:
            if self.temperature == 0:
                result = np.where(x < 0, 1.0, np.where(x == 0, 0.5, 0.0))
            else:
                # 1/(e^x + 1) == (1 - tanh(x/2)) / 2
                result = 0.5 * (1.0 - np.tanh(x / (2.0 * self.temperature)))
        else:
            if self.temperature == 0:
                raise ConfigurationError(
                    "Bose-Einstein occupation is undefined at zero temperature"
                )
            if np.any(x <= 0):
                raise ConfigurationError(
                    f"Bose-Einstein occupation diverges for energies at or below "
                    f"the chemical potential {self.chemical_potential}"
                )
            result = 1.0 / np.expm1(x / self.temperature)

        if result.ndim == 0:
            return float(result)
        return result

    def __repr__(self):
        return (
            f"Model(amplitudes={len(self._amplitude_set)}, "
            f"statistics={self.statistics.name}, temperature={self.temperature}, "
            f"chemical_potential={self.chemical_potential})"
        )
