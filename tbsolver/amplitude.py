"""
Amplitude Module

This module contains the Amplitude class, one entry a_{to,from} of a
bilinear Hamiltonian

    H = sum_{ij} a_{ij} c_i^dagger c_j

where i is the 'to' index and j the 'from' index. The value is either a
fixed complex number or is produced on demand by a callback, which lets
self-consistent models feed updated parameters into the Hamiltonian
between diagonalizations.
"""

import abc
import json
from typing import Callable, Optional, Tuple

from .exceptions import SerializationError
from .index import PhysicalIndex


class AmplitudeCallback(abc.ABC):
    """
    Capability producing an amplitude value for a pair of indices.

    Subclasses implement evaluate(). Callbacks are expected to be pure:
    feedback state is read from whatever the callback captured, never
    written by it.
    """

    @abc.abstractmethod
    def evaluate(self, to: PhysicalIndex, from_: PhysicalIndex) -> complex:
        """Return the amplitude value for the given indices."""

    def copy(self) -> 'AmplitudeCallback':
        """
        Return an equivalent callback.

        The default shares the callback object, since evaluation is pure.
        Subclasses holding private mutable state override this.
        """
        return self

    def __call__(self, to, from_) -> complex:
        return complex(self.evaluate(to, from_))


class FunctionCallback(AmplitudeCallback):
    """Adapt a plain callable f(to, from_) -> complex."""

    def __init__(self, function: Callable[[PhysicalIndex, PhysicalIndex], complex]):
        if not callable(function):
            raise TypeError(f"Expected a callable, got {type(function).__name__}")
        self.function = function

    def evaluate(self, to, from_):
        return self.function(to, from_)

    def __eq__(self, other):
        if not isinstance(other, FunctionCallback):
            return NotImplemented
        return self.function is other.function

    def __hash__(self):
        return hash(self.function)

    def __repr__(self):
        name = getattr(self.function, '__name__', repr(self.function))
        return f"FunctionCallback({name})"


class ConjugatedCallback(AmplitudeCallback):
    """
    Hermitian conjugate of another callback.

    evaluate(to, from_) returns conj(wrapped.evaluate(from_, to)).
    """

    def __init__(self, wrapped: AmplitudeCallback):
        self.wrapped = wrapped

    def evaluate(self, to, from_):
        return complex(self.wrapped.evaluate(from_, to)).conjugate()

    def copy(self):
        return ConjugatedCallback(self.wrapped.copy())

    def __repr__(self):
        return f"ConjugatedCallback({self.wrapped!r})"


def as_callback(callback) -> AmplitudeCallback:
    """Wrap plain callables, pass AmplitudeCallback instances through."""
    if isinstance(callback, AmplitudeCallback):
        return callback
    return FunctionCallback(callback)


def conjugate_callback(callback: AmplitudeCallback) -> AmplitudeCallback:
    # Conjugating twice gives back the original callback object
    if isinstance(callback, ConjugatedCallback):
        return callback.wrapped
    return ConjugatedCallback(callback)


class _HermitianConjugate:
    """Marker enabling the `amplitude + HC` shorthand."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'HC'


HC = _HermitianConjugate()


class Amplitude:
    """
    Single Hamiltonian entry a_{to,from}.

    Parameters
    ----------
    value : complex or callable or AmplitudeCallback
        Fixed amplitude, or a callback f(to, from_) evaluated on demand
    to_index : PhysicalIndex or sequence of int
        Index of the created state (row of the Hamiltonian)
    from_index : PhysicalIndex or sequence of int
        Index of the annihilated state (column of the Hamiltonian)

    Examples
    --------
    >>> a = Amplitude(-1.0, [0], [1])
    >>> a.value()
    (-1+0j)
    >>> forward, backward = a + HC
    >>> backward.to_index, backward.from_index
    (PhysicalIndex({1}), PhysicalIndex({0}))
    """

    __slots__ = ('_to_index', '_from_index', '_value', '_callback')

    def __init__(self, value, to_index, from_index):
        self._to_index = PhysicalIndex.coerce(to_index)
        self._from_index = PhysicalIndex.coerce(from_index)
        if callable(value):
            self._callback = as_callback(value)
            self._value = 0j
        else:
            self._callback = None
            self._value = complex(value)

    @property
    def to_index(self) -> PhysicalIndex:
        return self._to_index

    @property
    def from_index(self) -> PhysicalIndex:
        return self._from_index

    @property
    def callback(self) -> Optional[AmplitudeCallback]:
        return self._callback

    def is_callback_dependent(self) -> bool:
        return self._callback is not None

    def value(self, to=None, from_=None) -> complex:
        """
        Evaluate the amplitude.

        Returns the fixed value when no callback is set, otherwise calls the
        callback with the given indices (defaulting to this amplitude's own
        indices).
        """
        if self._callback is None:
            return self._value
        to = self.to_index if to is None else PhysicalIndex.coerce(to)
        from_ = self.from_index if from_ is None else PhysicalIndex.coerce(from_)
        return self._callback(to, from_)

    def hermitian_conjugate(self) -> 'Amplitude':
        """Amplitude with indices swapped and value conjugated."""
        if self._callback is None:
            value = self._value.conjugate()
        else:
            value = conjugate_callback(self._callback)
        return Amplitude(value, self.from_index, self.to_index)

    def copy(self) -> 'Amplitude':
        if self._callback is None:
            return Amplitude(self._value, self.to_index, self.from_index)
        return Amplitude(self._callback.copy(), self.to_index, self.from_index)

    def __add__(self, other) -> Tuple['Amplitude', 'Amplitude']:
        if other is HC:
            return self, self.hermitian_conjugate()
        return NotImplemented

    # ==============================
    # Persisted representation
    # ==============================

    def to_dict(self) -> dict:
        """
        Plain-data representation of the amplitude.

        Raises
        ------
        SerializationError
            If the amplitude is callback-backed, since the callback
            behaviour cannot be stored
        """
        if self._callback is not None:
            raise SerializationError(
                f"Cannot serialize callback-backed amplitude {self.to_index} <- "
                f"{self.from_index}"
            )
        return {
            'real': self._value.real,
            'imag': self._value.imag,
            'to': list(self.to_index),
            'from': list(self.from_index),
            'is_callback': False,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Amplitude':
        """
        Rebuild an amplitude from to_dict() output.

        Raises
        ------
        SerializationError
            If the record marks a callback-backed amplitude or is malformed
        """
        if not isinstance(data, dict):
            raise SerializationError("Amplitude record must be a mapping")
        if data.get('is_callback', False):
            raise SerializationError(
                "Serialized amplitude is callback-backed; the callback "
                "cannot be restored"
            )
        try:
            value = complex(data['real'], data['imag'])
            return cls(value, data['to'], data['from'])
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"Malformed amplitude record: {e}") from e

    def serialize(self) -> str:
        """JSON text form of to_dict()."""
        return json.dumps(self.to_dict())

    @classmethod
    def deserialize(cls, text: str) -> 'Amplitude':
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Malformed amplitude record: {e}") from e
        return cls.from_dict(data)

    def __str__(self):
        if self._callback is not None:
            value_text = '(callback)'
        else:
            value_text = f"({self._value.real}, {self._value.imag})"
        return f"{value_text}, {self.to_index}, {self.from_index}"

    def __repr__(self):
        return f"Amplitude({self})"
