"""
Tests for Amplitude Module

Tests cover:
- Fixed and callback-valued amplitudes
- Hermitian conjugation (including double conjugation)
- The `amplitude + HC` shorthand
- Persisted representation
"""

import json

import numpy as np
import pytest

from tbsolver.amplitude import (
    Amplitude,
    AmplitudeCallback,
    ConjugatedCallback,
    FunctionCallback,
    HC,
)
from tbsolver.exceptions import SerializationError
from tbsolver.index import PhysicalIndex


# ==============================================================================
# Test Fixtures
# ==============================================================================

def phase_callback(to, from_):
    """Asymmetric callback so that argument swapping is observable."""
    return (1.0 + 0.5 * to[0]) * np.exp(1j * (0.3 * to[0] - 0.7 * from_[0]))


class MeanField(AmplitudeCallback):
    """Callback reading externally held feedback state."""

    def __init__(self):
        self.delta = 0.25 + 0.1j

    def evaluate(self, to, from_):
        return self.delta


# ==============================================================================
# Tests for Values
# ==============================================================================

class TestValue:
    """Tests for Amplitude.value()."""

    def test_fixed_value(self):
        amplitude = Amplitude(2.0 - 1.0j, [0], [1])

        assert amplitude.value() == 2.0 - 1.0j
        assert not amplitude.is_callback_dependent()
        assert amplitude.callback is None

    def test_indices_coerced(self):
        amplitude = Amplitude(1.0, (0, 1), PhysicalIndex(2, 3))

        assert amplitude.to_index == PhysicalIndex(0, 1)
        assert amplitude.from_index == PhysicalIndex(2, 3)

    def test_indices_read_only(self):
        amplitude = Amplitude(1.0, [0], [1])

        with pytest.raises(AttributeError):
            amplitude.to_index = PhysicalIndex(7)
        with pytest.raises(AttributeError):
            amplitude.from_index = [2]
        assert amplitude.to_index == PhysicalIndex(0)
        assert amplitude.from_index == PhysicalIndex(1)

    def test_plain_function_callback(self):
        amplitude = Amplitude(phase_callback, [2], [1])

        assert amplitude.is_callback_dependent()
        assert isinstance(amplitude.callback, FunctionCallback)
        assert np.isclose(amplitude.value(), phase_callback(PhysicalIndex(2), PhysicalIndex(1)))

    def test_callback_with_explicit_indices(self):
        amplitude = Amplitude(phase_callback, [2], [1])

        assert np.isclose(amplitude.value([4], [0]), phase_callback([4], [0]))

    def test_callback_reads_current_state(self):
        mean_field = MeanField()
        amplitude = Amplitude(mean_field, [0], [1])

        assert amplitude.value() == 0.25 + 0.1j
        mean_field.delta = -1.0
        assert amplitude.value() == -1.0

    def test_lambda_capturing_state(self):
        state = {'t': 1.0}
        amplitude = Amplitude(lambda to, from_: state['t'], [0], [1])

        state['t'] = 3.0
        assert amplitude.value() == 3.0

    def test_non_callable_function_callback_rejected(self):
        with pytest.raises(TypeError, match="callable"):
            FunctionCallback(3.0)


# ==============================================================================
# Tests for Hermitian Conjugation
# ==============================================================================

class TestHermitianConjugate:
    """Tests for hermitian_conjugate() and HC."""

    def test_fixed_value_conjugate(self):
        amplitude = Amplitude(1.0 + 2.0j, [0, 1], [3, 0])
        hc = amplitude.hermitian_conjugate()

        assert hc.to_index == PhysicalIndex(3, 0)
        assert hc.from_index == PhysicalIndex(0, 1)
        assert hc.value() == 1.0 - 2.0j

    def test_callback_conjugate_swaps_and_conjugates(self):
        amplitude = Amplitude(phase_callback, [2], [1])
        hc = amplitude.hermitian_conjugate()

        assert isinstance(hc.callback, ConjugatedCallback)
        assert np.isclose(hc.value(), np.conj(amplitude.value()))
        for to, from_ in [([0], [1]), ([3], [2]), ([5], [5])]:
            assert np.isclose(hc.value(to, from_), np.conj(phase_callback(from_, to)))

    @pytest.mark.parametrize("value", [1.0, 2.0 - 3.0j, phase_callback, MeanField()])
    def test_double_conjugation_is_identity(self, value):
        amplitude = Amplitude(value, [1, 0], [2, 1])
        twice = amplitude.hermitian_conjugate().hermitian_conjugate()

        assert twice.to_index == amplitude.to_index
        assert twice.from_index == amplitude.from_index
        for to, from_ in [([1], [2]), ([4], [0]), ([3], [3])]:
            assert np.isclose(twice.value(to, from_), amplitude.value(to, from_))

    def test_double_conjugation_unwraps_callback(self):
        mean_field = MeanField()
        amplitude = Amplitude(mean_field, [0], [1])
        twice = amplitude.hermitian_conjugate().hermitian_conjugate()

        assert twice.callback is mean_field

    def test_hc_shorthand(self):
        amplitude = Amplitude(1.0j, [0], [1])
        pair = amplitude + HC

        assert isinstance(pair, tuple) and len(pair) == 2
        assert pair[0] is amplitude
        assert pair[1].to_index == PhysicalIndex(1)
        assert pair[1].value() == -1.0j

    def test_add_other_type_unsupported(self):
        with pytest.raises(TypeError):
            Amplitude(1.0, [0], [1]) + 1.0

    def test_copy(self):
        amplitude = Amplitude(MeanField(), [0], [1])
        copied = amplitude.copy()

        assert copied is not amplitude
        assert copied.value() == amplitude.value()


# ==============================================================================
# Tests for the Persisted Representation
# ==============================================================================

class TestSerialization:
    """Tests for to_dict()/from_dict() and serialize()/deserialize()."""

    def test_record_fields(self):
        record = Amplitude(1.5 - 0.5j, [0, 1], [2]).to_dict()

        assert record == {
            'real': 1.5,
            'imag': -0.5,
            'to': [0, 1],
            'from': [2],
            'is_callback': False,
        }

    def test_json_restores_amplitude(self):
        amplitude = Amplitude(-0.3 + 0.2j, [4, 1], [4, 0])
        restored = Amplitude.deserialize(amplitude.serialize())

        assert restored.to_index == amplitude.to_index
        assert restored.from_index == amplitude.from_index
        assert restored.value() == amplitude.value()

    def test_callback_amplitude_cannot_be_serialized(self):
        amplitude = Amplitude(phase_callback, [0], [1])

        with pytest.raises(SerializationError, match="callback"):
            amplitude.to_dict()
        with pytest.raises(SerializationError):
            amplitude.serialize()

    def test_callback_record_cannot_be_restored(self):
        record = json.dumps({'real': 0, 'imag': 0, 'to': [0], 'from': [1], 'is_callback': True})

        with pytest.raises(SerializationError, match="callback"):
            Amplitude.deserialize(record)

    @pytest.mark.parametrize("text", [
        'not json',
        '[1, 2]',
        '{"real": 1.0, "to": [0], "from": [1]}',
        '{"real": 1.0, "imag": 0.0, "to": [-5], "from": [1]}',
    ])
    def test_malformed_records(self, text):
        with pytest.raises(SerializationError):
            Amplitude.deserialize(text)

    def test_str(self):
        assert str(Amplitude(1.0 + 2.0j, [0], [1])) == '(1.0, 2.0), {0}, {1}'
        assert str(Amplitude(phase_callback, [0], [1])) == '(callback), {0}, {1}'


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
