"""
공개 입력 배치 테스트: [initial, current, counter, condition, verifier_key]
"""

import pytest

from ivc.errors import CircuitBuildError, ShapeMismatch
from ivc.plonk.builder import CircuitBuilder
from ivc.plonk.circuit import CircuitConfig
from ivc.plonk.field import FR
from ivc.recursion.layout import PublicInputLayout, StepPublicInputs


@pytest.fixture
def layout():
    return PublicInputLayout(state_width=2, vk_width=2)


class TestIndices:
    def test_counts(self, layout):
        assert layout.num_public_inputs == 8
        assert layout.counter_index == 4
        assert layout.condition_index == 5
        assert layout.verifier_key_slice == slice(6, 8)

    def test_single_field_state(self):
        layout = PublicInputLayout(state_width=1, vk_width=2)
        assert layout.num_public_inputs == 6
        assert layout.verifier_key_slice == slice(4, 6)


class TestUnpack:
    def test_unpack_values(self, layout):
        values = [FR(v) for v in (0, 1, 2, 3, 3, 1, 11, 12)]
        assert layout.unpack(values) == StepPublicInputs(
            initial_state=(0, 1),
            current_state=(2, 3),
            counter=3,
            condition=True,
            verifier_key=(11, 12),
        )

    def test_condition_false(self, layout):
        assert layout.unpack([0] * 8).condition is False

    def test_wrong_count(self, layout):
        with pytest.raises(ShapeMismatch) as exc:
            layout.unpack([0] * 7)
        assert exc.value.check == "public_input_layout"

    def test_read_targets(self, layout):
        split = layout.read_targets(range(100, 108))
        assert split.initial_state == (100, 101)
        assert split.counter == 104
        assert split.verifier_key == (106, 107)


class TestBasePlaceholders:
    def test_initial_state_only(self, layout):
        assert layout.base_placeholders([4, 9]) == {0: 4, 1: 9}

    def test_wrong_width(self, layout):
        with pytest.raises(ShapeMismatch):
            layout.base_placeholders([4])


class TestRegister:
    def test_registration_order(self, layout):
        builder = CircuitBuilder(CircuitConfig())
        own = layout.register(builder)
        expected = (
            list(own.initial_state) + list(own.current_state)
            + [own.counter, own.condition.target] + list(own.verifier_key.elements)
        )
        assert builder.public_inputs == expected
        assert builder.verifier_data_public_input is own.verifier_key

    def test_commitment_width_mismatch(self, layout):
        builder = CircuitBuilder(CircuitConfig(vk_commitment_width=3))
        with pytest.raises(ShapeMismatch):
            layout.register(builder)

    def test_register_once(self, layout):
        builder = CircuitBuilder(CircuitConfig())
        layout.register(builder)
        with pytest.raises(CircuitBuildError):
            layout.register(builder)
