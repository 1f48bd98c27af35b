"""
회로 구성 테스트: circuit.py, builder.py, witness.py

테스트 범위:
  - Gate 방정식과 공개 입력 행
  - CircuitConfig / CircuitDescriptor 형태 계산
  - CircuitBuilder 산술 API가 만드는 증인 값
  - 복사 제약 / 증인 충돌 / 불만족 게이트 오류
  - 빌드 규칙 (검증 키 공개 입력 이중 등록, goal descriptor 불일치)
"""

import pytest

from ivc.errors import CircuitBuildError, ConstraintUnsatisfied, ShapeMismatch
from ivc.plonk.builder import CircuitBuilder
from ivc.plonk.circuit import Gate, CircuitConfig, CircuitDescriptor
from ivc.plonk.circuit_data import ProofArtifact
from ivc.plonk.field import FR
from ivc.plonk.prover import Proof
from ivc.plonk.witness import PartialWitness, generate_partial_witness, generate_witness


def _solve(builder, pw):
    """빌드 후 생성기를 돌려 PartitionWitness를 돌려준다."""
    data = builder.build()
    witness = generate_partial_witness(
        pw, data.prover_data.representatives, data.prover_data.generators
    )
    return data, witness


# ─────────────────────────────────────────────────────────────────────
# Gate
# ─────────────────────────────────────────────────────────────────────

class TestGate:
    def test_mul_gate(self):
        gate = Gate(0, 0, -1, 1, 0)
        assert gate.check(3, 4, 12)
        assert not gate.check(3, 4, 13)

    def test_add_const_gate(self):
        gate = Gate(1, 0, -1, 0, 5)
        assert gate.check(30, 0, 35)

    def test_public_input_row(self):
        gate = Gate.public_input(0)
        assert gate.wires == (None, None, 0)
        # PI(ωⁱ) = -xᵢ 이면 c = xᵢ 일 때만 만족
        assert gate.check(0, 0, 9, pi=FR(0) - FR(9))
        assert not gate.check(0, 0, 9, pi=FR(0) - FR(8))

    def test_noop_always_satisfied(self):
        assert Gate.noop().check(123, 456, 789)

    def test_selectors_are_fr(self):
        gate = Gate(1, -1, 0, 0, 7, label="sub")
        assert gate.selectors() == (FR(1), FR(-1), FR(0), FR(0), FR(7))
        assert "sub" in repr(gate)


# ─────────────────────────────────────────────────────────────────────
# Config / Descriptor
# ─────────────────────────────────────────────────────────────────────

class TestDescriptor:
    def test_default_config(self):
        config = CircuitConfig.standard_recursion_config()
        assert config == CircuitConfig()
        assert config.vk_commitment_width == 2
        assert config.min_degree_bits == 3

    def test_num_gates_and_srs_degree(self):
        d = CircuitDescriptor(CircuitConfig(), degree_bits=6, num_public_inputs=6)
        assert d.num_gates == 64
        assert d.srs_degree == 69

    def test_value_equality(self):
        a = CircuitDescriptor(CircuitConfig(), 4, 3)
        b = CircuitDescriptor(CircuitConfig(), 4, 3)
        assert a == b
        assert hash(a) == hash(b)
        assert a != CircuitDescriptor(CircuitConfig(srs_seed=1), 4, 3)

    def test_with_num_public_inputs(self):
        a = CircuitDescriptor(CircuitConfig(), 4, 3)
        b = a.with_num_public_inputs(5)
        assert b.num_public_inputs == 5
        assert a.num_public_inputs == 3


# ─────────────────────────────────────────────────────────────────────
# Builder: 형태
# ─────────────────────────────────────────────────────────────────────

class TestBuilderShape:
    def test_min_degree_bits(self):
        builder = CircuitBuilder(CircuitConfig())
        builder.add_virtual_public_input()
        assert builder.build_descriptor().degree_bits == 3

    def test_rounds_up_to_power_of_two(self):
        builder = CircuitBuilder(CircuitConfig())
        for _ in range(9):
            builder.add_noop_gate()
        assert builder.num_gates() == 9
        assert builder.build_descriptor().num_gates == 16

    def test_public_inputs_counted(self):
        builder = CircuitBuilder(CircuitConfig())
        builder.add_virtual_public_input_arr(3)
        assert builder.build_descriptor().num_public_inputs == 3

    def test_public_input_rows_come_first(self):
        builder = CircuitBuilder(CircuitConfig())
        x = builder.add_virtual_target()
        builder.mul(x, x)
        p = builder.add_virtual_public_input()
        data = builder.build()
        assert data.prover_data.rows[0].label == "public_input"
        assert data.prover_data.rows[0].wires[2] == p
        assert data.prover_data.rows[1].label == "mul"

    def test_constant_is_deduplicated(self):
        builder = CircuitBuilder(CircuitConfig())
        assert builder.constant(5) == builder.constant(5)
        assert builder.one() != builder.zero()
        assert builder.num_gates() == 3

    def test_goal_descriptor_mismatch(self):
        goal = CircuitDescriptor(CircuitConfig(), degree_bits=3, num_public_inputs=2)
        builder = CircuitBuilder(CircuitConfig(), goal_descriptor=goal)
        builder.add_virtual_public_input()
        with pytest.raises(ShapeMismatch) as exc:
            builder.build()
        assert exc.value.check == "circuit_shape"

    def test_verifier_data_registered_once(self):
        builder = CircuitBuilder(CircuitConfig())
        vd = builder.add_verifier_data_public_inputs()
        assert vd.width == 2
        assert builder.verifier_data_public_input is vd
        assert builder.public_inputs[-2:] == list(vd.elements)
        with pytest.raises(CircuitBuildError) as exc:
            builder.add_verifier_data_public_inputs()
        assert exc.value.check == "verifier_data_registration"

    def test_inner_proof_config_mismatch(self):
        builder = CircuitBuilder(CircuitConfig())
        other = CircuitDescriptor(CircuitConfig(srs_seed=7), 3, 1)
        with pytest.raises(ShapeMismatch):
            builder.add_virtual_proof_with_pis(other)

    def test_virtual_proof_targets(self):
        builder = CircuitBuilder(CircuitConfig())
        descriptor = CircuitDescriptor(CircuitConfig(), 3, 2)
        first = builder.add_virtual_proof_with_pis(descriptor)
        second = builder.add_virtual_proof_with_pis(descriptor)
        assert len(first.public_inputs) == 2
        assert first.descriptor == descriptor
        assert (first.proof.index, second.proof.index) == (0, 1)


# ─────────────────────────────────────────────────────────────────────
# Builder: 산술과 증인
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture(scope="module")
def solved():
    builder = CircuitBuilder(CircuitConfig())
    x = builder.add_virtual_public_input()
    y = builder.add_virtual_target()
    cond = builder.add_virtual_bool_target_safe()
    targets = {
        "add": builder.add(x, y),
        "sub": builder.sub(x, y),
        "mul": builder.mul(x, y),
        "add_const": builder.add_const(x, 10),
        "mul_const": builder.mul_const(x, 3),
        "neg": builder.neg(y),
        "mul_add": builder.mul_add(x, y, x),
        "select": builder.select(cond, x, y),
    }
    pw = PartialWitness()
    pw.set_target(x, 6)
    pw.set_target(y, 4)
    pw.set_bool_target(cond, True)
    data, witness = _solve(builder, pw)
    return data, witness, targets, pw


class TestBuilderArithmetic:
    @pytest.mark.parametrize("name,expected", [
        ("add", FR(10)),
        ("sub", FR(2)),
        ("mul", FR(24)),
        ("add_const", FR(16)),
        ("mul_const", FR(18)),
        ("neg", FR(-4)),
        ("mul_add", FR(30)),
        ("select", FR(6)),
    ])
    def test_values(self, solved, name, expected):
        _, witness, targets, _ = solved
        assert witness.get(targets[name]) == expected

    def test_all_gates_satisfied(self, solved):
        data, _, _, pw = solved
        a, b, c, public_inputs = generate_witness(data.prover_data, pw)
        assert len(a) == len(b) == len(c) == data.descriptor.num_gates
        assert public_inputs == [FR(6)]

    def test_select_false_branch(self):
        builder = CircuitBuilder(CircuitConfig())
        x = builder.add_virtual_target()
        y = builder.add_virtual_target()
        cond = builder.add_virtual_bool_target_safe()
        out = builder.select(cond, x, y)
        pw = PartialWitness()
        pw.set_target(x, 6)
        pw.set_target(y, 4)
        pw.set_bool_target(cond, False)
        _, witness = _solve(builder, pw)
        assert witness.get(out) == FR(4)

    def test_connect_propagates_value(self):
        builder = CircuitBuilder(CircuitConfig())
        x = builder.add_virtual_target()
        y = builder.add_virtual_target()
        builder.connect(x, y)
        z = builder.add_const(y, 1)
        pw = PartialWitness()
        pw.set_target(x, 41)
        _, witness = _solve(builder, pw)
        assert witness.get(y) == FR(41)
        assert witness.get(z) == FR(42)


# ─────────────────────────────────────────────────────────────────────
# 증인 오류
# ─────────────────────────────────────────────────────────────────────

class TestWitnessErrors:
    def test_copy_constraint_conflict(self, make_cubic_circuit):
        data, x, out = make_cubic_circuit()
        pw = PartialWitness()
        pw.set_target(x, 3)
        pw.set_target(out, 36)
        with pytest.raises(ConstraintUnsatisfied) as exc:
            data.prove(pw)
        assert exc.value.check == "copy_constraint"

    def test_set_target_twice(self):
        pw = PartialWitness()
        pw.set_target(0, 5)
        pw.set_target(0, 5)
        with pytest.raises(ConstraintUnsatisfied) as exc:
            pw.set_target(0, 6)
        assert exc.value.check == "witness_assignment"

    def test_set_targets_length(self):
        with pytest.raises(ShapeMismatch):
            PartialWitness().set_targets([0, 1], [5])

    def test_unset_target(self):
        builder = CircuitBuilder(CircuitConfig())
        x = builder.add_virtual_target()
        builder.mul(x, x)
        data = builder.build()
        with pytest.raises(ConstraintUnsatisfied) as exc:
            generate_witness(data.prover_data, PartialWitness())
        assert exc.value.check == "gate:mul"

    def test_non_boolean_flag(self):
        builder = CircuitBuilder(CircuitConfig())
        cond = builder.add_virtual_bool_target_safe()
        data = builder.build()
        pw = PartialWitness()
        pw.set_target(cond.target, 2)
        with pytest.raises(ConstraintUnsatisfied) as exc:
            generate_witness(data.prover_data, pw)
        assert exc.value.check == "gate:assert_bool"

    @pytest.mark.parametrize("x,y,ok", [(7, 7, True), (7, 8, False)])
    def test_assert_zero(self, x, y, ok):
        builder = CircuitBuilder(CircuitConfig())
        tx = builder.add_virtual_target()
        ty = builder.add_virtual_target()
        builder.assert_zero(builder.sub(tx, ty))
        data = builder.build()
        pw = PartialWitness()
        pw.set_target(tx, x)
        pw.set_target(ty, y)
        if ok:
            generate_witness(data.prover_data, pw)
            return
        with pytest.raises(ConstraintUnsatisfied) as exc:
            generate_witness(data.prover_data, pw)
        assert exc.value.check == "gate:assert_zero"

    def test_inner_proof_public_input_count(self):
        builder = CircuitBuilder(CircuitConfig())
        target = builder.add_virtual_proof_with_pis(CircuitDescriptor(CircuitConfig(), 3, 2))
        with pytest.raises(ShapeMismatch) as exc:
            PartialWitness().set_proof_with_pis_target(target, ProofArtifact(Proof(), (FR(1),)))
        assert exc.value.check == "inner_proof_shape"

    def test_inner_proof_malformed(self):
        builder = CircuitBuilder(CircuitConfig())
        target = builder.add_virtual_proof_with_pis(CircuitDescriptor(CircuitConfig(), 3, 2))
        artifact = ProofArtifact(Proof(), (FR(1), FR(2)))
        with pytest.raises(ShapeMismatch):
            PartialWitness().set_proof_with_pis_target(target, artifact)

    def test_error_context(self):
        err = ConstraintUnsatisfied("boom", check="gate:add").at_step(4)
        assert err.step == 4
        assert str(err) == "boom [step=4, check=gate:add]"
        # 이미 있는 단계 번호는 유지
        assert err.at_step(9).step == 4
