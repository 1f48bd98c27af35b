"""
증인(Witness) 할당과 생성기
============================

증명에 필요한 배선 값 (a, b, c)을 만드는 과정:

  1. 호출자가 PartialWitness에 일부 타깃 값을 직접 넣는다
     (초기 상태, 단계 입력, 조건 플래그, 내부 증명, 검증 키).
  2. 빌더가 등록한 생성기(WitnessGenerator)들이 의존 타깃이 채워지는 대로
     나머지 타깃을 계산한다 (덧셈 결과, 상수, ζ, L_i(ζ), 검증 결과 플래그 ...).
  3. connect()로 묶인 타깃들은 같은 파티션(partition)을 공유하므로 값이 하나다.
     같은 파티션에 서로 다른 값이 들어오면 ConstraintUnsatisfied.
  4. 모든 행의 배선 값을 모아 게이트 방정식을 하나씩 확인한다.
     하나라도 어긋나면 ConstraintUnsatisfied (행 번호와 게이트 이름 포함).

증명 생성(prove)은 이 검사를 통과한 배선 값에 대해서만 수행된다.
"""

import logging

from ivc.errors import ConstraintUnsatisfied, ShapeMismatch
from ivc.plonk.field import FR, to_fr

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────
# 생성기 (Generators)
# ─────────────────────────────────────────────────────────────────────

class WitnessGenerator:
    """의존 타깃이 모두 채워지면 한 번 실행되어 출력 타깃 값을 돌려준다."""

    def dependencies(self):
        return []

    def run(self, witness):
        """Returns: [(target, FR), ...]"""
        raise NotImplementedError


class ConstantGenerator(WitnessGenerator):

    def __init__(self, target, value):
        self.target = target
        self.value = to_fr(value)

    def run(self, witness):
        return [(self.target, self.value)]


class SimpleGenerator(WitnessGenerator):
    """outputs = fn(*input_values) 형태의 산술 생성기."""

    def __init__(self, inputs, outputs, fn):
        self.inputs = list(inputs)
        self.outputs = list(outputs)
        self.fn = fn

    def dependencies(self):
        return self.inputs

    def run(self, witness):
        values = self.fn(*[witness.get(t) for t in self.inputs])
        if len(self.outputs) == 1:
            values = [values]
        return list(zip(self.outputs, values))


# ─────────────────────────────────────────────────────────────────────
# PartialWitness: 호출자가 채우는 값
# ─────────────────────────────────────────────────────────────────────

class PartialWitness:
    """호출자가 직접 지정하는 타깃 값과 증인 객체(내부 증명, 검증 키).

    한 번의 증명 시도에만 쓰이며 회로 데이터와 공유되지 않는다.
    """

    def __init__(self):
        self.target_values = {}
        self.proofs = {}
        self.verifier_keys = {}

    def set_target(self, target, value):
        value = to_fr(value)
        previous = self.target_values.get(target)
        if previous is not None and previous != value:
            raise ConstraintUnsatisfied(
                f"target {target} set twice with different values "
                f"({int(previous)} != {int(value)})",
                check="witness_assignment",
            )
        self.target_values[target] = value

    def set_targets(self, targets, values):
        targets = list(targets)
        values = list(values)
        if len(targets) != len(values):
            raise ShapeMismatch(
                f"expected {len(targets)} values, got {len(values)}",
                check="witness_assignment",
            )
        for target, value in zip(targets, values):
            self.set_target(target, value)

    def set_bool_target(self, bool_target, value):
        self.set_target(bool_target.target, FR(1) if value else FR(0))

    def set_proof_with_pis_target(self, proof_with_pis_target, artifact):
        """내부 증명 자리에 증명 + 공개 입력을 넣는다.

        증명의 형태가 타깃의 descriptor와 다르면 ShapeMismatch.
        """
        expected = proof_with_pis_target.descriptor.num_public_inputs
        if len(artifact.public_inputs) != expected:
            raise ShapeMismatch(
                f"inner proof has {len(artifact.public_inputs)} public inputs, "
                f"descriptor expects {expected}",
                check="inner_proof_shape",
            )
        if not artifact.proof.is_well_formed():
            raise ShapeMismatch(
                "inner proof is not a well-formed PLONK proof",
                check="inner_proof_shape",
            )
        self.set_targets(proof_with_pis_target.public_inputs, artifact.public_inputs)
        self.proofs[proof_with_pis_target.proof.index] = artifact.proof

    def set_verifier_data_target(self, verifier_data_target, verifier_key):
        """검증 키 자리에 커밋먼트 원소와 검증 키 객체를 넣는다."""
        elements = verifier_key.commitment()
        if len(elements) != verifier_data_target.width:
            raise ShapeMismatch(
                f"verifier key commitment has {len(elements)} elements, "
                f"target expects {verifier_data_target.width}",
                check="verifier_data_shape",
            )
        self.set_targets(verifier_data_target.elements, elements)
        self.verifier_keys[verifier_data_target.index] = verifier_key


# ─────────────────────────────────────────────────────────────────────
# PartitionWitness: 풀이 결과
# ─────────────────────────────────────────────────────────────────────

class PartitionWitness:
    """파티션 대표(representative) 기준으로 저장된 타깃 값."""

    def __init__(self, representatives, proofs, verifier_keys):
        self.representatives = representatives
        self.values = {}
        self.proofs = proofs
        self.verifier_keys = verifier_keys

    def get(self, target):
        return self.values.get(self.representatives[target])

    def contains(self, target):
        return self.representatives[target] in self.values

    def set(self, target, value):
        rep = self.representatives[target]
        value = to_fr(value)
        previous = self.values.get(rep)
        if previous is not None and previous != value:
            raise ConstraintUnsatisfied(
                f"copy constraint violated: target {target} is {int(previous)} "
                f"and {int(value)}",
                check="copy_constraint",
            )
        self.values[rep] = value

    def proof(self, index):
        return self.proofs.get(index)

    def verifier_key(self, index):
        return self.verifier_keys.get(index)


def generate_partial_witness(pw, representatives, generators):
    """PartialWitness에서 출발해 생성기를 고정점까지 돌린다."""
    witness = PartitionWitness(representatives, dict(pw.proofs), dict(pw.verifier_keys))
    for target, value in pw.target_values.items():
        witness.set(target, value)

    pending = list(generators)
    while pending:
        remaining = []
        for generator in pending:
            if all(witness.contains(t) for t in generator.dependencies()):
                for target, value in generator.run(witness):
                    witness.set(target, value)
            else:
                remaining.append(generator)
        if len(remaining) == len(pending):
            break
        pending = remaining

    logger.debug("witness generation left %d generators idle", len(pending))
    return witness


def generate_witness(prover_data, pw):
    """배선 값 (a, b, c)과 공개 입력 값을 만들고 모든 게이트를 확인한다.

    Returns:
        tuple: (a_vals, b_vals, c_vals, public_inputs)

    Raises:
        ConstraintUnsatisfied: 값이 없는 타깃, 복사 제약 충돌, 게이트 불만족
    """
    witness = generate_partial_witness(
        pw, prover_data.representatives, prover_data.generators
    )

    num_public_inputs = len(prover_data.public_inputs)
    columns = ([], [], [])
    for row, gate in enumerate(prover_data.rows):
        values = []
        for target in gate.wires:
            if target is None:
                values.append(FR(0))
                continue
            value = witness.get(target)
            if value is None:
                raise ConstraintUnsatisfied(
                    f"target {target} used by {gate.label} at row {row} was never set",
                    check=f"gate:{gate.label}",
                )
            values.append(value)
        # 공개 입력 행: PI(ωⁱ) = -xᵢ, xᵢ는 그 행의 c 배선 값
        pi = FR(0) - values[2] if row < num_public_inputs else FR(0)
        if not gate.check(*values, pi=pi):
            raise ConstraintUnsatisfied(
                f"gate {gate.label} at row {row} is not satisfied",
                check=f"gate:{gate.label}",
            )
        for column, value in zip(columns, values):
            column.append(value)

    public_inputs = [witness.get(t) for t in prover_data.public_inputs]
    a_vals, b_vals, c_vals = columns
    return a_vals, b_vals, c_vals, public_inputs
