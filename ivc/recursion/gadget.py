"""
조건부 재귀 검증 가젯 (Conditional Recursive Verifier Gadget)
==============================================================

회로 안에서 내부 증명 한 개를 "검증"하는 제약을 추가한다.
condition 값은 증인(witness) 선택일 뿐이라, 참/거짓 어느 쪽이든
추가되는 게이트와 배선은 완전히 같다 (회로 형태가 갈라지지 않음).

**회로 안에 들어가는 제약**:

  1. ζ^n, Z_H(ζ) = ζ^n - 1          제곱 degree_bits번 + 상수 덧셈
  2. 공개 입력 i마다 Lᵢ(ζ):
       n·Lᵢ·ζ - n·ωⁱ·Lᵢ - ωⁱ·Z_H(ζ) = 0     (게이트 한 행)
     그리고 acc = Σ xᵢ·Lᵢ(ζ),  PI(ζ) = -acc
     → 내부 증명의 공개 입력 "타깃"이 PI(ζ)를 결정한다.
  3. ok: 0/1 타깃,  condition·ok - condition = 0
     → condition = 1 이면 ok = 1 이어야 한다.
  4. (순환 검증에서만) 검증 키 꼬리 바인딩:
       condition · (inner_vkᵢ - vkᵢ) = 0
     → condition = 1 이면 내부 증명의 공개 입력 꼬리가
       바깥 회로 자신의 검증 키 커밋먼트와 같아야 한다.

**증인 쪽 검증 (VerificationGenerator)**:
  페어링 기반 KZG 검사는 회로 안에서 곱셈 게이트로 펼치지 않고 생성기 안에서
  네이티브로 수행한다. 생성기는 회로가 계산한 PI(ζ) = -acc 를 그대로 넣어
  verifier.verify를 호출하고, 다음이 모두 맞을 때만 ok = 1 을 낸다.
    - 페어링 검사 통과
    - 회로의 ζ 타깃 값이 트랜스크립트에서 재생한 ζ와 같음
    - 사용한 검증 키의 모양 (n, 공개 입력 수)이 descriptor와 같음
    - condition = 1 이면 검증 키 커밋먼트가 검증 키 타깃 값과 같음
  condition = 0 이면 같은 descriptor의 더미 회로 검증 키로 같은 경로를 실행한다.

  condition = 1 인데 내부 증명이 틀리면 ok = 0 이 되고, 3번 게이트가 깨져
  generate_witness가 ConstraintUnsatisfied를 던진다. 증명은 만들어지지 않는다.

**건전성 한계**:
  ok 와 ζ 타깃은 회로 제약으로는 페어링 결과에 묶이지 않는다. 값을 채우는 것은
  prover 쪽 생성기뿐이므로, VerificationGenerator를 건너뛰고 ok = 1, 임의의 ζ 를
  직접 넣는 prover는 틀린 내부 증명 위에서도 검증을 통과하는 바깥 증명을 만들 수 있다.
  회로가 보장하는 것은 PI(ζ) 계산, condition·ok = condition, 검증 키 꼬리 바인딩까지다.
  그래서 체인을 받는 쪽은 consistency.check_cyclic_proof_verifier_data로 각 증명을
  회로 밖에서 다시 검증한다. 학습용 구성이며 신뢰할 수 없는 prover를 상대로 한 재귀
  건전성은 제공하지 않는다.
"""

import logging

from ivc.errors import CircuitBuildError, ConstraintUnsatisfied, ShapeMismatch
from ivc.plonk.circuit_data import dummy_circuit
from ivc.plonk.field import FR, get_root_of_unity
from ivc.plonk.srs import SRS
from ivc.plonk.targets import BoolTarget
from ivc.plonk.utils import lagrange_basis_eval
from ivc.plonk.verifier import compute_challenges, verify
from ivc.plonk.witness import WitnessGenerator

logger = logging.getLogger(__name__)

MINUS_ONE = FR(0) - FR(1)


class ZetaGenerator(WitnessGenerator):
    """내부 증명의 트랜스크립트를 재생해 ζ 타깃을 채운다."""

    def __init__(self, block):
        self.block = block

    def dependencies(self):
        return [self.block.condition.target] + list(self.block.proof_with_pis.public_inputs)

    def run(self, witness):
        proof, public_inputs, verifier_key = self.block.resolve(witness)
        challenges = compute_challenges(proof, public_inputs, verifier_key)
        return [(self.block.proof_with_pis.proof.zeta, challenges.zeta)]


class LagrangeGenerator(WitnessGenerator):
    """Lᵢ(ζ) 값."""

    def __init__(self, target, zeta, index, n, omega):
        self.target = target
        self.zeta = zeta
        self.index = index
        self.n = n
        self.omega = omega

    def dependencies(self):
        return [self.zeta]

    def run(self, witness):
        value = lagrange_basis_eval(self.index, self.n, self.omega, witness.get(self.zeta))
        return [(self.target, value)]


class VerificationGenerator(WitnessGenerator):
    """내부 증명을 네이티브로 검증하고 ok 타깃을 채운다."""

    def __init__(self, block):
        self.block = block

    def dependencies(self):
        block = self.block
        return (
            [block.condition.target, block.proof_with_pis.proof.zeta, block.accumulator]
            + list(block.proof_with_pis.public_inputs)
            + list(block.verifier_data.elements)
        )

    def run(self, witness):
        block = self.block
        descriptor = block.descriptor
        proof, public_inputs, verifier_key = block.resolve(witness)

        checks = {
            "shape": (
                verifier_key.n == descriptor.num_gates
                and verifier_key.num_public_inputs == descriptor.num_public_inputs
            ),
            "zeta": (
                witness.get(block.proof_with_pis.proof.zeta)
                == compute_challenges(proof, public_inputs, verifier_key).zeta
            ),
        }
        if block.is_enabled(witness):
            expected = tuple(witness.get(t) for t in block.verifier_data.elements)
            checks["verifier_key"] = verifier_key.commitment() == expected
        if all(checks.values()):
            srs = SRS.for_degree(descriptor.srs_degree, descriptor.config.srs_seed)
            pi_zeta = FR(0) - witness.get(block.accumulator)
            checks["pairing"] = verify(proof, public_inputs, verifier_key, srs, pi_zeta=pi_zeta)

        failed = [name for name, passed in checks.items() if not passed]
        if failed:
            logger.debug("inner proof %d rejected: %s", block.proof_with_pis.proof.index, failed)
            return [(block.ok.target, FR(0))]
        return [(block.ok.target, FR(1))]


class VerificationBlock:
    """한 번의 (조건부) 재귀 검증에 쓰인 타깃 묶음."""

    def __init__(self, condition, proof_with_pis, verifier_data, descriptor):
        self.condition = condition
        self.proof_with_pis = proof_with_pis
        self.verifier_data = verifier_data
        self.descriptor = descriptor
        self.accumulator = None
        self.ok = None

    def is_enabled(self, witness):
        return witness.get(self.condition.target) == FR(1)

    def resolve(self, witness):
        """(증명, 공개 입력 값, 검증에 쓸 검증 키)를 증인에서 꺼낸다."""
        index = self.proof_with_pis.proof.index
        proof = witness.proof(index)
        if proof is None:
            raise ConstraintUnsatisfied(
                f"no proof was supplied for inner proof target {index}",
                check="inner_proof_missing",
            )
        public_inputs = [witness.get(t) for t in self.proof_with_pis.public_inputs]
        if self.is_enabled(witness):
            verifier_key = witness.verifier_key(self.verifier_data.index)
            if verifier_key is None:
                raise ConstraintUnsatisfied(
                    f"no verifier key was supplied for verifier data target "
                    f"{self.verifier_data.index}",
                    check="verifier_key_missing",
                )
        else:
            verifier_key = dummy_circuit(self.descriptor).verifier_key
        return proof, public_inputs, verifier_key


def _add_verification_block(builder, condition, proof_with_pis, verifier_data, descriptor):
    """가젯 공통부: ζ, PI(ζ), ok 제약과 생성기를 추가한다."""
    if proof_with_pis.descriptor != descriptor:
        raise ShapeMismatch(
            f"inner proof target was allocated for {proof_with_pis.descriptor}, "
            f"not {descriptor}",
            check="inner_proof_shape",
        )
    block = VerificationBlock(condition, proof_with_pis, verifier_data, descriptor)
    n = descriptor.num_gates
    omega = get_root_of_unity(n)
    zeta = proof_with_pis.proof.zeta
    builder.add_generator(ZetaGenerator(block))

    zeta_n = zeta
    for _ in range(descriptor.degree_bits):
        zeta_n = builder.mul(zeta_n, zeta_n)
    zh = builder.add_const(zeta_n, MINUS_ONE)

    accumulator = None
    omega_i = FR(1)
    for i, x in enumerate(proof_with_pis.public_inputs):
        lagrange = builder.add_virtual_target()
        builder.add_generator(LagrangeGenerator(lagrange, zeta, i, n, omega))
        builder.arithmetic_constraint(
            a=lagrange, b=zeta, c=zh,
            q_l=FR(0) - FR(n) * omega_i, q_o=FR(0) - omega_i, q_m=n,
            label=f"lagrange[{i}]",
        )
        term = builder.mul(x, lagrange)
        accumulator = term if accumulator is None else builder.add(accumulator, term)
        omega_i = omega_i * omega
    if accumulator is None:
        accumulator = builder.zero()
    block.accumulator = accumulator

    block.ok = builder.add_virtual_bool_target_safe()
    builder.add_generator(VerificationGenerator(block))
    builder.arithmetic_constraint(
        a=condition.target, b=block.ok.target, q_l=MINUS_ONE, q_m=1,
        label="recursive_verification",
    )
    return block


def verify_proof(builder, proof_with_pis, verifier_data, descriptor):
    """내부 증명을 무조건 검증한다."""
    condition = BoolTarget(builder.one())
    return _add_verification_block(builder, condition, proof_with_pis, verifier_data, descriptor)


def conditionally_verify_proof(builder, condition, proof_with_pis, verifier_data, descriptor):
    """condition이 참이면 verifier_data로, 거짓이면 더미 검증 키로 검증한다."""
    return _add_verification_block(builder, condition, proof_with_pis, verifier_data, descriptor)


def conditionally_verify_cyclic_proof_or_dummy(builder, condition, proof_with_pis, descriptor):
    """자기 자신과 같은 회로의 증명(또는 base 단계의 더미 증명)을 검증한다.

    검증 키는 builder에 이미 공개 입력으로 등록된 자기 자신의 커밋먼트를 쓴다.

    Raises:
        CircuitBuildError: 검증 키 공개 입력이 아직 등록되지 않았을 때
        ShapeMismatch: descriptor가 지금 빌드 중인 회로의 공개 입력 수나
                       내부 증명 타깃의 형태와 다를 때
    """
    verifier_data = builder.verifier_data_public_input
    if verifier_data is None:
        raise CircuitBuildError(
            "cyclic verification requires verifier data public inputs; "
            "call add_verifier_data_public_inputs() first",
            check="verifier_data_registration",
        )
    if descriptor.num_public_inputs != builder.num_public_inputs():
        raise ShapeMismatch(
            f"descriptor has {descriptor.num_public_inputs} public inputs, "
            f"circuit being built has {builder.num_public_inputs()}",
            check="public_input_count",
        )

    block = _add_verification_block(builder, condition, proof_with_pis, verifier_data, descriptor)

    width = verifier_data.width
    inner_tail = proof_with_pis.public_inputs[-width:]
    for i, (inner, own) in enumerate(zip(inner_tail, verifier_data.elements)):
        diff = builder.sub(inner, own)
        builder.arithmetic_constraint(
            a=condition.target, b=diff, q_m=1, label=f"verifier_key_binding[{i}]",
        )
    return block
