"""
빌드된 회로 (CircuitData)와 증명 산출물 (ProofArtifact)
========================================================

CircuitBuilder.build()의 결과물. 한 번 만들어지면 읽기 전용이며
여러 체인/스레드가 참조로 공유한다. 증명마다 바뀌는 것은 PartialWitness 뿐이다.

  CircuitData
  ├── descriptor      CircuitDescriptor (형태)
  ├── verifier_key    VerifierKey (제약 구조 커밋먼트)
  ├── prover_data     행(게이트), 공개 입력 타깃, 파티션, 생성기
  ├── preprocessed    셀렉터/순열 다항식
  └── srs             공유 SRS

**더미 회로와 더미 증명**:
  base 단계에서는 검증할 이전 증명이 없다. 대신 같은 descriptor 형태의
  "더미 회로"(공개 입력 행과 no-op만 있는 회로)로 만든 증명을 넣는다.
  더미 회로는 공개 입력에 아무 제약도 걸지 않으므로 어떤 값으로도 증명할 수 있고,
  그래서 재귀 가젯은 base 단계에서도 같은 검증 경로를 그대로 실행할 수 있다.

사용 예시:
    >>> data = builder.build()
    >>> artifact = data.prove(pw)
    >>> data.verify(artifact)  # True
"""

import dataclasses
import functools
import logging
from typing import Tuple

from ivc.plonk.field import FR, to_fr
from ivc.plonk.prover import Proof, prove
from ivc.plonk.verifier import verify
from ivc.plonk.witness import PartialWitness, generate_witness

logger = logging.getLogger(__name__)


class ProverData:
    """증인 생성과 증명에 필요한 회로 내부 데이터.

    속성:
        rows: 패딩 포함 n개의 Gate
        public_inputs: 공개 입력 타깃 (행 순서)
        representatives: 타깃 → 파티션 대표
        generators: WitnessGenerator 리스트
    """

    def __init__(self, rows, public_inputs, representatives, generators):
        self.rows = rows
        self.public_inputs = public_inputs
        self.representatives = representatives
        self.generators = generators


@dataclasses.dataclass(frozen=True)
class ProofArtifact:
    """증명 + 공개 입력. 만들어진 뒤에는 바뀌지 않는다."""
    proof: Proof
    public_inputs: Tuple[FR, ...]

    def with_public_inputs(self, public_inputs):
        """공개 입력만 바꾼 새 산출물 (원본은 그대로)."""
        return ProofArtifact(self.proof, tuple(to_fr(x) for x in public_inputs))


class CircuitData:
    """빌드된 회로: 증명 생성과 검증의 진입점."""

    def __init__(self, descriptor, verifier_key, prover_data, preprocessed, srs):
        self.descriptor = descriptor
        self.verifier_key = verifier_key
        self.prover_data = prover_data
        self.preprocessed = preprocessed
        self.srs = srs

    def prove(self, pw):
        """PartialWitness로부터 증명을 만든다.

        Raises:
            ConstraintUnsatisfied: 증인이 회로 제약을 만족하지 못할 때
        """
        a_vals, b_vals, c_vals, public_inputs = generate_witness(self.prover_data, pw)
        proof = prove(a_vals, b_vals, c_vals, public_inputs, self.preprocessed, self.srs)
        return ProofArtifact(proof, tuple(public_inputs))

    def verify(self, artifact):
        """증명을 이 회로의 검증 키로 검증한다 (부작용 없음)."""
        return verify(artifact.proof, artifact.public_inputs, self.verifier_key, self.srs)


@functools.lru_cache(maxsize=None)
def dummy_circuit(descriptor):
    """descriptor 형태의 더미 회로 (descriptor마다 한 번 빌드)."""
    from ivc.plonk.builder import CircuitBuilder

    builder = CircuitBuilder(descriptor.config, goal_descriptor=descriptor)
    builder.add_virtual_public_input_arr(descriptor.num_public_inputs)
    while builder.num_gates() < descriptor.num_gates:
        builder.add_noop_gate()
    logger.info("building dummy circuit for %s", descriptor)
    return builder.build()


def dummy_proof(descriptor, verifier_key, placeholder_public_inputs):
    """base 단계용 자리표시 증명.

    공개 입력은 0으로 채우고, placeholder_public_inputs {위치: 값}을 덮어쓴 뒤
    마지막 W칸에 verifier_key의 커밋먼트를 넣는다.

    Args:
        descriptor: 재귀 가젯이 기대하는 형태
        verifier_key: 정규 회로의 VerifierKey (꼬리 슬롯 값)
        placeholder_public_inputs: {index: value}

    Returns:
        ProofArtifact: 더미 회로로 만든 실제 PLONK 증명
    """
    num_public_inputs = descriptor.num_public_inputs
    values = [FR(0)] * num_public_inputs
    for index, value in placeholder_public_inputs.items():
        values[index] = to_fr(value)
    vk_elements = verifier_key.commitment()
    values[num_public_inputs - len(vk_elements):] = vk_elements

    circuit = dummy_circuit(descriptor)
    pw = PartialWitness()
    pw.set_targets(circuit.prover_data.public_inputs, values)
    return circuit.prove(pw)
