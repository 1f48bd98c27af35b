"""
회로 타깃(Target) 타입
========================

타깃은 회로 안의 "값이 들어갈 자리"이다. 빌드 시에는 번호(int)로만 존재하고,
증명 시 PartialWitness와 생성기(generator)가 값을 채운다.

  - Target: 필드 원소 하나 (int 번호)
  - BoolTarget: 0/1 제약이 걸린 타깃
  - ProofTarget: 내부 증명 한 개의 자리. 회로 안에서는 평가점 ζ만 배선으로
                 드러나고, 증명 본체는 증인(witness) 쪽 객체로 전달된다.
  - ProofWithPublicInputsTarget: 내부 증명 + 그 공개 입력 타깃들 + 기대 형태
  - VerifierCircuitTarget: 검증 키 커밋먼트 원소 타깃들
"""

import dataclasses
from typing import Tuple

from ivc.plonk.circuit import CircuitDescriptor


@dataclasses.dataclass(frozen=True)
class BoolTarget:
    target: int


@dataclasses.dataclass(frozen=True)
class ProofTarget:
    index: int
    zeta: int


@dataclasses.dataclass(frozen=True)
class ProofWithPublicInputsTarget:
    proof: ProofTarget
    public_inputs: Tuple[int, ...]
    descriptor: CircuitDescriptor


@dataclasses.dataclass(frozen=True)
class VerifierCircuitTarget:
    index: int
    elements: Tuple[int, ...]

    @property
    def width(self):
        return len(self.elements)
