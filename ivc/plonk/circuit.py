"""
PLONK 회로 표현 (Circuit Representation)
==========================================

PLONK 산술화(arithmetization) 시스템의 기본 단위: 게이트, 회로 설정, 회로 형태.

**PLONK 게이트 구조**:
  각 게이트는 3개의 배선(wire) a, b, c와 5개의 셀렉터(selector)로 구성:

    q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C = 0

**게이트 유형별 셀렉터 설정** (CircuitBuilder가 생성):
  | 유형      | q_L | q_R | q_O | q_M | q_C | 의미              |
  |-----------|-----|-----|-----|-----|-----|-------------------|
  | 곱셈      |  0  |  0  | -1  |  1  |  0  | a·b = c           |
  | 덧셈      |  1  |  1  | -1  |  0  |  0  | a + b = c         |
  | 뺄셈      |  1  | -1  | -1  |  0  |  0  | a - b = c         |
  | 상수덧셈  |  1  |  0  | -1  |  0  |  k  | a + k = c         |
  | 상수고정  |  1  |  0  |  0  |  0  | -k  | a = k             |
  | 불리언    | -1  |  0  |  0  |  1  |  0  | a·a = a (a = b)   |
  | 공개입력  |  0  |  0  |  1  |  0  |  0  | c = x (PI로 처리) |
  | no-op     |  0  |  0  |  0  |  0  |  0  | (패딩)            |

**회로 형태 (CircuitDescriptor)**:
  재귀 검증 가젯이 "어떤 모양의 회로"의 증명을 검증할지 알기 위해 필요한
  외부 구조 정보: 게이트 수(2^degree_bits), 공개 입력 수, 설정.
  제약의 내용은 포함하지 않는다.
"""

import dataclasses

from ivc.plonk.field import FR, to_fr


class Gate:
    """PLONK 산술 게이트 한 행(row).

    게이트 방정식: q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C = 0

    속성:
        q_l, q_r, q_o, q_m, q_c: 셀렉터 (FR)
        wires: (a, b, c) 배선에 놓이는 타깃 번호. 쓰지 않는 배선은 None (값 0).
        label: 오류 메시지용 이름 (예: "mul", "vk_binding[0]")
    """

    def __init__(self, q_l, q_r, q_o, q_m, q_c, wires=(None, None, None), label="gate"):
        self.q_l = to_fr(q_l)
        self.q_r = to_fr(q_r)
        self.q_o = to_fr(q_o)
        self.q_m = to_fr(q_m)
        self.q_c = to_fr(q_c)
        self.wires = tuple(wires)
        self.label = label

    def check(self, a, b, c, pi=FR(0)):
        """게이트 제약이 만족되는지 확인한다.

        q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C + PI == 0 ?

        pi는 공개 입력 행에서만 0이 아니다 (PI(ωⁱ) = -xᵢ).
        """
        a, b, c = to_fr(a), to_fr(b), to_fr(c)
        result = (
            self.q_l * a
            + self.q_r * b
            + self.q_o * c
            + self.q_m * (a * b)
            + self.q_c
            + pi
        )
        return result == FR(0)

    def selectors(self):
        return (self.q_l, self.q_r, self.q_o, self.q_m, self.q_c)

    def __repr__(self):
        return (
            f"Gate({self.label}: q_L={int(self.q_l)}, q_R={int(self.q_r)}, "
            f"q_O={int(self.q_o)}, q_M={int(self.q_m)}, q_C={int(self.q_c)})"
        )

    @classmethod
    def public_input(cls, target):
        """공개 입력 행: q_O = 1, c = 공개 입력 타깃."""
        return cls(0, 0, 1, 0, 0, wires=(None, None, target), label="public_input")

    @classmethod
    def noop(cls):
        """패딩 행: 모든 셀렉터가 0이므로 항상 만족된다."""
        return cls(0, 0, 0, 0, 0, label="noop")


@dataclasses.dataclass(frozen=True)
class CircuitConfig:
    """회로 빌드 설정.

    속성:
        srs_seed: SRS τ 도출 시드. 같은 체인의 모든 회로가 공유해야 한다.
        vk_commitment_width: 검증 키 커밋먼트가 차지하는 필드 원소 수
                             (공개 입력 꼬리 슬롯 수).
        min_degree_bits: 도메인 크기의 하한 (n ≥ 2^min_degree_bits).
    """
    srs_seed: int = 1234
    vk_commitment_width: int = 2
    min_degree_bits: int = 3

    @classmethod
    def standard_recursion_config(cls):
        return cls()


@dataclasses.dataclass(frozen=True)
class CircuitDescriptor:
    """회로의 외부 형태 (불변).

    이 값만 알면 해당 형태의 회로에 대한 검증기(재귀 가젯)를 만들 수 있다.
    두 descriptor가 같다 == 모든 필드가 같다 (dataclass 동등성).
    """
    config: CircuitConfig
    degree_bits: int
    num_public_inputs: int

    @property
    def num_gates(self):
        """도메인 크기 n = 2^degree_bits (패딩 포함 전체 행 수)."""
        return 1 << self.degree_bits

    @property
    def srs_degree(self):
        """필요한 SRS 최대 차수. 블라인딩 때문에 t_hi, z 등이 n+5 차까지 간다."""
        return self.num_gates + 5

    def with_num_public_inputs(self, num_public_inputs):
        return dataclasses.replace(self, num_public_inputs=num_public_inputs)
