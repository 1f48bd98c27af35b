"""
PLONK Prover
=============

증인 배선 값에서 증명을 만든다. 라운드마다 모듈 하나:

  round1  [a]₁ [b]₁ [c]₁, PI(x)          블라인딩된 배선 다항식
  round2  β, γ → [z]₁                    순열 누적자
  round3  α → [t_lo]₁ [t_mid]₁ [t_hi]₁   몫 다항식 (제약 불만족이면 ConstraintUnsatisfied)
  round4  ζ → ā b̄ c̄ s̄_σ1 s̄_σ2 z̄_ω
  round5  v → r̄, [W_ζ]₁ [W_ζω]₁          선형화 + 일괄 열기

트랜스크립트는 라운드 전에 검증 키 다이제스트와 공개 입력을 흡수한다
(Transcript.bind_circuit). 그래서 같은 배선이라도 다른 회로의 증명으로는 쓸 수 없다.
"""

import logging

from ivc.plonk.field import FR, ec_is_on_curve_g1
from ivc.plonk.transcript import Transcript
from ivc.plonk.prover import round1, round2, round3, round4, round5

logger = logging.getLogger(__name__)

PROOF_POINTS = (
    "a_comm", "b_comm", "c_comm", "z_comm",
    "t_lo_comm", "t_mid_comm", "t_hi_comm",
    "W_zeta_comm", "W_zeta_omega_comm",
)
PROOF_SCALARS = (
    "a_eval", "b_eval", "c_eval",
    "s_sigma1_eval", "s_sigma2_eval", "z_omega_eval", "r_eval",
)

ROUNDS = (round1, round2, round3, round4, round5)


class Proof:
    """G1 커밋먼트 9개 (PROOF_POINTS)와 FR 평가값 7개 (PROOF_SCALARS)."""

    def __init__(self):
        for name in PROOF_POINTS + PROOF_SCALARS:
            setattr(self, name, None)

    def is_well_formed(self):
        """모든 점이 G1 위에 있고 모든 평가값이 FR인지 (모양만 본다)."""
        return (
            all(ec_is_on_curve_g1(getattr(self, name)) for name in PROOF_POINTS)
            and all(isinstance(getattr(self, name), FR) for name in PROOF_SCALARS)
        )

    def copy(self):
        clone = Proof()
        clone.__dict__.update(self.__dict__)
        return clone


class ProverState:
    """라운드 사이에 공유되는 값. 라운드 모듈이 속성을 채워 나간다.

    입력: a_vals, b_vals, c_vals, public_inputs, preprocessed, srs
    라운드 결과: *_poly, beta, gamma, alpha, zeta, v, proof
    """

    def __init__(self, a_vals, b_vals, c_vals, public_inputs, preprocessed, srs):
        self.a_vals = a_vals
        self.b_vals = b_vals
        self.c_vals = c_vals
        self.public_inputs = list(public_inputs)
        self.preprocessed = preprocessed
        self.srs = srs

        self.n = preprocessed.n
        self.omega = preprocessed.omega
        self.domain = preprocessed.domain

        self.transcript = Transcript()
        self.transcript.bind_circuit(preprocessed.verifier_key, self.public_inputs)

        self.a_poly = self.b_poly = self.c_poly = None
        self.z_poly = self.pi_poly = None
        self.t_lo_poly = self.t_mid_poly = self.t_hi_poly = None
        self.beta = self.gamma = self.alpha = self.zeta = self.v = None

        self.proof = Proof()

    def build_proof(self):
        return self.proof


def prove(a_vals, b_vals, c_vals, public_inputs, preprocessed, srs):
    """배선 값 (모든 게이트를 이미 만족, witness.generate_witness 참고)으로 증명을 만든다.

    Raises:
        ConstraintUnsatisfied: 제약 다항식이 Z_H로 나누어 떨어지지 않을 때 (round3)
    """
    state = ProverState(a_vals, b_vals, c_vals, public_inputs, preprocessed, srs)
    for rnd in ROUNDS:
        rnd.execute(state)
    logger.debug("proved n=%d with %d public inputs", state.n, len(state.public_inputs))
    return state.build_proof()
