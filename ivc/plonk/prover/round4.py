"""
PLONK Prover Round 4: ζ에서의 평가값
=====================================

  Verifier → Prover: ζ
  Prover → Verifier: ā, b̄, c̄, s̄_σ1, s̄_σ2, z̄_ω

  z̄_ω = z(ζ·ω) 는 순열 제약의 z(ω·x) 항을 ζ에서 확인하는 데 쓴다.
  S_σ3와 q_* 는 평가하지 않는다. Round 5의 선형화에서 커밋먼트로 남는다.

재귀 가젯의 ZetaGenerator는 같은 ζ를 트랜스크립트 재생으로 다시 얻는다.
"""

# (증명 필드, 다항식을 고르는 함수, ζ·ω에서 평가하는지)
EVALUATIONS = (
    ("a_eval", lambda state: state.a_poly, False),
    ("b_eval", lambda state: state.b_poly, False),
    ("c_eval", lambda state: state.c_poly, False),
    ("s_sigma1_eval", lambda state: state.preprocessed.s_sigma1_poly, False),
    ("s_sigma2_eval", lambda state: state.preprocessed.s_sigma2_poly, False),
    ("z_omega_eval", lambda state: state.z_poly, True),
)


def execute(state):
    state.zeta = state.transcript.challenge_scalar(b"zeta")
    shifted = state.zeta * state.omega

    for name, select, at_shifted in EVALUATIONS:
        value = select(state).evaluate(shifted if at_shifted else state.zeta)
        setattr(state.proof, name, value)
        state.transcript.append_scalar(name.encode(), value)
