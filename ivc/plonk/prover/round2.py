"""
PLONK Prover Round 2: 순열 누적자 z(x) 커밋먼트
=================================================

  ┌─────────────────────────────────────────────────┐
  │  Verifier → Prover: β, γ  (Fiat-Shamir)       │
  │  Prover → Verifier: [z]₁                       │
  └─────────────────────────────────────────────────┘

  z(ω⁰) = 1
  z(ω^{i+1}) = z(ωⁱ) · ∏ (wᵢ + β·idᵢ + γ) / ∏ (wᵢ + β·σᵢ + γ)

  복사 제약이 모두 지켜지면 전체 곱이 1로 텔레스코핑된다.
  z는 Round 3/4에서 z(x), z(ωx) 두 곳에서 열리므로 블라인딩 계수 3개를 쓴다.

사용:
    이 모듈은 직접 호출하지 않고, prover.prove()를 통해 실행된다.
"""

from ivc.plonk.polynomial import Polynomial
from ivc.plonk.kzg import commit
from ivc.plonk.permutation import compute_accumulator
from ivc.plonk.prover.round1 import add_blinding


def execute(state):
    """Round 2를 실행한다 (z_poly, [z]₁ 기록)."""
    state.beta = state.transcript.challenge_scalar(b"beta")
    state.gamma = state.transcript.challenge_scalar(b"gamma")

    z_evals = compute_accumulator(
        state.a_vals, state.b_vals, state.c_vals,
        state.preprocessed.sigma, state.n, state.domain,
        state.beta, state.gamma,
    )
    z_poly = Polynomial.from_evaluations(z_evals, state.omega)
    state.z_poly = add_blinding(z_poly, Polynomial.vanishing(state.n), 3)

    state.proof.z_comm = commit(state.z_poly, state.srs)
    state.transcript.append_point(b"z_comm", state.proof.z_comm)
