"""
PLONK Prover Round 3: 몫 다항식 t(x) 커밋먼트
================================================

  ┌─────────────────────────────────────────────────┐
  │  Verifier → Prover: α  (Fiat-Shamir)           │
  │  Prover → Verifier: [t_lo]₁, [t_mid]₁, [t_hi]₁│
  └─────────────────────────────────────────────────┘

**세 가지 제약 항**:

  Term 1: 게이트 제약 (공개 입력 포함):
    q_L·a + q_R·b + q_O·c + q_M·a·b + q_C + PI

  Term 2: 순열 제약 (α 배수):
    α · [ (a + β·x + γ)(b + β·K1·x + γ)(c + β·K2·x + γ) · z(x)
        - (a + β·S_σ1 + γ)(b + β·S_σ2 + γ)(c + β·S_σ3 + γ) · z(ω·x) ]

  Term 3: 경계 제약 (α² 배수):
    α² · (z(x) - 1) · L₁(x)

  t(x) = (Term1 + Term2 + Term3) / Z_H(x)

  t의 차수는 약 3n+5 이므로 t = t_lo + xⁿ·t_mid + x²ⁿ·t_hi 로 나누어 커밋한다
  (블라인딩 때문에 t_hi는 n+5차까지 간다).

사용:
    이 모듈은 직접 호출하지 않고, prover.prove()를 통해 실행된다.
"""

from ivc.errors import ConstraintUnsatisfied
from ivc.plonk.field import FR
from ivc.plonk.polynomial import Polynomial
from ivc.plonk.kzg import commit
from ivc.plonk.permutation import K1, K2


def execute(state):
    """Round 3을 실행한다 (t_lo/t_mid/t_hi 다항식과 커밋먼트 기록)."""
    state.alpha = state.transcript.challenge_scalar(b"alpha")

    n = state.n
    omega = state.omega
    alpha, beta, gamma = state.alpha, state.beta, state.gamma
    pp = state.preprocessed
    a, b, c, z = state.a_poly, state.b_poly, state.c_poly, state.z_poly

    # z(ω·x): 계수 cᵢ → ωⁱ·cᵢ
    z_omega_coeffs = []
    omega_power = FR(1)
    for coeff in z.coeffs:
        z_omega_coeffs.append(coeff * omega_power)
        omega_power = omega_power * omega
    z_omega = Polynomial(z_omega_coeffs)

    x_poly = Polynomial([FR(0), FR(1)])
    gamma_poly = Polynomial([gamma])

    # L₁(x): 첫 번째 Lagrange 기저 (ω⁰에서 1, 나머지 도메인 점에서 0)
    l1 = Polynomial.from_evaluations([FR(1)] + [FR(0)] * (n - 1), omega)

    gate_term = (
        pp.q_l_poly * a + pp.q_r_poly * b + pp.q_o_poly * c
        + pp.q_m_poly * (a * b) + pp.q_c_poly + state.pi_poly
    )

    perm_num = (
        (a + x_poly * beta + gamma_poly)
        * (b + x_poly * (beta * K1) + gamma_poly)
        * (c + x_poly * (beta * K2) + gamma_poly)
        * z
    )
    perm_den = (
        (a + pp.s_sigma1_poly * beta + gamma_poly)
        * (b + pp.s_sigma2_poly * beta + gamma_poly)
        * (c + pp.s_sigma3_poly * beta + gamma_poly)
        * z_omega
    )
    perm_term = (perm_num - perm_den) * alpha

    boundary_term = (z - Polynomial.one()) * l1 * (alpha * alpha)

    constraint = gate_term + perm_term + boundary_term
    try:
        t_poly = constraint.divide_by_vanishing(n)
    except ValueError as e:
        raise ConstraintUnsatisfied(
            "constraint polynomial is not divisible by Z_H(x)",
            check="quotient",
        ) from e

    t_coeffs = list(t_poly.coeffs)
    t_coeffs.extend([FR(0)] * (3 * n - len(t_coeffs)))
    state.t_lo_poly = Polynomial(t_coeffs[:n])
    state.t_mid_poly = Polynomial(t_coeffs[n:2 * n])
    state.t_hi_poly = Polynomial(t_coeffs[2 * n:])

    for name in ("t_lo", "t_mid", "t_hi"):
        comm = commit(getattr(state, f"{name}_poly"), state.srs)
        setattr(state.proof, f"{name}_comm", comm)
        state.transcript.append_point(f"{name}_comm".encode(), comm)
