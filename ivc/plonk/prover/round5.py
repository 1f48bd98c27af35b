"""
PLONK Prover Round 5: 선형화와 일괄 열기
=========================================

  Verifier → Prover: v
  Prover → Verifier: r̄, [W_ζ]₁, [W_ζω]₁

**선형화 다항식 r(x)**:
  Round 3의 제약 다항식에서 Round 4로 이미 연 값은 스칼라로 바꾸고
  q_*, z, S_σ3 만 다항식으로 남긴다. r(ζ) = t(ζ)·Z_H(ζ).

    게이트  ā·b̄·q_M + ā·q_L + b̄·q_R + c̄·q_O + q_C + PI(ζ)
    순열    α(ā+βζ+γ)(b̄+βK1ζ+γ)(c̄+βK2ζ+γ)·z
            - α(ā+βs̄1+γ)(b̄+βs̄2+γ)·z̄_ω·(β·S_σ3 + c̄ + γ)
    경계    α²·L₁(ζ)·(z - 1)

  verifier.verify는 이 식의 커밋먼트 부분 [D]₁과 상수 r₀를 따로 재구성한다.

**일괄 열기**:
  W_ζ  = open(t_lo + ζⁿ·t_mid + ζ²ⁿ·t_hi + v·r + v²·a + v³·b + v⁴·c + v⁵·S_σ1 + v⁶·S_σ2, ζ)
  W_ζω = open(z, ζ·ω)
"""

from ivc.plonk.kzg import create_witness
from ivc.plonk.permutation import K1, K2
from ivc.plonk.utils import lagrange_basis_eval


def linearization(state):
    """r(x)를 만든다 (Round 1~4 결과와 α, β, γ, ζ 사용)."""
    proof = state.proof
    pp = state.preprocessed
    alpha, beta, gamma, zeta = state.alpha, state.beta, state.gamma, state.zeta
    a, b, c = proof.a_eval, proof.b_eval, proof.c_eval

    l1_zeta = lagrange_basis_eval(0, state.n, state.omega, zeta)
    pi_zeta = state.pi_poly.evaluate(zeta)

    z_scalar = (
        alpha
        * (a + beta * zeta + gamma)
        * (b + beta * K1 * zeta + gamma)
        * (c + beta * K2 * zeta + gamma)
        + alpha * alpha * l1_zeta
    )
    sigma_factor = (
        alpha
        * (a + beta * proof.s_sigma1_eval + gamma)
        * (b + beta * proof.s_sigma2_eval + gamma)
        * proof.z_omega_eval
    )
    constant = pi_zeta - sigma_factor * (c + gamma) - alpha * alpha * l1_zeta

    return (
        pp.q_m_poly * (a * b)
        + pp.q_l_poly * a
        + pp.q_r_poly * b
        + pp.q_o_poly * c
        + pp.q_c_poly
        + state.z_poly * z_scalar
        - pp.s_sigma3_poly * (sigma_factor * beta)
        + constant
    )


def execute(state):
    state.v = v = state.transcript.challenge_scalar(b"v")
    zeta = state.zeta
    pp = state.preprocessed

    r_poly = linearization(state)
    state.proof.r_eval = r_poly.evaluate(zeta)

    zeta_n = zeta ** state.n
    batched = state.t_lo_poly + state.t_mid_poly * zeta_n + state.t_hi_poly * (zeta_n * zeta_n)
    power = v
    for poly in (r_poly, state.a_poly, state.b_poly, state.c_poly,
                 pp.s_sigma1_poly, pp.s_sigma2_poly):
        batched = batched + poly * power
        power = power * v

    state.proof.W_zeta_comm = create_witness(batched, zeta, state.srs)
    state.proof.W_zeta_omega_comm = create_witness(state.z_poly, zeta * state.omega, state.srs)
