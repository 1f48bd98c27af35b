"""
PLONK Verifier
================

  0. 모양 검사: 공개 입력 수, 점이 G1 위에 있는지
  1. 트랜스크립트 재생 → β, γ, α, ζ, v, u
     (맨 앞에 검증 키 다이제스트와 공개 입력을 흡수한다)
  2. Z_H(ζ), L₁(ζ), PI(ζ)
  3. 선형화 커밋먼트 [D]₁ 와 상수 r₀  (round5.linearization 의 커밋먼트 버전)
  4. 일괄 열기 검사 한 번의 페어링

      [F]₁ = [t_lo] + ζⁿ[t_mid] + ζ²ⁿ[t_hi] + v([D] + r₀·G1)
             + v²[a] + v³[b] + v⁴[c] + v⁵[S_σ1] + v⁶[S_σ2]
      E    = r̄/Z_H(ζ) + v·r̄ + v²ā + ... + v⁶s̄_σ2 + u·z̄_ω

      e([W_ζ] + u[W_ζω], [τ]₂) == e(ζ[W_ζ] + uζω[W_ζω] + [F] + u[z] - E·G1, G2)

**재귀 가젯에서**:
  가젯은 회로 안에서 계산한 PI(ζ)를 pi_zeta로 넘긴다. 이때 공개 입력 리스트는
  트랜스크립트 재생에만 쓰이고, PI(ζ)는 회로 제약이 책임진다.
"""

import collections
import logging

from ivc.plonk.field import FR, G1, ec_mul, ec_add, ec_pairing
from ivc.plonk.transcript import Transcript
from ivc.plonk.permutation import K1, K2
from ivc.plonk.utils import vanishing_poly_eval, lagrange_basis_eval, public_input_poly_eval

logger = logging.getLogger(__name__)

Challenges = collections.namedtuple("Challenges", ["beta", "gamma", "alpha", "zeta", "v", "u"])

# prover 라운드 순서 그대로의 흡수 일정: (point | scalar, 증명 필드) 또는 (challenge, 이름)
TRANSCRIPT_SCHEDULE = (
    ("point", "a_comm"), ("point", "b_comm"), ("point", "c_comm"),
    ("challenge", "beta"), ("challenge", "gamma"),
    ("point", "z_comm"),
    ("challenge", "alpha"),
    ("point", "t_lo_comm"), ("point", "t_mid_comm"), ("point", "t_hi_comm"),
    ("challenge", "zeta"),
    ("scalar", "a_eval"), ("scalar", "b_eval"), ("scalar", "c_eval"),
    ("scalar", "s_sigma1_eval"), ("scalar", "s_sigma2_eval"), ("scalar", "z_omega_eval"),
    ("challenge", "v"),
    ("scalar", "r_eval"), ("point", "W_zeta_comm"), ("point", "W_zeta_omega_comm"),
    ("challenge", "u"),
)


def compute_challenges(proof, public_inputs, verifier_key):
    """증명 메시지로부터 Fiat-Shamir 챌린지를 재생한다.

    u는 verifier만 쓰므로 열기 증명까지 흡수한 뒤 뽑는다 (prover는 v에서 멈춘다).
    """
    transcript = Transcript()
    transcript.bind_circuit(verifier_key, list(public_inputs))
    drawn = {}
    for kind, name in TRANSCRIPT_SCHEDULE:
        label = name.encode()
        if kind == "challenge":
            drawn[name] = transcript.challenge_scalar(label)
        elif kind == "point":
            transcript.append_point(label, getattr(proof, name))
        else:
            transcript.append_scalar(label, getattr(proof, name))
    return Challenges(**drawn)


def _linearization_commitment(proof, vk, ch, l1_zeta, pi_zeta):
    """[D]₁ 와 r₀.  commit(r) = [D]₁ + r₀·G1."""
    a, b, c = proof.a_eval, proof.b_eval, proof.c_eval
    alpha, beta, gamma, zeta = ch.alpha, ch.beta, ch.gamma, ch.zeta

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

    terms = (
        (vk.q_m_comm, a * b),
        (vk.q_l_comm, a),
        (vk.q_r_comm, b),
        (vk.q_o_comm, c),
        (vk.q_c_comm, FR(1)),
        (proof.z_comm, z_scalar),
        (vk.s_sigma3_comm, FR(0) - sigma_factor * beta),
    )
    D = None
    for point, scalar in terms:
        term = ec_mul(point, scalar)
        D = term if D is None else ec_add(D, term)

    r_0 = pi_zeta - sigma_factor * (c + gamma) - alpha * alpha * l1_zeta
    return D, r_0


def verify(proof, public_inputs, verifier_key, srs, pi_zeta=None):
    """PLONK 증명을 검증한다.

    Args:
        proof: Proof
        public_inputs: 공개 입력 값 리스트
        verifier_key: VerifierKey
        srs: 검증 키를 만든 것과 같은 SRS
        pi_zeta: 이미 계산된 PI(ζ). None이면 public_inputs에서 계산한다.

    Returns:
        bool: 형식이 틀린 증명도 예외 없이 False.
    """
    vk = verifier_key
    public_inputs = list(public_inputs)
    if len(public_inputs) != vk.num_public_inputs:
        logger.debug("rejecting proof: %d public inputs, expected %d",
                     len(public_inputs), vk.num_public_inputs)
        return False
    if not proof.is_well_formed():
        logger.debug("rejecting malformed proof")
        return False

    n, omega = vk.n, vk.omega
    ch = compute_challenges(proof, public_inputs, vk)
    zeta, v, u = ch.zeta, ch.v, ch.u

    zh_zeta = vanishing_poly_eval(n, zeta)
    if zh_zeta == FR(0):
        return False
    l1_zeta = lagrange_basis_eval(0, n, omega, zeta)
    if pi_zeta is None:
        pi_zeta = public_input_poly_eval(public_inputs, n, omega, zeta)

    D, r_0 = _linearization_commitment(proof, vk, ch, l1_zeta, pi_zeta)

    zeta_n = zeta ** n
    F = ec_add(proof.t_lo_comm, ec_mul(proof.t_mid_comm, zeta_n))
    F = ec_add(F, ec_mul(proof.t_hi_comm, zeta_n * zeta_n))
    F = ec_add(F, ec_mul(D, v))

    r_eval = proof.r_eval
    e_scalar = r_eval / zh_zeta + v * r_eval
    power = v * v
    for comm, value in (
        (proof.a_comm, proof.a_eval),
        (proof.b_comm, proof.b_eval),
        (proof.c_comm, proof.c_eval),
        (vk.s_sigma1_comm, proof.s_sigma1_eval),
        (vk.s_sigma2_comm, proof.s_sigma2_eval),
    ):
        F = ec_add(F, ec_mul(comm, power))
        e_scalar = e_scalar + power * value
        power = power * v
    e_scalar = e_scalar + u * proof.z_omega_eval

    # [F] + v·r₀·G1 - E·G1 를 스칼라 하나로 합친다
    g1_scalar = v * r_0 - e_scalar

    lhs_point = ec_add(proof.W_zeta_comm, ec_mul(proof.W_zeta_omega_comm, u))
    rhs_point = ec_mul(proof.W_zeta_comm, zeta)
    rhs_point = ec_add(rhs_point, ec_mul(proof.W_zeta_omega_comm, u * zeta * omega))
    rhs_point = ec_add(rhs_point, F)
    rhs_point = ec_add(rhs_point, ec_mul(proof.z_comm, u))
    rhs_point = ec_add(rhs_point, ec_mul(G1, g1_scalar))

    return ec_pairing(srs.g2_powers[1], lhs_point) == ec_pairing(srs.g2_powers[0], rhs_point)
