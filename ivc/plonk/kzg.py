"""
KZG 커밋먼트
=============

  commit(p)              C = p(τ)·G1 = Σ cᵢ·[τⁱ]₁
  create_witness(p, z)   π = q(τ)·G1,  q(x) = (p(x) - p(z)) / (x - z)
  verify_opening(...)    e(C - y·G1, G2) == e(π, [τ]₂ - z·G2)

회로의 커밋먼트는 셀렉터(0, 1, -1 계수)가 대부분이라 commit은 그런 항을
스칼라 곱 없이 더한다. 열기 몫은 (x - z)로의 합성 나눗셈(Horner)으로 구한다.
"""

from ivc.plonk.field import (
    FR, G1, Z1, CURVE_ORDER, to_fr, ec_mul, ec_add, ec_neg, ec_pairing,
)
from ivc.plonk.polynomial import Polynomial


def commit(poly, srs):
    """Raises: ValueError (차수가 SRS를 넘을 때)"""
    if poly.degree > srs.max_degree:
        raise ValueError(
            f"polynomial degree {poly.degree} exceeds SRS max degree {srs.max_degree}"
        )
    result = Z1
    for coeff, base in zip(poly.coeffs, srs.g1_powers):
        c = coeff.n
        if c == 0:
            continue
        if c == 1:
            term = base
        elif c == CURVE_ORDER - 1:
            term = ec_neg(base)
        else:
            term = ec_mul(base, c)
        result = ec_add(result, term)
    return result


def opening_quotient(poly, point):
    """(p(x) - p(z)) / (x - z) 와 p(z).

    위에서부터 qᵢ₋₁ = cᵢ + z·qᵢ 로 내려오면 마지막 값이 p(z)이다.
    """
    z = to_fr(point).n
    coeffs = [c.n for c in poly.coeffs]
    quotient = [0] * max(len(coeffs) - 1, 1)
    carry = 0
    for i in range(len(coeffs) - 1, 0, -1):
        carry = (coeffs[i] + z * carry) % CURVE_ORDER
        quotient[i - 1] = carry
    value = (coeffs[0] + z * carry) % CURVE_ORDER
    return Polynomial(quotient), FR(value)


def create_witness(poly, point, srs):
    """p를 point에서 여는 증명 π."""
    quotient, _ = opening_quotient(poly, point)
    return commit(quotient, srs)


def verify_opening(commitment, proof, point, evaluation, srs):
    """p(point) == evaluation 인지 페어링으로 확인한다."""
    g2, tau_g2 = srs.g2_powers[0], srs.g2_powers[1]
    shifted_g2 = ec_add(tau_g2, ec_neg(ec_mul(g2, to_fr(point))))
    lhs_g1 = ec_add(commitment, ec_neg(ec_mul(G1, to_fr(evaluation))))
    return ec_pairing(g2, lhs_g1) == ec_pairing(shifted_g2, proof)
