"""
도메인 위의 작은 계산들
========================

prover, verifier, 재귀 가젯이 같은 식을 쓰도록 한곳에 모았다.

**공개 입력 인코딩**:
  공개 입력 xᵢ는 i번째 행에 놓이고 그 행의 게이트는 q_O = 1 뿐이다.
  게이트 식 c(ωⁱ) + PI(ωⁱ) = 0 이 c(ωⁱ) = xᵢ 를 강제하도록 PI(ωⁱ) = -xᵢ.

      PI(x) = -Σ xᵢ·Lᵢ(x)
      Lᵢ(ζ) = ωⁱ·(ζⁿ - 1) / (n·(ζ - ωⁱ))

  재귀 가젯의 Lagrange 게이트는 마지막 식을 곱셈 형태로 제약한다.
"""

from ivc.plonk.field import FR, to_fr
from ivc.plonk.polynomial import Polynomial


def vanishing_poly_eval(n, zeta):
    """Z_H(ζ) = ζⁿ - 1"""
    return to_fr(zeta) ** n - FR(1)


def lagrange_basis_eval(i, n, omega, zeta):
    """Lᵢ(ζ). ζ = ωⁱ 이면 1, 도메인의 다른 점이면 0."""
    zeta = to_fr(zeta)
    omega_i = omega ** i
    if zeta == omega_i:
        return FR(1)
    return vanishing_poly_eval(n, zeta) * omega_i / (FR(n) * (zeta - omega_i))


def public_input_polynomial(pub_inputs, n, omega):
    """PI(x) (계수 표현).

    Raises:
        ValueError: 공개 입력이 도메인보다 많을 때
    """
    if len(pub_inputs) > n:
        raise ValueError(f"{len(pub_inputs)} public inputs do not fit a domain of size {n}")
    if not pub_inputs:
        return Polynomial.zero()
    evals = [FR(0) - to_fr(x) for x in pub_inputs]
    evals.extend([FR(0)] * (n - len(evals)))
    return Polynomial.from_evaluations(evals, omega)


def public_input_poly_eval(pub_inputs, n, omega, zeta):
    """PI(ζ) (다항식을 만들지 않고)."""
    total = FR(0)
    for i, x in enumerate(pub_inputs):
        total = total + to_fr(x) * lagrange_basis_eval(i, n, omega, zeta)
    return FR(0) - total


def next_power_of_2(n):
    return 1 if n <= 1 else 1 << (n - 1).bit_length()


def log2_exact(n):
    if n < 1 or n & (n - 1):
        raise ValueError(f"{n} is not a power of two")
    return n.bit_length() - 1
