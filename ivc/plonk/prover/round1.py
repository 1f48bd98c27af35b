"""
PLONK Prover Round 1: 배선(Witness) 다항식 커밋먼트
=====================================================

  ┌─────────────────────────────────────────────────┐
  │  Prover → Verifier: [a]₁, [b]₁, [c]₁          │
  └─────────────────────────────────────────────────┘

**과정**:
  1. 공개 입력 다항식 PI(x) 구성 (PI(ωⁱ) = -xᵢ)
  2. 배선 값 (a, b, c)을 IFFT로 보간
  3. 블라인딩: a'(x) = a(x) + (b₁ + b₂·x)·Z_H(x)
     도메인 위에서는 Z_H = 0 이라 값이 변하지 않고, 도메인 밖의 값은 무작위가 된다.
  4. KZG 커밋 후 트랜스크립트에 추가

사용:
    이 모듈은 직접 호출하지 않고, prover.prove()를 통해 실행된다.
"""

import secrets

from ivc.plonk.field import FR, CURVE_ORDER
from ivc.plonk.polynomial import Polynomial
from ivc.plonk.kzg import commit
from ivc.plonk.utils import public_input_polynomial


def execute(state):
    """Round 1을 실행한다.

    Args:
        state: ProverState: a_vals, b_vals, c_vals를 읽고,
               pi_poly, a_poly, b_poly, c_poly와 커밋먼트를 기록한다.
    """
    n = state.n
    omega = state.omega

    # 공개 입력 행 i (q_O = 1)에서 c(ωⁱ) + PI(ωⁱ) = 0
    state.pi_poly = public_input_polynomial(state.public_inputs, n, omega)

    zh = Polynomial.vanishing(n)
    for wire, values in (("a", state.a_vals), ("b", state.b_vals), ("c", state.c_vals)):
        poly = add_blinding(Polynomial.from_evaluations(values, omega), zh, 2)
        setattr(state, f"{wire}_poly", poly)
        comm = commit(poly, state.srs)
        setattr(state.proof, f"{wire}_comm", comm)
        state.transcript.append_point(f"{wire}_comm".encode(), comm)


def add_blinding(poly, zh, num_blinds):
    """poly(x) + (r₀ + r₁·x + ...)·Z_H(x),  rᵢ ← 무작위 FR."""
    blind = Polynomial([FR(secrets.randbelow(CURVE_ORDER)) for _ in range(num_blinds)])
    return poly + blind * zh
