"""
순열 인자 (copy constraint)
============================

배선 위치 3n개 (a: 0..n-1, b: n..2n-1, c: 2n..3n-1)를 서로 겹치지 않는
세 코셋 H, K1·H, K2·H 의 원소로 이름 붙인다.

    id(a, i) = ωⁱ      id(b, i) = K1·ωⁱ      id(c, i) = K2·ωⁱ

σ는 CircuitBuilder가 타깃 파티션마다 만든 순환이다 (builder._build_sigma).
σ가 값이 같은 위치들만 돌리면 누적자

    z(ω⁰) = 1
    z(ωⁱ⁺¹) = z(ωⁱ) · ∏ (w + β·id + γ) / (w + β·σ(id) + γ)

가 한 바퀴 돌아 다시 1이 된다.
"""

from ivc.plonk.field import FR

K1 = FR(2)
K2 = FR(3)

_COSETS = (FR(1), K1, K2)


def position_label(position, n, domain):
    """배선 위치 → 코셋 원소."""
    column, row = divmod(position, n)
    return _COSETS[column] * domain[row]


def build_permutation_polynomials(sigma, n, domain):
    """S_σ1, S_σ2, S_σ3 의 도메인 위 평가값 (각 길이 n)."""
    labels = [position_label(sigma[pos], n, domain) for pos in range(3 * n)]
    return labels[:n], labels[n:2 * n], labels[2 * n:]


def compute_accumulator(a_vals, b_vals, c_vals, sigma, n, domain, beta, gamma):
    """순열 누적자 z의 평가값 [z(ω⁰), ..., z(ω^{n-1})]."""
    sigmas = build_permutation_polynomials(sigma, n, domain)
    wires = (a_vals, b_vals, c_vals)

    numerators = []
    denominators = []
    for i in range(n - 1):
        num = FR(1)
        den = FR(1)
        for coset, values, s in zip(_COSETS, wires, sigmas):
            num = num * (values[i] + beta * coset * domain[i] + gamma)
            den = den * (values[i] + beta * s[i] + gamma)
        numerators.append(num)
        denominators.append(den)

    z = [FR(1)]
    for num, den_inv in zip(numerators, batch_inverse(denominators)):
        z.append(z[-1] * num * den_inv)
    return z


def batch_inverse(values):
    """Montgomery 일괄 역원. 0이 섞이면 안 된다."""
    prefix = []
    acc = FR(1)
    for v in values:
        prefix.append(acc)
        acc = acc * v
    if not values:
        return []
    inv = FR(1) / acc
    result = [None] * len(values)
    for i in reversed(range(len(values))):
        result[i] = inv * prefix[i]
        inv = inv * values[i]
    return result
