"""
다항식과 FFT
=============

prover와 KZG가 쓰는 계수 표현 다항식.

  Polynomial([c₀, c₁, ..., c_d])  =  c₀ + c₁·x + ... + c_d·x^d

계수는 FR로 보관하지만 곱셈, 나눗셈, FFT의 내부 루프는 정수 잉여(residue)로
계산한 뒤 마지막에 한 번만 FR로 감싼다. FR 객체를 매 연산마다 만드는 비용이
증명 시간의 대부분을 차지하기 때문이다.

**도메인 변환**:
  fft(coeffs, ω)    계수 → [p(1), p(ω), ..., p(ω^{n-1})]
  ifft(evals, ω)    평가값 → 계수 (보간)
  n은 2의 거듭제곱. 반복형 radix-2 (비트 반전 순서 후 버터플라이).

**나눗셈**:
  poly_div(a, b)              일반 긴 나눗셈, (몫, 나머지)
  p.divide_by_vanishing(n)    Z_H(x) = xⁿ - 1 로 나눈다. 나머지가 있으면 ValueError
"""

from ivc.plonk.field import FR, to_fr

_P = FR.field_modulus


def _residues(values):
    return [to_fr(v).n for v in values]


def _wrap(residues):
    return [FR(r % _P) for r in residues]


class Polynomial:
    """FR 위의 다항식 (계수 리스트, 최고차 0 계수는 잘라낸다).

    영 다항식은 coeffs == [FR(0)] 이고 차수는 0으로 취급한다.

    예시:
        >>> p = Polynomial([1, 2])          # 1 + 2x
        >>> (p * p).coeffs                   # [1, 4, 4]
        >>> p.evaluate(FR(3))                # FR(7)
    """

    def __init__(self, coeffs=None):
        coeffs = [to_fr(c) for c in coeffs] if coeffs else [FR(0)]
        while len(coeffs) > 1 and coeffs[-1].n == 0:
            coeffs.pop()
        self.coeffs = coeffs

    @property
    def degree(self):
        return len(self.coeffs) - 1

    def is_zero(self):
        return len(self.coeffs) == 1 and self.coeffs[0].n == 0

    def evaluate(self, point):
        """Horner 평가."""
        x = to_fr(point).n
        acc = 0
        for c in reversed(self.coeffs):
            acc = (acc * x + c.n) % _P
        return FR(acc)

    # ─────────────────────────────────────────────────────────────────
    # 산술
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _coerce(other):
        if isinstance(other, Polynomial):
            return other
        if isinstance(other, (int, FR)):
            return Polynomial([other])
        return None

    def _combine(self, other, sign):
        lhs = [c.n for c in self.coeffs]
        rhs = [c.n for c in other.coeffs]
        if len(lhs) < len(rhs):
            lhs.extend([0] * (len(rhs) - len(lhs)))
        for i, r in enumerate(rhs):
            lhs[i] += sign * r
        return Polynomial(_wrap(lhs))

    def __add__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._combine(other, 1)

    __radd__ = __add__

    def __sub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._combine(other, -1)

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other._combine(self, -1)

    def __neg__(self):
        return Polynomial(_wrap(-c.n for c in self.coeffs))

    def __mul__(self, other):
        if isinstance(other, (int, FR)):
            k = to_fr(other).n
            return Polynomial(_wrap(c.n * k for c in self.coeffs))
        if not isinstance(other, Polynomial):
            return NotImplemented
        lhs = [c.n for c in self.coeffs]
        rhs = [c.n for c in other.coeffs]
        out = [0] * (len(lhs) + len(rhs) - 1)
        for i, a in enumerate(lhs):
            if a:
                for j, b in enumerate(rhs):
                    out[i + j] += a * b
        return Polynomial(_wrap(out))

    __rmul__ = __mul__

    def __eq__(self, other):
        other = self._coerce(other)
        if other is None:
            return False
        return [c.n for c in self.coeffs] == [c.n for c in other.coeffs]

    __hash__ = None

    def __len__(self):
        return len(self.coeffs)

    def __repr__(self):
        terms = [
            f"{c.n}" if i == 0 else f"{c.n}*x^{i}"
            for i, c in enumerate(self.coeffs) if c.n
        ]
        return f"Poly({' + '.join(terms) or '0'})"

    def divide_by_vanishing(self, n):
        """Z_H(x) = xⁿ - 1 로 나눈 몫.

        xⁿ ≡ 1 을 이용한 합성 나눗셈: 위에서부터 qᵢ = c_{i+n} + q_{i+n}.

        Raises:
            ValueError: 나누어 떨어지지 않을 때 (도메인 위에서 0이 아닌 다항식)
        """
        coeffs = [c.n for c in self.coeffs]
        if len(coeffs) <= n:
            if any(coeffs):
                raise ValueError(f"polynomial of degree {self.degree} is not divisible by x^{n} - 1")
            return Polynomial.zero()
        quotient = [0] * (len(coeffs) - n)
        for i in range(len(quotient) - 1, -1, -1):
            upper = quotient[i + n] if i + n < len(quotient) else 0
            quotient[i] = (coeffs[i + n] + upper) % _P
        # 나머지 rᵢ = cᵢ + qᵢ  (i < n)
        for i in range(n):
            q = quotient[i] if i < len(quotient) else 0
            if (coeffs[i] + q) % _P:
                raise ValueError(f"polynomial is not divisible by x^{n} - 1")
        return Polynomial(_wrap(quotient))

    # ─────────────────────────────────────────────────────────────────
    # 생성자
    # ─────────────────────────────────────────────────────────────────

    @classmethod
    def zero(cls):
        return cls()

    @classmethod
    def one(cls):
        return cls([1])

    @classmethod
    def vanishing(cls, n):
        """xⁿ - 1"""
        return cls([_P - 1] + [0] * (n - 1) + [1])

    @classmethod
    def from_evaluations(cls, evals, omega):
        """도메인 {ωⁱ} 위의 평가값을 보간한다."""
        return cls(ifft(evals, omega))


# ─────────────────────────────────────────────────────────────────────
# FFT
# ─────────────────────────────────────────────────────────────────────

def _ntt(values, omega):
    """정수 잉여 리스트에 대한 제자리 radix-2 NTT."""
    n = len(values)
    if n & (n - 1):
        raise ValueError(f"FFT size must be a power of two, got {n}")
    a = list(values)

    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j |= bit
        if i < j:
            a[i], a[j] = a[j], a[i]

    size = 2
    while size <= n:
        half = size // 2
        w_step = pow(omega, n // size, _P)
        for start in range(0, n, size):
            w = 1
            for k in range(start, start + half):
                t = a[k + half] * w % _P
                a[k + half] = (a[k] - t) % _P
                a[k] = (a[k] + t) % _P
                w = w * w_step % _P
        size *= 2
    return a


def fft(coeffs, omega):
    """계수 → 평가값 [p(ω⁰), ..., p(ω^{n-1})]."""
    return [FR(v) for v in _ntt(_residues(coeffs), to_fr(omega).n)]


def ifft(evals, omega):
    """평가값 → 계수. ω⁻¹로 NTT 한 뒤 n으로 나눈다."""
    n = len(evals)
    omega_inv = pow(to_fr(omega).n, _P - 2, _P)
    n_inv = pow(n, _P - 2, _P)
    return [FR(v * n_inv % _P) for v in _ntt(_residues(evals), omega_inv)]


# ─────────────────────────────────────────────────────────────────────
# 긴 나눗셈
# ─────────────────────────────────────────────────────────────────────

def poly_div(a, b):
    """a = b·q + r 인 (q, r). 열기 증명의 (p(x) - y) / (x - ζ) 등에 쓴다.

    Raises:
        ValueError: b가 영 다항식일 때
    """
    if b.is_zero():
        raise ValueError("division by the zero polynomial")
    remainder = [c.n for c in a.coeffs]
    divisor = [c.n for c in b.coeffs]
    deg_b = len(divisor) - 1
    if len(remainder) - 1 < deg_b:
        return Polynomial.zero(), Polynomial(a.coeffs)

    lead_inv = pow(divisor[-1], _P - 2, _P)
    quotient = [0] * (len(remainder) - deg_b)
    for i in range(len(quotient) - 1, -1, -1):
        coeff = remainder[i + deg_b] * lead_inv % _P
        quotient[i] = coeff
        if coeff:
            for j, d in enumerate(divisor):
                if d:
                    remainder[i + j] = (remainder[i + j] - coeff * d) % _P
    return Polynomial(_wrap(quotient)), Polynomial(_wrap(remainder[:max(deg_b, 1)]))
