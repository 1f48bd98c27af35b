"""
스칼라 필드와 BN254 곡선 연산
==============================

증명 백엔드가 쓰는 대수 도구를 한곳에 모은 얇은 래퍼.

  FR        BN254 스칼라 필드. 배선 값, 공개 입력, 상태 원소는 모두 FR이다.
  G1, G2    KZG 커밋먼트와 페어링 검사를 위한 그룹
  ω         2의 거듭제곱 크기 도메인 H = {1, ω, ..., ω^(n-1)} 의 생성자

재귀 체인은 한 단계마다 증명 생성과 검증을 여러 번 돌리므로 py_ecc의
optimized_bn128 (사영 좌표 (x, y, z), 무한원점은 z = 0)을 쓴다.
사영 좌표는 표현이 유일하지 않아서 점 비교는 항상 ec_eq로 한다.

    >>> P = ec_mul(G1, FR(5))
    >>> ec_eq(P, ec_add(ec_mul(G1, 2), ec_mul(G1, 3)))
    True
"""

from py_ecc.fields import bn128_FQ
from py_ecc import optimized_bn128 as bn128


class FR(bn128_FQ):
    """곡선 위수 p 를 법으로 하는 원소. p - 1 = 2^28 · (홀수)."""
    field_modulus = bn128.curve_order


CURVE_ORDER = bn128.curve_order

# G1 좌표가 속하는 베이스 필드
FQ = bn128.FQ
FQ2 = bn128.FQ2


def to_fr(value):
    return value if isinstance(value, FR) else FR(value)


G1 = bn128.G1
G2 = bn128.G2
Z1 = bn128.Z1


def ec_mul(point, scalar):
    """scalar · point. scalar는 int 또는 FR."""
    if isinstance(scalar, FR):
        scalar = int(scalar)
    return bn128.multiply(point, scalar % CURVE_ORDER)


def ec_add(p1, p2):
    return bn128.add(p1, p2)


def ec_neg(point):
    return bn128.neg(point)


def ec_eq(p1, p2):
    return bn128.eq(p1, p2)


def ec_is_inf(point):
    return bn128.is_inf(point)


def ec_is_on_curve_g1(point):
    """증명 모양 검사용: FQ 3-튜플이고 곡선 위에 있는지."""
    if not isinstance(point, tuple) or len(point) != 3:
        return False
    if not all(isinstance(coord, FQ) for coord in point):
        return False
    return bn128.is_on_curve(point, bn128.b)


def ec_normalize(point):
    """아핀 (x, y), 무한원점은 None. 해싱과 직렬화는 이 표현을 기준으로 한다."""
    if bn128.is_inf(point):
        return None
    return bn128.normalize(point)


def g1_from_affine(x, y):
    return (FQ(x), FQ(y), FQ.one())


def g2_from_affine(x, y):
    """x, y 는 각각 [c0, c1] 계수 쌍."""
    return (FQ2(x), FQ2(y), FQ2.one())


def ec_pairing(g2_point, g1_point):
    """e(g1_point, g2_point). py_ecc 인자 순서를 따라 G2가 먼저 온다."""
    return bn128.pairing(g2_point, g1_point)


MAX_TWO_ADICITY = 28
_MULTIPLICATIVE_GENERATOR = FR(5)


def get_root_of_unity(n):
    """n차 원시 단위근 ω = 5^((p-1)/n).

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^28 보다 클 때
    """
    if n < 1 or n & (n - 1):
        raise ValueError(f"domain size {n} is not a power of two")
    if n > (1 << MAX_TWO_ADICITY):
        raise ValueError(f"domain size {n} exceeds 2^{MAX_TWO_ADICITY}")
    if n == 1:
        return FR(1)
    return _MULTIPLICATIVE_GENERATOR ** ((CURVE_ORDER - 1) // n)


def get_roots_of_unity(n):
    """[1, ω, ..., ω^(n-1)]"""
    omega = get_root_of_unity(n)
    roots = [FR(1)]
    for _ in range(n - 1):
        roots.append(roots[-1] * omega)
    return roots
