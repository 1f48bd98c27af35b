"""
KZG 공개 파라미터 (SRS)
========================

  g1_powers = [G1, τ·G1, ..., τ^d·G1]
  g2_powers = [G2, τ·G2]

정규 회로, 더미 회로, 재귀 가젯의 네이티브 검증이 서로의 커밋먼트를 검사하려면
같은 τ로 만든 SRS를 써야 한다. 그래서 τ는 CircuitConfig.srs_seed에서 결정론적으로
도출하고, (차수, 시드)마다 한 번만 만들어 캐시한다 (SRS.for_degree).

시드에서 τ를 얻으므로 이 SRS는 학습/테스트용이다. 시드를 아는 사람은 거짓 증명을 만들 수 있다.
"""

import functools
import hashlib
import logging
import secrets

from ivc.plonk.field import FR, G1, G2, ec_mul, CURVE_ORDER

logger = logging.getLogger(__name__)


def _tau_from_seed(seed):
    digest = hashlib.sha256(f"ivc-srs:{seed}".encode()).digest()
    return int.from_bytes(digest, "big") % CURVE_ORDER


class SRS:
    """max_degree 차 이하 다항식을 커밋할 수 있는 SRS. 만들어진 뒤에는 읽기 전용."""

    def __init__(self, g1_powers, g2_powers, max_degree):
        self.g1_powers = g1_powers
        self.g2_powers = g2_powers
        self.max_degree = max_degree

    @classmethod
    def generate(cls, max_degree, seed=None):
        """seed가 None이면 τ를 무작위로 뽑는다."""
        if seed is None:
            tau = FR(secrets.randbelow(CURVE_ORDER - 1) + 1)
        else:
            tau = FR(_tau_from_seed(seed))

        g1_powers = []
        power = FR(1)
        for _ in range(max_degree + 1):
            g1_powers.append(ec_mul(G1, power))
            power = power * tau

        logger.debug("generated SRS with max_degree=%d", max_degree)
        return cls(g1_powers, [G2, ec_mul(G2, tau)], max_degree)

    @classmethod
    def for_degree(cls, max_degree, seed):
        """프로세스 안에서 공유되는 SRS."""
        return _cached_srs(max_degree, seed)


@functools.lru_cache(maxsize=None)
def _cached_srs(max_degree, seed):
    return SRS.generate(max_degree, seed=seed)
