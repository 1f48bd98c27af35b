"""
회로 형태 고정점 (Circuit Descriptor Stabilizer)
=================================================

"자기 자신과 같은 형태의 증명을 검증하는 회로"의 형태를 찾는다.

  define(builder, None)     재귀 가젯 없이 빌드        → d₀
  define(builder, d₀)       d₀ 형태의 증명을 검증      → d₁
  define(builder, d₁)       d₁ 형태의 증명을 검증      → d₂
  ...
  dₖ == dₖ₋₁ 이면 dₖ 가 고정점이다.

가젯의 게이트 수는 degree_bits와 공개 입력 수에만 의존하고, 빌드는 2의 거듭제곱
행 수로 패딩하므로 보통 두세 번 안에 같은 형태가 반복된다.
max_rounds 안에 반복되지 않으면 단계 회로가 형태 경계에 너무 가까운 것이므로
StabilizationFailure로 중단한다 (재시도하지 않음).

형태 계산만 하므로 커밋/SRS 생성 없이 build_descriptor()를 쓴다.
"""

import logging

from ivc.errors import StabilizationFailure
from ivc.plonk.builder import CircuitBuilder

logger = logging.getLogger(__name__)


def descriptor_of(config, define, inner_descriptor):
    builder = CircuitBuilder(config)
    define(builder, inner_descriptor)
    return builder.build_descriptor()


def stabilize_descriptor(config, define, max_rounds=3):
    """define의 형태 고정점을 구한다.

    Args:
        config: CircuitConfig
        define: define(builder, inner_descriptor): inner_descriptor가 None이면
                재귀 가젯 없이, 아니면 그 형태의 증명을 검증하도록 회로를 정의한다.
        max_rounds: 가젯을 넣고 다시 빌드하는 최대 횟수

    Returns:
        CircuitDescriptor: define(builder, d)의 형태가 d 자신인 d

    Raises:
        StabilizationFailure: max_rounds 안에 수렴하지 않을 때
    """
    descriptor = descriptor_of(config, define, None)
    logger.debug("stabilizer round 0: %s", descriptor)
    for round_index in range(1, max_rounds + 1):
        next_descriptor = descriptor_of(config, define, descriptor)
        logger.debug("stabilizer round %d: %s", round_index, next_descriptor)
        if next_descriptor == descriptor:
            logger.info(
                "circuit shape stabilized after %d rounds: 2^%d gates, %d public inputs",
                round_index, descriptor.degree_bits, descriptor.num_public_inputs,
            )
            return descriptor
        descriptor = next_descriptor
    raise StabilizationFailure(
        f"circuit shape did not reach a fixed point within {max_rounds} rounds "
        f"(last shape {descriptor})",
        check="descriptor_fixed_point",
    )
