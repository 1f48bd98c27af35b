"""
단계별 소요 시간 기록
======================

전역 타이머나 print 대신, 체인의 각 단계가 자기 TimingSpan 리스트를 돌려준다.

    >>> timer = StepTimer()
    >>> with timer.span("prove"):
    ...     artifact = circuit.prove(pw)
    >>> timer.spans  # [TimingSpan(name='prove', seconds=...)]
"""

import dataclasses
import logging
import time
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class TimingSpan:
    name: str
    seconds: float

    def to_dict(self):
        return {"name": self.name, "seconds": round(self.seconds, 6)}


class StepTimer:
    """한 단계 안에서 이름 붙은 구간들의 벽시계 시간을 모은다."""

    def __init__(self):
        self.spans = []

    @contextmanager
    def span(self, name):
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.spans.append(TimingSpan(name, elapsed))
            logger.debug("%s took %.3fs", name, elapsed)

    @property
    def total_seconds(self):
        return sum(s.seconds for s in self.spans)
