"""
재귀 테스트 공용 fixture

정규 회로 빌드와 증명은 수 초씩 걸리므로 세션 단위로 한 번만 만든다.
cyclic_circuit_for()가 프로세스 캐시를 쓰므로 라우트/CLI 테스트와도 공유된다.
"""

import pytest

from ivc.recursion.chain import ProofChain
from ivc.recursion.step import cyclic_circuit_for


@pytest.fixture(scope="session")
def accumulate_circuit():
    return cyclic_circuit_for("accumulate")


@pytest.fixture(scope="session")
def accumulate_reports(accumulate_circuit):
    """0 → +5 → +7 → +3 체인 (base + 2 단계)."""
    chain = ProofChain(accumulate_circuit)
    return chain.run([0], [(5,), (7,), (3,)])
