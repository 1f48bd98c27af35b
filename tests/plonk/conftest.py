"""
PLONK 테스트 공용 fixture

x^3 + x + 5 = out 회로 (x 비공개, out 공개):
  row 0   public_input   c = out
  row 1   mul            x · x = x2
  row 2   mul            x2 · x = x3
  row 3   add            x3 + x = s
  row 4   add_const      s + 5 = y        (y ↔ out 복사 제약)
  row 5.. noop           n = 8 까지 패딩
"""

import pytest

from ivc.plonk.builder import CircuitBuilder
from ivc.plonk.circuit import CircuitConfig


def _build_cubic(constant=5, config=None):
    builder = CircuitBuilder(config or CircuitConfig())
    out = builder.add_virtual_public_input()
    x = builder.add_virtual_target()
    x2 = builder.mul(x, x)
    x3 = builder.mul(x2, x)
    s = builder.add(x3, x)
    y = builder.add_const(s, constant)
    builder.connect(y, out)
    return builder.build(), x, out


@pytest.fixture(scope="session")
def make_cubic_circuit():
    """(CircuitData, x 타깃, out 타깃)을 만드는 팩토리."""
    return _build_cubic


@pytest.fixture(scope="session")
def cubic_circuit():
    return _build_cubic()
