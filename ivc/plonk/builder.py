"""
회로 빌더 (CircuitBuilder)
==========================

타깃과 게이트를 쌓아 PLONK 회로를 만드는 API.

**행(row) 배치**:
  ┌────────────────────────────┐
  │ 공개 입력 행 (q_O = 1)      │  row 0 .. k-1   (k = 공개 입력 수, 등록 순서)
  ├────────────────────────────┤
  │ 산술 게이트                 │  add / mul / select / 가젯 ...
  ├────────────────────────────┤
  │ no-op 패딩                  │  n = 2^degree_bits 까지
  └────────────────────────────┘

  공개 입력은 등록 순서 그대로 앞쪽 행에 놓인다. 그래서 검증자는
  PI(x) = -Σ xᵢ·Lᵢ(x) 만으로 공개 입력을 확인할 수 있다.

**타깃과 복사 제약**:
  각 게이트의 배선은 타깃 번호를 가진다. 같은 타깃이 여러 배선에 쓰이거나
  connect(x, y)로 두 타깃이 묶이면 그 배선 위치들은 하나의 순열 순환(cycle)이 된다.
  묶음 관리는 union-find로 한다.

**형태만 계산하기**:
  build_descriptor()는 커밋 없이 CircuitDescriptor만 돌려준다.
  descriptor 고정점 탐색처럼 여러 번 "빌드해 보고 모양만 보는" 경우에 쓴다.

사용 예시:
    >>> builder = CircuitBuilder(CircuitConfig.standard_recursion_config())
    >>> x = builder.add_virtual_public_input()
    >>> y = builder.mul(x, x)
    >>> data = builder.build()
"""

import logging

from ivc.errors import CircuitBuildError, ShapeMismatch
from ivc.plonk.circuit import Gate, CircuitDescriptor
from ivc.plonk.circuit_data import CircuitData, ProverData
from ivc.plonk.field import FR, to_fr
from ivc.plonk.preprocessor import preprocess
from ivc.plonk.srs import SRS
from ivc.plonk.targets import (
    BoolTarget, ProofTarget, ProofWithPublicInputsTarget, VerifierCircuitTarget,
)
from ivc.plonk.utils import next_power_of_2, log2_exact
from ivc.plonk.witness import ConstantGenerator, SimpleGenerator

logger = logging.getLogger(__name__)

MINUS_ONE = FR(0) - FR(1)


class CircuitBuilder:
    """PLONK 회로 빌더.

    Args:
        config: CircuitConfig
        goal_descriptor: 지정하면 build() 결과 형태가 이와 정확히 같아야 한다
                         (다르면 ShapeMismatch).
    """

    def __init__(self, config, goal_descriptor=None):
        self.config = config
        self.goal_descriptor = goal_descriptor
        self.gates = []
        self.public_inputs = []
        self.generators = []
        self._parent = []
        self._constants = {}
        self._num_proofs = 0
        self._num_verifier_data = 0
        self.verifier_data_public_input = None

    # ─────────────────────────────────────────────────────────────────
    # 타깃
    # ─────────────────────────────────────────────────────────────────

    def add_virtual_target(self):
        target = len(self._parent)
        self._parent.append(target)
        return target

    def add_virtual_targets(self, count):
        return [self.add_virtual_target() for _ in range(count)]

    def register_public_input(self, target):
        self.public_inputs.append(target)

    def add_virtual_public_input(self):
        target = self.add_virtual_target()
        self.register_public_input(target)
        return target

    def add_virtual_public_input_arr(self, count):
        return [self.add_virtual_public_input() for _ in range(count)]

    def add_virtual_bool_target_safe(self):
        """0/1 제약이 걸린 타깃."""
        target = self.add_virtual_target()
        self.assert_bool(target)
        return BoolTarget(target)

    def num_public_inputs(self):
        return len(self.public_inputs)

    def num_gates(self):
        """공개 입력 행을 포함한 현재 행 수 (패딩 전)."""
        return len(self.public_inputs) + len(self.gates)

    # ─────────────────────────────────────────────────────────────────
    # 게이트
    # ─────────────────────────────────────────────────────────────────

    def arithmetic_constraint(self, a=None, b=None, c=None,
                              q_l=0, q_r=0, q_o=0, q_m=0, q_c=0, label="arith"):
        """임의 셀렉터의 게이트 한 행을 추가한다 (출력 없음, 제약만)."""
        self.gates.append(Gate(q_l, q_r, q_o, q_m, q_c, wires=(a, b, c), label=label))

    def _output_gate(self, a, b, q_l, q_r, q_m, q_c, fn, label):
        """c = fn(a, b) 를 계산하는 게이트. 출력 타깃과 생성기를 함께 만든다."""
        out = self.add_virtual_target()
        self.gates.append(
            Gate(q_l, q_r, MINUS_ONE, q_m, q_c, wires=(a, b, out), label=label)
        )
        inputs = [t for t in (a, b) if t is not None]
        self.add_generator(SimpleGenerator(inputs, [out], fn))
        return out

    def add(self, x, y):
        return self._output_gate(x, y, 1, 1, 0, 0, lambda a, b: a + b, "add")

    def sub(self, x, y):
        return self._output_gate(x, y, 1, MINUS_ONE, 0, 0, lambda a, b: a - b, "sub")

    def mul(self, x, y):
        return self._output_gate(x, y, 0, 0, 1, 0, lambda a, b: a * b, "mul")

    def add_const(self, x, k):
        k = to_fr(k)
        return self._output_gate(x, None, 1, 0, 0, k, lambda a: a + k, "add_const")

    def mul_const(self, x, k):
        k = to_fr(k)
        return self._output_gate(x, None, k, 0, 0, 0, lambda a: a * k, "mul_const")

    def neg(self, x):
        return self.mul_const(x, MINUS_ONE)

    def mul_add(self, x, y, z):
        """x·y + z (게이트 2개)."""
        return self.add(self.mul(x, y), z)

    def select(self, condition, x, y):
        """condition ? x : y  =  condition·(x - y) + y (게이트 3개).

        condition은 BoolTarget 이어야 한다.
        """
        diff = self.sub(x, y)
        return self.add(self.mul(condition.target, diff), y)

    def constant(self, value):
        """상수 타깃 (값마다 한 번만 생성)."""
        value = to_fr(value)
        key = value.n
        if key not in self._constants:
            target = self.add_virtual_target()
            self.gates.append(
                Gate(1, 0, 0, 0, FR(0) - value, wires=(target, None, None),
                     label=f"constant({key})")
            )
            self.add_generator(ConstantGenerator(target, value))
            self._constants[key] = target
        return self._constants[key]

    def zero(self):
        return self.constant(0)

    def one(self):
        return self.constant(1)

    def assert_zero(self, x):
        self.arithmetic_constraint(a=x, q_l=1, label="assert_zero")

    def assert_bool(self, x):
        # x·x - x = 0
        self.arithmetic_constraint(a=x, b=x, q_l=MINUS_ONE, q_m=1, label="assert_bool")

    def connect(self, x, y):
        """두 타깃이 같은 값을 갖도록 묶는다 (복사 제약, 게이트 없음)."""
        rx, ry = self._find(x), self._find(y)
        if rx != ry:
            self._parent[max(rx, ry)] = min(rx, ry)

    def add_noop_gate(self):
        self.gates.append(Gate.noop())

    def add_generator(self, generator):
        self.generators.append(generator)

    def _find(self, target):
        root = target
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[target] != root:
            self._parent[target], target = root, self._parent[target]
        return root

    # ─────────────────────────────────────────────────────────────────
    # 재귀용 자리 (내부 증명, 검증 키)
    # ─────────────────────────────────────────────────────────────────

    def add_virtual_proof_with_pis(self, descriptor):
        """descriptor 형태의 내부 증명 자리를 만든다."""
        if descriptor.config != self.config:
            raise ShapeMismatch(
                "inner proof descriptor was built with a different circuit config",
                check="inner_proof_config",
            )
        public_inputs = tuple(self.add_virtual_targets(descriptor.num_public_inputs))
        proof = ProofTarget(index=self._num_proofs, zeta=self.add_virtual_target())
        self._num_proofs += 1
        return ProofWithPublicInputsTarget(proof, public_inputs, descriptor)

    def add_virtual_verifier_data(self, width):
        """검증 키 커밋먼트 자리 (비공개)."""
        target = VerifierCircuitTarget(
            index=self._num_verifier_data,
            elements=tuple(self.add_virtual_targets(width)),
        )
        self._num_verifier_data += 1
        return target

    def add_verifier_data_public_inputs(self):
        """검증 키 커밋먼트를 공개 입력으로 등록한다 (회로당 한 번).

        커밋먼트 값은 완성된 회로 자체에서 나오므로 두 번 등록할 수 없다.
        """
        if self.verifier_data_public_input is not None:
            raise CircuitBuildError(
                "verifier data public inputs are already registered",
                check="verifier_data_registration",
            )
        target = self.add_virtual_verifier_data(self.config.vk_commitment_width)
        for element in target.elements:
            self.register_public_input(element)
        self.verifier_data_public_input = target
        return target

    # ─────────────────────────────────────────────────────────────────
    # 빌드
    # ─────────────────────────────────────────────────────────────────

    def build_descriptor(self):
        """현재 회로의 형태 (커밋 없이)."""
        n = next_power_of_2(max(self.num_gates(), 1))
        degree_bits = max(log2_exact(n), self.config.min_degree_bits)
        return CircuitDescriptor(
            config=self.config,
            degree_bits=degree_bits,
            num_public_inputs=self.num_public_inputs(),
        )

    def build(self):
        """회로를 전처리하여 CircuitData를 만든다.

        Raises:
            ShapeMismatch: goal_descriptor가 있고 실제 형태와 다를 때
        """
        descriptor = self.build_descriptor()
        if self.goal_descriptor is not None and descriptor != self.goal_descriptor:
            raise ShapeMismatch(
                f"built circuit shape {descriptor} does not match "
                f"expected {self.goal_descriptor}",
                check="circuit_shape",
            )

        n = descriptor.num_gates
        rows = [Gate.public_input(t) for t in self.public_inputs]
        rows.extend(self.gates)
        rows.extend(Gate.noop() for _ in range(n - len(rows)))

        representatives = [self._find(t) for t in range(len(self._parent))]
        sigma = _build_sigma(rows, representatives, n)
        selectors = tuple(list(column) for column in zip(*(g.selectors() for g in rows)))

        srs = SRS.for_degree(descriptor.srs_degree, self.config.srs_seed)
        preprocessed, verifier_key = preprocess(
            selectors, sigma, descriptor.num_public_inputs, srs,
            self.config.vk_commitment_width,
        )
        prover_data = ProverData(
            rows=rows,
            public_inputs=list(self.public_inputs),
            representatives=representatives,
            generators=list(self.generators),
        )
        logger.info(
            "built circuit: %d gates used of %d, %d public inputs",
            self.num_gates(), n, descriptor.num_public_inputs,
        )
        return CircuitData(descriptor, verifier_key, prover_data, preprocessed, srs)


def _build_sigma(rows, representatives, n):
    """배선 위치 3n개에 대한 순열 σ.

    위치 규칙: a의 i번째 = i, b의 i번째 = n+i, c의 i번째 = 2n+i.
    같은 파티션의 위치들은 하나의 순환 p₀ → p₁ → ... → p_k → p₀ 을 이룬다.
    """
    groups = {}
    for row, gate in enumerate(rows):
        for column, target in enumerate(gate.wires):
            if target is None:
                continue
            groups.setdefault(representatives[target], []).append(column * n + row)

    sigma = list(range(3 * n))
    for positions in groups.values():
        for i, pos in enumerate(positions):
            sigma[pos] = positions[(i + 1) % len(positions)]
    return sigma
