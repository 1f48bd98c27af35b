"""
단계 회로 (Step Circuit)
=========================

한 단계의 상태 전이와 이전 단계 증명의 조건부 검증을 하나의 회로로 묶는다.

  공개 입력: [initial_state, current_state, counter, condition, verifier_key]

  inner = 이전 단계 증명 (condition = 0 이면 더미 증명)

  connect(initial_state, inner.initial_state)
  actual_state  = condition ? inner.current_state : initial_state
  current_state = step.transition(actual_state, inputs)
  counter       = condition · inner.counter + 1
  조건부 순환 검증 (inner, condition)

**상태 전이 (StepFunction)**:
  단계 함수는 회로 안의 전이 한 가지만 정의한다. 누적, +1, 피보나치처럼
  전이 식만 다른 체인들은 모두 같은 StepCircuit 위에서 돈다.

사용 예시:
    >>> circuit = StepCircuit(AccumulateStep()).build()
    >>> base = circuit.prove(circuit.base_witness([0], [5]))
"""

import functools
import logging

from ivc.errors import ShapeMismatch
from ivc.plonk.builder import CircuitBuilder
from ivc.plonk.circuit import CircuitConfig
from ivc.plonk.circuit_data import dummy_proof
from ivc.plonk.witness import PartialWitness
from ivc.recursion.gadget import conditionally_verify_cyclic_proof_or_dummy
from ivc.recursion.layout import PublicInputLayout
from ivc.recursion.stabilizer import stabilize_descriptor

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────
# 단계 함수
# ─────────────────────────────────────────────────────────────────────

class StepFunction:
    """상태 전이 한 가지.

    속성:
        name: 레지스트리 이름
        state_width: 상태 필드 수 w
        num_inputs: 단계마다 넣는 비공개 입력 수
    """
    name = None
    state_width = 1
    num_inputs = 0

    def transition(self, builder, state, inputs):
        """state 타깃들과 inputs 타깃들로부터 새 상태 타깃들을 만든다."""
        raise NotImplementedError


class AccumulateStep(StepFunction):
    """state' = state + delta"""
    name = "accumulate"
    state_width = 1
    num_inputs = 1

    def transition(self, builder, state, inputs):
        return [builder.add(state[0], inputs[0])]


class IncrementStep(StepFunction):
    """state' = state + 1"""
    name = "increment"
    state_width = 1
    num_inputs = 0

    def transition(self, builder, state, inputs):
        return [builder.add_const(state[0], 1)]


class FibonacciStep(StepFunction):
    """(a, b)' = (b, a + b)"""
    name = "fibonacci"
    state_width = 2
    num_inputs = 0

    def transition(self, builder, state, inputs):
        a, b = state
        return [b, builder.add(a, b)]


STEP_FUNCTIONS = {
    step.name: step for step in (AccumulateStep, IncrementStep, FibonacciStep)
}


# ─────────────────────────────────────────────────────────────────────
# 회로 정의
# ─────────────────────────────────────────────────────────────────────

class StepTargets:
    """define()이 만든 타깃들 (증인 할당에 필요)."""

    def __init__(self, public_inputs, inputs, inner_proof):
        self.public_inputs = public_inputs
        self.inputs = inputs
        self.inner_proof = inner_proof


class StepCircuit:
    """StepFunction 하나에 대한 순환 재귀 회로 정의."""

    def __init__(self, step, config=None):
        self.step = step
        self.config = config or CircuitConfig.standard_recursion_config()
        self.layout = PublicInputLayout(step.state_width, self.config.vk_commitment_width)

    def define(self, builder, inner_descriptor=None):
        """builder에 단계 회로를 정의한다.

        inner_descriptor가 None이면 재귀 가젯을 넣지 않는다 (형태 고정점 첫 라운드).
        """
        layout = self.layout
        own = layout.register(builder)
        inputs = builder.add_virtual_targets(self.step.num_inputs)

        if inner_descriptor is None:
            inner_proof = None
            inner_targets = builder.add_virtual_targets(layout.num_public_inputs)
        else:
            descriptor = inner_descriptor.with_num_public_inputs(builder.num_public_inputs())
            inner_proof = builder.add_virtual_proof_with_pis(descriptor)
            inner_targets = inner_proof.public_inputs
        inner = layout.read_targets(inner_targets)

        for mine, theirs in zip(own.initial_state, inner.initial_state):
            builder.connect(mine, theirs)

        actual_state = [
            builder.select(own.condition, previous, initial)
            for previous, initial in zip(inner.current_state, own.initial_state)
        ]
        new_state = self.step.transition(builder, actual_state, inputs)
        if len(new_state) != self.step.state_width:
            raise ShapeMismatch(
                f"step {self.step.name} produced {len(new_state)} state fields, "
                f"expected {self.step.state_width}",
                check="step_transition",
            )
        for public, value in zip(own.current_state, new_state):
            builder.connect(public, value)

        counter = builder.add_const(builder.mul(own.condition.target, inner.counter), 1)
        builder.connect(own.counter, counter)

        if inner_proof is not None:
            conditionally_verify_cyclic_proof_or_dummy(
                builder, own.condition, inner_proof, inner_proof.descriptor,
            )
        return StepTargets(own, inputs, inner_proof)

    def build(self, max_rounds=3):
        """형태 고정점을 구한 뒤 정규(canonical) 회로를 빌드한다."""
        descriptor = stabilize_descriptor(self.config, self.define, max_rounds=max_rounds)
        builder = CircuitBuilder(self.config, goal_descriptor=descriptor)
        targets = self.define(builder, descriptor)
        data = builder.build()
        logger.info("built cyclic %s circuit: %r", self.step.name, data.verifier_key)
        return CyclicCircuit(self.step, self.layout, data, targets)


# ─────────────────────────────────────────────────────────────────────
# 빌드된 순환 회로
# ─────────────────────────────────────────────────────────────────────

class CyclicCircuit:
    """정규 회로 + 증인 할당 도우미. 빌드 후 불변이며 여러 체인이 공유한다."""

    def __init__(self, step, layout, data, targets):
        self.step = step
        self.layout = layout
        self.data = data
        self.targets = targets

    @property
    def descriptor(self):
        return self.data.descriptor

    @property
    def verifier_key(self):
        return self.data.verifier_key

    def _witness(self, condition, inner_artifact, inputs):
        inputs = list(inputs)
        if len(inputs) != self.step.num_inputs:
            raise ShapeMismatch(
                f"step {self.step.name} takes {self.step.num_inputs} inputs, "
                f"got {len(inputs)}",
                check="step_inputs",
            )
        pw = PartialWitness()
        pw.set_bool_target(self.targets.public_inputs.condition, condition)
        pw.set_targets(self.targets.inputs, inputs)
        pw.set_proof_with_pis_target(self.targets.inner_proof, inner_artifact)
        pw.set_verifier_data_target(self.targets.public_inputs.verifier_key, self.verifier_key)
        return pw

    def dummy_artifact(self, initial_state):
        return dummy_proof(
            self.descriptor, self.verifier_key, self.layout.base_placeholders(initial_state),
        )

    def base_witness(self, initial_state, inputs=()):
        """condition = 0, 내부 증명 = 더미 증명."""
        pw = self._witness(False, self.dummy_artifact(initial_state), inputs)
        pw.set_targets(self.targets.public_inputs.initial_state, initial_state)
        return pw

    def step_witness(self, previous, inputs=()):
        """condition = 1, 내부 증명 = 이전 단계 산출물."""
        return self._witness(True, previous, inputs)

    def prove(self, pw):
        return self.data.prove(pw)

    def verify(self, artifact):
        return self.data.verify(artifact)

    def unpack(self, artifact):
        return self.layout.unpack(artifact.public_inputs)


@functools.lru_cache(maxsize=None)
def cyclic_circuit_for(name, config=None):
    """이름으로 단계 함수를 찾아 순환 회로를 (프로세스당 한 번) 빌드한다."""
    try:
        step_class = STEP_FUNCTIONS[name]
    except KeyError:
        raise ValueError(
            f"unknown step function {name!r}; choose from {sorted(STEP_FUNCTIONS)}"
        ) from None
    return StepCircuit(step_class(), config).build()
