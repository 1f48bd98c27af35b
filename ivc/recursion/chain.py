"""
증명 체인 드라이버 (Proof-Chain Driver)
========================================

  Base ──▶ Step(1) ──▶ Step(2) ──▶ ...   (끝 상태 없음, 길이는 호출자가 정한다)

  Base:     condition = 0, 내부 증명 = 더미 증명, 초기 상태는 호출자가 준다.
  Step(n):  condition = 1, 내부 증명 = 직전 산출물(head).

매 단계 증명을 만든 뒤 일관성 검사를 통과해야만 head가 된다.
증명이나 검사가 실패하면 예외에 단계 번호를 붙여 그대로 올려 보내고,
head는 마지막으로 받아들여진 산출물에 머문다 (이전 산출물로 대체하지 않음).
멈춘 체인은 그 산출물에서 resume()으로 다시 이어갈 수 있다.

체인 하나는 순차적이다. 회로(CyclicCircuit)는 불변이므로 서로 다른 체인은
각자의 스레드에서 같은 회로를 공유하며 돌 수 있다.
"""

import dataclasses
import logging
from typing import Any, Tuple

from ivc.errors import IVCError
from ivc.recursion.consistency import check_cyclic_proof_verifier_data
from ivc.recursion.timing import StepTimer

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class StepReport:
    """한 단계의 결과: 공개 입력 값과 구간별 소요 시간."""
    step: int
    public_inputs: Any
    timings: Tuple[Any, ...]
    artifact: Any = dataclasses.field(repr=False, compare=False)

    def to_dict(self):
        values = self.public_inputs
        return {
            "step": self.step,
            "initial_state": list(values.initial_state),
            "current_state": list(values.current_state),
            "counter": values.counter,
            "condition": values.condition,
            "verifier_key": [hex(x) for x in values.verifier_key],
            "timings": [span.to_dict() for span in self.timings],
        }


class ProofChain:
    """CyclicCircuit 하나 위에서 증명 체인을 진행한다."""

    def __init__(self, circuit):
        self.circuit = circuit
        self.head = None
        self.step = None
        self.reports = []

    def prove_base(self, initial_state, inputs=()):
        if self.head is not None:
            raise IVCError("chain already has a base proof", step=0, check="chain_state")
        return self._advance(0, lambda: self.circuit.base_witness(initial_state, inputs))

    def prove_step(self, inputs=()):
        if self.head is None:
            raise IVCError(
                "chain has no head; prove the base case or resume first",
                check="chain_state",
            )
        previous = self.head
        return self._advance(self.step + 1, lambda: self.circuit.step_witness(previous, inputs))

    def run(self, initial_state, step_inputs):
        """base + (len(step_inputs) - 1)개의 단계를 진행한다.

        step_inputs[0]은 base 단계의 입력, 나머지는 순서대로 각 단계의 입력.
        """
        step_inputs = list(step_inputs) or [()]
        reports = [self.prove_base(initial_state, step_inputs[0])]
        for inputs in step_inputs[1:]:
            reports.append(self.prove_step(inputs))
        return reports

    def resume(self, artifact, step=None):
        """이전에 받아들여진 산출물에서 체인을 잇는다.

        step을 생략하면 공개 입력의 counter - 1 을 단계 번호로 쓴다.
        """
        if step is None:
            step = self.circuit.unpack(artifact).counter - 1
        try:
            check_cyclic_proof_verifier_data(
                artifact, self.circuit.verifier_key, self.circuit.descriptor,
            )
        except IVCError as e:
            raise e.at_step(step)
        self.head = artifact
        self.step = step
        logger.info("resumed chain at step %d", step)

    def _advance(self, step, make_witness):
        timer = StepTimer()
        try:
            with timer.span("witness"):
                pw = make_witness()
            with timer.span("prove"):
                artifact = self.circuit.prove(pw)
            with timer.span("verify"):
                check_cyclic_proof_verifier_data(
                    artifact, self.circuit.verifier_key, self.circuit.descriptor,
                )
        except IVCError as e:
            logger.error("step %d failed: %s", step, e)
            raise e.at_step(step)

        self.head = artifact
        self.step = step
        report = StepReport(step, self.circuit.unpack(artifact), tuple(timer.spans), artifact)
        self.reports.append(report)
        logger.info(
            "step %d accepted: state=%s counter=%d (%.2fs)",
            step, list(report.public_inputs.current_state),
            report.public_inputs.counter, timer.total_seconds,
        )
        return report
