"""
IVC 체인 데모
==============

순환 재귀 회로를 만들고 base + 여러 단계의 증명 체인을 돌린다.
단계마다 공개 입력 값과 구간별 소요 시간을 출력한다.

실행:
    python -m ivc.example --step accumulate --initial 0 --inputs 5 7 3
    python -m ivc.example --step fibonacci --initial 0 1 --steps 4
    python -m ivc.example --step increment --initial 10 --steps 3 --json

흐름:
    1. 회로 형태 고정점 + 정규 회로 빌드
    2. base 증명 (더미 증명을 조건부 검증)
    3. 단계 증명 (직전 증명을 검증), 매 단계 일관성 검사
"""

import argparse
import json
import logging
import sys

from ivc.errors import IVCError
from ivc.recursion.chain import ProofChain
from ivc.recursion.step import STEP_FUNCTIONS, cyclic_circuit_for
from ivc.recursion.timing import StepTimer

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Run an incrementally verifiable computation chain.",
    )
    parser.add_argument("--step", choices=sorted(STEP_FUNCTIONS), default="accumulate",
                        help="state transition proved at every step")
    parser.add_argument("--initial", type=int, nargs="+", default=None,
                        help="initial state fields (default: all zero)")
    parser.add_argument("--inputs", type=int, nargs="*", default=[],
                        help="per-step private inputs, flattened in step order")
    parser.add_argument("--steps", type=int, default=3,
                        help="number of proofs for steps without inputs (base included)")
    parser.add_argument("--json", action="store_true",
                        help="print step reports as JSON")
    parser.add_argument("--log-level", default="INFO",
                        help="logging level (DEBUG, INFO, WARNING, ...)")
    return parser.parse_args(argv)


def group_inputs(step, flat_inputs, num_steps):
    """평탄한 입력 리스트를 단계별 튜플로 나눈다."""
    if step.num_inputs == 0:
        if flat_inputs:
            raise ValueError(f"step {step.name} takes no inputs")
        return [()] * num_steps
    if not flat_inputs or len(flat_inputs) % step.num_inputs:
        raise ValueError(
            f"step {step.name} takes {step.num_inputs} input(s) per step; "
            f"got {len(flat_inputs)} values"
        )
    k = step.num_inputs
    return [tuple(flat_inputs[i:i + k]) for i in range(0, len(flat_inputs), k)]


def check_initial_state(step, initial_state):
    if len(initial_state) != step.state_width:
        raise ValueError(
            f"step {step.name} has a state of {step.state_width} field(s); "
            f"got {len(initial_state)} initial value(s)"
        )


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    step = STEP_FUNCTIONS[args.step]()
    initial_state = args.initial or [0] * step.state_width
    try:
        check_initial_state(step, initial_state)
        step_inputs = group_inputs(step, args.inputs, args.steps)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if not args.json:
        print("=" * 60)
        print(f"  IVC chain: {step.name}, initial state {initial_state}")
        print("=" * 60)

    timer = StepTimer()
    try:
        with timer.span("build"):
            circuit = cyclic_circuit_for(args.step)
        if not args.json:
            print(f"\n[build] 2^{circuit.descriptor.degree_bits} gates, "
                  f"{circuit.descriptor.num_public_inputs} public inputs "
                  f"({timer.total_seconds:.2f}s)")

        chain = ProofChain(circuit)
        reports = chain.run(initial_state, step_inputs)
    except IVCError as e:
        logger.error("chain stopped: %s", e)
        print(f"\nchain stopped: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({
            "step": step.name,
            "initial_state": list(initial_state),
            "build": {
                "degree_bits": circuit.descriptor.degree_bits,
                "num_public_inputs": circuit.descriptor.num_public_inputs,
                "timings": [span.to_dict() for span in timer.spans],
            },
            "reports": [r.to_dict() for r in reports],
        }, indent=2))
        return 0

    for report in reports:
        values = report.public_inputs
        spans = ", ".join(f"{s.name}={s.seconds:.2f}s" for s in report.timings)
        print(f"\n[step {report.step}] state={list(values.current_state)} "
              f"counter={values.counter} condition={int(values.condition)}")
        print(f"    {spans}")
    print("\n" + "=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
