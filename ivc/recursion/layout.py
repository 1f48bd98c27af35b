"""
공개 입력 배치 (Public Input Layout)
=====================================

모든 단계 회로가 같은 순서로 공개 입력을 노출한다:

  ┌───────────────┬───────────────┬─────────┬───────────┬──────────────────┐
  │ initial_state │ current_state │ counter │ condition │ verifier_key     │
  │   (w 칸)      │   (w 칸)      │  (1)    │   (1)     │ (W 칸, 항상 꼬리) │
  └───────────────┴───────────────┴─────────┴───────────┴──────────────────┘

같은 배치가 세 곳에서 쓰인다:
  (a) 단계 회로가 자기 공개 입력을 등록할 때 (register)
  (b) 내부 증명의 공개 입력 타깃을 읽을 때 (read_targets)
  (c) 호출자가 최종 증명의 값을 읽을 때 (unpack)

검증 키 커밋먼트는 언제나 마지막 W칸이다. 가젯과 외부 일관성 검사는
이 위치를 이름이 아니라 인덱스로 읽는다.
"""

import dataclasses
from typing import Any, Tuple

from ivc.errors import ShapeMismatch
from ivc.plonk.targets import BoolTarget


@dataclasses.dataclass(frozen=True)
class StepPublicInputs:
    """배치의 각 칸. 타깃(int)으로도, 값(FR)으로도 채워진다."""
    initial_state: Tuple[Any, ...]
    current_state: Tuple[Any, ...]
    counter: Any
    condition: Any
    verifier_key: Any


@dataclasses.dataclass(frozen=True)
class PublicInputLayout:
    state_width: int
    vk_width: int

    @property
    def num_public_inputs(self):
        return 2 * self.state_width + 2 + self.vk_width

    @property
    def counter_index(self):
        return 2 * self.state_width

    @property
    def condition_index(self):
        return 2 * self.state_width + 1

    @property
    def verifier_key_slice(self):
        return slice(self.num_public_inputs - self.vk_width, self.num_public_inputs)

    def register(self, builder):
        """builder에 배치 순서대로 공개 입력을 등록한다.

        검증 키 칸은 builder.add_verifier_data_public_inputs()로 등록되므로
        회로당 한 번만 호출할 수 있다.
        """
        if builder.config.vk_commitment_width != self.vk_width:
            raise ShapeMismatch(
                f"layout expects a {self.vk_width}-element verifier key commitment, "
                f"config uses {builder.config.vk_commitment_width}",
                check="public_input_layout",
            )
        initial_state = tuple(builder.add_virtual_public_input_arr(self.state_width))
        current_state = tuple(builder.add_virtual_public_input_arr(self.state_width))
        counter = builder.add_virtual_public_input()
        condition = builder.add_virtual_bool_target_safe()
        builder.register_public_input(condition.target)
        verifier_data = builder.add_verifier_data_public_inputs()
        return StepPublicInputs(
            initial_state, current_state, counter, condition, verifier_data,
        )

    def _split(self, values):
        values = tuple(values)
        if len(values) != self.num_public_inputs:
            raise ShapeMismatch(
                f"expected {self.num_public_inputs} public inputs, got {len(values)}",
                check="public_input_layout",
            )
        w = self.state_width
        return StepPublicInputs(
            initial_state=values[:w],
            current_state=values[w:2 * w],
            counter=values[self.counter_index],
            condition=values[self.condition_index],
            verifier_key=values[self.verifier_key_slice],
        )

    def read_targets(self, public_input_targets):
        """내부 증명의 공개 입력 타깃을 같은 배치로 나눈다."""
        return self._split(public_input_targets)

    def unpack(self, public_inputs):
        """공개 입력 값을 정수로 읽는다."""
        split = self._split(int(x) for x in public_inputs)
        return dataclasses.replace(split, condition=bool(split.condition))

    def base_placeholders(self, initial_state):
        """base 단계 더미 증명의 공개 입력 자리 값: initial_state 칸만 채운다.

        단계 회로가 initial_state를 내부 증명의 initial_state와 connect하므로
        더미 증명도 같은 값을 가져야 한다.
        """
        initial_state = tuple(initial_state)
        if len(initial_state) != self.state_width:
            raise ShapeMismatch(
                f"initial state has {len(initial_state)} fields, "
                f"layout expects {self.state_width}",
                check="public_input_layout",
            )
        return dict(enumerate(initial_state))
