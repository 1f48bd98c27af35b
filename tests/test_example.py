"""
CLI 데모 (ivc.example) 테스트
"""

import json

import pytest

from ivc.example import group_inputs, main
from ivc.recursion.step import AccumulateStep, FibonacciStep


class TestGroupInputs:
    def test_one_input_per_step(self):
        assert group_inputs(AccumulateStep(), [5, 7, 3], 99) == [(5,), (7,), (3,)]

    def test_no_inputs_uses_step_count(self):
        assert group_inputs(FibonacciStep(), [], 3) == [(), (), ()]

    def test_inputs_for_inputless_step(self):
        with pytest.raises(ValueError):
            group_inputs(FibonacciStep(), [1], 3)

    def test_missing_inputs(self):
        with pytest.raises(ValueError):
            group_inputs(AccumulateStep(), [], 3)


class TestMain:
    def test_bad_inputs_exit_code(self, capsys):
        assert main(["--step", "increment", "--inputs", "1"]) == 2
        assert "takes no inputs" in capsys.readouterr().err

    @pytest.mark.parametrize("argv", [
        ["--step", "accumulate", "--initial", "1", "2", "--inputs", "5"],
        ["--step", "fibonacci", "--initial", "1"],
    ])
    def test_wrong_initial_width_exit_code(self, capsys, argv):
        """상태 폭이 틀린 --initial 은 인자 오류 (회로를 만들기 전에 거른다)."""
        assert main(argv) == 2
        assert "initial value" in capsys.readouterr().err

    def test_json_output(self, capsys):
        assert main(["--step", "accumulate", "--initial", "4", "--inputs", "6", "--json"]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result["step"] == "accumulate"
        assert result["initial_state"] == [4]
        reports = result["reports"]
        assert reports[-1]["current_state"] == [10]
        assert reports[-1]["counter"] == 1

    def test_json_output_has_build_timing(self, capsys):
        assert main(["--step", "increment", "--initial", "1", "--steps", "1", "--json"]) == 0
        build = json.loads(capsys.readouterr().out)["build"]
        assert [span["name"] for span in build["timings"]] == ["build"]
        assert build["timings"][0]["seconds"] >= 0
        assert build["num_public_inputs"] == 6
