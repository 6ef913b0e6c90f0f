#!/usr/bin/env python3
"""Tests for plan parsing and loop-tree building."""
import json

import pytest

from plan.instructions import ARITY, KEYWORDS, Instruction, InstructionType
from plan.plan import Plan, PlanError, PlanRow, parse_plain_text


def test_loop_tree_from_rows():
    plan = Plan.from_rows([["loopStart", 3], ["line", 1, 1], ["loopEnd"]])

    assert len(plan) == 1
    loop = plan.instructions[0]
    assert loop.type is InstructionType.LOOP
    assert loop.arguments == ("3",)
    assert len(loop.children) == 1
    assert loop.children[0] == Instruction(InstructionType.LINE, ("1", "1"))


def test_nested_loops():
    plan = Plan.from_rows([
        ["goto", 0, 0],
        ["loopStart", 2],
        ["loopStart", 3],
        ["goto", "i0 * 10", "i1"],
        ["loopEnd"],
        ["park"],
        ["loopEnd"],
        ["sleep", 10],
    ])

    assert [i.type for i in plan] == [InstructionType.GOTO, InstructionType.LOOP, InstructionType.SLEEP]
    outer = plan.instructions[1]
    assert [c.type for c in outer.children] == [InstructionType.LOOP, InstructionType.PARK]
    assert outer.children[0].children[0].arguments == ("i0 * 10", "i1")
    assert plan.count_instructions() == 6


def test_unmatched_loop_start_fails():
    with pytest.raises(PlanError, match="loopStart"):
        Plan.from_rows([["loopStart", 3], ["line", 1, 1]])


def test_unmatched_loop_end_fails():
    with pytest.raises(PlanError, match="loopEnd"):
        Plan.from_rows([["line", 1, 1], ["loopEnd"]])


def test_plain_text_matches_json():
    json_text = json.dumps([["loopStart", 3], ["line", 1, 1.5], ["loopEnd"], ["arc", 0, 10, 5, 0]])
    plain_text = """
    # three short lines
    loopStart, 3
       line ,  1 , 1.5
    loopEnd

    arc, 0, 10, 5, 0
    """
    assert Plan.from_string(plain_text) == Plan.from_string(json_text)


def test_parse_plain_text_trims_and_skips():
    rows = parse_plain_text("goto, 1 ,2\n\n# comment\n  park  \n")
    assert rows == [["goto", "1", "2"], ["park"]]


def test_json_numbers_become_strings():
    row = PlanRow(name="goto", args=[1, 2.5])
    assert row.args == ["1", "2.5"]


def test_json_must_be_a_list_of_rows():
    with pytest.raises(PlanError):
        Plan.from_string('{"line": [1, 1]}')
    with pytest.raises(PlanError):
        Plan.from_string("[[]]")
    with pytest.raises(PlanError):
        Plan.from_string('["line"]')


@pytest.mark.parametrize("rows", [
    [["wiggle", 1]],
    [["Line", 1, 1]],
    [[5, 1, 1]],
    [["line", 1]],
    [["line", 1, 2, 3]],
    [["park", 1]],
    [["arc", 1, 2]],
    [["rotateBothArms", 1, 1, 1]],
    [["loopStart"], ["loopEnd"]],
    [["loopStart", 2], ["loopEnd", 1]],
    [["let", "sin", 1]],
    [["let", "2x", 1]],
    [["goto", [1], 2]],
    [["goto", True, 2]],
])
def test_malformed_rows(rows):
    with pytest.raises(PlanError):
        Plan.from_rows(rows)


def test_error_names_the_row():
    with pytest.raises(PlanError, match="Row 2"):
        Plan.from_rows([["park"], ["line", 1]])


def test_every_keyword_has_an_arity():
    assert set(ARITY) == set(InstructionType)
    assert InstructionType.LOOP not in KEYWORDS.values()
    assert len(KEYWORDS) == len(InstructionType) - 1


def test_optional_arguments():
    plan = Plan.from_rows([
        ["arc", 1, 2, 3],
        ["arc", 1, 2, 3, 0, 0],
        ["rotateArm0", 10],
        ["rotateArm1", 10, 0],
        ["hilbert", 3],
        ["peano", 2, 45],
        ["forward", 10],
        ["forward", 10, 90],
        ["octagon", 2],
        ["let", "r", "50"],
    ])
    assert len(plan) == 10


def test_empty_plan():
    assert len(Plan.from_rows([])) == 0
    assert len(Plan.from_string("# nothing here\n")) == 0


def test_plain_text_fallback_example():
    assert Plan.from_string("line,10,20\npark") == Plan.from_string('[["line","10","20"],["park"]]')
