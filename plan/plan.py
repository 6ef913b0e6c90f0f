"""
Plan loading: decodes rows from JSON (or the plain-text fallback) and
folds loop markers into a tree of instructions.
"""
import json
from typing import Any, Iterator, List, Sequence, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from plan.expressions import is_identifier
from plan.instructions import (
    ARITY,
    KEYWORDS,
    LOOP_END,
    LOOP_END_ARITY,
    LOOP_START,
    Instruction,
    InstructionType,
)
from utils.logger import get_logger

logger = get_logger(__name__)


class PlanError(ValueError):
    """The plan text could not be turned into an instruction tree."""


class PlanRow(BaseModel):
    """Schema for one decoded row: [instructionName, arg1, arg2, ...]."""
    name: str = Field(description="Case-sensitive instruction keyword")
    args: List[str] = Field(default_factory=list, description="Raw argument expressions")

    @field_validator("name")
    @classmethod
    def _known_keyword(cls, value: str) -> str:
        if value not in KEYWORDS and value not in (LOOP_START, LOOP_END):
            raise ValueError(f"unknown instruction '{value}'")
        return value

    @field_validator("args", mode="before")
    @classmethod
    def _stringify_args(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return value
        converted = []
        for arg in value:
            if isinstance(arg, bool) or arg is None:
                raise ValueError(f"argument {arg!r} is not an expression")
            converted.append(str(arg).strip() if isinstance(arg, (str, int, float)) else arg)
        return converted

    @property
    def arity(self) -> Tuple[int, int]:
        if self.name == LOOP_START:
            return ARITY[InstructionType.LOOP]
        if self.name == LOOP_END:
            return LOOP_END_ARITY
        return ARITY[KEYWORDS[self.name]]


def parse_plain_text(text: str) -> List[List[str]]:
    """
    Plain-text fallback: one row per line, comma-separated, fields trimmed.
    Blank lines and lines starting with '#' are skipped.
    """
    rows = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        rows.append([field.strip() for field in line.split(",")])
    return rows


def decode_rows(text: str) -> List[Any]:
    """Decode plan text into raw rows, trying JSON first."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.debug("Plan is not JSON; using plain-text rows")
        return parse_plain_text(text)
    if not isinstance(data, list):
        raise PlanError(f"Plan JSON must be an array of rows, got {type(data).__name__}")
    return data


def validate_row(index: int, row: Any) -> PlanRow:
    """Validate one raw row; index is 1-based for messages."""
    if not isinstance(row, (list, tuple)) or not row:
        raise PlanError(f"Row {index}: expected a non-empty array, got {row!r}")
    try:
        plan_row = PlanRow(name=row[0], args=list(row[1:]))
    except ValidationError as e:
        problems = "; ".join(err["msg"] for err in e.errors())
        raise PlanError(f"Row {index}: {problems}") from e

    low, high = plan_row.arity
    if not low <= len(plan_row.args) <= high:
        expected = str(low) if low == high else f"{low} to {high}"
        raise PlanError(f"Row {index}: '{plan_row.name}' takes {expected} arguments, "
                        f"got {len(plan_row.args)}")
    if plan_row.name == InstructionType.LET.value and not is_identifier(plan_row.args[0]):
        raise PlanError(f"Row {index}: cannot assign to '{plan_row.args[0]}'")
    return plan_row


def build_tree(rows: Sequence[PlanRow]) -> Tuple[Instruction, ...]:
    """
    Fold loopStart/loopEnd markers into LOOP instructions.
    Every loopStart must be closed by a later loopEnd and vice versa.
    """
    # Each frame: (loop count argument, row index of the loopStart, children so far)
    stack: List[Tuple[str, int, List[Instruction]]] = [("", 0, [])]

    for index, row in enumerate(rows, start=1):
        if row.name == LOOP_START:
            stack.append((row.args[0], index, []))
        elif row.name == LOOP_END:
            if len(stack) == 1:
                raise PlanError(f"Row {index}: '{LOOP_END}' without a matching '{LOOP_START}'")
            count, _, children = stack.pop()
            stack[-1][2].append(Instruction(InstructionType.LOOP, (count,), tuple(children)))
        else:
            stack[-1][2].append(Instruction(KEYWORDS[row.name], tuple(row.args)))

    if len(stack) > 1:
        raise PlanError(f"Row {stack[-1][1]}: '{LOOP_START}' without a matching '{LOOP_END}'")
    return tuple(stack[0][2])


class Plan:
    """
    An immutable, loop-structured instruction tree.
    """

    def __init__(self, instructions: Sequence[Instruction] = ()):
        self._instructions = tuple(instructions)

    @classmethod
    def from_rows(cls, rows: Sequence[Any]) -> "Plan":
        """Build a plan from already-decoded rows."""
        validated = [validate_row(index, row) for index, row in enumerate(rows, start=1)]
        plan = cls(build_tree(validated))
        logger.info(f"Loaded plan with {len(validated)} rows ({plan.count_instructions()} instructions)")
        return plan

    @classmethod
    def from_string(cls, text: str) -> "Plan":
        """Build a plan from JSON text, or from comma-separated lines when it is not JSON."""
        return cls.from_rows(decode_rows(text))

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        return self._instructions

    def count_instructions(self) -> int:
        return sum(instruction.count_instructions() for instruction in self._instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    def __len__(self) -> int:
        return len(self._instructions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Plan):
            return NotImplemented
        return self._instructions == other._instructions

    def __repr__(self) -> str:
        return f"Plan({list(self._instructions)!r})"
