"""Plan language: expressions, instructions, parsing and execution."""

from .expressions import ExpressionError, evaluate
from .instructions import Instruction, InstructionType
from .plan import Plan, PlanError
from .driver import Driver, DriverState, InstructionError

__all__ = [
    "Driver",
    "DriverState",
    "ExpressionError",
    "Instruction",
    "InstructionError",
    "InstructionType",
    "Plan",
    "PlanError",
    "evaluate",
]
