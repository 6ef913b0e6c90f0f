"""
Instruction set of the plan language.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class InstructionType(Enum):
    """Closed set of instructions a plan can contain."""
    LINE = "line"
    ARC = "arc"
    GOTO = "goto"
    PARK = "park"
    ROTATE_ARM0 = "rotateArm0"
    ROTATE_ARM1 = "rotateArm1"
    ROTATE_BOTH = "rotateBothArms"
    HILBERT = "hilbert"
    PEANO = "peano"
    LOOP = "loop"
    SLEEP = "sleep"
    LET = "let"
    OCTAGON = "octagon"
    FORWARD = "forward"
    TURN = "turn"
    FLOWSNAKE = "flowsnake"


# Loop markers in the flat row stream; folded into LOOP instructions when parsed
LOOP_START = "loopStart"
LOOP_END = "loopEnd"

# Keyword -> instruction type for every row that is not a loop marker
KEYWORDS: Dict[str, InstructionType] = {
    t.value: t for t in InstructionType if t is not InstructionType.LOOP
}

# (min, max) argument count per instruction
ARITY: Dict[InstructionType, Tuple[int, int]] = {
    InstructionType.LINE: (2, 2),
    InstructionType.ARC: (3, 5),
    InstructionType.GOTO: (2, 2),
    InstructionType.PARK: (0, 0),
    InstructionType.ROTATE_ARM0: (1, 2),
    InstructionType.ROTATE_ARM1: (1, 2),
    InstructionType.ROTATE_BOTH: (4, 4),
    InstructionType.HILBERT: (1, 2),
    InstructionType.PEANO: (1, 2),
    InstructionType.LOOP: (1, 1),
    InstructionType.SLEEP: (1, 1),
    InstructionType.LET: (2, 2),
    InstructionType.OCTAGON: (1, 1),
    InstructionType.FORWARD: (1, 2),
    InstructionType.TURN: (2, 4),
    InstructionType.FLOWSNAKE: (1, 1),
}

LOOP_END_ARITY = (0, 0)


@dataclass(frozen=True)
class Instruction:
    """
    One node of the plan tree.

    arguments holds the raw expression strings; LOOP nodes carry their
    repeat count as the only argument and their body in children.
    """
    type: InstructionType
    arguments: Tuple[str, ...] = ()
    children: Tuple["Instruction", ...] = ()

    @property
    def keyword(self) -> str:
        return LOOP_START if self.type is InstructionType.LOOP else self.type.value

    def count_instructions(self) -> int:
        """Number of nodes in this subtree, including itself."""
        return 1 + sum(child.count_instructions() for child in self.children)
