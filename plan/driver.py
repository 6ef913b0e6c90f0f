"""
Plan driver: executes a loaded plan against the path tracer, the motion
controller and the curve generators.
"""
import math
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from execution.actuator import Axis
from execution.curves import CurveGenerator
from execution.motion import ExecutionAborted
from execution.path_tracer import PathTracer
from plan.expressions import ExpressionError, evaluate
from plan.instructions import Instruction, InstructionType
from plan.plan import Plan, PlanError
from utils.logger import get_logger

logger = get_logger(__name__)

Context = Dict[str, float]


class InstructionError(RuntimeError):
    """An instruction argument could not be resolved while running a plan."""

    def __init__(self, instruction: Instruction, argument_index: int, expression: str,
                 cause: ExpressionError):
        self.instruction = instruction
        self.argument_index = argument_index
        self.expression = expression
        super().__init__(
            f"'{instruction.keyword}' argument {argument_index + 1} ({expression!r}): {cause}"
        )


class DriverState(Enum):
    IDLE = "idle"
    LOADED = "loaded"
    RUNNING = "running"


def _flag(value: float) -> bool:
    return value != 0


class Driver:
    """
    Runs plans one instruction at a time.

    IDLE (nothing loaded) -> LOADED (plan built) -> RUNNING -> back to LOADED.
    """

    def __init__(self, tracer: PathTracer, curves: CurveGenerator):
        self.tracer = tracer
        self.curves = curves
        self.plan: Optional[Plan] = None
        self.state = DriverState.IDLE

        self._handlers: Dict[InstructionType, Callable[[Instruction, Context, int], Awaitable[None]]] = {
            InstructionType.LINE: self._line,
            InstructionType.ARC: self._arc,
            InstructionType.GOTO: self._goto,
            InstructionType.PARK: self._park,
            InstructionType.ROTATE_ARM0: self._rotate_arm0,
            InstructionType.ROTATE_ARM1: self._rotate_arm1,
            InstructionType.ROTATE_BOTH: self._rotate_both,
            InstructionType.HILBERT: self._hilbert,
            InstructionType.PEANO: self._peano,
            InstructionType.LOOP: self._loop,
            InstructionType.SLEEP: self._sleep,
            InstructionType.LET: self._let,
            InstructionType.OCTAGON: self._octagon,
            InstructionType.FORWARD: self._forward,
            InstructionType.TURN: self._turn,
            InstructionType.FLOWSNAKE: self._flowsnake,
        }

    @property
    def motion(self):
        return self.tracer.motion

    def load(self, plan: Plan) -> None:
        self.plan = plan
        self.state = DriverState.LOADED

    def load_from_string(self, text: str) -> Plan:
        """Parse and load a plan. A parse failure unloads any previous plan and re-raises."""
        try:
            plan = Plan.from_string(text)
        except PlanError:
            self.plan = None
            self.state = DriverState.IDLE
            raise
        self.load(plan)
        return plan

    async def execute(self) -> bool:
        """
        Run the loaded plan from the start.

        Returns:
            True if every instruction ran, False if a stop request interrupted it

        Raises:
            RuntimeError: If no plan is loaded or the plan is already running
            InstructionError: If an argument cannot be resolved
        """
        if self.state is DriverState.IDLE or self.plan is None:
            raise RuntimeError("No plan loaded")
        if self.state is DriverState.RUNNING:
            raise RuntimeError("Plan is already running")

        self.motion.reset_stop()
        self.state = DriverState.RUNNING
        context: Context = {}
        logger.info(f"Executing plan ({self.plan.count_instructions()} instructions)")
        try:
            await self._run_block(self.plan.instructions, context, 0)
        except ExecutionAborted as e:
            logger.warning(f"Plan stopped: {e}")
            return False
        finally:
            self.state = DriverState.LOADED
        logger.info("Plan completed")
        return True

    async def run_instruction(self, instruction: Instruction, context: Optional[Context] = None) -> None:
        """Run a single instruction outside of a plan (interactive use)."""
        await self._run(instruction, context if context is not None else {}, 0)

    def stop(self) -> None:
        self.motion.request_stop()

    async def _run_block(self, instructions, context: Context, depth: int) -> None:
        for instruction in instructions:
            await self._run(instruction, context, depth)

    async def _run(self, instruction: Instruction, context: Context, depth: int) -> None:
        self.motion.check_stop()
        logger.debug(f"{instruction.keyword} {list(instruction.arguments)}")
        await self._handlers[instruction.type](instruction, context, depth)

    def _resolve(self, instruction: Instruction, context: Context, start: int = 0) -> List[float]:
        values = []
        for index in range(start, len(instruction.arguments)):
            expression = instruction.arguments[index]
            try:
                values.append(evaluate(expression, context))
            except ExpressionError as e:
                raise InstructionError(instruction, index, expression, e) from e
        return values

    # ---------- Handlers ----------

    async def _line(self, instruction, context, depth):
        x, y = self._resolve(instruction, context)
        await self.tracer.line_to(x, y)

    async def _goto(self, instruction, context, depth):
        x, y = self._resolve(instruction, context)
        await self.tracer.goto_pos(x, y)

    async def _arc(self, instruction, context, depth):
        args = self._resolve(instruction, context)
        x, y, radius = args[:3]
        right_hand_side = _flag(args[3]) if len(args) > 3 else True
        draw_minor_arc = _flag(args[4]) if len(args) > 4 else True
        if draw_minor_arc:
            await self.tracer.minor_arc_to(x, y, radius, right_hand_side)
        else:
            await self.tracer.arc_to(x, y, radius, right_hand_side, False)

    async def _park(self, instruction, context, depth):
        await self.motion.park()

    async def _rotate_arm0(self, instruction, context, depth):
        await self._rotate_single(Axis.ARM0, instruction, context)

    async def _rotate_arm1(self, instruction, context, depth):
        await self._rotate_single(Axis.ARM1, instruction, context)

    async def _rotate_single(self, axis: Axis, instruction, context):
        args = self._resolve(instruction, context)
        clockwise = _flag(args[1]) if len(args) > 1 else True
        await self.motion.rotate_axis(axis, args[0], clockwise)

    async def _rotate_both(self, instruction, context, depth):
        steps0, cw0, steps1, cw1 = self._resolve(instruction, context)
        await self.motion.rotate_both_axes(steps0, _flag(cw0), steps1, _flag(cw1))

    async def _hilbert(self, instruction, context, depth):
        args = self._resolve(instruction, context)
        await self.curves.hilbert_curve(math.floor(args[0]), args[1] if len(args) > 1 else 0.0)

    async def _peano(self, instruction, context, depth):
        args = self._resolve(instruction, context)
        await self.curves.peano_curve(math.floor(args[0]), args[1] if len(args) > 1 else 0.0)

    async def _octagon(self, instruction, context, depth):
        (level,) = self._resolve(instruction, context)
        await self.curves.octagon_fractal(math.floor(level))

    async def _forward(self, instruction, context, depth):
        args = self._resolve(instruction, context)
        await self.curves.forward(args[0], args[1] if len(args) > 1 else None)

    async def _turn(self, instruction, context, depth):
        args = self._resolve(instruction, context)
        radius, degrees = args[:2]
        right_handed = _flag(args[2]) if len(args) > 2 else True
        await self.curves.arc(radius, degrees, right_handed, args[3] if len(args) > 3 else None)

    async def _flowsnake(self, instruction, context, depth):
        (level,) = self._resolve(instruction, context)
        await self.curves.flowsnake(math.floor(level))

    async def _loop(self, instruction, context, depth):
        (count,) = self._resolve(instruction, context)
        variable = f"i{depth}"
        iterations = max(0, math.floor(count))
        logger.debug(f"Loop {variable} x{iterations}")
        for i in range(iterations):
            context[variable] = i
            await self._run_block(instruction.children, context, depth + 1)

    async def _sleep(self, instruction, context, depth):
        (milliseconds,) = self._resolve(instruction, context)
        await self.motion.sleep_ms(milliseconds)

    async def _let(self, instruction, context, depth):
        name = instruction.arguments[0]
        (value,) = self._resolve(instruction, context, start=1)
        context[name] = value
