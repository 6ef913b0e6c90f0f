"""
Main loop for the sand table.
Owns every component and coordinates the UI with plan execution.
"""
import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional

from config import RigSettings, get_rig_settings
from execution.actuator import Actuator, SimulatedActuator
from execution.curves import CurveGenerator
from execution.motion import ExecutionAborted, MotionController
from execution.path_tracer import PathTracer
from execution.renderer import Renderer, TrailRenderer
from plan.driver import Driver, InstructionError
from plan.plan import Plan, PlanError, parse_plain_text
from state.kinematics import KinematicState
from utils.logger import get_logger

logger = get_logger(__name__)

STOP_COMMANDS = ("stop", "quit", "exit")


class SandTableSystem:
    """Application context: one rig, its motion stack and its plan driver."""

    def __init__(self, settings: Optional[RigSettings] = None,
                 actuator: Optional[Actuator] = None,
                 renderer: Optional[Renderer] = None,
                 sleep: Optional[Callable[[float], Awaitable[None]]] = None):
        """
        Initialize the sand table system.

        Args:
            settings: RigSettings (default from config)
            actuator: Actuator to drive (default SimulatedActuator)
            renderer: Renderer to notify (default TrailRenderer)
            sleep: Coroutine function used for pacing (default asyncio.sleep)
        """
        self.settings = settings or get_rig_settings()
        self.state = KinematicState(radius=self.settings.radius)
        self.actuator = actuator or SimulatedActuator()
        self.renderer = renderer or TrailRenderer()
        self.motion = MotionController(self.state, self.actuator, self.renderer,
                                       self.settings, sleep)
        self.tracer = PathTracer(self.motion)
        self.curves = CurveGenerator(self.tracer)
        self.driver = Driver(self.tracer, self.curves)
        self.variables = {}
        self.running = False

    def load_plan(self, text: str) -> Plan:
        """Parse plan text (JSON or comma-separated lines) and load it."""
        return self.driver.load_from_string(text)

    def load_plan_file(self, path) -> Plan:
        logger.info(f"Loading plan from {path}")
        return self.load_plan(Path(path).read_text(encoding="utf-8"))

    def run_plan(self) -> bool:
        """Execute the loaded plan to completion. Returns False if it was stopped."""
        return asyncio.run(self.driver.execute())

    def stop(self) -> None:
        self.driver.stop()

    def process_command(self, line: str) -> str:
        """
        Run one plain-text row (e.g. "line, 100, 0") immediately.
        let bindings persist between commands in the same session.

        Returns:
            Message to display
        """
        rows = parse_plain_text(line)
        if not rows:
            return ""
        try:
            plan = Plan.from_rows(rows)
        except PlanError as e:
            return f"Invalid command: {e}"

        self.motion.reset_stop()
        try:
            for instruction in plan:
                asyncio.run(self.driver.run_instruction(instruction, self.variables))
        except InstructionError as e:
            return f"Error: {e}"
        except ExecutionAborted:
            return "Stopped."

        x, y = self.state.current_position
        return f"Done. Ball at ({x:.2f}, {y:.2f})"

    def get_status_summary(self) -> str:
        lines = [
            f"Driver: {self.driver.state.value}",
            self.state.get_state_summary(),
        ]
        if self.driver.plan is not None:
            lines.append(f"Plan: {self.driver.plan.count_instructions()} instructions")
        if self.variables:
            bound = ", ".join(f"{name}={value:g}" for name, value in sorted(self.variables.items()))
            lines.append(f"Variables: {bound}")
        return "\n".join(lines)

    def run_interactive_loop(self, input_handler, output_handler, special_command_handler=None):
        """
        Run the main interactive loop.

        Args:
            input_handler: Function that returns user input string
            output_handler: Function that displays messages to user
            special_command_handler: Optional function(command, system) -> bool for special commands
        """
        self.running = True

        output_handler("Sand table ready! Type plan rows such as 'line, 100, 0' (or 'stop' to quit).")
        output_handler("Type 'help' for commands.\n")

        while self.running:
            try:
                command = input_handler()

                if not command:
                    continue

                if command.lower() in STOP_COMMANDS:
                    self.running = False
                    break

                if special_command_handler and special_command_handler(command, self):
                    continue

                response = self.process_command(command)
                if response:
                    output_handler(response)

            except KeyboardInterrupt:
                logger.info("Keyboard interrupt - stopping")
                output_handler("\nStopped by user.")
                self.running = False
                break
            except EOFError:
                logger.info("EOF - stopping")
                self.running = False
                break
            except Exception as e:
                logger.error(f"Error in main loop: {e}", exc_info=True)
                output_handler(f"\nError: {e}\n")

        # Cleanup
        self.motion.reset_stop()
        asyncio.run(self.motion.park())
        output_handler("Arms parked. Goodbye!")
