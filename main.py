"""
Main entrypoint for the sand table controller.
"""
import argparse
import sys

from pydantic import ValidationError

from config import LOG_LEVEL, SIMULATION_MODE, get_rig_settings
from main_loop import SandTableSystem
from plan.driver import InstructionError
from plan.plan import PlanError
from ui.cli import CLIInterface
from utils.logger import setup_logger


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run plans on a two-arm sand table.")
    parser.add_argument("plan_file", nargs="?", help="Plan file (JSON rows or comma-separated lines)")
    parser.add_argument("--interactive", "-i", action="store_true",
                        help="Open the interactive console (after running plan_file, if given)")
    parser.add_argument("--radius", type=float, help="Plate radius in plate units")
    parser.add_argument("--ms-per-step", type=float, help="Modelled milliseconds per motor step")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="DEBUG, INFO, WARNING or ERROR")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    logger = setup_logger(level=args.log_level)

    overrides = {}
    if args.radius is not None:
        overrides["radius"] = args.radius
    if args.ms_per_step is not None:
        overrides["ms_per_step"] = args.ms_per_step

    logger.info("=" * 60)
    logger.info("Sand Table Starting")
    logger.info(f"Simulation Mode: {SIMULATION_MODE}")
    logger.info("=" * 60)

    try:
        settings = get_rig_settings(**overrides)
    except ValidationError as e:
        logger.error(f"Invalid settings: {e}")
        print(f"\nERROR: Invalid settings: {e}")
        sys.exit(2)

    if not SIMULATION_MODE:
        logger.warning("No hardware actuator is bundled; running the simulated actuator")

    system = SandTableSystem(settings)
    cli = CLIInterface()

    if not args.plan_file and not args.interactive:
        args.interactive = True

    try:
        if args.plan_file:
            system.load_plan_file(args.plan_file)
            completed = system.run_plan()
            if completed:
                cli.display_success(f"Plan finished. {system.state.get_state_summary()}")
            else:
                cli.display_error("Plan stopped before completion")

        if args.interactive:
            system.run_interactive_loop(
                input_handler=cli.get_input,
                output_handler=cli.display,
                special_command_handler=cli.handle_special_command,
            )

    except (OSError, PlanError, InstructionError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        cli.display_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        print("\n\nInterrupted. Goodbye!")


if __name__ == "__main__":
    main()
