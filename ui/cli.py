"""
Minimal CLI interface for the sand table.
"""
from utils.logger import get_logger

logger = get_logger(__name__)


class CLIInterface:
    """Simple CLI interface."""

    def __init__(self):
        self.prompt = "sand> "

    def get_input(self) -> str:
        """Get user input from command line."""
        return input(self.prompt).strip()

    def display(self, message: str) -> None:
        """Display a message to the user."""
        print(message)
        logger.debug(f"UI: {message}")

    def display_error(self, message: str) -> None:
        """Display an error message."""
        print(f"ERROR: {message}")
        logger.error(f"UI Error: {message}")

    def display_success(self, message: str) -> None:
        """Display a success message."""
        print(f"✓ {message}")
        logger.info(f"UI Success: {message}")

    def show_help(self) -> None:
        """Show help message."""
        help_text = """
Sand Table Commands (one plan row per line, comma-separated):
  goto, x, y                          - Move the ball to (x, y)
  line, x, y                          - Draw a straight line to (x, y)
  arc, x, y, r [, rightHand [, minor]] - Draw an arc to (x, y)
  forward, distance [, heading]       - Turtle step along the heading
  turn, r, degrees [, right [, heading]] - Turtle arc that turns the heading
  park                                - Return the ball to the center
  rotateArm0|rotateArm1, steps [, cw] - Rotate one arm
  rotateBothArms, s0, cw0, s1, cw1    - Rotate both arms together
  hilbert|peano, depth [, rotation]   - Draw a space-filling curve
  octagon, level                      - Draw the octagon fractal
  flowsnake, level                    - Draw the flowsnake ring of arcs
  let, name, value                    - Bind a variable for later rows
  sleep, ms                           - Pause
  'status' - Show arm angles and ball position
  'trail'  - Show what has been drawn
  'help'   - Show this help
  'stop' or 'quit' - Park and exit
        """
        self.display(help_text)

    def handle_special_command(self, command: str, system) -> bool:
        """
        Handle special CLI commands.

        Returns:
            True if command was handled, False otherwise
        """
        cmd = command.lower().strip()

        if cmd == "help":
            self.show_help()
            return True
        elif cmd == "status":
            self.display(f"\nCurrent State:\n{system.get_status_summary()}\n")
            return True
        elif cmd == "trail":
            summary = getattr(system.renderer, "get_summary", None)
            if summary is None:
                self.display_error("The active renderer does not keep a trail")
            else:
                self.display(summary())
            return True

        return False
