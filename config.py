"""
Configuration for the sand table controller.
"""
import os
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()

# Plate geometry (plate units, e.g. pixels on the simulator or mm on the rig)
PLATE_RADIUS = float(os.getenv("PLATE_RADIUS", "400"))

# Motor protocol constants (fixed by the stepper controller)
STEPS_PER_REVOLUTION = 1024
DEGREES_PER_STEP = 360 / STEPS_PER_REVOLUTION
EPS = 1e-2

# Timing model: 1024 steps == 1 round in ~3 sec
MS_PER_STEP = float(os.getenv("MS_PER_STEP", "3"))
ROTATION_CHUNK_STEPS = int(os.getenv("ROTATION_CHUNK_STEPS", "5"))  # steps per render update

# Path tracing (tuned for visual smoothness)
LINE_MAX_STEP_LENGTH = float(os.getenv("LINE_MAX_STEP_LENGTH", "3"))
ARC_MAX_STEP_LENGTH = float(os.getenv("ARC_MAX_STEP_LENGTH", "3"))
GOTO_MAX_STEP_LENGTH = float(os.getenv("GOTO_MAX_STEP_LENGTH", "10"))  # warn above this
GRID_SEARCH_WIDTH = int(os.getenv("GRID_SEARCH_WIDTH", "5"))

# Execution Settings
SIMULATION_MODE = os.getenv("SIMULATION_MODE", "true").lower() == "true"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "")  # empty: console only


class RigSettings(BaseModel):
    """Tunable parameters of one sand table rig."""
    radius: float = Field(default=PLATE_RADIUS, gt=0, description="Plate radius; each arm is radius / 2")
    ms_per_step: float = Field(default=MS_PER_STEP, ge=0, description="Modelled milliseconds per motor step")
    rotation_chunk_steps: int = Field(default=ROTATION_CHUNK_STEPS, ge=1, description="Max steps per actuator call")
    line_max_step_length: float = Field(default=LINE_MAX_STEP_LENGTH, gt=0, description="Max segment length for line_to")
    arc_max_step_length: float = Field(default=ARC_MAX_STEP_LENGTH, gt=0, description="Max arc length per arc_to sub-step")
    goto_max_step_length: float = Field(default=GOTO_MAX_STEP_LENGTH, gt=0, description="goto_pos warns above this distance")
    grid_search_width: int = Field(default=GRID_SEARCH_WIDTH, ge=0, description="Half-width of the step refinement window")

    @property
    def arm_length(self) -> float:
        return self.radius / 2


def get_rig_settings(**overrides) -> RigSettings:
    """Returns RigSettings from the environment, with optional overrides."""
    return RigSettings(**overrides)
