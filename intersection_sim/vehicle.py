from enum import Enum
from typing import Optional, Tuple

from .errors import InvalidTransition
from .geometry import (
    Approach, IntersectionGeometry, Vec, bezier_point, bezier_tangent, clamp, dot,
    turn_corner, turn_left, turn_right, vec_norm,
)


class Destination(Enum):
    STRAIGHT = 'STRAIGHT'
    LEFT = 'LEFT'
    RIGHT = 'RIGHT'


class VehicleState(Enum):
    QUEUED = 'QUEUED'
    MOVING = 'MOVING'
    TURNING = 'TURNING'
    EXITING = 'EXITING'


# -----------------------------------------------------------------------------
#  Vehicle
# -----------------------------------------------------------------------------

class Vehicle:
    def __init__(
        self,
        vid: int,
        approach: Approach,
        lane_index: int,
        role,
        destination: Destination,
        speed: float,
        position: Vec = (0.0, 0.0),
    ):
        self.vid = vid
        self.approach = approach
        self.lane_index = lane_index
        self.role = role
        self.destination = destination
        self.speed = float(speed)

        self.x, self.y = float(position[0]), float(position[1])
        self.heading: Vec = approach.heading

        self.state = VehicleState.QUEUED
        self.queue_position: Optional[int] = None

        self.turning = False
        self.turn_progress = 0.0
        self._turn_start: Optional[Vec] = None
        self._turn_corner: Optional[Vec] = None
        self._turn_end: Optional[Vec] = None
        self._exit_heading: Optional[Vec] = None

    def __repr__(self):
        return (f'Vehicle({self.vid}, lane={self.lane_id}, {self.destination.name}, '
                f'{self.state.name}, pos=({self.x:.1f}, {self.y:.1f}))')

    @property
    def lane_id(self) -> str:
        return f"{self.approach.road}{self.lane_index}"

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def exit_lane_index(self) -> int:
        if self.destination is Destination.LEFT:
            return 1
        if self.destination is Destination.RIGHT:
            return 3
        return self.lane_index

    @property
    def turn_complete(self) -> bool:
        return self.destination is not Destination.STRAIGHT and self.turn_progress >= 1.0

    def exit_heading(self) -> Vec:
        h = self.approach.heading
        if self.destination is Destination.LEFT:
            return turn_left(h)
        if self.destination is Destination.RIGHT:
            return turn_right(h)
        return h

    # -------------------------------------------------------------------------
    #  Queue bookkeeping (driven by Lane)
    # -------------------------------------------------------------------------

    def place_in_queue(self, rank: int, slot: Vec):
        self.queue_position = rank
        self.x, self.y = float(slot[0]), float(slot[1])

    def release(self):
        if self.state is not VehicleState.QUEUED:
            raise InvalidTransition(f"vehicle {self.vid} released while {self.state.name}")
        self.state = VehicleState.MOVING
        self.queue_position = None

    def mark_exiting(self):
        if self.state is VehicleState.QUEUED or self.turning:
            raise InvalidTransition(f"vehicle {self.vid} cannot exit while {self.state.name}")
        self.state = VehicleState.EXITING

    # -------------------------------------------------------------------------
    #  Motion
    # -------------------------------------------------------------------------

    def advance(self, dt: float, speed: Optional[float] = None):
        step = (self.speed if speed is None else speed) * dt
        self.x += self.heading[0] * step
        self.y += self.heading[1] * step

    def reached_turn_boundary(self, geometry: IntersectionGeometry) -> bool:
        return geometry.at_entry(self.position, self.approach.heading)

    def clamp_to_boundary(self, geometry: IntersectionGeometry) -> float:
        """Pull the vehicle back onto the box edge along its approach heading.

        Returns the distance it had travelled past the edge.
        """
        h = self.approach.heading
        overshoot = max(0.0, dot(self.position, h) + geometry.half_size)
        self.x -= h[0] * overshoot
        self.y -= h[1] * overshoot
        return overshoot

    def begin_turn(self, geometry: IntersectionGeometry):
        if self.destination is Destination.STRAIGHT:
            raise InvalidTransition(f"vehicle {self.vid} goes straight, no turn to begin")
        if self.turning or self.turn_complete:
            raise InvalidTransition(f"vehicle {self.vid} has already started its turn")
        if self.state is not VehicleState.MOVING:
            raise InvalidTransition(f"vehicle {self.vid} cannot turn while {self.state.name}")
        if not self.reached_turn_boundary(geometry):
            raise InvalidTransition(f"vehicle {self.vid} has not reached the intersection")

        self._exit_heading = self.exit_heading()
        self._turn_start = self.position
        self._turn_end = geometry.exit_point(self._exit_heading, self.exit_lane_index)
        self._turn_corner = turn_corner(self._turn_start, self.approach.heading, self._turn_end)
        self.turning = True
        self.turn_progress = 0.0
        self.state = VehicleState.TURNING

    def turn_position(self, progress: float) -> Vec:
        if self._turn_start is None:
            return self.position
        return bezier_point(self._turn_start, self._turn_corner, self._turn_end, progress)

    def advance_turn(self, dt: float, turn_rate: float):
        if not self.turning:
            raise InvalidTransition(f"vehicle {self.vid} is not turning")

        self.turn_progress = clamp(self.turn_progress + max(0.0, turn_rate * dt), 0.0, 1.0)
        self.x, self.y = self.turn_position(self.turn_progress)

        if self.turn_progress >= 1.0:
            self.turning = False
            self.heading = self._exit_heading
            self.state = VehicleState.EXITING
            return

        tangent = vec_norm(bezier_tangent(self._turn_start, self._turn_corner, self._turn_end, self.turn_progress))
        if tangent != (0.0, 0.0):
            self.heading = tangent

    def has_exited(self, bounds: float) -> bool:
        if self.state is VehicleState.QUEUED:
            return False
        return dot(self.position, self.heading) > bounds
