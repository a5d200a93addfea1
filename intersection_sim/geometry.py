import math
from enum import Enum
from typing import Tuple

Vec = Tuple[float, float]

# -----------------------------------------------------------------------------
#  Math helpers
# -----------------------------------------------------------------------------

def clamp(v, lo, hi):
    return lo if v < lo else hi if v > hi else v

def dist(a: Vec, b: Vec) -> float:
    return math.hypot(b[0]-a[0], b[1]-a[1])

def dot(a: Vec, b: Vec) -> float:
    return a[0]*b[0] + a[1]*b[1]

def vec_add(a: Vec, b: Vec) -> Vec:
    return (a[0]+b[0], a[1]+b[1])

def vec_sub(a: Vec, b: Vec) -> Vec:
    return (a[0]-b[0], a[1]-b[1])

def vec_mul(a: Vec, s: float) -> Vec:
    return (a[0]*s, a[1]*s)

def vec_norm(a: Vec) -> Vec:
    L = math.hypot(a[0], a[1])
    if L <= 1e-9:
        return (0.0, 0.0)
    return (a[0]/L, a[1]/L)

# y grows south, so a clockwise quarter turn is a right turn
def turn_right(h: Vec) -> Vec:
    return (-h[1], h[0])

def turn_left(h: Vec) -> Vec:
    return (h[1], -h[0])

def angle_deg_from_vec(dx: float, dy: float) -> float:
    return math.degrees(math.atan2(-dy, dx))

# -----------------------------------------------------------------------------
#  Approaches
# -----------------------------------------------------------------------------

class Approach(Enum):
    NORTH = 'A'
    EAST = 'B'
    SOUTH = 'C'
    WEST = 'D'

    @property
    def road(self) -> str:
        return self.value

    @property
    def heading(self) -> Vec:
        """Travel direction of vehicles arriving from this side."""
        return _HEADINGS[self]

    @property
    def axis(self) -> str:
        return 'NS' if self in (Approach.NORTH, Approach.SOUTH) else 'EW'

    @classmethod
    def from_road(cls, road: str) -> "Approach":
        return cls(road.upper())

_HEADINGS = {
    Approach.NORTH: (0.0, 1.0),
    Approach.EAST: (-1.0, 0.0),
    Approach.SOUTH: (0.0, -1.0),
    Approach.WEST: (1.0, 0.0),
}

# -----------------------------------------------------------------------------
#  Turn curve (quadratic Bezier through the corner of the two headings)
# -----------------------------------------------------------------------------

def bezier_point(p0: Vec, c: Vec, p1: Vec, t: float) -> Vec:
    t = clamp(t, 0.0, 1.0)
    u = 1.0 - t
    p = vec_mul(p0, u*u)
    p = vec_add(p, vec_mul(c, 2*u*t))
    p = vec_add(p, vec_mul(p1, t*t))
    return p

def bezier_tangent(p0: Vec, c: Vec, p1: Vec, t: float) -> Vec:
    t = clamp(t, 0.0, 1.0)
    a = vec_mul(vec_sub(c, p0), 2*(1.0-t))
    b = vec_mul(vec_sub(p1, c), 2*t)
    return vec_add(a, b)

def turn_corner(p0: Vec, heading: Vec, p1: Vec) -> Vec:
    # point on the approach line level with the exit point
    return vec_add(p0, vec_mul(heading, dot(vec_sub(p1, p0), heading)))

# -----------------------------------------------------------------------------
#  Intersection layout
# -----------------------------------------------------------------------------

class IntersectionGeometry:
    """Abstract layout of the junction, centred on the origin.

    Every road carries three incoming lanes on the right of its centreline,
    lane 1 nearest the centre and lane 3 (the free right-turn lane) outermost,
    mirrored by three outgoing lanes on the other side.
    """

    def __init__(self, lane_width: float, queue_gap: float, stop_line_offset: float = 1.0):
        self.lane_width = float(lane_width)
        self.queue_gap = float(queue_gap)
        self.stop_line_offset = float(stop_line_offset)
        self.half_size = 3.0 * self.lane_width

    @classmethod
    def from_config(cls, config) -> "IntersectionGeometry":
        return cls(config.lane_width, config.queue_gap, config.stop_line_offset)

    def lateral_offset(self, heading: Vec, index: int) -> Vec:
        return vec_mul(turn_right(heading), (index - 0.5) * self.lane_width)

    def stop_point(self, approach: Approach, index: int) -> Vec:
        h = approach.heading
        return vec_sub(self.lateral_offset(h, index), vec_mul(h, self.half_size + self.stop_line_offset))

    def queue_slot(self, approach: Approach, index: int, rank: int) -> Vec:
        return vec_sub(self.stop_point(approach, index), vec_mul(approach.heading, rank * self.queue_gap))

    def exit_point(self, exit_heading: Vec, index: int) -> Vec:
        return vec_add(self.lateral_offset(exit_heading, index), vec_mul(exit_heading, self.half_size))

    def at_entry(self, position: Vec, heading: Vec) -> bool:
        return dot(position, heading) >= -self.half_size - 1e-9

    def past_exit(self, position: Vec, heading: Vec) -> bool:
        return dot(position, heading) > self.half_size
