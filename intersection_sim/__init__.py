from .config import SimulationConfig, configure_logging, load_config_from_file
from .errors import InvalidTransition, LaneEmpty, LaneFull, SimulationError
from .geometry import Approach, IntersectionGeometry
from .lane import Lane, LaneRole
from .manager import TrafficManager
from .traffic_light import LightPhase, TrafficLight
from .vehicle import Destination, Vehicle, VehicleState
from .views import LaneView, LightView, Snapshot, Statistics, VehicleView

__version__ = "0.1.0"
