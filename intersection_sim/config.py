import os
import sys
import json
import logging
from dataclasses import dataclass, fields
from typing import Dict, Optional

# -----------------------------------------------------------------------------
#  Logging
# -----------------------------------------------------------------------------

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[str] = "simulation.log"):
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

# -----------------------------------------------------------------------------
#  Config + safe reload
# -----------------------------------------------------------------------------

@dataclass
class SimulationConfig:
    seed: int = 42

    # signal timing (ms)
    green_ms: float = 4000.0
    yellow_ms: float = 1000.0
    all_red_ms: float = 500.0

    # priority override
    priority_lane: str = "A2"
    priority_threshold: int = 8
    priority_release_threshold: int = 5
    override_max_ms: float = 6000.0
    override_cooldown_ms: float = 5000.0

    # lanes / spawning
    lane_capacity: int = 12
    arrival_rate_per_sec: float = 0.20
    priority_arrival_rate_per_sec: float = 0.45
    lane_arrival_rates: Dict[str, float] = None       # per lane id override
    destination_weights: Dict[str, Dict[str, float]] = None  # role -> destination -> weight

    # motion (metres, seconds)
    vehicle_speed: float = 10.0
    turn_rate: float = 0.9          # turn progress per second
    release_spacing: float = 8.0
    lane_width: float = 3.5
    queue_gap: float = 6.0
    stop_line_offset: float = 1.0
    world_half_extent: float = 120.0

    # viewer
    screen_width: int = 1000
    screen_height: int = 800
    fps: int = 60
    pixels_per_metre: float = 3.2
    show_debug: bool = True

    def __post_init__(self):
        if self.lane_arrival_rates is None:
            self.lane_arrival_rates = {}

        # roles left out of a partial override keep their defaults
        weights = {
            'INCOMING': {'STRAIGHT': 0.60, 'RIGHT': 0.25, 'LEFT': 0.15},
            'PRIORITY': {'STRAIGHT': 0.70, 'LEFT': 0.20, 'RIGHT': 0.10},
            'FREE': {'RIGHT': 1.0},
        }
        if isinstance(self.destination_weights, dict):
            weights.update(self.destination_weights)
            self.destination_weights = weights
        elif self.destination_weights is None:
            self.destination_weights = weights

    @property
    def intersection_half_size(self) -> float:
        # three incoming + three outgoing lanes per road
        return 3.0 * self.lane_width

    def arrival_rate(self, lane_id: str) -> float:
        if lane_id in self.lane_arrival_rates:
            return float(self.lane_arrival_rates[lane_id])
        if lane_id == self.priority_lane:
            return self.priority_arrival_rate_per_sec
        return self.arrival_rate_per_sec

    def validate(self) -> "SimulationConfig":
        for name in ('green_ms', 'yellow_ms', 'all_red_ms', 'override_max_ms',
                     'vehicle_speed', 'turn_rate', 'lane_width', 'queue_gap'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        if self.override_cooldown_ms < 0:
            raise ValueError("override_cooldown_ms must not be negative")
        if self.lane_capacity <= 0:
            raise ValueError("lane_capacity must be positive")
        if not 0 < self.priority_threshold <= self.lane_capacity:
            raise ValueError("priority_threshold must be within 1..lane_capacity")
        if not 0 < self.priority_release_threshold <= self.priority_threshold:
            raise ValueError("priority_release_threshold must be within 1..priority_threshold")
        if len(self.priority_lane) != 2 or self.priority_lane[0] not in "ABCD" or self.priority_lane[1] not in "12":
            # lane 3 is always the free right-turn lane
            raise ValueError(f"priority_lane must be one of A1..D2, got {self.priority_lane!r}")
        if self.world_half_extent <= self.intersection_half_size:
            raise ValueError("world_half_extent must lie outside the intersection box")
        if not isinstance(self.lane_arrival_rates, dict):
            raise ValueError("lane_arrival_rates must map lane ids to rates")
        for lane_id, rate in self.lane_arrival_rates.items():
            if not _is_number(rate) or rate < 0:
                raise ValueError(f"arrival rate for {lane_id} must be a non-negative number, got {rate!r}")
        if not isinstance(self.destination_weights, dict):
            raise ValueError("destination_weights must map roles to weight tables")
        bad = sorted(set(self.destination_weights) - {"INCOMING", "PRIORITY", "FREE"})
        if bad:
            raise ValueError("unknown lane role(s) in destination_weights: " + ", ".join(bad))
        for role, weights in self.destination_weights.items():
            if not isinstance(weights, dict) or not weights:
                raise ValueError(f"destination weights for {role} must be a non-empty table")
            bad = sorted(set(weights) - {"STRAIGHT", "LEFT", "RIGHT"})
            if bad:
                raise ValueError(f"unknown destination(s) for {role}: " + ", ".join(bad))
            if any(not _is_number(w) or w < 0 for w in weights.values()):
                raise ValueError(f"destination weights for {role} must be non-negative numbers")
            if sum(weights.values()) <= 0:
                raise ValueError(f"destination weights for {role} must have a positive total")
        return self


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def load_config_from_file(path: str, base: SimulationConfig) -> SimulationConfig:
    if not os.path.exists(path):
        return base
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        known = {fld.name for fld in fields(SimulationConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError("unknown config key(s): " + ", ".join(unknown))
        cfg = SimulationConfig(**{**base.__dict__, **data}).validate()
        logging.info("Loaded config from %s", path)
        return cfg
    except (OSError, ValueError, TypeError) as e:
        logging.error("Failed to load config %s: %s", path, str(e))
        return base
