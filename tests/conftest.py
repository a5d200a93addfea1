import random

import pytest

from intersection_sim.config import SimulationConfig
from intersection_sim.geometry import IntersectionGeometry
from intersection_sim.manager import TrafficManager


@pytest.fixture
def geometry():
    return IntersectionGeometry(lane_width=3.5, queue_gap=6.0, stop_line_offset=1.0)


@pytest.fixture
def quiet_config():
    # no random arrivals, every non-free vehicle goes straight
    return SimulationConfig(
        arrival_rate_per_sec=0.0,
        priority_arrival_rate_per_sec=0.0,
        destination_weights={
            'INCOMING': {'STRAIGHT': 1.0},
            'PRIORITY': {'STRAIGHT': 1.0},
            'FREE': {'RIGHT': 1.0},
        },
    )


@pytest.fixture
def quiet_manager(quiet_config):
    return TrafficManager(quiet_config, random.Random(1))
