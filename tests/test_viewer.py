import pytest

pytest.importorskip("pygame")

from intersection_sim.geometry import Approach
from intersection_sim.traffic_light import TrafficLight
from intersection_sim.viewer import (
    ROLE_COLOURS, SIGNAL_GREEN, SIGNAL_RED, SIGNAL_YELLOW, TEXT, ScreenMapper, signal_colour,
    status_line_colour, vehicle_colour,
)
from intersection_sim.views import LightView, VehicleView


def vehicle_view(turning=False, progress=0.0, destination='LEFT'):
    return VehicleView(vid=1, lane_id="A1", role="INCOMING", destination=destination, state="MOVING",
                       position=(0.0, 0.0), heading=(0.0, 1.0), turning=turning, turn_progress=progress)


def test_mapper_centres_junction():
    mapper = ScreenMapper(1000, 800, 3.0)
    assert mapper.to_screen((0.0, 0.0)) == (500, 400)
    assert mapper.to_screen((10.0, -10.0)) == (530, 370)
    assert mapper.length(0.01) == 1


def test_turning_vehicle_is_brighter():
    still = vehicle_colour(vehicle_view())
    turning = vehicle_colour(vehicle_view(turning=True, progress=1.0))
    assert all(t >= s for t, s in zip(turning, still))
    assert turning != still


def test_signal_colours_follow_phase():
    tl = TrafficLight()
    view = LightView.of(tl)
    assert signal_colour(view, Approach.NORTH) == SIGNAL_GREEN
    assert signal_colour(view, Approach.EAST) == SIGNAL_RED
    tl.tick(4000)
    view = LightView.of(tl)
    assert signal_colour(view, Approach.SOUTH) == SIGNAL_YELLOW
    assert signal_colour(view, Approach.WEST) == SIGNAL_RED


def test_override_status_line_uses_priority_colour():
    assert status_line_colour("Traffic Light: PRIORITY OVERRIDE") == ROLE_COLOURS['PRIORITY']
    assert status_line_colour("PRIORITY MODE ACTIVE (A2: 9 vehicles)") == ROLE_COLOURS['PRIORITY']
    assert status_line_colour("Traffic Light: EW GREEN") == SIGNAL_GREEN
    assert status_line_colour("Traffic Light: ALL RED") == SIGNAL_RED
    assert status_line_colour("Lane A1: 3 vehicles") == TEXT
