import pytest

from intersection_sim.errors import InvalidTransition, LaneEmpty, LaneFull
from intersection_sim.geometry import Approach
from intersection_sim.lane import Lane, LaneRole
from intersection_sim.vehicle import Destination, Vehicle, VehicleState


def make_vehicle(vid, approach=Approach.NORTH, index=1):
    return Vehicle(vid, approach, index, LaneRole.INCOMING, Destination.STRAIGHT, speed=10.0)


def test_lane_identity(geometry):
    lane = Lane(Approach.EAST, 2, LaneRole.INCOMING, 5, geometry)
    assert lane.lane_id == "B2"
    assert lane.road == "B"
    assert lane.vehicle_count() == 0
    assert lane.peek_head() is None


def test_invalid_index_rejected(geometry):
    with pytest.raises(ValueError):
        Lane(Approach.EAST, 4, LaneRole.INCOMING, 5, geometry)


def test_release_order_matches_enqueue_order(geometry):
    lane = Lane(Approach.NORTH, 1, LaneRole.INCOMING, 10, geometry)
    vehicles = [make_vehicle(i) for i in range(1, 8)]
    released = []
    for v in vehicles[:4]:
        lane.enqueue(v)
    released.append(lane.release_head())
    for v in vehicles[4:]:
        lane.enqueue(v)
    while not lane.is_empty():
        released.append(lane.release_head())
    assert [v.vid for v in released] == [v.vid for v in vehicles]
    assert all(v.state is VehicleState.MOVING for v in released)


def test_enqueue_assigns_rank_and_slot(geometry):
    lane = Lane(Approach.NORTH, 1, LaneRole.INCOMING, 10, geometry)
    vs = [make_vehicle(i) for i in range(3)]
    for v in vs:
        lane.enqueue(v)
    assert [v.queue_position for v in vs] == [0, 1, 2]
    assert vs[0].position == pytest.approx((-1.75, -11.5))
    assert vs[2].position == pytest.approx((-1.75, -23.5))


def test_release_head_creeps_queue_forward(geometry):
    lane = Lane(Approach.NORTH, 1, LaneRole.INCOMING, 10, geometry)
    vs = [make_vehicle(i) for i in range(3)]
    for v in vs:
        lane.enqueue(v)
    head = lane.release_head()
    assert head is vs[0]
    assert head.queue_position is None
    assert [v.queue_position for v in lane.vehicles] == [0, 1]
    assert vs[1].position == pytest.approx(lane.stop_point)


def test_enqueue_beyond_capacity_raises(geometry):
    lane = Lane(Approach.SOUTH, 1, LaneRole.INCOMING, 5, geometry)
    for i in range(5):
        lane.enqueue(make_vehicle(i, Approach.SOUTH))
    assert lane.is_full()
    with pytest.raises(LaneFull):
        lane.enqueue(make_vehicle(99, Approach.SOUTH))
    assert lane.vehicle_count() == 5


def test_release_from_empty_lane_raises(geometry):
    lane = Lane(Approach.WEST, 3, LaneRole.FREE, 5, geometry)
    with pytest.raises(LaneEmpty):
        lane.release_head()


def test_releasing_a_moving_vehicle_is_an_invariant_violation(geometry):
    lane = Lane(Approach.NORTH, 1, LaneRole.INCOMING, 5, geometry)
    v = make_vehicle(1)
    v.release()
    lane.enqueue(v)
    with pytest.raises(InvalidTransition):
        lane.release_head()


def test_priority_congestion_only_for_priority_role(geometry):
    priority = Lane(Approach.NORTH, 2, LaneRole.PRIORITY, 12, geometry)
    normal = Lane(Approach.EAST, 2, LaneRole.INCOMING, 12, geometry)
    for i in range(8):
        priority.enqueue(make_vehicle(i, Approach.NORTH, 2))
        normal.enqueue(make_vehicle(100 + i, Approach.EAST, 2))
    assert priority.is_priority_congested(8)
    assert not priority.is_priority_congested(9)
    assert not normal.is_priority_congested(8)
