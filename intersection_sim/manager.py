import itertools
import logging
import random
from typing import Dict, List, Optional, Tuple

from .config import SimulationConfig
from .geometry import Approach, IntersectionGeometry, dist
from .lane import Lane, LaneRole
from .traffic_light import LightPhase, TrafficLight
from .vehicle import Destination, Vehicle, VehicleState
from .views import LaneView, LightView, Snapshot, Statistics, VehicleView

# -----------------------------------------------------------------------------
#  Traffic manager: owns lanes, vehicles and the light; advances one tick
# -----------------------------------------------------------------------------

class TrafficManager:
    """Fixed-timestep driver for the whole junction.

    ``update`` runs, in this order: light tick, releases, motion, removal,
    spawning, then publishes a fresh :class:`Snapshot`. Presentation code
    should only read the snapshot (or the ``get_*`` helpers that return parts
    of it); references into live lanes or vehicles do not survive a tick.
    """

    def __init__(self, config: Optional[SimulationConfig] = None, rng: Optional[random.Random] = None):
        self.config = config if config is not None else SimulationConfig()
        self.config.validate()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        # reset() rewinds to this state, injected generators included
        self._rng_state = self.rng.getstate()
        self.geometry = IntersectionGeometry.from_config(self.config)

        priority_approach = Approach.from_road(self.config.priority_lane[0])
        self.light = TrafficLight.from_config(self.config, priority_approach)

        self.lanes: List[Lane] = []
        self._lanes_by_id: Dict[str, Lane] = {}
        for approach in Approach:
            for index in (1, 2, 3):
                lane = Lane(approach, index, self._role_for(approach, index), self.config.lane_capacity, self.geometry)
                self.lanes.append(lane)
                self._lanes_by_id[lane.lane_id] = lane
        self.priority_lane = self._lanes_by_id[self.config.priority_lane]

        self._in_flight: List[Vehicle] = []
        self._last_released: Dict[str, Vehicle] = {}
        self._ids = itertools.count(1)

        self.spawned_total = 0
        self.exited_total = 0
        self.sim_time_ms = 0.0
        self._snapshot = self._build_snapshot()

    def _role_for(self, approach: Approach, index: int) -> LaneRole:
        if index == 3:
            return LaneRole.FREE
        if f"{approach.road}{index}" == self.config.priority_lane:
            return LaneRole.PRIORITY
        return LaneRole.INCOMING

    def reset(self):
        logging.info("Resetting traffic manager...")
        for lane in self.lanes:
            lane.clear()
        self._in_flight.clear()
        self._last_released.clear()
        self.light.reset()
        self._ids = itertools.count(1)
        self.rng.setstate(self._rng_state)
        self.spawned_total = 0
        self.exited_total = 0
        self.sim_time_ms = 0.0
        self._snapshot = self._build_snapshot()

    def lane(self, lane_id: str) -> Lane:
        return self._lanes_by_id[lane_id.upper()]

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    # -------------------------------------------------------------------------
    #  Tick
    # -------------------------------------------------------------------------

    def update(self, delta_ms: float):
        if delta_ms <= 0:
            return
        dt = delta_ms / 1000.0
        self.sim_time_ms += delta_ms

        self.light.tick(delta_ms, self._priority_congested())
        self._release_vehicles()
        self._move_vehicles(dt)
        self._remove_exited()
        self._spawn_vehicles(dt)

        self._snapshot = self._build_snapshot()

    def _priority_congested(self) -> bool:
        if self.light.override_active:
            threshold = self.config.priority_release_threshold
        else:
            threshold = self.config.priority_threshold
        return self.priority_lane.is_priority_congested(threshold)

    def _may_release(self, lane: Lane) -> bool:
        if lane.role is LaneRole.FREE:
            return True
        return self.light.may_release(lane.approach)

    def _spacing_clear(self, lane: Lane) -> bool:
        last = self._last_released.get(lane.lane_id)
        if last is None:
            return True
        return dist(last.position, lane.stop_point) >= self.config.release_spacing

    def _release_vehicles(self):
        for lane in self.lanes:
            if lane.is_empty() or not self._may_release(lane) or not self._spacing_clear(lane):
                continue
            v = lane.release_head()
            self._in_flight.append(v)
            self._last_released[lane.lane_id] = v

    def _move_vehicles(self, dt: float):
        for v in self._in_flight:
            if v.turning:
                v.advance_turn(dt, self.config.turn_rate)
                continue

            v.advance(dt)
            if v.state is not VehicleState.MOVING:
                continue
            if v.destination is Destination.STRAIGHT:
                if self.geometry.past_exit(v.position, v.heading):
                    v.mark_exiting()
            elif v.reached_turn_boundary(self.geometry):
                overshoot = v.clamp_to_boundary(self.geometry)
                v.begin_turn(self.geometry)
                if overshoot > 0.0:
                    v.advance_turn(overshoot / v.speed, self.config.turn_rate)

    def _remove_exited(self):
        bounds = self.config.world_half_extent
        remaining = []
        for v in self._in_flight:
            if v.has_exited(bounds):
                self.exited_total += 1
                if self._last_released.get(v.lane_id) is v:
                    del self._last_released[v.lane_id]
                logging.debug("Vehicle %d left via %s lane (%s)", v.vid, v.lane_id, v.destination.name)
            else:
                remaining.append(v)
        self._in_flight = remaining

    def _spawn_vehicles(self, dt: float):
        for lane in self.lanes:
            if lane.is_full():
                continue
            self._spawn_into(lane, min(1.0, self.config.arrival_rate(lane.lane_id) * dt))

    # -------------------------------------------------------------------------
    #  Spawning
    # -------------------------------------------------------------------------

    def _pick_destination(self, lane: Lane) -> Destination:
        if lane.role is LaneRole.FREE:
            return Destination.RIGHT
        weights = self.config.destination_weights[lane.role.name]
        names = sorted(weights)
        return Destination(self.rng.choices(names, weights=[weights[n] for n in names])[0])

    def spawn_vehicle(self, lane: Lane, probability: float = 1.0) -> Optional[Vehicle]:
        """One arrival attempt outside the tick; returns the new vehicle, or
        None when the Bernoulli trial fails or the lane is already at capacity."""
        v = self._spawn_into(lane, probability)
        if v is not None:
            self._snapshot = self._build_snapshot()
        return v

    def _spawn_into(self, lane: Lane, probability: float) -> Optional[Vehicle]:
        if lane.is_full():
            logging.debug("Lane %s full, arrival dropped", lane.lane_id)
            return None
        if self.rng.random() >= probability:
            return None

        v = Vehicle(
            vid=next(self._ids),
            approach=lane.approach,
            lane_index=lane.index,
            role=lane.role,
            destination=self._pick_destination(lane),
            speed=self.config.vehicle_speed,
        )
        lane.enqueue(v)
        self.spawned_total += 1
        logging.debug("Spawned vehicle %d in lane %s heading %s", v.vid, lane.lane_id, v.destination.name)
        return v

    # -------------------------------------------------------------------------
    #  Read-only views
    # -------------------------------------------------------------------------

    def _build_statistics(self) -> Statistics:
        counts: Tuple[Tuple[str, int], ...] = tuple((lane.lane_id, lane.vehicle_count()) for lane in self.lanes)
        return Statistics(
            lane_counts=counts,
            queued_total=sum(c for _, c in counts),
            in_flight=len(self._in_flight),
            spawned_total=self.spawned_total,
            exited_total=self.exited_total,
            phase=self.light.phase.name,
            priority_mode=self.light.phase is LightPhase.PRIORITY_OVERRIDE,
            priority_lane=self.priority_lane.lane_id,
            sim_time_ms=self.sim_time_ms,
        )

    def _build_snapshot(self) -> Snapshot:
        return Snapshot(
            lanes=tuple(LaneView.of(lane) for lane in self.lanes),
            vehicles=tuple(VehicleView.of(v) for v in self._in_flight),
            light=LightView.of(self.light),
            statistics=self._build_statistics(),
        )

    def snapshot(self) -> Snapshot:
        return self._snapshot

    def get_lanes(self) -> Tuple[LaneView, ...]:
        return self._snapshot.lanes

    def get_traffic_light(self) -> LightView:
        return self._snapshot.light

    def get_vehicles(self) -> Tuple[VehicleView, ...]:
        return self._snapshot.vehicles

    def statistics(self) -> Statistics:
        return self._snapshot.statistics

    def get_statistics(self) -> str:
        return self._snapshot.statistics.format()
