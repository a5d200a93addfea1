"""Immutable per-tick views handed to the presentation layer."""

from dataclasses import dataclass
from typing import Optional, Tuple

from .geometry import Approach


@dataclass(frozen=True)
class VehicleView:
    vid: int
    lane_id: str
    role: str
    destination: str
    state: str
    position: Tuple[float, float]
    heading: Tuple[float, float]
    turning: bool
    turn_progress: float
    queue_position: Optional[int] = None

    @classmethod
    def of(cls, v) -> "VehicleView":
        return cls(
            vid=v.vid,
            lane_id=v.lane_id,
            role=v.role.name,
            destination=v.destination.name,
            state=v.state.name,
            position=v.position,
            heading=tuple(v.heading),
            turning=v.turning,
            turn_progress=v.turn_progress,
            queue_position=v.queue_position,
        )


@dataclass(frozen=True)
class LaneView:
    lane_id: str
    road: str
    index: int
    role: str
    capacity: int
    approach: Approach
    stop_point: Tuple[float, float]
    vehicles: Tuple[VehicleView, ...]

    @property
    def count(self) -> int:
        return len(self.vehicles)

    @classmethod
    def of(cls, lane) -> "LaneView":
        return cls(
            lane_id=lane.lane_id,
            road=lane.road,
            index=lane.index,
            role=lane.role.name,
            capacity=lane.capacity,
            approach=lane.approach,
            stop_point=lane.stop_point,
            vehicles=tuple(VehicleView.of(v) for v in lane.vehicles),
        )


@dataclass(frozen=True)
class LightView:
    phase: str
    override_active: bool
    elapsed_ms: float
    phase_remaining_ms: float
    cooldown_ms: float
    permissions: Tuple[Tuple[Approach, bool], ...]

    def may_release(self, approach: Approach) -> bool:
        return dict(self.permissions).get(approach, False)

    @classmethod
    def of(cls, light) -> "LightView":
        return cls(
            phase=light.phase.name,
            override_active=light.override_active,
            elapsed_ms=light.elapsed,
            phase_remaining_ms=light.phase_remaining,
            cooldown_ms=light.cooldown_remaining,
            permissions=tuple(light.permissions().items()),
        )


@dataclass(frozen=True)
class Statistics:
    lane_counts: Tuple[Tuple[str, int], ...]
    queued_total: int
    in_flight: int
    spawned_total: int
    exited_total: int
    phase: str
    priority_mode: bool
    priority_lane: str
    sim_time_ms: float

    def count(self, lane_id: str) -> int:
        return dict(self.lane_counts)[lane_id]

    def format(self) -> str:
        lines = ["Lane Statistics"]
        for lane_id, count in self.lane_counts:
            lines.append(f"Lane {lane_id}: {count} vehicles")
        lines.append(f"Total: {self.queued_total} vehicles queued, {self.in_flight} in intersection")
        lines.append(f"Traffic Light: {self.phase.replace('_', ' ')}")
        if self.priority_mode:
            lines.append(f"PRIORITY MODE ACTIVE ({self.priority_lane}: {self.count(self.priority_lane)} vehicles)")
        return "\n".join(lines)


@dataclass(frozen=True)
class Snapshot:
    lanes: Tuple[LaneView, ...]
    vehicles: Tuple[VehicleView, ...]
    light: LightView
    statistics: Statistics

    def all_vehicles(self) -> Tuple[VehicleView, ...]:
        queued = tuple(v for lane in self.lanes for v in lane.vehicles)
        return queued + self.vehicles
