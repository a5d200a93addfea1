class SimulationError(Exception):
    """Base class for errors raised by the simulation core."""


class LaneFull(SimulationError):
    def __init__(self, lane_id: str, capacity: int):
        super().__init__(f"Lane {lane_id} is full (capacity {capacity})")
        self.lane_id = lane_id
        self.capacity = capacity


class LaneEmpty(SimulationError):
    def __init__(self, lane_id: str):
        super().__init__(f"Lane {lane_id} has no vehicle to release")
        self.lane_id = lane_id


class InvalidTransition(SimulationError):
    pass
