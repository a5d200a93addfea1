import logging
from enum import Enum
from typing import List, Optional, Tuple

from .errors import LaneEmpty, LaneFull
from .geometry import Approach, IntersectionGeometry, Vec
from .vehicle import Vehicle


class LaneRole(Enum):
    INCOMING = 'INCOMING'
    PRIORITY = 'PRIORITY'
    FREE = 'FREE'


# -----------------------------------------------------------------------------
#  Lane: FIFO queue for one approach lane
# -----------------------------------------------------------------------------

class Lane:
    def __init__(self, approach: Approach, index: int, role: LaneRole, capacity: int,
                 geometry: IntersectionGeometry):
        if index not in (1, 2, 3):
            raise ValueError(f"lane index must be 1..3, got {index!r}")
        self.approach = approach
        self.index = index
        self.role = role
        self.capacity = int(capacity)
        self.geometry = geometry
        self._queue: List[Vehicle] = []

    def __repr__(self):
        return f'Lane({self.lane_id}, {self.role.name}, {len(self._queue)}/{self.capacity})'

    @property
    def lane_id(self) -> str:
        return f"{self.approach.road}{self.index}"

    @property
    def road(self) -> str:
        return self.approach.road

    @property
    def vehicles(self) -> Tuple[Vehicle, ...]:
        return tuple(self._queue)

    @property
    def stop_point(self) -> Vec:
        return self.geometry.stop_point(self.approach, self.index)

    def vehicle_count(self) -> int:
        return len(self._queue)

    def is_full(self) -> bool:
        return len(self._queue) >= self.capacity

    def is_empty(self) -> bool:
        return not self._queue

    def is_priority_congested(self, threshold: int) -> bool:
        return self.role is LaneRole.PRIORITY and len(self._queue) >= threshold

    def enqueue(self, vehicle: Vehicle):
        if self.is_full():
            raise LaneFull(self.lane_id, self.capacity)
        rank = len(self._queue)
        self._queue.append(vehicle)
        vehicle.place_in_queue(rank, self.geometry.queue_slot(self.approach, self.index, rank))

    def peek_head(self) -> Optional[Vehicle]:
        return self._queue[0] if self._queue else None

    def release_head(self) -> Vehicle:
        if not self._queue:
            raise LaneEmpty(self.lane_id)
        head = self._queue.pop(0)
        head.release()
        # everyone behind creeps up one slot
        for rank, v in enumerate(self._queue):
            v.place_in_queue(rank, self.geometry.queue_slot(self.approach, self.index, rank))
        logging.debug("Lane %s released vehicle %d (%d left)", self.lane_id, head.vid, len(self._queue))
        return head

    def clear(self):
        self._queue.clear()
