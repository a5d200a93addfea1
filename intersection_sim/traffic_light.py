import logging
from enum import Enum
from typing import Dict

from .geometry import Approach


class LightPhase(Enum):
    NS_GREEN = 'NS_GREEN'
    NS_YELLOW = 'NS_YELLOW'
    EW_GREEN = 'EW_GREEN'
    EW_YELLOW = 'EW_YELLOW'
    ALL_RED = 'ALL_RED'
    PRIORITY_OVERRIDE = 'PRIORITY_OVERRIDE'


# -----------------------------------------------------------------------------
#  Signals: tick-based controller with priority override
# -----------------------------------------------------------------------------

class TrafficLight:
    """Phase state machine for the junction.

    Normal cycle: NS_GREEN -> NS_YELLOW -> ALL_RED -> EW_GREEN -> EW_YELLOW ->
    ALL_RED -> NS_GREEN ...  A phase ends on the tick where its elapsed time
    reaches its dwell (inclusive), and at most one transition happens per tick.

    PRIORITY_OVERRIDE preempts any phase when the caller reports congestion on
    the priority lane and the cooldown has run out. Only the priority
    approach may release during the override. It ends when congestion clears
    or after ``override_max_ms``, always through ALL_RED, after which the
    cycle resumes with the green that would have come next.
    """

    def __init__(
        self,
        green_ms: float = 4000.0,
        yellow_ms: float = 1000.0,
        all_red_ms: float = 500.0,
        override_max_ms: float = 6000.0,
        override_cooldown_ms: float = 5000.0,
        priority_approach: Approach = Approach.NORTH,
    ):
        self.durations: Dict[LightPhase, float] = {
            LightPhase.NS_GREEN: float(green_ms),
            LightPhase.NS_YELLOW: float(yellow_ms),
            LightPhase.EW_GREEN: float(green_ms),
            LightPhase.EW_YELLOW: float(yellow_ms),
            LightPhase.ALL_RED: float(all_red_ms),
            LightPhase.PRIORITY_OVERRIDE: float(override_max_ms),
        }
        self.override_cooldown_ms = float(override_cooldown_ms)
        self.priority_approach = priority_approach
        self.reset()

    @classmethod
    def from_config(cls, config, priority_approach: Approach) -> "TrafficLight":
        return cls(
            green_ms=config.green_ms,
            yellow_ms=config.yellow_ms,
            all_red_ms=config.all_red_ms,
            override_max_ms=config.override_max_ms,
            override_cooldown_ms=config.override_cooldown_ms,
            priority_approach=priority_approach,
        )

    def reset(self):
        self.phase = LightPhase.NS_GREEN
        self.elapsed = 0.0
        self.cooldown_remaining = 0.0
        # green that follows the next ALL_RED
        self._next_green = LightPhase.EW_GREEN

    @property
    def override_active(self) -> bool:
        return self.phase is LightPhase.PRIORITY_OVERRIDE

    @property
    def phase_remaining(self) -> float:
        return max(0.0, self.durations[self.phase] - self.elapsed)

    def tick(self, dt: float, priority_congested: bool = False) -> LightPhase:
        if dt <= 0:
            return self.phase

        self.cooldown_remaining = max(0.0, self.cooldown_remaining - dt)

        if self.override_active:
            self.elapsed += dt
            if not priority_congested or self.elapsed >= self.durations[LightPhase.PRIORITY_OVERRIDE]:
                self._exit_override(timed_out=priority_congested)
            return self.phase

        if priority_congested and self.cooldown_remaining <= 0.0:
            self._enter_override()
            return self.phase

        self.elapsed += dt
        if self.elapsed >= self.durations[self.phase]:
            self._advance()
        return self.phase

    def may_release(self, approach: Approach) -> bool:
        if self.phase is LightPhase.PRIORITY_OVERRIDE:
            return approach is self.priority_approach
        if self.phase is LightPhase.NS_GREEN:
            return approach.axis == 'NS'
        if self.phase is LightPhase.EW_GREEN:
            return approach.axis == 'EW'
        return False

    def permissions(self) -> Dict[Approach, bool]:
        return {a: self.may_release(a) for a in Approach}

    def _set_phase(self, phase: LightPhase):
        logging.debug("Traffic light %s -> %s", self.phase.name, phase.name)
        self.phase = phase
        self.elapsed = 0.0

    def _advance(self):
        if self.phase is LightPhase.NS_GREEN:
            self._set_phase(LightPhase.NS_YELLOW)
        elif self.phase is LightPhase.NS_YELLOW:
            self._next_green = LightPhase.EW_GREEN
            self._set_phase(LightPhase.ALL_RED)
        elif self.phase is LightPhase.EW_GREEN:
            self._set_phase(LightPhase.EW_YELLOW)
        elif self.phase is LightPhase.EW_YELLOW:
            self._next_green = LightPhase.NS_GREEN
            self._set_phase(LightPhase.ALL_RED)
        elif self.phase is LightPhase.ALL_RED:
            self._set_phase(self._next_green)

    def _enter_override(self):
        if self.phase in (LightPhase.NS_GREEN, LightPhase.NS_YELLOW):
            self._next_green = LightPhase.EW_GREEN
        elif self.phase in (LightPhase.EW_GREEN, LightPhase.EW_YELLOW):
            self._next_green = LightPhase.NS_GREEN
        logging.info("Priority override engaged for approach %s (preempting %s)",
                     self.priority_approach.name, self.phase.name)
        self._set_phase(LightPhase.PRIORITY_OVERRIDE)

    def _exit_override(self, timed_out: bool):
        logging.info("Priority override released (%s), resuming with %s",
                     "max duration reached" if timed_out else "congestion cleared", self._next_green.name)
        self._set_phase(LightPhase.ALL_RED)
        self.cooldown_remaining = self.override_cooldown_ms
