import logging
from typing import Tuple

import pygame

from .config import SimulationConfig, load_config_from_file
from .geometry import Approach, angle_deg_from_vec, vec_add, vec_mul, turn_right
from .manager import TrafficManager
from .views import LaneView, LightView, VehicleView

# -----------------------------------------------------------------------------
#  Colours / visual state (derived from core fields, never stored in the core)
# -----------------------------------------------------------------------------

BACKGROUND = (25, 25, 35)
ASPHALT = (40, 40, 45)
JUNCTION = (35, 35, 40)
LANE_MARK = (220, 220, 220)
TEXT = (180, 210, 255)

ROLE_COLOURS = {
    'INCOMING': (100, 150, 255),
    'PRIORITY': (255, 140, 0),
    'FREE': (50, 205, 50),
}

DESTINATION_COLOURS = {
    'STRAIGHT': (70, 130, 230),
    'LEFT': (230, 90, 90),
    'RIGHT': (90, 200, 120),
}

SIGNAL_RED = (200, 40, 40)
SIGNAL_YELLOW = (240, 200, 0)
SIGNAL_GREEN = (40, 200, 60)


class ScreenMapper:
    """Simulation metres -> window pixels, junction centred in the window."""

    def __init__(self, width: int, height: int, pixels_per_metre: float):
        self.width = width
        self.height = height
        self.scale = float(pixels_per_metre)

    def to_screen(self, point: Tuple[float, float]) -> Tuple[int, int]:
        return (int(round(self.width / 2 + point[0] * self.scale)),
                int(round(self.height / 2 + point[1] * self.scale)))

    def length(self, metres: float) -> int:
        return max(1, int(round(metres * self.scale)))


def vehicle_colour(v: VehicleView) -> Tuple[int, int, int]:
    r, g, b = DESTINATION_COLOURS.get(v.destination, (200, 200, 200))
    if v.turning:
        # brighten while the manoeuvre is in progress
        k = 0.4 * v.turn_progress
        return (int(r + (255 - r) * k), int(g + (255 - g) * k), int(b + (255 - b) * k))
    return (r, g, b)


def signal_colour(light: LightView, approach: Approach) -> Tuple[int, int, int]:
    if light.may_release(approach):
        return SIGNAL_GREEN
    if light.phase == 'NS_YELLOW' and approach.axis == 'NS':
        return SIGNAL_YELLOW
    if light.phase == 'EW_YELLOW' and approach.axis == 'EW':
        return SIGNAL_YELLOW
    return SIGNAL_RED


def status_line_colour(line: str) -> Tuple[int, int, int]:
    if line.startswith("PRIORITY") or line == "Traffic Light: PRIORITY OVERRIDE":
        return ROLE_COLOURS['PRIORITY']
    if line.startswith("Traffic Light"):
        return SIGNAL_GREEN if "GREEN" in line else SIGNAL_RED
    return TEXT

# -----------------------------------------------------------------------------
#  Viewer
# -----------------------------------------------------------------------------

class Viewer:
    def __init__(self, config: SimulationConfig, manager: TrafficManager, config_path: str = "config.json"):
        self.config = config
        self.manager = manager
        self.config_path = config_path

        pygame.init()
        self.clock = pygame.time.Clock()
        self.screen = pygame.display.set_mode((self.config.screen_width, self.config.screen_height))
        pygame.display.set_caption("Traffic Junction")

        self.font = pygame.font.Font(None, 24)
        self.small_font = pygame.font.Font(None, 18)
        self.mapper = ScreenMapper(self.config.screen_width, self.config.screen_height, self.config.pixels_per_metre)

        self.running = True
        self.paused = False
        self.show_overlay = self.config.show_debug

    def reload_config(self):
        logging.info("Reloading config from %s...", self.config_path)
        self.config = load_config_from_file(self.config_path, self.config)
        self.manager = TrafficManager(self.config)
        self.mapper = ScreenMapper(self.config.screen_width, self.config.screen_height, self.config.pixels_per_metre)

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
                return

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                    return
                if event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                    logging.info("Paused=%s", self.paused)
                if event.key == pygame.K_r:
                    self.manager.reset()
                if event.key == pygame.K_c:
                    self.reload_config()
                if event.key == pygame.K_d:
                    self.show_overlay = not self.show_overlay

    def _draw_roads(self):
        half = self.manager.geometry.half_size
        extent = self.config.world_half_extent
        road_w = self.mapper.length(2 * half)

        tl = self.mapper.to_screen((-extent, -half))
        pygame.draw.rect(self.screen, ASPHALT, pygame.Rect(tl[0], tl[1], self.mapper.length(2 * extent), road_w))
        tl = self.mapper.to_screen((-half, -extent))
        pygame.draw.rect(self.screen, ASPHALT, pygame.Rect(tl[0], tl[1], road_w, self.mapper.length(2 * extent)))
        tl = self.mapper.to_screen((-half, -half))
        pygame.draw.rect(self.screen, JUNCTION, pygame.Rect(tl[0], tl[1], road_w, road_w))

        # centrelines
        pygame.draw.line(self.screen, (255, 220, 0), self.mapper.to_screen((0, -extent)), self.mapper.to_screen((0, -half)), 2)
        pygame.draw.line(self.screen, (255, 220, 0), self.mapper.to_screen((0, half)), self.mapper.to_screen((0, extent)), 2)
        pygame.draw.line(self.screen, (255, 220, 0), self.mapper.to_screen((-extent, 0)), self.mapper.to_screen((-half, 0)), 2)
        pygame.draw.line(self.screen, (255, 220, 0), self.mapper.to_screen((half, 0)), self.mapper.to_screen((extent, 0)), 2)

    def _draw_lanes(self, lanes: Tuple[LaneView, ...]):
        lane_w = self.manager.geometry.lane_width
        for lane in lanes:
            h = lane.approach.heading
            side = turn_right(h)
            stop = lane.stop_point
            a = vec_add(stop, vec_mul(side, -lane_w / 2))
            b = vec_add(stop, vec_mul(side, lane_w / 2))
            pygame.draw.line(self.screen, ROLE_COLOURS[lane.role], self.mapper.to_screen(a), self.mapper.to_screen(b), 3)

            label_at = vec_add(stop, vec_mul(h, -4.0))
            surf = self.small_font.render(lane.lane_id, True, ROLE_COLOURS[lane.role])
            self.screen.blit(surf, surf.get_rect(center=self.mapper.to_screen(label_at)))

    def _draw_signals(self, light: LightView):
        half = self.manager.geometry.half_size + 6.0
        for approach in Approach:
            h = approach.heading
            pos = vec_add(vec_mul(h, -half), vec_mul(turn_right(h), half))
            pygame.draw.circle(self.screen, signal_colour(light, approach), self.mapper.to_screen(pos), 8)

    def _draw_vehicle(self, v: VehicleView):
        surf = pygame.Surface((self.mapper.length(4.5), self.mapper.length(2.0)), pygame.SRCALPHA)
        surf.fill((*vehicle_colour(v), 255))
        rot = pygame.transform.rotate(surf, angle_deg_from_vec(v.heading[0], v.heading[1]))
        self.screen.blit(rot, rot.get_rect(center=self.mapper.to_screen(v.position)))

    def _draw_statistics(self, fps: float):
        snapshot = self.manager.snapshot()
        y = 10
        for line in snapshot.statistics.format().split("\n"):
            s = self.small_font.render(line, True, status_line_colour(line))
            self.screen.blit(s, (self.config.screen_width - 260, y))
            y += 18

        if self.show_overlay:
            light = snapshot.light
            overlay_lines = [
                f"FPS: {fps:.1f}",
                f"Sim time: {snapshot.statistics.sim_time_ms / 1000.0:.1f}s",
                f"Phase: {light.phase} ({light.phase_remaining_ms / 1000.0:.1f}s left)",
                f"Override cooldown: {light.cooldown_ms / 1000.0:.1f}s",
                f"Spawned: {snapshot.statistics.spawned_total}  Exited: {snapshot.statistics.exited_total}",
                f"Paused: {self.paused}",
                "Keys: SPACE pause | R reset | C reload config | D overlay | ESC quit",
            ]
            y = 10
            for line in overlay_lines:
                s = self.small_font.render(line, True, (0, 0, 0), (255, 255, 255))
                self.screen.blit(s, (10, y))
                y += 20

    def run(self):
        logging.info("Viewer started.")
        try:
            while self.running:
                self._handle_events()

                dt_ms = self.clock.tick(self.config.fps)
                fps = self.clock.get_fps()

                if not self.paused:
                    self.manager.update(dt_ms)

                snapshot = self.manager.snapshot()
                self.screen.fill(BACKGROUND)
                self._draw_roads()
                self._draw_lanes(snapshot.lanes)
                self._draw_signals(snapshot.light)
                for v in snapshot.all_vehicles():
                    self._draw_vehicle(v)
                self._draw_statistics(fps)
                pygame.display.update()
        finally:
            pygame.quit()
            stats = self.manager.statistics()
            logging.info("Vehicles spawned: %d | exited: %d | still queued: %d",
                         stats.spawned_total, stats.exited_total, stats.queued_total)
            logging.info("Total time: %d", int(stats.sim_time_ms / 1000.0))
