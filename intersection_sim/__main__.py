import argparse
import logging
import random

from .config import SimulationConfig, configure_logging, load_config_from_file
from .manager import TrafficManager


def positive_float(text):
    value = float(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {text}")
    return value


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="intersection_sim", description="Four-way signalized junction simulator")
    parser.add_argument("--config", default="config.json", help="JSON file overriding the default settings")
    parser.add_argument("--seed", type=int, default=None, help="seed for vehicle arrivals")
    parser.add_argument("--headless", action="store_true", help="run without a window and log statistics")
    parser.add_argument("--duration", type=positive_float, default=120.0, help="simulated seconds (headless only)")
    parser.add_argument("--step-ms", type=positive_float, default=16.0, help="fixed tick length in ms (headless only)")
    parser.add_argument("--report-every", type=positive_float, default=10.0, help="seconds between reports (headless only)")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", default="simulation.log")
    return parser.parse_args(argv)


def run_headless(manager: TrafficManager, duration_s: float, step_ms: float, report_every_s: float):
    if step_ms <= 0 or report_every_s <= 0:
        raise ValueError("step_ms and report_every_s must be positive")
    logging.info("Headless run: %.0fs at %.1fms per tick", duration_s, step_ms)
    next_report = report_every_s * 1000.0
    while manager.sim_time_ms < duration_s * 1000.0:
        manager.update(step_ms)
        if manager.sim_time_ms >= next_report:
            logging.info("t=%.1fs\n%s", manager.sim_time_ms / 1000.0, manager.get_statistics())
            next_report += report_every_s * 1000.0
    stats = manager.statistics()
    logging.info("Finished: spawned=%d exited=%d queued=%d in_flight=%d",
                 stats.spawned_total, stats.exited_total, stats.queued_total, stats.in_flight)
    return stats


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    config = load_config_from_file(args.config, SimulationConfig())
    if args.seed is not None:
        config.seed = args.seed
    manager = TrafficManager(config, random.Random(config.seed))

    if args.headless:
        run_headless(manager, args.duration, args.step_ms, args.report_every)
        return 0

    from .viewer import Viewer
    Viewer(config, manager, config_path=args.config).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
