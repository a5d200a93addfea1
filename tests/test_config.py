import json
import logging

import pytest

from intersection_sim.config import SimulationConfig, load_config_from_file
from intersection_sim.manager import TrafficManager


def test_defaults_are_valid():
    config = SimulationConfig().validate()
    assert config.priority_lane == "A2"
    assert config.priority_threshold == 8
    assert config.intersection_half_size == pytest.approx(10.5)
    assert config.destination_weights['FREE'] == {'RIGHT': 1.0}


def test_arrival_rate_lookup():
    config = SimulationConfig(arrival_rate_per_sec=0.1, priority_arrival_rate_per_sec=0.3,
                              lane_arrival_rates={"C1": 0.7})
    assert config.arrival_rate("B1") == 0.1
    assert config.arrival_rate("A2") == 0.3
    assert config.arrival_rate("C1") == 0.7


@pytest.mark.parametrize("overrides", [
    {"green_ms": 0},
    {"lane_capacity": 0},
    {"priority_threshold": 20},
    {"priority_release_threshold": 9},
    {"priority_lane": "A3"},
    {"priority_lane": "E1"},
    {"world_half_extent": 5.0},
    {"override_cooldown_ms": -1},
    {"destination_weights": {"INCOMING": {"BACKWARDS": 1.0}}},
])
def test_validate_rejects_impossible_values(overrides):
    with pytest.raises(ValueError):
        SimulationConfig(**overrides).validate()


def test_missing_file_returns_base(tmp_path):
    base = SimulationConfig()
    assert load_config_from_file(str(tmp_path / "absent.json"), base) is base


def test_file_overrides_merge_over_base(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"green_ms": 6000, "lane_arrival_rates": {"D1": 0.5}}), encoding="utf-8")
    config = load_config_from_file(str(path), SimulationConfig(seed=3))
    assert config.green_ms == 6000
    assert config.seed == 3
    assert config.arrival_rate("D1") == 0.5


@pytest.mark.parametrize("content", [
    "{not json",
    json.dumps({"no_such_setting": 1}),
    json.dumps({"priority_threshold": 99}),
])
def test_bad_file_logs_and_keeps_base(tmp_path, caplog, content):
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    base = SimulationConfig()
    with caplog.at_level(logging.ERROR):
        assert load_config_from_file(str(path), base) is base
    assert "Failed to load config" in caplog.text


def test_partial_destination_weights_keep_default_roles():
    config = SimulationConfig(destination_weights={"PRIORITY": {"LEFT": 1.0}}).validate()
    assert config.destination_weights["PRIORITY"] == {"LEFT": 1.0}
    assert config.destination_weights["INCOMING"]["STRAIGHT"] == pytest.approx(0.60)
    assert config.destination_weights["FREE"] == {"RIGHT": 1.0}


def test_partial_weights_from_file_spawn_into_every_role(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"destination_weights": {"PRIORITY": {"LEFT": 1.0}}}), encoding="utf-8")
    manager = TrafficManager(load_config_from_file(str(path), SimulationConfig()))
    assert manager.spawn_vehicle(manager.lane("B1"), 1.0) is not None
    assert manager.spawn_vehicle(manager.lane("A2"), 1.0).destination.name == "LEFT"


@pytest.mark.parametrize("overrides", [
    {"destination_weights": {"INCOMING": 5}},
    {"destination_weights": {"INCOMING": {"STRAIGHT": -1.0, "LEFT": 2.0}}},
    {"destination_weights": {"INCOMING": {"STRAIGHT": "lots"}}},
    {"destination_weights": {"ONCOMING": {"STRAIGHT": 1.0}}},
    {"lane_arrival_rates": [0.5]},
    {"lane_arrival_rates": {"A1": -0.5}},
])
def test_validate_rejects_malformed_tables(overrides):
    with pytest.raises(ValueError):
        SimulationConfig(**overrides).validate()


@pytest.mark.parametrize("data", [
    {"destination_weights": {"INCOMING": 5}},
    {"destination_weights": [1, 2, 3]},
    {"lane_arrival_rates": "fast"},
])
def test_wrongly_shaped_file_logs_and_keeps_base(tmp_path, caplog, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    base = SimulationConfig()
    with caplog.at_level(logging.ERROR):
        assert load_config_from_file(str(path), base) is base
    assert "Failed to load config" in caplog.text
