"""Telemetry instrumentation unit tests."""

from __future__ import annotations

import logging
import random
from unittest.mock import MagicMock

import pytest
from seabattle import controller as controller_module
from seabattle.config import GameConfig
from seabattle.controller import GameController
from seabattle.engine import placement as placement_module
from seabattle.engine.shapes import ROT_0, ShipKind
from seabattle.engine.turns import TurnEngine
from seabattle.telemetry import config as telemetry_config_module
from seabattle.telemetry import logger as logger_module
from seabattle.telemetry import metrics as metrics_module
from seabattle.telemetry import tracer as tracer_module
from seabattle.telemetry.config import TelemetryConfig
from seabattle.ui.view import BoardId


class DummySpan:
    def __init__(self, names: list[str], span_name: str) -> None:
        self._names = names
        self._names.append(span_name)
        self.attributes: dict[str, object] = {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def set_attribute(self, key, value):
        self.attributes[key] = value


class DummyTracer:
    def __init__(self) -> None:
        self.span_names: list[str] = []

    def start_as_current_span(self, name: str):
        return DummySpan(self.span_names, name)


def reset_singletons() -> None:
    tracer_module._TRACERS.clear()
    tracer_module._TRACER_PROVIDER = None
    metrics_module._METERS = {}
    metrics_module._METER_PROVIDER = None
    metrics_module._COUNTERS = {}
    metrics_module._HISTOGRAMS = {}


def test_tracers_and_meters_are_cached_per_name() -> None:
    reset_singletons()
    assert tracer_module.get_tracer("a") is tracer_module.get_tracer("a")
    assert metrics_module.get_meter("a") is metrics_module.get_meter("a")


def test_init_tracing_and_metrics_use_configured_exporters(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    provider_instance = MagicMock()
    monkeypatch.setattr(tracer_module, "TracerProvider", MagicMock(return_value=provider_instance))
    monkeypatch.setattr(tracer_module, "OTLPSpanExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(tracer_module, "BatchSpanProcessor", MagicMock())
    monkeypatch.setattr(tracer_module.trace, "set_tracer_provider", MagicMock())
    result = tracer_module.init_tracing(
        TelemetryConfig(enable_tracing=True, otlp_traces_endpoint="http://example")
    )
    assert result is provider_instance
    assert tracer_module._TRACER_PROVIDER is provider_instance
    provider_instance.add_span_processor.assert_called_once()

    meter_provider = MagicMock()
    monkeypatch.setattr(metrics_module, "MeterProvider", MagicMock(return_value=meter_provider))
    monkeypatch.setattr(metrics_module, "OTLPMetricExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(metrics_module, "PeriodicExportingMetricReader", MagicMock())
    monkeypatch.setattr(metrics_module.otel_metrics, "set_meter_provider", MagicMock())
    assert (
        metrics_module.init_metrics(
            TelemetryConfig(enable_metrics=True, otlp_metrics_endpoint="http://example")
        )
        is meter_provider
    )
    assert metrics_module._METER_PROVIDER is meter_provider
    reset_singletons()


def test_record_and_observe_create_instruments_once(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    meter = MagicMock()
    monkeypatch.setattr(metrics_module, "get_meter", lambda *_: meter)

    metrics_module.record_game_metric("x_total", 1, {"k": "v"})
    metrics_module.record_game_metric("x_total", 2)
    metrics_module.observe_game_metric("x_hist", 3.5)

    meter.create_counter.assert_called_once_with("x_total")
    assert meter.create_counter.return_value.add.call_count == 2
    meter.create_histogram.return_value.record.assert_called_once_with(3.5, attributes={})
    reset_singletons()


def test_configure_logging_installs_one_handler() -> None:
    root = logger_module.configure_logging(logging.INFO)
    again = logger_module.configure_logging(logging.DEBUG)
    assert root is again
    ours = [h for h in root.handlers if getattr(h, "_seabattle", False)]
    assert len(ours) == 1
    assert root.level == logging.DEBUG
    root.setLevel(logging.NOTSET)


def test_init_telemetry_noop(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(tracer_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(metrics_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(logger_module, "init_logging", lambda cfg: calls.append("lo"))

    telemetry_config_module.init_telemetry(TelemetryConfig())
    assert calls == []


def test_init_telemetry_respects_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(tracer_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(metrics_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(logger_module, "init_logging", lambda cfg: calls.append("lo"))

    telemetry_config_module.init_telemetry(TelemetryConfig(enable_tracing=True, enable_logging=True))
    assert calls == ["tr", "lo"]


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "SEABATTLE_ENABLE_TRACING",
        "OTEL_TRACES_ENABLED",
        "SEABATTLE_ENABLE_METRICS",
        "OTEL_METRICS_ENABLED",
        "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT",
        "OTEL_EXPORTER_OTLP_METRICS_ENDPOINT",
        "OTEL_EXPORTER_OTLP_LOGS_ENDPOINT",
        "OTEL_SERVICE_NAMESPACE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317/")
    monkeypatch.setenv("SEABATTLE_ENABLE_LOGGING", "no")
    monkeypatch.setenv("OTEL_SERVICE_NAME", "sea")
    monkeypatch.setenv("OTEL_RESOURCE_ATTRIBUTES", "env=test,broken,team = games")

    config = TelemetryConfig.from_env(service_namespace="arcade")
    assert config.otlp_traces_endpoint == "http://collector:4317/v1/traces"
    assert config.otlp_logs_endpoint == "http://collector:4317/v1/logs"
    assert config.enable_tracing and config.enable_metrics and config.enable_logging
    assert config.service_name == "sea"
    assert config.resource_dict() == {
        "service.name": "sea",
        "service.namespace": "arcade",
        "env": "test",
        "team": "games",
    }


def test_load_telemetry_config_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    telemetry_config_module.load_telemetry_config.cache_clear()
    calls = {"count": 0}

    def fake_from_env(cls, **overrides):
        calls["count"] += 1
        return TelemetryConfig(enable_tracing=True)

    monkeypatch.setattr(TelemetryConfig, "from_env", classmethod(fake_from_env))

    first = telemetry_config_module.load_telemetry_config()
    second = telemetry_config_module.load_telemetry_config()
    assert first is second
    assert calls["count"] == 1
    telemetry_config_module.load_telemetry_config.cache_clear()


def test_populate_emits_span(monkeypatch: pytest.MonkeyPatch) -> None:
    tracer = DummyTracer()
    monkeypatch.setattr(placement_module, "tracer", tracer)

    placement_module.generate_board(random.Random(2), owner="player")
    assert "placement.generate_board" in tracer.span_names
    assert "placement.populate" in tracer.span_names


def test_finished_match_records_metrics(monkeypatch: pytest.MonkeyPatch, view, scheduler, make_board) -> None:
    tracer = DummyTracer()
    counters: list[tuple[str, float, dict | None]] = []
    histograms: list[str] = []
    monkeypatch.setattr(controller_module, "tracer", tracer)
    monkeypatch.setattr(
        controller_module,
        "record_game_metric",
        lambda name, value, attrs=None: counters.append((name, value, attrs)),
    )
    monkeypatch.setattr(
        controller_module,
        "observe_game_metric",
        lambda name, value, attrs=None: histograms.append(name),
    )

    game = GameController(view, scheduler, config=GameConfig(), rng=random.Random(1))
    game.new_match()
    game.engine = TurnEngine(
        make_board((ShipKind.SHIP_1, ROT_0, 0, 0)),
        make_board((ShipKind.SHIP_1, ROT_0, 3, 3)),
        rng=random.Random(1),
    )
    game.start()
    game.on_cell_activated(BoardId.OPPONENT, 33)

    assert "controller.new_match" in tracer.span_names
    assert "controller.match_complete" in tracer.span_names
    names = [name for name, _, _ in counters]
    assert "seabattle_matches_started_total" in names
    assert ("seabattle_matches_finished_total", 1, {"winner": "player"}) in counters
    assert histograms == ["seabattle_match_player_shots"]
