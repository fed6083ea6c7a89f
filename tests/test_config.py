"""
Tests for configuration: env-driven settings, INIT flags and heuristics overrides.
"""

from __future__ import annotations

import json

from vision_risk.config.heuristics import HeuristicsConfig, load_heuristics
from vision_risk.config.settings import WorkerConfig, WorkerFlags, get_settings


def test_worker_config_normalizes_and_clamps():
    config = WorkerConfig(api_base=" http://x.test/ ", network=" ETH ", batch_size=0, concurrency=-2, batch_pause_sec=-1)
    assert config.api_base == "http://x.test"
    assert config.network == "eth"
    assert config.batch_size == 1
    assert config.concurrency == 1
    assert config.batch_pause_sec == 0.0


def test_get_settings_from_env(monkeypatch):
    monkeypatch.setenv("VISION_API_BASE", "http://proxy.test/")
    monkeypatch.setenv("VISION_NETWORK", "Base")
    monkeypatch.setenv("VISION_BATCH_SIZE", "10")
    monkeypatch.setenv("VISION_BATCH_PAUSE_MS", "200")
    monkeypatch.setenv("VISION_NEIGHBOR_TTL_SEC", "not-a-number")
    config = get_settings()
    assert config.api_base == "http://proxy.test"
    assert config.network == "base"
    assert config.batch_size == 10
    assert config.batch_pause_sec == 0.2
    assert config.neighbor_ttl_sec == 600.0


def test_flags_accept_camel_and_snake_case():
    flags = WorkerFlags().merged({"streamBatch": False, "neighbor_stats": False})
    assert flags == WorkerFlags(graph_signals=True, stream_batch=False, neighbor_stats=False)
    assert WorkerFlags().merged({}) == WorkerFlags()


def test_heuristics_defaults():
    heur = HeuristicsConfig()
    assert heur.weight_for("sanctioned Counterparty") == 40
    assert heur.weight_for("fan In High") == 9
    assert heur.weight_for("unknown") == 0
    assert heur.canonical_label("OFAC") == "sanctioned Counterparty"
    assert heur.local_baseline_score == 55


def test_load_heuristics_merges_over_defaults(tmp_path):
    path = tmp_path / "heuristics.json"
    path.write_text(
        json.dumps(
            {
                "reason_weights": {"fan In High": 12},
                "reason_aliases": {"Tornado": "known Mixer Proximity"},
                "dormant_age_days": 400,
                "bogus": 1,
            }
        ),
        encoding="utf-8",
    )
    heur = load_heuristics(path)
    assert heur.weight_for("fan In High") == 12
    assert heur.weight_for("sanctioned Counterparty") == 40
    assert heur.canonical_label("Tornado") == "known Mixer Proximity"
    assert heur.canonical_label("OFAC") == "sanctioned Counterparty"
    assert heur.dormant_age_days == 400
    assert heur.sparse_threshold == 5


def test_load_heuristics_missing_or_invalid_file(tmp_path):
    assert load_heuristics(None) == HeuristicsConfig()
    assert load_heuristics(tmp_path / "missing.json") == HeuristicsConfig()
    bad = tmp_path / "bad.json"
    bad.write_text("{oops", encoding="utf-8")
    assert load_heuristics(bad) == HeuristicsConfig()
