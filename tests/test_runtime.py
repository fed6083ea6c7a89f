"""
Tests for the command-line runtime (vision_risk.agent_worker.runtime).

Without an upstream base URL no network is touched: scores fall back to the
local baseline and neighbor graphs to the stub.
"""

from __future__ import annotations

import json

from vision_risk.agent_worker.runtime import build_parser, main


def _lines(capsys) -> list[dict]:
    out = capsys.readouterr().out
    return [json.loads(line) for line in out.splitlines() if line.strip()]


def test_neighbors_without_upstream_prints_stub_graph_and_stats(capsys):
    code = main(["neighbors", "0xABC", "--api-base", "", "--cap", "4"])
    assert code == 0
    lines = _lines(capsys)
    assert [line["type"] for line in lines] == ["RESULT", "NEIGHBOR_STATS"]
    graph = lines[0]["data"]
    assert graph["nodes"][0]["id"] == "0xabc"
    assert len(graph["nodes"]) == 5
    stats = lines[1]["data"]
    assert stats["branch"] == "stub"
    assert stats["overflow"] == 6


def test_score_without_upstream_uses_baseline(capsys):
    code = main(["score", "0xabc", "--api-base", "", "--network", "polygon"])
    assert code == 0
    (line,) = _lines(capsys)
    assert line["type"] == "RESULT"
    assert line["data"]["risk_score"] == 55
    assert line["data"]["network"] == "polygon"


def test_error_response_sets_exit_code(capsys):
    code = main(["score", "   ", "--api-base", ""])
    assert code == 1
    (line,) = _lines(capsys)
    assert line["type"] == "ERROR"
    assert line["code"] == "invalid_request"


def test_parser_defaults():
    args = build_parser().parse_args(["neighbors", "0xabc"])
    assert (args.hop, args.limit, args.cap) == (1, 250, 120)
    assert args.api_base is None
