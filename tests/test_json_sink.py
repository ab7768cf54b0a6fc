from __future__ import annotations

import json
from pathlib import Path

import pytest

import json_sink
from crypto_dashboard import build_crypto_dashboard
from models import DefiChainSnapshot, DefiTvlPoint

SAMPLE_MARKETS = [
    {
        "id": "bitcoin",
        "symbol": "btc",
        "name": "Bitcoin",
        "current_price": 65000,
        "market_cap": 1.3e12,
        "total_volume": 3.1e10,
        "high_24h": 66000,
        "low_24h": 64000,
        "price_change_percentage_24h": 1.2,
        "price_change_percentage_7d_in_currency": -0.4,
        "sparkline_in_7d": {"price": [64000, 65000]},
        "last_updated": "2026-10-17T12:00:00.000Z",
    }
]


@pytest.fixture(autouse=True)
def patch_output_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point SNAPSHOT_OUTPUT_DIR at a temp dir for every test."""
    monkeypatch.setattr(json_sink, "SNAPSHOT_OUTPUT_DIR", str(tmp_path / "snapshots"))


def test_snapshot_to_dict_uses_camel_case_keys() -> None:
    assert json_sink.snapshot_to_dict(DefiTvlPoint(timestamp=1.0, tvl_usd=2.0)) == {
        "timestamp": 1.0,
        "tvlUsd": 2.0,
    }
    assert json_sink.snapshot_to_dict(
        DefiChainSnapshot(name="Ethereum", token_symbol=None, tvl_usd=5.0, dominance=50.0)
    ) == {"name": "Ethereum", "tokenSymbol": None, "tvlUsd": 5.0, "dominance": 50.0}


def test_snapshot_to_dict_renders_nested_snapshot() -> None:
    snapshot = build_crypto_dashboard(SAMPLE_MARKETS, {"data": {}}, {"prices": [[1, 2.0]]})
    data = json_sink.snapshot_to_dict(snapshot)

    assert set(data) == {
        "coins",
        "globalMarket",
        "weightedChange24h",
        "weightedChange7d",
        "bitcoinHistory",
        "whaleSignals",
        "generatedAt",
    }
    coin = data["coins"][0]
    assert coin["symbol"] == "BTC"
    assert coin["high24h"] == 66000.0
    assert coin["sparkline7d"] == [64000.0, 65000.0]
    assert data["bitcoinHistory"] == [{"timestamp": 1.0, "price": 2.0}]
    json.dumps(data)


def test_write_snapshot_creates_directory_and_file() -> None:
    snapshot = build_crypto_dashboard(SAMPLE_MARKETS, {"data": {}}, {"prices": []})

    path = json_sink.write_snapshot(snapshot, "crypto")

    assert path == Path(json_sink.SNAPSHOT_OUTPUT_DIR) / "crypto.json"
    with path.open(encoding="utf-8") as fh:
        written = json.load(fh)
    assert written["coins"][0]["id"] == "bitcoin"
    assert written["generatedAt"] == snapshot.generated_at


def test_write_snapshot_honours_explicit_output_dir(tmp_path: Path) -> None:
    snapshot = DefiTvlPoint(timestamp=1.0, tvl_usd=2.0)
    path = json_sink.write_snapshot(snapshot, "point", output_dir=str(tmp_path / "custom"))

    assert path.parent == tmp_path / "custom"
    assert json.loads(path.read_text(encoding="utf-8")) == {"timestamp": 1.0, "tvlUsd": 2.0}
