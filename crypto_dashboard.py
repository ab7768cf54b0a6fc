"""Crypto market dashboard: CoinGecko markets, global stats and BTC history."""

from __future__ import annotations

import logging
from typing import Any

from aggregates import downsample, rank_top, turnover_ratio, weighted_change
from coercion import as_dict, as_list, finite_series, safe_int, safe_number, safe_string
from config import CryptoConfig
from gateway import fetch_concurrently, fetch_json
from models import (
    CryptoDashboardData,
    GlobalSnapshot,
    PricePoint,
    TrackedCoin,
    WhaleIntensity,
    WhaleSentiment,
    WhaleSignal,
    utc_now_iso,
)

LOGGER = logging.getLogger(__name__)

SOURCE_NAME = "CoinGecko"

# Turnover above this fraction of market cap counts as directional whale flow.
DIRECTIONAL_TURNOVER = 0.035
HIGH_TURNOVER = 0.06
HIGH_MOMENTUM_PCT = 4.0

_HEADLINES: dict[WhaleSentiment, str] = {
    "accumulation": "Large wallets are likely accumulating.",
    "distribution": "High-volume selling pressure detected.",
    "rotation": "Flow rotation across majors remains active.",
}


def get_crypto_dashboard_data(config: CryptoConfig | None = None) -> CryptoDashboardData:
    """Fetch the three CoinGecko payloads concurrently and assemble the snapshot."""
    config = config or CryptoConfig()
    coin_ids = ",".join(config.tracked_coin_ids)

    def _get(path: str) -> Any:
        return fetch_json(SOURCE_NAME, config.base_url, path, timeout=config.timeout_seconds)

    payloads = fetch_concurrently({
        "markets": lambda: _get(
            f"/coins/markets?vs_currency=usd&ids={coin_ids}&order=market_cap_desc"
            "&per_page=10&page=1&sparkline=true&price_change_percentage=24h,7d"
        ),
        "global": lambda: _get("/global"),
        "history": lambda: _get(
            f"/coins/bitcoin/market_chart?vs_currency=usd&days={config.history_days}&interval=hourly"
        ),
    })

    return build_crypto_dashboard(
        payloads["markets"], payloads["global"], payloads["history"], config
    )


def build_crypto_dashboard(
    markets_payload: Any,
    global_payload: Any,
    history_payload: Any,
    config: CryptoConfig | None = None,
) -> CryptoDashboardData:
    """Assemble a snapshot from already-fetched raw payloads."""
    config = config or CryptoConfig()

    coins = normalize_coins(markets_payload, config.tracked_coin_ids)
    history = normalize_price_history(history_payload, config.history_points)
    signals = build_whale_signals(coins, config.whale_signal_limit)

    LOGGER.info(
        "Crypto dashboard: raw_markets=%s tracked=%s history_points=%s whale_signals=%s",
        len(as_list(markets_payload)),
        len(coins),
        len(history),
        len(signals),
    )

    return CryptoDashboardData(
        coins=tuple(coins),
        global_market=normalize_global(global_payload),
        weighted_change_24h=weighted_change(coins, lambda c: c.market_cap, lambda c: c.change_24h),
        weighted_change_7d=weighted_change(coins, lambda c: c.market_cap, lambda c: c.change_7d),
        bitcoin_history=tuple(history),
        whale_signals=tuple(signals),
        generated_at=utc_now_iso(),
    )


def normalize_coins(payload: Any, tracked_ids: tuple[str, ...]) -> list[TrackedCoin]:
    """Keep tracked coins only, deduplicated by id, in ``tracked_ids`` order."""
    priority = {coin_id: index for index, coin_id in enumerate(tracked_ids)}

    coins: dict[str, TrackedCoin] = {}
    for item in as_list(payload):
        if not isinstance(item, dict):
            continue
        coin_id = safe_string(item.get("id"))
        if coin_id not in priority or coin_id in coins:
            continue
        coins[coin_id] = _to_tracked_coin(coin_id, item)

    return sorted(coins.values(), key=lambda coin: priority[coin.id])


def _to_tracked_coin(coin_id: str, item: dict[str, Any]) -> TrackedCoin:
    sparkline = as_dict(item.get("sparkline_in_7d")).get("price")
    return TrackedCoin(
        id=coin_id,
        symbol=safe_string(item.get("symbol")).upper(),
        name=safe_string(item.get("name"), coin_id),
        current_price=safe_number(item.get("current_price")),
        market_cap=safe_number(item.get("market_cap")),
        total_volume=safe_number(item.get("total_volume")),
        high_24h=safe_number(item.get("high_24h")),
        low_24h=safe_number(item.get("low_24h")),
        change_24h=safe_number(item.get("price_change_percentage_24h")),
        change_7d=safe_number(item.get("price_change_percentage_7d_in_currency")),
        sparkline_7d=finite_series(sparkline),
        last_updated=safe_string(item.get("last_updated")),
    )


def normalize_global(payload: Any) -> GlobalSnapshot:
    data = as_dict(as_dict(payload).get("data"))
    return GlobalSnapshot(
        active_cryptocurrencies=safe_int(data.get("active_cryptocurrencies")),
        total_market_cap_usd=safe_number(as_dict(data.get("total_market_cap")).get("usd")),
        total_volume_usd=safe_number(as_dict(data.get("total_volume")).get("usd")),
        btc_dominance=safe_number(as_dict(data.get("market_cap_percentage")).get("btc")),
    )


def normalize_price_history(payload: Any, target_points: int) -> list[PricePoint]:
    points: list[PricePoint] = []
    for pair in as_list(as_dict(payload).get("prices")):
        series = finite_series(pair)
        # A pair with a non-finite member loses it and falls under length 2.
        if not isinstance(pair, list) or len(pair) != 2 or len(series) != 2:
            continue
        points.append(PricePoint(timestamp=series[0], price=series[1]))

    return downsample(points, target_points, lambda p: p.timestamp)


def classify_whale_flow(turnover: float, momentum: float) -> tuple[WhaleSentiment, WhaleIntensity]:
    """Return (sentiment, intensity) for a coin's turnover ratio and 24h change."""
    if turnover > DIRECTIONAL_TURNOVER:
        sentiment: WhaleSentiment = "accumulation" if momentum >= 0 else "distribution"
    else:
        sentiment = "rotation"

    if turnover > HIGH_TURNOVER or abs(momentum) > HIGH_MOMENTUM_PCT:
        intensity: WhaleIntensity = "high"
    else:
        intensity = "medium"
    return sentiment, intensity


def build_whale_signals(coins: list[TrackedCoin], limit: int = 3) -> list[WhaleSignal]:
    signals: list[WhaleSignal] = []
    for coin in coins:
        turnover = turnover_ratio(coin.total_volume, coin.market_cap)
        momentum = coin.change_24h
        sentiment, intensity = classify_whale_flow(turnover, momentum)

        signals.append(
            WhaleSignal(
                id=coin.id,
                symbol=coin.symbol,
                sentiment=sentiment,
                intensity=intensity,
                score=turnover * 100 + abs(momentum),
                message=(
                    f"{_HEADLINES[sentiment]} 24h turnover is {turnover * 100:.1f}% of market cap "
                    f"with {momentum:.2f}% price change."
                ),
            )
        )

    return rank_top(signals, lambda s: s.score, limit)
