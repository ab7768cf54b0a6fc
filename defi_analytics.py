"""DeFi analytics from DeFiLlama: TVL headline, chains, categories and momentum."""

from __future__ import annotations

import logging
import math
from typing import Any

from aggregates import downsample, rank_top, share, weighted_change
from coercion import as_dict, as_list, optional_string, safe_number, safe_string
from config import DefiConfig
from gateway import fetch_concurrently, fetch_json
from models import (
    DefiAnalyticsData,
    DefiCategorySnapshot,
    DefiChainSnapshot,
    DefiHeadlineStats,
    DefiMomentumSignal,
    DefiProtocolSnapshot,
    DefiTvlPoint,
    MomentumTier,
    NormalizedProtocol,
    utc_now_iso,
)

LOGGER = logging.getLogger(__name__)

SOURCE_NAME = "DeFiLlama"
DEFAULT_CATEGORY = "Other"

# (min 7d change, tier, narrative); first match wins.
_MOMENTUM_TIERS: tuple[tuple[float, MomentumTier, str], ...] = (
    (20.0, "breakout", "Breakout week with strong TVL inflows."),
    (10.0, "expansion", "Solid expansion trend with healthy momentum."),
    (-math.inf, "steady", "Steady accumulation and constructive flow."),
)


def get_defi_analytics_data(config: DefiConfig | None = None) -> DefiAnalyticsData:
    """Fetch protocols, chains and TVL history concurrently and assemble the snapshot."""
    config = config or DefiConfig()

    def _get(path: str) -> Any:
        return fetch_json(SOURCE_NAME, config.base_url, path, timeout=config.timeout_seconds)

    payloads = fetch_concurrently({
        "protocols": lambda: _get("/protocols"),
        "chains": lambda: _get("/v2/chains"),
        "history": lambda: _get("/v2/historicalChainTvl"),
    })

    return build_defi_analytics(
        payloads["protocols"], payloads["chains"], payloads["history"], config
    )


def build_defi_analytics(
    protocols_payload: Any,
    chains_payload: Any,
    history_payload: Any,
    config: DefiConfig | None = None,
) -> DefiAnalyticsData:
    config = config or DefiConfig()

    protocols = normalize_protocols(protocols_payload, config.excluded_categories)
    if not protocols:
        LOGGER.warning("DeFi analytics: no valid protocols in upstream payload")

    total_tvl = sum(p.tvl_usd for p in protocols)
    headline = DefiHeadlineStats(
        total_tvl_usd=total_tvl,
        weighted_change_1d=weighted_change(protocols, lambda p: p.tvl_usd, lambda p: p.change_1d),
        weighted_change_7d=weighted_change(protocols, lambda p: p.tvl_usd, lambda p: p.change_7d),
        active_protocols=len(protocols),
    )

    momentum = build_momentum_signals(
        protocols, config.momentum_min_tvl_usd, config.momentum_signal_limit
    )
    chains = build_top_chains(chains_payload, config.top_chain_limit)

    LOGGER.info(
        "DeFi analytics: raw_protocols=%s valid=%s chains=%s momentum_signals=%s",
        len(as_list(protocols_payload)),
        len(protocols),
        len(chains),
        len(momentum),
    )

    return DefiAnalyticsData(
        headline=headline,
        tvl_history=tuple(build_tvl_history(history_payload, config.history_window, config.history_points)),
        top_chains=tuple(chains),
        categories=tuple(build_category_breakdown(protocols, total_tvl, config.category_limit)),
        protocol_board=tuple(build_protocol_board(protocols, config.protocol_board_limit)),
        momentum_signals=tuple(momentum),
        generated_at=utc_now_iso(),
    )


def normalize_protocols(payload: Any, excluded_categories: frozenset[str]) -> list[NormalizedProtocol]:
    """Coerce protocol entries, drop invalid/excluded ones, order by TVL descending."""
    protocols: list[NormalizedProtocol] = []
    for item in as_list(payload):
        if not isinstance(item, dict):
            continue

        name = safe_string(item.get("name"))
        tvl = safe_number(item.get("tvl"))
        category = safe_string(item.get("category"), DEFAULT_CATEGORY)
        if not name or tvl <= 0 or category in excluded_categories:
            continue

        raw_id = item.get("id")
        protocols.append(
            NormalizedProtocol(
                id=safe_string(str(raw_id) if raw_id is not None else None),
                slug=safe_string(item.get("slug")),
                name=name,
                category=category,
                chains=tuple(c for c in as_list(item.get("chains")) if isinstance(c, str)),
                tvl_usd=tvl,
                change_1d=safe_number(item.get("change_1d")),
                change_7d=safe_number(item.get("change_7d")),
                url=optional_string(item.get("url")),
            )
        )

    protocols.sort(key=lambda p: -p.tvl_usd)
    return protocols


def build_top_chains(payload: Any, limit: int = 8) -> list[DefiChainSnapshot]:
    """Top chains by TVL; dominance is measured against every valid chain."""
    chains: list[tuple[str, str | None, float]] = []
    for item in as_list(payload):
        entry = as_dict(item)
        name = safe_string(entry.get("name"))
        tvl = safe_number(entry.get("tvl"))
        if name and tvl > 0:
            chains.append((name, optional_string(entry.get("tokenSymbol")), tvl))

    total = sum(tvl for _, _, tvl in chains)
    top = rank_top(chains, lambda chain: chain[2], limit)
    return [
        DefiChainSnapshot(name=name, token_symbol=symbol, tvl_usd=tvl, dominance=share(tvl, total))
        for name, symbol, tvl in top
    ]


def build_category_breakdown(
    protocols: list[NormalizedProtocol],
    total_tvl: float,
    limit: int = 6,
) -> list[DefiCategorySnapshot]:
    grouped: dict[str, list[float]] = {}
    for protocol in protocols:
        entry = grouped.setdefault(protocol.category, [0.0, 0])
        entry[0] += protocol.tvl_usd
        entry[1] += 1

    categories = [
        DefiCategorySnapshot(
            name=name,
            tvl_usd=tvl,
            share=share(tvl, total_tvl),
            protocol_count=int(count),
        )
        for name, (tvl, count) in grouped.items()
    ]
    return rank_top(categories, lambda c: c.tvl_usd, limit)


def build_protocol_board(protocols: list[NormalizedProtocol], limit: int = 8) -> list[DefiProtocolSnapshot]:
    return [
        DefiProtocolSnapshot(
            id=p.id,
            name=p.name,
            category=p.category,
            tvl_usd=p.tvl_usd,
            change_1d=p.change_1d,
            change_7d=p.change_7d,
            chain_count=len(p.chains),
            url=p.url,
        )
        for p in protocols[:limit]
    ]


def momentum_tier(change_7d: float) -> tuple[MomentumTier, str]:
    for threshold, tier, narrative in _MOMENTUM_TIERS:
        if change_7d >= threshold:
            return tier, narrative
    return _MOMENTUM_TIERS[-1][1], _MOMENTUM_TIERS[-1][2]


def build_momentum_signals(
    protocols: list[NormalizedProtocol],
    min_tvl_usd: float = 250_000_000,
    limit: int = 3,
) -> list[DefiMomentumSignal]:
    """Score large, growing protocols; log10(TVL) dampens the pure size bias."""
    signals: list[DefiMomentumSignal] = []
    for protocol in protocols:
        if protocol.tvl_usd < min_tvl_usd or protocol.change_7d <= 0:
            continue
        tier, narrative = momentum_tier(protocol.change_7d)
        signals.append(
            DefiMomentumSignal(
                id=protocol.id,
                name=protocol.name,
                tvl_usd=protocol.tvl_usd,
                change_7d=protocol.change_7d,
                score=protocol.change_7d * math.log10(max(protocol.tvl_usd, 1)),
                tier=tier,
                narrative=narrative,
            )
        )

    return rank_top(signals, lambda s: s.score, limit)


def build_tvl_history(payload: Any, window: int = 150, target_points: int = 90) -> list[DefiTvlPoint]:
    points: list[DefiTvlPoint] = []
    for item in as_list(payload):
        entry = as_dict(item)
        timestamp = safe_number(entry.get("date"), math.nan)
        tvl = safe_number(entry.get("tvl"))
        if math.isnan(timestamp) or tvl <= 0:
            continue
        # DeFiLlama reports seconds; the snapshot uses milliseconds.
        points.append(DefiTvlPoint(timestamp=timestamp * 1000, tvl_usd=tvl))

    recent = points[-window:] if window > 0 else []
    return downsample(recent, target_points, lambda p: p.timestamp)
