"""Shared typed snapshot models for the three pipelines.

Every record here is a frozen value object. Snapshots are created fresh on
each pipeline call and handed to the presentation layer as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal

WhaleSentiment = Literal["accumulation", "distribution", "rotation"]
WhaleIntensity = Literal["high", "medium"]
MomentumTier = Literal["breakout", "expansion", "steady"]
GraphTier = Literal["core", "follower", "following"]


def utc_now_iso() -> str:
    """Generation stamp in the ISO-8601 form the presentation layer expects."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Crypto dashboard
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TrackedCoin:
    """Normalized market entry for one tracked coin."""

    id: str
    symbol: str
    name: str
    current_price: float
    market_cap: float
    total_volume: float
    high_24h: float
    low_24h: float
    change_24h: float
    change_7d: float
    sparkline_7d: tuple[float, ...]
    last_updated: str


@dataclass(frozen=True, slots=True)
class GlobalSnapshot:
    active_cryptocurrencies: int
    total_market_cap_usd: float
    total_volume_usd: float
    btc_dominance: float


@dataclass(frozen=True, slots=True)
class PricePoint:
    timestamp: float
    price: float


@dataclass(frozen=True, slots=True)
class WhaleSignal:
    id: str
    symbol: str
    sentiment: WhaleSentiment
    intensity: WhaleIntensity
    score: float
    message: str


@dataclass(frozen=True, slots=True)
class CryptoDashboardData:
    coins: tuple[TrackedCoin, ...]
    global_market: GlobalSnapshot
    weighted_change_24h: float
    weighted_change_7d: float
    bitcoin_history: tuple[PricePoint, ...]
    whale_signals: tuple[WhaleSignal, ...]
    generated_at: str


# ---------------------------------------------------------------------------
# DeFi analytics
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NormalizedProtocol:
    """Protocol entry after coercion and exclusion filtering."""

    id: str
    slug: str
    name: str
    category: str
    chains: tuple[str, ...]
    tvl_usd: float
    change_1d: float
    change_7d: float
    url: str | None


@dataclass(frozen=True, slots=True)
class DefiHeadlineStats:
    total_tvl_usd: float
    weighted_change_1d: float
    weighted_change_7d: float
    active_protocols: int


@dataclass(frozen=True, slots=True)
class DefiTvlPoint:
    timestamp: float
    tvl_usd: float


@dataclass(frozen=True, slots=True)
class DefiChainSnapshot:
    name: str
    token_symbol: str | None
    tvl_usd: float
    dominance: float


@dataclass(frozen=True, slots=True)
class DefiCategorySnapshot:
    name: str
    tvl_usd: float
    share: float
    protocol_count: int


@dataclass(frozen=True, slots=True)
class DefiProtocolSnapshot:
    id: str
    name: str
    category: str
    tvl_usd: float
    change_1d: float
    change_7d: float
    chain_count: int
    url: str | None


@dataclass(frozen=True, slots=True)
class DefiMomentumSignal:
    id: str
    name: str
    tvl_usd: float
    change_7d: float
    score: float
    tier: MomentumTier
    narrative: str


@dataclass(frozen=True, slots=True)
class DefiAnalyticsData:
    headline: DefiHeadlineStats
    tvl_history: tuple[DefiTvlPoint, ...]
    top_chains: tuple[DefiChainSnapshot, ...]
    categories: tuple[DefiCategorySnapshot, ...]
    protocol_board: tuple[DefiProtocolSnapshot, ...]
    momentum_signals: tuple[DefiMomentumSignal, ...]
    generated_at: str


# ---------------------------------------------------------------------------
# Farcaster widget
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FarcasterUserSnapshot:
    fid: int
    username: str
    display_name: str
    follower_count: int
    following_count: int


@dataclass(frozen=True, slots=True)
class FarcasterProfileSnapshot:
    fid: int
    username: str
    display_name: str
    follower_count: int
    following_count: int
    bio: str


@dataclass(frozen=True, slots=True)
class FarcasterCastSnapshot:
    hash: str
    text: str
    timestamp: str
    channel: str | None
    likes: int
    recasts: int
    replies: int


@dataclass(frozen=True, slots=True)
class FarcasterGraphNode:
    id: str
    fid: int
    username: str
    label: str
    tier: GraphTier
    influence: float
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class FarcasterGraphEdge:
    id: str
    source_id: str
    target_id: str
    weight: float


@dataclass(frozen=True, slots=True)
class FarcasterTrendKeyword:
    term: str
    mentions: int


@dataclass(frozen=True, slots=True)
class FarcasterWidgetData:
    profile: FarcasterProfileSnapshot
    recent_casts: tuple[FarcasterCastSnapshot, ...]
    top_followers: tuple[FarcasterUserSnapshot, ...]
    top_following: tuple[FarcasterUserSnapshot, ...]
    graph_nodes: tuple[FarcasterGraphNode, ...]
    graph_edges: tuple[FarcasterGraphEdge, ...]
    trend_keywords: tuple[FarcasterTrendKeyword, ...]
    generated_at: str
