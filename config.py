"""Per-pipeline configuration with environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass

COINGECKO_API_URL = "https://api.coingecko.com/api/v3"
DEFILLAMA_API_URL = "https://api.llama.fi"
NEYNAR_API_URL = "https://api.neynar.com/v2/farcaster"
REQUEST_TIMEOUT_SECONDS = 20


def _timeout_from_env() -> float:
    return float(os.getenv("REQUEST_TIMEOUT_SECONDS", str(REQUEST_TIMEOUT_SECONDS)))


@dataclass(frozen=True, slots=True)
class CryptoConfig:
    base_url: str = COINGECKO_API_URL
    # Priority order: coins are displayed in this order.
    tracked_coin_ids: tuple[str, ...] = ("bitcoin", "ethereum", "solana", "chainlink")
    history_days: int = 7
    history_points: int = 64
    whale_signal_limit: int = 3
    timeout_seconds: float = REQUEST_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> CryptoConfig:
        return cls(
            base_url=os.getenv("COINGECKO_API_URL", COINGECKO_API_URL),
            timeout_seconds=_timeout_from_env(),
        )


@dataclass(frozen=True, slots=True)
class DefiConfig:
    base_url: str = DEFILLAMA_API_URL
    excluded_categories: frozenset[str] = frozenset({"CEX"})
    momentum_min_tvl_usd: float = 250_000_000
    momentum_signal_limit: int = 3
    top_chain_limit: int = 8
    category_limit: int = 6
    protocol_board_limit: int = 8
    history_window: int = 150
    history_points: int = 90
    timeout_seconds: float = REQUEST_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> DefiConfig:
        return cls(
            base_url=os.getenv("DEFILLAMA_API_URL", DEFILLAMA_API_URL),
            timeout_seconds=_timeout_from_env(),
        )


@dataclass(frozen=True, slots=True)
class FarcasterConfig:
    base_url: str = NEYNAR_API_URL
    api_key: str | None = None
    username: str = "shevas"
    viewer_fid: int = 3
    follow_sample_limit: int = 24
    cast_sample_limit: int = 8
    recent_cast_limit: int = 6
    top_user_limit: int = 6
    graph_ring_size: int = 5
    keyword_limit: int = 6
    default_bio: str = "Building AI-native Web3 products."
    timeout_seconds: float = REQUEST_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> FarcasterConfig:
        """Build from env. NEYNAR_API_KEY stays None when unset; the fetch fails then."""
        api_key = (os.getenv("NEYNAR_API_KEY") or "").strip() or None
        return cls(
            base_url=os.getenv("NEYNAR_API_URL", NEYNAR_API_URL),
            api_key=api_key,
            username=(os.getenv("FARCASTER_USERNAME") or "").strip() or "shevas",
            viewer_fid=int(os.getenv("FARCASTER_VIEWER_FID", "3")),
            timeout_seconds=_timeout_from_env(),
        )
