"""Farcaster social widget from Neynar: profile, casts, graph and keywords."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from coercion import as_dict, as_list, optional_string, safe_int, safe_string, sanitize_text
from config import FarcasterConfig
from gateway import UpstreamFetchError, fetch_concurrently, fetch_json
from graph_layout import build_graph
from keywords import extract_trend_keywords
from models import (
    FarcasterCastSnapshot,
    FarcasterProfileSnapshot,
    FarcasterUserSnapshot,
    FarcasterWidgetData,
    utc_now_iso,
)

LOGGER = logging.getLogger(__name__)

SOURCE_NAME = "Neynar"


def get_farcaster_widget_data(
    username: str | None = None,
    config: FarcasterConfig | None = None,
) -> FarcasterWidgetData:
    """Fetch the profile, then its casts and follow lists concurrently.

    The profile lookup runs first because its fid keys the other requests.
    """
    config = config or FarcasterConfig()
    username = username or config.username

    def _get(path: str) -> Any:
        if not config.api_key:
            raise UpstreamFetchError(SOURCE_NAME, path, None, "NEYNAR_API_KEY is not set")
        return fetch_json(
            SOURCE_NAME,
            config.base_url,
            path,
            headers={"api_key": config.api_key},
            timeout=config.timeout_seconds,
        )

    profile_payload = _get(
        f"/user/by_username?username={quote(username, safe='')}&viewer_fid={config.viewer_fid}"
    )
    fid = safe_int(as_dict(as_dict(profile_payload).get("user")).get("fid"))

    payloads = fetch_concurrently({
        "casts": lambda: _get(
            f"/feed/user/casts?fid={fid}&viewer_fid={config.viewer_fid}&limit={config.cast_sample_limit}"
        ),
        "followers": lambda: _get(f"/followers?fid={fid}&limit={config.follow_sample_limit}"),
        "following": lambda: _get(f"/following?fid={fid}&limit={config.follow_sample_limit}"),
    })

    return build_farcaster_widget(
        profile_payload,
        payloads["casts"],
        payloads["followers"],
        payloads["following"],
        config,
    )


def build_farcaster_widget(
    profile_payload: Any,
    casts_payload: Any,
    followers_payload: Any,
    following_payload: Any,
    config: FarcasterConfig | None = None,
) -> FarcasterWidgetData:
    config = config or FarcasterConfig()

    profile = to_profile_snapshot(as_dict(profile_payload).get("user"), config.default_bio)
    recent_casts = normalize_casts(casts_payload, config.recent_cast_limit)

    followers = [u for u in normalize_follow_users(followers_payload) if u.fid != profile.fid]
    following = [u for u in normalize_follow_users(following_payload) if u.fid != profile.fid]

    top_followers = select_top_by_influence(followers, config.top_user_limit)
    follower_ids = {user.fid for user in top_followers}
    top_following = select_top_by_influence(
        [user for user in following if user.fid not in follower_ids],
        config.top_user_limit,
    )

    ring = config.graph_ring_size
    nodes, edges = build_graph(profile, top_followers[:ring], top_following[:ring])
    keywords = extract_trend_keywords((cast.text for cast in recent_casts), config.keyword_limit)

    LOGGER.info(
        "Farcaster widget: fid=%s casts=%s followers=%s following=%s nodes=%s keywords=%s",
        profile.fid,
        len(recent_casts),
        len(followers),
        len(following),
        len(nodes),
        len(keywords),
    )

    return FarcasterWidgetData(
        profile=profile,
        recent_casts=tuple(recent_casts),
        top_followers=tuple(top_followers),
        top_following=tuple(top_following),
        graph_nodes=tuple(nodes),
        graph_edges=tuple(edges),
        trend_keywords=tuple(keywords),
        generated_at=utc_now_iso(),
    )


def to_user_snapshot(raw: Any) -> FarcasterUserSnapshot:
    user = as_dict(raw)
    username = safe_string(user.get("username"))
    return FarcasterUserSnapshot(
        fid=safe_int(user.get("fid")),
        username=username,
        display_name=safe_string(user.get("display_name"), username),
        follower_count=max(safe_int(user.get("follower_count")), 0),
        following_count=max(safe_int(user.get("following_count")), 0),
    )


def to_profile_snapshot(raw: Any, default_bio: str) -> FarcasterProfileSnapshot:
    user = to_user_snapshot(raw)
    bio = as_dict(as_dict(as_dict(raw).get("profile")).get("bio")).get("text")
    return FarcasterProfileSnapshot(
        fid=user.fid,
        username=user.username,
        display_name=user.display_name,
        follower_count=user.follower_count,
        following_count=user.following_count,
        bio=sanitize_text(bio if isinstance(bio, str) else default_bio),
    )


def to_cast_snapshot(raw: Any) -> FarcasterCastSnapshot:
    cast = as_dict(raw)
    reactions = as_dict(cast.get("reactions"))
    channel = as_dict(cast.get("channel"))
    return FarcasterCastSnapshot(
        hash=safe_string(cast.get("hash")),
        text=sanitize_text(cast.get("text")),
        timestamp=safe_string(cast.get("timestamp")),
        channel=optional_string(channel.get("id")) or optional_string(channel.get("name")),
        likes=safe_int(reactions.get("likes_count")),
        recasts=safe_int(reactions.get("recasts_count")),
        replies=safe_int(as_dict(cast.get("replies")).get("count")),
    )


def normalize_casts(payload: Any, limit: int = 6) -> list[FarcasterCastSnapshot]:
    casts = [to_cast_snapshot(raw) for raw in as_list(as_dict(payload).get("casts"))]
    return [cast for cast in casts if cast.text][:limit]


def normalize_follow_users(payload: Any) -> list[FarcasterUserSnapshot]:
    """Deduplicate a follow list by fid, keeping the first occurrence."""
    users: dict[int, FarcasterUserSnapshot] = {}
    for entry in as_list(as_dict(payload).get("users")):
        snapshot = to_user_snapshot(as_dict(entry).get("user"))
        if snapshot.fid <= 0 or snapshot.fid in users:
            continue
        users[snapshot.fid] = snapshot
    return list(users.values())


def select_top_by_influence(users: list[FarcasterUserSnapshot], limit: int) -> list[FarcasterUserSnapshot]:
    """Rank by follower count, then following count, then input order."""
    indexed = sorted(
        enumerate(users),
        key=lambda pair: (-pair[1].follower_count, -pair[1].following_count, pair[0]),
    )
    return [user for _, user in indexed[: max(limit, 0)]]
