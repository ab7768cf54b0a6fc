"""Radial layout for the Farcaster social graph.

Coordinates live in a 0-100 box. The profile sits at the center, followers
fan out across the upper arc and accounts the profile follows across the
lower arc (screen coordinates, y grows downward).
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from models import (
    FarcasterGraphEdge,
    FarcasterGraphNode,
    FarcasterProfileSnapshot,
    FarcasterUserSnapshot,
    GraphTier,
)

CENTER_X = 50.0
CENTER_Y = 50.0
RING_RADIUS = 32.0
FOLLOWER_ARC = (210.0, 330.0)
FOLLOWING_ARC = (30.0, 150.0)

MIN_INFLUENCE = 0.18
MIN_EDGE_WEIGHT = 0.35
EDGE_WEIGHT_SPAN = 0.65


def influence_score(follower_count: float) -> float:
    """Map a follower count onto [0.18, 1], sublinear and non-decreasing."""
    count = max(follower_count, 0)
    return min(1.0, max(MIN_INFLUENCE, math.log10(count + 1) / 6))


def edge_weight(influence: float) -> float:
    return MIN_EDGE_WEIGHT + influence * EDGE_WEIGHT_SPAN


def distribute_angles(count: int, start: float, end: float) -> list[float]:
    """Evenly spaced angles from ``start`` to ``end``; one node sits mid-arc."""
    if count <= 0:
        return []
    if count == 1:
        return [(start + end) / 2]

    step = (end - start) / (count - 1)
    return [start + step * index for index in range(count)]


def polar_to_cartesian(radius: float, angle_deg: float) -> tuple[float, float]:
    radians = math.radians(angle_deg)
    return CENTER_X + radius * math.cos(radians), CENTER_Y + radius * math.sin(radians)


def node_id(fid: int) -> str:
    return f"fid-{fid}"


def build_graph(
    profile: FarcasterProfileSnapshot,
    followers: Sequence[FarcasterUserSnapshot],
    following: Sequence[FarcasterUserSnapshot],
) -> tuple[list[FarcasterGraphNode], list[FarcasterGraphEdge]]:
    """Place the profile, its followers and its following on the radial layout."""
    core_id = node_id(profile.fid)
    nodes = [
        FarcasterGraphNode(
            id=core_id,
            fid=profile.fid,
            username=profile.username,
            label=profile.display_name,
            tier="core",
            influence=1.0,
            x=CENTER_X,
            y=CENTER_Y,
        )
    ]
    edges: list[FarcasterGraphEdge] = []

    rings: tuple[tuple[GraphTier, Sequence[FarcasterUserSnapshot], tuple[float, float]], ...] = (
        ("follower", followers, FOLLOWER_ARC),
        ("following", following, FOLLOWING_ARC),
    )
    for tier, users, (start, end) in rings:
        angles = distribute_angles(len(users), start, end)
        for user, angle in zip(users, angles):
            x, y = polar_to_cartesian(RING_RADIUS, angle)
            influence = influence_score(user.follower_count)
            target_id = node_id(user.fid)

            nodes.append(
                FarcasterGraphNode(
                    id=target_id,
                    fid=user.fid,
                    username=user.username,
                    label=user.display_name,
                    tier=tier,
                    influence=influence,
                    x=x,
                    y=y,
                )
            )
            edges.append(
                FarcasterGraphEdge(
                    id=f"{core_id}-{target_id}",
                    source_id=core_id,
                    target_id=target_id,
                    weight=edge_weight(influence),
                )
            )

    return nodes, edges
