import math

import pytest

from graph_layout import (
    build_graph,
    distribute_angles,
    edge_weight,
    influence_score,
    polar_to_cartesian,
)
from models import FarcasterProfileSnapshot, FarcasterUserSnapshot

PROFILE = FarcasterProfileSnapshot(
    fid=100,
    username="shevas",
    display_name="Shevas",
    follower_count=5000,
    following_count=300,
    bio="gm",
)


def _user(fid: int, followers: int = 100) -> FarcasterUserSnapshot:
    return FarcasterUserSnapshot(
        fid=fid,
        username=f"user{fid}",
        display_name=f"User {fid}",
        follower_count=followers,
        following_count=10,
    )


def test_influence_score_bounds() -> None:
    assert influence_score(0) == pytest.approx(0.18)
    assert influence_score(999_999) == pytest.approx(1.0)
    assert influence_score(10**9) == 1.0
    assert influence_score(9_999) == pytest.approx(math.log10(10_000) / 6)


def test_influence_score_is_bounded_and_monotonic() -> None:
    counts = [0, 1, 5, 10, 50, 100, 1_000, 10_000, 100_000, 10**6, 10**7]
    scores = [influence_score(c) for c in counts]

    assert all(0.18 <= s <= 1 for s in scores)
    assert scores == sorted(scores)


def test_edge_weight_has_visible_minimum() -> None:
    assert edge_weight(0.18) == pytest.approx(0.35 + 0.18 * 0.65)
    assert edge_weight(1.0) == pytest.approx(1.0)


def test_distribute_angles() -> None:
    assert distribute_angles(0, 210, 330) == []
    assert distribute_angles(1, 210, 330) == [270]
    assert distribute_angles(5, 210, 330) == pytest.approx([210, 240, 270, 300, 330])
    assert distribute_angles(3, 30, 150) == pytest.approx([30, 90, 150])


def test_polar_to_cartesian() -> None:
    x, y = polar_to_cartesian(32, 90)
    assert x == pytest.approx(50)
    assert y == pytest.approx(82)


def test_build_graph_places_core_and_rings() -> None:
    followers = [_user(i) for i in range(1, 6)]
    following = [_user(i) for i in range(11, 14)]

    nodes, edges = build_graph(PROFILE, followers, following)

    core = nodes[0]
    assert (core.id, core.tier, core.x, core.y, core.influence) == ("fid-100", "core", 50, 50, 1.0)
    assert len(nodes) == 9
    assert len(edges) == 8

    follower_nodes = [n for n in nodes if n.tier == "follower"]
    for node, angle in zip(follower_nodes, [210, 240, 270, 300, 330]):
        assert node.x == pytest.approx(50 + 32 * math.cos(math.radians(angle)))
        assert node.y == pytest.approx(50 + 32 * math.sin(math.radians(angle)))

    following_nodes = [n for n in nodes if n.tier == "following"]
    for node, angle in zip(following_nodes, [30, 90, 150]):
        assert node.x == pytest.approx(50 + 32 * math.cos(math.radians(angle)))
        assert node.y == pytest.approx(50 + 32 * math.sin(math.radians(angle)))

    for node in nodes[1:]:
        assert math.dist((node.x, node.y), (50, 50)) == pytest.approx(32)


def test_build_graph_edges_link_core_to_each_node() -> None:
    nodes, edges = build_graph(PROFILE, [_user(1, followers=0)], [])

    assert nodes[1].y == pytest.approx(50 - 32)
    (edge,) = edges
    assert edge.id == "fid-100-fid-1"
    assert (edge.source_id, edge.target_id) == ("fid-100", "fid-1")
    assert edge.weight == pytest.approx(0.35 + 0.18 * 0.65)


def test_build_graph_with_no_neighbours() -> None:
    nodes, edges = build_graph(PROFILE, [], [])
    assert len(nodes) == 1
    assert edges == []
