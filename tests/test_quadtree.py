from __future__ import annotations

import dataclasses
import math

import pytest

from conftest import CAPE_OTWAY
from hollowglobe.config import DEFAULT_CONFIG
from hollowglobe.quadtree import (
    QuadtreeNode,
    count_by_level,
    select_leaf_tiles,
    starting_tiles,
)
from hollowglobe.tile_utils import (
    TileAddress,
    haversine_km,
    is_ancestor,
    latlon_to_tile,
    tile_size_km,
)


def _destination(lat: float, lon: float, bearing_deg: float, distance_km: float) -> tuple[float, float]:
    r = distance_km / 6371.0
    lat1 = math.radians(lat)
    lon1 = math.radians(lon)
    brg = math.radians(bearing_deg)
    lat2 = math.asin(math.sin(lat1) * math.cos(r) + math.cos(lat1) * math.sin(r) * math.cos(brg))
    lon2 = lon1 + math.atan2(
        math.sin(brg) * math.sin(r) * math.cos(lat1),
        math.cos(r) - math.sin(lat1) * math.sin(lat2),
    )
    return math.degrees(lat2), math.degrees(lon2)


@pytest.fixture(scope="module")
def otway_leaves() -> list[QuadtreeNode]:
    return select_leaf_tiles(*CAPE_OTWAY, DEFAULT_CONFIG)


def test_starting_tiles_are_at_min_level_and_near_viewer() -> None:
    lat, lon = CAPE_OTWAY
    seeds = starting_tiles(lat, lon, DEFAULT_CONFIG)
    assert seeds
    assert latlon_to_tile(lat, lon, 6) in [s.address for s in seeds]
    for seed in seeds:
        assert seed.level == DEFAULT_CONFIG.min_level
        c_lat, c_lon = seed.bounds.center
        assert haversine_km(lat, lon, c_lat, c_lon) < 800.0 + tile_size_km(seed.bounds)


def test_scenario_cape_otway_detail_gradient(otway_leaves) -> None:
    counts = count_by_level(otway_leaves)
    assert counts.get(12, 0) > counts.get(6, 0)
    assert min(counts) >= 6
    assert max(counts) == 12

    lat, lon = CAPE_OTWAY
    assert latlon_to_tile(lat, lon, 12) in [n.address for n in otway_leaves]


def test_no_leaf_beyond_area_of_interest(otway_leaves) -> None:
    lat, lon = CAPE_OTWAY
    for node in otway_leaves:
        c_lat, c_lon = node.bounds.center
        assert haversine_km(lat, lon, c_lat, c_lon) <= 800.0 + tile_size_km(node.bounds)


def test_leaves_do_not_overlap(otway_leaves) -> None:
    addresses = [n.address for n in otway_leaves]
    assert len(set(addresses)) == len(addresses)

    leaf_set = set(addresses)
    for address in addresses:
        # walk up the tree: no ancestor may also be a leaf
        x, y = address.x, address.y
        for level in range(address.level - 1, DEFAULT_CONFIG.min_level - 1, -1):
            x, y = x // 2, y // 2
            assert TileAddress(x, y, level) not in leaf_set


def test_leaves_cover_area_near_viewer(otway_leaves) -> None:
    lat, lon = CAPE_OTWAY
    for distance in (0.0, 5.0, 40.0, 150.0, 400.0):
        for bearing in range(0, 360, 30):
            p_lat, p_lon = _destination(lat, lon, bearing, distance)
            deepest = latlon_to_tile(p_lat, p_lon, DEFAULT_CONFIG.max_level)
            covering = [
                n for n in otway_leaves
                if n.address == deepest or is_ancestor(n.address, deepest)
            ]
            assert len(covering) == 1, (distance, bearing)


def test_subdivision_monotonicity() -> None:
    lat, lon = CAPE_OTWAY
    totals = []
    for factor in (0.5, 1.0, 1.5, 2.0):
        config = dataclasses.replace(DEFAULT_CONFIG, max_level=10, subdivision_factor=factor)
        totals.append(len(select_leaf_tiles(lat, lon, config)))
    assert totals == sorted(totals)
    assert totals[-1] > totals[0]


def test_zero_factor_emits_seeds() -> None:
    lat, lon = CAPE_OTWAY
    config = dataclasses.replace(DEFAULT_CONFIG, subdivision_factor=0.0)
    leaves = select_leaf_tiles(lat, lon, config)
    assert [n.address for n in leaves] == [s.address for s in starting_tiles(lat, lon, config)]


def test_equal_levels_never_subdivide() -> None:
    config = dataclasses.replace(DEFAULT_CONFIG, min_level=8, max_level=8, max_radius_km=100.0)
    leaves = select_leaf_tiles(0.0, 0.0, config)
    assert leaves
    assert count_by_level(leaves) == {8: len(leaves)}


def test_output_order_is_depth_first() -> None:
    lat, lon = CAPE_OTWAY
    config = dataclasses.replace(DEFAULT_CONFIG, max_level=8)
    leaves = select_leaf_tiles(lat, lon, config)
    seeds = [s.address for s in starting_tiles(lat, lon, config)]

    # leaves descending from the same seed are contiguous and seeds keep their order
    seed_of = []
    for node in leaves:
        seed_of.append(next(i for i, s in enumerate(seeds) if s == node.address or is_ancestor(s, node.address)))
    assert seed_of == sorted(seed_of)


def test_invalid_viewer_latitude() -> None:
    with pytest.raises(ValueError, match="Web Mercator"):
        select_leaf_tiles(89.0, 0.0, DEFAULT_CONFIG)
