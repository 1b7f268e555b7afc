"""
Test Zone Resolution and Merchant Areas
=======================================

Distance, zone resolution and the ServiceAreaRegistry overlap rules.

Usage:
    pytest test_zone.py
"""

import pytest

from delivery_zone import (
    Coordinate,
    ServiceAreaRegistry,
    ServicePolygon,
    ZoneOverlapError,
    calculate_distance,
    distance_between,
    resolve_zone,
)


def box(min_lat, min_lon, size):
    return ServicePolygon.from_coordinates([
        Coordinate(min_lat, min_lon),
        Coordinate(min_lat + size, min_lon),
        Coordinate(min_lat + size, min_lon + size),
        Coordinate(min_lat, min_lon + size),
    ])


# ============================================================================
# Distance
# ============================================================================

def test_distance_to_self_is_zero():
    karachi = Coordinate(24.8607, 67.0011)
    assert distance_between(karachi, karachi) == 0.0


def test_distance_is_symmetric():
    a = Coordinate(24.8607, 67.0011)
    b = Coordinate(31.5204, 74.3587)

    assert distance_between(a, b) == pytest.approx(distance_between(b, a))


def test_one_degree_of_latitude():
    """One degree along a meridian is ~111.195 km on a 6371 km sphere."""
    assert calculate_distance(0, 0, 1, 0) == pytest.approx(111195, rel=1e-4)


def test_antipodal_distance_is_half_circumference():
    assert calculate_distance(0, 0, 0, 180) == pytest.approx(20015087, rel=1e-6)


# ============================================================================
# Zone resolution
# ============================================================================

def test_no_polygons_is_unconstrained():
    resolution = resolve_zone(Coordinate(5, 5), [])

    assert resolution.in_zone
    assert not resolution.constrained
    assert resolution.matched_index is None


def test_degenerate_polygons_are_ignored():
    sliver = ServicePolygon.from_coordinates([Coordinate(0, 0), Coordinate(1, 1)])

    resolution = resolve_zone(Coordinate(50, 50), [sliver])

    assert resolution.in_zone
    assert not resolution.constrained


def test_first_containing_polygon_wins():
    polygons = [box(20, 20, 5), box(0, 0, 10), box(2, 2, 2)]

    resolution = resolve_zone(Coordinate(3, 3), polygons)

    assert resolution.in_zone
    assert resolution.constrained
    assert resolution.matched_index == 1


def test_outside_every_polygon():
    resolution = resolve_zone(Coordinate(15, 15), [box(0, 0, 10)])

    assert not resolution.in_zone
    assert resolution.constrained


def test_resolver_accepts_coordinate_lists():
    ring = [Coordinate(0, 0), Coordinate(0, 10), Coordinate(10, 10), Coordinate(10, 0)]

    assert resolve_zone(Coordinate(5, 5), [ring]).in_zone


# ============================================================================
# ServiceAreaRegistry
# ============================================================================

@pytest.fixture
def registry():
    registry = ServiceAreaRegistry()
    registry.add_area("shop-1", "central", box(0, 0, 10), label="Central")
    return registry


def test_add_and_list(registry):
    areas = registry.list_areas("shop-1")

    assert len(areas) == 1
    assert areas[0].label == "Central"
    assert len(registry) == 1
    assert registry.list_areas("unknown") == []


def test_overlapping_area_rejected(registry):
    with pytest.raises(ZoneOverlapError):
        registry.add_area("shop-1", "east", box(5, 5, 10))

    assert len(registry) == 1


def test_touching_area_of_same_shop_rejected(registry):
    """Shared edges count as overlap."""
    with pytest.raises(ZoneOverlapError):
        registry.add_area("shop-1", "north", box(10, 0, 10))


def test_neighbouring_shop_may_share_boundary(registry):
    registry.add_area("shop-2", "north", box(10, 0, 10))

    assert len(registry) == 2


def test_disjoint_area_accepted(registry):
    registry.add_area("shop-1", "far", box(30, 30, 5))

    assert len(registry.polygons_for("shop-1")) == 2


def test_degenerate_area_rejected(registry):
    sliver = ServicePolygon.from_coordinates([Coordinate(40, 40), Coordinate(41, 41)])

    with pytest.raises(ValueError):
        registry.add_area("shop-1", "sliver", sliver)


def test_duplicate_area_id_rejected(registry):
    with pytest.raises(ValueError):
        registry.add_area("shop-1", "central", box(30, 30, 5))


def test_update_ignores_area_being_replaced(registry):
    """Growing an area over its own old footprint is allowed."""
    area = registry.update_area("shop-1", "central", box(0, 0, 12))

    assert area.label == "Central"
    assert registry.polygons_for("shop-1")[0].bounds == (0.0, 0.0, 12.0, 12.0)


def test_update_still_checks_other_areas(registry):
    registry.add_area("shop-1", "far", box(30, 30, 5))

    with pytest.raises(ZoneOverlapError):
        registry.update_area("shop-1", "far", box(8, 8, 5))


def test_update_and_remove_missing_area(registry):
    with pytest.raises(KeyError):
        registry.update_area("shop-1", "nope", box(30, 30, 5))
    with pytest.raises(KeyError):
        registry.remove_area("shop-1", "nope")


def test_remove_area(registry):
    registry.remove_area("shop-1", "central")

    assert len(registry) == 0
    assert registry.polygons_for("shop-1") == []


def test_shops_covering(registry):
    registry.add_area("shop-2", "overlapping", box(5, 5, 10))
    registry.add_area("shop-3", "elsewhere", box(50, 50, 1))

    assert sorted(registry.shops_covering(Coordinate(7, 7))) == ["shop-1", "shop-2"]
    assert registry.shops_covering(Coordinate(2, 2)) == ["shop-1"]
    assert registry.shops_covering(Coordinate(-5, -5)) == []
