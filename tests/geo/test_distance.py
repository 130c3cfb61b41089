"""Tests for the geodesy helpers."""

import random

import pytest

from ridehail.geo import (
    EARTH_RADIUS_M,
    Coordinate,
    bearing_deg,
    destination,
    distance_m,
    haversine_distance_km,
    haversine_distance_m,
    is_valid_coordinate,
    random_point,
)

CARDIFF = Coordinate(51.4816, -3.1791)
LONDON = Coordinate(51.5074, -0.1278)


@pytest.mark.unit
class TestDistance:
    def test_same_point_returns_zero(self) -> None:
        assert distance_m(CARDIFF, CARDIFF) == 0.0

    @pytest.mark.parametrize(
        "point",
        [CARDIFF, Coordinate(0.0, 0.0), Coordinate(-33.8688, 151.2093), Coordinate(89.9, 179.9)],
    )
    def test_identical_points_anywhere(self, point: Coordinate) -> None:
        assert distance_m(point, point) == 0.0

    def test_known_distance_cardiff_to_london(self) -> None:
        """Cardiff to London is roughly 210km as the crow flies."""
        assert 200_000 <= distance_m(CARDIFF, LONDON) <= 215_000

    def test_symmetry(self) -> None:
        assert distance_m(CARDIFF, LONDON) == pytest.approx(distance_m(LONDON, CARDIFF), rel=1e-12)

    def test_km_wrapper(self) -> None:
        meters = haversine_distance_m(*CARDIFF, *LONDON)
        assert haversine_distance_km(*CARDIFF, *LONDON) == pytest.approx(meters / 1000)

    def test_across_equator(self) -> None:
        """2 degrees of latitude is approximately 222km."""
        assert 220_000 <= distance_m(Coordinate(1.0, 10.0), Coordinate(-1.0, 10.0)) <= 225_000


@pytest.mark.unit
class TestBearing:
    def test_due_north(self) -> None:
        north = Coordinate(CARDIFF.latitude + 0.1, CARDIFF.longitude)
        heading = bearing_deg(CARDIFF, north)
        assert heading < 5.0 or heading > 355.0

    def test_due_east(self) -> None:
        east = Coordinate(CARDIFF.latitude, CARDIFF.longitude + 0.1)
        assert bearing_deg(CARDIFF, east) == pytest.approx(90.0, abs=5.0)

    def test_due_south_and_west(self) -> None:
        south = Coordinate(CARDIFF.latitude - 0.1, CARDIFF.longitude)
        west = Coordinate(CARDIFF.latitude, CARDIFF.longitude - 0.1)
        assert bearing_deg(CARDIFF, south) == pytest.approx(180.0, abs=5.0)
        assert bearing_deg(CARDIFF, west) == pytest.approx(270.0, abs=5.0)

    def test_range(self) -> None:
        generator = random.Random(7)
        for _ in range(200):
            target = random_point(CARDIFF, 10_000, generator)
            if target == CARDIFF:
                continue
            assert 0.0 <= bearing_deg(CARDIFF, target) < 360.0


@pytest.mark.unit
class TestDestination:
    @pytest.mark.parametrize("distance", [0.0, 22.5, 1_000.0, 3_000.0, 50_000.0])
    @pytest.mark.parametrize("bearing", [0.0, 45.0, 90.0, 180.0, 271.5])
    def test_projected_distance_matches(self, distance: float, bearing: float) -> None:
        projected = destination(CARDIFF, distance, bearing)
        assert distance_m(CARDIFF, projected) == pytest.approx(distance, abs=1e-3)

    @pytest.mark.parametrize("bearing", [0.0, 33.0, 90.0, 200.0, 359.0])
    def test_round_trip_returns_to_origin(self, bearing: float) -> None:
        # Meridian convergence bends the return leg slightly away from origin
        outbound = destination(CARDIFF, 2_500.0, bearing)
        back = destination(outbound, 2_500.0, bearing + 180.0)
        assert distance_m(back, CARDIFF) < 5.0

    @pytest.mark.parametrize("bearing", [0.0, 90.0, 180.0, 305.0])
    def test_round_trip_single_tick(self, bearing: float) -> None:
        outbound = destination(CARDIFF, 22.5, bearing)
        back = destination(outbound, 22.5, bearing + 180.0)
        assert distance_m(back, CARDIFF) < 0.01

    def test_round_trip_along_meridian_is_exact(self) -> None:
        back = destination(destination(CARDIFF, 2_500.0, 0.0), 2_500.0, 180.0)
        assert back.latitude == pytest.approx(CARDIFF.latitude, abs=1e-9)
        assert back.longitude == pytest.approx(CARDIFF.longitude, abs=1e-9)

    def test_heading_north_increases_latitude(self) -> None:
        projected = destination(CARDIFF, 1_000.0, 0.0)
        assert projected.latitude > CARDIFF.latitude
        assert projected.longitude == pytest.approx(CARDIFF.longitude, abs=1e-9)

    def test_longitude_normalised_across_antimeridian(self) -> None:
        projected = destination(Coordinate(0.0, 179.99), 5_000.0, 90.0)
        assert -180.0 <= projected.longitude < 180.0
        assert projected.longitude < 0

    def test_one_radian_of_arc(self) -> None:
        projected = destination(Coordinate(0.0, 0.0), EARTH_RADIUS_M, 90.0)
        assert projected.longitude == pytest.approx(57.29578, abs=1e-4)


@pytest.mark.unit
class TestRandomPoint:
    def test_always_within_radius(self) -> None:
        generator = random.Random(1234)
        for _ in range(2_000):
            point = random_point(CARDIFF, 3_000.0, generator)
            assert distance_m(CARDIFF, point) <= 3_000.0 + 1e-6

    def test_zero_radius_is_center(self) -> None:
        point = random_point(CARDIFF, 0.0, random.Random(3))
        assert distance_m(CARDIFF, point) == pytest.approx(0.0, abs=1e-6)

    def test_distance_uniform_sampling_bias(self) -> None:
        """Half the samples land within half the radius (area-uniform would give a quarter)."""
        generator = random.Random(99)
        samples = [random_point(CARDIFF, 1_000.0, generator) for _ in range(4_000)]
        inner = sum(1 for point in samples if distance_m(CARDIFF, point) <= 500.0)
        assert 0.45 <= inner / len(samples) <= 0.55

    def test_seeded_generator_is_reproducible(self) -> None:
        first = random_point(CARDIFF, 500.0, random.Random(5))
        second = random_point(CARDIFF, 500.0, random.Random(5))
        assert first == second


@pytest.mark.unit
class TestIsValidCoordinate:
    def test_accepts_cardiff(self) -> None:
        assert is_valid_coordinate(Coordinate(51.4816, -3.1791))

    def test_accepts_boundaries(self) -> None:
        assert is_valid_coordinate(Coordinate(90.0, 180.0))
        assert is_valid_coordinate(Coordinate(-90.0, -180.0))

    @pytest.mark.parametrize(
        "coordinate",
        [Coordinate(91.0, 0.0), Coordinate(0.0, 181.0), Coordinate(-90.5, 0.0), Coordinate(200.0, -3.0)],
    )
    def test_rejects_out_of_range(self, coordinate: Coordinate) -> None:
        assert not is_valid_coordinate(coordinate)

    def test_plain_tuples_accepted(self) -> None:
        assert is_valid_coordinate((10.0, 20.0))


@pytest.mark.unit
def test_public_api():
    import ridehail.geo

    assert sorted(ridehail.geo.__all__) == [
        "Coordinate",
        "EARTH_RADIUS_M",
        "bearing_deg",
        "destination",
        "distance_m",
        "haversine_distance_km",
        "haversine_distance_m",
        "is_valid_coordinate",
        "random_point",
    ]
