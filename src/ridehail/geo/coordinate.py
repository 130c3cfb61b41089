from typing import NamedTuple


class Coordinate(NamedTuple):
    """Geographic point in decimal degrees.

    Construction never validates so that malformed rider input can be
    represented and rejected later via ``is_valid_coordinate``.
    """

    latitude: float
    longitude: float

    def __str__(self) -> str:
        return f"({self.latitude:.6f}, {self.longitude:.6f})"


def is_valid_coordinate(coordinate: Coordinate) -> bool:
    """Latitude within [-90, 90] and longitude within [-180, 180]."""
    latitude, longitude = coordinate
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0
