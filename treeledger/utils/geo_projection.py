"""
Geospatial projection utilities for coordinate transformations.

Ledger coordinates are fixed-point micro-degrees; spatial queries work in
planar UTM meters.
"""
from typing import Tuple, List
from pyproj import Transformer

MICRODEGREES_PER_DEGREE = 1_000_000


def microdegrees_to_degrees(value: int) -> float:
    """Convert a fixed-point micro-degree value to degrees."""
    return value / MICRODEGREES_PER_DEGREE


def get_utm_zone(longitude: float) -> int:
    """
    Calculate the UTM zone number from longitude.

    Args:
        longitude: Longitude in degrees

    Returns:
        UTM zone number (1-60)
    """
    return min(int((longitude + 180) / 6) + 1, 60)


def get_utm_crs(longitude: float, latitude: float) -> str:
    """
    Get the appropriate UTM CRS (Coordinate Reference System) for a location.

    Args:
        longitude: Longitude in degrees
        latitude: Latitude in degrees

    Returns:
        EPSG code for the UTM zone
    """
    zone = get_utm_zone(longitude)
    # Northern hemisphere: EPSG:326XX, Southern hemisphere: EPSG:327XX
    hemisphere = "6" if latitude >= 0 else "7"
    return f"EPSG:32{hemisphere}{zone:02d}"


def project_to_meters(
    origin: Tuple[float, float],
    coordinates: List[Tuple[float, float]],
) -> Tuple[Tuple[float, float], List[Tuple[float, float]]]:
    """
    Project lat/lon coordinates into the UTM zone of an origin point.

    Args:
        origin: (latitude, longitude) in degrees choosing the UTM zone
        coordinates: List of (latitude, longitude) tuples in degrees

    Returns:
        Tuple of:
            - origin as (x, y) in meters
            - List of (x, y) coordinates in meters
    """
    lat, lon = origin
    transformer = Transformer.from_crs(
        "EPSG:4326",  # WGS84 (lat/lon)
        get_utm_crs(lon, lat),
        always_xy=True  # Ensure (lon, lat) -> (x, y) order
    )

    origin_xy = transformer.transform(lon, lat)
    projected = [transformer.transform(c_lon, c_lat) for c_lat, c_lon in coordinates]
    return origin_xy, projected
