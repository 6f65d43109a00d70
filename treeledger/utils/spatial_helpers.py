"""
Spatial helper functions for planting site queries.
"""
import logging
import numpy as np
from scipy.spatial import KDTree

logger = logging.getLogger(__name__)


def build_kdtree(coordinates: list[tuple[float, float]]) -> KDTree:
    """
    Build a KD-Tree for efficient spatial queries.

    Args:
        coordinates: List of (x, y) coordinates in meters

    Returns:
        KDTree instance
    """
    return KDTree(np.array(coordinates))


def points_within_radius(
    coordinates: list[tuple[float, float]],
    center: tuple[float, float],
    radius: float,
) -> list[tuple[int, float]]:
    """
    Find points within a radius of a center point.

    Args:
        coordinates: List of (x, y) coordinates in meters
        center: (x, y) query point in meters
        radius: Search radius in meters

    Returns:
        List of (index, distance) pairs sorted by distance, nearest first
    """
    if not coordinates:
        return []

    kdtree = build_kdtree(coordinates)
    indices = sorted(kdtree.query_ball_point(center, r=radius))
    if not indices:
        return []

    distances = np.linalg.norm(np.array(coordinates)[indices] - np.array(center), axis=1)
    order = np.argsort(distances, kind="stable")
    logger.debug(f"Found {len(indices)}/{len(coordinates)} points within {radius:.1f}m")
    return [(int(indices[i]), float(distances[i])) for i in order]
