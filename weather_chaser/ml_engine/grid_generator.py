"""
Grid Generation
===============

Lays a square lattice of sample points over the search area:
- Center mode: lattice spanning +/- radius around a center point
- Shape mode: lattice over the bounding box of a drawn shape, with
  polygon points outside the shape discarded (even-odd ray casting)

Author: Weather Chaser Team
"""

import logging
import math
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from ..data_pipeline.data_models import GeoShape, GridPoint
from ..utils.data_utils import KM_PER_DEGREE_LAT, validate_coordinates
from ..utils.error_handler import InputValidationError


ContainsTest = Callable[[float, float], bool]


def point_in_polygon(lat: float, lon: float, vertices: Sequence[Tuple[float, float]]) -> bool:
    """
    Even-odd ray casting test

    Args:
        lat (float): Point latitude
        lon (float): Point longitude
        vertices: Ordered (lat, lon) vertex ring

    Returns:
        bool: True if the point is inside the polygon
    """
    inside = False
    n = len(vertices)
    j = n - 1

    for i in range(n):
        xi, yi = vertices[i]
        xj, yj = vertices[j]

        if (yi > lon) != (yj > lon):
            crossing = (xj - xi) * (lon - yi) / (yj - yi) + xi
            if lat < crossing:
                inside = not inside
        j = i

    return inside


class GridGenerator:
    """
    Produces the sample coordinates a search queries weather for
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def grid_dimension(grid_size: int) -> int:
        """Side length of the square lattice for a requested point count"""
        if grid_size is None or grid_size <= 0:
            raise InputValidationError(f"Grid size must be positive, got {grid_size}")

        dim = int(round(math.sqrt(grid_size)))
        if dim < 2:
            raise InputValidationError(
                f"Grid size {grid_size} gives a {dim}x{dim} grid; at least 2x2 is required"
            )
        return dim

    def generate_from_center(self, center_lat: float, center_lon: float,
                             radius_km: float, grid_size: int) -> List[GridPoint]:
        """
        Generate a lattice centered on a coordinate

        Args:
            center_lat (float): Center latitude
            center_lon (float): Center longitude
            radius_km (float): Half-width of the lattice in km
            grid_size (int): Requested number of points

        Returns:
            List[GridPoint]: dim x dim points, latitude-major
        """
        if not validate_coordinates(center_lat, center_lon):
            raise InputValidationError(f"Invalid center coordinates: {center_lat}, {center_lon}")
        if radius_km is None or radius_km <= 0:
            raise InputValidationError(f"Radius must be positive, got {radius_km}")

        dim = self.grid_dimension(grid_size)

        # Rough km -> degree conversion
        lat_degrees = radius_km / KM_PER_DEGREE_LAT
        lon_degrees = radius_km / (KM_PER_DEGREE_LAT * math.cos(math.radians(center_lat)))

        lats = np.linspace(center_lat - lat_degrees, center_lat + lat_degrees, dim)
        lons = np.linspace(center_lon - lon_degrees, center_lon + lon_degrees, dim)

        points = self._lattice(lats, lons)

        self.logger.info(
            f"Generated {len(points)} grid points around ({center_lat:.4f}, {center_lon:.4f}) "
            f"with radius {radius_km}km"
        )
        return points

    def generate_from_shape(self, shape: Optional[GeoShape], grid_size: int,
                            contains_test: Optional[ContainsTest] = None) -> List[GridPoint]:
        """
        Generate a lattice over a drawn shape

        Args:
            shape (GeoShape): Drawn rectangle or polygon
            grid_size (int): Requested number of lattice points before filtering
            contains_test (Callable): Optional (lat, lon) -> bool override of the
                polygon test

        Returns:
            List[GridPoint]: Points inside the shape, re-indexed 0..K-1
        """
        if shape is None or not shape.vertices:
            raise InputValidationError("Please draw an area on the map first")
        if not shape.is_rectangle and len(shape.vertices) < 3:
            raise InputValidationError("A polygon needs at least 3 vertices")

        dim = self.grid_dimension(grid_size)
        south, north, west, east = shape.bounds()

        lats = np.linspace(south, north, dim)
        lons = np.linspace(west, east, dim)

        if shape.is_rectangle:
            keep = None
        elif contains_test is not None:
            keep = contains_test
        else:
            keep = lambda lat, lon: point_in_polygon(lat, lon, shape.vertices)

        points = self._lattice(lats, lons, keep)

        self.logger.info(
            f"Generated {len(points)} grid points inside {shape.kind} "
            f"({dim * dim - len(points)} discarded)"
        )
        return points

    @staticmethod
    def _lattice(lats: np.ndarray, lons: np.ndarray,
                 keep: Optional[ContainsTest] = None) -> List[GridPoint]:
        points: List[GridPoint] = []
        for lat in lats:
            for lon in lons:
                lat_f, lon_f = float(lat), float(lon)
                if keep is not None and not keep(lat_f, lon_f):
                    continue
                points.append(GridPoint(lat=lat_f, lon=lon_f, index=len(points)))
        return points
