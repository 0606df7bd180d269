"""
Geospatial projection utilities for converting set coordinates.

Set locations are recorded in the field as UTM easting/northing. Latitude
and longitude are only derived for display and mapping.
"""
from functools import lru_cache
from typing import Tuple

from pyproj import Transformer


def get_utm_zone(longitude: float) -> int:
    """
    Calculate the UTM zone number from longitude.

    Args:
        longitude: Longitude in degrees

    Returns:
        UTM zone number (1-60)
    """
    return int((longitude + 180) / 6) + 1


def get_utm_crs(zone: int, northern: bool = True) -> str:
    """
    Get the WGS84 UTM CRS for a zone.

    Args:
        zone: UTM zone number (1-60)
        northern: Whether the zone is in the northern hemisphere

    Returns:
        EPSG code for the UTM zone
    """
    if not 1 <= zone <= 60:
        raise ValueError(f"UTM zone must be between 1 and 60, got {zone}")
    # Northern hemisphere: EPSG:326XX, Southern hemisphere: EPSG:327XX
    hemisphere = "6" if northern else "7"
    return f"EPSG:32{hemisphere}{zone:02d}"


@lru_cache(maxsize=32)
def _transformer(source: str, target: str) -> Transformer:
    return Transformer.from_crs(source, target, always_xy=True)


def utm_to_latlon(
    easting: float,
    northing: float,
    zone: int,
    northern: bool = True,
) -> Tuple[float, float]:
    """
    Convert a UTM easting/northing to latitude/longitude.

    Args:
        easting: UTM easting in meters
        northing: UTM northing in meters
        zone: UTM zone number
        northern: Whether the zone is in the northern hemisphere

    Returns:
        (latitude, longitude) in degrees
    """
    transformer = _transformer(get_utm_crs(zone, northern), "EPSG:4326")
    lon, lat = transformer.transform(easting, northing)
    return lat, lon


def latlon_to_utm(latitude: float, longitude: float) -> Tuple[float, float, int]:
    """
    Convert latitude/longitude to UTM in the zone containing the point.

    Args:
        latitude: Latitude in degrees
        longitude: Longitude in degrees

    Returns:
        (easting, northing, zone)
    """
    zone = get_utm_zone(longitude)
    transformer = _transformer("EPSG:4326", get_utm_crs(zone, latitude >= 0))
    easting, northing = transformer.transform(longitude, latitude)
    return easting, northing, zone
