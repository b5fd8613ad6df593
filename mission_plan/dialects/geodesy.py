"""Flat-earth dead reckoning helpers.

Offsets are converted with an equirectangular approximation around the
current latitude. Only valid for displacements that are small compared to the
earth radius; accuracy degrades towards the poles, where the cosine of the
latitude is floored to keep the longitude delta finite.
"""
import math
from typing import Tuple

EARTH_RADIUS_M = 6378137.0
MIN_COS_LATITUDE = 1e-6
COORDINATE_TOLERANCE = 1e-9

Coordinate = Tuple[float, float]  # (longitude, latitude)


def normalize_degrees(degrees: float) -> float:
    """Wrap an angle into [0, 360)"""
    wrapped = math.fmod(degrees, 360.0)
    if wrapped < 0:
        wrapped += 360.0
    # fmod of a tiny negative value can round up to exactly 360; also folds -0.0
    if wrapped >= 360.0 or wrapped == 0.0:
        return 0.0
    return wrapped


def rotate_offset(heading_deg: float, forward_m: float, left_m: float) -> Tuple[float, float]:
    """Rotate a robot-frame (forward, left) offset into (north, east) meters"""
    heading = math.radians(heading_deg)
    north = forward_m * math.cos(heading) + left_m * math.sin(heading)
    east = forward_m * math.sin(heading) - left_m * math.cos(heading)
    return north, east


def offset_coordinate(position: Coordinate, north_m: float, east_m: float,
                      earth_radius_m: float = EARTH_RADIUS_M,
                      min_cos_latitude: float = MIN_COS_LATITUDE) -> Coordinate:
    """Shift a (lon, lat) position by north/east meters"""
    lon, lat = position
    cos_lat = max(abs(math.cos(math.radians(lat))), min_cos_latitude)
    d_lat = north_m / earth_radius_m
    d_lon = east_m / (earth_radius_m * cos_lat)
    return lon + math.degrees(d_lon), lat + math.degrees(d_lat)


def move_relative(position: Coordinate, heading_deg: float, forward_m: float, left_m: float,
                  earth_radius_m: float = EARTH_RADIUS_M,
                  min_cos_latitude: float = MIN_COS_LATITUDE) -> Coordinate:
    """Dead-reckon one relative move from the current position and heading"""
    north, east = rotate_offset(heading_deg, forward_m, left_m)
    return offset_coordinate(position, north, east, earth_radius_m, min_cos_latitude)


def almost_equal_coord(a: Coordinate, b: Coordinate, tolerance: float = COORDINATE_TOLERANCE) -> bool:
    return abs(a[0] - b[0]) < tolerance and abs(a[1] - b[1]) < tolerance
