"""core/geo.py — Sphere geometry for the globe.

Geographic convention: lat = 0 at the equator, lng = 0 at the prime
meridian, +y is north.  All vectors are ``pygame.math.Vector3``.
"""

from __future__ import annotations
import math
from pygame.math import Vector3

GLOBE_RADIUS = 2.3
ARC_BASE_HEIGHT = 0.25
ARC_HEIGHT_SCALE = 0.3
ARC_SEGMENTS = 64


def lat_lng_to_vector3(lat: float, lng: float, radius: float = GLOBE_RADIUS) -> Vector3:
    phi = math.radians(90.0 - lat)
    theta = math.radians(lng + 180.0)
    return Vector3(
        -radius * math.sin(phi) * math.cos(theta),
        radius * math.cos(phi),
        radius * math.sin(phi) * math.sin(theta),
    )


def vector3_to_lat_lng(v: Vector3) -> tuple[float, float]:
    """Inverse of ``lat_lng_to_vector3`` (radius is discarded)."""
    r = v.length()
    if r == 0:
        return 0.0, 0.0
    lat = 90.0 - math.degrees(math.acos(max(-1.0, min(1.0, v.y / r))))
    lng = math.degrees(math.atan2(v.z, -v.x)) - 180.0
    if lng < -180.0:
        lng += 360.0
    return lat, lng


def great_circle_points(a: tuple[float, float], b: tuple[float, float],
                        radius: float = GLOBE_RADIUS,
                        segments: int = ARC_SEGMENTS) -> list[Vector3]:
    """Points along the arc from ``a`` to ``b`` (each ``(lat, lng)``).

    The arc lifts off the surface by a sine profile peaking mid-route;
    longer routes arch higher.
    """
    start = lat_lng_to_vector3(a[0], a[1], 1.0)
    end = lat_lng_to_vector3(b[0], b[1], 1.0)
    angle = math.radians(start.angle_to(end))
    lift = ARC_BASE_HEIGHT + ARC_HEIGHT_SCALE * (angle / math.pi)

    points: list[Vector3] = []
    for i in range(segments + 1):
        t = i / segments
        p = start.lerp(end, t)
        if p.length_squared() == 0:
            # antipodal midpoint, nudge toward the pole
            p = Vector3(0.0, 1.0, 0.0)
        p.scale_to_length(radius + lift * math.sin(t * math.pi))
        points.append(p)
    return points


def polyline_midpoint(points: list[Vector3], lift_to: float) -> Vector3:
    """Middle sample of *points*, pushed out to radius *lift_to*."""
    if not points:
        return Vector3()
    mid = Vector3(points[len(points) // 2])
    if mid.length_squared() > 0:
        mid.scale_to_length(lift_to)
    return mid
