import s2sphere

from geodynamo.models.models import GeoPoint
from geodynamo.utils.constants import EARTH_RADIUS_METERS


def to_lat_lng(point: GeoPoint) -> s2sphere.LatLng:
    return s2sphere.LatLng.from_degrees(point.latitude, point.longitude)


def earth_distance(p1: s2sphere.LatLng, p2: s2sphere.LatLng) -> float:
    """Great-circle distance in meters on a sphere of radius EARTH_RADIUS_METERS."""
    return p1.get_distance(p2).radians * EARTH_RADIUS_METERS


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def rect_from_corners(
    lat_lo: float, lng_lo: float, lat_hi: float, lng_hi: float
) -> s2sphere.LatLngRect:
    lo = s2sphere.LatLng.from_degrees(
        _clamp(lat_lo, -90.0, 90.0), _clamp(lng_lo, -180.0, 180.0)
    )
    hi = s2sphere.LatLng.from_degrees(
        _clamp(lat_hi, -90.0, 90.0), _clamp(lng_hi, -180.0, 180.0)
    )
    return s2sphere.LatLngRect(lo, hi)


def rect_from_points(min_point: GeoPoint, max_point: GeoPoint) -> s2sphere.LatLngRect:
    return rect_from_corners(
        min(min_point.latitude, max_point.latitude),
        min(min_point.longitude, max_point.longitude),
        max(min_point.latitude, max_point.latitude),
        max(min_point.longitude, max_point.longitude),
    )


def bounding_rect_for_radius(
    center: GeoPoint, radius_in_meter: float
) -> s2sphere.LatLngRect:
    """
    Axis-aligned rectangle enclosing the disk of ``radius_in_meter`` around ``center``.

    The metric length of one degree is measured at the center in each axis,
    using reference points one degree away towards the equator / prime
    meridian. The rectangle over-approximates the disk; callers filter by
    exact distance afterwards.
    """
    center_lat_lng = to_lat_lng(center)

    lat_ref_unit = -1.0 if center.latitude > 0 else 1.0
    lat_ref = s2sphere.LatLng.from_degrees(
        center.latitude + lat_ref_unit, center.longitude
    )
    lng_ref_unit = -1.0 if center.longitude > 0 else 1.0
    lng_ref = s2sphere.LatLng.from_degrees(
        center.latitude, center.longitude + lng_ref_unit
    )

    lat_distance = earth_distance(center_lat_lng, lat_ref)
    lng_distance = earth_distance(center_lat_lng, lng_ref)

    half_lat = radius_in_meter / lat_distance
    # at the poles a degree of longitude has no length
    half_lng = radius_in_meter / lng_distance if lng_distance > 0 else 180.0

    return rect_from_corners(
        center.latitude - half_lat,
        center.longitude - half_lng,
        center.latitude + half_lat,
        center.longitude + half_lng,
    )


def rect_contains(rect: s2sphere.LatLngRect, lat_lng: s2sphere.LatLng) -> bool:
    """Inclusive containment test, boundaries count as inside."""
    lo, hi = rect.lo(), rect.hi()
    lat = lat_lng.lat().radians
    lng = lat_lng.lng().radians
    return (
        lo.lat().radians <= lat <= hi.lat().radians
        and lo.lng().radians <= lng <= hi.lng().radians
    )
